# tests/conftest.py

import pytest
from datetime import date

from salesboard.sales_dashboard.models import SalesRecord


def make_record(
    id="1",
    account_name="Vintage Interior",
    date="2024-12-15",
    amount=100.0,
    quantity=1,
    account_id="vintageinterior",
    item_id="ITM001",
    listing_id="LST001",
):
    return SalesRecord(
        id=id,
        account_id=account_id,
        item_id=item_id,
        listing_id=listing_id,
        amount=amount,
        quantity=quantity,
        date=date,
        account_name=account_name,
    )


@pytest.fixture
def record_factory():
    """Build SalesRecord objects with sensible defaults"""
    return make_record


@pytest.fixture
def today():
    """Fixed 'today' so windows are deterministic (a Wednesday)"""
    return date(2025, 1, 15)


@pytest.fixture
def two_account_records():
    """Two accounts spread over two weeks and two months"""
    return [
        make_record(id="1", account_name="Vintage Interior", date="2024-11-28", amount=50.0, quantity=1),
        make_record(id="2", account_name="Vintage Interior", date="2024-12-01", amount=100.0, quantity=2),
        make_record(id="3", account_name="Vintage Interior", date="2024-12-03", amount=150.0, quantity=3),
        make_record(id="4", account_name="Vintage Interior", date="2024-12-08", amount=200.0, quantity=4),
        make_record(id="5", account_name="Redro Led", account_id="re6865", date="2024-12-08", amount=80.0, quantity=2),
    ]


@pytest.fixture
def sheet_rows():
    """Spreadsheet rows keyed by header, as values_to_rows produces them"""
    return [
        {'order_id': 'A1', 'account': 'led_sone', 'itemId': 'ITM1', 'sku': 'SKU1',
         'amount': '12.50', 'quantity': '2', 'order_date': '2024-12-01'},
        {'order_id': '', 'account': 're6865', 'itemId': '', 'sku': 'SKU2',
         'amount': 'abc', 'quantity': '3.7', 'order_date': '2024-12-02'},
        {'order_id': 'A3', 'account': 'not_mapped', 'itemId': 'ITM3', 'sku': 'SKU3',
         'amount': '5', 'quantity': '1', 'order_date': '2024-12-03'},
    ]
