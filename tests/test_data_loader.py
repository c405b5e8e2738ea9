# tests/test_data_loader.py

"""
Tests for CSV upload parsing and the dashboard state's load handling.
"""

import pytest

from salesboard.sales_dashboard.constants import (
    SOURCE_SAMPLE,
    SOURCE_SHEETS,
    SOURCE_UPLOAD,
    STATUS_CONNECTED,
    STATUS_DISCONNECTED,
    STATUS_ERROR,
    UNKNOWN_ACCOUNT,
)
from salesboard.sales_dashboard.data_loader import (
    DashboardState,
    load_uploaded_records,
    parse_uploaded_csv,
    sample_sales_records,
)
from salesboard.sales_dashboard.models import UploadParseError


CSV_CONTENT = (
    "id,accountId,itemId,listingId,amount,quantity,date,accountName\n"
    '1,ACC1,VI-100,L1,"25.00",2,2024-12-01,\n'
    ",ACC2,ZZ-1,L2,10,1,2024-12-02,Best Bringer\n"
    "3,ACC3,too,short\n"
    "4,ACC4,XX-9,L4,5,1,2024-12-03\n"
    "5,,XX-10,L5,7,1,2024-12-04\n"
)


class TestParseUploadedCsv:

    def test_header_skipped_and_short_lines_dropped(self):
        rows = parse_uploaded_csv(CSV_CONTENT)
        assert [r['id'] for r in rows] == ['1', 'row-2', '4', '5']

    def test_fields_trimmed_and_unquoted(self):
        rows = parse_uploaded_csv(CSV_CONTENT)
        assert rows[0]['amount'] == '25.00'
        assert rows[0]['itemId'] == 'VI-100'

    def test_seven_fields_is_enough(self):
        rows = parse_uploaded_csv(CSV_CONTENT)
        assert rows[2]['date'] == '2024-12-03'
        assert 'accountName' not in rows[2]

    def test_bytes_with_bom(self):
        rows = parse_uploaded_csv(("\ufeff" + CSV_CONTENT).encode('utf-8'))
        assert len(rows) == 4

    def test_header_only_gives_no_rows(self):
        assert parse_uploaded_csv("id,accountId,itemId\n") == []

    @pytest.mark.parametrize("content", [None, "", "   \n  ", b""])
    def test_blank_content_rejected(self, content):
        with pytest.raises(UploadParseError):
            parse_uploaded_csv(content)

    def test_undecodable_bytes_rejected(self):
        with pytest.raises(UploadParseError):
            parse_uploaded_csv(b"\xff\xfe\xfa")

    def test_load_uploaded_records_resolves_accounts(self):
        records = load_uploaded_records(CSV_CONTENT, prefixes={'VI': 'Vintage Interior'})
        assert [r.account_name for r in records] == [
            'Vintage Interior', 'Best Bringer', 'ACC4', UNKNOWN_ACCOUNT
        ]
        assert records[0].amount == 25.0


class TestDashboardState:

    @pytest.fixture
    def state(self):
        return DashboardState()

    def test_starts_on_sample_data(self, state):
        assert state.source_mode == SOURCE_SAMPLE
        assert state.record_count == len(sample_sales_records())
        assert state.source_label() == "Sample Data Active"
        assert state.connection_status == STATUS_DISCONNECTED

    def test_apply_current_load(self, state, record_factory):
        ticket = state.begin_load(SOURCE_SHEETS)
        assert state.apply_load(ticket, [record_factory()], [record_factory(id="p")])

        assert state.source_mode == SOURCE_SHEETS
        assert state.record_count == 1
        assert len(state.prior_year_records) == 1
        assert state.connection_status == STATUS_CONNECTED
        assert state.source_label() == "Google Sheets (1 records)"

    def test_stale_load_is_discarded(self, state, record_factory):
        sheets_ticket = state.begin_load(SOURCE_SHEETS)
        upload_ticket = state.begin_load(SOURCE_UPLOAD)
        assert state.apply_load(upload_ticket, [record_factory(id="u1"), record_factory(id="u2")])

        # The slower spreadsheet fetch completes afterwards
        assert not state.apply_load(sheets_ticket, [record_factory(id="s1")])
        assert state.source_mode == SOURCE_UPLOAD
        assert [r.id for r in state.records] == ['u1', 'u2']

    def test_switch_to_sample_invalidates_in_flight_load(self, state, record_factory):
        ticket = state.begin_load(SOURCE_SHEETS)
        state.use_sample_data()
        assert not state.apply_load(ticket, [record_factory()])
        assert state.is_using_sample

    def test_failed_load_keeps_records(self, state):
        before = list(state.records)
        ticket = state.begin_load(SOURCE_SHEETS)

        assert state.fail_load(ticket, "Failed to fetch data: Forbidden")
        assert state.records == before
        assert state.source_mode == SOURCE_SAMPLE
        assert state.connection_status == STATUS_ERROR
        assert state.last_error == "Failed to fetch data: Forbidden"

    def test_stale_failure_is_ignored(self, state, record_factory):
        old = state.begin_load(SOURCE_SHEETS)
        new = state.begin_load(SOURCE_UPLOAD)
        state.apply_load(new, [record_factory()])

        assert not state.fail_load(old, "timeout")
        assert state.last_error is None

    def test_use_sample_data_resets(self, state, record_factory):
        ticket = state.begin_load(SOURCE_SHEETS)
        state.apply_load(ticket, [record_factory()])
        state.use_sample_data()

        assert state.is_using_sample
        assert state.connection_status == STATUS_DISCONNECTED
        assert state.prior_year_records == []

    def test_unknown_source_mode(self, state):
        with pytest.raises(ValueError):
            state.begin_load('ftp')
