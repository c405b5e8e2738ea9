# salesboard/sales_dashboard/account_summary.py
"""
Account Summary Builder

Ranked per-account totals for the custom date range picked in the
sidebar, with a change % against the 30 days before the range start.

VERSION: 1.0.0
"""

import logging
from datetime import date, timedelta
from typing import Iterable, List, Optional, Sequence

import pandas as pd

from .constants import PREVIOUS_WINDOW_DAYS, UNKNOWN_ACCOUNT
from .models import AccountSummary, SalesRecord
from .period_grouper import records_to_frame
from .summary_calculator import percent_change

logger = logging.getLogger(__name__)


def order_accounts(
    account_names: Iterable[str],
    preferred_order: Optional[Sequence[str]] = None,
    sentinel: str = UNKNOWN_ACCOUNT,
) -> List[str]:
    """
    Sort account names for the sidebar.

    With a preferred order: known accounts first in declared priority,
    then the rest alphabetically, sentinel always last. Without one:
    alphabetical, sentinel still last.
    """
    names = list(dict.fromkeys(account_names))
    priority = {name: i for i, name in enumerate(preferred_order or [])}

    def sort_key(name: str):
        if name == sentinel:
            return (2, 0, '')
        if name in priority:
            return (0, priority[name], '')
        return (1, 0, name.lower())

    return sorted(names, key=sort_key)


def build_account_summaries(
    records: Iterable[SalesRecord],
    start: date,
    end: date,
    preferred_order: Optional[Sequence[str]] = None,
    sentinel: str = UNKNOWN_ACCOUNT,
) -> List[AccountSummary]:
    """
    Per-account totals for [start, end] plus change vs [start - 30d, start).

    Every account present in the record set gets a summary, even if it
    has no rows in range (zeros, not an omission).
    """
    df = records_to_frame(records)
    if df.empty:
        return []

    df['account_name'] = df['account_name'].fillna('').astype(str)
    df.loc[df['account_name'] == '', 'account_name'] = sentinel

    start_ts = pd.Timestamp(start)
    end_ts = pd.Timestamp(end)
    previous_start_ts = pd.Timestamp(start - timedelta(days=PREVIOUS_WINDOW_DAYS))

    in_range = df[(df['order_date'] >= start_ts) & (df['order_date'] <= end_ts)]
    previous = df[(df['order_date'] >= previous_start_ts) & (df['order_date'] < start_ts)]

    current_agg = in_range.groupby('account_name').agg(
        total_amount=('amount', 'sum'),
        total_quantity=('quantity', 'sum'),
        item_count=('id', 'size'),
    )
    previous_amount = previous.groupby('account_name')['amount'].sum()
    first_account_id = df.groupby('account_name', sort=False)['account_id'].first()

    summaries = []
    for name in order_accounts(df['account_name'], preferred_order, sentinel):
        if name in current_agg.index:
            row = current_agg.loc[name]
            total_amount = float(row['total_amount'])
            total_quantity = int(row['total_quantity'])
            item_count = int(row['item_count'])
        else:
            total_amount, total_quantity, item_count = 0.0, 0, 0

        summaries.append(AccountSummary(
            account_id=str(first_account_id.get(name, '') or ''),
            account_name=name,
            total_amount=total_amount,
            total_quantity=total_quantity,
            sales_change=percent_change(total_amount, float(previous_amount.get(name, 0.0))),
            item_count=item_count,
        ))

    logger.debug(f"Built {len(summaries)} account summaries for {start} → {end}")
    return summaries


def summaries_to_frame(summaries: List[AccountSummary]) -> pd.DataFrame:
    """Sidebar/overview table."""
    return pd.DataFrame(
        [
            {
                'Account': s.account_name,
                'Account ID': s.account_id,
                'Sales': s.total_amount,
                'Quantity': s.total_quantity,
                'Change %': s.sales_change,
                'Items': s.item_count,
            }
            for s in summaries
        ],
        columns=['Account', 'Account ID', 'Sales', 'Quantity', 'Change %', 'Items'],
    )
