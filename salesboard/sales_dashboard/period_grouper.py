# salesboard/sales_dashboard/period_grouper.py
"""
Period Grouper

Buckets sales records by account and by period key:
- day:   the literal date string (YYYY-MM-DD)
- week:  the Sunday on or before the date (YYYY-MM-DD)
- month: YYYY-MM

Each call is a full aggregation over the given records; there is no
cache shared between granularities.

VERSION: 1.0.0
"""

import logging
from typing import Dict, Iterable, List, Optional

import pandas as pd

from .constants import GRANULARITIES, UNKNOWN_ACCOUNT
from .models import PeriodBucket, SalesRecord

logger = logging.getLogger(__name__)

GroupedBuckets = Dict[str, Dict[str, PeriodBucket]]

RECORD_COLUMNS = [
    'id', 'account_id', 'item_id', 'listing_id',
    'amount', 'quantity', 'date', 'account_name',
]


def records_to_frame(records: Iterable[SalesRecord]) -> pd.DataFrame:
    """
    Build a DataFrame from records with a parsed `order_date` column.
    Unparsable dates become NaT.
    """
    df = pd.DataFrame([r.to_dict() for r in records], columns=RECORD_COLUMNS)
    df['amount'] = pd.to_numeric(df['amount'], errors='coerce').fillna(0.0).astype(float)
    df['quantity'] = pd.to_numeric(df['quantity'], errors='coerce').fillna(0).astype(int)
    df['order_date'] = pd.to_datetime(df['date'], format='%Y-%m-%d', errors='coerce')
    return df


def period_key_series(df: pd.DataFrame, granularity: str) -> pd.Series:
    """Period key per row. Expects `date` and parsed `order_date` columns."""
    if granularity == 'day':
        return df['date'].astype(str)
    if granularity == 'week':
        # dayofweek is Monday=0; shift so that Sunday=0
        days_since_sunday = (df['order_date'].dt.dayofweek + 1) % 7
        week_start = df['order_date'] - pd.to_timedelta(days_since_sunday, unit='D')
        return week_start.dt.strftime('%Y-%m-%d')
    if granularity == 'month':
        return df['order_date'].dt.strftime('%Y-%m')
    raise ValueError(f"Unknown granularity: {granularity!r}")


def period_key(date_str: str, granularity: str) -> Optional[str]:
    """Period key for a single date string, or None if the date is unparsable."""
    parsed = pd.to_datetime(date_str, format='%Y-%m-%d', errors='coerce')
    if pd.isna(parsed):
        return None
    frame = pd.DataFrame({'date': [date_str], 'order_date': [parsed]})
    return period_key_series(frame, granularity).iloc[0]


def group_by_account_and_period(
    records: Iterable[SalesRecord],
    granularity: str,
    sentinel: str = UNKNOWN_ACCOUNT,
) -> GroupedBuckets:
    """
    Aggregate records into {account_name: {period_key: PeriodBucket}}.

    Records with an unparsable date are skipped. An empty account name is
    coalesced to `sentinel` before bucketing.
    """
    if granularity not in GRANULARITIES:
        raise ValueError(f"Unknown granularity: {granularity!r}")

    df = records_to_frame(records)
    if df.empty:
        return {}

    invalid = df['order_date'].isna()
    if invalid.any():
        logger.debug(f"Skipping {int(invalid.sum())} record(s) with unparsable date")
        df = df[~invalid].copy()
    if df.empty:
        return {}

    df['account_name'] = df['account_name'].fillna('').astype(str)
    df.loc[df['account_name'] == '', 'account_name'] = sentinel
    df['period_key'] = period_key_series(df, granularity)

    agg = df.groupby(['account_name', 'period_key'], sort=True).agg(
        amount=('amount', 'sum'),
        quantity=('quantity', 'sum'),
        count=('id', 'size'),
    ).reset_index()

    grouped: GroupedBuckets = {}
    for row in agg.to_dict('records'):
        grouped.setdefault(row['account_name'], {})[row['period_key']] = PeriodBucket(
            amount=float(row['amount']),
            quantity=int(row['quantity']),
            count=int(row['count']),
        )

    return grouped


def group_all_granularities(
    records: List[SalesRecord],
    sentinel: str = UNKNOWN_ACCOUNT,
) -> Dict[str, GroupedBuckets]:
    """Independent full groupings for day, week and month."""
    return {
        granularity: group_by_account_and_period(records, granularity, sentinel)
        for granularity in GRANULARITIES
    }


def bucket_frame(grouped: GroupedBuckets, account_name: str) -> pd.DataFrame:
    """Buckets of one account as a DataFrame sorted by ascending period key."""
    buckets = grouped.get(account_name, {})
    rows = [
        {'period': key, 'amount': b.amount, 'quantity': b.quantity, 'count': b.count}
        for key, b in buckets.items()
    ]
    df = pd.DataFrame(rows, columns=['period', 'amount', 'quantity', 'count'])
    return df.sort_values('period').reset_index(drop=True)
