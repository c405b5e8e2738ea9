# salesboard/sales_dashboard/summary_calculator.py
"""
Summary Calculator

Per account and granularity:
- Current window: ends yesterday, length 1 / 7 / 31 days (day / week / month)
- Prior-year window: same window with both endpoints moved back one
  calendar year, matched against the separate prior-year record source
- Latest vs previous period bucket (for the Previous / Current boxes)

Every percentage in the dashboard goes through percent_change(), which
returns 0 when the reference is not positive.

VERSION: 1.0.0
"""

import logging
from datetime import date, timedelta
from typing import Dict, Iterable, Optional, Tuple

import pandas as pd

from .constants import GRANULARITIES, WINDOW_DAYS
from .models import (
    DashboardSummary,
    PeriodBucket,
    PeriodComparison,
    SalesRecord,
    WindowTotals,
    YearOverYearSummary,
)
from .period_grouper import GroupedBuckets, group_by_account_and_period, records_to_frame

logger = logging.getLogger(__name__)


def percent_change(current: float, reference: float) -> float:
    """(current - reference) / reference * 100, or 0 when reference <= 0."""
    if reference > 0:
        return (current - reference) / reference * 100
    return 0.0


# =============================================================================
# DATE WINDOWS
# =============================================================================

def shift_year(d: date, years: int = -1) -> date:
    """Same month/day in another year; Feb 29 falls back to Feb 28."""
    try:
        return d.replace(year=d.year + years)
    except ValueError:
        return d.replace(year=d.year + years, day=28)


def current_window(granularity: str, today: Optional[date] = None) -> Tuple[date, date]:
    """Inclusive (start, end) window ending the day before `today`."""
    if granularity not in WINDOW_DAYS:
        raise ValueError(f"Unknown granularity: {granularity!r}")
    today = today or date.today()
    end = today - timedelta(days=1)
    start = today - timedelta(days=WINDOW_DAYS[granularity])
    return start, end


def prior_year_window(granularity: str, today: Optional[date] = None) -> Tuple[date, date]:
    start, end = current_window(granularity, today)
    return shift_year(start), shift_year(end)


def window_totals(
    df: pd.DataFrame,
    account_name: str,
    start: date,
    end: date,
) -> WindowTotals:
    """Totals of one account's records dated within [start, end]."""
    if df.empty:
        return WindowTotals(start=start, end=end)

    mask = (
        (df['account_name'] == account_name)
        & (df['order_date'] >= pd.Timestamp(start))
        & (df['order_date'] <= pd.Timestamp(end))
    )
    in_window = df[mask]

    return WindowTotals(
        start=start,
        end=end,
        amount=float(in_window['amount'].sum()),
        quantity=int(in_window['quantity'].sum()),
        count=int(len(in_window)),
    )


# =============================================================================
# LATEST VS PREVIOUS PERIOD
# =============================================================================

def compare_latest_periods(buckets: Dict[str, PeriodBucket]) -> PeriodComparison:
    """
    Compare the most recent period key with the one before it.
    Keys sort lexicographically, which is chronological for all key formats.
    """
    keys = sorted(buckets or {}, reverse=True)
    current_key = keys[0] if keys else None
    previous_key = keys[1] if len(keys) > 1 else None

    current = buckets[current_key] if current_key else PeriodBucket()
    previous = buckets[previous_key] if previous_key else PeriodBucket()

    return PeriodComparison(
        current_key=current_key,
        previous_key=previous_key,
        current=current,
        previous=previous,
        sales_change=percent_change(current.amount, previous.amount),
        quantity_change=percent_change(current.quantity, previous.quantity),
    )


# =============================================================================
# CALCULATOR
# =============================================================================

class SummaryCalculator:
    """
    Derive dashboard summaries from the current record set and an
    optional prior-year record set.

    Usage:
        calc = SummaryCalculator(records, prior_year_records)
        summary = calc.summarize('Vintage Interior', 'week')
    """

    def __init__(
        self,
        records: Iterable[SalesRecord],
        prior_year_records: Optional[Iterable[SalesRecord]] = None,
        today: Optional[date] = None,
    ):
        self.records = list(records)
        self.prior_year_records = list(prior_year_records or [])
        self.today = today or date.today()
        self._current_df = records_to_frame(self.records)
        self._prior_df = records_to_frame(self.prior_year_records)

    def year_over_year(self, account_name: str, granularity: str) -> YearOverYearSummary:
        """Current window vs the same window last year (prior-year source only)."""
        start, end = current_window(granularity, self.today)
        prior_start, prior_end = prior_year_window(granularity, self.today)

        current = window_totals(self._current_df, account_name, start, end)
        prior = window_totals(self._prior_df, account_name, prior_start, prior_end)

        return YearOverYearSummary(
            account_name=account_name,
            granularity=granularity,
            current=current,
            prior_year=prior,
            amount_change=percent_change(current.amount, prior.amount),
            quantity_change=percent_change(current.quantity, prior.quantity),
        )

    def period_comparison(
        self,
        account_name: str,
        granularity: str,
        grouped: Optional[GroupedBuckets] = None,
    ) -> PeriodComparison:
        if grouped is None:
            grouped = group_by_account_and_period(self.records, granularity)
        return compare_latest_periods(grouped.get(account_name, {}))

    def summarize(
        self,
        account_name: str,
        granularity: str,
        grouped: Optional[GroupedBuckets] = None,
    ) -> DashboardSummary:
        """
        Full summary for one (account, granularity) pair.

        Args:
            account_name: Display name of the account
            granularity: 'day', 'week' or 'month'
            grouped: Pre-computed buckets for this granularity (optional)
        """
        if granularity not in GRANULARITIES:
            raise ValueError(f"Unknown granularity: {granularity!r}")

        return DashboardSummary(
            account_name=account_name,
            granularity=granularity,
            periods=self.period_comparison(account_name, granularity, grouped),
            year_over_year=self.year_over_year(account_name, granularity),
        )
