# salesboard/sales_dashboard/models.py
"""
Data containers for the Sales Dashboard module.

All records and derived results are immutable; a new data source
replaces the record list wholesale.

VERSION: 1.0.0
"""

from dataclasses import dataclass, field
from datetime import date
from typing import Any, Dict, Optional


# ==================== CUSTOM EXCEPTIONS ====================

class SalesDataError(Exception):
    """Base exception for sales data errors"""
    pass


class SheetsConnectionError(SalesDataError):
    """Raised when the spreadsheet cannot be fetched"""
    def __init__(self, message: str, status_code: Optional[int] = None):
        self.status_code = status_code
        super().__init__(message)


class UploadParseError(SalesDataError):
    """Raised when an uploaded file is structurally unreadable"""
    pass


class NormalizationError(SalesDataError):
    """Raised when a whole batch of raw rows is unreadable"""
    pass


# ==================== RECORDS ====================

@dataclass(frozen=True)
class SalesRecord:
    """One normalized order line."""
    id: str
    account_id: str
    item_id: str
    listing_id: str
    amount: float
    quantity: int
    date: str
    account_name: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'account_id': self.account_id,
            'item_id': self.item_id,
            'listing_id': self.listing_id,
            'amount': self.amount,
            'quantity': self.quantity,
            'date': self.date,
            'account_name': self.account_name,
        }


@dataclass(frozen=True)
class PeriodBucket:
    """Aggregate of the records for one (account, period key) pair."""
    amount: float = 0.0
    quantity: int = 0
    count: int = 0


@dataclass(frozen=True)
class AccountSummary:
    """Per-account totals over the selected custom date range."""
    account_id: str
    account_name: str
    total_amount: float = 0.0
    total_quantity: int = 0
    sales_change: float = 0.0
    item_count: int = 0


# ==================== COMPARISONS ====================

@dataclass(frozen=True)
class WindowTotals:
    """Totals over an inclusive date window. Zero totals still report the window."""
    start: date
    end: date
    amount: float = 0.0
    quantity: int = 0
    count: int = 0

    @property
    def start_str(self) -> str:
        return self.start.isoformat()

    @property
    def end_str(self) -> str:
        return self.end.isoformat()

    @property
    def range_label(self) -> str:
        if self.start == self.end:
            return self.start_str
        return f"{self.start_str} → {self.end_str}"

    @property
    def has_data(self) -> bool:
        return self.count > 0


@dataclass(frozen=True)
class YearOverYearSummary:
    """Current window vs the same window one calendar year earlier."""
    account_name: str
    granularity: str
    current: WindowTotals
    prior_year: WindowTotals
    amount_change: float = 0.0
    quantity_change: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            'account_name': self.account_name,
            'granularity': self.granularity,
            'current_range': self.current.range_label,
            'current_amount': self.current.amount,
            'current_quantity': self.current.quantity,
            'prior_year_range': self.prior_year.range_label,
            'prior_year_amount': self.prior_year.amount,
            'prior_year_quantity': self.prior_year.quantity,
            'amount_change': self.amount_change,
            'quantity_change': self.quantity_change,
        }


@dataclass(frozen=True)
class PeriodComparison:
    """Latest period bucket vs the one before it."""
    current_key: Optional[str] = None
    previous_key: Optional[str] = None
    current: PeriodBucket = field(default_factory=PeriodBucket)
    previous: PeriodBucket = field(default_factory=PeriodBucket)
    sales_change: float = 0.0
    quantity_change: float = 0.0


@dataclass(frozen=True)
class DashboardSummary:
    """Everything the main panel renders for one (account, granularity) pair."""
    account_name: str
    granularity: str
    periods: PeriodComparison
    year_over_year: YearOverYearSummary
