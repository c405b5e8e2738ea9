# salesboard/sales_dashboard/__init__.py
"""
Sales Dashboard Module

Rotating per-account sales summaries across day / week / month.

Core (pure, no Streamlit):
- normalizer: raw rows -> SalesRecord
- period_grouper: account x period buckets
- summary_calculator: period and year-over-year comparisons
- account_summary: ranked per-account totals for the date range
- rotation: account x granularity rotation with auto-advance timer
- data_loader: explicit dashboard state, upload parsing, sample data

VERSION: 1.0.0
"""

# Core
from .models import (
    SalesRecord,
    PeriodBucket,
    AccountSummary,
    WindowTotals,
    PeriodComparison,
    YearOverYearSummary,
    DashboardSummary,
    SalesDataError,
    SheetsConnectionError,
    UploadParseError,
    NormalizationError,
)
from .normalizer import (
    MappingResolution,
    PrefixResolution,
    normalize_rows,
    normalize_sheet_rows,
    normalize_upload_rows,
    parse_amount,
    parse_quantity,
)
from .period_grouper import (
    group_by_account_and_period,
    group_all_granularities,
    bucket_frame,
    period_key,
)
from .summary_calculator import SummaryCalculator, percent_change, compare_latest_periods
from .account_summary import build_account_summaries, order_accounts
from .rotation import RotationController, RepeatingTimer
from .data_loader import (
    DashboardState,
    LoadTicket,
    parse_uploaded_csv,
    load_uploaded_records,
    sample_sales_records,
)

# Constants
from .constants import (
    GRANULARITIES,
    ACCOUNT_MAP,
    PREFERRED_ACCOUNT_ORDER,
    UNKNOWN_ACCOUNT,
    SOURCE_SAMPLE,
    SOURCE_SHEETS,
    SOURCE_UPLOAD,
    CACHE_KEY_STATE,
    CACHE_KEY_ROTATION,
    CACHE_KEY_DATE_RANGE,
    CACHE_KEY_TIMING,
    CACHE_KEY_RENDERED_INDEX,
    DEBUG_TIMING,
)

__all__ = [
    # Models
    'SalesRecord', 'PeriodBucket', 'AccountSummary', 'WindowTotals',
    'PeriodComparison', 'YearOverYearSummary', 'DashboardSummary',
    'SalesDataError', 'SheetsConnectionError', 'UploadParseError', 'NormalizationError',

    # Core
    'MappingResolution', 'PrefixResolution',
    'normalize_rows', 'normalize_sheet_rows', 'normalize_upload_rows',
    'parse_amount', 'parse_quantity',
    'group_by_account_and_period', 'group_all_granularities', 'bucket_frame', 'period_key',
    'SummaryCalculator', 'percent_change', 'compare_latest_periods',
    'build_account_summaries', 'order_accounts',
    'RotationController', 'RepeatingTimer',
    'DashboardState', 'LoadTicket', 'parse_uploaded_csv', 'load_uploaded_records',
    'sample_sales_records',

    # Constants
    'GRANULARITIES', 'ACCOUNT_MAP', 'PREFERRED_ACCOUNT_ORDER', 'UNKNOWN_ACCOUNT',
    'SOURCE_SAMPLE', 'SOURCE_SHEETS', 'SOURCE_UPLOAD',
    'CACHE_KEY_STATE', 'CACHE_KEY_ROTATION', 'CACHE_KEY_DATE_RANGE', 'CACHE_KEY_TIMING',
    'CACHE_KEY_RENDERED_INDEX',
    'DEBUG_TIMING',
]

__version__ = '1.0.0'
