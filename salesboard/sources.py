# salesboard/sources.py
"""
Data source switching for the Sales Dashboard

Each load takes a ticket from DashboardState before it starts and hands
it back on completion, so whichever source the user picked last wins.

Version: 1.0.0
"""

import logging
from typing import Dict, Optional, Tuple, Union

from .config import SheetsConfig
from .sales_dashboard.constants import ACCOUNT_MAP, SOURCE_SHEETS, SOURCE_UPLOAD
from .sales_dashboard.data_loader import DashboardState, load_uploaded_records
from .sales_dashboard.models import SalesDataError
from .sheets_client import GoogleSheetsClient, load_sheet_records

logger = logging.getLogger(__name__)


def connect_google_sheets(
    state: DashboardState,
    sheets_config: SheetsConfig,
    account_map: Optional[Dict[str, str]] = None,
    timeout: float = 15.0,
    max_retries: int = 3,
    client: Optional[GoogleSheetsClient] = None,
) -> Tuple[bool, Optional[str]]:
    """
    Load the spreadsheet into the dashboard state.

    Returns:
        Tuple of (applied: bool, error_message: str or None)
    """
    ticket = state.begin_load(SOURCE_SHEETS)
    try:
        records, prior_year_records = load_sheet_records(
            sheets_config,
            account_map=account_map if account_map is not None else ACCOUNT_MAP,
            timeout=timeout,
            max_retries=max_retries,
            client=client,
        )
    except SalesDataError as e:
        state.fail_load(ticket, e)
        return False, str(e)

    applied = state.apply_load(ticket, records, prior_year_records)
    return applied, None


def apply_uploaded_file(
    state: DashboardState,
    content: Union[bytes, str],
    prefixes: Optional[Dict[str, str]] = None,
) -> Tuple[bool, Optional[str]]:
    """
    Parse an uploaded CSV into the dashboard state. A parse failure keeps
    the current record set.

    Returns:
        Tuple of (applied: bool, error_message: str or None)
    """
    ticket = state.begin_load(SOURCE_UPLOAD)
    try:
        records = load_uploaded_records(content, prefixes)
    except SalesDataError as e:
        state.fail_load(ticket, e)
        return False, f"Error parsing file. Please ensure it's a valid CSV format. ({e})"

    applied = state.apply_load(ticket, records)
    return applied, None
