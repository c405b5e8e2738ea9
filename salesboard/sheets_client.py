# salesboard/sheets_client.py
"""
Google Sheets Client

Version: 1.0.0
Features:
- Read-only values API (API key auth)
- Retry with exponential backoff on network errors
- Header row -> dict rows, missing trailing cells filled with ''
"""

import logging
import re
import time
from functools import wraps
from typing import Dict, List, Optional, Tuple
from urllib.parse import quote

import requests

from .config import SheetsConfig
from .sales_dashboard.models import SalesRecord, SheetsConnectionError
from .sales_dashboard.normalizer import normalize_sheet_rows

logger = logging.getLogger(__name__)

SHEETS_API_URL = "https://sheets.googleapis.com/v4/spreadsheets/{spreadsheet_id}/values/{range}"

_SPREADSHEET_ID_PATTERN = re.compile(r'/spreadsheets/d/([a-zA-Z0-9-_]+)')


# ==================== RETRY DECORATOR ====================

def with_retry(max_retries: int = 3, delay: float = 1.0, backoff: float = 2.0):
    """
    Decorator for automatic retry with exponential backoff

    Only network-level failures (requests.RequestException) are retried.

    Args:
        max_retries: Maximum number of attempts
        delay: Initial delay between retries (seconds)
        backoff: Multiplier for delay after each retry
    """
    def decorator(func):
        @wraps(func)
        def wrapper(*args, **kwargs):
            last_exception = None
            current_delay = delay

            for attempt in range(max_retries):
                try:
                    return func(*args, **kwargs)
                except requests.RequestException as e:
                    last_exception = e
                    if attempt < max_retries - 1:
                        logger.warning(f"{func.__name__} attempt {attempt + 1} failed, retrying in {current_delay}s...")
                        time.sleep(current_delay)
                        current_delay *= backoff
                    else:
                        logger.error(f"{func.__name__} failed after {max_retries} attempts: {e}")

            raise SheetsConnectionError(f"Network error: {last_exception}") from last_exception
        return wrapper
    return decorator


# ==================== HELPERS ====================

def extract_spreadsheet_id(url_or_id: str) -> str:
    """Pull the spreadsheet id out of a sheet URL; plain ids pass through."""
    match = _SPREADSHEET_ID_PATTERN.search(url_or_id or '')
    return match.group(1) if match else (url_or_id or '').strip()


def values_to_rows(values: Optional[List[List[str]]]) -> List[Dict[str, str]]:
    """Row 0 is the header; each following row becomes header -> cell."""
    if not values:
        return []

    headers = [str(h) for h in values[0]]
    rows = []
    for raw in values[1:]:
        rows.append({
            header: (str(raw[i]) if i < len(raw) and raw[i] is not None else '')
            for i, header in enumerate(headers)
        })
    return rows


# ==================== CLIENT ====================

class GoogleSheetsClient:
    """
    Fetch rows from one spreadsheet range.

    Usage:
        client = GoogleSheetsClient(spreadsheet_id, "Sheet1!A:Z", api_key)
        rows = client.fetch_rows()
    """

    def __init__(
        self,
        spreadsheet_id: str,
        range: str = "Sheet1!A:Z",
        api_key: Optional[str] = None,
        timeout: float = 15.0,
        max_retries: int = 3,
        retry_delay: float = 1.0,
        session: Optional[requests.Session] = None,
    ):
        self.spreadsheet_id = extract_spreadsheet_id(spreadsheet_id)
        self.range = range
        self.api_key = api_key
        self.timeout = timeout
        self.session = session or requests.Session()
        self._get = with_retry(max_retries=max_retries, delay=retry_delay)(self._request)

    @classmethod
    def from_config(
        cls,
        sheets_config: SheetsConfig,
        timeout: float = 15.0,
        max_retries: int = 3,
    ) -> "GoogleSheetsClient":
        return cls(
            spreadsheet_id=sheets_config.spreadsheet_id,
            range=sheets_config.range,
            api_key=sheets_config.api_key,
            timeout=timeout,
            max_retries=max_retries,
        )

    @property
    def url(self) -> str:
        return SHEETS_API_URL.format(
            spreadsheet_id=self.spreadsheet_id,
            range=quote(self.range, safe="!:$"),
        )

    def _request(self, range_override: Optional[str] = None) -> requests.Response:
        url = self.url
        if range_override:
            url = SHEETS_API_URL.format(
                spreadsheet_id=self.spreadsheet_id,
                range=quote(range_override, safe="!:$"),
            )
        return self.session.get(url, params={'key': self.api_key}, timeout=self.timeout)

    def fetch_values(self, range_override: Optional[str] = None) -> List[List[str]]:
        """
        Raw cell grid for the range.

        Raises:
            SheetsConnectionError: missing API key, HTTP error or unreadable body
        """
        if not self.api_key:
            raise SheetsConnectionError("Google Sheets API key is required")
        if not self.spreadsheet_id:
            raise SheetsConnectionError("Spreadsheet ID is required")

        response = self._get(range_override)

        if not response.ok:
            logger.error(f"❌ Sheets fetch failed: {response.status_code} {response.reason}")
            raise SheetsConnectionError(
                f"Failed to fetch data: {response.reason}",
                status_code=response.status_code,
            )

        try:
            payload = response.json()
        except ValueError as e:
            raise SheetsConnectionError(f"Unreadable response from Google Sheets: {e}") from e

        if not isinstance(payload, dict):
            raise SheetsConnectionError("Unexpected response shape from Google Sheets")

        return payload.get('values') or []

    def fetch_rows(self, range_override: Optional[str] = None) -> List[Dict[str, str]]:
        rows = values_to_rows(self.fetch_values(range_override))
        logger.info(f"📥 Fetched {len(rows):,} rows from {range_override or self.range}")
        return rows


# ==================== CONVENIENCE FUNCTIONS ====================

def load_sheet_records(
    sheets_config: SheetsConfig,
    account_map: Optional[Dict[str, str]] = None,
    timeout: float = 15.0,
    max_retries: int = 3,
    client: Optional[GoogleSheetsClient] = None,
) -> Tuple[List[SalesRecord], List[SalesRecord]]:
    """
    Fetch and normalize the current range and, when configured, the
    prior-year range.

    Returns:
        (records, prior_year_records)
    """
    client = client or GoogleSheetsClient.from_config(
        sheets_config, timeout=timeout, max_retries=max_retries
    )

    records = normalize_sheet_rows(client.fetch_rows(), account_map)

    prior_year_records: List[SalesRecord] = []
    if sheets_config.prior_year_range:
        prior_year_records = normalize_sheet_rows(
            client.fetch_rows(sheets_config.prior_year_range), account_map
        )

    return records, prior_year_records
