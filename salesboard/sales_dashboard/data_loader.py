# salesboard/sales_dashboard/data_loader.py
"""
Data Loader & Application State for the Sales Dashboard

- DashboardState: the explicit state object (active source, record set,
  connection status) kept in session_state and passed into the core
- Every load is tagged with a generation number at issue time; a result
  is applied only if its generation is still current, so a late
  response never overwrites a newer source choice
- parse_uploaded_csv: delimited upload -> raw rows
- sample_sales_records: built-in demo data used when nothing is connected

VERSION: 1.0.0
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Dict, List, Optional, Union

from .constants import (
    SOURCE_MODES,
    SOURCE_SAMPLE,
    SOURCE_SHEETS,
    SOURCE_UPLOAD,
    STATUS_CONNECTED,
    STATUS_DISCONNECTED,
    STATUS_ERROR,
    UPLOAD_COLUMNS,
    UPLOAD_ID_PREFIX,
    UPLOAD_MIN_FIELDS,
)
from .models import SalesRecord, UploadParseError
from .normalizer import normalize_upload_rows

logger = logging.getLogger(__name__)


# =============================================================================
# SAMPLE DATA
# =============================================================================

_SAMPLE_ROWS = [
    ('1', 'ACC001', 'ITM001', 'LST001', 299.99, 2, '2024-12-15', 'TechStore Pro'),
    ('2', 'ACC001', 'ITM002', 'LST002', 149.50, 1, '2024-12-15', 'TechStore Pro'),
    ('3', 'ACC002', 'ITM003', 'LST003', 89.99, 3, '2024-12-14', 'Fashion Hub'),
    ('4', 'ACC002', 'ITM004', 'LST004', 199.99, 1, '2024-12-14', 'Fashion Hub'),
    ('5', 'ACC003', 'ITM005', 'LST005', 449.99, 1, '2024-12-13', 'Home Essentials'),
    ('6', 'ACC001', 'ITM006', 'LST006', 79.99, 4, '2024-12-12', 'TechStore Pro'),
    ('7', 'ACC003', 'ITM007', 'LST007', 129.99, 2, '2024-12-11', 'Home Essentials'),
    ('8', 'ACC002', 'ITM008', 'LST008', 249.99, 1, '2024-12-10', 'Fashion Hub'),
    ('9', 'ACC001', 'ITM009', 'LST009', 399.99, 1, '2024-11-20', 'TechStore Pro'),
    ('10', 'ACC002', 'ITM010', 'LST010', 99.99, 5, '2024-11-18', 'Fashion Hub'),
]


def sample_sales_records() -> List[SalesRecord]:
    """Demo dataset shown until a real source is connected."""
    return [SalesRecord(*row) for row in _SAMPLE_ROWS]


# =============================================================================
# FILE UPLOAD
# =============================================================================

def _decode(content: Union[bytes, str]) -> str:
    if isinstance(content, str):
        return content
    try:
        return content.decode('utf-8-sig')
    except UnicodeDecodeError as e:
        raise UploadParseError(f"File is not valid UTF-8 text: {e}") from e


def parse_uploaded_csv(content: Union[bytes, str]) -> List[Dict[str, str]]:
    """
    Split an uploaded comma-delimited file into raw rows.

    Line 0 is the header and is skipped. Fields are trimmed and stripped of
    double quotes, then mapped positionally onto UPLOAD_COLUMNS. Lines with
    fewer than UPLOAD_MIN_FIELDS fields are dropped. A missing id becomes
    "row-<line number>".

    Raises:
        UploadParseError: content is undecodable or blank
    """
    if content is None:
        raise UploadParseError("No file content")

    text = _decode(content)
    if not text.strip():
        raise UploadParseError("File is empty")

    lines = text.splitlines()
    rows = []
    short_lines = 0

    for line_no, line in enumerate(lines[1:], start=1):
        values = [v.strip().replace('"', '') for v in line.split(',')]
        if len(values) < UPLOAD_MIN_FIELDS:
            short_lines += 1
            continue
        row = dict(zip(UPLOAD_COLUMNS, values))
        if not row.get('id'):
            row['id'] = f"{UPLOAD_ID_PREFIX}-{line_no}"
        rows.append(row)

    if short_lines:
        logger.debug(f"Dropped {short_lines} line(s) with fewer than {UPLOAD_MIN_FIELDS} fields")

    return rows


def load_uploaded_records(
    content: Union[bytes, str],
    prefixes: Optional[Dict[str, str]] = None,
) -> List[SalesRecord]:
    """Parse and normalize an uploaded CSV file."""
    rows = parse_uploaded_csv(content)
    records = normalize_upload_rows(rows, prefixes)
    logger.info(f"📄 Uploaded file parsed: {len(records):,} records")
    return records


# =============================================================================
# APPLICATION STATE
# =============================================================================

@dataclass(frozen=True)
class LoadTicket:
    """Issued when a load starts; presented again when it completes."""
    generation: int
    mode: str


class DashboardState:
    """
    Explicit dashboard state.

    Usage:
        state = DashboardState()
        ticket = state.begin_load(SOURCE_SHEETS)
        try:
            records = load_sheet_records(...)
        except SheetsConnectionError as e:
            state.fail_load(ticket, e)
        else:
            state.apply_load(ticket, records)
    """

    def __init__(self, records: Optional[List[SalesRecord]] = None):
        self.source_mode = SOURCE_SAMPLE
        self.records: List[SalesRecord] = list(records) if records is not None else sample_sales_records()
        self.prior_year_records: List[SalesRecord] = []
        self.connection_status = STATUS_DISCONNECTED
        self.last_error: Optional[str] = None
        self.loaded_at: Optional[datetime] = None
        self.generation = 0
        self._desired_mode = SOURCE_SAMPLE

    # -------------------------------------------------------------------------
    # Loads
    # -------------------------------------------------------------------------

    def begin_load(self, mode: str) -> LoadTicket:
        """Start a load; any earlier in-flight load becomes stale."""
        if mode not in SOURCE_MODES:
            raise ValueError(f"Unknown source mode: {mode!r}")
        self.generation += 1
        self._desired_mode = mode
        return LoadTicket(generation=self.generation, mode=mode)

    def is_current(self, ticket: LoadTicket) -> bool:
        return ticket.generation == self.generation and ticket.mode == self._desired_mode

    def apply_load(
        self,
        ticket: LoadTicket,
        records: List[SalesRecord],
        prior_year_records: Optional[List[SalesRecord]] = None,
    ) -> bool:
        """
        Replace the record set with a completed load.

        Returns:
            False (and changes nothing) if the ticket is stale
        """
        if not self.is_current(ticket):
            logger.info(
                f"Discarding stale {ticket.mode} load "
                f"(generation {ticket.generation}, current {self.generation})"
            )
            return False

        self.source_mode = ticket.mode
        self.records = list(records)
        self.prior_year_records = list(prior_year_records or [])
        self.loaded_at = datetime.now()
        self.last_error = None
        if ticket.mode == SOURCE_SHEETS:
            self.connection_status = STATUS_CONNECTED

        logger.info(f"✅ Loaded {len(self.records):,} records from {ticket.mode}")
        return True

    def fail_load(self, ticket: LoadTicket, error: Union[Exception, str]) -> bool:
        """
        Record a failed load. The last-good record set is kept.

        Returns:
            False if the ticket is stale (error ignored)
        """
        if not self.is_current(ticket):
            logger.info(f"Ignoring failure of stale {ticket.mode} load: {error}")
            return False

        self.last_error = str(error)
        self._desired_mode = self.source_mode
        if ticket.mode == SOURCE_SHEETS:
            self.connection_status = STATUS_ERROR

        logger.error(f"❌ {ticket.mode} load failed: {error}")
        return True

    def use_sample_data(self):
        """Drop any connected source and fall back to the sample set."""
        self.generation += 1
        self._desired_mode = SOURCE_SAMPLE
        self.source_mode = SOURCE_SAMPLE
        self.records = sample_sales_records()
        self.prior_year_records = []
        self.connection_status = STATUS_DISCONNECTED
        self.last_error = None
        self.loaded_at = None
        logger.info("🔄 Switched to sample data")

    # -------------------------------------------------------------------------
    # Display helpers
    # -------------------------------------------------------------------------

    @property
    def record_count(self) -> int:
        return len(self.records)

    @property
    def is_using_sample(self) -> bool:
        return self.source_mode == SOURCE_SAMPLE

    def source_label(self) -> str:
        if self.source_mode == SOURCE_SHEETS:
            return f"Google Sheets ({self.record_count:,} records)"
        if self.source_mode == SOURCE_UPLOAD:
            return f"Uploaded CSV ({self.record_count:,} records)"
        return "Sample Data Active"
