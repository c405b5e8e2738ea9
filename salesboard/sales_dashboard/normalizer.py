# salesboard/sales_dashboard/normalizer.py
"""
Record Normalizer

Turns raw rows (spreadsheet cells keyed by header, or positional CSV
fields keyed by column name) into SalesRecord objects.

Account names come from exactly one resolution strategy per source:
- MappingResolution: raw account code -> display name; unmapped rows are dropped
- PrefixResolution: explicit name, item-id prefix, then the raw account id;
  nothing usable -> UNKNOWN_ACCOUNT

Numbers use parse-or-zero semantics, so a bad cell never rejects a row.
Dates are stored as YYYY-MM-DD whenever the cell can be read as a date.

VERSION: 1.0.0
"""

import logging
import math
import re
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Union

import pandas as pd

from .constants import (
    ACCOUNT_MAP,
    SHEET_COLUMNS,
    SHEET_ID_PREFIX,
    UNKNOWN_ACCOUNT,
    UPLOAD_ID_PREFIX,
)
from .models import NormalizationError, SalesRecord

logger = logging.getLogger(__name__)

_FLOAT_PREFIX = re.compile(r'^[+-]?(\d+(\.\d*)?|\.\d+)([eE][+-]?\d+)?')
_INT_PREFIX = re.compile(r'^[+-]?\d+')
_ISO_DATE = re.compile(r'^\d{4}-\d{2}-\d{2}$')


# =============================================================================
# PARSE-OR-ZERO HELPERS
# =============================================================================

def parse_amount(value) -> float:
    """
    Parse a monetary cell. Leading numeric text is honoured ("12.5 USD" -> 12.5);
    anything unparsable, empty or non-finite yields 0.0.
    """
    if value is None:
        return 0.0
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return float(value) if math.isfinite(value) else 0.0
    match = _FLOAT_PREFIX.match(str(value).strip())
    if not match:
        return 0.0
    parsed = float(match.group(0))
    return parsed if math.isfinite(parsed) else 0.0


def parse_quantity(value) -> int:
    """Parse an integer count ("3.7" -> 3, "2 pcs" -> 2); unparsable yields 0."""
    if value is None:
        return 0
    if isinstance(value, float):
        return int(value) if math.isfinite(value) else 0
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    match = _INT_PREFIX.match(str(value).strip())
    return int(match.group(0)) if match else 0


def normalize_date(value) -> str:
    """
    Canonical YYYY-MM-DD for a date cell. ISO dates pass through unchanged;
    datetimes ("2024-12-01T10:15:00Z") and US-style dates ("12/2/2024") are
    converted. Unparsable text is kept as is and skipped later by the grouper.
    """
    text = '' if value is None else str(value).strip()
    if not text or _ISO_DATE.match(text):
        return text
    parsed = pd.to_datetime(text, errors='coerce', format='mixed')
    if pd.isna(parsed):
        return text
    return parsed.strftime('%Y-%m-%d')


# =============================================================================
# RESOLUTION STRATEGIES
# =============================================================================

@dataclass(frozen=True)
class MappingResolution:
    """Explicit account-code table. Rows whose code is not mapped are dropped."""
    account_map: Dict[str, str] = field(default_factory=lambda: dict(ACCOUNT_MAP))

    kind = 'mapping'

    def resolve(self, account_id: str, item_id: str, explicit_name: str = '') -> Optional[str]:
        return self.account_map.get(account_id)


@dataclass(frozen=True)
class PrefixResolution:
    """
    Infer the account from the item-id prefix.

    Order: an explicit, non-empty account name on the row, then the longest
    matching item-id prefix, then the row's own account id, then the sentinel.
    """
    prefixes: Dict[str, str] = field(default_factory=dict)
    sentinel: str = UNKNOWN_ACCOUNT

    kind = 'prefix'

    def resolve(self, account_id: str, item_id: str, explicit_name: str = '') -> Optional[str]:
        if explicit_name:
            return explicit_name
        for prefix in sorted(self.prefixes, key=len, reverse=True):
            if prefix and item_id.startswith(prefix):
                return self.prefixes[prefix]
        if account_id:
            return account_id
        return self.sentinel


AccountResolution = Union[MappingResolution, PrefixResolution]


# =============================================================================
# FIELD LAYOUTS
# =============================================================================

@dataclass(frozen=True)
class FieldLayout:
    """Which raw column(s) feed each SalesRecord field, first non-empty wins."""
    columns: Dict[str, List[str]]
    id_prefix: str
    index_offset: int = 0

    def get(self, row: Mapping, name: str) -> str:
        for column in self.columns.get(name, []):
            value = row.get(column)
            if value is not None and str(value) != '':
                return str(value)
        return ''


SHEET_LAYOUT = FieldLayout(columns=SHEET_COLUMNS, id_prefix=SHEET_ID_PREFIX)

# Uploaded rows are keyed by UPLOAD_COLUMNS; line 0 is the header
UPLOAD_LAYOUT = FieldLayout(
    columns={
        'id': ['id'],
        'accountId': ['accountId'],
        'itemId': ['itemId'],
        'listingId': ['listingId'],
        'amount': ['amount'],
        'quantity': ['quantity'],
        'date': ['date'],
        'accountName': ['accountName'],
    },
    id_prefix=UPLOAD_ID_PREFIX,
    index_offset=1,
)


# =============================================================================
# NORMALIZER
# =============================================================================

def normalize_rows(
    rows: Iterable,
    resolution: AccountResolution,
    layout: FieldLayout = SHEET_LAYOUT,
) -> List[SalesRecord]:
    """
    Normalize a batch of raw rows.

    Args:
        rows: Iterable of mappings column -> cell text
        resolution: MappingResolution or PrefixResolution
        layout: Column layout of the source

    Returns:
        SalesRecord list in input order (no deduplication)

    Raises:
        NormalizationError: rows is not an iterable of mappings
    """
    if rows is None or isinstance(rows, (str, bytes)) or not isinstance(rows, Iterable):
        raise NormalizationError(f"Expected an iterable of rows, got {type(rows).__name__}")

    rows = list(rows)
    if any(not isinstance(row, Mapping) for row in rows):
        raise NormalizationError("Every row must be a mapping of column name to value")

    records = []
    dropped = 0

    for index, row in enumerate(rows):
        account_id = layout.get(row, 'accountId')
        item_id = layout.get(row, 'itemId')
        account_name = resolution.resolve(
            account_id, item_id, layout.get(row, 'accountName')
        )
        if not account_name:
            dropped += 1
            continue

        records.append(SalesRecord(
            id=layout.get(row, 'id') or f"{layout.id_prefix}-{index + layout.index_offset}",
            account_id=account_id,
            item_id=item_id,
            listing_id=layout.get(row, 'listingId'),
            amount=parse_amount(layout.get(row, 'amount')),
            quantity=parse_quantity(layout.get(row, 'quantity')),
            date=normalize_date(layout.get(row, 'date')),
            account_name=account_name,
        ))

    if dropped:
        logger.debug(f"Dropped {dropped} row(s) with unresolved account ({resolution.kind})")
    logger.info(f"Normalized {len(records):,} of {len(rows):,} rows ({resolution.kind} resolution)")

    return records


def normalize_sheet_rows(
    rows: Sequence[Mapping],
    account_map: Optional[Dict[str, str]] = None,
) -> List[SalesRecord]:
    """Spreadsheet rows resolved through the account-code table."""
    resolution = MappingResolution(account_map) if account_map is not None else MappingResolution()
    return normalize_rows(rows, resolution, SHEET_LAYOUT)


def normalize_upload_rows(
    rows: Sequence[Mapping],
    prefixes: Optional[Dict[str, str]] = None,
) -> List[SalesRecord]:
    """Uploaded CSV rows resolved by explicit name or item-id prefix."""
    return normalize_rows(rows, PrefixResolution(prefixes or {}), UPLOAD_LAYOUT)
