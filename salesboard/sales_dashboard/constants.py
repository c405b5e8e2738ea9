# salesboard/sales_dashboard/constants.py
"""
Constants for the Sales Dashboard module

VERSION: 1.0.0
"""

# =============================================================================
# GRANULARITIES (rotation mode order matters: index 0/1/2)
# =============================================================================
GRANULARITIES = ['day', 'week', 'month']
MODES_PER_ACCOUNT = len(GRANULARITIES)

GRANULARITY_LABELS = {
    'day': 'Daily',
    'week': 'Weekly',
    'month': 'Monthly',
}

# Length of the "current" window ending yesterday, per granularity
WINDOW_DAYS = {
    'day': 1,
    'week': 7,
    'month': 31,
}

# Account summaries compare against this many days before range start
PREVIOUS_WINDOW_DAYS = 30

# =============================================================================
# ROTATION
# =============================================================================
ROTATION_INTERVAL_SECONDS = 5.0

# =============================================================================
# ACCOUNT RESOLUTION
# =============================================================================
UNKNOWN_ACCOUNT = 'Unknown Account'

# Raw spreadsheet account code -> display name
ACCOUNT_MAP = {
    'led_sone': 'LEDSone(Renuha)',
    'electricalsone': 'Electricalsone(Jubista)',
    'so_926407': 'Sunsone(Renuha)',
    'vintageinterior': 'Vintage Interior',
    'coventrylights': 'Coventry Lights',
    'dctransformer': 'DC Transformer',
    'lighting_sone': 'Lighting Sone',
    'bestbringer': 'Best Bringer',
    're6865': 'Redro Led',
}

# Sidebar order for known accounts; anything else sorts after, sentinel last
PREFERRED_ACCOUNT_ORDER = list(ACCOUNT_MAP.values())

# =============================================================================
# SOURCE COLUMNS
# =============================================================================
# Spreadsheet header names (matched case-sensitively)
SHEET_COLUMNS = {
    'id': ['order_id'],
    'accountId': ['account'],
    'itemId': ['itemId', 'itemid', 'sku'],
    'listingId': ['sku'],
    'amount': ['amount'],
    'quantity': ['quantity'],
    'date': ['order_date'],
}

# Uploaded CSV: positional columns
UPLOAD_COLUMNS = [
    'id', 'accountId', 'itemId', 'listingId',
    'amount', 'quantity', 'date', 'accountName',
]
UPLOAD_MIN_FIELDS = 7

SHEET_ID_PREFIX = 'sheet'
UPLOAD_ID_PREFIX = 'row'

# =============================================================================
# SOURCE MODES & CONNECTION STATUS
# =============================================================================
SOURCE_SAMPLE = 'sample'
SOURCE_SHEETS = 'sheets'
SOURCE_UPLOAD = 'upload'
SOURCE_MODES = [SOURCE_SAMPLE, SOURCE_SHEETS, SOURCE_UPLOAD]

STATUS_DISCONNECTED = 'disconnected'
STATUS_CONNECTED = 'connected'
STATUS_ERROR = 'error'

# =============================================================================
# SESSION STATE KEYS (prefixed _sd_)
# =============================================================================
CACHE_KEY_STATE = '_sd_dashboard_state'
CACHE_KEY_ROTATION = '_sd_rotation'
CACHE_KEY_DATE_RANGE = '_sd_date_range'
CACHE_KEY_TIMING = '_sd_timing_data'
CACHE_KEY_RENDERED_INDEX = '_sd_rendered_index'

# =============================================================================
# COLOR SCHEME
# =============================================================================
COLORS = {
    "primary": "#dc2626",
    "amount": "#ef4444",
    "quantity": "#3b82f6",
    "positive": "#28a745",
    "negative": "#dc3545",
    "neutral": "#9ca3af",
    "grid": "#333333",
    "text_light": "#aaaaaa",
}

CHART_HEIGHT = 320

# =============================================================================
# METRIC DISPLAY
# =============================================================================
CURRENCY_FORMAT = "${:,.2f}"
PERCENT_FORMAT = "{:+.1f}%"

# =============================================================================
# DEBUG SETTINGS
# Use environment variable to enable: SD_DEBUG_TIMING=true
# =============================================================================
import os as _os
DEBUG_TIMING = _os.getenv('SD_DEBUG_TIMING', 'false').lower() == 'true'
