# salesboard/config.py
"""
Centralized Configuration Management

Version: 1.0.0
Features:
- Support both local (.env) and Streamlit Cloud (secrets.toml)
- Singleton pattern for efficiency
- Type-safe getters with defaults
- Missing sheet credentials are not fatal (sample data is used instead)
"""

import os
import json
import logging
from pathlib import Path
from dotenv import load_dotenv
from typing import Dict, Any, Optional
from dataclasses import dataclass

# Initialize logger
logger = logging.getLogger(__name__)


def is_running_on_streamlit_cloud() -> bool:
    """Detect if running on Streamlit Cloud"""
    try:
        import streamlit as st
        return hasattr(st, 'secrets') and len(st.secrets) > 0
    except Exception:
        return False


@dataclass
class SheetsConfig:
    """Google Sheets connection settings"""
    spreadsheet_id: str = ""
    range: str = "Sheet1!A:Z"
    api_key: Optional[str] = None
    prior_year_range: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            'spreadsheet_id': self.spreadsheet_id,
            'range': self.range,
            'api_key': self.api_key,
            'prior_year_range': self.prior_year_range,
        }

    def is_configured(self) -> bool:
        return bool(self.spreadsheet_id and self.api_key)


def _parse_prefix_table(raw: Optional[str]) -> Dict[str, str]:
    """Parse ITEM_PREFIX_ACCOUNTS (JSON object prefix -> display name)."""
    if not raw:
        return {}
    try:
        table = json.loads(raw)
    except json.JSONDecodeError as e:
        logger.warning(f"Ignoring invalid ITEM_PREFIX_ACCOUNTS: {e}")
        return {}
    if not isinstance(table, dict):
        logger.warning("Ignoring ITEM_PREFIX_ACCOUNTS: expected a JSON object")
        return {}
    return {str(k): str(v) for k, v in table.items()}


class Config:
    """
    Centralized configuration management

    Usage:
        from salesboard.config import config

        # Spreadsheet connection
        sheets = config.get_sheets_config()

        # App settings
        interval = config.get_app_setting("ROTATION_INTERVAL_SECONDS", 5)

        # Feature flags
        if config.is_feature_enabled("AUTO_CONNECT"):
            ...
    """

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
            cls._instance._initialized = False
        return cls._instance

    def __init__(self):
        if self._initialized:
            return

        self.is_cloud = is_running_on_streamlit_cloud()
        self._load_config()
        self._initialized = True

    def _load_config(self):
        """Load configuration based on environment"""
        if self.is_cloud:
            self._load_cloud_config()
        else:
            self._load_local_config()

        self._load_app_config()
        self._log_config_status()

    def _load_cloud_config(self):
        """Load configuration from Streamlit Cloud secrets"""
        import streamlit as st

        sheets_secrets = st.secrets.get("SHEETS", {})
        self._sheets_config = SheetsConfig(
            spreadsheet_id=sheets_secrets.get("SPREADSHEET_ID", ""),
            range=sheets_secrets.get("RANGE", "Sheet1!A:Z"),
            api_key=sheets_secrets.get("API_KEY"),
            prior_year_range=sheets_secrets.get("PRIOR_YEAR_RANGE"),
        )

        logger.info("☁️ Running in STREAMLIT CLOUD")

    def _load_local_config(self):
        """Load configuration from local .env file"""
        env_paths = [
            Path.cwd() / ".env",
            Path(__file__).parent.parent / ".env",
        ]

        for env_path in env_paths:
            if env_path.exists():
                load_dotenv(env_path)
                logger.info(f"Loaded .env from: {env_path}")
                break

        self._sheets_config = SheetsConfig(
            spreadsheet_id=os.getenv("SHEETS_SPREADSHEET_ID", ""),
            range=os.getenv("SHEETS_RANGE", "Sheet1!A:Z"),
            api_key=os.getenv("SHEETS_API_KEY") or None,
            prior_year_range=os.getenv("SHEETS_PRIOR_YEAR_RANGE") or None,
        )

        logger.info("💻 Running in LOCAL environment")

    def _load_app_config(self):
        """Load application-specific settings"""
        self._app_config = {
            # Rotation
            "ROTATION_INTERVAL_SECONDS": float(os.getenv("ROTATION_INTERVAL_SECONDS", "5")),

            # Date range picker
            "DEFAULT_RANGE_DAYS": int(os.getenv("DEFAULT_RANGE_DAYS", "60")),

            # Spreadsheet transport
            "SHEETS_TIMEOUT_SECONDS": float(os.getenv("SHEETS_TIMEOUT_SECONDS", "15")),
            "SHEETS_MAX_RETRIES": int(os.getenv("SHEETS_MAX_RETRIES", "3")),

            # Account inference for uploaded files
            "ITEM_PREFIX_ACCOUNTS": _parse_prefix_table(os.getenv("ITEM_PREFIX_ACCOUNTS")),

            # Feature flags
            "ENABLE_AUTO_CONNECT": os.getenv("ENABLE_AUTO_CONNECT", "true").lower() == "true",
            "ENABLE_DEBUG_MODE": os.getenv("ENABLE_DEBUG_MODE", "false").lower() == "true",
        }

    def _log_config_status(self):
        """Log configuration status"""
        sheets = self._sheets_config
        logger.info(f"✅ Google Sheets: {'Configured' if sheets.is_configured() else 'Not configured'}")
        logger.info(f"✅ Prior-year range: {sheets.prior_year_range or 'Not configured'}")
        prefixes = self._app_config.get("ITEM_PREFIX_ACCOUNTS", {})
        logger.info(f"✅ Item prefixes: {len(prefixes)} configured")

    # ==================== PUBLIC GETTERS ====================

    def get_sheets_config(self) -> SheetsConfig:
        """Get a copy of the spreadsheet connection settings"""
        return SheetsConfig(**self._sheets_config.to_dict())

    def get_app_setting(self, key: str, default: Any = None) -> Any:
        """Get application setting with default"""
        return self._app_config.get(key, default)

    def is_feature_enabled(self, feature: str) -> bool:
        """Check if feature is enabled"""
        key = f"ENABLE_{feature.upper()}"
        return self._app_config.get(key, True)

    @property
    def app_config(self) -> Dict[str, Any]:
        return self._app_config.copy()


# ==================== SINGLETON INSTANCE ====================

config = Config()

__all__ = [
    'config',
    'Config',
    'SheetsConfig',
]
