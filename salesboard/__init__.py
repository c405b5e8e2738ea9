# salesboard/__init__.py
"""
Shared package for the Sales Dashboard Streamlit app

- config: Configuration management (local .env + Streamlit Cloud)
- sheets_client: Google Sheets values API client
- sales_dashboard: aggregation, comparison and rotation engine

Usage:
    from salesboard.config import config
    from salesboard.sheets_client import load_sheet_records
    from salesboard.sales_dashboard import DashboardState, RotationController
"""

__version__ = '1.0.0'
