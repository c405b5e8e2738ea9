# app.py
"""
Sales Dashboard - Main Entry Point

Data source panel: connect Google Sheets, upload a CSV, or fall back to
sample data. The rotating dashboard lives in pages/1_📊_Sales_Dashboard.py.

Version: 1.0.0
"""

import streamlit as st
import logging

from salesboard.config import config
from salesboard.sheets_client import extract_spreadsheet_id
from salesboard.sources import connect_google_sheets, apply_uploaded_file
from salesboard.sales_dashboard.constants import STATUS_CONNECTED, UPLOAD_COLUMNS
from salesboard.sales_dashboard.fragments import get_dashboard_state, render_source_status

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

# ==================== PAGE CONFIGURATION ====================

APP_NAME = "Sales Dashboard"
APP_ICON = "📦"
APP_VERSION = "1.0.0"

st.set_page_config(
    page_title=APP_NAME,
    page_icon=APP_ICON,
    layout="wide",
    initial_sidebar_state="expanded"
)

# ==================== CUSTOM CSS ====================

st.markdown("""
<style>
    .main-header {
        font-size: 2.5rem;
        font-weight: bold;
        margin-bottom: 0.5rem;
        color: #dc2626;
    }

    .sub-header {
        font-size: 1.1rem;
        color: #888;
        margin-bottom: 2rem;
    }

    .info-card {
        background: #1f2937;
        padding: 1.5rem;
        border-radius: 0.5rem;
        border-left: 4px solid #dc2626;
        margin-bottom: 1rem;
    }

    .footer {
        text-align: center;
        color: #888;
        padding: 1rem;
        margin-top: 3rem;
        border-top: 1px solid #333;
        font-size: 0.9rem;
    }
</style>
""", unsafe_allow_html=True)

# ==================== HELPER FUNCTIONS ====================

def auto_connect(state):
    """Connect the configured spreadsheet once per session."""
    if st.session_state.get('_sd_auto_connect_done'):
        return
    st.session_state['_sd_auto_connect_done'] = True

    sheets_config = config.get_sheets_config()
    if not (config.is_feature_enabled("AUTO_CONNECT") and sheets_config.is_configured()):
        return

    with st.spinner("Connecting to Google Sheets..."):
        applied, error = connect_google_sheets(
            state,
            sheets_config,
            timeout=config.get_app_setting("SHEETS_TIMEOUT_SECONDS", 15),
            max_retries=config.get_app_setting("SHEETS_MAX_RETRIES", 3),
        )
    if error:
        logger.warning(f"Auto-connect failed: {error}")


def show_sheets_panel(state):
    """Google Sheets connection form"""
    defaults = config.get_sheets_config()

    with st.form("sheets_form", clear_on_submit=False):
        st.markdown("#### 📗 Connect Google Sheets")

        sheet_url = st.text_input(
            "Spreadsheet URL or ID",
            value=defaults.spreadsheet_id,
            placeholder="https://docs.google.com/spreadsheets/d/...",
        )
        sheet_range = st.text_input("Range", value=defaults.range)
        prior_year_range = st.text_input(
            "Prior-year range (optional)",
            value=defaults.prior_year_range or "",
            help="Sheet range holding last year's orders, used for YoY comparison",
        )
        api_key = st.text_input("API Key", value=defaults.api_key or "", type="password")

        submit = st.form_submit_button(
            "🔗 Connect" if state.connection_status != STATUS_CONNECTED else "🔄 Reconnect",
            type="primary",
            use_container_width=True,
        )

        if submit:
            if not sheet_url or not api_key:
                st.warning("Please fill in all required fields")
                return

            defaults.spreadsheet_id = extract_spreadsheet_id(sheet_url)
            defaults.range = sheet_range or defaults.range
            defaults.prior_year_range = prior_year_range or None
            defaults.api_key = api_key

            with st.spinner("Connecting..."):
                applied, error = connect_google_sheets(
                    state,
                    defaults,
                    timeout=config.get_app_setting("SHEETS_TIMEOUT_SECONDS", 15),
                    max_retries=config.get_app_setting("SHEETS_MAX_RETRIES", 3),
                )

            if error:
                st.error(f"Failed to connect to Google Sheets: {error}")
            elif applied:
                st.success(f"✅ Connected: {state.record_count:,} records")

    with st.expander("ℹ️ How to get an API key"):
        st.info("""
        - Create a project in Google Cloud Console and enable the Sheets API
        - Create an API key under Credentials
        - Share the spreadsheet as "Anyone with the link can view"
        """)


def show_upload_panel(state):
    """CSV upload"""
    st.markdown("#### 📄 Upload Sales Data")
    st.caption("CSV columns: " + ", ".join(UPLOAD_COLUMNS))

    uploaded = st.file_uploader("CSV file", type=["csv"], key="sd_upload")
    if uploaded is not None:
        file_token = (uploaded.name, uploaded.size)
        if st.session_state.get('_sd_last_upload') != file_token:
            st.session_state['_sd_last_upload'] = file_token
            applied, error = apply_uploaded_file(
                state,
                uploaded.getvalue(),
                prefixes=config.get_app_setting("ITEM_PREFIX_ACCOUNTS", {}),
            )
            if error:
                st.error(error)
            elif applied:
                st.success(f"✅ Data uploaded: {state.record_count:,} records")

    st.caption("• Date format: YYYY-MM-DD  • Amount should be numeric values")


def show_main_app():
    state = get_dashboard_state()
    auto_connect(state)

    st.markdown(f'<p class="main-header">{APP_ICON} {APP_NAME}</p>', unsafe_allow_html=True)
    st.markdown('<p class="sub-header">Rotating per-account sales summaries</p>', unsafe_allow_html=True)

    # Sidebar
    with st.sidebar:
        st.markdown("### ⚙️ Data Source")
        render_source_status(state)
        if not state.is_using_sample:
            if st.button("↩️ Use Sample Data", use_container_width=True):
                state.use_sample_data()
                st.session_state.pop('_sd_last_upload', None)
                st.rerun()

        if config.is_feature_enabled("DEBUG_MODE"):
            with st.expander("🐛 Debug"):
                st.json({
                    "source_mode": state.source_mode,
                    "generation": state.generation,
                    "records": state.record_count,
                    "prior_year_records": len(state.prior_year_records),
                    "loaded_at": str(state.loaded_at) if state.loaded_at else None,
                    "sheets": {
                        k: v for k, v in config.get_sheets_config().to_dict().items()
                        if k != 'api_key'
                    },
                })

    col1, col2 = st.columns(2)
    with col1:
        show_sheets_panel(state)
    with col2:
        show_upload_panel(state)

    st.markdown("""
    <div class="info-card">
        <strong>📊 Sales Dashboard</strong><br>
        <span style="color: #aaa;">Open the dashboard from the sidebar menu to see rotating daily, weekly and monthly summaries per account.</span>
    </div>
    """, unsafe_allow_html=True)

    # Footer
    st.markdown(f"""
    <div class="footer">
        <strong>{APP_NAME}</strong> v{APP_VERSION}
    </div>
    """, unsafe_allow_html=True)


# ==================== MAIN ====================

def main():
    """Main application entry point"""
    show_main_app()


if __name__ == "__main__":
    main()
