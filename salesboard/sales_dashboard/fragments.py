# salesboard/sales_dashboard/fragments.py
"""
Streamlit render helpers for the Sales Dashboard page.

Rendering only: every number shown here is computed by the core
(normalizer, period_grouper, summary_calculator, account_summary).

VERSION: 1.0.0
"""

import logging
from typing import List, Optional

import streamlit as st

from .account_summary import summaries_to_frame
from .charts import build_account_sales_chart, build_period_trend_chart
from .constants import (
    CACHE_KEY_ROTATION,
    CACHE_KEY_STATE,
    COLORS,
    CURRENCY_FORMAT,
    GRANULARITIES,
    GRANULARITY_LABELS,
    PERCENT_FORMAT,
    STATUS_CONNECTED,
    STATUS_ERROR,
)
from .data_loader import DashboardState
from .models import AccountSummary, PeriodComparison, YearOverYearSummary
from .period_grouper import GroupedBuckets, bucket_frame
from .rotation import RotationController

logger = logging.getLogger(__name__)


def format_currency(value: float) -> str:
    return CURRENCY_FORMAT.format(value)


def format_change(value: float) -> str:
    return PERCENT_FORMAT.format(value)


def _change_color(value: float) -> str:
    if value > 0:
        return COLORS['positive']
    if value < 0:
        return COLORS['negative']
    return COLORS['neutral']


# =============================================================================
# SESSION STATE
# =============================================================================

def get_dashboard_state() -> DashboardState:
    """DashboardState for this browser session (sample data on first use)."""
    if CACHE_KEY_STATE not in st.session_state:
        st.session_state[CACHE_KEY_STATE] = DashboardState()
    return st.session_state[CACHE_KEY_STATE]


def get_rotation(interval: float) -> RotationController:
    """RotationController for this browser session."""
    if CACHE_KEY_ROTATION not in st.session_state:
        st.session_state[CACHE_KEY_ROTATION] = RotationController(interval=interval)
    return st.session_state[CACHE_KEY_ROTATION]


# =============================================================================
# DATA SOURCE STATUS
# =============================================================================

def render_source_status(state: DashboardState):
    """Connection dot + active source label."""
    if state.connection_status == STATUS_CONNECTED:
        dot = "🟢"
    elif state.connection_status == STATUS_ERROR:
        dot = "🔴"
    else:
        dot = "⚪"
    st.caption(f"{dot} Data Source: {state.source_label()}")
    if state.last_error:
        st.caption(f"⚠️ Last error: {state.last_error}")


# =============================================================================
# SIDEBAR - ROTATION NAVIGATION & ACCOUNT LIST
# =============================================================================

def render_rotation_nav(rotation: RotationController):
    """Prev / position / Next row. Buttons clamp at the ends."""
    col_prev, col_pos, col_next = st.columns([1, 2, 1])
    with col_prev:
        st.button(
            "◀", key="sd_prev", disabled=rotation.is_first,
            on_click=rotation.prev, use_container_width=True,
        )
    with col_pos:
        current = rotation.account_index + 1 if rotation.account_count else 0
        st.markdown(
            f"<div style='text-align:center;padding-top:0.4rem'>{current} / {rotation.account_count}</div>",
            unsafe_allow_html=True,
        )
    with col_next:
        st.button(
            "▶", key="sd_next", disabled=rotation.is_last,
            on_click=rotation.next, use_container_width=True,
        )


def render_account_card(account: Optional[AccountSummary]):
    """Summary card of the account currently selected by the rotation."""
    if account is None:
        st.info("No accounts in the current data source")
        return

    with st.container(border=True):
        st.markdown(f"**{account.account_name}**")
        st.caption(f"ID: {account.account_id or '-'}")

        col1, col2 = st.columns(2)
        with col1:
            st.metric(
                label="Total Amount",
                value=format_currency(account.total_amount),
                delta=format_change(account.sales_change),
                help="Sales in the selected date range vs the 30 days before it"
            )
        with col2:
            st.metric(label="Total Quantity", value=f"{account.total_quantity:,}")

        st.caption(f"{account.item_count:,} items")


def render_account_list(
    summaries: List[AccountSummary],
    rotation: RotationController,
):
    """All accounts; clicking one jumps the rotation to it."""
    st.markdown("#### All Accounts")

    for idx, account in enumerate(summaries):
        is_selected = idx == rotation.account_index
        label = (
            f"{'▸ ' if is_selected else ''}{account.account_name}  "
            f"({format_change(account.sales_change)})"
        )
        st.button(
            label,
            key=f"sd_account_{idx}",
            type="primary" if is_selected else "secondary",
            on_click=rotation.select_account,
            args=(idx,),
            help=f"{format_currency(account.total_amount)} • {account.total_quantity:,} items",
            use_container_width=True,
        )


# =============================================================================
# MAIN AREA
# =============================================================================

def render_mode_toggle(rotation: RotationController):
    cols = st.columns(len(GRANULARITIES))
    for col, mode in zip(cols, GRANULARITIES):
        with col:
            st.button(
                mode.capitalize(),
                key=f"sd_mode_{mode}",
                type="primary" if mode == rotation.mode else "secondary",
                on_click=rotation.select_mode,
                args=(mode,),
                use_container_width=True,
            )


def render_period_boxes(comparison: PeriodComparison, granularity: str):
    """Previous | Current | Comparison boxes for the latest two period keys."""
    label = GRANULARITY_LABELS[granularity]
    col_prev, col_curr, col_cmp = st.columns(3)

    with col_prev:
        with st.container(border=True):
            st.markdown("**Previous**")
            st.markdown(f"### {format_currency(comparison.previous.amount)}")
            st.caption(f"{comparison.previous.quantity:,} items")
            st.caption(
                f"{label} ({comparison.previous_key})" if comparison.previous_key
                else f"No previous {label.lower()} data"
            )

    with col_curr:
        with st.container(border=True):
            st.markdown("**Current**")
            st.markdown(f"### {format_currency(comparison.current.amount)}")
            st.caption(f"{comparison.current.quantity:,} items")
            st.caption(
                f"{label} ({comparison.current_key})" if comparison.current_key
                else f"No current {label.lower()} data"
            )

    with col_cmp:
        with st.container(border=True):
            st.markdown("**Comparison**")
            for name, value in (("Sales", comparison.sales_change), ("Qty", comparison.quantity_change)):
                st.markdown(
                    f"<span style='color:{_change_color(value)};font-size:1.3rem;font-weight:600'>"
                    f"{name}: {format_change(value)}</span>",
                    unsafe_allow_html=True,
                )
            st.caption("vs Previous Period")


def render_year_over_year(yoy: YearOverYearSummary):
    """Current window vs the same window last year."""
    with st.container(border=True):
        st.markdown("**📅 Year over Year**")
        col1, col2, col3 = st.columns(3)
        with col1:
            st.metric(
                label="Current",
                value=format_currency(yoy.current.amount),
                help=f"{yoy.current.range_label} • {yoy.current.quantity:,} items",
            )
            st.caption(yoy.current.range_label)
        with col2:
            st.metric(
                label="Last Year",
                value=format_currency(yoy.prior_year.amount),
                help=f"{yoy.prior_year.range_label} • {yoy.prior_year.quantity:,} items",
            )
            st.caption(yoy.prior_year.range_label)
        with col3:
            st.metric(label="Sales YoY", value=format_change(yoy.amount_change))
            st.metric(label="Qty YoY", value=format_change(yoy.quantity_change))

        if not yoy.prior_year.has_data:
            st.caption("No prior-year data for this window")


def render_trend_section(grouped: GroupedBuckets, account_name: str, granularity: str):
    trend_df = bucket_frame(grouped, account_name)
    if trend_df.empty:
        st.info("No data to display for this period.")
        return
    chart = build_period_trend_chart(trend_df, period_label=GRANULARITY_LABELS[granularity])
    st.altair_chart(chart, use_container_width=True)


def render_account_overview(summaries: List[AccountSummary]):
    with st.expander("📊 All accounts in range", expanded=False):
        st.altair_chart(build_account_sales_chart(summaries), use_container_width=True)
        st.dataframe(
            summaries_to_frame(summaries),
            hide_index=True,
            use_container_width=True,
            column_config={
                "Sales": st.column_config.NumberColumn(format="$%.2f"),
                "Change %": st.column_config.NumberColumn(format="%+.1f%%"),
            },
        )
