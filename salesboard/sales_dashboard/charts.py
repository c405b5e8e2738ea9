# salesboard/sales_dashboard/charts.py
"""
Altair chart builders for the Sales Dashboard.

VERSION: 1.0.0
"""

import logging
from typing import List

import altair as alt
import pandas as pd

from .constants import CHART_HEIGHT, COLORS
from .models import AccountSummary

logger = logging.getLogger(__name__)


def empty_chart(message: str = "No data available") -> alt.Chart:
    """Return an empty chart with a message."""
    return alt.Chart(pd.DataFrame({'text': [message]})).mark_text(
        fontSize=14, color=COLORS['neutral']
    ).encode(
        text='text:N'
    ).properties(width='container', height=100)


# =============================================================================
# TREND CHART - Amount (left axis) + Quantity (right axis)
# =============================================================================

def build_period_trend_chart(
    trend_df: pd.DataFrame,
    period_label: str = "Period",
) -> alt.Chart:
    """
    Sales amount and quantity per period key, ascending.

    Args:
        trend_df: Columns period, amount, quantity (see period_grouper.bucket_frame)
        period_label: x-axis title
    """
    if trend_df.empty:
        return empty_chart("No data to display for this period.")

    base = alt.Chart(trend_df).encode(
        x=alt.X('period:N', sort=None, title=period_label, axis=alt.Axis(labelAngle=-45)),
    )

    amount_area = base.mark_area(
        line={'color': COLORS['amount']},
        color=COLORS['amount'],
        opacity=0.2,
        interpolate='monotone',
    ).encode(
        y=alt.Y('amount:Q', title='Sales ($)', axis=alt.Axis(format='~s', titleColor=COLORS['amount'])),
        tooltip=[
            alt.Tooltip('period:N', title=period_label),
            alt.Tooltip('amount:Q', title='Sales', format='$,.2f'),
            alt.Tooltip('quantity:Q', title='Quantity', format=',d'),
            alt.Tooltip('count:Q', title='Orders', format=',d'),
        ]
    )

    quantity_line = base.mark_line(
        color=COLORS['quantity'],
        strokeWidth=2,
        interpolate='monotone',
        point=alt.OverlayMarkDef(color=COLORS['quantity'], size=40),
    ).encode(
        y=alt.Y('quantity:Q', title='Quantity', axis=alt.Axis(format='d', titleColor=COLORS['quantity'])),
    )

    return alt.layer(amount_area, quantity_line).resolve_scale(
        y='independent'
    ).properties(width='container', height=CHART_HEIGHT)


# =============================================================================
# ACCOUNT COMPARISON BAR
# =============================================================================

def build_account_sales_chart(summaries: List[AccountSummary]) -> alt.Chart:
    """Horizontal bars of total sales per account over the selected range."""
    if not summaries:
        return empty_chart("No accounts")

    df = pd.DataFrame([
        {
            'account': s.account_name,
            'amount': s.total_amount,
            'quantity': s.total_quantity,
            'change': s.sales_change,
            'trend': 'up' if s.sales_change >= 0 else 'down',
        }
        for s in summaries
    ])

    color_scale = alt.Scale(
        domain=['up', 'down'],
        range=[COLORS['positive'], COLORS['negative']]
    )

    return alt.Chart(df).mark_bar(
        cornerRadiusTopRight=2, cornerRadiusBottomRight=2
    ).encode(
        y=alt.Y('account:N', sort='-x', title=None),
        x=alt.X('amount:Q', title='Sales ($)', axis=alt.Axis(format='~s')),
        color=alt.Color('trend:N', scale=color_scale, legend=None),
        tooltip=[
            alt.Tooltip('account:N', title='Account'),
            alt.Tooltip('amount:Q', title='Sales', format='$,.2f'),
            alt.Tooltip('quantity:Q', title='Quantity', format=',d'),
            alt.Tooltip('change:Q', title='Change %', format='+.1f'),
        ]
    ).properties(width='container', height=max(120, 28 * len(df)))
