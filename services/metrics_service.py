# esquadria/services/metrics_service.py

from dataclasses import dataclass
from datetime import date
from typing import List

import pandas as pd

from domain.models import ORDER_CANCELLED, ORDER_TERMINAL_STATUSES, QUOTE_PENDING, Order, Quote
from supabase_client import TIMEZONE
from utils.formatting import parse_timestamp


@dataclass
class DashboardMetrics:
    pending_quotes: int
    open_orders: int
    month_sales: float


def dashboard_metrics(quotes: List[Quote], orders: List[Order], today: date, tz: str = TIMEZONE) -> DashboardMetrics:
    """
    Figures for the home page cards.

    Month sales count every non-cancelled order created in `today`'s month,
    with creation times read in the `tz` time zone.
    """
    pending = sum(1 for q in quotes if q.status == QUOTE_PENDING)
    open_orders = sum(1 for o in orders if o.status not in ORDER_TERMINAL_STATUSES)

    month_sales = 0.0
    for order in orders:
        if order.status == ORDER_CANCELLED:
            continue
        ts = parse_timestamp(order.created_at, tz)
        if ts is not None and (ts.year, ts.month) == (today.year, today.month):
            month_sales += order.total_price

    return DashboardMetrics(
        pending_quotes=pending,
        open_orders=open_orders,
        month_sales=round(month_sales, 2),
    )


def weekly_sales(orders: List[Order], today: date, tz: str = TIMEZONE) -> pd.Series:
    """Sales totals for the 7 days ending on `today` (local days in `tz`), indexed by date."""
    days = [d.date() for d in pd.date_range(end=pd.Timestamp(today), periods=7, freq="D")]
    totals = {d: 0.0 for d in days}

    for order in orders:
        if order.status == ORDER_CANCELLED:
            continue
        ts = parse_timestamp(order.created_at, tz)
        if ts is None:
            continue
        day = ts.date()
        if day in totals:
            totals[day] += order.total_price

    return pd.Series(totals, name="vendas")
