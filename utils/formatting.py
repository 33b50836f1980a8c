# esquadria/utils/formatting.py

from datetime import date
from typing import Any, Dict, Iterable, Optional

import pandas as pd

from domain.models import PRODUCT_LABELS
from supabase_client import TIMEZONE


def format_brl(n: float) -> str:
    """
    Format a number as Brazilian reais.
    Example: 1234567.5 -> "R$ 1.234.567,50"
    """
    text = f"{n:,.2f}"  # 1,234,567.50
    text = text.replace(",", "_").replace(".", ",").replace("_", ".")
    return f"R$ {text}"


def parse_timestamp(value: Any, tz: str = TIMEZONE) -> Optional[pd.Timestamp]:
    """
    Timestamp/date from the store in the shop's local time zone, or None.

    Values with an offset (timestamptz) are converted; plain dates and naive
    values are taken as already local.
    """
    if value is None or value == "":
        return None
    ts = pd.to_datetime(value, errors="coerce")
    if pd.isna(ts):
        return None
    if ts.tzinfo is None:
        return ts.tz_localize(tz)
    return ts.tz_convert(tz)


def local_today(tz: str = TIMEZONE) -> date:
    return pd.Timestamp.now(tz=tz).date()


def format_date(value: Any) -> str:
    """Store timestamp as dd/mm/yyyy, "-" when missing."""
    ts = parse_timestamp(value)
    return ts.strftime("%d/%m/%Y") if ts is not None else "-"


# -------------------------------------------------------------------
# Selectbox helpers: options are record ids, labels are display only
# -------------------------------------------------------------------

def index_by_id(records: Iterable[Any]) -> Dict[Any, Any]:
    """Records keyed by id, in their original order."""
    return {r.id: r for r in records}


def quote_label(quote) -> str:
    return f"{quote.customer_name} - {PRODUCT_LABELS.get(quote.type, quote.type)} ({format_date(quote.created_at)})"


def order_label(order) -> str:
    return f"{order.customer_name} - {PRODUCT_LABELS.get(order.product, order.product)} ({format_date(order.created_at)})"


def customer_label(customer) -> str:
    return f"{customer.nome} - {customer.telefone}"


def expense_label(expense) -> str:
    return f"{expense.descricao} - {format_brl(expense.valor)} ({format_date(expense.data)})"
