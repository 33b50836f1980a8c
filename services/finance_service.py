# esquadria/services/finance_service.py

import logging
from dataclasses import dataclass
from datetime import date
from typing import Any, Dict, List, Mapping, Tuple

import pandas as pd

from data_integrator import RecordStore, EXPENSES_TABLE
from domain.errors import FieldValidationError, NotAuthenticatedError, PersistenceError
from domain.models import ORDER_CANCELLED, Expense, Order, SessionContext
from services.pricing import to_number
from utils.formatting import parse_timestamp

logger = logging.getLogger(__name__)


@dataclass
class FinanceSummary:
    receivable: float  # unpaid, not cancelled orders
    received: float  # paid orders
    payable: float  # registered expenses
    balance: float  # received - payable


def validate_expense(form: Mapping[str, Any]) -> Dict[str, str]:
    errors: Dict[str, str] = {}

    if not str(form.get("descricao") or "").strip():
        errors["descricao"] = "Descrição é obrigatória"

    if to_number(form.get("valor")) <= 0:
        errors["valor"] = "Valor deve ser maior que zero"

    raw_date = form.get("data")
    if isinstance(raw_date, date):
        pass
    elif not raw_date:
        errors["data"] = "Data é obrigatória"
    else:
        try:
            date.fromisoformat(str(raw_date))
        except ValueError:
            errors["data"] = "Data inválida"

    return errors


def add_expense(store: RecordStore, session: SessionContext, form: Mapping[str, Any]) -> Expense:
    if session is None:
        raise NotAuthenticatedError("Sessão expirada, faça login novamente")

    errors = validate_expense(form)
    if errors:
        raise FieldValidationError(errors)

    raw_date = form["data"]
    expense = Expense(
        descricao=str(form["descricao"]).strip(),
        valor=round(to_number(form["valor"]), 2),
        data=raw_date.isoformat() if isinstance(raw_date, date) else str(raw_date),
        created_by=session.user_id,
    )

    ok, msg, row = store.insert(EXPENSES_TABLE, expense.to_record())
    if not ok:
        logger.error("Inserting expense failed: %s", msg)
        raise PersistenceError(f"Erro ao cadastrar despesa: {msg}")

    logger.info("Added expense %r of %.2f", expense.descricao, expense.valor)
    return Expense.from_record(row) if row else expense


def list_expenses(store: RecordStore) -> Tuple[bool, str, List[Expense]]:
    ok, msg, rows = store.select(EXPENSES_TABLE, order_by="data", desc=True)
    if not ok:
        return False, msg, []
    return True, msg, [Expense.from_record(row) for row in rows]


def delete_expense(store: RecordStore, expense_id: Any) -> None:
    ok, msg, _ = store.delete(EXPENSES_TABLE, expense_id)
    if not ok:
        logger.error("Deleting expense %s failed: %s", expense_id, msg)
        raise PersistenceError(f"Erro ao excluir despesa: {msg}")


def finance_summary(orders: List[Order], expenses: List[Expense]) -> FinanceSummary:
    active = [o for o in orders if o.status != ORDER_CANCELLED]

    receivable = sum(o.total_price for o in active if not o.paid)
    received = sum(o.total_price for o in active if o.paid)
    payable = sum(e.valor for e in expenses)

    return FinanceSummary(
        receivable=round(receivable, 2),
        received=round(received, 2),
        payable=round(payable, 2),
        balance=round(received - payable, 2),
    )


def monthly_cash_flow(orders: List[Order], expenses: List[Expense]) -> pd.DataFrame:
    """
    Paid order revenue vs. expenses per calendar month.

    Columns: month ("YYYY-MM"), receitas, despesas; months sorted ascending.
    Orders count in the month they were created, expenses in their `data`.
    """
    income_rows = []
    for order in orders:
        if not order.paid or order.status == ORDER_CANCELLED:
            continue
        ts = parse_timestamp(order.created_at)
        if ts is None:
            continue
        income_rows.append({"month": ts.strftime("%Y-%m"), "receitas": order.total_price})

    expense_rows = []
    for expense in expenses:
        ts = parse_timestamp(expense.data)
        if ts is None:
            continue
        expense_rows.append({"month": ts.strftime("%Y-%m"), "despesas": expense.valor})

    income = pd.DataFrame(income_rows, columns=["month", "receitas"]).groupby("month")["receitas"].sum()
    spend = pd.DataFrame(expense_rows, columns=["month", "despesas"]).groupby("month")["despesas"].sum()

    df = pd.concat([income, spend], axis=1).fillna(0.0).astype(float).sort_index()
    df.index.name = "month"
    return df.reset_index()
