# esquadria/services/order_service.py

import logging
from typing import Any, Dict, List, Tuple

from data_integrator import RecordStore, ORDERS_TABLE
from domain.errors import FieldValidationError, PersistenceError
from domain.models import (
    ORDER_DELIVERED,
    ORDER_STATUSES,
    ORDER_TERMINAL_STATUSES,
    Order,
)

logger = logging.getLogger(__name__)

# Columns the order screen may change
EDITABLE_ORDER_FIELDS = ("customer_name", "product", "quantity", "total_price", "paid", "status")


def is_terminal(order: Order) -> bool:
    return order.status in ORDER_TERMINAL_STATUSES


def list_orders(store: RecordStore) -> Tuple[bool, str, List[Order]]:
    """All persisted orders, newest first."""
    ok, msg, rows = store.select(ORDERS_TABLE, order_by="created_at", desc=True)
    if not ok:
        return False, msg, []
    return True, msg, [Order.from_record(row) for row in rows]


def list_history(store: RecordStore) -> Tuple[bool, str, List[Order]]:
    """Delivered orders, newest first."""
    ok, msg, rows = store.select(
        ORDERS_TABLE,
        filters={"status": ORDER_DELIVERED},
        order_by="created_at",
        desc=True,
    )
    if not ok:
        return False, msg, []
    return True, msg, [Order.from_record(row) for row in rows]


def validate_order_changes(changes: Dict[str, Any]) -> Dict[str, str]:
    """
    Check edited order fields. Any status may follow any other; only the
    value itself must be a known status.
    """
    errors: Dict[str, str] = {}

    unknown = [k for k in changes if k not in EDITABLE_ORDER_FIELDS]
    for key in unknown:
        errors[key] = "Campo não editável"

    if "status" in changes and changes["status"] not in ORDER_STATUSES:
        errors["status"] = f"Status inválido: {changes['status']}"

    if "quantity" in changes:
        qty = changes["quantity"]
        if isinstance(qty, bool) or not isinstance(qty, int) or qty <= 0:
            errors["quantity"] = "Quantidade deve ser um inteiro positivo"

    if "total_price" in changes:
        price = changes["total_price"]
        if isinstance(price, bool) or not isinstance(price, (int, float)) or price < 0:
            errors["total_price"] = "Valor total não pode ser negativo"

    if "paid" in changes and not isinstance(changes["paid"], bool):
        errors["paid"] = "Pago deve ser verdadeiro ou falso"

    if "customer_name" in changes and not str(changes["customer_name"] or "").strip():
        errors["customer_name"] = "Cliente obrigatório"

    return errors


def update_order(store: RecordStore, order_id: Any, changes: Dict[str, Any]) -> Order:
    """
    Apply `changes` to an order and return the stored result.

    Raises FieldValidationError for invalid values and PersistenceError
    when the store rejects the write.
    """
    errors = validate_order_changes(changes)
    if errors:
        raise FieldValidationError(errors)

    ok, msg, row = store.update(ORDERS_TABLE, order_id, dict(changes))
    if not ok:
        logger.error("Updating order %s failed: %s", order_id, msg)
        raise PersistenceError(f"Erro ao atualizar pedido: {msg}")

    order = Order.from_record(row)
    logger.info("Updated order %s (status=%s, paid=%s)", order.id, order.status, order.paid)
    return order


def delete_order(store: RecordStore, order_id: Any) -> None:
    ok, msg, _ = store.delete(ORDERS_TABLE, order_id)
    if not ok:
        logger.error("Deleting order %s failed: %s", order_id, msg)
        raise PersistenceError(f"Erro ao excluir pedido: {msg}")
    logger.info("Deleted order %s", order_id)
