# tests/test_order_service.py
import pytest

from domain.errors import FieldValidationError, PersistenceError
from domain.models import Order
from services.order_service import (
    delete_order,
    is_terminal,
    list_history,
    list_orders,
    update_order,
    validate_order_changes,
)


def _seed(store, **overrides):
    row = {
        "customer_name": "João Silva",
        "product": "janela",
        "quantity": 1,
        "total_price": 1320.0,
        "paid": False,
        "status": "na_fila",
    }
    row.update(overrides)
    return store.add("orders", **row)


def test_list_orders_newest_first(store):
    _seed(store, customer_name="first")
    _seed(store, customer_name="second")

    ok, _, orders = list_orders(store)

    assert ok
    assert [o.customer_name for o in orders] == ["second", "first"]


def test_list_orders_failure(store):
    store.failures[("select", "orders")] = "boom"
    ok, msg, orders = list_orders(store)
    assert not ok
    assert msg == "boom"
    assert orders == []


def test_any_status_can_follow_any_other(store):
    row = _seed(store, status="entregue")

    order = update_order(store, row["id"], {"status": "na_fila"})
    assert order.status == "na_fila"

    order = update_order(store, row["id"], {"status": "cancelado", "paid": True})
    assert order.status == "cancelado"
    assert order.paid is True


def test_update_rejects_invalid_values(store):
    row = _seed(store)
    with pytest.raises(FieldValidationError) as exc:
        update_order(store, row["id"], {"status": "lost", "quantity": 0, "total_price": -1, "paid": "yes"})

    assert set(exc.value.errors) == {"status", "quantity", "total_price", "paid"}
    assert ("update", "orders") not in store.calls


def test_update_rejects_unknown_fields():
    errors = validate_order_changes({"created_by": "someone-else"})
    assert "created_by" in errors


def test_update_failure_raises(store):
    row = _seed(store)
    store.failures[("update", "orders")] = "denied"
    with pytest.raises(PersistenceError):
        update_order(store, row["id"], {"paid": True})


def test_delete_order(store):
    row = _seed(store)
    delete_order(store, row["id"])
    assert store.rows("orders") == []


def test_delete_order_failure(store):
    store.failures[("delete", "orders")] = "denied"
    with pytest.raises(PersistenceError):
        delete_order(store, "1")


def test_history_only_has_delivered(store):
    _seed(store, customer_name="a", status="entregue")
    _seed(store, customer_name="b", status="pronto")

    ok, _, orders = list_history(store)

    assert ok
    assert [o.customer_name for o in orders] == ["a"]


def test_is_terminal():
    assert is_terminal(Order(customer_name="x", product="janela", total_price=1, status="entregue"))
    assert is_terminal(Order(customer_name="x", product="janela", total_price=1, status="cancelado"))
    assert not is_terminal(Order(customer_name="x", product="janela", total_price=1, status="pronto"))
