# tests/test_quote_service.py
import pytest

from domain.errors import (
    DuplicateSubmissionError,
    FieldValidationError,
    NotAuthenticatedError,
    PersistenceError,
)
from domain.models import Quote
from services.quote_service import (
    QuoteService,
    build_quote,
    empty_quote_form,
    quote_to_form,
    recalculate,
    validate_quote_form,
)


@pytest.fixture
def service(store, session):
    return QuoteService(store, session)


def test_create_pending_quote(service, store, quote_form):
    result = service.submit_quote(quote_form)

    saved = store.rows("quotes")
    assert len(saved) == 1
    assert saved[0]["created_by"] == "user-1"
    assert saved[0]["status"] == "pending"
    assert saved[0]["total_price"] == 1320
    assert result.order is None
    assert store.rows("orders") == []
    assert [q.id for q in result.quotes] == [saved[0]["id"]]


def test_client_supplied_total_is_ignored(service, store, quote_form):
    quote_form["total_price"] = 1
    result = service.submit_quote(quote_form)
    assert result.quote.total_price == 1320
    assert store.rows("quotes")[0]["total_price"] == 1320


def test_empty_customer_name_fails_without_writing(service, store, quote_form):
    quote_form["customer_name"] = "   "
    with pytest.raises(FieldValidationError) as exc:
        service.submit_quote(quote_form)

    assert "customer_name" in exc.value.errors
    assert ("insert", "quotes") not in store.calls
    assert ("update", "quotes") not in store.calls


def test_validation_reports_every_field(service, store):
    form = empty_quote_form()
    with pytest.raises(FieldValidationError) as exc:
        service.submit_quote(form)

    assert set(exc.value.errors) == {"customer_name", "type", "height", "width", "total_price"}
    assert store.calls == []


def test_validation_rejects_non_positive_dimensions(quote_form):
    quote_form["height"] = "0"
    quote_form["width"] = "-10"
    errors = validate_quote_form(quote_form, 100.0)
    assert set(errors) == {"height", "width"}


def test_validation_checks_frame_width_and_status(quote_form):
    quote_form["frame_width"] = "abc"
    quote_form["status"] = "archived"
    errors = validate_quote_form(quote_form, 100.0)
    assert set(errors) == {"frame_width", "status"}


def test_approval_creates_exactly_one_order(service, store, quote_form):
    quote_form["status"] = "approved"
    result = service.submit_quote(quote_form)

    orders = store.rows("orders")
    assert len(orders) == 1
    order = orders[0]
    assert order["total_price"] == 1320
    assert order["status"] == "na_fila"
    assert order["paid"] is False
    assert order["quantity"] == 1
    assert order["product"] == "porta_completa"
    assert order["created_by"] == "user-1"
    assert order["source_quote_id"] == result.quote.id
    assert result.order.id == order["id"]
    # approved quotes leave the open-quote list
    assert result.quotes == []


@pytest.mark.parametrize("status", ["pending", "rejected"])
def test_non_approved_creates_no_order(service, store, quote_form, status):
    quote_form["status"] = status
    service.submit_quote(quote_form)
    assert store.rows("orders") == []


def test_update_to_approved_creates_order(service, store, quote_form):
    created = service.submit_quote(quote_form).quote

    quote_form["status"] = "approved"
    quote_form["width"] = "80"
    result = service.submit_quote(quote_form, existing_quote_id=created.id)

    assert store.rows("quotes")[0]["status"] == "approved"
    assert len(store.rows("orders")) == 1
    # 480 base + 160 area + 120 installation
    assert result.order.total_price == 760


def test_reapproving_does_not_duplicate_order(service, store, quote_form):
    quote_form["status"] = "approved"
    created = service.submit_quote(quote_form).quote

    service.submit_quote(quote_form, existing_quote_id=created.id)

    assert len(store.rows("orders")) == 1


def test_quote_write_failure_aborts(service, store, quote_form):
    quote_form["status"] = "approved"
    store.failures[("insert", "quotes")] = "connection reset"

    with pytest.raises(PersistenceError):
        service.submit_quote(quote_form)

    assert store.rows("orders") == []
    assert ("insert", "orders") not in store.calls


def test_update_of_missing_quote_fails(service, quote_form):
    with pytest.raises(PersistenceError):
        service.submit_quote(quote_form, existing_quote_id="does-not-exist")


def test_order_write_failure_is_a_warning(service, store, quote_form):
    quote_form["status"] = "approved"
    store.failures[("insert", "orders")] = "permission denied"

    result = service.submit_quote(quote_form)

    assert store.rows("quotes")[0]["status"] == "approved"
    assert store.rows("orders") == []
    assert result.order is None
    assert any("permission denied" in w for w in result.warnings)


def test_refresh_failure_keeps_previous_list(service, store, quote_form):
    service.submit_quote(quote_form)
    previous = list(service.quotes)

    store.failures[("select", "quotes")] = "timeout"
    quote_form["customer_name"] = "Maria Santos"
    result = service.submit_quote(quote_form)

    assert result.quotes is None
    assert service.quotes == previous
    assert any("timeout" in w for w in result.warnings)
    assert len(store.rows("quotes")) == 2


def test_same_request_token_writes_once(service, store, quote_form):
    quote_form["status"] = "approved"
    first = service.submit_quote(quote_form, request_token="tok-1")
    second = service.submit_quote(quote_form, request_token="tok-1")

    assert second is first
    assert len(store.rows("quotes")) == 1
    assert len(store.rows("orders")) == 1


def test_only_last_submission_result_is_kept(service, store, quote_form):
    first = service.submit_quote(quote_form, request_token="tok-a")
    second = service.submit_quote(quote_form, request_token="tok-b")

    assert service._last_token == "tok-b"
    assert service._last_result is second
    assert service.submit_quote(quote_form, request_token="tok-b") is second
    assert first is not second
    assert len(store.rows("quotes")) == 2


def test_request_token_in_flight_is_rejected(service, quote_form):
    service._in_flight.add("tok-2")
    with pytest.raises(DuplicateSubmissionError):
        service.submit_quote(quote_form, request_token="tok-2")


def test_failed_submission_can_be_retried_with_same_token(service, store, quote_form):
    store.failures[("insert", "quotes")] = "offline"
    with pytest.raises(PersistenceError):
        service.submit_quote(quote_form, request_token="tok-3")

    del store.failures[("insert", "quotes")]
    service.submit_quote(quote_form, request_token="tok-3")
    assert len(store.rows("quotes")) == 1


def test_submit_requires_session(store, quote_form):
    with pytest.raises(NotAuthenticatedError):
        QuoteService(store, None).submit_quote(quote_form)


def test_delete_quote_keeps_orders(service, store, quote_form):
    quote_form["status"] = "approved"
    quote = service.submit_quote(quote_form).quote

    warnings = service.delete_quote(quote.id)

    assert warnings == []
    assert store.rows("quotes") == []
    assert len(store.rows("orders")) == 1


def test_delete_failure_raises(service, store):
    store.failures[("delete", "quotes")] = "locked"
    with pytest.raises(PersistenceError):
        service.delete_quote("1")


def test_refresh_excludes_approved_and_orders_newest_first(service, store):
    store.add("quotes", customer_name="A", type="janela", status="pending")
    store.add("quotes", customer_name="B", type="janela", status="approved")
    store.add("quotes", customer_name="C", type="janela", status="rejected")

    ok, _ = service.refresh_quotes()

    assert ok
    assert [q.customer_name for q in service.quotes] == ["C", "A"]


def test_list_approved_as_orders_projection(service, store):
    store.add("quotes", customer_name="A", type="janela", status="approved", total_price=1300)
    store.add("quotes", customer_name="B", type="janela", status="pending", total_price=1300)

    ok, _, projected = service.list_approved_as_orders()

    assert ok
    assert len(projected) == 1
    row = projected[0]
    assert row.customer_name == "A"
    assert row.product == "janela"
    assert row.status == "na_fila"
    assert row.quantity == 1
    assert row.paid is False
    assert store.rows("orders") == []


def test_build_quote_drops_fields_that_do_not_apply(quote_form):
    quote_form["type"] = "janela"
    quote_form["frame_width"] = "12"
    quote_form["lock_included"] = True
    quote = build_quote(quote_form, 1520.0)

    assert quote.frame_width is None
    assert quote.lock_included is False

    quote_form["type"] = "porta_completa"
    assert build_quote(quote_form, 1320.0).frame_width == 12.0


def test_recalculate_and_form_round_trip(quote_form):
    form = recalculate(quote_form)
    assert form["total_price"] == 1320

    form["type"] = ""
    assert recalculate(form)["total_price"] == 0

    quote = Quote(customer_name="X", type="janela", height=100, width=100, total_price=1300)
    assert quote_to_form(quote)["frame_width"] == ""
