# esquadria/services/quote_service.py

import logging
import math
from dataclasses import replace
from typing import Any, Dict, List, Mapping, Optional, Set, Tuple

from data_integrator import RecordStore, QUOTES_TABLE, ORDERS_TABLE
from domain.errors import (
    DuplicateSubmissionError,
    FieldValidationError,
    NotAuthenticatedError,
    PersistenceError,
)
from domain.models import (
    ORDER_QUEUED,
    PRODUCT_COMPLETE_DOOR,
    PRODUCT_DOOR_LEAF,
    PRODUCT_TYPES,
    QUOTE_APPROVED,
    QUOTE_PENDING,
    QUOTE_STATUSES,
    Order,
    Quote,
    QuoteOrderProjection,
    SessionContext,
    SubmitResult,
)
from services.pricing import calculate_total_price, to_number

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Form helpers
# ---------------------------------------------------------------------------

def empty_quote_form() -> Dict[str, Any]:
    return {
        "customer_name": "",
        "phone": "",
        "address": "",
        "type": "",
        "height": "",
        "width": "",
        "frame_width": "",
        "needs_installation": False,
        "lock_included": False,
        "hinge_included": False,
        "total_price": 0.0,
        "status": QUOTE_PENDING,
    }


def quote_to_form(quote: Quote) -> Dict[str, Any]:
    """Load a stored quote back into an editable form."""
    return {
        "customer_name": quote.customer_name,
        "phone": quote.phone,
        "address": quote.address,
        "type": quote.type,
        "height": quote.height,
        "width": quote.width,
        "frame_width": quote.frame_width if quote.frame_width is not None else "",
        "needs_installation": quote.needs_installation,
        "lock_included": quote.lock_included,
        "hinge_included": quote.hinge_included,
        "total_price": quote.total_price,
        "status": quote.status,
    }


def recalculate(form: Mapping[str, Any]) -> Dict[str, Any]:
    """
    Return a copy of `form` with `total_price` recomputed.
    Called on every field change; a cleared type gives 0.
    """
    updated = dict(form)
    updated["total_price"] = calculate_total_price(updated)
    return updated


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def _parse_positive(value: Any) -> Optional[float]:
    """Positive finite number from form input, else None."""
    if _is_blank(value) or isinstance(value, bool):
        return None
    if isinstance(value, str):
        value = value.strip().replace(",", ".")
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(number) or number <= 0:
        return None
    return number


def validate_quote_form(form: Mapping[str, Any], total_price: float) -> Dict[str, str]:
    """
    Check a quote form against the submission rules.

    Every violated field is reported, not only the first one.
    `total_price` must be the freshly recomputed price.
    """
    errors: Dict[str, str] = {}

    if _is_blank(form.get("customer_name")):
        errors["customer_name"] = "Cliente obrigatório"

    product_type = form.get("type") or ""
    if not product_type:
        errors["type"] = "Tipo obrigatório"
    elif product_type not in PRODUCT_TYPES:
        errors["type"] = f"Tipo inválido: {product_type}"

    for key, label in (("height", "Altura"), ("width", "Largura")):
        raw = form.get(key)
        if _is_blank(raw):
            errors[key] = f"{label} obrigatória"
        elif _parse_positive(raw) is None:
            errors[key] = f"{label} deve ser um número positivo"

    if not total_price:
        errors["total_price"] = "Preço obrigatório"

    if product_type == PRODUCT_COMPLETE_DOOR and not _is_blank(form.get("frame_width")):
        if _parse_positive(form.get("frame_width")) is None:
            errors["frame_width"] = "Largura do caixilho deve ser um número positivo"

    status = form.get("status") or QUOTE_PENDING
    if status not in QUOTE_STATUSES:
        errors["status"] = f"Status inválido: {status}"

    return errors


def build_quote(form: Mapping[str, Any], total_price: float) -> Quote:
    """
    Build a Quote from a validated form.

    Fields that do not apply to the product type are dropped: the frame
    width is kept only for complete doors, lock/hinge only for door leaves.
    """
    product_type = form["type"]
    is_door_leaf = product_type == PRODUCT_DOOR_LEAF

    frame_width = None
    if product_type == PRODUCT_COMPLETE_DOOR:
        frame_width = _parse_positive(form.get("frame_width"))

    return Quote(
        customer_name=str(form.get("customer_name") or "").strip(),
        phone=str(form.get("phone") or "").strip(),
        address=str(form.get("address") or "").strip(),
        type=product_type,
        height=to_number(form.get("height")),
        width=to_number(form.get("width")),
        frame_width=frame_width,
        needs_installation=bool(form.get("needs_installation")),
        lock_included=is_door_leaf and bool(form.get("lock_included")),
        hinge_included=is_door_leaf and bool(form.get("hinge_included")),
        total_price=total_price,
        status=form.get("status") or QUOTE_PENDING,
    )


def build_order_from_quote(quote: Quote, session: SessionContext) -> Order:
    return Order(
        customer_name=quote.customer_name,
        product=quote.type,
        quantity=1,
        total_price=quote.total_price,
        paid=False,
        status=ORDER_QUEUED,
        source_quote_id=quote.id,
        created_by=session.user_id,
    )


def project_approved_quote(row: Dict[str, Any]) -> QuoteOrderProjection:
    quantity = row.get("quantity")
    paid = row.get("paid")
    return QuoteOrderProjection(
        quote_id=row.get("id"),
        customer_name=row.get("customer_name") or "",
        product=row.get("type") or "",
        total_price=to_number(row.get("total_price")),
        quantity=quantity if isinstance(quantity, int) and not isinstance(quantity, bool) else 1,
        paid=paid if isinstance(paid, bool) else False,
        status=ORDER_QUEUED,
        created_at=row.get("created_at"),
    )


# ---------------------------------------------------------------------------
# Lifecycle controller
# ---------------------------------------------------------------------------

class QuoteService:
    """
    Validates, persists and transitions quotes, and derives an order when
    a quote is approved.

    Holds the in-memory list of open (non-approved) quotes shown on the
    quotes page; it is only ever replaced by a fresh read from the store.
    """

    def __init__(self, store: RecordStore, session: Optional[SessionContext]):
        self.store = store
        self.session = session
        self.quotes: List[Quote] = []
        self._last_token: Optional[str] = None
        self._last_result: Optional[SubmitResult] = None
        self._in_flight: Set[str] = set()

    def _require_session(self) -> SessionContext:
        if self.session is None:
            raise NotAuthenticatedError("Sessão expirada, faça login novamente")
        return self.session

    # -- reads --------------------------------------------------------------

    def refresh_quotes(self) -> Tuple[bool, str]:
        """
        Re-read quotes, newest first, without the approved ones.
        On failure the previous list is kept.
        """
        ok, msg, rows = self.store.select(QUOTES_TABLE, order_by="created_at", desc=True)
        if not ok:
            logger.warning("Quote list refresh failed: %s", msg)
            return False, msg

        self.quotes = [
            Quote.from_record(row) for row in rows
            if row.get("status") != QUOTE_APPROVED
        ]
        return True, msg

    def list_approved_as_orders(self) -> Tuple[bool, str, List[QuoteOrderProjection]]:
        """
        Legacy order-queue view: approved quotes projected into order-shaped
        rows. Nothing is written; persisted orders live in the orders table.
        """
        ok, msg, rows = self.store.select(
            QUOTES_TABLE,
            filters={"status": QUOTE_APPROVED},
            order_by="created_at",
            desc=True,
        )
        if not ok:
            return False, msg, []
        return True, msg, [project_approved_quote(row) for row in rows]

    # -- writes -------------------------------------------------------------

    def submit_quote(
            self,
            form: Mapping[str, Any],
            existing_quote_id: Any = None,
            request_token: Optional[str] = None,
    ) -> SubmitResult:
        """
        Validate and save a quote form; create the order if it is approved.

        `request_token` identifies one click of the submit button. Repeating
        the token of the last completed submission returns its result without
        writing again; a token still being processed is rejected. Only the
        last result is kept.

        Raises FieldValidationError (nothing written), PersistenceError
        (quote write failed, no order created) or NotAuthenticatedError.
        Order-write and refresh failures come back in `result.warnings`.
        """
        if request_token is not None:
            if request_token == self._last_token:
                logger.info("Submission %s already processed, skipping", request_token)
                return self._last_result
            if request_token in self._in_flight:
                raise DuplicateSubmissionError("Orçamento já está sendo salvo")
            self._in_flight.add(request_token)

        try:
            result = self._submit(form, existing_quote_id)
        finally:
            if request_token is not None:
                self._in_flight.discard(request_token)

        if request_token is not None:
            self._last_token = request_token
            self._last_result = result
        return result

    def _submit(self, form: Mapping[str, Any], existing_quote_id: Any) -> SubmitResult:
        session = self._require_session()

        # never trust a client-side total
        total_price = calculate_total_price(form)

        errors = validate_quote_form(form, total_price)
        if errors:
            raise FieldValidationError(errors)

        quote = build_quote(form, total_price)

        if existing_quote_id is not None:
            ok, msg, row = self.store.update(QUOTES_TABLE, existing_quote_id, quote.to_record())
            if not ok:
                logger.error("Updating quote %s failed: %s", existing_quote_id, msg)
                raise PersistenceError(f"Erro ao atualizar orçamento: {msg}")
            fallback = replace(quote, id=existing_quote_id)
        else:
            payload = {**quote.to_record(), "created_by": session.user_id}
            ok, msg, row = self.store.insert(QUOTES_TABLE, payload)
            if not ok:
                logger.error("Inserting quote failed: %s", msg)
                raise PersistenceError(f"Erro ao cadastrar orçamento: {msg}")
            fallback = replace(quote, created_by=session.user_id)

        saved = Quote.from_record(row) if row else fallback
        logger.info("Saved quote %s with status %s", saved.id, saved.status)

        result = SubmitResult(quote=saved)

        if saved.status == QUOTE_APPROVED:
            order, warning = self._create_order(saved, session)
            result.order = order
            if warning:
                result.warnings.append(warning)

        refreshed, refresh_msg = self.refresh_quotes()
        if refreshed:
            result.quotes = list(self.quotes)
        else:
            result.warnings.append(f"Lista de orçamentos não atualizada: {refresh_msg}")

        return result

    def _create_order(self, quote: Quote, session: SessionContext) -> Tuple[Optional[Order], Optional[str]]:
        """
        Insert the order derived from an approved quote.
        Returns (order_or_none, warning_or_none); never raises.
        """
        if quote.id is not None:
            ok, msg, existing = self.store.select(ORDERS_TABLE, filters={"source_quote_id": quote.id})
            if not ok:
                logger.warning("Order lookup for quote %s failed: %s", quote.id, msg)
                return None, f"Orçamento salvo, mas não foi possível verificar o pedido: {msg}"
            if existing:
                logger.info("Quote %s already has order %s", quote.id, existing[0].get("id"))
                return None, None

        order = build_order_from_quote(quote, session)
        ok, msg, row = self.store.insert(ORDERS_TABLE, order.to_record())
        if not ok:
            # the quote write has committed; leave it approved and report
            logger.warning("Order insert for quote %s failed: %s", quote.id, msg)
            return None, f"Orçamento salvo, mas erro ao criar pedido: {msg}"

        created = Order.from_record(row) if row else order
        logger.info("Created order %s from quote %s", created.id, quote.id)
        return created, None

    def delete_quote(self, quote_id: Any) -> List[str]:
        """
        Delete a quote. Orders already derived from it are left alone.
        Returns warnings (list refresh failure).
        """
        self._require_session()

        ok, msg, _ = self.store.delete(QUOTES_TABLE, quote_id)
        if not ok:
            logger.error("Deleting quote %s failed: %s", quote_id, msg)
            raise PersistenceError(f"Erro ao excluir orçamento: {msg}")

        logger.info("Deleted quote %s", quote_id)

        refreshed, refresh_msg = self.refresh_quotes()
        if not refreshed:
            return [f"Lista de orçamentos não atualizada: {refresh_msg}"]
        return []
