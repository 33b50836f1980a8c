# esquadria/domain/models.py

from dataclasses import dataclass, field
from typing import Any, Dict, Optional

# Product types as stored in the `quotes.type` / `orders.product` columns
PRODUCT_COMPLETE_DOOR = "porta_completa"
PRODUCT_DOOR_LEAF = "folha_de_porta"
PRODUCT_WINDOW = "janela"

PRODUCT_TYPES = (PRODUCT_COMPLETE_DOOR, PRODUCT_DOOR_LEAF, PRODUCT_WINDOW)

PRODUCT_LABELS = {
    PRODUCT_COMPLETE_DOOR: "Porta Completa",
    PRODUCT_DOOR_LEAF: "Folha de Porta",
    PRODUCT_WINDOW: "Janela",
}

QUOTE_PENDING = "pending"
QUOTE_APPROVED = "approved"
QUOTE_REJECTED = "rejected"

QUOTE_STATUSES = (QUOTE_PENDING, QUOTE_APPROVED, QUOTE_REJECTED)

QUOTE_STATUS_LABELS = {
    QUOTE_PENDING: "Pendente",
    QUOTE_APPROVED: "Aprovado",
    QUOTE_REJECTED: "Rejeitado",
}

ORDER_QUEUED = "na_fila"
ORDER_IN_PRODUCTION = "em_producao"
ORDER_READY = "pronto"
ORDER_DELIVERED = "entregue"
ORDER_CANCELLED = "cancelado"

ORDER_STATUSES = (
    ORDER_QUEUED,
    ORDER_IN_PRODUCTION,
    ORDER_READY,
    ORDER_DELIVERED,
    ORDER_CANCELLED,
)

# Read-only by convention once reached
ORDER_TERMINAL_STATUSES = (ORDER_DELIVERED, ORDER_CANCELLED)

ORDER_STATUS_LABELS = {
    ORDER_QUEUED: "Na Fila",
    ORDER_IN_PRODUCTION: "Em Produção",
    ORDER_READY: "Pronto",
    ORDER_DELIVERED: "Entregue",
    ORDER_CANCELLED: "Cancelado",
}


def _as_float(value: Any, default: float = 0.0) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        return default


def _as_optional_float(value: Any) -> Optional[float]:
    if value is None or value == "":
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


@dataclass
class SessionContext:
    """
    The signed-in user, passed explicitly to every service that needs it.
    """
    user_id: str
    email: str = ""
    full_name: str = ""
    is_admin: bool = False


@dataclass
class Quote:
    """
    A priced proposal for one door/window product.

    Field names are the Python-side names; `to_record` / `from_record`
    translate to the `quotes` table columns (lock/hinge are stored as
    `fechadura` / `dobradica`).
    """
    customer_name: str
    type: str
    height: float
    width: float
    total_price: float
    phone: str = ""
    address: str = ""
    frame_width: Optional[float] = None
    needs_installation: bool = False
    lock_included: bool = False
    hinge_included: bool = False
    status: str = QUOTE_PENDING
    id: Optional[str] = None
    created_at: Optional[str] = None
    created_by: Optional[str] = None

    def to_record(self) -> Dict[str, Any]:
        """Row payload for insert/update; store-assigned fields are left out."""
        return {
            "customer_name": self.customer_name,
            "phone": self.phone,
            "address": self.address,
            "type": self.type,
            "height": self.height,
            "width": self.width,
            "frame_width": self.frame_width,
            "needs_installation": self.needs_installation,
            "fechadura": self.lock_included,
            "dobradica": self.hinge_included,
            "total_price": self.total_price,
            "status": self.status,
        }

    @classmethod
    def from_record(cls, row: Dict[str, Any]) -> "Quote":
        return cls(
            id=row.get("id"),
            customer_name=row.get("customer_name") or "",
            phone=row.get("phone") or "",
            address=row.get("address") or "",
            type=row.get("type") or "",
            height=_as_float(row.get("height")),
            width=_as_float(row.get("width")),
            frame_width=_as_optional_float(row.get("frame_width")),
            needs_installation=bool(row.get("needs_installation")),
            lock_included=bool(row.get("fechadura")),
            hinge_included=bool(row.get("dobradica")),
            total_price=_as_float(row.get("total_price")),
            status=row.get("status") or QUOTE_PENDING,
            created_at=row.get("created_at"),
            created_by=row.get("created_by"),
        )


@dataclass
class Order:
    """
    A production/fulfillment record derived from an approved quote.
    """
    customer_name: str
    product: str
    total_price: float
    quantity: int = 1
    paid: bool = False
    status: str = ORDER_QUEUED
    source_quote_id: Optional[str] = None
    id: Optional[str] = None
    created_at: Optional[str] = None
    created_by: Optional[str] = None

    def to_record(self) -> Dict[str, Any]:
        return {
            "customer_name": self.customer_name,
            "product": self.product,
            "quantity": self.quantity,
            "total_price": self.total_price,
            "paid": self.paid,
            "status": self.status,
            "created_by": self.created_by,
            "source_quote_id": self.source_quote_id,
        }

    @classmethod
    def from_record(cls, row: Dict[str, Any]) -> "Order":
        quantity = row.get("quantity")
        return cls(
            id=row.get("id"),
            customer_name=row.get("customer_name") or "",
            product=row.get("product") or "",
            quantity=int(quantity) if isinstance(quantity, (int, float)) else 1,
            total_price=_as_float(row.get("total_price")),
            paid=bool(row.get("paid")),
            status=row.get("status") or ORDER_QUEUED,
            source_quote_id=row.get("source_quote_id"),
            created_at=row.get("created_at"),
            created_by=row.get("created_by"),
        )


@dataclass
class QuoteOrderProjection:
    """
    Read-only, order-shaped view of an approved quote.

    Not persisted and not an Order: the quote id is the only identity.
    """
    quote_id: str
    customer_name: str
    product: str
    total_price: float
    quantity: int = 1
    paid: bool = False
    status: str = ORDER_QUEUED
    created_at: Optional[str] = None


@dataclass
class Customer:
    nome: str
    telefone: str
    endereco: str
    id: Optional[str] = None
    created_at: Optional[str] = None

    def to_record(self) -> Dict[str, Any]:
        return {
            "nome": self.nome,
            "telefone": self.telefone,
            "endereco": self.endereco,
        }

    @classmethod
    def from_record(cls, row: Dict[str, Any]) -> "Customer":
        return cls(
            id=row.get("id"),
            nome=row.get("nome") or "",
            telefone=row.get("telefone") or "",
            endereco=row.get("endereco") or "",
            created_at=row.get("created_at"),
        )


@dataclass
class Expense:
    descricao: str
    valor: float
    data: str  # ISO date, e.g. "2025-03-15"
    id: Optional[str] = None
    created_by: Optional[str] = None
    created_at: Optional[str] = None

    def to_record(self) -> Dict[str, Any]:
        return {
            "descricao": self.descricao,
            "valor": self.valor,
            "data": self.data,
            "created_by": self.created_by,
        }

    @classmethod
    def from_record(cls, row: Dict[str, Any]) -> "Expense":
        return cls(
            id=row.get("id"),
            descricao=row.get("descricao") or "",
            valor=_as_float(row.get("valor")),
            data=row.get("data") or "",
            created_by=row.get("created_by"),
            created_at=row.get("created_at"),
        )


@dataclass
class SubmitResult:
    """
    Outcome of a quote submission.

    `order` is set only when the submission created one. `warnings` carries
    non-blocking failures (order insert, list refresh) for the UI.
    `quotes` is the refreshed open-quote list, or None when the refresh failed.
    """
    quote: Quote
    order: Optional[Order] = None
    warnings: list = field(default_factory=list)
    quotes: Optional[list] = None
