# esquadria/services/customer_service.py

import logging
import re
from typing import Any, Dict, List, Mapping, Optional, Tuple

from data_integrator import RecordStore, CUSTOMERS_TABLE
from domain.errors import FieldValidationError, PersistenceError
from domain.models import Customer

logger = logging.getLogger(__name__)

# "(11) 98765-4321", "(11)3456-7890", "98765-4321"
PHONE_PATTERN = re.compile(r"^(\(\d{2}\)\s?)?\d{4,5}-\d{4}$")

SUGGESTION_LIMIT = 2


def validate_customer(form: Mapping[str, Any]) -> Dict[str, str]:
    errors: Dict[str, str] = {}
    if not str(form.get("nome") or "").strip():
        errors["nome"] = "Nome é obrigatório"
    if not str(form.get("endereco") or "").strip():
        errors["endereco"] = "Endereço é obrigatório"
    if not PHONE_PATTERN.match(str(form.get("telefone") or "").strip()):
        errors["telefone"] = "Telefone inválido"
    return errors


def filter_customers(customers: List[Customer], text: str) -> List[Customer]:
    """
    Autocomplete suggestions for the quote form.
    Empty input shows the first few customers.
    """
    needle = (text or "").strip().lower()
    if not needle:
        return customers[:SUGGESTION_LIMIT]
    return [c for c in customers if needle in c.nome.lower()]


def list_customers(store: RecordStore) -> Tuple[bool, str, List[Customer]]:
    ok, msg, rows = store.select(CUSTOMERS_TABLE, order_by="created_at", desc=True)
    if not ok:
        return False, msg, []
    return True, msg, [Customer.from_record(row) for row in rows]


def save_customer(store: RecordStore, form: Mapping[str, Any], customer_id: Optional[Any] = None) -> Customer:
    """Insert a new customer, or update `customer_id` when given."""
    errors = validate_customer(form)
    if errors:
        raise FieldValidationError(errors)

    customer = Customer(
        nome=str(form["nome"]).strip(),
        telefone=str(form["telefone"]).strip(),
        endereco=str(form["endereco"]).strip(),
    )

    if customer_id is not None:
        ok, msg, row = store.update(CUSTOMERS_TABLE, customer_id, customer.to_record())
    else:
        ok, msg, row = store.insert(CUSTOMERS_TABLE, customer.to_record())

    if not ok:
        logger.error("Saving customer %s failed: %s", customer_id or customer.nome, msg)
        raise PersistenceError(f"Erro ao salvar cliente: {msg}")

    return Customer.from_record(row) if row else customer


def delete_customer(store: RecordStore, customer_id: Any) -> None:
    ok, msg, _ = store.delete(CUSTOMERS_TABLE, customer_id)
    if not ok:
        logger.error("Deleting customer %s failed: %s", customer_id, msg)
        raise PersistenceError(f"Erro ao excluir cliente: {msg}")
