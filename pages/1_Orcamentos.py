import uuid

import pandas as pd
import streamlit as st

from domain.errors import DashboardError, FieldValidationError
from domain.models import (
    PRODUCT_COMPLETE_DOOR,
    PRODUCT_DOOR_LEAF,
    PRODUCT_LABELS,
    PRODUCT_TYPES,
    QUOTE_STATUS_LABELS,
    QUOTE_STATUSES,
)
from element_component import get_quote_service, get_store, require_session, show_field_errors
from services.customer_service import filter_customers, list_customers
from services.pricing import price_breakdown
from services.quote_service import empty_quote_form, quote_to_form, recalculate
from utils.formatting import format_brl, format_date, index_by_id, quote_label

st.set_page_config(page_title="Orçamentos", page_icon="📝")
st.sidebar.header("📝 Orçamentos")

require_session()
service = get_quote_service()

FIELD_LABELS = {
    "customer_name": "Cliente",
    "type": "Tipo de Produto",
    "height": "Altura",
    "width": "Largura",
    "frame_width": "Largura do Caixilho",
    "total_price": "Valor Total",
    "status": "Status",
}

FORM_KEYS = {k: f"q_{k}" for k in empty_quote_form()}
TEXT_NUMBER_FIELDS = ("height", "width", "frame_width")


def load_form(form: dict, quote_id=None) -> None:
    """Push a form dict into the widget state and start a new submission."""
    for name, key in FORM_KEYS.items():
        value = form[name]
        if name in TEXT_NUMBER_FIELDS and isinstance(value, (int, float)):
            value = f"{value:g}"
        st.session_state[key] = value
    st.session_state["editing_quote_id"] = quote_id
    st.session_state["quote_request_token"] = uuid.uuid4().hex


if st.session_state.pop("reset_quote_form", False) or "quote_request_token" not in st.session_state:
    load_form(empty_quote_form())

# widget values can only be set before the widgets are drawn
picked_customer = st.session_state.pop("picked_customer", None)
if picked_customer is not None:
    st.session_state[FORM_KEYS["customer_name"]] = picked_customer.nome
    st.session_state[FORM_KEYS["phone"]] = picked_customer.telefone
    st.session_state[FORM_KEYS["address"]] = picked_customer.endereco

# -------------------------------------------------------------------
# Open quotes
# -------------------------------------------------------------------

st.subheader("Orçamentos")

if service.quotes:
    df = pd.DataFrame(
        [
            {
                "Cliente": q.customer_name,
                "Produto": PRODUCT_LABELS.get(q.type, q.type),
                "Medidas (cm)": f"{q.height:g} x {q.width:g}",
                "Valor": format_brl(q.total_price),
                "Status": QUOTE_STATUS_LABELS.get(q.status, q.status),
                "Data": format_date(q.created_at),
            }
            for q in service.quotes
        ]
    )
    st.dataframe(df, width="stretch", hide_index=True)

    by_id = index_by_id(service.quotes)
    selected_id = st.selectbox("Selecionar orçamento", list(by_id), index=None,
                               format_func=lambda i: quote_label(by_id[i]),
                               placeholder="Escolha para editar ou excluir")

    col_edit, col_delete = st.columns(2)
    with col_edit:
        if st.button("Editar", disabled=selected_id is None):
            selected = by_id[selected_id]
            load_form(quote_to_form(selected), selected.id)
            st.rerun()
    with col_delete:
        if st.button("Excluir", disabled=selected_id is None):
            try:
                for warning in service.delete_quote(selected_id):
                    st.warning(warning)
            except DashboardError as e:
                st.error(str(e))
            else:
                st.rerun()
else:
    st.info("Nenhum orçamento em aberto.")

st.divider()

# -------------------------------------------------------------------
# Quote form (outside st.form so the price follows every change)
# -------------------------------------------------------------------

editing_id = st.session_state.get("editing_quote_id")
st.subheader("Atualizar Orçamento" if editing_id is not None else "Novo Orçamento")

if editing_id is not None and st.button("Cancelar edição"):
    load_form(empty_quote_form())
    st.rerun()

st.selectbox(
    "Tipo de Produto",
    ("",) + PRODUCT_TYPES,
    format_func=lambda v: PRODUCT_LABELS.get(v, "Selecionar..."),
    key=FORM_KEYS["type"],
)

ok_customers, msg_customers, customers = list_customers(get_store())
if not ok_customers:
    st.warning(f"Não foi possível carregar os clientes: {msg_customers}")

st.text_input("Cliente", key=FORM_KEYS["customer_name"])
suggestions = filter_customers(customers, st.session_state.get(FORM_KEYS["customer_name"], ""))
if suggestions:
    picked = st.selectbox(
        "Sugestões",
        suggestions,
        index=None,
        format_func=lambda c: f"{c.nome} - {c.telefone} - {c.endereco}",
        placeholder="Clientes cadastrados",
    )
    if picked is not None and st.button("Usar cliente"):
        st.session_state["picked_customer"] = picked
        st.rerun()

st.text_input("Telefone", key=FORM_KEYS["phone"])
st.text_input("Endereço", key=FORM_KEYS["address"])

col_h, col_w = st.columns(2)
with col_h:
    st.text_input("Altura (cm)", key=FORM_KEYS["height"])
with col_w:
    st.text_input("Largura (cm)", key=FORM_KEYS["width"])

product_type = st.session_state.get(FORM_KEYS["type"], "")

if product_type == PRODUCT_COMPLETE_DOOR:
    st.text_input("Largura do Caixilho (cm)", key=FORM_KEYS["frame_width"])

st.checkbox("+ Instalação (R$ 120,00)", key=FORM_KEYS["needs_installation"])

if product_type == PRODUCT_DOOR_LEAF:
    st.checkbox("+ Fechadura (R$ 75,00)", key=FORM_KEYS["lock_included"])
    st.checkbox("+ Dobradiça (R$ 75,00)", key=FORM_KEYS["hinge_included"])

st.selectbox(
    "Status do Orçamento",
    QUOTE_STATUSES,
    format_func=lambda v: QUOTE_STATUS_LABELS[v],
    key=FORM_KEYS["status"],
)

defaults = empty_quote_form()
form = recalculate({name: st.session_state.get(key, defaults[name]) for name, key in FORM_KEYS.items()})
breakdown = price_breakdown(form)

st.metric("Valor Total", format_brl(form["total_price"]))
st.caption(
    f"Base: {format_brl(breakdown['base'])} | Área: {format_brl(breakdown['area'])} | "
    f"Instalação: {format_brl(breakdown['installation'])} | "
    f"Acessórios: {format_brl(breakdown['accessories'])}"
)

if st.button("Atualizar Orçamento" if editing_id is not None else "Criar Orçamento", type="primary"):
    try:
        result = service.submit_quote(
            form,
            existing_quote_id=editing_id,
            request_token=st.session_state["quote_request_token"],
        )
    except FieldValidationError as e:
        show_field_errors(e, FIELD_LABELS)
    except DashboardError as e:
        st.error(str(e))
    else:
        st.session_state["quote_flash"] = {
            "order": result.order is not None,
            "warnings": list(result.warnings),
        }
        st.session_state["reset_quote_form"] = True
        st.rerun()

flash = st.session_state.pop("quote_flash", None)
if flash is not None:
    st.success("Orçamento salvo.")
    if flash["order"]:
        st.success("Pedido criado a partir do orçamento aprovado.")
    for warning in flash["warnings"]:
        st.warning(warning)
