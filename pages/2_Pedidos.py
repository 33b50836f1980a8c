import pandas as pd
import streamlit as st

from domain.errors import DashboardError, FieldValidationError
from domain.models import ORDER_STATUS_LABELS, ORDER_STATUSES, PRODUCT_LABELS
from element_component import (
    confirmation_dialog,
    get_quote_service,
    get_store,
    require_session,
    show_field_errors,
)
from services.order_service import delete_order, is_terminal, list_orders, update_order
from utils.formatting import format_brl, format_date, index_by_id, order_label

st.set_page_config(page_title="Pedidos", page_icon="📦")
st.sidebar.header("📦 Pedidos")

require_session()
store = get_store()

if "order_update_state" not in st.session_state:
    st.session_state["order_update_state"] = False
    st.session_state["order_delete_state"] = False

FIELD_LABELS = {
    "customer_name": "Cliente",
    "product": "Produto",
    "quantity": "Quantidade",
    "total_price": "Valor Total",
    "paid": "Pago",
    "status": "Status",
}

# -------------------------------------------------------------------
# Orders table
# -------------------------------------------------------------------

ok, msg, orders = list_orders(store)
if not ok:
    st.error(f"Erro ao carregar pedidos: {msg}")

st.subheader("Pedidos")

if not orders:
    st.info("Nenhum pedido cadastrado.")
else:
    df = pd.DataFrame(
        [
            {
                "Cliente": o.customer_name,
                "Produto": PRODUCT_LABELS.get(o.product, o.product),
                "Qtd": o.quantity,
                "Valor": format_brl(o.total_price),
                "Status": ORDER_STATUS_LABELS.get(o.status, "Desconhecido"),
                "Pago": "Sim" if o.paid else "Não",
                "Data": format_date(o.created_at),
            }
            for o in orders
        ]
    )
    st.dataframe(df, width="stretch", hide_index=True)

    by_id = index_by_id(orders)
    selected_id = st.selectbox("Selecionar pedido", list(by_id), index=None,
                               format_func=lambda i: order_label(by_id[i]),
                               placeholder="Escolha um pedido")

    if selected_id is not None:
        order = by_id[selected_id]

        if is_terminal(order):
            st.caption("Pedido finalizado: alterações devem ser feitas apenas para correções.")

        with st.form("order_edit_form"):
            customer_name = st.text_input("Cliente", value=order.customer_name)
            product = st.text_input("Produto", value=order.product)
            quantity = st.number_input("Quantidade", min_value=1, step=1, value=max(order.quantity, 1))
            total_price = st.number_input("Valor Total", min_value=0.0, step=10.0, value=float(order.total_price))
            paid = st.checkbox("Pago", value=order.paid)
            status = st.selectbox(
                "Status",
                ORDER_STATUSES,
                index=ORDER_STATUSES.index(order.status) if order.status in ORDER_STATUSES else 0,
                format_func=lambda v: ORDER_STATUS_LABELS[v],
            )

            if st.form_submit_button("Salvar alterações"):
                st.session_state["order_update_state"] = False
                changes = {
                    "customer_name": customer_name,
                    "product": product,
                    "quantity": int(quantity),
                    "total_price": float(total_price),
                    "paid": paid,
                    "status": status,
                }
                try:
                    update_order(store, order.id, changes)
                except FieldValidationError as e:
                    show_field_errors(e, FIELD_LABELS)
                except DashboardError as e:
                    st.error(str(e))
                else:
                    st.session_state["order_update_state"] = True
                    st.rerun()

        if st.button("Excluir pedido"):
            st.session_state["order_delete_state"] = False
            confirmation_dialog(
                {"Cliente": order.customer_name, "Produto": order.product, "Valor": format_brl(order.total_price)},
                lambda: delete_order(store, order.id),
                "order_delete_state",
            )

if st.session_state["order_update_state"]:
    st.success("Pedido atualizado.")
    st.session_state["order_update_state"] = False

if st.session_state["order_delete_state"]:
    st.success("Pedido excluído.")
    st.session_state["order_delete_state"] = False

# -------------------------------------------------------------------
# Legacy queue view
# -------------------------------------------------------------------

with st.expander("Orçamentos aprovados (visão antiga da fila)"):
    ok_legacy, msg_legacy, projected = get_quote_service().list_approved_as_orders()
    if not ok_legacy:
        st.error(f"Erro ao carregar orçamentos aprovados: {msg_legacy}")
    elif not projected:
        st.info("Nenhum orçamento aprovado.")
    else:
        st.caption("Somente leitura: derivado dos orçamentos, não dos pedidos cadastrados.")
        st.dataframe(
            pd.DataFrame(
                [
                    {
                        "Cliente": p.customer_name,
                        "Produto": PRODUCT_LABELS.get(p.product, p.product),
                        "Qtd": p.quantity,
                        "Valor": format_brl(p.total_price),
                        "Status": ORDER_STATUS_LABELS[p.status],
                        "Data": format_date(p.created_at),
                    }
                    for p in projected
                ]
            ),
            width="stretch",
            hide_index=True,
        )
