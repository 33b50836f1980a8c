import pandas as pd
import streamlit as st

from domain.errors import DashboardError, FieldValidationError
from element_component import get_store, require_session, show_field_errors
from services.finance_service import (
    add_expense,
    delete_expense,
    finance_summary,
    list_expenses,
    monthly_cash_flow,
)
from services.order_service import list_orders
from utils.formatting import expense_label, format_brl, format_date, index_by_id, local_today

st.set_page_config(page_title="Financeiro", page_icon="💰")
st.sidebar.header("💰 Financeiro")

session = require_session(admin_only=True)
store = get_store()

if "expense_input_state" not in st.session_state:
    st.session_state["expense_input_state"] = False

EXPENSE_KEYS = ("expense_descricao", "expense_valor", "expense_data")

if st.session_state.pop("reset_expense_form", False):
    for key in EXPENSE_KEYS:
        st.session_state.pop(key, None)

ok_orders, msg_orders, orders = list_orders(store)
ok_expenses, msg_expenses, expenses = list_expenses(store)

if not ok_orders:
    st.error(f"Erro ao carregar pedidos: {msg_orders}")
if not ok_expenses:
    st.error(f"Erro ao carregar despesas: {msg_expenses}")

summary = finance_summary(orders, expenses)

col_1, col_2, col_3 = st.columns(3)
col_1.metric("Contas a Receber", format_brl(summary.receivable))
col_2.metric("Contas a Pagar", format_brl(summary.payable))
col_3.metric("Saldo Atual", format_brl(summary.balance))

st.subheader("Fluxo de Caixa")
cash_flow = monthly_cash_flow(orders, expenses)
if cash_flow.empty:
    st.info("Sem movimentações registradas.")
else:
    st.line_chart(cash_flow.set_index("month"))

st.divider()

with st.form("expense_input_form", enter_to_submit=False):
    st.subheader("Cadastrar Despesa")
    descricao = st.text_input("Descrição", key="expense_descricao")
    valor = st.number_input("Valor", min_value=0.0, step=0.01, format="%.2f", key="expense_valor")
    data = st.date_input("Data", value=local_today(), format="DD/MM/YYYY", key="expense_data")

    if st.form_submit_button("Adicionar"):
        st.session_state["expense_input_state"] = False
        try:
            add_expense(store, session, {"descricao": descricao, "valor": valor, "data": data})
        except FieldValidationError as e:
            show_field_errors(e, {"descricao": "Descrição", "valor": "Valor", "data": "Data"})
        except DashboardError as e:
            st.error(str(e))
        else:
            st.session_state["expense_input_state"] = True
            st.session_state["reset_expense_form"] = True
            st.rerun()

    if st.session_state["expense_input_state"]:
        st.success("Despesa cadastrada")

st.subheader("Despesas")

if not expenses:
    st.info("Nenhuma despesa cadastrada.")
else:
    st.dataframe(
        pd.DataFrame(
            [{"Descrição": e.descricao, "Valor": format_brl(e.valor), "Data": format_date(e.data)} for e in expenses]
        ),
        width="stretch",
        hide_index=True,
    )

    by_id = index_by_id(expenses)
    selected_id = st.selectbox("Selecionar despesa", list(by_id), index=None,
                               format_func=lambda i: expense_label(by_id[i]),
                               placeholder="Escolha para excluir")
    if st.button("Excluir despesa", disabled=selected_id is None):
        try:
            delete_expense(store, selected_id)
        except DashboardError as e:
            st.error(str(e))
        else:
            st.rerun()
