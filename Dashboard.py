import logging

import pandas as pd
import streamlit as st

from domain.errors import NotAuthenticatedError
from element_component import current_session, get_quote_service, get_store
from services.auth_service import load_session, sign_in, sign_out
from services.metrics_service import dashboard_metrics, weekly_sales
from services.order_service import list_orders
from supabase_client import LOG_LEVEL
from utils.formatting import format_brl, local_today

logging.basicConfig(level=LOG_LEVEL, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

st.set_page_config(page_title="Esquadria - Painel", page_icon="🚪")

st.sidebar.header("🚪 Painel")

store = get_store()

if current_session() is None:
    restored = load_session(store.client, store)
    if restored is not None:
        st.session_state["session"] = restored

session = current_session()

# -------------------------------------------------------------------
# Login
# -------------------------------------------------------------------

if session is None:
    st.title("Entrar")
    with st.form("login_form", enter_to_submit=True):
        email = st.text_input("E-mail")
        password = st.text_input("Senha", type="password")
        submitted = st.form_submit_button("Entrar")

    if submitted:
        try:
            st.session_state["session"] = sign_in(store.client, store, email.strip(), password)
        except NotAuthenticatedError as e:
            st.error(str(e))
        else:
            st.rerun()
    st.stop()

if st.sidebar.button("Sair"):
    sign_out(store.client)
    for key in ("session", "quote_service"):
        st.session_state.pop(key, None)
    st.rerun()

# -------------------------------------------------------------------
# Dashboard
# -------------------------------------------------------------------

st.title(f"Bem-vindo, {session.full_name}")

quote_service = get_quote_service()
ok_orders, msg_orders, orders = list_orders(store)
if not ok_orders:
    st.error(f"Não foi possível carregar os pedidos: {msg_orders}")

today = local_today()
metrics = dashboard_metrics(quote_service.quotes, orders, today)

col_1, col_2, col_3 = st.columns(3)
col_1.metric("Orçamentos Pendentes", metrics.pending_quotes)
col_2.metric("Pedidos em Aberto", metrics.open_orders)
col_3.metric("Vendas do Mês", format_brl(metrics.month_sales))

st.subheader("Vendas na Semana")
sales = weekly_sales(orders, today)
sales.index = pd.to_datetime(sales.index).strftime("%d/%m")
st.line_chart(sales)
