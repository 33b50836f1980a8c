import pandas as pd
import streamlit as st

from domain.models import PRODUCT_LABELS
from element_component import get_store, require_session
from services.order_service import list_history
from utils.formatting import format_brl, format_date

st.set_page_config(page_title="Histórico de Vendas", page_icon="📚")
st.title("📚 Histórico de Vendas")

require_session()

ok, msg, orders = list_history(get_store())
if not ok:
    st.error(f"Erro ao carregar histórico: {msg}")
    st.stop()

if not orders:
    st.info("Nenhum pedido entregue ainda.")
    st.stop()

df_history = pd.DataFrame(
    [
        {
            "Cliente": o.customer_name,
            "Produto": PRODUCT_LABELS.get(o.product, o.product),
            "Quantidade": o.quantity,
            "Valor Total": o.total_price,
            "Pago": "Sim" if o.paid else "Não",
            "Data": format_date(o.created_at),
        }
        for o in orders
    ]
)

df_display = df_history.copy()
df_display["Valor Total"] = df_display["Valor Total"].apply(format_brl)

st.dataframe(df_display, width="stretch", hide_index=True)

st.metric("Total Entregue", format_brl(df_history["Valor Total"].sum()))

csv = df_history.to_csv(index=False).encode("utf-8")
st.download_button(
    "Baixar CSV",
    data=csv,
    file_name="historico_vendas.csv",
    mime="text/csv",
)
