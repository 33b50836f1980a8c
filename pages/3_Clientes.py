import pandas as pd
import streamlit as st

from domain.errors import DashboardError, FieldValidationError
from element_component import confirmation_dialog, get_store, require_session, show_field_errors
from services.customer_service import delete_customer, list_customers, save_customer
from utils.formatting import customer_label, index_by_id

st.set_page_config(page_title="Clientes", page_icon="👥")
st.sidebar.header("👥 Cadastro de Clientes")

require_session()
store = get_store()

FIELD_LABELS = {"nome": "Nome", "endereco": "Endereço", "telefone": "Número para Contato"}

if "customer_input_state" not in st.session_state:
    st.session_state["customer_input_state"] = False
    st.session_state["customer_delete_state"] = False
    st.session_state["editing_customer"] = None

CUSTOMER_KEYS = {"nome": "customer_nome", "endereco": "customer_endereco", "telefone": "customer_telefone"}

# fill or clear the form before its widgets are drawn
if st.session_state.pop("reset_customer_form", False):
    loaded = st.session_state["editing_customer"]
    for field, key in CUSTOMER_KEYS.items():
        st.session_state[key] = getattr(loaded, field) if loaded else ""

ok, msg, customers = list_customers(store)
if not ok:
    st.error(f"Erro ao carregar clientes: {msg}")

editing = st.session_state["editing_customer"]

with st.form("customer_input_form", enter_to_submit=False):
    st.subheader("Editar Cliente" if editing else "Novo Cliente")
    nome = st.text_input("Nome", key=CUSTOMER_KEYS["nome"])
    endereco = st.text_input("Endereço", key=CUSTOMER_KEYS["endereco"])
    telefone = st.text_input("Número para Contato", key=CUSTOMER_KEYS["telefone"],
                             placeholder="(11) 98765-4321")

    submitted = st.form_submit_button("Salvar Alterações" if editing else "Cadastrar Cliente")

    if submitted:
        st.session_state["customer_input_state"] = False
        try:
            save_customer(
                store,
                {"nome": nome, "endereco": endereco, "telefone": telefone},
                editing.id if editing else None,
            )
        except FieldValidationError as e:
            show_field_errors(e, FIELD_LABELS)
        except DashboardError as e:
            st.error(str(e))
        else:
            st.session_state["customer_input_state"] = True
            st.session_state["editing_customer"] = None
            st.session_state["reset_customer_form"] = True
            st.rerun()

    if st.session_state["customer_input_state"]:
        st.success("Cliente salvo com sucesso")

st.subheader("Clientes")

if not customers:
    st.info("Nenhum cliente cadastrado.")
else:
    df = pd.DataFrame(
        [{"Nome": c.nome, "Endereço": c.endereco, "Contato": c.telefone} for c in customers]
    )
    st.dataframe(df, width="stretch", hide_index=True)

    by_id = index_by_id(customers)
    selected_id = st.selectbox("Selecionar cliente", list(by_id), index=None,
                               format_func=lambda i: customer_label(by_id[i]),
                               placeholder="Escolha para editar ou excluir")

    col_edit, col_delete = st.columns(2)
    with col_edit:
        if st.button("Editar", disabled=selected_id is None):
            st.session_state["editing_customer"] = by_id[selected_id]
            st.session_state["reset_customer_form"] = True
            st.session_state["customer_input_state"] = False
            st.rerun()
    with col_delete:
        if st.button("Excluir", disabled=selected_id is None):
            customer = by_id[selected_id]
            confirmation_dialog(
                {"Nome": customer.nome, "Endereço": customer.endereco, "Contato": customer.telefone},
                lambda: delete_customer(store, customer.id),
                "customer_delete_state",
            )

if st.session_state["customer_delete_state"]:
    st.success("Cliente excluído")
    st.session_state["customer_delete_state"] = False
