from typing import Any, Callable, Dict, Optional

import pandas as pd
import streamlit as st

from data_integrator import RecordStore
from domain.errors import DashboardError, FieldValidationError
from domain.models import SessionContext
from services.quote_service import QuoteService
from supabase_client import get_client


def get_store() -> RecordStore:
    """One Supabase client (and auth session) per browser session."""
    if "store" not in st.session_state:
        st.session_state["store"] = RecordStore(get_client())
    return st.session_state["store"]


def current_session() -> Optional[SessionContext]:
    return st.session_state.get("session")


def require_session(admin_only: bool = False) -> SessionContext:
    """Stop the page unless someone is signed in (and is admin, if asked)."""
    session = current_session()
    if session is None:
        st.warning("Faça login na página inicial para continuar.")
        st.stop()
    if admin_only and not session.is_admin:
        st.error("Acesso restrito a administradores.")
        st.stop()
    return session


def get_quote_service() -> QuoteService:
    session = current_session()
    service = st.session_state.get("quote_service")
    if service is None or service.session != session:
        service = QuoteService(get_store(), session)
        service.refresh_quotes()
        st.session_state["quote_service"] = service
    return service


def show_field_errors(error: FieldValidationError, labels: Dict[str, str]) -> None:
    for key, msg in error.errors.items():
        st.error(f"{labels.get(key, key)}: {msg}")


@st.dialog("Confirmação")
def confirmation_dialog(summary: Dict[str, Any], on_confirm: Callable[[], Any], state_name: str):
    """
    Show `summary` and run `on_confirm` when the user accepts.
    `state_name` in session_state is set True on success.
    """
    df = pd.DataFrame(list(summary.items()), columns=["Campo", "Valor"])
    df["Valor"] = df["Valor"].astype("string")
    st.dataframe(df, hide_index=True)

    col_yes, col_no = st.columns(2)

    with col_yes:
        if st.button("Sim", type="primary", key="confirm_yes"):
            try:
                on_confirm()
            except DashboardError as e:
                st.session_state[state_name] = False
                st.error(str(e))
            else:
                st.session_state[state_name] = True
                st.rerun()
    with col_no:
        if st.button("Não", key="confirm_no"):
            st.session_state[state_name] = False
            st.rerun()
