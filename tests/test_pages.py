# tests/test_pages.py
from dataclasses import replace
from pathlib import Path

import pytest
from streamlit.testing.v1 import AppTest

PAGES_DIR = Path(__file__).resolve().parents[1] / "pages"


def _page(name, store, session):
    at = AppTest.from_file(str(PAGES_DIR / name), default_timeout=30)
    at.session_state["store"] = store
    at.session_state["session"] = session
    return at.run()


def _click(at, label):
    next(b for b in at.button if b.label == label).click()
    return at.run()


@pytest.fixture
def customers_page(store, session):
    return _page("3_Clientes.py", store, session)


@pytest.fixture
def finance_page(store, session):
    return _page("4_Financeiro.py", store, replace(session, is_admin=True))


def test_customer_form_keeps_input_on_validation_error(customers_page, store):
    at = customers_page
    at.text_input(key="customer_nome").input("Ana")
    at.text_input(key="customer_endereco").input("Rua A")
    at.text_input(key="customer_telefone").input("123")

    at = _click(at, "Cadastrar Cliente")

    assert not at.exception
    assert at.error
    assert at.text_input(key="customer_nome").value == "Ana"
    assert at.text_input(key="customer_telefone").value == "123"
    assert store.rows("clientes") == []


def test_customer_form_clears_after_save(customers_page, store):
    at = customers_page
    at.text_input(key="customer_nome").input("Ana")
    at.text_input(key="customer_endereco").input("Rua A")
    at.text_input(key="customer_telefone").input("(11) 98765-4321")

    at = _click(at, "Cadastrar Cliente")

    assert not at.exception
    assert len(store.rows("clientes")) == 1
    assert at.text_input(key="customer_nome").value == ""
    assert at.text_input(key="customer_telefone").value == ""


def test_expense_form_keeps_input_on_validation_error(finance_page, store):
    at = finance_page
    at.text_input(key="expense_descricao").input("Vidro")

    at = _click(at, "Adicionar")

    assert not at.exception
    assert at.error
    assert at.text_input(key="expense_descricao").value == "Vidro"
    assert store.rows("despesas") == []


def test_expense_form_clears_after_save(finance_page, store):
    at = finance_page
    at.text_input(key="expense_descricao").input("Vidro")
    at.number_input(key="expense_valor").set_value(50.0)

    at = _click(at, "Adicionar")

    assert not at.exception
    assert len(store.rows("despesas")) == 1
    assert at.text_input(key="expense_descricao").value == ""
    assert at.number_input(key="expense_valor").value == 0.0
