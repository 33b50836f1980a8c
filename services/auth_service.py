# esquadria/services/auth_service.py

import logging
from typing import Any, Optional

from supabase import Client

from data_integrator import RecordStore
from domain.errors import NotAuthenticatedError
from domain.models import SessionContext

logger = logging.getLogger(__name__)

ADMIN_ROLE = "admin"


def session_from_user(store: RecordStore, user: Any) -> SessionContext:
    """
    Build the session for a Supabase Auth user from its profile.

    A missing or unreadable profile still yields a (non-admin) session.
    """
    ok, msg, profile = store.fetch_profile(user.id)
    if not ok:
        logger.warning("Could not load profile for %s: %s", user.id, msg)
    profile = profile or {}

    role = profile.get("roles") or {}
    email = getattr(user, "email", None) or ""

    return SessionContext(
        user_id=user.id,
        email=email,
        full_name=profile.get("full_name") or email,
        is_admin=role.get("name") == ADMIN_ROLE,
    )


def sign_in(client: Client, store: RecordStore, email: str, password: str) -> SessionContext:
    if not email or not password:
        raise NotAuthenticatedError("Informe e-mail e senha")

    try:
        resp = client.auth.sign_in_with_password({"email": email, "password": password})
    except Exception as e:
        logger.info("Sign-in rejected for %s: %s", email, e)
        raise NotAuthenticatedError("E-mail ou senha inválidos") from e

    user = getattr(resp, "user", None)
    if user is None:
        raise NotAuthenticatedError("E-mail ou senha inválidos")

    session = session_from_user(store, user)
    logger.info("Signed in %s (admin=%s)", session.email, session.is_admin)
    return session


def load_session(client: Client, store: RecordStore) -> Optional[SessionContext]:
    """Session for the user the client is already signed in as, or None."""
    try:
        resp = client.auth.get_user()
    except Exception as e:
        logger.info("No active auth session: %s", e)
        return None

    user = getattr(resp, "user", None) if resp else None
    if user is None:
        return None
    return session_from_user(store, user)


def sign_out(client: Client) -> None:
    try:
        client.auth.sign_out()
    except Exception as e:
        logger.warning("Sign-out failed: %s", e)
