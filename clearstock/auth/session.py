"""
Ciclo de vida das sessões de login.

NONE -> ACTIVE (PIN correto) -> EXPIRED (7 dias ou logout) -> apagada.

Tokens são opacos (32 bytes aleatórios em hex); o id do restaurante nunca vai no cookie.
"""

import logging
import secrets
from datetime import datetime, timedelta

from fastapi import Response
from sqlalchemy import delete
from sqlmodel import Session, select

from clearstock.model.auth_session import AuthSession
from clearstock.model.base import ensure_utc, utc_now

logger = logging.getLogger(__name__)

SESSION_COOKIE_NAME = "clearstock_session"
LEGACY_COOKIE_NAME = "clearskok_restaurantId"
DEFAULT_SESSION_DAYS = 7


def generate_session_token() -> str:
    return secrets.token_hex(32)


def create_session(
    session: Session,
    restaurant_id: int,
    *,
    days: int = DEFAULT_SESSION_DAYS,
    now: datetime | None = None,
) -> AuthSession:
    """Cria uma sessão nova; cada login gera um token independente."""
    now = now or utc_now()
    auth_session = AuthSession(
        token=generate_session_token(),
        restaurant_id=restaurant_id,
        expires_at=now + timedelta(days=days),
        last_used_at=now,
        created_at=now,
        updated_at=now,
    )
    session.add(auth_session)
    session.commit()
    session.refresh(auth_session)
    return auth_session


def get_session_by_token(session: Session, token: str) -> AuthSession | None:
    return session.exec(select(AuthSession).where(AuthSession.token == token)).first()


def validate_session(session: Session, token: str | None, *, now: datetime | None = None) -> int | None:
    """
    Valida o token e devolve o restaurant_id, ou None se não autenticado.

    Sessão válida sse now < expires_at. Sessões expiradas encontradas aqui são apagadas.
    """
    if not token:
        return None

    now = now or utc_now()
    auth_session = get_session_by_token(session, token)
    if auth_session is None:
        return None

    if now >= ensure_utc(auth_session.expires_at):
        session_id = auth_session.id
        session.delete(auth_session)
        session.commit()
        logger.info(f"[AUTH] Sessão expirada removida: id={session_id}")
        return None

    restaurant_id = auth_session.restaurant_id

    # Atualização de atividade não é crítica: falha não invalida a sessão
    try:
        auth_session.last_used_at = now
        session.add(auth_session)
        session.commit()
    except Exception as e:
        session.rollback()
        logger.warning(f"[AUTH] Falha ao atualizar last_used_at da sessão: {e}")

    return restaurant_id


def destroy_session(session: Session, token: str | None) -> bool:
    """Apaga a sessão do token (logout). Devolve True se existia."""
    if not token:
        return False
    result = session.exec(
        delete(AuthSession)
        .where(AuthSession.token == token)
        .execution_options(synchronize_session=False)
    )
    session.commit()
    return result.rowcount > 0


def sweep_expired_sessions(session: Session, *, now: datetime | None = None) -> int:
    """Apaga todas as sessões com expires_at < now. Devolve quantas foram apagadas."""
    now = now or utc_now()
    # Sem sincronização em Python: o SQLite devolve expires_at naive
    result = session.exec(
        delete(AuthSession)
        .where(AuthSession.expires_at < now)
        .execution_options(synchronize_session=False)
    )
    session.commit()
    return result.rowcount or 0


def set_session_cookie(
    response: Response,
    token: str,
    *,
    days: int = DEFAULT_SESSION_DAYS,
    secure: bool = False,
) -> None:
    response.set_cookie(
        key=SESSION_COOKIE_NAME,
        value=token,
        max_age=days * 24 * 60 * 60,
        path="/",
        httponly=True,
        secure=secure,
        samesite="lax",
    )


def clear_session_cookie(response: Response) -> None:
    response.delete_cookie(SESSION_COOKIE_NAME, path="/")
