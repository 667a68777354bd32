"""
Limitação server-side de tentativas de PIN.

N falhas dentro da janela bloqueiam a chave do cliente até a falha mais antiga
sair da janela. As falhas ficam no banco para valer entre processos da API.
"""

import logging
from datetime import datetime, timedelta

from fastapi import Depends
from sqlalchemy import delete, func
from sqlmodel import Session, select

from clearstock.config import Settings, get_settings
from clearstock.db.session import get_session
from clearstock.model.base import ensure_utc, utc_now
from clearstock.model.login_attempt import LoginAttempt

logger = logging.getLogger(__name__)


class LoginThrottle:
    def __init__(self, session: Session, *, max_attempts: int = 5, window_seconds: int = 60):
        self.session = session
        self.max_attempts = max_attempts
        self.window = timedelta(seconds=window_seconds)

    def _purge_old(self, now: datetime) -> None:
        self.session.exec(
            delete(LoginAttempt)
            .where(LoginAttempt.created_at < now - self.window)
            .execution_options(synchronize_session=False)
        )
        self.session.commit()

    def retry_after(self, client_key: str, *, now: datetime | None = None) -> int:
        """
        Segundos até poder tentar de novo; 0 se não bloqueado.
        """
        now = now or utc_now()
        self._purge_old(now)

        count = self.session.exec(
            select(func.count(LoginAttempt.id)).where(
                LoginAttempt.client_key == client_key,
                LoginAttempt.created_at >= now - self.window,
            )
        ).one()
        if count < self.max_attempts:
            return 0

        oldest = self.session.exec(
            select(func.min(LoginAttempt.created_at)).where(
                LoginAttempt.client_key == client_key,
                LoginAttempt.created_at >= now - self.window,
            )
        ).one()
        unlock_at = ensure_utc(oldest) + self.window
        return max(1, int((unlock_at - now).total_seconds()))

    def register_failure(self, client_key: str, *, now: datetime | None = None) -> None:
        now = now or utc_now()
        self.session.add(LoginAttempt(client_key=client_key, created_at=now, updated_at=now))
        self.session.commit()
        logger.info(f"[AUTH] Tentativa de PIN falhada registada para {client_key}")

    def reset(self, client_key: str) -> None:
        self.session.exec(
            delete(LoginAttempt)
            .where(LoginAttempt.client_key == client_key)
            .execution_options(synchronize_session=False)
        )
        self.session.commit()


def get_login_throttle(
    session: Session = Depends(get_session),
    settings: Settings = Depends(get_settings),
) -> LoginThrottle:
    return LoginThrottle(
        session,
        max_attempts=settings.login_max_attempts,
        window_seconds=settings.login_lockout_seconds,
    )
