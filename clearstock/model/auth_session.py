from datetime import datetime

import sqlalchemy as sa
from sqlmodel import Field
from sqlalchemy import UniqueConstraint

from clearstock.model.base import BaseModel, utc_now


class AuthSession(BaseModel, table=True):
    """
    Sessão de login (token opaco guardado em cookie HTTP-only).

    Uma sessão com expires_at <= agora nunca é válida; é apagada no próximo lookup
    ou pelo varrimento periódico.
    """

    __tablename__ = "auth_session"

    token: str = Field(nullable=False)
    restaurant_id: int = Field(foreign_key="restaurant.id", index=True, nullable=False)
    expires_at: datetime = Field(sa_type=sa.DateTime(timezone=True), nullable=False, index=True)
    last_used_at: datetime = Field(
        default_factory=utc_now,
        sa_type=sa.DateTime(timezone=True),
        nullable=False,
    )

    __table_args__ = (
        UniqueConstraint("token", name="uq_auth_session_token"),
    )
