from sqlmodel import Field

from clearstock.model.base import BaseModel


class LoginAttempt(BaseModel, table=True):
    """Tentativa de PIN falhada, por chave de cliente (IP)."""

    __tablename__ = "login_attempt"

    client_key: str = Field(index=True, nullable=False)
