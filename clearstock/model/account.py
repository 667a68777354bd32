from sqlmodel import Field

from clearstock.model.base import BaseModel


class Account(BaseModel, table=True):
    """Utilizador que regista entradas (um por restaurante, criado automaticamente)."""

    __tablename__ = "account"

    restaurant_id: int = Field(foreign_key="restaurant.id", index=True, nullable=False)
    name: str
    email: str | None = Field(default=None, nullable=True)
