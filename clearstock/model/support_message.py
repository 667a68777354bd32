import enum

import sqlalchemy as sa
from sqlmodel import Field

from clearstock.model.base import BaseModel


class SupportType(str, enum.Enum):
    BUG = "bug"
    SUGGESTION = "suggestion"
    QUESTION = "question"
    OTHER = "other"


class SupportMessage(BaseModel, table=True):
    """Pedido de suporte enviado pelo restaurante (também enviado por email ao admin)."""

    __tablename__ = "support_message"

    restaurant_id: int = Field(foreign_key="restaurant.id", index=True, nullable=False)
    # Cópia do nome no momento do pedido (o restaurante pode ainda não ter nome)
    restaurant_name: str | None = Field(default=None, nullable=True)
    type: SupportType = Field(
        sa_type=sa.Enum(
            SupportType,
            name="support_type",
            native_enum=False,
            values_callable=lambda e: [m.value for m in e],
        ),
    )
    message: str = Field(sa_type=sa.Text, nullable=False)
    contact: str = Field(nullable=False)
