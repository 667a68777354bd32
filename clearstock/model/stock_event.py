import enum

import sqlalchemy as sa
from sqlmodel import Field

from clearstock.model.base import BaseModel


class StockEventType(str, enum.Enum):
    ENTRY = "ENTRY"
    WASTE = "WASTE"


class StockEvent(BaseModel, table=True):
    """Histórico append-only de movimentos de stock (nunca atualizado)."""

    __tablename__ = "stock_event"

    restaurant_id: int = Field(foreign_key="restaurant.id", index=True, nullable=False)
    type: StockEventType = Field(
        sa_type=sa.Enum(
            StockEventType,
            name="stock_event_type",
            native_enum=False,
            values_callable=lambda e: [m.value for m in e],
        ),
        index=True,
    )
    product_name: str = Field(nullable=False)
    quantity: float = Field(nullable=False)
    unit: str = Field(nullable=False)
