import enum

import sqlalchemy as sa
from sqlmodel import Field
from sqlalchemy import UniqueConstraint

from clearstock.model.base import BaseModel


class ProductKind(str, enum.Enum):
    # matéria-prima vs. produto transformado na cozinha
    MP = "mp"
    TRANSFORMADO = "transformado"


class Category(BaseModel, table=True):
    """Categoria de produto por restaurante, com limiares de alerta opcionais."""

    __tablename__ = "category"

    restaurant_id: int = Field(foreign_key="restaurant.id", index=True, nullable=False)
    name: str = Field(nullable=False)
    tipo: ProductKind = Field(
        default=ProductKind.MP,
        sa_type=sa.Enum(
            ProductKind,
            name="product_kind",
            native_enum=False,
            values_callable=lambda e: [m.value for m in e],
        ),
    )
    # NULL = usa o default do restaurante
    alert_days_before_expiry: int | None = Field(default=None, nullable=True)
    warning_days_before_expiry: int | None = Field(default=None, nullable=True)

    __table_args__ = (
        UniqueConstraint("restaurant_id", "name", "tipo", name="uq_category_restaurant_name_tipo"),
    )
