import enum
from datetime import date

import sqlalchemy as sa
from sqlmodel import Field

from clearstock.model.base import BaseModel
from clearstock.model.category import ProductKind


class BatchStatus(str, enum.Enum):
    ACTIVE = "ACTIVE"
    USED = "USED"


class ProductBatch(BaseModel, table=True):
    """
    Lote de produto em stock.

    Observações:
      - `quantity` nunca fica negativa; chegar a 0 marca o lote como USED.
      - `category_id` e `location_id` são opcionais e pertencem ao mesmo restaurante.
    """

    __tablename__ = "product_batch"
    __table_args__ = (
        sa.CheckConstraint("quantity >= 0", name="ck_product_batch_quantity_non_negative"),
    )

    restaurant_id: int = Field(foreign_key="restaurant.id", index=True, nullable=False)
    account_id: int | None = Field(default=None, foreign_key="account.id", nullable=True)

    name: str = Field(nullable=False)
    quantity: float = Field(nullable=False)
    unit: str = Field(default="un", nullable=False)
    expiry_date: date = Field(nullable=False, index=True)
    tipo: ProductKind = Field(
        default=ProductKind.MP,
        sa_type=sa.Enum(
            ProductKind,
            name="product_kind",
            native_enum=False,
            values_callable=lambda e: [m.value for m in e],
        ),
    )

    category_id: int | None = Field(
        default=None,
        sa_column_args=[sa.ForeignKey("category.id", ondelete="SET NULL")],
        nullable=True,
        index=True,
    )
    location_id: int | None = Field(
        default=None,
        sa_column_args=[sa.ForeignKey("location.id", ondelete="SET NULL")],
        nullable=True,
        index=True,
    )

    # Embalagem (opcional)
    packaging_type: str | None = Field(default=None, nullable=True)
    size: float | None = Field(default=None, nullable=True)
    size_unit: str | None = Field(default=None, nullable=True)

    status: BatchStatus = Field(
        default=BatchStatus.ACTIVE,
        sa_type=sa.Enum(
            BatchStatus,
            name="batch_status",
            native_enum=False,
            values_callable=lambda e: [m.value for m in e],
        ),
        index=True,
    )
