from sqlmodel import Field
from sqlalchemy import UniqueConstraint

from clearstock.model.base import BaseModel


class Restaurant(BaseModel, table=True):
    """Modelo Restaurant - raiz do multi-tenant (não tem restaurant_id)."""

    __tablename__ = "restaurant"

    # Nome fica NULL até o onboarding
    name: str | None = Field(default=None, nullable=True, index=True)
    # PIN normalizado (6 dígitos); único credencial de login
    pin: str = Field(nullable=False)
    # Identificador legado de uma letra ("A".."J"), usado pelo cookie antigo
    label: str | None = Field(default=None, nullable=True)

    # Limiares de alerta por defeito (dias); categorias podem sobrescrever
    alert_days_before_expiry: int = Field(default=3, nullable=False)
    warning_days_before_expiry: int | None = Field(default=None, nullable=True)

    timezone: str = Field(default="Europe/Lisbon")
    locale: str = Field(default="pt-PT")

    __table_args__ = (
        UniqueConstraint("pin", name="uq_restaurant_pin"),
        UniqueConstraint("label", name="uq_restaurant_label"),
    )
