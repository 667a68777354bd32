from sqlmodel import Field
from sqlalchemy import UniqueConstraint

from clearstock.model.base import BaseModel


class Location(BaseModel, table=True):
    """Local de armazenamento (frigorífico, despensa...) por restaurante."""

    __tablename__ = "location"

    restaurant_id: int = Field(foreign_key="restaurant.id", index=True, nullable=False)
    name: str = Field(nullable=False)

    __table_args__ = (
        UniqueConstraint("restaurant_id", "name", name="uq_location_restaurant_name"),
    )
