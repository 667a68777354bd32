"""
Classificação de validade dos lotes (caminho de leitura).

days = expiry_date - hoje (dias de calendário). Prioridade:
EXPIRED (days < 0) > URGENT (days <= urgente) > WARNING (days <= aviso) > OK.
"""

import enum
from datetime import date, datetime
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from clearstock.model.base import utc_now
from clearstock.model.category import Category
from clearstock.model.restaurant import Restaurant


class ExpiryStatus(str, enum.Enum):
    EXPIRED = "EXPIRED"
    URGENT = "URGENT"
    WARNING = "WARNING"
    OK = "OK"


def restaurant_today(restaurant: Restaurant, now: datetime | None = None) -> date:
    """Data de hoje no fuso do restaurante."""
    now = now or utc_now()
    try:
        tz = ZoneInfo(restaurant.timezone or "UTC")
    except ZoneInfoNotFoundError:
        tz = ZoneInfo("UTC")
    return now.astimezone(tz).date()


def resolve_thresholds(restaurant: Restaurant, category: Category | None) -> tuple[int, int]:
    """
    (urgente, aviso) em dias.

    Urgente: override da categoria, senão default do restaurante.
    Aviso: override da categoria, senão default de aviso do restaurante, senão o urgente.
    """
    urgent = restaurant.alert_days_before_expiry
    if category is not None and category.alert_days_before_expiry is not None:
        urgent = category.alert_days_before_expiry

    warning = restaurant.warning_days_before_expiry
    if category is not None and category.warning_days_before_expiry is not None:
        warning = category.warning_days_before_expiry
    if warning is None:
        warning = urgent
    return urgent, warning


def days_to_expiry(expiry_date: date, today: date) -> int:
    return (expiry_date - today).days


def classify_expiry(days: int, urgent_days: int, warning_days: int) -> ExpiryStatus:
    if days < 0:
        return ExpiryStatus.EXPIRED
    if days <= urgent_days:
        return ExpiryStatus.URGENT
    if days <= warning_days:
        return ExpiryStatus.WARNING
    return ExpiryStatus.OK


def expiry_label(status: ExpiryStatus, days: int) -> str:
    if status == ExpiryStatus.EXPIRED:
        return "Expirado"
    if status == ExpiryStatus.URGENT:
        return f"Urgente usar ({days} dias)"
    if status == ExpiryStatus.WARNING:
        return f"A expirar em breve ({days} dias)"
    return "OK"
