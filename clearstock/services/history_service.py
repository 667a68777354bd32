"""
Histórico de eventos de stock (ENTRY/WASTE) por intervalo de datas.
"""

import calendar
from dataclasses import dataclass
from datetime import date, datetime, time, timezone
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from sqlmodel import Session, select

from clearstock.model.restaurant import Restaurant
from clearstock.model.stock_event import StockEvent, StockEventType


class InvalidRange(ValueError):
    pass


@dataclass
class HistorySummary:
    entries: int = 0
    waste: int = 0


def _restaurant_tz(restaurant: Restaurant) -> ZoneInfo:
    try:
        return ZoneInfo(restaurant.timezone or "UTC")
    except ZoneInfoNotFoundError:
        return ZoneInfo("UTC")


def _to_utc(moment: datetime) -> datetime:
    # Perto de 0001-01-01 ou 9999-12-31 a conversão pode sair do intervalo de datetime
    try:
        return moment.astimezone(timezone.utc)
    except (OverflowError, ValueError):
        raise InvalidRange("Datas inválidas")


def parse_range_bound(value: str | None, restaurant: Restaurant, *, end: bool = False) -> datetime:
    """
    Converte um limite do intervalo em datetime UTC.

    Aceita datetime ISO (com ou sem fuso; sem fuso = fuso do restaurante) ou só a
    data: início do dia para o limite inferior, fim do dia para o superior.
    """
    text = (value or "").strip()
    if not text:
        raise InvalidRange("Datas inválidas")

    tz = _restaurant_tz(restaurant)
    try:
        if len(text) == 10:
            day = date.fromisoformat(text)
            moment = datetime.combine(day, time.max if end else time.min, tzinfo=tz)
        else:
            moment = datetime.fromisoformat(text.replace("Z", "+00:00"))
            if moment.tzinfo is None:
                moment = moment.replace(tzinfo=tz)
    except ValueError:
        raise InvalidRange("Datas inválidas")
    return _to_utc(moment)


def month_range(restaurant: Restaurant, year: int, month: int) -> tuple[datetime, datetime]:
    """[primeiro dia 00:00, último dia 23:59:59.999999] do mês, no fuso do restaurante."""
    if not 1 <= month <= 12 or not 1 <= year <= 9999:
        raise InvalidRange("Datas inválidas")
    tz = _restaurant_tz(restaurant)
    last_day = calendar.monthrange(year, month)[1]
    start = datetime(year, month, 1, tzinfo=tz)
    end = datetime.combine(date(year, month, last_day), time.max, tzinfo=tz)
    return _to_utc(start), _to_utc(end)


def list_events(
    session: Session,
    restaurant_id: int,
    start: datetime,
    end: datetime,
) -> list[StockEvent]:
    """Eventos do restaurante com start <= created_at <= end, por ordem cronológica."""
    if start > end:
        raise InvalidRange("Datas inválidas")
    return list(
        session.exec(
            select(StockEvent)
            .where(
                StockEvent.restaurant_id == restaurant_id,
                StockEvent.created_at >= start,
                StockEvent.created_at <= end,
            )
            .order_by(StockEvent.created_at.asc(), StockEvent.id.asc())
        ).all()
    )


def summarize(events: list[StockEvent]) -> HistorySummary:
    summary = HistorySummary()
    for event in events:
        if event.type == StockEventType.ENTRY:
            summary.entries += 1
        elif event.type == StockEventType.WASTE:
            summary.waste += 1
    return summary
