"""
Mutações de lotes de produto e registo de eventos de stock.

Eventos (ENTRY/WASTE) são best-effort: uma falha ao gravar o evento é registada
no log e não desfaz a alteração do lote.
"""

import logging
from dataclasses import dataclass
from datetime import date

from sqlalchemy import update
from sqlmodel import Session, select

from clearstock.lib.form import (
    form_text,
    optional_id,
    optional_positive_number,
    optional_text,
    parse_form_date,
    positive_number_or,
)
from clearstock.model.base import utc_now
from clearstock.model.category import Category, ProductKind
from clearstock.model.location import Location
from clearstock.model.product_batch import BatchStatus, ProductBatch
from clearstock.model.restaurant import Restaurant
from clearstock.model.stock_event import StockEvent, StockEventType
from clearstock.services.expiry import (
    ExpiryStatus,
    classify_expiry,
    days_to_expiry,
    resolve_thresholds,
    restaurant_today,
)

logger = logging.getLogger(__name__)

DEFAULT_UNIT = "un"
NO_CATEGORY = "Sem Categoria"


class InvalidBatchInput(ValueError):
    """Campos obrigatórios em falta ou inválidos (rejeitado antes de qualquer escrita)."""


class NotFoundError(LookupError):
    """Entidade inexistente ou de outro restaurante."""


@dataclass
class BatchInput:
    name: str
    quantity: float
    unit: str
    expiry_date: date
    tipo: ProductKind = ProductKind.MP
    category_id: int | None = None
    location_id: int | None = None
    packaging_type: str | None = None
    size: float | None = None
    size_unit: str | None = None


@dataclass
class BatchView:
    batch: ProductBatch
    category: Category | None
    location: Location | None
    days_to_expiry: int
    status: ExpiryStatus


def parse_kind(value: str | None) -> ProductKind:
    return ProductKind.TRANSFORMADO if form_text(value) == ProductKind.TRANSFORMADO.value else ProductKind.MP


def format_quantity(quantity: float) -> str:
    return f"{quantity:g}"


def build_batch_input(
    *,
    name: str | None,
    quantity: str | None,
    expiry_date: str | None,
    unit: str | None = None,
    tipo: str | None = None,
    category_id: str | None = None,
    location_id: str | None = None,
    packaging_type: str | None = None,
    size: str | None = None,
    size_unit: str | None = None,
) -> BatchInput:
    """
    Converte os campos do formulário de entrada.

    Nome, quantidade e validade são obrigatórios; quantidade não numérica ou <= 0
    vira 1, unidade vazia vira "un", unidade de tamanho só conta com tamanho.
    """
    clean_name = form_text(name)
    if not clean_name or not form_text(quantity) or not form_text(expiry_date):
        raise InvalidBatchInput(
            "Por favor, preencha todos os campos obrigatórios (nome, quantidade e data de validade)."
        )

    parsed_expiry = parse_form_date(expiry_date)
    if parsed_expiry is None:
        raise InvalidBatchInput("Data de validade inválida. Por favor, selecione uma data válida.")

    parsed_size = optional_positive_number(size)
    return BatchInput(
        name=clean_name,
        quantity=positive_number_or(quantity, 1),
        unit=form_text(unit) or DEFAULT_UNIT,
        expiry_date=parsed_expiry,
        tipo=parse_kind(tipo),
        category_id=optional_id(category_id),
        location_id=optional_id(location_id),
        packaging_type=optional_text(packaging_type),
        size=parsed_size,
        size_unit=optional_text(size_unit) if parsed_size else None,
    )


def record_stock_event(
    session: Session,
    *,
    restaurant_id: int,
    event_type: StockEventType,
    product_name: str,
    quantity: float,
    unit: str,
) -> bool:
    """
    Histórico best-effort: não deve quebrar a operação se falhar.
    """
    try:
        session.add(
            StockEvent(
                restaurant_id=restaurant_id,
                type=event_type,
                product_name=product_name,
                quantity=quantity,
                unit=unit,
            )
        )
        session.commit()
        return True
    except Exception as e:
        session.rollback()
        logger.error(f"Erro ao registar evento {event_type.value} de '{product_name}': {e}", exc_info=True)
        return False


def _check_references(session: Session, restaurant_id: int, data: BatchInput) -> None:
    if data.category_id is not None:
        category = session.get(Category, data.category_id)
        if category is None or category.restaurant_id != restaurant_id:
            raise NotFoundError("Categoria não encontrada.")
    if data.location_id is not None:
        location = session.get(Location, data.location_id)
        if location is None or location.restaurant_id != restaurant_id:
            raise NotFoundError("Localização não encontrada.")


def get_batch_for_restaurant(session: Session, restaurant_id: int, batch_id: int) -> ProductBatch:
    batch = session.get(ProductBatch, batch_id)
    if batch is None or batch.restaurant_id != restaurant_id:
        raise NotFoundError("Entrada não encontrada.")
    return batch


def create_batch(
    session: Session,
    restaurant_id: int,
    data: BatchInput,
    *,
    account_id: int | None = None,
) -> ProductBatch:
    _check_references(session, restaurant_id, data)

    batch = ProductBatch(
        restaurant_id=restaurant_id,
        account_id=account_id,
        name=data.name,
        quantity=data.quantity,
        unit=data.unit,
        expiry_date=data.expiry_date,
        tipo=data.tipo,
        category_id=data.category_id,
        location_id=data.location_id,
        packaging_type=data.packaging_type,
        size=data.size,
        size_unit=data.size_unit,
    )
    session.add(batch)
    session.commit()
    session.refresh(batch)

    record_stock_event(
        session,
        restaurant_id=restaurant_id,
        event_type=StockEventType.ENTRY,
        product_name=data.name,
        quantity=data.quantity,
        unit=data.unit,
    )
    return batch


def update_batch(session: Session, restaurant_id: int, batch_id: int, data: BatchInput) -> ProductBatch:
    batch = get_batch_for_restaurant(session, restaurant_id, batch_id)
    _check_references(session, restaurant_id, data)

    batch.name = data.name
    batch.quantity = data.quantity
    batch.unit = data.unit
    batch.expiry_date = data.expiry_date
    batch.tipo = data.tipo
    batch.category_id = data.category_id
    batch.location_id = data.location_id
    batch.packaging_type = data.packaging_type
    batch.size = data.size
    batch.size_unit = data.size_unit
    if batch.quantity > 0 and batch.status == BatchStatus.USED:
        batch.status = BatchStatus.ACTIVE
    batch.updated_at = utc_now()

    session.add(batch)
    session.commit()
    session.refresh(batch)
    return batch


def adjust_batch_quantity(
    session: Session,
    restaurant_id: int,
    batch_id: int,
    adjustment: float,
) -> tuple[ProductBatch, float]:
    """
    Ajusta a quantidade (positivo ou negativo), sem descer abaixo de zero.

    Uma diminuição regista WASTE do que foi realmente retirado (nunca mais que a
    quantidade anterior). Quantidade 0 marca USED; um aumento a partir de USED
    volta a ACTIVE.

    :return: (lote atualizado, quantidade registada como desperdício)
    """
    batch = get_batch_for_restaurant(session, restaurant_id, batch_id)
    previous = batch.quantity
    new_quantity = max(0.0, previous + adjustment)

    wasted = 0.0
    if adjustment < 0 and previous > 0:
        wasted = min(abs(adjustment), previous)
        record_stock_event(
            session,
            restaurant_id=batch.restaurant_id,
            event_type=StockEventType.WASTE,
            product_name=batch.name,
            quantity=wasted,
            unit=batch.unit,
        )

    batch.quantity = new_quantity
    if new_quantity <= 0:
        batch.status = BatchStatus.USED
    elif batch.status == BatchStatus.USED:
        batch.status = BatchStatus.ACTIVE
    batch.updated_at = utc_now()

    session.add(batch)
    session.commit()
    session.refresh(batch)
    return batch, wasted


def delete_batch(session: Session, restaurant_id: int, batch_id: int) -> float:
    """
    Apaga o lote. Se ainda tinha quantidade, regista um WASTE da quantidade total.

    :return: quantidade registada como desperdício (0 se não havia stock)
    """
    batch = get_batch_for_restaurant(session, restaurant_id, batch_id)
    wasted = batch.quantity if batch.quantity > 0 else 0.0

    if wasted > 0:
        record_stock_event(
            session,
            restaurant_id=batch.restaurant_id,
            event_type=StockEventType.WASTE,
            product_name=batch.name,
            quantity=wasted,
            unit=batch.unit,
        )

    session.delete(batch)
    session.commit()
    return wasted


def register_expired_batches(session: Session, restaurant: Restaurant, *, today: date | None = None) -> int:
    """
    Lotes ACTIVE com stock e validade ultrapassada passam a desperdício:
    um WASTE da quantidade restante, quantidade 0 e status USED.

    :return: número de lotes processados
    """
    today = today or restaurant_today(restaurant)
    expired = session.exec(
        select(ProductBatch).where(
            ProductBatch.restaurant_id == restaurant.id,
            ProductBatch.status == BatchStatus.ACTIVE,
            ProductBatch.quantity > 0,
            ProductBatch.expiry_date < today,
        )
    ).all()

    for batch in expired:
        record_stock_event(
            session,
            restaurant_id=restaurant.id,
            event_type=StockEventType.WASTE,
            product_name=batch.name,
            quantity=batch.quantity,
            unit=batch.unit,
        )
        batch.quantity = 0
        batch.status = BatchStatus.USED
        batch.updated_at = utc_now()
        session.add(batch)
        session.commit()

    if expired:
        logger.info(f"{len(expired)} lote(s) expirado(s) registado(s) como desperdício: restaurant_id={restaurant.id}")
    return len(expired)


def detach_category(session: Session, restaurant_id: int, category_id: int) -> None:
    """Remove a categoria dos lotes antes de apagar a categoria."""
    session.exec(
        update(ProductBatch)
        .where(ProductBatch.restaurant_id == restaurant_id, ProductBatch.category_id == category_id)
        .values(category_id=None)
    )


def detach_location(session: Session, restaurant_id: int, location_id: int) -> None:
    session.exec(
        update(ProductBatch)
        .where(ProductBatch.restaurant_id == restaurant_id, ProductBatch.location_id == location_id)
        .values(location_id=None)
    )


def list_batch_views(
    session: Session,
    restaurant: Restaurant,
    *,
    today: date | None = None,
    status: BatchStatus | None = None,
) -> list[BatchView]:
    """Lotes do restaurante ordenados por validade, já classificados."""
    today = today or restaurant_today(restaurant)

    query = select(ProductBatch).where(ProductBatch.restaurant_id == restaurant.id)
    if status is not None:
        query = query.where(ProductBatch.status == status)
    batches = session.exec(query.order_by(ProductBatch.expiry_date.asc(), ProductBatch.id.asc())).all()

    categories = {
        c.id: c for c in session.exec(select(Category).where(Category.restaurant_id == restaurant.id)).all()
    }
    locations = {
        loc.id: loc for loc in session.exec(select(Location).where(Location.restaurant_id == restaurant.id)).all()
    }

    views: list[BatchView] = []
    for batch in batches:
        category = categories.get(batch.category_id) if batch.category_id is not None else None
        location = locations.get(batch.location_id) if batch.location_id is not None else None
        urgent, warning = resolve_thresholds(restaurant, category)
        days = days_to_expiry(batch.expiry_date, today)
        views.append(
            BatchView(
                batch=batch,
                category=category,
                location=location,
                days_to_expiry=days,
                status=classify_expiry(days, urgent, warning),
            )
        )
    return views


def group_by_category(views: list[BatchView]) -> list[tuple[str, list[BatchView]]]:
    """
    Agrupa por nome de categoria. Grupos com lotes expirados/urgentes primeiro,
    depois por nome.
    """
    groups: dict[str, list[BatchView]] = {}
    for view in views:
        name = view.category.name if view.category else NO_CATEGORY
        groups.setdefault(name, []).append(view)

    def has_alert(items: list[BatchView]) -> bool:
        return any(v.status in (ExpiryStatus.EXPIRED, ExpiryStatus.URGENT) for v in items)

    return sorted(groups.items(), key=lambda item: (not has_alert(item[1]), item[0].lower()))
