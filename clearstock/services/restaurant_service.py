from __future__ import annotations

import logging
from dataclasses import dataclass, field

from sqlalchemy.dialects import postgresql, sqlite
from sqlmodel import Session, select

from clearstock.model.account import Account
from clearstock.model.base import utc_now
from clearstock.model.category import Category, ProductKind
from clearstock.model.location import Location
from clearstock.model.restaurant import Restaurant

logger = logging.getLogger(__name__)

STARTER_CATEGORIES = ("Frescos", "Congelados", "Secos")
STARTER_LOCATIONS = ("Frigorífico 1", "Despensa", "Arca")
DEFAULT_ACCOUNT_NAME = "Utilizador"


@dataclass
class RestaurantCatalog:
    restaurant: Restaurant
    categories: list[Category] = field(default_factory=list)
    locations: list[Location] = field(default_factory=list)


def _insert_for(session: Session):
    """
    INSERT com suporte a ON CONFLICT do dialeto atual.
    Postgres em produção, SQLite nos testes.
    """
    dialect = session.get_bind().dialect.name
    if dialect == "postgresql":
        return postgresql.insert
    if dialect == "sqlite":
        return sqlite.insert
    raise RuntimeError(f"Dialeto sem suporte a upsert: {dialect}")


def get_restaurant_by_id(session: Session, restaurant_id: int) -> Restaurant | None:
    return session.exec(select(Restaurant).where(Restaurant.id == int(restaurant_id))).first()


def get_restaurant_by_pin(session: Session, pin: str) -> Restaurant | None:
    return session.exec(select(Restaurant).where(Restaurant.pin == pin)).first()


def get_restaurant_by_label(session: Session, label: str) -> Restaurant | None:
    return session.exec(select(Restaurant).where(Restaurant.label == label)).first()


def ensure_starter_catalog(session: Session, restaurant_id: int) -> None:
    """
    Cria as categorias e localizações iniciais (idempotente).

    Usa ON CONFLICT DO NOTHING sobre as restrições únicas, então chamadas
    concorrentes não duplicam linhas.
    """
    insert = _insert_for(session)
    now = utc_now()
    for name in STARTER_CATEGORIES:
        session.exec(
            insert(Category)
            .values(
                restaurant_id=restaurant_id,
                name=name,
                tipo=ProductKind.MP.value,
                created_at=now,
                updated_at=now,
            )
            .on_conflict_do_nothing()
        )
    for name in STARTER_LOCATIONS:
        session.exec(
            insert(Location)
            .values(restaurant_id=restaurant_id, name=name, created_at=now, updated_at=now)
            .on_conflict_do_nothing()
        )
    session.commit()


def provision_restaurant(
    session: Session,
    *,
    pin: str,
    label: str | None = None,
    name: str | None = None,
) -> Restaurant:
    """
    Obtém ou cria o restaurante de um PIN (já normalizado).

    INSERT ... ON CONFLICT DO NOTHING seguido de releitura: dois pedidos simultâneos
    para o mesmo PIN novo criam exatamente uma linha. O catálogo inicial só é criado
    por quem efetivamente inseriu o restaurante.
    """
    insert = _insert_for(session)
    now = utc_now()
    result = session.exec(
        insert(Restaurant)
        .values(pin=pin, label=label, name=name, created_at=now, updated_at=now)
        .on_conflict_do_nothing()
    )
    session.commit()

    restaurant = get_restaurant_by_pin(session, pin)
    if restaurant is None:
        # Conflito noutra restrição (ex.: label já usado por outro PIN)
        raise ValueError(f"Não foi possível aprovisionar o restaurante (label={label!r} já em uso?)")

    if result.rowcount == 1:
        logger.info(f"[TENANT] Restaurante aprovisionado: id={restaurant.id}, label={label}")
        ensure_starter_catalog(session, restaurant.id)
    return restaurant


def get_restaurant_catalog(session: Session, restaurant: Restaurant) -> RestaurantCatalog:
    categories = session.exec(
        select(Category)
        .where(Category.restaurant_id == restaurant.id)
        .order_by(Category.tipo, Category.name)
    ).all()
    locations = session.exec(
        select(Location).where(Location.restaurant_id == restaurant.id).order_by(Location.name)
    ).all()
    return RestaurantCatalog(restaurant=restaurant, categories=list(categories), locations=list(locations))


def get_or_create_default_account(session: Session, restaurant_id: int) -> Account:
    """Utilizador que fica como autor das entradas; criado na primeira utilização."""
    account = session.exec(
        select(Account).where(Account.restaurant_id == restaurant_id).order_by(Account.id)
    ).first()
    if account:
        return account

    account = Account(restaurant_id=restaurant_id, name=DEFAULT_ACCOUNT_NAME)
    session.add(account)
    session.commit()
    session.refresh(account)
    return account
