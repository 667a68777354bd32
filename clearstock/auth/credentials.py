from __future__ import annotations

import enum
import logging
import re
from dataclasses import dataclass

from fastapi import Depends
from sqlmodel import Session

from clearstock.config import Settings, get_settings
from clearstock.db.session import get_session
from clearstock.model.restaurant import Restaurant
from clearstock.services.restaurant_service import (
    get_restaurant_by_label,
    get_restaurant_by_pin,
    provision_restaurant,
)

logger = logging.getLogger(__name__)

PIN_LENGTH = 6
LEGACY_PIN_LENGTH = 4
_DIGITS = re.compile(r"^\d+$")


def normalize_pin(pin: str | None) -> str | None:
    """
    Normaliza um PIN para o espaço de 6 dígitos.

    PINs legados de 4 dígitos recebem zeros à esquerda ("1111" -> "001111").
    Devolve None para qualquer outra forma (não numérico, outro tamanho).
    """
    if pin is None:
        return None
    pin = pin.strip()
    if not _DIGITS.match(pin):
        return None
    if len(pin) == LEGACY_PIN_LENGTH:
        return pin.zfill(PIN_LENGTH)
    if len(pin) == PIN_LENGTH:
        return pin
    return None


class PinLookupStatus(str, enum.Enum):
    NOT_FOUND = "NOT_FOUND"
    FOUND = "FOUND"
    # Restaurante existe mas ainda não tem nome -> onboarding
    NEEDS_ONBOARDING = "NEEDS_ONBOARDING"


@dataclass
class PinLookup:
    status: PinLookupStatus
    restaurant: Restaurant | None = None

    @property
    def found(self) -> bool:
        return self.status != PinLookupStatus.NOT_FOUND


class PinDirectory:
    """
    Credential store: PIN -> restaurante.

    A fonte de verdade é a coluna `restaurant.pin`. A tabela semente (PIN -> label legado,
    vinda da configuração) só serve para aprovisionar preguiçosamente restaurantes
    conhecidos que ainda não existem no banco.
    """

    def __init__(self, session: Session, seed_pins: dict[str, str] | None = None):
        self.session = session
        self.seed_pins: dict[str, str] = {}
        for raw_pin, label in (seed_pins or {}).items():
            pin = normalize_pin(raw_pin)
            if pin is None:
                logger.warning(f"[AUTH] PIN semente inválido ignorado para label={label}")
                continue
            self.seed_pins[pin] = label

    def label_for_pin(self, pin: str) -> str | None:
        return self.seed_pins.get(pin)

    def pin_for_label(self, label: str) -> str | None:
        for pin, seed_label in self.seed_pins.items():
            if seed_label == label:
                return pin
        return None

    def lookup(self, raw_pin: str | None) -> PinLookup:
        pin = normalize_pin(raw_pin)
        if pin is None:
            return PinLookup(PinLookupStatus.NOT_FOUND)

        restaurant = get_restaurant_by_pin(self.session, pin)
        if restaurant is None:
            label = self.label_for_pin(pin)
            if label is None:
                return PinLookup(PinLookupStatus.NOT_FOUND)
            restaurant = provision_restaurant(self.session, pin=pin, label=label)

        if not restaurant.name:
            return PinLookup(PinLookupStatus.NEEDS_ONBOARDING, restaurant)
        return PinLookup(PinLookupStatus.FOUND, restaurant)

    def resolve_label(self, label: str) -> Restaurant | None:
        """Resolve o identificador legado de uma letra (cookie antigo)."""
        restaurant = get_restaurant_by_label(self.session, label)
        if restaurant is not None:
            return restaurant
        pin = self.pin_for_label(label)
        if pin is None:
            return None
        return provision_restaurant(self.session, pin=pin, label=label)


def get_pin_directory(
    session: Session = Depends(get_session),
    settings: Settings = Depends(get_settings),
) -> PinDirectory:
    return PinDirectory(session, settings.seed_pins)
