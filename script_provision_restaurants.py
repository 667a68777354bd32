"""
Aprovisiona os restaurantes da tabela semente (CLEARSTOCK_SEED_PINS) com o
catálogo inicial. Idempotente: restaurantes existentes não são alterados.

Uso: python script_provision_restaurants.py
"""
import logging
import os
import sys

from clearstock.auth.credentials import normalize_pin
from clearstock.config import get_settings
from clearstock.db.session import get_session_context
from clearstock.services.restaurant_service import provision_restaurant

logging.basicConfig(level=os.getenv("LOG_LEVEL", "INFO").upper())


def main() -> int:
    seeds = get_settings().seed_pins
    if not seeds:
        print("CLEARSTOCK_SEED_PINS vazio; nada a aprovisionar.")
        return 0

    failed = 0
    with get_session_context() as session:
        for raw_pin, label in seeds.items():
            pin = normalize_pin(raw_pin)
            if pin is None:
                print(f"ERRO: PIN inválido para label {label}: {raw_pin!r}")
                failed += 1
                continue
            try:
                restaurant = provision_restaurant(session, pin=pin, label=label)
            except ValueError as e:
                print(f"ERRO: {e}")
                failed += 1
                continue
            print(f"OK: label={label} PIN={pin} -> restaurant_id={restaurant.id}")
    return 1 if failed else 0


if __name__ == "__main__":
    sys.exit(main())
