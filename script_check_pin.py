"""
Verifica se um PIN existe no banco.

Uso: python script_check_pin.py <PIN>
"""
import sys

from sqlmodel import select

from clearstock.auth.credentials import normalize_pin
from clearstock.db.session import get_session_context
from clearstock.model.restaurant import Restaurant
from clearstock.services.restaurant_service import get_restaurant_by_pin


def main() -> int:
    if len(sys.argv) < 2:
        print("Uso: python script_check_pin.py <PIN>")
        return 1

    pin = normalize_pin(sys.argv[1])
    if pin is None:
        print(f"PIN inválido: {sys.argv[1]!r} (esperado 4 ou 6 dígitos)")
        return 1
    print(f"PIN normalizado: {pin}")

    with get_session_context() as session:
        restaurant = get_restaurant_by_pin(session, pin)
        if restaurant:
            print("\nOK: PIN encontrado")
            print(f"  ID: {restaurant.id}")
            print(f"  Label: {restaurant.label or '(sem label)'}")
            print(f"  Nome: {restaurant.name or '(não definido)'}")
            print(f"  Criado: {restaurant.created_at}")
            return 0

        print("\nPIN não encontrado no banco")
        recent = session.exec(select(Restaurant).order_by(Restaurant.created_at.desc()).limit(10)).all()
        print("\nÚltimos 10 restaurantes:")
        for i, r in enumerate(recent, start=1):
            print(f"  {i}. PIN: {r.pin} - Nome: {r.name or '(não definido)'}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
