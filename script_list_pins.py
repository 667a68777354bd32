"""Lista todos os restaurantes e respetivos PINs."""
import sys

from sqlmodel import select

from clearstock.db.session import get_session_context
from clearstock.model.restaurant import Restaurant


def main() -> int:
    with get_session_context() as session:
        restaurants = session.exec(select(Restaurant).order_by(Restaurant.id)).all()

    if not restaurants:
        print("Nenhum restaurante no banco.")
        return 0

    print(f"{len(restaurants)} restaurante(s):\n")
    for r in restaurants:
        print(f"  id={r.id:<4} PIN={r.pin}  label={r.label or '-':<3} nome={r.name or '(não definido)'}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
