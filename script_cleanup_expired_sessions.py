"""Apaga sessões de login expiradas (o worker faz o mesmo de hora a hora)."""
import logging
import os
import sys

from clearstock.auth.session import sweep_expired_sessions
from clearstock.db.session import get_session_context

logging.basicConfig(level=os.getenv("LOG_LEVEL", "INFO").upper())


def main() -> int:
    with get_session_context() as session:
        deleted = sweep_expired_sessions(session)
    print(f"OK: {deleted} sessão(ões) expirada(s) apagada(s)")
    return 0


if __name__ == "__main__":
    sys.exit(main())
