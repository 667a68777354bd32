from contextlib import contextmanager
from typing import Generator

from sqlmodel import Session, create_engine

from clearstock.config import get_settings

# URL do banco de dados
# postgresql+psycopg:// força o driver psycopg3
DATABASE_URL = get_settings().database_url

# Engine singleton
engine = create_engine(DATABASE_URL, echo=False, pool_pre_ping=True)


def get_session() -> Generator[Session, None, None]:
    """Dependency do FastAPI para obter sessão do banco."""
    with Session(engine) as session:
        yield session


@contextmanager
def get_session_context() -> Generator[Session, None, None]:
    """Context manager para obter sessão do banco (uso fora de FastAPI Depends)."""
    with Session(engine) as session:
        yield session
