import os
from logging.config import fileConfig

from sqlalchemy import engine_from_config, pool
from alembic import context
from sqlmodel import SQLModel

# Importa todos os modelos para que o SQLModel os registre
import clearstock.model  # noqa: F401
from clearstock.config import get_settings

config = context.config
if config.config_file_name is not None:
    fileConfig(config.config_file_name)


def get_url() -> str:
    # postgresql+psycopg:// usa o driver psycopg3 (o mesmo da aplicação)
    return os.environ.get("DATABASE_URL") or get_settings().database_url


config.set_main_option("sqlalchemy.url", get_url())

# Metadata do SQLModel com todos os modelos
target_metadata = SQLModel.metadata


def run_migrations_offline():
    url = get_url()
    context.configure(
        url=url,
        target_metadata=target_metadata,
        literal_binds=True,
        compare_type=True,
    )
    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online():
    connectable = engine_from_config(
        config.get_section(config.config_ini_section),
        prefix="sqlalchemy.",
        poolclass=pool.NullPool,
    )
    with connectable.connect() as connection:
        context.configure(
            connection=connection,
            target_metadata=target_metadata,
            compare_type=True,
            compare_server_default=True,
            # SQLite (desenvolvimento local) não suporta ALTER TABLE completo
            render_as_batch=connection.dialect.name == "sqlite",
        )
        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
