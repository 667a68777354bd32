"""Script para verificar conexão com o banco de dados (DATABASE_URL)."""
import sys

from sqlalchemy import inspect, text

from clearstock.db.session import engine

print(f"Conectando ao banco: {engine.url.render_as_string(hide_password=True)}")

try:
    with engine.connect() as conn:
        version = conn.execute(text("SELECT version();")).scalar()
        print("OK: Conexao bem-sucedida!")
        print(f"   Servidor: {str(version).split(',')[0]}")

    tables = sorted(inspect(engine).get_table_names())
    if tables:
        print(f"   Tabelas existentes: {', '.join(tables)}")
    else:
        print("   AVISO: Nenhuma tabela encontrada (execute 'alembic upgrade head')")

except Exception as e:
    print(f"ERRO ao conectar: {e}")
    print("\nDica: verifique DATABASE_URL no .env e se o PostgreSQL está a correr.")
    sys.exit(1)
