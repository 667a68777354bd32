import logging
from typing import Any

from sqlmodel import Session, select

from clearstock.auth.session import sweep_expired_sessions
from clearstock.db.session import engine
from clearstock.model.restaurant import Restaurant
from clearstock.services.inventory_service import register_expired_batches

logger = logging.getLogger(__name__)


def _engine(ctx: dict[str, Any]):
    # Testes podem injetar outro engine no contexto do worker
    return ctx.get("engine") or engine


async def sweep_sessions_job(ctx: dict[str, Any]) -> dict[str, Any]:
    """Apaga sessões de login expiradas."""
    with Session(_engine(ctx)) as session:
        deleted = sweep_expired_sessions(session)
    logger.info(f"[AUTH] Varrimento de sessões: {deleted} sessão(ões) expirada(s) apagada(s)")
    return {"ok": True, "deleted": deleted}


async def register_expired_batches_job(ctx: dict[str, Any]) -> dict[str, Any]:
    """
    Regista como desperdício os lotes ativos já expirados, restaurante a restaurante
    (cada um com o seu "hoje" no próprio fuso).

    Falha num restaurante é registada e não impede os restantes.
    """
    processed = 0
    failed = 0
    with Session(_engine(ctx)) as session:
        restaurants = session.exec(select(Restaurant).order_by(Restaurant.id)).all()
        for restaurant in restaurants:
            try:
                processed += register_expired_batches(session, restaurant)
            except Exception as e:
                session.rollback()
                failed += 1
                logger.error(f"Erro ao registar expirados do restaurante {restaurant.id}: {e}", exc_info=True)
    return {"ok": failed == 0, "processed": processed, "failed": failed}
