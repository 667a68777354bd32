import asyncio
from datetime import timedelta

from sqlmodel import select

from clearstock.auth.session import create_session
from clearstock.model.auth_session import AuthSession
from clearstock.model.base import utc_now
from clearstock.model.product_batch import BatchStatus, ProductBatch
from clearstock.model.stock_event import StockEvent, StockEventType
from clearstock.worker.job import register_expired_batches_job, sweep_sessions_job


def test_sweep_sessions_job(engine, session, restaurant):
    create_session(session, restaurant.id, days=1, now=utc_now() - timedelta(days=2))
    alive = create_session(session, restaurant.id)

    result = asyncio.run(sweep_sessions_job({"engine": engine}))

    assert result == {"ok": True, "deleted": 1}
    assert [s.token for s in session.exec(select(AuthSession)).all()] == [alive.token]


def test_register_expired_batches_job(engine, session, restaurant):
    batch = ProductBatch(
        restaurant_id=restaurant.id,
        name="Natas",
        quantity=2,
        unit="un",
        expiry_date=utc_now().date() - timedelta(days=3),
    )
    session.add(batch)
    session.commit()
    session.refresh(batch)

    result = asyncio.run(register_expired_batches_job({"engine": engine}))

    assert result == {"ok": True, "processed": 1, "failed": 0}
    session.expire_all()
    stored = session.get(ProductBatch, batch.id)
    assert (stored.quantity, stored.status) == (0, BatchStatus.USED)
    waste = session.exec(select(StockEvent).where(StockEvent.type == StockEventType.WASTE)).all()
    assert [(e.product_name, e.quantity) for e in waste] == [("Natas", 2)]
