from clearstock.config import get_settings


def redis_dsn() -> str:
    return get_settings().redis_url


class WorkerSettings:
    # Arq procura estes atributos na classe de settings
    from arq.connections import RedisSettings
    from arq.cron import cron

    from clearstock.worker.job import register_expired_batches_job, sweep_sessions_job

    redis_settings = RedisSettings.from_dsn(redis_dsn())
    functions = [sweep_sessions_job, register_expired_batches_job]
    cron_jobs = [
        cron(sweep_sessions_job, minute=0),
        cron(register_expired_batches_job, hour=3, minute=15),
    ]
