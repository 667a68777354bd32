from datetime import timedelta

from sqlmodel import select

from clearstock.auth.throttle import LoginThrottle
from clearstock.model.base import utc_now
from clearstock.model.login_attempt import LoginAttempt


def test_locks_after_max_failures_within_window(session):
    throttle = LoginThrottle(session, max_attempts=5, window_seconds=60)
    now = utc_now()

    for i in range(4):
        throttle.register_failure("1.2.3.4", now=now + timedelta(seconds=i))
    assert throttle.retry_after("1.2.3.4", now=now + timedelta(seconds=5)) == 0

    throttle.register_failure("1.2.3.4", now=now + timedelta(seconds=5))
    retry = throttle.retry_after("1.2.3.4", now=now + timedelta(seconds=6))
    assert 0 < retry <= 60


def test_lock_expires_with_window(session):
    throttle = LoginThrottle(session, max_attempts=5, window_seconds=60)
    now = utc_now()
    for _ in range(5):
        throttle.register_failure("1.2.3.4", now=now)

    assert throttle.retry_after("1.2.3.4", now=now + timedelta(seconds=61)) == 0


def test_keys_are_independent(session):
    throttle = LoginThrottle(session, max_attempts=2, window_seconds=60)
    now = utc_now()
    throttle.register_failure("a", now=now)
    throttle.register_failure("a", now=now)

    assert throttle.retry_after("a", now=now) > 0
    assert throttle.retry_after("b", now=now) == 0


def test_reset_clears_failures(session):
    throttle = LoginThrottle(session, max_attempts=2, window_seconds=60)
    now = utc_now()
    throttle.register_failure("a", now=now)
    throttle.register_failure("a", now=now)

    throttle.reset("a")

    assert throttle.retry_after("a", now=now) == 0


def test_old_attempts_purged_while_loaded_in_memory(session):
    throttle = LoginThrottle(session, max_attempts=2, window_seconds=60)
    now = utc_now()
    throttle.register_failure("1.2.3.4", now=now - timedelta(minutes=5))
    throttle.register_failure("1.2.3.4", now=now - timedelta(minutes=4))
    loaded = session.exec(select(LoginAttempt)).all()
    assert len(loaded) == 2

    assert throttle.retry_after("1.2.3.4", now=now) == 0
    assert session.exec(select(LoginAttempt)).all() == []
