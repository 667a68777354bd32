from datetime import timedelta

from sqlmodel import select

from clearstock.auth.session import (
    create_session,
    destroy_session,
    sweep_expired_sessions,
    validate_session,
)
from clearstock.model.auth_session import AuthSession
from clearstock.model.base import utc_now


def test_create_session_generates_opaque_token(session, restaurant):
    now = utc_now()
    auth_session = create_session(session, restaurant.id, now=now)

    assert len(auth_session.token) == 64
    int(auth_session.token, 16)
    assert str(restaurant.id) != auth_session.token
    assert validate_session(session, auth_session.token, now=now) == restaurant.id


def test_each_login_creates_independent_session(session, restaurant):
    first = create_session(session, restaurant.id)
    second = create_session(session, restaurant.id)
    assert first.token != second.token

    destroy_session(session, first.token)
    assert validate_session(session, first.token) is None
    assert validate_session(session, second.token) == restaurant.id


def test_missing_or_unknown_token_is_not_authenticated(session):
    assert validate_session(session, None) is None
    assert validate_session(session, "") is None
    assert validate_session(session, "deadbeef") is None


def test_expired_session_is_rejected_and_deleted(session, restaurant):
    now = utc_now()
    auth_session = create_session(session, restaurant.id, days=7, now=now)
    token = auth_session.token

    assert validate_session(session, token, now=now + timedelta(days=7)) is None
    assert session.exec(select(AuthSession).where(AuthSession.token == token)).first() is None


def test_session_valid_until_expiry(session, restaurant):
    now = utc_now()
    auth_session = create_session(session, restaurant.id, days=7, now=now)
    almost = now + timedelta(days=7) - timedelta(seconds=1)
    assert validate_session(session, auth_session.token, now=almost) == restaurant.id


def test_validate_updates_last_used_at(session, restaurant):
    now = utc_now()
    auth_session = create_session(session, restaurant.id, now=now)
    later = now + timedelta(hours=2)

    validate_session(session, auth_session.token, now=later)

    session.refresh(auth_session)
    assert auth_session.last_used_at.replace(tzinfo=None) == later.replace(tzinfo=None)


def test_destroy_session(session, restaurant):
    auth_session = create_session(session, restaurant.id)
    assert destroy_session(session, auth_session.token) is True
    assert destroy_session(session, auth_session.token) is False
    assert destroy_session(session, None) is False


def test_sweep_deletes_only_expired(session, restaurant):
    now = utc_now()
    create_session(session, restaurant.id, days=7, now=now - timedelta(days=10))
    create_session(session, restaurant.id, days=7, now=now - timedelta(days=8))
    alive = create_session(session, restaurant.id, days=7, now=now)

    assert sweep_expired_sessions(session, now=now) == 2

    tokens = [s.token for s in session.exec(select(AuthSession)).all()]
    assert tokens == [alive.token]


def test_sweep_with_sessions_loaded_in_memory(session, restaurant):
    now = utc_now()
    expired = create_session(session, restaurant.id, days=1, now=now - timedelta(days=3))
    alive = create_session(session, restaurant.id, days=7, now=now)
    assert validate_session(session, alive.token, now=now) == restaurant.id
    session.refresh(expired)

    assert sweep_expired_sessions(session, now=now) == 1
    assert validate_session(session, alive.token, now=now) == restaurant.id
