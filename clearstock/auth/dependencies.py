import logging

from fastapi import Depends, HTTPException, Request, Response, status
from sqlmodel import Session

from clearstock.auth.credentials import PinDirectory, get_pin_directory
from clearstock.auth.session import (
    LEGACY_COOKIE_NAME,
    SESSION_COOKIE_NAME,
    create_session,
    set_session_cookie,
    validate_session,
)
from clearstock.config import Settings, get_settings
from clearstock.db.session import get_session
from clearstock.model.base import utc_now
from clearstock.model.restaurant import Restaurant
from clearstock.services.restaurant_service import get_restaurant_by_id

logger = logging.getLogger(__name__)

NOT_AUTHENTICATED = "Não autenticado. Por favor, faça login novamente."


def get_client_key(request: Request) -> str:
    """Chave usada na limitação de tentativas (IP do cliente)."""
    return request.client.host if request.client else "unknown"


def _legacy_cookie_restaurant(
    request: Request,
    response: Response,
    session: Session,
    settings: Settings,
    pin_directory: PinDirectory,
) -> Restaurant | None:
    """
    Shim de migração do cookie antigo (id do restaurante em texto claro).

    Só é aceite até CLEARSTOCK_LEGACY_COOKIE_UNTIL. Quando aceite, troca-o por uma
    sessão nova e apaga o cookie antigo: o próximo pedido já usa o token opaco.
    """
    label = request.cookies.get(LEGACY_COOKIE_NAME)
    if not label or not settings.legacy_cookie_accepted(utc_now().date()):
        return None

    restaurant = pin_directory.resolve_label(label)
    if restaurant is None:
        return None

    auth_session = create_session(session, restaurant.id, days=settings.session_days)
    set_session_cookie(response, auth_session.token, days=settings.session_days, secure=settings.is_production)
    response.delete_cookie(LEGACY_COOKIE_NAME, path="/")
    logger.info(f"[AUTH] Cookie legado migrado para sessão: restaurant_id={restaurant.id}")
    return restaurant


def get_current_restaurant(
    request: Request,
    response: Response,
    session: Session = Depends(get_session),
    settings: Settings = Depends(get_settings),
    pin_directory: PinDirectory = Depends(get_pin_directory),
) -> Restaurant:
    """Dependency que retorna o restaurante autenticado pela sessão do cookie."""
    token = request.cookies.get(SESSION_COOKIE_NAME)
    restaurant_id = validate_session(session, token)
    if restaurant_id is not None:
        restaurant = get_restaurant_by_id(session, restaurant_id)
        if restaurant is not None:
            return restaurant

    restaurant = _legacy_cookie_restaurant(request, response, session, settings, pin_directory)
    if restaurant is not None:
        return restaurant

    raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=NOT_AUTHENTICATED)
