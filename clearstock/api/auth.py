import logging

from fastapi import APIRouter, Depends, HTTPException, Request, Response, status
from pydantic import BaseModel, field_validator
from sqlmodel import Session

from clearstock.auth.credentials import PinDirectory, get_pin_directory
from clearstock.auth.dependencies import get_client_key, get_current_restaurant
from clearstock.auth.session import (
    LEGACY_COOKIE_NAME,
    SESSION_COOKIE_NAME,
    clear_session_cookie,
    create_session,
    destroy_session,
    set_session_cookie,
)
from clearstock.auth.throttle import LoginThrottle, get_login_throttle
from clearstock.config import Settings, get_settings
from clearstock.db.session import get_session
from clearstock.model.base import utc_now
from clearstock.model.restaurant import Restaurant

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["Auth"])

INVALID_PIN = "PIN inválido. Tente novamente."


class PinRequest(BaseModel):
    pin: str


class OnboardingRequest(BaseModel):
    name: str

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("Por favor, forneça um nome para o restaurante.")
        return v.strip()


class RestaurantInfo(BaseModel):
    id: int
    name: str | None
    alert_days_before_expiry: int
    warning_days_before_expiry: int | None
    timezone: str
    locale: str

    class Config:
        from_attributes = True


class LoginResponse(BaseModel):
    success: bool = True
    restaurant: RestaurantInfo
    needs_onboarding: bool


class LookupResponse(BaseModel):
    success: bool = True
    found: bool
    name: str | None = None


class MeResponse(BaseModel):
    success: bool = True
    restaurant: RestaurantInfo
    needs_onboarding: bool


class MessageResponse(BaseModel):
    success: bool = True
    message: str


def _check_throttle(throttle: LoginThrottle, client_key: str) -> None:
    retry_after = throttle.retry_after(client_key)
    if retry_after > 0:
        logger.warning(f"[AUTH] Login bloqueado para {client_key} durante {retry_after}s")
        raise HTTPException(
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            detail=f"Demasiadas tentativas. Tente novamente em {retry_after} segundos.",
            headers={"Retry-After": str(retry_after)},
        )


@router.post("/login", response_model=LoginResponse)
def login(
    body: PinRequest,
    request: Request,
    response: Response,
    session: Session = Depends(get_session),
    settings: Settings = Depends(get_settings),
    pin_directory: PinDirectory = Depends(get_pin_directory),
    throttle: LoginThrottle = Depends(get_login_throttle),
):
    """
    Valida o PIN e cria uma sessão nova (cookie HTTP-only).
    Cada login gera um token independente; sessões anteriores continuam válidas.
    """
    client_key = get_client_key(request)
    _check_throttle(throttle, client_key)

    result = pin_directory.lookup(body.pin)
    if not result.found:
        throttle.register_failure(client_key)
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=INVALID_PIN)

    throttle.reset(client_key)
    restaurant = result.restaurant
    auth_session = create_session(session, restaurant.id, days=settings.session_days)
    set_session_cookie(response, auth_session.token, days=settings.session_days, secure=settings.is_production)
    response.delete_cookie(LEGACY_COOKIE_NAME, path="/")
    logger.info(f"[AUTH] Login bem-sucedido: restaurant_id={restaurant.id}")

    return LoginResponse(
        restaurant=RestaurantInfo.model_validate(restaurant),
        needs_onboarding=not restaurant.name,
    )


@router.post("/logout", response_model=MessageResponse)
def logout(
    request: Request,
    response: Response,
    session: Session = Depends(get_session),
):
    destroy_session(session, request.cookies.get(SESSION_COOKIE_NAME))
    clear_session_cookie(response)
    response.delete_cookie(LEGACY_COOKIE_NAME, path="/")
    return MessageResponse(message="Sessão terminada.")


@router.get("/me", response_model=MeResponse)
def me(restaurant: Restaurant = Depends(get_current_restaurant)):
    return MeResponse(
        restaurant=RestaurantInfo.model_validate(restaurant),
        needs_onboarding=not restaurant.name,
    )


@router.post("/lookup", response_model=LookupResponse)
def lookup(
    body: PinRequest,
    request: Request,
    pin_directory: PinDirectory = Depends(get_pin_directory),
    throttle: LoginThrottle = Depends(get_login_throttle),
):
    """Nome do restaurante do PIN (saudação no ecrã de login). Conta como tentativa se falhar."""
    client_key = get_client_key(request)
    _check_throttle(throttle, client_key)

    result = pin_directory.lookup(body.pin)
    if not result.found:
        throttle.register_failure(client_key)
        return LookupResponse(found=False)
    return LookupResponse(found=True, name=result.restaurant.name)


@router.post("/onboarding", response_model=MessageResponse)
def onboarding(
    body: OnboardingRequest,
    restaurant: Restaurant = Depends(get_current_restaurant),
    session: Session = Depends(get_session),
):
    restaurant.name = body.name
    restaurant.updated_at = utc_now()
    session.add(restaurant)
    session.commit()
    logger.info(f"[TENANT] Nome do restaurante definido: id={restaurant.id}")
    return MessageResponse(message=f'Nome do restaurante atualizado para "{body.name}"!')
