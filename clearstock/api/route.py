import logging
import math
from datetime import date, datetime

from fastapi import APIRouter, Depends, File, Form, HTTPException, Query, UploadFile
from fastapi.responses import JSONResponse
from pydantic import BaseModel as PydanticBaseModel
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select

from clearstock.api.auth import MessageResponse, RestaurantInfo, router as auth_router
from clearstock.auth.dependencies import get_current_restaurant
from clearstock.config import Settings, get_settings
from clearstock.db.session import get_session
from clearstock.lib.date_format import format_date_for_input, format_date_for_restaurant
from clearstock.lib.form import (
    form_text,
    optional_non_negative_int,
    positive_int_or,
)
from clearstock.lib.ocr_date import extract_expiry_date
from clearstock.lib.voice_parser import ParsedVoiceCommand, parse_voice_command
from clearstock.model.base import utc_now
from clearstock.model.category import Category, ProductKind
from clearstock.model.location import Location
from clearstock.model.product_batch import BatchStatus
from clearstock.model.restaurant import Restaurant
from clearstock.model.stock_event import StockEventType
from clearstock.model.support_message import SupportMessage, SupportType
from clearstock.services import history_service
from clearstock.services.email_service import send_support_email
from clearstock.services.expiry import ExpiryStatus, expiry_label, restaurant_today
from clearstock.services.inventory_service import (
    BatchView,
    InvalidBatchInput,
    NotFoundError,
    adjust_batch_quantity,
    build_batch_input,
    create_batch,
    delete_batch,
    detach_category,
    detach_location,
    format_quantity,
    group_by_category,
    list_batch_views,
    parse_kind,
    update_batch,
)
from clearstock.services.restaurant_service import get_or_create_default_account, get_restaurant_catalog
from clearstock.services.speech_service import SpeechToTextClient, SpeechToTextError, get_speech_client

logger = logging.getLogger(__name__)

router = APIRouter()  # Sem tag padrão - cada endpoint define sua própria tag
router.include_router(auth_router)


@router.get("/health", tags=["Health"])
def health():
    return {"status": "ok"}


# ---------------------------------------------------------------------------
# Definições, categorias e localizações
# ---------------------------------------------------------------------------


class CategoryResponse(PydanticBaseModel):
    id: int
    name: str
    tipo: ProductKind
    alert_days_before_expiry: int | None
    warning_days_before_expiry: int | None

    class Config:
        from_attributes = True


class LocationResponse(PydanticBaseModel):
    id: int
    name: str

    class Config:
        from_attributes = True


class SettingsResponse(PydanticBaseModel):
    success: bool = True
    restaurant: RestaurantInfo
    categories: list[CategoryResponse]
    locations: list[LocationResponse]


class CreatedResponse(MessageResponse):
    id: int


def _get_category(session: Session, restaurant: Restaurant, category_id: int) -> Category:
    category = session.get(Category, category_id)
    if not category or category.restaurant_id != restaurant.id:
        raise HTTPException(status_code=404, detail="Categoria não encontrada.")
    return category


def _get_location(session: Session, restaurant: Restaurant, location_id: int) -> Location:
    location = session.get(Location, location_id)
    if not location or location.restaurant_id != restaurant.id:
        raise HTTPException(status_code=404, detail="Localização não encontrada.")
    return location


@router.get("/settings", response_model=SettingsResponse, tags=["Settings"])
def get_settings_page(
    restaurant: Restaurant = Depends(get_current_restaurant),
    session: Session = Depends(get_session),
):
    catalog = get_restaurant_catalog(session, restaurant)
    return SettingsResponse(
        restaurant=RestaurantInfo.model_validate(restaurant),
        categories=[CategoryResponse.model_validate(c) for c in catalog.categories],
        locations=[LocationResponse.model_validate(loc) for loc in catalog.locations],
    )


@router.post("/settings", response_model=MessageResponse, tags=["Settings"])
def update_settings(
    alert_days: str | None = Form(None, alias="alertDays"),
    warning_days: str | None = Form(None, alias="warningDays"),
    restaurant: Restaurant = Depends(get_current_restaurant),
    session: Session = Depends(get_session),
):
    """
    Limiar urgente: valor inválido ou <= 0 volta ao default 3.
    Limiar de aviso: vazio limpa (passa a usar o urgente).
    """
    restaurant.alert_days_before_expiry = positive_int_or(alert_days, 3)
    restaurant.warning_days_before_expiry = optional_non_negative_int(warning_days)
    restaurant.updated_at = utc_now()
    session.add(restaurant)
    session.commit()
    return MessageResponse(message="Definições guardadas com sucesso!")


@router.post("/category", response_model=CreatedResponse, status_code=201, tags=["Settings"])
def create_category(
    name: str | None = Form(None),
    tipo: str | None = Form(None),
    restaurant: Restaurant = Depends(get_current_restaurant),
    session: Session = Depends(get_session),
):
    clean_name = form_text(name)
    kind = parse_kind(tipo)
    if not clean_name:
        raise HTTPException(status_code=400, detail="Por favor, forneça um nome para a categoria.")

    kind_label = "matérias-primas" if kind == ProductKind.MP else "transformados"
    duplicate_msg = f'A categoria "{clean_name}" já existe para {kind_label}.'

    existing = session.exec(
        select(Category).where(
            Category.restaurant_id == restaurant.id,
            Category.name == clean_name,
            Category.tipo == kind,
        )
    ).first()
    if existing:
        raise HTTPException(status_code=409, detail=duplicate_msg)

    category = Category(restaurant_id=restaurant.id, name=clean_name, tipo=kind)
    session.add(category)
    try:
        session.commit()
    except IntegrityError as e:
        session.rollback()
        logger.warning(f"Categoria duplicada (corrida) no restaurante {restaurant.id}: {e.orig}")
        raise HTTPException(status_code=409, detail=duplicate_msg) from e
    session.refresh(category)
    return CreatedResponse(id=category.id, message=f'Categoria "{clean_name}" criada com sucesso!')


@router.delete("/category/{category_id}", response_model=MessageResponse, tags=["Settings"])
def delete_category(
    category_id: int,
    restaurant: Restaurant = Depends(get_current_restaurant),
    session: Session = Depends(get_session),
):
    """Apaga a categoria; os lotes que a usavam ficam sem categoria."""
    category = _get_category(session, restaurant, category_id)
    detach_category(session, restaurant.id, category.id)
    session.delete(category)
    session.commit()
    return MessageResponse(message="Categoria removida.")


@router.post("/category/{category_id}/alert", response_model=MessageResponse, tags=["Settings"])
def update_category_alert(
    category_id: int,
    alert_days: str | None = Form(None, alias="alertDays"),
    warning_days: str | None = Form(None, alias="warningDays"),
    restaurant: Restaurant = Depends(get_current_restaurant),
    session: Session = Depends(get_session),
):
    """Overrides da categoria: valor >= 0 é guardado, vazio/inválido volta ao default do restaurante."""
    category = _get_category(session, restaurant, category_id)
    category.alert_days_before_expiry = optional_non_negative_int(alert_days)
    category.warning_days_before_expiry = optional_non_negative_int(warning_days)
    category.updated_at = utc_now()
    session.add(category)
    session.commit()
    return MessageResponse(message=f'Alertas da categoria "{category.name}" atualizados.')


@router.post("/location", response_model=CreatedResponse, status_code=201, tags=["Settings"])
def create_location(
    name: str | None = Form(None),
    restaurant: Restaurant = Depends(get_current_restaurant),
    session: Session = Depends(get_session),
):
    clean_name = form_text(name)
    if not clean_name:
        raise HTTPException(status_code=400, detail="Por favor, forneça um nome para a localização.")

    duplicate_msg = f'A localização "{clean_name}" já existe.'
    existing = session.exec(
        select(Location).where(Location.restaurant_id == restaurant.id, Location.name == clean_name)
    ).first()
    if existing:
        raise HTTPException(status_code=409, detail=duplicate_msg)

    location = Location(restaurant_id=restaurant.id, name=clean_name)
    session.add(location)
    try:
        session.commit()
    except IntegrityError as e:
        session.rollback()
        logger.warning(f"Localização duplicada (corrida) no restaurante {restaurant.id}: {e.orig}")
        raise HTTPException(status_code=409, detail=duplicate_msg) from e
    session.refresh(location)
    return CreatedResponse(id=location.id, message=f'Localização "{clean_name}" criada com sucesso!')


@router.delete("/location/{location_id}", response_model=MessageResponse, tags=["Settings"])
def delete_location(
    location_id: int,
    restaurant: Restaurant = Depends(get_current_restaurant),
    session: Session = Depends(get_session),
):
    location = _get_location(session, restaurant, location_id)
    detach_location(session, restaurant.id, location.id)
    session.delete(location)
    session.commit()
    return MessageResponse(message="Localização removida.")


# ---------------------------------------------------------------------------
# Lotes de produto
# ---------------------------------------------------------------------------


class BatchResponse(PydanticBaseModel):
    id: int
    name: str
    quantity: float
    unit: str
    expiry_date: date
    expiry_date_display: str
    tipo: ProductKind
    category_id: int | None
    category_name: str | None
    location_id: int | None
    location_name: str | None
    packaging_type: str | None
    size: float | None
    size_unit: str | None
    status: BatchStatus
    days_to_expiry: int
    expiry_status: ExpiryStatus
    expiry_label: str


class BatchGroupResponse(PydanticBaseModel):
    category: str
    urgent_count: int
    items: list[BatchResponse]


class BatchListResponse(PydanticBaseModel):
    success: bool = True
    today: date
    groups: list[BatchGroupResponse]
    total: int


class DashboardResponse(PydanticBaseModel):
    success: bool = True
    today: date
    counts: dict[str, int]
    expired: list[BatchResponse]
    urgent: list[BatchResponse]
    warning: list[BatchResponse]


class AdjustResponse(MessageResponse):
    quantity: float
    status: BatchStatus
    wasted: float


def _batch_response(view: BatchView, restaurant: Restaurant) -> BatchResponse:
    batch = view.batch
    return BatchResponse(
        id=batch.id,
        name=batch.name,
        quantity=batch.quantity,
        unit=batch.unit,
        expiry_date=batch.expiry_date,
        expiry_date_display=format_date_for_restaurant(batch.expiry_date, restaurant.locale),
        tipo=batch.tipo,
        category_id=batch.category_id,
        category_name=view.category.name if view.category else None,
        location_id=batch.location_id,
        location_name=view.location.name if view.location else None,
        packaging_type=batch.packaging_type,
        size=batch.size,
        size_unit=batch.size_unit,
        status=batch.status,
        days_to_expiry=view.days_to_expiry,
        expiry_status=view.status,
        expiry_label=expiry_label(view.status, view.days_to_expiry),
    )


def _batch_form(
    name: str | None = Form(None),
    quantity: str | None = Form(None),
    unit: str | None = Form(None),
    expiry_date: str | None = Form(None, alias="expiryDate"),
    tipo: str | None = Form(None),
    category_id: str | None = Form(None, alias="categoryId"),
    location_id: str | None = Form(None, alias="locationId"),
    packaging_type: str | None = Form(None, alias="packagingType"),
    size: str | None = Form(None),
    size_unit: str | None = Form(None, alias="sizeUnit"),
):
    """Campos do formulário de entrada, convertidos antes de qualquer escrita."""
    try:
        return build_batch_input(
            name=name,
            quantity=quantity,
            expiry_date=expiry_date,
            unit=unit,
            tipo=tipo,
            category_id=category_id,
            location_id=location_id,
            packaging_type=packaging_type,
            size=size,
            size_unit=size_unit,
        )
    except InvalidBatchInput as e:
        raise HTTPException(status_code=400, detail=str(e)) from e


@router.get("/batch/list", response_model=BatchListResponse, tags=["Batch"])
def list_batches(
    include_used: bool = Query(False, description="Incluir lotes já usados (quantidade 0)"),
    restaurant: Restaurant = Depends(get_current_restaurant),
    session: Session = Depends(get_session),
):
    """Stock agrupado por categoria; grupos com expirados/urgentes aparecem primeiro."""
    today = restaurant_today(restaurant)
    views = list_batch_views(
        session,
        restaurant,
        today=today,
        status=None if include_used else BatchStatus.ACTIVE,
    )
    groups = [
        BatchGroupResponse(
            category=name,
            urgent_count=sum(1 for v in items if v.status in (ExpiryStatus.EXPIRED, ExpiryStatus.URGENT)),
            items=[_batch_response(v, restaurant) for v in items],
        )
        for name, items in group_by_category(views)
    ]
    return BatchListResponse(today=today, groups=groups, total=len(views))


@router.get("/dashboard", response_model=DashboardResponse, tags=["Batch"])
def dashboard(
    restaurant: Restaurant = Depends(get_current_restaurant),
    session: Session = Depends(get_session),
):
    """Resumo de hoje: contagens por estado de validade dos lotes ativos."""
    today = restaurant_today(restaurant)
    views = list_batch_views(session, restaurant, today=today, status=BatchStatus.ACTIVE)

    counts = {s.value: 0 for s in ExpiryStatus}
    for view in views:
        counts[view.status.value] += 1

    def by_status(wanted: ExpiryStatus) -> list[BatchResponse]:
        return [_batch_response(v, restaurant) for v in views if v.status == wanted]

    return DashboardResponse(
        today=today,
        counts=counts,
        expired=by_status(ExpiryStatus.EXPIRED),
        urgent=by_status(ExpiryStatus.URGENT),
        warning=by_status(ExpiryStatus.WARNING),
    )


@router.post("/batch", response_model=CreatedResponse, status_code=201, tags=["Batch"])
def create_batch_route(
    data=Depends(_batch_form),
    restaurant: Restaurant = Depends(get_current_restaurant),
    session: Session = Depends(get_session),
):
    account = get_or_create_default_account(session, restaurant.id)
    try:
        batch = create_batch(session, restaurant.id, data, account_id=account.id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e)) from e
    return CreatedResponse(id=batch.id, message=f'Entrada "{batch.name}" adicionada com sucesso ao stock!')


@router.put("/batch/{batch_id}", response_model=MessageResponse, tags=["Batch"])
def update_batch_route(
    batch_id: int,
    data=Depends(_batch_form),
    restaurant: Restaurant = Depends(get_current_restaurant),
    session: Session = Depends(get_session),
):
    try:
        batch = update_batch(session, restaurant.id, batch_id, data)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e)) from e
    return MessageResponse(message=f'Entrada "{batch.name}" atualizada.')


@router.delete("/batch/{batch_id}", response_model=MessageResponse, tags=["Batch"])
def delete_batch_route(
    batch_id: int,
    restaurant: Restaurant = Depends(get_current_restaurant),
    session: Session = Depends(get_session),
):
    try:
        delete_batch(session, restaurant.id, batch_id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e)) from e
    return MessageResponse(message="Entrada removida.")


@router.post("/batch/{batch_id}/adjust", response_model=AdjustResponse, tags=["Batch"])
def adjust_batch_route(
    batch_id: int,
    adjustment: str | None = Form(None),
    restaurant: Restaurant = Depends(get_current_restaurant),
    session: Session = Depends(get_session),
):
    try:
        value = float(form_text(adjustment).replace(",", "."))
    except ValueError:
        value = math.nan
    if not math.isfinite(value):
        raise HTTPException(status_code=400, detail="Ajuste de quantidade inválido.")

    try:
        batch, wasted = adjust_batch_quantity(session, restaurant.id, batch_id, value)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e)) from e

    return AdjustResponse(
        message=f"Quantidade ajustada para {format_quantity(batch.quantity)} {batch.unit}",
        quantity=batch.quantity,
        status=batch.status,
        wasted=wasted,
    )


# ---------------------------------------------------------------------------
# Histórico
# ---------------------------------------------------------------------------


class StockEventResponse(PydanticBaseModel):
    id: int
    type: StockEventType
    product_name: str
    quantity: float
    unit: str
    created_at: datetime

    class Config:
        from_attributes = True


class HistoryResponse(PydanticBaseModel):
    success: bool = True
    events: list[StockEventResponse]
    entries: int
    waste: int


@router.get("/history", response_model=HistoryResponse, tags=["History"])
def history(
    start_date: str | None = Query(None, description="Início (AAAA-MM-DD ou datetime ISO)"),
    end_date: str | None = Query(None, description="Fim (AAAA-MM-DD ou datetime ISO)"),
    year: int | None = Query(None),
    month: int | None = Query(None),
    restaurant_id: int | None = Query(None, description="Se enviado, tem de ser o restaurante autenticado"),
    restaurant: Restaurant = Depends(get_current_restaurant),
    session: Session = Depends(get_session),
):
    """
    Eventos ENTRY/WASTE por ordem cronológica, por intervalo (start_date/end_date)
    ou por mês (year/month, no fuso do restaurante).
    """
    if restaurant_id is not None and restaurant_id != restaurant.id:
        raise HTTPException(status_code=403, detail="Restaurante inválido")

    try:
        if year is not None and month is not None:
            start, end = history_service.month_range(restaurant, year, month)
        else:
            start = history_service.parse_range_bound(start_date, restaurant)
            end = history_service.parse_range_bound(end_date, restaurant, end=True)
        events = history_service.list_events(session, restaurant.id, start, end)
    except history_service.InvalidRange as e:
        raise HTTPException(status_code=400, detail=str(e)) from e

    summary = history_service.summarize(events)
    return HistoryResponse(
        events=[StockEventResponse.model_validate(e) for e in events],
        entries=summary.entries,
        waste=summary.waste,
    )


# ---------------------------------------------------------------------------
# Suporte
# ---------------------------------------------------------------------------


class SupportRequest(PydanticBaseModel):
    type: str | None = None
    message: str | None = None
    contact: str | None = None
    restaurant_id: int | None = None


class SupportResponse(PydanticBaseModel):
    success: bool = True
    id: int
    email_sent: bool


@router.post("/support", response_model=SupportResponse, status_code=201, tags=["Support"])
def create_support_message(
    body: SupportRequest,
    restaurant: Restaurant = Depends(get_current_restaurant),
    session: Session = Depends(get_session),
    settings: Settings = Depends(get_settings),
):
    """
    Grava o pedido de suporte e envia email ao admin.
    Falha no email é registada mas não falha o pedido (a mensagem já está gravada).
    """
    try:
        support_type = SupportType(form_text(body.type))
    except ValueError:
        raise HTTPException(status_code=400, detail="Tipo de mensagem inválido")

    message = form_text(body.message)
    if not message:
        raise HTTPException(status_code=400, detail="Mensagem é obrigatória")
    contact = form_text(body.contact)
    if not contact:
        raise HTTPException(status_code=400, detail="Contacto é obrigatório")

    if body.restaurant_id is not None and body.restaurant_id != restaurant.id:
        raise HTTPException(status_code=403, detail="Restaurante não corresponde à autenticação")

    support_message = SupportMessage(
        restaurant_id=restaurant.id,
        restaurant_name=restaurant.name,
        type=support_type,
        message=message,
        contact=contact,
    )
    session.add(support_message)
    session.commit()
    session.refresh(support_message)

    email_sent, error_msg = send_support_email(
        restaurant_name=restaurant.name,
        restaurant_pin=restaurant.pin,
        support_type=support_type,
        message=message,
        contact=contact,
        settings=settings,
    )
    if not email_sent:
        logger.warning(f"[EMAIL] Pedido de suporte {support_message.id} gravado sem email: {error_msg}")

    return SupportResponse(id=support_message.id, email_sent=email_sent)


# ---------------------------------------------------------------------------
# Voz e OCR
# ---------------------------------------------------------------------------


class TextRequest(PydanticBaseModel):
    text: str


class OcrDateResponse(PydanticBaseModel):
    success: bool = True
    expiry_date: date | None
    expiry_date_input: str | None


@router.post("/speech-to-text", tags=["Voice"])
async def speech_to_text(
    audio: UploadFile | None = File(None),
    restaurant: Restaurant = Depends(get_current_restaurant),
    client: SpeechToTextClient = Depends(get_speech_client),
):
    """Transcreve o áudio gravado (campo `audio`) e devolve {text}."""
    if audio is None:
        raise HTTPException(status_code=400, detail="No audio file provided")
    if not (audio.content_type or "").startswith("audio/"):
        raise HTTPException(status_code=400, detail="Invalid file type. Expected audio file.")

    content = await audio.read()
    try:
        text = await client.transcribe(content, filename=audio.filename, content_type=audio.content_type)
    except SpeechToTextError as e:
        payload = {"success": False, "error": e.message, "code": f"HTTP_{e.status_code}"}
        if e.details:
            payload["details"] = e.details
        return JSONResponse(status_code=e.status_code, content=payload)

    return {"success": True, "text": text}


@router.post("/parse/voice", response_model=ParsedVoiceCommand, tags=["Voice"])
def parse_voice(
    body: TextRequest,
    restaurant: Restaurant = Depends(get_current_restaurant),
):
    return parse_voice_command(body.text, today=restaurant_today(restaurant))


@router.post("/parse/ocr-date", response_model=OcrDateResponse, tags=["Voice"])
def parse_ocr_date(
    body: TextRequest,
    restaurant: Restaurant = Depends(get_current_restaurant),
):
    found = extract_expiry_date(body.text, today=restaurant_today(restaurant))
    return OcrDateResponse(
        expiry_date=found,
        expiry_date_input=format_date_for_input(found) if found else None,
    )
