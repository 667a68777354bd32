import logging
import os

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from clearstock.api.route import router
from clearstock.config import get_settings

logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

GENERIC_ERROR = "Ocorreu um erro inesperado. Por favor, tente novamente."

SECURITY_HEADERS = {
    "X-Frame-Options": "DENY",
    "Content-Security-Policy": "frame-ancestors 'none'",
    "X-Content-Type-Options": "nosniff",
    "Referrer-Policy": "strict-origin-when-cross-origin",
    "Permissions-Policy": "camera=(self), microphone=(self), geolocation=()",
}

app = FastAPI(
    title="Clearstock API",
    description="API de gestão de stock e validades para restaurantes",
    version="1.0.0",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=get_settings().cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def _security_headers(request: Request, call_next):
    response = await call_next(request)
    for header, value in SECURITY_HEADERS.items():
        response.headers.setdefault(header, value)
    return response


app.include_router(router)


def _error_payload(*, code: str, message: str, details: object | None = None) -> dict:
    payload: dict = {"success": False, "error": message, "code": code}
    if details is not None:
        payload["details"] = details
    return payload


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    # Normaliza erros HTTP do FastAPI/Starlette para um payload consistente.
    code = f"HTTP_{exc.status_code}"
    message = exc.detail if isinstance(exc.detail, str) else "Pedido inválido"
    return JSONResponse(
        status_code=exc.status_code,
        content=_error_payload(code=code, message=message),
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    # Mensagem do primeiro erro (ex.: field_validator) para o utilizador
    message = "Pedido inválido"
    if errors:
        first = str(errors[0].get("msg", ""))
        message = first.removeprefix("Value error, ") or message
    return JSONResponse(
        status_code=422,
        content=_error_payload(code="VALIDATION_ERROR", message=message, details=_jsonable_errors(errors)),
    )


def _jsonable_errors(errors: list) -> list:
    # ctx pode trazer a própria exceção (não serializável)
    return [{k: v for k, v in error.items() if k in ("loc", "msg", "type")} for error in errors]


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    # Stack trace só no log; resposta genérica sem detalhes internos
    logger.error(f"Erro não tratado em {request.method} {request.url.path}: {exc}", exc_info=True)
    return JSONResponse(
        status_code=500,
        content=_error_payload(code="INTERNAL_ERROR", message=GENERIC_ERROR),
    )
