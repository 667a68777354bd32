"""
Coerção de campos de formulário (form-data chega sempre como texto ou ausente).

Regras seguem o comportamento dos formulários: strings vazias contam como ausentes,
números inválidos caem para o default em vez de rejeitar o pedido.
"""

import math
from datetime import date, datetime


def form_text(value: str | None) -> str:
    return (value or "").strip()


def optional_text(value: str | None) -> str | None:
    text = form_text(value)
    return text or None


def _to_number(value: str | None) -> float | None:
    text = form_text(value)
    if not text:
        return None
    try:
        number = float(text.replace(",", "."))
    except ValueError:
        return None
    if not math.isfinite(number):
        return None
    return number


def positive_number_or(value: str | None, default: float) -> float:
    """Número > 0 ou o default (ex.: quantidade inválida vira 1)."""
    number = _to_number(value)
    if number is None or number <= 0:
        return default
    return number


def optional_positive_number(value: str | None) -> float | None:
    number = _to_number(value)
    if number is None or number <= 0:
        return None
    return number


def optional_non_negative_int(value: str | None) -> int | None:
    """Inteiro >= 0 ou None (campo vazio/inválido limpa o override)."""
    number = _to_number(value)
    if number is None or number < 0:
        return None
    return int(number)


def positive_int_or(value: str | None, default: int) -> int:
    number = _to_number(value)
    if number is None or number <= 0:
        return default
    return int(number)


def optional_id(value: str | None) -> int | None:
    """IDs de selects: vazio ou "undefined" = sem valor."""
    text = form_text(value)
    if not text or text in ("undefined", "null"):
        return None
    try:
        return int(text)
    except ValueError:
        return None


def parse_form_date(value: str | None) -> date | None:
    """Aceita AAAA-MM-DD ou datetime ISO; devolve None se inválido."""
    text = form_text(value)
    if not text:
        return None
    try:
        return date.fromisoformat(text)
    except ValueError:
        pass
    try:
        return datetime.fromisoformat(text.replace("Z", "+00:00")).date()
    except ValueError:
        return None
