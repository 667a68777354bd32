"""
Parser de comandos de voz em português para pré-preencher uma entrada de stock.

Extrai quantidade/unidade, validade (dias relativos), nome do produto e pistas
opcionais (feito em casa, categoria). Função pura: sem estado e sem acesso ao banco.

Exemplos:
  - "Adicionar 5 kg de leite com validade em 3 dias"
  - "10 unidades de arroz válido até daqui a 7 dias"
  - "3 litros de azeite expira hoje"
"""

import re
from datetime import date, timedelta
from typing import Callable

from pydantic import BaseModel as PydanticBaseModel

_MAX_EXPIRY_DAYS = 365


class ParsedVoiceCommand(PydanticBaseModel):
    name: str | None = None
    quantity: str | None = None
    unit: str | None = None
    expiry_days: int | None = None
    expiry_date: date | None = None
    category: str | None = None
    homemade: bool = False


def _liquid_unit(full_match: str) -> str:
    full_match = full_match.lower()
    if "ml" in full_match or "mililitro" in full_match:
        return "ml"
    return "L"


# (regex, resolver da unidade a partir do match completo); ordem = prioridade
_QUANTITY_PATTERNS: list[tuple[re.Pattern[str], Callable[[str], str]]] = [
    (re.compile(r"(\d+(?:[.,]\d+)?)\s*(?:kg|quilograma|quilogramas|kilo|kilos)", re.I), lambda _: "kg"),
    (re.compile(r"(\d+(?:[.,]\d+)?)\s*(?:l|litro|litros|ml|mililitro|mililitros)", re.I), _liquid_unit),
    (re.compile(r"(\d+(?:[.,]\d+)?)\s*(?:un|unidade|unidades|uni)", re.I), lambda _: "un"),
    (re.compile(r"(\d+(?:[.,]\d+)?)\s*(?:peça|peças)", re.I), lambda _: "un"),
    (re.compile(r"(\d+(?:[.,]\d+)?)\s*(?:pacote|pacotes)", re.I), lambda _: "un"),
    # Só um número no início: unidade por defeito
    (re.compile(r"^(\d+(?:[.,]\d+)?)(?:\s|$)"), lambda _: "un"),
]

_DAYS_PATTERNS = [
    re.compile(r"(?:em|daqui a|dentro de|válido em|expira em)\s*(\d+)\s*(?:dia|dias)", re.I),
    re.compile(r"\+(\d+)\s*(?:dia|dias)", re.I),
    re.compile(r"(\d+)\s*(?:dia|dias)\s*(?:de validade|para expirar)", re.I),
    re.compile(r"(\d+)\s*dias?", re.I),
]

_TOMORROW_CUES = ("amanhã", "+1 dia", "em 1 dia", "daqui a 1 dia")
_HOMEMADE_CUES = ("feito na casa", "feito em casa", "caseiro")

_CATEGORY_KEYWORDS = {
    "fresco": "Frescos",
    "frescos": "Frescos",
    "congelado": "Congelados",
    "congelados": "Congelados",
    "seco": "Secos",
    "secos": "Secos",
}


def _extract_quantity_and_unit(text: str) -> tuple[str, str] | None:
    for pattern, resolve_unit in _QUANTITY_PATTERNS:
        match = pattern.search(text)
        if match:
            quantity = match.group(1).replace(",", ".")
            return quantity, resolve_unit(match.group(0))
    return None


def _extract_expiry_days(text: str) -> int | None:
    if "hoje" in text:
        return 0
    if any(cue in text for cue in _TOMORROW_CUES):
        return 1

    for pattern in _DAYS_PATTERNS:
        match = pattern.search(text)
        if match:
            days = int(match.group(1))
            if 0 <= days <= _MAX_EXPIRY_DAYS:
                return days
    return None


def _extract_product_name(text: str, quantity_match: tuple[str, str] | None) -> str:
    cleaned = re.sub(r"adicionar|adiciona|adicionar ao stock|adicionar produto", "", text, flags=re.I)
    cleaned = re.sub(
        r"com validade|válido|expira|válido até|válido em|expira em|expira daqui", "", cleaned, flags=re.I
    )
    cleaned = re.sub(r"em \d+ dias?|daqui a \d+ dias?|\+?\d+ dias?", "", cleaned, flags=re.I)
    cleaned = re.sub(r"hoje|amanhã", "", cleaned, flags=re.I)
    cleaned = re.sub(r"feito na casa|feito em casa|caseiro", "", cleaned, flags=re.I).strip()

    if quantity_match:
        quantity, unit = quantity_match
        cleaned = re.sub(
            rf"\b{re.escape(quantity)}\s*{re.escape(unit)}\b", "", cleaned, flags=re.I
        )

    # "de" no início é só conector ("5 kg de leite")
    cleaned = re.sub(r"^\s*de\s+", "", cleaned, flags=re.I)
    cleaned = re.sub(
        r"\b(unidade|unidades|un|kg|quilograma|litro|litros|ml|mililitro)\b", "", cleaned, flags=re.I
    )
    cleaned = re.sub(r"\s+", " ", cleaned).strip()

    if not cleaned:
        return ""
    return " ".join(word[:1].upper() + word[1:].lower() for word in cleaned.split(" "))


def _extract_category(text: str) -> str | None:
    for keyword, category in _CATEGORY_KEYWORDS.items():
        if keyword in text:
            return category
    return None


def parse_voice_command(text: str, today: date | None = None) -> ParsedVoiceCommand:
    """
    Interpreta um comando de voz e devolve os campos reconhecidos.

    :param text: Transcrição do comando (qualquer capitalização).
    :param today: Data de referência para calcular expiry_date (defeito: hoje).
    :return: ParsedVoiceCommand; campos não reconhecidos ficam None.
    """
    today = today or date.today()
    lower_text = (text or "").lower().strip()
    result = ParsedVoiceCommand()

    quantity_match = _extract_quantity_and_unit(lower_text)
    if quantity_match:
        result.quantity, result.unit = quantity_match

    days = _extract_expiry_days(lower_text)
    if days is not None:
        result.expiry_days = days
        result.expiry_date = today + timedelta(days=days)

    result.name = _extract_product_name(lower_text, quantity_match)

    if any(cue in lower_text for cue in _HOMEMADE_CUES):
        result.homemade = True

    result.category = _extract_category(lower_text)
    return result
