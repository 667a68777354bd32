"""
Extração da data de validade a partir de texto OCR de rótulos.

Padrões tentados por ordem de preferência: DD/MM/AAAA, DD/MM/AA, MM/AAAA.
Datas com mais de 30 dias no passado são rejeitadas (provavelmente data de fabrico).
"""

import calendar
import re
from datetime import date, timedelta
from typing import Callable, Iterable

_MAX_PAST_DAYS = 30

_FULL_DATE = re.compile(r"(\d{1,2})[/\-](\d{1,2})[/\-](\d{4})")
_SHORT_YEAR_DATE = re.compile(r"(\d{1,2})[/\-](\d{1,2})[/\-](\d{2})\b")
_MONTH_YEAR = re.compile(r"(\d{1,2})[/\-](\d{4})\b")


def _safe_date(year: int, month: int, day: int) -> date | None:
    if not (1 <= day <= 31 and 1 <= month <= 12):
        return None
    try:
        return date(year, month, day)
    except ValueError:
        # ex.: 31/02
        return None


def _parse_full(matches: Iterable[re.Match[str]]) -> date | None:
    for m in matches:
        parsed = _safe_date(int(m.group(3)), int(m.group(2)), int(m.group(1)))
        if parsed:
            return parsed
    return None


def _parse_short_year(matches: Iterable[re.Match[str]]) -> date | None:
    for m in matches:
        year_2d = int(m.group(3))
        # 00-30 -> 2000-2030, 31-99 -> 1931-1999
        year = 2000 + year_2d if year_2d <= 30 else 1900 + year_2d
        parsed = _safe_date(year, int(m.group(2)), int(m.group(1)))
        if parsed:
            return parsed
    return None


def _parse_month_year(matches: Iterable[re.Match[str]]) -> date | None:
    for m in matches:
        month, year = int(m.group(1)), int(m.group(2))
        if 1 <= month <= 12 and year >= 1:
            # Validade só com mês: último dia do mês
            return date(year, month, calendar.monthrange(year, month)[1])
    return None


_PATTERNS: list[tuple[re.Pattern[str], Callable[[Iterable[re.Match[str]]], date | None]]] = [
    (_FULL_DATE, _parse_full),
    (_SHORT_YEAR_DATE, _parse_short_year),
    (_MONTH_YEAR, _parse_month_year),
]


def normalize_ocr_text(text: str) -> str:
    """Remove ruído comum do OCR: espaços repetidos, | lido em vez de 1, O em vez de 0."""
    return re.sub(r"\s+", " ", text).replace("|", "1").replace("O", "0").strip()


def extract_expiry_date(text: str | None, today: date | None = None) -> date | None:
    """
    Devolve a data de validade plausível encontrada no texto, ou None.

    :param text: Texto bruto do OCR.
    :param today: Data de referência para rejeitar datas antigas (defeito: hoje).
    """
    if not text or not isinstance(text, str):
        return None

    today = today or date.today()
    oldest_accepted = today - timedelta(days=_MAX_PAST_DAYS)
    normalized = normalize_ocr_text(text)

    for pattern, parser in _PATTERNS:
        matches = list(pattern.finditer(normalized))
        if not matches:
            continue
        parsed = parser(matches)
        if parsed and parsed >= oldest_accepted:
            return parsed

    return None
