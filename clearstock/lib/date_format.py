"""
Datas apresentadas ao utilizador.

Validades são mostradas no formato da região do restaurante (pt-PT → 15/03/2026);
campos <input type="date"> recebem sempre AAAA-MM-DD.
"""

from datetime import date

_ISO = "%Y-%m-%d"
_DAY_FIRST = "%d/%m/%Y"

# Locales cujo formato não é dia/mês/ano com barras
_SPECIAL_FORMATS: dict[str, str] = {
    "en-us": "%m/%d/%Y",
    "de": "%d.%m.%Y",
}

_DAY_FIRST_LANGUAGES = {"pt", "en", "es", "fr", "it"}


def _pattern_for(locale: str | None) -> str:
    tag = (locale or "").strip().lower()
    if not tag:
        return _ISO
    language = tag.split("-")[0]
    if tag in _SPECIAL_FORMATS:
        return _SPECIAL_FORMATS[tag]
    if language in _SPECIAL_FORMATS:
        return _SPECIAL_FORMATS[language]
    if language in _DAY_FIRST_LANGUAGES:
        return _DAY_FIRST
    return _ISO


def format_date_for_input(d: date) -> str:
    return d.isoformat()


def format_date_for_restaurant(d: date, locale: str | None) -> str:
    """
    Validade no formato da região do restaurante; locale desconhecido cai para ISO.

    :param locale: Locale BCP 47 do restaurante (ex: "pt-PT", "en-US").
    """
    return d.strftime(_pattern_for(locale))
