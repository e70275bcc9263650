# idi_canarias/i18n.py
"""Textos de interfaz (es/en), descripciones de estado de Eurostat y formato numérico por idioma."""
from __future__ import annotations
import math

from idi_canarias.config import DEFAULT_LANG
from idi_canarias.sectors import Sector, parse_sector

LANGS = ("es", "en")

TEXTS: dict[str, dict[str, str]] = {
    "es": {
        # Navegación
        "overview": "Visión General",
        "investment": "Inversión en I+D",
        "researchers": "Investigadores",
        "patents": "Patentes",
        "sources": "Fuentes de Datos",
        "quality": "Calidad de Datos",
        # Selectores
        "language": "Idioma",
        "year": "Año",
        "sector": "Sector",
        "community": "Comunidad autónoma",
        "country": "País",
        "dataset": "Dataset",
        # KPIs y gráficos
        "gdp_share": "Gasto en I+D (% PIB)",
        "rd_expenditure": "Gasto en I+D",
        "researchers_fte": "Investigadores (EJC)",
        "patent_applications": "Solicitudes de patentes",
        "ranking": "Ranking",
        "rank_of": "{rank} de {total}",
        "yoy": "Variación interanual",
        "vs_previous_year": "vs. año anterior",
        "sector_distribution": "Distribución por sectores",
        "timeline": "Evolución temporal",
        "comparison": "Canarias vs. España vs. UE",
        "map_title": "Europa: {metric} ({year})",
        "eu_average": "Media UE (por país)",
        "spain_average": "Media España (por comunidad)",
        "per_member_note": "Agregado dividido entre {n} países",
        "value": "Valor",
        "no_data": "Sin datos",
        "load_error": "No se pudo cargar {name}. Detalle: {error}",
        "quality_score": "Puntuación de calidad",
        "source": "Fuente",
        "million_eur": "millones €",
        "thousand_eur": "miles €",
    },
    "en": {
        "overview": "Overview",
        "investment": "R&D Investment",
        "researchers": "Researchers",
        "patents": "Patents",
        "sources": "Data Sources",
        "quality": "Data Quality",
        "language": "Language",
        "year": "Year",
        "sector": "Sector",
        "community": "Autonomous community",
        "country": "Country",
        "dataset": "Dataset",
        "gdp_share": "R&D expenditure (% GDP)",
        "rd_expenditure": "R&D expenditure",
        "researchers_fte": "Researchers (FTE)",
        "patent_applications": "Patent applications",
        "ranking": "Ranking",
        "rank_of": "{rank} of {total}",
        "yoy": "Year-over-year change",
        "vs_previous_year": "vs. previous year",
        "sector_distribution": "Sector distribution",
        "timeline": "Timeline",
        "comparison": "Canary Islands vs. Spain vs. EU",
        "map_title": "Europe: {metric} ({year})",
        "eu_average": "EU average (per country)",
        "spain_average": "Spain average (per community)",
        "per_member_note": "Aggregate divided by {n} countries",
        "value": "Value",
        "no_data": "No data",
        "load_error": "Could not load {name}. Details: {error}",
        "quality_score": "Quality score",
        "source": "Source",
        "million_eur": "million €",
        "thousand_eur": "thousand €",
    },
}

SECTOR_NAMES: dict[str, dict[Sector, str]] = {
    "es": {
        Sector.TOTAL: "Todos los sectores",
        Sector.BUSINESS: "Sector empresarial",
        Sector.GOVERNMENT: "Administración Pública",
        Sector.EDUCATION: "Enseñanza Superior",
        Sector.NONPROFIT: "Instituciones privadas sin fines de lucro",
    },
    "en": {
        Sector.TOTAL: "All sectors",
        Sector.BUSINESS: "Business enterprise",
        Sector.GOVERNMENT: "Government",
        Sector.EDUCATION: "Higher education",
        Sector.NONPROFIT: "Private non-profit",
    },
}

# Códigos de estado de observación de Eurostat
FLAG_DESCRIPTIONS: dict[str, dict[str, str]] = {
    "es": {
        "e": "Estimado",
        "p": "Provisional",
        "b": "Ruptura en la serie temporal",
        "d": "Definición difiere",
        "u": "Baja fiabilidad",
        "bd": "Ruptura en la serie y definición difiere",
        "bp": "Ruptura en la serie y provisional",
        "dp": "Definición difiere y provisional",
        "ep": "Estimado y provisional",
    },
    "en": {
        "e": "Estimated",
        "p": "Provisional",
        "b": "Break in time series",
        "d": "Definition differs",
        "u": "Low reliability",
        "bd": "Break in time series and definition differs",
        "bp": "Break in time series and provisional",
        "dp": "Definition differs and provisional",
        "ep": "Estimated and provisional",
    },
}


def _lang(lang: str | None) -> str:
    lang = (lang or DEFAULT_LANG).lower()[:2]
    return lang if lang in LANGS else "es"


def t(key: str, lang: str | None = None, **kw) -> str:
    """Texto traducido; si falta la clave se devuelve la propia clave."""
    text = TEXTS[_lang(lang)].get(key) or TEXTS["es"].get(key) or key
    return text.format(**kw) if kw else text


def sector_name(sector, lang: str | None = None) -> str:
    s = parse_sector(sector)
    if s is None:
        return str(sector)
    return SECTOR_NAMES[_lang(lang)][s]


def flag_description(flag, lang: str | None = None) -> str | None:
    if not flag:
        return None
    key = str(flag).strip().lower()
    return FLAG_DESCRIPTIONS[_lang(lang)].get(key)


# ─────────────────────────────────────────────────────────────
# Formato numérico
# ─────────────────────────────────────────────────────────────
def _is_missing(value) -> bool:
    if value is None or isinstance(value, bool):
        return True
    try:
        return not math.isfinite(float(value))
    except (TypeError, ValueError):
        return True


def format_number(value, lang: str | None = None, decimals: int = 2) -> str:
    """
    es: 1.234.567,89 (sin separador de miles en enteros de 4 cifras: 2022, 1234,5)
    en: 1,234,567.89
    None/NaN → texto "sin datos" del idioma.
    """
    lang = _lang(lang)
    if _is_missing(value):
        return t("no_data", lang)
    v = float(value)
    s = f"{abs(v):,.{decimals}f}"
    if lang == "es":
        int_part = s.split(".")[0].replace(",", "")
        if len(int_part) <= 4:
            s = s.replace(",", "")
        s = s.replace(",", "\x00").replace(".", ",").replace("\x00", ".")
    # evita "-0,00"
    sign = "-" if v < 0 and any(ch not in "0.," for ch in s) else ""
    return sign + s


def format_percent(value, lang: str | None = None, decimals: int = 2) -> str:
    if _is_missing(value):
        return t("no_data", lang)
    return f"{format_number(value, lang, decimals)}%"


def format_change(value, lang: str | None = None, decimals: int = 1) -> str:
    """Variación con signo: +2,9% / -10,0%."""
    if _is_missing(value):
        return t("no_data", lang)
    s = format_percent(value, lang, decimals)
    return s if s.startswith("-") else f"+{s}"
