# idi_canarias/sectors.py
"""Sectores de ejecución de I+D y sus etiquetas en cada dataset."""
from __future__ import annotations
from enum import Enum

from idi_canarias.text_norm import normalize_key


class Sector(str, Enum):
    TOTAL = "total"
    BUSINESS = "business"
    GOVERNMENT = "government"
    EDUCATION = "education"
    NONPROFIT = "nonprofit"


# Vocabularios de etiquetas tal y como aparecen en cada fuente
VOCABULARIES: dict[str, dict[Sector, str]] = {
    # Eurostat, gasto en I+D (% PIB / millones €)
    "eurostat": {
        Sector.TOTAL: "All Sectors",
        Sector.BUSINESS: "Business enterprise sector",
        Sector.GOVERNMENT: "Government sector",
        Sector.EDUCATION: "Higher education sector",
        Sector.NONPROFIT: "Private non-profit sector",
    },
    # Eurostat, columna sectperf (investigadores)
    "sectperf": {
        Sector.TOTAL: "TOTAL",
        Sector.BUSINESS: "BES",
        Sector.GOVERNMENT: "GOV",
        Sector.EDUCATION: "HES",
        Sector.NONPROFIT: "PNP",
    },
    # INE, SECTOR_EJECUCION_CODE / "Sector Id"
    "ine": {
        Sector.TOTAL: "_T",
        Sector.BUSINESS: "EMPRESAS",
        Sector.GOVERNMENT: "ADMINISTRACION_PUBLICA",
        Sector.EDUCATION: "ENSENIANZA_SUPERIOR",
        Sector.NONPROFIT: "IPSFL",
    },
}

# Equivalencias "todos los sectores"
_TOTAL_ALIASES = {"total", "all", "all sectors", "todos los sectores", "_t", "(_t)"}

# Etiquetas extra observadas en los CSV (nombres largos en INE / Eurostat)
_EXTRA_LABELS: dict[Sector, set[str]] = {
    Sector.BUSINESS: {"sector empresarial", "empresas"},
    Sector.GOVERNMENT: {"administracion publica", "sector gubernamental"},
    Sector.EDUCATION: {"ensenanza superior", "sector educativo superior"},
    Sector.NONPROFIT: {"private non-profit institutions", "instituciones privadas sin fines de lucro"},
}


def _build_labels() -> dict[Sector, frozenset[str]]:
    out: dict[Sector, set[str]] = {s: {s.value} for s in Sector}
    for vocab in VOCABULARIES.values():
        for sector, label in vocab.items():
            key = normalize_key(label)
            out[sector].add(key)
            out[sector].add(f"({key})")
    out[Sector.TOTAL] |= _TOTAL_ALIASES
    for sector, labels in _EXTRA_LABELS.items():
        out[sector] |= labels
    return {s: frozenset(v) for s, v in out.items()}


SECTOR_LABELS: dict[Sector, frozenset[str]] = _build_labels()


def parse_sector(label) -> Sector | None:
    """Etiqueta de cualquier dataset (o id interno) → Sector. None si no se reconoce."""
    if isinstance(label, Sector):
        return label
    key = normalize_key(label)
    if not key:
        return None
    for sector, labels in SECTOR_LABELS.items():
        if key in labels:
            return sector
    return None


def sector_matches(label, sector: Sector | str) -> bool:
    """
    ¿La etiqueta de un registro corresponde al sector pedido?
    'total' acepta toda la clase de equivalencia (All Sectors, _T, TOTAL…);
    el resto de sectores solo sus propias etiquetas.
    """
    wanted = parse_sector(sector)
    if wanted is None:
        return False
    return normalize_key(label) in SECTOR_LABELS[wanted]


def sector_label(sector: Sector | str, vocabulary: str = "eurostat") -> str:
    if vocabulary not in VOCABULARIES:
        raise ValueError(f"vocabulario de sectores desconocido: {vocabulary!r}")
    wanted = parse_sector(sector)
    if wanted is None:
        raise ValueError(f"sector desconocido: {sector!r}")
    return VOCABULARIES[vocabulary][wanted]
