# idi_canarias/config.py
from __future__ import annotations
import os
from dataclasses import dataclass
from pathlib import Path

from idi_canarias.matcher import (
    CCAA_GDP, CCAA_GDP_EUR, CCAA_RESEARCHERS, EUROSTAT_GDP, EUROSTAT_GDP_EUR,
    EUROSTAT_PATENTS, EUROSTAT_RESEARCHERS, PROVINCE_PATENTS,
    DuplicatePolicy, RecordSchema,
)

# Carpeta local con los CSV publicados (data/GDP_data, data/researchers, data/patents)
DATA_DIR = Path(os.getenv("IDI_DATA_DIR", "data"))
# Si se define, los CSV se descargan de aquí en vez de leerse en local
DATA_BASE_URL = os.getenv("IDI_DATA_BASE_URL", "").rstrip("/")

DEFAULT_LANG = os.getenv("IDI_LANG", "es")
LOG_LEVEL = os.getenv("IDI_LOG_LEVEL", "INFO").upper()

REPORTS_DIR = Path(os.getenv("IDI_REPORTS_DIR", "logs"))

HEADERS = {"User-Agent": "IDI-Canarias-Dashboard/1.0 (+streamlit)"}
TIMEOUT = 30
# Descargas: estados que se reintentan y espera (s) antes de cada intento
RETRY_STATUSES = frozenset({429, 500, 502, 503, 504})
RETRY_BACKOFF = (0, 1, 2, 4)


def duplicate_policy() -> DuplicatePolicy:
    raw = os.getenv("IDI_DUPLICATE_POLICY", DuplicatePolicy.MAX_VALUE.value)
    try:
        return DuplicatePolicy(raw.strip().lower())
    except ValueError:
        raise ValueError(
            f"IDI_DUPLICATE_POLICY={raw!r} no válido; usa uno de: "
            f"{', '.join(p.value for p in DuplicatePolicy)}"
        ) from None


@dataclass(frozen=True)
class DatasetSpec:
    name: str
    path: str               # relativo a DATA_DIR / DATA_BASE_URL
    schema: RecordSchema
    wide_years: bool = False  # una columna por año (hay que fundir)


# Registro de datasets. Varios esquemas comparten fichero (mismo CSV, otra columna de valor).
DATASETS: dict[str, DatasetSpec] = {
    d.name: d for d in (
        DatasetSpec("gdp_europe", "GDP_data/gdp_consolidado.csv", EUROSTAT_GDP),
        DatasetSpec("gdp_europe_eur", "GDP_data/gdp_consolidado.csv", EUROSTAT_GDP_EUR),
        DatasetSpec("gdp_communities", "GDP_data/gasto_ID_comunidades_porcentaje_pib.csv", CCAA_GDP),
        DatasetSpec("gdp_communities_eur", "GDP_data/gasto_ID_comunidades_porcentaje_pib.csv", CCAA_GDP_EUR),
        DatasetSpec("researchers_europe", "researchers/europa_researchers.csv", EUROSTAT_RESEARCHERS),
        DatasetSpec("researchers_communities", "researchers/researchers_comunidades_autonomas.csv", CCAA_RESEARCHERS),
        DatasetSpec("patents_europe", "patents/patentes_europa.csv", EUROSTAT_PATENTS),
        DatasetSpec("patents_provinces", "patents/patentes_spain.csv", PROVINCE_PATENTS, wide_years=True),
    )
}


def dataset(name: str) -> DatasetSpec:
    try:
        return DATASETS[name]
    except KeyError:
        raise ValueError(f"dataset desconocido: {name!r}") from None
