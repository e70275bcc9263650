# idi_canarias/loaders.py
"""
Carga de los CSV publicados (Eurostat / INE / OEPM) como registros planos de texto.
El núcleo (matcher/metrics) no hace I/O: todo pasa por aquí.
"""
from __future__ import annotations
import hashlib
import io
import logging
import re
import time

import pandas as pd
import requests

from idi_canarias import config

logger = logging.getLogger(__name__)

_DELIMITERS = (";", ",", "|")
_YEAR_COL = re.compile(r"^\s*(\d{4})\s*$")


def _get(url: str, *, retry_statuses=None, backoff=None) -> requests.Response:
    """
    Descarga un CSV publicado. Los fallos de red y los estados de `retry_statuses`
    se reintentan según `backoff`; cualquier otro error HTTP (404…) falla a la primera.
    """
    retry_statuses = config.RETRY_STATUSES if retry_statuses is None else frozenset(retry_statuses)
    backoff = config.RETRY_BACKOFF if backoff is None else tuple(backoff)
    reason = None
    for attempt, wait in enumerate(backoff, start=1):
        if wait:
            time.sleep(wait)
        try:
            r = requests.get(url, headers=config.HEADERS, timeout=config.TIMEOUT)
        except requests.RequestException as e:
            reason = e
            logger.warning("GET %s falló (intento %d/%d): %s", url, attempt, len(backoff), e)
            continue
        if r.status_code in retry_statuses:
            reason = f"{r.status_code} {r.reason}"
            logger.warning("GET %s → %s (intento %d/%d)", url, r.status_code, attempt, len(backoff))
            continue
        r.raise_for_status()
        return r
    raise requests.HTTPError(f"GET {url} sin éxito tras {len(backoff)} intentos: {reason}")


def _sniff_delimiter(text: str) -> str:
    # la cabecera no lleva decimales con coma: se cuenta ahí
    header = text.split("\n", 1)[0]
    counts = {d: header.count(d) for d in _DELIMITERS}
    best = max(_DELIMITERS, key=lambda d: counts[d])
    return best if counts[best] else ","


def read_csv_bytes(content: bytes) -> pd.DataFrame:
    """Lee CSV detectando BOM/encoding y separador (; , |). Todas las columnas como texto."""
    try:
        text = content.decode("utf-8-sig")
    except UnicodeDecodeError:
        # Fallback latin-1 (exportaciones antiguas del INE)
        text = content.decode("latin-1")
    if not text.strip():
        return pd.DataFrame()
    delimiter = _sniff_delimiter(text)
    df = pd.read_csv(io.StringIO(text), sep=delimiter, dtype=str, keep_default_na=False)
    df.columns = [str(c).strip() for c in df.columns]
    return df


def melt_year_columns(df: pd.DataFrame, id_cols=None) -> pd.DataFrame:
    """
    Tabla ancha (una columna por año + 'SUMA') → formato largo
    con columnas `year` y `value`.
    """
    year_cols = [c for c in df.columns if _YEAR_COL.match(str(c))]
    if id_cols is None:
        id_cols = [c for c in df.columns if c not in year_cols and str(c).strip().upper() != "SUMA"]
    long = df.melt(id_vars=list(id_cols), value_vars=year_cols, var_name="year", value_name="value")
    long["year"] = long["year"].astype(str).str.strip()
    return long.reset_index(drop=True)


def dataset_version(content: bytes) -> str:
    return hashlib.sha1(content).hexdigest()[:12]


def fetch_bytes(path: str) -> bytes:
    """Contenido crudo de un CSV: desde DATA_BASE_URL si está configurada, si no desde DATA_DIR."""
    if config.DATA_BASE_URL:
        url = f"{config.DATA_BASE_URL}/{path.lstrip('/')}"
        content = _get(url).content
        if not content:
            raise requests.HTTPError(f"Downloaded file is empty: {url}")
        return content
    local = config.DATA_DIR / path
    if not local.exists():
        raise FileNotFoundError(f"No existe {local} (IDI_DATA_DIR={config.DATA_DIR})")
    return local.read_bytes()


def load_frame(name: str) -> pd.DataFrame:
    """DataFrame (texto) de un dataset registrado; `attrs['version']` identifica el contenido."""
    spec = config.dataset(name)
    content = fetch_bytes(spec.path)
    df = read_csv_bytes(content)
    if spec.wide_years and not df.empty:
        df = melt_year_columns(df)
    df.attrs["version"] = dataset_version(content)
    logger.info("Cargado %s: %d filas (%s)", name, len(df), spec.path)
    return df


def load_records(name: str) -> list[dict]:
    return load_frame(name).to_dict("records")
