# idi_canarias/quality.py
"""Informe de calidad de un dataset de I+D: una fila por chequeo."""
from __future__ import annotations
import logging
from datetime import datetime
from pathlib import Path

import numpy as np
import pandas as pd

from idi_canarias.catalog import CATALOG, EntityCatalog
from idi_canarias.matcher import RecordSchema, to_observation
from idi_canarias.text_norm import normalize

logger = logging.getLogger(__name__)

FIRST_YEAR = 1990
REPORT_COLUMNS = ["dimension", "check", "affected", "pct_rows", "notes"]


# ---------- Utilidades ----------
def _row(dimension, check, affected, total, notes=""):
    return {
        "dimension": dimension,
        "check": check,
        "affected": int(affected),
        "pct_rows": (affected / total if total else 0),
        "notes": notes,
    }


def _iqr_outliers(s: pd.Series):
    q1 = s.quantile(0.25); q3 = s.quantile(0.75)
    iqr = q3 - q1
    low = q1 - 1.5*iqr; high = q3 + 1.5*iqr
    return (s < low) | (s > high)


def _rolling_zscore(s: pd.Series, window=6):
    mu = s.rolling(window, min_periods=int(window/2)).mean()
    sd = s.rolling(window, min_periods=int(window/2)).std(ddof=0)
    z = (s - mu) / sd.replace(0, np.nan)
    return z


def observations_frame(records, schema: RecordSchema, catalog: EntityCatalog = CATALOG) -> pd.DataFrame:
    """Registros → tabla (entity, code, year, sector, raw_value, value, flag)."""
    if isinstance(records, pd.DataFrame):
        records = records.to_dict("records")
    rows = []
    for r in records:
        obs = to_observation(r, schema)
        entity = None
        if obs.code:
            e = catalog.entity(obs.code)
            entity = e.code if e else None
        if entity is None:
            for n in obs.names:
                entity = catalog.resolve_code_from_name(n)
                if entity:
                    break
        rows.append({
            "entity": entity or normalize(obs.entity_raw),
            "code": entity,
            "raw_entity": obs.entity_raw,
            "year": obs.year,
            "sector": obs.sector.value if obs.sector else None,
            "raw_value": obs.raw_value,
            "value": obs.value,
            "flag": obs.flag,
            "supranational": any(catalog.is_supranational(x) for x in (obs.code, *obs.names) if x),
        })
    df = pd.DataFrame(rows, columns=["entity", "code", "raw_entity", "year", "sector",
                                     "raw_value", "value", "flag", "supranational"])
    df["value"] = pd.to_numeric(df["value"], errors="coerce")
    return df


# ---------- Chequeos por dimensión ----------
def check_completeness(df: pd.DataFrame, schema: RecordSchema):
    rows = []
    total = len(df)
    blank = df["raw_value"].fillna("").astype(str).str.strip().isin(["", ":", "-", ".."])
    rows.append(_row("completitud", f"valores_vacios:{schema.value_field}", blank.sum(), total))
    rows.append(_row("completitud", f"anio_ilegible:{schema.year_field}", df["year"].isna().sum(), total))

    # Huecos temporales en el conjunto del dataset
    years = sorted(int(y) for y in df["year"].dropna().unique())
    if len(years) >= 2:
        missing_years = [y for y in range(years[0], years[-1]+1) if y not in years]
        rows.append({
            "dimension": "completitud",
            "check": "huecos_anuales",
            "affected": len(missing_years),
            "pct_rows": 0,
            "notes": f"faltan: {missing_years}" if missing_years else "OK",
        })
    return pd.DataFrame(rows)


def check_validity(df: pd.DataFrame, schema: RecordSchema):
    rows = []
    total = len(df)
    blank = df["raw_value"].fillna("").astype(str).str.strip().isin(["", ":", "-", ".."])
    malformed = (~blank) & df["value"].isna()
    rows.append(_row("validez", f"no_numerico:{schema.value_field}", malformed.sum(), total,
                     "valores que no se pueden convertir a número"))
    neg = (df["value"] < 0).sum()
    rows.append(_row("validez", f"no_negativos:{schema.value_field}", neg, total,
                     "valores negativos donde no deberían"))
    y = df["year"].dropna()
    out_range = (~y.between(FIRST_YEAR, datetime.now().year + 1)).sum()
    rows.append(_row("validez", "rango_anios", out_range, total,
                     f"años fuera de rango {FIRST_YEAR}–hoy+1"))
    if schema.sector_field:
        unknown = df["sector"].isna().sum()
        rows.append(_row("validez", f"sector_desconocido:{schema.sector_field}", unknown, total))
    return pd.DataFrame(rows)


def check_uniqueness(df: pd.DataFrame):
    keys = ["entity", "year", "sector"]
    dups = df.duplicated(subset=keys).sum()
    return pd.DataFrame([_row("unicidad", f"duplicados:{'+'.join(keys)}", dups, len(df),
                              "se resuelven con la política de duplicados")])


def check_integrity_refs(df: pd.DataFrame):
    unresolved = df["code"].isna() & ~df["supranational"]
    names = sorted(df.loc[unresolved, "raw_entity"].dropna().astype(str).unique())
    notes = ", ".join(names[:10]) + (" …" if len(names) > 10 else "")
    return pd.DataFrame([_row("integridad", "entidad_en_catalogo", unresolved.sum(), len(df),
                              notes or "OK")])


def check_accuracy_outliers(df: pd.DataFrame):
    rows = []
    s = df["value"].dropna()
    if s.empty:
        return pd.DataFrame(rows)
    mask = _iqr_outliers(s)
    rows.append({
        "dimension": "exactitud",
        "check": "outliers_IQR",
        "affected": int(mask.sum()),
        "pct_rows": float(mask.mean()) if len(s) else 0,
        "notes": "posibles valores atípicos (países grandes y agregados incluidos)",
    })
    # saltos anómalos en la serie de cada entidad/sector
    affected = 0; total = 0
    sub_df = df.dropna(subset=["year", "value"]).sort_values("year")
    for _, sub in sub_df.groupby(["entity", "sector"], dropna=False):
        z = _rolling_zscore(sub["value"].astype(float))
        affected += int((z.abs() > 3).sum()); total += len(sub)
    rows.append({
        "dimension": "exactitud",
        "check": "outliers_temporales_z3",
        "affected": affected,
        "pct_rows": (affected/total if total else 0),
        "notes": "saltos anómalos en serie temporal",
    })
    return pd.DataFrame(rows)


def check_timeliness(df: pd.DataFrame):
    last = df["year"].max()
    flagged = df["flag"].fillna("").astype(str).str.strip().ne("").sum()
    return pd.DataFrame([
        {"dimension": "actualidad", "check": "ultimo_anio", "affected": 0, "pct_rows": 0,
         "notes": str(int(last)) if pd.notna(last) else "NA"},
        {"dimension": "actualidad", "check": "observaciones_con_estado", "affected": int(flagged),
         "pct_rows": 0, "notes": "estimadas, provisionales, rupturas de serie…"},
    ])


# ---------- Orquestador ----------
def run_quality_suite(records, schema: RecordSchema, catalog: EntityCatalog = CATALOG) -> pd.DataFrame:
    df = observations_frame(records, schema, catalog)
    if df.empty:
        out = pd.DataFrame(columns=REPORT_COLUMNS)
        out.attrs["quality_score"] = 100.0
        return out

    reports = [
        check_completeness(df, schema),
        check_validity(df, schema),
        check_uniqueness(df),
        check_integrity_refs(df),
        check_accuracy_outliers(df),
        check_timeliness(df),
    ]
    out = pd.concat([r for r in reports if r is not None and not r.empty], ignore_index=True)
    out = out[REPORT_COLUMNS]
    score = (1 - out["pct_rows"].astype(float).clip(0, 1)).mean() if not out.empty else 1.0
    out.attrs["quality_score"] = round(float(score)*100, 2)
    logger.info("Calidad %s: %.2f (%d chequeos)", schema.name, out.attrs["quality_score"], len(out))
    return out


def save_quality_report(report: pd.DataFrame, out_dir, stem: str) -> Path:
    """Guarda el informe en `out_dir/stem.csv` (crea la carpeta si hace falta)."""
    out_dir = Path(out_dir)
    out_dir.mkdir(parents=True, exist_ok=True)
    path = out_dir / f"{stem}.csv"
    report.to_csv(path, index=False, encoding="utf-8")
    logger.info("Informe de calidad guardado en %s", path)
    return path
