# idi_canarias/queries.py
"""
Consultas de alto nivel que usan las páginas: series, desgloses por sector,
rankings y comparativas Canarias / España / UE. Todo valor sale de
`resolve_match`, así la división de agregados es la misma en gráficos,
tooltips y rankings.
"""
from __future__ import annotations
import logging
from typing import Iterable, Sequence

import pandas as pd

from idi_canarias import metrics
from idi_canarias.catalog import CATALOG, SPAIN_COMMUNITY_COUNT, EntityCatalog
from idi_canarias.matcher import (
    DuplicatePolicy, Record, RecordSchema, ResolvedMatch,
    parse_year, resolve_match, to_observation,
)
from idi_canarias.sectors import Sector

logger = logging.getLogger(__name__)

CANARIAS = "ES-CN"
SPAIN = "ES"
EU = "EU"

RANKING_COLUMNS = [
    "entity", "code", "label", "value", "divisor", "flag", "is_supranational", "rank", "total", "yoy",
]


def available_years(records: Iterable[Record], schema: RecordSchema) -> list[int]:
    years = {parse_year(r.get(schema.year_field)) for r in records}
    return sorted(y for y in years if y is not None)


def _resolve(records, entity, year, sector, schema, locale, catalog, policy) -> ResolvedMatch | None:
    return resolve_match(records, entity, year, sector, schema=schema, locale=locale,
                         catalog=catalog, policy=policy)


def entity_series(
    records: Sequence[Record],
    entity: str,
    schema: RecordSchema,
    sector: Sector | str = Sector.TOTAL,
    *,
    locale: str = "es",
    catalog: EntityCatalog = CATALOG,
    policy: DuplicatePolicy = DuplicatePolicy.MAX_VALUE,
) -> pd.DataFrame:
    """Serie anual (year, value, flag) de una entidad. Años sin dato quedan con value None."""
    rows = []
    for y in available_years(records, schema):
        m = _resolve(records, entity, y, sector, schema, locale, catalog, policy)
        if m is None:
            continue
        rows.append({"year": y, "value": m.value, "flag": m.observation.flag})
    return pd.DataFrame(rows, columns=["year", "value", "flag"])


def yoy_for(
    records: Sequence[Record],
    entity: str,
    year: int,
    schema: RecordSchema,
    sector: Sector | str = Sector.TOTAL,
    *,
    locale: str = "es",
    catalog: EntityCatalog = CATALOG,
    policy: DuplicatePolicy = DuplicatePolicy.MAX_VALUE,
) -> float | None:
    cur = _resolve(records, entity, year, sector, schema, locale, catalog, policy)
    prev = _resolve(records, entity, int(year) - 1, sector, schema, locale, catalog, policy)
    return metrics.yoy_change(cur.value if cur else None, prev.value if prev else None)


def sector_breakdown(
    records: Sequence[Record],
    entity: str,
    year: int,
    schema: RecordSchema,
    *,
    locale: str = "es",
    catalog: EntityCatalog = CATALOG,
    policy: DuplicatePolicy = DuplicatePolicy.MAX_VALUE,
) -> dict[Sector, float | None]:
    out = {}
    for s in Sector:
        m = _resolve(records, entity, year, s, schema, locale, catalog, policy)
        out[s] = m.value if m else None
    return out


def sector_shares(
    records: Sequence[Record],
    entity: str,
    year: int,
    schema: RecordSchema,
    **kw,
) -> dict[Sector, float | None]:
    """Peso (%) de cada sector sobre el total de la entidad."""
    breakdown = sector_breakdown(records, entity, year, schema, **kw)
    return metrics.sector_shares(breakdown, total_key=Sector.TOTAL)


def _entity_keys(rows: Iterable[Record], schema: RecordSchema, locale: str,
                 catalog: EntityCatalog) -> list[str]:
    """Identificadores distintos presentes en las filas, en orden de aparición."""
    seen, out = set(), []
    for r in rows:
        obs = to_observation(r, schema, locale)
        if obs.code and catalog.entity(obs.code) is not None:
            key = obs.code
        else:
            key = obs.entity_raw
        if key and key not in seen:
            seen.add(key)
            out.append(key)
    return out


def ranking_table(
    records: Sequence[Record],
    year: int,
    schema: RecordSchema,
    sector: Sector | str = Sector.TOTAL,
    *,
    locale: str = "es",
    catalog: EntityCatalog = CATALOG,
    policy: DuplicatePolicy = DuplicatePolicy.MAX_VALUE,
    exclude_codes: Sequence[str] = (),
    with_yoy: bool = True,
) -> pd.DataFrame:
    """
    Una fila por entidad del dataset en (año, sector), ordenada de mayor a menor.
    Los agregados supranacionales (y `exclude_codes`) se muestran pero no reciben puesto.
    """
    year_rows = [r for r in records if parse_year(r.get(schema.year_field)) == int(year)]
    rows = []
    for key in _entity_keys(year_rows, schema, locale, catalog):
        m = _resolve(records, key, year, sector, schema, locale, catalog, policy)
        if m is None:
            continue
        obs = m.observation
        # cada identificador por separado: 'EU27_2020 EU27_2020' no es ningún código
        supranational = any(catalog.is_supranational(x) for x in (obs.code, *obs.names) if x)
        rows.append({
            "entity": key,
            "code": m.entity_code,
            "label": catalog.display_name(obs.entity_raw, locale),
            "value": m.value,
            "divisor": m.divisor,
            "flag": obs.flag,
            "is_supranational": supranational,
            "yoy": yoy_for(records, key, year, schema, sector, locale=locale,
                           catalog=catalog, policy=policy) if with_yoy else None,
        })
    if not rows:
        return pd.DataFrame(columns=RANKING_COLUMNS)

    excluded = {c.upper() for c in exclude_codes}
    by_key = {r["entity"]: r for r in rows}
    positions = metrics.rank(
        [(r["entity"], r["value"]) for r in rows],
        exclude=lambda k: by_key[k]["is_supranational"] or (by_key[k]["code"] or "").upper() in excluded,
        names={r["entity"]: r["label"] for r in rows},
    )
    for r in rows:
        pos = positions.get(r["entity"])
        r["rank"] = pos.rank if pos else None
        r["total"] = pos.total if pos else None

    # ranking primero, luego agregados/excluidos por valor, sin dato al final
    rows.sort(key=lambda r: (r["value"] is None, r["rank"] is None, r["rank"] or 0, -(r["value"] or 0)))
    return pd.DataFrame(rows, columns=RANKING_COLUMNS).astype({"rank": "Int64", "total": "Int64", "divisor": "Int64"})


def spain_average_per_community(
    records: Sequence[Record],
    year: int,
    schema: RecordSchema,
    sector: Sector | str = Sector.TOTAL,
    *,
    locale: str = "es",
    catalog: EntityCatalog = CATALOG,
    policy: DuplicatePolicy = DuplicatePolicy.MAX_VALUE,
) -> float | None:
    """
    Referencia "media España" para comparar una comunidad.
    Métricas absolutas: total nacional / 19 (17 CCAA + Ceuta y Melilla).
    Métricas relativas (% PIB): el propio valor nacional.
    """
    m = _resolve(records, SPAIN, year, sector, schema, locale, catalog, policy)
    if m is None:
        return None
    if not schema.extensive:
        return m.value
    return metrics.per_member_average(m.value, SPAIN_COMMUNITY_COUNT)


def canary_comparison(
    community_records: Sequence[Record],
    community_schema: RecordSchema,
    europe_records: Sequence[Record] = (),
    europe_schema: RecordSchema | None = None,
    sector: Sector | str = Sector.TOTAL,
    *,
    locale: str = "es",
    catalog: EntityCatalog = CATALOG,
    policy: DuplicatePolicy = DuplicatePolicy.MAX_VALUE,
) -> pd.DataFrame:
    """
    Series de Canarias, España y UE para un sector en formato largo
    (year, code, label, value). España sale del dataset de comunidades y,
    si falta algún año, del europeo.
    """
    years = set(available_years(community_records, community_schema))
    if europe_schema is not None:
        years |= set(available_years(europe_records, europe_schema))

    rows = []
    for y in sorted(years):
        can = _resolve(community_records, CANARIAS, y, sector, community_schema, locale, catalog, policy)
        esp = _resolve(community_records, SPAIN, y, sector, community_schema, locale, catalog, policy)
        eu = None
        if europe_schema is not None:
            if esp is None:
                esp = _resolve(europe_records, SPAIN, y, sector, europe_schema, locale, catalog, policy)
            eu = _resolve(europe_records, EU, y, sector, europe_schema, locale, catalog, policy)
        for code, m in ((CANARIAS, can), (SPAIN, esp), (EU, eu)):
            rows.append({
                "year": y,
                "code": code,
                "label": catalog.name_for_code(code, locale),
                "value": m.value if m else None,
            })
    df = pd.DataFrame(rows, columns=["year", "code", "label", "value"])
    if not df.empty:
        # sin filas de entidades que no aparecen en ningún año
        present = df.groupby("code")["value"].apply(lambda s: s.notna().any())
        df = df[df["code"].map(present)].reset_index(drop=True)
    return df
