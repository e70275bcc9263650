# idi_canarias/matcher.py
"""
Emparejador de registros: dado un conjunto de filas crudas (CSV/JSON) y una
entidad + año + sector, encuentra la observación que corresponde.

Orden estricto de estrategias (se detiene en la primera que produce candidatos):
  1) código estándar (ISO2/ISO3/código de dataset)
  2) nombre localizado exacto (normalizado)
  3) alias del catálogo
  4) contención de texto en cualquier dirección

La división de agregados supranacionales (UE / 27, Zona Euro / 19 o 20) solo se
hace en `observation_value`; todo consumidor de valores pasa por ahí.
"""
from __future__ import annotations
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Iterable, Mapping, Sequence

from idi_canarias.catalog import CATALOG, EntityCatalog, EntityCode
from idi_canarias.metrics import per_member_average
from idi_canarias.sectors import Sector, parse_sector, sector_matches
from idi_canarias.text_norm import normalize, parse_number

logger = logging.getLogger(__name__)

Record = Mapping[str, Any]


# ─────────────────────────────────────────────────────────────
# Esquemas de dataset
# ─────────────────────────────────────────────────────────────
@dataclass(frozen=True)
class RecordSchema:
    """Nombres de columna de un dataset concreto."""
    name: str
    value_field: str
    year_field: str
    name_fields: Mapping[str, str] = field(default_factory=dict)  # idioma -> columna
    extra_name_fields: tuple[str, ...] = ()
    code_field: str | None = None
    sector_field: str | None = None
    flag_field: str | None = None
    fixed_filters: Mapping[str, str] = field(default_factory=dict)
    # métricas absolutas (dinero, personas, patentes): los agregados se dividen por miembro
    extensive: bool = False

    def name_columns(self, locale: str | None = None) -> list[str]:
        """Columnas de nombre, la del idioma pedido primero."""
        cols = []
        if locale and locale in self.name_fields:
            cols.append(self.name_fields[locale])
        cols += [c for c in self.name_fields.values() if c not in cols]
        cols += [c for c in self.extra_name_fields if c not in cols]
        return cols


EUROSTAT_GDP = RecordSchema(
    name="eurostat_gdp",
    name_fields={"en": "Country", "es": "País"},
    code_field="ISO3",
    year_field="Year",
    sector_field="Sector",
    value_field="%GDP",
    flag_field="label_percent_gdp_id",
)
EUROSTAT_GDP_EUR = RecordSchema(
    name="eurostat_gdp_eur",
    name_fields={"en": "Country", "es": "País"},
    code_field="ISO3",
    year_field="Year",
    sector_field="Sector",
    value_field="Approx_RD_Investment_million_euro",
    flag_field="label_value_id",
    extensive=True,
)
EUROSTAT_RESEARCHERS = RecordSchema(
    name="eurostat_researchers",
    code_field="geo",
    extra_name_fields=("geo",),
    year_field="TIME_PERIOD",
    sector_field="sectperf",
    value_field="OBS_VALUE",
    flag_field="OBS_FLAG",
    extensive=True,
)
EUROSTAT_PATENTS = RecordSchema(
    name="eurostat_patents",
    name_fields={"en": "Geopolitical entity (reporting)"},
    code_field="geo",
    year_field="TIME_PERIOD",
    value_field="OBS_VALUE",
    flag_field="OBS_FLAG",
    extensive=True,
)
CCAA_GDP = RecordSchema(
    name="ccaa_gdp",
    name_fields={"es": "Comunidad Limpio", "en": "Comunidad en Inglés"},
    extra_name_fields=("Comunidad (Original)",),
    year_field="Año",
    sector_field="Sector Id",
    value_field="% PIB I+D",
)
CCAA_GDP_EUR = RecordSchema(
    name="ccaa_gdp_eur",
    name_fields={"es": "Comunidad Limpio", "en": "Comunidad en Inglés"},
    extra_name_fields=("Comunidad (Original)",),
    year_field="Año",
    sector_field="Sector Id",
    value_field="Gasto en I+D (Miles €)",
    extensive=True,
)
CCAA_RESEARCHERS = RecordSchema(
    name="ccaa_researchers",
    name_fields={"es": "TERRITORIO"},
    code_field="TERRITORIO_CODE",
    year_field="TIME_PERIOD",
    sector_field="SECTOR_EJECUCION_CODE",
    value_field="OBS_VALUE",
    fixed_filters={"SEXO_CODE": "_T", "MEDIDAS_CODE": "INVESTIGADORES_EJC"},
    extensive=True,
)
# Patentes por provincia, tras pasar de formato ancho (una columna por año) a largo
PROVINCE_PATENTS = RecordSchema(
    name="province_patents",
    name_fields={"es": "Provincia"},
    code_field="Nuts Prov",
    year_field="year",
    value_field="value",
    extensive=True,
)

SCHEMAS: dict[str, RecordSchema] = {
    s.name: s for s in (
        EUROSTAT_GDP, EUROSTAT_GDP_EUR, EUROSTAT_RESEARCHERS, EUROSTAT_PATENTS,
        CCAA_GDP, CCAA_GDP_EUR, CCAA_RESEARCHERS, PROVINCE_PATENTS,
    )
}


# ─────────────────────────────────────────────────────────────
# Observaciones
# ─────────────────────────────────────────────────────────────
def parse_year(value) -> int | None:
    n = parse_number(value)
    if n is None or n != int(n):
        return None
    return int(n)


@dataclass(frozen=True)
class Observation:
    entity_raw: str
    year: int | None
    sector: Sector | None
    raw_value: str | None
    code: str | None = None
    names: tuple[str, ...] = ()
    flag: str | None = None
    record: Record = field(default_factory=dict, compare=False, repr=False)

    @property
    def value(self) -> float | None:
        """Valor numérico tal cual viene en el dataset (None si está vacío o mal formado)."""
        return parse_number(self.raw_value)


def _text(record: Record, col: str | None) -> str | None:
    if not col:
        return None
    v = record.get(col)
    if v is None:
        return None
    s = str(v).strip()
    return s or None


def to_observation(record: Record, schema: RecordSchema, locale: str = "en") -> Observation:
    names = tuple(n for n in (_text(record, c) for c in schema.name_columns(locale)) if n)
    code = _text(record, schema.code_field)
    raw_sector = _text(record, schema.sector_field)
    raw_value = record.get(schema.value_field)
    return Observation(
        entity_raw=names[0] if names else (code or ""),
        year=parse_year(record.get(schema.year_field)),
        sector=parse_sector(raw_sector) if schema.sector_field else Sector.TOTAL,
        raw_value=None if raw_value is None else str(raw_value),
        code=code,
        names=names,
        flag=_text(record, schema.flag_field),
        record=record,
    )


@dataclass(frozen=True)
class ResolvedMatch:
    observation: Observation
    entity_code: EntityCode | None
    strategy: str  # code | name | alias | contains
    value: float | None
    divisor: int | None = None

    @property
    def is_per_member(self) -> bool:
        return self.divisor is not None


class DuplicatePolicy(str, Enum):
    MAX_VALUE = "max_value"  # filas solapadas de distintas ediciones: gana el mayor valor
    FIRST = "first"          # gana la primera fila en el orden del fichero


# ─────────────────────────────────────────────────────────────
# Filtros
# ─────────────────────────────────────────────────────────────
def _passes_filters(record: Record, schema: RecordSchema, year: int | None, sector) -> bool:
    for col, expected in schema.fixed_filters.items():
        if _text(record, col) != expected:
            return False
    if year is not None and parse_year(record.get(schema.year_field)) != int(year):
        return False
    if sector is not None:
        if schema.sector_field is None:
            return parse_sector(sector) == Sector.TOTAL
        if not sector_matches(record.get(schema.sector_field), sector):
            return False
    return True


def _record_names(record: Record, schema: RecordSchema, locale: str | None = None) -> list[str]:
    return [normalize(n) for n in (_text(record, c) for c in schema.name_columns(locale)) if n]


def _claimed_by_other(record: Record, schema: RecordSchema, catalog: EntityCatalog,
                      code: EntityCode) -> bool:
    """True si el código o algún nombre de la fila resuelve a otra entidad del catálogo."""
    raw = [_text(record, schema.code_field)] if schema.code_field else []
    raw += [_text(record, c) for c in schema.name_columns()]
    for x in raw:
        if not x:
            continue
        other = catalog.lookup(x)
        if other is not None and other.code != code:
            return True
    return False


def _pick(candidates: Sequence[Record], schema: RecordSchema, policy: DuplicatePolicy) -> Record:
    if policy == DuplicatePolicy.FIRST or len(candidates) == 1:
        return candidates[0]
    best, best_val = candidates[0], parse_number(candidates[0].get(schema.value_field))
    for r in candidates[1:]:
        v = parse_number(r.get(schema.value_field))
        if v is None:
            continue
        # estricto: en empate se conserva la primera
        if best_val is None or abs(v) > abs(best_val):
            best, best_val = r, v
    return best


def _match_candidates(
    rows: Sequence[Record],
    identifier: str,
    schema: RecordSchema,
    locale: str,
    catalog: EntityCatalog,
) -> tuple[list[Record], str | None, EntityCode | None]:
    """Aplica las estrategias en orden; devuelve (candidatos, estrategia, código)."""
    q = normalize(identifier).strip()
    entity = catalog.lookup(identifier)
    code = entity.code if entity else None

    # 1) código estándar: solo si la consulta es un código conocido
    by_code = catalog.entity(identifier)
    if schema.code_field and by_code is not None:
        # EA20 no debe arrastrar a EA19: los códigos extra solo cuentan si se piden
        q_codes = {identifier.strip().upper()}
        q_codes |= {c.upper() for c in (by_code.code, by_code.iso2, by_code.iso3) if c}
        found = [r for r in rows if (_text(r, schema.code_field) or "").upper() in q_codes]
        if found:
            return found, "code", code

    # 2) nombre localizado exacto
    loc_col = schema.name_fields.get(locale)
    cols = [loc_col] if loc_col else schema.name_columns(locale)
    found = [r for r in rows if any(normalize(_text(r, c)) == q for c in cols if _text(r, c))]
    if found:
        return found, "name", code

    # 3) alias del catálogo
    if code:
        aliases = catalog.aliases_for(code)
        found = [r for r in rows if any(n in aliases for n in _record_names(r, schema, locale))]
        if found:
            return found, "alias", code

    # 4) contención (último recurso, solo para nombres: 'es' estaría en 'Islas Baleares')
    if q and by_code is None:
        found = [
            r for r in rows
            if any(n and (q in n or n in q) for n in _record_names(r, schema, locale))
        ]
        # 'es' está dentro de 'estonia': una fila que ya es de otra entidad no vale
        if code:
            found = [r for r in found if not _claimed_by_other(r, schema, catalog, code)]
        if found:
            logger.debug("'%s' emparejado por contención con %d filas", identifier, len(found))
            return found, "contains", code

    return [], None, code


# ─────────────────────────────────────────────────────────────
# API pública
# ─────────────────────────────────────────────────────────────
def resolve_match(
    records: Iterable[Record],
    entity_identifier: str,
    year: int | None,
    sector: Sector | str | None = Sector.TOTAL,
    *,
    schema: RecordSchema,
    locale: str = "en",
    catalog: EntityCatalog = CATALOG,
    policy: DuplicatePolicy = DuplicatePolicy.MAX_VALUE,
) -> ResolvedMatch | None:
    if not entity_identifier or not str(entity_identifier).strip():
        return None
    entity_identifier = str(entity_identifier)
    rows = [r for r in records if _passes_filters(r, schema, year, sector)]
    if not rows:
        return None

    found, strategy, code = _match_candidates(rows, entity_identifier, schema, locale, catalog)
    if not found:
        logger.debug("Sin datos para %s / %s / %s en %s", entity_identifier, year, sector, schema.name)
        return None

    obs = to_observation(_pick(found, schema, policy), schema, locale)
    value, divisor = _normalized_value(obs, schema, catalog)
    return ResolvedMatch(observation=obs, entity_code=code, strategy=strategy, value=value, divisor=divisor)


def find_observation(
    records: Iterable[Record],
    entity_identifier: str,
    year: int | None,
    sector: Sector | str | None = Sector.TOTAL,
    *,
    schema: RecordSchema,
    locale: str = "en",
    catalog: EntityCatalog = CATALOG,
    policy: DuplicatePolicy = DuplicatePolicy.MAX_VALUE,
) -> Observation | None:
    """Observación de (entidad, año, sector) o None si no hay ninguna."""
    m = resolve_match(records, entity_identifier, year, sector, schema=schema,
                      locale=locale, catalog=catalog, policy=policy)
    return m.observation if m else None


def _normalized_value(obs: Observation, schema: RecordSchema, catalog: EntityCatalog) -> tuple[float | None, int | None]:
    raw = obs.value
    if raw is None or not schema.extensive:
        return raw, None
    identifiers = [x for x in (obs.code, *obs.names) if x]
    if not any(catalog.is_supranational(x) for x in identifiers):
        return raw, None
    # código y nombres juntos: la edición (2015/2023, EA19/EA20) puede venir en cualquiera
    divisor = catalog.member_count_for(" ".join(identifiers))
    if divisor is None:
        divisor = next((n for n in map(catalog.member_count_for, identifiers) if n), None)
    if divisor is None:
        return raw, None
    return per_member_average(raw, divisor), divisor


def observation_value(
    obs: Observation | None,
    schema: RecordSchema,
    catalog: EntityCatalog = CATALOG,
) -> float | None:
    """Valor listo para mostrar: agregados supranacionales divididos por miembro si la métrica es absoluta."""
    if obs is None:
        return None
    return _normalized_value(obs, schema, catalog)[0]


# ─────────────────────────────────────────────────────────────
# Memoización opcional
# ─────────────────────────────────────────────────────────────
class MatchCache:
    """
    Caché de resoluciones para un dataset ya cargado. La clave incluye la
    versión del dataset; cambiar de versión invalida todo. No altera resultados.
    """

    def __init__(self, records: Sequence[Record], schema: RecordSchema, *,
                 dataset_version: str = "", catalog: EntityCatalog = CATALOG,
                 policy: DuplicatePolicy = DuplicatePolicy.MAX_VALUE):
        self.records = records
        self.schema = schema
        self.dataset_version = dataset_version
        self.catalog = catalog
        self.policy = policy
        self._store: dict[tuple, ResolvedMatch | None] = {}
        self.hits = 0
        self.misses = 0

    def resolve(self, entity_identifier: str, year: int | None,
                sector: Sector | str | None = Sector.TOTAL, locale: str = "en") -> ResolvedMatch | None:
        s = parse_sector(sector) if sector is not None else None
        key = (self.dataset_version, normalize(entity_identifier), year, s, locale)
        if key in self._store:
            self.hits += 1
            return self._store[key]
        self.misses += 1
        m = resolve_match(self.records, entity_identifier, year, sector, schema=self.schema,
                          locale=locale, catalog=self.catalog, policy=self.policy)
        self._store[key] = m
        return m

    def set_version(self, dataset_version: str, records: Sequence[Record] | None = None) -> None:
        if dataset_version != self.dataset_version or records is not None:
            self._store.clear()
        self.dataset_version = dataset_version
        if records is not None:
            self.records = records
