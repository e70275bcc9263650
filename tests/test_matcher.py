# tests/test_matcher.py
import pytest

from idi_canarias import metrics
from idi_canarias.matcher import (
    CCAA_GDP, CCAA_RESEARCHERS, EUROSTAT_GDP, EUROSTAT_GDP_EUR, EUROSTAT_RESEARCHERS,
    DuplicatePolicy, MatchCache, find_observation, observation_value, parse_year, resolve_match,
)
from idi_canarias.sectors import Sector


# ---------- estrategias ----------
def test_spain_by_english_name(gdp_records):
    m = resolve_match(gdp_records, "Spain", 2022, "total", schema=EUROSTAT_GDP)
    assert m.strategy == "name"
    assert m.entity_code == "ES"
    assert m.value == pytest.approx(1.44)
    assert m.divisor is None


def test_spain_by_iso3_code(gdp_records):
    m = resolve_match(gdp_records, "ESP", 2022, schema=EUROSTAT_GDP)
    assert m.strategy == "code"
    assert m.value == pytest.approx(1.44)


def test_spain_by_spanish_name_with_es_locale(gdp_records):
    m = resolve_match(gdp_records, "España", 2022, schema=EUROSTAT_GDP, locale="es")
    assert m.strategy == "name"
    assert m.observation.entity_raw == "España"


def test_community_by_catalog_alias(ccaa_gdp_records):
    m = resolve_match(ccaa_gdp_records, "ES-CN", 2022, schema=CCAA_GDP, locale="es")
    assert m.strategy == "alias"
    assert m.value == pytest.approx(0.55)


def test_ine_territory_code(ccaa_researchers_records):
    m = resolve_match(ccaa_researchers_records, "05", 2022, schema=CCAA_RESEARCHERS, locale="es")
    assert m.strategy == "code"
    # filtros fijos: solo investigadores EJC, ambos sexos
    assert m.value == 3800


def test_containment_is_last_resort():
    rows = [{"Country": "Germany (until 1990 former territory of the FRG)", "País": "", "ISO3": "",
             "Year": "2022", "Sector": "All Sectors", "%GDP": "3,1"}]
    m = resolve_match(rows, "Germany", 2022, schema=EUROSTAT_GDP)
    assert m.strategy == "alias"
    m = resolve_match(rows, "former territory", 2022, schema=EUROSTAT_GDP)
    assert m.strategy == "contains"
    assert m.value == pytest.approx(3.1)


def test_containment_skips_rows_of_other_entities(researchers_records):
    # 'es' está contenido en 'estonia', pero esa fila es de España
    assert resolve_match(researchers_records, "Estonia", 2022, schema=EUROSTAT_RESEARCHERS) is None
    m = resolve_match(researchers_records, "ES", 2022, schema=EUROSTAT_RESEARCHERS)
    assert m.entity_code == "ES"
    assert m.value == 160000


def test_containment_keeps_rows_of_the_same_entity():
    rows = [{"Country": "Spain (incl. Canary Islands)", "País": "", "ISO3": "",
             "Year": "2022", "Sector": "All Sectors", "%GDP": "1,4"}]
    m = resolve_match(rows, "Spain", 2022, schema=EUROSTAT_GDP)
    assert m.strategy == "contains"
    assert m.entity_code == "ES"


def test_sector_filter(gdp_records):
    m = resolve_match(gdp_records, "Spain", 2022, Sector.BUSINESS, schema=EUROSTAT_GDP)
    assert m.value == pytest.approx(0.82)
    assert resolve_match(gdp_records, "Spain", 2022, Sector.NONPROFIT, schema=EUROSTAT_GDP) is None


def test_no_data_returns_none(gdp_records):
    assert find_observation(gdp_records, "Spain", 1999, schema=EUROSTAT_GDP) is None
    assert find_observation(gdp_records, "Atlantis", 2022, schema=EUROSTAT_GDP) is None
    assert find_observation(gdp_records, "", 2022, schema=EUROSTAT_GDP) is None
    assert find_observation([], "Spain", 2022, schema=EUROSTAT_GDP) is None


def test_empty_value_is_an_observation_without_value(gdp_records):
    obs = find_observation(gdp_records, "Czechia", 2022, schema=EUROSTAT_GDP)
    assert obs is not None
    assert obs.value is None
    assert observation_value(obs, EUROSTAT_GDP) is None


def test_flag_is_kept(gdp_records):
    obs = find_observation(gdp_records, "Germany", 2022, schema=EUROSTAT_GDP)
    assert obs.flag == "p"


# ---------- agregados supranacionales ----------
def test_eu_absolute_value_is_divided_by_27(gdp_records):
    m = resolve_match(gdp_records, "EU", 2022, schema=EUROSTAT_GDP_EUR)
    assert m.strategy == "alias"
    assert m.divisor == 27
    assert m.is_per_member
    assert m.value == pytest.approx(59.4 / 27)


def test_euro_area_2023_divided_by_20(gdp_records):
    m = resolve_match(gdp_records, "Euro area – 20 countries (from 2023)", 2022, schema=EUROSTAT_GDP_EUR)
    assert m.divisor == 20
    assert m.value == pytest.approx(10.0)


def test_euro_area_2015_divided_by_19(gdp_records):
    m = resolve_match(gdp_records, "Euro area - 19 countries  (2015-2022)", 2022, schema=EUROSTAT_GDP_EUR)
    assert m.divisor == 19
    assert m.value == pytest.approx(10.0)


def test_percentages_are_never_divided(gdp_records):
    m = resolve_match(gdp_records, "EU", 2022, schema=EUROSTAT_GDP)
    assert m.value == pytest.approx(2.2)
    assert m.divisor is None
    assert not m.is_per_member


def test_eurostat_codes_for_aggregates(researchers_records):
    eu = resolve_match(researchers_records, "EU", 2022, schema=EUROSTAT_RESEARCHERS)
    assert eu.value == pytest.approx(100000)
    ea20 = resolve_match(researchers_records, "EA20", 2022, schema=EUROSTAT_RESEARCHERS)
    assert ea20.strategy == "code"
    assert ea20.value == pytest.approx(100000)
    ea19 = resolve_match(researchers_records, "EA19", 2022, schema=EUROSTAT_RESEARCHERS)
    assert ea19.value == pytest.approx(100000)


def test_country_absolute_value_untouched(researchers_records):
    m = resolve_match(researchers_records, "ES", 2022, schema=EUROSTAT_RESEARCHERS)
    assert m.value == 160000
    assert m.divisor is None


# ---------- duplicados ----------
def _dup_rows(*values):
    return [
        {"Country": "Spain", "País": "España", "ISO3": "ESP", "Year": "2022",
         "Sector": "All Sectors", "%GDP": v, "label_percent_gdp_id": str(i)}
        for i, v in enumerate(values)
    ]


def test_duplicate_policy_max_value():
    rows = _dup_rows("1,20", "1,44", "")
    m = resolve_match(rows, "Spain", 2022, schema=EUROSTAT_GDP, policy=DuplicatePolicy.MAX_VALUE)
    assert m.value == pytest.approx(1.44)


def test_duplicate_policy_first():
    rows = _dup_rows("1,20", "1,44")
    m = resolve_match(rows, "Spain", 2022, schema=EUROSTAT_GDP, policy=DuplicatePolicy.FIRST)
    assert m.value == pytest.approx(1.20)


def test_duplicate_tie_keeps_first_row():
    rows = _dup_rows("1,5", "1,50")
    m = resolve_match(rows, "Spain", 2022, schema=EUROSTAT_GDP)
    assert m.observation.flag == "0"


def test_euro_area_alias_prefers_largest_duplicate(gdp_records):
    m = resolve_match(gdp_records, "EA", 2022, schema=EUROSTAT_GDP_EUR)
    assert m.observation.raw_value == "200"
    assert m.value == pytest.approx(10.0)


# ---------- extremo a extremo ----------
def test_yoy_from_two_observations(gdp_records):
    cur = find_observation(gdp_records, "Spain", 2022, "total", schema=EUROSTAT_GDP)
    prev = find_observation(gdp_records, "Spain", 2021, "total", schema=EUROSTAT_GDP)
    assert metrics.yoy_change(cur.value, prev.value) == pytest.approx(2.857, abs=1e-3)


@pytest.mark.parametrize("raw, expected", [("2022", 2022), (2021, 2021), ("2022.0", 2022),
                                           ("2022.5", None), ("", None), ("año", None)])
def test_parse_year(raw, expected):
    assert parse_year(raw) == expected


# ---------- caché ----------
def test_match_cache_hits_and_invalidation(gdp_records):
    cache = MatchCache(gdp_records, EUROSTAT_GDP, dataset_version="v1")
    first = cache.resolve("Spain", 2022)
    again = cache.resolve("SPAIN", 2022, "All Sectors")
    assert first == again
    assert (cache.misses, cache.hits) == (1, 1)
    assert first == resolve_match(gdp_records, "Spain", 2022, schema=EUROSTAT_GDP)

    cache.set_version("v1")
    cache.resolve("Spain", 2022)
    assert cache.hits == 2

    cache.set_version("v2")
    cache.resolve("Spain", 2022)
    assert cache.misses == 2


def test_match_cache_new_records_reset(gdp_records):
    cache = MatchCache(gdp_records, EUROSTAT_GDP, dataset_version="v1")
    assert cache.resolve("Spain", 2022).value == pytest.approx(1.44)
    cache.set_version("v1", records=_dup_rows("9,9"))
    assert cache.resolve("Spain", 2022).value == pytest.approx(9.9)
