# tests/test_catalog.py
import pytest

from idi_canarias.catalog import CATALOG, SPAIN_COMMUNITY_COUNT, SPAIN_FLAG


def test_every_alias_resolves_to_its_own_code():
    for e in CATALOG:
        assert e.aliases, f"{e.code} sin alias"
        for alias in e.aliases:
            assert CATALOG.resolve_code_from_name(alias) == e.code, (alias, e.code)


def test_codes_are_unique_across_entities():
    seen = {}
    for e in CATALOG:
        for c in e.codes:
            assert c not in seen, f"código {c} repetido en {seen.get(c)} y {e.code}"
            seen[c] = e.code


def test_historical_spellings_share_a_code():
    assert CATALOG.resolve_code_from_name("Czechia") == "CZ"
    assert CATALOG.resolve_code_from_name("Czech Republic") == "CZ"
    assert CATALOG.resolve_code_from_name("Türkiye") == CATALOG.resolve_code_from_name("Turkey") == "TR"


def test_resolution_is_diacritic_and_case_insensitive():
    assert CATALOG.resolve_code_from_name("ESPAÑA") == "ES"
    assert CATALOG.resolve_code_from_name("espana") == "ES"
    assert CATALOG.resolve_code_from_name("castilla - la mancha") == "ES-CM"
    assert CATALOG.resolve_code_from_name("Illes Balears / Islas Baleares") == "ES-IB"


def test_unknown_name_is_none():
    assert CATALOG.resolve_code_from_name("Atlantis") is None
    assert CATALOG.resolve_code_from_name("") is None
    # sin coincidencias parciales: 'Ire' no es Irlanda
    assert CATALOG.resolve_code_from_name("Ire") is None


def test_lookup_by_any_code():
    assert CATALOG.entity("esp").code == "ES"
    assert CATALOG.entity("GR").code == "EL"
    assert CATALOG.entity("UK").code == "GB"
    assert CATALOG.entity("EA20").code == "EA"
    assert CATALOG.entity("05").code == "ES-CN"
    assert CATALOG.entity("XX") is None


def test_name_and_flag_for_code():
    assert CATALOG.name_for_code("ES", "es") == "España"
    assert CATALOG.name_for_code("ES", "en") == "Spain"
    assert CATALOG.name_for_code("ES-CN", "en") == "Canary Islands"
    # sin nombre en inglés: se usa el español
    assert CATALOG.name_for_code("ES-CB", "en") == "Cantabria"
    assert CATALOG.name_for_code("ZZ", "es") is None
    assert CATALOG.flag_for_code("ES") == SPAIN_FLAG
    assert CATALOG.flag_for_code("FR").endswith("/fr.svg")
    assert CATALOG.flag_for_code("nowhere") is None


@pytest.mark.parametrize("identifier", [
    "EU", "European Union", "Unión Europea", "EU27_2020", "EA19", "EFTA",
    "Euro area - 19 countries  (2015-2022)", "OECD average", "Promedio OCDE",
])
def test_supranational_identifiers(identifier):
    assert CATALOG.is_supranational(identifier)


@pytest.mark.parametrize("identifier", ["Spain", "ES", "Canarias", "Germany", "Atlantis", "", None])
def test_regular_identifiers_are_not_supranational(identifier):
    assert not CATALOG.is_supranational(identifier)


@pytest.mark.parametrize("identifier, expected", [
    ("European Union - 27 countries (from 2020)", 27),
    ("EU", 27),
    ("EA20", 20),
    ("EA19", 19),
    ("Euro area – 20 countries (from 2023)", 20),
    ("Euro area - 19 countries  (2015-2022)", 19),
    ("Euro area", 20),
    ("Spain", None),
    ("Canarias", None),
])
def test_member_count_for(identifier, expected):
    assert CATALOG.member_count_for(identifier) == expected


def test_display_name_shortens_aggregates():
    assert CATALOG.display_name("Euro area – 20 countries (from 2023)", "es") == "Zona Euro (desde 2023)"
    assert CATALOG.display_name("European Union - 27 countries (from 2020)", "en") == "European Union"
    assert CATALOG.display_name("Germany", "es") == "Alemania"
    assert CATALOG.display_name("Somewhere", "es") == "Somewhere"


def test_communities_are_complete():
    comms = CATALOG.communities()
    assert len(comms) == SPAIN_COMMUNITY_COUNT == 19
    assert all(e.code.startswith("ES-") for e in comms)
    assert not any(e.is_supranational for e in comms)


def test_countries_without_aggregates():
    codes = {e.code for e in CATALOG.countries(include_supranational=False)}
    assert "ES" in codes
    assert "EU" not in codes and "EA" not in codes
