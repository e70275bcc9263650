# tests/test_i18n.py
import pytest

from idi_canarias.i18n import (
    FLAG_DESCRIPTIONS, TEXTS, flag_description, format_change, format_number, format_percent,
    sector_name, t,
)
from idi_canarias.sectors import Sector


def test_both_languages_have_the_same_keys():
    assert set(TEXTS["es"]) == set(TEXTS["en"])
    assert set(FLAG_DESCRIPTIONS["es"]) == set(FLAG_DESCRIPTIONS["en"])


def test_t_formats_and_falls_back():
    assert t("rank_of", "es", rank=3, total=27) == "3 de 27"
    assert t("rank_of", "en", rank=3, total=27) == "3 of 27"
    assert t("no_data", "fr") == "Sin datos"
    assert t("clave_inexistente", "en") == "clave_inexistente"


@pytest.mark.parametrize("value, lang, decimals, expected", [
    (1234.5, "es", 1, "1234,5"),
    (12345.678, "es", 2, "12.345,68"),
    (12345.678, "en", 2, "12,345.68"),
    (1234567.891, "es", 2, "1.234.567,89"),
    (1.44, "es", 2, "1,44"),
    (-2.5, "en", 1, "-2.5"),
    (-0.001, "es", 2, "0,00"),
    (0, "en", 0, "0"),
])
def test_format_number(value, lang, decimals, expected):
    assert format_number(value, lang, decimals) == expected


@pytest.mark.parametrize("value", [None, float("nan"), float("inf"), "abc"])
def test_format_number_missing(value):
    assert format_number(value, "es") == "Sin datos"
    assert format_number(value, "en") == "No data"


def test_format_percent_and_change():
    assert format_percent(1.44, "es") == "1,44%"
    assert format_percent(None, "en") == "No data"
    assert format_change(2.857, "es") == "+2,9%"
    assert format_change(-10, "en") == "-10.0%"
    assert format_change(None, "es") == "Sin datos"


def test_sector_names():
    assert sector_name(Sector.TOTAL, "es") == "Todos los sectores"
    assert sector_name("Business enterprise sector", "en") == "Business enterprise"
    assert sector_name("agricultura", "es") == "agricultura"


def test_flag_description():
    assert flag_description("p", "es") == "Provisional"
    assert flag_description(" E ", "en") == "Estimated"
    assert flag_description("", "es") is None
    assert flag_description(None, "es") is None
    assert flag_description("zz", "es") is None
