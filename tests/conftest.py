# tests/conftest.py
import pytest


def _gdp(country_en, country_es, iso3, year, value, sector="All Sectors", eur="", flag=""):
    return {
        "Country": country_en,
        "País": country_es,
        "ISO3": iso3,
        "Year": str(year),
        "Sector": sector,
        "%GDP": value,
        "label_percent_gdp_id": flag,
        "Approx_RD_Investment_million_euro": eur,
    }


@pytest.fixture
def gdp_records():
    """Filas tipo gdp_consolidado.csv (Eurostat)."""
    return [
        _gdp("Spain", "España", "ESP", 2022, "1,44", eur="19.325,5"),
        _gdp("Spain", "España", "ESP", 2021, "1,40", eur="17.249,0"),
        _gdp("Spain", "España", "ESP", 2022, "0,82", sector="Business enterprise sector", eur="10.000,0"),
        _gdp("Spain", "España", "ESP", 2022, "0,24", sector="Government sector", eur="3.000,0"),
        _gdp("Spain", "España", "ESP", 2022, "0,38", sector="Higher education sector", eur="6.000,0"),
        _gdp("France", "Francia", "FRA", 2022, "2,5", eur="65000"),
        _gdp("Germany", "Alemania", "DEU", 2022, "2,5", eur="120000", flag="p"),
        _gdp("Czechia", "Chequia", "CZE", 2022, "", eur=""),
        _gdp("European Union - 27 countries (from 2020)", "Unión Europea", "", 2022, "2,2", eur="59,4"),
        _gdp("Euro area – 20 countries (from 2023)", "Zona Euro (20 países)", "", 2022, "2,3", eur="200"),
        _gdp("Euro area - 19 countries  (2015-2022)", "Zona Euro (19 países)", "", 2022, "2,25", eur="190"),
    ]


def _ccaa(es, en, year, pct, thousand="", sector="(_T)"):
    return {
        "Comunidad Limpio": es,
        "Comunidad en Inglés": en,
        "Comunidad (Original)": es,
        "Año": str(year),
        "Sector Id": sector,
        "% PIB I+D": pct,
        "Gasto en I+D (Miles €)": thousand,
    }


@pytest.fixture
def ccaa_gdp_records():
    """Filas tipo gasto_ID_comunidades_porcentaje_pib.csv (INE)."""
    return [
        _ccaa("Total nacional", "Spain", 2021, "1,40", "17.249.000"),
        _ccaa("Total nacional", "Spain", 2022, "1,44", "19.325.000"),
        _ccaa("Canarias", "Canary Islands", 2021, "0,52", "240.000"),
        _ccaa("Canarias", "Canary Islands", 2022, "0,55", "270.000"),
        _ccaa("Canarias", "Canary Islands", 2022, "0,30", "150.000", sector="(EMPRESAS)"),
        _ccaa("Canarias", "Canary Islands", 2022, "0,25", "120.000", sector="(ENSENIANZA_SUPERIOR)"),
        _ccaa("Madrid", "Madrid", 2022, "1,75", "4.000.000"),
        _ccaa("País Vasco", "Basque Country", 2022, "2,10", "1.600.000"),
    ]


def _res(territorio, code, year, value, sector="_T", sexo="_T", medida="INVESTIGADORES_EJC"):
    return {
        "TERRITORIO": territorio,
        "TERRITORIO_CODE": code,
        "TIME_PERIOD": str(year),
        "SECTOR_EJECUCION_CODE": sector,
        "SEXO_CODE": sexo,
        "MEDIDAS_CODE": medida,
        "OBS_VALUE": value,
    }


@pytest.fixture
def ccaa_researchers_records():
    """Filas tipo researchers_comunidades_autonomas.csv (INE)."""
    return [
        _res("Total Nacional", "00", 2022, "1900"),
        _res("Total Nacional", "00", 2021, "1805"),
        _res("Total Nacional", "00", 2022, "900", sexo="M"),
        _res("Canarias", "05", 2022, "3800"),
        _res("Canarias", "05", 2021, "3600"),
        _res("Canarias", "05", 2022, "9999", medida="PERSONAL_EJC"),
    ]


@pytest.fixture
def researchers_records():
    """Filas tipo europa_researchers.csv (Eurostat, columna sectperf)."""
    return [
        {"geo": "ES", "TIME_PERIOD": "2022", "sectperf": "TOTAL", "OBS_VALUE": "160000", "OBS_FLAG": ""},
        {"geo": "ES", "TIME_PERIOD": "2022", "sectperf": "BES", "OBS_VALUE": "60000", "OBS_FLAG": "p"},
        {"geo": "EU27_2020", "TIME_PERIOD": "2022", "sectperf": "TOTAL", "OBS_VALUE": "2700000", "OBS_FLAG": "e"},
        {"geo": "EA20", "TIME_PERIOD": "2022", "sectperf": "TOTAL", "OBS_VALUE": "2000000", "OBS_FLAG": ""},
        {"geo": "EA19", "TIME_PERIOD": "2022", "sectperf": "TOTAL", "OBS_VALUE": "1900000", "OBS_FLAG": ""},
    ]
