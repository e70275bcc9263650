# tests/test_charts.py
import re

import pandas as pd

from idi_canarias.charts import (
    ENTITY_COLORS, europe_choropleth, ranking_bar_chart, sector_distribution_chart,
    timeline_chart, tooltip_html,
)
from idi_canarias.matcher import CCAA_GDP, EUROSTAT_GDP, EUROSTAT_GDP_EUR
from idi_canarias.metrics import RankPosition
from idi_canarias.queries import canary_comparison, ranking_table, sector_breakdown

NAN = re.compile(r"\bnan\b", re.IGNORECASE)


def test_tooltip_with_everything():
    html = tooltip_html("España", 1.44, lang="es", year=2022, unit="%", rank=RankPosition(3, 27),
                        yoy=2.857, flag="p", show_yoy=True)
    assert "<b>España</b> (2022)" in html
    assert "1,44%" in html
    assert "3 de 27" in html
    assert "+2,9%" in html
    assert "Provisional" in html


def test_tooltip_missing_values_never_show_nan():
    html = tooltip_html("Chequia", float("nan"), lang="en", yoy=None, show_yoy=True)
    assert "No data" in html
    assert not NAN.search(html)


def test_tooltip_escapes_labels():
    assert "<script>" not in tooltip_html("<script>", 1, lang="en")


def test_tooltip_per_member_note():
    html = tooltip_html("Unión Europea", 2.2, lang="es", divisor=27)
    assert "27" in html


def test_ranking_bar_chart(gdp_records):
    df = ranking_table(gdp_records, 2022, EUROSTAT_GDP, locale="en")
    fig = ranking_bar_chart(df, lang="en", year=2022, unit="%")
    bar = fig.data[0]
    # Chequia no tiene valor
    assert "Czech Republic" not in bar.y
    assert len(bar.y) == len(df) - 1
    assert all(not NAN.search(h) for h in bar.hovertext)
    spain = list(bar.y).index("Spain")
    assert bar.marker.color[spain] == ENTITY_COLORS["ES"]


def test_ranking_bar_chart_empty():
    fig = ranking_bar_chart(pd.DataFrame(columns=["value", "label"]), lang="es")
    assert fig.layout.annotations[0].text == "Sin datos"


def test_choropleth_skips_aggregates(gdp_records):
    df = ranking_table(gdp_records, 2022, EUROSTAT_GDP_EUR, locale="es")
    fig = europe_choropleth(df, lang="es", year=2022)
    assert set(fig.data[0].locations) == {"ESP", "FRA", "DEU"}
    assert all(not NAN.search(c[0]) for c in fig.data[0].customdata)


def test_sector_pie_excludes_total_and_missing(gdp_records):
    b = sector_breakdown(gdp_records, "Spain", 2022, EUROSTAT_GDP_EUR)
    fig = sector_distribution_chart(b, lang="en")
    assert set(fig.data[0].labels) == {"Business enterprise", "Government", "Higher education"}


def test_timeline_chart(ccaa_gdp_records, gdp_records):
    comp = canary_comparison(ccaa_gdp_records, CCAA_GDP, gdp_records, EUROSTAT_GDP, locale="es")
    fig = timeline_chart(comp, lang="es", unit="%")
    assert {tr.name for tr in fig.data} == {"Canarias", "España", "Unión Europea"}
    for tr in fig.data:
        assert all(not NAN.search(c[0]) for c in tr.customdata)
