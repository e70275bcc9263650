# idi_canarias/charts.py
"""
Gráficos Plotly y tooltips del dashboard. Solo consumen valores ya resueltos
(ranking_table, sector_breakdown, canary_comparison); aquí no se divide ni se
empareja nada.
"""
from __future__ import annotations
from html import escape

import pandas as pd
import plotly.express as px
import plotly.graph_objects as go

from idi_canarias.catalog import CATALOG, EntityCatalog
from idi_canarias.i18n import flag_description, format_change, format_number, sector_name, t
from idi_canarias.metrics import RankPosition
from idi_canarias.sectors import Sector

# Paleta institucional
SPAIN_RED = "#AA151B"
SPAIN_YELLOW = "#F1BF00"
CANARY_BLUE = "#0033A0"
CANARY_YELLOW = "#FFD100"
EU_BLUE = "#003399"
EU_YELLOW = "#FFCC00"
PRIMARY = "#4059ad"
SECONDARY = "#6b9ac4"
ACCENT = "#a31621"

ENTITY_COLORS = {"ES": SPAIN_RED, "ES-CN": CANARY_BLUE, "EU": EU_BLUE}
SECTOR_COLORS = {
    Sector.BUSINESS: PRIMARY,
    Sector.GOVERNMENT: SECONDARY,
    Sector.EDUCATION: CANARY_YELLOW,
    Sector.NONPROFIT: ACCENT,
}


# ─────────────────────────────────────────────────────────────
# Tooltips
# ─────────────────────────────────────────────────────────────
def tooltip_html(
    label: str,
    value,
    *,
    lang: str = "es",
    year: int | None = None,
    unit: str = "",
    decimals: int = 2,
    rank: RankPosition | None = None,
    yoy=None,
    flag: str | None = None,
    divisor: int | None = None,
    show_yoy: bool = False,
) -> str:
    """HTML de tooltip. Valores ausentes se muestran como "Sin datos"/"No data"."""
    head = f"<b>{escape(str(label))}</b>" + (f" ({year})" if year is not None else "")
    val = format_number(value, lang, decimals)
    if unit and val != t("no_data", lang):
        val = f"{val} {unit}" if unit != "%" else f"{val}%"
    lines = [head, val]
    if rank is not None:
        lines.append(f"{t('ranking', lang)}: {t('rank_of', lang, rank=rank.rank, total=rank.total)}")
    if show_yoy:
        lines.append(f"{t('yoy', lang)}: {format_change(yoy, lang)}")
    desc = flag_description(flag, lang)
    if desc:
        lines.append(f"<i>{escape(desc)}</i>")
    if divisor:
        lines.append(f"<i>{t('per_member_note', lang, n=divisor)}</i>")
    return "<br>".join(lines)


def _rank_of(row) -> RankPosition | None:
    r, tot = row.get("rank"), row.get("total")
    if r is None or pd.isna(r):
        return None
    return RankPosition(rank=int(r), total=int(tot))


def _tooltips(df: pd.DataFrame, lang, year, unit, decimals) -> list[str]:
    out = []
    for row in df.to_dict("records"):
        yoy, divisor = row.get("yoy"), row.get("divisor")
        out.append(tooltip_html(
            row["label"], row["value"], lang=lang, year=year, unit=unit, decimals=decimals,
            rank=_rank_of(row), yoy=None if yoy is None or pd.isna(yoy) else yoy,
            flag=row.get("flag") if isinstance(row.get("flag"), str) else None,
            divisor=None if divisor is None or pd.isna(divisor) else int(divisor),
            show_yoy="yoy" in row,
        ))
    return out


def empty_figure(lang: str = "es", title: str | None = None) -> go.Figure:
    fig = go.Figure()
    fig.add_annotation(text=t("no_data", lang), showarrow=False, x=0.5, y=0.5,
                       xref="paper", yref="paper", font=dict(size=16))
    fig.update_layout(title=title, xaxis_visible=False, yaxis_visible=False)
    return fig


# ─────────────────────────────────────────────────────────────
# Figuras
# ─────────────────────────────────────────────────────────────
def bar_color(row) -> str:
    code = (row.get("code") or "")
    if code in ENTITY_COLORS:
        return ENTITY_COLORS[code]
    if row.get("is_supranational"):
        return EU_YELLOW
    return SECONDARY


def ranking_bar_chart(
    ranking: pd.DataFrame,
    *,
    lang: str = "es",
    title: str | None = None,
    year: int | None = None,
    unit: str = "",
    decimals: int = 2,
) -> go.Figure:
    """Barras horizontales ordenadas; España, Canarias y los agregados destacados."""
    df = ranking[ranking["value"].notna()] if not ranking.empty else ranking
    if df.empty:
        return empty_figure(lang, title)
    df = df.sort_values("value", ascending=False)
    fig = go.Figure(go.Bar(
        x=df["value"].astype(float),
        y=df["label"],
        orientation="h",
        marker_color=[bar_color(r) for r in df.to_dict("records")],
        hovertext=_tooltips(df, lang, year, unit, decimals),
        hovertemplate="%{hovertext}<extra></extra>",
    ))
    fig.update_layout(
        title=title,
        yaxis=dict(autorange="reversed"),
        height=max(400, 22 * len(df)),
        margin=dict(l=10, r=10, t=50, b=10),
        separators=",." if lang == "es" else ".,",
    )
    return fig


def europe_choropleth(
    ranking: pd.DataFrame,
    *,
    lang: str = "es",
    title: str | None = None,
    year: int | None = None,
    unit: str = "",
    decimals: int = 2,
    catalog: EntityCatalog = CATALOG,
) -> go.Figure:
    """Mapa de Europa por ISO3. Los agregados no se pintan."""
    if ranking.empty:
        return empty_figure(lang, title)
    df = ranking[ranking["value"].notna() & ~ranking["is_supranational"].astype(bool)].copy()
    df["iso3"] = [
        (catalog.entity(c).iso3 if c and catalog.entity(c) else None) for c in df["code"]
    ]
    df = df[df["iso3"].notna()]
    if df.empty:
        return empty_figure(lang, title)
    df["tooltip"] = _tooltips(df, lang, year, unit, decimals)
    fig = px.choropleth(
        df,
        locations="iso3",
        color="value",
        scope="europe",
        custom_data=["tooltip"],
        color_continuous_scale="Blues",
        title=title,
    )
    fig.update_traces(hovertemplate="%{customdata[0]}<extra></extra>")
    fig.update_layout(margin=dict(l=0, r=0, t=50, b=0), separators=",." if lang == "es" else ".,",
                      coloraxis_colorbar_title=unit or t("value", lang))
    return fig


def sector_distribution_chart(
    breakdown: dict,
    *,
    lang: str = "es",
    title: str | None = None,
    decimals: int = 2,
) -> go.Figure:
    """Tarta con el reparto entre sectores (sin el total)."""
    rows = [
        {"sector": sector_name(s, lang), "value": float(v), "color": SECTOR_COLORS.get(s, PRIMARY),
         "tooltip": f"<b>{escape(sector_name(s, lang))}</b><br>{format_number(v, lang, decimals)}"}
        for s, v in breakdown.items()
        if s != Sector.TOTAL and v is not None and not pd.isna(v) and v > 0
    ]
    if not rows:
        return empty_figure(lang, title)
    df = pd.DataFrame(rows)
    fig = px.pie(df, names="sector", values="value", title=title, custom_data=["tooltip"],
                 color="sector", color_discrete_map=dict(zip(df["sector"], df["color"])))
    fig.update_traces(hovertemplate="%{customdata[0]}<br>%{percent}<extra></extra>")
    fig.update_layout(separators=",." if lang == "es" else ".,")
    return fig


def timeline_chart(
    comparison: pd.DataFrame,
    *,
    lang: str = "es",
    title: str | None = None,
    unit: str = "",
    decimals: int = 2,
) -> go.Figure:
    """Líneas por entidad (formato largo year/code/label/value)."""
    if comparison.empty or comparison["value"].notna().sum() == 0:
        return empty_figure(lang, title)
    df = comparison.copy()
    df["tooltip"] = [
        tooltip_html(r["label"], r["value"], lang=lang, year=int(r["year"]), unit=unit, decimals=decimals)
        for r in df.to_dict("records")
    ]
    colors = {r["label"]: ENTITY_COLORS.get(r["code"], PRIMARY) for r in df.to_dict("records")}
    fig = px.line(df, x="year", y="value", color="label", markers=True, title=title,
                  custom_data=["tooltip"], color_discrete_map=colors)
    fig.update_traces(hovertemplate="%{customdata[0]}<extra></extra>", connectgaps=False)
    fig.update_layout(xaxis_title=t("year", lang), yaxis_title=unit or t("value", lang),
                      legend_title=None, separators=",." if lang == "es" else ".,")
    return fig
