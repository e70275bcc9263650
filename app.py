import streamlit as st

from idi_canarias import config
from idi_canarias.catalog import CATALOG
from idi_canarias.charts import timeline_chart
from idi_canarias.i18n import format_change, format_percent, sector_name, t
from idi_canarias.matcher import CCAA_GDP, EUROSTAT_GDP, resolve_match
from idi_canarias.queries import CANARIAS, EU, SPAIN, available_years, canary_comparison, yoy_for
from idi_canarias.ui import page_setup, sector_selector, try_load, year_selector

lang = page_setup("overview", "🔬")
policy = config.duplicate_policy()

ccaa = try_load("gdp_communities", lang)
europe = try_load("gdp_europe", lang)

years = sorted(set(available_years(ccaa, CCAA_GDP)) | set(available_years(europe, EUROSTAT_GDP)))
year = year_selector(years, lang)
sector = sector_selector(lang)

if year is None:
    st.info(t("no_data", lang))
    st.stop()

# ---------- KPIs: Canarias, España, UE (% PIB) ----------
st.subheader(f"{t('gdp_share', lang)} · {sector_name(sector, lang)} · {year}")
cols = st.columns(3)
for col, (code, records, schema) in zip(cols, [
    (CANARIAS, ccaa, CCAA_GDP),
    (SPAIN, europe or ccaa, EUROSTAT_GDP if europe else CCAA_GDP),
    (EU, europe, EUROSTAT_GDP),
]):
    m = resolve_match(records, code, year, sector, schema=schema, locale=lang, policy=policy)
    yoy = yoy_for(records, code, year, schema, sector, locale=lang, policy=policy)
    with col:
        st.metric(
            CATALOG.name_for_code(code, lang),
            format_percent(m.value if m else None, lang),
            delta=None if yoy is None else f"{format_change(yoy, lang)} {t('vs_previous_year', lang)}",
        )

# ---------- Evolución ----------
st.subheader(t("comparison", lang))
cmp_df = canary_comparison(ccaa, CCAA_GDP, europe, EUROSTAT_GDP, sector, locale=lang, policy=policy)
st.plotly_chart(
    timeline_chart(cmp_df, lang=lang, title=t("timeline", lang), unit="%"),
    use_container_width=True,
)

st.caption(
    "Fuentes: Eurostat (rd_e_gerdtot, rd_p_persocc, pat_ep_ntot), INE (Estadística sobre actividades de I+D), OEPM."
    if lang == "es" else
    "Sources: Eurostat (rd_e_gerdtot, rd_p_persocc, pat_ep_ntot), INE (R&D activities statistics), OEPM."
)
