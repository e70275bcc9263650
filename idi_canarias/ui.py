# idi_canarias/ui.py
"""Piezas de Streamlit compartidas por las páginas: carga cacheada y selectores de la barra lateral."""
from __future__ import annotations
import logging

import requests
import streamlit as st

from idi_canarias import config, loaders
from idi_canarias.i18n import LANGS, sector_name, t
from idi_canarias.logging_config import setup_logging
from idi_canarias.sectors import Sector

logger = logging.getLogger(__name__)


@st.cache_resource
def _init_logging():
    setup_logging()
    return True


@st.cache_data(show_spinner=False)
def load_dataset(name: str) -> tuple[list[dict], str]:
    """(registros, versión) de un dataset registrado."""
    df = loaders.load_frame(name)
    return df.to_dict("records"), df.attrs.get("version", "")


def try_load(name: str, lang: str) -> list[dict]:
    """Como load_dataset, pero muestra el error en la página y devuelve [] si falla."""
    try:
        records, _ = load_dataset(name)
        return records
    except (FileNotFoundError, requests.HTTPError, ValueError) as e:
        logger.warning("No se pudo cargar %s: %s", name, e)
        st.warning(t("load_error", lang, name=name, error=e))
        return []


def page_setup(title_key: str, icon: str) -> str:
    """Configura la página e idioma; devuelve el idioma elegido."""
    _init_logging()
    st.set_page_config(page_title=f"I+D Canarias – {t(title_key, config.DEFAULT_LANG)}",
                       layout="wide", page_icon=icon)
    if "lang" not in st.session_state:
        st.session_state["lang"] = config.DEFAULT_LANG if config.DEFAULT_LANG in LANGS else "es"
    lang = st.sidebar.radio(
        "Idioma / Language", LANGS,
        index=LANGS.index(st.session_state["lang"]),
        format_func=lambda x: {"es": "Español", "en": "English"}[x],
        horizontal=True,
    )
    st.session_state["lang"] = lang
    st.title(f"{icon} {t(title_key, lang)}")
    return lang


def year_selector(years: list[int], lang: str, key: str = "year") -> int | None:
    if not years:
        return None
    return st.sidebar.selectbox(t("year", lang), sorted(years, reverse=True), key=key)


def sector_selector(lang: str, key: str = "sector") -> Sector:
    return st.sidebar.selectbox(t("sector", lang), list(Sector),
                                format_func=lambda s: sector_name(s, lang), key=key)
