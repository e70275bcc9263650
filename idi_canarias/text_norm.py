# idi_canarias/text_norm.py
from __future__ import annotations
import math
import re
import unicodedata

import pandas as pd

# Marcas combinantes (acentos, diéresis, virgulilla de la ñ) tras NFD
_COMBINING = re.compile(r"[\u0300-\u036f]")

# Marcadores de "sin dato" habituales en Eurostat / INE
_MISSING = {"", "-", ":", "..", "nan", "none", "null", "n/a", "na"}


# ─────────────────────────────────────────────────────────────
# Normalización de texto
# ─────────────────────────────────────────────────────────────
def normalize(text) -> str:
    """Minúsculas, descomposición NFD y sin diacríticos. None/NaN → ''."""
    if text is None:
        return ""
    if not isinstance(text, str):
        if pd.isna(text):
            return ""
        text = str(text)
    if not text:
        return ""
    s = unicodedata.normalize("NFD", text.lower())
    return _COMBINING.sub("", s)


def normalize_key(text) -> str:
    """normalize + espacios colapsados y recortados (para claves de diccionario)."""
    return re.sub(r"\s+", " ", normalize(text)).strip()


# ─────────────────────────────────────────────────────────────
# Conversión numérica robusta
# ─────────────────────────────────────────────────────────────
def parse_number(value) -> float | None:
    """
    Convierte un valor de dataset a float.
    Gestiona '1,44', '1.44', '1.234,56', '1,234.56' y marcas de ausencia.
    Devuelve None (nunca NaN/inf) si no es numérico.
    """
    if value is None:
        return None
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        f = float(value)
        return f if math.isfinite(f) else None

    s = str(value).strip().replace("\u00a0", "").replace(" ", "")
    if s.lower() in _MISSING:
        return None

    has_comma, has_dot = "," in s, "." in s
    if has_comma and has_dot:
        # el separador más a la derecha es el decimal
        if s.rfind(",") > s.rfind("."):
            s = s.replace(".", "").replace(",", ".")
        else:
            s = s.replace(",", "")
    elif has_comma:
        s = s.replace(",", "") if s.count(",") > 1 else s.replace(",", ".")
    elif s.count(".") > 1:
        # 19.325.000: varios puntos sin coma son separadores de miles
        s = s.replace(".", "")

    try:
        f = float(s)
    except ValueError:
        return None
    return f if math.isfinite(f) else None
