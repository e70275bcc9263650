# idi_canarias/catalog.py
"""
Catálogo estático de entidades: países, bloques supranacionales (UE, Zona Euro)
y comunidades autónomas.

Cada entidad guarda todas las grafías observadas en los datasets (español,
inglés y literal del CSV). Los cambios de nombre entre ediciones de los datos
(Czechia / Czech Republic, Türkiye / Turkey…) se resuelven con alias explícitos;
la búsqueda por contención queda para el emparejador de registros como último
recurso.
"""
from __future__ import annotations
import logging
from dataclasses import dataclass
from typing import Iterable, NewType

from idi_canarias.text_norm import normalize, normalize_key

logger = logging.getLogger(__name__)

EntityCode = NewType("EntityCode", str)

FLAG_CDN = "https://flagcdn.com/{}.svg"
WIKI_FLAGS = "https://upload.wikimedia.org/wikipedia/commons/"
SPAIN_FLAG = WIKI_FLAGS + "9/9a/Flag_of_Spain.svg"

# Texto que delata una fila agregada aunque no esté en el catálogo
SUPRANATIONAL_MARKERS = (
    "european union", "union europea", "euro area", "zona euro",
    "oecd", "ocde", "average", "promedio",
)

# Códigos de agregados de Eurostat
SUPRANATIONAL_CODES = frozenset({"EU27_2020", "EU28", "EU15", "EA19", "EA20", "EFTA"})

EU_MEMBERS = 27
EURO_AREA_MEMBERS_2015 = 19
EURO_AREA_MEMBERS_2023 = 20


@dataclass(frozen=True)
class Entity:
    code: EntityCode
    names_es: tuple[str, ...]
    names_en: tuple[str, ...]
    names_dataset: tuple[str, ...]
    iso2: str | None = None
    iso3: str | None = None
    flag_url: str | None = None
    is_supranational: bool = False
    kind: str = "country"  # country | supranational | community
    member_count: int | None = None
    extra_codes: tuple[str, ...] = ()

    @property
    def aliases(self) -> tuple[str, ...]:
        return self.names_es + self.names_en + self.names_dataset

    @property
    def codes(self) -> frozenset[str]:
        """Todos los códigos estándar que identifican a la entidad (en mayúsculas)."""
        vals = [self.code, self.iso2, self.iso3, *self.extra_codes]
        return frozenset(v.upper() for v in vals if v)

    def names(self, locale: str) -> tuple[str, ...]:
        if locale == "es":
            return self.names_es
        if locale == "en":
            return self.names_en
        raise ValueError(f"idioma no soportado: {locale!r}")


def _country(code, es, en, datasets, iso3, flag=None, extra=(), **kw) -> Entity:
    return Entity(
        code=EntityCode(code),
        names_es=tuple(es),
        names_en=tuple(en),
        names_dataset=tuple(datasets),
        iso2=code,
        iso3=iso3,
        flag_url=flag or FLAG_CDN.format(code.lower()),
        extra_codes=tuple(extra),
        **kw,
    )


def _community(code, ine, es, en, datasets, flag) -> Entity:
    return Entity(
        code=EntityCode(code),
        names_es=tuple(es),
        names_en=tuple(en),
        names_dataset=tuple(datasets),
        iso2=code,
        flag_url=WIKI_FLAGS + flag,
        kind="community",
        extra_codes=(ine,),
    )


# ─────────────────────────────────────────────────────────────
# Países y bloques
# ─────────────────────────────────────────────────────────────
COUNTRIES: tuple[Entity, ...] = (
    # Entidades supranacionales
    _country("EU",
             ["Unión Europea", "Unión Europea (27 países)", "UE", "UE-27"],
             ["European Union", "European Union - 27 countries (from 2020)", "EU", "EU-27"],
             ["European Union - 27 countries (from 2020)", "Unión Europea (27 países)"],
             "EUU", extra=("EU27_2020",), is_supranational=True,
             kind="supranational", member_count=EU_MEMBERS),
    Entity(code=EntityCode("EA"),
           names_es=("Zona Euro", "Zona Euro (19 países)", "Zona Euro (20 países)"),
           names_en=("Euro area", "Euro area - 19 countries (2015-2022)",
                     "Euro area – 20 countries (from 2023)"),
           names_dataset=("Euro area - 19 countries  (2015-2022)", "Euro area - 20 countries (from 2023)",
                          "Euro area – 19 countries (2015-2022)"),
           iso2=None, iso3="EMU", flag_url=FLAG_CDN.format("eu"),
           is_supranational=True, kind="supranational",
           member_count=EURO_AREA_MEMBERS_2023, extra_codes=("EA19", "EA20")),

    # Unión Europea
    _country("BE", ["Bélgica"], ["Belgium"], ["Belgium"], "BEL"),
    _country("BG", ["Bulgaria"], ["Bulgaria"], [], "BGR"),
    _country("CZ", ["República Checa", "Chequia"], ["Czech Republic", "Czechia"], [], "CZE"),
    _country("DK", ["Dinamarca"], ["Denmark"], [], "DNK"),
    _country("DE", ["Alemania"], ["Germany"],
             ["Germany (until 1990 former territory of the FRG)"], "DEU"),
    _country("EE", ["Estonia"], ["Estonia"], [], "EST"),
    _country("IE", ["Irlanda"], ["Ireland"], [], "IRL"),
    _country("EL", ["Grecia"], ["Greece", "Hellas"], [], "GRC",
             flag=FLAG_CDN.format("gr"), extra=("GR",)),
    _country("ES", ["España"], ["Spain"], ["Total nacional", "Total Nacional"], "ESP",
             flag=SPAIN_FLAG, extra=("00",)),
    _country("FR", ["Francia"], ["France"], [], "FRA"),
    _country("HR", ["Croacia"], ["Croatia"], [], "HRV"),
    _country("IT", ["Italia"], ["Italy"], [], "ITA"),
    _country("CY", ["Chipre"], ["Cyprus"], [], "CYP"),
    _country("LV", ["Letonia"], ["Latvia"], [], "LVA"),
    _country("LT", ["Lituania"], ["Lithuania"], [], "LTU"),
    _country("LU", ["Luxemburgo"], ["Luxembourg"], [], "LUX"),
    _country("HU", ["Hungría"], ["Hungary"], [], "HUN"),
    _country("MT", ["Malta"], ["Malta"], [], "MLT"),
    _country("NL", ["Países Bajos", "Holanda"], ["Netherlands", "Holland"], [], "NLD"),
    _country("AT", ["Austria"], ["Austria"], [], "AUT"),
    _country("PL", ["Polonia"], ["Poland"], [], "POL"),
    _country("PT", ["Portugal"], ["Portugal"], [], "PRT"),
    _country("RO", ["Rumanía", "Rumania"], ["Romania"], [], "ROU"),
    _country("SI", ["Eslovenia"], ["Slovenia"], [], "SVN"),
    _country("SK", ["Eslovaquia"], ["Slovakia"], [], "SVK"),
    _country("FI", ["Finlandia"], ["Finland"], [], "FIN"),
    _country("SE", ["Suecia"], ["Sweden"], [], "SWE"),

    # Europa no UE
    _country("GB", ["Reino Unido", "Gran Bretaña"], ["United Kingdom", "Great Britain"],
             [], "GBR", extra=("UK",)),
    _country("IS", ["Islandia"], ["Iceland"], [], "ISL"),
    _country("NO", ["Noruega"], ["Norway"], [], "NOR"),
    _country("CH", ["Suiza"], ["Switzerland"], [], "CHE"),
    _country("ME", ["Montenegro"], ["Montenegro"], [], "MNE"),
    _country("MK", ["Macedonia del Norte"],
             ["North Macedonia", "Macedonia", "Rep. of North Macedonia",
              "Republic of North Macedonia"], [], "MKD"),
    _country("AL", ["Albania"], ["Albania", "Republic of Albania"], [], "ALB"),
    _country("RS", ["Serbia"], ["Serbia", "Republic of Serbia"], [], "SRB"),
    _country("BA", ["Bosnia y Herzegovina", "Bosnia"],
             ["Bosnia and Herzegovina", "Bosnia & Herzegovina"], [], "BIH"),
    _country("MD", ["Moldavia"], ["Moldova", "Republic of Moldova"], [], "MDA"),
    _country("UA", ["Ucrania"], ["Ukraine"], [], "UKR"),
    _country("TR", ["Turquía"], ["Turkey", "Türkiye"], [], "TUR"),
    _country("XK", ["Kosovo"], ["Kosovo"],
             ["Kosovo (under United Nations Security Council Resolution 1244/99)"], "XKX"),
    _country("RU", ["Rusia", "Federación Rusa"], ["Russia", "Russian Federation"], [], "RUS"),

    # Otros países presentes en los datos
    _country("US", ["Estados Unidos"], ["United States", "USA"], [], "USA"),
    _country("JP", ["Japón"], ["Japan"], [], "JPN"),
    _country("CN", ["China", "China (exc. Hong Kong)"], ["China", "China except Hong Kong"],
             [], "CHN", extra=("CN_X_HK",)),
    _country("KR", ["Corea del Sur"], ["South Korea"], [], "KOR"),
)


# ─────────────────────────────────────────────────────────────
# Comunidades autónomas (código ISO 3166-2, código INE de territorio)
# ─────────────────────────────────────────────────────────────
COMMUNITIES: tuple[Entity, ...] = (
    _community("ES-AN", "01", ["Andalucía"], ["Andalusia"], [],
               "9/9e/Flag_of_Andaluc%C3%ADa.svg"),
    _community("ES-AR", "02", ["Aragón"], ["Aragon"], [],
               "1/18/Flag_of_Aragon.svg"),
    _community("ES-AS", "03", ["Asturias", "Principado de Asturias"], [],
               ["Asturias, Principado de"],
               "3/3e/Flag_of_Asturias.svg"),
    _community("ES-IB", "04", ["Islas Baleares", "Illes Balears", "Baleares"],
               ["Balearic Islands"],
               ["Illes Balears / Islas Baleares", "Balears, Illes"],
               "7/7b/Flag_of_the_Balearic_Islands.svg"),
    _community("ES-CN", "05", ["Canarias", "Islas Canarias"], ["Canary Islands"], [],
               "b/b0/Flag_of_the_Canary_Islands.svg"),
    _community("ES-CB", "06", ["Cantabria"], [], [],
               "d/df/Flag_of_Cantabria.svg"),
    _community("ES-CL", "07", ["Castilla y León", "Castilla León", "Castilla-León"],
               ["Castile and León"], [],
               "1/13/Flag_of_Castile_and_Le%C3%B3n.svg"),
    _community("ES-CM", "08", ["Castilla-La Mancha", "Castilla - La Mancha", "Castilla La Mancha"],
               ["Castilla–La Mancha", "Castile-La Mancha"], ["Castillalamancha"],
               "a/a4/Flag_of_Castile-La_Mancha.svg"),
    _community("ES-CT", "09", ["Cataluña", "Catalunya"], ["Catalonia"], [],
               "c/ce/Flag_of_Catalonia.svg"),
    _community("ES-VC", "10", ["Com. Valenciana", "Comunidad Valenciana", "C. Valenciana"],
               ["Valencia", "Valencian Community"], ["Comunitat Valenciana"],
               "1/16/Flag_of_the_Valencian_Community_%282x3%29.svg"),
    _community("ES-EX", "11", ["Extremadura"], [], [],
               "4/48/Flag_of_Extremadura_%28with_coat_of_arms%29.svg"),
    _community("ES-GA", "12", ["Galicia"], [], [],
               "6/64/Flag_of_Galicia.svg"),
    _community("ES-MD", "13", ["Madrid", "Comunidad de Madrid"], [], ["Madrid, Comunidad de"],
               "9/9c/Flag_of_the_Community_of_Madrid.svg"),
    _community("ES-MC", "14", ["Murcia", "Región de Murcia"], [], ["Murcia, Región de"],
               "f/f6/Flag_of_Murcia.svg"),
    _community("ES-NC", "15", ["Navarra", "Comunidad Foral de Navarra"], ["Navarre"],
               ["Navarra, Comunidad Foral de"],
               "8/84/Flag_of_Navarre.svg"),
    _community("ES-PV", "16", ["País Vasco", "Euskadi"], ["Basque Country"], [],
               "2/2d/Flag_of_the_Basque_Country.svg"),
    _community("ES-RI", "17", ["La Rioja", "Rioja"], [], ["Rioja, La"],
               "5/5c/Flag_of_La_Rioja.svg"),
    _community("ES-CE", "18", ["Ceuta", "Ciudad Autónoma de Ceuta"], [], [],
               "0/0c/Flag_of_Ceuta.svg"),
    _community("ES-ML", "19", ["Melilla", "Ciudad Autónoma de Melilla"], [], [],
               "e/e9/Flag_of_Melilla.svg"),
)

SPAIN_COMMUNITY_COUNT = len(COMMUNITIES)

# Alias cortos para etiquetas largas de agregados en gráficos
SHORT_LABELS: dict[str, dict[str, str]] = {
    normalize_key("European Union - 27 countries (from 2020)"): {"en": "European Union", "es": "Unión Europea"},
    normalize_key("Euro area – 20 countries (from 2023)"): {"en": "Euro area (from 2023)", "es": "Zona Euro (desde 2023)"},
    normalize_key("Euro area - 19 countries (2015-2022)"): {"en": "Euro area (2015-2022)", "es": "Zona Euro (2015-2022)"},
    normalize_key("Euro area - 19 countries  (2015-2022)"): {"en": "Euro area (2015-2022)", "es": "Zona Euro (2015-2022)"},
    normalize_key("Unión Europea (27 países)"): {"en": "European Union", "es": "Unión Europea"},
    normalize_key("Zona Euro (20 países)"): {"en": "Euro area (from 2023)", "es": "Zona Euro (desde 2023)"},
    normalize_key("Zona Euro (19 países)"): {"en": "Euro area (2015-2022)", "es": "Zona Euro (2015-2022)"},
}


# ─────────────────────────────────────────────────────────────
# Catálogo
# ─────────────────────────────────────────────────────────────
class EntityCatalog:
    """Registro inmutable de entidades con búsqueda por código y por alias."""

    def __init__(self, entities: Iterable[Entity]):
        self._entities: tuple[Entity, ...] = tuple(entities)
        self._by_code: dict[str, Entity] = {}
        for e in self._entities:
            for c in e.codes:
                # el primero en declararse gana (p.ej. 'EU' es la UE, no la Zona Euro)
                self._by_code.setdefault(c, e)
        self._normalized_aliases: tuple[tuple[Entity, frozenset[str]], ...] = tuple(
            (e, frozenset(normalize_key(a) for a in e.aliases if a)) for e in self._entities
        )

    def __iter__(self):
        return iter(self._entities)

    def __len__(self) -> int:
        return len(self._entities)

    # ---------- búsqueda ----------
    def entity(self, code) -> Entity | None:
        """Entidad por clave, ISO2, ISO3 o código de dataset (sin distinguir mayúsculas)."""
        if not code or not isinstance(code, str):
            return None
        return self._by_code.get(code.strip().upper())

    def resolve_code_from_name(self, name) -> EntityCode | None:
        """Primer código cuyo conjunto de alias contiene el nombre normalizado."""
        key = normalize_key(name)
        if not key:
            return None
        for e, aliases in self._normalized_aliases:
            if key in aliases:
                return e.code
        return None

    def lookup(self, identifier) -> Entity | None:
        """Código primero; si no, resolución por nombre."""
        e = self.entity(identifier)
        if e is not None:
            return e
        code = self.resolve_code_from_name(identifier)
        return self._by_code.get(code.upper()) if code else None

    def aliases_for(self, code) -> frozenset[str]:
        """Alias normalizados (y códigos) de una entidad; vacío si no existe."""
        e = self.entity(code)
        if e is None:
            return frozenset()
        for ent, aliases in self._normalized_aliases:
            if ent is e:
                return aliases | frozenset(normalize(c) for c in e.codes)
        return frozenset()

    # ---------- atributos ----------
    def name_for_code(self, code, locale: str = "es") -> str | None:
        e = self.entity(code)
        if e is None:
            return None
        names = e.names(locale) or e.names("es" if locale == "en" else "en")
        return names[0] if names else None

    def flag_for_code(self, code) -> str | None:
        e = self.lookup(code)
        return e.flag_url if e else None

    def display_name(self, identifier, locale: str = "es") -> str:
        """Nombre corto para gráficos; si no se conoce, se devuelve tal cual."""
        short = SHORT_LABELS.get(normalize_key(identifier))
        if short:
            return short[locale]
        e = self.lookup(identifier)
        if e is not None:
            return self.name_for_code(e.code, locale) or str(identifier)
        return "" if identifier is None else str(identifier)

    def is_supranational(self, identifier) -> bool:
        if not identifier or not isinstance(identifier, str):
            return False
        if identifier.strip().upper() in SUPRANATIONAL_CODES:
            return True
        e = self.lookup(identifier)
        if e is not None and e.is_supranational:
            return True
        key = normalize(identifier)
        return any(m in key for m in SUPRANATIONAL_MARKERS)

    def member_count_for(self, identifier) -> int | None:
        """
        Divisor fijo para convertir un agregado en media por miembro.
        UE → 27; Zona Euro → 20 (etiquetas con '2023' o EA20) o 19 ('2015' o EA19).
        """
        if not identifier or not isinstance(identifier, str):
            return None
        code = identifier.strip().upper()
        if code == "EA20":
            return EURO_AREA_MEMBERS_2023
        if code == "EA19":
            return EURO_AREA_MEMBERS_2015

        key = normalize(identifier)
        e = self.lookup(identifier)
        is_euro_area = ((e is not None and e.code == "EA") or "euro area" in key
                        or "zona euro" in key or "ea19" in key or "ea20" in key)
        if is_euro_area:
            if "2023" in key or "ea20" in key or "20 countries" in key or "20 paises" in key:
                return EURO_AREA_MEMBERS_2023
            if "2015" in key or "ea19" in key or "19 countries" in key or "19 paises" in key:
                return EURO_AREA_MEMBERS_2015
            logger.debug("Zona Euro sin edición en %r; se usan %d miembros", identifier, EURO_AREA_MEMBERS_2023)
            return EURO_AREA_MEMBERS_2023
        if e is not None and e.is_supranational:
            return e.member_count
        if "european union" in key or "union europea" in key:
            return EU_MEMBERS
        return None

    def communities(self) -> tuple[Entity, ...]:
        return tuple(e for e in self._entities if e.kind == "community")

    def countries(self, include_supranational: bool = True) -> tuple[Entity, ...]:
        return tuple(
            e for e in self._entities
            if e.kind != "community" and (include_supranational or not e.is_supranational)
        )


CATALOG = EntityCatalog(COUNTRIES + COMMUNITIES)
