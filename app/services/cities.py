"""
Traficar city table
Center point and search radius for every city the map knows about
"""

from typing import Dict, Optional
from models.vehicle import CityConfig

DEFAULT_CITY = "krakow"

CITIES: Dict[str, CityConfig] = {
    "krakow": CityConfig(key="krakow", name="Kraków", lat=50.0614, lng=19.9383, radius_km=15),
    "warszawa": CityConfig(key="warszawa", name="Warszawa", lat=52.2297, lng=21.0122, radius_km=20),
    "wroclaw": CityConfig(key="wroclaw", name="Wrocław", lat=51.1079, lng=17.0385, radius_km=15),
    "poznan": CityConfig(key="poznan", name="Poznań", lat=52.4064, lng=16.9252, radius_km=15),
    "trojmiasto": CityConfig(key="trojmiasto", name="Trójmiasto", lat=54.4416, lng=18.5601, radius_km=25),
    "lodz": CityConfig(key="lodz", name="Łódź", lat=51.7592, lng=19.4560, radius_km=15),
    "katowice": CityConfig(key="katowice", name="Śląsk", lat=50.2649, lng=19.0238, radius_km=25),
    "szczecin": CityConfig(key="szczecin", name="Szczecin", lat=53.4285, lng=14.5528, radius_km=15),
    "lublin": CityConfig(key="lublin", name="Lublin", lat=51.2465, lng=22.5684, radius_km=12),
}

CITY_ALIASES = {
    "warsaw": "warszawa",
    "cracow": "krakow",
    "gdansk": "trojmiasto",
    "gdynia": "trojmiasto",
    "sopot": "trojmiasto",
    "slask": "katowice",
}

# Polish letters users type in query strings
_FOLD = str.maketrans("ąćęłńóśźż", "acelnoszz")


def normalize_city_key(key: Optional[str]) -> str:
    """'  Kraków ' -> 'krakow'"""
    folded = (key or "").strip().lower().translate(_FOLD)
    return CITY_ALIASES.get(folded, folded)


def resolve_city(key: Optional[str], default: str = DEFAULT_CITY) -> CityConfig:
    """Unknown or empty keys resolve to the default city, never an error"""
    normalized = normalize_city_key(key)
    if normalized in CITIES:
        return CITIES[normalized]
    return CITIES.get(normalize_city_key(default), CITIES[DEFAULT_CITY])
