"""
country_codes.py
Dataset country display names mapped to map region identifiers.

- iso2: the identifier used for fills and events
- iso3: what Plotly choropleths key locations on
- centroid: (lat, lon) used when zooming to a selected country

Countries in the dataset but missing here are still aggregated, just not drawn.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class CountryCode:
    iso2: str
    iso3: str
    lat: float
    lon: float


COUNTRY_ISO_MAPPING: dict[str, CountryCode] = {
    # Americas
    "United States": CountryCode("US", "USA", 39.8, -98.6),
    "Canada": CountryCode("CA", "CAN", 56.1, -106.3),
    "Mexico": CountryCode("MX", "MEX", 23.6, -102.6),
    "Brazil": CountryCode("BR", "BRA", -14.2, -51.9),

    # Europe
    "United Kingdom": CountryCode("GB", "GBR", 54.0, -2.0),
    "Germany": CountryCode("DE", "DEU", 51.2, 10.4),
    "France": CountryCode("FR", "FRA", 46.2, 2.2),
    "Italy": CountryCode("IT", "ITA", 41.9, 12.6),
    "Spain": CountryCode("ES", "ESP", 40.5, -3.7),
    "Netherlands": CountryCode("NL", "NLD", 52.1, 5.3),
    "Russia": CountryCode("RU", "RUS", 61.5, 105.3),
    "Turkey": CountryCode("TR", "TUR", 39.0, 35.2),

    # Asia / Pacific
    "Japan": CountryCode("JP", "JPN", 36.2, 138.3),
    "China": CountryCode("CN", "CHN", 35.9, 104.2),
    "India": CountryCode("IN", "IND", 20.6, 79.0),
    "South Korea": CountryCode("KR", "KOR", 35.9, 127.8),
    "Australia": CountryCode("AU", "AUS", -25.3, 133.8),

    # Middle East / Africa
    "Saudi Arabia": CountryCode("SA", "SAU", 23.9, 45.1),
    "South Africa": CountryCode("ZA", "ZAF", -30.6, 22.9),
}

_BY_ISO2 = {c.iso2: name for name, c in COUNTRY_ISO_MAPPING.items()}
_BY_ISO3 = {c.iso3: name for name, c in COUNTRY_ISO_MAPPING.items()}


def code_for(country: str) -> Optional[CountryCode]:
    return COUNTRY_ISO_MAPPING.get(country)


def country_for_location(location: Optional[str]) -> Optional[str]:
    """Resolve an ISO-2 or ISO-3 map location back to the dataset display name."""
    if not location:
        return None
    loc = str(location).strip().upper()
    return _BY_ISO2.get(loc) or _BY_ISO3.get(loc)


def iso3_for_iso2(iso2: str) -> Optional[str]:
    name = _BY_ISO2.get(iso2)
    return COUNTRY_ISO_MAPPING[name].iso3 if name else None
