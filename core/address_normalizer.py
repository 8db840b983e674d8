"""
address_normalizer.py — Geocoder Address → LocationRecord
----------------------------------------------------------

Converts the address details of a Nominatim result into the canonical
six-level `LocationRecord` used to build the location hierarchy.

Nominatim's field names vary by country and address type, so every level is
read through an ordered fallback chain (state → region → province,
city → town → village → county, road → street → pedestrian).

Regional handling:
- Countries in the collapsed-region set (by default the German-speaking
  countries DE, AT, CH, LU) may return no `state` for city-states such as
  Berlin. The city then becomes the state-level entry and a finer subdivision
  (city_district → suburb → borough) becomes the city-level entry, so the
  hierarchy reads Europe > Germany > Berlin > Prenzlauer Berg instead of
  repeating "Berlin" on two adjacent levels.
- Continents are looked up from the static country table in
  `config/country_continents.json`; unmapped codes get the "Unknown" marker.

Dependencies:
- pydantic models from core.location_types
- tools.slug_utils for value sanitizing

"""

import json
import logging
from pathlib import Path
from functools import lru_cache
from typing import Iterable, Mapping, NamedTuple

from config.settings import COLLAPSED_REGION_COUNTRIES, COUNTRY_CONTINENTS_FILE, UNKNOWN_CONTINENT
from core.exception import NormalizationFailure
from core.location_types import LocationRecord
from tools.slug_utils import sanitize_text_field

logger = logging.getLogger(__name__)


class FallbackChain(NamedTuple):
    """Ordered candidate field names; the first non-empty value wins."""
    fields: tuple[str, ...]

    def resolve(self, address: Mapping) -> str:
        for field in self.fields:
            value = sanitize_text_field(address.get(field))
            if value:
                return value
        return ""


STATE_CHAIN = FallbackChain(("state", "region", "province"))
CITY_CHAIN = FallbackChain(("city", "town", "village", "county"))
CITY_STATE_CHAIN = FallbackChain(("city", "town", "village"))
SUBDISTRICT_CHAIN = FallbackChain(("city_district", "suburb", "borough"))
STREET_CHAIN = FallbackChain(("road", "street", "pedestrian"))
STREET_NUMBER_CHAIN = FallbackChain(("house_number",))


def load_country_continents(path: Path = COUNTRY_CONTINENTS_FILE) -> dict[str, str]:
    """
    Loads the country code → continent table.

    Args:
        path (Path): JSON file mapping lowercase ISO alpha-2 codes to continent names

    Returns:
        dict[str, str]: Lowercased code → continent name
    """
    with open(path, encoding="utf-8") as fh:
        table = json.load(fh)
    return {str(code).lower(): str(continent) for code, continent in table.items()}


class AddressNormalizer:
    """
    Stateless normalizer; the continent table and the collapsed-region set are
    injected so they can be extended without touching the algorithm.
    """

    def __init__(
        self,
        country_continents: Mapping[str, str],
        collapsed_regions: Iterable[str] = COLLAPSED_REGION_COUNTRIES,
        unknown_continent: str = UNKNOWN_CONTINENT,
    ):
        self.country_continents = {code.lower(): name for code, name in country_continents.items()}
        self.collapsed_regions = frozenset(code.lower() for code in collapsed_regions)
        self.unknown_continent = unknown_continent

    def normalize(self, raw: Mapping) -> LocationRecord:
        """
        Args:
            raw (Mapping): A geocoder result holding an `address` mapping, or
                the address mapping itself

        Returns:
            LocationRecord: Canonical record; levels the address lacks are ""

        Raises:
            NormalizationFailure: When there is no address substructure
        """
        address = _extract_address(raw)

        country_code = sanitize_text_field(address.get("country_code")).lower()
        continent = self.country_continents.get(country_code, self.unknown_continent)
        if country_code and country_code not in self.country_continents:
            logger.debug("No continent mapped for country code '%s'", country_code)

        if country_code in self.collapsed_regions:
            state, city = self._collapsed_region_levels(address)
        else:
            state = STATE_CHAIN.resolve(address)
            city = CITY_CHAIN.resolve(address)

        return LocationRecord(
            continent=sanitize_text_field(continent),
            country=sanitize_text_field(address.get("country")),
            country_code=country_code,
            state=state,
            city=city,
            street=STREET_CHAIN.resolve(address),
            street_number=STREET_NUMBER_CHAIN.resolve(address),
        )

    @staticmethod
    def _collapsed_region_levels(address: Mapping) -> tuple[str, str]:
        state = sanitize_text_field(address.get("state"))
        if state:
            return state, CITY_CHAIN.resolve(address)

        # City-state: the city moves up to state level, a subdivision becomes the city
        state = CITY_STATE_CHAIN.resolve(address)
        if not state:
            return "", ""
        return state, SUBDISTRICT_CHAIN.resolve(address)


# Keys that identify a bare Nominatim address mapping
ADDRESS_KEYS = frozenset(
    field
    for chain in (STATE_CHAIN, CITY_CHAIN, SUBDISTRICT_CHAIN, STREET_CHAIN, STREET_NUMBER_CHAIN)
    for field in chain.fields
) | {"country", "country_code", "postcode"}


def _extract_address(raw) -> Mapping:
    if not isinstance(raw, Mapping):
        raise NormalizationFailure("Geocoder result is not a mapping")

    if "address" in raw:
        address = raw["address"]
    elif ADDRESS_KEYS.intersection(raw):
        address = raw
    else:
        raise NormalizationFailure("Geocoder result has no address details")

    if not isinstance(address, Mapping) or not any(
        sanitize_text_field(value) for value in address.values() if not isinstance(value, Mapping)
    ):
        raise NormalizationFailure("Geocoder result has no address components")
    return address


@lru_cache(maxsize=None)
def get_default_normalizer() -> AddressNormalizer:
    """Normalizer built from the configured continent table and region set."""
    return AddressNormalizer(load_country_continents())


def normalize(raw: Mapping) -> LocationRecord:
    return get_default_normalizer().normalize(raw)
