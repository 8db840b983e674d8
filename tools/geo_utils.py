"""
geo_utils.py — Venue Address Geocoding Utility
-----------------------------------------------

This module geocodes free-text venue addresses with OpenStreetMap Nominatim
and returns the best match including its structured address details
(country, state, city, road, house_number, ...), which
`core.address_normalizer` turns into a location record.

Features:
- Sends the site language so place names come back localized
- Identifies the caller via User-Agent and contact email (Nominatim policy)
- Caches successful lookups for GEOCODE_CACHE_TTL seconds (default 1 hour),
  keyed on the MD5 of the sanitized address, to stay under the rate limit

Expected settings:
- USER_AGENT, GEOCODER_EMAIL, SITE_LANGUAGE in `.env` or `.streamlit/secrets.toml`

Dependencies:
- requests for API calls
- cachetools for the in-process TTL cache

"""

import hashlib
import logging
from typing import Optional

import requests
from cachetools import TTLCache

from config.settings import (
    GEOCODE_CACHE_TTL,
    GEOCODE_TIMEOUT,
    GEOCODER_EMAIL,
    HEADERS,
    NOMINATIM_URL,
    SITE_LANGUAGE,
)
from tools.slug_utils import sanitize_text_field

logger = logging.getLogger(__name__)

_geocode_cache: TTLCache = TTLCache(maxsize=1024, ttl=GEOCODE_CACHE_TTL)


def site_language(locale: Optional[str] = None) -> str:
    """Converts a locale like 'de_DE' to the language code Nominatim accepts ('de')."""
    locale = locale or SITE_LANGUAGE or "en"
    return locale.replace("-", "_").split("_")[0].lower()


def geocode_cache_key(address: str) -> str:
    return "geocode_" + hashlib.md5(address.encode("utf-8")).hexdigest()


def clear_geocode_cache() -> None:
    _geocode_cache.clear()


def geocode_address(address: str, language: Optional[str] = None) -> Optional[dict]:
    """
    Geocodes a venue address into the best matching Nominatim result.

    Args:
        address (str): e.g., "Marienplatz 1, 80331 Munich, Germany"
        language (str | None): Locale or language code; defaults to SITE_LANGUAGE

    Returns:
        dict | None: First Nominatim result (with an `address` mapping), or None on failure
    """
    address = sanitize_text_field(address)
    if not address:
        return None

    cache_key = geocode_cache_key(address)
    cached = _geocode_cache.get(cache_key)
    if cached is not None:
        return cached

    params = {
        "q": address,
        "format": "json",
        "addressdetails": "1",
        "limit": "1",
        "accept-language": site_language(language),
    }
    if GEOCODER_EMAIL:
        params["email"] = GEOCODER_EMAIL

    try:
        response = requests.get(NOMINATIM_URL, params=params, headers=HEADERS, timeout=GEOCODE_TIMEOUT)
        response.raise_for_status()
        data = response.json()
    except requests.RequestException as e:
        logger.error("Geocoding API error for '%s' - %s", address, e)
        return None
    except ValueError:
        logger.error("Invalid API response for address: %s", address)
        return None

    if not data or not isinstance(data, list) or not isinstance(data[0], dict):
        logger.warning("No geocoding result for address: %s", address)
        return None

    result = data[0]
    _geocode_cache[cache_key] = result
    return result
