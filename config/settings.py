"""
settings.py — Central config for the Venue Location Hierarchy

Precedence for config values:
1) Streamlit secrets (if available)
2) Environment variables
3) Sensible defaults

Secrets (geocoder contact email, database credentials) should live in
.streamlit/secrets.toml for Streamlit, or in a local .env file.
"""

from __future__ import annotations
import logging
import os
from pathlib import Path
from typing import Optional
from dotenv import load_dotenv

load_dotenv()

# --- Streamlit secrets (optional) ---
_ST_SECRETS = None
try:
    import streamlit as st  # noqa: F401
    _ST_SECRETS = getattr(st, "secrets", None)
except Exception:
    _ST_SECRETS = None


# --- Helpers ---------------------------------------------------------------

PROJECT_ROOT = Path(__file__).resolve().parents[1]  # repo root

def from_secrets_or_env(key: str, default: Optional[str] = None) -> Optional[str]:
    """Return value from st.secrets[key] if available, else os.getenv(key), else default."""
    if _ST_SECRETS is not None:
        try:
            val = _ST_SECRETS.get(key, None)
            if val is not None:
                return str(val)
        except Exception:
            # No secrets.toml present
            pass
    return os.getenv(key, default)

def as_bool(value: Optional[str], default: bool = False) -> bool:
    """Parse common truthy strings to bool."""
    if value is None:
        return default
    return str(value).strip().lower() in {"1", "true", "t", "yes", "y", "on"}

def as_int(value: Optional[str], default: int) -> int:
    try:
        return int(value) if value is not None else default
    except ValueError:
        return default

def as_list(value: Optional[str], default: tuple[str, ...] = ()) -> tuple[str, ...]:
    """Split a comma separated setting into lower-cased, non-empty items."""
    if value is None:
        return default
    return tuple(item.strip().lower() for item in str(value).split(",") if item.strip())

def resolve_path(raw: str | Path, *, base: Path = PROJECT_ROOT) -> Path:
    """
    Resolve a filesystem path. If absolute or starts with ~, respect it.
    If relative, resolve under `base`.
    """
    p = Path(raw).expanduser()
    return p if p.is_absolute() else (base / p)


# --- Environment / Services -----------------------------------------------

ENVIRONMENT  = from_secrets_or_env("ENV", "development")
DEBUG        = as_bool(from_secrets_or_env("DEBUG", "false"), default=False)
LOG_LEVEL    = from_secrets_or_env("LOG_LEVEL", "DEBUG" if DEBUG else "INFO")

DATABASE_URL = from_secrets_or_env("DATABASE_URL", "sqlite:///location_hierarchy.db")


# --- Hierarchy levels ------------------------------------------------------
# 1 = Continent, 2 = Country, 3 = State, 4 = City, 5 = Street, 6 = Street Number

LOCATION_LEVEL_MIN = as_int(from_secrets_or_env("LOCATION_LEVEL_MIN"), 1)
LOCATION_LEVEL_MAX = as_int(from_secrets_or_env("LOCATION_LEVEL_MAX"), 6)

LOCATION_SEPARATOR = from_secrets_or_env("LOCATION_SEPARATOR", " > ")

# Street and house-number slugs are scoped to their city so equal names elsewhere stay separate
QUALIFY_STREET_SLUGS = as_bool(from_secrets_or_env("QUALIFY_STREET_SLUGS", "true"), default=True)


# --- Address normalization -------------------------------------------------

# Countries whose administrative regions collapse for city-states (e.g. Berlin)
COLLAPSED_REGION_COUNTRIES = as_list(
    from_secrets_or_env("COLLAPSED_REGION_COUNTRIES"), ("de", "at", "ch", "lu")
)

COUNTRY_CONTINENTS_FILE = resolve_path(
    from_secrets_or_env("COUNTRY_CONTINENTS_FILE", "config/country_continents.json")
)
UNKNOWN_CONTINENT = from_secrets_or_env("UNKNOWN_CONTINENT", "Unknown")

# Fallback values for levels the geocoder leaves empty
DEFAULT_LOCATION = {
    "continent":     from_secrets_or_env("DEFAULT_CONTINENT", ""),
    "country":       from_secrets_or_env("DEFAULT_COUNTRY", ""),
    "state":         from_secrets_or_env("DEFAULT_STATE", ""),
    "city":          from_secrets_or_env("DEFAULT_CITY", ""),
    "street":        from_secrets_or_env("DEFAULT_STREET", ""),
    "street_number": from_secrets_or_env("DEFAULT_STREET_NUMBER", ""),
}


# --- Geocoding (OpenStreetMap Nominatim) ------------------------------------

NOMINATIM_URL     = from_secrets_or_env("NOMINATIM_URL", "https://nominatim.openstreetmap.org/search")
USER_AGENT        = from_secrets_or_env("USER_AGENT", "VenueLocationHierarchyBot/1.0 (example@example.com)")
HEADERS           = {"User-Agent": USER_AGENT}
GEOCODER_EMAIL    = from_secrets_or_env("GEOCODER_EMAIL", "")
SITE_LANGUAGE     = from_secrets_or_env("SITE_LANGUAGE", "en")
GEOCODE_TIMEOUT   = as_int(from_secrets_or_env("GEOCODE_TIMEOUT"), 3)
GEOCODE_CACHE_TTL = as_int(from_secrets_or_env("GEOCODE_CACHE_TTL"), 3600)


# --- Archive URLs ----------------------------------------------------------

EVENTS_URL_BASE = from_secrets_or_env("EVENTS_URL_BASE", "")
EVENTS_SLUG     = from_secrets_or_env("EVENTS_SLUG", "events")


def configure_logging(level: Optional[str] = None) -> None:
    """Apply LOG_LEVEL to the root logger."""
    logging.basicConfig(
        level=(level or LOG_LEVEL).upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
