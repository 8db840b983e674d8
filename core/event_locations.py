"""
event_locations.py — Event Venue → Location Terms
--------------------------------------------------

Entry points the calendar host calls around an event:

- `maybe_geocode_event_venue()` on event save: skips events without a venue
  address and events that already carry location terms (unless forced),
  otherwise geocodes and builds the hierarchy
- `geocode_and_create_hierarchy()`: geocode → normalize → fill configured
  default locations → synchronize terms → replace the event's association
- `event_location_display()` at render time: loads the event's terms and
  renders them with the shared display contract

Flow example:
    "Marienplatz 1, Munich, Germany"
    → Nominatim address details
    → LocationRecord(Europe, Germany, de, Bavaria, Munich, Marienplatz, 1)
    → terms Europe > Germany > Bavaria > Munich > Marienplatz > 1
    → event associated with all six term ids

Dependencies:
- SQLAlchemy session (transaction committed here)
- tools.geo_utils for geocoding

"""

import logging
from typing import Callable, Mapping, Optional

from sqlalchemy.orm import Session

from config.settings import DEFAULT_LOCATION
from core.address_normalizer import AddressNormalizer, get_default_normalizer
from core.exception import NormalizationFailure
from core.hierarchy_sync import TermArgsHook, configured_level_range, default_term_args_hooks, synchronize
from core.location_display import render_location_hierarchy
from core.location_types import LEVEL_FIELDS, LevelRange, LocationRecord
from db.term_store import SqlTermStore
from tools.geo_utils import geocode_address
from tools.slug_utils import sanitize_text_field

logger = logging.getLogger(__name__)


def apply_location_defaults(record: LocationRecord, defaults: Mapping[str, str] = DEFAULT_LOCATION) -> LocationRecord:
    """Fills levels the geocoder left empty from the configured default location."""
    updates = {}
    for field in LEVEL_FIELDS.values():
        default = sanitize_text_field(defaults.get(field))
        if default and not getattr(record, field):
            updates[field] = default
    return record.model_copy(update=updates) if updates else record


def geocode_and_create_hierarchy(
    session: Session,
    event_id: int,
    address: str,
    level_range: Optional[LevelRange] = None,
    hook: Optional[TermArgsHook] = None,
    geocoder: Callable[[str], Optional[dict]] = geocode_address,
    normalizer: Optional[AddressNormalizer] = None,
) -> list[int]:
    """
    Geocodes an address and attaches the resulting term chain to the event.

    Returns:
        list[int]: Term ids now associated with the event ([] on failure)
    """
    result = geocoder(address)
    if not result:
        logger.error("Failed to geocode address for event %s", event_id)
        return []

    try:
        record = (normalizer or get_default_normalizer()).normalize(result)
    except NormalizationFailure as e:
        logger.error("Failed to normalize address for event %s - %s", event_id, e)
        return []

    record = apply_location_defaults(record)
    store = SqlTermStore(session)
    node_ids = synchronize(
        record,
        level_range or configured_level_range(),
        store,
        hook or default_term_args_hooks(),
    )

    store.set_event_terms(event_id, node_ids)
    session.commit()
    logger.info("Event %s tagged with location terms %s", event_id, node_ids)
    return node_ids


def maybe_geocode_event_venue(
    session: Session,
    event_id: int,
    venue_info: Optional[Mapping],
    force: bool = False,
    **kwargs,
) -> list[int]:
    """
    Save trigger: builds the location hierarchy for an event's venue when the
    event has none yet. Terms removed by hand are rebuilt on the next save.

    Args:
        session (Session): Database session
        event_id (int): Host event id
        venue_info (Mapping | None): Venue data with a `full_address` entry
        force (bool): Rebuild even if the event already has terms
        **kwargs: Passed to geocode_and_create_hierarchy()

    Returns:
        list[int]: Term ids associated with the event
    """
    full_address = sanitize_text_field((venue_info or {}).get("full_address"))
    if not full_address:
        return []

    if not force:
        existing = SqlTermStore(session).get_event_terms(event_id)
        if existing:
            return [node.id for node in existing]

    return geocode_and_create_hierarchy(session, event_id, full_address, **kwargs)


def event_location_display(
    session: Session,
    event_id: int,
    venue_info: Optional[Mapping] = None,
    level_range: Optional[LevelRange] = None,
    **display_options,
) -> str:
    """Renders an event's location hierarchy (see render_location_hierarchy)."""
    venue_info = venue_info or {}
    nodes = SqlTermStore(session).get_event_terms(event_id)
    return render_location_hierarchy(
        nodes,
        level_range or configured_level_range(),
        venue_name=sanitize_text_field(venue_info.get("name")),
        venue_link=venue_info.get("permalink") or "",
        **display_options,
    )
