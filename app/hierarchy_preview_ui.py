"""
hierarchy_preview_ui.py — Location Hierarchy Preview
-----------------------------------------------------

This Streamlit page geocodes a venue address for an event, builds its
location terms and previews the rendered hierarchy exactly as event pages
show it.

Features:
- Geocode & build the term chain for an event id (optionally forcing a rebuild)
- Display window (start/end level), separator, links and venue toggles
- Table of the event's terms with parent, level and canonical archive link

Dependencies:
- Streamlit for UI rendering
- SQLAlchemy session from db.db

"""

import sys
import streamlit as st

from config.settings import EVENTS_URL_BASE, LOCATION_SEPARATOR, configure_logging
from core.event_locations import event_location_display, maybe_geocode_event_venue
from core.exception import custom_exception_hook
from core.hierarchy_sync import configured_level_range
from core.location_display import canonical_child_link
from core.location_types import LEVEL_FIELDS
from db.db import SessionLocal, init_db
from db.term_store import SqlTermStore

configure_logging()
init_db()

level_range = configured_level_range()
level_labels = {level: field.replace("_", " ").title() for level, field in LEVEL_FIELDS.items()}

# --- Sidebar Controls ---
st.sidebar.caption(f"Active levels: {level_labels[level_range.min_level]} – {level_labels[level_range.max_level]}")
allowed = list(range(level_range.min_level, level_range.max_level + 1))
if len(allowed) > 1:
    start_level, end_level = st.sidebar.select_slider(
        "Display levels",
        options=allowed,
        value=(level_range.min_level, level_range.max_level),
        format_func=lambda level: level_labels[level],
    )
else:
    start_level = end_level = level_range.min_level
separator = st.sidebar.text_input("Separator", value=LOCATION_SEPARATOR)
enable_links = st.sidebar.checkbox("Link terms to archives", value=False)
show_venue = st.sidebar.checkbox("Show venue name", value=True)

# --- Event & Venue Input ---
event_id = st.number_input("Event ID", min_value=1, step=1, value=1)
venue_name = st.text_input("Venue name", value="")
full_address = st.text_input("Venue address", value="", placeholder="Marienplatz 1, 80331 Munich, Germany")
force = st.checkbox("Rebuild terms even if the event already has them", value=False)

venue_info = {"name": venue_name, "full_address": full_address}

if st.button("Geocode & Build Hierarchy"):
    try:
        with SessionLocal() as session:
            node_ids = maybe_geocode_event_venue(session, int(event_id), venue_info, force=force)
        if node_ids:
            st.success(f"✅ Event {int(event_id)} tagged with {len(node_ids)} location terms.")
        else:
            st.warning("No location terms were created for this address.")
    except Exception:
        st.error(custom_exception_hook(*sys.exc_info()))

# --- Preview ---
st.subheader("Preview")
with SessionLocal() as session:
    preview = event_location_display(
        session,
        int(event_id),
        venue_info=venue_info,
        level_range=level_range,
        start_level=start_level,
        end_level=end_level,
        separator=separator,
        enable_links=enable_links,
        show_venue=show_venue,
    )
    store = SqlTermStore(session)
    terms = store.get_event_terms(int(event_id))
    rows = [
        {
            "term_id": node.id,
            "name": node.name,
            "slug": node.slug,
            "parent_id": node.parent_id,
            "level": level_labels.get(node.level, node.level),
            "canonical": canonical_child_link(store, node, EVENTS_URL_BASE) or "",
        }
        for node in terms
    ]

if preview:
    st.markdown(preview, unsafe_allow_html=True)
else:
    st.info("Nothing to display for this event yet.")

if rows:
    st.dataframe(rows)
