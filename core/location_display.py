"""
location_display.py — Location Hierarchy Rendering
---------------------------------------------------

Turns the terms attached to an event into the markup shown on event pages
and in the editor preview. Both call `render_location_hierarchy()`, so the
two outputs are identical for the same terms and settings.

Display contract:
- Paths of several leaf terms are joined with ", "
- Terms within a path are joined with the configured separator (" > ")
- The venue name, when requested, is appended with the same separator; if
  no path survives level filtering the venue is shown alone; with neither
  the output is empty
- Terms may be linked to their hierarchical archive (/events/in/europe/de/)

Also provides the canonical link for archives whose term has exactly one
child term, so search engines index the most specific archive.

Dependencies:
- core.path_resolver for path reconstruction
- db.term_store for child lookups

"""

import html
from typing import Callable, Optional

from config.settings import EVENTS_SLUG, EVENTS_URL_BASE, LOCATION_SEPARATOR
from core.location_types import LevelRange, Node
from core.path_resolver import MAX_DEPTH, resolve_paths
from db.term_store import TermStore
from tools.slug_utils import strip_markup

PATH_SEPARATOR = ", "
WRAPPER_CLASS = "location-hierarchy"


# --- Archive URLs ---------------------------------------------------------

def term_slug_path(node: Node, lookup: Callable[[int], Optional[Node]]) -> list[str]:
    """Slugs from the root term down to `node`, following parents via `lookup`."""
    slugs: list[str] = []
    visited: set[int] = set()
    current = node
    while current is not None and current.id not in visited and len(slugs) < MAX_DEPTH:
        visited.add(current.id)
        slugs.insert(0, current.slug)
        current = lookup(current.parent_id) if current.parent_id else None
    return slugs


def term_archive_url(slugs: list[str], base_url: str = EVENTS_URL_BASE, events_slug: str = EVENTS_SLUG) -> str:
    prefix = f"{events_slug.strip('/')}/in" if events_slug else "in"
    return f"{base_url.rstrip('/')}/{prefix}/{'/'.join(slugs)}/"


def canonical_child_link(store: TermStore, node: Node, base_url: str = EVENTS_URL_BASE) -> Optional[str]:
    """
    Archive URL of the only child of `node`, or None when it has zero or
    several children.
    """
    children = store.children(node.id, limit=2)
    if len(children) != 1:
        return None
    return term_archive_url(term_slug_path(children[0], store.get_by_id), base_url)


# --- Node formatters ------------------------------------------------------

def plain_formatter(node: Node) -> str:
    return html.escape(node.name)


def link_formatter(nodes: list[Node], base_url: str = EVENTS_URL_BASE) -> Callable[[Node], str]:
    """Formatter wrapping each term in a link to its archive page."""
    nodes_by_id = {node.id: node for node in nodes}

    def format_node(node: Node) -> str:
        url = term_archive_url(term_slug_path(node, nodes_by_id.get), base_url)
        return f'<a href="{html.escape(url)}" class="location-link">{html.escape(node.name)}</a>'

    return format_node


def format_venue(venue_name: str, venue_link: str = "", enable_links: bool = False) -> str:
    if enable_links and venue_link:
        return (
            f'<a href="{html.escape(venue_link)}" class="location-link venue-link">'
            f"{html.escape(venue_name)}</a>"
        )
    return html.escape(venue_name)


# --- Rendering ------------------------------------------------------------

def clamp_display_window(
    level_range: LevelRange,
    start_level: Optional[int] = None,
    end_level: Optional[int] = None,
) -> tuple[int, int]:
    """Keeps the requested display window inside the active level range."""
    start = level_range.min_level if start_level is None else int(start_level)
    end = level_range.max_level if end_level is None else int(end_level)
    start = max(level_range.min_level, start)
    end = min(level_range.max_level, max(start, end))
    return start, end


def join_location_text(hierarchy_paths: list[str], trailing_label: str = "", separator: str = LOCATION_SEPARATOR) -> str:
    """
    Joins leaf paths and appends the trailing label (e.g. the venue) when
    there is a hierarchy to append it to; otherwise the label stands alone.
    """
    if not hierarchy_paths:
        return trailing_label
    text = PATH_SEPARATOR.join(hierarchy_paths)
    if trailing_label:
        text += separator + trailing_label
    return text


def render_location_hierarchy(
    nodes: list[Node],
    level_range: LevelRange,
    start_level: Optional[int] = None,
    end_level: Optional[int] = None,
    separator: str = LOCATION_SEPARATOR,
    enable_links: bool = False,
    show_venue: bool = False,
    venue_name: str = "",
    venue_link: str = "",
    base_url: str = EVENTS_URL_BASE,
) -> str:
    """
    Args:
        nodes (list[Node]): Terms attached to the event
        level_range (LevelRange): Active level range the terms were created with
        start_level, end_level (int | None): Display window, clamped to the range
        separator (str): Separator between terms; markup is stripped, spacing kept
        enable_links (bool): Link terms and venue to their pages
        show_venue (bool): Append the venue name
        venue_name, venue_link (str): Venue label and permalink
        base_url (str): Site URL prefix for archive links

    Returns:
        str: `<p class="location-hierarchy">…</p>`, or "" when nothing to show
    """
    start, end = clamp_display_window(level_range, start_level, end_level)
    separator = strip_markup(separator)
    venue_text = format_venue(venue_name, venue_link, enable_links) if show_venue and venue_name else ""

    format_node = link_formatter(nodes, base_url) if enable_links else plain_formatter
    hierarchy_paths = resolve_paths(nodes, start, end, level_range.min_level, format_node, separator)

    text = join_location_text(hierarchy_paths, venue_text, separator)
    if not text:
        return ""
    return f'<p class="{WRAPPER_CLASS}">{text}</p>'
