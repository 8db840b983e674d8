"""
hierarchy_sync.py — LocationRecord → Location Term Chain
---------------------------------------------------------

Creates or reuses one term per active, non-empty level of a `LocationRecord`
and links them parent → child:

    Europe (parent 0) > Germany > Bavaria > Munich > Marienplatz > 1

Rules:
- Levels are processed top-down (1 = continent … 6 = street number)
- Terms are matched by slug, never by name, so transliteration is consistent
  ("Große Straße" → "grosse-strasse"); countries use their ISO code as slug
- A matched term whose parent differs is moved under the expected parent
- Inactive or empty levels are skipped without advancing the parent, so the
  next created level attaches to the nearest created ancestor (or the root)
- A level resolving to the same term as the level above is skipped, so no
  term appears twice in the chain
- Store failures are logged; the chain built so far is returned
- Running the same record twice yields the same term ids

Extensibility:
- A term-args hook `(name, slug, parent, level, record) -> (name, slug, parent)`
  runs once per processed level; `TermArgsHooks` composes several in
  registration order
- The active level window comes from a level-range policy, by default the
  LOCATION_LEVEL_MIN / LOCATION_LEVEL_MAX settings

Dependencies:
- db.term_store.TermStore for persistence
- tools.slug_utils for slug transliteration

"""

import logging
from typing import Callable, Iterable, Optional

from pydantic import ValidationError

from config.settings import LOCATION_LEVEL_MAX, LOCATION_LEVEL_MIN, QUALIFY_STREET_SLUGS
from core.exception import SlugConflictError, StoreWriteError
from core.location_types import (
    COUNTRY_LEVEL,
    MAX_LEVEL,
    MIN_LEVEL,
    STREET_LEVEL,
    STREET_NUMBER_LEVEL,
    LevelRange,
    LocationRecord,
    TermArgs,
)
from db.term_store import TermStore
from tools.slug_utils import sanitize_text_field, slugify

logger = logging.getLogger(__name__)

TermArgsHook = Callable[[str, str, int, int, LocationRecord], tuple[str, str, int]]
LevelRangePolicy = Callable[[], LevelRange]


# --- Level range policy ---------------------------------------------------

def configured_level_range() -> LevelRange:
    """Active level window from settings; an invalid window falls back to (1, 6)."""
    try:
        return LevelRange(min_level=LOCATION_LEVEL_MIN, max_level=LOCATION_LEVEL_MAX)
    except ValidationError:
        logger.warning(
            "Invalid location level range (%s, %s); using (%s, %s)",
            LOCATION_LEVEL_MIN, LOCATION_LEVEL_MAX, MIN_LEVEL, MAX_LEVEL,
        )
        return LevelRange()


# --- Term-args hooks ------------------------------------------------------

def identity_hook(name: str, slug: str, parent: int, level: int, record: LocationRecord) -> TermArgs:
    return TermArgs(name, slug, parent)


def qualify_street_slugs(name: str, slug: str, parent: int, level: int, record: LocationRecord) -> TermArgs:
    """
    Scopes street and street-number slugs to their city and street, so that
    "Hauptstraße" or house number "1" in two different cities stay two terms.
    Display names are left untouched.
    """
    if level == STREET_LEVEL:
        slug = slugify(" ".join(part for part in (record.city, record.street) if part)) or slug
    elif level == STREET_NUMBER_LEVEL:
        slug = slugify(
            " ".join(part for part in (record.city, record.street, record.street_number) if part)
        ) or slug
    return TermArgs(name, slug, parent)


class TermArgsHooks:
    """Composable hook chain; hooks run in registration order, each seeing the previous result."""

    def __init__(self, hooks: Iterable[TermArgsHook] = ()):
        self._hooks: list[TermArgsHook] = list(hooks)

    def register(self, hook: TermArgsHook) -> TermArgsHook:
        self._hooks.append(hook)
        return hook

    def __len__(self) -> int:
        return len(self._hooks)

    def __call__(self, name: str, slug: str, parent: int, level: int, record: LocationRecord) -> TermArgs:
        args = TermArgs(name, slug, parent)
        for hook in self._hooks:
            args = TermArgs(*hook(args.name, args.slug, args.parent, level, record))
        return args


def default_term_args_hooks() -> TermArgsHooks:
    hooks = TermArgsHooks()
    if QUALIFY_STREET_SLUGS:
        hooks.register(qualify_street_slugs)
    return hooks


# --- Synchronization ------------------------------------------------------

def derive_term_args(record: LocationRecord, level: int) -> tuple[str, str]:
    """
    Name and slug for one level before hooks run.

    Returns:
        tuple[str, str]: (sanitized name, transliterated slug; the country code for countries)
    """
    name = sanitize_text_field(record.value_for_level(level))
    slug = slugify(name)
    if level == COUNTRY_LEVEL and record.country_code:
        slug = record.country_code
    return name, slug


def get_or_create_term(store: TermStore, args: TermArgs, level: int) -> Optional[int]:
    """
    Resolves one term by slug, creating it or repairing its parent as needed.

    Returns:
        int | None: Term id, or None when the term could not be created
    """
    existing = store.find_by_slug(args.slug)

    if existing is None:
        try:
            return store.create(args.name, args.slug, args.parent, level)
        except SlugConflictError:
            # Another save created it between our lookup and insert
            existing = store.find_by_slug(args.slug)
            if existing is None:
                logger.error("Term slug '%s' conflicts but cannot be found", args.slug)
                return None
        except StoreWriteError as e:
            logger.error("Failed to create term '%s' at level %s - %s", args.name, level, e)
            return None

    # Same slug as the level above (e.g. state and city both "Berlin")
    if existing.id == args.parent:
        return existing.id

    if existing.parent_id != args.parent:
        try:
            store.update_parent(existing.id, args.parent)
            logger.info(
                "Moved term '%s' (%s) from parent %s to %s",
                existing.slug, existing.id, existing.parent_id, args.parent,
            )
        except StoreWriteError as e:
            logger.error("Failed to update parent of term '%s' - %s", existing.slug, e)

    return existing.id


def synchronize(
    record: LocationRecord,
    level_range: LevelRange,
    store: TermStore,
    hook: TermArgsHook = identity_hook,
) -> list[int]:
    """
    Builds the term chain for a location record.

    Args:
        record (LocationRecord): Normalized location
        level_range (LevelRange): Levels allowed to produce terms
        store (TermStore): Term persistence
        hook (TermArgsHook): Per-level override of name, slug and parent

    Returns:
        list[int]: Term ids ordered root → leaf, for levels that produced a term
    """
    node_ids: list[int] = []
    last_parent_id = 0

    for level in range(MIN_LEVEL, MAX_LEVEL + 1):
        if not level_range.is_active(level) or not record.value_for_level(level):
            continue

        name, slug = derive_term_args(record, level)
        if not name:
            continue

        args = TermArgs(*hook(name, slug, last_parent_id, level, record))
        node_id = get_or_create_term(store, args, level)
        if not node_id:
            logger.error("Stopping location hierarchy at level %s for '%s'", level, name)
            break
        if node_id == last_parent_id:
            logger.debug("Level %s repeats term %s; skipping", level, node_id)
            continue

        last_parent_id = node_id
        node_ids.append(node_id)

    return node_ids
