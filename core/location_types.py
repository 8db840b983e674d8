"""
location_types.py — Location Hierarchy Data Models
---------------------------------------------------

Shared pydantic models for the location hierarchy pipeline.

Models:
- `LocationRecord`: canonical six-level address decomposition
- `LevelRange`: inclusive (min_level, max_level) window of active levels
- `Node`: one persisted hierarchy term with a single parent reference
- `TermArgs`: the (name, slug, parent) triple a term-args hook may rewrite

Level numbers:
1 = Continent, 2 = Country, 3 = State, 4 = City, 5 = Street, 6 = Street Number

Dependencies:
- pydantic

"""

from typing import NamedTuple, Optional
from pydantic import BaseModel, model_validator

MIN_LEVEL = 1
MAX_LEVEL = 6

# Level number -> LocationRecord field
LEVEL_FIELDS = {
    1: "continent",
    2: "country",
    3: "state",
    4: "city",
    5: "street",
    6: "street_number",
}

COUNTRY_LEVEL = 2
STREET_LEVEL = 5
STREET_NUMBER_LEVEL = 6


class LocationRecord(BaseModel):
    continent: str = ""
    country: str = ""
    country_code: str = ""
    state: str = ""
    city: str = ""
    street: str = ""
    street_number: str = ""

    def value_for_level(self, level: int) -> str:
        field = LEVEL_FIELDS.get(level)
        return getattr(self, field) if field else ""

    def present_levels(self) -> list[int]:
        """Levels whose field is non-empty, in ascending order."""
        return [level for level in LEVEL_FIELDS if self.value_for_level(level)]


class LevelRange(BaseModel):
    """
    Inclusive window of hierarchy levels that are created and displayed.
    Level L is active iff min_level <= L <= max_level.
    """
    min_level: int = MIN_LEVEL
    max_level: int = MAX_LEVEL

    @model_validator(mode="after")
    def check_bounds(self):
        if not MIN_LEVEL <= self.min_level <= self.max_level <= MAX_LEVEL:
            raise ValueError(
                f"Level range must satisfy {MIN_LEVEL} <= min <= max <= {MAX_LEVEL}, "
                f"got ({self.min_level}, {self.max_level})"
            )
        return self

    def is_active(self, level: int) -> bool:
        return self.min_level <= level <= self.max_level

    def as_tuple(self) -> tuple[int, int]:
        return self.min_level, self.max_level


class Node(BaseModel):
    id: int
    name: str
    slug: str
    parent_id: int = 0
    level: Optional[int] = None

    @property
    def is_root(self) -> bool:
        return not self.parent_id


class TermArgs(NamedTuple):
    name: str
    slug: str
    parent: int
