"""
slug_utils.py — Term Name Sanitizing & Slug Transliteration
------------------------------------------------------------

Text helpers shared by address normalization and hierarchy synchronization:

- `sanitize_text_field()` strips markup, control characters and repeated
  whitespace from geocoder values before they become term names
- `remove_accents()` transliterates accented and ligature characters to ASCII
  (ß → ss, é → e, ø → o) independently of the site locale
- `sanitize_title()` turns a name into a lowercase, hyphenated, URL-safe slug
- `slugify()` combines both for callers that start from a display name

Dependencies:
- BeautifulSoup for markup stripping

"""

import re
import unicodedata
from bs4 import BeautifulSoup

# Characters NFKD does not decompose into a base letter
SPECIAL_TRANSLITERATIONS = {
    "ß": "ss", "ẞ": "SS",
    "æ": "ae", "Æ": "AE",
    "œ": "oe", "Œ": "OE",
    "ø": "o", "Ø": "O",
    "đ": "d", "Đ": "D",
    "ð": "d", "Ð": "D",
    "þ": "th", "Þ": "TH",
    "ł": "l", "Ł": "L",
    "ı": "i", "ĸ": "k",
}

_CONTROL_CHARS = re.compile(r"[\x00-\x1f\x7f]")
_WHITESPACE = re.compile(r"\s+")
_PERCENT_OCTETS = re.compile(r"%[a-fA-F0-9]{2}")
_SLUG_UNSAFE = re.compile(r"[^a-z0-9_\-]+")
_DASHES = re.compile(r"-{2,}")
_WORD_UNSAFE = re.compile(r"[^\w\-]+")


def sanitize_text_field(value) -> str:
    """
    Cleans a single geocoder value for storage as a term name.

    Args:
        value: Raw value (None and non-strings are tolerated)

    Returns:
        str: Markup-free, single-line, trimmed text ("" when nothing is left)
    """
    if value is None:
        return ""
    text = str(value)
    if "<" in text:
        text = BeautifulSoup(text, "html.parser").get_text()
    text = _CONTROL_CHARS.sub(" ", text)
    text = _WHITESPACE.sub(" ", text)
    return text.strip()


def strip_markup(value) -> str:
    """Removes tags but keeps whitespace as-is (used for display separators)."""
    if not value:
        return ""
    text = str(value)
    if "<" in text:
        text = BeautifulSoup(text, "html.parser").get_text()
    return text


def remove_accents(text: str) -> str:
    """Transliterates accented characters to their closest ASCII form."""
    if not text:
        return ""
    text = "".join(SPECIAL_TRANSLITERATIONS.get(ch, ch) for ch in text)
    decomposed = unicodedata.normalize("NFKD", text)
    return "".join(ch for ch in decomposed if not unicodedata.combining(ch))


def sanitize_title(text: str) -> str:
    """
    Builds a URL-safe slug: lowercase ASCII letters, digits, underscores and
    single hyphens, with no leading or trailing hyphen.
    """
    if not text:
        return ""
    slug = sanitize_text_field(text).lower()
    slug = _PERCENT_OCTETS.sub("", slug)
    slug = slug.replace(".", "-").replace("/", "-")
    slug = _SLUG_UNSAFE.sub("-", slug)
    slug = _DASHES.sub("-", slug)
    return slug.strip("-")


def slugify(name: str) -> str:
    slug = sanitize_title(remove_accents(name))
    if slug or not name:
        return slug
    # Scripts without an ASCII transliteration keep their own letters
    slug = _WORD_UNSAFE.sub("-", sanitize_text_field(name).lower())
    return _DASHES.sub("-", slug).strip("-")
