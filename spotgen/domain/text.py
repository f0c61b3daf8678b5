"""String clean-up helpers for search queries and track comparison.

Catalog full-text search is easily confused by typographic punctuation,
track numbers, durations and bracketed annotations, so the fallback search
stages simplify queries with these helpers before retrying.
"""

import re

from unidecode import unidecode

# Unicode punctuation with a plain ASCII counterpart
_PUNCTUATION_REPLACEMENTS = [
    (re.compile("[‘’´]"), "'"),
    (re.compile("[“”″]"), '"'),
    (re.compile("[−•·▪]"), "-"),
    (re.compile("[–―]"), "-"),
    (re.compile("—"), "-"),
    (re.compile("…"), "..."),
]

_NOISE_PATTERNS = [
    (re.compile(r"\].*"), "]"),
    (re.compile(r"\).*"), ")"),
    (re.compile(r"^[0-9]+\. "), ""),
    (re.compile(r"\[[^\]]*\]"), ""),
    (re.compile(r"\([^)]*\)"), ""),
    (re.compile(r"-+"), "-"),
    (re.compile(r"\.+"), "."),
]

_NON_ASCII_WORD = re.compile(r"[^\w\s-]", re.ASCII)
_WHITESPACE = re.compile(r"\s+")

# Spotify IDs are 22 base-62 characters
CATALOG_ID_PATTERN = re.compile(r"^[0-9A-Za-z]{22}$")


def replace_punctuation(value: str) -> str:
    """Replace smart quotes, typographic dashes and ellipses with ASCII."""
    for pattern, replacement in _PUNCTUATION_REPLACEMENTS:
        value = pattern.sub(replacement, value)
    return value


def strip_whitespace(value: str | None) -> str:
    """Trim the string and collapse runs of whitespace into single spaces."""
    return _WHITESPACE.sub(" ", (value or "").strip())


def normalize(value: str) -> str:
    """Lightly clean up a string: ASCII punctuation, tidy whitespace."""
    return strip_whitespace(replace_punctuation(value))


def strip_punctuation(value: str, keep: str = "") -> str:
    """Remove all punctuation characters except those listed in ``keep``."""
    pattern = f"[^{re.escape(keep)}\\s\\w]" if keep else r"[^\s\w]"
    return re.sub(pattern, "", value)


def strip_noise(value: str) -> str:
    """Remove line numbers, durations and bracketed annotations from an entry.

    >>> strip_noise("1. artist - title (5:30)")
    'artist - title'
    """
    value = normalize(value)
    for pattern, replacement in _NOISE_PATTERNS:
        value = pattern.sub(replacement, value)
    value = strip_punctuation(value, "-'.")
    return strip_whitespace(value)


def to_ascii(value: str) -> str:
    """Transliterate to pure ASCII, dropping what cannot be represented.

    >>> to_ascii("tête-à-tête – détente")
    'tete-a-tete - detente'
    """
    value = unidecode(replace_punctuation(value))
    value = _NON_ASCII_WORD.sub("", value)
    return value.strip()


def simplify_query(query: str) -> str:
    """The simplified form of a search query used by the fallback stages."""
    return to_ascii(strip_noise(query))


def comparable_title(value: str | None) -> str:
    """Reduce a title to a form where trivially different spellings compare equal."""
    value = to_ascii(value or "")
    value = strip_punctuation(value)
    return strip_whitespace(value).lower()


def is_catalog_id(value: str) -> bool:
    """Whether a raw string looks like a bare catalog identifier."""
    return bool(CATALOG_ID_PATTERN.match(value.strip()))


def structured_query(*fields: tuple[str, str | None]) -> str:
    """Build a field-filtered search query, e.g. ``track:"x" artist:"y"``.

    Empty fields are left out.
    """
    return " ".join(
        f'{name}:"{value.strip()}"' for name, value in fields if value and value.strip()
    )
