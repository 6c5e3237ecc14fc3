"""Slug generation for heading anchors and page identifiers"""

from typing import Container


# '-' is not in the set: existing hyphens survive.
PUNCTUATION = frozenset(".,/#!$%^&*;:{}=_`~()?'\"<>+")


def hyphenate(text: str) -> str:
    """Lower-case text, delete PUNCTUATION, and join whitespace-separated runs with single hyphens."""
    kept = "".join(ch for ch in text.lower() if ch not in PUNCTUATION)
    parts = [p for word in kept.split() for p in word.split("-") if p]
    return "-".join(parts)


def slugify(text: str, fallback: str = "page") -> str:
    """Convert text to a lowercase, hyphen-separated URL-safe slug."""
    return hyphenate(text) or fallback


def unique_slug(base: str, taken: Container[str]) -> str:
    """Return base, or base-2, base-3, ... for the first candidate not in taken."""
    if base not in taken:
        return base
    n = 2
    while f"{base}-{n}" in taken:
        n += 1
    return f"{base}-{n}"
