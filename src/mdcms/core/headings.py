"""Heading sanitizing, anchor-id generation and ATX heading extraction"""

import re

from mdcms.core.models import Heading
from mdcms.core.utils.slug import hyphenate


MAX_LEVEL = 6
EMPTY_ID = "section"
FENCE_CHARS = ("`", "~")

_TAG_RE = re.compile(r"<[^>]*>")


def sanitize(text: str) -> str:
    """Drop emphasis/code markers and HTML tags, keeping the text they wrap."""
    text = _TAG_RE.sub("", text)
    return text.replace("*", "").replace("`", "").strip()


def generate_id(text: str) -> str:
    """Derive a lowercase, hyphenated anchor id from heading text."""
    return hyphenate(sanitize(text))


def _heading_level(line: str) -> int | None:
    """Return 1-6 for an ATX heading line (hashes then a space or tab), else None."""
    count = len(line) - len(line.lstrip("#"))
    if 1 <= count <= MAX_LEVEL and line[count:count + 1] in (" ", "\t"):
        return count
    return None


def _heading_text(line: str, level: int) -> str:
    """Heading content without the opening hashes or an optional closing sequence."""
    text = line[level:].strip()
    stripped = text.rstrip("#")
    if stripped != text and (not stripped or stripped[-1] in (" ", "\t")):
        text = stripped.strip()
    return text


def _fence(line: str) -> str | None:
    """Return the opening fence marker (e.g. '```') when line starts a fenced block."""
    stripped = line.lstrip(" ")
    if len(line) - len(stripped) > 3:
        return None
    for ch in FENCE_CHARS:
        run = len(stripped) - len(stripped.lstrip(ch))
        if run >= 3:
            return ch * run
    return None


def iter_heading_lines(body: str):
    """Yield (level, raw_text) for each ATX heading outside fenced code blocks."""
    fence: str | None = None
    for line in body.splitlines():
        marker = _fence(line)
        if fence is not None:
            if marker and marker[0] == fence[0] and len(marker) >= len(fence) \
                    and not line.strip().lstrip(fence[0]):
                fence = None
            continue
        if marker:
            fence = marker
            continue

        level = _heading_level(line)
        if level is None:
            continue
        text = _heading_text(line, level)
        if text:
            yield level, text


def unique_id(base: str, seen: dict[str, int]) -> str:
    """Return base on first use, then base-2, base-3, ... skipping ids already taken."""
    if base not in seen:
        seen[base] = 1
        return base
    n = seen[base] + 1
    while f"{base}-{n}" in seen:
        n += 1
    seen[base] = n
    candidate = f"{base}-{n}"
    seen[candidate] = 1
    return candidate


def extract_headings(body: str, max_depth: int = MAX_LEVEL, dedupe: bool = True) -> list[Heading]:
    """Return headings up to max_depth in source order.

    Deeper headings are dropped entirely. With dedupe, repeated ids get a
    numeric suffix so every id is unique within the document.
    """
    seen: dict[str, int] = {}
    headings: list[Heading] = []
    for level, raw in iter_heading_lines(body):
        if level > max_depth:
            continue
        hid = generate_id(raw) or EMPTY_ID
        if dedupe:
            hid = unique_id(hid, seen)
        headings.append(Heading(id=hid, text=sanitize(raw), level=level))
    return headings
