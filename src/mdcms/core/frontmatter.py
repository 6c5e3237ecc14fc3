"""Frontmatter extraction: split a document into a metadata mapping and body text"""

from pathlib import Path

from mdcms.core.errors import FrontmatterMissing
from mdcms.core.models import Metadata, MetadataValue, ParsedContent


DELIMITER = "---"
SEPARATOR = ": "
QUOTES = ("'", '"')


def _is_delimiter(line: str) -> bool:
    return line.rstrip() == DELIMITER


def _unquote(value: str) -> str:
    """Strip one layer of matching single or double quotes."""
    if len(value) >= 2 and value[0] == value[-1] and value[0] in QUOTES:
        return value[1:-1]
    return value


def _parse_value(raw: str) -> MetadataValue:
    """Return a list for `[a, b]` values, else the unquoted scalar."""
    value = _unquote(raw.strip())
    if value.startswith("[") and value.endswith("]"):
        items = (_unquote(item.strip()) for item in value[1:-1].split(","))
        return [item for item in items if item.strip()]
    return value


def _split_block(raw: str) -> tuple[list[str], str]:
    """Return (interior_lines, body) for a document opening with a delimited block."""
    lines = raw.lstrip("\ufeff").splitlines(keepends=True)
    if not lines or not _is_delimiter(lines[0]):
        raise FrontmatterMissing("Document does not start with '---'")

    for i in range(1, len(lines)):
        if _is_delimiter(lines[i]):
            return lines[1:i], "".join(lines[i + 1:])
    raise FrontmatterMissing("Frontmatter block is not closed with '---'")


def parse_metadata(lines: list[str]) -> Metadata:
    """Parse `key: value` lines; only the first ': ' separates key from value."""
    metadata: Metadata = {}
    for line in lines:
        line = line.rstrip("\r\n")
        if not line.strip():
            continue
        key, sep, raw_value = line.partition(SEPARATOR)
        if not sep:
            # bare `key` or `key:` is a flag with an empty value
            key, raw_value = line.strip().removesuffix(":"), ""
        key = key.strip()
        if key:
            metadata[key] = _parse_value(raw_value)
    return metadata


def parse(raw: str) -> ParsedContent:
    """Split raw document text into metadata and a stripped body.

    Raises FrontmatterMissing when the text does not open with a `---`
    line followed later by a closing `---` line.
    """
    lines, body = _split_block(raw)
    return ParsedContent(metadata=parse_metadata(lines), body=body.strip())


def parse_file(path: Path) -> ParsedContent:
    """Read a UTF-8 file and parse it; FrontmatterMissing carries the path."""
    raw = path.read_text(encoding="utf-8")
    try:
        return parse(raw)
    except FrontmatterMissing as e:
        raise FrontmatterMissing(e.message, source=str(path)) from e


def _format_scalar(value: str) -> str:
    """Quote values whose edges would otherwise be trimmed or unquoted on parse."""
    if not value or value != value.strip() or _unquote(value) != value:
        return f'"{value}"'
    return value


def serialize(metadata: Metadata, body: str = "") -> str:
    """Render metadata as a frontmatter block that parse() reads back unchanged."""
    lines = [DELIMITER]
    for key, value in metadata.items():
        if isinstance(value, list):
            rendered = "[" + ", ".join(_format_scalar(v) for v in value) + "]"
        else:
            rendered = _format_scalar(value)
        lines.append(f"{key}{SEPARATOR}{rendered}")
    lines.append(DELIMITER)
    text = "\n".join(lines) + "\n"
    return f"{text}\n{body}" if body else text
