"""Corpus discovery, batch parsing, listings and category/tag indexes"""

import asyncio
import math
import re
import threading
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterable, Optional

from mdcms.core.errors import FrontmatterMissing, ScanCancelled
from mdcms.core.frontmatter import parse
from mdcms.core.models import CorpusEntry
from mdcms.core.utils.log import get_logger


MD_EXTENSIONS = {'.md', '.mdx'}
WORDS_PER_MINUTE = 200
ALL_CATEGORY = 'all'
DRAFT_STATUSES = {'draft', 'archived'}

_DATE_RE = re.compile(r'(\d{4})-(\d{1,2})-(\d{1,2})')

logger = get_logger(__name__)


def discover_files(path: Path) -> list[Path]:
    """Return sorted .md/.mdx files under path, or [path] if a single file."""
    if path.is_file():
        return [path] if path.suffix in MD_EXTENSIONS else []
    return sorted(p for p in path.rglob('*') if p.is_file() and p.suffix in MD_EXTENSIONS)


def slug_for(path: Path, root: Path) -> str:
    """Relative path from root without its extension, joined with '/'."""
    return path.relative_to(root).with_suffix('').as_posix()


def read_time(body: str, words_per_minute: int = WORDS_PER_MINUTE) -> int:
    """Estimated reading time in whole minutes (at least 1)."""
    return max(1, math.ceil(len(body.split()) / words_per_minute))


def _placeholder(slug: str, path: Path, error: str) -> CorpusEntry:
    return CorpusEntry(
        slug=slug,
        path=str(path),
        metadata={'title': 'Error', 'status': 'error', 'summary': error},
        body='',
        read_time=0,
        error=error,
    )


def load_entry(path: Path, root: Path, words_per_minute: int = WORDS_PER_MINUTE) -> CorpusEntry:
    """Parse one file; a missing frontmatter block yields a placeholder entry instead of raising.

    File read errors (OSError, UnicodeDecodeError) propagate to the caller.
    """
    slug = slug_for(path, root)
    raw = path.read_text(encoding='utf-8')
    try:
        parsed = parse(raw)
    except FrontmatterMissing as e:
        logger.warning("document_unparsable", path=str(path), slug=slug, error=str(e))
        return _placeholder(slug, path, str(e))

    return CorpusEntry(
        slug=slug,
        path=str(path),
        metadata=parsed.metadata,
        body=parsed.body,
        read_time=read_time(parsed.body, words_per_minute),
    )


def scan_corpus(
    root: Path,
    cancel: Optional[threading.Event] = None,
    words_per_minute: int = WORDS_PER_MINUTE,
    ) -> list[CorpusEntry]:
    """Parse every content file under root in a single pass.

    cancel is checked before each file; setting it raises ScanCancelled.
    """
    files = discover_files(root)
    base = root if root.is_dir() else root.parent
    entries = []
    for p in files:
        if cancel is not None and cancel.is_set():
            logger.info("corpus_scan_cancelled", root=str(root), scanned=len(entries), total=len(files))
            raise ScanCancelled(f"Scan of {root} cancelled after {len(entries)} of {len(files)} files")
        logger.debug("corpus_file", path=str(p))
        entries.append(load_entry(p, base, words_per_minute))
    logger.info("corpus_scanned", root=str(root), total=len(entries),
                errors=sum(1 for e in entries if e.error))
    return entries


async def scan_corpus_async(
    root: Path,
    cancel: Optional[threading.Event] = None,
    words_per_minute: int = WORDS_PER_MINUTE,
    ) -> list[CorpusEntry]:
    """Run scan_corpus on a worker thread so the event loop stays responsive."""
    return await asyncio.to_thread(scan_corpus, root, cancel, words_per_minute)


def _is_listed(entry: CorpusEntry, include_drafts: bool) -> bool:
    if entry.error or include_drafts:
        return True
    status = entry.metadata.get('status')
    return not isinstance(status, str) or status.lower() not in DRAFT_STATUSES


def parse_date(value: str) -> Optional[datetime]:
    """Parse an ISO date or datetime; unpadded dates such as 2024-9-1 are accepted.

    Aware values are converted to naive UTC so all results compare. Returns
    None for text that is not a date.
    """
    text = value.strip()
    try:
        parsed = datetime.fromisoformat(text.replace('Z', '+00:00'))
    except ValueError:
        match = _DATE_RE.match(text)
        if match is None:
            return None
        try:
            parsed = datetime(*(int(part) for part in match.groups()))
        except ValueError:
            return None
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    return parsed


def _published(entry: CorpusEntry) -> Optional[datetime]:
    value = entry.metadata.get('publishedAt')
    return parse_date(value) if isinstance(value, str) and value else None


def build_listing(entries: Iterable[CorpusEntry], include_drafts: bool = False) -> list[CorpusEntry]:
    """Entries newest-first by publishedAt; undated or unparsable dates (and error placeholders) sort last.

    Error placeholders stay in the listing.
    """
    dated: list[tuple[datetime, CorpusEntry]] = []
    undated: list[CorpusEntry] = []
    for e in entries:
        if not _is_listed(e, include_drafts):
            continue
        published = _published(e)
        if published is None:
            undated.append(e)
        else:
            dated.append((published, e))
    dated.sort(key=lambda pair: pair[0], reverse=True)
    return [e for _, e in dated] + sorted(undated, key=lambda e: e.slug)


def _categories(entry: CorpusEntry) -> list[str]:
    view = entry.view
    names = ([view.category] if view.category else []) + view.categories
    return list(dict.fromkeys(names))


def category_index(entries: Iterable[CorpusEntry]) -> dict[str, list[str]]:
    """Map category name -> slugs (in entry order), with every non-error slug under 'all'."""
    index: dict[str, list[str]] = {ALL_CATEGORY: []}
    for entry in entries:
        if entry.error:
            continue
        index[ALL_CATEGORY].append(entry.slug)
        for name in _categories(entry):
            index.setdefault(name, []).append(entry.slug)
    return index


def tag_index(entries: Iterable[CorpusEntry]) -> dict[str, list[str]]:
    """Map tag -> slugs, tags sorted alphabetically."""
    index: dict[str, list[str]] = {}
    for entry in entries:
        if entry.error:
            continue
        for tag in dict.fromkeys(entry.view.tags):
            index.setdefault(tag, []).append(entry.slug)
    return dict(sorted(index.items()))
