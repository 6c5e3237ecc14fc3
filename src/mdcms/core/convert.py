"""Conversion between markdown documents and editor block trees"""

from datetime import datetime
from typing import Iterable, Optional

from markdown_it import MarkdownIt

from mdcms.core.corpus import parse_date
from mdcms.core.frontmatter import parse, serialize
from mdcms.core.headings import EMPTY_ID, MAX_LEVEL, generate_id, sanitize, unique_id
from mdcms.core.models import Heading, Metadata
from mdcms.core.utils.slug import slugify
from mdcms.crud.factory import DEFAULT_HIGHLIGHT_COLOR
from mdcms.crud.models import (
    Block, BlockTypeEnum, HighlightData, LinkData, Page,
    ProjectCardData, Segment, SegmentTypeEnum,
)


BLOCK_TYPE_MAP: dict[str, BlockTypeEnum] = {
    'bullet_list_open':  BlockTypeEnum.list,
    'ordered_list_open': BlockTypeEnum.list,
    'fence':             BlockTypeEnum.code,
    'code_block':        BlockTypeEnum.code,
    'blockquote_open':   BlockTypeEnum.quote,
}
SKIPPED_TOKENS = {'hr'}
LINE_BREAKS = {'softbreak', 'hardbreak'}


def _make_parser(preset: str) -> MarkdownIt:
    """Build a MarkdownIt instance for the given preset name."""
    return MarkdownIt(preset, options_update={"linkify": False})


def _source_slice(token, source_lines: list[str]) -> str:
    """Extract raw source for a block via token.map; fallback to token.content."""
    if token.map:
        start, end = token.map
        return ''.join(source_lines[start:end]).rstrip()
    return token.content.rstrip()


class _SegmentBuilder:
    """Folds markdown-it inline tokens into text, highlighted and link segments."""

    def __init__(self, highlight_color: str):
        self.highlight_color = highlight_color
        self.segments: list[Segment] = []
        self.buffer: list[str] = []
        self.emphasis = 0
        self.href: Optional[str] = None

    def flush(self) -> None:
        text = ''.join(self.buffer)
        self.buffer = []
        if self.href is not None:
            self.segments.append(Segment(type=SegmentTypeEnum.link, content=text, data=LinkData(url=self.href)))
        elif not text:
            return
        elif self.emphasis:
            self.segments.append(Segment(
                type=SegmentTypeEnum.highlighted,
                content=text,
                data=HighlightData(hsl_color=self.highlight_color),
            ))
        else:
            self.segments.append(Segment(type=SegmentTypeEnum.text, content=text))

    def feed(self, children: Iterable) -> list[Segment]:
        for child in children:
            if child.type == 'link_open':
                self.flush()
                self.href = child.attrGet('href') or ''
            elif child.type == 'link_close':
                self.flush()
                self.href = None
            elif child.type in ('strong_open', 'em_open'):
                if self.href is None:
                    self.flush()
                self.emphasis += 1
            elif child.type in ('strong_close', 'em_close'):
                if self.href is None:
                    self.flush()
                self.emphasis -= 1
            elif child.type in LINE_BREAKS:
                self.buffer.append('\n')
            elif child.nesting == 0:
                self.buffer.append(child.content)
        self.flush()
        return self.segments


def inline_segments(children: Iterable, highlight_color: str = DEFAULT_HIGHLIGHT_COLOR) -> list[Segment]:
    return _SegmentBuilder(highlight_color).feed(children)


def markdown_to_blocks(
    body: str,
    parser_config: str = 'gfm-like',
    highlight_color: str = DEFAULT_HIGHLIGHT_COLOR,
    ) -> list[Block]:
    """Convert a markdown body into ordered blocks (orders 0..n-1 in source order).

    Headings and paragraphs keep inline structure as segments; lists, quotes,
    code and other blocks become one text segment holding their source.
    """
    tokens = _make_parser(parser_config).parse(body)
    source_lines = body.splitlines(keepends=True)
    blocks: list[Block] = []

    for i, tok in enumerate(tokens):
        if tok.level != 0 or tok.nesting == -1 or tok.type in SKIPPED_TOKENS:
            continue

        if tok.type in ('heading_open', 'paragraph_open'):
            children = tokens[i + 1].children or []
            is_heading = tok.type == 'heading_open'
            blocks.append(Block(
                type=BlockTypeEnum.heading if is_heading else BlockTypeEnum.paragraph,
                order=len(blocks),
                level=int(tok.tag[1:]) if is_heading else None,
                content=inline_segments(children, highlight_color),
            ))
            continue

        blocks.append(Block(
            type=BLOCK_TYPE_MAP.get(tok.type, BlockTypeEnum.paragraph),
            order=len(blocks),
            content=[Segment(type=SegmentTypeEnum.text, content=_source_slice(tok, source_lines))],
        ))

    return blocks


def _render_segment(seg: Segment) -> str:
    if seg.type == SegmentTypeEnum.highlighted:
        return f"**{seg.content}**" if seg.content else ""
    if seg.type == SegmentTypeEnum.link:
        url = seg.data.url if isinstance(seg.data, LinkData) else ""
        return f"[{seg.content}]({url})"
    if seg.type == SegmentTypeEnum.project_card:
        card = seg.data if isinstance(seg.data, ProjectCardData) else ProjectCardData()
        return f"[{seg.content or card.title}]({card.url})"
    return seg.content


def blocks_to_markdown(blocks: Iterable[Block]) -> str:
    """Render blocks in ascending order as a markdown body."""
    parts = []
    for block in sorted(blocks, key=lambda b: b.order):
        text = ''.join(_render_segment(s) for s in block.content)
        if block.type == BlockTypeEnum.heading:
            text = f"{'#' * (block.level or 1)} {text}"
        parts.append(text)
    return "\n\n".join(parts)


def headings_from_blocks(blocks: Iterable[Block], max_depth: int = MAX_LEVEL) -> list[Heading]:
    """Headings of a block tree, with ids generated and de-duplicated as for markdown bodies."""
    seen: dict[str, int] = {}
    headings = []
    for block in blocks:
        if block.type != BlockTypeEnum.heading:
            continue
        level = block.level or 1
        if level > max_depth:
            continue
        hid = unique_id(generate_id(block.text) or EMPTY_ID, seen)
        headings.append(Heading(id=hid, text=sanitize(block.text), level=level))
    return headings


def page_to_document(page: Page) -> str:
    """Serialize a page as frontmatter plus markdown body."""
    metadata: Metadata = {
        'title': page.title,
        'slug': page.slug,
        'summary': page.description,
        'status': 'published' if page.is_published else 'draft',
        'createdAt': page.created_at.isoformat(),
        'updatedAt': page.updated_at.isoformat(),
    }
    return serialize(metadata, blocks_to_markdown(page.blocks))


def _scalar(metadata: Metadata, *keys: str) -> Optional[str]:
    for key in keys:
        value = metadata.get(key)
        if isinstance(value, list):
            value = ', '.join(value)
        if value:
            return value
    return None


def _timestamp(metadata: Metadata, *keys: str) -> Optional[datetime]:
    value = _scalar(metadata, *keys)
    return parse_date(value) if value else None


def document_to_page(raw: str, parser_config: str = 'gfm-like') -> Page:
    """Build a page from a frontmatter document. Raises FrontmatterMissing.

    Title falls back to the first heading, slug to the slugified title.
    """
    parsed = parse(raw)
    md = parsed.metadata
    blocks = markdown_to_blocks(parsed.body, parser_config)
    first_heading = next((b.text for b in blocks if b.type == BlockTypeEnum.heading), None)
    title = _scalar(md, 'title') or first_heading or 'Untitled'
    now = datetime.now()
    return Page(
        slug=slugify(_scalar(md, 'slug') or title),
        title=title,
        description=_scalar(md, 'summary', 'description', 'excerpt') or '',
        is_published=(_scalar(md, 'status') or '').lower() == 'published',
        created_at=_timestamp(md, 'createdAt', 'publishedAt') or now,
        updated_at=_timestamp(md, 'updatedAt') or now,
        blocks=blocks,
    )
