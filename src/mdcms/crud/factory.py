"""Constructors for new pages, blocks and segments with editor placeholder content"""

from datetime import datetime

from mdcms.crud.models import (
    Block, BlockTypeEnum, HighlightData, Page, Segment, SegmentTypeEnum,
)


DEFAULT_SLUG = "new-page"
DEFAULT_TITLE = "New Page"
DEFAULT_DESCRIPTION = "A new page description"
DEFAULT_HEADING_TEXT = "New Page Title"
DEFAULT_HIGHLIGHT_COLOR = "85 100% 75%"

BLOCK_PLACEHOLDERS: dict[BlockTypeEnum, str] = {
    BlockTypeEnum.heading: "New Heading",
    BlockTypeEnum.paragraph: "New paragraph content.",
}
FALLBACK_PLACEHOLDER = "New paragraph content."
SEGMENT_PLACEHOLDER = "New content"


def create_segment(type: SegmentTypeEnum | str = SegmentTypeEnum.text) -> Segment:
    """New segment with placeholder text; highlighted segments get the default color token."""
    seg_type = SegmentTypeEnum(type)
    data = None
    if seg_type == SegmentTypeEnum.highlighted:
        data = HighlightData(hsl_color=DEFAULT_HIGHLIGHT_COLOR)
    return Segment(type=seg_type, content=SEGMENT_PLACEHOLDER, data=data)


def create_block(type: BlockTypeEnum | str, order: int) -> Block:
    """New block seeded with one text segment whose copy depends on the block type."""
    block_type = BlockTypeEnum(type)
    segment = create_segment()
    segment.content = BLOCK_PLACEHOLDERS.get(block_type, FALLBACK_PLACEHOLDER)
    return Block(
        type=block_type,
        order=order,
        level=1 if block_type == BlockTypeEnum.heading else None,
        content=[segment],
    )


def create_page() -> Page:
    """New unpublished page holding a single heading block."""
    heading = create_block(BlockTypeEnum.heading, 0)
    heading.content[0].content = DEFAULT_HEADING_TEXT
    now = datetime.now()
    return Page(
        slug=DEFAULT_SLUG,
        title=DEFAULT_TITLE,
        description=DEFAULT_DESCRIPTION,
        is_published=False,
        created_at=now,
        updated_at=now,
        blocks=[heading],
    )
