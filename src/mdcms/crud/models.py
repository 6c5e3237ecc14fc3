"""Editor document model: pages made of ordered blocks made of typed segments"""

from datetime import datetime
from enum import Enum
from typing import Any, Optional, Union
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field, model_validator

from mdcms.core.errors import NotFound


def new_id() -> str:
    return uuid4().hex


class BlockTypeEnum(str, Enum):
    """Restrict the types of content blocks to a predefined set of elements"""
    heading = "heading"
    paragraph = "paragraph"
    list = "list"
    quote = "quote"
    code = "code"


class SegmentTypeEnum(str, Enum):
    """Inline content kinds within a block"""
    text = "text"
    highlighted = "highlighted"
    link = "link"
    project_card = "project-card"


class HighlightData(BaseModel):
    model_config = ConfigDict(populate_by_name=True)
    hsl_color: str = Field(..., alias="hslColor")


class LinkData(BaseModel):
    url: str


class ProjectCardData(BaseModel):
    """Structured project summary embedded as a card."""
    title: str = ""
    description: str = ""
    url: str = ""
    stats: dict[str, int] = {}       # e.g. {"stars": 12, "forks": 3}


SEGMENT_DATA: dict[SegmentTypeEnum, type[BaseModel]] = {
    SegmentTypeEnum.highlighted:  HighlightData,
    SegmentTypeEnum.link:         LinkData,
    SegmentTypeEnum.project_card: ProjectCardData,
}


class Segment(BaseModel):
    """The smallest addressable unit of rich content; text segments never carry data."""
    id: str = Field(default_factory=new_id)
    type: SegmentTypeEnum = SegmentTypeEnum.text
    content: str = ""
    data: Optional[Union[HighlightData, LinkData, ProjectCardData]] = None

    @model_validator(mode="before")
    @classmethod
    def _coerce_data(cls, values: Any) -> Any:
        # Pick the payload model from `type` rather than letting the union guess.
        if isinstance(values, dict) and isinstance(values.get("data"), dict):
            model = SEGMENT_DATA.get(SegmentTypeEnum(values.get("type", SegmentTypeEnum.text)))
            if model is not None:
                values = {**values, "data": model.model_validate(values["data"])}
        return values

    @model_validator(mode="after")
    def _check_data(self) -> "Segment":
        expected = SEGMENT_DATA.get(self.type)
        if expected is None and self.data is not None:
            raise ValueError(f"{self.type.value} segments cannot carry data")
        if expected is not None and self.data is not None and not isinstance(self.data, expected):
            raise ValueError(f"{self.type.value} segment data must be {expected.__name__}")
        return self


class Block(BaseModel):
    """One rendered unit (heading, paragraph, ...) holding ordered segments."""
    id: str = Field(default_factory=new_id)
    type: BlockTypeEnum
    order: int = Field(..., description="Render position among the page's blocks; need not be contiguous")
    level: Optional[int] = Field(default=None, ge=1, le=6, description="Heading level for heading blocks")
    content: list[Segment] = []

    def find_segment(self, segment_id: str) -> Segment:
        for seg in self.content:
            if seg.id == segment_id:
                return seg
        raise NotFound("Segment", segment_id)

    @property
    def text(self) -> str:
        return "".join(seg.content for seg in self.content)


class Page(BaseModel):
    """An editable page; blocks render in ascending order."""
    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(default_factory=new_id)
    slug: str
    title: str
    description: str = ""
    is_published: bool = Field(default=False, alias="isPublished")
    created_at: datetime = Field(default_factory=datetime.now, alias="createdAt")
    updated_at: datetime = Field(default_factory=datetime.now, alias="updatedAt")
    version: int = Field(default=0, ge=0, description="Bumped on every mutation; used for optimistic checks")
    blocks: list[Block] = []

    def ordered_blocks(self) -> list[Block]:
        """Blocks by ascending order; ties keep insertion order."""
        return sorted(self.blocks, key=lambda b: b.order)

    def find_block(self, block_id: str) -> Block:
        for block in self.blocks:
            if block.id == block_id:
                return block
        raise NotFound("Block", block_id)


class PagePatch(BaseModel):
    """Fields an editor may change on a page; anything else is rejected."""
    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    title: Optional[str] = None
    description: Optional[str] = None
    slug: Optional[str] = None
    is_published: Optional[bool] = Field(default=None, alias="isPublished")


def page_content(page: Page) -> dict[str, Any]:
    """Persistence payload: {"blocks": [{...block, "segments": [...]}]} in render order."""
    return {
        "blocks": [
            {
                **block.model_dump(mode="json", by_alias=True, exclude={"content"}),
                "segments": [seg.model_dump(mode="json", by_alias=True) for seg in block.content],
            }
            for block in page.ordered_blocks()
        ]
    }


def blocks_from_content(content: dict[str, Any]) -> list[Block]:
    """Inverse of page_content; missing ids are allocated and missing orders follow list position."""
    blocks = []
    for index, raw in enumerate(content.get("blocks", [])):
        data = {k: v for k, v in raw.items() if k not in ("segments", "content") and v is not None}
        data.setdefault("order", index)
        segments = raw.get("segments", raw.get("content", []))
        blocks.append(Block(**data, content=[Segment.model_validate(s) for s in segments]))
    return blocks
