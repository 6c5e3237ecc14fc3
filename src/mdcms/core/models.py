"""Data models for parsed documents, heading trees and corpus entries"""

from typing import Any, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


MetadataValue = Union[str, list[str]]
Metadata = dict[str, MetadataValue]


class ParsedContent(BaseModel):
    """A document split into its frontmatter mapping and body text."""
    metadata: Metadata = {}
    body: str = ""


class Heading(BaseModel):
    """A single ATX heading with its generated anchor id."""
    id: str
    text: str
    level: int = Field(..., ge=1, le=6)


class TOCNode(Heading):
    """A heading plus its nested sub-headings."""
    children: list["TOCNode"] = []


class PostMetadata(BaseModel):
    """Typed view over a parsed metadata mapping; unknown keys are kept as extras."""
    model_config = ConfigDict(extra="allow", populate_by_name=True)

    title:         Optional[str] = None
    published_at:  Optional[str] = Field(default=None, alias="publishedAt")
    summary:       Optional[str] = None
    excerpt:       Optional[str] = None
    image:         Optional[str] = None
    read_time:     Optional[str] = Field(default=None, alias="readTime")
    author:        Optional[str] = None
    category:      Optional[str] = None
    status:        Optional[str] = None
    canonical_url: Optional[str] = Field(default=None, alias="canonicalUrl")
    updated_at:    Optional[str] = Field(default=None, alias="updatedAt")
    categories:    list[str] = []
    tags:          list[str] = []
    topics:        list[str] = []
    keywords:      list[str] = []

    @classmethod
    def from_metadata(cls, metadata: Metadata) -> "PostMetadata":
        """Build the view; scalar values under array fields become one-item lists."""
        data: dict[str, Any] = dict(metadata)
        for name in ("categories", "tags", "topics", "keywords"):
            value = data.get(name)
            if isinstance(value, str):
                data[name] = [value] if value else []
        for name, field in cls.model_fields.items():
            key = field.alias or name
            if isinstance(data.get(key), list) and field.annotation == Optional[str]:
                data[key] = ", ".join(data[key])
        return cls.model_validate(data)

    @property
    def description(self) -> Optional[str]:
        return self.summary or self.excerpt


class CorpusEntry(BaseModel):
    """One content file discovered by a corpus scan."""
    slug: str
    path: str
    metadata: Metadata = {}
    body: str = ""
    read_time: int = 0              # minutes
    error: Optional[str] = None     # set when the file degraded to a placeholder

    @property
    def view(self) -> PostMetadata:
        return PostMetadata.from_metadata(self.metadata)
