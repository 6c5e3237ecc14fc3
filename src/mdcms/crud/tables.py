"""Database table definitions for pages, content blocks and content segments"""

from datetime import datetime
from typing import Any, Dict, Optional

from sqlalchemy import JSON, Column, DateTime, String, Text
from sqlmodel import Field, SQLModel


class PageRow(SQLModel, table=True):
    """An editor page; slug is unique across the table"""
    __tablename__ = "pages"
    id: str = Field(..., sa_column=Column(String(64), primary_key=True))
    slug: str = Field(..., index=True, unique=True, nullable=False)
    title: str = Field(..., sa_column=Column(Text, nullable=False))
    description: str = Field(default="", sa_column=Column(Text, nullable=False))
    is_published: bool = Field(default=False, nullable=False)
    version: int = Field(default=0, nullable=False, description="Optimistic concurrency counter")
    created_at: datetime = Field(default_factory=datetime.now, sa_column=Column(DateTime(timezone=False), nullable=False))
    updated_at: datetime = Field(default_factory=datetime.now, sa_column=Column(DateTime(timezone=False), nullable=False))


class BlockRow(SQLModel, table=True):
    """One ordered block of a page"""
    __tablename__ = "content_blocks"
    id: str = Field(..., sa_column=Column(String(64), primary_key=True))
    page_id: str = Field(..., foreign_key="pages.id", index=True, nullable=False)
    block_type: str = Field(..., nullable=False, description="Type of content block (e.g. heading, etc.)")
    position: int = Field(..., nullable=False, description="Render order of the block within the page")
    level: Optional[int] = Field(default=None, description="Heading level for heading blocks")


class SegmentRow(SQLModel, table=True):
    """One ordered inline segment of a block"""
    __tablename__ = "content_segments"
    id: str = Field(..., sa_column=Column(String(64), primary_key=True))
    block_id: str = Field(..., foreign_key="content_blocks.id", index=True, nullable=False)
    position: int = Field(..., nullable=False, description="Position of the segment within the block")
    segment_type: str = Field(..., nullable=False)
    text: str = Field(..., sa_column=Column(Text, nullable=False))
    data: Optional[Dict[str, Any]] = Field(default=None, sa_column=Column(JSON, nullable=True))
