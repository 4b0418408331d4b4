"""Database table definitions for the rendered-post cache"""

from datetime import datetime
from typing import Any, Dict

from sqlalchemy import Column, DateTime, JSON, Text
from sqlmodel import Field, SQLModel


class CachedPost(SQLModel, table=True):
    """A post as rendered in an earlier build, keyed by its folder name"""
    __tablename__ = "cached_posts"
    slug: str = Field(primary_key=True)
    html: str = Field(..., sa_column=Column(Text, nullable=False))
    tldr: str = Field(default="", sa_column=Column(Text, nullable=False))
    meta: Dict[str, Any] = Field(default_factory=dict, sa_column=Column(JSON, nullable=False))
    modified: float = Field(default=0.0, nullable=False, description="Source mtime the entry was rendered from; 0 = never valid")
    fingerprint: str = Field(default="", nullable=False, description="Digest of the render settings and id range")
    updated_at: datetime = Field(default_factory=datetime.now, sa_column=Column(DateTime(timezone=False), nullable=False))
