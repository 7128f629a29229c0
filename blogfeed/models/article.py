"""Article models for stored feed entries."""

from datetime import datetime
from typing import List, Literal, Optional

from pydantic import Field, field_validator

from .base import StoreModel, ensure_utc

SavedBy = Literal["manual", "auto"]

DEFAULT_CATEGORY = "Uncategorized"


class ArticleInput(StoreModel):
    """Candidate article handed to the store, enrichment already attached."""

    title: str = Field(..., description="Article title")
    link: str = Field(..., description="Article URL, the deduplication key")
    description: str = Field("", description="Feed description/excerpt")
    source: str = Field("", description="Feed or outlet name")
    pub_date: str = Field("", description="Publication date as given by the feed")
    category: str = Field(DEFAULT_CATEGORY, description="Editorial category")
    summary: Optional[str] = Field(None, description="AI summary")
    key_points: List[str] = Field(default_factory=list, description="AI key points")
    catchy_title: Optional[str] = Field(None, description="AI rewritten title")

    @field_validator("title", "link")
    @classmethod
    def require_text(cls, v: str) -> str:
        """Reject blank titles and links."""
        v = v.strip()
        if not v:
            raise ValueError("must not be blank")
        return v

    @field_validator("description", "source", "pub_date", mode="before")
    @classmethod
    def none_as_empty(cls, v):
        return "" if v is None else v

    @field_validator("category", mode="before")
    @classmethod
    def default_category(cls, v):
        if v is None or (isinstance(v, str) and not v.strip()):
            return DEFAULT_CATEGORY
        return v

    @field_validator("key_points", mode="before")
    @classmethod
    def none_as_no_points(cls, v):
        return [] if v is None else v


class SavedArticle(ArticleInput):
    """Article as persisted in a partition."""

    id: str = Field(..., description="Identifier derived from the link")
    saved_at: datetime = Field(..., description="When the store accepted the article")
    saved_by: SavedBy = Field("manual", description="Provenance of the save")

    @field_validator("saved_at")
    @classmethod
    def saved_at_utc(cls, v: datetime) -> datetime:
        return ensure_utc(v)
