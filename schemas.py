"""
Database Schemas

Pydantic models for the "poems" collection. PoemCreate validates an inbound
request body and shapes the stored document.
"""

from datetime import datetime, timezone
from typing import Any, Dict, Optional

from pydantic import BaseModel, Field, field_validator

ANONYMOUS_AUTHOR = "Anonymous"


class PoemCreate(BaseModel):
    """
    Body of a create request.
    title and content are required and must be non-blank once trimmed.
    """
    title: str = Field(..., description="Poem title")
    author: Optional[str] = Field(None, description="Author, Anonymous when omitted")
    content: str = Field(..., description="Full poem text")

    @field_validator("title", "author", "content", mode="before")
    @classmethod
    def coerce_to_str(cls, v: Any) -> Any:
        if not v:
            return None
        return str(v).strip()

    @field_validator("title", "content")
    @classmethod
    def not_blank(cls, v: str) -> str:
        if not v:
            raise ValueError("must not be empty")
        return v

    def to_document(self, now: Optional[datetime] = None) -> Dict[str, Any]:
        return {
            "title": self.title,
            "author": self.author or ANONYMOUS_AUTHOR,
            "content": self.content,
            "createdAt": now or datetime.now(timezone.utc),
        }

