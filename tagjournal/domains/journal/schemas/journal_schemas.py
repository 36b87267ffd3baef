"""Journal request/response schemas."""

from __future__ import annotations

import uuid
from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from tagjournal.core.utils.dates import ensure_utc
from tagjournal.core.utils.validation import normalize_tags


class SortOrder(str, Enum):
    ASC = "asc"
    DESC = "desc"


class EventTypeData(BaseModel):
    name: str = Field(min_length=1, max_length=255)
    tags: List[str] = Field(default_factory=list)

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("name must not be blank")
        return v

    @field_validator("tags")
    @classmethod
    def validate_tags(cls, v: List[str]) -> List[str]:
        return normalize_tags(v)


class JournalEntryCreate(BaseModel):
    event_type_id: uuid.UUID
    description: Optional[str] = None
    tags: List[str] = Field(default_factory=list)
    created_at: Optional[datetime] = None

    @field_validator("tags")
    @classmethod
    def validate_tags(cls, v: List[str]) -> List[str]:
        return normalize_tags(v)

    @field_validator("created_at")
    @classmethod
    def to_utc(cls, v: Optional[datetime]) -> Optional[datetime]:
        return ensure_utc(v)


class JournalEntryUpdate(BaseModel):
    description: Optional[str] = None
    tags: List[str] = Field(default_factory=list)

    @field_validator("tags")
    @classmethod
    def validate_tags(cls, v: List[str]) -> List[str]:
        return normalize_tags(v)


class SearchFilter(BaseModel):
    """Journal entry search; ``after``/``before`` are inclusive bounds on ``created_at``."""

    event_type_id: Optional[uuid.UUID] = None
    tags: List[str] = Field(default_factory=list)
    after: Optional[datetime] = None
    before: Optional[datetime] = None
    sort: Optional[SortOrder] = None
    offset: Optional[int] = Field(default=None, ge=0)
    limit: Optional[int] = Field(default=None, ge=1, le=100)

    @field_validator("tags", mode="before")
    @classmethod
    def split_tags(cls, v):
        # Query strings deliver either repeated ?tags=a&tags=b or a comma list.
        if v is None:
            return []
        if isinstance(v, str):
            v = [v]
        return normalize_tags(part for item in v for part in str(item).split(","))

    @field_validator("sort", mode="before")
    @classmethod
    def lower_sort(cls, v):
        return v.lower() if isinstance(v, str) else v

    @field_validator("after", "before")
    @classmethod
    def to_utc(cls, v: Optional[datetime]) -> Optional[datetime]:
        return ensure_utc(v)

    @model_validator(mode="after")
    def check_bounds(self) -> "SearchFilter":
        if self.after is not None and self.before is not None and self.after > self.before:
            raise ValueError("after must not be later than before")
        return self


class EventTypeResponse(BaseModel):
    id: uuid.UUID
    user_id: uuid.UUID
    name: str
    tags: List[str]


class JournalEntryResponse(BaseModel):
    id: uuid.UUID
    user_id: uuid.UUID
    event_type_id: uuid.UUID
    description: Optional[str]
    tags: List[str]
    created_at: str
