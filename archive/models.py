"""Regnum Forum Archive — Pydantic filter, pagination and envelope models."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


class ThreadFilter(BaseModel):
    """Named filter parameters accepted by the thread listing."""

    language: Optional[str] = None
    category: Optional[str] = None
    search: Optional[str] = None

    @field_validator("language", "category", "search", mode="before")
    @classmethod
    def blank_to_none(cls, v):
        if v is None:
            return None
        v = str(v).strip()
        return v or None


class Pagination(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    page: int = Field(..., ge=1)
    limit: int = Field(..., ge=1, le=100)
    offset: int = Field(..., ge=0)
    total: int = Field(..., ge=0)
    total_pages: int = Field(..., ge=0)
    has_next: bool
    has_prev: bool
    start_item: int
    end_item: int

    def to_dict(self) -> dict:
        return self.model_dump(by_alias=True)


class ApiResponse(BaseModel):
    success: bool = True
    status: int = 200
    message: str = "Success"
    data: Any = None
    timestamp: str = Field(default_factory=utc_now_iso)


class ErrorResponse(BaseModel):
    success: bool = False
    status: int = 500
    message: str
    error: Any = None
    timestamp: str = Field(default_factory=utc_now_iso)
