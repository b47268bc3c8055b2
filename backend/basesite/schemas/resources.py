"""
Base Example Site — Base API Resource Schemas
===============================================

What:  Pydantic models for the resources returned by the Base API.
Why:   Templates and route transforms work with typed attributes
       (user.id, image.width) instead of raw JSON dicts.
How:   The client validates each JSON payload with model_validate();
       unknown fields are kept (extra="allow") so newer API versions
       don't break rendering.
"""

from datetime import datetime
from typing import Any, Generic, List, Optional, TypeVar

from pydantic import BaseModel, Field

T = TypeVar("T")


class User(BaseModel):
    """A user account stored by the Base API."""
    id: str
    email: str
    custom_data: Optional[Any] = None
    created_at: Optional[datetime] = None

    model_config = {"extra": "allow"}


class StoredFile(BaseModel):
    """
    An uploaded file.

    Named StoredFile to avoid shadowing the builtin-ish `File` name used by
    FastAPI's form helpers.
    """
    id: str
    content_type: Optional[str] = None
    extension: Optional[str] = None
    size: Optional[int] = None
    created_at: Optional[datetime] = None

    model_config = {"extra": "allow"}


class Image(BaseModel):
    """An uploaded image; the API can serve processed versions of it."""
    id: str
    extension: Optional[str] = None
    width: Optional[int] = None
    height: Optional[int] = None
    size: Optional[int] = None
    created_at: Optional[datetime] = None

    model_config = {"extra": "allow"}


class MailingList(BaseModel):
    id: str
    name: Optional[str] = None
    subscribers: List[str] = Field(default_factory=list)

    model_config = {"extra": "allow"}


class PageMetadata(BaseModel):
    page: int = 1
    per_page: int = 10
    count: int = 0

    @property
    def total_pages(self) -> int:
        if self.per_page <= 0:
            return 1
        return max(1, -(-self.count // self.per_page))


class Page(BaseModel, Generic[T]):
    """
    What:  One page of a list endpoint.
    Shape: {"items": [...], "metadata": {"page": 1, "per_page": 10, "count": 42}}
    """
    items: List[T] = Field(default_factory=list)
    metadata: PageMetadata = Field(default_factory=PageMetadata)

    @property
    def has_next(self) -> bool:
        return self.metadata.page < self.metadata.total_pages

    @property
    def has_previous(self) -> bool:
        return self.metadata.page > 1


class HealthResponse(BaseModel):
    """
    What:  Health check response showing service and dependency status.
    Who:   Returned by GET /health for monitoring and load balancer checks.
    """
    status: str = Field(description="Overall service status: healthy, degraded")
    version: str = Field(description="Application version")
    base_api: str = Field(description="Base API status: available, unavailable")
    uptime_seconds: float = Field(description="Seconds since service started")
