"""Generic pagination response model."""

from typing import Generic, TypeVar

from pydantic import BaseModel, Field

T = TypeVar("T")

# Largest page the demo API serves
MAX_PAGE_SIZE = 100


class PaginatedResponse(BaseModel, Generic[T]):
    """One page of a server-backed list.

    Wraps a batch of items with the total count of items the server
    currently knows about. ``limit`` and ``offset`` echo the request when
    the server provides them; the pagination controller does not rely on
    them.
    """

    items: list[T] = Field(description="Page of results")
    total: int = Field(ge=0, description="Total number of items available")
    limit: int | None = Field(
        default=None, ge=1, description="Maximum items per page"
    )
    offset: int | None = Field(
        default=None, ge=0, description="Number of items skipped"
    )


class PageRequest(BaseModel):
    """Offset and size of a single page fetch."""

    offset: int = Field(ge=0, description="Zero-based index of the first item")
    size: int = Field(ge=1, description="Maximum number of items to return")
