"""Common Pydantic schemas used across the application."""

from typing import Any, Generic, TypeVar

from pydantic import BaseModel, ConfigDict, Field

T = TypeVar("T")


class PaginationMeta(BaseModel):
    """Pagination metadata for list responses."""

    model_config = ConfigDict(populate_by_name=True)

    current_page: int
    last_page: int
    per_page: int
    total: int
    from_: int | None = Field(None, alias="from")
    to: int | None = None

    @classmethod
    def build(cls, page: int, per_page: int, total: int, count: int) -> "PaginationMeta":
        """Build pagination metadata for a page holding ``count`` items."""
        last_page = max((total + per_page - 1) // per_page, 1)
        first = (page - 1) * per_page + 1 if count else None
        return cls(
            current_page=page,
            last_page=last_page,
            per_page=per_page,
            total=total,
            from_=first,
            to=first + count - 1 if first else None,
        )


class APIResponse(BaseModel, Generic[T]):
    """Standard API response envelope.

    All JSON API responses use this consistent envelope structure.
    """

    status: str = "success"
    data: T | None = None
    message: str | None = None
    errors: list[Any] | None = None
    pagination: PaginationMeta | None = None
