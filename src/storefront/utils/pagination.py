"""
Offset/limit pagination shared by list endpoints.
"""

from typing import Generic, List, TypeVar

from fastapi import Query
from pydantic import BaseModel

T = TypeVar("T")


class PaginationParams:
    """Query parameters ``limit`` (default 10) and ``offset`` (default 0)."""

    def __init__(
        self,
        limit: int = Query(10, ge=1, le=1000, description="Items per page"),
        offset: int = Query(0, ge=0, description="Items to skip"),
    ):
        self.limit = limit
        self.offset = offset


class PaginatedResponse(BaseModel, Generic[T]):
    """Page of results with the total number of matching rows."""
    count: int
    results: List[T]
    limit: int
    offset: int


def clamp(value: int, lower: int, upper: int) -> int:
    return max(lower, min(value, upper))
