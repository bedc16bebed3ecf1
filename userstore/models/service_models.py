"""
Service Layer Data Transfer Objects.

Pydantic envelope returned by every ``UserService`` method.
"""

from __future__ import annotations

from typing import Generic, Optional, TypeVar

from pydantic import BaseModel

T = TypeVar("T")

__all__ = ["ServiceResult"]


class ServiceResult(BaseModel, Generic[T]):
    """
    Standard service return envelope.

    Generic over ``T`` so callers can annotate return types precisely
    (e.g. ``ServiceResult[dict[str, str]]``).  Bare ``ServiceResult(...)``
    is treated as ``ServiceResult[Any]`` by Pydantic.
    """

    success: bool
    data: Optional[T] = None
    error: Optional[str] = None
    status_code: int = 200
