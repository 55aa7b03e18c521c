"""
Pydantic schemas for the Task Manager API.

Request models validate at the HTTP boundary; response models define the
public (camelCase) projections of users and tasks.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator
from pydantic.alias_generators import to_camel

from auth.password import MAX_PASSWORD_BYTES

DEFAULT_PAGE = 1
DEFAULT_LIMIT = 10
MAX_LIMIT = 100
# Largest page whose offset still fits a signed 64-bit SQL integer.
MAX_PAGE = (2**63 - 1) // MAX_LIMIT


class CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class TaskStatus(str, Enum):
    PENDING = "PENDING"
    COMPLETED = "COMPLETED"


# ═══════════════════════════════════════════════════════════════════════════════
# Auth — Requests
# ═══════════════════════════════════════════════════════════════════════════════


class RegisterRequest(CamelModel):
    name: str = Field(..., min_length=2, max_length=100)
    email: EmailStr
    password: str = Field(..., min_length=6, max_length=128)

    @field_validator("name", mode="before")
    @classmethod
    def _strip_name(cls, value: Any) -> Any:
        return value.strip() if isinstance(value, str) else value

    @field_validator("password")
    @classmethod
    def _bcrypt_limit(cls, value: str) -> str:
        if len(value.encode("utf-8")) > MAX_PASSWORD_BYTES:
            raise ValueError(f"Password must be at most {MAX_PASSWORD_BYTES} bytes")
        return value


class LoginRequest(CamelModel):
    email: EmailStr
    password: str = Field(..., min_length=1)


class RefreshRequest(CamelModel):
    refresh_token: str = Field(..., min_length=1)


# ═══════════════════════════════════════════════════════════════════════════════
# Auth — Responses
# ═══════════════════════════════════════════════════════════════════════════════


class PublicUser(CamelModel):
    """User projection safe to return to clients (no password hash)."""

    id: str
    name: str
    email: str
    created_at: datetime

    @field_validator("id", mode="before")
    @classmethod
    def _stringify_id(cls, value: Any) -> Any:
        return str(value)


class LoginResult(CamelModel):
    user: PublicUser
    access_token: str
    refresh_token: str


class RefreshResult(CamelModel):
    access_token: str


# ═══════════════════════════════════════════════════════════════════════════════
# Tasks
# ═══════════════════════════════════════════════════════════════════════════════


class TaskCreate(CamelModel):
    title: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = Field(None, max_length=1000)
    status: TaskStatus = TaskStatus.PENDING


class TaskUpdate(CamelModel):
    """
    Partial update.  Only fields present in the request body are applied;
    ``description`` may be cleared with an explicit ``null``.
    """

    title: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = Field(None, max_length=1000)
    status: Optional[TaskStatus] = None

    @field_validator("title", "status", mode="before")
    @classmethod
    def _not_null(cls, value: Any) -> Any:
        if value is None:
            raise ValueError("Field cannot be null")
        return value


class TaskListQuery(CamelModel):
    page: int = DEFAULT_PAGE
    limit: int = DEFAULT_LIMIT
    status: Optional[TaskStatus] = None
    search: Optional[str] = None

    @field_validator("page", mode="before")
    @classmethod
    def _lenient_page(cls, value: Any) -> int:
        page = _positive_int(value, DEFAULT_PAGE)
        if page > MAX_PAGE:
            raise ValueError(f"Page must be at most {MAX_PAGE}")
        return page

    @field_validator("limit", mode="before")
    @classmethod
    def _lenient_limit(cls, value: Any) -> int:
        return min(_positive_int(value, DEFAULT_LIMIT), MAX_LIMIT)

    @field_validator("search", mode="before")
    @classmethod
    def _blank_search(cls, value: Any) -> Any:
        if isinstance(value, str) and not value.strip():
            return None
        return value


def _positive_int(value: Any, default: int) -> int:
    """Parse ``value`` as an int, falling back to ``default`` when invalid or < 1."""
    try:
        parsed = int(value)
    except (TypeError, ValueError):
        return default
    return parsed if parsed >= 1 else default


class TaskOut(CamelModel):
    id: str
    title: str
    description: Optional[str] = None
    status: TaskStatus
    user_id: str
    created_at: datetime
    updated_at: datetime

    @field_validator("id", "user_id", mode="before")
    @classmethod
    def _stringify_ids(cls, value: Any) -> Any:
        return str(value)


class Pagination(CamelModel):
    page: int
    limit: int
    total: int
    total_pages: int


class TaskPage(CamelModel):
    tasks: List[TaskOut]
    pagination: Pagination
