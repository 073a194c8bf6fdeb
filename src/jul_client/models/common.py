"""Shared response envelopes and error payloads."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Literal

type JSONValue = None | bool | int | float | str | list[JSONValue] | dict[str, JSONValue]
type ViolationStatus = Literal["fail", "warn"]


@dataclass(frozen=True, slots=True)
class PaginatedResponse[T]:
    """Canonical page envelope for list endpoints."""

    items: tuple[T, ...]
    total: int
    limit: int
    offset: int


@dataclass(frozen=True, slots=True)
class PolicyViolation:
    """One failed promotion policy check."""

    check: str | None
    status: ViolationStatus | None
    message: str | None


@dataclass(frozen=True, slots=True)
class ApiError:
    """Error payload returned by the server on non-2xx responses."""

    error: str | None
    message: str | None
    details: dict[str, Any] | None = None
    violations: tuple[PolicyViolation, ...] = field(default=())


@dataclass(frozen=True, slots=True)
class PromoteResponse:
    """Result of promoting a workspace onto a target branch."""

    success: bool | None
    ref: str | None
    commit_sha: str | None


@dataclass(frozen=True, slots=True)
class JobResponse:
    """Handle for an asynchronously scheduled CI job."""

    job_id: str | None
