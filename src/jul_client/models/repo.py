"""Repository and workspace entities."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

type Visibility = Literal["public", "private"]


@dataclass(frozen=True, slots=True)
class Repo:
    """Hosted repository metadata."""

    id: str | None
    name: str | None
    description: str | None
    visibility: Visibility | None
    default_branch: str | None
    created_at: str | None
    updated_at: str | None


@dataclass(frozen=True, slots=True)
class Workspace:
    """One synced working copy of a repository for a user or device."""

    id: str | None
    user: str | None
    name: str | None
    repo_id: str | None
    ref: str | None
    head_commit: str | None
    synced_at: str | None
