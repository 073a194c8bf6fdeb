"""Change, revision, commit and suggestion entities."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

type ChangeStatus = Literal["draft", "ready", "published", "abandoned"]
type SuggestionStatus = Literal["open", "accepted", "rejected", "superseded"]


@dataclass(frozen=True, slots=True)
class Revision:
    """One immutable snapshot of a change."""

    rev_index: int | None
    commit_sha: str | None
    created_at: str | None


@dataclass(frozen=True, slots=True)
class Change:
    """Logical unit of work identified by a Change-Id that survives amend and rebase.

    ``latest_revision`` is expected to equal ``revisions[-1]`` whenever the
    server reports both.
    """

    change_id: str | None
    title: str | None
    author: str | None
    created_at: str | None
    latest_revision: Revision
    revisions: tuple[Revision, ...]
    status: ChangeStatus | None


@dataclass(frozen=True, slots=True)
class Commit:
    """Git commit, optionally linked to a tracked change."""

    sha: str | None
    change_id: str | None
    tree_sha: str | None
    author: str | None
    author_email: str | None
    message: str | None
    created_at: str | None


@dataclass(frozen=True, slots=True)
class Diffstat:
    files_changed: int | None
    additions: int | None
    deletions: int | None


@dataclass(frozen=True, slots=True)
class Suggestion:
    """Agent-proposed commit on top of a change.

    ``confidence`` is nominally within 0.0-1.0 but is passed through as sent.
    """

    suggestion_id: str | None
    change_id: str | None
    base_commit_sha: str | None
    suggested_commit_sha: str | None
    created_by: str | None
    created_at: str | None
    reason: str | None
    description: str | None
    confidence: float | None
    status: SuggestionStatus | None
    diffstat: Diffstat
