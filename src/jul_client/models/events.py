"""Live event models delivered over the repository event stream."""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum


class EventType(StrEnum):
    """Event kinds published by the server."""

    REF_UPDATED = "ref.updated"
    CI_STARTED = "ci.started"
    CI_FINISHED = "ci.finished"
    ATTESTATION_ADDED = "attestation.added"
    SUGGESTION_CREATED = "suggestion.created"
    POLICY_VIOLATION = "policy.violation"
    CHECKPOINT_CREATED = "checkpoint.created"
    PROMOTE_APPLIED = "promote.applied"


@dataclass(frozen=True, slots=True)
class JulEvent:
    """One repository event.

    ``type`` keeps the raw string so unknown kinds pass through; compare it
    against :class:`EventType` members.
    """

    event_id: str | None
    type: str | None
    repo: str | None
    ref: str | None = None
    commit_sha: str | None = None
    change_id: str | None = None
    summary: str | None = None
    attestation_id: str | None = None
    created_at: str | None = None

    @property
    def known_type(self) -> EventType | None:
        try:
            return EventType(self.type) if self.type is not None else None
        except ValueError:
            return None
