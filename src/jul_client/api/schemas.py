"""Request bodies for mutating endpoints.

Bodies are sent with underscore-cased keys; optional fields left unset are
omitted from the payload.
"""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel

type CIProfile = Literal["unit", "full", "lint"]


class RequestBody(BaseModel):
    """Base for request payloads."""

    def to_wire(self) -> dict[str, Any]:
        return self.model_dump(mode="json", exclude_none=True)


class CreateRepoRequest(RequestBody):
    """Repository creation payload."""

    name: str
    description: str | None = None
    visibility: Literal["public", "private"] | None = None


class PromoteRequest(RequestBody):
    """Workspace promotion payload."""

    target_branch: str
    commit_sha: str | None = None


class TriggerCIRequest(RequestBody):
    """CI trigger payload."""

    commit_sha: str
    profile: CIProfile | None = None


class SuggestionRequest(RequestBody):
    """Suggestion request payload."""

    change_id: str
    reason: str
