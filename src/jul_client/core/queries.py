"""Request path and query-string assembly.

Each filter dataclass declares its fields in wire order. Only fields that are
set (not ``None``) are appended, always in that declared order, so the same
filter produces a byte-identical path.
"""

from __future__ import annotations

from dataclasses import dataclass, fields
from typing import Literal
from urllib.parse import quote, urlencode

from jul_client.models.attestation import AttestationStatus
from jul_client.models.change import ChangeStatus, SuggestionStatus

API_PREFIX = "/api/v1"
REPO_SUFFIX = ".jul"
COMPONENT_SAFE = "!*'()"

type TestsFilter = Literal["pass", "fail"]
type QueryValue = str | int | float | bool


def _encode_value(value: QueryValue) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def build_query(params: list[tuple[str, QueryValue | None]]) -> str:
    """Encode set parameters in the given order, prefixed with ``?`` when non-empty."""
    pairs = [(key, _encode_value(value)) for key, value in params if value is not None]
    if not pairs:
        return ""
    return f"?{urlencode(pairs)}"


class _Filter:
    """Mixin that serializes dataclass fields in declaration order."""

    __slots__ = ()

    def to_params(self) -> list[tuple[str, QueryValue | None]]:
        declared = fields(self)  # type: ignore[arg-type]
        return [(field.name, getattr(self, field.name)) for field in declared]

    def query_string(self) -> str:
        return build_query(self.to_params())


@dataclass(frozen=True, slots=True)
class ChangesQuery(_Filter):
    status: ChangeStatus | None = None
    author: str | None = None
    limit: int | None = None
    offset: int | None = None


@dataclass(frozen=True, slots=True)
class AttestationsQuery(_Filter):
    commit_sha: str | None = None
    change_id: str | None = None
    status: AttestationStatus | None = None
    limit: int | None = None
    offset: int | None = None


@dataclass(frozen=True, slots=True)
class SuggestionsQuery(_Filter):
    change_id: str | None = None
    status: SuggestionStatus | None = None


@dataclass(frozen=True, slots=True)
class FileHistoryQuery(_Filter):
    ref: str | None = None
    limit: int | None = None


@dataclass(frozen=True, slots=True)
class QueryParams(_Filter):
    """Commit search filters for the ``/query`` endpoint.

    ``compiles=False`` is a real filter and is sent; only ``None`` is unset.
    """

    tests: TestsFilter | None = None
    compiles: bool | None = None
    coverage_min: float | None = None
    coverage_max: float | None = None
    change_id: str | None = None
    author: str | None = None
    since: str | None = None
    until: str | None = None
    limit: int | None = None


def api_path(path: str) -> str:
    """Path under the global (unscoped) API."""
    return f"{API_PREFIX}{path}"


def repo_path(repo: str, path: str) -> str:
    """Path under a repository-scoped API host prefix, e.g. ``/demo.jul/api/v1/changes``."""
    return f"/{repo}{REPO_SUFFIX}{API_PREFIX}{path}"


def quote_component(value: str) -> str:
    """Percent-encode everything except unreserved characters and ``!*'()``."""
    return quote(value, safe=COMPONENT_SAFE)


def file_segment(path: str) -> str:
    """Quote a repository file path as a single URL path segment."""
    return quote_component(path)


def ref_query(ref: str) -> str:
    """``?ref=`` query for file endpoints; spaces become ``%20``, not ``+``."""
    return f"?ref={quote_component(ref)}"


def with_query(path: str, query: _Filter | None) -> str:
    if query is None:
        return path
    return f"{path}{query.query_string()}"
