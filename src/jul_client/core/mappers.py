"""Conversion of loosely shaped server records into canonical entities.

The server has emitted two naming conventions over time. Every field that
exists in both is read with the underscore key first and the compact
(camelCase) key as fallback, and the same rule applies at every nesting
level. Mappers never raise on missing fields: anything absent becomes
``None``.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from typing import Any

from jul_client.models.attestation import (
    Artifact,
    Attestation,
    CompileSignal,
    CoverageSignal,
    FormatSignal,
    LintSignal,
    Signals,
    TestFailure,
    TestSignal,
)
from jul_client.models.change import Change, Commit, Diffstat, Revision, Suggestion
from jul_client.models.common import ApiError, JobResponse, PolicyViolation, PromoteResponse
from jul_client.models.events import JulEvent
from jul_client.models.files import FileContent, FileHistoryEntry, FileNode
from jul_client.models.repo import Repo, Workspace

type Mapper[T] = Callable[[Any], T]
type Record = Mapping[str, Any]

_EMPTY: Record = {}


def _record(value: Any) -> Record:
    """Treat anything that is not a mapping as an empty record."""
    if isinstance(value, Mapping):
        return value
    return _EMPTY


def _pick(record: Record, snake: str, camel: str) -> Any:
    value = record.get(snake)
    if value is None:
        return record.get(camel)
    return value


def _nested(record: Record, key: str) -> Record | None:
    value = record.get(key)
    if isinstance(value, Mapping):
        return value
    return None


def map_array[T](value: Any, map_item: Mapper[T]) -> tuple[T, ...]:
    """Map every element of a list; any non-list input yields an empty tuple."""
    if not isinstance(value, list):
        return ()
    return tuple(map_item(item) for item in value)


def map_repo(value: Any) -> Repo:
    repo = _record(value)
    return Repo(
        id=repo.get("id"),
        name=repo.get("name"),
        description=repo.get("description"),
        visibility=repo.get("visibility"),
        default_branch=_pick(repo, "default_branch", "defaultBranch"),
        created_at=_pick(repo, "created_at", "createdAt"),
        updated_at=_pick(repo, "updated_at", "updatedAt"),
    )


def map_workspace(value: Any) -> Workspace:
    workspace = _record(value)
    return Workspace(
        id=workspace.get("id"),
        user=workspace.get("user"),
        name=workspace.get("name"),
        repo_id=_pick(workspace, "repo_id", "repoId"),
        ref=workspace.get("ref"),
        head_commit=_pick(workspace, "head_commit", "headCommit"),
        synced_at=_pick(workspace, "synced_at", "syncedAt"),
    )


def map_revision(value: Any) -> Revision:
    revision = _record(value)
    return Revision(
        rev_index=_pick(revision, "rev_index", "revIndex"),
        commit_sha=_pick(revision, "commit_sha", "commitSha"),
        created_at=_pick(revision, "created_at", "createdAt"),
    )


def map_change(value: Any) -> Change:
    """Map a change; ``latest_revision`` is always a Revision, possibly all-None."""
    change = _record(value)
    return Change(
        change_id=_pick(change, "change_id", "changeId"),
        title=change.get("title"),
        author=change.get("author"),
        created_at=_pick(change, "created_at", "createdAt"),
        latest_revision=map_revision(_pick(change, "latest_revision", "latestRevision")),
        revisions=map_array(change.get("revisions"), map_revision),
        status=change.get("status"),
    )


def map_commit(value: Any) -> Commit:
    commit = _record(value)
    return Commit(
        sha=commit.get("sha"),
        change_id=_pick(commit, "change_id", "changeId"),
        tree_sha=_pick(commit, "tree_sha", "treeSha"),
        author=commit.get("author"),
        author_email=_pick(commit, "author_email", "authorEmail"),
        message=commit.get("message"),
        created_at=_pick(commit, "created_at", "createdAt"),
    )


def map_artifact(value: Any) -> Artifact:
    artifact = _record(value)
    return Artifact(name=artifact.get("name"), uri=artifact.get("uri"))


def map_test_failure(value: Any) -> TestFailure:
    failure = _record(value)
    return TestFailure(
        name=failure.get("name"),
        file=failure.get("file"),
        line=failure.get("line"),
        message=failure.get("message"),
        stack_trace=_pick(failure, "stack_trace", "stackTrace"),
    )


def _map_format_signal(signal: Record) -> FormatSignal:
    return FormatSignal(
        status=signal.get("status"),
        message=signal.get("message"),
        files=signal.get("files"),
    )


def _map_lint_signal(signal: Record) -> LintSignal:
    return LintSignal(
        status=signal.get("status"),
        message=signal.get("message"),
        warnings=signal.get("warnings"),
        errors=signal.get("errors"),
    )


def _map_compile_signal(signal: Record) -> CompileSignal:
    return CompileSignal(
        status=signal.get("status"),
        message=signal.get("message"),
        duration_ms=_pick(signal, "duration_ms", "durationMs"),
    )


def _map_test_signal(signal: Record) -> TestSignal:
    return TestSignal(
        status=signal.get("status"),
        message=signal.get("message"),
        passed=signal.get("passed"),
        failed=signal.get("failed"),
        skipped=signal.get("skipped"),
        failures=map_array(signal.get("failures"), map_test_failure),
    )


def _map_coverage_signal(signal: Record) -> CoverageSignal:
    return CoverageSignal(
        status=signal.get("status"),
        message=signal.get("message"),
        line_pct=_pick(signal, "line_pct", "linePct"),
        branch_pct=_pick(signal, "branch_pct", "branchPct"),
        diff_line_pct=_pick(signal, "diff_line_pct", "diffLinePct"),
        uncovered_lines=_pick(signal, "uncovered_lines", "uncoveredLines"),
    )


def map_signals(value: Any) -> Signals:
    """Map the signal set, leaving unreported signals as ``None``."""
    signals = _record(value)
    fmt = _nested(signals, "format")
    lint = _nested(signals, "lint")
    compile_ = _nested(signals, "compile")
    test = _nested(signals, "test")
    coverage = _nested(signals, "coverage")
    return Signals(
        format=_map_format_signal(fmt) if fmt is not None else None,
        lint=_map_lint_signal(lint) if lint is not None else None,
        compile=_map_compile_signal(compile_) if compile_ is not None else None,
        test=_map_test_signal(test) if test is not None else None,
        coverage=_map_coverage_signal(coverage) if coverage is not None else None,
    )


def map_attestation(value: Any) -> Attestation:
    attestation = _record(value)
    return Attestation(
        attestation_id=_pick(attestation, "attestation_id", "attestationId"),
        commit_sha=_pick(attestation, "commit_sha", "commitSha"),
        change_id=_pick(attestation, "change_id", "changeId"),
        type=attestation.get("type"),
        status=attestation.get("status"),
        signals=map_signals(attestation.get("signals")),
        artifacts=map_array(attestation.get("artifacts"), map_artifact),
        log_excerpt=_pick(attestation, "log_excerpt", "logExcerpt"),
        started_at=_pick(attestation, "started_at", "startedAt"),
        finished_at=_pick(attestation, "finished_at", "finishedAt"),
        created_at=_pick(attestation, "created_at", "createdAt"),
    )


def map_suggestion(value: Any) -> Suggestion:
    """Map a suggestion; ``confidence`` is not range-checked."""
    suggestion = _record(value)
    diffstat = _record(suggestion.get("diffstat"))
    return Suggestion(
        suggestion_id=_pick(suggestion, "suggestion_id", "suggestionId"),
        change_id=_pick(suggestion, "change_id", "changeId"),
        base_commit_sha=_pick(suggestion, "base_commit_sha", "baseCommitSha"),
        suggested_commit_sha=_pick(suggestion, "suggested_commit_sha", "suggestedCommitSha"),
        created_by=_pick(suggestion, "created_by", "createdBy"),
        created_at=_pick(suggestion, "created_at", "createdAt"),
        reason=suggestion.get("reason"),
        description=suggestion.get("description"),
        confidence=suggestion.get("confidence"),
        status=suggestion.get("status"),
        diffstat=Diffstat(
            files_changed=_pick(diffstat, "files_changed", "filesChanged"),
            additions=diffstat.get("additions"),
            deletions=diffstat.get("deletions"),
        ),
    )


def map_file_node(value: Any) -> FileNode:
    """Map a tree node, recursing into ``children`` when the server sends a list."""
    node = _record(value)
    children = node.get("children")
    return FileNode(
        name=node.get("name"),
        path=node.get("path"),
        type=node.get("type"),
        size=node.get("size"),
        children=map_array(children, map_file_node) if isinstance(children, list) else None,
    )


def map_file_content(value: Any) -> FileContent:
    content = _record(value)
    return FileContent(
        path=content.get("path"),
        content=content.get("content"),
        encoding=content.get("encoding"),
        size=content.get("size"),
        language=content.get("language"),
    )


def map_file_history_entry(value: Any) -> FileHistoryEntry:
    entry = _record(value)
    return FileHistoryEntry(
        commit_sha=_pick(entry, "commit_sha", "commitSha"),
        change_id=_pick(entry, "change_id", "changeId"),
        author=entry.get("author"),
        message=entry.get("message"),
        created_at=_pick(entry, "created_at", "createdAt"),
        change_type=_pick(entry, "change_type", "changeType"),
    )


def map_jul_event(value: Any) -> JulEvent:
    event = _record(value)
    return JulEvent(
        event_id=_pick(event, "event_id", "eventId"),
        type=event.get("type"),
        repo=event.get("repo"),
        ref=event.get("ref"),
        commit_sha=_pick(event, "commit_sha", "commitSha"),
        change_id=_pick(event, "change_id", "changeId"),
        summary=event.get("summary"),
        attestation_id=_pick(event, "attestation_id", "attestationId"),
        created_at=_pick(event, "created_at", "createdAt"),
    )


def map_promote_response(value: Any) -> PromoteResponse:
    response = _record(value)
    return PromoteResponse(
        success=response.get("success"),
        ref=response.get("ref"),
        commit_sha=_pick(response, "commit_sha", "commitSha"),
    )


def map_job_response(value: Any) -> JobResponse:
    response = _record(value)
    return JobResponse(job_id=_pick(response, "job_id", "jobId"))


def map_policy_violation(value: Any) -> PolicyViolation:
    violation = _record(value)
    return PolicyViolation(
        check=violation.get("check"),
        status=violation.get("status"),
        message=violation.get("message"),
    )


def map_api_error(value: Any) -> ApiError:
    """Map an error body, including policy violations from rejected promotions."""
    error = _record(value)
    details = error.get("details")
    return ApiError(
        error=error.get("error"),
        message=error.get("message"),
        details=dict(details) if isinstance(details, Mapping) else None,
        violations=map_array(error.get("violations"), map_policy_violation),
    )
