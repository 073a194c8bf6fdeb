"""CI attestation entities.

An attestation is composed of independently optional signals. A signal the
server did not report is ``None`` on :class:`Signals`, never an empty record.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Literal

type AttestationStatus = Literal["running", "pass", "fail", "error"]
type SignalStatus = Literal["pass", "fail", "warn", "complete"]


@dataclass(frozen=True, slots=True)
class Artifact:
    name: str | None
    uri: str | None


@dataclass(frozen=True, slots=True)
class TestFailure:
    """One failing test case reported by the test signal."""

    __test__ = False

    name: str | None
    file: str | None
    line: int | None
    message: str | None
    stack_trace: str | None = None


@dataclass(frozen=True, slots=True)
class FormatSignal:
    status: SignalStatus | None
    message: str | None = None
    files: list[str] | None = None


@dataclass(frozen=True, slots=True)
class LintSignal:
    status: SignalStatus | None
    message: str | None = None
    warnings: int | None = None
    errors: int | None = None


@dataclass(frozen=True, slots=True)
class CompileSignal:
    status: SignalStatus | None
    message: str | None = None
    duration_ms: int | None = None


@dataclass(frozen=True, slots=True)
class TestSignal:
    """Test run summary with counts and failures."""

    __test__ = False

    status: SignalStatus | None
    message: str | None = None
    passed: int | None = None
    failed: int | None = None
    skipped: int | None = None
    failures: tuple[TestFailure, ...] = field(default=())


@dataclass(frozen=True, slots=True)
class CoverageSignal:
    """Coverage percentages; ``uncovered_lines`` maps file path to line numbers."""

    status: SignalStatus | None
    message: str | None = None
    line_pct: float | None = None
    branch_pct: float | None = None
    diff_line_pct: float | None = None
    uncovered_lines: dict[str, list[int]] | None = None


@dataclass(frozen=True, slots=True)
class Signals:
    format: FormatSignal | None = None
    lint: LintSignal | None = None
    compile: CompileSignal | None = None
    test: TestSignal | None = None
    coverage: CoverageSignal | None = None


@dataclass(frozen=True, slots=True)
class Attestation:
    """CI verification result attached to a commit."""

    attestation_id: str | None
    commit_sha: str | None
    change_id: str | None
    type: Literal["ci"] | None
    status: AttestationStatus | None
    signals: Signals
    artifacts: tuple[Artifact, ...]
    log_excerpt: str | None
    started_at: str | None
    finished_at: str | None
    created_at: str | None
