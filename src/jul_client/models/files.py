"""Repository file tree, content and history entities."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

type FileNodeType = Literal["file", "directory"]
type FileEncoding = Literal["utf-8", "base64"]
type FileChangeType = Literal["add", "modify", "delete", "rename"]


@dataclass(frozen=True, slots=True)
class FileNode:
    """File or directory in a tree listing; directories may carry children."""

    name: str | None
    path: str | None
    type: FileNodeType | None
    size: int | None = None
    children: tuple[FileNode, ...] | None = None

    @property
    def is_directory(self) -> bool:
        return self.type == "directory"


@dataclass(frozen=True, slots=True)
class FileContent:
    path: str | None
    content: str | None
    encoding: FileEncoding | None
    size: int | None
    language: str | None = None


@dataclass(frozen=True, slots=True)
class FileHistoryEntry:
    """One commit that touched a file."""

    commit_sha: str | None
    change_id: str | None
    author: str | None
    message: str | None
    created_at: str | None
    change_type: FileChangeType | None
