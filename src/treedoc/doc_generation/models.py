"""Data classes for doc_generation package."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, List, Optional


@dataclass
class FileSummary:
    """Documentation artifact for one source file."""

    file_name: str
    file_path: str
    url: str
    summary: str
    questions: str

    def to_dict(self) -> dict:
        return {
            "fileName": self.file_name,
            "filePath": self.file_path,
            "url": self.url,
            "summary": self.summary,
            "questions": self.questions,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "FileSummary":
        return cls(
            file_name=data["fileName"],
            file_path=data["filePath"],
            url=data.get("url", ""),
            summary=data.get("summary", ""),
            questions=data.get("questions", ""),
        )

    def to_json(self) -> str:
        """Artifact payload; empty when there is no summary to persist."""
        if not self.summary:
            return ""
        return json.dumps(self.to_dict(), indent=2)


@dataclass
class FolderSummary:
    """Documentation artifact for one directory."""

    folder_name: str
    folder_path: str
    url: str
    files: List[FileSummary]
    folders: List["FolderSummary"]
    summary: str
    questions: str = ""

    def to_dict(self) -> dict:
        return {
            "folderName": self.folder_name,
            "folderPath": self.folder_path,
            "url": self.url,
            "files": [f.to_dict() for f in self.files],
            "folders": [f.to_dict() for f in self.folders],
            "summary": self.summary,
            "questions": self.questions,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "FolderSummary":
        return cls(
            folder_name=data["folderName"],
            folder_path=data["folderPath"],
            url=data.get("url", ""),
            files=[FileSummary.from_dict(f) for f in data.get("files", [])],
            folders=[FolderSummary.from_dict(f) for f in data.get("folders", [])],
            summary=data.get("summary", ""),
            questions=data.get("questions", ""),
        )

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), indent=2)


class Status(Enum):
    """Outcome of one unit of work (a file or a folder)."""

    PRODUCED = "produced"
    SKIPPED = "skipped"
    FAILED = "failed"


@dataclass
class SummaryResult:
    """Tagged result of summarizing a file or aggregating a folder.

    ``artifact`` is set whenever something was written, including the empty
    payload of a file whose model returned no summary.
    """

    status: Status
    path: Path
    reason: Optional[str] = None
    model: Optional[str] = None
    artifact: Optional[Path] = None
    need: Optional[int] = None

    @classmethod
    def produced(cls, path: Path, artifact: Optional[Path], model: str, **kwargs: Any) -> "SummaryResult":
        return cls(Status.PRODUCED, path, model=model, artifact=artifact, **kwargs)

    @classmethod
    def skipped(cls, path: Path, reason: str, **kwargs: Any) -> "SummaryResult":
        return cls(Status.SKIPPED, path, reason=reason, **kwargs)

    @classmethod
    def failed(cls, path: Path, reason: str, **kwargs: Any) -> "SummaryResult":
        return cls(Status.FAILED, path, reason=reason, **kwargs)


@dataclass
class PassStats:
    """Per-status counts for one pass."""

    produced: int = 0
    skipped: int = 0
    failed: int = 0

    def add(self, result: SummaryResult) -> None:
        if result.status is Status.PRODUCED:
            self.produced += 1
        elif result.status is Status.SKIPPED:
            self.skipped += 1
        else:
            self.failed += 1

    @property
    def total(self) -> int:
        return self.produced + self.skipped + self.failed


@dataclass
class RunResult:
    """Everything a run produced, for reporting and tests."""

    file_count: int = 0
    folder_count: int = 0
    files: PassStats = field(default_factory=PassStats)
    folders: PassStats = field(default_factory=PassStats)
    results: List[SummaryResult] = field(default_factory=list)
    dry_run: bool = False
