"""Documentation generation package."""

from .context import RunContext
from .file_summarizer import FileSummarizer
from .folder_aggregator import FolderAggregator
from .generator import (
    aggregate_folders,
    count_work,
    process_repository,
    process_repository_async,
    summarize_files,
)
from .models import FileSummary, FolderSummary, RunResult, Status, SummaryResult
from .traversal import DirectoryNode, IgnorePolicy, run_post_order

__all__ = [
    "aggregate_folders",
    "count_work",
    "process_repository",
    "process_repository_async",
    "summarize_files",
    "DirectoryNode",
    "FileSummarizer",
    "FileSummary",
    "FolderAggregator",
    "FolderSummary",
    "IgnorePolicy",
    "RunContext",
    "RunResult",
    "Status",
    "SummaryResult",
    "run_post_order",
]
