"""Documentation pipeline orchestrator.

Three passes, always in this order:

1. count files and folders of the input tree (progress totals only)
2. summarize every non-ignored file of the input tree
3. aggregate every folder of the output tree, children before parents

then a usage report over every model in the registry.
"""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import Iterable, List, Optional, Tuple

from treedoc.config.settings import RunConfig
from treedoc.llm import LLMClient
from treedoc.llm.openai import OpenAIChatClient
from treedoc.llm.ratelimit import RateLimitedInvoker
from treedoc.llm.registry import ModelRegistry
from treedoc.progress import ProgressReporter, Reporter, SafeReporter
from treedoc.token_estimator import TokenEstimator, get_token_estimator

from .context import RunContext
from .file_summarizer import FileSummarizer
from .folder_aggregator import FolderAggregator
from .models import RunResult, SummaryResult
from .traversal import (
    DirectoryNode,
    IgnorePolicy,
    build_directory_tree,
    collect_files,
    count_files,
    count_folders,
    run_post_order,
)

logger = logging.getLogger(__name__)


def _input_excludes(config: RunConfig) -> List[Path]:
    """Keep the output tree out of the input walk when it is nested inside it."""
    root = config.root.resolve()
    output = config.output.resolve()
    if output == root or root in output.parents:
        return [output]
    return []


async def count_work(
    root: Path,
    ignore: IgnorePolicy,
    exclude: Iterable[Path] = (),
) -> Tuple[int, int]:
    """(files, folders) under ``root``; no side effects beyond listing."""
    exclude = list(exclude)
    files, folders = await asyncio.gather(
        count_files(root, ignore, exclude),
        count_folders(root, ignore, exclude),
    )
    return files, folders


async def summarize_files(
    context: RunContext,
    paths: Iterable[Path],
    *,
    dry_run: bool = False,
) -> List[SummaryResult]:
    """File pass: every file in parallel; returns once all of them settled."""
    summarizer = FileSummarizer(context, dry_run=dry_run)
    paths = list(paths)
    settled = await asyncio.gather(
        *(summarizer.summarize(p) for p in paths),
        return_exceptions=True,
    )
    results: List[SummaryResult] = []
    for path, outcome in zip(paths, settled):
        if isinstance(outcome, SummaryResult):
            results.append(outcome)
        elif isinstance(outcome, Exception):
            logger.warning("Failed to process file %s: %s", path, outcome)
            results.append(SummaryResult.failed(path, str(outcome) or type(outcome).__name__))
        else:
            raise outcome
    return results


async def aggregate_folders(context: RunContext, tree: DirectoryNode) -> List[SummaryResult]:
    """Folder pass over ``tree`` in dependency order (post-order)."""
    aggregator = FolderAggregator(context)
    visited = await run_post_order(tree, lambda node: aggregator.aggregate(node.path))
    results: List[SummaryResult] = []
    for node, outcome in visited:
        if isinstance(outcome, SummaryResult):
            results.append(outcome)
        else:
            results.append(SummaryResult.failed(node.path, str(outcome) or type(outcome).__name__))
    return results


async def process_repository_async(
    config: RunConfig,
    *,
    client: Optional[LLMClient] = None,
    registry: Optional[ModelRegistry] = None,
    estimator: Optional[TokenEstimator] = None,
    invoker: Optional[RateLimitedInvoker] = None,
    reporter: Optional[Reporter] = None,
    dry_run: bool = False,
) -> RunResult:
    """
    Document ``config.root`` into ``config.output``.

    Per-file and per-folder failures are logged and counted, never raised.
    With ``dry_run`` the file pass only estimates and selects models (usage
    is booked as if every call succeeded), no LLM is called and nothing is
    written; the folder pass is skipped.

    Raises:
        NotADirectoryError: If ``config.root`` is not a directory.
    """
    root = Path(config.root)
    if not root.is_dir():
        raise NotADirectoryError(f"Input root not found: {root}")

    registry = registry or ModelRegistry.from_ids(config.llms)
    estimator = estimator or get_token_estimator(config.tokenizer)
    invoker = invoker or RateLimitedInvoker(config.max_concurrent_calls)
    progress = SafeReporter(reporter or ProgressReporter())

    owned_client: Optional[OpenAIChatClient] = None
    if client is None:
        if dry_run:
            client = _no_calls
        else:
            owned_client = OpenAIChatClient()
            client = owned_client

    context = RunContext(
        config=config,
        registry=registry,
        estimator=estimator,
        invoker=invoker,
        client=client,
    )
    input_ignore = context.input_ignore()
    exclude = _input_excludes(config)

    try:
        file_count, folder_count = await count_work(root, input_ignore, exclude)
        result = RunResult(file_count=file_count, folder_count=folder_count, dry_run=dry_run)

        files_message = f"Processing {file_count} files..."
        progress.update(files_message)
        paths = await collect_files(root, input_ignore, exclude)
        for file_result in await summarize_files(context, paths, dry_run=dry_run):
            result.files.add(file_result)
            result.results.append(file_result)
        progress.succeed(files_message)

        if not dry_run:
            folders_message = f"Processing {folder_count} folders..."
            progress.update(folders_message)
            tree = await build_directory_tree(config.output, context.output_ignore())
            for folder_result in await aggregate_folders(context, tree):
                result.folders.add(folder_result)
                result.results.append(folder_result)
            progress.succeed(folders_message)
    finally:
        progress.stop()
        if owned_client is not None:
            await owned_client.aclose()

    logger.info(
        "Files: %d produced, %d skipped, %d failed; folders: %d produced, %d skipped, %d failed",
        result.files.produced,
        result.files.skipped,
        result.files.failed,
        result.folders.produced,
        result.folders.skipped,
        result.folders.failed,
    )
    progress.report(list(registry))
    return result


async def _no_calls(prompt: str, model: str) -> str:
    raise RuntimeError("LLM calls are disabled in a dry run")


def process_repository(config: RunConfig, **kwargs) -> RunResult:
    """Sync wrapper for ``process_repository_async``."""
    return asyncio.run(process_repository_async(config, **kwargs))
