"""Per-folder unit of work: roll up child artifacts into a folder summary.

Runs in the output tree, after the file pass. A folder reads the artifacts
of its direct files and the ``summary.json`` of each direct sub-directory;
the scheduler guarantees those sub-directories were aggregated first.
Missing or unusable child artifacts shrink the evidence set, they never
abort the folder.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import List, Optional, Tuple

import aiofiles.os

from treedoc.config.defaults import ARTIFACT_SUFFIX, FOLDER_SUMMARY_FILENAME
from treedoc.llm.select import select_folder_model
from treedoc.persistence import atomic_write, read_text

from .context import RunContext
from .models import FileSummary, FolderSummary, SummaryResult
from .prompts import folder_summary_prompt
from .utils import folder_artifact_path, github_folder_url

logger = logging.getLogger(__name__)


class FolderAggregator:
    """Aggregates folders of the output tree against a shared ``RunContext``."""

    def __init__(self, context: RunContext):
        self.context = context
        self._ignore = context.output_ignore()

    async def _read_file_summary(self, path: Path) -> Optional[FileSummary]:
        try:
            raw = await read_text(path)
        except (OSError, UnicodeDecodeError) as e:
            logger.warning("Could not read %s: %s", path, e)
            return None
        if not raw:
            return None
        try:
            summary = FileSummary.from_dict(json.loads(raw))
        except (ValueError, KeyError, TypeError) as e:
            logger.warning("Skipped malformed artifact %s: %s", path, e)
            return None
        return summary if summary.summary else None

    async def _read_folder_summary(self, directory: Path) -> Optional[FolderSummary]:
        path = folder_artifact_path(directory)
        try:
            return FolderSummary.from_dict(json.loads(await read_text(path)))
        except (OSError, UnicodeDecodeError, ValueError, KeyError, TypeError) as e:
            logger.warning("Skipped: %s (%s)", directory, e)
            return None

    async def collect_evidence(self, folder_path: Path) -> Tuple[List[FileSummary], List[FolderSummary]]:
        """Child summaries of ``folder_path``, each list in entry-name order.

        Ignore patterns apply to sub-directories only; artifact names are not
        source names.
        """
        files: List[FileSummary] = []
        folders: List[FolderSummary] = []
        for name in sorted(await aiofiles.os.listdir(folder_path)):
            entry = folder_path / name
            if name == FOLDER_SUMMARY_FILENAME:
                continue
            if await aiofiles.os.path.isdir(entry):
                if self._ignore.matches(entry):
                    continue
                folder = await self._read_folder_summary(entry)
                if folder is not None:
                    folders.append(folder)
            elif name.endswith(ARTIFACT_SUFFIX):
                file = await self._read_file_summary(entry)
                if file is not None:
                    files.append(file)
        return files, folders

    async def aggregate(self, folder_path: Path) -> SummaryResult:
        ctx = self.context
        folder_path = Path(folder_path)

        try:
            files, folders = await self.collect_evidence(folder_path)
        except OSError as e:
            logger.warning("Could not list %s: %s", folder_path, e)
            return SummaryResult.failed(folder_path, f"listing failed: {e}")

        prompt = folder_summary_prompt(
            str(folder_path), ctx.project_name, files, folders, ctx.config.content_type
        )
        model = select_folder_model(ctx.registry)
        need = ctx.estimator.estimate(prompt)
        if not model.fits(need):
            logger.warning("Skipped folder %s | Length %d", folder_path, need)
            return SummaryResult.skipped(folder_path, f"no model fits {need} tokens", need=need)

        try:
            summary = await ctx.call(prompt, model.id)
        except Exception as e:
            logger.warning("Failed to get summary for folder %s: %s", folder_path, e)
            return SummaryResult.failed(folder_path, str(e) or type(e).__name__, model=model.id, need=need)

        record = FolderSummary(
            folder_name=folder_path.name,
            folder_path=str(folder_path),
            url=github_folder_url(ctx.config.repository_url, ctx.output_root, folder_path),
            files=files,
            folders=folders,
            summary=summary,
            questions="",
        )
        artifact = folder_artifact_path(folder_path)
        try:
            await atomic_write(artifact, record.to_json())
        except OSError as e:
            logger.warning("Could not write %s: %s", artifact, e)
            return SummaryResult.failed(folder_path, f"write failed: {e}", model=model.id, need=need)

        logger.info("Folder: %s => %s", folder_path.name, artifact)
        return SummaryResult.produced(folder_path, artifact, model.id, need=need)
