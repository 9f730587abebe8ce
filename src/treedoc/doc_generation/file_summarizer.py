"""Per-file unit of work: summary + questions for one source file."""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path

from treedoc.llm.select import select_model
from treedoc.persistence import atomic_write, ensure_dir, read_text

from .context import RunContext
from .models import FileSummary, SummaryResult
from .prompts import create_code_file_summary, create_code_questions
from .utils import artifact_path_for, github_file_url, rel_path_for_display

logger = logging.getLogger(__name__)


class FileSummarizer:
    """Summarizes single files against a shared ``RunContext``.

    Every failure is contained in the returned ``SummaryResult``; nothing
    raised here reaches sibling files or the orchestrator.
    """

    def __init__(self, context: RunContext, *, dry_run: bool = False):
        self.context = context
        self.dry_run = dry_run

    async def summarize(self, file_path: Path) -> SummaryResult:
        ctx = self.context
        config = ctx.config
        file_path = Path(file_path)
        file_name = file_path.name
        rel = rel_path_for_display(ctx.input_root, file_path)

        try:
            content = await read_text(file_path)
        except (OSError, UnicodeDecodeError) as e:
            logger.warning("Could not read %s: %s", file_path, e)
            return SummaryResult.failed(file_path, f"read failed: {e}")

        artifact = artifact_path_for(ctx.input_root, ctx.output_root, file_path)
        if not self.dry_run:
            try:
                await ensure_dir(artifact.parent)
            except OSError as e:
                logger.warning("Could not create %s: %s", artifact.parent, e)
                return SummaryResult.failed(file_path, f"mkdir failed: {e}")

        summary_prompt = create_code_file_summary(
            rel, ctx.project_name, content, config.content_type
        )
        questions_prompt = create_code_questions(
            rel, ctx.project_name, content, config.content_type, config.target_audience
        )
        summary_tokens = ctx.estimator.estimate(summary_prompt)
        question_tokens = ctx.estimator.estimate(questions_prompt)
        need = max(summary_tokens, question_tokens)
        input_tokens = summary_tokens + question_tokens

        model = select_model(ctx.registry, need)
        if model is None:
            logger.warning("Skipped %s | Length %d", rel, need)
            return SummaryResult.skipped(file_path, f"no model fits {need} tokens", need=need)

        if self.dry_run:
            model.record_success(input_tokens, config.output_tokens_per_file)
            return SummaryResult.produced(file_path, None, model.id, need=need, reason="dry run")

        summary, questions = await asyncio.gather(
            ctx.call(summary_prompt, model.id),
            ctx.call(questions_prompt, model.id),
            return_exceptions=True,
        )
        error = next((r for r in (summary, questions) if isinstance(r, BaseException)), None)
        if error is not None:
            if not isinstance(error, Exception):
                raise error
            logger.warning("Failed to get summary for file %s: %s", rel, error)
            model.record_failure()
            return SummaryResult.failed(file_path, str(error) or type(error).__name__, model=model.id, need=need)

        record = FileSummary(
            file_name=file_name,
            file_path=rel,
            url=github_file_url(ctx.config.repository_url, ctx.input_root, file_path),
            summary=summary,
            questions=questions,
        )
        try:
            await atomic_write(artifact, record.to_json())
        except OSError as e:
            logger.warning("Could not write %s for %s: %s", artifact, rel, e)
            model.record_failure()
            return SummaryResult.failed(file_path, f"write failed: {e}", model=model.id, need=need)

        logger.info("File: %s => %s", file_name, artifact)
        model.record_success(input_tokens, config.output_tokens_per_file)

        if not record.summary:
            return SummaryResult.skipped(
                file_path, "empty summary", model=model.id, artifact=artifact, need=need
            )
        return SummaryResult.produced(file_path, artifact, model.id, need=need)
