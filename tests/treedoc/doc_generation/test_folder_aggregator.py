"""Tests for folder aggregation in the output tree."""

import json

import pytest

from treedoc.config.defaults import DEFAULT_IGNORE_PATTERNS
from treedoc.doc_generation.folder_aggregator import FolderAggregator
from treedoc.doc_generation.models import FileSummary, FolderSummary, Status


def _write_file_artifact(folder, name, summary="Does things."):
    folder.mkdir(parents=True, exist_ok=True)
    record = FileSummary(name + ".py", name + ".py", "", summary, "Q")
    (folder / f"{name}.json").write_text(record.to_json())


def _write_folder_artifact(folder, summary="Nested stuff."):
    folder.mkdir(parents=True, exist_ok=True)
    record = FolderSummary(folder.name, str(folder), "", [], [], summary)
    (folder / "summary.json").write_text(record.to_json())


class TestFolderAggregator:
    """Tests for FolderAggregator."""

    @pytest.mark.asyncio
    async def test_aggregates_files_and_subfolders(self, make_context, source_tree, fake_llm):
        ctx = make_context(source_tree, repository_url="https://github.com/acme/demo")
        out = ctx.output_root
        _write_file_artifact(out, "b")
        _write_file_artifact(out, "a")
        _write_folder_artifact(out / "sub")

        result = await FolderAggregator(ctx).aggregate(out)

        assert result.status is Status.PRODUCED
        data = json.loads((out / "summary.json").read_text())
        assert data["folderName"] == out.name
        assert data["folderPath"] == str(out)
        assert data["url"] == "https://github.com/acme/demo/tree/master"
        assert [f["fileName"] for f in data["files"]] == ["a.py", "b.py"]
        assert [f["folderPath"] for f in data["folders"]] == [str(out / "sub")]
        assert data["summary"] == "A generated summary."
        assert data["questions"] == ""
        (prompt, model), = fake_llm.calls
        assert model == "m0"
        assert "Summary: Nested stuff." in prompt

    @pytest.mark.asyncio
    async def test_uses_largest_model(self, make_context, registry_factory, source_tree, fake_llm):
        ctx = make_context(source_tree, registry=registry_factory(50_000, 100_000, 70_000))
        _write_file_artifact(ctx.output_root, "a")

        result = await FolderAggregator(ctx).aggregate(ctx.output_root)

        assert result.model == "m1"
        assert fake_llm.calls[0][1] == "m1"

    @pytest.mark.asyncio
    async def test_does_not_touch_model_counters(self, make_context, source_tree):
        ctx = make_context(source_tree)
        _write_file_artifact(ctx.output_root, "a")

        await FolderAggregator(ctx).aggregate(ctx.output_root)

        record = ctx.registry.get("m0")
        assert (record.total, record.succeeded, record.failed) == (0, 0, 0)

    @pytest.mark.asyncio
    async def test_unusable_evidence_is_dropped(self, make_context, source_tree):
        ctx = make_context(source_tree)
        out = ctx.output_root
        _write_file_artifact(out, "good")
        _write_file_artifact(out, "blank", summary="")
        (out / "empty.json").write_text("")
        (out / "broken.json").write_text("{not json")
        (out / "notes.txt").write_text("not an artifact")
        # Sub-directory whose aggregation never produced a summary
        (out / "nosummary").mkdir()

        files, folders = await FolderAggregator(ctx).collect_evidence(out)

        assert [f.file_name for f in files] == ["good.py"]
        assert folders == []

    @pytest.mark.asyncio
    async def test_previous_summary_is_not_evidence(self, make_context, source_tree):
        ctx = make_context(source_tree)
        out = ctx.output_root
        _write_file_artifact(out, "a")
        _write_folder_artifact(out, summary="stale")

        files, folders = await FolderAggregator(ctx).collect_evidence(out)

        assert [f.file_name for f in files] == ["a.py"]
        assert folders == []

    @pytest.mark.asyncio
    async def test_evidence_is_deterministic(self, make_context, source_tree):
        ctx = make_context(source_tree)
        out = ctx.output_root
        for name in ("c", "a", "b"):
            _write_file_artifact(out, name)
            _write_folder_artifact(out / f"dir_{name}")
        aggregator = FolderAggregator(ctx)

        first = await aggregator.collect_evidence(out)
        second = await aggregator.collect_evidence(out)

        assert first == second
        assert [f.file_name for f in first[0]] == ["a.py", "b.py", "c.py"]
        assert [f.folder_name for f in first[1]] == ["dir_a", "dir_b", "dir_c"]

    @pytest.mark.asyncio
    async def test_artifact_names_are_not_matched_against_ignore(self, make_context, source_tree):
        ctx = make_context(source_tree, ignore=list(DEFAULT_IGNORE_PATTERNS))
        out = ctx.output_root
        _write_file_artifact(out, "mypackage")
        _write_folder_artifact(out / "node_modules")

        files, folders = await FolderAggregator(ctx).collect_evidence(out)

        assert [f.file_name for f in files] == ["mypackage.py"]
        assert folders == []

    @pytest.mark.asyncio
    async def test_empty_folder_still_summarized(self, make_context, source_tree, fake_llm):
        ctx = make_context(source_tree)
        ctx.output_root.mkdir()

        result = await FolderAggregator(ctx).aggregate(ctx.output_root)

        assert result.status is Status.PRODUCED
        assert "(none)" in fake_llm.calls[0][0]

    @pytest.mark.asyncio
    async def test_oversized_prompt_is_skipped(self, make_context, registry_factory, source_tree, fake_llm):
        ctx = make_context(source_tree, registry=registry_factory(20))
        _write_file_artifact(ctx.output_root, "a")

        result = await FolderAggregator(ctx).aggregate(ctx.output_root)

        assert result.status is Status.SKIPPED
        assert fake_llm.calls == []
        assert not (ctx.output_root / "summary.json").exists()

    @pytest.mark.asyncio
    async def test_rejected_call_fails_without_artifact(self, make_context, llm_factory, source_tree):
        ctx = make_context(source_tree, client=llm_factory(fail_on=("documenting the folder",)))
        _write_file_artifact(ctx.output_root, "a")

        result = await FolderAggregator(ctx).aggregate(ctx.output_root)

        assert result.status is Status.FAILED
        assert not (ctx.output_root / "summary.json").exists()

    @pytest.mark.asyncio
    async def test_missing_folder_fails(self, make_context, source_tree):
        ctx = make_context(source_tree)

        result = await FolderAggregator(ctx).aggregate(ctx.output_root / "gone")

        assert result.status is Status.FAILED
