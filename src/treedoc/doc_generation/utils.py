"""Helper functions for doc_generation: artifact paths and source-hosting links."""

from __future__ import annotations

import os
from pathlib import Path, PurePosixPath
from typing import Union

from treedoc.config.defaults import ARTIFACT_SUFFIX, FOLDER_SUMMARY_FILENAME

StrPath = Union[str, os.PathLike]

_DEFAULT_BRANCH = "master"


def _rel_posix(root: StrPath, path: StrPath) -> str:
    """``path`` relative to ``root`` as a POSIX string ("" for the root itself)."""
    rel = Path(os.path.relpath(Path(path), Path(root)))
    if rel == Path("."):
        return ""
    return PurePosixPath(*rel.parts).as_posix()


def rel_path_for_display(root: StrPath, path: StrPath) -> str:
    return _rel_posix(root, path) or "."


def github_file_url(repository_url: str, input_root: StrPath, file_path: StrPath) -> str:
    """Link to a file on the source-hosting site; empty when no repository is configured."""
    if not repository_url:
        return ""
    return f"{repository_url.rstrip('/')}/blob/{_DEFAULT_BRANCH}/{_rel_posix(input_root, file_path)}"


def github_folder_url(repository_url: str, root: StrPath, folder_path: StrPath) -> str:
    """Link to a folder; ``root`` is whichever tree ``folder_path`` lives in."""
    if not repository_url:
        return ""
    base = f"{repository_url.rstrip('/')}/tree/{_DEFAULT_BRANCH}"
    rel = _rel_posix(root, folder_path)
    return f"{base}/{rel}" if rel else base


def artifact_name(file_name: str) -> str:
    """Artifact file name for a source file: its extension replaced by ``.json``.

    A name that would land on the reserved folder artifact keeps its full
    source name instead (``summary.py`` -> ``summary.py.json``).
    """
    path = PurePosixPath(file_name)
    name = path.with_suffix(ARTIFACT_SUFFIX).name if path.suffix else path.name + ARTIFACT_SUFFIX
    if name == FOLDER_SUMMARY_FILENAME:
        name = file_name + ARTIFACT_SUFFIX
        if name == FOLDER_SUMMARY_FILENAME:
            name += ARTIFACT_SUFFIX
    return name


def artifact_path_for(input_root: Path, output_root: Path, file_path: Path) -> Path:
    """Where the artifact of ``file_path`` lives in the output tree."""
    rel = Path(os.path.relpath(file_path, input_root))
    return output_root / rel.parent / artifact_name(rel.name)


def folder_artifact_path(folder_path: Path) -> Path:
    return folder_path / FOLDER_SUMMARY_FILENAME
