"""Directory traversal: ignore policy, file discovery and post-order folder scheduling.

The folder pass reads artifacts that child folders wrote, so a folder may
only be visited after every one of its sub-directories has finished.
``run_post_order`` makes that dependency explicit: each directory gets its
own task, and that task waits on its children's tasks before visiting.
Siblings run concurrently.
"""

from __future__ import annotations

import asyncio
import fnmatch
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, AsyncIterator, Awaitable, Callable, Iterable, Iterator, List, Optional, Tuple

import aiofiles
import aiofiles.os

from treedoc.config.defaults import BINARY_PROBE_BYTES

logger = logging.getLogger(__name__)


class IgnorePolicy:
    """Glob patterns matched against an entry's name and its root-relative path."""

    def __init__(self, patterns: Iterable[str], root: Path):
        self.patterns = list(patterns)
        self.root = Path(root)

    def matches(self, path: Path) -> bool:
        path = Path(path)
        try:
            rel = path.relative_to(self.root).as_posix()
        except ValueError:
            rel = path.as_posix()
        if rel in ("", "."):
            return False
        return any(
            fnmatch.fnmatch(path.name, pattern) or fnmatch.fnmatch(rel, pattern)
            for pattern in self.patterns
        )

    def __call__(self, path: Path) -> bool:
        return self.matches(path)

    def __repr__(self) -> str:
        return f"IgnorePolicy({self.patterns!r}, root={str(self.root)!r})"


async def is_text_file(path: Path) -> bool:
    """Probe the head of ``path`` for NUL bytes (binary indicator)."""
    try:
        async with aiofiles.open(path, "rb") as f:
            chunk = await f.read(BINARY_PROBE_BYTES)
    except OSError as e:
        logger.debug("Could not probe %s: %s", path, e)
        return False
    return b"\x00" not in chunk


async def _list_dir(directory: Path) -> Tuple[List[Path], List[Path]]:
    """Return (files, sub-directories) of ``directory``, each sorted by name.

    Symlinked directories are not followed.
    """
    names = sorted(await aiofiles.os.listdir(directory))
    files: List[Path] = []
    dirs: List[Path] = []
    for name in names:
        entry = directory / name
        if await aiofiles.os.path.isdir(entry):
            if await aiofiles.os.path.islink(entry):
                logger.debug("Skip symlinked directory %s", entry)
                continue
            dirs.append(entry)
        elif await aiofiles.os.path.isfile(entry):
            files.append(entry)
    return files, dirs


async def walk(
    root: Path,
    ignore: IgnorePolicy,
    exclude: Iterable[Path] = (),
) -> AsyncIterator[Tuple[Path, List[Path], List[Path]]]:
    """Top-down walk yielding ``(directory, files, sub_directories)``.

    Ignored entries and anything under ``exclude`` are pruned. Unreadable
    directories are logged and skipped. Each directory is yielded once,
    keyed by its resolved path.
    """
    excluded = {Path(p).resolve() for p in exclude}
    seen = {Path(root).resolve()}
    pending = [Path(root)]
    while pending:
        directory = pending.pop(0)
        try:
            files, dirs = await _list_dir(directory)
        except OSError as e:
            logger.warning("Skip unreadable directory %s: %s", directory, e)
            continue
        files = [f for f in files if not ignore.matches(f)]
        kept = []
        for d in dirs:
            resolved = d.resolve()
            if ignore.matches(d) or resolved in excluded:
                continue
            if resolved in seen:
                logger.debug("Skip already visited directory %s", d)
                continue
            seen.add(resolved)
            kept.append(d)
        dirs = kept
        yield directory, files, dirs
        pending.extend(dirs)


async def collect_files(
    root: Path,
    ignore: IgnorePolicy,
    exclude: Iterable[Path] = (),
) -> List[Path]:
    """Every non-ignored text file under ``root``."""
    found: List[Path] = []
    async for _, files, _ in walk(root, ignore, exclude):
        for f in files:
            if await is_text_file(f):
                found.append(f)
            else:
                logger.debug("Skip binary file %s", f)
    return found


async def count_files(root: Path, ignore: IgnorePolicy, exclude: Iterable[Path] = ()) -> int:
    return len(await collect_files(root, ignore, exclude))


async def count_folders(root: Path, ignore: IgnorePolicy, exclude: Iterable[Path] = ()) -> int:
    count = 0
    async for _ in walk(root, ignore, exclude):
        count += 1
    return count


@dataclass
class DirectoryNode:
    """One directory and its (non-ignored) sub-directories."""

    path: Path
    children: List["DirectoryNode"] = field(default_factory=list)

    @property
    def name(self) -> str:
        return self.path.name

    def iter_post_order(self) -> Iterator["DirectoryNode"]:
        """Children before parents; siblings in name order."""
        for child in self.children:
            yield from child.iter_post_order()
        yield self

    def __len__(self) -> int:
        return sum(1 for _ in self.iter_post_order())


async def build_directory_tree(root: Path, ignore: IgnorePolicy) -> DirectoryNode:
    """Directory tree under ``root``; an absent root is an empty tree."""
    root = Path(root)
    nodes: dict[Path, DirectoryNode] = {}
    tree = DirectoryNode(root)
    nodes[root] = tree
    if not await aiofiles.os.path.isdir(root):
        return tree
    async for directory, _, dirs in walk(root, ignore):
        parent = nodes[directory]
        for d in dirs:
            child = DirectoryNode(d)
            nodes[d] = child
            parent.children.append(child)
    return tree


async def run_post_order(
    root: DirectoryNode,
    visit: Callable[[DirectoryNode], Awaitable[Any]],
    on_done: Optional[Callable[[DirectoryNode, Any], None]] = None,
) -> List[Tuple[DirectoryNode, Any]]:
    """Visit every node of ``root`` once all of its children have been visited.

    A visit that raises is logged; its parent still runs. Returns
    ``(node, result)`` pairs in post-order, where ``result`` is the visit's
    return value or the exception it raised.
    """
    tasks: dict[Path, asyncio.Task] = {}
    order: List[DirectoryNode] = []

    async def _visit_after(node: DirectoryNode, deps: List[asyncio.Task]) -> Any:
        if deps:
            await asyncio.wait(deps)
        try:
            result = await visit(node)
        except Exception as e:
            logger.warning("Folder visit failed for %s: %s", node.path, e)
            result = e
        if on_done is not None:
            on_done(node, result)
        return result

    for node in root.iter_post_order():
        deps = [tasks[child.path] for child in node.children]
        tasks[node.path] = asyncio.create_task(
            _visit_after(node, deps), name=f"folder:{os.fspath(node.path)}"
        )
        order.append(node)

    await asyncio.gather(*tasks.values())
    return [(node, tasks[node.path].result()) for node in order]
