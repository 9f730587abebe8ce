#!/usr/bin/env python
from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path
from typing import List, Optional

from dotenv import load_dotenv
from rich.logging import RichHandler

from treedoc import __version__
from treedoc.cli.formatting.output import ConsoleOutput
from treedoc.config.settings import RunConfig, load_run_config, save_run_config
from treedoc.errors import TreedocError

logger = logging.getLogger(__name__)


def _repo_root() -> Path:
    return Path.cwd().resolve()


def configure_logging(verbose: bool = False) -> None:
    logging.basicConfig(
        level=logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(rich_tracebacks=True, show_path=False)],
    )
    # Keep the transport quiet; per-request lines are noise at INFO
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("treedoc").setLevel(logging.DEBUG if verbose else logging.INFO)


def _add_run_options(p: argparse.ArgumentParser) -> None:
    p.add_argument("root", nargs="?", help="Source tree to document (default: from config or .)")
    p.add_argument("--output", "-o", help="Output directory for JSON artifacts")
    p.add_argument("--name", help="Project name used in prompts")
    p.add_argument("--repository-url", help="Source-hosting URL used for links")
    p.add_argument(
        "--model",
        dest="llms",
        action="append",
        help="Model id, in priority order (repeatable)",
    )
    p.add_argument("--max-concurrent", type=int, help="Max LLM calls in flight (default: 25)")
    p.add_argument("--config", "-c", type=Path, help="Config file (default: ./treedoc.yaml)")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="treedoc",
        description="treedoc - hierarchical LLM documentation for source trees",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Debug logging")

    subparsers = parser.add_subparsers(dest="command", metavar="COMMAND")

    index_p = subparsers.add_parser("index", help="Generate documentation artifacts")
    _add_run_options(index_p)

    estimate_p = subparsers.add_parser("estimate", help="Estimate tokens and cost without calling an LLM")
    _add_run_options(estimate_p)

    init_p = subparsers.add_parser("init", help="Write a treedoc.yaml with the resolved settings")
    _add_run_options(init_p)
    init_p.add_argument("--force", action="store_true", help="Overwrite an existing config file")

    subparsers.add_parser("version", help="Show version")
    return parser


def _resolve_config(args: argparse.Namespace) -> RunConfig:
    return load_run_config(
        args.config,
        root=args.root,
        output=args.output,
        name=args.name,
        repository_url=args.repository_url,
        llms=args.llms,
        max_concurrent_calls=args.max_concurrent,
    )


def _run_init(args: argparse.Namespace, console: ConsoleOutput) -> int:
    target = args.config or _repo_root() / "treedoc.yaml"
    if target.exists() and not args.force:
        console.print_error(f"{target} already exists (use --force to overwrite)")
        return 1
    config = load_run_config(
        None,
        root=args.root,
        output=args.output,
        name=args.name,
        repository_url=args.repository_url,
        llms=args.llms,
        max_concurrent_calls=args.max_concurrent,
    )
    path = save_run_config(config, target)
    console.print_success(f"Wrote {path}")
    return 0


def _run_pipeline(args: argparse.Namespace, console: ConsoleOutput, dry_run: bool) -> int:
    from treedoc.doc_generation.generator import process_repository_async
    from treedoc.progress import ConsoleProgress

    config = _resolve_config(args)
    console.print_run_start(config, dry_run=dry_run)
    result = asyncio.run(
        process_repository_async(
            config,
            reporter=ConsoleProgress(console.console, estimate=dry_run),
            dry_run=dry_run,
        )
    )
    console.print_run_summary(result)
    # Per-item failures are reported above and do not change the exit code
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    load_dotenv(_repo_root() / ".env")
    configure_logging(args.verbose)

    console = ConsoleOutput()

    if args.command is None:
        parser.print_help()
        return 1
    if args.command == "version":
        console.print(f"treedoc v{__version__}")
        return 0

    try:
        if args.command == "init":
            return _run_init(args, console)
        if args.command == "index":
            return _run_pipeline(args, console, dry_run=False)
        if args.command == "estimate":
            return _run_pipeline(args, console, dry_run=True)
    except (TreedocError, NotADirectoryError) as e:
        console.print_error(str(e))
        return 1

    parser.print_help()
    return 1


if __name__ == "__main__":
    sys.exit(main())
