# src/main.py — v2
"""CLI entry point: generate, fingerprint, history, show, save commands.

Usage:
    adpulse generate <rows.json> [--campaign NAME] [--days 7] [--force]
    adpulse fingerprint <rows.json> [--campaign NAME] [--days 7]
    adpulse history <fingerprint>
    adpulse show <fingerprint> [--day YYYY-MM-DD]
    adpulse save <fingerprint> <file> [--token TOKEN]
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from datetime import date, timedelta
from pathlib import Path

from pydantic import TypeAdapter, ValidationError

from adpulse.version import __version__

logger = logging.getLogger(__name__)


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    if not hasattr(args, "func"):
        parser.print_help()
        return 1

    from adpulse.config.settings import ConfigurationError, Settings
    from adpulse.core.errors import AnalysisPipelineError
    from adpulse.logging.logger import setup_logging

    try:
        settings = Settings()
    except (ConfigurationError, ValidationError) as exc:
        print(f"Configuration error: {exc}", file=sys.stderr)
        return 2

    setup_logging("DEBUG" if args.verbose else settings.log_level, settings.log_format)

    try:
        return asyncio.run(args.func(args, settings))
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        return 130
    except AnalysisPipelineError as exc:
        logger.error("%s", exc, exc_info=args.verbose)
        return 1


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="adpulse",
        description=f"adpulse v{__version__} - weekly AI campaign analysis",
    )
    parser.add_argument(
        "--version", action="version", version=f"%(prog)s {__version__}",
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true",
        help="Enable debug logging",
    )

    subparsers = parser.add_subparsers(dest="command")

    # --- generate ---
    p_generate = subparsers.add_parser(
        "generate", help="Get (or generate) this week's analysis for a rows file",
    )
    _add_rows_arguments(p_generate)
    p_generate.add_argument(
        "--force", action="store_true",
        help="Ignore the cache and generate a new analysis",
    )
    p_generate.set_defaults(func=_cmd_generate)

    # --- fingerprint ---
    p_fp = subparsers.add_parser(
        "fingerprint", help="Print the cache fingerprint for a rows file",
    )
    _add_rows_arguments(p_fp)
    p_fp.set_defaults(func=_cmd_fingerprint)

    # --- history ---
    p_history = subparsers.add_parser(
        "history", help="List stored analyses over the trailing window",
    )
    p_history.add_argument("fingerprint", help="Dataset fingerprint")
    p_history.set_defaults(func=_cmd_history)

    # --- show ---
    p_show = subparsers.add_parser("show", help="Print a stored analysis")
    p_show.add_argument("fingerprint", help="Dataset fingerprint")
    p_show.add_argument(
        "--day", type=date.fromisoformat, default=None,
        help="Day to read (YYYY-MM-DD, default: today)",
    )
    p_show.set_defaults(func=_cmd_show)

    # --- save ---
    p_save = subparsers.add_parser(
        "save", help="Overwrite today's analysis with the contents of a file",
    )
    p_save.add_argument("fingerprint", help="Dataset fingerprint")
    p_save.add_argument("file", type=Path, help="Text file with the edited analysis")
    p_save.add_argument("--token", default=None, help="Editor token")
    p_save.set_defaults(func=_cmd_save)

    return parser


def _add_rows_arguments(p: argparse.ArgumentParser) -> None:
    p.add_argument("rows", type=Path, help="JSON array of parsed campaign rows")
    p.add_argument("--campaign", default=None, help="Restrict to one campaign")
    p.add_argument(
        "--days", type=int, default=7,
        help="Length of the current period ending at the latest row (default: 7)",
    )


async def _cmd_generate(args: argparse.Namespace, settings) -> int:
    from adpulse.api.facade import create_analysis_service
    from adpulse.cache.fingerprint import fingerprint_for_records

    loaded = _load_rows(args)
    if loaded is None:
        return 1
    current, historical = loaded
    fingerprint = fingerprint_for_records(current, args.campaign)

    service = create_analysis_service(settings)
    try:
        result = await service.ensure_analysis(
            current, historical, fingerprint, force_refresh=args.force
        )
    finally:
        await service.aclose()

    source = "cache" if result.was_cached else (result.backend_id or "none")
    print(f"# {fingerprint} ({source}, {result.generated_at.isoformat()})\n")
    print(result.text)
    if not result.persisted and not result.was_cached:
        print("\n(warning: analysis could not be saved to the cache)", file=sys.stderr)
    return 0


async def _cmd_fingerprint(args: argparse.Namespace, settings) -> int:
    from adpulse.cache.fingerprint import fingerprint_for_records

    loaded = _load_rows(args)
    if loaded is None:
        return 1
    current, _ = loaded
    print(fingerprint_for_records(current, args.campaign))
    return 0


async def _cmd_history(args: argparse.Namespace, settings) -> int:
    from adpulse.api.facade import create_analysis_service

    service = create_analysis_service(settings)
    try:
        items = await service.list_history(args.fingerprint)
    finally:
        await service.aclose()

    if not items:
        print("No stored analyses.")
        return 0
    for item in items:
        marker = " (editable)" if service.history.is_editable(item.day) else ""
        print(f"{item.day.isoformat()}  {item.generated_at.isoformat()}{marker}")
    return 0


async def _cmd_show(args: argparse.Namespace, settings) -> int:
    from adpulse.api.facade import create_analysis_service

    service = create_analysis_service(settings)
    try:
        text = await service.read_by_day(args.fingerprint, args.day)
    finally:
        await service.aclose()

    if text is None:
        print("Not found.", file=sys.stderr)
        return 1
    print(text)
    return 0


async def _cmd_save(args: argparse.Namespace, settings) -> int:
    from adpulse.api.facade import create_analysis_service

    file_path: Path = args.file
    if not file_path.exists():
        logger.error("File not found: %s", file_path)
        return 1

    service = create_analysis_service(settings)
    try:
        entry = await service.save_edit(
            args.fingerprint, file_path.read_text(encoding="utf-8"), token=args.token
        )
    except ValueError as exc:
        logger.error("%s", exc)
        return 1
    finally:
        await service.aclose()

    print(f"Saved analysis for {entry.fingerprint} on {entry.day.isoformat()}")
    return 0


def _load_rows(args: argparse.Namespace):
    """Return (current, historical) records, or None if the file is unusable."""
    from adpulse.analysis.models import CampaignRecord

    rows_path: Path = args.rows
    if not rows_path.exists():
        logger.error("File not found: %s", rows_path)
        return None

    try:
        records = TypeAdapter(list[CampaignRecord]).validate_json(rows_path.read_bytes())
    except ValidationError as exc:
        logger.error("Invalid rows file %s: %s", rows_path, exc)
        return None
    if args.campaign:
        records = [r for r in records if r.campaign == args.campaign]
    if not records:
        return [], []

    end = max(r.date for r in records)
    start = end - timedelta(days=args.days - 1)
    current = [r for r in records if start <= r.date <= end]
    return current, records


if __name__ == "__main__":
    sys.exit(main())
