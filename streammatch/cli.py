"""
streammatch - catalog matching and renaming

Command line front end for the matching engine.
"""
import argparse
import json
import logging
import sys
from pathlib import Path

from .config import Settings
from .errors import StreamMatchError
from .manager import StreamManager
from .models import PendingRename
from .parser import parse_filename

LOG_FORMAT = "[%(asctime)s] %(levelname)s: %(message)s"


def setup_logging(verbose: bool = False, log_file: Path | None = None) -> None:
    """Log to stderr and, when given, append to *log_file*."""
    handlers: list[logging.Handler] = [logging.StreamHandler()]
    if log_file is not None:
        handlers.append(logging.FileHandler(log_file, encoding="utf-8"))
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format=LOG_FORMAT,
        handlers=handlers,
        force=True,
    )


def print_json(data) -> None:
    print(json.dumps(data, indent=2, ensure_ascii=False))


def review_pending(manager: StreamManager, items: list[PendingRename]) -> None:
    """Ask the operator to approve or reject each AI suggestion."""
    for item in items:
        print()
        print(f"  {item.original_name}")
        print(f"  -> {item.suggested_name}")
        while True:
            choice = input("Approve? (y/n/s=skip): ").strip().lower()
            if choice in ("y", "yes"):
                if manager.approve_rename(item.id):
                    print("  [OK] renamed")
                else:
                    print("  [ERROR] rename failed, left pending")
                break
            if choice in ("n", "no"):
                manager.reject_rename(item.id)
                print("  [REJECTED]")
                break
            if choice in ("s", "skip"):
                break
            print("Please enter 'y', 'n' or 's'.")


def cmd_parse(args: argparse.Namespace) -> int:
    results = []
    for name in args.names:
        parsed = parse_filename(name)
        results.append({"input": name, "parsed": parsed.to_dict() if parsed else None})
    print_json(results)
    return 0 if all(r["parsed"] for r in results) else 1


def cmd_match(args: argparse.Namespace, manager: StreamManager) -> int:
    if not args.slug and not args.id:
        print("Error: give --slug and/or --id")
        return 2
    result = manager.match_stream(args.slug, args.id)
    print_json(result.to_dict())
    return 0 if result.success else 1


def cmd_rename(args: argparse.Namespace, manager: StreamManager) -> int:
    ctx = manager.run_rename_batch(background=False)
    state = ctx.state

    print("-" * 50)
    print(state.status)
    for failure in state.failures:
        print(f"  [FAILED] {failure.name}: {failure.reason}")

    pending = manager.pending_ai_renames()
    if pending and args.review:
        review_pending(manager, pending)
    elif pending:
        print(f"{len(pending)} AI suggestion(s) need approval; rerun with --review")
    if state.status.startswith("Error"):
        return 1
    return 0 if not state.failures else 1


def cmd_duplicates(args: argparse.Namespace, manager: StreamManager) -> int:
    ctx = manager.scan_duplicates(background=False)
    print_json([group.to_dict() for group in ctx.state.results])
    return 0


def cmd_episodes(args: argparse.Namespace, manager: StreamManager) -> int:
    report = manager.series_report()
    for series in report.values():
        for season in series["seasons"].values():
            season["episodes"] = [e.to_dict() for e in season["episodes"]]
    print_json(report)
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="streammatch",
        description="Match and rename videos in a remote catalog using TMDB metadata."
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Show detailed debug information"
    )
    parser.add_argument(
        "--log-file",
        type=Path,
        default=None,
        help="Also append log lines to this file"
    )
    sub = parser.add_subparsers(dest="command", required=True)

    p_parse = sub.add_parser("parse", help="Parse names offline")
    p_parse.add_argument("names", nargs="+", help="Filenames or slugs")

    p_match = sub.add_parser("match", help="Find the catalog video for a request")
    p_match.add_argument("--slug", help="Requested title slug")
    p_match.add_argument("--id", help="TMDB id")

    p_rename = sub.add_parser("rename", help="Rename the whole catalog")
    p_rename.add_argument(
        "--review",
        action="store_true",
        help="Approve or reject AI suggestions after the batch"
    )

    sub.add_parser("duplicates", help="List duplicate videos")
    sub.add_parser("episodes", help="Report missing episodes of tagged series")
    return parser


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    args = build_parser().parse_args(argv)

    if args.command == "parse":
        setup_logging(args.verbose, args.log_file)
        return cmd_parse(args)

    settings = Settings.from_env()
    setup_logging(args.verbose, args.log_file or settings.log_file)

    try:
        manager = StreamManager.from_settings(settings)
        if args.command == "match":
            return cmd_match(args, manager)
        if args.command == "rename":
            return cmd_rename(args, manager)
        if args.command == "duplicates":
            return cmd_duplicates(args, manager)
        if args.command == "episodes":
            return cmd_episodes(args, manager)
    except StreamMatchError as e:
        print(f"Error: {e}")
        return 1
    return 2


if __name__ == "__main__":
    sys.exit(main())
