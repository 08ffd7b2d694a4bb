#!/usr/bin/env python3
"""
Automatic compactor for Refined Storage.

Queries the storage network for crafting patterns and the stored quantities
of their inputs, and schedules the corresponding crafting tasks. Only
compaction patterns are considered (heuristic: "consumes 9 of the same
item"), and only stored items are counted for inputs: nothing is crafted
recursively.

    rs-compactor run                  # interactive, asks before scheduling
    rs-compactor run --auto           # non-interactive
    rs-compactor gen-config --write   # whitelist the current compaction patterns
    rs-compactor watch --interval 60  # non-interactive run every minute
    rs-compactor craft minecraft:iron_block

The network is reached through an HTTP bridge (``--endpoint``, repeatable) or
an offline YAML snapshot (``--snapshot``).
"""

from __future__ import annotations

import argparse
import logging
import re
import sys
from dataclasses import asdict
from pathlib import Path
from typing import Callable, Iterable, List, Optional

from rs_compactor.config_load import dump_whitelist_config, write_whitelist_config
from rs_compactor.core.runner import RunOutcome, auto_craft, craft_item, generate_config, watch
from rs_compactor.models import PatternInfo, Task
from rs_compactor.reporting import format_plan, write_run_log, write_summary
from rs_compactor.settings import Settings

EXIT_CODES = {
    "ok": 0,
    "nothing": 0,
    "aborted": 0,
    "disconnected": 0,
    "config_error": 2,
    "service_not_found": 3,
    "schedule_failed": 4,
    "service_error": 5,
}


# -----------------------------
# Utilities
# -----------------------------

def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )
    logging.getLogger("httpx").setLevel(logging.DEBUG if verbose else logging.WARNING)


def _print_plan(tasks: List[Task]) -> None:
    for line in format_plan(tasks):
        print(line)


def _answer_is_yes(answer: str) -> bool:
    # an empty answer accepts the default
    return re.match(r"\s*[Yy]", answer + "y") is not None


def _interactive_confirm(read: Callable[[], str] = input) -> Callable[[List[Task]], bool]:
    def confirm(tasks: List[Task]) -> bool:
        _print_plan(tasks)
        print("Proceed? [Y/n]")
        try:
            answer = read()
        except EOFError:
            answer = "n"
        return _answer_is_yes(answer)
    return confirm


def _announce_only(tasks: List[Task]) -> bool:
    _print_plan(tasks)
    return True


def _finish(outcome: RunOutcome, interactive: bool) -> int:
    if outcome.status == "nothing":
        if interactive:
            print(outcome.message)
    elif outcome.status == "ok":
        if outcome.submitted:
            print(f"Scheduled {outcome.submitted} tasks, freeing {outcome.slots_saved} slots.")
    elif outcome.status == "schedule_failed":
        print(f"Scheduling aborted after {outcome.submitted} tasks: {outcome.message}", file=sys.stderr)
    elif outcome.status != "aborted":
        print(outcome.message, file=sys.stderr)
    return EXIT_CODES.get(outcome.status, 1)


def _log_payload(outcome: RunOutcome, settings: Settings) -> dict:
    return {
        "status": outcome.status,
        "message": outcome.message,
        "config_path": str(settings.config_path),
        "endpoints": list(settings.endpoints),
        "snapshot": str(settings.snapshot) if settings.snapshot else None,
        "submitted": outcome.submitted,
        "slots_saved": outcome.slots_saved,
        "tasks": [task.to_dict() for task in outcome.tasks],
    }


def _write_outputs(args: argparse.Namespace, outcome: RunOutcome, settings: Settings) -> int:
    if args.output and outcome.tasks:
        try:
            write_summary(Path(args.output), outcome.tasks)
            print(f"Summary written to {args.output}")
        except (OSError, ValueError) as exc:
            print(f"Failed to write summary: {exc}", file=sys.stderr)
            return 6
    if args.log_dir:
        try:
            path_written = write_run_log(args.log_dir, _log_payload(outcome, settings))
            print(f"  ↳ log written to {path_written}")
        except OSError as exc:
            print(f"  ! failed to write log in {args.log_dir}: {exc}", file=sys.stderr)
    return 0


# -----------------------------
# Commands
# -----------------------------

def _cmd_run(args: argparse.Namespace, settings: Settings, read: Callable[[], str]) -> int:
    confirm = _announce_only if args.auto else _interactive_confirm(read)
    outcome = auto_craft(settings, confirm=confirm)
    code = _finish(outcome, interactive=not args.auto)
    return code or _write_outputs(args, outcome, settings)


def _cmd_gen_config(args: argparse.Namespace, settings: Settings) -> int:
    outcome = generate_config(settings)
    if outcome.whitelist is None:
        return _finish(outcome, interactive=True)
    if args.write:
        try:
            path_written = write_whitelist_config(outcome.whitelist, settings.config_path)
        except OSError as exc:
            print(f"Failed to write config: {exc}", file=sys.stderr)
            return 6
        print(f"Config written to {path_written}")
    else:
        print(dump_whitelist_config(outcome.whitelist), end="")
    return 0


def _cmd_watch(args: argparse.Namespace, settings: Settings) -> int:
    outcome = watch(settings, interval=args.interval, max_runs=args.max_runs, confirm=_announce_only)
    return _finish(outcome, interactive=False)


def _cmd_craft(args: argparse.Namespace, settings: Settings, read: Callable[[], str]) -> int:
    info = PatternInfo(name=args.item, label=args.label or args.item, damage=args.damage)
    confirm = _announce_only if args.auto else _interactive_confirm(read)
    outcome = craft_item(settings, info, confirm=confirm)
    if outcome.status == "nothing":
        print(f"Not enough inputs in storage to craft even one {info.label}")
        return 0
    return _finish(outcome, interactive=not args.auto)


def _build_parser() -> argparse.ArgumentParser:
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("-v", "--verbose", action="store_true", help="Enable more verbose logging.")
    common.add_argument("--config", type=str, default=None,
                        help="Override path to the whitelist config (default: /etc/rs-compactor.yml).")
    common.add_argument("--endpoint", action="append", dest="endpoints",
                        help="Storage bridge URL; repeat to probe several in order.")
    common.add_argument("--snapshot", type=str, default=None,
                        help="Use a YAML snapshot of a network instead of a live bridge.")
    common.add_argument("--timeout", type=float, default=None, help="HTTP timeout in seconds.")

    parser = argparse.ArgumentParser(
        prog="rs-compactor",
        description="Automatic compactor for Refined Storage.",
    )
    subparsers = parser.add_subparsers(dest="command")

    run_parser = subparsers.add_parser("run", parents=[common], help="Schedule compaction crafting tasks.")
    run_parser.add_argument("--auto", action="store_true", help="Run in non-interactive mode.")
    run_parser.add_argument("--output", type=Path, help="Optional CSV/JSON summary of the planned tasks.")
    run_parser.add_argument("--log-dir", type=str, help="Directory to store a JSON log of the run.")

    gen_parser = subparsers.add_parser("gen-config", parents=[common],
                                       help="Generate a whitelist from the network's compaction patterns.")
    gen_parser.add_argument("--write", action="store_true", help="Write to the config path instead of stdout.")

    watch_parser = subparsers.add_parser("watch", parents=[common], help="Run non-interactively on a timer.")
    watch_parser.add_argument("--interval", type=float, default=60.0, help="Seconds between runs (default: 60).")
    watch_parser.add_argument("--max-runs", type=int, default=None, help="Stop after this many runs.")

    craft_parser = subparsers.add_parser("craft", parents=[common],
                                         help="Craft as many of one pattern as stored inputs allow.")
    craft_parser.add_argument("item", help="Pattern output name, e.g. minecraft:iron_block.")
    craft_parser.add_argument("--damage", type=int, default=0, help="Pattern damage value (default: 0).")
    craft_parser.add_argument("--label", type=str, default=None, help="Display label for messages.")
    craft_parser.add_argument("--auto", action="store_true", help="Do not ask before scheduling.")
    return parser


def main(argv: Optional[Iterable[str]] = None, read: Callable[[], str] = input) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)
    if args.command is None:
        parser.print_help()
        return 1
    settings = Settings.resolve(
        config=args.config,
        endpoints=args.endpoints,
        snapshot=args.snapshot,
        timeout=args.timeout,
        verbose=args.verbose,
    )
    _configure_logging(settings.verbose)
    logging.getLogger(__name__).debug("Settings: %s", asdict(settings))

    if args.command == "run":
        return _cmd_run(args, settings, read)
    if args.command == "gen-config":
        return _cmd_gen_config(args, settings)
    if args.command == "watch":
        return _cmd_watch(args, settings)
    return _cmd_craft(args, settings, read)


if __name__ == "__main__":
    sys.exit(main())
