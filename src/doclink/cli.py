"""doclink command line.

Usage:
    doclink check CODE DOCS [--show-info]
    doclink baseline CODE DOCS
    doclink scaffold CODE DOCS [--dry-run] [--yes]
    doclink watch CODE DOCS

CODE and DOCS are files or directories. Exit status is 0 when nothing
blocks, 1 when a new Error finding exists, and 2 when doclink could not
do its job (unparseable file, duplicate id, corrupt baseline, bad
config).
"""

from __future__ import annotations

import argparse
import logging
import sys
import time
from collections import defaultdict
from pathlib import Path

from .baseline import dump_baseline, load_snapshot
from .config import DoclinkConfig, load_config
from .errors import ConfigError, DoclinkError, ParseError
from .pipeline import EXIT_FATAL, EXIT_OK, run_check, suggest
from .report import format_report
from .scaffold import annotation_line, apply_links, confirm
from .watch import Watcher

log = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def _setup_logging(config: DoclinkConfig, verbose: int) -> None:
    if verbose >= 2:
        level = logging.DEBUG
    elif verbose == 1:
        level = logging.INFO
    else:
        level = getattr(logging, config.log_level)
    logging.basicConfig(level=level, format=LOG_FORMAT)
    logging.getLogger().setLevel(level)


def _print_failures(failures: list[ParseError]) -> None:
    for failure in failures:
        print(f"[X] Parse error: {failure}", file=sys.stderr)


# =============================================================================
# Commands
# =============================================================================


def cmd_check(args, config: DoclinkConfig) -> int:
    snapshot = load_snapshot(config.baseline_file(args.root))
    outcome = run_check([args.code], [args.docs], args.root, config, snapshot)

    _print_failures(outcome.failures)
    if not outcome.entities and not outcome.sections:
        print("No functions or documentation sections found.")
    print(format_report(outcome.report, show_info=args.show_info))
    return outcome.exit_code


def cmd_baseline(args, config: DoclinkConfig) -> int:
    outcome = run_check([args.code], [args.docs], args.root, config, snapshot=None)
    if outcome.failures:
        _print_failures(outcome.failures)
        print("Baseline not written: fix the files above first.", file=sys.stderr)
        return EXIT_FATAL

    path = config.baseline_file(args.root)
    snapshot = dump_baseline(outcome.report.results, path)
    print(f"Baseline written to {path}: {len(snapshot)} findings accepted.")
    return EXIT_OK


def cmd_scaffold(args, config: DoclinkConfig) -> int:
    suggestions, failures = suggest([args.code], [args.docs], args.root, config)
    if failures:
        _print_failures(failures)
        return EXIT_FATAL
    if not suggestions:
        print("No link suggestions: every function is linked or nothing scores high enough.")
        return EXIT_OK

    print(f"Found {len(suggestions)} link suggestions (score > {config.similarity_threshold:.0%}).\n")
    accepted = confirm(suggestions, input, assume_yes=args.yes)
    print(f"\nAccepted {len(accepted)} of {len(suggestions)}.")
    if not accepted:
        return EXIT_OK

    if args.dry_run:
        print("[dry-run] Annotations that would be written:")
        for s in accepted:
            line = annotation_line(s.entity.language, s.section.id, annotation=config.annotation)
            print(f"  {s.entity.location}: {line}")
        return EXIT_OK

    by_file = defaultdict(list)
    for s in accepted:
        by_file[s.entity.file].append(s)
    for file, group in sorted(by_file.items()):
        path = Path(file) if Path(file).is_absolute() else args.root / file
        written = apply_links(path, group, group[0].entity.language, config.annotation)
        print(f"{written} annotations written to {file}.")
    return EXIT_OK


def cmd_watch(args, config: DoclinkConfig) -> int:
    def run():
        try:
            snapshot = load_snapshot(config.baseline_file(args.root))
            return run_check([args.code], [args.docs], args.root, config, snapshot)
        except DoclinkError as e:
            return e

    def show(result):
        print("\033[2J\033[H", end="")
        if isinstance(result, DoclinkError):
            print(f"[X] {result}")
        else:
            _print_failures(result.failures)
            print(format_report(result.report))
        print("\nWatching for changes... (Ctrl+C to exit)", flush=True)

    watcher = Watcher(
        [args.code, args.docs],
        run,
        show,
        debounce=config.debounce_seconds,
    )
    watcher.run_once()
    watcher.start()
    try:
        while True:
            time.sleep(1)
    except KeyboardInterrupt:
        pass
    finally:
        watcher.stop()
    return EXIT_OK


# =============================================================================
# Entry point
# =============================================================================


def build_parser() -> argparse.ArgumentParser:
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("--root", type=Path, default=Path("."), help="project root (default: .)")
    common.add_argument("-v", "--verbose", action="count", default=0, help="-v info, -vv debug")
    common.add_argument("--config", type=Path, default=None, help="config file (default: ROOT/.doclink/config.yaml)")

    parser = argparse.ArgumentParser(
        prog="doclink",
        description="Keep code and its markdown documentation cross-referenced.",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    def add(name: str, summary: str) -> argparse.ArgumentParser:
        p = sub.add_parser(name, parents=[common], help=summary)
        p.add_argument("code", type=Path, metavar="CODE", help="source file or directory")
        p.add_argument("docs", type=Path, metavar="DOCS", help="markdown file or directory")
        return p

    check = add("check", "validate links, arguments and types")
    check.add_argument("--show-info", action="store_true", help="also list verified links")
    check.set_defaults(func=cmd_check)

    add("baseline", "accept all current findings").set_defaults(func=cmd_baseline)

    scaffold = add("scaffold", "suggest and write missing @docs annotations")
    scaffold.add_argument("--dry-run", action="store_true", help="show edits without writing")
    scaffold.add_argument("--yes", "-y", action="store_true", help="accept every suggestion")
    scaffold.set_defaults(func=cmd_scaffold)

    add("watch", "re-run check on every change").set_defaults(func=cmd_watch)
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    try:
        config = load_config(args.root, args.config)
    except ConfigError as e:
        print(f"[X] {e}", file=sys.stderr)
        for detail in e.details:
            loc = ".".join(str(p) for p in detail.get("loc", ()))
            print(f"    -> {loc}: {detail.get('msg')}", file=sys.stderr)
        return EXIT_FATAL

    _setup_logging(config, args.verbose)
    try:
        return args.func(args, config)
    except DoclinkError as e:
        print(f"[X] {e}", file=sys.stderr)
        return EXIT_FATAL


if __name__ == "__main__":
    sys.exit(main())
