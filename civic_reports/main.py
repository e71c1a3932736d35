"""Civic reports entry point.

Three modes: serve (web page and form), report (file one issue from the
command line) and list (print matching issues). Usage:
civic-reports [serve | report | list] [--config PATH].
"""

import argparse
import logging
import sys
from pathlib import Path

from civic_reports.app import build_store
from civic_reports.config import AppConfig, load_config
from civic_reports.issue_store import FILTER_ALL, format_status
from civic_reports.logging import CivicLogging
from civic_reports.schemas import STATUSES, Issue, IssueInput
from civic_reports.storage import PersistenceWriteError

SUBCOMMANDS = ("serve", "report", "list")


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse CLI with optional subcommand (serve | report | list)."""
    argv = argv if argv is not None else sys.argv[1:]
    sub = "serve"
    rest = list(argv)
    if argv and argv[0] in SUBCOMMANDS:
        sub = argv[0]
        rest = argv[1:]

    parser = argparse.ArgumentParser(
        prog=f"civic-reports {sub}",
        description="Civic issue reporting - web page, report or list",
    )
    parser.add_argument(
        "--config",
        "-c",
        type=Path,
        default=Path("config.yaml"),
        help="Path to YAML config file",
    )
    parser.add_argument(
        "--check",
        action="store_true",
        help="Only load and validate config, then exit",
    )
    if sub == "report":
        parser.add_argument("--type", required=True, help="Issue type, e.g. pothole")
        parser.add_argument("--description", default="", help="What is wrong")
        parser.add_argument("--location", default="", help="Where it is")
        parser.add_argument("--priority", default="medium", help="low, medium or high")
        parser.add_argument("--photo", default=None, help="Photo URL")
    elif sub == "list":
        parser.add_argument("--search", "-s", default="", help="Match description, location or type")
        parser.add_argument(
            "--status",
            default=FILTER_ALL,
            choices=(FILTER_ALL, *STATUSES),
            help="Only issues with this status",
        )
    parsed = parser.parse_args(rest)
    parsed.subcommand = sub
    return parsed


def run_report(config: AppConfig, args: argparse.Namespace) -> int:
    store = build_store(config)
    data = IssueInput(
        type=args.type,
        description=args.description,
        location=args.location,
        priority=args.priority,
        photo=args.photo,
    )
    try:
        issue = store.create(data)
    except PersistenceWriteError as e:
        logging.getLogger("civic_reports.main").error("Issue was not stored: %s", e)
        return 1
    print(issue.id)
    return 0


def format_line(issue: Issue) -> str:
    """One-line summary: id, status label, priority, type and location."""
    return f"{issue.id}  {format_status(issue.status)}  [{issue.priority}] {issue.type} @ {issue.location}"


def run_list(config: AppConfig, args: argparse.Namespace) -> int:
    store = build_store(config)
    issues = store.query(args.search, args.status)
    if not issues:
        print("No issues found")
        return 0
    for issue in issues:
        print(format_line(issue))
    return 0


def main(argv: list[str] | None = None) -> int:
    """Entry point: dispatch to serve, report or list."""
    args = parse_args(argv)
    config = load_config(args.config)

    if args.check:
        print("Config OK:", config.storage.backend, config.storage.path, f"{config.server.host}:{config.server.port}")
        return 0

    CivicLogging(config.logging).setup()

    if args.subcommand == "report":
        return run_report(config, args)
    if args.subcommand == "list":
        return run_list(config, args)

    from civic_reports.web.server import run_server

    try:
        run_server(config.server, build_store(config))
    except KeyboardInterrupt:
        return 0
    except Exception as e:
        logging.getLogger("civic_reports.main").exception("Fatal error: %s", e)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
