"""Command line entry point for reading and editing a daily log directory."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from datetime import date, timedelta
from pathlib import Path
from typing import Any

from daylog.agenda import DateRange, derive_agenda, filter_agenda, group_agenda
from daylog.config import AppConfig, ConfigError, load_config
from daylog.date_input import parse_time_input, require_date_input
from daylog.editing import collect_tags, find_task, search_entries, toggle_task
from daylog.errors import DaylogError, ErrorCode, error_response, success_response
from daylog.metadata import format_duration
from daylog.models import AgendaBucket, AgendaEntry, AgendaItemKind, StatusFilter
from daylog.storage import (
    append_entry,
    carry_over_tasks,
    complete_carried_task,
    load_log_file,
    load_log_files,
    read_activity_log,
    save_log_file,
)

logger = logging.getLogger(__name__)

BUCKET_LABELS = {
    AgendaBucket.OVERDUE: "Overdue",
    AgendaBucket.ALL_DAY: "All day",
    AgendaBucket.TIMED: "Timed",
    AgendaBucket.UNSCHEDULED: "Unscheduled",
}


def _build_parser() -> argparse.ArgumentParser:
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument(
        "--json",
        action="store_true",
        help="Print the result as a JSON envelope.",
    )

    parser = argparse.ArgumentParser(
        prog="daylog",
        description="Plain-text daily log with tasks and an agenda view.",
    )
    parser.add_argument(
        "--log-path",
        type=Path,
        help="Log directory (default: env DAYLOG_LOG_PATH).",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Log debug messages to stderr.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    agenda = subparsers.add_parser("agenda", parents=[common], help="Show the agenda.")
    agenda.add_argument("--from", dest="start", help="First day (default: today).")
    agenda.add_argument("--to", dest="end", help="Last day (default: from + window).")
    agenda.add_argument(
        "--filter",
        choices=[status.value for status in StatusFilter],
        default=StatusFilter.OPEN.value,
        help="Task status filter (default: open).",
    )
    agenda.add_argument(
        "--unscheduled",
        action="store_true",
        help="Include undated tasks from files outside the range.",
    )
    agenda.add_argument("--tag", help="Only show items carrying this #tag.")

    subparsers.add_parser("tags", parents=[common], help="List tags by frequency.")

    add = subparsers.add_parser("add", parents=[common], help="Append a new entry.")
    add.add_argument("text", help="Entry body; use \\n for multiple lines.")
    add.add_argument("--date", default="today", help="Target day (default: today).")
    add.add_argument("--time", help="Entry timestamp HH:MM (default: now).")

    toggle = subparsers.add_parser(
        "toggle", parents=[common], help="Toggle a task's checkbox."
    )
    toggle.add_argument("date", help="Day of the log file.")
    toggle.add_argument("line", type=int, help="1-based line number of the task.")

    search = subparsers.add_parser("search", parents=[common], help="Search entries.")
    search.add_argument("keywords", nargs="+")

    activity = subparsers.add_parser(
        "activity", parents=[common], help="Show recent write-backs."
    )
    activity.add_argument("--limit", type=int, default=20)
    activity.add_argument("--date", help="Only show write-backs of this day.")

    carryover = subparsers.add_parser(
        "carryover",
        parents=[common],
        help="Copy open tasks from earlier days into today (once per day).",
    )
    carryover.add_argument("--date", default="today", help="Target day (default: today).")

    complete = subparsers.add_parser(
        "complete",
        parents=[common],
        help="Check a task and the earlier copies it was carried from.",
    )
    complete.add_argument("date", help="Day of the log file.")
    complete.add_argument("line", type=int, help="1-based line number of the task.")
    return parser


def _run_agenda(args: argparse.Namespace, config: AppConfig) -> dict[str, Any]:
    today = date.today()
    start = require_date_input(args.start, today) if args.start else today
    end = (
        require_date_input(args.end, today)
        if args.end
        else start + timedelta(days=config.agenda_days - 1)
    )
    date_range = DateRange(start, end)
    items = derive_agenda(
        load_log_files(config.log_path),
        date_range,
        status_filter=StatusFilter(args.filter),
        show_unscheduled=args.unscheduled,
        today=today,
    )
    if args.tag:
        items = filter_agenda(items, tag=_normalize_tag(args.tag))
    return {
        "from": start.isoformat(),
        "to": end.isoformat(),
        "items": [item.to_dict() for item in items],
        "_items": items,
    }


def _normalize_tag(tag: str) -> str:
    return tag if tag.startswith("#") else f"#{tag}"


def _run_add(args: argparse.Namespace, config: AppConfig) -> dict[str, Any]:
    day = require_date_input(args.date, date.today())
    timestamp = None
    if args.time:
        timestamp = parse_time_input(args.time)
        if timestamp is None:
            raise DaylogError(
                ErrorCode.INVALID_TIME, "Time must be HH:MM.", {"value": args.time}
            )
    body = args.text.replace("\\n", "\n")
    entry = append_entry(
        config.log_path, day, body, timestamp, git_history=config.git_history
    )
    return {
        "date": day.isoformat(),
        "timestamp": entry.timestamp.isoformat(),
        "line": entry.line_offset + 1,
    }


def _run_toggle(args: argparse.Namespace, config: AppConfig) -> dict[str, Any]:
    day = require_date_input(args.date, date.today())
    log_file = load_log_file(config.log_path, day)
    task = find_task(log_file, args.line - 1)
    done = toggle_task(task)
    commit_sha = save_log_file(
        config.log_path,
        log_file,
        "toggle_task",
        git_history=config.git_history,
        summary=f"mark line {args.line} {'done' if done else 'open'}",
    )
    return {"date": day.isoformat(), "line": args.line, "done": done, "commitSha": commit_sha}


def _run_carryover(args: argparse.Namespace, config: AppConfig) -> dict[str, Any]:
    day = require_date_input(args.date, date.today())
    entry = carry_over_tasks(config.log_path, day, git_history=config.git_history)
    if entry is None:
        return {"date": day.isoformat(), "carried": 0, "line": None}
    return {
        "date": day.isoformat(),
        "carried": len(entry.tasks),
        "line": entry.line_offset + 1,
    }


def _run_complete(args: argparse.Namespace, config: AppConfig) -> dict[str, Any]:
    day = require_date_input(args.date, date.today())
    completed = complete_carried_task(
        config.log_path, day, args.line - 1, git_history=config.git_history
    )
    return {"date": day.isoformat(), "line": args.line, "completed": completed}


def _run_activity(args: argparse.Namespace, config: AppConfig) -> dict[str, Any]:
    day = require_date_input(args.date, date.today()) if args.date else None
    return {"entries": read_activity_log(config.log_path, args.limit, day=day)}


def _run_search(args: argparse.Namespace, config: AppConfig) -> dict[str, Any]:
    entries = search_entries(load_log_files(config.log_path), args.keywords)
    return {
        "results": [
            {
                "date": entry.file_date.isoformat(),
                "timestamp": entry.timestamp.isoformat(),
                "line": entry.line_offset + 1,
                "title": entry.title.strip(),
            }
            for entry in entries
        ]
    }


def _format_agenda_item(item: AgendaEntry) -> str:
    checkbox = "[x]" if item.done else "[ ]"
    parts = [checkbox if item.kind is AgendaItemKind.TASK else "-"]
    if item.time is not None:
        parts.insert(0, item.time.strftime("%H:%M"))
    if item.priority is not None:
        parts.append(f"[#{item.priority.value}]")
    parts.append(item.text)
    if item.duration_minutes is not None:
        parts.append(f"({format_duration(item.duration_minutes)})")
    if item.bucket is AgendaBucket.OVERDUE:
        parts.append(f"due {item.date.isoformat()}")
    parts.append(f"<{item.file_date.isoformat()}:{item.line_offset + 1}>")
    return " ".join(parts)


def _print_text(command: str, result: dict[str, Any]) -> None:
    if command == "agenda":
        groups = group_agenda(result["_items"])
        if not groups:
            print("Nothing scheduled.")
        current_day: date | None = None
        for day, bucket, items in groups:
            if day != current_day:
                print(day.strftime("%Y-%m-%d %a"))
                current_day = day
            print(f"  {BUCKET_LABELS[bucket]}")
            for item in items:
                print(f"    {_format_agenda_item(item)}")
    elif command == "tags":
        for tag in result["tags"]:
            print(f"{tag['count']:>5}  {tag['tag']}")
    elif command == "add":
        print(f"Added entry at {result['date']} {result['timestamp']}")
    elif command == "toggle":
        state = "done" if result["done"] else "open"
        print(f"Line {result['line']} of {result['date']} is now {state}")
    elif command == "search":
        for match in result["results"]:
            print(f"{match['date']} {match['timestamp']}:{match['line']} {match['title']}")
    elif command == "activity":
        for entry in result["entries"]:
            print(
                f"{entry['timestamp']} {entry['operation']} "
                f"{entry['path']} {entry['summary']}"
            )
    elif command == "carryover":
        print(f"Carried {result['carried']} open tasks into {result['date']}")
    elif command == "complete":
        print(f"Checked {result['completed']} tasks")


def main(argv: list[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        config = load_config(args.log_path)
    except ConfigError as exc:
        print(f"ERROR: {exc}", file=sys.stderr)
        return 2

    try:
        if args.command == "agenda":
            result = _run_agenda(args, config)
        elif args.command == "tags":
            tags = collect_tags(load_log_files(config.log_path))
            result = {"tags": [{"tag": tag, "count": count} for tag, count in tags]}
        elif args.command == "add":
            result = _run_add(args, config)
        elif args.command == "toggle":
            result = _run_toggle(args, config)
        elif args.command == "search":
            result = _run_search(args, config)
        elif args.command == "carryover":
            result = _run_carryover(args, config)
        elif args.command == "complete":
            result = _run_complete(args, config)
        else:
            result = _run_activity(args, config)
    except DaylogError as exc:
        logger.debug("Command %s failed", args.command, exc_info=True)
        if args.json:
            print(json.dumps(error_response(exc.error), indent=2))
        else:
            print(f"ERROR: {exc.error.message} ({exc.error.code})", file=sys.stderr)
        return 1

    if args.json:
        payload = {key: value for key, value in result.items() if not key.startswith("_")}
        print(json.dumps(success_response(payload), indent=2))
    else:
        _print_text(args.command, result)
    return 0


if __name__ == "__main__":
    sys.exit(main())
