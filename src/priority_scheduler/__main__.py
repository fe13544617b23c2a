"""
Command line entry point: schedule tasks from a JSON file.

    python -m priority_scheduler tasks.json --start 2024-01-15 --end 2024-01-16
"""

import argparse
import json
import logging
import sys
from datetime import datetime
from pathlib import Path

from .api import create_task_from_dict, schedule_tasks_api
from .config import settings
from .repository import InMemoryTaskRepository

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="priority-scheduler",
        description="Assign start/end times to tasks by priority and deadline",
    )
    parser.add_argument("tasks_file", type=Path, help="JSON array of task objects")
    parser.add_argument("--start", required=True, help="First day of the window (ISO date)")
    parser.add_argument("--end", required=True, help="Last day of the window (ISO date)")
    parser.add_argument("--hours-start", type=int, default=settings.working_hours_start)
    parser.add_argument("--hours-end", type=int, default=settings.working_hours_end)
    parser.add_argument(
        "--ids",
        help="Comma-separated task ids to schedule (default: all unscheduled tasks)",
    )
    parser.add_argument("--now", help="Reference time for urgency scoring (ISO 8601)")
    return parser


def _as_datetime_string(value: str) -> str:
    return f"{value}T00:00:00Z" if len(value) == 10 else value


def _parse_now(value: str | None) -> datetime | None:
    if not value:
        return None
    return datetime.fromisoformat(value.replace("Z", "+00:00"))


def _print_json(payload: dict) -> None:
    print(json.dumps(payload, indent=2))


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    try:
        raw_tasks = json.loads(args.tasks_file.read_text(encoding="utf-8"))
        tasks = [create_task_from_dict(item) for item in raw_tasks]
        now = _parse_now(args.now)
    except (ValueError, KeyError, TypeError) as e:
        logger.error(f"Could not load input: {e}")
        _print_json(
            {"success": False, "error_code": "VALIDATION_ERROR", "message": f"Invalid input: {e}"}
        )
        return 1

    repository = InMemoryTaskRepository(tasks)

    if args.ids:
        task_ids = [task_id.strip() for task_id in args.ids.split(",") if task_id.strip()]
    else:
        task_ids = [task.id for task in tasks if not task.is_scheduled]
    logger.info(f"Loaded {len(tasks)} task(s), scheduling {len(task_ids)}")

    response = schedule_tasks_api(
        {
            "taskIds": task_ids,
            "startDate": _as_datetime_string(args.start),
            "endDate": _as_datetime_string(args.end),
            "workingHoursStart": args.hours_start,
            "workingHoursEnd": args.hours_end,
        },
        repository,
        now=now,
        config=settings.scheduler_config(),
    )
    _print_json(response)
    return 0 if response["success"] else 1


if __name__ == "__main__":
    sys.exit(main())
