from __future__ import annotations

import datetime as _dt
import logging
from dataclasses import dataclass
from typing import Any

import yaml

from .chart_models import ChartConfig, Duration, DurationUnit, Schedule, Section, Task, TaskStatus
from .validation import ScheduleValidationError

logger = logging.getLogger(__name__)

DISPLAY_MODES = ("default", "compact")

_STATUS_ALIASES = {"critical": TaskStatus.CRITICAL}


@dataclass(frozen=True)
class _Path:
    """Helper to produce readable YAML path strings like sections[0].tasks[1]."""

    parts: tuple[str, ...] = ()

    def child(self, segment: str) -> "_Path":
        return _Path(self.parts + (segment,))

    def __str__(self) -> str:  # pragma: no cover - trivial
        return ".".join(self.parts) if self.parts else "root"


def load_schedule(path: str) -> Schedule:
    """Load a Schedule from a YAML file at the given path (not validated)."""

    with open(path, "r", encoding="utf-8") as fh:
        raw = yaml.safe_load(fh)

    schedule = parse_schedule(raw)
    logger.info("Loaded %s sections from %s", len(schedule.sections), path)
    return schedule


def parse_schedule(data: Any) -> Schedule:
    """
    Build a Schedule from plain mappings and lists.

    Wrong container or scalar types raise ScheduleValidationError. Missing or
    blank strings are kept as "" so validate_schedule reports them.
    """

    path = _Path()
    if data is None:
        raise ScheduleValidationError("Gantt data is required")
    if not isinstance(data, dict):
        raise ScheduleValidationError(f"{path}: expected mapping at top level")
    _assert_allowed_keys(data, {"config", "sections"}, path)

    config = None
    if data.get("config") is not None:
        config = _parse_config(data["config"], path.child("config"))

    sections_raw = data.get("sections")
    if sections_raw is None:
        sections_raw = []
    if not isinstance(sections_raw, list):
        raise ScheduleValidationError(f"{path.child('sections')}: expected list")

    sections = tuple(
        _parse_section(section_raw, path.child(f"sections[{idx}]")) for idx, section_raw in enumerate(sections_raw)
    )
    return Schedule(sections=sections, config=config)


def _parse_config(data: Any, path: _Path) -> ChartConfig:
    if not isinstance(data, dict):
        raise ScheduleValidationError(f"{path}: expected mapping for config")

    _assert_allowed_keys(
        data,
        {
            "title",
            "date_format",
            "axis_format",
            "tick_interval",
            "excludes",
            "exclude_dates",
            "display_mode",
            "enable_click",
        },
        path,
    )

    display_mode = _optional_str(data, "display_mode", path)
    if display_mode is not None and display_mode not in DISPLAY_MODES:
        raise ScheduleValidationError(f"{path.child('display_mode')}: expected one of {list(DISPLAY_MODES)}")

    enable_click = data.get("enable_click")
    if enable_click is not None and not isinstance(enable_click, bool):
        raise ScheduleValidationError(f"{path.child('enable_click')}: expected boolean")

    return ChartConfig(
        title=_optional_str(data, "title", path),
        date_format=_optional_str(data, "date_format", path),
        axis_format=_optional_str(data, "axis_format", path),
        tick_interval=_optional_str(data, "tick_interval", path),
        excludes=_str_list(data.get("excludes"), path.child("excludes")),
        exclude_dates=_str_list(data.get("exclude_dates"), path.child("exclude_dates")),
        display_mode=display_mode,
        enable_click=enable_click,
    )


def _parse_section(data: Any, path: _Path) -> Section:
    if not isinstance(data, dict):
        raise ScheduleValidationError(f"{path}: expected mapping for section")

    _assert_allowed_keys(data, {"name", "tasks"}, path)
    name = _text(data.get("name"), path.child("name"))

    tasks_raw = data.get("tasks")
    if tasks_raw is None:
        tasks_raw = []
    if not isinstance(tasks_raw, list):
        raise ScheduleValidationError(f"{path.child('tasks')}: expected list")

    tasks = tuple(_parse_task(task_raw, path.child(f"tasks[{idx}]")) for idx, task_raw in enumerate(tasks_raw))
    return Section(name=name, tasks=tasks)


def _parse_task(data: Any, path: _Path) -> Task:
    if not isinstance(data, dict):
        raise ScheduleValidationError(f"{path}: expected mapping for task")

    _assert_allowed_keys(data, {"id", "name", "start", "duration", "status", "after"}, path)

    after = data.get("after")
    if after is not None:
        after = _text(after, path.child("after")) or None

    return Task(
        id=_text(data.get("id"), path.child("id")),
        name=_text(data.get("name"), path.child("name")),
        start=_text(data.get("start"), path.child("start")),
        duration=_parse_duration(data.get("duration"), path.child("duration")),
        status=_parse_status(data.get("status"), path.child("status")),
        after=after,
    )


def _parse_duration(value: Any, path: _Path) -> Duration | str | None:
    if value is None:
        return None
    if isinstance(value, _dt.date):
        return value.isoformat()
    if isinstance(value, str):
        return value.strip()
    if isinstance(value, bool):
        raise ScheduleValidationError(f"{path}: expected string, number or mapping")
    if isinstance(value, (int, float)):
        return Duration(value, DurationUnit.DAY)
    if not isinstance(value, dict):
        raise ScheduleValidationError(f"{path}: expected string, number or mapping")

    _assert_allowed_keys(value, {"value", "unit"}, path)
    if "value" not in value:
        raise ScheduleValidationError(f"{path}: missing required field 'value'")
    number = value["value"]
    if isinstance(number, bool) or not isinstance(number, (int, float)):
        raise ScheduleValidationError(f"{path.child('value')}: expected number")

    unit_raw = value.get("unit", DurationUnit.DAY.value)
    if not isinstance(unit_raw, str):
        raise ScheduleValidationError(f"{path.child('unit')}: expected string")
    try:
        unit: DurationUnit | str = DurationUnit.parse(unit_raw)
    except ValueError:
        # Left as-is so validation reports the offending unit against its task.
        unit = unit_raw
    return Duration(number, unit)  # type: ignore[arg-type]


def _parse_status(value: Any, path: _Path) -> tuple[TaskStatus, ...]:
    if value is None:
        return ()
    if isinstance(value, str):
        value = [value]
    if not isinstance(value, list):
        raise ScheduleValidationError(f"{path}: expected list of status tags")

    tags: dict[TaskStatus, None] = {}
    for idx, raw in enumerate(value):
        if not isinstance(raw, str):
            raise ScheduleValidationError(f"{path}[{idx}]: expected string status tag")
        key = raw.strip().lower()
        try:
            tag = _STATUS_ALIASES.get(key) or TaskStatus(key)
        except ValueError as exc:
            allowed = [status.value for status in TaskStatus]
            raise ScheduleValidationError(f"{path}[{idx}]: unknown status '{raw}', expected one of {allowed}") from exc
        tags.setdefault(tag, None)
    return tuple(tags)


def _assert_allowed_keys(data: dict[str, Any], allowed: set[str], path: _Path) -> None:
    extras = sorted(str(key) for key in set(data.keys()) - allowed)
    if extras:
        raise ScheduleValidationError(f"{path}: unexpected fields {extras}")


def _text(value: Any, path: _Path) -> str:
    if value is None:
        return ""
    if isinstance(value, _dt.date):
        return value.isoformat()
    if isinstance(value, bool) or not isinstance(value, (str, int, float)):
        raise ScheduleValidationError(f"{path}: expected string")
    return str(value)


def _optional_str(data: dict[str, Any], key: str, path: _Path) -> str | None:
    value = data.get(key)
    if value is None:
        return None
    return _text(value, path.child(key))


def _str_list(value: Any, path: _Path) -> tuple[str, ...]:
    if value is None:
        return ()
    if isinstance(value, (str, _dt.date)):
        value = [value]
    if not isinstance(value, list):
        raise ScheduleValidationError(f"{path}: expected list of strings")
    return tuple(_text(item, path.child(f"[{idx}]")) for idx, item in enumerate(value))
