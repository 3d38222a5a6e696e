from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Iterable, cast

from .chart_models import (
    UNIT_LETTERS,
    Duration,
    Schedule,
    Section,
    Task,
    TaskStatus,
    is_duration_shorthand,
    is_iso_date,
    unit_letter,
)

logger = logging.getLogger(__name__)


class ScheduleValidationError(Exception):
    """Raised when a schedule document or value has the wrong shape or fails validation."""


@dataclass(frozen=True)
class Cycle:
    """Represents a detected cycle path for error reporting."""

    path: list[str]

    def __str__(self) -> str:  # pragma: no cover - simple formatting
        return " -> ".join(self.path)


def validate_schedule(schedule: Schedule | None, check_cycles: bool = False) -> str | None:
    """
    Return the first problem found in ``schedule``, or None when it is valid.

    Checks run in a fixed order and stop at the first failure:
    presence, at least one section, per-section and per-task structure
    (in document order), unique task ids, then that every ``after`` names an
    existing task. With ``check_cycles`` the ``after`` chain must also be acyclic.
    """

    if schedule is None:
        return "Gantt data is required"

    sections = getattr(schedule, "sections", None)
    if not sections or not isinstance(sections, (list, tuple)):
        return "Gantt data must have at least one section"

    for section in sections:
        error = validate_section(section)
        if error:
            logger.debug("Schedule rejected: %s", error)
            return error

    tasks = list(_walk_tasks(sections))

    seen: set[str] = set()
    for task in tasks:
        if task.id in seen:
            return f'Duplicate task ID found: "{task.id}"'
        seen.add(task.id)

    for task in tasks:
        if task.after and task.after not in seen:
            return f'Task "{task.id}" depends on non-existent task: "{task.after}"'

    if check_cycles:
        cycle = _find_cycle([task.id for task in tasks], {task.id: task.after for task in tasks if task.after})
        if cycle:
            return f"Dependency cycle detected: {cycle}"

    return None


def require_valid(schedule: Schedule | None, check_cycles: bool = False) -> Schedule:
    """Raise ScheduleValidationError unless ``schedule`` validates; return it otherwise."""
    error = validate_schedule(schedule, check_cycles=check_cycles)
    if error:
        raise ScheduleValidationError(error)
    return cast(Schedule, schedule)


def validate_section(section: Section) -> str | None:
    name = getattr(section, "name", None)
    if _is_blank(name):
        return "Section is missing a name"
    if _has_line_break(name):
        return f'Section "{name.strip()}" has a name containing a line break'

    tasks = getattr(section, "tasks", None)
    if not tasks or not isinstance(tasks, (list, tuple)):
        return f'Section "{name}" has no tasks'

    for task in tasks:
        error = validate_task(task, name)
        if error:
            return error
    return None


def validate_task(task: Task, section_name: str) -> str | None:
    task_id = getattr(task, "id", None)
    if _is_blank(task_id):
        return f'Task in section "{section_name}" is missing an ID'

    task_name = getattr(task, "name", None)
    if _is_blank(task_name):
        return f'Task "{task_id}" in section "{section_name}" is missing a name'
    # ":" separates fields on a task line.
    if _has_line_break(task_name) or ":" in task_name:
        return f'Task "{task_id}" in section "{section_name}" has a name containing ":" or a line break'

    if not getattr(task, "after", None) and _is_blank(getattr(task, "start", None)):
        return f'Task "{task_id}" in section "{section_name}" is missing a start date or dependency'

    duration = getattr(task, "duration", None)
    if duration is None or duration == "":
        return f'Task "{task_id}" in section "{section_name}" is missing a duration'

    if isinstance(duration, Duration):
        return _validate_duration(task_id, duration, TaskStatus.MILESTONE in (getattr(task, "status", None) or ()))

    if not isinstance(duration, str) or not (is_duration_shorthand(duration) or is_iso_date(duration)):
        return f'Task "{task_id}" has invalid duration format: "{duration}"'

    return None


def _validate_duration(task_id: str, duration: Duration, is_milestone: bool) -> str | None:
    value = duration.value
    if (
        isinstance(value, bool)
        or not isinstance(value, (int, float))
        or not math.isfinite(value)
        or value < 0
        or (value == 0 and not is_milestone)
    ):
        return f'Task "{task_id}" has invalid duration value: {value}'

    if unit_letter(duration.unit) not in UNIT_LETTERS:
        return f'Task "{task_id}" has invalid duration unit: {unit_letter(duration.unit)}'
    return None


def _is_blank(value: object) -> bool:
    return not isinstance(value, str) or not value.strip()


def _has_line_break(value: str) -> bool:
    return "\n" in value or "\r" in value


def _walk_tasks(sections: Iterable[Section]) -> Iterable[Task]:
    for section in sections:
        yield from section.tasks


def _find_cycle(order: list[str], dependencies: dict[str, str]) -> Cycle | None:
    # Each task has at most one ``after`` edge, so every walk is a simple chain.
    done: set[str] = set()

    for start_id in order:
        path: list[str] = []
        positions: dict[str, int] = {}
        node_id: str | None = start_id

        while node_id is not None and node_id not in done:
            if node_id in positions:
                return Cycle(path[positions[node_id] :] + [node_id])
            positions[node_id] = len(path)
            path.append(node_id)
            node_id = dependencies.get(node_id)

        done.update(path)
    return None
