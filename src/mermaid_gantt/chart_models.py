from __future__ import annotations

import re
from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Iterable, Union


class DurationUnit(str, Enum):
    """Length units understood by the Mermaid gantt syntax; values are the unit letters."""

    DAY = "d"
    WEEK = "w"
    HOUR = "h"
    MINUTE = "m"

    @classmethod
    def parse(cls, value: str) -> "DurationUnit":
        """Accept a unit letter or word ("d", "day", "Days", ...)."""
        key = value.strip().lower()
        for unit in cls:
            if key in (unit.value, unit.name.lower(), f"{unit.name.lower()}s"):
                return unit
        raise ValueError(f"unknown duration unit '{value}'")


class TaskStatus(str, Enum):
    """Status tags, valued by their Mermaid keywords."""

    DONE = "done"
    ACTIVE = "active"
    CRITICAL = "crit"
    MILESTONE = "milestone"


UNIT_LETTERS = frozenset(unit.value for unit in DurationUnit)

_SHORTHAND_RE = re.compile(r"[0-9]+[dwhm]")
_ISO_DATE_RE = re.compile(r"[0-9]{4}-[0-9]{2}-[0-9]{2}")


@dataclass(frozen=True)
class Duration:
    """Relative task length, e.g. Duration(5, DurationUnit.DAY) -> "5d"."""

    value: float
    unit: DurationUnit = DurationUnit.DAY


DurationSpec = Union[Duration, str]
"""Structured duration, or a raw string holding a shorthand token or an end date."""


@dataclass(frozen=True)
class Task:
    """
    Single chart row.

    Either ``start`` is a non-empty date or ``after`` names another task id;
    ``after`` wins when both are given.
    """

    id: str
    name: str
    start: str = ""
    duration: DurationSpec | None = None
    status: tuple[TaskStatus, ...] = ()
    after: str | None = None

    @property
    def is_milestone(self) -> bool:
        return TaskStatus.MILESTONE in self.status


@dataclass(frozen=True)
class Section:
    """Named group of tasks; task order is the rendering order."""

    name: str
    tasks: tuple[Task, ...] = ()


@dataclass(frozen=True)
class ChartConfig:
    """
    Chart-level directives. Unset fields are omitted from the output.

    ``exclude_dates``, ``display_mode`` and ``enable_click`` are carried for the
    renderer and never emitted as directives.
    """

    title: str | None = None
    date_format: str | None = None
    axis_format: str | None = None
    tick_interval: str | None = None
    excludes: tuple[str, ...] = ()
    exclude_dates: tuple[str, ...] = ()
    display_mode: str | None = None
    enable_click: bool | None = None


@dataclass(frozen=True)
class Schedule:
    """Root value handed to the converter: optional config plus ordered sections."""

    sections: tuple[Section, ...] = ()
    config: ChartConfig | None = None


@dataclass(frozen=True)
class ConversionResult:
    """Outcome of a conversion: either ``syntax`` or ``error`` is set, never both."""

    success: bool
    syntax: str | None = None
    error: str | None = None

    @classmethod
    def ok(cls, syntax: str) -> "ConversionResult":
        return cls(success=True, syntax=syntax)

    @classmethod
    def failed(cls, error: str) -> "ConversionResult":
        return cls(success=False, error=error)


def format_duration(duration: Duration) -> str:
    """Render a Duration as ``<value><unit-letter>``."""
    return f"{_format_number(duration.value)}{unit_letter(duration.unit)}"


def unit_letter(unit: DurationUnit | str) -> str:
    if isinstance(unit, DurationUnit):
        return unit.value
    return str(unit)


def is_duration_shorthand(value: str) -> bool:
    """True for strings like "5d" or "12h": digits followed by one unit letter."""
    return _SHORTHAND_RE.fullmatch(value) is not None


def is_iso_date(value: str) -> bool:
    """True for strings shaped like YYYY-MM-DD."""
    return _ISO_DATE_RE.fullmatch(value) is not None


def format_status_list(status: Iterable[TaskStatus | str] | None) -> str:
    """Comma-space join of status tags in their given order; "" when empty."""
    if not status:
        return ""
    return ", ".join(tag.value if isinstance(tag, TaskStatus) else str(tag) for tag in status)


def create_task(
    id: str,
    name: str,
    start: str,
    value: float,
    unit: DurationUnit = DurationUnit.DAY,
    status: Iterable[TaskStatus] = (),
) -> Task:
    """Task starting on a fixed date."""
    return Task(id=id, name=name, start=start, duration=Duration(value, unit), status=tuple(status))


def create_dependent_task(
    id: str,
    name: str,
    after: str,
    value: float,
    unit: DurationUnit = DurationUnit.DAY,
    status: Iterable[TaskStatus] = (),
) -> Task:
    """Task that starts when ``after`` finishes."""
    return Task(id=id, name=name, start="", duration=Duration(value, unit), status=tuple(status), after=after)


def create_milestone(id: str, name: str, after: str) -> Task:
    """Zero-length marker placed at the end of ``after``."""
    return Task(
        id=id,
        name=name,
        start="",
        duration=Duration(0, DurationUnit.DAY),
        status=(TaskStatus.MILESTONE,),
        after=after,
    )


def _format_number(value: float) -> str:
    if isinstance(value, float):
        if value.is_integer():
            return str(int(value))
        # Positional notation; repr keeps the shortest round-tripping digits.
        return format(Decimal(repr(value)), "f")
    return str(value)
