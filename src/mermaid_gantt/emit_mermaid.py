from __future__ import annotations

import logging
from typing import List, cast

from .chart_models import (
    ChartConfig,
    ConversionResult,
    Duration,
    Schedule,
    Section,
    Task,
    format_duration,
    format_status_list,
)
from .validation import validate_schedule

logger = logging.getLogger(__name__)

HEADER = "gantt"
INDENT = "    "
FIELD_SEPARATOR = " : "


def convert_to_mermaid(schedule: Schedule | None, check_cycles: bool = False) -> ConversionResult:
    """
    Validate ``schedule`` and convert it to Mermaid gantt syntax.

    Never raises for a bad schedule: the first validation problem is returned
    as a failed ConversionResult instead.
    """

    error = validate_schedule(schedule, check_cycles=check_cycles)
    if error:
        return ConversionResult.failed(error)

    return ConversionResult.ok(emit_mermaid(cast(Schedule, schedule)))


def emit_mermaid(schedule: Schedule) -> str:
    """
    Serialize an already-validated schedule.

    Output is the header line, then config directives, then each section
    heading followed by its task lines, all in input order.
    """

    lines: List[str] = [HEADER]

    if schedule.config is not None:
        lines.extend(convert_config(schedule.config))

    for section in schedule.sections:
        lines.extend(convert_section(section))

    logger.debug("Emitted %s lines for %s sections", len(lines), len(schedule.sections))
    return "\n".join(lines)


def convert_config(config: ChartConfig) -> list[str]:
    lines: List[str] = []

    if config.title:
        lines.append(f"{INDENT}title {config.title}")
    if config.date_format:
        lines.append(f"{INDENT}dateFormat {config.date_format}")
    if config.axis_format:
        lines.append(f"{INDENT}axisFormat {config.axis_format}")
    if config.tick_interval:
        lines.append(f"{INDENT}tickInterval {config.tick_interval}")
    if config.excludes:
        lines.append(f"{INDENT}excludes {', '.join(config.excludes)}")

    return lines


def convert_section(section: Section) -> list[str]:
    lines = [f"{INDENT}section {section.name}"]
    lines.extend(convert_task(task) for task in section.tasks)
    return lines


def convert_task(task: Task) -> str:
    """Render one task line: name, [status], id, start or ``after <id>``, duration."""

    parts: List[str] = [task.name]

    status = format_status_list(task.status)
    if status:
        parts.append(status)

    parts.append(task.id)
    parts.append(f"after {task.after}" if task.after else task.start)
    parts.append(_duration_field(task.duration))

    return INDENT + FIELD_SEPARATOR.join(parts)


def _duration_field(duration: Duration | str | None) -> str:
    if isinstance(duration, Duration):
        return format_duration(duration)
    if isinstance(duration, str):
        # Shorthand tokens and end dates are both emitted verbatim.
        return duration
    raise TypeError(f"Unsupported duration type: {type(duration)}")
