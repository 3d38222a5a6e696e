import pytest

from mermaid_gantt.chart_models import (
    ConversionResult,
    Duration,
    DurationUnit,
    TaskStatus,
    create_dependent_task,
    create_milestone,
    create_task,
    format_duration,
    format_status_list,
    is_duration_shorthand,
    is_iso_date,
)


@pytest.mark.parametrize(
    "duration, expected",
    [
        (Duration(5, DurationUnit.DAY), "5d"),
        (Duration(2, DurationUnit.WEEK), "2w"),
        (Duration(8, DurationUnit.HOUR), "8h"),
        (Duration(30, DurationUnit.MINUTE), "30m"),
        (Duration(3.0, DurationUnit.DAY), "3d"),
        (Duration(1.5, DurationUnit.DAY), "1.5d"),
    ],
)
def test_format_duration_joins_value_and_unit_letter(duration, expected):
    assert format_duration(duration) == expected


def test_duration_unit_parse_accepts_letters_and_words():
    assert DurationUnit.parse("d") is DurationUnit.DAY
    assert DurationUnit.parse("Weeks") is DurationUnit.WEEK
    assert DurationUnit.parse(" hour ") is DurationUnit.HOUR
    with pytest.raises(ValueError):
        DurationUnit.parse("fortnight")


@pytest.mark.parametrize("value", ["5d", "12w", "1h", "30m"])
def test_duration_shorthand_tokens(value):
    assert is_duration_shorthand(value)


@pytest.mark.parametrize("value", ["", "d", "5", "5days", "5x", "-5d", "5d\n", "2024-01-10"])
def test_non_shorthand_strings(value):
    assert not is_duration_shorthand(value)


def test_iso_date_shape_is_strict():
    assert is_iso_date("2024-01-10")
    assert not is_iso_date("2024-1-10")
    assert not is_iso_date("2024/01/10")
    assert not is_iso_date("2024-01-10T00:00")


def test_format_status_list_preserves_order():
    assert format_status_list(None) == ""
    assert format_status_list(()) == ""
    assert format_status_list([TaskStatus.DONE]) == "done"
    assert format_status_list([TaskStatus.CRITICAL, TaskStatus.ACTIVE]) == "crit, active"


def test_builders_fill_in_defaults():
    task = create_task("t1", "Task", "2024-01-01", 5)
    assert task.duration == Duration(5, DurationUnit.DAY)
    assert task.after is None

    dependent = create_dependent_task("t2", "Next", "t1", 2, DurationUnit.WEEK, [TaskStatus.ACTIVE])
    assert dependent.start == ""
    assert dependent.after == "t1"
    assert dependent.status == (TaskStatus.ACTIVE,)

    milestone = create_milestone("m1", "Ship", "t2")
    assert milestone.is_milestone
    assert milestone.duration == Duration(0, DurationUnit.DAY)


def test_conversion_result_carries_one_payload():
    ok = ConversionResult.ok("gantt")
    failed = ConversionResult.failed("boom")

    assert ok.success and ok.syntax == "gantt" and ok.error is None
    assert not failed.success and failed.error == "boom" and failed.syntax is None


def test_format_duration_avoids_exponent_notation():
    assert format_duration(Duration(1e20, DurationUnit.MINUTE)) == "100000000000000000000m"
    assert format_duration(Duration(1e-7, DurationUnit.HOUR)) == "0.0000001h"
