from __future__ import annotations

import argparse
import logging
import sys
import webbrowser
from pathlib import Path

import yaml

from .chart_models import Schedule
from .emit_mermaid import convert_to_mermaid
from .parse_schedule import load_schedule
from .render_html import write_html
from .validation import ScheduleValidationError

HTML_SUFFIXES = (".html", ".htm")

logger = logging.getLogger("mermaid_gantt")


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Convert a YAML schedule into a Mermaid gantt chart",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    parser.add_argument("schedule", help="Path to schedule YAML")
    parser.add_argument("--out", default="output/gantt_chart.mmd", help="Output path, or '-' for stdout")
    parser.add_argument(
        "--format",
        choices=("mermaid", "html"),
        help="Output format; inferred from the --out suffix when omitted",
    )
    parser.add_argument(
        "--check-cycles",
        action="store_true",
        help="Reject schedules whose 'after' references form a cycle",
    )
    parser.add_argument(
        "--view",
        dest="view",
        action="store_true",
        default=True,
        help="Best-effort open HTML output in a browser after writing",
    )
    parser.add_argument(
        "--no-view",
        dest="view",
        action="store_false",
        help="Do not open the output file after writing",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    return parser


def _resolve_format(requested: str | None, out: str) -> str:
    if requested:
        return requested
    return "html" if Path(out).suffix.lower() in HTML_SUFFIXES else "mermaid"


def main(argv: list[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    schedule_path = Path(args.schedule)

    try:
        schedule: Schedule = load_schedule(str(schedule_path))
    except (yaml.YAMLError, ScheduleValidationError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 2
    except FileNotFoundError:
        print(f"Error: schedule file not found: {schedule_path}", file=sys.stderr)
        return 1
    except Exception as exc:  # Unexpected
        print(f"Unexpected error while loading schedule: {exc}", file=sys.stderr)
        return 1

    result = convert_to_mermaid(schedule, check_cycles=args.check_cycles)
    if not result.success:
        print(f"Error: {result.error}", file=sys.stderr)
        return 2
    syntax = result.syntax or ""

    output_format = _resolve_format(args.format, args.out)
    if args.out == "-":
        if output_format == "html":
            print("Error: HTML output needs a file path for --out", file=sys.stderr)
            return 2
        sys.stdout.write(syntax + "\n")
        return 0

    title = schedule.config.title if schedule.config and schedule.config.title else ""

    try:
        if output_format == "html":
            written = write_html(args.out, syntax, title=title)
        else:
            written = Path(args.out)
            written.parent.mkdir(parents=True, exist_ok=True)
            written.write_text(syntax + "\n", encoding="utf-8")
    except OSError as exc:
        print(f"Unexpected error while writing output: {exc}", file=sys.stderr)
        return 1

    if args.view and output_format == "html":
        try:
            webbrowser.open(written.resolve().as_uri())
        except Exception as exc:
            logger.debug("Could not open %s in a browser: %s", written, exc)

    return 0


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
