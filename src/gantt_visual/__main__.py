from __future__ import annotations

import argparse
import logging
import sys
import webbrowser
from importlib import metadata
from pathlib import Path

import yaml

from .export_svg import save_chart
from .normalize import DataTable
from .parse_table import TableValidationError, load_table
from .settings import DEFAULT_SETTINGS, SettingsValidationError, VisualSettings, load_settings
from .visual import Visual


def _tool_version() -> str:
    try:
        return metadata.version("gantt-visual")
    except metadata.PackageNotFoundError:
        return "0.0.0"


def _non_negative_int(value: str) -> int:
    try:
        number = int(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"invalid size '{value}', expected an integer") from exc
    if number < 0:
        raise argparse.ArgumentTypeError(f"invalid size '{value}', expected a non-negative integer")
    return number


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Render a Gantt chart from a YAML or CSV task table",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    parser.add_argument("table", help="Path to the task table (.yaml/.yml or .csv)")
    parser.add_argument("--settings", help="Path to a settings YAML file")
    parser.add_argument("--out", default="output/gantt_chart.svg", help="Output path; format follows the suffix")
    parser.add_argument("--width", type=_non_negative_int, default=1200, help="Viewport width in pixels")
    parser.add_argument("--height", type=_non_negative_int, default=600, help="Viewport height in pixels")
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")
    parser.add_argument("--version", action="version", version=f"%(prog)s {_tool_version()}")
    parser.add_argument(
        "--view",
        dest="view",
        action="store_true",
        default=True,
        help="Best-effort open the output file after rendering",
    )
    parser.add_argument(
        "--no-view",
        dest="view",
        action="store_false",
        help="Do not open the output file after rendering",
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    table_path = Path(args.table)
    try:
        table: DataTable = load_table(str(table_path))
        settings: VisualSettings = load_settings(args.settings) if args.settings else DEFAULT_SETTINGS
    except (yaml.YAMLError, TableValidationError, SettingsValidationError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 2
    except FileNotFoundError as exc:
        print(f"Error: file not found: {exc.filename}", file=sys.stderr)
        return 1
    except Exception as exc:  # Unexpected
        print(f"Unexpected error while loading input: {exc}", file=sys.stderr)
        return 1

    visual = Visual()
    surface = visual.update(table, args.width, args.height, settings)

    try:
        save_chart(surface, args.out, args.width, args.height)
    except Exception as exc:
        print(f"Unexpected error while writing chart: {exc}", file=sys.stderr)
        return 1

    if args.view:
        try:
            webbrowser.open(Path(args.out).resolve().as_uri())
        except Exception:
            logging.getLogger(__name__).debug("Could not open %s", args.out, exc_info=True)

    return 0


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
