"""Command-line entry point for Go Service Bootstrap.

Usage::

    service-bootstrap my-service --http echo --db postgres --task-runner makefile
    python -m service_bootstrap.cli my-service --from-json saved.json --no-bootstrap
"""

from __future__ import annotations

import argparse
import asyncio
import sys
from pathlib import Path
from typing import Optional, Sequence

from pydantic import ValidationError
from rich.markup import escape

from service_bootstrap.config import (
    ConfigFormat,
    Database,
    HttpFramework,
    ProjectConfig,
    TaskRunner,
    ToolchainConfig,
)
from service_bootstrap.errors import GenerationError
from service_bootstrap.scaffolder import ProjectGenerator
from service_bootstrap.utils import print_error, print_summary_table


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="service-bootstrap",
        description="Go Service Bootstrap -- generate a Go backend service skeleton",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "Examples:\n"
            "  service-bootstrap svc1 --http echo\n"
            "  service-bootstrap svc2 --db postgres --task-runner makefile\n"
            "  service-bootstrap svc3 --module github.com/acme/svc3 --html --websocket\n"
        ),
    )

    parser.add_argument(
        "project_name",
        nargs="?",
        help="Project name (output directory and default module path)",
    )
    parser.add_argument("--module", default=None, help="Go module path (default: project name)")
    parser.add_argument(
        "--http",
        choices=[c.value for c in HttpFramework],
        default=HttpFramework.NONE.value,
        help="HTTP framework (default: none)",
    )
    parser.add_argument(
        "--db",
        choices=[c.value for c in Database],
        default=Database.NONE.value,
        help="Database engine (default: none)",
    )
    parser.add_argument(
        "--task-runner",
        choices=[c.value for c in TaskRunner],
        default=TaskRunner.NONE.value,
        help="Task runner file (default: none)",
    )
    parser.add_argument(
        "--config-format",
        choices=[c.value for c in ConfigFormat],
        default=ConfigFormat.NONE.value,
        help="Config file format (default: none)",
    )
    parser.add_argument("--websocket", action="store_true", help="Add gorilla/websocket support")
    parser.add_argument("--bot", action="store_true", help="Add a Telegram bot integration")
    parser.add_argument("--html", action="store_true", help="Add HTML template rendering")
    parser.add_argument(
        "--output", "-o",
        default=".",
        help="Parent directory for the project (default: current directory)",
    )
    parser.add_argument(
        "--from-json",
        default=None,
        help="Load the project config from a JSON file instead of flags",
    )
    parser.add_argument(
        "--save-json",
        default=None,
        help="Write the resolved project config to a JSON file",
    )
    parser.add_argument(
        "--no-bootstrap",
        action="store_true",
        help="Skip 'go mod init', 'go mod tidy' and formatting",
    )
    parser.add_argument(
        "--skip-format",
        action="store_true",
        help="Skip the import formatting step",
    )
    return parser


def config_from_args(args: argparse.Namespace) -> ProjectConfig:
    """Build a ``ProjectConfig`` from parsed arguments."""
    if args.from_json:
        return ProjectConfig.load(Path(args.from_json))
    return ProjectConfig(
        project_name=args.project_name,
        module_path=args.module,
        http_framework=HttpFramework(args.http),
        database=Database(args.db),
        task_runner=TaskRunner(args.task_runner),
        config_format=ConfigFormat(args.config_format),
        websocket=args.websocket,
        bot=args.bot,
        html=args.html,
    )


def main(argv: Optional[Sequence[str]] = None) -> int:
    """CLI entry point.  Returns the process exit code."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.from_json and not args.project_name:
        parser.error("project_name is required unless --from-json is given")

    try:
        config = config_from_args(args)
    except (ValidationError, OSError) as exc:
        print_error(f"Error: invalid configuration: {escape(str(exc))}")
        return 1

    if args.save_json:
        try:
            config.save(Path(args.save_json))
        except OSError as exc:
            print_error(f"Error: could not save configuration: {escape(str(exc))}")
            return 1

    toolchain = ToolchainConfig.from_env()
    if args.skip_format:
        toolchain = toolchain.model_copy(update={"skip_format": True})

    generator = ProjectGenerator(config, toolchain=toolchain)
    try:
        result = asyncio.run(generator.generate(args.output, bootstrap=not args.no_bootstrap))
    except GenerationError as exc:
        print_error(f"Error: {escape(str(exc))}")
        return 1

    summary = {
        "Project": str(result.project_dir),
        "Module": config.module,
        "Files written": str(len(result.written)),
        "Templates skipped": str(len(result.skipped)),
    }
    for i, warning in enumerate(result.warnings, start=1):
        summary[f"Warning {i}"] = escape(warning)
    print_summary_table(summary, title="Generation summary")
    return 0


if __name__ == "__main__":
    sys.exit(main())
