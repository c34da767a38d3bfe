from __future__ import annotations

import argparse
import logging
import sys
from collections.abc import Sequence
from dataclasses import replace
from pathlib import Path

from rich.console import Console
from rich.table import Table

from . import __version__
from .artifact import ArtifactFormatError, parse_module, render_module
from .config import AppConfig, load_config
from .github_client import GitHubApiError
from .logging_utils import configure_logging, render_fields_block
from .models import Configuration, default_configuration
from .target import RemoteTarget, load_target, save_target

LOGGER = logging.getLogger(__name__)


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="sidingconfig",
        description="Edit the siding calculator rates and publish them to GitHub.",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("--config", type=Path, default=None, help="Path to sidingconfig.yaml")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")
    parser.add_argument("--log-file", type=Path, default=None, help="Also write logs to this file")

    subparsers = parser.add_subparsers(dest="command")

    gui = subparsers.add_parser("gui", help="Run the web editor (default)")
    gui.add_argument("--host", default=None, help="Override gui.host")
    gui.add_argument("--port", type=int, default=None, help="Override gui.port")

    show = subparsers.add_parser("show", help="Print a configuration")
    show.add_argument("--input", type=Path, default=None, help="config.js file to read instead of the defaults")
    show.add_argument("--format", choices=("table", "module"), default="table")

    publish = subparsers.add_parser("publish", help="Commit a configuration to GitHub")
    publish.add_argument("--input", type=Path, default=None, help="config.js file to publish instead of the defaults")

    pull = subparsers.add_parser("pull", help="Download the committed configuration")
    pull.add_argument("--output", type=Path, default=None, help="Write the module here instead of stdout")

    target = subparsers.add_parser("target", help="Show or update the saved GitHub settings")
    target.add_argument("--token", default=None)
    target.add_argument("--owner", default=None)
    target.add_argument("--repo", default=None)
    target.add_argument("--branch", default=None)

    args = parser.parse_args(argv)
    if args.command is None:
        args.command = "gui"
        args.host = None
        args.port = None
    return args


def _read_configuration(path: Path | None) -> Configuration:
    if path is None:
        return default_configuration()
    return parse_module(path.read_text(encoding="utf-8"))


def _mask(token: str) -> str:
    if not token:
        return "(not set)"
    return f"{'*' * max(len(token) - 4, 4)}{token[-4:]}"


def build_config_table(config: Configuration) -> list[Table]:
    materials = Table(title="Material rates")
    materials.add_column("Material", style="cyan bold")
    materials.add_column("Buildings/day", justify="right")
    materials.add_column("Price/building", justify="right")
    materials.add_column("Description")
    for name, rate in config.material_rates.items():
        materials.add_row(name, f"{rate.buildings_per_day:g}", f"{rate.price_per_building:g}", rate.description)

    heights = Table(title="Height multipliers")
    heights.add_column("Stories", style="cyan bold")
    heights.add_column("Time", justify="right")
    heights.add_column("Price", justify="right")
    for story, multiplier in config.height_multipliers.items():
        heights.add_row(story, f"{multiplier.time_multiplier:g}", f"{multiplier.price_multiplier:g}")

    settings = Table(title="Settings")
    settings.add_column("Setting", style="cyan bold")
    settings.add_column("Value", justify="right")
    for name, value in config.settings.model_dump(by_alias=True).items():
        settings.add_row(name, f"{value:g}")

    return [materials, heights, settings]


def run_show(args: argparse.Namespace, console: Console) -> int:
    config = _read_configuration(args.input)
    if args.format == "module":
        console.print(render_module(config), markup=False, highlight=False, soft_wrap=True)
        return 0
    for table in build_config_table(config):
        console.print(table)
    return 0


def run_publish(args: argparse.Namespace, app_config: AppConfig, console: Console) -> int:
    configuration = _read_configuration(args.input)
    target = load_target(app_config.build_storage(), path=app_config.github.path)
    publisher = app_config.build_publisher(target)

    status = publisher.publish(configuration)
    LOGGER.info(
        render_fields_block(
            "Publish",
            {"Target": target.describe(), "Status": status.state.value, "Message": status.message},
        )
    )
    console.print(status.message, style="red" if status.error else "green", markup=False)
    return 1 if status.error else 0


def run_pull(args: argparse.Namespace, app_config: AppConfig, console: Console) -> int:
    target = load_target(app_config.build_storage(), path=app_config.github.path)
    publisher = app_config.build_publisher(target)
    configuration = publisher.fetch()
    if configuration is None:
        console.print(f"No configuration committed at {target.describe()}", style="yellow", markup=False)
        return 1

    text = render_module(configuration)
    if args.output:
        args.output.write_text(text, encoding="utf-8")
        LOGGER.info("Wrote %s", args.output)
    else:
        console.print(text, markup=False, highlight=False, soft_wrap=True)
    return 0


def run_target(args: argparse.Namespace, app_config: AppConfig, console: Console) -> int:
    storage = app_config.build_storage()
    target = load_target(storage, path=app_config.github.path)

    updates = {
        name: value
        for name in ("token", "owner", "repo", "branch")
        if (value := getattr(args, name)) is not None
    }
    if updates:
        target = replace(target, **updates)
        save_target(storage, target)

    console.print(
        render_fields_block(
            "GitHub settings",
            {
                "Owner": target.owner or "(not set)",
                "Repository": target.repo or "(not set)",
                "Branch": target.branch,
                "Path": target.path,
                "Token": _mask(target.token),
            },
        ),
        markup=False,
        highlight=False,
    )
    return 0


def run_gui(args: argparse.Namespace, app_config: AppConfig) -> int:
    from .gui import run_editor

    run_editor(app_config, host=args.host, port=args.port)
    return 0


def main(argv: Sequence[str] | None = None) -> int:
    args = parse_args(argv)
    configure_logging(logging.DEBUG if args.verbose else logging.INFO, log_file=args.log_file)
    console = Console()

    try:
        app_config = load_config(args.config)
    except (OSError, ValueError) as exc:
        LOGGER.error("Failed to load configuration: %s", exc)
        return 2

    try:
        if args.command == "show":
            return run_show(args, console)
        if args.command == "publish":
            return run_publish(args, app_config, console)
        if args.command == "pull":
            return run_pull(args, app_config, console)
        if args.command == "target":
            return run_target(args, app_config, console)
        return run_gui(args, app_config)
    except (ArtifactFormatError, GitHubApiError, OSError) as exc:
        LOGGER.error("%s", exc)
        return 1


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
