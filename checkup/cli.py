"""Entry point for the mac-checkup command line tool."""

from __future__ import annotations

import argparse
import logging
import os
import sys
from collections.abc import Sequence

from result import Err
from rich.console import Console
from rich.logging import RichHandler

from checkup import __version__
from checkup.config.loader import CONFIG_PATH, load_config, sample_config_json
from checkup.sensors import Sensors, StaticSensors, default_sensors
from checkup.services.commands import CommandRunner
from checkup.session import CheckupSession
from checkup.ui.prompts import Prompter, RichPrompter, ScriptedPrompter

logger = logging.getLogger("checkup")

EXIT_OK = 0
EXIT_PROBLEMS = 1
EXIT_ENVIRONMENT = 2


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="mac-checkup",
        description="Check your Mac's health, then clean up what is safe to remove.",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("--config", metavar="PATH", help=f"config file (default {CONFIG_PATH})")
    parser.add_argument("--sample-config", action="store_true", help="print the default config as JSON and exit")
    parser.add_argument(
        "--answers",
        metavar="SCRIPT",
        help='answer prompts in order without asking, e.g. "1,3;y;skip"; missing answers mean skip/no',
    )
    parser.add_argument("--sensors-json", metavar="PATH", help="replay a captured sensor snapshot")
    parser.add_argument("--strict", action="store_true", help="exit with status 1 when problems are found")
    parser.add_argument("-v", "--verbose", action="store_true", help="log debug detail")
    parser.add_argument("--no-color", action="store_true", help="disable colored output")
    return parser


def configure_logging(console: Console, verbose: bool) -> None:
    handler = RichHandler(console=console, show_time=False, show_path=verbose, markup=False)
    logger.handlers[:] = [handler]
    logger.setLevel(logging.DEBUG if verbose else logging.WARNING)


def _sensors(path: str | None, runner: CommandRunner, applications_dir: str) -> Sensors | str:
    if path is None:
        return default_sensors(runner, applications_dir)
    loaded = StaticSensors.from_json_file(path)
    if isinstance(loaded, Err):
        return loaded.err_value
    return loaded.ok_value


def main(argv: Sequence[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    console = Console(no_color=args.no_color, highlight=False)
    configure_logging(Console(stderr=True, no_color=args.no_color), args.verbose)

    if args.sample_config:
        print(sample_config_json())
        return EXIT_OK

    loaded = load_config(args.config)
    if isinstance(loaded, Err):
        console.print(f"[red]{loaded.err_value}[/red]")
        return EXIT_ENVIRONMENT
    config = loaded.ok_value

    home = os.path.expanduser("~")
    if not os.path.isdir(home):
        console.print(f"[red]Home directory {home} is not readable.[/red]")
        return EXIT_ENVIRONMENT

    runner = CommandRunner(timeout=config.command_timeout)
    sensors = _sensors(args.sensors_json, runner, config.applications_dir)
    if isinstance(sensors, str):
        console.print(f"[red]{sensors}[/red]")
        return EXIT_ENVIRONMENT

    prompter: Prompter
    if args.answers is not None:
        prompter = ScriptedPrompter.from_string(args.answers, console)
    else:
        prompter = RichPrompter(console)

    session = CheckupSession(sensors, config, prompter, console, runner=runner)
    try:
        summary = session.run()
    except KeyboardInterrupt:
        console.print("\n[yellow]Interrupted.[/yellow]")
        return 130

    if args.strict and summary.problems > 0:
        return EXIT_PROBLEMS
    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
