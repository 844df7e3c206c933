#!/usr/bin/env python3
"""
cinelut CLI - batch LUT generator
Command-line interface for converting JSON LUT configs into .cube files.
"""

import argparse
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

from rich.console import Console
from rich.markup import escape
from rich.table import Table
from rich.theme import Theme

from . import __version__
from .batch import BatchProcessor, BatchSummary
from .exceptions import CinelutError, CubeFormatError
from .lut import CubeParser, format_sample
from .utils.config_file import ConfigFileManager
from .utils.logging import configure_from_cli, get_cli_args_parser, get_logger

CINELUT_THEME = Theme({
    "brand": "bold cyan",
    "success": "bold green",
    "error": "bold red",
    "warning": "bold yellow",
    "path": "underline cyan",
    "muted": "dim white",
})

console = Console(theme=CINELUT_THEME, highlight=False)

COMMANDS = ("generate", "inspect", "config")
HELP_FLAGS = ("-h", "--help", "--version")


def print_success(message: str) -> None:
    console.print(f"[success]✓[/success] {escape(message)}")


def print_error(message: str, hint: Optional[str] = None) -> None:
    console.print(f"[error]✗[/error] {escape(message)}")
    if hint:
        console.print(f"  [muted]Hint: {escape(hint)}[/muted]")


def print_warning(message: str) -> None:
    console.print(f"[warning]![/warning] {escape(message)}")


def print_summary(summary: BatchSummary) -> None:
    """Print a table of per-file results followed by totals."""
    if summary.total == 0:
        print_warning("No JSON config files found")
        return

    table = Table(title="LUT generation", title_style="brand")
    table.add_column("Config")
    table.add_column("Output")
    table.add_column("Status")

    for result in summary.results:
        if result.success:
            status = "[success]written[/success]"
        else:
            status = f"[error]{type(result.error).__name__}[/error]"
        table.add_row(
            escape(str(result.config_path)),
            f"[path]{escape(str(result.output_path))}[/path]" if result.output_path else "-",
            status,
        )

    console.print(table)
    console.print(
        f"Successful: [success]{len(summary.succeeded)}[/success]  "
        f"Failed: [{'error' if summary.failed else 'success'}]{len(summary.failed)}[/]"
    )

    for result in summary.failed:
        console.print(f"  [muted]- {escape(str(result.config_path))}: {escape(str(result.error))}[/muted]")


def generate_command(args: argparse.Namespace, settings: Dict[str, Any]) -> int:
    """Convert every JSON config under the config directory."""
    logger = get_logger("cli")

    try:
        processor = BatchProcessor(
            settings["config_dir"],
            settings["output_dir"],
            workers=settings["workers"],
        )
        summary = processor.run()
    except CinelutError as e:
        logger.critical(str(e))
        print_error(e.message, hint=str(e.cause) if e.cause else None)
        return 1
    except ValueError as e:
        print_error(str(e))
        return 1

    print_summary(summary)
    return 0


def inspect_command(args: argparse.Namespace, settings: Dict[str, Any]) -> int:
    """Show information about a .cube file."""
    path = Path(args.file)

    try:
        lut = CubeParser().load(path)
    except OSError as e:
        print_error(f"Cannot read {path}: {e}")
        return 1
    except CubeFormatError as e:
        print_error(f"Invalid cube file {path}: {e}")
        return 1

    minimum, maximum = lut.value_range()

    table = Table(title=escape(str(path)), title_style="brand", show_header=False)
    table.add_column("Property")
    table.add_column("Value")
    if lut.title:
        table.add_row("Title", escape(lut.title))
    for comment in lut.comments:
        table.add_row("Comment", escape(comment))
    table.add_row("Grid size", str(lut.size))
    table.add_row("Samples", str(len(lut)))
    table.add_row("Minimum", format_sample(tuple(minimum)))
    table.add_row("Maximum", format_sample(tuple(maximum)))
    console.print(table)

    if args.sample:
        r, g, b = args.sample
        console.print(f"{format_sample((r, g, b))} -> {format_sample(lut.apply_to_rgb(r, g, b))}")

    return 0


def config_command(args: argparse.Namespace, settings: Dict[str, Any]) -> int:
    """Show or initialize the run settings file."""
    manager = ConfigFileManager()

    if args.config_action == "show":
        if not manager.config_exists():
            print_warning("No settings file found, showing built-in defaults")
        manager.load()
        console.print(manager.show_config(), markup=False)
        return 0

    if args.config_action == "init":
        target = "project" if args.project else "user"
        path = manager.project_config_path if args.project else manager.user_config_path
        if path.exists() and not args.force:
            print_error(f"Settings file already exists: {path}", hint="Use --force to overwrite")
            return 1
        created = manager.init_config(target)
        print_success(f"Created settings file: {created}")
        return 0

    console.print("Usage: cinelut config {show,init}")
    return 1


def create_parser() -> argparse.ArgumentParser:
    """Create argument parser for CLI."""
    parser = argparse.ArgumentParser(
        prog="cinelut",
        description="cinelut - batch generator for Apple Log to Rec.709 3D LUTs",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Convert every configs/**/*.json into output/*.cube
  cinelut generate

  # generate is implied when no command is given
  cinelut -configDir looks/ -outputDir luts/

  # Explicit directories, four files at a time
  cinelut generate --config-dir looks/ --output-dir luts/ --workers 4

  # Inspect a generated LUT and look up one color
  cinelut inspect luts/teal_orange.cube --sample 0.5 0.5 0.5

  # Create a project-local settings file
  cinelut config init --project
        """
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")

    for flags, kwargs in get_cli_args_parser():
        parser.add_argument(*flags, **kwargs)

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    generate_parser = subparsers.add_parser("generate", help="Generate .cube files from JSON configs")
    generate_parser.add_argument("--config-dir", "-configDir", dest="config_dir", type=str, default=None,
                                 help="Directory containing JSON config files (default: configs)")
    generate_parser.add_argument("--output-dir", "-outputDir", dest="output_dir", type=str, default=None,
                                 help="Directory to write the generated .cube files (default: output)")
    generate_parser.add_argument("--workers", type=int, default=None,
                                 help="Number of config files processed concurrently (default: 1)")
    generate_parser.set_defaults(func=generate_command)

    inspect_parser = subparsers.add_parser("inspect", help="Show information about a .cube file")
    inspect_parser.add_argument("file", type=str, help="Path to a .cube file")
    inspect_parser.add_argument("--sample", type=float, nargs=3, metavar=("R", "G", "B"), default=None,
                                help="Look up a normalized RGB triple with trilinear interpolation")
    inspect_parser.set_defaults(func=inspect_command)

    config_parser = subparsers.add_parser("config", help="Manage run settings files")
    config_subparsers = config_parser.add_subparsers(dest="config_action")
    config_subparsers.add_parser("show", help="Display merged settings")
    config_init_parser = config_subparsers.add_parser("init", help="Create a default settings file")
    config_init_parser.add_argument("--project", action="store_true",
                                    help="Create .cinelut.yaml in the current directory instead of the user file")
    config_init_parser.add_argument("--force", action="store_true", help="Overwrite an existing file")
    config_parser.set_defaults(func=config_command)

    return parser


def load_settings(args: argparse.Namespace) -> Dict[str, Any]:
    """Merge settings files with CLI arguments."""
    manager = ConfigFileManager()
    manager.load()
    settings = manager.merge_with_cli_args(vars(args))
    settings["validation_errors"] = manager.get_validation_errors()
    return settings


def with_default_command(argv: List[str]) -> List[str]:
    """Insert ``generate`` when no sub-command is named.

    Global options are moved in front of the inserted command, so
    ``cinelut -configDir in --log-level debug`` parses as
    ``cinelut --log-level debug generate -configDir in``.
    """
    global_flags = {flag for flags, _ in get_cli_args_parser() for flag in flags}
    leading: List[str] = []
    rest: List[str] = []

    i = 0
    while i < len(argv):
        arg = argv[i]
        if arg.split("=", 1)[0] in global_flags:
            leading.append(arg)
            if "=" not in arg and i + 1 < len(argv):
                i += 1
                leading.append(argv[i])
        elif not rest and (arg in COMMANDS or arg in HELP_FLAGS):
            return list(argv)
        else:
            rest.append(arg)
        i += 1

    return leading + ["generate"] + rest


def main(argv: Optional[List[str]] = None) -> int:
    """Main CLI entry point."""
    parser = create_parser()
    base = sys.argv[1:] if argv is None else list(argv)
    args = parser.parse_args(with_default_command(base))

    settings = load_settings(args)

    configure_from_cli(
        log_level=settings["log_level"],
        log_format=settings["log_format"],
        log_file=settings["log_file"],
    )

    for error in settings["validation_errors"]:
        print_warning(f"Ignoring setting {error.path}: {error.message}")

    try:
        return args.func(args, settings)
    except KeyboardInterrupt:
        print_warning("Operation cancelled by user")
        return 1


if __name__ == "__main__":
    sys.exit(main())
