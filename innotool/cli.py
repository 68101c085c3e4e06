# Copyright 2025 Roger Cibrian
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""Command-line interface for innotool.

This module provides the main CLI entry point for the innotool command,
offering commands to run a settings file, validate it, and resync a single
Inno Setup script.

Commands:

    run: Run every active action of a settings file
    validate: Check a settings file without building anything
    sync: Rebuild [Files], [Run] and [Code] of one script

Example:
    Run a settings file:
        ```bash
        $ innotool run --config build.yaml
        ```

    Validate settings:
        ```bash
        $ innotool validate --config build.yaml --verbose
        ```

    Resync a script against a publish folder:
        ```bash
        $ innotool sync Setup/MyApp.iss --input-dir bin/publish \\
            --build-level NETInstallIncluded --runtime-major 8
        ```

Exit Codes:

- 0: Success
- 1: Error (settings, tool, download or validation failure)

Note:
    Each command has its own handler function (cmd_<command>).
    Verbose mode shows full tracebacks on errors for debugging.
    Debug mode implies verbose mode and echoes external tool output.
"""

from __future__ import annotations

import argparse
from importlib.metadata import version
from pathlib import Path
import sys

from innotool.build import run_actions
from innotool.config import load_effective_actions
from innotool.exceptions import ConfigError, InnoToolError
from innotool.logging import get_logger, set_global_logger
from innotool.policy import BuildLevel
from innotool.script import update_script_file
from innotool.validation import validate_config


def _wait_for_enter(args: argparse.Namespace) -> None:
    if getattr(args, "wait", False):
        input("Press [Enter] to exit...")


def cmd_run(args: argparse.Namespace) -> int:
    """Handler for 'innotool run' command.

    Loads the settings file, resolves the action tree and runs every active
    action in order. A failing action is reported and the remaining actions
    still run.

    Args:
        args: Parsed command-line arguments containing the config path,
            working path and flags.

    Returns:
        Exit code (0 when every action succeeded or was skipped, 1 otherwise).
    """
    logger = get_logger(verbose=args.verbose, debug=args.debug)
    set_global_logger(logger)

    config_path = Path(args.config).resolve()
    working_path = Path(args.working_path).resolve() if args.working_path else None

    if not config_path.exists():
        print(f"Error: Settings file not found: {config_path}")
        print(args.usage, end="")
        _wait_for_enter(args)
        return 1

    print(f"Running settings: {config_path}")
    print()

    try:
        actions = load_effective_actions(config_path, working_path=working_path)
    except ConfigError as err:
        print(f"Error: {err}")
        print(args.usage, end="")
        if args.verbose or args.debug:
            import traceback

            traceback.print_exc()
        _wait_for_enter(args)
        return 1

    outcomes = run_actions(actions)
    failed = [o for o in outcomes if o.status == "failed"]

    print("=" * 70)
    print("RUN RESULTS")
    print("=" * 70)
    for outcome in outcomes:
        print(f"{outcome.name:<30} {outcome.action:<22} {outcome.status}")
        if outcome.message and outcome.status == "failed":
            print(f"  [X] {outcome.message}")
    print("=" * 70)
    print()

    if failed:
        print(f"[FAILED] {len(failed)} of {len(outcomes)} action(s) failed.")
        exit_code = 1
    else:
        print("[SUCCESS] All actions completed!")
        exit_code = 0

    _wait_for_enter(args)
    return exit_code


def cmd_validate(args: argparse.Namespace) -> int:
    """Handler for 'innotool validate' command.

    Validates a settings file without running any tool or touching the
    network.

    Args:
        args: Parsed command-line arguments containing the config path and
            verbose flag.

    Returns:
        Exit code (0 for valid settings, 1 for invalid).
    """
    logger = get_logger(verbose=args.verbose, debug=False)
    set_global_logger(logger)

    config_path = Path(args.config).resolve()
    working_path = Path(args.working_path).resolve() if args.working_path else None

    print(f"Validating settings: {config_path}")
    print()

    result = validate_config(config_path, working_path, verbose=args.verbose)

    print("=" * 70)
    print("VALIDATION RESULTS")
    print("=" * 70)
    print(f"Settings:      {result.config_path}")
    print(f"Status:        {result.status.upper()}")
    print(f"Action Count:  {result.action_count}")
    print()

    if result.warnings:
        print(f"Warnings ({len(result.warnings)}):")
        for warning in result.warnings:
            print(f"  [WARNING] {warning}")
        print()

    if result.errors:
        print(f"Errors ({len(result.errors)}):")
        for error in result.errors:
            print(f"  [X] {error}")
        print()

    print("=" * 70)

    if result.status == "valid":
        print()
        print("[SUCCESS] Settings are valid!")
        return 0
    else:
        print()
        print(
            f"[FAILED] Settings validation failed with {len(result.errors)} error(s)."
        )
        return 1


def cmd_sync(args: argparse.Namespace) -> int:
    """Handler for 'innotool sync' command.

    Rebuilds [Files] from a publish folder and the generated [Run] and [Code]
    content for the given build level, without compiling or signing.

    Args:
        args: Parsed command-line arguments containing the script path,
            input directory, build level, runtime major and flags.

    Returns:
        Exit code (0 for success, 1 for failure).
    """
    logger = get_logger(verbose=args.verbose, debug=args.debug)
    set_global_logger(logger)

    script_path = Path(args.script).resolve()
    input_dir = Path(args.input_dir).resolve()

    try:
        level = BuildLevel.parse(args.build_level)
        if level >= BuildLevel.NET_INSTALL_INCLUDED and not args.runtime_major:
            raise ConfigError(f"--build-level {level.name} requires --runtime-major")
        changed = update_script_file(script_path, args.runtime_major, level, input_dir)
    except InnoToolError as err:
        print(f"Error: {err}")
        if args.verbose or args.debug:
            import traceback

            traceback.print_exc()
        return 1

    print("=" * 70)
    print("SYNC RESULTS")
    print("=" * 70)
    print(f"Script:        {script_path}")
    print(f"Input Folder:  {input_dir}")
    print(f"Build Level:   {level.name}")
    print(f"Status:        {'updated' if changed else 'unchanged'}")
    print("=" * 70)
    print()
    print("[SUCCESS] Script synchronized!")
    return 0


def main() -> None:
    """Main entry point for the innotool CLI.

    This function is registered as the 'innotool' console script in
    pyproject.toml.
    """
    parser = argparse.ArgumentParser(
        prog="innotool",
        description="innotool - build, sign and package .NET apps with Inno Setup",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"innotool {version('innotool')}",
    )

    subparsers = parser.add_subparsers(
        dest="command",
        help="Available commands",
        required=True,
    )

    # 'run' command
    parser_run = subparsers.add_parser(
        "run",
        help="Run every active action of a settings file",
        description="Resolve the settings file action tree and run it.",
    )
    parser_run.add_argument(
        "--config",
        required=True,
        help="Path to the settings file (YAML or JSON)",
    )
    parser_run.add_argument(
        "--working-path",
        default=None,
        help="Working path used when the settings file sets none",
    )
    parser_run.add_argument(
        "--wait",
        action="store_true",
        help="Wait for Enter before exiting",
    )
    parser_run.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Show progress and high-level status updates",
    )
    parser_run.add_argument(
        "-d",
        "--debug",
        action="store_true",
        help="Show detailed debugging output (implies --verbose)",
    )
    parser_run.set_defaults(func=cmd_run, usage=parser_run.format_usage())

    # 'validate' command
    parser_validate = subparsers.add_parser(
        "validate",
        help="Validate a settings file (no builds, no downloads)",
        description="Check a settings file for errors without running any tool.",
    )
    parser_validate.add_argument(
        "--config",
        required=True,
        help="Path to the settings file (YAML or JSON)",
    )
    parser_validate.add_argument(
        "--working-path",
        default=None,
        help="Working path used when the settings file sets none",
    )
    parser_validate.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Show validation progress and details",
    )
    parser_validate.set_defaults(func=cmd_validate)

    # 'sync' command
    parser_sync = subparsers.add_parser(
        "sync",
        help="Rebuild [Files], [Run] and [Code] of an Inno Setup script",
        description="Synchronize one script with a publish folder and build level.",
    )
    parser_sync.add_argument(
        "script",
        help="Path to the Inno Setup script (.iss)",
    )
    parser_sync.add_argument(
        "--input-dir",
        required=True,
        help="Folder whose files are listed in [Files]",
    )
    parser_sync.add_argument(
        "--build-level",
        default="None",
        help="Project build level (None, Minimum, StandAlone, "
        "NETInstallIncluded, NETInstallDownload)",
    )
    parser_sync.add_argument(
        "--runtime-major",
        type=int,
        default=0,
        help=".NET major version for NET install build levels",
    )
    parser_sync.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Show progress and high-level status updates",
    )
    parser_sync.add_argument(
        "-d",
        "--debug",
        action="store_true",
        help="Show detailed debugging output (implies --verbose)",
    )
    parser_sync.set_defaults(func=cmd_sync)

    args = parser.parse_args()

    exit_code = args.func(args)
    sys.exit(exit_code)


if __name__ == "__main__":
    main()
