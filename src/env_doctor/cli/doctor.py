#!/usr/bin/env python3
"""
env-doctor - host diagnostics CLI for Drupal deployments

Commands:
- Compatibility report (env-doctor compat)
- Project structure/syntax validation (env-doctor validate)
- PHP setup check (env-doctor setup)
- Version info (env-doctor version)
"""

import argparse
import logging
import sys

from pydantic import ValidationError

from .. import __version__
from ..compat.formatter import render_report
from ..compat.service import CompatibilityService
from ..core.config import get_config
from ..core.console import Colors, colorize
from ..readiness.checker import ReadinessChecker, render_readiness
from ..validator.runner import ProjectValidator, load_manifest, render_validation


def setup_logging(log_level: str):
    """
    Setup logging configuration.

    Logs go to stderr so they never interleave with report text on stdout.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR)
    """
    logging.basicConfig(
        level=getattr(logging, log_level.upper()),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        stream=sys.stderr,
    )


def cmd_compat(args) -> int:
    """
    Run the compatibility checks and print the report.

    Returns:
        Exit code (always 0; the report carries the verdict)
    """
    service = CompatibilityService(config=get_config())
    report = service.run_once()

    if args.json:
        print(report.model_dump_json(indent=2))
    else:
        print(render_report(report, title=service.title))
    return 0


def cmd_validate(args) -> int:
    """
    Validate the project structure and syntax.

    Returns:
        Exit code (0 when no errors were found, 1 otherwise)
    """
    config = load_manifest(args.manifest) if args.manifest else get_config().validator
    validator = ProjectValidator(root=args.root, config=config)
    result = validator.run()

    print(render_validation(result))
    return result.exit_code


def cmd_setup(args) -> int:
    """
    Check whether PHP is ready for the CMS test suite.

    Returns:
        Exit code (0 when ready, 1 otherwise)
    """
    config = get_config()
    checker = ReadinessChecker(config=config.readiness, runtime=config.runtime)
    report = checker.run()

    print(render_readiness(report))
    return report.exit_code


def cmd_version(args) -> int:
    """
    Print version information.

    Returns:
        Exit code (always 0)
    """
    print(f"env-doctor version {__version__}")
    print("Host diagnostics for Drupal deployments")
    return 0


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser for env-doctor."""
    parser = argparse.ArgumentParser(
        prog="env-doctor",
        description="Host diagnostics for Drupal deployments",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  env-doctor compat                  # Score host compatibility
  env-doctor compat --json           # Same, as JSON
  env-doctor validate --root .       # Validate project structure and syntax
  env-doctor setup                   # Check PHP setup for the test suite
  env-doctor version                 # Show version information

Environment variables:
  ENV_DOCTOR_LOG_LEVEL               # Logging level (default: WARNING)
  ENV_DOCTOR_RUNTIME_PHP_BINARY      # PHP binary (default: php)
  ENV_DOCTOR_SCORER_OVERALL_MODE     # split (default) or merged
        """
    )

    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    # compat command
    compat_parser = subparsers.add_parser(
        "compat",
        help="Run compatibility checks and print the scored report"
    )
    compat_parser.add_argument(
        "--json",
        action="store_true",
        help="Print the report as JSON"
    )

    # validate command
    validate_parser = subparsers.add_parser(
        "validate",
        help="Validate project structure, config files and PHP syntax"
    )
    validate_parser.add_argument(
        "--root",
        default=".",
        help="Project root the checked paths are relative to (default: .)"
    )
    validate_parser.add_argument(
        "--manifest",
        help="YAML manifest overriding the checked files and directories"
    )

    # setup command
    subparsers.add_parser(
        "setup",
        help="Check PHP version, extensions, Composer and limits"
    )

    # version command
    subparsers.add_parser(
        "version",
        help="Show version information"
    )

    return parser


def main(argv=None):
    """Main entry point for env-doctor CLI."""
    parser = create_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 0

    try:
        config = get_config()
    except ValidationError as e:
        print(colorize(f"✗ Invalid configuration: {e}", Colors.RED, sys.stderr), file=sys.stderr)
        return 2

    setup_logging(config.log_level)

    # Dispatch to command handlers
    try:
        if args.command == "compat":
            return cmd_compat(args)
        elif args.command == "validate":
            return cmd_validate(args)
        elif args.command == "setup":
            return cmd_setup(args)
        elif args.command == "version":
            return cmd_version(args)
        else:
            print(f"Unknown command: {args.command}", file=sys.stderr)
            return 1
    except (OSError, ValueError) as e:
        print(colorize(f"✗ {e}", Colors.RED, sys.stderr), file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
