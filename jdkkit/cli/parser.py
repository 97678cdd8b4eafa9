"""
jdkkit CLI argument parser.

This module implements the command-line interface for jdkkit using argparse.
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from jdkkit import __version__
from jdkkit.core.platform import SUPPORTED_OS

logger = logging.getLogger(__name__)


class CLI:
    """jdkkit command-line interface."""

    def __init__(self):
        """Initialize CLI with argument parser."""
        self.parser = self._create_parser()

    def _create_parser(self) -> argparse.ArgumentParser:
        """
        Create argument parser with all subcommands.

        Returns:
            Configured ArgumentParser instance
        """
        parser = argparse.ArgumentParser(
            prog="jdkkit",
            description="jdkkit - resolve, download and cache JDKs on CI runners",
            epilog='Use "jdkkit COMMAND --help" for command-specific help',
            formatter_class=argparse.RawDescriptionHelpFormatter,
        )

        # Global options
        parser.add_argument(
            "--version", action="version", version=f"jdkkit {__version__}"
        )
        parser.add_argument(
            "--verbose", "-v", action="store_true", help="Enable verbose output"
        )
        parser.add_argument(
            "--quiet",
            "-q",
            action="store_true",
            help="Enable minimal output (errors only)",
        )
        parser.add_argument(
            "--config",
            type=Path,
            metavar="PATH",
            help="Path to configuration file (default: ./jdkkit.yaml)",
        )

        # Subcommands
        subparsers = parser.add_subparsers(
            dest="command", help="Available commands", metavar="COMMAND"
        )

        self._add_setup_command(subparsers)
        self._add_resolve_command(subparsers)
        self._add_cache_command(subparsers)

        return parser

    def _add_setup_command(self, subparsers):
        """Add 'setup' subcommand."""
        parser = subparsers.add_parser(
            "setup",
            help="Install a JDK and make it the default",
            description=(
                "Resolve, download and cache a JDK, then export JAVA_HOME and PATH. "
                "Options left unset fall back to INPUT_* variables, then to the "
                "configuration file."
            ),
        )
        parser.add_argument(
            "--java-version",
            metavar="VERSION",
            help="Version or range to install (e.g., 17, 21.0.2, ^17, 21-ea); "
            "several versions may be given one per line",
        )
        parser.add_argument(
            "--java-version-file",
            metavar="PATH",
            help="File to read the version from (.java-version, .tool-versions)",
        )
        self._add_distribution_arguments(parser)
        parser.add_argument(
            "--check-latest",
            action="store_true",
            default=None,
            help="Resolve the latest remote version even if the tool cache has a match",
        )
        parser.add_argument(
            "--token",
            metavar="TOKEN",
            help="GitHub token used to fetch early-access metadata",
        )
        parser.add_argument(
            "--tool-cache",
            type=Path,
            metavar="PATH",
            help="Tool cache root (default: $RUNNER_TOOL_CACHE)",
        )

    def _add_resolve_command(self, subparsers):
        """Add 'resolve' subcommand."""
        parser = subparsers.add_parser(
            "resolve",
            help="Print the download URL for a version",
            description="Resolve a version to a download URL without downloading it",
        )
        parser.add_argument(
            "java_version", metavar="VERSION", help="Version or range to resolve"
        )
        self._add_distribution_arguments(parser)
        parser.add_argument(
            "--os",
            dest="os_name",
            choices=list(SUPPORTED_OS),
            help="Target operating system (default: host)",
        )
        parser.add_argument(
            "--token",
            metavar="TOKEN",
            help="GitHub token used to fetch early-access metadata",
        )

    def _add_cache_command(self, subparsers):
        """Add 'cache' subcommand."""
        parser = subparsers.add_parser(
            "cache",
            help="List JDKs in the tool cache",
            description="List installed versions of a distribution in the tool cache",
        )
        self._add_distribution_arguments(parser)
        parser.add_argument(
            "--tool-cache",
            type=Path,
            metavar="PATH",
            help="Tool cache root (default: $RUNNER_TOOL_CACHE)",
        )

    def _add_distribution_arguments(self, parser):
        parser.add_argument(
            "--distribution",
            metavar="NAME",
            help="JDK distribution (default: graalvm)",
        )
        parser.add_argument(
            "--architecture",
            metavar="ARCH",
            help="Target architecture (e.g., x64, aarch64; default: host)",
        )
        parser.add_argument(
            "--java-package",
            metavar="TYPE",
            help="Package type (default: jdk)",
        )

    def parse_args(self, args: Optional[List[str]] = None):
        """
        Parse command-line arguments.

        Args:
            args: Arguments to parse (uses sys.argv if None)

        Returns:
            Parsed arguments namespace
        """
        return self.parser.parse_args(args)

    def run(self, args: Optional[List[str]] = None) -> int:
        """
        Run CLI with given arguments.

        Args:
            args: Arguments to parse (uses sys.argv if None)

        Returns:
            Exit code (0 for success, non-zero for error)
        """
        parsed_args = self.parse_args(args)

        # Configure logging
        self._configure_logging(parsed_args)

        # Check if command specified
        if not parsed_args.command:
            self.parser.print_help()
            return 1

        # Dispatch to command handler
        try:
            return self._dispatch_command(parsed_args)
        except KeyboardInterrupt:
            logger.info("Operation cancelled by user")
            return 130  # Standard exit code for SIGINT
        except Exception as e:
            logger.error(f"Error: {e}")
            if parsed_args.verbose:
                import traceback

                traceback.print_exc()
            return 1

    def _configure_logging(self, args):
        """
        Configure logging based on verbose/quiet flags.

        Args:
            args: Parsed arguments with verbose/quiet flags
        """
        if args.verbose:
            level = logging.DEBUG
            format_str = "%(levelname)s [%(name)s] %(message)s"
        elif args.quiet:
            level = logging.ERROR
            format_str = "%(levelname)s: %(message)s"
        else:
            level = logging.INFO
            format_str = "%(message)s"

        logging.basicConfig(
            level=level,
            format=format_str,
            force=True,  # Reconfigure if already configured
        )

    def _dispatch_command(self, args) -> int:
        """
        Dispatch to appropriate command handler.

        Args:
            args: Parsed arguments with command field

        Returns:
            Exit code from command handler
        """
        command_map = {
            "setup": "jdkkit.cli.commands.setup",
            "resolve": "jdkkit.cli.commands.resolve",
            "cache": "jdkkit.cli.commands.cache",
        }

        module_name = command_map.get(args.command)
        if not module_name:
            logger.error(f"Unknown command: {args.command}")
            return 1

        try:
            # Dynamic import of command module
            import importlib

            module = importlib.import_module(module_name)

            if not hasattr(module, "run"):
                logger.error(f"Command module {module_name} has no run() function")
                return 1

            return module.run(args)

        except ImportError as e:
            logger.error(f"Failed to load command module: {e}")
            if args.verbose:
                import traceback

                traceback.print_exc()
            return 1


def main():
    """Main entry point for CLI."""
    cli = CLI()
    sys.exit(cli.run())


if __name__ == "__main__":
    main()
