# Copyright 2026 emlib Contributors
# SPDX-License-Identifier: Apache-2.0

"""Entry point for the emlib command-line interface."""

import argparse
import logging
import sys
from pathlib import Path

from pydantic import ValidationError
from yachalk import chalk

from emlib.bundler.bundle import BundleError
from emlib.compiler.errors import TransformError
from emlib.config.loader import ConfigError, load_build_config
from emlib.config.model import BuildConfig, ImpureInitializerPolicy, ReferenceStyle, TransformConfig
from emlib.library import LibraryOutput, generate_library
from emlib.parser.lexer import LexerError
from emlib.parser.parser import ParseError

# ###############
# Public Interface
# ###############


def main() -> None:
    """Run the emlib CLI."""
    parser = argparse.ArgumentParser(
        prog="emlib",
        description="emlib - compile ES modules into runtime library descriptors",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Log every pipeline stage to stderr",
    )
    subparsers = parser.add_subparsers(dest="command", metavar="COMMAND")

    # build subcommand
    build_parser = subparsers.add_parser(
        "build",
        help="Generate a library descriptor",
        description="Bundle an entry module and print or write its library descriptor.",
    )
    _add_common_arguments(build_parser)
    build_parser.add_argument(
        "-o",
        "--output",
        help="File to write the descriptor to (default: print to stdout)",
    )

    # check subcommand
    check_parser = subparsers.add_parser(
        "check",
        help="Check that an entry module can become a library",
        description="Run the library pass and report the resulting symbols and dependencies.",
    )
    _add_common_arguments(check_parser)

    args = parser.parse_args()
    if args.command is None:
        parser.print_help()
        sys.exit(0)

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")

    sys.exit(_dispatch(args))


# ################
# Implementation
# ################

# Errors caused by the input; anything else is a bug and propagates.
_USER_ERRORS = (ConfigError, BundleError, LexerError, ParseError, TransformError)


def _add_common_arguments(subparser: argparse.ArgumentParser) -> None:
    subparser.add_argument(
        "entry",
        nargs="?",
        help="Entry module (default: the entry of the build config file)",
    )
    subparser.add_argument(
        "--config",
        help="YAML build config file",
    )
    subparser.add_argument(
        "--local-prefix",
        help="Namespace prefix for private symbols (default: unnamed)",
    )
    subparser.add_argument(
        "--reference-style",
        choices=[style.value for style in ReferenceStyle],
        help="Spelling of descriptor keys and references (default: uniform)",
    )
    subparser.add_argument(
        "--impure-initializers",
        choices=[policy.value for policy in ImpureInitializerPolicy],
        help="Handling of top-level variables with side-effecting initializers (default: reject)",
    )


def _dispatch(args: argparse.Namespace) -> int:
    """Dispatch to the appropriate subcommand handler."""
    if args.command == "build":
        return _cmd_build(args)
    if args.command == "check":
        return _cmd_check(args)
    return 0


def _cmd_build(args: argparse.Namespace) -> int:
    """Handle the build subcommand."""
    try:
        config = _build_config(args)
        library = generate_library(config)
    except _USER_ERRORS as exc:
        print(chalk.red(f"Error: {exc}"), file=sys.stderr)
        return 1

    if config.output is None:
        sys.stdout.write(library.code)
        return 0

    try:
        library.write(config.output)
    except OSError as exc:
        print(chalk.red(f"Error: cannot write '{config.output}': {exc}"), file=sys.stderr)
        return 1
    print(chalk.green(f"Wrote {len(library.symbols)} symbol(s) to '{config.output}'."))
    return 0


def _cmd_check(args: argparse.Namespace) -> int:
    """Handle the check subcommand."""
    try:
        config = _build_config(args)
        print(chalk.blue(f"Checking '{config.entry}'..."))
        library = generate_library(config)
    except _USER_ERRORS as exc:
        print(chalk.red(f"Error: {exc}"), file=sys.stderr)
        return 1

    _print_symbols(library)
    print(chalk.green("No issues found."))
    return 0


def _print_symbols(library: LibraryOutput) -> None:
    for symbol in library.symbols:
        line = f"  {symbol.external_name} ({symbol.visibility.value} {symbol.kind.value})"
        deps = library.dependencies.get(symbol.external_name, ())
        if deps:
            line += " -> " + ", ".join(deps)
        print(line)
    edges = sum(len(deps) for deps in library.dependencies.values())
    print(f"{len(library.symbols)} symbol(s), {edges} dependency edge(s).")


def _build_config(args: argparse.Namespace) -> BuildConfig:
    """Combine the optional config file with command-line overrides.

    Raises:
        ConfigError: If no entry module is given or an option is invalid.
    """
    if args.config is not None:
        config = load_build_config(Path(args.config))
    elif args.entry is not None:
        config = BuildConfig(entry=Path(args.entry).resolve())
    else:
        raise ConfigError("no entry module given; pass ENTRY or --config")

    if args.entry is not None:
        config.entry = Path(args.entry).resolve()
    if getattr(args, "output", None) is not None:
        config.output = Path(args.output).resolve()

    overrides: dict[str, object] = {}
    if args.local_prefix is not None:
        overrides["local_prefix"] = args.local_prefix
    if args.reference_style is not None:
        overrides["reference_style"] = ReferenceStyle(args.reference_style)
    if args.impure_initializers is not None:
        overrides["impure_initializers"] = ImpureInitializerPolicy(args.impure_initializers)
    if overrides:
        try:
            config.transform = TransformConfig(**{**config.transform.model_dump(), **overrides})
        except ValidationError as exc:
            raise ConfigError(f"Invalid option: {exc}") from exc
    return config
