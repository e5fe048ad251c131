"""The settle command line."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from settle.config import load, read_settings, write_backup

VERSION = "dev"
COMMIT = "unknown"
DATE = "unknown"


def build_parser(settings_path) -> argparse.ArgumentParser:
    """The argument parser; settings_path supplies the default config location."""
    parser = argparse.ArgumentParser(
        prog="settle",
        usage="settle <subcommand>",
        description=(
            "Pass -h to see other subcommands. "
            "Defaults to `ensure` if no subcommand is provided."
        ),
    )
    parser.set_defaults(
        command=None, config=None, target="", settings_path=Path(settings_path)
    )
    subparsers = parser.add_subparsers(dest="command")

    ensure = subparsers.add_parser(
        "ensure",
        usage="settle ensure [-config path] [-target files|brew|apt|pacman|nvim|zsh]",
    )
    ensure.add_argument("-config", "--config", default=None, help="use config file at given path")
    ensure.add_argument(
        "-target", "--target", default="", help="apply only specified stanza of the config"
    )

    dump = subparsers.add_parser(
        "dump-config",
        usage=(
            "settle dump-config [-config path] [-format json|yaml] "
            "[-target files|brew|apt|nvim|zsh]"
        ),
    )
    dump.add_argument("-config", "--config", default=None, help="use config file at given path")
    dump.add_argument("-format", "--format", default="json", help="output format (json or yaml)")
    dump.add_argument(
        "-target", "--target", default="", help="apply only specified stanza of the config"
    )

    version = subparsers.add_parser("version")
    version.add_argument("-verbose", "--verbose", action="store_true")
    return parser


def _load(config_path: str, target: str):
    try:
        return load(config_path, target)
    except RuntimeError as exc:
        raise RuntimeError(f"error loading config: {exc}") from exc


def run_ensure(config_path: str, target: str = "") -> None:
    """Apply the config, then record it unless only one stanza was applied."""
    config = _load(config_path, target)
    config.ensure()
    if target:
        print(
            "skipping writing of settings.yaml and creating settle.yaml backup: "
            "non-zero target specified:",
            target,
        )
        return
    write_backup(config)


def run_dump_config(config_path: str, output_format: str = "json", target: str = "") -> None:
    """Print the loaded config as JSON or YAML."""
    config = _load(config_path, target)
    if output_format == "json":
        text = config.json()
    elif output_format == "yaml":
        text = config.yaml()
    else:
        raise ValueError('invalid format value specified: expected "json" or "yaml"')
    print(text)


def run_version(verbose: bool = False) -> None:
    """Print the version, or version, commit and date when verbose."""
    if verbose:
        print(f"version: {VERSION}\ncommit: {COMMIT}\ndate: {DATE}")
    else:
        print(VERSION)


def main(argv=None) -> int:
    """Run the command line and return the exit status."""
    try:
        home = Path.home()
    except RuntimeError as exc:
        print(f"error: unable to determine home dir: {exc}", file=sys.stderr)
        return 1
    settings_path = home / ".config" / "settle" / "settings.yaml"
    args = build_parser(settings_path).parse_args(argv)

    try:
        if args.command == "version":
            run_version(args.verbose)
            return 0
        config_path = args.config
        if config_path is None:
            config_path = read_settings(args.settings_path)
        if args.command == "dump-config":
            run_dump_config(config_path, args.format, args.target)
        else:
            run_ensure(config_path, args.target)
    except KeyboardInterrupt:
        print("error: interrupted", file=sys.stderr)
        return 0
    except (RuntimeError, OSError, ValueError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())