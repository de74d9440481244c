"""
Command-line interface for minver-build.

Runs MinVer for the current build and prints the calculated version, either as
a table, as JSON, or as a single field for use in shell build scripts.
"""

import argparse
import json
import os
import sys
from typing import Dict, List, Optional
from dotenv import load_dotenv
from loguru import logger
from rich.console import Console
from rich.table import Table

from .config import get_env_value
from .logging_config import setup_logging
from .runner import MinVerRunner
from .settings import AutoIncrement, HostVerbosity, MinVerSettings, Verbosity
from .tool import MinVerError
from .version import MinVerVersion

# Logs go to stderr so stdout only carries the version
console = Console(stderr=True)
output_console = Console()

LOG_LEVELS = ['TRACE', 'DEBUG', 'INFO', 'WARNING', 'ERROR']

LOG_LEVEL_TO_HOST_VERBOSITY = {
    'ERROR': HostVerbosity.QUIET,
    'WARNING': HostVerbosity.MINIMAL,
    'INFO': HostVerbosity.NORMAL,
    'DEBUG': HostVerbosity.DETAILED,
    'TRACE': HostVerbosity.DIAGNOSTIC,
}

VERSION_FIELDS = [
    'version',
    'major',
    'minor',
    'patch',
    'pre_release',
    'build_metadata',
    'is_pre_release',
    'assembly_version',
    'file_version',
    'informational_version',
    'package_version',
]


def parse_arguments(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        prog='minver-build',
        description='Calculate the build version from git tags with MinVer'
    )

    # MinVer arguments
    parser.add_argument('--auto-increment', choices=[m.value for m in AutoIncrement],
                        help='Version component to increment after the latest tag (MINVERAUTOINCREMENT)')
    parser.add_argument('--build-metadata', help='Build metadata to append (MINVERBUILDMETADATA)')
    parser.add_argument('--default-pre-release-phase',
                        help='Pre-release phase used when none is derivable (MINVERDEFAULTPRERELEASEPHASE)')
    parser.add_argument('--minimum-major-minor', help='Minimum major.minor, e.g. "1.0" (MINVERMINIMUMMAJORMINOR)')
    parser.add_argument('--repo', help='Repository directory to calculate the version for (MINVERREPO)')
    parser.add_argument('--tag-prefix', help='Prefix stripped from tags, e.g. "v" (MINVERTAGPREFIX)')
    parser.add_argument('--verbosity', choices=[m.value for m in Verbosity],
                        help='MinVer log verbosity (MINVERVERBOSITY)')

    # Tool selection
    parser.add_argument('--prefer-global-tool', action='store_true', default=None,
                        help='Try the global minver tool before dotnet minver (MINVERPREFERGLOBALTOOL)')
    parser.add_argument('--no-fallback', action='store_true', default=None,
                        help='Do not fall back to the other tool on failure (MINVERNOFALLBACK)')
    parser.add_argument('--tool-path', help='Path to a specific minver executable (MINVERTOOLPATH)')
    parser.add_argument('--tool-timeout', type=float, help='Seconds to wait for MinVer before giving up')
    parser.add_argument('--working-directory', help='Directory to run MinVer from')
    parser.add_argument('--env', action='append', default=[], metavar='NAME=VALUE',
                        help='Override an environment variable for this run (repeatable)')

    # Output
    parser.add_argument('--format', choices=['table', 'json', 'plain'], default='table',
                        help='Output format (default: table)')
    parser.add_argument('--field', choices=VERSION_FIELDS,
                        help='Print a single field of the version, e.g. file_version')

    # Logging
    parser.add_argument('--log-level', type=str.upper, choices=LOG_LEVELS,
                        help='Logging level (default: INFO, or LOG_LEVEL)')

    return parser.parse_args(argv)


def parse_env_overrides(values: List[str]) -> Dict[str, str]:
    """
    Parse ``NAME=VALUE`` pairs into an override map.

    Raises:
        ValueError: If a pair has no '=' or an empty name
    """
    overrides = {}
    for value in values:
        name, sep, env_value = value.partition('=')
        name = name.strip()
        if not sep or not name:
            raise ValueError(f'Invalid --env value "{value}" (expected NAME=VALUE)')
        overrides[name] = env_value
    return overrides


def build_settings(args: argparse.Namespace, log_level: str) -> MinVerSettings:
    """Build explicit settings from parsed arguments."""
    return MinVerSettings(
        auto_increment=AutoIncrement(args.auto_increment) if args.auto_increment else None,
        build_metadata=args.build_metadata,
        default_pre_release_phase=args.default_pre_release_phase,
        minimum_major_minor=args.minimum_major_minor,
        repo=args.repo,
        tag_prefix=args.tag_prefix,
        verbosity=Verbosity(args.verbosity) if args.verbosity else None,
        prefer_global_tool=args.prefer_global_tool,
        no_fallback=args.no_fallback,
        tool_path=args.tool_path,
        tool_verbosity=LOG_LEVEL_TO_HOST_VERBOSITY.get(log_level),
        tool_timeout=args.tool_timeout,
        working_directory=args.working_directory,
        environment_variables=parse_env_overrides(args.env),
    )


def format_value(value) -> str:
    if value is None:
        return ''
    if isinstance(value, bool):
        return 'true' if value else 'false'
    return str(value)


def print_version(version: MinVerVersion, output_format: str = 'table', field: Optional[str] = None) -> None:
    """Print ``version`` to stdout in the requested format."""
    fields = version.to_dict()

    if field:
        output_console.print(format_value(fields[field]), markup=False, highlight=False, soft_wrap=True)
        return

    if output_format == 'json':
        output_console.print(json.dumps(fields, indent=2), markup=False, highlight=False, soft_wrap=True)
    elif output_format == 'plain':
        for name in VERSION_FIELDS:
            output_console.print(f'{name}={format_value(fields[name])}', markup=False, highlight=False, soft_wrap=True)
    else:
        table = Table(title=f'MinVer {version}')
        table.add_column('Field', style='cyan')
        table.add_column('Value', style='green')
        for name in VERSION_FIELDS:
            table.add_row(name, format_value(fields[name]))
        output_console.print(table)


def main(argv: Optional[List[str]] = None, runner: Optional[MinVerRunner] = None) -> int:
    """Main entry point for the application."""
    setup_logging(console=console)

    load_dotenv(os.path.join(os.getcwd(), '.env'))

    args = parse_arguments(argv)

    log_level = (args.log_level or get_env_value('LOG_LEVEL', os.environ.get, default='INFO')).upper()
    if log_level not in LOG_LEVELS:
        logger.warning(f'LOG_LEVEL must be one of {LOG_LEVELS} (got: {log_level}), using INFO')
        log_level = 'INFO'
    setup_logging(log_level, console=console)

    try:
        settings = build_settings(args, log_level)
    except ValueError as e:
        logger.error(f'❌ {e}')
        return 2

    try:
        version = (runner or MinVerRunner()).run(settings)
    except MinVerError as e:
        logger.error(f'❌ {e}')
        return 1

    logger.debug(f'Calculated version: {version}')
    print_version(version, args.format, args.field)
    return 0


if __name__ == '__main__':
    sys.exit(main())
