"""
MinVer process execution.

A single MinVerTool runs MinVer either as a local tool (``dotnet minver``) or
as the global ``minver`` binary, depending on the ToolDescriptor it is given.
Output is captured rather than streamed so MinVer's log lines do not interleave
with the build's own output.
"""

import os
import shutil
import subprocess
from dataclasses import dataclass
from typing import Callable, List, Optional, Sequence, Tuple
from loguru import logger

from .config import EffectiveSettings
from .settings import HostVerbosity, Verbosity
from .utils import render_command
from .version import MinVerVersion, ParseError


class MinVerError(Exception):
    """
    Fatal error raised when MinVer cannot produce a version.

    ``exit_code`` is the exit code being reported, or None when the error
    is not tied to a process run.
    """

    def __init__(self, message: str, exit_code: Optional[int] = None):
        super().__init__(message)
        self.exit_code = exit_code


@dataclass(frozen=True)
class ToolDescriptor:
    """How to locate and start one flavour of MinVer."""

    name: str
    executable_names: Tuple[str, ...]
    prefix_args: Tuple[str, ...] = ()
    honors_tool_path: bool = False


LOCAL_TOOL = ToolDescriptor(
    name='MinVer Local Tool (dotnet minver)',
    executable_names=('dotnet', 'dotnet.exe'),
    prefix_args=('minver',),
)

GLOBAL_TOOL = ToolDescriptor(
    name='MinVer Global Tool (minver)',
    executable_names=('minver', 'minver.exe'),
    honors_tool_path=True,
)

HOST_VERBOSITY_MAP = {
    HostVerbosity.QUIET: Verbosity.ERROR,
    HostVerbosity.MINIMAL: Verbosity.WARN,
    HostVerbosity.NORMAL: Verbosity.INFO,
    HostVerbosity.DETAILED: Verbosity.DEBUG,
    HostVerbosity.DIAGNOSTIC: Verbosity.TRACE,
}


def _has_text(value: Optional[str]) -> bool:
    return value is not None and bool(value.strip())


def resolve_verbosity(settings: EffectiveSettings) -> Optional[Verbosity]:
    """Explicit verbosity, else the host verbosity mapped onto MinVer's scale."""
    if settings.verbosity is not None:
        return settings.verbosity
    if settings.tool_verbosity is not None:
        return HOST_VERBOSITY_MAP.get(settings.tool_verbosity, Verbosity.INFO)
    return None


def build_arguments(settings: EffectiveSettings) -> List[str]:
    """
    Build the MinVer flags for ``settings``.

    Only flags with a value are emitted. Each value is its own argv token.
    """
    args = []

    if settings.auto_increment is not None:
        args += ['--auto-increment', settings.auto_increment.value]
    if _has_text(settings.build_metadata):
        args += ['--build-metadata', settings.build_metadata]
    if _has_text(settings.default_pre_release_phase):
        args += ['--default-pre-release-phase', settings.default_pre_release_phase]
    if _has_text(settings.minimum_major_minor):
        args += ['--minimum-major-minor', settings.minimum_major_minor]
    if _has_text(settings.repo):
        args += ['--repo', settings.repo]
    if _has_text(settings.tag_prefix):
        args += ['--tag-prefix', settings.tag_prefix]

    verbosity = resolve_verbosity(settings)
    if verbosity is not None:
        args += ['--verbosity', verbosity.value]

    return args


def render_arguments(settings: EffectiveSettings) -> str:
    """Display form of the MinVer flags, quoting values with whitespace."""
    return render_command(build_arguments(settings))


def parse_version_output(stdout_lines: Sequence[str]) -> MinVerVersion:
    """
    Parse the last non-blank line of MinVer's standard output.

    Raises:
        MinVerError: If there is no such line or it is not a valid version
    """
    version = next((line.strip() for line in reversed(stdout_lines) if line.strip()), '')
    if not version:
        raise MinVerError(f"Version '{version}' is not valid.", exit_code=0)

    try:
        return MinVerVersion.parse(version)
    except ParseError as e:
        raise MinVerError(f"Version '{version}' is not valid.", exit_code=0) from e


class MinVerTool:
    """Runs one flavour of MinVer and parses its output."""

    def __init__(self, descriptor: ToolDescriptor, which: Callable[[str], Optional[str]] = None,
                 run: Callable[..., subprocess.CompletedProcess] = None):
        self.descriptor = descriptor
        self._which = which or shutil.which
        self._run = run or subprocess.run

    @property
    def name(self) -> str:
        return self.descriptor.name

    def find_executable(self, settings: EffectiveSettings) -> Optional[str]:
        """Locate the executable to start, or None if it cannot be found."""
        if self.descriptor.honors_tool_path and _has_text(settings.tool_path):
            return settings.tool_path

        for executable_name in self.descriptor.executable_names:
            executable = self._which(executable_name)
            if executable:
                return executable
        return None

    def get_command(self, settings: EffectiveSettings, executable: str) -> List[str]:
        return [executable, *self.descriptor.prefix_args, *build_arguments(settings)]

    def try_run(self, settings: EffectiveSettings) -> Tuple[int, Optional[MinVerVersion]]:
        """
        Run MinVer once.

        Launch and execution errors are reported as exit code 1. A zero exit
        with unparseable output is fatal.

        Args:
            settings: Resolved settings for this run

        Returns:
            (exit_code, version): version is set only when exit_code is 0

        Raises:
            MinVerError: If MinVer succeeded but printed no valid version
        """
        if settings is None:
            raise MinVerError('settings must not be None')

        logger.debug(f'{self.name} arguments: [{render_arguments(settings)}]')

        executable = self.find_executable(settings)
        if executable is None:
            logger.debug(f'{self.name}: none of {", ".join(self.descriptor.executable_names)} found in PATH')
            return 1, None

        command = self.get_command(settings, executable)
        env = None
        if settings.environment_variables:
            env = {**os.environ, **settings.environment_variables}

        logger.debug(f'Executing: {render_command(command)}')
        try:
            proc = self._run(
                command,
                capture_output=True,
                text=True,
                encoding='utf-8',
                errors='replace',
                cwd=settings.working_directory,
                timeout=settings.tool_timeout,
                env=env,
            )
        except (OSError, subprocess.SubprocessError) as e:
            logger.debug(f'{self.name}: failed to execute: {e}')
            return 1, None

        stdout_lines = (proc.stdout or '').splitlines()
        stderr_lines = (proc.stderr or '').splitlines()
        for line in stdout_lines:
            logger.debug(line)
        for line in stderr_lines:
            logger.debug(line)

        if proc.returncode != 0:
            logger.debug(f'{self.name}: process returned exit code {proc.returncode}')
            return proc.returncode, None

        return 0, parse_version_output(stdout_lines)
