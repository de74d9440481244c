"""
MinVer orchestration.

Resolves the effective settings, runs the preferred tool, and falls back to the
other tool once if the preferred one fails and fallback is allowed.
"""

from typing import Callable, Optional
from loguru import logger

from .config import EffectiveSettings, EnvLookup, resolve_settings
from .settings import MinVerSettings
from .tool import GLOBAL_TOOL, LOCAL_TOOL, MinVerError, MinVerTool
from .version import MinVerVersion

TOOL_NAME = 'MinVer'


def _report_exit_code(settings: EffectiveSettings, exit_code: int) -> None:
    if settings.exit_code_handler is not None:
        settings.exit_code_handler(exit_code)


class MinVerRunner:
    """
    Runs MinVer through the local or global tool.

    The local tool is tried first unless the global tool is preferred. The
    other tool is tried once when the first fails, unless fallback is disabled.
    """

    def __init__(self, local_tool=None, global_tool=None, env_lookup: Optional[EnvLookup] = None):
        self.local_tool = local_tool or MinVerTool(LOCAL_TOOL)
        self.global_tool = global_tool or MinVerTool(GLOBAL_TOOL)
        self.env_lookup = env_lookup

    def select_tools(self, settings: EffectiveSettings) -> tuple:
        """Return (preferred, fallback) for ``settings``."""
        if settings.prefer_global_tool:
            return self.global_tool, self.local_tool
        return self.local_tool, self.global_tool

    def run(self, settings: MinVerSettings) -> MinVerVersion:
        """
        Calculate the version.

        Args:
            settings: Explicit settings from the build script

        Returns:
            MinVerVersion: Version reported by the first tool that succeeded

        Raises:
            MinVerError: If settings are missing, output cannot be parsed,
                or every allowed tool failed
        """
        logger.debug(f'Executing {TOOL_NAME} tool')

        if settings is None:
            raise MinVerError('settings must not be None')

        effective = resolve_settings(settings, env_lookup=self.env_lookup)
        preferred_tool, fallback_tool = self.select_tools(effective)

        preferred_exit_code, version = preferred_tool.try_run(effective)
        if preferred_exit_code == 0:
            _report_exit_code(effective, preferred_exit_code)
            return version

        preferred_error = f'{TOOL_NAME}: Process returned an error (exit code {preferred_exit_code}).'

        if effective.no_fallback:
            logger.debug(f'{preferred_tool.name}: Process returned an error (exit code {preferred_exit_code}).')
            _report_exit_code(effective, preferred_exit_code)
            raise MinVerError(preferred_error, exit_code=preferred_exit_code)

        fallback_exit_code, version = fallback_tool.try_run(effective)
        if fallback_exit_code == 0:
            logger.info(f'{preferred_tool.name}: Process returned an error (exit code {preferred_exit_code}), '
                        f'but {fallback_tool.name} executed successfully.')
            # The failure of the preferred tool is still what gets reported
            _report_exit_code(effective, preferred_exit_code)
            return version

        logger.debug(f'{preferred_tool.name}: Process returned an error (exit code {preferred_exit_code}).')
        logger.debug(f'{fallback_tool.name}: Process returned an error (exit code {fallback_exit_code}).')

        _report_exit_code(effective, preferred_exit_code)
        raise MinVerError(
            f'{preferred_error} {preferred_tool.name} exited with code {preferred_exit_code} and '
            f'{fallback_tool.name} exited with code {fallback_exit_code}.',
            exit_code=preferred_exit_code,
        )


def minver(settings: Optional[MinVerSettings] = None,
           configurator: Optional[Callable[[MinVerSettings], MinVerSettings]] = None,
           runner: Optional[MinVerRunner] = None) -> MinVerVersion:
    """
    Calculate the version of the current build with MinVer.

    Args:
        settings: Explicit settings (defaults to empty settings)
        configurator: Optional function returning adjusted settings
        runner: Runner to use (defaults to one using the real tools)

    Returns:
        MinVerVersion: The calculated version

    Raises:
        MinVerError: If the version cannot be calculated
    """
    from . import __version__

    if settings is None:
        settings = MinVerSettings()
    if configurator is not None:
        settings = configurator(settings)
        if settings is None:
            raise MinVerError('configurator must return the settings to use')

    logger.debug(f'Using minver-build v{__version__}')

    return (runner or MinVerRunner()).run(settings)
