"""
Configuration resolution for MinVer runs.

Merges the explicit settings supplied by a build script with the per-call
override map and the process environment, and produces the immutable
EffectiveSettings a run works from.
"""

import os
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Dict, Mapping, Optional, Type, TypeVar
from loguru import logger

from . import settings as names
from .settings import AutoIncrement, HostVerbosity, MinVerSettings, Verbosity
from .utils import sanitize_path

E = TypeVar('E', bound=Enum)

EnvLookup = Callable[[str], Optional[str]]

TRUE_VALUES = ('1', 'true', 'yes')
FALSE_VALUES = ('0', 'false', 'no')


def _is_blank(value) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def get_env_value(name: str, env_lookup: EnvLookup, overrides: Optional[Mapping[str, str]] = None,
                  default: Optional[str] = None) -> Optional[str]:
    """
    Get an environment value with precedence: override map > environment > default.

    Blank values count as missing at every level.

    Args:
        name: Environment variable name
        env_lookup: Callable returning the ambient value for a name, or None
        overrides: Per-call override map (optional)
        default: Value returned when nothing is set

    Returns:
        The first non-blank value found, or ``default``
    """
    if overrides:
        value = overrides.get(name)
        if not _is_blank(value):
            return value

    value = env_lookup(name)
    if not _is_blank(value):
        return value

    return default


def get_env_bool(name: str, env_lookup: EnvLookup, overrides: Optional[Mapping[str, str]] = None,
                 default: Optional[bool] = None) -> Optional[bool]:
    """Get boolean environment value. Unrecognised tokens fall through to ``default``."""
    value = get_env_value(name, env_lookup, overrides)
    if value is None:
        return default

    value = value.strip().lower()
    if value in TRUE_VALUES:
        return True
    if value in FALSE_VALUES:
        return False
    return default


def get_env_enum(name: str, enum_type: Type[E], env_lookup: EnvLookup,
                 overrides: Optional[Mapping[str, str]] = None, default: Optional[E] = None) -> Optional[E]:
    """Get enum environment value by case-insensitive member name."""
    value = get_env_value(name, env_lookup, overrides)
    if value is None:
        return default

    member = enum_type.__members__.get(value.strip().upper())
    return member if member is not None else default


def get_env_path(name: str, env_lookup: EnvLookup, overrides: Optional[Mapping[str, str]] = None,
                 default: Optional[str] = None) -> Optional[str]:
    """Get path environment value, normalised for the current platform."""
    value = get_env_value(name, env_lookup, overrides)
    if value is None:
        return default
    return sanitize_path(value.strip())


@dataclass(frozen=True)
class EffectiveSettings:
    """Resolved settings for a single MinVer run."""

    auto_increment: Optional[AutoIncrement] = None
    build_metadata: Optional[str] = None
    default_pre_release_phase: Optional[str] = None
    minimum_major_minor: Optional[str] = None
    repo: Optional[str] = None
    tag_prefix: Optional[str] = None
    verbosity: Optional[Verbosity] = None

    prefer_global_tool: bool = False
    no_fallback: bool = False
    tool_path: Optional[str] = None

    tool_verbosity: Optional[HostVerbosity] = None
    tool_timeout: Optional[float] = None
    working_directory: Optional[str] = None
    environment_variables: Dict[str, str] = field(default_factory=dict)
    exit_code_handler: Optional[Callable[[int], None]] = field(default=None, compare=False)


def resolve_settings(settings: MinVerSettings, env_lookup: Optional[EnvLookup] = None,
                     overrides: Optional[Mapping[str, str]] = None) -> EffectiveSettings:
    """
    Resolve the settings for a run.

    Every field uses, in order: the explicit value when non-empty, then the
    override map, then the process environment, then the default. A tool path
    always means "this exact binary": the global tool is preferred and no
    fallback is attempted.

    Args:
        settings: Explicit settings from the caller
        env_lookup: Ambient environment lookup (defaults to ``os.environ.get``)
        overrides: Override map (defaults to ``settings.environment_variables``)

    Returns:
        EffectiveSettings: New, immutable resolved settings
    """
    if env_lookup is None:
        env_lookup = os.environ.get
    if overrides is None:
        overrides = settings.environment_variables

    def text(explicit: Optional[str], env_key: str) -> Optional[str]:
        if not _is_blank(explicit):
            return explicit
        return get_env_value(env_key, env_lookup, overrides)

    def flag(explicit: Optional[bool], env_key: str) -> Optional[bool]:
        if explicit is not None:
            return explicit
        return get_env_bool(env_key, env_lookup, overrides)

    def choice(explicit: Optional[E], enum_type: Type[E], env_key: str) -> Optional[E]:
        if explicit is not None:
            return explicit
        return get_env_enum(env_key, enum_type, env_lookup, overrides)

    def path(explicit: Optional[str], env_key: str) -> Optional[str]:
        if not _is_blank(explicit):
            return explicit
        return get_env_path(env_key, env_lookup, overrides)

    tool_path = path(settings.tool_path, names.MINVERTOOLPATH)
    prefer_global_tool = bool(flag(settings.prefer_global_tool, names.MINVERPREFERGLOBALTOOL))
    no_fallback = bool(flag(settings.no_fallback, names.MINVERNOFALLBACK))

    if tool_path is not None:
        # A tool path names one exact binary, run as the global tool
        prefer_global_tool = True
        no_fallback = True

    effective = EffectiveSettings(
        auto_increment=choice(settings.auto_increment, AutoIncrement, names.MINVERAUTOINCREMENT),
        build_metadata=text(settings.build_metadata, names.MINVERBUILDMETADATA),
        default_pre_release_phase=text(settings.default_pre_release_phase, names.MINVERDEFAULTPRERELEASEPHASE),
        minimum_major_minor=text(settings.minimum_major_minor, names.MINVERMINIMUMMAJORMINOR),
        repo=path(settings.repo, names.MINVERREPO),
        tag_prefix=text(settings.tag_prefix, names.MINVERTAGPREFIX),
        verbosity=choice(settings.verbosity, Verbosity, names.MINVERVERBOSITY),
        prefer_global_tool=prefer_global_tool,
        no_fallback=no_fallback,
        tool_path=tool_path,
        tool_verbosity=settings.tool_verbosity,
        tool_timeout=settings.tool_timeout,
        working_directory=settings.working_directory,
        environment_variables=dict(settings.environment_variables or {}),
        exit_code_handler=settings.exit_code_handler,
    )

    logger.debug(f'MINVERAUTOINCREMENT = {effective.auto_increment}')
    logger.debug(f'MINVERBUILDMETADATA = {effective.build_metadata}')
    logger.debug(f'MINVERDEFAULTPRERELEASEPHASE = {effective.default_pre_release_phase}')
    logger.debug(f'MINVERMINIMUMMAJORMINOR = {effective.minimum_major_minor}')
    logger.debug(f'MINVERREPO = {effective.repo}')
    logger.debug(f'MINVERTAGPREFIX = {effective.tag_prefix}')
    logger.debug(f'MINVERVERBOSITY = {effective.verbosity}')
    logger.debug(f'MINVERPREFERGLOBALTOOL = {effective.prefer_global_tool}')
    logger.debug(f'MINVERNOFALLBACK = {effective.no_fallback}')
    logger.debug(f'MINVERTOOLPATH = {effective.tool_path}')

    return effective
