"""
Explicit MinVer settings supplied by a build script.

Settings objects are frozen. The ``with_*`` helpers return a modified copy so a
build script can chain them, e.g.::

    settings = MinVerSettings().with_tag_prefix('v').with_auto_increment(AutoIncrement.MINOR)
"""

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Callable, Dict, Optional


class AutoIncrement(Enum):
    """Version component MinVer increments after the latest tag."""
    MAJOR = 'major'
    MINOR = 'minor'
    PATCH = 'patch'


class Verbosity(Enum):
    """MinVer's own log verbosity."""
    ERROR = 'error'
    WARN = 'warn'
    INFO = 'info'
    DEBUG = 'debug'
    TRACE = 'trace'


class HostVerbosity(Enum):
    """Verbosity of the build tool driving MinVer."""
    QUIET = 'quiet'
    MINIMAL = 'minimal'
    NORMAL = 'normal'
    DETAILED = 'detailed'
    DIAGNOSTIC = 'diagnostic'


ENV_PREFIX = 'MINVER'

# Environment variables that translate to MinVer arguments
MINVERAUTOINCREMENT = f'{ENV_PREFIX}AUTOINCREMENT'
MINVERBUILDMETADATA = f'{ENV_PREFIX}BUILDMETADATA'
MINVERDEFAULTPRERELEASEPHASE = f'{ENV_PREFIX}DEFAULTPRERELEASEPHASE'
MINVERMINIMUMMAJORMINOR = f'{ENV_PREFIX}MINIMUMMAJORMINOR'
MINVERREPO = f'{ENV_PREFIX}REPO'
MINVERTAGPREFIX = f'{ENV_PREFIX}TAGPREFIX'
MINVERVERBOSITY = f'{ENV_PREFIX}VERBOSITY'

# Environment variables that change how the tools are run
MINVERPREFERGLOBALTOOL = f'{ENV_PREFIX}PREFERGLOBALTOOL'
MINVERNOFALLBACK = f'{ENV_PREFIX}NOFALLBACK'
MINVERTOOLPATH = f'{ENV_PREFIX}TOOLPATH'


def _require_text(value: str, name: str) -> str:
    if value is None or not str(value).strip():
        raise ValueError(f'{name} cannot be empty or whitespace')
    return value


def _require_member(value, enum_type, name: str):
    if not isinstance(value, enum_type):
        raise ValueError(f'{name}={value!r} is not a valid {enum_type.__name__}')
    return value


@dataclass(frozen=True)
class MinVerSettings:
    """Settings as supplied by the caller. Unset fields may be filled from the environment."""

    # MinVer arguments
    auto_increment: Optional[AutoIncrement] = None
    build_metadata: Optional[str] = None
    default_pre_release_phase: Optional[str] = None
    minimum_major_minor: Optional[str] = None
    repo: Optional[str] = None
    tag_prefix: Optional[str] = None
    verbosity: Optional[Verbosity] = None

    # Tool selection
    prefer_global_tool: Optional[bool] = None
    no_fallback: Optional[bool] = None
    tool_path: Optional[str] = None

    # Process execution
    tool_verbosity: Optional[HostVerbosity] = None
    tool_timeout: Optional[float] = None
    working_directory: Optional[str] = None
    environment_variables: Dict[str, str] = field(default_factory=dict)
    exit_code_handler: Optional[Callable[[int], None]] = field(default=None, compare=False)

    def with_auto_increment(self, auto_increment: AutoIncrement) -> 'MinVerSettings':
        return replace(self, auto_increment=_require_member(auto_increment, AutoIncrement, 'auto_increment'))

    def with_build_metadata(self, build_metadata: str) -> 'MinVerSettings':
        return replace(self, build_metadata=_require_text(build_metadata, 'build_metadata'))

    def with_default_pre_release_phase(self, default_pre_release_phase: str) -> 'MinVerSettings':
        return replace(self, default_pre_release_phase=_require_text(
            default_pre_release_phase, 'default_pre_release_phase'))

    def with_minimum_major_minor(self, minimum_major_minor: str) -> 'MinVerSettings':
        return replace(self, minimum_major_minor=_require_text(minimum_major_minor, 'minimum_major_minor'))

    def with_repo(self, repo: str) -> 'MinVerSettings':
        return replace(self, repo=_require_text(repo, 'repo'))

    def with_tag_prefix(self, tag_prefix: str) -> 'MinVerSettings':
        return replace(self, tag_prefix=_require_text(tag_prefix, 'tag_prefix'))

    def with_prefer_global_tool(self) -> 'MinVerSettings':
        return replace(self, prefer_global_tool=True)

    def with_no_fallback(self) -> 'MinVerSettings':
        return replace(self, no_fallback=True)

    def with_tool_path(self, tool_path: str) -> 'MinVerSettings':
        return replace(self, tool_path=_require_text(tool_path, 'tool_path'))

    def with_verbosity(self, verbosity: Verbosity) -> 'MinVerSettings':
        return replace(self, verbosity=_require_member(verbosity, Verbosity, 'verbosity'))

    def from_path(self, path: str) -> 'MinVerSettings':
        """Run MinVer from ``path`` instead of the current directory."""
        return replace(self, working_directory=_require_text(path, 'path'))
