"""
minver-build

Calculate build versions from git tags by running MinVer, either as a
local tool (dotnet minver) or as the global minver binary.
"""

from ._version import __version__
from .runner import MinVerRunner, minver
from .settings import AutoIncrement, HostVerbosity, MinVerSettings, Verbosity
from .tool import MinVerError
from .version import MinVerVersion, ParseError

__description__ = "Calculate build versions from git tags with MinVer"

__all__ = [
    'AutoIncrement',
    'HostVerbosity',
    'MinVerError',
    'MinVerRunner',
    'MinVerSettings',
    'MinVerVersion',
    'ParseError',
    'Verbosity',
    'minver',
]
