"""
Utility functions for minver-build.

Contains small platform and formatting helpers shared by the
configuration, tool and CLI modules.
"""

import os
from typing import Iterable


def is_windows() -> bool:
    """Check if running on Windows operating system."""
    return os.name == 'nt'


def sanitize_path(path: str) -> str:
    """
    Sanitize file path for cross-platform compatibility.

    On Windows:
    - Converts forward slashes to backslashes
    - Handles UNC paths (\\\\server\\share)
    - Normalizes path separators

    On Linux/macOS:
    - Returns path as-is with normalization

    Args:
        path: The file path to sanitize

    Returns:
        str: Sanitized file path
    """
    if is_windows():
        if path.startswith('//'):
            path = '\\\\' + path[2:].replace('/', '\\')
        else:
            path = path.replace('/', '\\')

    return os.path.normpath(path)


def quote_argument(value: str) -> str:
    """Wrap ``value`` in double quotes if it contains whitespace."""
    if any(char.isspace() for char in value) and not (value.startswith('"') and value.endswith('"')):
        return f'"{value}"'
    return value


def render_command(args: Iterable[str]) -> str:
    """Render an argument list as a single display string."""
    return ' '.join(quote_argument(str(arg)) for arg in args)
