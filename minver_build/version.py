"""
Parsed MinVer version values.

MinVer prints a SemVer 2.0 string such as ``1.2.3-alpha.4+abcdefg`` as the last
line of its output. This module turns that string into a comparable value object
and exposes the derived assembly/file version strings build scripts need.
"""

import re
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

_NUMERIC_COMPONENT = re.compile(r'[0-9]+')


class ParseError(ValueError):
    """Raised when a string is not a valid MinVer version."""
    pass


def _is_digit(char: str) -> bool:
    return '0' <= char <= '9'


def natural_compare(str_a: Optional[str], str_b: Optional[str]) -> int:
    """
    Compare two strings treating embedded digit runs as numbers.

    ``alpha.2`` sorts before ``alpha.10``. A missing string sorts before a
    present one, and when one string runs out first it sorts first.

    Args:
        str_a: First string (or None)
        str_b: Second string (or None)

    Returns:
        int: -1, 0 or 1
    """
    if str_a is None and str_b is None:
        return 0
    if str_a is None:
        return -1
    if str_b is None:
        return 1

    length_a = len(str_a)
    length_b = len(str_b)
    index_a = 0
    index_b = 0

    while index_a < length_a and index_b < length_b:
        char_a = str_a[index_a]
        char_b = str_b[index_b]

        if _is_digit(char_a) and _is_digit(char_b):
            start_a = index_a
            while index_a < length_a and _is_digit(str_a[index_a]):
                index_a += 1
            start_b = index_b
            while index_b < length_b and _is_digit(str_b[index_b]):
                index_b += 1

            # Leading zeros dropped; a longer run is a larger number
            number_a = str_a[start_a:index_a].lstrip('0')
            number_b = str_b[start_b:index_b].lstrip('0')
            if len(number_a) != len(number_b):
                return 1 if len(number_a) > len(number_b) else -1
            if number_a != number_b:
                return 1 if number_a > number_b else -1
            continue

        if char_a != char_b:
            return 1 if char_a > char_b else -1

        index_a += 1
        index_b += 1

    remaining_a = length_a - index_a
    remaining_b = length_b - index_b
    if remaining_a != remaining_b:
        return 1 if remaining_a > remaining_b else -1

    # Same shape, but "01" and "1" still differ
    if length_a != length_b:
        return 1 if length_a > length_b else -1
    return 0


def _parse_component(value: str, text: str) -> int:
    if not _NUMERIC_COMPONENT.fullmatch(value):
        raise ParseError(f"'{text}' is not a valid version")
    try:
        return int(value)
    except ValueError as e:
        raise ParseError(f"'{text}' is not a valid version") from e


@dataclass(frozen=True, eq=False)
class MinVerVersion:
    """
    Immutable version value produced by a successful MinVer run.

    Accepts ``major.minor.patch[-preRelease][+buildMetadata]``. The build
    metadata is everything after the first ``+`` and the pre-release is
    everything between the first ``-`` and the build metadata, both verbatim.
    """

    version: str
    major: int = field(init=False)
    minor: int = field(init=False)
    patch: int = field(init=False)
    pre_release: Optional[str] = field(init=False)
    build_metadata: Optional[str] = field(init=False)

    def __post_init__(self):
        version = self.version
        if version is None or not version.strip():
            raise ParseError(f"'{version}' is not a valid version")

        core, plus, build_metadata = version.partition('+')
        core, dash, pre_release = core.partition('-')
        components = core.split('.')
        if len(components) != 3:
            raise ParseError(f"'{version}' is not a valid version")

        major, minor, patch = (_parse_component(c, version) for c in components)

        # Derived fields of a frozen dataclass
        object.__setattr__(self, 'major', major)
        object.__setattr__(self, 'minor', minor)
        object.__setattr__(self, 'patch', patch)
        object.__setattr__(self, 'pre_release', pre_release if dash else None)
        object.__setattr__(self, 'build_metadata', build_metadata if plus else None)

    @classmethod
    def parse(cls, text: str) -> 'MinVerVersion':
        """Parse ``text``, raising ParseError if it is not a valid version."""
        return cls(text)

    @classmethod
    def try_parse(cls, text: str) -> Optional['MinVerVersion']:
        """Parse ``text``, returning None if it is not a valid version."""
        try:
            return cls(text)
        except ParseError:
            return None

    @property
    def raw(self) -> str:
        return self.version

    @property
    def is_pre_release(self) -> bool:
        return bool(self.pre_release)

    @property
    def assembly_version(self) -> str:
        return f"{self.major}.0.0.0"

    @property
    def file_version(self) -> str:
        return f"{self.major}.{self.minor}.{self.patch}.0"

    @property
    def informational_version(self) -> str:
        return self.version

    @property
    def package_version(self) -> str:
        return self.version

    def compare(self, other: 'MinVerVersion') -> int:
        """
        Compare with another version.

        Major, minor and patch compare numerically; ties are broken by a
        natural comparison of the pre-release and then the build metadata.
        Anything sorts after None.
        """
        if other is None:
            return 1

        for mine, theirs in ((self.major, other.major),
                             (self.minor, other.minor),
                             (self.patch, other.patch)):
            if mine != theirs:
                return 1 if mine > theirs else -1

        result = natural_compare(self.pre_release, other.pre_release)
        if result != 0:
            return result
        return natural_compare(self.build_metadata, other.build_metadata)

    def to_dict(self) -> Dict[str, Any]:
        """Return every field, including the derived ones."""
        return {
            'version': self.version,
            'major': self.major,
            'minor': self.minor,
            'patch': self.patch,
            'pre_release': self.pre_release,
            'build_metadata': self.build_metadata,
            'is_pre_release': self.is_pre_release,
            'assembly_version': self.assembly_version,
            'file_version': self.file_version,
            'informational_version': self.informational_version,
            'package_version': self.package_version,
        }

    def __eq__(self, other):
        if not isinstance(other, MinVerVersion):
            return NotImplemented
        return self.version == other.version

    def __ne__(self, other):
        result = self.__eq__(other)
        if result is NotImplemented:
            return result
        return not result

    def __lt__(self, other):
        if not isinstance(other, MinVerVersion):
            return NotImplemented
        return self.compare(other) < 0

    def __le__(self, other):
        if not isinstance(other, MinVerVersion):
            return NotImplemented
        return self.compare(other) <= 0

    def __gt__(self, other):
        if not isinstance(other, MinVerVersion):
            return NotImplemented
        return self.compare(other) > 0

    def __ge__(self, other):
        if not isinstance(other, MinVerVersion):
            return NotImplemented
        return self.compare(other) >= 0

    def __hash__(self):
        return hash(self.version)

    def __str__(self):
        return self.version

    def __repr__(self):
        return f"MinVerVersion('{self.version}')"
