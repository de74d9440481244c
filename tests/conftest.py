"""
Pytest configuration and shared fixtures for test suite.

Provides settings fixtures, a fake MinVer tool that records call order,
and helpers for mocking MinVer process results.
"""

import itertools
import subprocess
import pytest
from unittest.mock import MagicMock

from minver_build.config import EffectiveSettings
from minver_build.settings import MinVerSettings
from minver_build.version import MinVerVersion


class FakeMinVerTool:
    """
    Test double for a MinVer tool.

    Records the order in which it was run using a counter shared with the
    other fake, so tests can assert which tool ran first.
    """

    def __init__(self, name, counter, exit_code=0, version=None):
        self.name = name
        self._counter = counter
        self.exit_code = exit_code
        self.version = version
        self.call_count = 0
        self.call_order = []
        self.settings = []

    def try_run(self, settings):
        self.call_count += 1
        self.call_order.append(next(self._counter))
        self.settings.append(settings)
        if self.exit_code != 0:
            return self.exit_code, None
        return 0, MinVerVersion(self.version)


def create_completed_process(returncode=0, stdout='', stderr=''):
    """
    Helper function to create a mock MinVer process result.

    Args:
        returncode: Exit code for the process (0 = success)
        stdout: Captured standard output
        stderr: Captured standard error

    Returns:
        subprocess.CompletedProcess: Result as returned by subprocess.run
    """
    return subprocess.CompletedProcess(args=['minver'], returncode=returncode, stdout=stdout, stderr=stderr)


@pytest.fixture
def counter():
    """Shared execution-order counter for fake tools."""
    return itertools.count(1)


@pytest.fixture
def local_tool(counter):
    """Fake local tool reporting 5.0.1-alpha.0.8."""
    return FakeMinVerTool('MinVer Local Tool (dotnet minver)', counter, version='5.0.1-alpha.0.8')


@pytest.fixture
def global_tool(counter):
    """Fake global tool reporting 1.2.3-preview.0.4."""
    return FakeMinVerTool('MinVer Global Tool (minver)', counter, version='1.2.3-preview.0.4')


@pytest.fixture
def empty_env():
    """Environment lookup with nothing set."""
    return lambda name: None


@pytest.fixture
def default_settings():
    """Explicit settings with nothing set."""
    return MinVerSettings()


@pytest.fixture
def effective_settings():
    """Resolved settings with nothing set."""
    return EffectiveSettings()


@pytest.fixture
def mock_run():
    """subprocess.run replacement returning a successful MinVer run."""
    run = MagicMock()
    run.return_value = create_completed_process(
        stdout='MinVer: Using { Commit: 1234567, Tag: 5.0.0, Version: 5.0.0, Height: 8 }.\n5.0.1-alpha.0.8\n'
    )
    return run


@pytest.fixture
def mock_which():
    """shutil.which replacement that finds every executable in /usr/bin."""
    return MagicMock(side_effect=lambda name: f'/usr/bin/{name}')


@pytest.fixture
def completed_process():
    """Factory for mocked MinVer process results."""
    return create_completed_process
