"""
Tests for CLI functionality.
"""

import json
import pytest
from unittest.mock import patch, MagicMock

from minver_build.cli import (
    VERSION_FIELDS,
    build_settings,
    format_value,
    main,
    parse_arguments,
    parse_env_overrides,
    print_version,
)
from minver_build.settings import AutoIncrement, HostVerbosity, MinVerSettings, Verbosity
from minver_build.tool import MinVerError
from minver_build.version import MinVerVersion


def printed(mock_console):
    """Positional text passed to each print() call."""
    return [c[0][0] for c in mock_console.print.call_args_list]


class TestArgumentParsing:
    """Test command-line argument parsing."""

    def test_parse_arguments_defaults(self):
        args = parse_arguments([])
        assert args.auto_increment is None
        assert args.tag_prefix is None
        assert args.prefer_global_tool is None
        assert args.no_fallback is None
        assert args.env == []
        assert args.format == 'table'
        assert args.field is None
        assert args.log_level is None

    def test_parse_arguments_minver_flags(self):
        args = parse_arguments([
            '--auto-increment', 'minor',
            '--build-metadata', 'sha.1234',
            '--default-pre-release-phase', 'preview',
            '--minimum-major-minor', '2.0',
            '--repo', '/src/repo',
            '--tag-prefix', 'v',
            '--verbosity', 'debug',
        ])
        assert args.auto_increment == 'minor'
        assert args.build_metadata == 'sha.1234'
        assert args.default_pre_release_phase == 'preview'
        assert args.minimum_major_minor == '2.0'
        assert args.repo == '/src/repo'
        assert args.tag_prefix == 'v'
        assert args.verbosity == 'debug'

    def test_parse_arguments_tool_flags(self):
        args = parse_arguments([
            '--prefer-global-tool', '--no-fallback',
            '--tool-path', '/opt/minver/minver',
            '--tool-timeout', '30',
            '--env', 'MINVERTAGPREFIX=v',
            '--env', 'FOO=bar',
        ])
        assert args.prefer_global_tool is True
        assert args.no_fallback is True
        assert args.tool_path == '/opt/minver/minver'
        assert args.tool_timeout == 30.0
        assert args.env == ['MINVERTAGPREFIX=v', 'FOO=bar']

    def test_parse_arguments_log_level_case_insensitive(self):
        assert parse_arguments(['--log-level', 'debug']).log_level == 'DEBUG'

    def test_parse_arguments_invalid_choice(self):
        with pytest.raises(SystemExit):
            parse_arguments(['--auto-increment', 'build'])

    def test_parse_arguments_help(self):
        with pytest.raises(SystemExit):
            parse_arguments(['--help'])


class TestEnvOverrides:
    """Test NAME=VALUE override parsing."""

    def test_parse_env_overrides(self):
        overrides = parse_env_overrides(['MINVERTAGPREFIX=v', 'FOO=a=b', 'EMPTY='])
        assert overrides == {'MINVERTAGPREFIX': 'v', 'FOO': 'a=b', 'EMPTY': ''}

    @pytest.mark.parametrize("value", ['NOEQUALS', '=value', ' =value'])
    def test_parse_env_overrides_invalid(self, value):
        with pytest.raises(ValueError, match='NAME=VALUE'):
            parse_env_overrides([value])


class TestBuildSettings:
    """Test conversion of arguments to settings."""

    def test_build_settings_empty(self):
        settings = build_settings(parse_arguments([]), 'INFO')
        assert settings == MinVerSettings(tool_verbosity=HostVerbosity.NORMAL)

    def test_build_settings_values(self):
        args = parse_arguments([
            '--auto-increment', 'major',
            '--verbosity', 'trace',
            '--tag-prefix', 'v',
            '--no-fallback',
            '--env', 'MINVERREPO=/src',
        ])
        settings = build_settings(args, 'INFO')
        assert settings.auto_increment is AutoIncrement.MAJOR
        assert settings.verbosity is Verbosity.TRACE
        assert settings.tag_prefix == 'v'
        assert settings.no_fallback is True
        assert settings.prefer_global_tool is None
        assert settings.environment_variables == {'MINVERREPO': '/src'}

    @pytest.mark.parametrize("log_level,expected", [
        ('ERROR', HostVerbosity.QUIET),
        ('WARNING', HostVerbosity.MINIMAL),
        ('INFO', HostVerbosity.NORMAL),
        ('DEBUG', HostVerbosity.DETAILED),
        ('TRACE', HostVerbosity.DIAGNOSTIC),
    ])
    def test_build_settings_host_verbosity(self, log_level, expected):
        settings = build_settings(parse_arguments([]), log_level)
        assert settings.tool_verbosity is expected


class TestPrintVersion:
    """Test version output formats."""

    @pytest.fixture
    def version(self):
        return MinVerVersion('1.2.3-alpha.4+abcdefg')

    @pytest.mark.parametrize("value,expected", [
        (None, ''),
        (True, 'true'),
        (False, 'false'),
        (3, '3'),
        ('alpha', 'alpha'),
    ])
    def test_format_value(self, value, expected):
        assert format_value(value) == expected

    @patch('minver_build.cli.output_console')
    def test_print_field(self, mock_console, version):
        print_version(version, field='file_version')
        assert printed(mock_console) == ['1.2.3.0']

    @patch('minver_build.cli.output_console')
    def test_print_missing_field(self, mock_console):
        print_version(MinVerVersion('1.2.3'), field='pre_release')
        assert printed(mock_console) == ['']

    @patch('minver_build.cli.output_console')
    def test_print_json(self, mock_console, version):
        print_version(version, 'json')
        data = json.loads(printed(mock_console)[0])
        assert data['version'] == '1.2.3-alpha.4+abcdefg'
        assert data['major'] == 1
        assert data['is_pre_release'] is True

    @patch('minver_build.cli.output_console')
    def test_print_plain(self, mock_console, version):
        print_version(version, 'plain')
        lines = printed(mock_console)
        assert len(lines) == len(VERSION_FIELDS)
        assert lines[0] == 'version=1.2.3-alpha.4+abcdefg'
        assert 'pre_release=alpha.4' in lines
        assert 'is_pre_release=true' in lines

    @patch('minver_build.cli.output_console')
    def test_print_table(self, mock_console, version):
        print_version(version)
        table = printed(mock_console)[0]
        assert table.title == 'MinVer 1.2.3-alpha.4+abcdefg'
        assert table.row_count == len(VERSION_FIELDS)


@patch('minver_build.cli.print_version')
@patch('minver_build.cli.load_dotenv')
@patch('minver_build.cli.setup_logging')
class TestMain:
    """Test the main entry point."""

    def test_main_success(self, mock_setup_logging, mock_load_dotenv, mock_print):
        runner = MagicMock()
        runner.run.return_value = MinVerVersion('5.0.1-alpha.0.8')

        with patch.dict('os.environ', {}, clear=True):
            result = main(['--tag-prefix', 'v', '--format', 'json'], runner=runner)

        assert result == 0
        mock_load_dotenv.assert_called_once()
        settings = runner.run.call_args[0][0]
        assert settings.tag_prefix == 'v'
        assert settings.tool_verbosity is HostVerbosity.NORMAL
        mock_print.assert_called_once_with(MinVerVersion('5.0.1-alpha.0.8'), 'json', None)

    def test_main_minver_error(self, mock_setup_logging, mock_load_dotenv, mock_print):
        runner = MagicMock()
        runner.run.side_effect = MinVerError('MinVer: Process returned an error (exit code 1).', exit_code=1)

        with patch('minver_build.cli.logger') as mock_logger:
            result = main([], runner=runner)

        assert result == 1
        mock_logger.error.assert_called_once()
        assert 'exit code 1' in mock_logger.error.call_args[0][0]
        mock_print.assert_not_called()

    def test_main_invalid_env_override(self, mock_setup_logging, mock_load_dotenv, mock_print):
        runner = MagicMock()

        with patch('minver_build.cli.logger'):
            result = main(['--env', 'NOEQUALS'], runner=runner)

        assert result == 2
        runner.run.assert_not_called()

    def test_main_log_level_flag(self, mock_setup_logging, mock_load_dotenv, mock_print):
        runner = MagicMock()
        runner.run.return_value = MinVerVersion('1.0.0')

        main(['--log-level', 'debug'], runner=runner)

        assert mock_setup_logging.call_args[0][0] == 'DEBUG'
        assert runner.run.call_args[0][0].tool_verbosity is HostVerbosity.DETAILED

    def test_main_log_level_from_environment(self, mock_setup_logging, mock_load_dotenv, mock_print):
        runner = MagicMock()
        runner.run.return_value = MinVerVersion('1.0.0')

        with patch.dict('os.environ', {'LOG_LEVEL': 'trace'}, clear=True):
            main([], runner=runner)

        assert mock_setup_logging.call_args[0][0] == 'TRACE'
        assert runner.run.call_args[0][0].tool_verbosity is HostVerbosity.DIAGNOSTIC

    def test_main_invalid_log_level_from_environment(self, mock_setup_logging, mock_load_dotenv, mock_print):
        runner = MagicMock()
        runner.run.return_value = MinVerVersion('1.0.0')

        with patch.dict('os.environ', {'LOG_LEVEL': 'LOUD'}, clear=True), \
                patch('minver_build.cli.logger') as mock_logger:
            result = main([], runner=runner)

        assert result == 0
        mock_logger.warning.assert_called_once()
        assert mock_setup_logging.call_args[0][0] == 'INFO'
