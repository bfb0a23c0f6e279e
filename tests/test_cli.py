"""Test the command-line interface"""

import logging
import pytest
from pathlib import Path
from unittest.mock import patch
from click.testing import CliRunner

from youtube_mp3 import __version__
from youtube_mp3.config.settings import DEFAULT_SEPARATORS
from youtube_mp3.exceptions import (
    DownloadError,
    FetchError,
    NoAudioFormatError,
    OutputError,
    ProbeError,
    TranscodeError
)
from youtube_mp3.main import cli
from youtube_mp3.models import PipelineResult

URL = 'https://www.youtube.com/watch?v=abc123'


@pytest.fixture
def runner():
    yield CliRunner()
    # The command attaches handlers to the runner's captured streams
    root_logger = logging.getLogger()
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)


@pytest.fixture
def pipeline():
    """Replace the pipeline class used by the command"""
    with patch('youtube_mp3.main.Mp3Pipeline') as pipeline_class:
        pipeline_class.return_value.run.return_value = PipelineResult(
            file_path=Path('Adele - Hello.mp3'),
            duration=367.0,
            size=5_000_000,
            bit_rate=160_000,
            elapsed=9,
        )
        yield pipeline_class


def passed_options(pipeline_class):
    return pipeline_class.call_args.args[0]


class TestArguments:

    def test_missing_url(self, runner):
        result = runner.invoke(cli, [])
        assert result.exit_code == 2

    def test_version(self, runner):
        result = runner.invoke(cli, ['--version'])
        assert result.exit_code == 0
        assert __version__ in result.output

    def test_bitrate_out_of_range(self, runner, pipeline):
        result = runner.invoke(cli, ['-b', '500', URL])
        assert result.exit_code == 2
        pipeline.assert_not_called()

    def test_bitrate_not_a_number(self, runner, pipeline):
        result = runner.invoke(cli, ['--bitrate', 'high', URL])
        assert result.exit_code == 2

    def test_invalid_url(self, runner, pipeline):
        result = runner.invoke(cli, ['not-a-url'])
        assert result.exit_code == 2
        pipeline.assert_not_called()

    def test_empty_separator(self, runner, pipeline):
        result = runner.invoke(cli, ['-s', '', URL])
        assert result.exit_code == 2


class TestOptions:

    def test_defaults(self, runner, pipeline):
        result = runner.invoke(cli, [URL])

        assert result.exit_code == 0
        options = passed_options(pipeline)
        assert options.url == URL
        assert options.output is None
        assert options.low_quality is False
        assert options.separators == DEFAULT_SEPARATORS
        assert options.bitrate is None
        assert options.video_only is False
        assert options.keep_intermediate is False
        assert options.confirm is True

    def test_all_flags(self, runner, pipeline):
        result = runner.invoke(cli, [
            '-o', 'song', '-l', '-s', '|', '-s', '~', '-b', '192',
            '--video', '-i', '-y', URL
        ])

        assert result.exit_code == 0
        options = passed_options(pipeline)
        assert options.output == 'song'
        assert options.low_quality is True
        assert options.separators == ['|', '~']
        assert options.bitrate == 192
        assert options.video_only is True
        assert options.keep_intermediate is True
        assert options.confirm is False


class TestExitCodes:

    @pytest.mark.parametrize("error, code", [
        (NoAudioFormatError("No stream with audio"), 2),
        (FetchError("Video unavailable"), 3),
        (DownloadError("Connection reset"), 4),
        (TranscodeError("ffmpeg exited with code 1"), 5),
        (OutputError("Permission denied"), 6),
        (ProbeError("Unable to read"), 7),
        (RuntimeError("unexpected"), 25),
        (KeyboardInterrupt(), 130),
    ])
    def test_error_exit_codes(self, runner, pipeline, error, code):
        pipeline.return_value.run.side_effect = error

        result = runner.invoke(cli, ['-y', URL])

        assert result.exit_code == code
