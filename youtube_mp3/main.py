"""
Command-line interface for youtube-mp3

    youtube-mp3 [OPTIONS] URL

The command validates its arguments, loads the configuration, sets up logging
and hands a PipelineOptions record to Mp3Pipeline. Every failure category ends
the process with its own exit code (see youtube_mp3.exceptions), so wrapping
scripts can react to the kind of failure without parsing messages.
"""

import functools
import sys

import click

from . import __version__
from .config.settings import get_settings, reload_settings
from .exceptions import EXIT_INTERRUPTED, EXIT_RUNTIME, UsageError, YoutubeMp3Error
from .pipeline import Mp3Pipeline, PipelineOptions, log_summary
from .utils.logger import configure_from_settings, get_current_log_file, get_logger
from .utils.validation import validate_bitrate, validate_separators, validate_video_url

logger = get_logger(__name__)


def handle_error(func):
    """
    Decorator mapping exceptions to messages and exit codes

    - YoutubeMp3Error: message as an error, details at debug level, the
      exception's own exit code
    - KeyboardInterrupt / click.Abort: 130
    - anything else: generic runtime error, 25

    Args:
        func: The CLI command function to wrap

    Returns:
        Wrapped function with error handling
    """
    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except (KeyboardInterrupt, click.Abort):
            click.echo(click.style("\n\nOperation cancelled by user", fg='yellow'), err=True)
            sys.exit(EXIT_INTERRUPTED)
        except YoutubeMp3Error as e:
            logger.error(e.message)
            if e.details:
                logger.debug(f"Error details: {e.details}")
            sys.exit(e.exit_code)
        except Exception as e:
            logger.error(f"Unexpected error: {e}")
            logger.debug("Traceback:", exc_info=True)
            log_file = get_current_log_file()
            if log_file:
                click.echo(f"See log file for details: {log_file}", err=True)
            sys.exit(EXIT_RUNTIME)
    return wrapper


def check_arguments(url, bitrate, separators, settings) -> None:
    """
    Validate arguments click cannot check on its own

    Raises:
        UsageError: On the first invalid argument
    """
    checks = [
        validate_video_url(url),
        validate_bitrate(bitrate, settings.audio.min_bitrate, settings.audio.max_bitrate),
    ]
    if separators:
        checks.append(validate_separators(separators))

    for is_valid, error_msg in checks:
        if not is_valid:
            raise UsageError(error_msg)


@click.command(context_settings={'help_option_names': ['-h', '--help']})
@click.argument('url')
@click.option('--output', '-o', type=click.Path(), help='Output file name')
@click.option('--low-quality', '-l', is_flag=True, help='Download the smallest stream with audio')
@click.option('--verbose', '-v', is_flag=True, help='Enable verbose output')
@click.option('--separator', '-s', 'separators', multiple=True,
              help='Artist/title separator in video titles (repeatable)')
@click.option('--bitrate', '-b', type=int, help='Output bitrate in kbps (32-320)')
@click.option('--video', 'video_only', is_flag=True, help='Save the video instead of converting to mp3')
@click.option('--intermediate', '-i', is_flag=True, help='Keep the downloaded video in the working directory')
@click.option('--no-confirm', '-y', is_flag=True, help='Accept the found metadata without prompting')
@click.option('--config', type=click.Path(), help='Path to config file')
@click.version_option(__version__, prog_name='youtube-mp3')
@handle_error
def cli(url, output, low_quality, verbose, separators, bitrate, video_only, intermediate, no_confirm, config):
    """
    Convert the video at URL into a tagged MP3 file

    The highest bitrate audio stream is downloaded (the smallest one with
    --low-quality), converted with ffmpeg and tagged with song metadata.
    Metadata is looked up from the video title and confirmed interactively
    unless --no-confirm is given.
    """
    settings = reload_settings(config) if config else get_settings()
    configure_from_settings(verbose=verbose)

    for problem in settings.validate():
        logger.warning(f"Configuration: {problem}")

    check_arguments(url, bitrate, separators, settings)

    options = PipelineOptions(
        url=url.strip(),
        output=output,
        low_quality=low_quality,
        separators=list(separators) or list(settings.metadata.separators),
        bitrate=bitrate,
        video_only=video_only,
        keep_intermediate=intermediate,
        confirm=not no_confirm,
    )
    logger.debug(f"Options: {options}")

    result = Mp3Pipeline(options, settings=settings).run()
    log_summary(result)


def main():
    """Entry point for direct execution"""
    cli()


if __name__ == '__main__':
    main()
