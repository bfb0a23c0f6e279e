"""
Exception classes for youtube-mp3.

Every fatal failure of the pipeline maps to one exception class and each class
carries the process exit code the CLI terminates with, so scripts wrapping the
tool can tell the failure categories apart.

Exception Hierarchy:
    YoutubeMp3Error (base, exit code 25)
        UsageError - Bad arguments or no usable stream (2)
            NoAudioFormatError - No stream with audio qualifies (2)
        FetchError - Video information could not be retrieved (3)
        DownloadError - Stream download failed (4)
        TranscodeError - ffmpeg failed to produce the mp3 (5)
        OutputError - Final file could not be written (6)
        ProbeError - Final file could not be read back (7)
        TaggingError - ID3 tags could not be written (warning only)

Metadata lookups and title parsing do not raise: a miss is an expected outcome
and is returned as a result object instead.
"""

# Exit codes, stable across releases
EXIT_SUCCESS = 0
EXIT_USAGE = 2
EXIT_FETCH = 3
EXIT_DOWNLOAD = 4
EXIT_TRANSCODE = 5
EXIT_OUTPUT = 6
EXIT_PROBE = 7
EXIT_RUNTIME = 25
EXIT_INTERRUPTED = 130


class YoutubeMp3Error(Exception):
    """
    Base exception for all youtube-mp3 errors.

    Attributes:
        message: Human-readable error description shown to the user.
        details: Optional dictionary with additional context (URL, stderr, ...).
            Logged at debug level by the CLI.
        exit_code: Process exit code used when this error ends the program.
    """

    exit_code = EXIT_RUNTIME

    def __init__(self, message: str, details: dict | None = None) -> None:
        """
        Initialize the base exception.

        Args:
            message: Human-readable error description.
            details: Optional dictionary containing additional context about the error.
                     Common keys include:
                     - 'url': URL that caused the error
                     - 'path': file involved in the error
                     - 'stderr': output captured from an external process
                     - 'original_error': the underlying exception, as a string
        """
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        """Return the error message for display."""
        return self.message


class UsageError(YoutubeMp3Error):
    """
    Raised for invalid invocations.

    Covers missing or malformed arguments (bitrate out of range, empty URL)
    and sources that offer nothing the tool can work with.
    """

    exit_code = EXIT_USAGE


class NoAudioFormatError(UsageError):
    """
    Raised when the format selector finds no stream carrying audio.

    Example:
        raise NoAudioFormatError(
            "No stream with audio matches the requested quality",
            details={'candidates': 12, 'low_quality': True}
        )
    """
    pass


class FetchError(YoutubeMp3Error):
    """Raised when the video page or its stream listing cannot be retrieved."""

    exit_code = EXIT_FETCH


class DownloadError(YoutubeMp3Error):
    """
    Raised when streaming the selected format fails.

    Common causes:
        - HTTP error status from the media server
        - Connection dropped mid-stream
        - Fewer bytes received than announced
    """

    exit_code = EXIT_DOWNLOAD


class TranscodeError(YoutubeMp3Error):
    """
    Raised when ffmpeg cannot convert the downloaded stream.

    The ffmpeg stderr output, when available, is kept in details['stderr'].
    """

    exit_code = EXIT_TRANSCODE


class OutputError(YoutubeMp3Error):
    """Raised when writing, copying or removing an output file fails."""

    exit_code = EXIT_OUTPUT


class ProbeError(YoutubeMp3Error):
    """Raised when the finished file cannot be probed for duration/size/bit rate."""

    exit_code = EXIT_PROBE


class TaggingError(YoutubeMp3Error):
    """
    Raised when ID3 tags cannot be written.

    This is NOT fatal: the pipeline reports it as a warning and still
    delivers the untagged mp3.
    """
    pass
