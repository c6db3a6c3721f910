"""
Error taxonomy.

Every failure a pipeline can raise derives from MediaRelayError and carries
the HTTP status the route layer should answer with.
"""


class MediaRelayError(Exception):
    """Base error; ``message`` is surfaced verbatim to the client."""

    status_code = 500

    def __init__(self, message: str = ""):
        super().__init__(message)
        self.message = message or "Unknown Error"


class ValidationError(MediaRelayError):
    status_code = 400


class MethodNotAllowed(MediaRelayError):
    status_code = 405

    def __init__(self, message: str = "Method Not Allowed"):
        super().__init__(message)


class NotFoundError(MediaRelayError):
    status_code = 404


class UpstreamError(MediaRelayError):
    """Browser automation, yt-dlp or media download failed."""


class UploadError(MediaRelayError):
    """The file host rejected the upload or could not be reached."""


def error_message(exc: BaseException) -> str:
    """Best message for an arbitrary exception, never empty."""
    if isinstance(exc, MediaRelayError):
        return exc.message
    return str(exc) or "Unknown Error"
