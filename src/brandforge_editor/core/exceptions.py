"""Custom exceptions for brandforge-editor."""


class BrandForgeError(Exception):
    """Base exception for brandforge-editor."""

    pass


class ConfigError(BrandForgeError):
    """Configuration related errors."""

    pass


class TimelineError(BrandForgeError):
    """Timeline editing errors. Raised before any state is mutated."""

    pass


class ClipNotFoundError(TimelineError):
    """No clip with the given id is on the timeline."""

    pass


class OverlayNotFoundError(TimelineError):
    """No text overlay with the given id is on the timeline."""

    pass


class InvalidTrimError(TimelineError):
    """Trim range outside the source media or empty."""

    pass


class InvalidOverlayError(TimelineError):
    """Text overlay fields or time range are invalid."""

    pass


class StorageError(BrandForgeError):
    """Blob store related errors."""

    pass


class AssetNotFoundError(StorageError):
    """The blob store has no data for the requested asset id."""

    pass


class DecodeError(BrandForgeError):
    """Media bytes are not a supported container or codec."""

    pass


class RenderError(BrandForgeError):
    """Export failures.

    ``last_message`` keeps the last progress message reported before the
    failure, for diagnostics.
    """

    def __init__(self, message: str, last_message: str | None = None):
        super().__init__(message)
        self.last_message = last_message


class EmptyTimelineError(RenderError):
    """Export requested for a timeline without clips."""

    pass


class TranscodeError(RenderError):
    """The transcoder exited with a failure."""

    pass


class OutOfMemoryError(RenderError):
    """The transcoder ran out of memory."""

    pass


class ExportCancelledError(RenderError):
    """The export was cancelled by the caller."""

    pass
