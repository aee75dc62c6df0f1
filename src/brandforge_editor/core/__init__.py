"""Core module for brandforge-editor."""

from brandforge_editor.core.config import Settings, get_settings
from brandforge_editor.core.exceptions import (
    AssetNotFoundError,
    BrandForgeError,
    ClipNotFoundError,
    ConfigError,
    DecodeError,
    EmptyTimelineError,
    ExportCancelledError,
    InvalidOverlayError,
    InvalidTrimError,
    OutOfMemoryError,
    OverlayNotFoundError,
    RenderError,
    StorageError,
    TimelineError,
    TranscodeError,
)

__all__ = [
    "Settings",
    "get_settings",
    "BrandForgeError",
    "ConfigError",
    "TimelineError",
    "ClipNotFoundError",
    "OverlayNotFoundError",
    "InvalidTrimError",
    "InvalidOverlayError",
    "StorageError",
    "AssetNotFoundError",
    "DecodeError",
    "RenderError",
    "EmptyTimelineError",
    "TranscodeError",
    "OutOfMemoryError",
    "ExportCancelledError",
]
