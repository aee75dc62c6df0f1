"""Services module for brandforge-editor."""

from brandforge_editor.services.assets import AssetLibrary, cascade_delete
from brandforge_editor.services.compositor import OverlayCompositor
from brandforge_editor.services.frames import DecodedFrameSource, FFmpegFrameLoader, FrameSource
from brandforge_editor.services.playback import AsyncTickSource, PlaybackState, PlaybackSynchronizer
from brandforge_editor.services.probe import MediaProbe
from brandforge_editor.services.storage import BlobStore, FileBlobStore, MemoryBlobStore
from brandforge_editor.services.transcoder import FFmpegTranscoder, Transcoder

__all__ = [
    "AssetLibrary",
    "cascade_delete",
    "OverlayCompositor",
    "FrameSource",
    "DecodedFrameSource",
    "FFmpegFrameLoader",
    "AsyncTickSource",
    "PlaybackState",
    "PlaybackSynchronizer",
    "MediaProbe",
    "BlobStore",
    "FileBlobStore",
    "MemoryBlobStore",
    "Transcoder",
    "FFmpegTranscoder",
]
