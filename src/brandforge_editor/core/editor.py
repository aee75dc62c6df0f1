"""Video editor: the operations exposed to the studio UI."""

import asyncio
from typing import Any, Callable

from loguru import logger
from PIL import Image

from brandforge_editor.core.config import Settings
from brandforge_editor.core.exceptions import (
    AssetNotFoundError,
    ClipNotFoundError,
    OverlayNotFoundError,
)
from brandforge_editor.core.pipeline import ExportPipeline
from brandforge_editor.models.asset import Brand, BrandAsset
from brandforge_editor.models.render import ExportResult, ProbeResult
from brandforge_editor.models.timeline import (
    Clip,
    ClipSelection,
    OverlaySelection,
    Selection,
    TextOverlay,
    Timeline,
)
from brandforge_editor.services.assets import AssetLibrary, cascade_delete
from brandforge_editor.services.frames import FFmpegFrameLoader, FrameLoader, FrameSource
from brandforge_editor.services.playback import PlaybackSynchronizer
from brandforge_editor.services.probe import MediaProbe, Probe
from brandforge_editor.services.storage import BlobStore
from brandforge_editor.utils.time import TimeUtils


class VideoEditor:
    """Timeline editing, live preview and export for one brand."""

    def __init__(
        self,
        settings: Settings,
        brand: Brand,
        blob_store: BlobStore,
        probe: Probe | None = None,
        frame_loader: FrameLoader | None = None,
        pipeline: ExportPipeline | None = None,
    ):
        """
        Initialize editor.

        Args:
            settings: Application settings
            brand: Brand whose asset library feeds and receives videos
            blob_store: Media bytes by asset id
            probe: Media probe, FFmpeg-backed if not given
            frame_loader: Preview decoder factory, FFmpeg-backed if not given
            pipeline: Export pipeline, FFmpeg-backed if not given
        """
        self.settings = settings
        self.blob_store = blob_store
        self.library = AssetLibrary(brand, blob_store)
        self.probe = probe or MediaProbe(settings.preview, settings.paths)
        self.frame_loader = frame_loader or FFmpegFrameLoader(settings.preview, settings.paths)
        self.pipeline = pipeline or ExportPipeline(settings, blob_store)

        self.timeline = Timeline()
        self.frame_sources: dict[str, FrameSource] = {}
        self.thumbnails: dict[str, bytes] = {}
        self.selection: Selection | None = None
        self.player = PlaybackSynchronizer(self.timeline, self.frame_sources, settings.preview)

        # Shared by every clip cut from the same source asset
        self._asset_sources: dict[str, tuple[ProbeResult, FrameSource]] = {}

    @property
    def brand(self) -> Brand:
        return self.library.brand

    def available_videos(self) -> list[BrandAsset]:
        """Library videos that can be added as clips."""
        return self.library.video_assets()

    # Clips

    async def add_clip(self, source_asset_id: str) -> Clip:
        """
        Append a library video to the end of the timeline.

        The timeline is only touched once the media has been loaded,
        probed and decoded. A source already on the timeline is not
        decoded again; its clips share one frame source.

        Raises:
            AssetNotFoundError: No bytes stored for the asset
            DecodeError: The bytes are not a playable video
        """
        cached = self._asset_sources.get(source_asset_id)
        if cached is None:
            data = await self.blob_store.get(source_asset_id)
            if not data:
                raise AssetNotFoundError(f"Could not load video data for asset {source_asset_id}")

            probe = await self.probe.probe(data)
            frame_source = await self.frame_loader.load(data)
            self._asset_sources[source_asset_id] = (probe, frame_source)
        else:
            probe, frame_source = cached

        clip = Clip.from_source(source_asset_id, probe.duration)
        self.frame_sources[clip.id] = frame_source
        self.thumbnails[clip.id] = probe.thumbnail
        was_empty = not self.timeline.clips
        self.timeline.append_clip(clip)

        if was_empty:
            self.selection = ClipSelection(clip_id=clip.id)

        logger.info(
            f"Added clip {clip.id} from {source_asset_id} "
            f"({probe.duration:.2f}s, timeline {self.timeline.total_duration:.2f}s)"
        )
        return clip

    def remove_clip(self, clip_id: str) -> Clip | None:
        clip = self.timeline.remove_clip(clip_id)
        if clip is None:
            return None

        self.frame_sources.pop(clip_id, None)
        self.thumbnails.pop(clip_id, None)
        if all(c.source_asset_id != clip.source_asset_id for c in self.timeline.clips):
            self._asset_sources.pop(clip.source_asset_id, None)

        if isinstance(self.selection, ClipSelection) and self.selection.clip_id == clip_id:
            remaining = self.timeline.clips
            self.selection = ClipSelection(clip_id=remaining[0].id) if remaining else None

        self._clamp_playhead()
        logger.info(f"Removed clip {clip_id}")
        return clip

    def set_trim(self, clip_id: str, start: float, end: float) -> Clip:
        clip = self.timeline.set_trim(clip_id, start, end)
        self._clamp_playhead()
        return clip

    # Overlays

    def add_overlay(self, at_time: float | None = None, **fields: Any) -> TextOverlay:
        """Add a text overlay at ``at_time``, the playhead by default."""
        defaults = self.settings.overlay
        values = {
            "text": defaults.default_text,
            "font_family": defaults.font_family,
            "font_size_ratio": defaults.font_size_ratio,
            "color": defaults.color,
            "position": {"x": defaults.position_x, "y": defaults.position_y},
        }
        values.update(fields)

        if at_time is None:
            at_time = self.player.playback_time
        overlay = self.timeline.add_overlay(at_time, defaults.default_duration, **values)
        self.selection = OverlaySelection(overlay_id=overlay.id)
        return overlay

    def set_overlay(self, overlay_id: str, **fields: Any) -> TextOverlay:
        return self.timeline.set_overlay(overlay_id, **fields)

    def remove_overlay(self, overlay_id: str) -> TextOverlay | None:
        overlay = self.timeline.remove_overlay(overlay_id)
        if (
            overlay is not None
            and isinstance(self.selection, OverlaySelection)
            and self.selection.overlay_id == overlay_id
        ):
            self.selection = None
        return overlay

    # Selection

    def select(self, selection: Selection | None) -> None:
        """Select a clip, an overlay, or nothing."""
        if isinstance(selection, ClipSelection) and self.timeline.get_clip(selection.clip_id) is None:
            raise ClipNotFoundError(f"Clip not found: {selection.clip_id}")
        if (
            isinstance(selection, OverlaySelection)
            and self.timeline.get_overlay(selection.overlay_id) is None
        ):
            raise OverlayNotFoundError(f"Overlay not found: {selection.overlay_id}")
        self.selection = selection

    # Playback

    def play(self) -> bool:
        return self.player.play()

    def pause(self) -> None:
        self.player.pause()

    def seek(self, t: float) -> Image.Image:
        return self.player.seek(t)

    @property
    def time_display(self) -> str:
        """Playhead and total duration, e.g. ``00:04 / 00:21``."""
        return (
            f"{TimeUtils.format_timecode(self.player.playback_time)} / "
            f"{TimeUtils.format_timecode(self.timeline.total_duration)}"
        )

    def _clamp_playhead(self) -> None:
        if self.player.playback_time > self.timeline.total_duration:
            self.player.seek(self.timeline.total_duration)
        if self.timeline.total_duration <= 0:
            self.player.pause()

    # Export

    async def export(
        self,
        progress_callback: Callable[[float, str], None] | None = None,
        cancel_event: asyncio.Event | None = None,
    ) -> ExportResult:
        """
        Export the timeline as a new video asset.

        On success the asset joins the brand library and the exported clips
        and overlays leave the timeline; anything added while the export
        ran stays for the next one. On failure the timeline is left as it
        was.
        """
        result = await self.pipeline.export(
            self.timeline,
            progress_callback=progress_callback,
            cancel_event=cancel_event,
        )

        self.library.add(result.asset)
        for overlay in result.job.overlays:
            self.remove_overlay(overlay.id)
        for clip in result.job.clips:
            self.remove_clip(clip.id)
        if not self.timeline.clips and not self.timeline.overlays:
            self.clear()

        logger.info(f"Exported {result.asset.id}: {result.asset.edited_details}")
        return result

    def clear(self) -> None:
        self.timeline.clear()
        self.frame_sources.clear()
        self.thumbnails.clear()
        self._asset_sources.clear()
        self.selection = None
        self.player.reset()

    # Assets

    def cascade_delete(self, root_id: str) -> list[str]:
        """Ids that deleting ``root_id`` would remove, without deleting them."""
        return cascade_delete(root_id, self.brand.assets)

    async def delete_asset(self, root_id: str) -> list[str]:
        return await self.library.delete(root_id)
