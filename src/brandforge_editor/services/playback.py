"""Playback synchronizer: one logical playhead over many clip decoders."""

import asyncio
import time
from enum import Enum
from typing import AsyncIterable, AsyncIterator, Mapping

from loguru import logger
from PIL import Image

from brandforge_editor.core.config import PreviewSettings
from brandforge_editor.models.timeline import Timeline
from brandforge_editor.services.compositor import OverlayCompositor
from brandforge_editor.services.frames import FrameSource


class PlaybackState(str, Enum):
    PAUSED = "paused"
    PLAYING = "playing"


class AsyncTickSource:
    """Yields wall-clock deltas (seconds) at a fixed rate."""

    def __init__(self, fps: float):
        self.interval = 1.0 / fps

    async def __aiter__(self) -> AsyncIterator[float]:
        last = time.monotonic()
        while True:
            await asyncio.sleep(self.interval)
            now = time.monotonic()
            yield now - last
            last = now


class PlaybackSynchronizer:
    """
    Drives the preview playhead and composites one frame per tick.

    The playhead advances by real elapsed time, not by any clip decoder's
    clock. Only the clip under the playhead is sought and drawn; every
    other frame source stays idle. Reaching the end rewinds to 0 and
    pauses.
    """

    def __init__(
        self,
        timeline: Timeline,
        frame_sources: Mapping[str, FrameSource],
        config: PreviewSettings,
        compositor: OverlayCompositor | None = None,
    ):
        """
        Initialize synchronizer.

        Args:
            timeline: Timeline to play; read on every tick
            frame_sources: Frame source per clip id; looked up on every tick
            config: Preview configuration
            compositor: Output surface compositor, created from config if not given
        """
        self.timeline = timeline
        self.frame_sources = frame_sources
        self.config = config
        self.compositor = compositor or OverlayCompositor(
            config.width, config.height, config.background_color
        )

        self.state = PlaybackState.PAUSED
        self.playback_time = 0.0
        self.active_clip_id: str | None = None
        self.surface: Image.Image = self.compositor.new_surface()
        self._missing_sources: set[str] = set()

    @property
    def is_playing(self) -> bool:
        return self.state == PlaybackState.PLAYING

    def play(self) -> bool:
        """Start playback. Ignored on an empty timeline."""
        if self.timeline.total_duration <= 0:
            return False
        self.state = PlaybackState.PLAYING
        return True

    def pause(self) -> None:
        self.state = PlaybackState.PAUSED

    def seek(self, t: float) -> Image.Image:
        """Move the playhead, clamped into the timeline, and render."""
        self.playback_time = min(max(t, 0.0), self.timeline.total_duration)
        return self.render()

    def reset(self) -> None:
        self.pause()
        self.playback_time = 0.0
        self.active_clip_id = None
        self._missing_sources.clear()
        self.surface = self.compositor.new_surface()

    def tick(self, delta: float) -> Image.Image:
        """
        Advance the playhead by ``delta`` wall-clock seconds and render.

        Args:
            delta: Seconds elapsed since the previous tick

        Returns:
            The output surface
        """
        if not self.is_playing:
            return self.surface

        self.playback_time += max(delta, 0.0)
        if self.playback_time >= self.timeline.total_duration:
            self.playback_time = 0.0
            self.pause()

        return self.render()

    def render(self) -> Image.Image:
        """Composite the frame and overlays at the current playhead."""
        t = self.playback_time
        surface = self.compositor.new_surface()

        active = self.timeline.resolve(t)
        if active is None:
            self.active_clip_id = None
        else:
            clip_id = active.clip.id
            if clip_id != self.active_clip_id:
                logger.debug(f"Active clip -> {clip_id} at {t:.3f}s")
                self.active_clip_id = clip_id

            source = self.frame_sources.get(clip_id)
            if source is not None:
                self.compositor.draw_frame(surface, source.seek(active.offset))
            elif clip_id not in self._missing_sources:
                self._missing_sources.add(clip_id)
                logger.warning(f"No frame source for clip {clip_id}")

        self.compositor.draw_overlays(surface, self.timeline.active_overlays(t))
        self.surface = surface
        return surface

    async def run(self, tick_source: AsyncIterable[float] | None = None) -> None:
        """
        Feed ticks into the synchronizer until playback pauses.

        Args:
            tick_source: Async iterable of elapsed seconds, wall clock at the
                preview rate if not given
        """
        if tick_source is None:
            tick_source = AsyncTickSource(self.config.fps)
        if not self.play():
            return

        self.render()
        async for delta in tick_source:
            if not self.is_playing:
                break
            self.tick(delta)
            if not self.is_playing:
                break
