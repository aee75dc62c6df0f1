"""Media probing: duration and thumbnail of raw video bytes."""

import tempfile
from pathlib import Path
from typing import Protocol

import aiofiles
from loguru import logger

from brandforge_editor.core.config import PathSettings, PreviewSettings
from brandforge_editor.core.exceptions import DecodeError
from brandforge_editor.models.render import ProbeResult
from brandforge_editor.utils.ffmpeg import FFmpegWrapper


class Probe(Protocol):
    async def probe(self, data: bytes) -> ProbeResult: ...


class MediaProbe:
    """Media probe backed by FFprobe/FFmpeg."""

    def __init__(
        self,
        config: PreviewSettings,
        paths: PathSettings,
        ffmpeg: FFmpegWrapper | None = None,
    ):
        """
        Initialize media probe.

        Args:
            config: Preview configuration (thumbnail offset)
            paths: Path configuration (scratch directory)
            ffmpeg: FFmpeg wrapper, created if not given
        """
        self.config = config
        self.paths = paths
        self._ffmpeg = ffmpeg or FFmpegWrapper()

    async def probe(self, data: bytes) -> ProbeResult:
        """
        Report the duration of a video and rasterize an early frame.

        The frame is taken slightly after t=0 to avoid black first frames.

        Args:
            data: Raw container bytes

        Returns:
            ProbeResult with duration and JPEG thumbnail

        Raises:
            DecodeError: The bytes are not a supported container/codec
        """
        if not data:
            raise DecodeError("Empty media data")

        self.paths.temp_dir.mkdir(parents=True, exist_ok=True)
        with tempfile.TemporaryDirectory(dir=self.paths.temp_dir, prefix="probe_") as tmp:
            tmp_dir = Path(tmp)
            source = tmp_dir / "source.bin"
            async with aiofiles.open(source, "wb") as f:
                await f.write(data)

            duration = await self._ffmpeg.get_video_duration(source)
            if not duration > 0:
                raise DecodeError(f"Media reports no duration ({duration})")

            offset = min(self.config.thumbnail_offset, duration / 2)
            thumb_path = await self._ffmpeg.extract_frame(source, tmp_dir / "thumb.jpg", offset)
            async with aiofiles.open(thumb_path, "rb") as f:
                thumbnail = await f.read()

        logger.debug(f"Probed media: {duration:.2f}s, thumbnail {len(thumbnail)} bytes")
        return ProbeResult(duration=duration, thumbnail=thumbnail)
