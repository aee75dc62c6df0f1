"""Seekable frame sources for the preview renderer."""

import io
import tempfile
from pathlib import Path
from typing import Protocol

import aiofiles
from loguru import logger
from PIL import Image

from brandforge_editor.core.config import PathSettings, PreviewSettings
from brandforge_editor.core.exceptions import DecodeError
from brandforge_editor.utils.ffmpeg import FFmpegWrapper


class FrameSource(Protocol):
    """One decoder per clip; the synchronizer only ever seeks it."""

    @property
    def duration(self) -> float: ...

    def seek(self, t: float) -> Image.Image: ...


class FrameLoader(Protocol):
    async def load(self, data: bytes) -> FrameSource: ...


class DecodedFrameSource:
    """
    Frames decoded up front and sampled at a fixed rate.

    Frames are held JPEG-compressed and expanded on ``seek``; the most
    recently expanded frame is reused while the playhead stays on it.
    """

    def __init__(self, frames: list[bytes], fps: float):
        if not frames:
            raise DecodeError("No frames decoded")
        self.frames = frames
        self.fps = fps
        self._current_index: int | None = None
        self._current: Image.Image | None = None

    @property
    def duration(self) -> float:
        return len(self.frames) / self.fps

    @property
    def nbytes(self) -> int:
        return sum(len(frame) for frame in self.frames)

    def frame_index(self, t: float) -> int:
        index = int(max(t, 0.0) * self.fps)
        return min(index, len(self.frames) - 1)

    def seek(self, t: float) -> Image.Image:
        index = self.frame_index(t)
        if index != self._current_index:
            with Image.open(io.BytesIO(self.frames[index])) as image:
                self._current = image.convert("RGB")
            self._current_index = index
        return self._current

    @classmethod
    def from_raw(
        cls, raw: bytes, width: int, height: int, fps: float, quality: int = 85
    ) -> "DecodedFrameSource":
        """Split concatenated rgb24 frames and compress each one."""
        frame_size = width * height * 3
        count = len(raw) // frame_size
        frames = []
        for i in range(count):
            image = Image.frombytes("RGB", (width, height), raw[i * frame_size : (i + 1) * frame_size])
            buffer = io.BytesIO()
            image.save(buffer, format="JPEG", quality=quality)
            frames.append(buffer.getvalue())
        return cls(frames, fps)


class FFmpegFrameLoader:
    """Decode clip bytes into a DecodedFrameSource at preview resolution."""

    def __init__(
        self,
        config: PreviewSettings,
        paths: PathSettings,
        ffmpeg: FFmpegWrapper | None = None,
    ):
        self.config = config
        self.paths = paths
        self._ffmpeg = ffmpeg or FFmpegWrapper()

    async def load(self, data: bytes) -> DecodedFrameSource:
        if not data:
            raise DecodeError("Empty media data")

        self.paths.temp_dir.mkdir(parents=True, exist_ok=True)
        with tempfile.TemporaryDirectory(dir=self.paths.temp_dir, prefix="frames_") as tmp:
            source = Path(tmp) / "source.bin"
            async with aiofiles.open(source, "wb") as f:
                await f.write(data)

            raw = await self._ffmpeg.decode_frames(
                source,
                fps=self.config.decode_fps,
                width=self.config.width,
                height=self.config.height,
            )

        frame_source = DecodedFrameSource.from_raw(
            raw,
            self.config.width,
            self.config.height,
            self.config.decode_fps,
            quality=self.config.frame_quality,
        )
        logger.debug(
            f"Decoded {len(frame_source.frames)} preview frames "
            f"({frame_source.nbytes / 1024:.0f} KiB compressed)"
        )
        return frame_source
