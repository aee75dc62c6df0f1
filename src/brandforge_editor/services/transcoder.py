"""Transcoder: executes a trim + concat filter graph over raw media bytes."""

import asyncio
import shutil
import tempfile
from pathlib import Path
from typing import Callable, Protocol

import aiofiles
from loguru import logger

from brandforge_editor.core.config import ExportSettings, PathSettings
from brandforge_editor.core.exceptions import TranscodeError
from brandforge_editor.utils.ffmpeg import FFmpegWrapper
from brandforge_editor.utils.filtergraph import FilterGraph


class Transcoder(Protocol):
    async def transcode(
        self,
        graph: FilterGraph,
        inputs: list[bytes],
        progress_callback: Callable[[float, str], None] | None = None,
        cancel_event: asyncio.Event | None = None,
    ) -> bytes: ...


class FFmpegTranscoder:
    """Transcoder running FFmpeg over scratch files."""

    def __init__(
        self,
        config: ExportSettings,
        paths: PathSettings,
        ffmpeg: FFmpegWrapper | None = None,
        keep_temp: bool = False,
    ):
        """
        Initialize transcoder.

        Args:
            config: Encoding profile
            paths: Path configuration (scratch directory)
            ffmpeg: FFmpeg wrapper, created if not given
            keep_temp: Keep scratch files for inspection
        """
        self.config = config
        self.paths = paths
        self.keep_temp = keep_temp
        self._ffmpeg = ffmpeg or FFmpegWrapper()

    async def transcode(
        self,
        graph: FilterGraph,
        inputs: list[bytes],
        progress_callback: Callable[[float, str], None] | None = None,
        cancel_event: asyncio.Event | None = None,
    ) -> bytes:
        """
        Execute the graph and return the encoded video.

        Args:
            graph: Trim + concat graph; input ``i`` is ``inputs[i]``
            inputs: Raw source media bytes
            progress_callback: Receives (ratio, message) while encoding
            cancel_event: Stops the encoder when set

        Returns:
            Encoded MP4 bytes

        Raises:
            TranscodeError: Input count does not match the graph, or FFmpeg failed
        """
        if len(inputs) != graph.input_count:
            raise TranscodeError(
                f"Filter graph expects {graph.input_count} inputs, got {len(inputs)}"
            )

        self.paths.temp_dir.mkdir(parents=True, exist_ok=True)
        work_dir = Path(tempfile.mkdtemp(dir=self.paths.temp_dir, prefix="render_"))

        try:
            input_paths = []
            for index, data in enumerate(inputs):
                path = work_dir / f"input_{index}.mp4"
                async with aiofiles.open(path, "wb") as f:
                    await f.write(data)
                input_paths.append(path)

            output_path = await self._ffmpeg.transcode(
                input_paths=input_paths,
                filter_complex=graph.to_filter_complex(),
                output_label=graph.output_label,
                output_path=work_dir / "output.mp4",
                expected_duration=graph.expected_duration,
                config=self.config,
                progress_callback=progress_callback,
                cancel_event=cancel_event,
            )

            async with aiofiles.open(output_path, "rb") as f:
                return await f.read()

        finally:
            if self.keep_temp:
                logger.info(f"Debug mode: keeping render dir {work_dir}")
            else:
                shutil.rmtree(work_dir, ignore_errors=True)
