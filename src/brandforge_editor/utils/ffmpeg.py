"""FFmpeg command wrapper utilities."""

import asyncio
import json
import shutil
from collections import deque
from pathlib import Path
from typing import Callable

from loguru import logger

from brandforge_editor.core.config import ExportSettings
from brandforge_editor.core.exceptions import (
    ConfigError,
    DecodeError,
    ExportCancelledError,
    OutOfMemoryError,
    TranscodeError,
)
from brandforge_editor.utils.time import TimeUtils

OOM_MARKERS = ("Cannot allocate memory", "Out of memory", "out of memory")
STDERR_TAIL_LINES = 20


class FFmpegWrapper:
    """Wrapper for FFmpeg commands."""

    def __init__(self):
        """Initialize FFmpeg wrapper."""
        self.ffmpeg_path = shutil.which("ffmpeg")
        self.ffprobe_path = shutil.which("ffprobe")

        if not self.ffmpeg_path:
            raise ConfigError("FFmpeg not found in PATH")
        if not self.ffprobe_path:
            raise ConfigError("FFprobe not found in PATH")

    async def get_video_duration(self, video_path: Path) -> float:
        """
        Get video duration in seconds.

        Args:
            video_path: Path to video file

        Returns:
            Duration in seconds
        """
        cmd = [
            self.ffprobe_path,
            "-v",
            "quiet",
            "-print_format",
            "json",
            "-show_format",
            "-show_streams",
            "-select_streams",
            "v:0",
            str(video_path),
        ]

        process = await asyncio.create_subprocess_exec(
            *cmd,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )
        stdout, stderr = await process.communicate()

        if process.returncode != 0:
            raise DecodeError(f"FFprobe failed: {stderr.decode(errors='replace')}")

        try:
            data = json.loads(stdout.decode())
            if not data.get("streams"):
                raise DecodeError(f"No video stream in {video_path.name}")
            return float(data["format"]["duration"])
        except (json.JSONDecodeError, KeyError, ValueError) as e:
            raise DecodeError(f"Failed to parse video duration: {e}")

    async def extract_frame(self, video_path: Path, output_path: Path, offset: float) -> Path:
        """
        Rasterize one frame as a JPEG still.

        Args:
            video_path: Input video path
            output_path: Output image path
            offset: Frame time in seconds

        Returns:
            Output image path
        """
        output_path.parent.mkdir(parents=True, exist_ok=True)

        cmd = [
            self.ffmpeg_path,
            "-y",
            "-ss",
            str(offset),
            "-i",
            str(video_path),
            "-frames:v",
            "1",
            "-q:v",
            "3",
            str(output_path),
        ]

        await self._run_command(cmd, "Thumbnail extraction", DecodeError)

        if not output_path.exists():
            raise DecodeError(f"No frame decoded at {offset}s from {video_path.name}")
        return output_path

    async def decode_frames(
        self,
        video_path: Path,
        fps: float,
        width: int,
        height: int,
    ) -> bytes:
        """
        Decode a video into raw RGB frames.

        Frames are sampled at ``fps`` and letterboxed to ``width`` x ``height``.

        Args:
            video_path: Input video path
            fps: Sampling rate
            width: Frame width
            height: Frame height

        Returns:
            Concatenated rgb24 frames, ``width * height * 3`` bytes each
        """
        vf = (
            f"fps={fps:g},"
            f"scale={width}:{height}:force_original_aspect_ratio=decrease,"
            f"pad={width}:{height}:(ow-iw)/2:(oh-ih)/2"
        )
        cmd = [
            self.ffmpeg_path,
            "-v",
            "error",
            "-i",
            str(video_path),
            "-vf",
            vf,
            "-an",
            "-f",
            "rawvideo",
            "-pix_fmt",
            "rgb24",
            "pipe:1",
        ]

        return await self._run_command(cmd, "Frame decoding", DecodeError)

    async def transcode(
        self,
        input_paths: list[Path],
        filter_complex: str,
        output_label: str,
        output_path: Path,
        expected_duration: float,
        config: ExportSettings,
        progress_callback: Callable[[float, str], None] | None = None,
        cancel_event: asyncio.Event | None = None,
    ) -> Path:
        """
        Run a filter graph over the inputs and encode the result.

        Args:
            input_paths: Input video paths, in input index order
            filter_complex: FFmpeg filter graph
            output_label: Graph output pad to encode
            output_path: Output video path
            expected_duration: Output duration used to turn progress into a ratio
            config: Encoding profile
            progress_callback: Receives (ratio, message) while encoding
            cancel_event: Kills the encoder when set

        Returns:
            Output video path
        """
        output_path.parent.mkdir(parents=True, exist_ok=True)

        input_args = []
        for path in input_paths:
            input_args.extend(["-i", str(path)])

        cmd = [
            self.ffmpeg_path,
            "-y",
            "-hide_banner",
            "-nostats",
            *input_args,
            "-filter_complex",
            filter_complex,
            "-map",
            f"[{output_label}]",
            "-an",
            "-c:v",
            config.video_codec,
            "-preset",
            config.preset,
            "-crf",
            str(config.crf),
            "-pix_fmt",
            config.pixel_format,
        ]
        if config.faststart:
            cmd.extend(["-movflags", "+faststart"])
        cmd.extend(["-progress", "pipe:1", str(output_path)])

        logger.debug(f"Running transcode: {' '.join(cmd)}")

        process = await asyncio.create_subprocess_exec(
            *cmd,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )

        # Collect stderr concurrently so the encoder never blocks on a full pipe
        stderr_tail: deque[str] = deque(maxlen=STDERR_TAIL_LINES)

        async def drain_stderr() -> None:
            async for line in process.stderr:
                stderr_tail.append(line.decode(errors="replace").rstrip())

        async def read_progress() -> None:
            async for raw in process.stdout:
                key, _, value = raw.decode(errors="replace").strip().partition("=")
                if key != "out_time" or progress_callback is None:
                    continue
                current = TimeUtils.parse_ffmpeg_time(value)
                if current is None:
                    continue
                ratio = min(1.0, current / expected_duration) if expected_duration > 0 else 0.0
                progress_callback(ratio, f"Encoding... {current:.1f}s / {expected_duration:.1f}s")

        io_task = asyncio.ensure_future(asyncio.gather(drain_stderr(), read_progress()))
        wait_task = asyncio.ensure_future(process.wait())
        cancel_task = asyncio.ensure_future(cancel_event.wait()) if cancel_event else None

        try:
            pending = {wait_task} if cancel_task is None else {wait_task, cancel_task}
            await asyncio.wait(pending, return_when=asyncio.FIRST_COMPLETED)

            if not wait_task.done():
                logger.warning("Transcode cancelled, killing encoder")
                process.kill()
                await wait_task
                await io_task
                raise ExportCancelledError("Export cancelled")

            await io_task
        finally:
            if cancel_task is not None:
                cancel_task.cancel()

        if process.returncode != 0:
            error_msg = "\n".join(stderr_tail) or "Unknown error"
            logger.error(f"Transcode failed ({process.returncode}): {error_msg}")
            if process.returncode == -9 or any(m in error_msg for m in OOM_MARKERS):
                raise OutOfMemoryError(f"Transcoder ran out of memory: {error_msg}")
            raise TranscodeError(f"Transcode failed: {error_msg}")

        logger.debug("Transcode completed successfully")
        return output_path

    async def _run_command(
        self,
        cmd: list[str],
        operation: str,
        error_cls: type[Exception] = TranscodeError,
    ) -> bytes:
        """Run FFmpeg command and return its stdout."""
        logger.debug(f"Running {operation}: {' '.join(cmd)}")

        process = await asyncio.create_subprocess_exec(
            *cmd,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )
        stdout, stderr = await process.communicate()

        if process.returncode != 0:
            error_msg = stderr.decode(errors="replace") if stderr else "Unknown error"
            logger.error(f"{operation} failed: {error_msg}")
            raise error_cls(f"{operation} failed: {error_msg}")

        logger.debug(f"{operation} completed successfully")
        return stdout
