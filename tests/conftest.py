"""Pytest configuration and shared fixtures."""

import asyncio
import tempfile
from pathlib import Path
from typing import Callable, Generator

import pytest
from PIL import Image

from brandforge_editor.core.config import (
    ExportSettings,
    OverlaySettings,
    PathSettings,
    PreviewSettings,
    Settings,
)
from brandforge_editor.core.exceptions import DecodeError
from brandforge_editor.models.render import ProbeResult
from brandforge_editor.services.storage import MemoryBlobStore
from brandforge_editor.utils.filtergraph import FilterGraph

FAKE_MEDIA_PREFIX = b"FAKEVIDEO:"
FAKE_THUMBNAIL = b"\xff\xd8\xff\xe0fake-jpeg"


def fake_media(duration: float, color: str = "#ff0000") -> bytes:
    """Bytes understood by FakeProbe / FakeFrameLoader."""
    return FAKE_MEDIA_PREFIX + f"{duration}|{color}".encode()


def parse_fake_media(data: bytes) -> tuple[float, str]:
    if not data.startswith(FAKE_MEDIA_PREFIX):
        raise DecodeError("Not a fake video")
    duration, color = data[len(FAKE_MEDIA_PREFIX) :].decode().split("|")
    return float(duration), color


class FakeProbe:
    """Probe reading durations from fake media bytes."""

    def __init__(self):
        self.calls = 0

    async def probe(self, data: bytes) -> ProbeResult:
        self.calls += 1
        duration, _ = parse_fake_media(data)
        return ProbeResult(duration=duration, thumbnail=FAKE_THUMBNAIL)


class FakeFrameSource:
    """Solid-color frames; records every seek."""

    def __init__(self, duration: float, color: str = "#ff0000", size: tuple[int, int] = (64, 36)):
        self._duration = duration
        self.color = color
        self.size = size
        self.seeks: list[float] = []

    @property
    def duration(self) -> float:
        return self._duration

    def seek(self, t: float) -> Image.Image:
        self.seeks.append(t)
        return Image.new("RGB", self.size, self.color)


class FakeFrameLoader:
    def __init__(self):
        self.loaded: list[FakeFrameSource] = []

    async def load(self, data: bytes) -> FakeFrameSource:
        duration, color = parse_fake_media(data)
        source = FakeFrameSource(duration, color)
        self.loaded.append(source)
        return source


class FakeTranscoder:
    """Records the graph it is given and returns fake output bytes."""

    def __init__(
        self,
        error: Exception | None = None,
        on_start: Callable[[], None] | None = None,
        wait_for_cancel: bool = False,
        hold: bool = False,
    ):
        self.error = error
        self.on_start = on_start
        self.wait_for_cancel = wait_for_cancel
        self.hold = hold
        self.started = asyncio.Event()
        self.release = asyncio.Event()
        self.graphs: list[FilterGraph] = []
        self.inputs: list[list[bytes]] = []

    async def transcode(
        self,
        graph: FilterGraph,
        inputs: list[bytes],
        progress_callback: Callable[[float, str], None] | None = None,
        cancel_event: asyncio.Event | None = None,
    ) -> bytes:
        self.graphs.append(graph)
        self.inputs.append(inputs)
        self.started.set()
        if self.on_start:
            self.on_start()
        if self.hold:
            await self.release.wait()

        for ratio in (0.0, 0.5, 1.0):
            if progress_callback:
                progress_callback(ratio, f"Encoding... {ratio:.1f}")
            await asyncio.sleep(0)

        if self.wait_for_cancel and cancel_event is not None:
            await cancel_event.wait()
        if self.error is not None:
            raise self.error
        return b"MP4:" + f"{graph.expected_duration:.3f}".encode()


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for test files."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def test_settings(temp_dir: Path) -> Settings:
    """Create test settings with temporary directories and a tiny preview."""
    return Settings(
        preview=PreviewSettings(width=64, height=36, fps=24, decode_fps=12),
        export=ExportSettings(width=320, height=180, fps=24),
        overlay=OverlaySettings(),
        paths=PathSettings(
            blob_dir=temp_dir / "blobs",
            temp_dir=temp_dir / "temp",
        ),
        debug=True,
    )


@pytest.fixture
def blob_store() -> MemoryBlobStore:
    return MemoryBlobStore()


@pytest.fixture
def fake_probe() -> FakeProbe:
    return FakeProbe()


@pytest.fixture
def fake_frame_loader() -> FakeFrameLoader:
    return FakeFrameLoader()


@pytest.fixture
def fake_transcoder() -> FakeTranscoder:
    return FakeTranscoder()
