"""Export pipeline: timeline -> trim -> concat -> encode -> blob store."""

import asyncio
import time
from datetime import datetime
from typing import Callable

from loguru import logger

from brandforge_editor.core.config import Settings
from brandforge_editor.core.exceptions import (
    DecodeError,
    EmptyTimelineError,
    ExportCancelledError,
    OutOfMemoryError,
    RenderError,
)
from brandforge_editor.models.asset import AssetType, BrandAsset
from brandforge_editor.models.render import ExportResult, RenderJob, RenderStatus
from brandforge_editor.models.timeline import Timeline
from brandforge_editor.services.storage import BlobStore
from brandforge_editor.services.transcoder import FFmpegTranscoder, Transcoder
from brandforge_editor.utils.filtergraph import build_trim_concat_graph

# Milestone ratios; the transcoder's own progress fills TRANSCODE_START..TRANSCODE_END
LOAD_SOURCES = 0.05
BUILD_GRAPH = 0.1
TRANSCODE_START = 0.1
TRANSCODE_END = 0.95


class ExportPipeline:
    """Turns a timeline into one playable video stored as a new asset."""

    def __init__(
        self,
        settings: Settings,
        blob_store: BlobStore,
        transcoder: Transcoder | None = None,
    ):
        """
        Initialize pipeline with settings.

        Args:
            settings: Application settings
            blob_store: Source media lookup and output destination
            transcoder: Filter graph executor, FFmpeg if not given
        """
        self.settings = settings
        self.blob_store = blob_store
        self.transcoder = transcoder or FFmpegTranscoder(
            settings.export, settings.paths, keep_temp=settings.debug
        )
        self.last_job: RenderJob | None = None

    async def export(
        self,
        timeline: Timeline,
        progress_callback: Callable[[float, str], None] | None = None,
        cancel_event: asyncio.Event | None = None,
    ) -> ExportResult:
        """
        Render the timeline and store the result.

        The timeline is snapshotted on entry; edits made while the export
        runs do not affect it. Text overlays are preview-only and are not
        burned in. Every call starts over from scratch.

        Args:
            timeline: Timeline to export
            progress_callback: Receives (ratio in [0, 1], message)
            cancel_event: Aborts the export when set

        Returns:
            ExportResult with the stored asset and the encoded bytes

        Raises:
            EmptyTimelineError: No clips
            DecodeError: A source clip's bytes are unavailable
            TranscodeError: The transcoder failed
            OutOfMemoryError: The transcoder or this process ran out of memory
            ExportCancelledError: ``cancel_event`` was set
        """
        start_time = time.time()
        snapshot = timeline.snapshot()

        job = RenderJob(
            clips=snapshot.clips,
            overlays=snapshot.overlays,
            status=RenderStatus.PENDING,
            started_at=datetime.now(),
        )
        self.last_job = job

        def update_progress(
            ratio: float,
            msg: str,
            status: RenderStatus = RenderStatus.RUNNING,
            milestone: bool = True,
        ) -> None:
            nonlocal job
            ratio = max(job.progress_ratio, min(1.0, ratio))
            job = job.update(status=status, progress_ratio=ratio, message=msg)
            self.last_job = job
            if progress_callback:
                progress_callback(ratio, msg)
            if milestone:
                logger.info(f"[Export] {msg} ({ratio * 100:.0f}%)")
            else:
                logger.debug(f"[Export] {msg} ({ratio * 100:.0f}%)")

        def check_cancelled() -> None:
            if cancel_event is not None and cancel_event.is_set():
                raise ExportCancelledError("Export cancelled")

        try:
            if not snapshot.clips:
                raise EmptyTimelineError("Add at least one clip to the timeline to export.")

            # Step 1: Initialize
            update_progress(0.0, "Initializing renderer...")
            check_cancelled()

            # Step 2: Load sources
            update_progress(LOAD_SOURCES, "Loading video files...")
            inputs = []
            for clip in snapshot.clips:
                data = await self.blob_store.get(clip.source_asset_id)
                if not data:
                    raise DecodeError(f"Could not load video data for asset {clip.source_asset_id}")
                inputs.append(data)
            check_cancelled()

            # Step 3: Build graph
            update_progress(BUILD_GRAPH, "Building processing command...")
            graph = build_trim_concat_graph(
                snapshot.clips,
                width=self.settings.export.width,
                height=self.settings.export.height,
                fps=self.settings.export.fps,
            )
            logger.debug(f"Filter graph: {graph.to_filter_complex()}")

            # Step 4: Transcode
            update_progress(TRANSCODE_START, "Starting render...")
            span = TRANSCODE_END - TRANSCODE_START
            output = await self.transcoder.transcode(
                graph,
                inputs,
                progress_callback=lambda r, m: update_progress(
                    TRANSCODE_START + r * span, m, milestone=False
                ),
                cancel_event=cancel_event,
            )
            check_cancelled()

            # Step 5: Finalize
            update_progress(TRANSCODE_END, "Render complete. Finalizing...")
            asset = BrandAsset(
                type=AssetType.VIDEO_AD,
                prompt="Edited Video",
                source_video_ids=[clip.source_asset_id for clip in snapshot.clips],
                edited_details=f"Combined {len(snapshot.clips)} clips.",
            )
            await self.blob_store.put(asset.id, output)
            update_progress(1.0, "Export complete", status=RenderStatus.COMPLETE)

            return ExportResult(
                asset=asset,
                data=output,
                job=job,
                duration=time.time() - start_time,
            )

        except MemoryError as e:
            self._fail(job)
            raise OutOfMemoryError(
                "Ran out of memory while exporting", last_message=job.message or None
            ) from e

        except ExportCancelledError as e:
            logger.warning(f"Export cancelled after: {job.message}")
            self._fail(job, e)
            raise

        except EmptyTimelineError as e:
            logger.warning(f"Export rejected: {e}")
            self._fail(job, e)
            raise

        except Exception as e:
            logger.exception(f"Export failed: {e}")
            self._fail(job, e)
            raise

    def _fail(self, job: RenderJob, error: Exception | None = None) -> None:
        self.last_job = job.update(status=RenderStatus.FAILED)
        if isinstance(error, RenderError) and error.last_message is None:
            error.last_message = job.message or None
