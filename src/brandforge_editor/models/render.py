"""Render job, export result and probe result structures."""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field

from brandforge_editor.models.asset import BrandAsset
from brandforge_editor.models.timeline import Clip, TextOverlay


class RenderStatus(str, Enum):
    """Export job status."""

    PENDING = "pending"
    RUNNING = "running"
    COMPLETE = "complete"
    FAILED = "failed"


class RenderJob(BaseModel):
    """State of one export run."""

    clips: list[Clip] = Field(default_factory=list)
    overlays: list[TextOverlay] = Field(default_factory=list)
    status: RenderStatus = Field(default=RenderStatus.PENDING)
    progress_ratio: float = Field(default=0.0, ge=0, le=1)
    message: str = Field(default="")
    started_at: datetime | None = Field(default=None)
    updated_at: datetime | None = Field(default=None)

    def update(
        self,
        status: RenderStatus | None = None,
        progress_ratio: float | None = None,
        message: str | None = None,
    ) -> "RenderJob":
        """Update progress and return new instance."""
        return RenderJob(
            clips=self.clips,
            overlays=self.overlays,
            status=status if status is not None else self.status,
            progress_ratio=progress_ratio if progress_ratio is not None else self.progress_ratio,
            message=message if message is not None else self.message,
            started_at=self.started_at,
            updated_at=datetime.now(),
        )


class ExportResult(BaseModel):
    """Result of a successful export."""

    asset: BrandAsset = Field(description="Metadata of the newly stored video")
    data: bytes = Field(description="Encoded video bytes")
    job: RenderJob = Field(description="Final job state")
    duration: float = Field(default=0.0, description="Processing time in seconds")


class ProbeResult(BaseModel):
    """Intrinsic properties of a media file."""

    duration: float = Field(gt=0, description="Duration in seconds")
    thumbnail: bytes = Field(description="JPEG still of an early frame")
