"""Timeline data structures: clips, text overlays and selection."""

from bisect import bisect_right
from typing import Annotated, Any, Literal
from uuid import uuid4

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    PrivateAttr,
    ValidationError,
    model_validator,
)

from brandforge_editor.core.exceptions import (
    ClipNotFoundError,
    InvalidOverlayError,
    InvalidTrimError,
    OverlayNotFoundError,
)


def _new_id() -> str:
    return str(uuid4())


class Clip(BaseModel):
    """One trimmed reference to a source video on the timeline."""

    id: str = Field(default_factory=_new_id, description="Timeline instance id")
    source_asset_id: str = Field(description="Blob store id of the source media")
    source_duration: float = Field(gt=0, description="Intrinsic duration of the source")
    trim_start: float = Field(default=0.0, ge=0, description="In point in seconds")
    trim_end: float = Field(description="Out point in seconds")

    @model_validator(mode="after")
    def _check_trim(self) -> "Clip":
        if not (0 <= self.trim_start < self.trim_end <= self.source_duration):
            raise ValueError(
                f"trim range [{self.trim_start}, {self.trim_end}] invalid "
                f"for source duration {self.source_duration}"
            )
        return self

    @classmethod
    def from_source(cls, source_asset_id: str, source_duration: float) -> "Clip":
        """Create an untrimmed clip covering the whole source."""
        return cls(
            source_asset_id=source_asset_id,
            source_duration=source_duration,
            trim_start=0.0,
            trim_end=source_duration,
        )

    @property
    def clip_duration(self) -> float:
        """Duration in seconds."""
        return self.trim_end - self.trim_start


class OverlayPosition(BaseModel):
    """Fractional anchor of an overlay within the frame."""

    x: float = Field(default=0.5, ge=0, le=1)
    y: float = Field(default=0.5, ge=0, le=1)


class TextOverlay(BaseModel):
    """A timed text annotation composited during preview."""

    model_config = ConfigDict(extra="forbid")

    id: str = Field(default_factory=_new_id)
    text: str = Field(default="")
    font_family: str = Field(default="DejaVuSans")
    font_size_ratio: float = Field(default=0.08, gt=0, le=1, description="Fraction of frame height")
    color: str = Field(default="#FFFFFF")
    position: OverlayPosition = Field(default_factory=OverlayPosition)
    start_time: float = Field(ge=0, description="Timeline start in seconds")
    end_time: float = Field(description="Timeline end in seconds")

    @model_validator(mode="after")
    def _check_range(self) -> "TextOverlay":
        if not self.start_time < self.end_time:
            raise ValueError(
                f"overlay range [{self.start_time}, {self.end_time}) is empty"
            )
        return self

    def is_active(self, t: float) -> bool:
        """Whether the overlay is visible at timeline time ``t``."""
        return self.start_time <= t < self.end_time


class ClipSelection(BaseModel):
    kind: Literal["clip"] = "clip"
    clip_id: str


class OverlaySelection(BaseModel):
    kind: Literal["overlay"] = "overlay"
    overlay_id: str


Selection = Annotated[ClipSelection | OverlaySelection, Field(discriminator="kind")]


class ActiveClip(BaseModel):
    """Result of mapping a timeline time onto a clip."""

    index: int
    clip: Clip
    timeline_start: float
    offset: float = Field(description="Offset into the source media in seconds")


class Timeline(BaseModel):
    """Ordered clips played back-to-back plus free-floating text overlays.

    Clip order is the playback order and the export concatenation order.
    Overlays are kept in insertion order, which is also their compositing
    order. Overlay ranges are not clamped when trims shrink the timeline.
    """

    clips: list[Clip] = Field(default_factory=list)
    overlays: list[TextOverlay] = Field(default_factory=list)
    revision: int = Field(default=0, ge=0, description="Bumped on every mutation")

    _starts: list[float] = PrivateAttr(default_factory=list)
    _total_duration: float = PrivateAttr(default=0.0)

    def model_post_init(self, __context: Any) -> None:
        self._recompute()

    def _recompute(self) -> None:
        starts = []
        total = 0.0
        for clip in self.clips:
            starts.append(total)
            total += clip.clip_duration
        self._starts = starts
        self._total_duration = total

    def _touch(self) -> None:
        self.revision += 1
        self._recompute()

    @property
    def total_duration(self) -> float:
        """Sum of all clip durations."""
        return self._total_duration

    @property
    def clip_starts(self) -> list[float]:
        """Timeline start time of each clip, in clip order."""
        return list(self._starts)

    def get_clip(self, clip_id: str) -> Clip | None:
        for clip in self.clips:
            if clip.id == clip_id:
                return clip
        return None

    def get_overlay(self, overlay_id: str) -> TextOverlay | None:
        for overlay in self.overlays:
            if overlay.id == overlay_id:
                return overlay
        return None

    def append_clip(self, clip: Clip) -> Clip:
        self.clips.append(clip)
        self._touch()
        return clip

    def remove_clip(self, clip_id: str) -> Clip | None:
        """Remove a clip. Unknown ids are ignored. Overlays are left as they are."""
        clip = self.get_clip(clip_id)
        if clip is None:
            return None
        self.clips.remove(clip)
        self._touch()
        return clip

    def set_trim(self, clip_id: str, start: float, end: float) -> Clip:
        """
        Update the in/out points of a clip.

        Args:
            clip_id: Clip instance id
            start: New in point in seconds
            end: New out point in seconds

        Returns:
            The updated clip

        Raises:
            ClipNotFoundError: Unknown clip id
            InvalidTrimError: Range empty or outside the source; the clip is unchanged
        """
        clip = self.get_clip(clip_id)
        if clip is None:
            raise ClipNotFoundError(f"Clip not found: {clip_id}")

        if not (0 <= start < end <= clip.source_duration):
            raise InvalidTrimError(
                f"Invalid trim [{start}, {end}] for clip {clip_id} "
                f"(source duration {clip.source_duration})"
            )

        clip.trim_start = start
        clip.trim_end = end
        self._touch()
        return clip

    def clear(self) -> None:
        self.clips.clear()
        self.overlays.clear()
        self._touch()

    def add_overlay(self, at_time: float, duration: float = 3.0, **fields: Any) -> TextOverlay:
        """
        Add a text overlay starting at ``at_time``.

        The overlay ends ``duration`` seconds later, cut short at the end of
        the timeline.

        Raises:
            InvalidOverlayError: The resulting range is empty or the fields are invalid
        """
        end_time = min(at_time + duration, self.total_duration)
        try:
            overlay = TextOverlay(start_time=at_time, end_time=end_time, **fields)
        except ValidationError as e:
            raise InvalidOverlayError(f"Cannot add overlay at {at_time}s: {e}") from e

        self.overlays.append(overlay)
        self._touch()
        return overlay

    def set_overlay(self, overlay_id: str, **fields: Any) -> TextOverlay:
        """Update overlay fields, keeping its position in compositing order."""
        overlay = self.get_overlay(overlay_id)
        if overlay is None:
            raise OverlayNotFoundError(f"Overlay not found: {overlay_id}")
        if "id" in fields and fields["id"] != overlay_id:
            raise InvalidOverlayError("Overlay id cannot be changed")

        data = overlay.model_dump()
        data.update(fields)
        try:
            updated = TextOverlay.model_validate(data)
        except ValidationError as e:
            raise InvalidOverlayError(f"Invalid overlay update for {overlay_id}: {e}") from e

        self.overlays[self.overlays.index(overlay)] = updated
        self._touch()
        return updated

    def remove_overlay(self, overlay_id: str) -> TextOverlay | None:
        overlay = self.get_overlay(overlay_id)
        if overlay is None:
            return None
        self.overlays.remove(overlay)
        self._touch()
        return overlay

    def active_overlays(self, t: float) -> list[TextOverlay]:
        """Overlays visible at ``t``, in insertion order."""
        return [overlay for overlay in self.overlays if overlay.is_active(t)]

    def resolve(self, t: float) -> ActiveClip | None:
        """
        Map a timeline time onto the clip that plays at that time.

        Times at or past the end freeze on the last clip's out point.

        Args:
            t: Timeline time in seconds

        Returns:
            The active clip and the offset into its source, None without clips
        """
        if not self.clips:
            return None

        if t >= self._total_duration:
            index = len(self.clips) - 1
            clip = self.clips[index]
            return ActiveClip(
                index=index,
                clip=clip,
                timeline_start=self._starts[index],
                offset=clip.trim_end,
            )

        t = max(t, 0.0)
        index = bisect_right(self._starts, t) - 1
        clip = self.clips[index]
        start = self._starts[index]
        offset = min(clip.trim_start + (t - start), clip.trim_end)
        return ActiveClip(index=index, clip=clip, timeline_start=start, offset=offset)

    def snapshot(self) -> "Timeline":
        """Deep copy, detached from further edits."""
        copy = self.model_copy(deep=True)
        copy._recompute()
        return copy
