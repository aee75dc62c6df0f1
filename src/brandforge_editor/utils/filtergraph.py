"""Trim + concat filter graph description."""

from pydantic import BaseModel, Field, model_validator

from brandforge_editor.models.timeline import Clip
from brandforge_editor.utils.time import TimeUtils


class TrimSegment(BaseModel):
    """The used portion of one transcoder input."""

    input_index: int = Field(ge=0, description="Index of the input stream")
    start: float = Field(ge=0, description="In point in seconds")
    end: float = Field(description="Out point in seconds")

    @model_validator(mode="after")
    def _check_range(self) -> "TrimSegment":
        if not self.start < self.end:
            raise ValueError(f"empty trim segment [{self.start}, {self.end}]")
        return self

    @property
    def duration(self) -> float:
        return self.end - self.start


class FilterGraph(BaseModel):
    """Per-input trim chains joined by one video-only concat node."""

    segments: list[TrimSegment] = Field(min_length=1)
    width: int = Field(ge=16)
    height: int = Field(ge=16)
    fps: float = Field(gt=0)
    output_label: str = Field(default="outv")

    @property
    def expected_duration(self) -> float:
        """Duration of the concatenated output in seconds."""
        return sum(segment.duration for segment in self.segments)

    @property
    def input_count(self) -> int:
        return len({segment.input_index for segment in self.segments})

    def to_filter_complex(self) -> str:
        """
        Render the graph as an FFmpeg ``-filter_complex`` argument.

        Every segment is trimmed, its timestamps reset, and it is
        letterboxed to the output size so the concat inputs agree on
        resolution, aspect and frame rate.
        """
        w, h = self.width, self.height
        chains = []
        for i, segment in enumerate(self.segments):
            start = TimeUtils.format_filter_seconds(segment.start)
            end = TimeUtils.format_filter_seconds(segment.end)
            chains.append(
                f"[{segment.input_index}:v]"
                f"trim=start={start}:end={end},setpts=PTS-STARTPTS,"
                f"fps={self.fps:g},"
                f"scale={w}:{h}:force_original_aspect_ratio=decrease,"
                f"pad={w}:{h}:(ow-iw)/2:(oh-ih)/2,setsar=1"
                f"[v{i}]"
            )

        n = len(self.segments)
        concat_inputs = "".join(f"[v{i}]" for i in range(n))
        chains.append(f"{concat_inputs}concat=n={n}:v=1:a=0[{self.output_label}]")
        return ";".join(chains)


def build_trim_concat_graph(clips: list[Clip], width: int, height: int, fps: float) -> FilterGraph:
    """
    Build the export graph for clips in timeline order.

    Input ``i`` is the source media of ``clips[i]``.

    Args:
        clips: Clips in timeline order
        width: Output width
        height: Output height
        fps: Output frame rate

    Returns:
        Filter graph description
    """
    segments = [
        TrimSegment(input_index=i, start=clip.trim_start, end=clip.trim_end)
        for i, clip in enumerate(clips)
    ]
    return FilterGraph(segments=segments, width=width, height=height, fps=fps)
