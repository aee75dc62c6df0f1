"""Utility functions for brandforge-editor."""

from brandforge_editor.utils.ffmpeg import FFmpegWrapper
from brandforge_editor.utils.filtergraph import FilterGraph, TrimSegment, build_trim_concat_graph
from brandforge_editor.utils.time import TimeUtils

__all__ = [
    "TimeUtils",
    "FFmpegWrapper",
    "FilterGraph",
    "TrimSegment",
    "build_trim_concat_graph",
]
