"""Data models for brandforge-editor."""

from brandforge_editor.models.asset import AssetType, Brand, BrandAsset
from brandforge_editor.models.render import ExportResult, ProbeResult, RenderJob, RenderStatus
from brandforge_editor.models.timeline import (
    ActiveClip,
    Clip,
    ClipSelection,
    OverlayPosition,
    OverlaySelection,
    Selection,
    TextOverlay,
    Timeline,
)

__all__ = [
    "AssetType",
    "Brand",
    "BrandAsset",
    "Clip",
    "TextOverlay",
    "OverlayPosition",
    "Timeline",
    "ActiveClip",
    "ClipSelection",
    "OverlaySelection",
    "Selection",
    "RenderStatus",
    "RenderJob",
    "ExportResult",
    "ProbeResult",
]
