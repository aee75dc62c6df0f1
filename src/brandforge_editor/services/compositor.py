"""Draws decoded frames and text overlays onto the preview surface."""

from functools import lru_cache

from loguru import logger
from PIL import Image, ImageDraw, ImageFont

from brandforge_editor.models.timeline import TextOverlay


@lru_cache(maxsize=64)
def load_font(font_family: str, size: int) -> ImageFont.FreeTypeFont | ImageFont.ImageFont:
    """Load a TrueType font by family name, falling back to Pillow's default font."""
    for candidate in (font_family, f"{font_family}.ttf"):
        try:
            return ImageFont.truetype(candidate, size)
        except OSError:
            continue
    logger.warning(f"Font {font_family!r} not found, using default font")
    return ImageFont.load_default(size)


class OverlayCompositor:
    """Composites one frame plus text overlays into an output surface."""

    def __init__(self, width: int, height: int, background_color: str = "#000000"):
        self.width = width
        self.height = height
        self.background_color = background_color

    def new_surface(self) -> Image.Image:
        return Image.new("RGB", (self.width, self.height), self.background_color)

    def draw_frame(self, surface: Image.Image, frame: Image.Image) -> None:
        """Copy a frame onto the surface, scaled to the output size."""
        if frame.size != surface.size:
            frame = frame.resize(surface.size)
        surface.paste(frame.convert("RGB"), (0, 0))

    def draw_overlays(self, surface: Image.Image, overlays: list[TextOverlay]) -> None:
        """Draw overlays in the given order as anchored single-line text."""
        if not overlays:
            return

        draw = ImageDraw.Draw(surface)
        width, height = surface.size
        for overlay in overlays:
            size = max(1, round(overlay.font_size_ratio * height))
            font = load_font(overlay.font_family, size)
            xy = (overlay.position.x * width, overlay.position.y * height)
            try:
                draw.text(xy, overlay.text, fill=overlay.color, font=font, anchor="mm")
            except ValueError as e:
                logger.warning(f"Cannot draw overlay {overlay.id}: {e}")
