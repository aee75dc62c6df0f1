"""Configuration management using pydantic-settings."""

from functools import lru_cache
from pathlib import Path

import yaml
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class PreviewSettings(BaseSettings):
    """Real-time preview configuration."""

    model_config = SettingsConfigDict(env_prefix="PREVIEW_")

    width: int = Field(default=640, ge=16, description="Output surface width in pixels")
    height: int = Field(default=360, ge=16, description="Output surface height in pixels")
    fps: float = Field(default=24.0, gt=0, description="Animation tick rate")
    decode_fps: float = Field(
        default=12.0,
        gt=0,
        description="Frame sampling rate of in-memory preview decoders",
    )
    frame_quality: int = Field(
        default=85,
        ge=1,
        le=95,
        description="JPEG quality of frames held by preview decoders",
    )
    thumbnail_offset: float = Field(
        default=0.1,
        ge=0,
        description="Offset of the thumbnail frame, skips black first frames",
    )
    background_color: str = Field(default="#000000", description="Surface fill color")


class ExportSettings(BaseSettings):
    """Export (transcode) configuration."""

    model_config = SettingsConfigDict(env_prefix="EXPORT_")

    width: int = Field(default=1280, ge=16, description="Output width in pixels")
    height: int = Field(default=720, ge=16, description="Output height in pixels")
    fps: float = Field(default=30.0, gt=0, description="Output frame rate")
    video_codec: str = Field(default="libx264", description="Video codec")
    preset: str = Field(default="fast", description="FFmpeg encoding preset")
    pixel_format: str = Field(default="yuv420p", description="Output pixel format")
    crf: int = Field(default=23, ge=0, le=51, description="Constant rate factor")
    faststart: bool = Field(default=True, description="Move the moov atom to the front")


class OverlaySettings(BaseSettings):
    """Defaults for newly created text overlays."""

    model_config = SettingsConfigDict(env_prefix="OVERLAY_")

    default_duration: float = Field(default=3.0, gt=0, description="Default span in seconds")
    default_text: str = Field(default="Your Text Here", description="Default overlay text")
    font_family: str = Field(default="DejaVuSans", description="Font family")
    font_size_ratio: float = Field(
        default=0.08,
        gt=0,
        le=1,
        description="Font size as a fraction of the frame height",
    )
    color: str = Field(default="#FFFFFF", description="Text color")
    position_x: float = Field(default=0.5, ge=0, le=1, description="Horizontal anchor")
    position_y: float = Field(default=0.5, ge=0, le=1, description="Vertical anchor")


class PathSettings(BaseSettings):
    """Path configuration."""

    model_config = SettingsConfigDict(env_prefix="PATH_")

    blob_dir: Path = Field(default=Path("data/blobs"), description="File blob store root")
    temp_dir: Path = Field(default=Path("data/temp"), description="Scratch directory")

    def ensure_dirs(self) -> None:
        """Create directories if they don't exist."""
        for dir_path in [self.blob_dir, self.temp_dir]:
            dir_path.mkdir(parents=True, exist_ok=True)


class Settings(BaseSettings):
    """Main application settings."""

    model_config = SettingsConfigDict(
        env_prefix="BRANDFORGE_",
        env_nested_delimiter="__",
        extra="ignore",
    )

    preview: PreviewSettings = Field(default_factory=PreviewSettings)
    export: ExportSettings = Field(default_factory=ExportSettings)
    overlay: OverlaySettings = Field(default_factory=OverlaySettings)
    paths: PathSettings = Field(default_factory=PathSettings)

    debug: bool = Field(default=False, description="Enable debug mode")

    @classmethod
    def from_yaml(cls, yaml_path: Path) -> "Settings":
        """Load settings from YAML file."""
        if not yaml_path.exists():
            return cls()

        with open(yaml_path, "r", encoding="utf-8") as f:
            config_dict = yaml.safe_load(f) or {}

        return cls(**config_dict)

    def to_yaml(self, yaml_path: Path) -> None:
        """Save settings to YAML file."""
        yaml_path.parent.mkdir(parents=True, exist_ok=True)
        with open(yaml_path, "w", encoding="utf-8") as f:
            yaml.dump(
                self.model_dump(mode="json"),
                f,
                default_flow_style=False,
                allow_unicode=True,
            )


@lru_cache()
def get_settings(config_path: str | None = None) -> Settings:
    """Get cached settings instance."""
    if config_path:
        return Settings.from_yaml(Path(config_path))

    default_paths = [
        Path("config/config.yaml"),
        Path("config.yaml"),
        Path.home() / ".config" / "brandforge-editor" / "config.yaml",
    ]

    for path in default_paths:
        if path.exists():
            return Settings.from_yaml(path)

    return Settings()
