"""Brand asset metadata."""

from datetime import datetime
from enum import Enum
from uuid import uuid4

from pydantic import BaseModel, Field


class AssetType(str, Enum):
    """Kind of generated brand asset."""

    LOGO = "logo"
    PALETTE = "palette"
    TYPOGRAPHY = "typography"
    POSTER = "poster"
    BANNER = "banner"
    SOCIAL_AD = "social_ad"
    INSTAGRAM_STORY = "instagram_story"
    TWITTER_POST = "twitter_post"
    YOUTUBE_THUMBNAIL = "youtube_thumbnail"
    VIDEO_AD = "video_ad"


class BrandAsset(BaseModel):
    """Metadata of one asset; its bytes live in the blob store under ``id``."""

    id: str = Field(default_factory=lambda: str(uuid4()))
    type: AssetType
    prompt: str = Field(default="", description="Prompt or label the asset was made from")
    created_at: datetime = Field(default_factory=datetime.now)
    tags: list[str] = Field(default_factory=list)
    parent_id: str | None = Field(default=None, description="Asset this one was derived from")
    variant_label: str | None = Field(default=None, description="e.g. 'Variant A'")
    is_primary: bool = Field(default=False)
    source_video_ids: list[str] = Field(
        default_factory=list,
        description="For edited videos, the source assets consumed in order",
    )
    edited_details: str | None = Field(default=None, description="Description of the edits made")


class Brand(BaseModel):
    """A brand and its whole asset collection."""

    id: str = Field(default_factory=lambda: str(uuid4()))
    name: str
    description: str = Field(default="")
    assets: list[BrandAsset] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=datetime.now)
