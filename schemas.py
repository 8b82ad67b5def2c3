"""
Pydantic schemas for the video share API.

Defines all request/response models. JSON keys are camelCase on the wire;
Python attributes stay snake_case.
"""

from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from services.pagination import Pagination
from services.video_feed import EnrichedVideo, InteractionStats
from services.video_service import CreatedVideo
from store.base import MetaItemRecord, NewMetaItem, UserRecord, VideoRecord


class CamelModel(BaseModel):
    """Base model serializing field names as camelCase."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# =============================================================================
# Request Schemas
# =============================================================================

class MetaItemIn(CamelModel):
    """
    Meta item submitted with a new video.

    Unrecognised keys are ignored.
    """

    item_type: Optional[str] = Field(
        default=None,
        alias="type",
        description="Annotation kind, e.g. tag or category",
        examples=["category"]
    )
    key: Optional[str] = Field(default=None, examples=["genre"])
    value: Optional[str] = Field(default=None, examples=["documentary"])
    thumbnail_url: Optional[str] = Field(
        default=None, examples=["https://picsum.photos/320/180?random=10"])
    label: Optional[str] = Field(default=None, examples=["Thumbnail 1"])

    def to_new_meta_item(self) -> NewMetaItem:
        return NewMetaItem(
            item_type=self.item_type,
            key=self.key,
            value=self.value,
            thumbnail_url=self.thumbnail_url,
            label=self.label,
        )


class CreateVideoRequest(CamelModel):
    """
    Request schema for POST /api/videos.

    title and videoUrl are checked by the service layer so that a missing
    value yields the API's own 400 envelope.
    """

    title: Optional[str] = Field(
        default=None,
        description="Video title (required)",
        examples=["Amazing Nature Documentary"]
    )
    description: Optional[str] = Field(
        default=None,
        description="Optional long-form description"
    )
    video_url: Optional[str] = Field(
        default=None,
        description="Source URL of the video file (required)",
        examples=["https://sample-videos.com/zip/10/mp4/SampleVideo_1280x720_1mb.mp4"]
    )
    meta_items: Optional[list[MetaItemIn]] = Field(
        default=None,
        description="Meta items to attach to the video"
    )

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "title": "Cooking Tutorial: Italian Pasta",
                "description": "Learn how to make authentic Italian pasta from scratch",
                "videoUrl": "https://sample-videos.com/zip/10/mp4/SampleVideo_1280x720_2mb.mp4",
                "metaItems": [
                    {"type": "category", "key": "cuisine", "value": "italian"},
                    {"thumbnailUrl": "https://picsum.photos/320/180?random=12",
                     "label": "Thumbnail 1"}
                ]
            }
        }
    )


# =============================================================================
# Response Schemas
# =============================================================================

class UserOut(CamelModel):
    """Owner's public fields."""

    id: str
    username: str
    avatar_url: Optional[str] = None

    @classmethod
    def from_record(cls, record: UserRecord) -> "UserOut":
        return cls(id=record.id, username=record.username, avatar_url=record.avatar_url)


class MetaItemOut(CamelModel):
    id: str
    video_id: str
    item_type: Optional[str] = Field(default=None, alias="type")
    key: Optional[str] = None
    value: Optional[str] = None
    thumbnail_url: Optional[str] = None
    label: Optional[str] = None
    created_at: Optional[datetime] = None

    @classmethod
    def from_record(cls, record: MetaItemRecord) -> "MetaItemOut":
        return cls(
            id=record.id,
            video_id=record.video_id,
            item_type=record.item_type,
            key=record.key,
            value=record.value,
            thumbnail_url=record.thumbnail_url,
            label=record.label,
            created_at=record.created_at,
        )


class InteractionStatsOut(CamelModel):
    likes: int = 0
    views: int = 0
    comments: int = 0

    @classmethod
    def from_stats(cls, stats: InteractionStats) -> "InteractionStatsOut":
        return cls(likes=stats.likes, views=stats.views, comments=stats.comments)


class VideoOut(CamelModel):
    """A video with its owner and meta items."""

    id: str
    title: str
    description: Optional[str] = None
    video_url: str
    user_id: str
    user: UserOut
    meta_items: list[MetaItemOut] = Field(default_factory=list)
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @staticmethod
    def fields_from_record(video: VideoRecord, meta_items: list[MetaItemRecord]) -> dict[str, Any]:
        return {
            "id": video.id,
            "title": video.title,
            "description": video.description,
            "video_url": video.video_url,
            "user_id": video.user_id,
            "user": UserOut.from_record(video.owner),
            "meta_items": [MetaItemOut.from_record(item) for item in meta_items],
            "created_at": video.created_at,
            "updated_at": video.updated_at,
        }

    @classmethod
    def from_created(cls, created: CreatedVideo) -> "VideoOut":
        return cls(**cls.fields_from_record(created.video, created.meta_items))


class EnrichedVideoOut(VideoOut):
    """A listed video with its interaction totals."""

    interactions: InteractionStatsOut = Field(default_factory=InteractionStatsOut)

    @classmethod
    def from_enriched(cls, enriched: EnrichedVideo) -> "EnrichedVideoOut":
        return cls(
            **cls.fields_from_record(enriched.video, enriched.meta_items),
            interactions=InteractionStatsOut.from_stats(enriched.interactions),
        )


class PaginationOut(CamelModel):
    current_page: int
    total_pages: int
    total_items: int
    items_per_page: int
    has_next: bool
    has_prev: bool

    @classmethod
    def from_pagination(cls, pagination: Pagination) -> "PaginationOut":
        return cls(
            current_page=pagination.current_page,
            total_pages=pagination.total_pages,
            total_items=pagination.total_items,
            items_per_page=pagination.items_per_page,
            has_next=pagination.has_next,
            has_prev=pagination.has_prev,
        )


class CreateVideoResponse(CamelModel):
    """Response schema for POST /api/videos."""

    success: bool = True
    data: VideoOut


class ListVideosResponse(CamelModel):
    """Response schema for GET /api/videos."""

    success: bool = True
    data: list[EnrichedVideoOut]
    pagination: PaginationOut


class ErrorResponse(CamelModel):
    """Envelope for every failed request."""

    success: bool = False
    message: str


class HealthResponse(CamelModel):
    """Response schema for GET /api/health."""

    success: bool = True
    message: str = "Server is running"
    timestamp: str
