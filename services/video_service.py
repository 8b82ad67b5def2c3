"""
Video operations: create a video with meta items, list enriched videos.

Validation happens before any write. Every store failure is logged here and
converted to InternalError so no raw driver exception reaches the transport.
"""

import logging
from dataclasses import dataclass, field
from typing import Optional

from services.errors import AuthError, InternalError, ValidationError, VideoServiceError
from services.pagination import PageRequest
from services.video_feed import VideoPage, load_video_page
from store.base import (
    MetaItemRecord,
    NewMetaItem,
    RecordNotFoundError,
    VideoRecord,
    VideoStore,
)

logger = logging.getLogger(__name__)

REQUIRED_FIELDS_MESSAGE = "Title and videoUrl are required"


@dataclass
class CreatedVideo:
    """A newly created video with the meta items written alongside it."""

    video: VideoRecord
    meta_items: list[MetaItemRecord] = field(default_factory=list)


def _is_blank(value: Optional[str]) -> bool:
    return value is None or not value.strip()


class VideoService:
    """
    Request-level orchestration over a VideoStore.

    The store is injected; one service instance is shared by all requests.
    """

    def __init__(self, store: VideoStore) -> None:
        self.store = store

    def create_video(
        self,
        user_id: str,
        title: Optional[str],
        video_url: Optional[str],
        description: Optional[str] = None,
        meta_items: Optional[list[NewMetaItem]] = None,
    ) -> CreatedVideo:
        """
        Create a video owned by ``user_id`` together with its meta items.

        Raises:
            ValidationError: If title or video_url is missing or blank.
            AuthError: If the owner no longer exists.
            InternalError: On any persistence failure.
        """
        if _is_blank(title) or _is_blank(video_url):
            logger.warning(f"Rejected video create for user={user_id}: missing title or videoUrl")
            raise ValidationError(REQUIRED_FIELDS_MESSAGE)

        meta_items = meta_items or []
        try:
            video, created_items = self.store.create_video_with_meta_items(
                user_id=user_id,
                title=title.strip(),
                video_url=video_url.strip(),
                description=description,
                meta_items=meta_items,
            )
        except RecordNotFoundError as e:
            logger.warning(f"Video create for unknown user: {e}")
            raise AuthError("Authenticated user not found") from e
        except VideoServiceError:
            raise
        except Exception as e:
            logger.exception(f"Create video error: {e}")
            raise InternalError() from e

        logger.info(
            f"Created video {video.id} for user={user_id} "
            f"with {len(created_items)} meta items"
        )
        return CreatedVideo(video=video, meta_items=created_items)

    def list_videos(self, request: PageRequest) -> VideoPage:
        """
        Return one enriched, paginated page of videos.

        Raises:
            InternalError: On any persistence failure; no partial page is returned.
        """
        try:
            page = load_video_page(self.store, request)
        except VideoServiceError:
            raise
        except Exception as e:
            logger.exception(f"Get videos error: {e}")
            raise InternalError() from e

        logger.info(
            f"Listed videos page={request.page} limit={request.limit} "
            f"returned={len(page.items)} total={page.pagination.total_items}"
        )
        return page
