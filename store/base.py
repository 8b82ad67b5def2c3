"""
Persistence capability interface shared by every storage backend.

Defines:
- Plain record types handed from a store to the services layer
- StoreError hierarchy raised by backends
- VideoStore: the abstract operations a backend must provide
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional


class InteractionType(str, Enum):
    """Kinds of user interaction with a video."""

    LIKE = "like"
    VIEW = "view"
    COMMENT = "comment"


# Interaction kinds limited to one per (user, video).
UNIQUE_INTERACTION_TYPES = (InteractionType.LIKE, InteractionType.VIEW)


# =============================================================================
# Errors
# =============================================================================

class StoreError(Exception):
    """Base class for failures raised by a storage backend."""


class RecordNotFoundError(StoreError):
    """A referenced user or video does not exist."""


class DuplicateInteractionError(StoreError):
    """A second like or view from the same user on the same video."""


# =============================================================================
# Records
# =============================================================================

@dataclass
class UserRecord:
    """Public view of a user."""

    id: str
    username: str
    avatar_url: Optional[str] = None
    created_at: Optional[datetime] = None


@dataclass
class NewMetaItem:
    """Meta item payload submitted with a new video."""

    item_type: Optional[str] = None
    key: Optional[str] = None
    value: Optional[str] = None
    thumbnail_url: Optional[str] = None
    label: Optional[str] = None


@dataclass
class MetaItemRecord:
    """A stored meta item."""

    id: str
    video_id: str
    item_type: Optional[str] = None
    key: Optional[str] = None
    value: Optional[str] = None
    thumbnail_url: Optional[str] = None
    label: Optional[str] = None
    created_at: Optional[datetime] = None


@dataclass
class VideoRecord:
    """A stored video together with its owner's public fields."""

    id: str
    title: str
    video_url: str
    user_id: str
    owner: UserRecord
    description: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


@dataclass
class InteractionRecord:
    """A stored like, view or comment."""

    id: str
    user_id: str
    video_id: str
    interaction_type: str
    content: Optional[str] = None
    created_at: Optional[datetime] = None


@dataclass
class InteractionCount:
    """One row of the grouped (video, interaction type) count."""

    video_id: str
    interaction_type: str
    count: int


# =============================================================================
# Capability interface
# =============================================================================

class VideoStore(ABC):
    """
    Operations the services layer needs from a backend.

    Implementations return the record types above and raise StoreError
    subclasses for domain failures. Driver errors are logged and re-raised
    unchanged.
    """

    name: str = "abstract"

    # -------------------------------------------------------------------------
    # LIFECYCLE
    # -------------------------------------------------------------------------

    @abstractmethod
    def initialize(self) -> None:
        """Create tables / indexes needed by the backend."""

    @abstractmethod
    def clear(self) -> None:
        """Delete every user, video, meta item and interaction."""

    @abstractmethod
    def close(self) -> None:
        """Release connections held by the backend."""

    # -------------------------------------------------------------------------
    # USERS
    # -------------------------------------------------------------------------

    @abstractmethod
    def create_user(self, username: str, avatar_url: Optional[str] = None) -> UserRecord:
        ...

    @abstractmethod
    def get_user(self, user_id: str) -> Optional[UserRecord]:
        ...

    @abstractmethod
    def get_user_by_username(self, username: str) -> Optional[UserRecord]:
        ...

    # -------------------------------------------------------------------------
    # VIDEOS
    # -------------------------------------------------------------------------

    @abstractmethod
    def create_video_with_meta_items(
        self,
        user_id: str,
        title: str,
        video_url: str,
        description: Optional[str] = None,
        meta_items: Optional[list[NewMetaItem]] = None,
        created_at: Optional[datetime] = None,
    ) -> tuple[VideoRecord, list[MetaItemRecord]]:
        """
        Persist a video and its meta items as one atomic unit.

        Raises:
            RecordNotFoundError: If the owner does not exist.
        """

    @abstractmethod
    def list_videos_page(self, offset: int, limit: int) -> list[VideoRecord]:
        """Return one page of videos, newest first, with owner fields."""

    @abstractmethod
    def count_videos(self) -> int:
        ...

    @abstractmethod
    def find_meta_items_by_video_ids(self, video_ids: list[str]) -> list[MetaItemRecord]:
        """Return every meta item attached to any of ``video_ids`` in one query."""

    # -------------------------------------------------------------------------
    # INTERACTIONS
    # -------------------------------------------------------------------------

    @abstractmethod
    def add_interaction(
        self,
        user_id: str,
        video_id: str,
        interaction_type: InteractionType,
        content: Optional[str] = None,
    ) -> InteractionRecord:
        """
        Record a like, view or comment.

        Raises:
            DuplicateInteractionError: On a repeated like or view.
            RecordNotFoundError: If the user or video does not exist.
        """

    @abstractmethod
    def group_interaction_counts(self, video_ids: list[str]) -> list[InteractionCount]:
        """Count interactions grouped by (video, type) for ``video_ids`` in one query."""
