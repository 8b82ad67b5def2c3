"""
Relational video store backed by SQLAlchemy.

PostgreSQL in production, SQLite for local runs and tests. Each call opens
a short-lived session; writes commit or roll back before returning.
"""

import logging
import uuid
from datetime import datetime
from typing import Optional

from sqlalchemy import delete, func, select
from sqlalchemy.engine import Engine
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, sessionmaker

from db.base import Base
from db.models import Interaction, MetaItem, User, Video
from db.session import create_db_engine, create_session_factory
from store.base import (
    DuplicateInteractionError,
    InteractionCount,
    InteractionRecord,
    InteractionType,
    MetaItemRecord,
    NewMetaItem,
    RecordNotFoundError,
    UNIQUE_INTERACTION_TYPES,
    UserRecord,
    VideoRecord,
    VideoStore,
)

logger = logging.getLogger(__name__)


def _to_uuid(value: str) -> Optional[uuid.UUID]:
    """Parse an id string, returning None for anything that is not a UUID."""
    if isinstance(value, uuid.UUID):
        return value
    try:
        return uuid.UUID(str(value))
    except ValueError:
        return None


def _user_record(user: User) -> UserRecord:
    return UserRecord(
        id=str(user.id),
        username=user.username,
        avatar_url=user.avatar_url,
        created_at=user.created_at,
    )


def _video_record(video: Video, owner: User) -> VideoRecord:
    return VideoRecord(
        id=str(video.id),
        title=video.title,
        description=video.description,
        video_url=video.video_url,
        user_id=str(video.user_id),
        owner=_user_record(owner),
        created_at=video.created_at,
        updated_at=video.updated_at,
    )


def _meta_item_record(item: MetaItem) -> MetaItemRecord:
    return MetaItemRecord(
        id=str(item.id),
        video_id=str(item.video_id),
        item_type=item.item_type,
        key=item.key,
        value=item.value,
        thumbnail_url=item.thumbnail_url,
        label=item.label,
        created_at=item.created_at,
    )


class SqlVideoStore(VideoStore):
    """
    Video store using SQLAlchemy sessions.

    Usage:
        store = SqlVideoStore.from_url("postgresql://...")
        store.initialize()
        video, meta_items = store.create_video_with_meta_items(...)
    """

    name = "sql"

    def __init__(self, engine: Engine, session_factory: Optional[sessionmaker] = None) -> None:
        """
        Initialize the SQL store.

        Args:
            engine: Engine the store owns and disposes on close().
            session_factory: Optional pre-built factory bound to ``engine``.
        """
        self.engine = engine
        self.SessionLocal = session_factory or create_session_factory(engine)
        logger.info(f"SqlVideoStore initialized ({engine.url.get_backend_name()})")

    @classmethod
    def from_url(cls, database_url: str, echo: bool = False) -> "SqlVideoStore":
        """Build a store with its own engine for ``database_url``."""
        return cls(create_db_engine(database_url, echo=echo))

    def _get_session(self) -> Session:
        """Create a new database session."""
        return self.SessionLocal()

    # -------------------------------------------------------------------------
    # LIFECYCLE
    # -------------------------------------------------------------------------

    def initialize(self) -> None:
        """Create all tables defined in db.models."""
        Base.metadata.create_all(bind=self.engine)
        logger.info("Database tables created")

    def clear(self) -> None:
        session = self._get_session()
        try:
            # Children first so foreign keys never dangle mid-transaction.
            for model in (Interaction, MetaItem, Video, User):
                session.execute(delete(model))
            session.commit()
        except Exception as e:
            session.rollback()
            logger.error(f"Error clearing tables: {e}")
            raise
        finally:
            session.close()

    def close(self) -> None:
        self.engine.dispose()

    # -------------------------------------------------------------------------
    # USERS
    # -------------------------------------------------------------------------

    def create_user(self, username: str, avatar_url: Optional[str] = None) -> UserRecord:
        session = self._get_session()
        try:
            user = User(username=username, avatar_url=avatar_url)
            session.add(user)
            session.flush()
            record = _user_record(user)
            session.commit()
            return record
        except Exception as e:
            session.rollback()
            logger.error(f"Error creating user {username!r}: {e}")
            raise
        finally:
            session.close()

    def get_user(self, user_id: str) -> Optional[UserRecord]:
        user_uuid = _to_uuid(user_id)
        if user_uuid is None:
            return None

        session = self._get_session()
        try:
            user = session.get(User, user_uuid)
            return _user_record(user) if user else None
        except Exception as e:
            logger.error(f"Error fetching user by ID: {e}")
            raise
        finally:
            session.close()

    def get_user_by_username(self, username: str) -> Optional[UserRecord]:
        session = self._get_session()
        try:
            user = session.execute(
                select(User).where(User.username == username)
            ).scalar_one_or_none()
            return _user_record(user) if user else None
        except Exception as e:
            logger.error(f"Error fetching user by username: {e}")
            raise
        finally:
            session.close()

    # -------------------------------------------------------------------------
    # VIDEOS
    # -------------------------------------------------------------------------

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
        Insert the video and its meta items in a single transaction.

        Nothing is committed unless every row flushes successfully.
        """
        user_uuid = _to_uuid(user_id)
        session = self._get_session()
        try:
            owner = session.get(User, user_uuid) if user_uuid else None
            if owner is None:
                raise RecordNotFoundError(f"User {user_id} does not exist")

            video = Video(
                user_id=owner.id,
                title=title,
                description=description,
                video_url=video_url,
            )
            if created_at is not None:
                video.created_at = created_at
                video.updated_at = created_at
            session.add(video)
            session.flush()

            items = [
                MetaItem(
                    video_id=video.id,
                    item_type=item.item_type,
                    key=item.key,
                    value=item.value,
                    thumbnail_url=item.thumbnail_url,
                    label=item.label,
                )
                for item in meta_items or []
            ]
            session.add_all(items)
            session.flush()

            result = (
                _video_record(video, owner),
                [_meta_item_record(item) for item in items],
            )
            session.commit()
            return result
        except RecordNotFoundError:
            session.rollback()
            raise
        except Exception as e:
            session.rollback()
            logger.error(f"Error creating video: {e}")
            raise
        finally:
            session.close()

    def list_videos_page(self, offset: int, limit: int) -> list[VideoRecord]:
        session = self._get_session()
        try:
            rows = session.execute(
                select(Video, User)
                .join(User, Video.user_id == User.id)
                .order_by(Video.created_at.desc())
                .offset(offset)
                .limit(limit)
            ).all()
            return [_video_record(video, owner) for video, owner in rows]
        except Exception as e:
            logger.error(f"Error fetching videos page: {e}")
            raise
        finally:
            session.close()

    def count_videos(self) -> int:
        session = self._get_session()
        try:
            return session.execute(
                select(func.count()).select_from(Video)
            ).scalar_one()
        except Exception as e:
            logger.error(f"Error counting videos: {e}")
            raise
        finally:
            session.close()

    def find_meta_items_by_video_ids(self, video_ids: list[str]) -> list[MetaItemRecord]:
        uuids = [u for u in (_to_uuid(v) for v in video_ids) if u is not None]
        if not uuids:
            return []

        session = self._get_session()
        try:
            items = session.execute(
                select(MetaItem)
                .where(MetaItem.video_id.in_(uuids))
                .order_by(MetaItem.created_at)
            ).scalars().all()
            return [_meta_item_record(item) for item in items]
        except Exception as e:
            logger.error(f"Error fetching meta items: {e}")
            raise
        finally:
            session.close()

    # -------------------------------------------------------------------------
    # INTERACTIONS
    # -------------------------------------------------------------------------

    def add_interaction(
        self,
        user_id: str,
        video_id: str,
        interaction_type: InteractionType,
        content: Optional[str] = None,
    ) -> InteractionRecord:
        kind = InteractionType(interaction_type)
        user_uuid = _to_uuid(user_id)
        video_uuid = _to_uuid(video_id)

        session = self._get_session()
        try:
            if user_uuid is None or session.get(User, user_uuid) is None:
                raise RecordNotFoundError(f"User {user_id} does not exist")
            if video_uuid is None or session.get(Video, video_uuid) is None:
                raise RecordNotFoundError(f"Video {video_id} does not exist")

            interaction = Interaction(
                user_id=user_uuid,
                video_id=video_uuid,
                interaction_type=kind.value,
                content=content,
            )
            session.add(interaction)
            session.flush()
            record = InteractionRecord(
                id=str(interaction.id),
                user_id=str(interaction.user_id),
                video_id=str(interaction.video_id),
                interaction_type=interaction.interaction_type,
                content=interaction.content,
                created_at=interaction.created_at,
            )
            session.commit()
            return record
        except IntegrityError as e:
            session.rollback()
            if kind in UNIQUE_INTERACTION_TYPES:
                raise DuplicateInteractionError(
                    f"User {user_id} already registered a {kind.value} on video {video_id}"
                ) from e
            logger.error(f"Error recording interaction: {e}")
            raise
        except RecordNotFoundError:
            session.rollback()
            raise
        except Exception as e:
            session.rollback()
            logger.error(f"Error recording interaction: {e}")
            raise
        finally:
            session.close()

    def group_interaction_counts(self, video_ids: list[str]) -> list[InteractionCount]:
        uuids = [u for u in (_to_uuid(v) for v in video_ids) if u is not None]
        if not uuids:
            return []

        session = self._get_session()
        try:
            rows = session.execute(
                select(
                    Interaction.video_id,
                    Interaction.interaction_type,
                    func.count(Interaction.id),
                )
                .where(Interaction.video_id.in_(uuids))
                .group_by(Interaction.video_id, Interaction.interaction_type)
            ).all()
            return [
                InteractionCount(
                    video_id=str(video_id),
                    interaction_type=interaction_type,
                    count=count,
                )
                for video_id, interaction_type, count in rows
            ]
        except Exception as e:
            logger.error(f"Error grouping interaction counts: {e}")
            raise
        finally:
            session.close()
