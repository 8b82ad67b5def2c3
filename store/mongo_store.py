"""
Document video store backed by MongoDB.

Collections:
- users:        {username, avatar_url, created_at}
- videos:       {user_id, title, description, video_url, created_at, updated_at}
- meta_items:   {video_id, item_type, key, value, thumbnail_url, label, created_at}
- interactions: {user_id, video_id, type, content, created_at}

Creating a video uses a multi-document transaction, so the server must be a
replica set (a single-node replica set is enough for development).
"""

import logging
from datetime import datetime
from typing import Any, Optional

from bson import ObjectId
from pymongo import ASCENDING, DESCENDING, MongoClient
from pymongo.errors import DuplicateKeyError

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


def _to_object_id(value: Any) -> Optional[ObjectId]:
    """Parse an id string, returning None for anything that is not an ObjectId."""
    if isinstance(value, ObjectId):
        return value
    if value is not None and ObjectId.is_valid(value):
        return ObjectId(value)
    return None


def _user_record(doc: dict[str, Any]) -> UserRecord:
    return UserRecord(
        id=str(doc["_id"]),
        username=doc["username"],
        avatar_url=doc.get("avatar_url"),
        created_at=doc.get("created_at"),
    )


def _video_record(doc: dict[str, Any], owner: dict[str, Any]) -> VideoRecord:
    return VideoRecord(
        id=str(doc["_id"]),
        title=doc["title"],
        description=doc.get("description"),
        video_url=doc["video_url"],
        user_id=str(doc["user_id"]),
        owner=_user_record(owner),
        created_at=doc.get("created_at"),
        updated_at=doc.get("updated_at"),
    )


def _meta_item_record(doc: dict[str, Any]) -> MetaItemRecord:
    return MetaItemRecord(
        id=str(doc["_id"]),
        video_id=str(doc["video_id"]),
        item_type=doc.get("item_type"),
        key=doc.get("key"),
        value=doc.get("value"),
        thumbnail_url=doc.get("thumbnail_url"),
        label=doc.get("label"),
        created_at=doc.get("created_at"),
    )


class MongoVideoStore(VideoStore):
    """
    Video store using a shared pymongo client.

    The client is owned by the store and closed on close().
    """

    name = "mongo"

    def __init__(self, client: MongoClient, database: str) -> None:
        self._client = client
        self._db = client[database]
        self.users = self._db["users"]
        self.videos = self._db["videos"]
        self.meta_items = self._db["meta_items"]
        self.interactions = self._db["interactions"]
        logger.info(f"MongoVideoStore initialized (database={database})")

    @classmethod
    def from_url(cls, url: str, database: str, timeout_ms: int = 5000) -> "MongoVideoStore":
        """Build a store with its own client for ``url``."""
        client = MongoClient(url, tz_aware=False, serverSelectionTimeoutMS=timeout_ms)
        return cls(client, database)

    # -------------------------------------------------------------------------
    # LIFECYCLE
    # -------------------------------------------------------------------------

    def initialize(self) -> None:
        """Create the indexes the listing queries and invariants rely on."""
        self.users.create_index([("username", ASCENDING)], unique=True)
        self.videos.create_index([("created_at", DESCENDING)])
        self.meta_items.create_index([("video_id", ASCENDING)])
        self.interactions.create_index(
            [("video_id", ASCENDING), ("type", ASCENDING)])
        self.interactions.create_index(
            [("user_id", ASCENDING), ("video_id", ASCENDING), ("type", ASCENDING)],
            unique=True,
            partialFilterExpression={
                "type": {"$in": [t.value for t in UNIQUE_INTERACTION_TYPES]}
            },
            name="uq_interactions_user_video_type",
        )
        logger.info("MongoDB indexes ensured")

    def clear(self) -> None:
        for collection in (self.interactions, self.meta_items, self.videos, self.users):
            collection.delete_many({})

    def close(self) -> None:
        self._client.close()

    # -------------------------------------------------------------------------
    # USERS
    # -------------------------------------------------------------------------

    def create_user(self, username: str, avatar_url: Optional[str] = None) -> UserRecord:
        doc = {
            "username": username,
            "avatar_url": avatar_url,
            "created_at": datetime.utcnow(),
        }
        try:
            self.users.insert_one(doc)
        except Exception as e:
            logger.error(f"Error creating user {username!r}: {e}")
            raise
        return _user_record(doc)

    def get_user(self, user_id: str) -> Optional[UserRecord]:
        oid = _to_object_id(user_id)
        if oid is None:
            return None
        doc = self.users.find_one({"_id": oid})
        return _user_record(doc) if doc else None

    def get_user_by_username(self, username: str) -> Optional[UserRecord]:
        doc = self.users.find_one({"username": username})
        return _user_record(doc) if doc else None

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
        Insert the video and its meta items inside one transaction.

        with_transaction retries transient errors and aborts on anything
        else, so a failed meta item insert leaves no video behind.
        """
        oid = _to_object_id(user_id)
        owner = self.users.find_one({"_id": oid}) if oid else None
        if owner is None:
            raise RecordNotFoundError(f"User {user_id} does not exist")

        now = created_at or datetime.utcnow()

        def _insert(session) -> tuple[dict[str, Any], list[dict[str, Any]]]:
            video_doc = {
                "user_id": owner["_id"],
                "title": title,
                "description": description,
                "video_url": video_url,
                "created_at": now,
                "updated_at": now,
            }
            self.videos.insert_one(video_doc, session=session)

            item_docs = [
                {
                    "video_id": video_doc["_id"],
                    "item_type": item.item_type,
                    "key": item.key,
                    "value": item.value,
                    "thumbnail_url": item.thumbnail_url,
                    "label": item.label,
                    "created_at": now,
                }
                for item in meta_items or []
            ]
            if item_docs:
                self.meta_items.insert_many(item_docs, session=session)
            return video_doc, item_docs

        try:
            with self._client.start_session() as session:
                video_doc, item_docs = session.with_transaction(_insert)
        except Exception as e:
            logger.error(f"Error creating video: {e}")
            raise

        return (
            _video_record(video_doc, owner),
            [_meta_item_record(doc) for doc in item_docs],
        )

    def list_videos_page(self, offset: int, limit: int) -> list[VideoRecord]:
        try:
            docs = list(
                self.videos.find({})
                .sort("created_at", DESCENDING)
                .skip(offset)
                .limit(limit)
            )
            if not docs:
                return []

            owner_ids = list({doc["user_id"] for doc in docs})
            owners = {
                owner["_id"]: owner
                for owner in self.users.find(
                    {"_id": {"$in": owner_ids}},
                    {"username": 1, "avatar_url": 1, "created_at": 1},
                )
            }
        except Exception as e:
            logger.error(f"Error fetching videos page: {e}")
            raise

        records = []
        for doc in docs:
            owner = owners.get(doc["user_id"])
            if owner is None:
                # Keep the video even if its owner row is gone.
                owner = {"_id": doc["user_id"], "username": "", "avatar_url": None}
            records.append(_video_record(doc, owner))
        return records

    def count_videos(self) -> int:
        return self.videos.count_documents({})

    def find_meta_items_by_video_ids(self, video_ids: list[str]) -> list[MetaItemRecord]:
        oids = [o for o in (_to_object_id(v) for v in video_ids) if o is not None]
        if not oids:
            return []
        try:
            docs = self.meta_items.find({"video_id": {"$in": oids}}).sort("created_at", ASCENDING)
            return [_meta_item_record(doc) for doc in docs]
        except Exception as e:
            logger.error(f"Error fetching meta items: {e}")
            raise

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
        user_oid = _to_object_id(user_id)
        video_oid = _to_object_id(video_id)

        if user_oid is None or self.users.find_one({"_id": user_oid}, {"_id": 1}) is None:
            raise RecordNotFoundError(f"User {user_id} does not exist")
        if video_oid is None or self.videos.find_one({"_id": video_oid}, {"_id": 1}) is None:
            raise RecordNotFoundError(f"Video {video_id} does not exist")

        doc = {
            "user_id": user_oid,
            "video_id": video_oid,
            "type": kind.value,
            "content": content,
            "created_at": datetime.utcnow(),
        }
        try:
            self.interactions.insert_one(doc)
        except DuplicateKeyError as e:
            raise DuplicateInteractionError(
                f"User {user_id} already registered a {kind.value} on video {video_id}"
            ) from e

        return InteractionRecord(
            id=str(doc["_id"]),
            user_id=str(user_oid),
            video_id=str(video_oid),
            interaction_type=kind.value,
            content=content,
            created_at=doc["created_at"],
        )

    def group_interaction_counts(self, video_ids: list[str]) -> list[InteractionCount]:
        oids = [o for o in (_to_object_id(v) for v in video_ids) if o is not None]
        if not oids:
            return []

        pipeline = [
            {"$match": {"video_id": {"$in": oids}}},
            {
                "$group": {
                    "_id": {"video_id": "$video_id", "type": "$type"},
                    "count": {"$sum": 1},
                }
            },
        ]
        try:
            rows = self.interactions.aggregate(pipeline)
            return [
                InteractionCount(
                    video_id=str(row["_id"]["video_id"]),
                    interaction_type=row["_id"]["type"],
                    count=row["count"],
                )
                for row in rows
            ]
        except Exception as e:
            logger.error(f"Error grouping interaction counts: {e}")
            raise
