"""
Unit tests for the MongoDB video store.

The pymongo client is replaced with MagicMock collections, so these tests
check the queries, pipelines and transaction usage the store issues.
"""

from datetime import datetime
from unittest.mock import MagicMock

import pytest
from bson import ObjectId
from pymongo import DESCENDING
from pymongo.errors import DuplicateKeyError

from store.base import (
    DuplicateInteractionError,
    InteractionType,
    NewMetaItem,
    RecordNotFoundError,
)
from store.mongo_store import MongoVideoStore


# =============================================================================
# Fixtures
# =============================================================================

OWNER_ID = ObjectId()
OWNER_DOC = {
    "_id": OWNER_ID,
    "username": "jane_smith",
    "avatar_url": "https://picsum.photos/150/150?random=2",
}


def _assign_id(doc, **kwargs):
    doc["_id"] = ObjectId()


def _assign_ids(docs, **kwargs):
    for doc in docs:
        doc["_id"] = ObjectId()


@pytest.fixture
def collections():
    return {
        "users": MagicMock(name="users"),
        "videos": MagicMock(name="videos"),
        "meta_items": MagicMock(name="meta_items"),
        "interactions": MagicMock(name="interactions"),
    }


@pytest.fixture
def session():
    mock_session = MagicMock(name="session")
    mock_session.with_transaction.side_effect = lambda callback: callback(mock_session)
    return mock_session


@pytest.fixture
def client(collections, session):
    mock_client = MagicMock(name="client")
    database = MagicMock(name="database")
    database.__getitem__.side_effect = collections.__getitem__
    mock_client.__getitem__.return_value = database
    mock_client.start_session.return_value.__enter__.return_value = session
    return mock_client


@pytest.fixture
def mongo_store(client):
    return MongoVideoStore(client, "videoshare_test")


# =============================================================================
# Lifecycle
# =============================================================================

class TestInitialize:
    """Tests for index creation."""

    def test_partial_unique_interaction_index(self, mongo_store, collections):
        mongo_store.initialize()

        unique_calls = [
            c for c in collections["interactions"].create_index.call_args_list
            if c.kwargs.get("unique")
        ]
        assert len(unique_calls) == 1
        keys = [field for field, _ in unique_calls[0].args[0]]
        assert keys == ["user_id", "video_id", "type"]
        assert unique_calls[0].kwargs["partialFilterExpression"] == {
            "type": {"$in": ["like", "view"]}
        }

    def test_username_unique_index(self, mongo_store, collections):
        mongo_store.initialize()
        collections["users"].create_index.assert_called_once()
        assert collections["users"].create_index.call_args.kwargs["unique"] is True

    def test_close_closes_client(self, mongo_store, client):
        mongo_store.close()
        client.close.assert_called_once()


# =============================================================================
# Users
# =============================================================================

class TestUsers:

    def test_get_user_with_malformed_id(self, mongo_store, collections):
        assert mongo_store.get_user("not-an-object-id") is None
        collections["users"].find_one.assert_not_called()

    def test_get_user(self, mongo_store, collections):
        collections["users"].find_one.return_value = OWNER_DOC
        user = mongo_store.get_user(str(OWNER_ID))
        assert user.id == str(OWNER_ID)
        assert user.username == "jane_smith"
        collections["users"].find_one.assert_called_once_with({"_id": OWNER_ID})

    def test_create_user(self, mongo_store, collections):
        collections["users"].insert_one.side_effect = _assign_id
        user = mongo_store.create_user("bob_wilson", "https://a.example/3.png")
        assert user.username == "bob_wilson"
        assert ObjectId.is_valid(user.id)


# =============================================================================
# Create video
# =============================================================================

class TestCreateVideoWithMetaItems:
    """Tests for the transactional create."""

    def test_writes_inside_one_transaction(self, mongo_store, collections, session):
        collections["users"].find_one.return_value = OWNER_DOC
        collections["videos"].insert_one.side_effect = _assign_id
        collections["meta_items"].insert_many.side_effect = _assign_ids

        video, meta_items = mongo_store.create_video_with_meta_items(
            user_id=str(OWNER_ID),
            title="Travel Vlog: Tokyo Adventure",
            video_url="https://cdn.example.com/tokyo.mp4",
            meta_items=[NewMetaItem(item_type="tag", value="travel"), NewMetaItem(label="Thumb")],
        )

        session.with_transaction.assert_called_once()
        assert collections["videos"].insert_one.call_args.kwargs["session"] is session
        assert collections["meta_items"].insert_many.call_args.kwargs["session"] is session

        assert video.user_id == str(OWNER_ID)
        assert video.owner.username == "jane_smith"
        assert len(meta_items) == 2
        assert all(item.video_id == video.id for item in meta_items)
        assert meta_items[0].item_type == "tag"

    def test_no_meta_items_skips_insert_many(self, mongo_store, collections):
        collections["users"].find_one.return_value = OWNER_DOC
        collections["videos"].insert_one.side_effect = _assign_id

        _, meta_items = mongo_store.create_video_with_meta_items(
            user_id=str(OWNER_ID), title="Bare", video_url="https://x/bare.mp4")

        assert meta_items == []
        collections["meta_items"].insert_many.assert_not_called()

    def test_explicit_created_at(self, mongo_store, collections):
        collections["users"].find_one.return_value = OWNER_DOC
        collections["videos"].insert_one.side_effect = _assign_id
        stamp = datetime(2024, 5, 1, 8, 30)

        video, _ = mongo_store.create_video_with_meta_items(
            user_id=str(OWNER_ID), title="Dated", video_url="https://x/d.mp4", created_at=stamp)

        assert video.created_at == stamp

    def test_unknown_owner(self, mongo_store, collections, client):
        collections["users"].find_one.return_value = None

        with pytest.raises(RecordNotFoundError):
            mongo_store.create_video_with_meta_items(
                user_id=str(ObjectId()), title="Orphan", video_url="https://x/o.mp4")

        client.start_session.assert_not_called()
        collections["videos"].insert_one.assert_not_called()

    def test_meta_item_failure_propagates(self, mongo_store, collections):
        collections["users"].find_one.return_value = OWNER_DOC
        collections["videos"].insert_one.side_effect = _assign_id
        collections["meta_items"].insert_many.side_effect = RuntimeError("write failed")

        with pytest.raises(RuntimeError):
            mongo_store.create_video_with_meta_items(
                user_id=str(OWNER_ID),
                title="Broken",
                video_url="https://x/b.mp4",
                meta_items=[NewMetaItem(label="x")],
            )


# =============================================================================
# Listing queries
# =============================================================================

class TestListingQueries:

    def test_list_videos_page(self, mongo_store, collections):
        video_doc = {
            "_id": ObjectId(),
            "user_id": OWNER_ID,
            "title": "Fitness Workout",
            "description": None,
            "video_url": "https://x/fit.mp4",
            "created_at": datetime(2024, 1, 1),
            "updated_at": datetime(2024, 1, 1),
        }
        cursor = collections["videos"].find.return_value
        cursor.sort.return_value.skip.return_value.limit.return_value = [video_doc]
        collections["users"].find.return_value = [OWNER_DOC]

        videos = mongo_store.list_videos_page(offset=4, limit=2)

        cursor.sort.assert_called_once_with("created_at", DESCENDING)
        cursor.sort.return_value.skip.assert_called_once_with(4)
        cursor.sort.return_value.skip.return_value.limit.assert_called_once_with(2)
        assert len(videos) == 1
        assert videos[0].title == "Fitness Workout"
        assert videos[0].owner.username == "jane_smith"
        assert collections["users"].find.call_args.args[0] == {"_id": {"$in": [OWNER_ID]}}

    def test_empty_page_skips_owner_lookup(self, mongo_store, collections):
        cursor = collections["videos"].find.return_value
        cursor.sort.return_value.skip.return_value.limit.return_value = []

        assert mongo_store.list_videos_page(offset=100, limit=10) == []
        collections["users"].find.assert_not_called()

    def test_count_videos(self, mongo_store, collections):
        collections["videos"].count_documents.return_value = 5
        assert mongo_store.count_videos() == 5
        collections["videos"].count_documents.assert_called_once_with({})

    def test_find_meta_items_single_query(self, mongo_store, collections):
        video_ids = [ObjectId(), ObjectId()]
        collections["meta_items"].find.return_value.sort.return_value = [
            {"_id": ObjectId(), "video_id": video_ids[0], "label": "Thumbnail 1"},
        ]

        items = mongo_store.find_meta_items_by_video_ids([str(v) for v in video_ids])

        collections["meta_items"].find.assert_called_once_with(
            {"video_id": {"$in": video_ids}})
        assert items[0].video_id == str(video_ids[0])
        assert items[0].label == "Thumbnail 1"

    def test_find_meta_items_empty_ids(self, mongo_store, collections):
        assert mongo_store.find_meta_items_by_video_ids([]) == []
        collections["meta_items"].find.assert_not_called()


# =============================================================================
# Interactions
# =============================================================================

class TestInteractions:

    def test_group_interaction_counts_pipeline(self, mongo_store, collections):
        video_id = ObjectId()
        collections["interactions"].aggregate.return_value = [
            {"_id": {"video_id": video_id, "type": "like"}, "count": 3},
            {"_id": {"video_id": video_id, "type": "view"}, "count": 5},
        ]

        counts = mongo_store.group_interaction_counts([str(video_id)])

        pipeline = collections["interactions"].aggregate.call_args.args[0]
        assert pipeline[0] == {"$match": {"video_id": {"$in": [video_id]}}}
        assert pipeline[1]["$group"]["_id"] == {"video_id": "$video_id", "type": "$type"}
        assert pipeline[1]["$group"]["count"] == {"$sum": 1}
        assert {(c.interaction_type, c.count) for c in counts} == {("like", 3), ("view", 5)}
        assert all(c.video_id == str(video_id) for c in counts)

    def test_duplicate_like_rejected(self, mongo_store, collections):
        collections["users"].find_one.return_value = {"_id": OWNER_ID}
        collections["videos"].find_one.return_value = {"_id": ObjectId()}
        collections["interactions"].insert_one.side_effect = DuplicateKeyError("E11000")

        with pytest.raises(DuplicateInteractionError):
            mongo_store.add_interaction(str(OWNER_ID), str(ObjectId()), InteractionType.LIKE)

    def test_comment_recorded(self, mongo_store, collections):
        collections["users"].find_one.return_value = {"_id": OWNER_ID}
        collections["videos"].find_one.return_value = {"_id": ObjectId()}
        collections["interactions"].insert_one.side_effect = _assign_id

        record = mongo_store.add_interaction(
            str(OWNER_ID), str(ObjectId()), InteractionType.COMMENT, content="Great video!")

        assert record.interaction_type == "comment"
        assert record.content == "Great video!"
        inserted = collections["interactions"].insert_one.call_args.args[0]
        assert inserted["type"] == "comment"

    def test_unknown_video_rejected(self, mongo_store, collections):
        collections["users"].find_one.return_value = {"_id": OWNER_ID}
        collections["videos"].find_one.return_value = None

        with pytest.raises(RecordNotFoundError):
            mongo_store.add_interaction(str(OWNER_ID), str(ObjectId()), InteractionType.VIEW)
        collections["interactions"].insert_one.assert_not_called()
