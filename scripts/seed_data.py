#!/usr/bin/env python3
"""
Database seeding script.

Clears the configured store and loads demo users, videos, meta items and
interactions. Works against either backend (STORAGE_BACKEND=sql|mongo).
"""

import sys
import os

# Add the parent directory to the path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from dataclasses import dataclass, field
from datetime import datetime, timedelta

from config import config
from store import build_store
from store.base import InteractionType, NewMetaItem, UserRecord, VideoStore


DEMO_USERS = [
    ("john_doe", "https://picsum.photos/150/150?random=1"),
    ("jane_smith", "https://picsum.photos/150/150?random=2"),
    ("bob_wilson", "https://picsum.photos/150/150?random=3"),
    ("alice_johnson", "https://picsum.photos/150/150?random=4"),
]

# (title, description, video_url, index into DEMO_USERS)
DEMO_VIDEOS = [
    (
        "Amazing Nature Documentary",
        "Explore the wonders of wildlife in this stunning documentary",
        "https://sample-videos.com/zip/10/mp4/SampleVideo_1280x720_1mb.mp4",
        0,
    ),
    (
        "Cooking Tutorial: Italian Pasta",
        "Learn how to make authentic Italian pasta from scratch",
        "https://sample-videos.com/zip/10/mp4/SampleVideo_1280x720_2mb.mp4",
        1,
    ),
    (
        "Travel Vlog: Tokyo Adventure",
        "Join me as I explore the vibrant streets of Tokyo",
        "https://sample-videos.com/zip/10/mp4/SampleVideo_1280x720_5mb.mp4",
        2,
    ),
    (
        "Tech Review: Latest Smartphone",
        "Comprehensive review of the newest smartphone features",
        "https://sample-videos.com/zip/10/mp4/SampleVideo_1280x720_1mb.mp4",
        0,
    ),
    (
        "Fitness Workout: Morning Routine",
        "Start your day with this energizing 20-minute workout",
        "https://sample-videos.com/zip/10/mp4/SampleVideo_1280x720_2mb.mp4",
        3,
    ),
]


@dataclass
class SeedSummary:
    """Rows written by a seed run."""

    users: list[UserRecord] = field(default_factory=list)
    videos: int = 0
    meta_items: int = 0
    interactions: int = 0


def _demo_meta_items(index: int) -> list[NewMetaItem]:
    return [
        NewMetaItem(
            item_type="thumbnail",
            thumbnail_url=f"https://picsum.photos/320/180?random={index * 2 + 10}",
            label=f"Thumbnail {index + 1}",
        ),
        NewMetaItem(
            item_type="preview",
            thumbnail_url=f"https://picsum.photos/320/180?random={index * 2 + 11}",
            label=f"Preview {index + 1}",
        ),
    ]


def seed(store: VideoStore, now: datetime | None = None) -> SeedSummary:
    """
    Replace the store contents with the demo data set.

    Every user views every video, users at even positions like it and the
    first two users comment on it. Videos are spaced one minute apart so
    the last one listed in DEMO_VIDEOS is the newest.
    """
    now = now or datetime.utcnow()
    summary = SeedSummary()

    store.clear()

    for username, avatar_url in DEMO_USERS:
        summary.users.append(store.create_user(username, avatar_url))

    video_ids = []
    for index, (title, description, video_url, owner_index) in enumerate(DEMO_VIDEOS):
        created_at = now - timedelta(minutes=len(DEMO_VIDEOS) - index)
        video, meta_items = store.create_video_with_meta_items(
            user_id=summary.users[owner_index].id,
            title=title,
            video_url=video_url,
            description=description,
            meta_items=_demo_meta_items(index),
            created_at=created_at,
        )
        video_ids.append(video.id)
        summary.videos += 1
        summary.meta_items += len(meta_items)

    for video_id in video_ids:
        for user_index, user in enumerate(summary.users):
            store.add_interaction(user.id, video_id, InteractionType.VIEW)
            summary.interactions += 1

            if user_index % 2 == 0:
                store.add_interaction(user.id, video_id, InteractionType.LIKE)
                summary.interactions += 1

            if user_index < 2:
                store.add_interaction(
                    user.id,
                    video_id,
                    InteractionType.COMMENT,
                    content=f"Great video! This is a comment from {user.username}",
                )
                summary.interactions += 1

    return summary


def main():
    """Seed the configured backend with demo data."""
    print("=" * 50)
    print(f"Database Seeding ({config.storage.backend})")
    print("=" * 50)

    store = build_store(config)
    try:
        store.initialize()
        summary = seed(store)
        print(f"✓ Created {len(summary.users)} users")
        print(f"✓ Created {summary.videos} videos")
        print(f"✓ Created {summary.meta_items} meta items")
        print(f"✓ Created {summary.interactions} interactions")
        print("\nUsers:")
        for user in summary.users:
            print(f"  {user.id}  {user.username}")
        print("=" * 50)
        print("✓ Database seeded successfully!")
        print("=" * 50)
    except Exception as e:
        print(f"✗ Database seeding failed: {e}")
        sys.exit(1)
    finally:
        store.close()


if __name__ == "__main__":
    main()
