"""
Video feed: enrichment of a page of videos.

Given one page of videos, fetches their meta items and grouped interaction
counts in one batched call each, then merges everything into one record per
video. Videos with no meta items or interactions are kept with empty /
zeroed fields; nothing here ever drops a video from the page.
"""

import logging
from collections import defaultdict
from dataclasses import dataclass, field

from services.pagination import PageRequest, Pagination, build_pagination
from store.base import (
    InteractionCount,
    InteractionType,
    MetaItemRecord,
    VideoRecord,
    VideoStore,
)

logger = logging.getLogger(__name__)

# like -> likes, view -> views, comment -> comments
STAT_KEYS = {kind.value: f"{kind.value}s" for kind in InteractionType}


@dataclass
class InteractionStats:
    """Interaction totals for a single video."""

    likes: int = 0
    views: int = 0
    comments: int = 0


@dataclass
class EnrichedVideo:
    """A video with its meta items and interaction totals attached."""

    video: VideoRecord
    meta_items: list[MetaItemRecord] = field(default_factory=list)
    interactions: InteractionStats = field(default_factory=InteractionStats)


@dataclass
class VideoPage:
    """One page of enriched videos plus pagination metadata."""

    items: list[EnrichedVideo]
    pagination: Pagination


def enrich_videos(
    videos: list[VideoRecord],
    meta_items: list[MetaItemRecord],
    interaction_counts: list[InteractionCount],
) -> list[EnrichedVideo]:
    """
    Merge meta items and grouped counts into the given videos.

    Args:
        videos: Page of videos, already in display order.
        meta_items: Meta items for any of the videos.
        interaction_counts: Rows grouped by (video, type).

    Returns:
        One EnrichedVideo per input video, in the same order.
    """
    meta_by_video: dict[str, list[MetaItemRecord]] = defaultdict(list)
    for item in meta_items:
        meta_by_video[item.video_id].append(item)

    stats_by_video: dict[str, InteractionStats] = defaultdict(InteractionStats)
    for row in interaction_counts:
        stat_key = STAT_KEYS.get(row.interaction_type)
        if stat_key is None:
            logger.warning(
                f"Ignoring unknown interaction type {row.interaction_type!r} "
                f"for video {row.video_id}"
            )
            continue
        setattr(stats_by_video[row.video_id], stat_key, row.count)

    return [
        EnrichedVideo(
            video=video,
            meta_items=meta_by_video.get(video.id, []),
            interactions=stats_by_video.get(video.id, InteractionStats()),
        )
        for video in videos
    ]


def load_video_page(store: VideoStore, request: PageRequest) -> VideoPage:
    """
    Fetch and enrich one page of videos, newest first.

    Issues at most four store calls regardless of page size: the total
    video count, the page itself, its meta items and its grouped
    interaction counts. A page past the end skips the page query, and the
    limit passed to the store is capped at the rows remaining. The reads
    are not transactional.
    """
    total_items = store.count_videos()
    offset = request.offset

    if offset < total_items:
        videos = store.list_videos_page(
            offset=offset, limit=min(request.limit, total_items - offset))
    else:
        videos = []
    video_ids = [video.id for video in videos]

    if video_ids:
        meta_items = store.find_meta_items_by_video_ids(video_ids)
        interaction_counts = store.group_interaction_counts(video_ids)
    else:
        meta_items, interaction_counts = [], []

    return VideoPage(
        items=enrich_videos(videos, meta_items, interaction_counts),
        pagination=build_pagination(request, total_items),
    )
