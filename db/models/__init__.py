"""
SQLAlchemy models for the video share backend.

Models:
- User: Video owners and interaction authors
- Video: Uploaded videos
- MetaItem: Typed annotations attached to a video
- Interaction: Likes, views and comments on a video
"""

from db.models.user import User
from db.models.video import Video
from db.models.meta_item import MetaItem
from db.models.interaction import Interaction

__all__ = [
    "User",
    "Video",
    "MetaItem",
    "Interaction",
]
