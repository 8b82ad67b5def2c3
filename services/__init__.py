"""
Services module initialization.

Request-level operations and collaborators built on top of a VideoStore.
"""

from services.errors import AuthError, InternalError, ValidationError, VideoServiceError
from services.pagination import PageRequest, Pagination
from services.video_service import VideoService

__all__ = [
    "AuthError",
    "InternalError",
    "ValidationError",
    "VideoServiceError",
    "PageRequest",
    "Pagination",
    "VideoService",
]
