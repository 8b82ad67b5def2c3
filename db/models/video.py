import uuid
from sqlalchemy import String, Text, Uuid, ForeignKey, Index
from sqlalchemy.orm import Mapped, mapped_column
from db.base import Base, TimestampMixin


class Video(Base, TimestampMixin):
    """SQLAlchemy model for an uploaded video.

    Rows are immutable once created; listing reads them newest-first,
    hence the index on created_at.
    """

    __tablename__ = "videos"
    __table_args__ = (
        Index("idx_videos_user_id", "user_id"),
        Index("idx_videos_created_at", "created_at"),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid, primary_key=True, default=uuid.uuid4)
    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    title: Mapped[str] = mapped_column(String(500), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    video_url: Mapped[str] = mapped_column(Text, nullable=False)
