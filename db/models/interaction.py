import uuid
from sqlalchemy import String, Text, Uuid, ForeignKey, Index, CheckConstraint, text
from sqlalchemy.orm import Mapped, mapped_column
from db.base import Base, TimestampMixin


# Only likes and views are limited to one per (user, video).
UNIQUE_INTERACTION_WHERE = text("interaction_type IN ('like', 'view')")


class Interaction(Base, TimestampMixin):
    """SQLAlchemy model for a like, view or comment on a video.

    The partial unique index allows any number of comments while keeping
    likes and views unique per (user, video).
    """

    __tablename__ = "interactions"
    __table_args__ = (
        Index("idx_interactions_video_id_type", "video_id", "interaction_type"),
        Index(
            "uq_interactions_user_video_type",
            "user_id", "video_id", "interaction_type",
            unique=True,
            postgresql_where=UNIQUE_INTERACTION_WHERE,
            sqlite_where=UNIQUE_INTERACTION_WHERE,
        ),
        CheckConstraint(
            "interaction_type IN ('like', 'view', 'comment')",
            name="interaction_type",
        ),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid, primary_key=True, default=uuid.uuid4)
    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    video_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("videos.id", ondelete="CASCADE"), nullable=False)
    interaction_type: Mapped[str] = mapped_column(String(16), nullable=False)
    content: Mapped[str | None] = mapped_column(Text, nullable=True)
