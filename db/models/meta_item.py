import uuid
from sqlalchemy import String, Text, Uuid, ForeignKey, Index
from sqlalchemy.orm import Mapped, mapped_column
from db.base import Base, TimestampMixin


class MetaItem(Base, TimestampMixin):
    """Typed key/value annotation attached to a video (tag, category, thumbnail)."""

    __tablename__ = "meta_items"
    __table_args__ = (
        Index("idx_meta_items_video_id", "video_id"),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid, primary_key=True, default=uuid.uuid4)
    video_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("videos.id", ondelete="CASCADE"), nullable=False)
    item_type: Mapped[str | None] = mapped_column(String(64), nullable=True)
    key: Mapped[str | None] = mapped_column(String(255), nullable=True)
    value: Mapped[str | None] = mapped_column(Text, nullable=True)
    thumbnail_url: Mapped[str | None] = mapped_column(Text, nullable=True)
    label: Mapped[str | None] = mapped_column(String(255), nullable=True)
