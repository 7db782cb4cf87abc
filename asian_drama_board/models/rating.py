"""Per-user interaction state for a drama."""

from datetime import UTC, datetime

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Index, Integer, UniqueConstraint
from sqlalchemy.orm import relationship

from asian_drama_board.models.base import Base


class Rating(Base):
    """One user's score, seen flag and favorite flag for one TMDB title.

    A score of 0 means the title has not been rated.
    """

    __tablename__ = "ratings"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    tmdb_id = Column(Integer, nullable=False)

    score = Column(Integer, nullable=False, default=0)
    has_seen = Column(Boolean, nullable=False, default=False)
    is_favorite = Column(Boolean, nullable=False, default=False)

    created_at = Column(DateTime, default=lambda: datetime.now(UTC), nullable=False)
    updated_at = Column(
        DateTime,
        default=lambda: datetime.now(UTC),
        onupdate=lambda: datetime.now(UTC),
        nullable=False
    )

    user = relationship("User", back_populates="ratings")

    __table_args__ = (
        UniqueConstraint("user_id", "tmdb_id", name="uq_rating_user_tmdb"),
        Index("idx_rating_tmdb_id", "tmdb_id"),
    )

    @property
    def is_empty(self) -> bool:
        """True when the row carries no interaction at all."""
        return not self.score and not self.has_seen and not self.is_favorite

    def __repr__(self):
        return (
            f"<Rating(user_id={self.user_id}, tmdb_id={self.tmdb_id}, score={self.score}, "
            f"has_seen={self.has_seen}, is_favorite={self.is_favorite})>"
        )
