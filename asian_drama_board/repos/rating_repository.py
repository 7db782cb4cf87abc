"""Repository for managing per-user drama ratings in the database."""

from typing import Dict, List, Optional
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from sqlalchemy import and_, case, desc, func
import logging

from asian_drama_board.models import Rating

logger = logging.getLogger(__name__)

MIN_SCORE = 0
MAX_SCORE = 10
TOP_RATED_MIN_SCORE = 8


def validate_score(score) -> int:
    """
    Check a score is an integer between 0 and 10.

    Raises:
        ValueError: If the score is out of range or not an integer
    """
    if isinstance(score, bool) or not isinstance(score, int):
        raise ValueError("score must be an integer")
    if score < MIN_SCORE or score > MAX_SCORE:
        raise ValueError(f"score must be between {MIN_SCORE} and {MAX_SCORE}")
    return score


class RatingRepository:
    """
    Repository for the ratings table, keyed by (user_id, tmdb_id).
    """

    def __init__(self, db: Session):
        self.db = db

    def get(self, user_id: int, tmdb_id: int) -> Optional[Rating]:
        """Get the rating row for a user and title."""
        return (
            self.db.query(Rating)
            .filter(and_(Rating.user_id == user_id, Rating.tmdb_id == tmdb_id))
            .first()
        )

    def upsert(self, user_id: int, tmdb_id: int, **fields) -> Rating:
        """
        Update the row for (user_id, tmdb_id) or create it.

        Args:
            user_id: User ID
            tmdb_id: TMDB title ID
            **fields: Any of score, has_seen, is_favorite

        Returns:
            Rating object. When the row ends up with no state at all it is
            deleted and a transient Rating with the cleared values is returned.
        """
        unknown = set(fields) - {"score", "has_seen", "is_favorite"}
        if unknown:
            raise ValueError(f"Unknown rating fields: {', '.join(sorted(unknown))}")
        if "score" in fields:
            validate_score(fields["score"])

        rating = self.get(user_id, tmdb_id)

        if rating:
            for key, value in fields.items():
                setattr(rating, key, value)
        else:
            rating = Rating(
                user_id=user_id,
                tmdb_id=tmdb_id,
                score=fields.get("score", 0),
                has_seen=fields.get("has_seen", False),
                is_favorite=fields.get("is_favorite", False),
            )
            self.db.add(rating)

        try:
            self.db.commit()
        except IntegrityError:
            # Another request inserted the row after our lookup
            self.db.rollback()
            rating = self.get(user_id, tmdb_id)
            if rating is None:
                raise
            logger.info(f"Rating for user {user_id}, tmdb {tmdb_id} created concurrently; updating it")
            for key, value in fields.items():
                setattr(rating, key, value)
            self.db.commit()

        self.db.refresh(rating)

        if rating.is_empty:
            self.db.delete(rating)
            self.db.commit()
            return Rating(user_id=user_id, tmdb_id=tmdb_id, score=0, has_seen=False, is_favorite=False)

        return rating

    def set_score(self, user_id: int, tmdb_id: int, score: int) -> Rating:
        """Set the score for a title (0 clears it)."""
        return self.upsert(user_id, tmdb_id, score=score)

    def toggle_seen(self, user_id: int, tmdb_id: int) -> Rating:
        """Flip the seen flag. A new row starts as seen."""
        rating = self.get(user_id, tmdb_id)
        new_value = not rating.has_seen if rating else True
        return self.upsert(user_id, tmdb_id, has_seen=new_value)

    def toggle_favorite(self, user_id: int, tmdb_id: int) -> Rating:
        """Flip the favorite flag. A new row starts as favorite."""
        rating = self.get(user_id, tmdb_id)
        new_value = not rating.is_favorite if rating else True
        return self.upsert(user_id, tmdb_id, is_favorite=new_value)

    def reset(self, user_id: int, tmdb_id: int) -> bool:
        """
        Delete all interaction state for a title.

        Returns:
            True if a row was deleted, False if none existed
        """
        count = (
            self.db.query(Rating)
            .filter(and_(Rating.user_id == user_id, Rating.tmdb_id == tmdb_id))
            .delete()
        )
        self.db.commit()

        return count > 0

    def _clear_column(self, user_id: int, criterion, values: Dict) -> int:
        """Reset one column for a user's rows, then drop rows left empty."""
        touched = (
            self.db.query(Rating)
            .filter(and_(Rating.user_id == user_id, criterion))
            .update(values, synchronize_session=False)
        )
        self._delete_empty(user_id)
        self.db.commit()
        return touched

    def _delete_empty(self, user_id: int) -> int:
        return (
            self.db.query(Rating)
            .filter(
                and_(
                    Rating.user_id == user_id,
                    Rating.score == 0,
                    Rating.has_seen.is_(False),
                    Rating.is_favorite.is_(False),
                )
            )
            .delete(synchronize_session=False)
        )

    def clear_favorites(self, user_id: int) -> int:
        """Unfavorite every title for a user. Returns rows touched."""
        count = self._clear_column(user_id, Rating.is_favorite.is_(True), {"is_favorite": False})
        logger.info(f"Cleared {count} favorites for user {user_id}")
        return count

    def clear_watched(self, user_id: int) -> int:
        """Mark every title unseen for a user. Returns rows touched."""
        count = self._clear_column(user_id, Rating.has_seen.is_(True), {"has_seen": False})
        logger.info(f"Cleared {count} watched entries for user {user_id}")
        return count

    def clear_scores(self, user_id: int) -> int:
        """Remove every score for a user. Returns rows touched."""
        count = self._clear_column(user_id, Rating.score > 0, {"score": 0})
        logger.info(f"Cleared {count} scores for user {user_id}")
        return count

    # noinspection PyTypeChecker
    def list_favorites(self, user_id: int) -> List[Rating]:
        """Favorites, most recently changed first."""
        return (
            self.db.query(Rating)
            .filter(and_(Rating.user_id == user_id, Rating.is_favorite.is_(True)))
            .order_by(desc(Rating.updated_at), desc(Rating.id))
            .all()
        )

    # noinspection PyTypeChecker
    def list_watched(self, user_id: int) -> List[Rating]:
        """Seen titles, most recently changed first."""
        return (
            self.db.query(Rating)
            .filter(and_(Rating.user_id == user_id, Rating.has_seen.is_(True)))
            .order_by(desc(Rating.updated_at), desc(Rating.id))
            .all()
        )

    # noinspection PyTypeChecker
    def list_top_rated(self, user_id: int, min_score: int = TOP_RATED_MIN_SCORE) -> List[Rating]:
        """
        Titles scored at or above min_score.

        Args:
            user_id: User ID
            min_score: Lowest score included (default: 8)

        Returns:
            Ratings ordered by score, highest first
        """
        return (
            self.db.query(Rating)
            .filter(and_(Rating.user_id == user_id, Rating.score >= min_score))
            .order_by(desc(Rating.score), desc(Rating.updated_at), desc(Rating.id))
            .all()
        )

    def aggregate_stats(self, tmdb_ids: List[int]) -> Dict[int, Dict]:
        """
        Community statistics across all users.

        Args:
            tmdb_ids: Titles to aggregate

        Returns:
            Dict mapping tmdb_id to avg_rating, total_ratings and seen_count.
            Titles without rows are absent. Unrated rows (score 0) do not
            count towards the average.
        """
        if not tmdb_ids:
            return {}

        rated = case((Rating.score > 0, 1), else_=0)
        seen = case((Rating.has_seen.is_(True), 1), else_=0)
        rated_score = case((Rating.score > 0, Rating.score), else_=None)

        results = (
            self.db.query(
                Rating.tmdb_id,
                func.avg(rated_score),
                func.sum(rated),
                func.sum(seen),
            )
            .filter(Rating.tmdb_id.in_(tmdb_ids))
            .group_by(Rating.tmdb_id)
            .all()
        )

        stats = {}
        for tmdb_id, avg_score, total_ratings, seen_count in results:
            stats[tmdb_id] = {
                'avg_rating': float(avg_score) if avg_score is not None else 0.0,
                'total_ratings': int(total_ratings or 0),
                'seen_count': int(seen_count or 0),
            }

        return stats

    # noinspection PyTypeChecker
    def get_user_ratings(self, user_id: int, tmdb_ids: List[int]) -> Dict[int, Rating]:
        """Map tmdb_id to the user's own row for the given titles."""
        if not tmdb_ids:
            return {}
        rows = (
            self.db.query(Rating)
            .filter(and_(Rating.user_id == user_id, Rating.tmdb_id.in_(tmdb_ids)))
            .all()
        )
        return {row.tmdb_id: row for row in rows}

    # noinspection PyTypeChecker
    def all_ratings(self) -> List[Rating]:
        """Every rating row, for diagnostics."""
        return self.db.query(Rating).order_by(Rating.id).all()

    def count_ratings(self, user_id: Optional[int] = None) -> int:
        """
        Count rating rows.

        Args:
            user_id: If provided, count for that user only

        Returns:
            Number of rows
        """
        query = self.db.query(Rating)

        if user_id is not None:
            query = query.filter(Rating.user_id == user_id)

        return query.count()
