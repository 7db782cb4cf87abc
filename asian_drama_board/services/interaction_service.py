"""Service for the guest user's ratings, seen flags and favorites."""
from typing import List, Dict, Optional
import logging

from asian_drama_board.config import get_guest_username
from asian_drama_board.models.database import SessionLocal
from asian_drama_board.repos import RatingRepository, UserRepository
from asian_drama_board.services.browse import filter_dramas
from asian_drama_board.services.tmdb_client import TmdbClient

logger = logging.getLogger(__name__)


class InteractionService:
    """
    Records interactions for a single user and reads community stats.

    Each call opens and closes its own database session.
    """

    def __init__(self, tmdb_client: Optional[TmdbClient] = None, username: Optional[str] = None):
        self.tmdb_client = tmdb_client or TmdbClient()
        self.username = username or get_guest_username()

    def _user_id(self, db) -> int:
        return UserRepository(db).get_or_create(self.username).id

    # ===== WRITES =====

    def submit_rating(self, tmdb_id: int, score: int, has_seen: bool) -> Dict:
        """Set score and seen flag in one go."""
        db = SessionLocal()
        try:
            repo = RatingRepository(db)
            rating = repo.upsert(self._user_id(db), tmdb_id, score=score, has_seen=bool(has_seen))
            logger.info(f"Rated {tmdb_id}: score={score}, has_seen={has_seen}")
            return self._to_dict(rating)
        finally:
            db.close()

    def update_score(self, tmdb_id: int, score: int) -> Dict:
        """
        Set the score for a drama.

        Args:
            tmdb_id: TMDB title ID
            score: 1-10, or 0 to clear

        Raises:
            ValueError: If score is not an integer in 0..10
        """
        db = SessionLocal()
        try:
            rating = RatingRepository(db).set_score(self._user_id(db), tmdb_id, score)
            logger.info(f"Scored {tmdb_id}: {score}")
            return self._to_dict(rating)
        finally:
            db.close()

    def toggle_seen(self, tmdb_id: int) -> bool:
        """Flip the seen flag. Returns the new value."""
        db = SessionLocal()
        try:
            rating = RatingRepository(db).toggle_seen(self._user_id(db), tmdb_id)
            return bool(rating.has_seen)
        finally:
            db.close()

    def toggle_favorite(self, tmdb_id: int) -> bool:
        """Flip the favorite flag. Returns the new value."""
        db = SessionLocal()
        try:
            rating = RatingRepository(db).toggle_favorite(self._user_id(db), tmdb_id)
            return bool(rating.is_favorite)
        finally:
            db.close()

    def reset_interaction(self, tmdb_id: int) -> bool:
        """Forget everything about one drama. Returns whether anything existed."""
        db = SessionLocal()
        try:
            deleted = RatingRepository(db).reset(self._user_id(db), tmdb_id)
            logger.info(f"Reset interactions for {tmdb_id} (existed={deleted})")
            return deleted
        finally:
            db.close()

    def clear_all_favorites(self) -> int:
        db = SessionLocal()
        try:
            return RatingRepository(db).clear_favorites(self._user_id(db))
        finally:
            db.close()

    def clear_all_watched(self) -> int:
        db = SessionLocal()
        try:
            return RatingRepository(db).clear_watched(self._user_id(db))
        finally:
            db.close()

    def clear_all_ratings(self) -> int:
        db = SessionLocal()
        try:
            return RatingRepository(db).clear_scores(self._user_id(db))
        finally:
            db.close()

    # ===== READS =====

    def get_interaction_stats(self, tmdb_ids: List[int]) -> List[Dict]:
        """
        Community stats plus the user's own state, one entry per input id.

        Returns:
            List of dicts with tmdb_id, avg_rating, total_ratings,
            seen_count, score, has_seen and is_favorite
        """
        if not tmdb_ids:
            return []

        db = SessionLocal()
        try:
            repo = RatingRepository(db)
            community = repo.aggregate_stats(tmdb_ids)
            user = UserRepository(db).get_by_username(self.username)
            own = repo.get_user_ratings(user.id, tmdb_ids) if user else {}

            stats = []
            for tmdb_id in tmdb_ids:
                shared = community.get(tmdb_id, {})
                mine = own.get(tmdb_id)
                stats.append({
                    'tmdb_id': tmdb_id,
                    'avg_rating': shared.get('avg_rating', 0.0),
                    'total_ratings': shared.get('total_ratings', 0),
                    'seen_count': shared.get('seen_count', 0),
                    'score': mine.score if mine else 0,
                    'has_seen': bool(mine.has_seen) if mine else False,
                    'is_favorite': bool(mine.is_favorite) if mine else False,
                })
            return stats
        finally:
            db.close()

    def get_stats_map(self, tmdb_ids: List[int]) -> Dict[int, Dict]:
        """get_interaction_stats keyed by tmdb_id."""
        return {s['tmdb_id']: s for s in self.get_interaction_stats(tmdb_ids)}

    def _list_ids(self, list_name: str) -> List[int]:
        db = SessionLocal()
        try:
            user = UserRepository(db).get_by_username(self.username)
            if not user:
                return []
            repo = RatingRepository(db)
            rows = {
                'favorites': repo.list_favorites,
                'watched': repo.list_watched,
                'best': repo.list_top_rated,
            }[list_name](user.id)
            return [row.tmdb_id for row in rows]
        finally:
            db.close()

    def _list_dramas(self, list_name: str, query: Optional[str]) -> List[Dict]:
        ids = self._list_ids(list_name)
        if not ids:
            return []
        dramas = self.tmdb_client.get_dramas(ids)
        return filter_dramas(dramas, search=query)

    def get_favorites(self, query: Optional[str] = None) -> List[Dict]:
        """Favorite dramas, optionally filtered by name."""
        return self._list_dramas('favorites', query)

    def get_watched(self, query: Optional[str] = None) -> List[Dict]:
        """Seen dramas, optionally filtered by name."""
        return self._list_dramas('watched', query)

    def get_top_rated(self, query: Optional[str] = None) -> List[Dict]:
        """Dramas scored 8 or higher, best first."""
        return self._list_dramas('best', query)

    def get_stats(self) -> Dict:
        """Counts for the stats endpoint."""
        db = SessionLocal()
        try:
            return {
                'users': UserRepository(db).count_users(),
                'ratings': RatingRepository(db).count_ratings(),
                'tmdb_mock_mode': self.tmdb_client.use_mock,
            }
        finally:
            db.close()

    @staticmethod
    def _to_dict(rating) -> Dict:
        return {
            'tmdb_id': rating.tmdb_id,
            'score': rating.score,
            'has_seen': bool(rating.has_seen),
            'is_favorite': bool(rating.is_favorite),
        }
