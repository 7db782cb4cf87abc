"""
Dump users and ratings as JSON to check what the site has stored.

Usage:
    python scripts/diagnose_db.py
    python scripts/diagnose_db.py --tmdb-id 94796
"""

import sys
from pathlib import Path

# Add parent directory to path
project_root = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(project_root))

import json
import logging
import argparse

from asian_drama_board.models.database import SessionLocal
from asian_drama_board.repos import RatingRepository, UserRepository

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)

logger = logging.getLogger(__name__)


def collect(db, tmdb_id: int | None = None) -> dict:
    """
    Gather users and ratings into plain dicts.

    Args:
        db: Database session
        tmdb_id: Only include ratings for this title

    Returns:
        {"users": [...], "ratings": [...]}
    """
    users = [
        {"id": u.id, "username": u.username, "created_at": u.created_at}
        for u in UserRepository(db).get_all_users()
    ]
    ratings = [
        {
            "id": r.id,
            "user_id": r.user_id,
            "tmdb_id": r.tmdb_id,
            "score": r.score,
            "has_seen": r.has_seen,
            "is_favorite": r.is_favorite,
            "empty": r.is_empty,
            "updated_at": r.updated_at,
        }
        for r in RatingRepository(db).all_ratings()
        if tmdb_id is None or r.tmdb_id == tmdb_id
    ]
    return {"users": users, "ratings": ratings}


def main():
    """Main execution function."""
    parser = argparse.ArgumentParser(description='Dump users and ratings')
    parser.add_argument(
        '--tmdb-id',
        type=int,
        default=None,
        help='Only show ratings for this TMDB id'
    )
    args = parser.parse_args()

    db = SessionLocal()
    try:
        data = collect(db, tmdb_id=args.tmdb_id)
    except Exception as e:
        logger.error(f"Failed to read database: {e}", exc_info=True)
        sys.exit(1)
    finally:
        db.close()

    print('--- USERS ---')
    print(json.dumps(data["users"], indent=2, default=str))
    print('--- RATINGS ---')
    print(json.dumps(data["ratings"], indent=2, default=str))


if __name__ == "__main__":
    main()
