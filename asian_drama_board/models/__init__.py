"""SQLAlchemy models"""

from asian_drama_board.models.base import Base
from asian_drama_board.models.rating import Rating
from asian_drama_board.models.user import User

__all__ = [
    "Base",
    "Rating",
    "User",
]
