"""Repository classes"""

from asian_drama_board.repos.rating_repository import RatingRepository
from asian_drama_board.repos.user_repository import UserRepository

__all__ = [
    "RatingRepository",
    "UserRepository",
]
