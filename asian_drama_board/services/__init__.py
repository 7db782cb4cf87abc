"""Service classes"""

from .interaction_service import InteractionService
from .tmdb_client import TmdbClient

__all__ = ["InteractionService", "TmdbClient"]
