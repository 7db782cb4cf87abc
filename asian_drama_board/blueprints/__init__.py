"""Azure Functions blueprints"""

from .dramas_bp import bp as dramas_bp
from .interactions_bp import bp as interactions_bp
from .pages_bp import bp as pages_bp

__all__ = ["dramas_bp", "interactions_bp", "pages_bp"]
