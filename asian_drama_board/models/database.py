"""asian_drama_board/models/database.py"""
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from asian_drama_board.config import get_database_url

# Get database URL
DATABASE_URL = get_database_url()

# Validate database URL is provided
if DATABASE_URL is None:
    raise ValueError("DATABASE_URL is not configured. Set the DATABASE_URL environment variable.")

# Create engine
engine = create_engine(
    DATABASE_URL,
    pool_pre_ping=True,
    pool_recycle=3600,
    echo=False  # Set to True for SQL debugging
)

# Create session factory
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def init_db():
    """Create all tables that do not exist yet."""
    # Import models so they are registered on Base.metadata
    from asian_drama_board.models import Base  # noqa: F401
    Base.metadata.create_all(bind=engine)

