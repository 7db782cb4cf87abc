"""
Create the database tables.

Usage:
    python scripts/init_db.py
    python scripts/init_db.py --drop   # start from an empty database
"""

import sys
from pathlib import Path

# Add parent directory to path
project_root = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(project_root))

import logging
import argparse

from asian_drama_board.models import Base
from asian_drama_board.models.database import DATABASE_URL, engine

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)

logger = logging.getLogger(__name__)


def create_tables(drop: bool = False) -> list:
    """
    Create all tables, optionally dropping existing ones first.

    Args:
        drop: Drop every table before creating

    Returns:
        Names of the tables in the schema
    """
    if drop:
        logger.warning("Dropping all tables...")
        Base.metadata.drop_all(bind=engine)

    Base.metadata.create_all(bind=engine)
    tables = sorted(Base.metadata.tables.keys())
    logger.info(f"✓ Tables ready: {', '.join(tables)}")
    return tables


def main():
    """Main execution function."""
    parser = argparse.ArgumentParser(description='Create the database tables')
    parser.add_argument(
        '--drop',
        action='store_true',
        help='Drop existing tables first (deletes all ratings)'
    )
    args = parser.parse_args()

    logger.info(f"Database: {engine.url.render_as_string(hide_password=True)}")

    try:
        create_tables(drop=args.drop)
    except Exception as e:
        logger.error(f"Failed to initialise {DATABASE_URL!r}: {e}", exc_info=True)
        sys.exit(1)


if __name__ == "__main__":
    main()
