"""
Database initialization script.

Creates every table of the session engine on the configured database.
Use ``alembic upgrade head`` for managed deployments.

Usage:
    python scripts/init_db.py
"""

import sys
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from sqlalchemy.exc import SQLAlchemyError

from athletica.core.logging import configure_logging
from athletica.db.init_db import init_db

if __name__ == "__main__":
    configure_logging()
    print("=" * 50)
    print("Athletica Database Initialization")
    print("=" * 50)
    print()

    try:
        init_db()
    except SQLAlchemyError as e:
        print()
        print("=" * 50)
        print("ERROR: Database initialization failed!")
        print(f"Details: {e}")
        print("=" * 50)
        sys.exit(1)

    print()
    print("=" * 50)
    print("SUCCESS: Database initialized!")
    print("=" * 50)
