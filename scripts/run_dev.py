"""
Development server launcher.

Loads .env, makes sure the tables exist (SQLite URLs only; PostgreSQL
goes through Alembic) and serves the session engine with auto-reload.

Usage:
    python scripts/run_dev.py [--host 127.0.0.1] [--port 8000] [--no-reload]
"""

import argparse
import sys
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from dotenv import load_dotenv

load_dotenv()

import uvicorn

from athletica.core.config import settings
from athletica.core.logging import configure_logging
from athletica.db.init_db import init_db


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Run the workout session engine locally")
    parser.add_argument("--host", default="0.0.0.0")
    parser.add_argument("--port", type=int, default=8000)
    parser.add_argument("--no-reload", dest="reload", action="store_false", help="Disable auto-reload")
    return parser.parse_args()


def main() -> None:
    args = parse_args()
    configure_logging()

    database_url = settings.DATABASE_URL
    if database_url.startswith("sqlite"):
        init_db()

    print("=" * 60)
    print(f"{settings.PROJECT_NAME} {settings.VERSION} - Development Server")
    print("=" * 60)
    print(f"Database: {database_url.split('@')[-1]}")
    print(f"Sessions API: http://localhost:{args.port}/api/v1/sessions")
    print(f"Docs: http://localhost:{args.port}/docs")
    print("Send an X-User-Id header with every /api/v1 request.")
    print()
    print("Press Ctrl+C to stop")
    print("=" * 60)

    uvicorn.run("athletica.main:app", host=args.host, port=args.port, reload=args.reload,
                log_level=settings.LOG_LEVEL.lower())


if __name__ == "__main__":
    main()
