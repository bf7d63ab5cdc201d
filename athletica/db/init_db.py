"""
Database initialization.

Creates all tables.  Production deployments use the Alembic migrations
instead; this is for local development and throwaway databases.
"""

import logging

from sqlalchemy.engine import Engine
from sqlmodel import SQLModel

from athletica.db.session import engine as default_engine

logger = logging.getLogger(__name__)


def init_db(engine: Engine | None = None) -> None:
    """Create every table registered on ``SQLModel.metadata``."""

    # Import all models so SQLModel.metadata has them
    import athletica.db.base  # noqa: F401

    target = engine or default_engine
    logger.info("Creating database tables on %s", target.url.render_as_string(hide_password=True))
    SQLModel.metadata.create_all(target)
    logger.info("Tables created: %s", ", ".join(sorted(SQLModel.metadata.tables)))


if __name__ == "__main__":
    from athletica.core.logging import configure_logging

    configure_logging()
    init_db()
