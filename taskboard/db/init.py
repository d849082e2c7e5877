"""Initialize database tables."""
from typing import Optional

from sqlalchemy.engine import Engine
from sqlmodel import SQLModel

# Imported for their side effect of registering tables on SQLModel.metadata
from taskboard.models.board import Board, BoardColumn, BoardMember, Label  # noqa: F401
from taskboard.models.task import Task, TaskLabel  # noqa: F401
from taskboard.db.config import get_engine
from taskboard.utils.logger import get_logger

logger = get_logger("taskboard-db")


def init_db(engine: Optional[Engine] = None):
    """Create all tables in the database."""
    engine = engine or get_engine()
    logger.info("Creating all tables", url=str(engine.url))
    SQLModel.metadata.create_all(engine)


if __name__ == "__main__":
    init_db()
