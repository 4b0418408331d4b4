import logging

from sqlalchemy import inspect
from sqlmodel import SQLModel, create_engine

# Registers the cache table on SQLModel.metadata
from mdblog.crud.models import CachedPost


logger = logging.getLogger(__name__)


def make_engine(db_url: str):
    return create_engine(db_url, echo=False, future=True)


def init_db(engine) -> None:
    """Create the cache table; a table left by an older schema is dropped first, losing only cached renders."""
    table = CachedPost.__table__
    inspector = inspect(engine)
    if inspector.has_table(table.name):
        existing = {column["name"] for column in inspector.get_columns(table.name)}
        if existing != set(table.columns.keys()):
            logger.info("Cache schema changed, recreating %s", table.name)
            table.drop(engine)
    SQLModel.metadata.create_all(engine)


def reset_db(engine) -> None:
    SQLModel.metadata.drop_all(engine)
    SQLModel.metadata.create_all(engine)
