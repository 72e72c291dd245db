"""
Schema bootstrap.

Tables are created with ``metadata.create_all``; columns that were added after
the first release are brought in with additive ``ALTER TABLE`` statements,
only when the column inspector reports them missing.
"""

import logging

from sqlalchemy import inspect, text
from sqlalchemy.engine import Connection
from sqlalchemy.ext.asyncio import AsyncEngine

from planner.db.session import Base

# Registers every mapped table on Base.metadata.
from planner.models import (  # noqa: F401
    user,
    group,
    group_member,
    subgroup,
    task,
    task_assignment,
    task_comment,
    notification,
    group_invitation,
)

logger = logging.getLogger(__name__)

# (table, column, DDL declaration)
ADDITIVE_COLUMNS = [
    ("tasks", "subgroup_id", "INTEGER DEFAULT NULL REFERENCES subgroups(id) ON DELETE SET NULL"),
    ("groups", "members_can_create_tasks", "BOOLEAN NOT NULL DEFAULT FALSE"),
    ("groups", "is_archived", "BOOLEAN NOT NULL DEFAULT FALSE"),
    ("subgroups", "is_archived", "BOOLEAN NOT NULL DEFAULT FALSE"),
]


def apply_additive_migrations(conn: Connection) -> list[str]:
    """Add missing optional columns. Returns ``table.column`` for each one added."""
    inspector = inspect(conn)
    added = []

    for table, column, decl in ADDITIVE_COLUMNS:
        cols = {c["name"] for c in inspector.get_columns(table)}
        if column in cols:
            continue
        conn.execute(text(f"ALTER TABLE {table} ADD COLUMN {column} {decl}"))
        logger.info("Schema migration: added column %s.%s", table, column)
        added.append(f"{table}.{column}")

    return added


def _create_and_migrate(conn: Connection) -> None:
    Base.metadata.create_all(conn)
    apply_additive_migrations(conn)


async def init_schema(engine: AsyncEngine) -> None:
    async with engine.begin() as conn:
        await conn.run_sync(_create_and_migrate)
    logger.info("Schema ready url=%s", engine.url)
