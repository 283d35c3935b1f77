"""SQLite task store used by the host application.

Tasks are kept one row per task, holding the JSON-serialised model and keyed
by ``(scope_key, id)``. A scope is whatever the host groups a board under
(a team, a room, a project). The core services never call this module;
``task_service`` loads a scope, applies a core operation and saves it back.
Concurrent writers are last-write-wins.
"""

import asyncio
import logging
import threading
from pathlib import Path

import aiosqlite
from pydantic import ValidationError

from src.core.config import settings
from src.domain.task import Task


logger = logging.getLogger(__name__)


class DatabaseError(Exception):
    """Raised when the task store cannot be read or written."""


_SCHEMA = """
CREATE TABLE IF NOT EXISTS tasks (
    scope_key TEXT NOT NULL,
    id TEXT NOT NULL,
    position INTEGER NOT NULL,
    data TEXT NOT NULL,
    updated_at TEXT NOT NULL,
    PRIMARY KEY (scope_key, id)
)
"""


def get_db_path(db_path: str | None = None) -> Path:
    """Get the resolved SQLite database file path."""
    path_str = db_path or settings.sqlite_db_path
    return Path(path_str).resolve()


_db_connections: dict[tuple[int, int, str], aiosqlite.Connection] = {}
_db_lock = asyncio.Lock()


async def get_connection(*, db_path: str | None = None) -> aiosqlite.Connection:
    """Get or create a cached connection for the current thread, loop, and db path."""
    thread_id = threading.get_ident()
    loop = asyncio.get_running_loop()
    loop_id = id(loop)
    path = get_db_path(db_path)
    cache_key = (thread_id, loop_id, str(path))

    if cache_key in _db_connections:
        return _db_connections[cache_key]

    async with _db_lock:
        # Double-check after acquiring lock
        if cache_key in _db_connections:
            return _db_connections[cache_key]

        path.parent.mkdir(parents=True, exist_ok=True)

        conn = await aiosqlite.connect(str(path))
        await conn.execute("PRAGMA journal_mode = WAL")

        _db_connections[cache_key] = conn

        logger.info(
            "Created new SQLite connection",
            extra={"db_path": str(path), "thread_id": thread_id, "loop_id": loop_id},
        )
        return conn


async def close_connection(*, db_path: str | None = None) -> None:
    """Close the cached SQLite connection for the current thread, loop, and db path."""
    thread_id = threading.get_ident()
    loop_id = id(asyncio.get_running_loop())
    path = get_db_path(db_path)
    cache_key = (thread_id, loop_id, str(path))

    async with _db_lock:
        conn = _db_connections.pop(cache_key, None)
    if conn is None:
        return

    try:
        await conn.close()
        logger.info("Closed SQLite connection", extra={"db_path": str(path)})
    except aiosqlite.Error as e:
        logger.warning("Error closing SQLite connection", extra={"error": str(e), "db_path": str(path)})


async def init_db(*, db_path: str | None = None) -> None:
    """Create the tasks table if it does not exist."""
    conn = await get_connection(db_path=db_path)
    await conn.execute(_SCHEMA)
    await conn.commit()
    logger.info("Task store initialized", extra={"db_path": str(get_db_path(db_path))})


async def load_tasks(scope_key: str, *, db_path: str | None = None) -> list[Task]:
    """Load every task of a scope in board order.

    Raises:
        DatabaseError: If the store cannot be read or a row is not a valid task
    """
    try:
        conn = await get_connection(db_path=db_path)
        cursor = await conn.execute(
            "SELECT data FROM tasks WHERE scope_key = ? ORDER BY position",
            (scope_key,),
        )
        rows = await cursor.fetchall()
        return [Task.model_validate_json(row[0]) for row in rows]
    except (aiosqlite.Error, ValidationError) as e:
        logger.error("load_tasks_failed", extra={"scope_key": scope_key, "error": str(e)})
        msg = f"Failed to load tasks for scope {scope_key}: {e}"
        raise DatabaseError(msg) from e


async def save_tasks(scope_key: str, tasks: list[Task], *, db_path: str | None = None) -> None:
    """Replace the stored tasks of a scope in a single transaction.

    Raises:
        DatabaseError: If the store cannot be written
    """
    conn = await get_connection(db_path=db_path)
    try:
        await conn.execute("DELETE FROM tasks WHERE scope_key = ?", (scope_key,))
        await conn.executemany(
            "INSERT INTO tasks (scope_key, id, position, data, updated_at) VALUES (?, ?, ?, ?, ?)",
            [
                (scope_key, task.id, position, task.model_dump_json(), task.updated_at.isoformat())
                for position, task in enumerate(tasks)
            ],
        )
        await conn.commit()
        logger.info("Saved tasks", extra={"scope_key": scope_key, "count": len(tasks)})
    except aiosqlite.Error as e:
        await conn.rollback()
        logger.error("save_tasks_failed", extra={"scope_key": scope_key, "error": str(e)})
        msg = f"Failed to save tasks for scope {scope_key}: {e}"
        raise DatabaseError(msg) from e
