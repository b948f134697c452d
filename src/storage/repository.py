import aiosqlite
import logging
import os
from typing import Iterable, Set

logger = logging.getLogger(__name__)


class Repository:
    def __init__(self, db_path: str = "data/bot.db"):
        self.db_path = db_path

    async def _get_db(self) -> aiosqlite.Connection:
        """Get database connection, creating the parent directory if needed."""
        directory = os.path.dirname(self.db_path)
        if directory:
            os.makedirs(directory, exist_ok=True)
        return await aiosqlite.connect(self.db_path)

    async def initialize_tables(self):
        """Initialize all required tables if they don't exist."""
        logger.info("Initializing database tables...")

        conn = await self._get_db()
        try:
            await conn.execute("""
                CREATE TABLE IF NOT EXISTS registered_commands (
                    name TEXT PRIMARY KEY,
                    registered_at TEXT NOT NULL DEFAULT CURRENT_TIMESTAMP
                )
            """)
            await conn.commit()
            logger.info("Database tables initialized successfully")
        finally:
            await conn.close()

    async def load_registered(self) -> Set[str]:
        """Names of the commands registered with Discord by earlier passes."""
        conn = await self._get_db()
        try:
            cursor = await conn.execute("SELECT name FROM registered_commands")
            rows = await cursor.fetchall()
            logger.debug(f"Loaded {len(rows)} registered commands")
            return {row[0] for row in rows}
        except Exception as e:
            logger.error(f"Error loading registered commands: {e}")
            raise
        finally:
            await conn.close()

    async def save_registered(self, names: Iterable[str]) -> None:
        """Replace the stored registered command names with `names`."""
        names = sorted(set(names))
        conn = await self._get_db()
        try:
            # Names kept across saves keep their original registered_at
            placeholders = ",".join("?" for _ in names)
            if names:
                await conn.execute(
                    f"DELETE FROM registered_commands WHERE name NOT IN ({placeholders})",
                    names
                )
            else:
                await conn.execute("DELETE FROM registered_commands")
            await conn.executemany(
                "INSERT OR IGNORE INTO registered_commands (name) VALUES (?)",
                [(name,) for name in names]
            )
            await conn.commit()
            logger.debug(f"Saved {len(names)} registered commands")
        except Exception as e:
            await conn.rollback()
            logger.error(f"Error saving registered commands: {e}")
            raise
        finally:
            await conn.close()
