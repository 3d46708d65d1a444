"""
Group Store — keeps serialized wrapper groups on disk.

Each entry is one named group, stored as JSON next to a few columns that
can be queried without decoding it. Prototype: SQLite.
"""

import json
import logging
import sqlite3
from typing import List, Optional

from scenario_kernel.errors import MalformedPersistedGroup
from scenario_kernel.models.config import MappingConfig
from scenario_kernel.registry.methods import MethodRegistry
from scenario_kernel.wrapper.stochastic import StochasticWrapper

logger = logging.getLogger(__name__)


class GroupStore:
    """Named, persisted groups."""

    def __init__(self, db_path: str = ":memory:"):
        self.db_path = db_path
        self._conn = sqlite3.connect(db_path, check_same_thread=False)
        self._conn.row_factory = sqlite3.Row
        self._init_schema()

    def _init_schema(self) -> None:
        """Create the groups table if it doesn't exist."""
        self._conn.execute("""
            CREATE TABLE IF NOT EXISTS groups (
                name TEXT PRIMARY KEY,
                type TEXT NOT NULL,
                number_data_mappings INTEGER NOT NULL DEFAULT 0,
                group_json TEXT NOT NULL,
                saved_at TEXT NOT NULL DEFAULT (datetime('now'))
            )
        """)
        self._conn.execute("""
            CREATE INDEX IF NOT EXISTS idx_groups_type ON groups(type)
        """)
        self._conn.commit()

    def save(self, name: str, group: dict) -> None:
        """Insert or overwrite the group stored under `name`."""
        if "type" not in group:
            raise MalformedPersistedGroup(f"Group {name!r} has no 'type'.")
        self._conn.execute(
            """
            INSERT OR REPLACE INTO groups (name, type, number_data_mappings, group_json)
            VALUES (?, ?, ?, ?)
            """,
            (
                name,
                group["type"],
                int(group.get("NumberDataMappings", 0)),
                json.dumps(group, sort_keys=True),
            ),
        )
        self._conn.commit()
        logger.info("Saved group %r (%s)", name, group["type"])

    def load(self, name: str) -> Optional[dict]:
        row = self._conn.execute(
            "SELECT group_json FROM groups WHERE name = ?", (name,)
        ).fetchone()
        return json.loads(row["group_json"]) if row else None

    def save_wrapper(self, name: str, wrapper: StochasticWrapper) -> None:
        self.save(name, wrapper.serialize())

    def load_wrapper(
        self,
        name: str,
        registry: Optional[MethodRegistry] = None,
        config: Optional[MappingConfig] = None,
    ) -> Optional[StochasticWrapper]:
        """Rebuild the wrapper stored under `name`, or None if there is none."""
        group = self.load(name)
        if group is None:
            return None
        return StochasticWrapper.deserialize(group, registry=registry, config=config)

    def names(self, type_name: Optional[str] = None) -> List[str]:
        if type_name:
            rows = self._conn.execute(
                "SELECT name FROM groups WHERE type = ? ORDER BY name", (type_name,)
            ).fetchall()
        else:
            rows = self._conn.execute("SELECT name FROM groups ORDER BY name").fetchall()
        return [r["name"] for r in rows]

    def delete(self, name: str) -> bool:
        cursor = self._conn.execute("DELETE FROM groups WHERE name = ?", (name,))
        self._conn.commit()
        return cursor.rowcount > 0

    def count(self) -> int:
        row = self._conn.execute("SELECT COUNT(*) as cnt FROM groups").fetchone()
        return row["cnt"]

    def close(self) -> None:
        """Close the database connection."""
        self._conn.close()
