"""SQLite storage for allocation plans and settings."""

from __future__ import annotations

import sqlite3
from collections.abc import Iterator
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path

from loguru import logger

from folio.core.exceptions import PersistenceError
from folio.core.models import AssetClass
from folio.portfolio.plan import AllocationPlan, PlanDistribution, PlanTargetType

# Default database path
DEFAULT_DB_PATH = Path.home() / ".folio" / "folio.db"

ENABLED_CLASSES_KEY = "enabled_asset_classes"


class SQLitePlanStore:
    """SQLite-based storage for plans and the enabled asset classes."""

    def __init__(self, db_path: Path | str | None = None) -> None:
        """Initialize the plan store.

        Args:
            db_path: Path to SQLite database. Defaults to ~/.folio/folio.db
        """
        self.db_path = Path(db_path) if db_path else DEFAULT_DB_PATH
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self._init_db()

    @contextmanager
    def _get_connection(self) -> Iterator[sqlite3.Connection]:
        """Get a database connection with row factory."""
        conn = sqlite3.connect(self.db_path)
        conn.row_factory = sqlite3.Row
        try:
            yield conn
        finally:
            conn.close()

    def _init_db(self) -> None:
        """Initialize database schema."""
        with self._get_connection() as conn:
            cursor = conn.cursor()

            cursor.execute("""
                CREATE TABLE IF NOT EXISTS plans (
                    id TEXT PRIMARY KEY,
                    position INTEGER NOT NULL,
                    name TEXT NOT NULL,
                    target_type TEXT NOT NULL,
                    created_at TEXT NOT NULL,
                    modified_at TEXT NOT NULL
                )
            """)

            cursor.execute("""
                CREATE TABLE IF NOT EXISTS plan_distributions (
                    plan_id TEXT NOT NULL,
                    position INTEGER NOT NULL,
                    key TEXT NOT NULL,
                    percentage REAL NOT NULL,
                    PRIMARY KEY (plan_id, key),
                    FOREIGN KEY (plan_id) REFERENCES plans(id)
                )
            """)

            cursor.execute("""
                CREATE TABLE IF NOT EXISTS settings (
                    key TEXT PRIMARY KEY,
                    value TEXT NOT NULL
                )
            """)

            conn.commit()
            logger.debug(f"Database initialized at {self.db_path}")

    def load_plans(self) -> list[AllocationPlan]:
        """Load all plans in their saved order."""
        with self._get_connection() as conn:
            cursor = conn.cursor()

            cursor.execute(
                "SELECT plan_id, key, percentage FROM plan_distributions "
                "ORDER BY plan_id, position"
            )
            distributions: dict[str, list[PlanDistribution]] = {}
            for row in cursor.fetchall():
                distributions.setdefault(row["plan_id"], []).append(
                    PlanDistribution(key=row["key"], percentage=row["percentage"])
                )

            cursor.execute("SELECT * FROM plans ORDER BY position")
            plans = [
                AllocationPlan(
                    id=row["id"],
                    name=row["name"],
                    target_type=PlanTargetType(row["target_type"]),
                    distributions=tuple(distributions.get(row["id"], [])),
                    created_at=datetime.fromisoformat(row["created_at"]),
                    modified_at=datetime.fromisoformat(row["modified_at"]),
                )
                for row in cursor.fetchall()
            ]

        return plans

    def save_plans(self, plans: list[AllocationPlan]) -> None:
        """Replace all stored plans with the given list.

        Raises:
            PersistenceError: If the database write fails
        """
        try:
            with self._get_connection() as conn:
                cursor = conn.cursor()
                cursor.execute("DELETE FROM plan_distributions")
                cursor.execute("DELETE FROM plans")

                for position, plan in enumerate(plans):
                    cursor.execute(
                        """
                        INSERT INTO plans (
                            id, position, name, target_type, created_at, modified_at
                        ) VALUES (?, ?, ?, ?, ?, ?)
                    """,
                        (
                            plan.id,
                            position,
                            plan.name,
                            plan.target_type.value,
                            plan.created_at.isoformat(),
                            plan.modified_at.isoformat(),
                        ),
                    )
                    cursor.executemany(
                        """
                        INSERT INTO plan_distributions (
                            plan_id, position, key, percentage
                        )
                        VALUES (?, ?, ?, ?)
                    """,
                        [
                            (plan.id, i, d.key, float(d.percentage))
                            for i, d in enumerate(plan.distributions)
                        ],
                    )

                conn.commit()
        except sqlite3.Error as e:
            raise PersistenceError(f"Failed to save plans: {e}") from e

        logger.debug(f"Saved {len(plans)} plans to {self.db_path}")

    def load_enabled_classes(self) -> list[AssetClass]:
        """Load enabled asset classes. Empty if never saved."""
        with self._get_connection() as conn:
            cursor = conn.cursor()
            cursor.execute(
                "SELECT value FROM settings WHERE key = ?", (ENABLED_CLASSES_KEY,)
            )
            row = cursor.fetchone()

        if row is None or not row["value"]:
            return []

        enabled = []
        for label in row["value"].split(","):
            try:
                enabled.append(AssetClass(label))
            except ValueError:
                logger.warning(f"Ignoring unknown asset class in settings: {label}")
        return enabled

    def save_enabled_classes(self, classes: list[AssetClass]) -> None:
        """Save enabled asset classes.

        Raises:
            PersistenceError: If the database write fails
        """
        value = ",".join(a.value for a in classes)
        try:
            with self._get_connection() as conn:
                conn.execute(
                    "INSERT OR REPLACE INTO settings (key, value) VALUES (?, ?)",
                    (ENABLED_CLASSES_KEY, value),
                )
                conn.commit()
        except sqlite3.Error as e:
            raise PersistenceError(f"Failed to save settings: {e}") from e


# Global store instance
_store: SQLitePlanStore | None = None


def get_plan_store(db_path: Path | str | None = None) -> SQLitePlanStore:
    """Get the global plan store instance.

    Args:
        db_path: Optional custom database path. A different path than the
            current store's replaces the global instance.

    Returns:
        SQLitePlanStore instance
    """
    global _store
    if _store is None or (db_path is not None and Path(db_path) != _store.db_path):
        _store = SQLitePlanStore(db_path)
    return _store
