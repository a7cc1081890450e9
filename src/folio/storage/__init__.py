"""Storage module for persisting plans and settings."""

from folio.storage.database import SQLitePlanStore, get_plan_store

__all__ = ["SQLitePlanStore", "get_plan_store"]
