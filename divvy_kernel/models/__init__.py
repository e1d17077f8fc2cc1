"""ORM models for the planner store."""

from divvy_kernel.models.stored_record import StoredRecord

__all__ = ["StoredRecord"]
