"""
StoredRecord -- one named JSON document in the planner store.

The store keeps exactly two records (settings and last session state), each
overwritten wholesale on save. The payload is a JSON text document; its
shape is owned by divvy_services.state_codec, not by this model.
"""

from datetime import datetime

from sqlalchemy import String, Text, func
from sqlalchemy.orm import Mapped, mapped_column

from divvy_kernel.db.base import Base


class StoredRecord(Base):
    """Key/value row holding a serialized record."""

    __tablename__ = "stored_records"

    key: Mapped[str] = mapped_column(String(64), primary_key=True)
    payload: Mapped[str] = mapped_column(Text, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )

    def __repr__(self) -> str:
        return f"StoredRecord({self.key!r})"
