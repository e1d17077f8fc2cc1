"""
Module: divvy_kernel.db.base
Responsibility: Declarative base for the SQLAlchemy ORM models that back the
    settings and session-state store.
Architecture position: Kernel > DB.  Lowest-level import target for models.
    MUST NOT import from models/, domain/, or outer layers.

Invariants enforced:
    - datetime maps to DateTime(timezone=True) -- always timezone-aware.
    - Monetary values are never stored as float columns; records hold
      Decimals serialised as strings inside their JSON payload.
"""

from datetime import datetime
from typing import ClassVar

from sqlalchemy import DateTime
from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    """Declarative base for all DivvyPlan models."""

    type_annotation_map: ClassVar[dict] = {
        datetime: DateTime(timezone=True),
    }
