"""
PlannerStore -- persistence of settings and the last session state.

Responsibility:
    Reads and writes the two planner records (settings and last session
    state) as JSON documents in the ``stored_records`` table.

Architecture position:
    Services -- owns the only I/O of the planner. Uses the kernel's
    ``session_scope`` for every operation; the engines never see it.

Invariants enforced:
    - Saves overwrite a record wholesale.
    - Loads never fail on bad data: corrupt JSON falls back to defaults
      entirely, malformed fields fall back one by one. Both are logged as
      warnings.
    - Clearing data removes only the planner's own keys.

Failure modes:
    - SQLAlchemy errors (unreachable database, missing table) propagate
      after the session scope has rolled back.

Usage:
    store = PlannerStore(get_session_factory())
    settings = store.load_settings()
    state = store.load_last_state(settings)
"""

from __future__ import annotations

import json
from typing import Any

from sqlalchemy import delete
from sqlalchemy.orm import Session, sessionmaker

from divvy_kernel.db.engine import session_scope
from divvy_kernel.domain.values import DEFAULT_SETTINGS, TaxSettings
from divvy_kernel.logging_config import get_logger
from divvy_kernel.models.stored_record import StoredRecord
from divvy_services.session_state import SessionState, default_session_state
from divvy_services.state_codec import (
    decode_session_state,
    decode_settings,
    encode_session_state,
    encode_settings,
)

logger = get_logger("services.storage")

SETTINGS_KEY = "divvyplan_settings"
STATE_KEY = "divvyplan_state"

_MISSING = object()


class PlannerStore:
    """
    Key/value store for the planner's settings and last session.

    Args:
        session_factory: SQLAlchemy session factory bound to an engine whose
            ``stored_records`` table exists (see ``create_tables``).
    """

    def __init__(self, session_factory: sessionmaker[Session]):
        self._session_factory = session_factory

    # ------------------------------------------------------------------
    # Raw records
    # ------------------------------------------------------------------

    def _read(self, key: str) -> Any:
        with session_scope(self._session_factory) as session:
            record = session.get(StoredRecord, key)
            if record is None:
                return _MISSING
            payload = record.payload

        try:
            return json.loads(payload)
        except json.JSONDecodeError:
            logger.warning("stored_record_corrupt", extra={"key": key})
            return None

    def _write(self, key: str, data: dict[str, Any]) -> None:
        payload = json.dumps(data, sort_keys=True)
        with session_scope(self._session_factory) as session:
            record = session.get(StoredRecord, key)
            if record is None:
                session.add(StoredRecord(key=key, payload=payload))
            else:
                record.payload = payload
        logger.debug("stored_record_saved", extra={"key": key})

    # ------------------------------------------------------------------
    # Settings
    # ------------------------------------------------------------------

    def load_settings(self) -> TaxSettings:
        """Stored settings, or the defaults when nothing usable is stored."""
        raw = self._read(SETTINGS_KEY)
        if raw is _MISSING:
            return DEFAULT_SETTINGS

        settings, fallbacks = decode_settings(raw)
        if fallbacks:
            logger.warning("stored_settings_fallback", extra={
                "key": SETTINGS_KEY,
                "fields": fallbacks,
            })
        return settings

    def save_settings(self, settings: TaxSettings) -> None:
        self._write(SETTINGS_KEY, encode_settings(settings))
        logger.info("settings_saved", extra={
            "dividend_preset": settings.dividend_preset.value,
        })

    def reset_settings(self) -> TaxSettings:
        """Overwrite the stored settings with the defaults and return them."""
        self.save_settings(DEFAULT_SETTINGS)
        return DEFAULT_SETTINGS

    # ------------------------------------------------------------------
    # Session state
    # ------------------------------------------------------------------

    def load_last_state(self, settings: TaxSettings) -> SessionState:
        """
        The last saved session, or a fresh one seeded from ``settings``.

        ``settings`` supplies the VAT flag defaults for a missing or
        unusable record.
        """
        raw = self._read(STATE_KEY)
        if raw is _MISSING:
            return default_session_state(settings)

        state, fallbacks = decode_session_state(raw, settings)
        if fallbacks:
            logger.warning("stored_state_fallback", extra={
                "key": STATE_KEY,
                "fields": fallbacks,
            })
        return state

    def save_last_state(self, state: SessionState) -> None:
        self._write(STATE_KEY, encode_session_state(state))

    # ------------------------------------------------------------------
    # Housekeeping
    # ------------------------------------------------------------------

    def clear_all_data(self) -> None:
        """Delete both planner records."""
        with session_scope(self._session_factory) as session:
            session.execute(
                delete(StoredRecord).where(
                    StoredRecord.key.in_((SETTINGS_KEY, STATE_KEY))
                )
            )
        logger.info("planner_data_cleared")
