"""
Module: divvy_services.state_codec
Responsibility:
    Convert settings and session state to and from the plain JSON records
    kept by the planner store, validating stored data field by field.

Architecture position:
    Services -- pure translation helpers used by divvy_services.storage.
    No I/O.

Invariants enforced:
    - Decoding never raises for malformed data: every missing or invalid
      field falls back to its default and is reported by name, so one bad
      field never discards the rest of the record.
    - Rosters decoded from storage hold 1..MAX_DIRECTORS directors with
      unique ids; invalid entries are dropped, duplicates keep the first.
    - Encoding writes Decimals as strings and enums as their values.
"""

from __future__ import annotations

from dataclasses import replace
from decimal import Decimal
from typing import Any

from divvy_config.loader import settings_to_dict
from divvy_engines.redistribution import MAX_DIRECTORS
from divvy_kernel.domain.values import (
    DEFAULT_SETTINGS,
    DealInput,
    Director,
    DividendRatePreset,
    DividendRateTier,
    SplitMethod,
    TaxSettings,
)
from divvy_kernel.exceptions import ValidationError
from divvy_services.session_state import (
    DEFAULT_DIRECTOR,
    SessionState,
    default_session_state,
)

_SCALAR_SETTINGS = (
    "vat_rate",
    "corp_tax_rate",
    "dividend_preset",
    "custom_dividend_rate",
)
_FLAG_SETTINGS = ("default_includes_vat", "default_vat_registered")
_TIERS = ("basic", "higher", "additional")


# ---------------------------------------------------------------------------
# Settings
# ---------------------------------------------------------------------------


def encode_settings(settings: TaxSettings) -> dict[str, Any]:
    return settings_to_dict(settings)


def decode_settings(raw: Any) -> tuple[TaxSettings, list[str]]:
    """
    Rebuild settings from a stored record.

    Returns:
        (settings, names of fields that fell back to their defaults)
    """
    if not isinstance(raw, dict):
        return DEFAULT_SETTINGS, ["<record>"]

    settings = DEFAULT_SETTINGS
    fallbacks: list[str] = []

    for key in _SCALAR_SETTINGS:
        if key not in raw:
            continue
        try:
            settings = replace(settings, **{key: raw[key]})
        except (ValidationError, TypeError):
            fallbacks.append(key)

    for key in _FLAG_SETTINGS:
        if key not in raw:
            continue
        if isinstance(raw[key], bool):
            settings = replace(settings, **{key: raw[key]})
        else:
            fallbacks.append(key)

    stored_presets = raw.get("preset_rates", {})
    if not isinstance(stored_presets, dict):
        fallbacks.append("preset_rates")
        stored_presets = {}

    tables = dict(settings.preset_rates)
    for preset in DividendRatePreset:
        stored = stored_presets.get(preset.value)
        if stored is None:
            continue
        if not isinstance(stored, dict):
            fallbacks.append(f"preset_rates.{preset.value}")
            continue
        for tier in _TIERS:
            if tier not in stored:
                continue
            try:
                tables[preset] = replace(tables[preset], **{tier: stored[tier]})
            except (ValidationError, TypeError):
                fallbacks.append(f"preset_rates.{preset.value}.{tier}")
    settings = replace(settings, preset_rates=tables)

    return settings, fallbacks


# ---------------------------------------------------------------------------
# Session state
# ---------------------------------------------------------------------------


def encode_session_state(state: SessionState) -> dict[str, Any]:
    deal = state.deal_input
    return {
        "deal_input": {
            "deal_amount": str(deal.deal_amount),
            "deal_expenses": str(deal.deal_expenses),
            "includes_vat": deal.includes_vat,
            "vat_registered": deal.vat_registered,
        },
        "directors": [
            {"id": d.id, "name": d.name, "split_percent": str(d.split_percent)}
            for d in state.directors
        ],
        "split_method": state.split_method.value,
        "dividend_rate_tier": state.dividend_rate_tier.value,
        "locked_director_ids": sorted(state.locked_director_ids),
    }


def _decode_deal(
    raw: Any,
    default: DealInput,
    fallbacks: list[str],
) -> DealInput:
    if not isinstance(raw, dict):
        if raw is not None:
            fallbacks.append("deal_input")
        return default

    deal = default
    for key in ("deal_amount", "deal_expenses"):
        if key not in raw:
            continue
        try:
            deal = replace(deal, **{key: raw[key]})
        except ValidationError:
            fallbacks.append(f"deal_input.{key}")
    for key in ("includes_vat", "vat_registered"):
        if key not in raw:
            continue
        if isinstance(raw[key], bool):
            deal = replace(deal, **{key: raw[key]})
        else:
            fallbacks.append(f"deal_input.{key}")
    return deal


def _decode_director(raw: Any) -> Director | None:
    if not isinstance(raw, dict):
        return None
    director_id = raw.get("id")
    name = raw.get("name")
    if not isinstance(director_id, str) or not director_id:
        return None
    if not isinstance(name, str):
        return None
    try:
        return Director(
            id=director_id,
            name=name,
            split_percent=raw.get("split_percent", Decimal("0")),
        )
    except ValidationError:
        return None


def _decode_directors(raw: Any, fallbacks: list[str]) -> tuple[Director, ...]:
    if not isinstance(raw, list):
        if raw is not None:
            fallbacks.append("directors")
        return (DEFAULT_DIRECTOR,)

    directors: list[Director] = []
    seen: set[str] = set()
    for index, item in enumerate(raw):
        director = _decode_director(item)
        if director is None or director.id in seen:
            fallbacks.append(f"directors[{index}]")
            continue
        if len(directors) >= MAX_DIRECTORS:
            fallbacks.append(f"directors[{index}]")
            continue
        seen.add(director.id)
        directors.append(director)

    if not directors:
        fallbacks.append("directors")
        return (DEFAULT_DIRECTOR,)
    return tuple(directors)


def decode_session_state(
    raw: Any,
    settings: TaxSettings,
) -> tuple[SessionState, list[str]]:
    """
    Rebuild session state from a stored record.

    Missing VAT flags default to the settings' defaults, not to the
    hard-coded ones.

    Returns:
        (state, names of fields that fell back to their defaults)
    """
    default = default_session_state(settings)
    if not isinstance(raw, dict):
        return default, ["<record>"]

    fallbacks: list[str] = []
    deal = _decode_deal(raw.get("deal_input"), default.deal_input, fallbacks)
    directors = _decode_directors(raw.get("directors"), fallbacks)

    try:
        split_method = SplitMethod(raw.get("split_method", default.split_method))
    except ValueError:
        fallbacks.append("split_method")
        split_method = default.split_method

    try:
        tier = DividendRateTier(raw.get("dividend_rate_tier", default.dividend_rate_tier))
    except ValueError:
        fallbacks.append("dividend_rate_tier")
        tier = default.dividend_rate_tier

    raw_locked = raw.get("locked_director_ids", [])
    if not isinstance(raw_locked, list):
        fallbacks.append("locked_director_ids")
        raw_locked = []
    present = {d.id for d in directors}
    locked = frozenset(i for i in raw_locked if isinstance(i, str) and i in present)

    return (
        SessionState(
            deal_input=deal,
            directors=directors,
            split_method=split_method,
            dividend_rate_tier=tier,
            locked_director_ids=locked,
        ),
        fallbacks,
    )
