"""
Settings Loader (``divvy_config.loader``).

Responsibility
--------------
Loads YAML settings files and parses them into ``TaxSettings`` value
objects, overlaying each file on a base (the hard-coded defaults unless a
caller passes another).

Architecture position
---------------------
**Config layer** -- sits above ``divvy_kernel`` and below
``divvy_services`` / ``divvy_cli``. The kernel and engines never import it.

Invariants enforced
-------------------
* Strict parsing: unknown keys and out-of-range values raise
  ``SettingsConfigError``; nothing is silently clamped or dropped.
* Keys omitted from a file keep the base value, including individual
  tiers inside ``preset_rates``.
* ``compute_checksum`` gives a deterministic SHA-256 of the parsed
  settings for change detection.

Failure modes
-------------
* Missing YAML file  -> ``FileNotFoundError`` propagates.
* Malformed YAML  -> ``yaml.YAMLError`` propagates.
* Invalid content  -> ``SettingsConfigError``.
"""

from __future__ import annotations

import hashlib
import json
from dataclasses import fields, replace
from pathlib import Path
from typing import Any

import yaml

from divvy_kernel.domain.values import (
    DEFAULT_SETTINGS,
    DividendRatePreset,
    PresetRates,
    TaxSettings,
)
from divvy_kernel.exceptions import SettingsConfigError, ValidationError

_SETTINGS_KEYS = frozenset(f.name for f in fields(TaxSettings))
_TIER_KEYS = frozenset(f.name for f in fields(PresetRates))
_BOOL_KEYS = frozenset({"default_includes_vat", "default_vat_registered"})


def load_yaml_file(path: Path) -> dict[str, Any]:
    """
    Load a single YAML file and return its contents as a dict.

    Postconditions:
        - Returns a ``dict`` (empty if the YAML document is empty).
    Raises:
        FileNotFoundError: if the file does not exist.
        yaml.YAMLError: if the file contains invalid YAML.
        SettingsConfigError: if the document is not a mapping.
    """
    with open(path, encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise SettingsConfigError(str(path), "<root>", "expected a mapping")
    return data


def _parse_preset_rates(
    raw: Any,
    base: TaxSettings,
    source: str,
) -> dict[DividendRatePreset, PresetRates]:
    if not isinstance(raw, dict):
        raise SettingsConfigError(source, "preset_rates", "expected a mapping")

    tables = dict(base.preset_rates)
    for preset_name, tiers in raw.items():
        try:
            preset = DividendRatePreset(preset_name)
        except ValueError as e:
            raise SettingsConfigError(
                source, f"preset_rates.{preset_name}", "unknown preset"
            ) from e
        if not isinstance(tiers, dict):
            raise SettingsConfigError(
                source, f"preset_rates.{preset_name}", "expected a mapping"
            )
        unknown = set(tiers) - _TIER_KEYS
        if unknown:
            raise SettingsConfigError(
                source,
                f"preset_rates.{preset_name}",
                f"unknown tiers {sorted(map(str, unknown))}",
            )
        try:
            tables[preset] = replace(tables[preset], **tiers)
        except ValidationError as e:
            raise SettingsConfigError(
                source, f"preset_rates.{preset_name}.{e.field}", str(e)
            ) from e
    return tables


def parse_settings(
    data: dict[str, Any],
    base: TaxSettings = DEFAULT_SETTINGS,
    source: str = "<settings>",
) -> TaxSettings:
    """
    Overlay a settings mapping on ``base``.

    Raises:
        SettingsConfigError: on unknown keys, non-boolean flags or values
            rejected by ``TaxSettings`` validation.
    """
    unknown = set(data) - _SETTINGS_KEYS
    if unknown:
        raise SettingsConfigError(
            source, ", ".join(sorted(map(str, unknown))), "unknown setting"
        )

    changes: dict[str, Any] = {}
    for key, value in data.items():
        if key == "preset_rates":
            changes[key] = _parse_preset_rates(value, base, source)
        elif key in _BOOL_KEYS:
            if not isinstance(value, bool):
                raise SettingsConfigError(source, key, "expected true or false")
            changes[key] = value
        else:
            changes[key] = value

    try:
        return replace(base, **changes)
    except ValidationError as e:
        raise SettingsConfigError(source, e.field, str(e)) from e


def load_settings_file(path: Path, base: TaxSettings = DEFAULT_SETTINGS) -> TaxSettings:
    """Load a YAML settings file overlaid on ``base``."""
    return parse_settings(load_yaml_file(path), base=base, source=str(path))


def settings_to_dict(settings: TaxSettings) -> dict[str, Any]:
    """Plain-data form of settings; Decimals become strings."""
    return {
        "vat_rate": str(settings.vat_rate),
        "corp_tax_rate": str(settings.corp_tax_rate),
        "dividend_preset": settings.dividend_preset.value,
        "preset_rates": {
            preset.value: {
                "basic": str(rates.basic),
                "higher": str(rates.higher),
                "additional": str(rates.additional),
            }
            for preset, rates in sorted(
                settings.preset_rates.items(), key=lambda item: item[0].value
            )
        },
        "custom_dividend_rate": str(settings.custom_dividend_rate),
        "default_includes_vat": settings.default_includes_vat,
        "default_vat_registered": settings.default_vat_registered,
    }


def compute_checksum(settings: TaxSettings) -> str:
    """Deterministic SHA-256 of the settings content."""
    canonical = json.dumps(settings_to_dict(settings), sort_keys=True)
    return hashlib.sha256(canonical.encode("utf-8")).hexdigest()
