"""
divvy_config -- public entrypoint for tax settings configuration.

Responsibility:
    Provides ``get_active_settings()``, which resolves the settings a run
    should use: an explicit YAML file, a named set shipped in
    ``divvy_config/sets/``, or ``DEFAULT_SETTINGS``. Sets only list the keys
    they change; the defaults live in ``divvy_kernel.domain.values`` alone.

Architecture position:
    Configuration -- YAML-driven, sits above ``divvy_kernel`` and below
    ``divvy_services`` / ``divvy_cli``. The kernel and engines MUST NEVER
    import from ``divvy_config``.

Failure modes:
    - ``FileNotFoundError`` -- unknown set name or missing file.
    - ``SettingsConfigError`` -- invalid content.

Audit relevance:
    Every resolution emits a ``DIVVY_CONFIG_TRACE`` log entry with the
    source and the settings checksum.
"""

from __future__ import annotations

from pathlib import Path

from divvy_config.loader import (
    compute_checksum,
    load_settings_file,
    load_yaml_file,
    parse_settings,
    settings_to_dict,
)
from divvy_kernel.domain.values import DEFAULT_SETTINGS, TaxSettings
from divvy_kernel.logging_config import get_logger

_logger = get_logger("config")

_DEFAULT_SETS_DIR = Path(__file__).parent / "sets"


def available_sets(sets_dir: Path | None = None) -> list[str]:
    """Names of the settings sets shipped in ``sets_dir``."""
    return sorted(p.stem for p in (sets_dir or _DEFAULT_SETS_DIR).glob("*.yaml"))


def get_active_settings(
    path: Path | None = None,
    set_name: str | None = None,
    sets_dir: Path | None = None,
) -> TaxSettings:
    """
    Resolve the settings for a run.

    Precedence: ``path`` if given, else the named set, else
    ``DEFAULT_SETTINGS``. Files are overlaid on the defaults, so a file
    only needs the keys it changes.
    """
    if path is not None:
        source = str(path)
        settings = load_settings_file(path)
    elif set_name is not None:
        set_path = (sets_dir or _DEFAULT_SETS_DIR) / f"{set_name}.yaml"
        if not set_path.exists():
            raise FileNotFoundError(
                f"Unknown settings set {set_name!r}; available: {available_sets(sets_dir)}"
            )
        source = str(set_path)
        settings = load_settings_file(set_path)
    else:
        source = "defaults"
        settings = DEFAULT_SETTINGS

    _logger.info(
        "DIVVY_CONFIG_TRACE",
        extra={
            "trace_type": "DIVVY_CONFIG_TRACE",
            "source": source,
            "checksum": compute_checksum(settings),
            "dividend_preset": settings.dividend_preset.value,
        },
    )
    return settings


__all__ = [
    "available_sets",
    "compute_checksum",
    "get_active_settings",
    "load_settings_file",
    "load_yaml_file",
    "parse_settings",
    "settings_to_dict",
]
