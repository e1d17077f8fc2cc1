"""
Typed Exception Hierarchy for the DivvyPlan kernel.

===============================================================================
WHY TYPED EXCEPTIONS
===============================================================================

Callers (the CLI, the settings store, any future form layer) need to tell a
bad rate from a bad amount from a roster limit without parsing messages.
Every error therefore has:
  1. A TYPED exception class (catch by type, not message)
  2. A CODE class attribute (machine-readable, API-safe)
  3. Structured DATA as attributes (field, value, limits)

Example:
    try:
        settings = TaxSettings(vat_rate=Decimal("1.2"), ...)
    except InvalidRateError as e:
        show_field_error(e.field, e.value)

===============================================================================
EXCEPTION HIERARCHY
===============================================================================

    DivvyPlanError (base)
    |
    +-- ValidationError
    |   +-- InvalidAmountError
    |   +-- InvalidRateError
    |   +-- InvalidSplitPercentError
    |
    +-- RosterError
    |   +-- DirectorLimitError
    |   +-- DirectorNotFoundError
    |
    +-- ConfigError
        +-- SettingsConfigError

===============================================================================
ERROR CODES - QUICK REFERENCE
===============================================================================

Category    | Code                     | When Raised
------------|--------------------------|------------------------------------------
Validation  | INVALID_AMOUNT           | Negative or non-numeric money amount
            | INVALID_RATE             | Rate outside [0, 1] or non-numeric
            | INVALID_SPLIT_PERCENT    | Director split outside [0, 1]
------------|--------------------------|------------------------------------------
Roster      | DIRECTOR_LIMIT           | Adding a 7th or removing the last director
            | DIRECTOR_NOT_FOUND       | Director id not in the roster
------------|--------------------------|------------------------------------------
Config      | SETTINGS_CONFIG_INVALID  | Settings file has an invalid value

Value objects raise these at construction and never clamp. The pure engine
functions perform no validation of their own.
"""

from __future__ import annotations

from typing import Any


class DivvyPlanError(Exception):
    """
    Base exception for all DivvyPlan errors.

    All subclasses carry a `code` class attribute for machine-readable
    identification.
    """

    code: str = "DIVVYPLAN_ERROR"


# Validation exceptions


class ValidationError(DivvyPlanError):
    """Base exception for rejected input values."""

    code: str = "VALIDATION_ERROR"

    def __init__(self, field: str, value: Any, message: str):
        self.field = field
        self.value = value
        super().__init__(message)


class InvalidAmountError(ValidationError):
    """Money amount is negative, too large or not a finite number."""

    code: str = "INVALID_AMOUNT"

    def __init__(self, field: str, value: Any):
        super().__init__(
            field, value, f"{field} must be a non-negative amount no greater than "
            f"1,000,000,000,000, got {value!r}"
        )


class InvalidRateError(ValidationError):
    """Rate is outside [0, 1] or not a finite number."""

    code: str = "INVALID_RATE"

    def __init__(self, field: str, value: Any):
        super().__init__(
            field, value, f"{field} must be a rate between 0 and 1, got {value!r}"
        )


class InvalidSplitPercentError(ValidationError):
    """Director split fraction is outside [0, 1]."""

    code: str = "INVALID_SPLIT_PERCENT"

    def __init__(self, director_id: str, value: Any):
        self.director_id = director_id
        super().__init__(
            "split_percent",
            value,
            f"Director {director_id} split must be between 0 and 1, got {value!r}",
        )


# Roster exceptions


class RosterError(DivvyPlanError):
    """Base exception for director roster changes."""

    code: str = "ROSTER_ERROR"


class DirectorLimitError(RosterError):
    """Roster change would leave the allowed director count."""

    code: str = "DIRECTOR_LIMIT"

    def __init__(self, count: int, minimum: int, maximum: int):
        self.count = count
        self.minimum = minimum
        self.maximum = maximum
        super().__init__(
            f"A deal needs between {minimum} and {maximum} directors; "
            f"the change would leave {count}"
        )


class DirectorNotFoundError(RosterError):
    """Director id is not part of the roster."""

    code: str = "DIRECTOR_NOT_FOUND"

    def __init__(self, director_id: str):
        self.director_id = director_id
        super().__init__(f"Director not found: {director_id}")


# Config exceptions


class ConfigError(DivvyPlanError):
    """Base exception for configuration errors."""

    code: str = "CONFIG_ERROR"


class SettingsConfigError(ConfigError):
    """A settings file contains a value that cannot be used."""

    code: str = "SETTINGS_CONFIG_INVALID"

    def __init__(self, source: str, key: str, reason: str):
        self.source = source
        self.key = key
        self.reason = reason
        super().__init__(f"Invalid setting {key!r} in {source}: {reason}")
