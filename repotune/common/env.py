"""Environment variable parsing shared by the configuration dataclasses."""

from __future__ import annotations

import os


class ConfigError(ValueError):
    """Raised when an environment override holds an unusable value."""

    @classmethod
    def not_an_integer(cls, env_var: str, raw: str) -> ConfigError:
        """Return an error for a value that does not parse as an integer."""
        return cls(f"{env_var} must be an integer, got: {raw!r}")

    @classmethod
    def not_a_number(cls, env_var: str, raw: str) -> ConfigError:
        """Return an error for a value that does not parse as a float."""
        return cls(f"{env_var} must be a number, got: {raw!r}")

    @classmethod
    def below_minimum(
        cls, env_var: str, value: float, minimum: float
    ) -> ConfigError:
        """Return an error for a value below the accepted minimum."""
        return cls(f"{env_var} must be >= {minimum}, got: {value}")


def _raw(env_var: str) -> str | None:
    raw = os.environ.get(env_var, "")
    return raw.strip() or None


def parse_int(env_var: str, default: int, *, minimum: int = 1) -> int:
    """Read an integer env var, falling back to ``default`` when unset.

    Raises
    ------
    ConfigError
        If the value is not an integer or is below ``minimum``.

    """
    raw = _raw(env_var)
    if raw is None:
        return default
    try:
        value = int(raw)
    except ValueError as exc:
        raise ConfigError.not_an_integer(env_var, raw) from exc
    if value < minimum:
        raise ConfigError.below_minimum(env_var, value, minimum)
    return value


def parse_float(env_var: str, default: float, *, minimum: float = 0.0) -> float:
    """Read a float env var, falling back to ``default`` when unset.

    Raises
    ------
    ConfigError
        If the value is not a number or is below ``minimum``.

    """
    raw = _raw(env_var)
    if raw is None:
        return default
    try:
        value = float(raw)
    except ValueError as exc:
        raise ConfigError.not_a_number(env_var, raw) from exc
    if value < minimum:
        raise ConfigError.below_minimum(env_var, value, minimum)
    return value


def parse_str(env_var: str, default: str | None = None) -> str | None:
    """Read a string env var, treating blank values as unset."""
    raw = _raw(env_var)
    return default if raw is None else raw
