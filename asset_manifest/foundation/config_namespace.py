"""Strict, consumed-keys configuration namespace helper."""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from typing import Any

from asset_manifest.errors import ConfigurationError

_MISSING = object()

SIDES: tuple[str, ...] = ("input", "output")


def _join_path(parent: str, key: str) -> str:
    if not parent:
        return key
    return f"{parent}.{key}"


@dataclass
class ConfigNamespace:
    """Small helper for option parsing with consumed-keys enforcement."""

    data: Mapping[str, Any]
    path: str
    _consumed: set[str] = field(default_factory=set, init=False, repr=False)

    def consumed_keys(self) -> tuple[str, ...]:
        return tuple(sorted(self._consumed))

    def unconsumed_keys(self) -> tuple[str, ...]:
        return tuple(sorted(k for k in self.data.keys() if k not in self._consumed))

    def assert_consumed(self) -> None:
        unknown = list(self.unconsumed_keys())
        if unknown:
            path = self.path or "<root>"
            consumed = ", ".join(self.consumed_keys()) or "<none>"
            raise ConfigurationError(
                f"Unknown config keys under {path}: {', '.join(unknown)} (consumed: {consumed})"
            )

    def _key_path(self, key: str) -> str:
        return _join_path(self.path, key.strip())

    def _get_raw(self, key: str, *, default: Any) -> Any:
        if not isinstance(key, str) or not key.strip():
            raise TypeError("ConfigNamespace key must be a non-empty string")
        normalized = key.strip()

        if normalized not in self.data:
            if default is _MISSING:
                raise ConfigurationError(f"Missing required config key: {self._key_path(normalized)}")
            self._consumed.add(normalized)
            return default

        self._consumed.add(normalized)
        return self.data.get(normalized)

    def get_bool(self, key: str, *, default: bool | object = _MISSING) -> bool:
        raw = self._get_raw(key, default=default)
        if not isinstance(raw, bool):
            raise ConfigurationError(
                f"{self._key_path(key)} must be a boolean (type={type(raw).__name__})"
            )
        return raw

    def get_side(self, key: str, *, default: bool | str = False) -> bool | str:
        """Parse an option that is a boolean or names one side.

        Accepts True/False or one of "input"/"output". `None` behaves like
        the option was not set.
        """

        raw = self._get_raw(key, default=default)
        if raw is None:
            raw = default
        if isinstance(raw, bool):
            return raw
        if isinstance(raw, str) and raw.strip() in SIDES:
            return raw.strip()
        raise ConfigurationError(
            f"{self._key_path(key)} must be a boolean or one of: {', '.join(SIDES)} (got {raw!r})"
        )

    def get_float(
        self,
        key: str,
        *,
        default: float | object = _MISSING,
        min_value: float | None = None,
    ) -> float:
        raw = self._get_raw(key, default=default)
        if isinstance(raw, bool) or not isinstance(raw, (int, float)):
            raise ConfigurationError(
                f"{self._key_path(key)} must be a float (type={type(raw).__name__})"
            )
        value = float(raw)
        if min_value is not None and value <= float(min_value):
            raise ConfigurationError(
                f"{self._key_path(key)} must be > {float(min_value)} (got {value})"
            )
        return value

    def get_str(self, key: str, *, default: str | object = _MISSING) -> str:
        raw = self._get_raw(key, default=default)
        if not isinstance(raw, str):
            raise ConfigurationError(
                f"{self._key_path(key)} must be a string (type={type(raw).__name__})"
            )
        value = raw.strip()
        if not value:
            raise ConfigurationError(f"{self._key_path(key)} cannot be empty")
        return value

    def get_callable(self, key: str) -> Callable[..., Any] | None:
        raw = self._get_raw(key, default=None)
        if raw is None:
            return None
        if not callable(raw):
            raise ConfigurationError(
                f"{self._key_path(key)} must be callable (type={type(raw).__name__})"
            )
        return raw
