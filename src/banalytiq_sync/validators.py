from __future__ import annotations
from typing import Mapping, Sequence, Any

from banalytiq_sync.errors import ConfigurationError, ConfigurationMissing


def _blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def not_blank(value: Any, name: str = "value") -> str:
    if _blank(value):
        raise ConfigurationMissing(f"{name} is empty")
    if not isinstance(value, str):
        raise ConfigurationError(f"{name} must be a string")
    return value


def integer(value: Any, name: str = "value") -> int:
    if isinstance(value, bool):
        raise ConfigurationError(f"{name} must be an integer")
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ConfigurationError(f"{name} must be an integer, got {value!r}") from None


def boolean(value: Any, name: str = "value") -> bool:
    if not isinstance(value, bool):
        raise ConfigurationError(f"{name} must be true or false")
    return value


def required_keys(obj: Mapping[str, Any], keys: Sequence[str], name: str = "mapping") -> None:
    missing = [k for k in keys if _blank(obj.get(k))]
    if missing:
        raise ConfigurationMissing(f"{name} missing keys: {', '.join(missing)}")
