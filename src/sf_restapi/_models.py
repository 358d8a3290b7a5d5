from collections.abc import Mapping
from enum import Enum
from types import SimpleNamespace
from typing import Any


class ReturnType(Enum):
    """How decoded response bodies are handed back to the caller"""

    DICT = "dict"
    OBJECT = "object"


def as_namespace(value: Any) -> Any:
    if isinstance(value, Mapping):
        return SimpleNamespace(**{k: as_namespace(v) for k, v in value.items()})
    if isinstance(value, list):
        return [as_namespace(item) for item in value]
    return value


def as_mapping(payload: Any) -> dict[str, Any]:
    """Top-level fields of a decoded payload, whichever return type decoded it"""
    if isinstance(payload, Mapping):
        return dict(payload)
    if isinstance(payload, SimpleNamespace):
        return dict(vars(payload))
    raise TypeError(f"Expected a JSON object, got {type(payload).__name__}")


def payload_field(payload: Any, name: str, default: Any = None) -> Any:
    if isinstance(payload, Mapping):
        return payload.get(name, default)
    return getattr(payload, name, default)
