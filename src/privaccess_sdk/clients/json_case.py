"""
privaccess_sdk.clients.json_case

Key-case conversion between platform payloads (camelCase) and SDK models (snake_case).

Responsibilities:
- Recursively rewrite mapping keys in decoded JSON values.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

from pydantic.alias_generators import to_camel, to_snake


def _convert(value: Any, fn: Callable[[str], str]) -> Any:
    if isinstance(value, dict):
        return {fn(k) if isinstance(k, str) else k: _convert(v, fn) for k, v in value.items()}
    if isinstance(value, list):
        return [_convert(v, fn) for v in value]
    return value


def snake_keys(value: Any) -> Any:
    return _convert(value, to_snake)


def camel_keys(value: Any) -> Any:
    return _convert(value, to_camel)


# --- Module Notes -----------------------------------------------------------
# Some endpoints use exact keys that camel conversion cannot produce (for example
# `managingCPM`); services patch those after conversion.
