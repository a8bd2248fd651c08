"""
privaccess_sdk.services.sia.base

Common host layout and client-side filter helpers for secure infrastructure access services.
"""

from __future__ import annotations

import re

from privaccess_sdk.errors import InvalidRequestError
from privaccess_sdk.services.base import BaseService


def compile_pattern(pattern: str, *, field: str) -> re.Pattern[str]:
    try:
        return re.compile(pattern)
    except re.error as e:
        raise InvalidRequestError(f"invalid {field} pattern {pattern!r}: {e}") from e


class SiaService(BaseService):
    # https://<tenant>-dpa.<root-domain>
    URL_SERVICE = "dpa"
    URL_SEPARATOR = "-"
