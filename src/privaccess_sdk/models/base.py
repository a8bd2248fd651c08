"""
privaccess_sdk.models.base

Shared pydantic configuration for platform models.

Responsibilities:
- Ignore unknown response fields so new platform attributes never break decoding.
- Serialize request models into the platform's wire casing.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any

from pydantic import BaseModel, ConfigDict

from privaccess_sdk.clients.json_case import camel_keys


class PlatformModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class RequestModel(BaseModel):
    model_config = ConfigDict(extra="forbid")

    def body(self, *, exclude: Iterable[str] = (), camel: bool = True) -> dict[str, Any]:
        # Unset optional fields are omitted from the wire payload.
        data = self.model_dump(mode="json", exclude_none=True, exclude=set(exclude))
        return camel_keys(data) if camel else data
