"""
tests.test_settings

Settings parsing and logging configuration.
"""

from __future__ import annotations

import pytest
import structlog
from pydantic import ValidationError

from privaccess_sdk.observability.context import request_context
from privaccess_sdk.observability.logging import configure_logging, get_logger
from privaccess_sdk.settings import Settings


def test_env_overrides(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("PRIVACCESS_DEPLOY_ENV", "gov-prod")
    monkeypatch.setenv("PRIVACCESS_STATS_MAX_CONCURRENCY", "0")
    s = Settings()
    assert s.root_domain == "cyberarkgov.cloud"
    assert s.fan_out_limit is None


def test_defaults() -> None:
    s = Settings()
    assert s.fan_out_limit == 10
    assert s.strong_accounts_page_limit == 500


def test_page_limit_bounds() -> None:
    with pytest.raises(ValidationError):
        Settings(strong_accounts_page_limit=1001)


def test_request_context_binds_and_resets() -> None:
    configure_logging(service_name="privaccess-sdk-tests", level="DEBUG", json=False)
    with structlog.testing.capture_logs() as logs:
        with request_context(caller="unit"):
            bound = structlog.contextvars.get_contextvars()
            get_logger(__name__).info("inside")
        assert "caller" not in structlog.contextvars.get_contextvars()

    assert bound["caller"] == "unit"
    assert "request_id" in bound
    assert logs[0]["event"] == "inside"
