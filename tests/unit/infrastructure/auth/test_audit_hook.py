"""Unit tests for the logging audit hook."""

import logging

import pytest
from starlette.requests import Request

from kilroy.domain.auth.model.identity import Identity
from kilroy.infrastructure.auth.audit import LoggingAuditHook

KILROY = Identity(idtag="100007663687854", username="JS Kilroy")


def _request() -> Request:
    return Request({"type": "http", "method": "PUT", "path": "/thing/1.json", "headers": []})


class TestLoggingAuditHook:
    def test_acting_names_user_for_access_log(self):
        request = _request()

        LoggingAuditHook().acting(request, KILROY)

        assert request.state.user == "100007663687854"
        assert request.scope["state"]["user"] == "100007663687854"

    def test_login_is_logged(self, caplog: pytest.LogCaptureFixture):
        with caplog.at_level(logging.INFO, logger="kilroy.infrastructure.auth.audit"):
            LoggingAuditHook().login(_request(), KILROY)

        assert any("/loginScope?username=JS Kilroy" in r.message for r in caplog.records)
