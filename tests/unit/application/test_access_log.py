"""Tests for the access log middleware."""

import logging

import pytest
from starlette.applications import Starlette
from starlette.requests import Request
from starlette.responses import PlainTextResponse
from starlette.routing import Route
from starlette.testclient import TestClient

from kilroy.application.api.access_log import AccessLogMiddleware


async def hello(request: Request) -> PlainTextResponse:
    request.state.user = request.query_params.get("as")
    return PlainTextResponse("hello")


def make_client(combined: bool) -> TestClient:
    app = Starlette(routes=[Route("/hello", hello)])
    app.add_middleware(AccessLogMiddleware, combined=combined)
    return TestClient(app)


def access_lines(caplog: pytest.LogCaptureFixture) -> list[str]:
    return [r.getMessage() for r in caplog.records if r.name == "kilroy.access"]


class TestCombinedFormat:
    def test_names_authenticated_user(self, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level(logging.INFO, logger="kilroy.access"):
            make_client(combined=True).get("/hello?as=100007663687854")

        (line,) = access_lines(caplog)
        assert " - 100007663687854 [" in line
        assert '"GET /hello?as=100007663687854 HTTP/1.1" 200 5' in line

    def test_anonymous_request_shows_dash(self, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level(logging.INFO, logger="kilroy.access"):
            make_client(combined=True).get("/hello", headers={"User-Agent": "probe"})

        (line,) = access_lines(caplog)
        assert " - - [" in line
        assert line.endswith('"-" "probe"')


class TestDevelopmentFormat:
    def test_compact_line(self, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level(logging.INFO, logger="kilroy.access"):
            make_client(combined=False).get("/hello")

        (line,) = access_lines(caplog)
        assert line.startswith("GET /hello 200 ")
        assert line.endswith(" ms - 5")

    def test_unmatched_route_is_logged(self, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level(logging.INFO, logger="kilroy.access"):
            make_client(combined=False).get("/missing")

        (line,) = access_lines(caplog)
        assert line.startswith("GET /missing 404 ")
