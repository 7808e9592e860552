"""Tests for mapping SDK and transport failures onto error kinds."""

from __future__ import annotations

import json

import anthropic
import httpx
import openai
import pytest

from voicebrief.errors import (
    MalformedResponse,
    NetworkUnavailable,
    RateLimited,
    UpstreamError,
    translate_error,
)

REQUEST = httpx.Request("POST", "https://api.example.com/v1")


def _response(status: int) -> httpx.Response:
    return httpx.Response(status, request=REQUEST)


class TestTranslateError:
    def test_intelligence_error_passes_through(self) -> None:
        err = RateLimited("slow down")
        assert translate_error(err) is err

    @pytest.mark.parametrize(
        "exc",
        [
            anthropic.RateLimitError("limit", response=_response(429), body=None),
            openai.RateLimitError("limit", response=_response(429), body=None),
        ],
    )
    def test_rate_limits(self, exc) -> None:
        assert isinstance(translate_error(exc), RateLimited)

    @pytest.mark.parametrize(
        "exc",
        [
            anthropic.APIConnectionError(request=REQUEST),
            openai.APITimeoutError(request=REQUEST),
            httpx.ConnectError("refused", request=REQUEST),
            ConnectionError("reset"),
            TimeoutError(),
        ],
    )
    def test_network_failures(self, exc) -> None:
        assert isinstance(translate_error(exc), NetworkUnavailable)

    def test_status_error_keeps_code(self) -> None:
        exc = anthropic.InternalServerError("boom", response=_response(500), body=None)

        err = translate_error(exc)

        assert isinstance(err, UpstreamError)
        assert err.status_code == 500

    def test_httpx_status_error(self) -> None:
        exc = httpx.HTTPStatusError("bad gateway", request=REQUEST, response=_response(502))

        err = translate_error(exc)

        assert isinstance(err, UpstreamError)
        assert err.status_code == 502

    def test_httpx_429_is_rate_limited(self) -> None:
        exc = httpx.HTTPStatusError("too many", request=REQUEST, response=_response(429))
        assert isinstance(translate_error(exc), RateLimited)

    @pytest.mark.parametrize(
        "exc",
        [
            json.JSONDecodeError("Expecting value", "", 0),
            KeyError("content"),
            TypeError("not subscriptable"),
            AttributeError("'str' object has no attribute 'get'"),
        ],
    )
    def test_parse_failures_are_malformed(self, exc) -> None:
        assert isinstance(translate_error(exc), MalformedResponse)

    def test_unknown_error_is_upstream(self) -> None:
        err = translate_error(RuntimeError("???"))
        assert isinstance(err, UpstreamError)
        assert err.status_code is None
