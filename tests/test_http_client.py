"""Tests for the shared HTTP helpers and logging utilities."""

import logging
from unittest.mock import MagicMock

import pytest
import requests

from common import http_client
from common.logging_utils import configure_logging, extra_context, safe_url
from constants import Constants
from errors import NetworkError

URL = "https://mirror.test/dist/"


def _response(status, text="ok"):
    res = MagicMock()
    res.status_code = status
    res.text = text
    res.headers = {"Content-Type": "text/html"}
    return res


def test_safe_get_sends_user_agent_and_timeout():
    session = MagicMock()
    session.get.return_value = _response(200)
    http_client.safe_get(URL, context="index", session=session, headers={"Range": "bytes=0-"})
    _, kwargs = session.get.call_args
    assert kwargs["headers"] == {"User-Agent": Constants.USER_AGENT, "Range": "bytes=0-"}
    assert kwargs["timeout"] == Constants.REQUEST_TIMEOUT


def test_timeout_becomes_network_error():
    session = MagicMock()
    session.get.side_effect = requests.Timeout("slow")
    with pytest.raises(NetworkError) as excinfo:
        http_client.safe_get(URL, context="index", session=session)
    assert "timed out" in str(excinfo.value)


def test_connection_error_becomes_network_error():
    session = MagicMock()
    session.head.side_effect = requests.ConnectionError("refused")
    with pytest.raises(NetworkError):
        http_client.safe_head(URL, context="download", session=session)
    assert session.head.call_args[1]["allow_redirects"] is True


def test_robust_get_retries_transport_errors():
    session = MagicMock()
    session.get.side_effect = [requests.ConnectionError("reset"), _response(200, "index")]
    assert http_client.robust_get(URL, session=session) == (200, {"Content-Type": "text/html"}, "index")
    assert session.get.call_count == 2


def test_robust_get_gives_up_after_max_attempts(monkeypatch):
    monkeypatch.setattr(Constants, "HTTP_RETRY_MAX", 2)
    session = MagicMock()
    session.get.side_effect = requests.ConnectionError("reset")
    with pytest.raises(NetworkError):
        http_client.robust_get(URL, session=session)
    assert session.get.call_count == 2


def test_robust_get_caches_success_but_not_server_errors():
    session = MagicMock()
    session.get.side_effect = [_response(503, "busy"), _response(200, "index")]
    assert http_client.robust_get(URL, session=session)[0] == 503
    assert http_client.robust_get(URL, session=session)[0] == 200
    assert http_client.robust_get(URL, session=session)[0] == 200
    assert session.get.call_count == 2


def test_safe_url_strips_credentials_and_masks_tokens():
    assert safe_url("https://user:pw@mirror.test:8443/dist/?token=abc&x=1") == \
        "https://mirror.test:8443/dist/?token=***&x=1"


def test_extra_context_drops_none_and_redacts():
    assert extra_context(event="x", target=None, auth_header="secret") == {"event": "x", "auth_header": "***"}


@pytest.mark.parametrize("explicit,expected", [(None, logging.ERROR), ("DEBUG", logging.DEBUG)])
def test_configure_logging_level_precedence(monkeypatch, explicit, expected):
    monkeypatch.setenv("NVS_LOG_LEVEL", "error")
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    try:
        configure_logging(explicit)
        assert root.level == expected
    finally:
        for handler in list(root.handlers):
            root.removeHandler(handler)
        for handler in handlers:
            root.addHandler(handler)
        root.setLevel(level)
