from __future__ import annotations

from gamerdb.observability import logging as obs_logging
from gamerdb.observability.context import request_id_var


def test_request_id_is_added_when_bound():
    token = request_id_var.set("rid-7")
    try:
        out = obs_logging._add_request_id(None, "info", {"event": "x"})
    finally:
        request_id_var.reset(token)
    assert out == {"event": "x", "request_id": "rid-7"}


def test_request_id_is_omitted_when_unbound():
    assert obs_logging._add_request_id(None, "info", {"event": "x"}) == {"event": "x"}


def test_configure_logging_only_runs_once(monkeypatch):
    calls = []
    monkeypatch.setattr(obs_logging, "_CONFIGURED", False)
    monkeypatch.setattr(obs_logging.structlog, "configure", lambda **kw: calls.append(kw))

    obs_logging.configure_logging(level="debug")
    obs_logging.configure_logging(level="debug")

    assert len(calls) == 1
