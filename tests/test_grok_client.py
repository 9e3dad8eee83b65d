"""
Grok chat client: retries, fence stripping and JSON repair.
"""
import os

import pytest
import requests

import grok_client
from grok_client import (
    clean_json_from_llm,
    extract_json_candidate,
    grok_chat,
    parse_json_with_repair,
)


class FakeResponse:
    def __init__(self, status_code, payload=None, text=""):
        self.status_code = status_code
        self._payload = payload
        self.text = text

    def json(self):
        return self._payload


def _chat_payload(content):
    return {"choices": [{"message": {"content": content}}]}


def test_clean_json_strips_fences():
    assert clean_json_from_llm('```json\n{"a": 1}\n```') == '{"a": 1}'
    assert clean_json_from_llm("  ") == ""
    assert clean_json_from_llm(None) == ""


def test_extract_json_candidate_cuts_outer_object():
    assert extract_json_candidate('Sure! {"a": {"b": 2}} hope this helps') == '{"a": {"b": 2}}'
    assert extract_json_candidate('here: ["x", "y"] done', "[", "]") == '["x", "y"]'
    assert extract_json_candidate("no json here") == "no json here"


def test_grok_chat_retries_on_server_errors(monkeypatch):
    responses = [FakeResponse(503, text="busy"), FakeResponse(200, _chat_payload("ok"))]
    sent = []

    def fake_post(url, headers, json, timeout):
        sent.append(json)
        return responses.pop(0)

    monkeypatch.setattr(grok_client.requests, "post", fake_post)
    monkeypatch.setattr(grok_client.time, "sleep", lambda s: None)

    data = grok_chat("key", [{"role": "user", "content": "hi"}], model="m", temperature=0.3, max_tokens=10)
    assert data["choices"][0]["message"]["content"] == "ok"
    assert len(sent) == 2
    assert sent[0] == {
        "model": "m",
        "messages": [{"role": "user", "content": "hi"}],
        "temperature": 0.3,
        "max_tokens": 10,
    }


def test_grok_chat_client_error_is_not_retried(monkeypatch):
    calls = []

    def fake_post(url, headers, json, timeout):
        calls.append(url)
        return FakeResponse(401, text="bad key")

    monkeypatch.setattr(grok_client.requests, "post", fake_post)
    with pytest.raises(RuntimeError, match="401"):
        grok_chat("key", [{"role": "user", "content": "hi"}])
    assert len(calls) == 1


def test_grok_chat_gives_up_after_connection_errors(monkeypatch):
    def fake_post(url, headers, json, timeout):
        raise requests.exceptions.ConnectionError("down")

    monkeypatch.setattr(grok_client.requests, "post", fake_post)
    monkeypatch.setattr(grok_client.time, "sleep", lambda s: None)
    with pytest.raises(requests.exceptions.ConnectionError):
        grok_chat("key", [{"role": "user", "content": "hi"}], max_retries=2)


def test_parse_json_valid_needs_no_repair(monkeypatch, tmp_path):
    def fail_chat(*args, **kwargs):
        raise AssertionError("repair should not be called")

    monkeypatch.setattr(grok_client, "grok_chat", fail_chat)
    debug_dir = str(tmp_path / "dbg")
    parsed = parse_json_with_repair("key", '```json\n{"a": 1}\n```', debug_tag="t", debug_dir=debug_dir)
    assert parsed == {"a": 1}
    assert os.path.isfile(os.path.join(debug_dir, "t_raw.txt"))


def test_parse_json_repairs_malformed_output(monkeypatch, tmp_path):
    monkeypatch.setattr(grok_client, "grok_chat", lambda *a, **k: _chat_payload('{"a": 2}'))
    debug_dir = str(tmp_path / "dbg")
    parsed = parse_json_with_repair("key", "{a: 2,,}", debug_tag="t", debug_dir=debug_dir)
    assert parsed == {"a": 2}
    assert os.path.isfile(os.path.join(debug_dir, "t_repaired_attempt1.txt"))


def test_parse_json_raises_when_repair_fails(monkeypatch, tmp_path):
    monkeypatch.setattr(grok_client, "grok_chat", lambda *a, **k: _chat_payload("still {broken"))
    with pytest.raises(ValueError, match="Could not parse JSON"):
        parse_json_with_repair("key", "{broken", debug_tag="t", debug_dir=str(tmp_path))
