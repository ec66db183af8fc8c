import logging

import pytest
import requests

from codecompleter.config.settings import CompletionConfig
from codecompleter.core import llm_client as llm_client_module
from codecompleter.core.errors import EmptyContent, HeuristicRejected, MalformedResponse
from codecompleter.core.llm_client import LLMClient, build_prompt


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

class FakeResponse:
    def __init__(self, status_code=200, body=None, reason="OK"):
        self.status_code = status_code
        self.reason = reason
        self._body = body

    @property
    def ok(self):
        return self.status_code < 400

    def json(self):
        if isinstance(self._body, Exception):
            raise self._body
        return self._body


def chat_body(content):
    return {"choices": [{"message": {"role": "assistant", "content": content}}]}


@pytest.fixture
def post(monkeypatch):
    """Replace requests.post; set ``post.response`` (or ``post.error``) per test."""
    calls = []

    def fake_post(url, **kwargs):
        calls.append((url, kwargs))
        if fake_post.error is not None:
            raise fake_post.error
        return fake_post.response

    fake_post.calls = calls
    fake_post.error = None
    fake_post.response = FakeResponse(body=chat_body("pass"))
    monkeypatch.setattr(llm_client_module.requests, "post", fake_post)
    return fake_post


@pytest.fixture
def client():
    return LLMClient(CompletionConfig(endpoint="http://fake.local/v1/chat/completions", model="test-model"))


# ---------------------------------------------------------------------------
# Request construction
# ---------------------------------------------------------------------------

def test_prompt_embeds_prefix_and_suffix_between_markers():
    prompt = build_prompt("def f(", ")\n")
    lines = prompt.split("\n")
    assert lines[0].startswith("Complete the code at the <FILL> position.")
    assert "Do NOT repeat the prefix code." in prompt
    assert "<PREFIX>\ndef f(\n<FILL>\n<SUFFIX>\n)\n\n</SUFFIX>" in prompt
    assert lines[-1] == "Return only the completion for <FILL>:"


def test_payload_shape(post, client):
    client.get_completion("a = ", "", CompletionConfig(max_tokens=10, temperature=1.5, model="m", timeout=3))

    url, kwargs = post.calls[0]
    assert url == "http://localhost:11434/v1/chat/completions"
    assert kwargs["timeout"] == 3
    assert kwargs["headers"] == {"Content-Type": "application/json"}
    body = kwargs["json"]
    assert body["model"] == "m"
    assert body["max_tokens"] == 10
    assert body["temperature"] == 1.5
    assert body["stream"] is False
    assert body["messages"] == [{"role": "user", "content": build_prompt("a = ", "")}]


def test_client_config_used_by_default(post, client):
    client.get_completion("x", "y")
    url, kwargs = post.calls[0]
    assert url == "http://fake.local/v1/chat/completions"
    assert kwargs["json"]["model"] == "test-model"


# ---------------------------------------------------------------------------
# Response handling
# ---------------------------------------------------------------------------

def test_success_is_trimmed_and_deduplicated(post, client):
    post.response = FakeResponse(body=chat_body("\n  function sum(a, b) { return a + b }  \n"))
    assert client.get_completion("function sum(", "") == "a, b) { return a + b }"


def test_fully_echoed_completion_is_empty_string(post, client):
    post.response = FakeResponse(body=chat_body("x = 1"))
    assert client.get_completion("x = 1", "") == ""


def test_server_error_returns_none(post, client, caplog):
    post.response = FakeResponse(status_code=500, body=None, reason="Internal Server Error")
    with caplog.at_level(logging.ERROR):
        assert client.get_completion("x", "") is None
    assert "500" in caplog.text


@pytest.mark.parametrize("error", [
    requests.ConnectionError("refused"),
    requests.Timeout("too slow"),
])
def test_network_errors_return_none(post, client, error):
    post.error = error
    assert client.get_completion("x", "") is None


@pytest.mark.parametrize("body", [
    ValueError("Expecting value"),
    {},
    {"choices": []},
    {"choices": [{}]},
    {"choices": [{"message": None}]},
    {"choices": [{"message": {"content": 42}}]},
    ["not", "a", "dict"],
])
def test_malformed_bodies_return_none(post, client, body):
    post.response = FakeResponse(body=body)
    assert client.get_completion("x", "") is None


@pytest.mark.parametrize("content", [None, "", "   \n\t"])
def test_empty_content_returns_none(post, client, content):
    post.response = FakeResponse(body=chat_body(content))
    assert client.get_completion("x", "") is None


@pytest.mark.parametrize("content", ["Thinking...", "let me THINK, thinking hard", "x = thinking_cap()"])
def test_thinking_marker_returns_none(post, client, content):
    post.response = FakeResponse(body=chat_body(content))
    assert client.get_completion("x", "") is None


def test_no_retry_on_failure(post, client):
    post.response = FakeResponse(status_code=503, reason="Service Unavailable")
    client.get_completion("x", "")
    assert len(post.calls) == 1


def test_parse_content_reasons():
    with pytest.raises(MalformedResponse):
        LLMClient.parse_content({"choices": []})
    with pytest.raises(EmptyContent):
        LLMClient.parse_content(chat_body(" "))
    with pytest.raises(HeuristicRejected):
        LLMClient.parse_content(chat_body("<thinking>"))
    assert LLMClient.parse_content(chat_body("  ok  ")) == "ok"


@pytest.mark.asyncio
async def test_request_completion_is_awaitable(post, client):
    post.response = FakeResponse(body=chat_body("return a + b"))
    assert await client.request_completion("def add(a, b):\n    ", "") == "return a + b"
