from __future__ import annotations
import json

import httpx
import pytest

from assistant import AssistantError, ask_assistant, build_subject_context, stream_reply
from conftest import TODAY
from models import AssistantConfig, StudyPlan

CONFIG = AssistantConfig(url="https://assistant.test/chat", key="k3y", timeout=5)


def _sse(*chunks: str) -> bytes:
    lines = [": keep-alive", ""]
    for chunk in chunks:
        payload = {"choices": [{"delta": {"content": chunk}}]}
        lines.append(f"data: {json.dumps(payload)}\r")
        lines.append("")
    lines.append("data: [DONE]")
    lines.append("data: " + json.dumps({"choices": [{"delta": {"content": "ignored"}}]}))
    return "\n".join(lines).encode("utf-8")


def _client(handler) -> httpx.Client:
    return httpx.Client(transport=httpx.MockTransport(handler))


def test_subject_context_is_a_read_only_projection(make_subject, make_task):
    soon = make_subject(name="Math", difficulty=4, exam_in=3)
    past = make_subject(name="Art", difficulty=1, exam_in=-2)
    plan = StudyPlan(tasks=[
        make_task(soon, completed=True),
        make_task(soon, day_offset=1),
    ])

    context = build_subject_context([soon, past], plan, today=TODAY)
    assert context == [
        {"name": "Math", "difficulty": 4, "daysLeft": 3, "progress": 50},
        {"name": "Art", "difficulty": 1, "daysLeft": 0, "progress": 0},
    ]


def test_stream_reply_yields_delta_chunks():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["auth"] = request.headers.get("authorization")
        seen["body"] = json.loads(request.content)
        return httpx.Response(
            200,
            content=_sse("Start ", "with ", "Math."),
            headers={"content-type": "text/event-stream"},
        )

    messages = [{"role": "user", "content": "What first?"}]
    context = [{"name": "Math", "difficulty": 4, "daysLeft": 3, "progress": 0}]
    chunks = list(stream_reply(messages, context, CONFIG, client=_client(handler)))

    assert chunks == ["Start ", "with ", "Math."]
    assert seen["auth"] == "Bearer k3y"
    assert seen["body"] == {"messages": messages, "subjects": context}


def test_malformed_lines_are_skipped():
    body = b"data: {broken\n\ndata: {\"choices\": []}\n\n" + _sse("ok")

    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, content=body)

    assert ask_assistant([], [], CONFIG, client=_client(handler)) == "ok"


def test_error_response_uses_server_message():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(429, json={"error": "Rate limited, try again later."})

    with pytest.raises(AssistantError, match="Rate limited"):
        ask_assistant([], [], CONFIG, client=_client(handler))


def test_error_response_without_body():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(502, content=b"<html>bad gateway</html>")

    with pytest.raises(AssistantError, match="502"):
        ask_assistant([], [], CONFIG, client=_client(handler))


def test_connection_failure_raises_assistant_error():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(AssistantError, match="Could not reach"):
        ask_assistant([], [], CONFIG, client=_client(handler))


def test_no_auth_header_without_key():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["auth"] = request.headers.get("authorization")
        return httpx.Response(200, content=_sse("hi"))

    config = AssistantConfig(url="https://assistant.test/chat")
    assert ask_assistant([], [], config, client=_client(handler)) == "hi"
    assert seen["auth"] is None
