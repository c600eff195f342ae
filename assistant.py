"""
Study assistant client.

The assistant only ever sees a read-only projection of the subjects (name,
difficulty, days left, progress). Replies arrive as an OpenAI-style
server-sent event stream.
"""
from __future__ import annotations
import json
import logging
from datetime import date
from typing import Dict, Iterator, List
import httpx
from models import AssistantConfig, StudyPlan, Subject
from planner import get_subject_progress

logger = logging.getLogger(__name__)


class AssistantError(Exception):
    pass


def build_subject_context(
    subjects: List[Subject],
    plan: StudyPlan,
    today: date | None = None,
) -> List[dict]:
    today = today or date.today()
    return [
        {
            "name": s.name,
            "difficulty": s.difficulty,
            "daysLeft": max(0, (s.exam_date - today).days),
            "progress": get_subject_progress(plan, s),
        }
        for s in subjects
    ]


def _error_message(response: httpx.Response) -> str:
    try:
        body = json.loads(response.read())
    except (json.JSONDecodeError, UnicodeDecodeError):
        body = None
    if isinstance(body, dict) and body.get("error"):
        return str(body["error"])
    return f"Request failed ({response.status_code})"


def _delta_content(payload: str) -> str | None:
    try:
        parsed = json.loads(payload)
    except json.JSONDecodeError:
        logger.warning("Skipping malformed stream line: %.80s", payload)
        return None
    try:
        return parsed["choices"][0]["delta"].get("content")
    except (KeyError, IndexError, TypeError, AttributeError):
        return None


def stream_reply(
    messages: List[Dict[str, str]],
    context: List[dict],
    config: AssistantConfig,
    client: httpx.Client | None = None,
) -> Iterator[str]:
    """
    POST the conversation and yield reply text chunks as they arrive.

    Raises AssistantError on connection problems or non-2xx responses.
    """
    headers = {"Content-Type": "application/json"}
    if config.key:
        headers["Authorization"] = f"Bearer {config.key}"
    body = {"messages": messages, "subjects": context}

    own_client = client is None
    if own_client:
        client = httpx.Client(timeout=config.timeout)

    logger.info("Asking assistant (%d messages, %d subjects)", len(messages), len(context))
    try:
        with client.stream("POST", config.url, json=body, headers=headers) as response:
            if response.status_code >= 400:
                message = _error_message(response)
                logger.error("Assistant returned %d: %s", response.status_code, message)
                raise AssistantError(message)

            for line in response.iter_lines():
                line = line.rstrip("\r")
                if not line or line.startswith(":"):
                    continue
                if not line.startswith("data: "):
                    continue
                payload = line[6:].strip()
                if payload == "[DONE]":
                    break
                content = _delta_content(payload)
                if content:
                    yield content
    except httpx.HTTPError as e:
        logger.error("Assistant request failed: %s", e)
        raise AssistantError("Could not reach AI assistant.") from e
    finally:
        if own_client:
            client.close()


def ask_assistant(
    messages: List[Dict[str, str]],
    context: List[dict],
    config: AssistantConfig,
    client: httpx.Client | None = None,
) -> str:
    return "".join(stream_reply(messages, context, config, client))
