"""Shared test fixtures for the Claude reviewer."""

import json
from collections.abc import Callable
from typing import Any

import httpx
import pytest

from claude_reviewer.config import ReviewConfig
from claude_reviewer.platform_protocol import ChangeRecord

SAMPLE_PATCH = "@@ -1,3 +1,4 @@\n context\n+added_line\n context"


@pytest.fixture
def config() -> ReviewConfig:
    """GitHub configuration with explicit values."""
    return ReviewConfig(
        github_token="ghp_test",
        anthropic_api_key="sk-ant-test",
        pr_number=42,
        repo_name="owner/repo",
        file_extensions=(".java", ".kt"),
    )


@pytest.fixture
def gitea_config(config: ReviewConfig) -> ReviewConfig:
    """Same configuration pointed at a self-hosted Gitea."""
    return config.model_copy(update={"gitea_url": "https://gitea.example.com/"})


@pytest.fixture
def sample_changes() -> list[ChangeRecord]:
    return [
        ChangeRecord(filename="src/Main.java", patch=SAMPLE_PATCH, status="modified"),
        ChangeRecord(filename="build.gradle.kts", patch="+plugins {}", status="added"),
    ]


@pytest.fixture
def sample_gitea_files() -> list[dict[str, Any]]:
    """Gitea /pulls/{n}/files payload with mixed extensions."""
    return [
        {"filename": "src/Main.java", "patch": SAMPLE_PATCH, "status": "modified"},
        {"filename": "README.md", "patch": "+docs", "status": "modified"},
        {"filename": "app/Util.kt", "status": "added"},
        {"filename": "logo.png", "patch": None, "status": "added"},
    ]


@pytest.fixture
def claude_response() -> dict[str, Any]:
    """Minimal Messages API response."""
    return {
        "id": "msg_01",
        "type": "message",
        "role": "assistant",
        "content": [{"type": "text", "text": "LGTM"}],
        "stop_reason": "end_turn",
    }


@pytest.fixture
def recording_transport() -> Callable[..., tuple[httpx.MockTransport, list[httpx.Request]]]:
    """Build a MockTransport that records requests and replies from a handler.

    The handler receives the request and returns (status_code, json_payload).
    """

    def factory(
        handler: Callable[[httpx.Request], tuple[int, Any]],
    ) -> tuple[httpx.MockTransport, list[httpx.Request]]:
        requests: list[httpx.Request] = []

        def respond(request: httpx.Request) -> httpx.Response:
            requests.append(request)
            status_code, payload = handler(request)
            if isinstance(payload, (bytes, str)):
                return httpx.Response(status_code, content=payload)
            return httpx.Response(status_code, content=json.dumps(payload).encode())

        return httpx.MockTransport(respond), requests

    return factory
