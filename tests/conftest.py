"""
Pytest configuration and fixtures
"""
import json
from types import SimpleNamespace
from typing import Any, List

import pytest

from file_utils import to_data_uri
from flow_runner import FlowRunner
from llm_client import ModelResponse

RESUME_TEXT = b"Jane Doe\nBackend engineer, 6 years. Go, SQL, Kubernetes.\n"
JD_TEXT = b"Backend Engineer\nWe need Go and SQL experience. Remote.\n"


class FakeModelClient:
    """Stands in for GeminiClient; replays canned responses and records calls."""

    def __init__(self, *responses: Any):
        self.responses: List[Any] = list(responses)
        self.calls: List[SimpleNamespace] = []

    def queue(self, *responses: Any) -> None:
        self.responses.extend(responses)

    async def generate(self, model_id, parts, output_schema=None, config=None):
        self.calls.append(
            SimpleNamespace(
                model_id=model_id,
                parts=list(parts),
                output_schema=output_schema,
                config=config,
            )
        )
        if not self.responses:
            raise AssertionError("unexpected model call")
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response


def json_response(payload: Any) -> ModelResponse:
    return ModelResponse(output=payload, text=json.dumps(payload))


def prompt_text(call: SimpleNamespace) -> str:
    return "\n".join(p.text for p in call.parts if hasattr(p, "text"))


@pytest.fixture
def fake_client() -> FakeModelClient:
    return FakeModelClient()


@pytest.fixture
def runner(fake_client) -> FlowRunner:
    return FlowRunner(fake_client, default_model="test-model", temperature=0.3)


@pytest.fixture
def resume_uri() -> str:
    return to_data_uri(RESUME_TEXT, "text/plain")


@pytest.fixture
def jd_uri() -> str:
    return to_data_uri(JD_TEXT, "text/plain")
