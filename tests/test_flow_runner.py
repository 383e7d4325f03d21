import asyncio
from typing import List, Optional

import pytest
from pydantic import BaseModel

from conftest import FakeModelClient, json_response, prompt_text
from errors import InputValidationError, NoOutputError, PromptRenderError, TransportError
from file_utils import DataUri
from flow_runner import FlowRunner, FlowSpec, decode_text
from llm_client import ModelConfig, ModelResponse
from prompt_renderer import MediaPart
from schemas import Score100


class ReviewInput(BaseModel):
    title: str
    skills: List[str]
    nickname: Optional[str] = None


class ReviewOutput(BaseModel):
    score: Score100
    tags: List[str]
    note: str


REVIEW = FlowSpec(
    name="review",
    input_model=ReviewInput,
    output_model=ReviewOutput,
    prompt=(
        "Review {{ title }}.{% if nickname %} Known as {{ nickname }}.{% endif %}\n"
        "Skills: {% for s in skills %}{{ s }}{% if not loop.last %}, {% endif %}{% endfor %}"
    ),
    system="You review things.",
)


@pytest.mark.asyncio
async def test_valid_response_returned_unchanged(runner, fake_client):
    payload = {"score": 82, "tags": ["go", "sql"], "note": "solid"}
    fake_client.queue(json_response(payload))

    result = await runner.invoke(REVIEW, {"title": "API", "skills": ["Go", "SQL"]})

    assert isinstance(result, ReviewOutput)
    assert result.model_dump() == payload


@pytest.mark.asyncio
async def test_request_shape(runner, fake_client):
    fake_client.queue(json_response({"score": 1, "tags": [], "note": "n"}))

    await runner.invoke(REVIEW, {"title": "API", "skills": ["Go", "SQL"]})

    (call,) = fake_client.calls
    assert call.model_id == "test-model"
    assert call.output_schema is ReviewOutput
    assert call.config.temperature == 0.3
    assert call.config.system_instruction == "You review things."
    text = prompt_text(call)
    assert "Review API." in text
    assert "Skills: Go, SQL" in text
    assert "Known as" not in text
    assert "None" not in text


@pytest.mark.asyncio
async def test_accepts_model_instance_input(runner, fake_client):
    fake_client.queue(json_response({"score": 1, "tags": [], "note": "n"}))
    await runner.invoke(REVIEW, ReviewInput(title="API", skills=[], nickname="Gateway"))
    assert "Known as Gateway." in prompt_text(fake_client.calls[0])


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "payload",
    [
        {},
        {"title": "API"},
        {"title": "API", "skills": "Go"},
        {"title": 5, "skills": []},
        "just a string",
        None,
    ],
)
async def test_invalid_input_never_calls_model(runner, fake_client, payload):
    with pytest.raises(InputValidationError) as excinfo:
        await runner.invoke(REVIEW, payload)

    assert excinfo.value.flow == "review"
    assert excinfo.value.errors
    assert fake_client.calls == []


@pytest.mark.asyncio
async def test_missing_required_output_field_is_no_output(runner, fake_client):
    fake_client.queue(json_response({"score": 50, "tags": []}))

    with pytest.raises(NoOutputError) as excinfo:
        await runner.invoke(REVIEW, {"title": "API", "skills": []})

    assert "note" in str(excinfo.value)


@pytest.mark.asyncio
@pytest.mark.parametrize("score", [-1, 100.5, "high"])
async def test_out_of_bounds_output_is_no_output(runner, fake_client, score):
    fake_client.queue(json_response({"score": score, "tags": [], "note": "n"}))
    with pytest.raises(NoOutputError):
        await runner.invoke(REVIEW, {"title": "API", "skills": []})


@pytest.mark.asyncio
async def test_empty_response_is_no_output(runner, fake_client):
    fake_client.queue(ModelResponse())
    with pytest.raises(NoOutputError):
        await runner.invoke(REVIEW, {"title": "API", "skills": []})


@pytest.mark.asyncio
async def test_transport_error_propagates_unchanged(runner, fake_client):
    error = TransportError("quota exceeded")
    fake_client.queue(error)

    with pytest.raises(TransportError) as excinfo:
        await runner.invoke(REVIEW, {"title": "API", "skills": []})

    assert excinfo.value is error


@pytest.mark.asyncio
async def test_required_template_field_fails_before_model_call(runner, fake_client):
    spec = FlowSpec(
        name="needs_nickname",
        input_model=ReviewInput,
        output_model=ReviewOutput,
        prompt="Hello {{ nickname | required }}",
    )
    with pytest.raises(PromptRenderError) as excinfo:
        await runner.invoke(spec, {"title": "API", "skills": []})

    assert excinfo.value.flow == "needs_nickname"
    assert fake_client.calls == []


@pytest.mark.asyncio
async def test_short_circuit_skips_model(runner, fake_client):
    spec = FlowSpec(
        name="no_skills",
        input_model=ReviewInput,
        output_model=ReviewOutput,
        prompt="{{ title }}",
        short_circuit=lambda data: {"score": 0, "tags": [], "note": "empty"} if not data.skills else None,
    )

    result = await runner.invoke(spec, {"title": "API", "skills": []})

    assert result.note == "empty"
    assert fake_client.calls == []


@pytest.mark.asyncio
async def test_postprocess_applied(runner, fake_client):
    spec = FlowSpec(
        name="upper_tags",
        input_model=ReviewInput,
        output_model=ReviewOutput,
        prompt="{{ title }}",
        postprocess=lambda data, out: out.model_copy(update={"tags": [t.upper() for t in out.tags]}),
    )
    fake_client.queue(json_response({"score": 10, "tags": ["go"], "note": "n"}))

    result = await runner.invoke(spec, {"title": "API", "skills": []})

    assert result.tags == ["GO"]


@pytest.mark.asyncio
async def test_spec_model_and_config_override_runner_defaults(runner, fake_client):
    spec = FlowSpec(
        name="pinned",
        input_model=ReviewInput,
        output_model=ReviewOutput,
        prompt="{{ title }}",
        model_id="pinned-model",
        config=ModelConfig(temperature=0.9),
    )
    fake_client.queue(json_response({"score": 10, "tags": [], "note": "n"}))

    await runner.invoke(spec, {"title": "API", "skills": []})

    assert fake_client.calls[0].model_id == "pinned-model"
    assert fake_client.calls[0].config.temperature == 0.9


class DocInput(BaseModel):
    doc: DataUri


class TextOutput(BaseModel):
    text: str


@pytest.mark.asyncio
async def test_text_decoder_and_media_part(runner, fake_client):
    spec = FlowSpec(
        name="read_doc",
        input_model=DocInput,
        output_model=TextOutput,
        prompt="Read this: {{ media(doc) }}",
        structured=False,
        decode=decode_text("text"),
    )
    fake_client.queue(ModelResponse(text="  contents  "))

    result = await runner.invoke(spec, {"doc": "data:text/plain;base64,aGVsbG8="})

    assert result.text == "contents"
    call = fake_client.calls[0]
    assert call.output_schema is None
    assert call.parts[-1] == MediaPart(mime_type="text/plain", data=b"hello")


@pytest.mark.asyncio
async def test_concurrent_invocations_are_independent():
    client = FakeModelClient(
        json_response({"score": 10, "tags": ["a"], "note": "first"}),
        json_response({"score": 20, "tags": ["b"], "note": "second"}),
    )
    runner = FlowRunner(client)

    first, second = await asyncio.gather(
        runner.invoke(REVIEW, {"title": "A", "skills": []}),
        runner.invoke(REVIEW, {"title": "B", "skills": []}),
    )

    assert {first.note, second.note} == {"first", "second"}
    assert len(client.calls) == 2


def test_spec_requires_pydantic_models():
    with pytest.raises(TypeError):
        FlowSpec(name="bad", input_model=dict, output_model=ReviewOutput, prompt="x")


def test_spec_is_frozen():
    with pytest.raises(Exception):
        REVIEW.name = "other"
