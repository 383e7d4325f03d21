"""
Flow runner: executes one declarative flow against one input.

A flow is an input model, a prompt template and an output model wrapped around
a single generative-model call. ``FlowRunner.invoke`` validates the input,
renders the prompt, calls the model, validates whatever comes back and either
returns an instance of the output model or raises a ``FlowError``:

- ``InputValidationError``: input rejected, the model was never called
- ``NoOutputError``: empty or schema-violating model response
- ``TransportError``: raised by the client, passed through untouched

Specs are frozen and shared; the runner keeps no per-call state, so any number
of ``invoke`` calls may run concurrently.
"""
import logging
import time
from dataclasses import dataclass, field, replace
from typing import Any, Callable, List, Optional, Protocol, Sequence, Type, Union

from pydantic import BaseModel, ValidationError

from config import DEFAULT_MODEL, Settings
from errors import InputValidationError, NoOutputError, PromptRenderError
from llm_client import ModelConfig, ModelResponse
from prompt_renderer import PromptPart, PromptTemplate

logger = logging.getLogger(__name__)


class ModelClient(Protocol):
    async def generate(
        self,
        model_id: str,
        parts: Sequence[PromptPart],
        output_schema: Optional[Type[BaseModel]] = None,
        config: Optional[ModelConfig] = None,
    ) -> ModelResponse:
        ...


Decoder = Callable[[ModelResponse], Optional[Any]]


def decode_json(response: ModelResponse) -> Optional[Any]:
    return response.output


def decode_text(field_name: str) -> Decoder:
    """Wrap a plain-text reply into ``{field_name: text}``."""

    def decode(response: ModelResponse) -> Optional[Any]:
        if not response.text or not response.text.strip():
            return None
        return {field_name: response.text.strip()}

    return decode


@dataclass(frozen=True)
class FlowSpec:
    name: str
    input_model: Type[BaseModel]
    output_model: Type[BaseModel]
    prompt: Union[PromptTemplate, str]
    system: Optional[str] = None
    model_id: Optional[str] = None
    config: ModelConfig = field(default_factory=ModelConfig)
    # Send output_model to the model as the response schema
    structured: bool = True
    decode: Decoder = decode_json
    # Returns a ready output for inputs that need no model call, else None
    short_circuit: Optional[Callable[[Any], Optional[Any]]] = None
    postprocess: Optional[Callable[[Any, Any], Any]] = None

    def __post_init__(self):
        if not self.name:
            raise ValueError("flow name must not be empty")
        for attr in ("input_model", "output_model"):
            model = getattr(self, attr)
            if not (isinstance(model, type) and issubclass(model, BaseModel)):
                raise TypeError(f"{self.name}: {attr} must be a pydantic model class")
        if isinstance(self.prompt, str):
            object.__setattr__(self, "prompt", PromptTemplate(self.prompt))


def _error_list(exc: ValidationError) -> List[dict]:
    return exc.errors(include_url=False, include_context=False, include_input=False)


def _summarize(exc: ValidationError, limit: int = 3) -> str:
    details = []
    for err in exc.errors(include_url=False)[:limit]:
        loc = ".".join(str(p) for p in err["loc"]) or "input"
        details.append(f"{loc}: {err['msg']}")
    more = exc.error_count() - len(details)
    if more > 0:
        details.append(f"... and {more} more")
    return "; ".join(details)


class FlowRunner:
    def __init__(
        self,
        client: ModelClient,
        *,
        default_model: str = DEFAULT_MODEL,
        temperature: Optional[float] = None,
    ):
        self.client = client
        self.default_model = default_model
        self.temperature = temperature

    @classmethod
    def from_settings(cls, settings: Settings, client: ModelClient) -> "FlowRunner":
        return cls(client, default_model=settings.gemini_model, temperature=settings.temperature)

    def validate_input(self, spec: FlowSpec, payload: Any) -> BaseModel:
        if isinstance(payload, spec.input_model):
            return payload
        try:
            return spec.input_model.model_validate(payload)
        except ValidationError as exc:
            raise InputValidationError(
                f"invalid input: {_summarize(exc)}",
                flow=spec.name,
                errors=_error_list(exc),
            ) from exc

    def validate_output(self, spec: FlowSpec, candidate: Any) -> BaseModel:
        try:
            if isinstance(candidate, BaseModel):
                candidate = candidate.model_dump()
            return spec.output_model.model_validate(candidate)
        except ValidationError as exc:
            logger.warning("%s: model output failed validation: %s", spec.name, _summarize(exc))
            raise NoOutputError(
                f"model output did not match the expected schema: {_summarize(exc)}",
                flow=spec.name,
                errors=_error_list(exc),
            ) from exc

    def _config_for(self, spec: FlowSpec) -> ModelConfig:
        config = spec.config
        if config.temperature is None and self.temperature is not None:
            config = replace(config, temperature=self.temperature)
        if spec.system and not config.system_instruction:
            config = replace(config, system_instruction=spec.system)
        return config

    async def invoke(self, spec: FlowSpec, payload: Any) -> BaseModel:
        data = self.validate_input(spec, payload)

        if spec.short_circuit is not None:
            early = spec.short_circuit(data)
            if early is not None:
                logger.info("%s: answered without a model call", spec.name)
                return self.validate_output(spec, early)

        try:
            parts = spec.prompt.render_parts(data.model_dump())
        except PromptRenderError as exc:
            exc.flow = spec.name
            raise

        model_id = spec.model_id or self.default_model
        logger.debug("%s: calling %s with %d prompt part(s)", spec.name, model_id, len(parts))
        started = time.perf_counter()

        response = await self.client.generate(
            model_id,
            parts,
            spec.output_model if spec.structured else None,
            self._config_for(spec),
        )

        candidate = spec.decode(response)
        if candidate is None:
            logger.warning("%s: model returned no output", spec.name)
            raise NoOutputError("model returned no output", flow=spec.name)

        output = self.validate_output(spec, candidate)
        if spec.postprocess is not None:
            output = spec.postprocess(data, output)

        logger.info(
            "%s: completed in %.0f ms",
            spec.name,
            (time.perf_counter() - started) * 1000,
        )
        return output
