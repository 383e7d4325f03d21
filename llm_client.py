# llm_client.py
import json
import logging
from dataclasses import dataclass
from typing import Any, Optional, Sequence, Tuple, Type

import httpx
from google import genai
from google.genai import errors, types
from pydantic import BaseModel

from config import Settings
from errors import TransportError
from prompt_renderer import MediaPart, PromptPart, TextPart

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ModelConfig:
    temperature: Optional[float] = None
    system_instruction: Optional[str] = None
    # e.g. ("AUDIO",) for speech synthesis
    response_modalities: Tuple[str, ...] = ()
    voice_name: Optional[str] = None


@dataclass
class ModelResponse:
    output: Optional[Any] = None
    text: Optional[str] = None
    media: Optional[MediaPart] = None


def parse_json_text(text: Optional[str]) -> Optional[Any]:
    """
    Parse a model reply as JSON. Tolerates commentary or code fences around
    the outermost object. Returns None if nothing parseable is found.
    """
    text = (text or "").strip()
    if not text:
        return None

    # Try to parse directly
    try:
        return json.loads(text)
    except json.JSONDecodeError:
        # Try to trim to outermost JSON object
        start = text.find("{")
        end = text.rfind("}")
        if start != -1 and end != -1 and end > start:
            candidate = text[start : end + 1]
            try:
                return json.loads(candidate)
            except json.JSONDecodeError:
                pass

    logger.warning("Gemini did not return valid JSON (%d chars)", len(text))
    return None


class GeminiClient:
    """
    Thin async wrapper over google-genai used by the flow runner.
    Built once at startup and passed in; holds no per-call state.
    """

    def __init__(self, api_key: Optional[str] = None, *, client: Optional[genai.Client] = None):
        if client is None:
            if not api_key:
                raise RuntimeError("GEMINI_API_KEY is not set in .env or environment variables.")
            client = genai.Client(api_key=api_key)
        self._client = client

    @classmethod
    def from_settings(cls, settings: Settings) -> "GeminiClient":
        return cls(settings.require_api_key())

    async def generate(
        self,
        model_id: str,
        parts: Sequence[PromptPart],
        output_schema: Optional[Type[BaseModel]] = None,
        config: Optional[ModelConfig] = None,
    ) -> ModelResponse:
        config = config or ModelConfig()
        contents = [types.Content(role="user", parts=[_to_sdk_part(p) for p in parts])]

        try:
            response = await self._client.aio.models.generate_content(
                model=model_id,
                contents=contents,
                config=build_generate_config(output_schema, config),
            )
        except (errors.APIError, httpx.HTTPError) as exc:
            logger.error("Gemini call to %s failed: %s", model_id, exc)
            raise TransportError(f"Gemini request failed: {exc}") from exc

        return to_model_response(response, structured=output_schema is not None)


def _to_sdk_part(part: PromptPart) -> types.Part:
    if isinstance(part, TextPart):
        return types.Part.from_text(text=part.text)
    if isinstance(part, MediaPart):
        return types.Part.from_bytes(data=part.data, mime_type=part.mime_type)
    raise TypeError(f"unsupported prompt part: {type(part).__name__}")


def build_generate_config(
    output_schema: Optional[Type[BaseModel]],
    config: ModelConfig,
) -> types.GenerateContentConfig:
    kwargs: dict = {}
    if config.temperature is not None:
        kwargs["temperature"] = config.temperature
    if config.system_instruction:
        kwargs["system_instruction"] = config.system_instruction
    if output_schema is not None:
        kwargs["response_mime_type"] = "application/json"
        kwargs["response_schema"] = output_schema
    if config.response_modalities:
        kwargs["response_modalities"] = list(config.response_modalities)
    if config.voice_name:
        kwargs["speech_config"] = types.SpeechConfig(
            voice_config=types.VoiceConfig(
                prebuilt_voice_config=types.PrebuiltVoiceConfig(voice_name=config.voice_name),
            ),
        )
    return types.GenerateContentConfig(**kwargs)


def to_model_response(response: Any, *, structured: bool) -> ModelResponse:
    text_chunks = []
    media: Optional[MediaPart] = None

    candidates = getattr(response, "candidates", None) or []
    if candidates:
        content = candidates[0].content
        for part in (content.parts if content and content.parts else []):
            if part.text:
                text_chunks.append(part.text)
            elif part.inline_data is not None and part.inline_data.data:
                # Keep the first media part; TTS returns exactly one
                if media is None:
                    media = MediaPart(
                        mime_type=part.inline_data.mime_type or "application/octet-stream",
                        data=part.inline_data.data,
                    )

    text = "".join(text_chunks).strip() or None
    output = parse_json_text(text) if structured else None
    return ModelResponse(output=output, text=text, media=media)
