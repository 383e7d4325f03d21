# tts.py
import logging
import re
from typing import Any, Dict, Optional

from pydantic import BaseModel

from file_utils import DataUri, pcm_to_wav, to_data_uri
from flow_runner import FlowRunner, FlowSpec
from llm_client import ModelConfig, ModelResponse
from schemas import NonEmptyStr

logger = logging.getLogger(__name__)

TTS_MODEL = "gemini-2.5-flash-preview-tts"
TTS_VOICE = "Algenib"

# Gemini TTS returns raw PCM: mono, 24 kHz, 16-bit little-endian
PCM_CHANNELS = 1
PCM_SAMPLE_RATE = 24000
PCM_SAMPLE_WIDTH = 2

_RATE_RE = re.compile(r"rate=(\d+)")


class TextToSpeechInput(BaseModel):
    text: NonEmptyStr


class TextToSpeechOutput(BaseModel):
    media: DataUri


def decode_audio(response: ModelResponse) -> Optional[Dict[str, Any]]:
    media = response.media
    if media is None or not media.data:
        return None

    if media.mime_type in ("audio/wav", "audio/x-wav", "audio/wave"):
        return {"media": to_data_uri(media.data, "audio/wav")}

    # e.g. "audio/L16;codec=pcm;rate=24000"
    match = _RATE_RE.search(media.mime_type)
    rate = int(match.group(1)) if match else PCM_SAMPLE_RATE
    wav = pcm_to_wav(
        media.data,
        channels=PCM_CHANNELS,
        sample_rate=rate,
        sample_width=PCM_SAMPLE_WIDTH,
    )
    logger.debug("Wrapped %d bytes of PCM (%d Hz) into WAV", len(media.data), rate)
    return {"media": to_data_uri(wav, "audio/wav")}


TEXT_TO_SPEECH = FlowSpec(
    name="text_to_speech",
    input_model=TextToSpeechInput,
    output_model=TextToSpeechOutput,
    prompt="{{ text | required }}",
    model_id=TTS_MODEL,
    config=ModelConfig(response_modalities=("AUDIO",), voice_name=TTS_VOICE),
    structured=False,
    decode=decode_audio,
)


async def text_to_speech(runner: FlowRunner, text: str) -> TextToSpeechOutput:
    """Synthesize speech and return it as a data:audio/wav;base64 URI."""
    return await runner.invoke(TEXT_TO_SPEECH, {"text": text})
