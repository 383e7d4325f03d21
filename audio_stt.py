# audio_stt.py
from pydantic import BaseModel

from file_utils import DataUri
from flow_runner import FlowRunner, FlowSpec, decode_text
from schemas import NonEmptyStr

TRANSCRIBE_PROMPT = """
Transcribe the following audio recording accurately and verbatim.
Do not add extra commentary, just the transcription.
{{ media(audio_data_uri) }}
"""


class TranscribeAudioInput(BaseModel):
    audio_data_uri: DataUri


class TranscribeAudioOutput(BaseModel):
    text: NonEmptyStr


# Plain-text reply, no response schema; blank transcripts count as no output
TRANSCRIBE_AUDIO = FlowSpec(
    name="transcribe_audio",
    input_model=TranscribeAudioInput,
    output_model=TranscribeAudioOutput,
    prompt=TRANSCRIBE_PROMPT,
    structured=False,
    decode=decode_text("text"),
)


async def transcribe_audio(runner: FlowRunner, audio_data_uri: str) -> TranscribeAudioOutput:
    """
    Use Gemini to transcribe recorded audio (any MIME type Gemini accepts,
    e.g. audio/webm from browser recorders) to text.
    """
    return await runner.invoke(TRANSCRIBE_AUDIO, {"audio_data_uri": audio_data_uri})
