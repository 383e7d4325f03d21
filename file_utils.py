# file_utils.py
import base64
import binascii
import io
import re
import wave
from typing import Annotated, Tuple

from pydantic import AfterValidator

# data:<mime>[;param=value...];base64,<payload>
_DATA_URI_RE = re.compile(
    r"^data:(?P<mime>[^;,\s]+)(?P<params>(?:;[^;,]+)*?);base64,(?P<payload>.*)$",
    re.DOTALL,
)


class DataUriError(ValueError):
    pass


def parse_data_uri(uri: str) -> Tuple[str, bytes]:
    """
    Split a data URI into (mime_type, decoded bytes).
    Raises DataUriError if the URI is not a Base64 data URI.
    """
    if not isinstance(uri, str):
        raise DataUriError("data URI must be a string")

    match = _DATA_URI_RE.match(uri.strip())
    if not match:
        raise DataUriError(
            "expected 'data:<mimetype>;base64,<encoded_data>'"
        )

    payload = re.sub(r"\s+", "", match.group("payload"))
    try:
        data = base64.b64decode(payload, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise DataUriError(f"invalid Base64 payload: {exc}") from exc

    return match.group("mime").lower(), data


def to_data_uri(data: bytes, mime_type: str) -> str:
    if not mime_type or "/" not in mime_type:
        raise DataUriError(f"invalid MIME type: {mime_type!r}")
    encoded = base64.b64encode(data).decode("ascii")
    return f"data:{mime_type};base64,{encoded}"


def _check_data_uri(value: str) -> str:
    parse_data_uri(value)
    return value


# Pydantic field type for inputs carrying a binary document
DataUri = Annotated[str, AfterValidator(_check_data_uri)]


def pcm_to_wav(
    pcm: bytes,
    channels: int = 1,
    sample_rate: int = 24000,
    sample_width: int = 2,
) -> bytes:
    """
    Wrap raw little-endian PCM samples in a RIFF/WAVE container.
    Defaults match Gemini TTS output: mono, 24 kHz, 16-bit.
    """
    buf = io.BytesIO()
    with wave.open(buf, "wb") as wf:
        wf.setnchannels(channels)
        wf.setsampwidth(sample_width)
        wf.setframerate(sample_rate)
        wf.writeframes(pcm)
    return buf.getvalue()
