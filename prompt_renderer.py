"""
Prompt templates for flows.

Templates are Jinja2 source. Besides the usual substitution, ``{% if %}`` and
``{% for %}`` (with ``loop.last`` for separators), two helpers are available:

- ``{{ value | required }}`` fails the render when ``value`` is missing or None.
- ``{{ media(uri) }}`` attaches a data URI as a separate media part at that
  position instead of inlining it as text.

Missing optional fields and None render as empty text.
"""
import re
import uuid
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional, Tuple, Union

from jinja2 import ChainableUndefined, Environment, TemplateError, Undefined

from errors import PromptRenderError
from file_utils import DataUriError, parse_data_uri, to_data_uri


@dataclass(frozen=True)
class TextPart:
    text: str


@dataclass(frozen=True)
class MediaPart:
    mime_type: str
    data: bytes

    @classmethod
    def from_data_uri(cls, uri: str) -> "MediaPart":
        mime_type, data = parse_data_uri(uri)
        return cls(mime_type=mime_type, data=data)

    def to_data_uri(self) -> str:
        return to_data_uri(self.data, self.mime_type)


PromptPart = Union[TextPart, MediaPart]


def _finalize(value: Any) -> Any:
    if value is None or isinstance(value, Undefined):
        return ""
    return value


def _required(value: Any, name: Optional[str] = None) -> Any:
    if isinstance(value, Undefined) or value is None:
        field = name or getattr(value, "_undefined_name", None) or "value"
        raise PromptRenderError(f"missing required prompt field: {field}")
    return value


_env = Environment(
    undefined=ChainableUndefined,
    finalize=_finalize,
    autoescape=False,
    trim_blocks=True,
    lstrip_blocks=True,
    keep_trailing_newline=False,
)
_env.filters["required"] = _required


class _MediaCollector:
    """Per-render sink for media() calls.

    Positions are marked with a token unique to this render, so text coming
    from the variables can never be mistaken for a media position.
    """

    def __init__(self):
        self.parts: List[MediaPart] = []
        self.token = uuid.uuid4().hex
        self.pattern = re.compile("\x00%s:(\\d+)\x00" % self.token)

    def __call__(self, uri: Any) -> str:
        _required(uri, "media")
        try:
            part = MediaPart.from_data_uri(uri)
        except DataUriError as exc:
            raise PromptRenderError(f"invalid media reference: {exc}") from exc
        self.parts.append(part)
        return "\x00%s:%d\x00" % (self.token, len(self.parts) - 1)

    def part(self, index: str) -> MediaPart:
        try:
            return self.parts[int(index)]
        except IndexError:
            raise PromptRenderError(f"unknown media position: {index}") from None


class PromptTemplate:
    def __init__(self, source: str):
        if not source or not source.strip():
            raise ValueError("prompt template must not be empty")
        self.source = source
        self._template = _env.from_string(source)

    def _render_raw(self, variables: Mapping[str, Any]) -> Tuple[str, _MediaCollector]:
        collector = _MediaCollector()
        context: Dict[str, Any] = dict(variables)
        context["media"] = collector
        try:
            text = self._template.render(context)
        except PromptRenderError:
            raise
        except TemplateError as exc:
            raise PromptRenderError(f"prompt rendering failed: {exc}") from exc
        return text, collector

    def render(self, variables: Mapping[str, Any]) -> str:
        """Render the text of the prompt. Media positions are dropped."""
        text, collector = self._render_raw(variables)
        return collector.pattern.sub("", text).strip()

    def render_parts(self, variables: Mapping[str, Any]) -> List[PromptPart]:
        """Render into ordered text and media parts."""
        text, collector = self._render_raw(variables)

        parts: List[PromptPart] = []
        pieces = collector.pattern.split(text)
        # split() alternates text, media index, text, media index, ...
        for i, piece in enumerate(pieces):
            if i % 2:
                parts.append(collector.part(piece))
            elif piece.strip():
                parts.append(TextPart(piece.strip()))
        return parts
