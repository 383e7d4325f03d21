# errors.py
from typing import Optional


class FlowError(Exception):
    """Base class for every failure a flow invocation can raise."""

    def __init__(self, message: str, *, flow: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.flow = flow

    def __str__(self) -> str:
        if self.flow:
            return f"[{self.flow}] {self.message}"
        return self.message


class InputValidationError(FlowError):
    """The flow input did not satisfy its schema. No model call was made."""

    def __init__(self, message: str, *, flow: Optional[str] = None, errors=None):
        super().__init__(message, flow=flow)
        self.errors = errors or []


class PromptRenderError(InputValidationError):
    """A field the prompt template marks as required was missing."""


class NoOutputError(FlowError):
    """The model returned nothing, or something that failed the output schema."""

    def __init__(self, message: str, *, flow: Optional[str] = None, errors=None):
        super().__init__(message, flow=flow)
        self.errors = errors or []


class TransportError(FlowError):
    """The call to the model endpoint itself failed (network, auth, quota)."""
