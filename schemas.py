# schemas.py
from typing import Annotated, List, Literal

from pydantic import BaseModel, Field

# Bounded scores used across flow outputs
Score100 = Annotated[float, Field(ge=0, le=100)]
Score10 = Annotated[float, Field(ge=1, le=10)]

NonEmptyStr = Annotated[str, Field(min_length=1)]

Role = Literal["Interviewer", "Candidate", "System"]


class ConversationTurn(BaseModel):
    role: Role
    text: str


ConversationHistory = List[ConversationTurn]
