# evaluator.py
from typing import Any, Dict, List, Sequence, Union

from pydantic import BaseModel, Field

from config import PRO_MODEL
from flow_runner import FlowRunner, FlowSpec
from schemas import ConversationHistory, ConversationTurn, Score100

SYSTEM_PROMPT_EVAL = """
You are an expert technical recruiter analysing a completed interview.

1. transcript: a clean, verbatim transcript formatted as
   "Interviewer: ...\\nCandidate: ...\\n\\n". Leave out System messages.
2. Evaluate clarity, technical knowledge, problem solving and communication.
3. overall_score: 0-100 for the whole interview.
   question_scores: one entry per question asked, each with the question,
   a 0-100 score and 1-2 sentences of reasoning citing the answer.
4. summary: 2-3 sentences on overall performance.
5. strengths: 3-5 points. weaknesses: 2-3 points.

Return STRICT JSON with exactly these keys.
"""

EVAL_PROMPT = """
Full Interview Transcript:
{% for turn in conversation_history %}
{{ turn.role }}: {{ turn.text }}
{% endfor %}
"""


class InterviewAnalysisInput(BaseModel):
    conversation_history: ConversationHistory = Field(min_length=1)


class QuestionScore(BaseModel):
    question: str
    score: Score100
    reasoning: str


class InterviewAnalysis(BaseModel):
    transcript: str
    summary: str
    overall_score: Score100
    question_scores: List[QuestionScore]
    strengths: List[str]
    weaknesses: List[str]


ANALYZE_INTERVIEW_PERFORMANCE = FlowSpec(
    name="analyze_interview_performance",
    input_model=InterviewAnalysisInput,
    output_model=InterviewAnalysis,
    prompt=EVAL_PROMPT,
    system=SYSTEM_PROMPT_EVAL,
    model_id=PRO_MODEL,
)


async def analyze_interview_performance(
    runner: FlowRunner,
    conversation_history: Sequence[Union[ConversationTurn, Dict[str, Any]]],
) -> InterviewAnalysis:
    """
    Score a full interview transcript: overall and per question, with
    strengths and weaknesses.
    """
    return await runner.invoke(
        ANALYZE_INTERVIEW_PERFORMANCE,
        {"conversation_history": list(conversation_history)},
    )
