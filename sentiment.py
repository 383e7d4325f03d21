# sentiment.py
from pydantic import BaseModel

from flow_runner import FlowRunner, FlowSpec
from schemas import NonEmptyStr

SYSTEM_PROMPT_SENTIMENT = """
You are an expert recruiter who reads candidate email threads and judges how the
candidate feels about the opportunity: enthusiasm, hesitation, concerns about
compensation or timing, competing offers, and overall engagement.

Summarise the candidate's sentiment in one short paragraph.
Return STRICT JSON: {"sentiment_summary": "..."}
"""

SENTIMENT_PROMPT = """
Email Communications:
\"\"\"{{ email_communications | required }}\"\"\"
"""


class SentimentInput(BaseModel):
    email_communications: NonEmptyStr


class SentimentOutput(BaseModel):
    sentiment_summary: NonEmptyStr


ANALYZE_CANDIDATE_SENTIMENT = FlowSpec(
    name="analyze_candidate_sentiment",
    input_model=SentimentInput,
    output_model=SentimentOutput,
    prompt=SENTIMENT_PROMPT,
    system=SYSTEM_PROMPT_SENTIMENT,
)


async def analyze_candidate_sentiment(runner: FlowRunner, email_communications: str) -> SentimentOutput:
    return await runner.invoke(
        ANALYZE_CANDIDATE_SENTIMENT,
        {"email_communications": email_communications},
    )
