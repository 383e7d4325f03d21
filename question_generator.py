# question_generator.py
from typing import Any, Dict, List, Sequence, Union

from pydantic import BaseModel, Field

from file_utils import DataUri
from flow_runner import FlowRunner, FlowSpec
from schemas import ConversationHistory, ConversationTurn, NonEmptyStr

MAX_INTERVIEW_QUESTIONS = 7


# ---------- Fixed question set ----------

class GenerateInterviewQuestionsInput(BaseModel):
    job_description_data_uri: DataUri
    resume_data_uri: DataUri


class GenerateInterviewQuestionsOutput(BaseModel):
    questions: List[NonEmptyStr] = Field(
        min_length=1,
        max_length=MAX_INTERVIEW_QUESTIONS,
        description="5-7 technical, behavioral and situational questions.",
    )


SYSTEM_PROMPT_QUESTIONS = """
You are an experienced HR interviewer designing questions for one candidate.

1) Compare the candidate's resume with the job description.
2) Find areas to probe: claimed expertise to validate, gaps, cultural fit.
3) Write a mix of:
   - technical questions verifying skills present in both documents
   - behavioral questions ("Tell me about a time when...")
   - situational questions about scenarios relevant to the role
4) Questions must be open-ended and sound like a real hiring manager.
5) Generate 5-7 questions, never more than 7, and never the same question twice.

Return STRICT JSON: {"questions": ["...", "..."]}
"""

QUESTIONS_PROMPT = """
Candidate Resume:
{{ media(resume_data_uri) }}

Job Description:
{{ media(job_description_data_uri) }}
"""

GENERATE_INTERVIEW_QUESTIONS = FlowSpec(
    name="generate_interview_questions",
    input_model=GenerateInterviewQuestionsInput,
    output_model=GenerateInterviewQuestionsOutput,
    prompt=QUESTIONS_PROMPT,
    system=SYSTEM_PROMPT_QUESTIONS,
)


async def generate_interview_questions(
    runner: FlowRunner,
    job_description_data_uri: str,
    resume_data_uri: str,
) -> GenerateInterviewQuestionsOutput:
    return await runner.invoke(
        GENERATE_INTERVIEW_QUESTIONS,
        {
            "job_description_data_uri": job_description_data_uri,
            "resume_data_uri": resume_data_uri,
        },
    )


# ---------- Conversational interview ----------

class DynamicInterviewInput(BaseModel):
    job_description_data_uri: DataUri
    resume_data_uri: DataUri
    conversation_history: ConversationHistory = Field(default_factory=list)


class DynamicInterviewOutput(BaseModel):
    next_question: NonEmptyStr


SYSTEM_PROMPT_DYNAMIC = """
You are Intelli, a friendly and professional AI interviewer.
Using the job description, the candidate's resume and the conversation so far,
choose the single best next question to ask.

- If there is no conversation yet (or only system messages), ask an engaging,
  open-ended first question grounded in the resume and the role. No greeting.
- Otherwise react to the candidate's last answer: ask a follow-up or move to a
  new topic smoothly. Do not repeat earlier questions.

Return STRICT JSON: {"next_question": "..."}
"""

DYNAMIC_PROMPT = """
Job Description:
{{ media(job_description_data_uri) }}

Candidate's Resume:
{{ media(resume_data_uri) }}

Conversation History:
{% for turn in conversation_history %}
{{ turn.role }}: {{ turn.text }}
{% else %}
(no conversation yet)
{% endfor %}
"""

DYNAMIC_INTERVIEW = FlowSpec(
    name="dynamic_interview",
    input_model=DynamicInterviewInput,
    output_model=DynamicInterviewOutput,
    prompt=DYNAMIC_PROMPT,
    system=SYSTEM_PROMPT_DYNAMIC,
)


async def next_interview_question(
    runner: FlowRunner,
    job_description_data_uri: str,
    resume_data_uri: str,
    conversation_history: Sequence[Union[ConversationTurn, Dict[str, Any]]] = (),
) -> DynamicInterviewOutput:
    return await runner.invoke(
        DYNAMIC_INTERVIEW,
        {
            "job_description_data_uri": job_description_data_uri,
            "resume_data_uri": resume_data_uri,
            "conversation_history": list(conversation_history),
        },
    )


# ---------- Personalised welcome ----------

class GenerateIntroInput(BaseModel):
    resume_data_uri: DataUri
    candidate_name: NonEmptyStr
    job_title: NonEmptyStr


class GenerateIntroOutput(BaseModel):
    introduction: NonEmptyStr


INTRO_PROMPT = """
You are Intelli, a friendly and professional AI interviewer.
Write a brief, warm welcome message for {{ candidate_name | required }}, who is
interviewing for the {{ job_title | required }} position.

1. Find one specific, positive detail in the resume (a project, a skill, a notable employer).
2. Write 2-3 sentences addressing the candidate by name and mentioning that detail.
3. Say that the interview is about to begin.

Return only the message, as JSON: {"introduction": "..."}

Resume:
{{ media(resume_data_uri) }}
"""

GENERATE_PERSONALIZED_INTRO = FlowSpec(
    name="generate_personalized_intro",
    input_model=GenerateIntroInput,
    output_model=GenerateIntroOutput,
    prompt=INTRO_PROMPT,
)


async def generate_personalized_intro(
    runner: FlowRunner,
    resume_data_uri: str,
    candidate_name: str,
    job_title: str,
) -> GenerateIntroOutput:
    return await runner.invoke(
        GENERATE_PERSONALIZED_INTRO,
        {
            "resume_data_uri": resume_data_uri,
            "candidate_name": candidate_name,
            "job_title": job_title,
        },
    )
