# jd_analyzer.py
from typing import List, Literal, Optional, Sequence

from pydantic import BaseModel, Field

from file_utils import DataUri
from flow_runner import FlowRunner, FlowSpec
from schemas import NonEmptyStr


# ---------- Parse an uploaded JD document ----------

class ParseJobDescriptionInput(BaseModel):
    job_description_data_uri: DataUri


class ParseJobDescriptionOutput(BaseModel):
    title: Optional[str] = None
    description: Optional[str] = None
    skills_required: Optional[List[str]] = None
    location: Optional[str] = None
    department: Optional[str] = None


SYSTEM_PROMPT_JD = """
You analyse job description documents for a recruiting team.

Extract:
- title: the primary job title
- description: the main body of the posting (responsibilities, qualifications,
  company information); this may be long
- skills_required: every distinct technical skill, soft skill, tool, language,
  framework and qualification mentioned
- location: the work location, noting remote options
- department: the most likely department (Engineering, Sales, Marketing,
  Product, HR, ...)

Omit a field if it is not reasonably inferable. Return STRICT JSON.
"""

JD_PROMPT = """
Job Description Document:
{{ media(job_description_data_uri) }}
"""

PARSE_JOB_DESCRIPTION = FlowSpec(
    name="parse_job_description",
    input_model=ParseJobDescriptionInput,
    output_model=ParseJobDescriptionOutput,
    prompt=JD_PROMPT,
    system=SYSTEM_PROMPT_JD,
)


async def parse_job_description(runner: FlowRunner, job_description_data_uri: str) -> ParseJobDescriptionOutput:
    return await runner.invoke(
        PARSE_JOB_DESCRIPTION,
        {"job_description_data_uri": job_description_data_uri},
    )


# ---------- Ideal candidate profile ----------

class GenerateICPInput(BaseModel):
    job_description: NonEmptyStr
    job_title: Optional[str] = None


class GenerateICPOutput(BaseModel):
    profile_name: str
    job_title: str
    key_skills: List[str] = Field(description="5-10 core skills.")
    experience_level: str = Field(description='e.g. "Mid-Level (3-5 years)".')
    education_requirements: str
    location_preferences: str
    company_background: Optional[str] = None
    cultural_fit_notes: str


SYSTEM_PROMPT_ICP = """
You are a talent acquisition specialist who writes Ideal Candidate Profiles.

Fields:
- profile_name: "AI-Generated Profile for <job title>" when a title is known,
  otherwise "AI-Generated Profile"
- job_title: the given title, or one inferred from the description
- key_skills: the 5-10 most critical technical and soft skills
- experience_level: specific, e.g. "Senior (5+ years)"; use stated years when present
- education_requirements: minimum or preferred qualifications
- location_preferences: e.g. "Remote", "On-site in Austin, TX", "Hybrid"
- company_background: optional; preferred prior company types or industries
- cultural_fit_notes: 2-3 cultural attributes the description emphasises

Base everything on the job description only. Return STRICT JSON.
"""

ICP_PROMPT = """
Generate an Ideal Candidate Profile from the job description below{% if job_title %} for the role of "{{ job_title }}"{% endif %}.

Job Description:
\"\"\"{{ job_description | required }}\"\"\"
"""

GENERATE_ICP = FlowSpec(
    name="generate_icp_from_job_description",
    input_model=GenerateICPInput,
    output_model=GenerateICPOutput,
    prompt=ICP_PROMPT,
    system=SYSTEM_PROMPT_ICP,
)


async def generate_icp_from_job_description(
    runner: FlowRunner,
    job_description: str,
    job_title: Optional[str] = None,
) -> GenerateICPOutput:
    return await runner.invoke(
        GENERATE_ICP,
        {"job_description": job_description, "job_title": job_title},
    )


# ---------- Write a JD from skills ----------

class GenerateJobDescriptionInput(BaseModel):
    skills: List[str] = Field(min_length=1)
    job_title: NonEmptyStr
    company_name: NonEmptyStr
    tone: Literal["formal", "informal"] = "informal"


class GenerateJobDescriptionOutput(BaseModel):
    job_description: NonEmptyStr


SYSTEM_PROMPT_JD_WRITER = """
You are an HR assistant who writes clear, engaging job descriptions.
Cover the role summary, responsibilities, required skills and what the company
offers. Match the requested tone. Return STRICT JSON: {"job_description": "..."}
"""

JD_WRITER_PROMPT = """
Skills: {{ skills | join(", ") }}
Job Title: {{ job_title | required }}
Company Name: {{ company_name | required }}
Tone: {{ tone }}
"""

GENERATE_JOB_DESCRIPTION = FlowSpec(
    name="generate_job_description_from_skills",
    input_model=GenerateJobDescriptionInput,
    output_model=GenerateJobDescriptionOutput,
    prompt=JD_WRITER_PROMPT,
    system=SYSTEM_PROMPT_JD_WRITER,
)


async def generate_job_description_from_skills(
    runner: FlowRunner,
    skills: Sequence[str],
    job_title: str,
    company_name: str,
    tone: str = "informal",
) -> GenerateJobDescriptionOutput:
    return await runner.invoke(
        GENERATE_JOB_DESCRIPTION,
        {
            "skills": list(skills),
            "job_title": job_title,
            "company_name": company_name,
            "tone": tone,
        },
    )
