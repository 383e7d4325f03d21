# resume_matcher.py
import logging
from typing import Any, Dict, List, Optional, Sequence, Union

from pydantic import BaseModel, Field

from config import PRO_MODEL
from file_utils import DataUri
from flow_runner import FlowRunner, FlowSpec
from schemas import NonEmptyStr, Score10, Score100

logger = logging.getLogger(__name__)

# Matches scoring below this are discarded even if the model returns them
MATCH_SCORE_FLOOR = 60


# ---------- Skill extraction ----------

class ExtractSkillsInput(BaseModel):
    resume_data_uri: DataUri


class ExtractSkillsOutput(BaseModel):
    skills: List[str] = Field(description="Skills extracted from the resume.")


SYSTEM_PROMPT_SKILLS = """
You are a resume parsing expert.
Extract every distinct technical skill, tool, framework, language and soft skill
the candidate demonstrates. Return STRICT JSON: {"skills": ["...", "..."]}
"""

SKILLS_PROMPT = """
Extract the skills from this resume.

Resume:
{{ media(resume_data_uri) }}
"""

EXTRACT_SKILLS = FlowSpec(
    name="extract_skills_from_resume",
    input_model=ExtractSkillsInput,
    output_model=ExtractSkillsOutput,
    prompt=SKILLS_PROMPT,
    system=SYSTEM_PROMPT_SKILLS,
)


async def extract_skills_from_resume(runner: FlowRunner, resume_data_uri: str) -> ExtractSkillsOutput:
    return await runner.invoke(EXTRACT_SKILLS, {"resume_data_uri": resume_data_uri})


# ---------- Resume -> open jobs ----------

class JobRequisitionInput(BaseModel):
    id: NonEmptyStr
    title: str
    description: str = ""
    skills_required: List[str] = Field(default_factory=list)


class MatchResumeToJobsInput(BaseModel):
    resume_data_uri: DataUri
    open_job_requisitions: List[JobRequisitionInput]


class JobMatch(BaseModel):
    job_id: str = Field(description="ID of the matched job requisition.")
    job_title: str = Field(description="Title of the matched job requisition.")
    match_score: Score100 = Field(description="0-100, where 100 is a perfect match.")
    match_reasoning: str = Field(description="1-2 sentences on why the candidate fits.")


class MatchResumeToJobsOutput(BaseModel):
    matches: List[JobMatch]


SYSTEM_PROMPT_RESUME_MATCH = """
You are an HR specialist matching a candidate's resume to open job requisitions.

For each job where the candidate is a strong potential match (score 60 or higher
out of 100), return:
- job_id: the ID of the job requisition, exactly as given
- job_title: the title of the job requisition
- match_score: 0-100, realistic and critical
- match_reasoning: 1-2 sentences relating the candidate's skills and experience
  to the job's requirements

If the candidate fits none of the jobs, return an empty "matches" array.
Return STRICT JSON: {"matches": [...]}
"""

RESUME_MATCH_PROMPT = """
Resume:
{{ media(resume_data_uri) }}

Open Job Requisitions:
{% for job in open_job_requisitions %}
Job ID: {{ job.id | required }}
Job Title: {{ job.title }}
Description: {{ job.description }}
Required Skills: {{ job.skills_required | join(", ") if job.skills_required else "Not specified" }}
---
{% endfor %}
"""


def _skip_when_no_jobs(data: MatchResumeToJobsInput) -> Optional[Dict[str, Any]]:
    if not data.open_job_requisitions:
        return {"matches": []}
    return None


def _enforce_match_floor(
    data: MatchResumeToJobsInput,
    output: MatchResumeToJobsOutput,
) -> MatchResumeToJobsOutput:
    known_ids = {job.id for job in data.open_job_requisitions}
    kept: List[JobMatch] = []
    for match in output.matches:
        if match.job_id not in known_ids:
            logger.warning("Dropping match for unknown job id %r", match.job_id)
            continue
        if match.match_score < MATCH_SCORE_FLOOR:
            logger.debug("Dropping match %s scored %.0f", match.job_id, match.match_score)
            continue
        kept.append(match)
    return MatchResumeToJobsOutput(matches=kept)


MATCH_RESUME_TO_JOBS = FlowSpec(
    name="match_resume_to_jobs",
    input_model=MatchResumeToJobsInput,
    output_model=MatchResumeToJobsOutput,
    prompt=RESUME_MATCH_PROMPT,
    system=SYSTEM_PROMPT_RESUME_MATCH,
    short_circuit=_skip_when_no_jobs,
    postprocess=_enforce_match_floor,
)


async def match_resume_to_jobs(
    runner: FlowRunner,
    resume_data_uri: str,
    open_job_requisitions: Sequence[Union[JobRequisitionInput, Dict[str, Any]]],
) -> MatchResumeToJobsOutput:
    return await runner.invoke(
        MATCH_RESUME_TO_JOBS,
        {
            "resume_data_uri": resume_data_uri,
            "open_job_requisitions": list(open_job_requisitions),
        },
    )


# ---------- Advanced single-job analysis ----------

class JobDetails(BaseModel):
    job_title: NonEmptyStr
    job_description: str
    required_skills: List[str] = Field(default_factory=list)
    required_experience_years: float = Field(ge=0)
    required_education: str
    preferred_industry: Optional[str] = None
    location_preference: str


class AdvancedMatchingInput(BaseModel):
    candidate_data_uri: DataUri
    job_details: JobDetails


class DimensionalScores(BaseModel):
    skills_match_score: Score100
    experience_match_score: Score100
    education_match_score: Score100
    industry_match_score: Score100
    location_match_score: Score100


class DetailedAssessment(BaseModel):
    strengths: List[str] = Field(description="3-5 key strengths for this role.")
    areas_for_improvement: List[str] = Field(description="2-3 gaps for this role.")
    career_trajectory_analysis: str
    cultural_fit_score: Score10
    missing_critical_skills: List[str]


class AdvancedMatchingOutput(BaseModel):
    overall_match_percentage: Score100
    dimensional_scores: DimensionalScores
    detailed_assessment: DetailedAssessment
    match_reasoning: str
    highlighted_matched_skills: List[str]
    highlighted_matched_experience: List[str]
    generated_interview_questions: List[str]
    fit_assessment_summary: str
    improvement_recommendations: List[str]


SYSTEM_PROMPT_ADVANCED_MATCH = """
You are an expert talent acquisition specialist performing a multi-dimensional
analysis of one candidate against one job.

1) overall_match_percentage: 0-100 across all dimensions.
2) dimensional_scores (0-100 each):
   - skills_match_score: candidate skills vs required skills and the description
   - experience_match_score: years and relevance vs required experience and seniority
   - education_match_score: education vs required education
   - industry_match_score: vs preferred industry; 50 if none is given and the
     candidate's industry is unclear
   - location_match_score: vs location preference, considering remote work
3) detailed_assessment:
   - strengths: 3-5 for this role
   - areas_for_improvement: 2-3
   - career_trajectory_analysis: 1-2 sentences
   - cultural_fit_score: 1-10, assume a collaborative, proactive tech culture
   - missing_critical_skills: required skills absent from the resume (may be empty)
4) match_reasoning: 2-3 sentences explaining the overall percentage.
5) highlighted_matched_skills: top 3-5 relevant skills.
6) highlighted_matched_experience: 1-2 aligned experiences.
7) generated_interview_questions: 3-4 questions probing gaps and strengths.
8) fit_assessment_summary: 1-2 sentences.
9) improvement_recommendations: 1-2 actionable suggestions.

Base the analysis only on the resume and the job details. Return STRICT JSON.
"""

ADVANCED_MATCH_PROMPT = """
Candidate resume/profile:
{{ media(candidate_data_uri) }}

Job Details:
Title: {{ job_details.job_title | required }}
Description: {{ job_details.job_description }}
Required Skills: {{ job_details.required_skills | join(", ") if job_details.required_skills else "Not specified" }}
Required Experience (Years): {{ job_details.required_experience_years }}
Required Education: {{ job_details.required_education }}
Preferred Industry: {{ job_details.preferred_industry or "Not specified" }}
Location Preference: {{ job_details.location_preference }}
"""

ADVANCED_CANDIDATE_MATCHING = FlowSpec(
    name="advanced_candidate_matching",
    input_model=AdvancedMatchingInput,
    output_model=AdvancedMatchingOutput,
    prompt=ADVANCED_MATCH_PROMPT,
    system=SYSTEM_PROMPT_ADVANCED_MATCH,
    model_id=PRO_MODEL,
)


async def advanced_candidate_matching(
    runner: FlowRunner,
    candidate_data_uri: str,
    job_details: Union[JobDetails, Dict[str, Any]],
) -> AdvancedMatchingOutput:
    """
    Score one candidate against one job across skills, experience, education,
    industry and location, plus a written assessment.
    """
    return await runner.invoke(
        ADVANCED_CANDIDATE_MATCHING,
        {"candidate_data_uri": candidate_data_uri, "job_details": job_details},
    )
