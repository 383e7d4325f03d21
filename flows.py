# flows.py
from typing import Dict

from audio_stt import TRANSCRIBE_AUDIO
from evaluator import ANALYZE_INTERVIEW_PERFORMANCE
from flow_runner import FlowSpec
from jd_analyzer import GENERATE_ICP, GENERATE_JOB_DESCRIPTION, PARSE_JOB_DESCRIPTION
from question_generator import (
    DYNAMIC_INTERVIEW,
    GENERATE_INTERVIEW_QUESTIONS,
    GENERATE_PERSONALIZED_INTRO,
)
from resume_matcher import ADVANCED_CANDIDATE_MATCHING, EXTRACT_SKILLS, MATCH_RESUME_TO_JOBS
from sentiment import ANALYZE_CANDIDATE_SENTIMENT
from tts import TEXT_TO_SPEECH


def _index(*specs: FlowSpec) -> Dict[str, FlowSpec]:
    registry: Dict[str, FlowSpec] = {}
    for spec in specs:
        if spec.name in registry:
            raise ValueError(f"duplicate flow name: {spec.name}")
        registry[spec.name] = spec
    return registry


FLOWS: Dict[str, FlowSpec] = _index(
    EXTRACT_SKILLS,
    MATCH_RESUME_TO_JOBS,
    ADVANCED_CANDIDATE_MATCHING,
    PARSE_JOB_DESCRIPTION,
    GENERATE_ICP,
    GENERATE_JOB_DESCRIPTION,
    GENERATE_INTERVIEW_QUESTIONS,
    DYNAMIC_INTERVIEW,
    GENERATE_PERSONALIZED_INTRO,
    ANALYZE_INTERVIEW_PERFORMANCE,
    ANALYZE_CANDIDATE_SENTIMENT,
    TRANSCRIBE_AUDIO,
    TEXT_TO_SPEECH,
)


def get_flow(name: str) -> FlowSpec:
    try:
        return FLOWS[name]
    except KeyError:
        raise KeyError(f"unknown flow: {name}") from None
