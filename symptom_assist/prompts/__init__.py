"""Centralized prompt templates for all Gemini calls.

Import any prompt directly:
    from symptom_assist.prompts import AUDIO_EXTRACTION_PROMPT, build_diagnosis_prompt
"""

from symptom_assist.prompts.audio_extraction import AUDIO_EXTRACTION_PROMPT
from symptom_assist.prompts.diagnosis import (
    DIAGNOSIS_PROMPT,
    build_diagnosis_prompt,
    format_symptom_bullets,
)

__all__ = [
    "AUDIO_EXTRACTION_PROMPT",
    "DIAGNOSIS_PROMPT",
    "build_diagnosis_prompt",
    "format_symptom_bullets",
]
