"""Prompt template for symptom analysis."""

from __future__ import annotations

from collections.abc import Iterable

from symptom_assist.models import Symptom

DIAGNOSIS_PROMPT = """\
You are a medical AI assistant providing preliminary health assessments.
Analyze the following symptoms and provide a structured response.

**IMPORTANT DISCLAIMER:** This is NOT medical advice. Always consult a healthcare professional.

**Patient Symptoms:**
{symptoms}

**Please provide:**

1. **Possible Conditions:** List 2-3 possible conditions that match these symptoms (most likely first)

2. **Urgency Level:** Rate as Low, Medium, High, or Emergency
   - Low: Can wait for regular appointment
   - Medium: Should see doctor within a week
   - High: Should see doctor within 24-48 hours
   - Emergency: Seek immediate medical attention

3. **Recommended Actions:** What should the person do next?

4. **When to Seek Immediate Care:** List warning signs that require emergency attention

5. **Self-Care Suggestions:** Safe general recommendations (if urgency is Low/Medium)

**Format your response clearly with these sections.**
"""


def format_symptom_bullets(symptoms: Iterable[Symptom]) -> str:
    return "\n".join(f"- {symptom.to_prompt_string()}" for symptom in symptoms)


def build_diagnosis_prompt(symptoms: Iterable[Symptom]) -> str:
    """Render the analysis prompt. An empty list yields an empty bullet section."""
    return DIAGNOSIS_PROMPT.format(symptoms=format_symptom_bullets(symptoms))
