"""Heuristic interpretation of free-text diagnosis replies.

The reply format is only loosely shaped by the prompt, so this is a line scan
rather than a parser:

* lines mentioning "condition" or "possible" are collected as conditions;
* the last line mentioning "recommend" becomes the recommended actions;
* any line mentioning "urgency" or "emergency" raises urgency to High.

Urgency is never set to Low or Emergency from the text, and the notes slot is
never filled from individual lines, so additional notes always carry the full
reply. Both are known limitations pending product review.
"""

from symptom_assist.models import DiagnosisResult, UrgencyLevel

UNDETERMINED_CONDITION = "Unable to determine from symptoms provided"
DEFAULT_RECOMMENDATION = "Please consult a healthcare professional"


def interpret_diagnosis(raw: str) -> DiagnosisResult:
    """Build a DiagnosisResult from the raw reply. Never raises."""
    conditions: list[str] = []
    recommended = ""
    urgency = UrgencyLevel.MEDIUM
    notes = ""

    for line in raw.split("\n"):
        lowered = line.lower()
        if "condition" in lowered or "possible" in lowered:
            conditions.append(line.strip())
        if "recommend" in lowered:
            recommended = line.strip()
        if "urgency" in lowered or "emergency" in lowered:
            urgency = UrgencyLevel.HIGH

    return DiagnosisResult(
        possible_conditions=conditions or [UNDETERMINED_CONDITION],
        recommended_actions=recommended or DEFAULT_RECOMMENDATION,
        urgency_level=urgency,
        additional_notes=notes or raw,
    )
