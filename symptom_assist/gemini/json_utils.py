"""Shared JSON cleanup helpers for model responses."""

import json

from pydantic import ValidationError

from symptom_assist.errors import MalformedResponseError
from symptom_assist.models import Symptom


def clean_json_response(text: str) -> str:
    """Strip markdown code fences and surrounding whitespace from JSON-like text."""
    cleaned = text.strip()
    if cleaned.startswith("```"):
        first_newline = cleaned.find("\n")
        if first_newline != -1:
            cleaned = cleaned[first_newline + 1 :]
        else:
            # Single-line fence such as ```json [...]```
            cleaned = cleaned[3:]
            if cleaned.lower().startswith("json"):
                cleaned = cleaned[4:]
    if cleaned.endswith("```"):
        cleaned = cleaned[:-3]
    return cleaned.strip()


def parse_symptom_list(raw: str) -> list[Symptom]:
    """Decode a JSON array of symptom objects; severity is never clamped."""
    cleaned = clean_json_response(raw)
    try:
        data = json.loads(cleaned)
    except json.JSONDecodeError as exc:
        raise MalformedResponseError(
            f"Symptom extraction reply is not valid JSON: {exc}",
            details={"raw": raw},
        ) from exc

    if not isinstance(data, list):
        raise MalformedResponseError(
            "Symptom extraction reply must be a JSON array.",
            details={"raw": raw},
        )

    symptoms: list[Symptom] = []
    for index, item in enumerate(data):
        if not isinstance(item, dict):
            raise MalformedResponseError(
                f"Symptom entry {index} is not a JSON object.",
                details={"index": index},
            )
        try:
            symptoms.append(Symptom.model_validate(item))
        except ValidationError as exc:
            raise MalformedResponseError(
                f"Symptom entry {index} is invalid: {exc.error_count()} validation error(s).",
                details={"index": index, "errors": exc.errors(include_url=False)},
            ) from exc
    return symptoms
