from datetime import datetime, timezone
import json
import logging
from pathlib import Path
from threading import Lock
from typing import Any

from google import genai
from google.genai import types

from symptom_assist.config import settings
from symptom_assist.errors import BackendAuthError

_client: genai.Client | None = None
logger = logging.getLogger(__name__)
_log_write_lock = Lock()

SAFETY_CATEGORIES = (
    types.HarmCategory.HARM_CATEGORY_HARASSMENT,
    types.HarmCategory.HARM_CATEGORY_HATE_SPEECH,
    types.HarmCategory.HARM_CATEGORY_DANGEROUS_CONTENT,
)


def _gemini_log_path() -> Path:
    log_path = Path(settings.gemini_log_path)
    if log_path.is_absolute():
        return log_path
    project_root = Path(__file__).resolve().parents[2]
    return project_root / log_path


def append_call_log(record: dict) -> None:
    """Append one backend call record to the JSONL call log, if enabled."""
    if not settings.gemini_log_enabled:
        return

    path = _gemini_log_path()
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        line = json.dumps(record, ensure_ascii=False, default=str)
        with _log_write_lock:
            with path.open("a", encoding="utf-8") as f:
                f.write(line + "\n")
    except Exception:
        logger.exception("Failed to write Gemini request log.")


def build_call_record(
    *,
    call_id: str,
    call_type: str,
    prompt: str,
    output: str | None,
    latency_ms: int,
    error: Exception | None = None,
    extra: dict[str, Any] | None = None,
) -> dict[str, Any]:
    return {
        "ts_utc": datetime.now(timezone.utc).isoformat(),
        "call_id": call_id,
        "call_type": call_type,
        "model": settings.gemini_model,
        "temperature": settings.gemini_temperature,
        "top_k": settings.gemini_top_k,
        "top_p": settings.gemini_top_p,
        "max_output_tokens": settings.gemini_max_output_tokens,
        "prompt": prompt,
        "output": output,
        "latency_ms": latency_ms,
        "success": error is None,
        "error_type": error.__class__.__name__ if error is not None else None,
        "error_message": str(error) if error is not None else None,
        **(extra or {}),
    }


def build_safety_settings() -> list[types.SafetySetting]:
    threshold = types.HarmBlockThreshold(settings.gemini_safety_threshold)
    return [
        types.SafetySetting(category=category, threshold=threshold)
        for category in SAFETY_CATEGORIES
    ]


def build_generation_config() -> types.GenerateContentConfig:
    return types.GenerateContentConfig(
        temperature=settings.gemini_temperature,
        top_k=settings.gemini_top_k,
        top_p=settings.gemini_top_p,
        max_output_tokens=settings.gemini_max_output_tokens,
        safety_settings=build_safety_settings(),
    )


def get_client() -> genai.Client:
    global _client
    if _client is None:
        if not settings.gemini_api_key:
            raise BackendAuthError(
                "GEMINI_API_KEY is not configured. Set it in the environment or .env file."
            )
        _client = genai.Client(api_key=settings.gemini_api_key)
    return _client


def text_content(role: str, text: str) -> types.Content:
    return types.Content(role=role, parts=[types.Part.from_text(text=text)])


def audio_content(prompt: str, audio_bytes: bytes, mime_type: str) -> types.Content:
    return types.Content(
        role="user",
        parts=[
            types.Part.from_text(text=prompt),
            types.Part.from_bytes(data=audio_bytes, mime_type=mime_type),
        ],
    )
