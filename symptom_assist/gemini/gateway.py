"""AI gateway: the only component that talks to the Gemini backend.

Analysis and follow-up calls share one conversation and are serialized per
gateway instance, so turns are always appended in the order they were sent.
Audio extraction is a one-shot call and never touches the conversation.
"""

from __future__ import annotations

import asyncio
from collections.abc import Iterable
import logging
from pathlib import Path
import time
from typing import Any
from uuid import uuid4

from google.genai import errors as genai_errors
from google.genai import types

from symptom_assist.audio.files import validate_audio_file
from symptom_assist.config import settings
from symptom_assist.errors import (
    BackendAuthError,
    BackendError,
    BackendQuotaError,
    EmptyResponseError,
    RequestTimeoutError,
    SymptomAssistError,
    UnknownGatewayError,
)
from symptom_assist.gemini.client import (
    append_call_log,
    audio_content,
    build_call_record,
    build_generation_config,
    get_client,
    text_content,
)
from symptom_assist.gemini.interpreter import interpret_diagnosis
from symptom_assist.gemini.json_utils import parse_symptom_list
from symptom_assist.models import ConversationTurn, DiagnosisResult, Symptom
from symptom_assist.prompts import AUDIO_EXTRACTION_PROMPT, build_diagnosis_prompt

logger = logging.getLogger(__name__)

NO_RESPONSE_TEXT = "No response generated"


def backend_error_type(message: str) -> type[BackendError]:
    """Pick the error type for a backend failure message.

    Substring matching only; the backend exposes no structured reason here.
    """
    if "API key" in message:
        return BackendAuthError
    if "quota" in message:
        return BackendQuotaError
    return BackendError


def classify_backend_error(exc: Exception) -> SymptomAssistError:
    """Map an arbitrary failure to a typed gateway error."""
    if isinstance(exc, SymptomAssistError):
        return exc
    if isinstance(exc, genai_errors.APIError):
        message = str(exc)
        details = {"backend_message": message, "backend_code": getattr(exc, "code", None)}
        error_type = backend_error_type(message)
        if error_type is BackendAuthError:
            return BackendAuthError(
                "Invalid API key. Please check your configuration.", details=details
            )
        if error_type is BackendQuotaError:
            return BackendQuotaError(
                "API quota exceeded. Please try again later.", details=details
            )
        return BackendError(f"AI service error: {message}", details=details)
    return UnknownGatewayError(
        f"Unexpected AI gateway failure: {exc}",
        details={"error_type": exc.__class__.__name__},
    )


class Conversation:
    """Ordered, append-only history of prompt/response turns."""

    def __init__(self) -> None:
        self._turns: list[ConversationTurn] = []

    @property
    def turns(self) -> tuple[ConversationTurn, ...]:
        return tuple(self._turns)

    def append(self, turn: ConversationTurn) -> None:
        self._turns.append(turn)

    def to_contents(self) -> list[types.Content]:
        """Backend history; turns whose reply was empty or blocked are left out."""
        contents: list[types.Content] = []
        for turn in self._turns:
            if not turn.response.strip():
                continue
            contents.append(text_content("user", turn.prompt))
            contents.append(text_content("model", turn.response))
        return contents

    def __len__(self) -> int:
        return len(self._turns)


class AIGateway:
    """Owns the conversation with Gemini and exposes the three AI operations."""

    def __init__(
        self,
        client: Any | None = None,
        analyze_timeout_seconds: float | None = None,
        audio_max_bytes: int | None = None,
        audio_mime_type: str | None = None,
    ) -> None:
        self._client = client
        self.analyze_timeout_seconds = (
            analyze_timeout_seconds
            if analyze_timeout_seconds is not None
            else settings.analyze_timeout_seconds
        )
        self.audio_max_bytes = audio_max_bytes or settings.audio_max_bytes
        self.audio_mime_type = audio_mime_type or settings.audio_mime_type
        self._conversation = Conversation()
        self._turn_lock = asyncio.Lock()

    @property
    def client(self) -> Any:
        if self._client is None:
            self._client = get_client()
        return self._client

    @property
    def conversation(self) -> Conversation:
        return self._conversation

    @property
    def history(self) -> tuple[ConversationTurn, ...]:
        return self._conversation.turns

    def reset_conversation(self) -> None:
        """Start over with an empty conversation."""
        self._conversation = Conversation()
        logger.info("Conversation reset.")

    async def _generate(
        self,
        contents: list[types.Content],
        *,
        call_type: str,
        prompt: str,
        timeout: float | None = None,
    ) -> str | None:
        call_id = str(uuid4())
        started = time.perf_counter()
        try:
            request = self.client.aio.models.generate_content(
                model=settings.gemini_model,
                contents=contents,
                config=build_generation_config(),
            )
            if timeout is not None:
                response = await asyncio.wait_for(request, timeout=timeout)
            else:
                response = await request
        except Exception as exc:
            elapsed_ms = int((time.perf_counter() - started) * 1000)
            append_call_log(
                build_call_record(
                    call_id=call_id,
                    call_type=call_type,
                    prompt=prompt,
                    output=None,
                    latency_ms=elapsed_ms,
                    error=exc,
                )
            )
            logger.warning("Gemini %s call failed (%s).", call_type, exc.__class__.__name__)
            raise

        text = response.text
        elapsed_ms = int((time.perf_counter() - started) * 1000)
        append_call_log(
            build_call_record(
                call_id=call_id,
                call_type=call_type,
                prompt=prompt,
                output=text,
                latency_ms=elapsed_ms,
            )
        )
        return text

    async def _send_turn(
        self,
        prompt: str,
        *,
        call_type: str,
        timeout: float | None = None,
    ) -> str | None:
        async with self._turn_lock:
            conversation = self._conversation
            contents = conversation.to_contents()
            contents.append(text_content("user", prompt))
            text = await self._generate(
                contents,
                call_type=call_type,
                prompt=prompt,
                timeout=timeout,
            )
            # A reset during the call swaps the conversation; the turn stays
            # with the one it was sent from.
            conversation.append(ConversationTurn(prompt=prompt, response=text or ""))
            return text

    async def analyze_symptoms(self, symptoms: Iterable[Symptom]) -> DiagnosisResult:
        """Send the diagnosis prompt as a new turn and interpret the reply."""
        prompt = build_diagnosis_prompt(symptoms)
        try:
            text = await self._send_turn(
                prompt,
                call_type="analyze_symptoms",
                timeout=self.analyze_timeout_seconds,
            )
        except asyncio.TimeoutError as exc:
            raise RequestTimeoutError(
                "Request timed out. Please check your internet connection.",
                details={"timeout_seconds": self.analyze_timeout_seconds},
            ) from exc
        except SymptomAssistError:
            raise
        except Exception as exc:
            raise classify_backend_error(exc) from exc

        if not text or not text.strip():
            raise EmptyResponseError("Received empty response from AI.")
        return interpret_diagnosis(text)

    async def extract_symptoms_from_audio(self, audio_path: str | Path) -> list[Symptom]:
        """Extract symptoms from a recording with a one-shot request."""
        path = Path(audio_path)
        await asyncio.to_thread(validate_audio_file, path, self.audio_max_bytes)
        audio_bytes = await asyncio.to_thread(path.read_bytes)

        contents = [audio_content(AUDIO_EXTRACTION_PROMPT, audio_bytes, self.audio_mime_type)]
        try:
            text = await self._generate(
                contents,
                call_type="extract_symptoms_from_audio",
                prompt=AUDIO_EXTRACTION_PROMPT,
            )
        except SymptomAssistError:
            raise
        except Exception as exc:
            raise classify_backend_error(exc) from exc

        if not text or not text.strip():
            raise EmptyResponseError("Failed to extract symptoms: Empty response from AI.")
        symptoms = parse_symptom_list(text)
        logger.info("Extracted %d symptom(s) from %s", len(symptoms), path.name)
        return symptoms

    async def ask_follow_up(self, question: str) -> str:
        """Send a free-text question in the same conversation."""
        try:
            text = await self._send_turn(question, call_type="follow_up")
        except BackendError:
            raise
        except Exception as exc:
            classified = classify_backend_error(exc)
            if isinstance(classified, BackendError):
                raise classified from exc
            raise BackendError(f"Failed to process follow-up: {exc}") from exc
        return text or NO_RESPONSE_TEXT
