"""IntakeSession: per-user symptom list, analysis state and voice hand-off."""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path

from symptom_assist.audio.files import delete_recording, recording_filename
from symptom_assist.audio.recording import RecordingSession
from symptom_assist.config import settings
from symptom_assist.errors import NoSymptomsError, SymptomIndexError
from symptom_assist.gemini.gateway import AIGateway
from symptom_assist.models import DiagnosisResult, Symptom

logger = logging.getLogger(__name__)


class IntakeSession:
    """Symptoms collected so far plus the state of the current analysis."""

    def __init__(self) -> None:
        self.symptoms: list[Symptom] = []
        self.is_analyzing = False
        self.last_diagnosis: DiagnosisResult | None = None
        self.follow_ups: list[tuple[str, str]] = []

    def add_symptom(self, symptom: Symptom) -> None:
        self.symptoms.append(symptom)

    def add_symptoms(self, symptoms: list[Symptom]) -> None:
        self.symptoms.extend(symptoms)

    def remove_symptom(self, index: int) -> Symptom:
        if index < 0 or index >= len(self.symptoms):
            raise SymptomIndexError(
                f"No symptom at position {index}.",
                details={"index": index, "count": len(self.symptoms)},
            )
        return self.symptoms.pop(index)

    def clear(self) -> None:
        self.symptoms = []
        self.last_diagnosis = None
        self.follow_ups = []

    async def analyze(self, gateway: AIGateway) -> DiagnosisResult:
        """Run an analysis; is_analyzing is back to False whatever the outcome."""
        if not self.symptoms:
            raise NoSymptomsError("Add at least one symptom before analyzing.")
        self.is_analyzing = True
        try:
            result = await gateway.analyze_symptoms(list(self.symptoms))
        except Exception:
            logger.warning("Symptom analysis failed.", exc_info=True)
            raise
        finally:
            self.is_analyzing = False
        self.last_diagnosis = result
        return result

    async def ask_follow_up(self, gateway: AIGateway, question: str) -> str:
        answer = await gateway.ask_follow_up(question)
        self.follow_ups.append((question, answer))
        return answer

    def reset(self, gateway: AIGateway) -> None:
        """Start a fresh intake: empty symptom list and an empty conversation."""
        self.clear()
        gateway.reset_conversation()


async def extract_from_recording(
    recording: RecordingSession,
    gateway: AIGateway,
) -> list[Symptom]:
    """Stop the recording and turn it into symptoms. The file is always deleted."""
    path = await recording.stop()
    try:
        await asyncio.to_thread(recording.validate, gateway.audio_max_bytes)
        return await gateway.extract_symptoms_from_audio(path)
    finally:
        await asyncio.to_thread(delete_recording, path)


async def extract_from_upload(
    audio_bytes: bytes,
    gateway: AIGateway,
    directory: str | Path | None = None,
) -> list[Symptom]:
    """Persist uploaded audio, extract symptoms from it, then delete it."""
    target_dir = Path(directory or settings.recordings_dir)
    path = target_dir / recording_filename()

    def _write() -> None:
        target_dir.mkdir(parents=True, exist_ok=True)
        path.write_bytes(audio_bytes)

    await asyncio.to_thread(_write)
    try:
        return await gateway.extract_symptoms_from_audio(path)
    finally:
        await asyncio.to_thread(delete_recording, path)
