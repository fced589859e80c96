from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator

from symptom_assist.config import settings


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


# --- Symptoms ---

class Symptom(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    severity: int = Field(ge=1, le=10, strict=True)
    duration: str
    description: str | None = None

    @field_validator("name")
    @classmethod
    def _name_not_blank(cls, value: str) -> str:
        cleaned = value.strip()
        if not cleaned:
            raise ValueError("symptom name must not be empty")
        return cleaned

    def to_prompt_string(self) -> str:
        suffix = f" - {self.description}" if self.description is not None else ""
        return (
            f"{self.name} (Severity: {self.severity}/10, "
            f"Duration: {self.duration}){suffix}"
        )

    def __str__(self) -> str:
        return self.to_prompt_string()


# --- Diagnosis ---

class UrgencyLevel(str, Enum):
    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"
    EMERGENCY = "Emergency"


class DiagnosisResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    possible_conditions: list[str] = Field(min_length=1)
    recommended_actions: str
    urgency_level: UrgencyLevel = UrgencyLevel.MEDIUM
    additional_notes: str
    timestamp: datetime = Field(default_factory=_utcnow)


# --- Conversation ---

class ConversationTurn(BaseModel):
    model_config = ConfigDict(frozen=True)

    prompt: str
    response: str
    timestamp: datetime = Field(default_factory=_utcnow)


# --- Recording ---

class RecordingState(str, Enum):
    IDLE = "idle"
    RECORDING = "recording"
    STOPPED = "stopped"
    CANCELLED = "cancelled"


class AudioRecordConfig(BaseModel):
    encoder: str = Field(default_factory=lambda: settings.audio_encoder)
    bit_rate: int = Field(default_factory=lambda: settings.audio_bit_rate)
    sample_rate: int = Field(default_factory=lambda: settings.audio_sample_rate)
    file_extension: str = Field(default_factory=lambda: settings.audio_file_extension)
    mime_type: str = Field(default_factory=lambda: settings.audio_mime_type)


# --- HTTP payloads ---

class FollowUpRequest(BaseModel):
    question: str = Field(min_length=1)


class FollowUpResponse(BaseModel):
    answer: str


class SymptomListResponse(BaseModel):
    symptoms: list[Symptom] = Field(default_factory=list)
    is_analyzing: bool = False
