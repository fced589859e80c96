"""Exception hierarchy for recording, gateway and intake failures.

Every error carries a stable ``code`` and a readable ``message`` so the HTTP
layer can surface it to the user unchanged.
"""

from __future__ import annotations

from typing import Any


class SymptomAssistError(Exception):
    """Base exception for all symptom-assist errors."""

    code = "UNKNOWN_ERROR"
    status_code = 500

    def __init__(
        self,
        message: str,
        code: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        if code is not None:
            self.code = code
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to a dictionary for API responses."""
        return {
            "error": self.code,
            "message": self.message,
            "details": self.details,
        }


# --- Recording session ---

class RecordingError(SymptomAssistError):
    code = "RECORDING_ERROR"
    status_code = 409


class PermissionDeniedError(RecordingError):
    code = "PERMISSION_DENIED"
    status_code = 403


class AlreadyRecordingError(RecordingError):
    code = "ALREADY_RECORDING"


class NotRecordingError(RecordingError):
    code = "NOT_RECORDING"


class RecordingSessionClosedError(RecordingError):
    """Raised when start() is called on a stopped or cancelled session."""

    code = "RECORDING_SESSION_CLOSED"


class RecorderError(RecordingError):
    """The underlying recorder failed; the microphone has been released."""

    code = "RECORDER_FAILURE"
    status_code = 500


# --- Audio file validation ---

class AudioValidationError(SymptomAssistError):
    code = "AUDIO_INVALID"
    status_code = 422


class AudioFileMissingError(AudioValidationError):
    code = "AUDIO_FILE_MISSING"


class AudioFileEmptyError(AudioValidationError):
    code = "AUDIO_FILE_EMPTY"


class AudioFileTooLargeError(AudioValidationError):
    code = "AUDIO_FILE_TOO_LARGE"
    status_code = 413


# --- AI gateway ---

class GatewayError(SymptomAssistError):
    code = "GATEWAY_ERROR"
    status_code = 502


class RequestTimeoutError(GatewayError):
    code = "TIMEOUT"
    status_code = 504


class EmptyResponseError(GatewayError):
    code = "EMPTY_RESPONSE"


class MalformedResponseError(GatewayError):
    code = "MALFORMED_RESPONSE"


class BackendError(GatewayError):
    code = "BACKEND_ERROR"


class BackendAuthError(BackendError):
    code = "BACKEND_AUTH_ERROR"
    status_code = 401


class BackendQuotaError(BackendError):
    code = "BACKEND_QUOTA_ERROR"
    status_code = 429


class UnknownGatewayError(GatewayError):
    code = "UNKNOWN_ERROR"
    status_code = 500


# --- Intake session ---

class IntakeError(SymptomAssistError):
    code = "INTAKE_ERROR"
    status_code = 400


class NoSymptomsError(IntakeError):
    code = "NO_SYMPTOMS"


class SymptomIndexError(IntakeError):
    code = "SYMPTOM_NOT_FOUND"
    status_code = 404
