"""Recording session: lifecycle of one microphone capture.

idle -> recording -> stopped | cancelled. Terminal states are final; build a
new session for the next attempt.
"""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
import time
from typing import Protocol

from symptom_assist.audio.files import (
    delete_recording,
    recording_filename,
    validate_audio_file,
)
from symptom_assist.config import settings
from symptom_assist.errors import (
    AlreadyRecordingError,
    NotRecordingError,
    PermissionDeniedError,
    RecorderError,
    RecordingSessionClosedError,
)
from symptom_assist.models import AudioRecordConfig, RecordingState

logger = logging.getLogger(__name__)


class AudioRecorder(Protocol):
    """Platform recorder that writes one encoded audio file."""

    async def start(self, path: str, config: AudioRecordConfig) -> None: ...

    async def stop(self) -> str | None: ...

    async def dispose(self) -> None: ...


class PermissionProvider(Protocol):
    async def has_permission(self) -> bool: ...

    async def request_permission(self) -> bool: ...


# recorder id -> session currently holding it
_recorder_owners: dict[int, RecordingSession] = {}


class RecordingSession:
    def __init__(
        self,
        recorder: AudioRecorder,
        permissions: PermissionProvider,
        directory: str | Path | None = None,
        config: AudioRecordConfig | None = None,
        dispose_recorder: bool = True,
    ) -> None:
        self._recorder = recorder
        self._permissions = permissions
        self.directory = Path(directory or settings.recordings_dir)
        self.config = config or AudioRecordConfig()
        self._dispose_recorder = dispose_recorder
        self._state = RecordingState.IDLE
        self._file_path: Path | None = None
        self._started_at: float | None = None
        self._lock = asyncio.Lock()
        self._closed = False

    @property
    def state(self) -> RecordingState:
        return self._state

    @property
    def is_recording(self) -> bool:
        return self._state is RecordingState.RECORDING

    @property
    def file_path(self) -> Path | None:
        return self._file_path

    def elapsed_seconds(self) -> float:
        """Seconds since start() while recording, else 0."""
        if not self.is_recording or self._started_at is None:
            return 0.0
        return time.monotonic() - self._started_at

    def _claim_recorder(self) -> None:
        owner = _recorder_owners.get(id(self._recorder))
        if owner is not None and owner is not self:
            raise AlreadyRecordingError("Microphone is in use by another recording session.")
        _recorder_owners[id(self._recorder)] = self

    def _release_recorder(self) -> None:
        if _recorder_owners.get(id(self._recorder)) is self:
            del _recorder_owners[id(self._recorder)]

    async def _ensure_permission(self) -> None:
        if await self._permissions.has_permission():
            return
        if not await self._permissions.request_permission():
            raise PermissionDeniedError("Microphone permission denied.")

    async def start(self) -> Path:
        """Begin capturing into a new timestamped file and return its path."""
        async with self._lock:
            if self._state is RecordingState.RECORDING:
                raise AlreadyRecordingError("Already recording.")
            if self._state is not RecordingState.IDLE:
                raise RecordingSessionClosedError(
                    f"Recording session is {self._state.value}; start a new session."
                )

            await self._ensure_permission()
            self._claim_recorder()

            path = self.directory / recording_filename(self.config.file_extension)
            try:
                await asyncio.to_thread(self.directory.mkdir, parents=True, exist_ok=True)
                await self._recorder.start(str(path), self.config)
            except Exception as exc:
                self._release_recorder()
                try:
                    await self._recorder.stop()
                except Exception:
                    logger.debug("Recorder stop after failed start also failed.", exc_info=True)
                raise RecorderError(f"Failed to start recording: {exc}") from exc

            self._file_path = path
            self._started_at = time.monotonic()
            self._state = RecordingState.RECORDING
            logger.info("Recording started: %s", path.name)
            return path

    async def stop(self) -> Path:
        """Finish the capture and return the recorded file."""
        async with self._lock:
            if self._state is not RecordingState.RECORDING:
                raise NotRecordingError("Not currently recording.")
            try:
                recorded = await self._recorder.stop()
            except Exception as exc:
                # The partial file is unusable and nothing else will remove it.
                if self._file_path is not None:
                    await asyncio.to_thread(delete_recording, self._file_path)
                raise RecorderError(f"Failed to stop recording: {exc}") from exc
            finally:
                self._state = RecordingState.STOPPED
                self._release_recorder()

            logger.info("Recording stopped after %.1fs.", time.monotonic() - (self._started_at or 0.0))
            if recorded:
                self._file_path = Path(recorded)
            if self._file_path is None:
                raise NotRecordingError("Recorder produced no file.")
            return self._file_path

    async def cancel(self) -> None:
        """Abort the capture and delete its file. No-op unless recording."""
        async with self._lock:
            if self._state is not RecordingState.RECORDING:
                return
            try:
                await self._recorder.stop()
            except Exception as exc:
                raise RecorderError(f"Failed to cancel recording: {exc}") from exc
            finally:
                self._state = RecordingState.CANCELLED
                self._release_recorder()
                if self._file_path is not None:
                    await asyncio.to_thread(delete_recording, self._file_path)
            logger.info("Recording cancelled.")

    def validate(self, max_bytes: int | None = None) -> int:
        """Check the finished recording before it is handed to the gateway."""
        if self._state is not RecordingState.STOPPED or self._file_path is None:
            raise NotRecordingError("No finished recording to validate.")
        return validate_audio_file(self._file_path, max_bytes)

    async def close(self) -> None:
        """Cancel any active capture and release the recorder."""
        if self._closed:
            return
        self._closed = True
        try:
            await self.cancel()
        finally:
            self._release_recorder()
            if self._dispose_recorder:
                await self._recorder.dispose()

    async def __aenter__(self) -> RecordingSession:
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()
