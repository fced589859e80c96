"""Audio file helpers: validation before upload, cleanup after hand-off."""

import logging
from pathlib import Path
import time

from symptom_assist.config import settings
from symptom_assist.errors import (
    AudioFileEmptyError,
    AudioFileMissingError,
    AudioFileTooLargeError,
)

logger = logging.getLogger(__name__)


def recording_filename(extension: str | None = None, now_ms: int | None = None) -> str:
    """Timestamped file name, e.g. ``recording_1700000000000.m4a``."""
    timestamp = now_ms if now_ms is not None else int(time.time() * 1000)
    return f"recording_{timestamp}{extension or settings.audio_file_extension}"


def validate_audio_file(path: str | Path, max_bytes: int | None = None) -> int:
    """Return the file size in bytes, or raise if the file cannot be sent."""
    limit = max_bytes or settings.audio_max_bytes
    file_path = Path(path)
    if not file_path.is_file():
        raise AudioFileMissingError(
            "Audio file not found.", details={"path": str(file_path)}
        )

    size = file_path.stat().st_size
    if size == 0:
        raise AudioFileEmptyError("Audio file is empty.", details={"path": str(file_path)})
    if size > limit:
        raise AudioFileTooLargeError(
            f"Audio file too large (max {limit // (1024 * 1024)}MB).",
            details={"path": str(file_path), "size_bytes": size, "max_bytes": limit},
        )
    return size


def recording_size(path: str | Path) -> int:
    file_path = Path(path)
    return file_path.stat().st_size if file_path.is_file() else 0


def delete_recording(path: str | Path) -> bool:
    """Delete a recording if it exists. Returns True when a file was removed."""
    file_path = Path(path)
    try:
        file_path.unlink()
    except FileNotFoundError:
        return False
    logger.debug("Deleted recording %s", file_path)
    return True
