from pydantic_settings import BaseSettings
from pydantic import AliasChoices, Field


class Settings(BaseSettings):
    gemini_api_key: str | None = Field(
        default=None,
        validation_alias=AliasChoices(
            "GEMINI_API_KEY",
            "GOOGLE_API_KEY",
            "SYMPTOM_GEMINI_API_KEY",
        ),
    )

    # Gemini generation parameters (fixed per deployment, not per call)
    gemini_model: str = "gemini-2.5-flash"
    gemini_temperature: float = 0.7
    gemini_top_k: int = 40
    gemini_top_p: float = 0.95
    gemini_max_output_tokens: int = 1024
    gemini_safety_threshold: str = "BLOCK_MEDIUM_AND_ABOVE"

    # Only analyze_symptoms is bounded by a timeout
    analyze_timeout_seconds: float = 30.0

    # Optional retry wrapper
    gemini_retry_attempts: int = 3
    gemini_retry_backoff_seconds: float = 0.5

    gemini_log_enabled: bool = False
    gemini_log_path: str = "logs/gemini_calls.jsonl"

    # Audio capture
    recordings_dir: str = "recordings"
    audio_encoder: str = "aacLc"
    audio_bit_rate: int = 128000
    audio_sample_rate: int = 44100
    audio_file_extension: str = ".m4a"
    audio_mime_type: str = "audio/mp4"
    audio_max_bytes: int = 10 * 1024 * 1024

    # Server
    host: str = "0.0.0.0"
    port: int = 8080
    cors_origins: list[str] = ["http://localhost:5173", "http://localhost:3000"]

    model_config = {"env_prefix": "SYMPTOM_", "env_file": ".env", "extra": "ignore"}


settings = Settings()
