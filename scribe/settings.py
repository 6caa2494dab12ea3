import os
from pydantic import BaseModel, Field
from typing import Literal, Optional

AUTO_LANGUAGE = "auto"


class ScribeSettings(BaseModel):
    """
    Runtime configuration, read from the environment (and `.env`, loaded by
    the app on import).
    """
    vault_dir: str = Field(default="vault", description="Directory holding notes and audio files")
    templates_dir: str = Field(default="templates", description="Directory of YAML note templates")
    active_template: str = Field(default="default", description="Template used when a request names none")

    llm_provider: Literal["ollama", "gemini"] = "ollama"
    ollama_host: str = "http://localhost:11434"
    ollama_model: str = "llama3.2"
    gemini_api_key: Optional[str] = None
    gemini_model: str = "gemini-2.5-flash"

    whisper_asr_url: str = "http://localhost:9000"
    audio_language: str = Field(default=AUTO_LANGUAGE, description="Transcription language, 'auto' to detect")
    output_language: Optional[str] = Field(default=None, description="Language for generated notes")
    multi_speaker: bool = Field(default=False, description="Transcribe with speaker diarization")
    min_speakers: Optional[int] = None
    max_speakers: Optional[int] = None


def get_settings() -> ScribeSettings:
    """Build settings from the current environment."""
    env = os.environ
    return ScribeSettings(
        vault_dir=env.get("SCRIBE_VAULT_DIR", "vault"),
        templates_dir=env.get("SCRIBE_TEMPLATES_DIR", "templates"),
        active_template=env.get("SCRIBE_ACTIVE_TEMPLATE", "default"),
        llm_provider=env.get("SCRIBE_LLM_PROVIDER", "ollama"),
        ollama_host=env.get("OLLAMA_HOST", "http://localhost:11434"),
        ollama_model=env.get("OLLAMA_MODEL", "llama3.2"),
        gemini_api_key=env.get("GEMINI_API_KEY") or None,
        gemini_model=env.get("GEMINI_MODEL", "gemini-2.5-flash"),
        whisper_asr_url=env.get("WHISPER_ASR_URL", "http://localhost:9000"),
        audio_language=env.get("SCRIBE_AUDIO_LANGUAGE", AUTO_LANGUAGE),
        output_language=env.get("SCRIBE_OUTPUT_LANGUAGE") or None,
        multi_speaker=env.get("SCRIBE_MULTI_SPEAKER") or False,
        min_speakers=env.get("SCRIBE_MIN_SPEAKERS") or None,
        max_speakers=env.get("SCRIBE_MAX_SPEAKERS") or None,
    )
