from typing import Optional

from pydantic import AliasChoices, ConfigDict, Field
from pydantic_settings import BaseSettings

class Settings(BaseSettings):
    GEMINI_API_KEY: str = Field("", validation_alias=AliasChoices("GEMINI_API_KEY", "GOOGLE_API_KEY"))
    GEMINI_MODEL: str = "gemini-2.5-flash"

    # Cloud TTS is used when forced or when any credential variable is present
    USE_GOOGLE_TTS: bool = False
    GOOGLE_TTS_CREDENTIALS: Optional[str] = None  # path, raw JSON or base64 JSON
    GOOGLE_TTS_CREDENTIALS_PATH: Optional[str] = None
    GOOGLE_APPLICATION_CREDENTIALS: Optional[str] = None

    OUTPUT_DIR: str = "output"
    FFMPEG_BINARY: str = "ffmpeg"
    CLIP_CLEANUP: str = "always"  # "always" or "on_success"

    PODCAST_RATE_LIMIT: str = "5/minute"
    LOG_LEVEL: str = "INFO"
    PORT: int = 5000

    model_config = ConfigDict(env_file=".env", extra="ignore", populate_by_name=True)

settings = Settings()
