from typing import Optional

from pydantic_settings import BaseSettings
from pathlib import Path


class Settings(BaseSettings):
    # "sqlite://" keeps every store in process memory; records are lost on restart
    DATABASE_URL: str = "sqlite://"
    UPLOAD_DIR: str = str(Path(__file__).parent.parent / "uploads")
    MAX_FILE_SIZE_MB: int = 500
    CORS_ORIGINS: list[str] = ["http://localhost:5173"]
    LOG_LEVEL: str = "INFO"

    OPENAI_API_KEY: str = ""
    OPENAI_MODEL: str = "gpt-4o"
    GEMINI_API_KEY: str = ""
    GEMINI_API_KEYS: str = ""
    GEMINI_MODEL: str = "gemini-2.5-flash"
    GEMINI_INSIGHT_MODEL: str = "gemini-2.5-pro"
    VELLUM_API_KEY: str = ""
    VELLUM_BASE_URL: str = "https://api.vellum.ai/v1"
    VELLUM_MODEL: str = "vellum-environmental-analysis"
    PROVIDER_TIMEOUT_SECONDS: float = 120
    # How long a finished job's progress snapshot stays in memory
    PROGRESS_RETENTION_SECONDS: float = 600

    # Synthetic frame grid used in place of real decoding
    FEATURE_FRAME_COUNT: int = 100
    FEATURE_FRAME_WIDTH: int = 320
    FEATURE_FRAME_HEIGHT: int = 240
    SIMULATE_PROCESSING_DELAY: bool = True
    RANDOM_SEED: Optional[int] = None

    class Config:
        env_file = ".env"


settings = Settings()


ALLOWED_VIDEO_MIME_TYPES = {
    "video/mp4", "video/avi", "video/mov", "video/quicktime",
}

ENVIRONMENTAL_FOCUSES = (
    "carbon-dioxide", "heat-flux", "ocean-currents", "deforestation", "multi-parameter",
)

ANALYSIS_PRIORITIES = ("accuracy", "speed", "balanced")


def get_gemini_keys() -> list[str]:
    """Return configured Gemini keys (GEMINI_API_KEYS first, then the single key)."""
    keys = []
    if settings.GEMINI_API_KEYS:
        keys = [k.strip() for k in settings.GEMINI_API_KEYS.split(",") if k.strip()]
    if not keys and settings.GEMINI_API_KEY:
        keys = [settings.GEMINI_API_KEY]
    return keys
