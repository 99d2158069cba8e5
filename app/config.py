from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict

BASE_DIR = Path(__file__).resolve().parent.parent
APP_DIR = Path(__file__).resolve().parent


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=BASE_DIR / ".env", env_file_encoding="utf-8")

    # External model endpoint (OpenAI-compatible chat completions).
    # Both URL and key must be set, otherwise the heuristic scorer is used.
    LLM_API_URL: str = ""
    LLM_API_KEY: str = ""
    LLM_MODEL: str = "google/gemini-2.0-flash-001"
    LLM_TIMEOUT: float = 60.0

    # Submission rules
    ALLOWED_EMAIL_DOMAIN: str = "virginia.edu"

    # Logging
    LOG_LEVEL: str = "INFO"

    # Paths
    POLICY_DATA_DIR: Path = APP_DIR / "data"

    @property
    def model_scorer_enabled(self) -> bool:
        return bool(self.LLM_API_URL and self.LLM_API_KEY)


settings = Settings()
