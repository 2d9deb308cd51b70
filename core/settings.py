from functools import lru_cache
from typing import Literal, Optional

from pydantic import AliasChoices, BaseModel, Field, PostgresDsn, SecretStr, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from llm.prompts import DEFAULT_SYSTEM_PROMPT


class CustomSettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )


class AppSettings(CustomSettings):
    ENVIRONMENT: Literal["local", "dev", "prod"] = Field(default="local")
    LOG_LEVEL: str = Field(default="INFO")
    JSON_LOGS: bool = Field(default=True)
    PORT: int = Field(default=8080)


class PgDbSettings(CustomSettings):
    POSTGRES_ENGINE: str = Field(default="postgresql+asyncpg")
    POSTGRES_USER: str = Field(default="postgres")
    POSTGRES_PASSWORD: SecretStr = Field(default="postgres")
    POSTGRES_DB: str = Field(default="companion")
    POSTGRES_HOST: str = Field(default="localhost")
    POSTGRES_PORT: int = Field(default=5432)
    DATABASE_URL: PostgresDsn | str = Field(default="")

    @model_validator(mode="before")
    def validate_postgres_dsn(cls, data: dict):
        if isinstance(data, dict) and not data.get("DATABASE_URL"):
            _built_uri = PostgresDsn.build(
                scheme=data.get("POSTGRES_ENGINE", "postgresql+asyncpg"),
                username=data.get("POSTGRES_USER", "postgres"),
                password=data.get("POSTGRES_PASSWORD", "postgres"),
                host=data.get("POSTGRES_HOST", "localhost"),
                port=int(data.get("POSTGRES_PORT", 5432)),
                path=data.get("POSTGRES_DB", "companion"),
            ).unicode_string()
            data["DATABASE_URL"] = _built_uri
        return data


class OpenAISettings(CustomSettings):
    OPENAI_API_KEY: SecretStr = Field(default="")
    OPENAI_MODEL: str = Field(default="gpt-3.5-turbo-16k-0613")
    OPENAI_TEMPERATURE: float = Field(default=0.05)
    OPENAI_MAX_TOKENS: int = Field(default=200)
    OPENAI_TIMEOUT_SECONDS: float = Field(default=30.0)
    SYSTEM_PROMPT: str = Field(default=DEFAULT_SYSTEM_PROMPT)


class GoogleSettings(CustomSettings):
    """Google identity configuration.

    Env vars:
    - GOOGLE_CLIENT_ID (falls back to REACT_APP_CLIENT_ID, the name the web
      frontend shares with the backend)
    """

    GOOGLE_CLIENT_ID: str = Field(
        default="",
        validation_alias=AliasChoices("GOOGLE_CLIENT_ID", "REACT_APP_CLIENT_ID"),
    )


class SpeechSettings(CustomSettings):
    """Configuration for Google Cloud Text-to-Speech and Speech-to-Text."""

    LANGUAGE_CODE: str = Field(default="en-US")
    TTS_VOICE_GENDER: str = Field(default="NEUTRAL")
    TTS_AUDIO_ENCODING: str = Field(default="MP3")
    STT_ENCODING: str = Field(default="MP3")
    STT_SAMPLE_RATE_HERTZ: int = Field(default=16000)


class ConversationSettings(CustomSettings):
    """Conversation core configuration.

    Set via env vars (optional):
    - STORE_BACKEND: "postgres" or "memory"
    - MAX_HISTORY_MESSAGES: cap on persisted messages sent to the model
    """

    STORE_BACKEND: Literal["postgres", "memory"] = Field(default="postgres")
    MAX_HISTORY_MESSAGES: Optional[int] = Field(default=None, ge=1)


class Settings(BaseModel):
    APP: AppSettings = Field(default_factory=AppSettings)
    DATABASE: PgDbSettings = Field(default_factory=PgDbSettings)
    OPENAI: OpenAISettings = Field(default_factory=OpenAISettings)
    GOOGLE: GoogleSettings = Field(default_factory=GoogleSettings)
    SPEECH: SpeechSettings = Field(default_factory=SpeechSettings)
    CONVERSATION: ConversationSettings = Field(default_factory=ConversationSettings)


@lru_cache
def get_settings() -> Settings:
    return Settings()


SETTINGS = get_settings()
