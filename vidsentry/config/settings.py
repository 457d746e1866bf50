from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import AliasChoices, Field
from typing import Optional
from dotenv import load_dotenv, find_dotenv


class LLMConfig(BaseSettings):
    """Remote inference provider configuration."""

    provider: str = Field(default="gemini")
    model_name: str = Field(default="gemini-2.0-flash-exp")
    api_key: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("GEMINI_API_KEY", "LLM_API_KEY"),
    )
    timeout: int = Field(default=200)

    model_config = SettingsConfigDict(
        env_prefix="LLM_",
        env_file=".env",
        env_file_encoding="utf-8",
        validate_assignment=True,
        extra="ignore",
        case_sensitive=False,
        populate_by_name=True,
    )


class PipelineConfig(BaseSettings):
    """Video analysis pipeline configuration."""

    upload_dir: str = Field(default="uploads")
    poll_interval_seconds: float = Field(default=10.0, gt=0)
    max_poll_attempts: int = Field(default=30, ge=1)
    max_upload_bytes: int = Field(default=100 * 1024 * 1024, ge=1)

    model_config = SettingsConfigDict(
        env_prefix="PIPELINE_",
        env_file=".env",
        env_file_encoding="utf-8",
        validate_assignment=True,
        extra="ignore",
        case_sensitive=False
    )


class LoggingConfig(BaseSettings):
    """Logging configuration."""

    level: str = Field(default="INFO")
    log_file: Optional[str] = Field(default=None)
    enable_json: bool = Field(default=False)
    enable_file_logging: bool = Field(default=False)
    max_file_size: str = Field(default="10 MB")
    retention_days: int = Field(default=7)

    model_config = SettingsConfigDict(
        env_prefix="LOG_",
        env_file=".env",
        env_file_encoding="utf-8",
        validate_assignment=True,
        extra="ignore",
        case_sensitive=False
    )


class VidSentryConfig(BaseSettings):
    """Main configuration class."""

    # Application settings
    app_name: str = Field(default="VidSentry")
    app_version: str = Field(default="1.0.0")
    debug: bool = Field(default=False)
    environment: str = Field(default="development")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        validate_assignment=True,
        extra="ignore",
        case_sensitive=False
    )

    def __init__(self, **kwargs):
        # Force load environment variables before initializing
        load_dotenv(find_dotenv())

        super().__init__(**kwargs)
        # Sub-configurations are built lazily
        self._llm = None
        self._pipeline = None
        self._logging = None

    @property
    def llm(self) -> LLMConfig:
        if self._llm is None:
            self._llm = LLMConfig()
        return self._llm

    @property
    def pipeline(self) -> PipelineConfig:
        if self._pipeline is None:
            self._pipeline = PipelineConfig()
        return self._pipeline

    @property
    def logging(self) -> LoggingConfig:
        if self._logging is None:
            self._logging = LoggingConfig()
        return self._logging
