from .settings import LLMConfig, PipelineConfig, LoggingConfig, VidSentryConfig

__all__ = ["LLMConfig", "PipelineConfig", "LoggingConfig", "VidSentryConfig"]
