from typing import Any, Dict, Optional, Type
from loguru import logger

from .base import InferenceProvider
from .gemini_providers import GeminiInferenceProvider
from ..exceptions import ConfigurationException
from ..config.settings import VidSentryConfig


class ProviderFactory:
    """Factory class for creating provider instances."""

    _inference_providers: Dict[str, Type[InferenceProvider]] = {
        'gemini': GeminiInferenceProvider,
    }

    @classmethod
    def create_inference_provider(
        cls,
        provider_name: Optional[str] = None,
        config: Optional[Dict[str, Any]] = None,
    ) -> InferenceProvider:
        """
        Create an inference provider instance.

        Args:
            provider_name: Name of the provider (optional, defaults to config)
            config: Provider configuration (optional, defaults to the LLM config)

        Returns:
            InferenceProvider instance

        Raises:
            ConfigurationException: If provider is not supported
        """
        if provider_name is None or config is None:
            llm_config = VidSentryConfig().llm
            provider_name = provider_name or llm_config.provider
            config = config if config is not None else llm_config.model_dump()

        if provider_name not in cls._inference_providers:
            raise ConfigurationException(
                f"Unknown inference provider: {provider_name}. "
                f"Supported providers: {list(cls._inference_providers.keys())}"
            )

        provider_class = cls._inference_providers[provider_name]
        logger.info(f"Creating inference provider: {provider_name}")
        return provider_class(config)

    @classmethod
    def register_inference_provider(cls, name: str, provider_class: Type[InferenceProvider]):
        """Register a new inference provider."""
        cls._inference_providers[name] = provider_class

    @classmethod
    def get_supported_providers(cls) -> Dict[str, list]:
        """Get list of supported providers for each service type."""
        return {
            'inference': list(cls._inference_providers.keys()),
        }


# Global factory instance
provider_factory = ProviderFactory()
