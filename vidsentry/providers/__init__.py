"""Provider system for vidsentry."""

from .base import ChatSession, InferenceProvider, MessagePart
from .factory import ProviderFactory, provider_factory
from .gemini_providers import GeminiInferenceProvider

__all__ = [
    # Base classes
    'ChatSession',
    'InferenceProvider',
    'MessagePart',
    # Factory
    'ProviderFactory',
    'provider_factory',
    # Gemini providers
    'GeminiInferenceProvider',
]
