from .inference_provider import ChatSession, InferenceProvider, MessagePart

__all__ = [
    'ChatSession',
    'InferenceProvider',
    'MessagePart',
]
