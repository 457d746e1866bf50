from .chat import ResearchChatAdapter, normalize_history

__all__ = ["ResearchChatAdapter", "normalize_history"]
