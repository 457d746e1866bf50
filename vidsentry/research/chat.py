from typing import Any, Iterable, List, Mapping, Optional
from loguru import logger

from vidsentry.exceptions import InferenceException, InvalidInputException
from vidsentry.models import CHAT_GENERATION, ChatTurn, GenerationSettings
from vidsentry.providers.base import InferenceProvider


def _turn_text(turn: Mapping[str, Any]) -> str:
    if "content" in turn and turn["content"] is not None:
        return str(turn["content"])
    # {"role": ..., "parts": [{"text": ...}]} as sent by the chat page
    parts = turn.get("parts") or []
    return "".join(
        str(part.get("text", "")) if isinstance(part, Mapping) else str(part)
        for part in parts
    )


def normalize_history(history: Optional[Iterable[Any]]) -> List[ChatTurn]:
    """Convert client supplied turns to ChatTurn, preserving their order."""
    turns = []
    for turn in history or []:
        if isinstance(turn, ChatTurn):
            turns.append(turn)
        elif isinstance(turn, Mapping):
            turns.append(ChatTurn(role=str(turn.get("role", "user")), content=_turn_text(turn)))
        else:
            raise InvalidInputException(f"Invalid history entry: {turn!r}")
    return turns


class ResearchChatAdapter:
    """Stateless chat proxy: every call opens a fresh session seeded with the client's history."""

    def __init__(self, provider: InferenceProvider, generation: GenerationSettings = CHAT_GENERATION):
        self.provider = provider
        self.generation = generation

    async def chat(self, text: Optional[str], history: Optional[Iterable[Any]] = None) -> str:
        if not text or not text.strip():
            raise InvalidInputException("Text is required", error_code="NO_TEXT")

        turns = normalize_history(history)
        logger.info(f"Research chat request with {len(turns)} history turns")
        try:
            session = self.provider.start_chat(self.generation, history=turns)
            return await session.send_message([text])
        except Exception as e:
            raise InferenceException(f"Research chat failed: {e}") from e
