from abc import ABC, abstractmethod
from typing import List, Sequence, Union

from ...models import ChatTurn, FilePart, GenerationSettings, RemoteFileHandle

MessagePart = Union[str, FilePart]


class ChatSession(ABC):
    """A conversation opened against the remote content model."""

    @abstractmethod
    async def send_message(self, parts: Sequence[MessagePart]) -> str:
        """Send one user turn and return the model's response text."""
        pass


class InferenceProvider(ABC):
    """Abstract base class for remote generative-AI providers."""

    @abstractmethod
    async def upload_file(self, path: str, mime_type: str, display_name: str) -> RemoteFileHandle:
        """Register a local file with the remote service."""
        pass

    @abstractmethod
    async def get_file(self, file_id: str) -> RemoteFileHandle:
        """Fetch a fresh snapshot of a registered file."""
        pass

    @abstractmethod
    def start_chat(self, generation: GenerationSettings, history: List[ChatTurn] = None) -> ChatSession:
        """Open a chat session seeded with the given history."""
        pass

    async def close(self):
        """Release client resources."""
        pass
