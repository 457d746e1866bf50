from typing import Any, Dict, List, Sequence
from loguru import logger
from google import genai
from google.genai import types

from vidsentry.providers.base import ChatSession, InferenceProvider, MessagePart
from vidsentry.exceptions import ConfigurationException, ProviderException
from vidsentry.utils.error_handler import ErrorHandler, convert_exceptions
from vidsentry.models import (
    ChatTurn,
    FilePart,
    FileState,
    GenerationSettings,
    RemoteFileHandle,
)


def _to_handle(remote_file: types.File) -> RemoteFileHandle:
    return RemoteFileHandle(
        file_id=remote_file.name,
        mime_type=remote_file.mime_type,
        state=FileState.parse(remote_file.state),
        uri=remote_file.uri,
        display_name=remote_file.display_name,
    )


def _to_part(part: MessagePart) -> types.Part:
    if isinstance(part, FilePart):
        return types.Part(file_data=types.FileData(file_uri=part.uri, mime_type=part.mime_type))
    return types.Part(text=str(part))


def _to_content(turn: ChatTurn) -> types.Content:
    return types.Content(role=turn.role, parts=[types.Part(text=turn.content)])


def _to_generation_config(generation: GenerationSettings) -> types.GenerateContentConfig:
    return types.GenerateContentConfig(
        temperature=generation.temperature,
        top_p=generation.top_p,
        top_k=generation.top_k,
        max_output_tokens=generation.max_output_tokens,
        response_mime_type=generation.response_mime_type,
    )


class GeminiChatSession(ChatSession):
    def __init__(self, chat):
        self.chat = chat

    @convert_exceptions({Exception: ProviderException})
    async def send_message(self, parts: Sequence[MessagePart]) -> str:
        response = await self.chat.send_message([_to_part(part) for part in parts])
        return response.text or ""


class GeminiInferenceProvider(InferenceProvider):
    """Google Gemini provider implementation over the google-genai async client."""

    def __init__(self, config: Dict[str, Any]):
        self.config = config
        self.model_name = config.get("model_name", "gemini-2.0-flash-exp")
        self.client = self._initialize_client()

    def _initialize_client(self):
        """Initialize the Gemini client."""
        api_key = self.config.get("api_key")
        if not api_key:
            raise ConfigurationException("GEMINI_API_KEY is required for the Gemini provider")
        try:
            timeout = self.config.get("timeout")
            http_options = types.HttpOptions(timeout=int(timeout) * 1000) if timeout else None
            return genai.Client(api_key=api_key, http_options=http_options)
        except Exception as e:
            raise ErrorHandler.handle_provider_error(e, "gemini") from e

    @convert_exceptions({Exception: ProviderException})
    async def upload_file(self, path: str, mime_type: str, display_name: str) -> RemoteFileHandle:
        remote_file = await self.client.aio.files.upload(
            file=path,
            config=types.UploadFileConfig(mime_type=mime_type, display_name=display_name),
        )
        logger.info(f"Uploaded {display_name} to Gemini as {remote_file.name}")
        return _to_handle(remote_file)

    @convert_exceptions({Exception: ProviderException})
    async def get_file(self, file_id: str) -> RemoteFileHandle:
        remote_file = await self.client.aio.files.get(name=file_id)
        return _to_handle(remote_file)

    def start_chat(self, generation: GenerationSettings, history: List[ChatTurn] = None) -> ChatSession:
        chat = self.client.aio.chats.create(
            model=self.model_name,
            config=_to_generation_config(generation),
            history=[_to_content(turn) for turn in history or []],
        )
        return GeminiChatSession(chat)

    async def close(self):
        """Close the Gemini client and cleanup resources."""
        logger.info("Closing Gemini client")
        aclose = getattr(self.client.aio, "aclose", None)
        if aclose is not None:
            await aclose()
