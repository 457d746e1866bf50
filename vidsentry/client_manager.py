from typing import Optional

from .config.settings import VidSentryConfig
from .providers.base import InferenceProvider
from .providers.factory import ProviderFactory
from .research.chat import ResearchChatAdapter
from .utils.error_handler import log_exceptions
from .utils.logging_config import log_manager
from .video_pipeline.analysis_pipeline import VideoAnalysisPipeline
from .video_pipeline.broadcaster import ProgressBroadcaster
from .video_pipeline.polling import FileProcessingPoller
from .video_pipeline.storage import TemporaryAssetStore


class ClientManager:
    """
    Wires the inference provider, the analysis pipeline, the chat adapter
    and the progress broadcaster from one configuration.

    The provider is created lazily, so the service can start (and report
    health) before GEMINI_API_KEY is configured.
    """

    def __init__(
        self,
        config: Optional[VidSentryConfig] = None,
        provider: Optional[InferenceProvider] = None,
        broadcaster: Optional[ProgressBroadcaster] = None,
        configure_logging: bool = True,
    ):
        self.config = config or VidSentryConfig()
        self.broadcaster = broadcaster or ProgressBroadcaster()
        self._provider = provider
        self._pipeline = None
        self._chat = None

        if configure_logging:
            log_manager.configure(self.config.logging)

    @log_exceptions(include_traceback=False, custom_message="Inference provider unavailable")
    def get_inference_provider(self) -> InferenceProvider:
        if self._provider is None:
            self._provider = ProviderFactory.create_inference_provider(
                self.config.llm.provider, self.config.llm.model_dump()
            )
        return self._provider

    def get_pipeline(self) -> VideoAnalysisPipeline:
        if self._pipeline is None:
            provider = self.get_inference_provider()
            pipeline_config = self.config.pipeline
            self._pipeline = VideoAnalysisPipeline(
                provider=provider,
                store=TemporaryAssetStore(pipeline_config.upload_dir),
                poller=FileProcessingPoller(
                    provider,
                    interval=pipeline_config.poll_interval_seconds,
                    max_attempts=pipeline_config.max_poll_attempts,
                ),
                max_upload_bytes=pipeline_config.max_upload_bytes,
            )
        return self._pipeline

    def get_chat_adapter(self) -> ResearchChatAdapter:
        if self._chat is None:
            self._chat = ResearchChatAdapter(self.get_inference_provider())
        return self._chat

    async def close(self):
        if self._provider is not None:
            await self._provider.close()
