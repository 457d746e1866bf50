from .analysis_pipeline import VideoAnalysisPipeline, broadcast_emitter
from .broadcaster import ProgressBroadcaster, Subscription
from ..models import (
    ANALYSIS_STATUS_EVENT,
    AnalysisResult,
    AnalysisStatus,
    ChatTurn,
    FileState,
    ProgressEvent,
    RemoteFileHandle,
    UploadedAsset,
)
from .polling import FileProcessingPoller, PollOutcome, PollState
from .storage import TemporaryAssetStore

__all__ = [
    "VideoAnalysisPipeline",
    "broadcast_emitter",
    "ProgressBroadcaster",
    "Subscription",
    "ANALYSIS_STATUS_EVENT",
    "AnalysisResult",
    "AnalysisStatus",
    "ChatTurn",
    "FileState",
    "ProgressEvent",
    "RemoteFileHandle",
    "UploadedAsset",
    "FileProcessingPoller",
    "PollOutcome",
    "PollState",
    "TemporaryAssetStore",
]
