from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Optional


class FileState(str, Enum):
    """Processing state reported by the remote service for an uploaded file."""

    STATE_UNSPECIFIED = "STATE_UNSPECIFIED"
    PROCESSING = "PROCESSING"
    ACTIVE = "ACTIVE"
    FAILED = "FAILED"

    @classmethod
    def parse(cls, value: Any) -> "FileState":
        name = getattr(value, "name", value)
        try:
            return cls(str(name).upper())
        except ValueError:
            return cls.STATE_UNSPECIFIED


class AnalysisStatus(str, Enum):
    STARTED = "started"
    UPLOADING = "uploading"
    PROCESSING = "processing"
    ANALYZING = "analyzing"
    COMPLETED = "completed"
    ERROR = "error"


ANALYSIS_STATUS_EVENT = "analysisStatus"


@dataclass
class UploadedAsset:
    """Temporary local copy of an uploaded video, owned by one pipeline invocation."""

    name: str
    path: Path
    mime_type: str
    size: int


@dataclass(frozen=True)
class RemoteFileHandle:
    """Snapshot of the remote service's view of an uploaded file."""

    file_id: str
    mime_type: str
    state: FileState
    uri: Optional[str] = None
    display_name: Optional[str] = None


@dataclass(frozen=True)
class FilePart:
    """Reference to a remote file inside a chat message."""

    uri: str
    mime_type: str


@dataclass(frozen=True)
class ProgressEvent:
    status: AnalysisStatus
    message: str
    invocation_id: Optional[str] = None
    attempt: Optional[int] = None

    def to_payload(self) -> Dict[str, Any]:
        payload = {
            "status": self.status.value,
            "message": self.message,
            "invocation_id": self.invocation_id,
        }
        if self.attempt is not None:
            payload["attempt"] = self.attempt
        return payload


@dataclass
class AnalysisResult:
    invocation_id: str
    text: str
    poll_attempts: int = 0
    remote_file_id: Optional[str] = None


@dataclass(frozen=True)
class GenerationSettings:
    temperature: float = 1.0
    top_p: float = 0.95
    top_k: int = 40
    max_output_tokens: int = 8192
    response_mime_type: Optional[str] = None


ANALYSIS_GENERATION = GenerationSettings(response_mime_type="application/json")
CHAT_GENERATION = GenerationSettings()


@dataclass(frozen=True)
class ChatTurn:
    role: str  # "user" or "model"
    content: str
