import json
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Union
from loguru import logger

SUSPICIOUS_KEYWORDS = [
    "intruder",
    "break-in",
    "suspicious",
    "unknown person",
    "stranger",
    "trespassing",
    "trespasser",
    "break in",
    "breaking in",
    "forced entry",
    "unauthorized",
    "burglar",
    "theft",
    "stealing",
    "night",
    "masked",
]


@dataclass
class SecurityReport:
    has_suspicious_activity: bool = False
    flags: List[str] = field(default_factory=list)
    timestamps: List[str] = field(default_factory=list)
    severity: str = "low"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "hasSuspiciousActivity": self.has_suspicious_activity,
            "flags": list(self.flags),
            "timestamps": list(self.timestamps),
            "severity": self.severity,
        }


def _matches(text: Any) -> List[str]:
    if not isinstance(text, str) or not text:
        return []
    lowered = text.lower()
    return [keyword for keyword in SUSPICIOUS_KEYWORDS if keyword.lower() in lowered]


def _severity(flag_count: int) -> str:
    if flag_count > 2:
        return "high"
    if flag_count > 0:
        return "medium"
    return "low"


def analyze_for_security(analysis: Union[str, Mapping[str, Any]]) -> SecurityReport:
    """
    Scan an analysis payload for security-relevant keywords.

    Looks at ``main_subject``, every ``key_events[].event`` and
    ``overall_summary``. Text that is not a JSON object yields an empty
    low-severity report.
    """
    try:
        data = json.loads(analysis) if isinstance(analysis, (str, bytes)) else analysis
        if not isinstance(data, Mapping):
            raise ValueError(f"expected a JSON object, got {type(data).__name__}")

        flags: List[str] = []
        timestamps: List[str] = []

        for keyword in _matches(data.get("main_subject")):
            flags.append(f"Suspicious activity detected in main subject: {keyword}")

        key_events = data.get("key_events")
        if isinstance(key_events, list):
            for event in key_events:
                if not isinstance(event, Mapping):
                    continue
                timestamp = event.get("timestamp")
                for keyword in _matches(event.get("event")):
                    flags.append(f"Suspicious activity detected at {timestamp}: {keyword}")
                    timestamps.append(timestamp)

        for keyword in _matches(data.get("overall_summary")):
            flags.append(f"Suspicious activity detected in summary: {keyword}")

        return SecurityReport(
            has_suspicious_activity=len(flags) > 0,
            flags=flags,
            timestamps=timestamps,
            severity=_severity(len(flags)),
        )
    except (ValueError, TypeError) as e:
        logger.error(f"Error analyzing security: {e}")
        return SecurityReport()
