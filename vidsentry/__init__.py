"""VidSentry: video content analysis with live progress and security keyword flagging."""

__version__ = "1.0.0"
