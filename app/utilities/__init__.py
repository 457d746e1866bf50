"""
Utilities package for the VidSentry application.
"""

from .execution_timer import ExecutionTimer

__all__ = ["ExecutionTimer"]
