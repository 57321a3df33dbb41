"""Event coalescing between document edits and the analysis pipeline."""

from .document_monitor import ChangeMonitor
from .scheduler import DebounceScheduler

__all__ = ["ChangeMonitor", "DebounceScheduler"]
