"""User-facing diagnostics and quick fixes."""

from .diagnostics import DiagnosticPublisher, InMemoryDiagnosticSink
from .presenter import (
    DiagnosticTag,
    FindingPresenter,
    PresentedDiagnostic,
    RelatedInformation,
)
from .quickfix import QuickFixSynthesizer, apply_fixes

__all__ = [
    "DiagnosticPublisher",
    "DiagnosticTag",
    "FindingPresenter",
    "InMemoryDiagnosticSink",
    "PresentedDiagnostic",
    "QuickFixSynthesizer",
    "RelatedInformation",
    "apply_fixes",
]
