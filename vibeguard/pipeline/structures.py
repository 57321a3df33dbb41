"""Result types returned by the analysis pipeline."""

from dataclasses import dataclass
from enum import Enum
from typing import Any

from vibeguard.cache import Fingerprint
from vibeguard.errors import VibeGuardError
from vibeguard.rules.base import Finding


class AnalysisStatus(Enum):
    """How an analyze() call ended."""

    OK = "ok"
    CACHED = "cached"
    FILE_TOO_LARGE = "file_too_large"
    TIMEOUT = "timeout"
    SUPERSEDED = "superseded"
    CANCELLED = "cancelled"
    FAILED = "failed"


@dataclass(frozen=True)
class AnalysisOutcome:
    """Findings for one analyze() call plus how they were obtained.

    Only ``SUPERSEDED`` and ``CANCELLED`` outcomes are stale: a newer request
    for the same document exists, or the pipeline was shut down, and their
    findings must not be presented.
    """

    document_id: str
    status: AnalysisStatus
    findings: tuple[Finding, ...] = ()
    fingerprint: Fingerprint | None = None
    version: int | None = None
    error: VibeGuardError | Exception | None = None
    duration: float = 0.0

    @property
    def is_current(self) -> bool:
        return self.status not in (AnalysisStatus.SUPERSEDED, AnalysisStatus.CANCELLED)

    @property
    def succeeded(self) -> bool:
        return self.status in (AnalysisStatus.OK, AnalysisStatus.CACHED)

    @property
    def partial(self) -> bool:
        return self.status is AnalysisStatus.TIMEOUT

    def to_dict(self) -> dict[str, Any]:
        return {
            "document": self.document_id,
            "status": self.status.value,
            "version": self.version,
            "duration_ms": round(self.duration * 1000, 2),
            "findings": [finding.to_dict() for finding in self.findings],
            "error": (
                self.error.to_dict()
                if isinstance(self.error, VibeGuardError)
                else (str(self.error) if self.error else None)
            ),
        }
