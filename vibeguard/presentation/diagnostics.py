"""Diagnostic publication with replace-all semantics."""

from collections.abc import Sequence

from vibeguard.protocols import DiagnosticSink
from vibeguard.utils.logging import logger

from .presenter import PresentedDiagnostic

log = logger.bind(component="diagnostics")


class InMemoryDiagnosticSink:
    """DiagnosticSink that keeps the latest set per document."""

    def __init__(self):
        self.collections: dict[str, tuple[PresentedDiagnostic, ...]] = {}
        self.updates = 0

    def set(self, uri: str, diagnostics: Sequence[PresentedDiagnostic]) -> None:
        self.collections[uri] = tuple(diagnostics)
        self.updates += 1

    def delete(self, uri: str) -> None:
        self.collections.pop(uri, None)

    def clear(self) -> None:
        self.collections.clear()

    def get(self, uri: str) -> list[PresentedDiagnostic]:
        return list(self.collections.get(uri, ()))


class DiagnosticPublisher:
    """Pushes complete diagnostic sets to a sink.

    Each publish replaces the document's previous set in full. Sink errors
    are logged and reported through the return value, never raised.
    """

    def __init__(self, sink: DiagnosticSink | None = None):
        self.sink = sink if sink is not None else InMemoryDiagnosticSink()
        self._current: dict[str, tuple[PresentedDiagnostic, ...]] = {}

    def publish(self, uri: str, diagnostics: Sequence[PresentedDiagnostic]) -> bool:
        snapshot = tuple(diagnostics)
        try:
            self.sink.set(uri, list(snapshot))
        except Exception as e:
            log.opt(exception=e).error(f"Diagnostic sink rejected update for {uri}")
            return False
        self._current[uri] = snapshot
        log.debug(f"Published {len(snapshot)} diagnostics for {uri}")
        return True

    def clear(self, uri: str) -> None:
        self._current.pop(uri, None)
        try:
            self.sink.delete(uri)
        except Exception as e:
            log.opt(exception=e).error(f"Diagnostic sink failed to clear {uri}")

    def clear_all(self) -> None:
        self._current.clear()
        try:
            self.sink.clear()
        except Exception as e:
            log.opt(exception=e).error("Diagnostic sink failed to clear all documents")

    def current(self, uri: str) -> list[PresentedDiagnostic]:
        return list(self._current.get(uri, ()))

    @property
    def documents(self) -> list[str]:
        return list(self._current)
