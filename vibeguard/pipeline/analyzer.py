"""Analysis pipeline - per-document orchestration of cache, guards and engine."""

import asyncio
import itertools
import threading
import time
from collections.abc import Callable

from vibeguard.cache import AnalysisCache, Fingerprint
from vibeguard.config_runtime import AnalysisSettings
from vibeguard.errors import AnalysisCancelled, AnalysisTimeout, FileTooLarge
from vibeguard.rules.engine import RuleEngine
from vibeguard.utils.logging import logger

from .structures import AnalysisOutcome, AnalysisStatus

log = logger.bind(component="pipeline")

# Extra time granted to a cooperative timeout before the pipeline stops waiting
HARD_TIMEOUT_GRACE = 1.0


class AnalysisPipeline:
    """Runs the rule engine for documents, one live analysis per document.

    A newer ``analyze()`` call for a document cancels the older one still in
    flight, and an older call that completes late reports ``SUPERSEDED`` so its
    findings are never shown over newer ones.
    """

    def __init__(
        self,
        engine: RuleEngine,
        cache: AnalysisCache | None = None,
        settings: AnalysisSettings | None = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.engine = engine
        self.cache = cache if cache is not None else AnalysisCache()
        self.settings = settings or AnalysisSettings()
        self._clock = clock
        self._tickets: dict[str, int] = {}
        self._in_flight: dict[str, threading.Event] = {}
        self._counter = itertools.count(1)
        self._disposed = False
        self._stats = {
            "analyses": 0,
            "cache_hits": 0,
            "too_large": 0,
            "timeouts": 0,
            "superseded": 0,
            "failures": 0,
        }

    async def analyze(
        self,
        document_id: str,
        text: str,
        language_id: str,
        version: int | None = None,
    ) -> AnalysisOutcome:
        """Analyze a document snapshot.

        Never raises for analysis failures; the outcome's status says what
        happened and ``error`` carries the underlying exception.
        """
        started = self._clock()
        if self._disposed:
            return AnalysisOutcome(document_id, AnalysisStatus.CANCELLED, version=version)

        ticket = next(self._counter)
        self._tickets[document_id] = ticket
        self._cancel_in_flight(document_id)

        fingerprint = Fingerprint.of(text, language_id)
        cached = self.cache.get(document_id, fingerprint)
        if cached is not None:
            self._stats["cache_hits"] += 1
            return self._outcome(
                document_id, AnalysisStatus.CACHED, started, cached.findings, fingerprint, version
            )

        size = len(text.encode("utf-8", errors="surrogatepass"))
        if size > self.settings.max_file_size:
            self._stats["too_large"] += 1
            error = FileTooLarge(size, self.settings.max_file_size)
            log.warning(f"{document_id}: {error.message}, skipping analysis")
            return self._outcome(
                document_id, AnalysisStatus.FILE_TOO_LARGE, started, (), fingerprint, version, error
            )

        cancel_event = threading.Event()
        self._in_flight[document_id] = cancel_event
        self._stats["analyses"] += 1
        timeout = self.settings.timeout_seconds

        try:
            findings = await asyncio.wait_for(
                asyncio.to_thread(
                    self.engine.execute,
                    text,
                    language_id,
                    timeout=timeout,
                    cancel_event=cancel_event,
                    document_id=document_id,
                ),
                timeout=timeout + HARD_TIMEOUT_GRACE,
            )
        except AnalysisTimeout as e:
            return self._timed_out(document_id, ticket, started, fingerprint, version, e)
        except asyncio.TimeoutError:
            cancel_event.set()
            return self._timed_out(
                document_id, ticket, started, fingerprint, version, AnalysisTimeout(timeout)
            )
        except AnalysisCancelled as e:
            return self._stale(document_id, ticket, started, version, e)
        except Exception as e:
            self._stats["failures"] += 1
            log.opt(exception=e).error(f"{document_id}: analysis failed")
            return self._outcome(
                document_id, AnalysisStatus.FAILED, started, (), fingerprint, version, e
            )
        finally:
            if self._in_flight.get(document_id) is cancel_event:
                del self._in_flight[document_id]

        if self._tickets.get(document_id) != ticket or self._disposed:
            return self._stale(document_id, ticket, started, version, None)

        result = self.cache.create(fingerprint, findings)
        self.cache.put(document_id, result)
        return self._outcome(
            document_id, AnalysisStatus.OK, started, result.findings, fingerprint, version
        )

    def cancel(self, document_id: str) -> None:
        """Abandon any in-flight analysis of a document."""
        self._tickets.pop(document_id, None)
        self._cancel_in_flight(document_id)

    def invalidate(self, document_id: str) -> None:
        self.cancel(document_id)
        self.cache.invalidate(document_id)

    def clear_cache(self) -> None:
        self.cache.clear()

    def update_settings(self, settings: AnalysisSettings) -> None:
        self.settings = settings
        self.engine.max_matches_per_rule = settings.max_matches_per_rule

    def get_stats(self) -> dict:
        stats = dict(self._stats)
        stats["in_flight"] = len(self._in_flight)
        stats["cache"] = self.cache.get_stats()
        return stats

    def dispose(self) -> None:
        """Cancel every in-flight analysis and release the cache."""
        if self._disposed:
            return
        self._disposed = True
        for event in list(self._in_flight.values()):
            event.set()
        self._in_flight.clear()
        self._tickets.clear()
        self.cache.dispose()
        log.debug("Analysis pipeline disposed")

    @property
    def disposed(self) -> bool:
        return self._disposed

    def _cancel_in_flight(self, document_id: str) -> None:
        event = self._in_flight.pop(document_id, None)
        if event is not None:
            event.set()

    def _timed_out(self, document_id, ticket, started, fingerprint, version, error):
        if self._tickets.get(document_id) != ticket or self._disposed:
            return self._stale(document_id, ticket, started, version, error)
        self._stats["timeouts"] += 1
        return self._outcome(
            document_id,
            AnalysisStatus.TIMEOUT,
            started,
            tuple(error.partial_findings),
            fingerprint,
            version,
            error,
        )

    def _stale(self, document_id, ticket, started, version, error):
        superseded = not self._disposed and document_id in self._tickets
        if superseded:
            self._stats["superseded"] += 1
        status = AnalysisStatus.SUPERSEDED if superseded else AnalysisStatus.CANCELLED
        log.debug(f"{document_id}: discarding analysis #{ticket} ({status.value})")
        return self._outcome(document_id, status, started, (), None, version, error)

    def _outcome(self, document_id, status, started, findings, fingerprint, version, error=None):
        return AnalysisOutcome(
            document_id=document_id,
            status=status,
            findings=tuple(findings),
            fingerprint=fingerprint,
            version=version,
            error=error,
            duration=self._clock() - started,
        )
