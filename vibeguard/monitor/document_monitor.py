"""Change monitor - turns document events into analysis runs."""

from collections.abc import Iterable

from vibeguard.config_runtime import AnalysisSettings, VibeGuardSettings
from vibeguard.pipeline import AnalysisOutcome, AnalysisPipeline, AnalysisStatus
from vibeguard.presentation.diagnostics import DiagnosticPublisher
from vibeguard.presentation.presenter import FindingPresenter, PresentedDiagnostic
from vibeguard.presentation.quickfix import QuickFixSynthesizer
from vibeguard.protocols import CodeAction, TextDocument
from vibeguard.utils.logging import logger

from .scheduler import DebounceScheduler

log = logger.bind(component="monitor")


class ChangeMonitor:
    """Decides when document events trigger the analysis pipeline.

    Edits are debounced per document; opens and saves run immediately.
    Ineligible documents (real-time analysis off, untitled buffers,
    unsupported languages, oversized text) are skipped without being queued.
    Only current outcomes reach the diagnostic publisher, and a failed
    analysis publishes nothing new.
    """

    def __init__(
        self,
        pipeline: AnalysisPipeline,
        publisher: DiagnosticPublisher,
        presenter: FindingPresenter | None = None,
        settings: VibeGuardSettings | None = None,
        scheduler: DebounceScheduler | None = None,
        quick_fixes: QuickFixSynthesizer | None = None,
    ):
        self.pipeline = pipeline
        self.publisher = publisher
        self.presenter = presenter or FindingPresenter()
        self.settings = settings or VibeGuardSettings(analysis=pipeline.settings)
        self.scheduler = scheduler or DebounceScheduler()
        self.quick_fixes = quick_fixes or QuickFixSynthesizer()
        self._documents: dict[str, TextDocument] = {}
        self._disposed = False
        self._stats = {"triggered": 0, "skipped": 0, "published": 0, "discarded": 0, "failed": 0}

    @property
    def analysis_settings(self) -> AnalysisSettings:
        return self.settings.analysis

    def is_eligible(self, document: TextDocument) -> bool:
        """Gate applied before any analysis is scheduled."""
        settings = self.analysis_settings
        if not settings.enable_realtime:
            return False
        if document.is_untitled:
            return False
        if document.language_id not in settings.supported_languages:
            return False

        size = len(document.get_text().encode("utf-8", errors="surrogatepass"))
        if size > settings.max_file_size:
            log.warning(f"File too large for analysis: {document.uri} ({size} bytes)")
            return False
        return True

    def on_open(self, document: TextDocument):
        """Analyze a newly opened document immediately."""
        return self._trigger(document, immediate=True)

    def on_save(self, document: TextDocument):
        """Analyze a saved document immediately, dropping any pending edit timer."""
        return self._trigger(document, immediate=True)

    def on_change(self, document: TextDocument) -> bool:
        """Debounce an edit; returns True when a timer was armed."""
        return self._trigger(document, immediate=False) is not None

    def on_close(self, document: TextDocument) -> None:
        """Forget a closed document: cancel its timer and clear its diagnostics."""
        self.scheduler.cancel(document.uri)
        self.pipeline.invalidate(document.uri)
        self._documents.pop(document.uri, None)
        self.publisher.clear(document.uri)

    def analyze_open_documents(self, documents: Iterable[TextDocument]) -> int:
        """Debounce an analysis for every eligible document; returns how many."""
        count = 0
        for document in documents:
            if self.on_change(document):
                count += 1
        if count:
            log.info(f"Analyzing {count} open documents")
        return count

    async def analyze(self, document: TextDocument) -> AnalysisOutcome | None:
        """Run the pipeline for a document snapshot and publish the outcome."""
        if self._disposed:
            return None

        text = document.get_text()
        outcome = await self.pipeline.analyze(
            document.uri, text, document.language_id, document.version
        )
        self._handle(document, outcome)
        return outcome

    def update_settings(self, settings: VibeGuardSettings | AnalysisSettings) -> None:
        """Apply new settings; pending timers keep their documents."""
        if isinstance(settings, AnalysisSettings):
            settings = VibeGuardSettings(
                analysis=settings,
                cache=self.settings.cache,
                presentation=self.settings.presentation,
                excluded_folders=self.settings.excluded_folders,
                rules_file=self.settings.rules_file,
            )

        previous = self.analysis_settings
        self.settings = settings
        self.pipeline.update_settings(settings.analysis)

        if settings.analysis.debounce_ms != previous.debounce_ms:
            rearmed = self.scheduler.rearm(settings.analysis.debounce_seconds)
            log.info(
                f"Debounce delay changed to {settings.analysis.debounce_ms}ms "
                f"({rearmed} pending timers re-armed)"
            )
        if not settings.analysis.enable_realtime:
            self.scheduler.cancel_all()

    def diagnostics(self, uri: str) -> list[PresentedDiagnostic]:
        return self.publisher.current(uri)

    def code_actions(self, uri: str, line: int | None = None) -> list[CodeAction]:
        """Quick fixes for the published diagnostics of a document, optionally one line.

        Per-finding actions come first, followed by the batch actions for
        the same diagnostics. Batches include every member of a grouped
        diagnostic.
        """
        document = self._documents.get(uri)
        presentation = self.settings.presentation
        if document is None or not presentation.show_quick_fixes:
            return []

        text = document.get_text()
        actions: list[CodeAction] = []
        findings = []
        for diagnostic in self.publisher.current(uri):
            if line is not None and diagnostic.location.line != line:
                continue
            actions.extend(
                self.quick_fixes.actions_for(diagnostic.finding, text, document.language_id)
            )
            findings.extend(diagnostic.members or (diagnostic.finding,))
        actions.extend(
            self.quick_fixes.batch_actions(findings, text, presentation.max_batch_fixes)
        )
        return actions

    def get_stats(self) -> dict:
        stats = dict(self._stats)
        stats["scheduler"] = self.scheduler.get_stats()
        stats["pipeline"] = self.pipeline.get_stats()
        return stats

    async def wait_idle(self) -> None:
        """Wait until every analysis started so far has finished."""
        await self.scheduler.drain()

    async def dispose(self) -> None:
        """Cancel pending timers and in-flight analyses, then release the pipeline."""
        if self._disposed:
            return
        self._disposed = True
        self.scheduler.dispose()
        self.pipeline.dispose()
        await self.scheduler.drain()
        self._documents.clear()
        log.debug("Change monitor disposed")

    @property
    def disposed(self) -> bool:
        return self._disposed

    def _trigger(self, document: TextDocument, immediate: bool):
        if self._disposed:
            return None
        if not self.is_eligible(document):
            self._stats["skipped"] += 1
            return None

        self._stats["triggered"] += 1
        self._documents[document.uri] = document

        if immediate:
            return self.scheduler.run_now(document.uri, lambda: self.analyze(document))

        armed = self.scheduler.schedule(
            document.uri,
            self.analysis_settings.debounce_seconds,
            lambda: self.analyze(document),
        )
        return True if armed else None

    def _handle(self, document: TextDocument, outcome: AnalysisOutcome) -> None:
        if not outcome.is_current or self._disposed:
            self._stats["discarded"] += 1
            log.debug(f"{document.uri}: dropping stale outcome ({outcome.status.value})")
            return

        if outcome.status is AnalysisStatus.FAILED:
            self._stats["failed"] += 1
            log.error(f"{document.uri}: analysis failed, keeping previous diagnostics")
            return

        if outcome.status is AnalysisStatus.TIMEOUT:
            log.warning(
                f"{document.uri}: showing {len(outcome.findings)} findings from a partial analysis"
            )

        diagnostics = self.presenter.present(outcome.findings, self.settings.presentation)
        if self.publisher.publish(document.uri, diagnostics):
            self._stats["published"] += 1
