"""Pytest configuration and fixtures."""

import re
import threading

import pytest

from vibeguard.cache import AnalysisCache
from vibeguard.config_runtime import AnalysisSettings
from vibeguard.pipeline import AnalysisPipeline
from vibeguard.presentation import DiagnosticPublisher, InMemoryDiagnosticSink
from vibeguard.protocols import DocumentSnapshot
from vibeguard.rules import RuleEngine, RuleRegistry, build_default_registry
from vibeguard.rules.base import Category, Rule, Severity

OPENAI_KEY = "sk-proj-" + "A" * 40
OPENAI_KEY_LINE = f'const apiKey = "{OPENAI_KEY}";'


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class CountingEngine(RuleEngine):
    """Rule engine that records how often it was executed."""

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.calls = 0

    def execute(self, *args, **kwargs):
        self.calls += 1
        return super().execute(*args, **kwargs)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def make_rule():
    """Factory for small test rules."""

    def factory(rule_id="TEST_RULE", pattern=r"danger", **overrides) -> Rule:
        fields = {
            "id": rule_id,
            "category": Category.CODE_INJECTION,
            "severity": Severity.WARNING,
            "pattern": pattern,
            "message": "Dangerous construct: {match}",
            "flags": re.MULTILINE,
        }
        fields.update(overrides)
        return Rule(**fields)

    return factory


@pytest.fixture
def registry():
    """Fresh registry with the built-in catalog."""
    return build_default_registry()


@pytest.fixture
def engine(registry):
    return RuleEngine(registry)


@pytest.fixture
def counting_engine(registry):
    return CountingEngine(registry)


@pytest.fixture
def cache(clock):
    """Cache on the fake clock, without the sweeper thread."""
    cache = AnalysisCache(ttl=60.0, capacity=100, sweep_interval=None, clock=clock)
    yield cache
    cache.dispose()


@pytest.fixture
def pipeline(counting_engine, cache):
    pipeline = AnalysisPipeline(counting_engine, cache, AnalysisSettings())
    yield pipeline
    pipeline.dispose()


@pytest.fixture
def sink():
    return InMemoryDiagnosticSink()


@pytest.fixture
def publisher(sink):
    return DiagnosticPublisher(sink)


@pytest.fixture
def make_document():
    """Factory for in-memory documents."""

    def factory(text="", language_id="javascript", uri="file:///project/app.js", **kwargs):
        return DocumentSnapshot(uri=uri, text=text, language_id=language_id, **kwargs)

    return factory


@pytest.fixture
def isolated_registry(make_rule):
    """Registry with two simple rules, independent of the catalog."""
    return RuleRegistry([
        make_rule("FIRST_RULE", r"alpha"),
        make_rule("SECOND_RULE", r"alpha|beta", severity=Severity.ERROR),
    ])


class GatedEngine(RuleEngine):
    """Rule engine that blocks on one text until released or cancelled.

    With ``honor_cancel`` the blocked call wakes up when its cancel event is
    set and then raises AnalysisCancelled like a real run. Without it the call
    only returns once ``release`` is set, as if it ignored the cancellation.
    """

    def __init__(self, registry, gate_text, honor_cancel=True):
        super().__init__(registry)
        self.gate_text = gate_text
        self.honor_cancel = honor_cancel
        self.started = threading.Event()
        self.release = threading.Event()

    def execute(self, text, language_id, **kwargs):
        if text == self.gate_text:
            self.started.set()
            if self.honor_cancel:
                kwargs["cancel_event"].wait(5)
                return super().execute(text, language_id, **kwargs)
            self.release.wait(5)
            return super().execute(text, language_id)
        return super().execute(text, language_id, **kwargs)
