"""
RESILIENCE COORDINATOR TESTS

Debounce, generation checks and session lifecycle. Analyses are gated
with asyncio events so completion order is controlled by the test.
"""

import asyncio

import pytest

from draftlens.models.schemas import DocumentAnalysis
from draftlens.services.coordinator import (
    CoordinatorRegistry,
    CoordinatorState,
    DocumentCoordinator,
    SessionClosedError,
    SessionNotFoundError,
)
from draftlens.services.document_analyzer import DocumentAnalyzer
from draftlens.services.grammar_provider import GrammarProvider, TransientSourceError
from draftlens.services.retry import NO_RETRY
from draftlens.services.suggestion_engine import SuggestionEngine


# =============================================================================
# HELPERS
# =============================================================================

class GatedAnalyzer:
    """Each generation's analysis blocks until the test releases it."""

    def __init__(self):
        self.started = {}
        self.release = {}
        self.calls = []

    def gate(self, generation):
        self.started.setdefault(generation, asyncio.Event())
        self.release.setdefault(generation, asyncio.Event())

    async def __call__(self, request):
        self.gate(request.generation)
        self.calls.append((request.generation, request.text))
        self.started[request.generation].set()
        await self.release[request.generation].wait()
        return DocumentAnalysis(document_id=request.document_id, generation=request.generation)


class ImmediateAnalyzer:
    def __init__(self):
        self.calls = []

    async def __call__(self, request):
        self.calls.append((request.generation, request.text))
        return DocumentAnalysis(document_id=request.document_id, generation=request.generation)


async def wait_until(predicate, timeout=1.0):
    async def poll():
        while not predicate():
            await asyncio.sleep(0.001)
    await asyncio.wait_for(poll(), timeout)


# =============================================================================
# DEBOUNCE
# =============================================================================

class TestDebounce:

    @pytest.mark.asyncio
    async def test_rapid_edits_analyze_latest_only(self):
        analyzer = ImmediateAnalyzer()
        delivered = []
        coordinator = DocumentCoordinator(
            "doc-1", analyzer, debounce_seconds=0.05, on_deliver=delivered.append
        )

        coordinator.submit_edit("one")
        coordinator.submit_edit("one two")
        request = coordinator.submit_edit("one two three")

        assert request.generation == 3
        assert coordinator.state is CoordinatorState.PENDING

        await coordinator.drain()

        assert analyzer.calls == [(3, "one two three")]
        assert [r.generation for r in delivered] == [3]
        assert coordinator.state is CoordinatorState.IDLE
        assert coordinator.latest_result.generation == 3

    @pytest.mark.asyncio
    async def test_nothing_runs_before_delay(self):
        analyzer = ImmediateAnalyzer()
        coordinator = DocumentCoordinator("doc-1", analyzer, debounce_seconds=10)

        coordinator.submit_edit("text")
        await asyncio.sleep(0.01)

        assert analyzer.calls == []
        assert coordinator.state is CoordinatorState.PENDING
        await coordinator.close()


# =============================================================================
# STALE RESULTS
# =============================================================================

class TestStaleResults:

    @pytest.mark.asyncio
    async def test_newer_generation_finishing_first_wins(self):
        analyzer = GatedAnalyzer()
        analyzer.gate(1)
        analyzer.gate(2)
        delivered = []
        coordinator = DocumentCoordinator(
            "doc-1", analyzer, debounce_seconds=0, on_deliver=delivered.append
        )

        coordinator.submit_edit("first version")
        await asyncio.wait_for(analyzer.started[1].wait(), 1)
        assert coordinator.state is CoordinatorState.RUNNING

        coordinator.submit_edit("second version")
        assert coordinator.state is CoordinatorState.PENDING
        await asyncio.wait_for(analyzer.started[2].wait(), 1)

        analyzer.release[2].set()
        await wait_until(lambda: delivered)
        assert [r.generation for r in delivered] == [2]
        assert coordinator.state is CoordinatorState.IDLE

        analyzer.release[1].set()
        await coordinator.drain()

        assert [r.generation for r in delivered] == [2]
        assert coordinator.stale_discards == 1
        assert coordinator.latest_result.generation == 2
        assert coordinator.state is CoordinatorState.IDLE

    @pytest.mark.asyncio
    async def test_stale_completion_leaves_pending_state(self):
        analyzer = GatedAnalyzer()
        analyzer.gate(1)
        analyzer.gate(2)
        delivered = []
        coordinator = DocumentCoordinator(
            "doc-1", analyzer, debounce_seconds=0.05, on_deliver=delivered.append
        )

        coordinator.submit_edit("first")
        await asyncio.wait_for(analyzer.started[1].wait(), 1)

        coordinator.submit_edit("second")
        analyzer.release[1].set()
        await wait_until(lambda: coordinator.stale_discards == 1)

        assert delivered == []
        assert coordinator.state is CoordinatorState.PENDING

        analyzer.release[2].set()
        await coordinator.drain()

        assert [r.generation for r in delivered] == [2]
        assert [generation for generation, _ in analyzer.calls] == [1, 2]

    @pytest.mark.asyncio
    async def test_in_flight_analysis_not_cancelled_by_edit(self):
        analyzer = GatedAnalyzer()
        analyzer.gate(1)
        coordinator = DocumentCoordinator("doc-1", analyzer, debounce_seconds=0)

        coordinator.submit_edit("first")
        await asyncio.wait_for(analyzer.started[1].wait(), 1)

        # keep the second edit parked in its debounce window
        coordinator.debounce_seconds = 10
        coordinator.submit_edit("second")

        analyzer.release[1].set()
        await wait_until(lambda: coordinator.stale_discards == 1)

        assert analyzer.calls == [(1, "first")]
        assert coordinator.state is CoordinatorState.PENDING
        await coordinator.close()


# =============================================================================
# FAILURES AND LIFECYCLE
# =============================================================================

class TestLifecycle:

    @pytest.mark.asyncio
    async def test_failed_analysis_returns_to_idle(self):
        async def explode(request):
            raise RuntimeError("analysis bug")

        delivered = []
        coordinator = DocumentCoordinator(
            "doc-1", explode, debounce_seconds=0, on_deliver=delivered.append
        )

        coordinator.submit_edit("text")
        await coordinator.drain()

        assert delivered == []
        assert coordinator.state is CoordinatorState.IDLE
        assert coordinator.latest_result is None

    @pytest.mark.asyncio
    async def test_close_cancels_pending_work(self):
        analyzer = GatedAnalyzer()
        analyzer.gate(1)
        delivered = []
        coordinator = DocumentCoordinator(
            "doc-1", analyzer, debounce_seconds=0, on_deliver=delivered.append
        )

        coordinator.submit_edit("text")
        await asyncio.wait_for(analyzer.started[1].wait(), 1)
        await coordinator.close()

        assert coordinator.state is CoordinatorState.CLOSED
        assert delivered == []
        with pytest.raises(SessionClosedError):
            coordinator.submit_edit("more text")


class TestRegistry:

    @pytest.mark.asyncio
    async def test_open_is_idempotent(self):
        registry = CoordinatorRegistry(ImmediateAnalyzer(), debounce_seconds=0)

        first = registry.open("doc-1")
        assert registry.open("doc-1") is first
        assert "doc-1" in registry
        assert len(registry) == 1

    @pytest.mark.asyncio
    async def test_documents_are_independent(self):
        analyzer = ImmediateAnalyzer()
        registry = CoordinatorRegistry(analyzer, debounce_seconds=0)
        a = registry.open("doc-a")
        b = registry.open("doc-b")

        a.submit_edit("a1")
        a.submit_edit("a2")
        b.submit_edit("b1")
        await a.drain()
        await b.drain()

        assert a.generation == 2
        assert b.generation == 1
        assert a.latest_result.document_id == "doc-a"
        assert b.latest_result.generation == 1

    @pytest.mark.asyncio
    async def test_close_and_get(self):
        registry = CoordinatorRegistry(ImmediateAnalyzer(), debounce_seconds=0)
        coordinator = registry.open("doc-1")

        await registry.close("doc-1")

        assert coordinator.state is CoordinatorState.CLOSED
        assert "doc-1" not in registry
        with pytest.raises(SessionNotFoundError):
            registry.get("doc-1")
        with pytest.raises(SessionNotFoundError):
            await registry.close("doc-1")

    @pytest.mark.asyncio
    async def test_close_all(self):
        registry = CoordinatorRegistry(ImmediateAnalyzer(), debounce_seconds=0)
        registry.open("doc-1").submit_edit("text")
        registry.open("doc-2")

        await registry.close_all()

        assert len(registry) == 0


# =============================================================================
# END TO END
# =============================================================================

class DownProvider(GrammarProvider):
    name = "down"

    async def check(self, text):
        raise TransientSourceError("down", internal_reason="network error")


class TestDocumentAnalysis:

    @pytest.mark.asyncio
    async def test_degraded_analysis_delivered(self):
        analyzer = DocumentAnalyzer(SuggestionEngine(DownProvider(), retry_policy=NO_RETRY))
        delivered = []
        coordinator = DocumentCoordinator(
            "doc-1", analyzer.analyze, debounce_seconds=0, on_deliver=delivered.append
        )
        text = "Teh report is ready. We reviewed every section carefully before sending it out."

        coordinator.submit_edit(text)
        await coordinator.drain()

        [analysis] = delivered
        assert analysis.generation == 1
        assert analysis.degraded is True
        assert (analysis.suggestions[0].start, analysis.suggestions[0].end) == (0, 3)
        assert analysis.tone is not None
        assert analysis.readability is not None
        assert analysis.readability.sentence_count == 2

    @pytest.mark.asyncio
    async def test_short_text_skips_tone_and_readability(self):
        analyzer = DocumentAnalyzer(SuggestionEngine(DownProvider(), retry_policy=NO_RETRY))
        coordinator = DocumentCoordinator("doc-1", analyzer.analyze, debounce_seconds=0)

        coordinator.submit_edit("Teh end.")
        await coordinator.drain()

        analysis = coordinator.latest_result
        assert analysis.tone is None
        assert analysis.readability is None
        assert len(analysis.suggestions) == 1
