"""
Tests for the session controller.

Validates the interactive-host policy:
1. Debounced updates are last-write-wins; stale runs are discarded
2. Engine errors replace the displayed result with an error
3. Explanations run at most once at a time, never overwrite newer state,
   and a failed explanation keeps the waveform/result pair
"""

import asyncio
from datetime import timedelta

import pytest
import sys
import os

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.dirname(__file__))))

from backend.models import SimulationParams
from backend.services.explainer import ExplanationError
from backend.session.controller import ExplanationInProgress, NoResultToExplain, SimulationController
from backend.session.models import utc_now
from backend.session.store import InMemorySessionStore
from engine.waveform import simulate


SLOW_FRONT = SimulationParams(
    stages=1,
    charging_voltage=100.0,
    stage_capacitance=100.0,
    load_capacitance=10000.0,
    front_resistor=500.0,
    tail_resistor=1000.0,
)

# Passes field validation, but R2·C1 / R1·C2 = 1e27 cancels alpha to zero
DEGENERATE = SimulationParams(
    stages=1,
    charging_voltage=100.0,
    stage_capacitance=1e6,
    load_capacitance=1e-6,
    front_resistor=1e-6,
    tail_resistor=1e6,
)


class FakeExplainer:
    def __init__(self, text="Explanation text", error=None, gate=None):
        self.text = text
        self.error = error
        self.gate = gate
        self.calls = []

    async def explain(self, params, result):
        self.calls.append((params, result))
        if self.gate is not None:
            await self.gate.wait()
        if self.error is not None:
            raise self.error
        return self.text


def _setup(explainer=None):
    store = InMemorySessionStore()
    controller = SimulationController(store, explainer=explainer, debounce_seconds=0)
    return store, controller


class TestUpdates:

    def test_update_applies_result(self):
        async def scenario():
            store, controller = _setup()
            session = await store.create_session()
            applied = await controller.update(session, SimulationParams())
            return session, applied

        session, applied = asyncio.run(scenario())

        assert applied
        assert session.generation == 1
        assert session.applied_generation == 1
        assert session.last_error is None
        assert len(session.last_waveform.time) == 2001
        assert session.last_result.peak_voltage == pytest.approx(399.0, rel=1e-3)

    def test_last_write_wins(self):
        """Two overlapping debounced updates: only the later one lands."""
        async def scenario():
            store, controller = _setup()
            session = await store.create_session()
            outcomes = await asyncio.gather(
                controller.update(session, SimulationParams(), debounce_seconds=0.05),
                controller.update(session, SLOW_FRONT, debounce_seconds=0.05),
            )
            return session, outcomes

        session, outcomes = asyncio.run(scenario())
        _, expected = simulate(SLOW_FRONT.to_engine())

        assert outcomes == [False, True]
        assert session.params == SLOW_FRONT
        assert session.last_result.peak_voltage == pytest.approx(expected.peak_voltage)
        assert session.applied_generation == 2

    def test_stale_token_discarded(self):
        async def scenario():
            store, controller = _setup()
            session = await store.create_session()
            first = controller.submit(session, SimulationParams())
            second = controller.submit(session, SLOW_FRONT)
            stale = await controller.run(session, first)
            state_after_stale = session.last_result
            fresh = await controller.run(session, second)
            return session, stale, state_after_stale, fresh

        session, stale, state_after_stale, fresh = asyncio.run(scenario())

        assert stale is False
        assert state_after_stale is None
        assert fresh is True
        assert session.last_result is not None

    def test_engine_error_withholds_previous_result(self):
        async def scenario():
            store, controller = _setup()
            session = await store.create_session()
            await controller.update(session, SimulationParams())
            applied = await controller.update(session, DEGENERATE)
            return session, applied

        session, applied = asyncio.run(scenario())

        assert applied
        assert session.last_result is None
        assert session.last_waveform is None
        assert session.last_error.kind == "InvalidWaveformShape"

    def test_recovery_clears_error(self):
        async def scenario():
            store, controller = _setup()
            session = await store.create_session()
            await controller.update(session, DEGENERATE)
            await controller.update(session, SimulationParams())
            return session

        session = asyncio.run(scenario())
        assert session.last_error is None
        assert session.last_result is not None

    def test_new_params_clear_explanation(self):
        async def scenario():
            store, controller = _setup(FakeExplainer())
            session = await store.create_session()
            await controller.update(session, SimulationParams())
            await controller.explain(session)
            before = session.explanation
            controller.submit(session, SLOW_FRONT)
            return before, session.explanation

        before, after = asyncio.run(scenario())
        assert before == "Explanation text"
        assert after is None


class TestExplanations:

    def test_explain_stores_text(self):
        explainer = FakeExplainer(text="A 1.2/50 waveform.")

        async def scenario():
            store, controller = _setup(explainer)
            session = await store.create_session()
            await controller.update(session, SimulationParams())
            text = await controller.explain(session)
            return session, text

        session, text = asyncio.run(scenario())

        assert text == "A 1.2/50 waveform."
        assert session.explanation == text
        assert session.explaining is False
        params, result = explainer.calls[0]
        assert params.stages == 4
        assert result.peak_voltage == pytest.approx(session.last_result.peak_voltage)

    def test_failure_keeps_result(self):
        explainer = FakeExplainer(error=ExplanationError("service down"))

        async def scenario():
            store, controller = _setup(explainer)
            session = await store.create_session()
            await controller.update(session, SimulationParams())
            with pytest.raises(ExplanationError):
                await controller.explain(session)
            return session

        session = asyncio.run(scenario())

        assert session.last_result is not None
        assert session.last_waveform is not None
        assert session.explaining is False
        assert session.last_error.kind == "ExplanationError"
        assert session.last_error.message == "service down"

    def test_requires_result(self):
        async def scenario():
            store, controller = _setup(FakeExplainer())
            session = await store.create_session()
            await controller.explain(session)

        with pytest.raises(NoResultToExplain):
            asyncio.run(scenario())

    def test_pending_update_blocks_explanation(self):
        """A submitted but not yet simulated change makes the result stale."""
        async def scenario():
            store, controller = _setup(FakeExplainer())
            session = await store.create_session()
            await controller.update(session, SimulationParams())
            controller.submit(session, SLOW_FRONT)
            await controller.explain(session)

        with pytest.raises(NoResultToExplain):
            asyncio.run(scenario())

    def test_single_request_in_flight(self):
        async def scenario():
            gate = asyncio.Event()
            explainer = FakeExplainer(gate=gate)
            store, controller = _setup(explainer)
            session = await store.create_session()
            await controller.update(session, SimulationParams())

            task = asyncio.create_task(controller.explain(session))
            await asyncio.sleep(0)
            with pytest.raises(ExplanationInProgress):
                await controller.explain(session)
            gate.set()
            return await task, len(explainer.calls)

        text, calls = asyncio.run(scenario())
        assert text == "Explanation text"
        assert calls == 1

    def test_reply_for_superseded_params_discarded(self):
        async def scenario():
            gate = asyncio.Event()
            store, controller = _setup(FakeExplainer(gate=gate))
            session = await store.create_session()
            await controller.update(session, SimulationParams())

            task = asyncio.create_task(controller.explain(session))
            await asyncio.sleep(0)
            await controller.update(session, SLOW_FRONT)
            gate.set()
            return session, await task

        session, text = asyncio.run(scenario())
        assert text is None
        assert session.explanation is None
        assert session.params == SLOW_FRONT

    def test_unconfigured_explainer(self):
        async def scenario():
            store, controller = _setup(None)
            session = await store.create_session()
            await controller.update(session, SimulationParams())
            await controller.explain(session)

        with pytest.raises(ExplanationError):
            asyncio.run(scenario())


class TestSessionStore:

    def test_create_get_delete(self):
        async def scenario():
            store = InMemorySessionStore()
            session = await store.create_session()
            fetched = await store.get_session(session.id)
            deleted = await store.delete_session(session.id)
            missing = await store.get_session(session.id)
            return session, fetched, deleted, missing

        session, fetched, deleted, missing = asyncio.run(scenario())
        assert fetched is session
        assert deleted is True
        assert missing is None

    def test_cleanup_expired(self):
        async def scenario():
            store = InMemorySessionStore(ttl_hours=1)
            await store.create_session()
            later = utc_now() + timedelta(hours=2)
            removed = await store.cleanup_expired(now=later)
            return store, removed

        store, removed = asyncio.run(scenario())
        assert removed == 1
        assert len(store) == 0

    def test_expired_session_is_missing(self):
        async def scenario():
            store = InMemorySessionStore(ttl_hours=1)
            session = await store.create_session()
            session.updated_at = utc_now() - timedelta(hours=2)
            return store, await store.get_session(session.id)

        store, fetched = asyncio.run(scenario())
        assert fetched is None
        assert len(store) == 0

    def test_create_prunes_expired(self):
        async def scenario():
            store = InMemorySessionStore(ttl_hours=1)
            stale = await store.create_session()
            stale.updated_at = utc_now() - timedelta(hours=2)
            fresh = await store.create_session()
            return store, stale, fresh

        store, stale, fresh = asyncio.run(scenario())
        assert len(store) == 1
        assert list(store._sessions) == [fresh.id]

    def test_update_refreshes_expiry(self):
        async def scenario():
            store = InMemorySessionStore(ttl_hours=1)
            session = await store.create_session()
            session.updated_at = utc_now() - timedelta(hours=2)
            await store.update_session(session)
            return await store.get_session(session.id), session

        fetched, session = asyncio.run(scenario())
        assert fetched is session
