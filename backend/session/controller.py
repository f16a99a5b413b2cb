import asyncio
import logging
from typing import Optional

from backend.models import SimulationError, SimulationParams
from backend.services.explainer import ExplanationError, WaveformExplainer
from backend.services.simulation import run_simulation
from backend.session.models import SimulationSession
from backend.session.store import InMemorySessionStore
from engine.errors import WaveformError

logger = logging.getLogger(__name__)


class ExplanationInProgress(Exception):
    """An explanation request is already running for this session."""


class NoResultToExplain(Exception):
    """The session has no successful simulation to explain."""


class SimulationController:
    """Owns the debounce / last-write-wins policy for interactive sessions.

    Every parameter submission bumps the session generation and returns it
    as a token. A run (or explanation reply) whose token no longer matches
    the session generation is stale and is dropped instead of merged.
    """

    def __init__(
        self,
        session_store: InMemorySessionStore,
        explainer: Optional[WaveformExplainer] = None,
        debounce_seconds: float = 0.2,
    ):
        self.session_store = session_store
        self.explainer = explainer
        self.debounce_seconds = debounce_seconds

    def submit(self, session: SimulationSession, params: SimulationParams) -> int:
        """Record new parameters and return the generation token for them."""
        session.generation += 1
        session.params = params
        # An explanation describes the previous parameters
        session.explanation = None
        return session.generation

    async def run(self, session: SimulationSession, token: int) -> bool:
        """Simulate for `token`; returns False if a newer submission superseded it."""
        if token != session.generation:
            logger.info("Skipping superseded simulation %d (current %d)", token, session.generation)
            return False

        response = None
        error = None
        try:
            response = run_simulation(session.params)
        except WaveformError as e:
            error = e

        if token != session.generation:
            logger.info("Discarding stale simulation result %d (current %d)", token, session.generation)
            return False

        session.applied_generation = token
        if error is not None:
            # Withhold the previous waveform rather than show it next to the error
            session.last_result = None
            session.last_waveform = None
            session.classification = None
            session.last_error = SimulationError(kind=error.kind, message=error.message)
            await self.session_store.update_session(session)
            return True

        session.last_result = response.result
        session.last_waveform = response.waveform
        session.classification = response.classification
        session.last_error = None
        await self.session_store.update_session(session)
        return True

    async def update(
        self,
        session: SimulationSession,
        params: SimulationParams,
        debounce_seconds: Optional[float] = None,
    ) -> bool:
        """Submit, wait out the debounce window, then run if still the latest."""
        token = self.submit(session, params)
        delay = self.debounce_seconds if debounce_seconds is None else debounce_seconds
        if delay > 0:
            await asyncio.sleep(delay)
        return await self.run(session, token)

    async def explain(self, session: SimulationSession) -> Optional[str]:
        """Request an explanation of the current result.

        Returns the text, or None when the parameters changed while the
        request was in flight (the reply is discarded).

        Raises:
            ExplanationInProgress: another request is already running.
            NoResultToExplain: the session has no successful result.
            ExplanationError: the collaborator failed; the existing
                waveform and result are kept.
        """
        if self.explainer is None:
            raise ExplanationError("Explanation service is not configured")
        if session.explaining:
            raise ExplanationInProgress("An explanation is already being generated for this session")
        if session.last_result is None or session.applied_generation != session.generation:
            raise NoResultToExplain("Run a successful simulation before requesting an explanation")

        token = session.generation
        params = session.params.to_engine()
        result = session.last_result.to_engine()

        session.explaining = True
        session.last_error = None
        await self.session_store.update_session(session)
        try:
            text = await self.explainer.explain(params, result)
        except ExplanationError as e:
            if token == session.generation:
                session.last_error = SimulationError(kind="ExplanationError", message=str(e))
            raise
        finally:
            session.explaining = False
            await self.session_store.update_session(session)

        if token != session.generation:
            logger.info("Discarding explanation for superseded parameters %d (current %d)", token, session.generation)
            return None

        session.explanation = text
        await self.session_store.update_session(session)
        return text
