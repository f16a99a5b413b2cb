"""Session routes: interactive parameter editing with last-write-wins."""

from fastapi import APIRouter, HTTPException, Request

from backend.services.explainer import ExplainerNotConfigured, ExplanationError
from backend.session.controller import ExplanationInProgress, NoResultToExplain, SimulationController
from backend.session.models import SessionState, SessionSummary, UpdateParamsRequest

router = APIRouter()


def _get_controller(request: Request) -> SimulationController:
    return request.app.state.controller


async def _load(controller: SimulationController, session_id: str):
    session = await controller.session_store.get_session(session_id)
    if not session:
        raise HTTPException(status_code=404, detail="Session not found")
    return session


@router.post("/sessions", response_model=SessionState)
async def create_session(request: Request):
    """Create a session and simulate the default parameters."""
    controller = _get_controller(request)
    session = await controller.session_store.create_session()
    await controller.update(session, session.params, debounce_seconds=0)
    return SessionState.from_session(session)


@router.get("/sessions", response_model=list[SessionSummary])
async def list_sessions(request: Request):
    controller = _get_controller(request)
    sessions = await controller.session_store.list_sessions()
    return [
        SessionSummary(
            id=s.id,
            generation=s.generation,
            has_result=s.last_result is not None,
            created_at=s.created_at,
            updated_at=s.updated_at,
        )
        for s in sessions
    ]


@router.get("/sessions/{session_id}", response_model=SessionState)
async def get_session(session_id: str, request: Request):
    session = await _load(_get_controller(request), session_id)
    return SessionState.from_session(session)


@router.put("/sessions/{session_id}/parameters", response_model=SessionState)
async def update_parameters(session_id: str, body: UpdateParamsRequest, request: Request):
    """Debounced update. `applied` is false when a later update superseded this one."""
    controller = _get_controller(request)
    session = await _load(controller, session_id)
    applied = await controller.update(session, body.params, body.debounce)
    return SessionState.from_session(session, applied=applied)


@router.post("/sessions/{session_id}/explain", response_model=SessionState)
async def explain_session(session_id: str, request: Request):
    """Explain the session's current result. Failure keeps the result visible."""
    controller = _get_controller(request)
    session = await _load(controller, session_id)
    try:
        await controller.explain(session)
    except ExplanationInProgress as e:
        raise HTTPException(status_code=409, detail=str(e))
    except NoResultToExplain as e:
        raise HTTPException(status_code=409, detail=str(e))
    except ExplainerNotConfigured:
        raise HTTPException(status_code=500, detail="ANTHROPIC_API_KEY not configured")
    except ExplanationError as e:
        raise HTTPException(status_code=502, detail=str(e))
    return SessionState.from_session(session)


@router.delete("/sessions/{session_id}")
async def delete_session(session_id: str, request: Request):
    controller = _get_controller(request)
    deleted = await controller.session_store.delete_session(session_id)
    if not deleted:
        raise HTTPException(status_code=404, detail="Session not found")
    return {"status": "deleted"}
