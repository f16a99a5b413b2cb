"""Explanation route: parameters + metrics → natural-language analysis."""

import logging

from fastapi import APIRouter, HTTPException, Request

from backend.models import ExplainRequest, ExplainResponse, SimulationMetrics
from backend.routes.simulation import waveform_error_to_http
from backend.services.explainer import ExplainerNotConfigured, ExplanationError, WaveformExplainer
from engine.errors import WaveformError
from engine.waveform import simulate_arrays

logger = logging.getLogger(__name__)

router = APIRouter()


def get_explainer(request: Request) -> WaveformExplainer:
    return request.app.state.explainer


@router.post("/explain", response_model=ExplainResponse)
async def explain_waveform(body: ExplainRequest, request: Request):
    """Explain a simulation result for an engineering student."""
    params = body.params.to_engine()

    if body.result is not None:
        result = body.result.to_engine()
    else:
        try:
            _, _, result = simulate_arrays(params)
        except WaveformError as e:
            raise waveform_error_to_http(e)

    explainer = get_explainer(request)
    try:
        text = await explainer.explain(params, result)
    except ExplainerNotConfigured:
        raise HTTPException(status_code=500, detail="ANTHROPIC_API_KEY not configured")
    except ExplanationError as e:
        raise HTTPException(status_code=502, detail=str(e))

    return ExplainResponse(explanation=text, result=SimulationMetrics.from_engine(result))
