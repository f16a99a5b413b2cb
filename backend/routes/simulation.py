"""Simulation routes: parameters → waveform, metrics and exports."""

from fastapi import APIRouter, HTTPException, Query
from fastapi.responses import Response

from backend.models import (
    ExportFormat,
    ParameterRange,
    ParameterRangesResponse,
    SimulateRequest,
    SimulateResponse,
    SimulationParams,
)
from backend.services.simulation import run_simulation
from engine.circuit import DEFAULT_PARAMETERS, PARAMETER_RANGES
from engine.errors import WaveformError
from engine.export import export_csv, export_json
from engine.waveform import simulate

router = APIRouter()


def waveform_error_to_http(e: WaveformError) -> HTTPException:
    return HTTPException(status_code=422, detail=e.to_dict())


@router.get("/parameters", response_model=ParameterRangesResponse)
async def parameter_ranges():
    """Default values and suggested slider ranges for each parameter."""
    return ParameterRangesResponse(
        parameters=[
            ParameterRange(
                name=name,
                min=low,
                max=high,
                step=step,
                unit=unit,
                default=getattr(DEFAULT_PARAMETERS, name),
            )
            for name, (low, high, step, unit) in PARAMETER_RANGES.items()
        ]
    )


@router.post("/simulate", response_model=SimulateResponse)
async def simulate_endpoint(request: SimulateRequest):
    """Simulate the impulse waveform for one parameter set."""
    try:
        return run_simulation(request.params, request.tolerance)
    except WaveformError as e:
        raise waveform_error_to_http(e)


@router.post("/simulate/export")
async def export_waveform(
    params: SimulationParams,
    format: ExportFormat = Query(ExportFormat.CSV),
):
    """Download the simulated waveform as CSV or JSON."""
    engine_params = params.to_engine()
    try:
        waveform, result = simulate(engine_params)
    except WaveformError as e:
        raise waveform_error_to_http(e)

    if format == ExportFormat.JSON:
        return Response(
            content=export_json(engine_params, waveform, result),
            media_type="application/json",
            headers={"Content-Disposition": "attachment; filename=impulse_waveform.json"},
        )
    return Response(
        content=export_csv(waveform, result),
        media_type="text/csv",
        headers={"Content-Disposition": "attachment; filename=impulse_waveform.csv"},
    )
