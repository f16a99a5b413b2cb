"""Engine calls shared by the HTTP routes and the session controller."""

from backend.models import (
    Classification,
    SimulateResponse,
    SimulationMetrics,
    SimulationParams,
    WaveformData,
)
from engine.standards import DEFAULT_TOLERANCE, classify_waveform, voltage_efficiency
from engine.waveform import SimulationResult, simulate_arrays


def build_classification(
    params: SimulationParams,
    result: SimulationResult,
    tolerance: float = DEFAULT_TOLERANCE,
) -> Classification:
    classification = classify_waveform(result, tolerance)
    return Classification(
        front_standard=classification.front_standard,
        tail_standard=classification.tail_standard,
        is_standard=classification.is_standard,
        label=classification.label,
        tolerance=tolerance,
        voltage_efficiency=voltage_efficiency(params.to_engine(), result),
    )


def run_simulation(params: SimulationParams, tolerance: float = DEFAULT_TOLERANCE) -> SimulateResponse:
    """
    Simulate and package the waveform, metrics and classification.

    Raises:
        WaveformError: propagated unchanged from the engine.
    """
    time_us, voltage_kv, result = simulate_arrays(params.to_engine())
    return SimulateResponse(
        params=params,
        waveform=WaveformData(time=time_us.tolist(), voltage=voltage_kv.tolist()),
        result=SimulationMetrics.from_engine(result),
        classification=build_classification(params, result, tolerance),
    )
