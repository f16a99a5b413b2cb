"""
Comparison against the standard 1.2/50 µs lightning impulse.

These are display heuristics for hosts that label a result as standard or
non-standard. They never fail a simulation.
"""

from dataclasses import dataclass

from engine.circuit import SimulationParameters
from engine.waveform import SimulationResult

STANDARD_FRONT_TIME_US = 1.2
STANDARD_TAIL_TIME_US = 50.0
DEFAULT_TOLERANCE = 0.30


@dataclass(frozen=True)
class WaveformClassification:
    front_standard: bool
    tail_standard: bool
    tolerance: float

    @property
    def is_standard(self) -> bool:
        return self.front_standard and self.tail_standard

    @property
    def label(self) -> str:
        if self.is_standard:
            return "1.2/50 µs standard lightning impulse"
        return "non-standard impulse"


def is_within_tolerance(value: float, target: float, tolerance: float = DEFAULT_TOLERANCE) -> bool:
    """True when |value - target| / target <= tolerance."""
    if target <= 0:
        raise ValueError(f"Target must be positive, got {target}")
    return abs(value - target) / target <= tolerance


def classify_waveform(result: SimulationResult, tolerance: float = DEFAULT_TOLERANCE) -> WaveformClassification:
    """Check T1 and T2 against 1.2 µs and 50 µs."""
    return WaveformClassification(
        front_standard=is_within_tolerance(result.front_time, STANDARD_FRONT_TIME_US, tolerance),
        tail_standard=is_within_tolerance(result.tail_time, STANDARD_TAIL_TIME_US, tolerance),
        tolerance=tolerance,
    )


def total_charging_voltage(params: SimulationParameters) -> float:
    """Sum of the stage charging voltages in kV."""
    return params.stages * params.charging_voltage


def voltage_efficiency(params: SimulationParameters, result: SimulationResult) -> float:
    """Peak output voltage as a fraction of the total charging voltage."""
    return result.peak_voltage / total_charging_voltage(params)
