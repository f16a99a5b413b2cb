"""
Double-exponential impulse waveform and IEC 60060-1 style metrics.

The open-circuit output of the lumped Marx circuit is

    V(t) = K · (e^(-alpha·t) - e^(-beta·t)),   K = V0 / (R1·C2·(beta - alpha))

with alpha < beta. The exponent pairing matters: swapping alpha and beta
inverts the waveform. The function peaks at

    t_peak = ln(beta/alpha) / (beta - alpha)

and is sampled on a fixed grid of 2001 points covering at least 200 µs and
at least ten tail time constants. Front time T1 = 1.25·(t90 - t10) and tail
time T2 = t50 (measured from t = 0) are read off the samples with a single
forward scan, first crossing wins.
"""

import logging
import math
from dataclasses import dataclass
from typing import Optional, Tuple

import numpy as np

from engine.circuit import (
    CharacteristicRoots,
    EquivalentCircuit,
    SimulationParameters,
    characteristic_roots,
    equivalent_circuit,
)
from engine.errors import InvalidWaveformShape
from engine.units import S_TO_US, US_TO_S, v_to_kv

logger = logging.getLogger(__name__)

NUM_SAMPLES = 2001
MIN_WINDOW_US = 200.0
TAIL_TIME_CONSTANTS = 10.0

FRONT_LOW_FRACTION = 0.10
FRONT_HIGH_FRACTION = 0.90
TAIL_FRACTION = 0.50
FRONT_TIME_FACTOR = 1.25


@dataclass(frozen=True)
class WaveformPoint:
    time: float     # µs
    voltage: float  # kV


@dataclass(frozen=True)
class SimulationResult:
    peak_voltage: float     # kV
    front_time: float       # µs
    tail_time: float        # µs


@dataclass(frozen=True)
class Crossings:
    """Sample times (µs) of the threshold crossings, None when not reached."""
    t10: Optional[float]
    t90: Optional[float]
    t50_tail: Optional[float]


@dataclass(frozen=True)
class WaveformModel:
    """Closed-form voltage function of one circuit."""
    roots: CharacteristicRoots
    peak_factor: float      # K, volts

    @classmethod
    def from_circuit(cls, circuit: EquivalentCircuit) -> "WaveformModel":
        roots = characteristic_roots(circuit)
        peak_factor = circuit.v0 / (circuit.r1 * circuit.c2 * roots.separation)
        if not math.isfinite(peak_factor):
            raise InvalidWaveformShape(
                "Peak factor is not finite (near-critical damping). Check component values."
            )
        return cls(roots=roots, peak_factor=peak_factor)

    def voltage(self, t_s):
        """V(t) in volts for t in seconds (scalar or array)."""
        return self.peak_factor * (np.exp(-self.roots.alpha * t_s) - np.exp(-self.roots.beta * t_s))

    @property
    def peak_time(self) -> float:
        """Analytic time of maximum (seconds), where dV/dt = 0."""
        return math.log(self.roots.beta / self.roots.alpha) / self.roots.separation

    @property
    def peak_voltage(self) -> float:
        """V(t_peak) in volts."""
        return float(self.voltage(self.peak_time))

    @property
    def window_us(self) -> float:
        """Sampling window end in µs."""
        return max(MIN_WINDOW_US, TAIL_TIME_CONSTANTS / self.roots.alpha * S_TO_US)


def sample_times(window_us: float, num_samples: int = NUM_SAMPLES) -> np.ndarray:
    """Uniform grid over [0, window_us], both ends included."""
    return np.linspace(0.0, window_us, num_samples)


def _first_index(mask: np.ndarray) -> Optional[int]:
    if not mask.any():
        return None
    return int(np.argmax(mask))


def find_crossings(
    time_us: np.ndarray,
    voltage: np.ndarray,
    peak_time_us: float,
    peak_voltage: float,
) -> Crossings:
    """
    Locate the 10 %, 90 % rise and 50 % tail crossings.

    Each threshold is captured at its first sample in time order and never
    revised, even if the voltage later dips and re-crosses. The tail
    crossing only considers samples strictly after the analytic peak.

    Args:
        time_us: Sample times, increasing
        voltage: Sample voltages (any unit, same as peak_voltage)
        peak_time_us: Analytic peak time in µs
        peak_voltage: Analytic peak voltage

    Returns:
        Crossings with None for any threshold that was never reached.
    """
    i10 = _first_index(voltage >= FRONT_LOW_FRACTION * peak_voltage)
    i90 = _first_index(voltage >= FRONT_HIGH_FRACTION * peak_voltage)
    i50 = _first_index((time_us > peak_time_us) & (voltage <= TAIL_FRACTION * peak_voltage))

    return Crossings(
        t10=float(time_us[i10]) if i10 is not None else None,
        t90=float(time_us[i90]) if i90 is not None else None,
        t50_tail=float(time_us[i50]) if i50 is not None else None,
    )


def waveform_metrics(crossings: Crossings, peak_voltage_v: float) -> SimulationResult:
    """Front time, tail time and peak from the crossings; missing crossings give 0."""
    if crossings.t10 is not None and crossings.t90 is not None:
        front_time = FRONT_TIME_FACTOR * (crossings.t90 - crossings.t10)
    else:
        front_time = 0.0

    tail_time = crossings.t50_tail if crossings.t50_tail is not None else 0.0

    return SimulationResult(
        peak_voltage=v_to_kv(peak_voltage_v),
        front_time=front_time,
        tail_time=tail_time,
    )


def simulate_arrays(params: SimulationParameters) -> Tuple[np.ndarray, np.ndarray, SimulationResult]:
    """
    Run the simulation and return the raw sample arrays.

    Returns:
        (time_us, voltage_kv, result), each array of length NUM_SAMPLES.

    Raises:
        InvalidComponentValues, OscillatoryCircuit, InvalidWaveformShape
    """
    circuit = equivalent_circuit(params)
    model = WaveformModel.from_circuit(circuit)

    peak_time_s = model.peak_time
    peak_voltage_v = model.peak_voltage

    time_us = sample_times(model.window_us)
    voltage_v = model.voltage(time_us * US_TO_S)

    crossings = find_crossings(time_us, voltage_v, peak_time_s * S_TO_US, peak_voltage_v)
    result = waveform_metrics(crossings, peak_voltage_v)

    logger.debug(
        "Simulated %d samples over %.4g µs: peak=%.4g kV, T1=%.4g µs, T2=%.4g µs",
        len(time_us), model.window_us, result.peak_voltage, result.front_time, result.tail_time,
    )
    return time_us, v_to_kv(voltage_v), result


def simulate(params: SimulationParameters) -> Tuple[Tuple[WaveformPoint, ...], SimulationResult]:
    """
    Simulate the impulse voltage produced by a Marx generator.

    Args:
        params: Generator and load parameters in kV, nF, pF and Ohms

    Returns:
        (waveform, result): the time-ordered samples (µs, kV) and the
        peak voltage, front time and tail time.

    Raises:
        InvalidComponentValues: non-positive or non-finite inputs.
        OscillatoryCircuit: under-damped circuit (complex roots).
        InvalidWaveformShape: degenerate roots or non-finite peak factor.
    """
    time_us, voltage_kv, result = simulate_arrays(params)
    waveform = tuple(
        WaveformPoint(time=t, voltage=v)
        for t, v in zip(time_us.tolist(), voltage_kv.tolist())
    )
    return waveform, result
