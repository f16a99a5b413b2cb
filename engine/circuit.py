"""
Lumped equivalent circuit of a Marx impulse generator.

The n stage capacitors, charged in parallel and discharged in series, are
reduced to a single series capacitance C1 = C_stage / n charged to
V0 = n · V_stage. C1 discharges through the front resistor R1 into the
load capacitance C2, with the tail resistor R2 across the generator:

    ┌──[R1]──┬────── Vout
    │        │
   C1  R2   C2
    │        │
    └────────┴──────

The output is the step response of a second-order system whose
characteristic equation is

    s² + a·s + b = 0
    a = 1/(R1·C2) + 1/(R2·C1)
    b = 1/(R1·R2·C1·C2)

with roots -alpha (slow, tail-forming) and -beta (fast, front-forming).
"""

import logging
import math
import numbers
from dataclasses import dataclass
from typing import Dict, Tuple

from engine.errors import InvalidComponentValues, InvalidWaveformShape, OscillatoryCircuit
from engine.units import kv_to_v, nf_to_f, pf_to_f

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SimulationParameters:
    """Generator and load values in test-floor units."""
    stages: int                 # count
    charging_voltage: float     # kV per stage
    stage_capacitance: float    # nF per stage
    load_capacitance: float     # pF
    front_resistor: float       # Ohms
    tail_resistor: float        # Ohms


DEFAULT_PARAMETERS = SimulationParameters(
    stages=4,
    charging_voltage=100.0,
    stage_capacitance=500.0,
    load_capacitance=2000.0,
    front_resistor=75.0,
    tail_resistor=4000.0,
)

# Slider ranges offered to interactive hosts: (min, max, step, unit).
# Informational only; the engine enforces positivity, not these bounds.
PARAMETER_RANGES: Dict[str, Tuple[float, float, float, str]] = {
    'stages': (1, 20, 1, ''),
    'charging_voltage': (10, 500, 10, 'kV'),
    'stage_capacitance': (10, 2000, 10, 'nF'),
    'load_capacitance': (100, 10000, 100, 'pF'),
    'front_resistor': (1, 500, 1, 'Ω'),
    'tail_resistor': (1000, 10000, 100, 'Ω'),
}


@dataclass(frozen=True)
class EquivalentCircuit:
    """Single-loop RC network in SI units."""
    c1_series: float    # F
    c2: float           # F
    r1: float           # Ohms
    r2: float           # Ohms
    v0: float           # V, total series-charged voltage


@dataclass(frozen=True)
class CharacteristicRoots:
    alpha: float    # 1/s, tail decay constant
    beta: float     # 1/s, front decay constant

    @property
    def separation(self) -> float:
        return self.beta - self.alpha


def _positive(value) -> bool:
    return isinstance(value, numbers.Real) and math.isfinite(value) and value > 0


def equivalent_circuit(params: SimulationParameters) -> EquivalentCircuit:
    """
    Reduce the generator parameters to the lumped SI-unit circuit.

    Raises:
        InvalidComponentValues: if any component value is non-positive or
            not finite, or if the stage count is not an integer ≥ 1.
    """
    stages = params.stages
    if isinstance(stages, bool) or not isinstance(stages, numbers.Integral) or stages < 1:
        raise InvalidComponentValues(f"Stage count must be an integer of at least 1, got {stages!r}.")
    if not _positive(params.charging_voltage):
        raise InvalidComponentValues(
            f"Charging voltage must be positive, got {params.charging_voltage!r} kV."
        )

    c1_series = nf_to_f(params.stage_capacitance) / stages if _positive(params.stage_capacitance) else 0.0
    c2 = pf_to_f(params.load_capacitance) if _positive(params.load_capacitance) else 0.0
    r1 = params.front_resistor if _positive(params.front_resistor) else 0.0
    r2 = params.tail_resistor if _positive(params.tail_resistor) else 0.0

    if c1_series <= 0 or c2 <= 0 or r1 <= 0 or r2 <= 0:
        raise InvalidComponentValues("Component values must be positive.")

    return EquivalentCircuit(
        c1_series=c1_series,
        c2=c2,
        r1=float(r1),
        r2=float(r2),
        v0=kv_to_v(params.charging_voltage) * stages,
    )


def characteristic_coefficients(circuit: EquivalentCircuit) -> Tuple[float, float]:
    """Return (a, b) of s² + a·s + b = 0 for the equivalent circuit."""
    a = 1.0 / (circuit.r1 * circuit.c2) + 1.0 / (circuit.r2 * circuit.c1_series)
    b = 1.0 / (circuit.r1 * circuit.r2 * circuit.c1_series * circuit.c2)
    return a, b


def solve_characteristic(a: float, b: float) -> CharacteristicRoots:
    """
    Solve s² + a·s + b = 0 for the two real decay rates.

    Raises:
        OscillatoryCircuit: when a² - 4b < 0 (complex roots).
        InvalidWaveformShape: when the roots coincide or alpha is not positive.
    """
    discriminant = a * a - 4.0 * b
    if discriminant < 0:
        raise OscillatoryCircuit(
            "Oscillatory circuit detected. Parameters result in a non-standard impulse. "
            "Please increase resistance or decrease capacitance."
        )

    sqrt_d = math.sqrt(discriminant)
    beta = (a + sqrt_d) / 2.0
    alpha = (a - sqrt_d) / 2.0

    if alpha >= beta:
        raise InvalidWaveformShape("Invalid waveform parameters (alpha >= beta). Check component values.")
    if alpha <= 0:
        # a - sqrt_d can cancel to zero when R2·C1 is many decades above R1·C2
        raise InvalidWaveformShape("Invalid waveform parameters (alpha <= 0). Check component values.")

    logger.debug("Characteristic roots: alpha=%.6g 1/s, beta=%.6g 1/s", alpha, beta)
    return CharacteristicRoots(alpha=alpha, beta=beta)


def characteristic_roots(circuit: EquivalentCircuit) -> CharacteristicRoots:
    """Decay rates (alpha, beta) of the equivalent circuit, alpha < beta."""
    a, b = characteristic_coefficients(circuit)
    return solve_characteristic(a, b)
