"""
ImpulseLab Compute Engine

Waveform model of a multi-stage Marx impulse generator driving an RC load,
with IEC 60060-1 style peak, front-time and tail-time extraction.

All math is deterministic: no AI in the loop for numerical calculations.
"""

from engine.errors import WaveformError, InvalidComponentValues, OscillatoryCircuit, InvalidWaveformShape
from engine.circuit import SimulationParameters, DEFAULT_PARAMETERS, equivalent_circuit, characteristic_roots
from engine.waveform import WaveformPoint, SimulationResult, simulate, simulate_arrays
from engine.standards import classify_waveform, voltage_efficiency
from engine.export import export_csv, export_json

__version__ = "0.1.0"
