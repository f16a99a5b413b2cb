"""
Waveform export.

Renders one simulation run as CSV (for spreadsheets and scope software)
or JSON (for archiving alongside the generator settings).
"""

import csv
import io
import json
from dataclasses import asdict
from typing import Sequence

from engine.circuit import SimulationParameters
from engine.standards import classify_waveform, voltage_efficiency
from engine.waveform import SimulationResult, WaveformPoint


def export_csv(waveform: Sequence[WaveformPoint], result: SimulationResult) -> str:
    """Export waveform samples as CSV, followed by the metric summary."""
    output = io.StringIO()
    writer = csv.writer(output)

    writer.writerow(['Time (us)', 'Voltage (kV)'])
    for point in waveform:
        writer.writerow([f"{point.time:.6g}", f"{point.voltage:.6g}"])

    # Summary rows
    writer.writerow([])
    writer.writerow(['Peak Voltage (kV)', f"{result.peak_voltage:.4f}"])
    writer.writerow(['Front Time T1 (us)', f"{result.front_time:.4f}"])
    writer.writerow(['Tail Time T2 (us)', f"{result.tail_time:.4f}"])

    return output.getvalue()


def export_json(
    params: SimulationParameters,
    waveform: Sequence[WaveformPoint],
    result: SimulationResult,
) -> str:
    """Export parameters, metrics, classification and samples as JSON."""
    classification = classify_waveform(result)
    export_data = {
        'parameters': asdict(params),
        'result': asdict(result),
        'voltage_efficiency': round(voltage_efficiency(params, result), 6),
        'classification': {
            'front_standard': classification.front_standard,
            'tail_standard': classification.tail_standard,
            'is_standard': classification.is_standard,
            'label': classification.label,
        },
        'waveform': [[point.time, point.voltage] for point in waveform],
        'generated_by': 'ImpulseLab Engine',
    }
    return json.dumps(export_data, indent=2)
