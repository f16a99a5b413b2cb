"""Claude prompt engineering for ImpulseLab waveform explanations.

Claude is used for EXPLANATION only. Every number in the prompt comes
from the engine. The waveform samples are never sent, only the six
generator parameters and the three derived metrics.
"""

from engine.circuit import SimulationParameters
from engine.standards import (
    STANDARD_FRONT_TIME_US,
    STANDARD_TAIL_TIME_US,
    total_charging_voltage,
)
from engine.waveform import SimulationResult

EXPLANATION_SYSTEM = """You are an expert in high-voltage engineering and impulse testing. You explain the results of Marx impulse generator simulations in a clear and concise way for an engineering student.

RULES:
- Use ONLY the parameter and result values you are given. Do NOT recalculate or invent numbers.
- Refer to IEC 60060-1 when discussing front time (T1) and tail time (T2).
- Keep the explanation under 400 words.
- Format the response clearly. Do not use markdown code blocks."""

EXPLANATION_PROMPT = """The simulation was run with the following parameters:
- Number of Stages: {stages}
- Charging Voltage per Stage: {charging_voltage} kV
- Stage Capacitance (per stage): {stage_capacitance} nF
- Load Capacitance: {load_capacitance} pF
- Front Shaping Resistor (R1): {front_resistor} Ω
- Tail Shaping Resistor (R2): {tail_resistor} Ω

The simulation produced the following waveform characteristics:
- Peak Voltage: {peak_voltage:.2f} kV
- Front Time (T1): {front_time:.2f} µs
- Tail Time (T2): {tail_time:.2f} µs

Based on these inputs and outputs, please provide an analysis covering:
1. A brief summary of the resulting waveform, comparing it to the standard lightning impulse ({front_standard:g}/{tail_standard:g} µs).
2. How the peak voltage relates to the total charging voltage ({total_voltage:g} kV). Mention the concept of voltage efficiency.
3. The role of the front resistor (R1) and load capacitance (C2) in shaping the front time (T1).
4. The role of the tail resistor (R2) and the generator's series capacitance in shaping the tail time (T2).
5. A concluding remark on whether these parameters produce a standard or non-standard impulse waveform."""


def build_explanation_prompt(params: SimulationParameters, result: SimulationResult) -> str:
    """Render the parameters and metrics into the explanation request."""
    return EXPLANATION_PROMPT.format(
        stages=params.stages,
        charging_voltage=f"{params.charging_voltage:g}",
        stage_capacitance=f"{params.stage_capacitance:g}",
        load_capacitance=f"{params.load_capacitance:g}",
        front_resistor=f"{params.front_resistor:g}",
        tail_resistor=f"{params.tail_resistor:g}",
        peak_voltage=result.peak_voltage,
        front_time=result.front_time,
        tail_time=result.tail_time,
        front_standard=STANDARD_FRONT_TIME_US,
        tail_standard=STANDARD_TAIL_TIME_US,
        total_voltage=total_charging_voltage(params),
    )


def build_explanation_messages(
    params: SimulationParameters,
    result: SimulationResult,
) -> tuple[str, list[dict]]:
    """Build system prompt and messages for the explanation request.

    Returns (system_prompt, messages) tuple.
    """
    messages = [
        {
            "role": "user",
            "content": build_explanation_prompt(params, result),
        }
    ]
    return EXPLANATION_SYSTEM, messages
