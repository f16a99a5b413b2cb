"""Pydantic models for ImpulseLab API requests and responses."""

from __future__ import annotations

from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field

from engine.circuit import DEFAULT_PARAMETERS, SimulationParameters
from engine.waveform import SimulationResult


# --- Enums ---

class ExportFormat(str, Enum):
    CSV = "csv"
    JSON = "json"


# --- Simulation Parameters ---

class SimulationParams(BaseModel):
    """Marx generator and load values."""
    stages: int = Field(DEFAULT_PARAMETERS.stages, ge=1, description="Number of stages")
    charging_voltage: float = Field(DEFAULT_PARAMETERS.charging_voltage, gt=0, description="Charging voltage per stage (kV)")
    stage_capacitance: float = Field(DEFAULT_PARAMETERS.stage_capacitance, gt=0, description="Capacitance per stage (nF)")
    load_capacitance: float = Field(DEFAULT_PARAMETERS.load_capacitance, gt=0, description="Load capacitance (pF)")
    front_resistor: float = Field(DEFAULT_PARAMETERS.front_resistor, gt=0, description="Front shaping resistor R1 (Ohms)")
    tail_resistor: float = Field(DEFAULT_PARAMETERS.tail_resistor, gt=0, description="Tail shaping resistor R2 (Ohms)")

    def to_engine(self) -> SimulationParameters:
        return SimulationParameters(**self.model_dump())


# --- Simulation Output ---

class WaveformData(BaseModel):
    """Samples as parallel arrays, time ascending."""
    time: list[float] = Field(..., description="Sample times (µs)")
    voltage: list[float] = Field(..., description="Sample voltages (kV)")


class SimulationMetrics(BaseModel):
    peak_voltage: float = Field(..., description="Peak voltage (kV)")
    front_time: float = Field(..., description="Front time T1 (µs)")
    tail_time: float = Field(..., description="Tail time T2 (µs)")

    @classmethod
    def from_engine(cls, result: SimulationResult) -> "SimulationMetrics":
        return cls(
            peak_voltage=result.peak_voltage,
            front_time=result.front_time,
            tail_time=result.tail_time,
        )

    def to_engine(self) -> SimulationResult:
        return SimulationResult(
            peak_voltage=self.peak_voltage,
            front_time=self.front_time,
            tail_time=self.tail_time,
        )


class Classification(BaseModel):
    front_standard: bool
    tail_standard: bool
    is_standard: bool
    label: str
    tolerance: float
    voltage_efficiency: float


class SimulationError(BaseModel):
    kind: str
    message: str


# --- API Request/Response Models ---

class SimulateRequest(BaseModel):
    params: SimulationParams = Field(default_factory=SimulationParams)
    tolerance: float = Field(0.3, gt=0, le=1, description="Relative tolerance for the 1.2/50 µs classification")


class SimulateResponse(BaseModel):
    params: SimulationParams
    waveform: WaveformData
    result: SimulationMetrics
    classification: Classification


class ExplainRequest(BaseModel):
    params: SimulationParams
    result: Optional[SimulationMetrics] = Field(None, description="Previously computed metrics; recomputed when omitted")


class ExplainResponse(BaseModel):
    explanation: str
    result: SimulationMetrics


class ParameterRange(BaseModel):
    name: str
    min: float
    max: float
    step: float
    unit: str
    default: float


class ParameterRangesResponse(BaseModel):
    parameters: list[ParameterRange]
