from __future__ import annotations
from typing import Optional
from datetime import datetime, timezone
from pydantic import BaseModel, Field
import uuid

from backend.models import (
    Classification,
    SimulationError,
    SimulationMetrics,
    SimulationParams,
    WaveformData,
)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class SimulationSession(BaseModel):
    """State owned by one interactive host: current params plus the last outcome."""
    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    params: SimulationParams = Field(default_factory=SimulationParams)
    last_result: Optional[SimulationMetrics] = None
    last_waveform: Optional[WaveformData] = None
    classification: Optional[Classification] = None
    last_error: Optional[SimulationError] = None
    explanation: Optional[str] = None
    explaining: bool = False
    # Bumped on every parameter submission; results computed for an older
    # generation are discarded.
    generation: int = 0
    applied_generation: int = 0
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)


class UpdateParamsRequest(BaseModel):
    params: SimulationParams
    debounce: Optional[float] = Field(None, ge=0, le=5, description="Seconds to wait before simulating")


class SessionState(BaseModel):
    id: str
    params: SimulationParams
    result: Optional[SimulationMetrics] = None
    waveform: Optional[WaveformData] = None
    classification: Optional[Classification] = None
    error: Optional[SimulationError] = None
    explanation: Optional[str] = None
    explaining: bool = False
    generation: int
    applied: bool = True

    @classmethod
    def from_session(cls, session: SimulationSession, applied: bool = True) -> "SessionState":
        return cls(
            id=session.id,
            params=session.params,
            result=session.last_result,
            waveform=session.last_waveform,
            classification=session.classification,
            error=session.last_error,
            explanation=session.explanation,
            explaining=session.explaining,
            generation=session.generation,
            applied=applied,
        )


class SessionSummary(BaseModel):
    id: str
    generation: int
    has_result: bool
    created_at: datetime
    updated_at: datetime
