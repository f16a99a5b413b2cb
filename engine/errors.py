"""Errors raised by the waveform engine.

Every failure is terminal for the run that raised it: no partial waveform
is returned, and retrying with the same parameters cannot succeed.
"""


class WaveformError(ValueError):
    """Base class for simulation failures."""

    kind = "WaveformError"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict:
        return {'kind': self.kind, 'message': self.message}


class InvalidComponentValues(WaveformError):
    """A physical input is zero, negative or not a finite number."""

    kind = "InvalidComponentValues"


class OscillatoryCircuit(WaveformError):
    """The characteristic equation has complex roots (under-damped circuit)."""

    kind = "OscillatoryCircuit"


class InvalidWaveformShape(WaveformError):
    """The roots are degenerate (alpha >= beta) or the peak factor is not finite."""

    kind = "InvalidWaveformShape"
