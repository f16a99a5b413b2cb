"""
Unit conversions between test-floor units and SI.

Simulation inputs arrive in the units used on an impulse-generator test
floor (kV per stage, nF per stage, pF load, Ω). The solver works in base
SI units; waveform output is reported in µs and kV.
"""

KV_TO_V = 1e3
NF_TO_F = 1e-9
PF_TO_F = 1e-12
S_TO_US = 1e6
US_TO_S = 1e-6


def kv_to_v(value_kv: float) -> float:
    return value_kv * KV_TO_V


def v_to_kv(value_v: float) -> float:
    return value_v / KV_TO_V


def nf_to_f(value_nf: float) -> float:
    return value_nf * NF_TO_F


def pf_to_f(value_pf: float) -> float:
    return value_pf * PF_TO_F
