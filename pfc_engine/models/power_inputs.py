"""
Input model for power-factor correction (engineering-oriented)

Purpose:
- Describe the load being corrected: power (P or S), line voltage, frequency,
  measured and target power factor, wiring topology
- Carry the selected diagnostic tab (inductive / capacitive network)

Notes:
- InputParameters is deliberately mutable: the UI layer rebuilds or edits it on
  every field change. Results are never inferred from it implicitly; see
  pfc_engine.analysis.session for the snapshot-on-demand flow.
- Values here are already numeric. Parsing text fields is the caller's job.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple, Union


class PowerType(str, Enum):
    """Which of P or S is the independent variable."""
    ACTIVE = "P"      # active power P (W)
    APPARENT = "S"    # apparent power S (VA)


class WiringSystem(str, Enum):
    SINGLE_PHASE_OR_STAR = "mono"   # single-phase or star (Y): total rating
    DELTA_PER_PHASE = "delta"       # three-phase delta: per-phase rating


class CorrectionMode(str, Enum):
    """
    Diagnostic tab selected by the user.

    INDUCTIVE:  lagging network -> capacitor bank
    CAPACITIVE: leading network -> shunt reactor
    """
    INDUCTIVE = "inductive"
    CAPACITIVE = "capacitive"


SUPPORTED_FREQUENCIES_HZ: Tuple[int, ...] = (50, 60)

# Standard line voltages offered as presets (V RMS).
VOLTAGE_PRESETS_V: Tuple[float, ...] = (127.0, 220.0, 230.0, 240.0, 380.0, 400.0, 415.0, 440.0, 480.0)

CUSTOM_VOLTAGE = "custom"


@dataclass
class InputParameters:
    power_type: PowerType = PowerType.ACTIVE
    p_input_w: float = 800.0        # active power (W), authoritative when power_type == ACTIVE
    s_input_va: float = 1000.0      # apparent power (VA), authoritative when power_type == APPARENT
    voltage_v: float = 230.0        # line RMS voltage (V)
    frequency_hz: int = 50          # 50 or 60
    fp1: float = 0.8                # current power factor
    fp2: float = 0.95               # target power factor
    system: WiringSystem = WiringSystem.SINGLE_PHASE_OR_STAR
    mode: CorrectionMode = CorrectionMode.INDUCTIVE


def resolve_voltage(preset: Union[str, float, int], custom_v: Optional[float] = None) -> float:
    """
    Resolve the line voltage from a preset selector.

    preset: one of VOLTAGE_PRESETS_V, or "custom" to use custom_v (free-form override).
    """
    if isinstance(preset, str) and preset.strip().lower() == CUSTOM_VOLTAGE:
        if custom_v is None:
            raise ValueError("custom voltage selected but no value given.")
        return float(custom_v)
    v = float(preset)
    if v not in VOLTAGE_PRESETS_V:
        raise ValueError(f"voltage preset {v:g} V is not a standard preset; use 'custom'.")
    return v


def system_label(system: WiringSystem) -> str:
    """Label drawn on the power-triangle diagram."""
    return "Δ (per phase)" if system == WiringSystem.DELTA_PER_PHASE else "Single-phase / Y"


def system_label_short(system: WiringSystem) -> str:
    return "Δ" if system == WiringSystem.DELTA_PER_PHASE else "Y/Mono"
