"""
Power-factor correction sizing (capacitor bank or shunt reactor).

Key relationships (steady-state, fundamental only):
  Q = P * tan(phi),   phi = arccos(FP)
  d(tan phi) = tan(arccos(FP1)) - tan(arccos(FP2))
  Qc (kVAr) = P(kW) * d(tan phi)

Sign convention for d(tan phi):
- > 0 : load is more inductive than the target -> capacitive compensation
- < 0 : load is more capacitive than the target -> inductive compensation (reactor)

Sizing:
  C (uF) = (1e4/pi) * (P / V^2) * d(tan phi) * Kf * Ksys
      Kf   = 1 at 50 Hz, 1/1.2 at 60 Hz   (capacitors only)
      Ksys = 1 single-phase/star, 1/3 delta (per-phase bank)
  Reactor, Q = V^2 / X_L with X_L = 2*pi*f*L:
      single-phase / star (total): L = V^2 / (2*pi*f*|Q|)
      delta (per phase):           L = 3*V^2 / (2*pi*f*|Q|)

P and S are reconciled through the *target* FP2, since sizing is based on the corrected state.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, replace
from enum import Enum
from typing import Optional, Tuple

from pfc_engine.analysis.validation import ensure_valid, validate_inputs
from pfc_engine.models.power_inputs import (
    CorrectionMode,
    InputParameters,
    PowerType,
    WiringSystem,
)

logger = logging.getLogger(__name__)

PF_CLAMP_MIN = 1e-6
PF_CLAMP_MAX = 1.0 - 1e-6

KF_60HZ = 1.0 / 1.2
KSYS_DELTA = 1.0 / 3.0

MSG_INDUCTIVE_OK = "Inductive correction computed (capacitors)."
MSG_INDUCTIVE_MISMATCH = (
    "Not an inductive condition relative to FP₂ (Δ(tanφ) ≤ 0). Switch to the Capacitive tab."
)
MSG_CAPACITIVE_OK = "Capacitive condition detected: reactor (inductor) sizing."
MSG_CAPACITIVE_MISMATCH = (
    "Not a capacitive condition relative to FP₂ (Δ(tanφ) ≥ 0). Try the Inductive tab."
)
MSG_NOTHING_TO_ABSORB = "No reactive power to absorb (P = 0); no reactor required."


class Classification(str, Enum):
    COMPUTED = "Computed"
    MODE_MISMATCH = "ModeMismatch"


@dataclass(frozen=True)
class CalculationResult:
    """
    Immutable snapshot produced by one explicit "calculate" action.

    Exactly one of capacitance_uf / inductance_mh is set, or neither (ModeMismatch).
    """
    params: InputParameters      # copy of the inputs used; never shared with the UI
    p_used_w: float
    s_used_va: float
    delta_tan: float
    kf: float
    ksys: float
    q1_var: float
    q2_var: float
    q_delta_kvar: float          # signed
    capacitance_uf: Optional[float]
    inductance_mh: Optional[float]
    classification: Classification
    message: str

    @property
    def is_mode_mismatch(self) -> bool:
        return self.classification == Classification.MODE_MISMATCH


@dataclass(frozen=True)
class LivePreview:
    """Recomputed on every edit; used to check the condition, never shown as a result."""
    delta_tan: float
    p_used_w: float
    q1_var: float
    q2_var: float


def clamp_pf(pf: float) -> float:
    """Clamp FP into [1e-6, 1 - 1e-6] so arccos/tan stay finite."""
    return min(max(float(pf), PF_CLAMP_MIN), PF_CLAMP_MAX)


def tan_phi(pf: float) -> float:
    return math.tan(math.acos(clamp_pf(pf)))


def delta_tan(fp1: float, fp2: float) -> float:
    return tan_phi(fp1) - tan_phi(fp2)


def reconcile_power(params: InputParameters) -> Tuple[float, float]:
    """Return (P_used W, S_used VA), consistent with the clamped target FP2."""
    fp2 = clamp_pf(params.fp2)
    if params.power_type == PowerType.ACTIVE:
        return float(params.p_input_w), float(params.p_input_w) / fp2
    return float(params.s_input_va) * fp2, float(params.s_input_va)


def frequency_factor(frequency_hz: int) -> float:
    return KF_60HZ if int(frequency_hz) == 60 else 1.0


def system_factor(system: WiringSystem) -> float:
    return KSYS_DELTA if system == WiringSystem.DELTA_PER_PHASE else 1.0


def capacitance_uf(p_w: float, voltage_v: float, dtan: float, kf: float, ksys: float) -> float:
    return (1e4 / math.pi) * (p_w / (voltage_v * voltage_v)) * dtan * kf * ksys


def reactor_inductance_mh(voltage_v: float, frequency_hz: float, q_abs_var: float, system: WiringSystem) -> float:
    """
    Shunt reactor inductance for |Q| VAr to absorb.

    Delta: per-phase value (3x the single-phase/star figure for the same total VAr).
    """
    if q_abs_var <= 0:
        raise ValueError("q_abs_var must be > 0.")
    denom = 2.0 * math.pi * float(frequency_hz)
    v2 = float(voltage_v) ** 2
    l_h = (3.0 * v2) / (denom * q_abs_var) if system == WiringSystem.DELTA_PER_PHASE else v2 / (denom * q_abs_var)
    return l_h * 1e3


def preview_correction(params: InputParameters) -> Optional[LivePreview]:
    """Live preview from the current (unsnapshotted) inputs; None while inputs are invalid."""
    if validate_inputs(params):
        return None
    p_used, _ = reconcile_power(params)
    return LivePreview(
        delta_tan=delta_tan(params.fp1, params.fp2),
        p_used_w=p_used,
        q1_var=p_used * tan_phi(params.fp1),
        q2_var=p_used * tan_phi(params.fp2),
    )


def compute_correction(params: InputParameters) -> CalculationResult:
    """
    Compute the compensation element for the selected tab.

    Raises InputValidationError if the inputs fail validation; total otherwise.
    The mode only decides which sign of d(tan phi) is accepted, never the formulas.
    """
    ensure_valid(params)

    p_used, s_used = reconcile_power(params)
    dtan = delta_tan(params.fp1, params.fp2)
    kf = frequency_factor(params.frequency_hz)
    ksys = system_factor(params.system)

    q1 = p_used * tan_phi(params.fp1)
    q2 = p_used * tan_phi(params.fp2)
    q_delta_kvar = (p_used / 1000.0) * dtan

    logger.debug(
        "P_used=%.4f W S_used=%.4f VA dtan=%.6f Kf=%.4f Ksys=%.4f Q1=%.4f Q2=%.4f",
        p_used, s_used, dtan, kf, ksys, q1, q2,
    )

    c_uf: Optional[float] = None
    l_mh: Optional[float] = None

    if params.mode == CorrectionMode.INDUCTIVE:
        if dtan <= 0:
            classification, msg = Classification.MODE_MISMATCH, MSG_INDUCTIVE_MISMATCH
        else:
            c_uf = capacitance_uf(p_used, params.voltage_v, dtan, kf, ksys)
            classification, msg = Classification.COMPUTED, MSG_INDUCTIVE_OK
    else:
        q_abs = abs(q_delta_kvar) * 1e3
        if dtan >= 0:
            classification, msg = Classification.MODE_MISMATCH, MSG_CAPACITIVE_MISMATCH
        elif q_abs <= 0:
            classification, msg = Classification.MODE_MISMATCH, MSG_NOTHING_TO_ABSORB
        else:
            l_mh = reactor_inductance_mh(params.voltage_v, params.frequency_hz, q_abs, params.system)
            classification, msg = Classification.COMPUTED, MSG_CAPACITIVE_OK

    if classification == Classification.MODE_MISMATCH:
        logger.warning("%s (dtan=%.6f, mode=%s)", msg, dtan, params.mode.value)
    else:
        logger.info("%s C=%s uF L=%s mH", msg, c_uf, l_mh)

    return CalculationResult(
        params=replace(params),
        p_used_w=p_used,
        s_used_va=s_used,
        delta_tan=dtan,
        kf=kf,
        ksys=ksys,
        q1_var=q1,
        q2_var=q2,
        q_delta_kvar=q_delta_kvar,
        capacitance_uf=c_uf,
        inductance_mh=l_mh,
        classification=classification,
        message=msg,
    )
