"""
Presentation helpers for calculation results (4-decimal fields, placeholder when empty).
"""

from __future__ import annotations

import math
from typing import Any, Dict, Optional

from pfc_engine.analysis.compensation import CalculationResult
from pfc_engine.models.power_inputs import (
    CorrectionMode,
    InputParameters,
    PowerType,
    WiringSystem,
    system_label_short,
)

PLACEHOLDER = "—"


def fmt4(x: Optional[float]) -> str:
    if x is None:
        return PLACEHOLDER
    try:
        v = float(x)
    except (TypeError, ValueError):
        return PLACEHOLDER
    return f"{v:.4f}" if math.isfinite(v) else PLACEHOLDER


def _with_unit(x: Optional[float], unit: str) -> str:
    s = fmt4(x)
    return s if s == PLACEHOLDER else f"{s} {unit}"


def format_result_cards(result: Optional[CalculationResult], mode: CorrectionMode) -> Dict[str, str]:
    """Result cards for the selected tab. Values stay as placeholders until a snapshot exists."""
    cards: Dict[str, str] = {}
    if mode == CorrectionMode.INDUCTIVE:
        cards["Required capacitance"] = _with_unit(result.capacitance_uf if result else None, "µF")
        cards["kVAr to compensate"] = _with_unit(result.q_delta_kvar if result else None, "kVAr")
    else:
        cards["Reactor (inductor)"] = _with_unit(result.inductance_mh if result else None, "mH")
        if result is not None and result.params.system == WiringSystem.DELTA_PER_PHASE:
            cards["Reactor note"] = "Per-phase value (Δ)"
        else:
            cards["Reactor note"] = "Single-phase / Star"
        cards["kVAr to absorb"] = _with_unit(abs(result.q_delta_kvar) if result else None, "kVAr")
    cards["P used"] = _with_unit(result.p_used_w if result else None, "W")
    cards["S used"] = _with_unit(result.s_used_va if result else None, "VA")
    return cards


def format_inputs_used(params: InputParameters, result: Optional[CalculationResult] = None) -> Dict[str, str]:
    """
    "Data used" block. Snapshot inputs win over live inputs once a result exists;
    the tab always reflects the live selection.
    """
    src = result.params if result is not None else params
    out: Dict[str, str] = {
        "Tab": "Inductive" if params.mode == CorrectionMode.INDUCTIVE else "Capacitive",
        "Power type": "P (W)" if src.power_type == PowerType.ACTIVE else "S (VA)",
        "P entered": f"{src.p_input_w:g} W",
        "S entered": f"{src.s_input_va:g} VA",
        "FP₁ (current)": f"{src.fp1:g}",
        "FP₂ (target)": f"{src.fp2:g}",
        "Frequency": f"{src.frequency_hz} Hz",
        "Voltage V": f"{src.voltage_v:g} V",
        "System": system_label_short(src.system),
    }
    if result is not None:
        out["P used (snapshot)"] = f"{fmt4(result.p_used_w)} W"
        out["S used (snapshot)"] = f"{fmt4(result.s_used_va)} VA"
        out["Δ(tanφ)"] = fmt4(result.delta_tan)
        out["Q₁ (before)"] = f"{fmt4(result.q1_var / 1000.0)} kVAr"
        out["Q₂ (target)"] = f"{fmt4(result.q2_var / 1000.0)} kVAr"
    return out


def result_to_dict(result: CalculationResult) -> Dict[str, Any]:
    """Canonical JSON view of a snapshot (raw numbers + 4-decimal formatted copies)."""
    p = result.params
    return {
        "inputs": {
            "power_type": p.power_type.value,
            "p_input_w": p.p_input_w,
            "s_input_va": p.s_input_va,
            "voltage_v": p.voltage_v,
            "frequency_hz": p.frequency_hz,
            "fp1": p.fp1,
            "fp2": p.fp2,
            "system": p.system.value,
            "mode": p.mode.value,
        },
        "p_used_w": result.p_used_w,
        "s_used_va": result.s_used_va,
        "delta_tan": result.delta_tan,
        "kf": result.kf,
        "ksys": result.ksys,
        "q1_var": result.q1_var,
        "q2_var": result.q2_var,
        "q_delta_kvar": result.q_delta_kvar,
        "capacitance_uf": result.capacitance_uf,
        "inductance_mh": result.inductance_mh,
        "classification": result.classification.value,
        "message": result.message,
        "formatted": {
            "p_used_w": fmt4(result.p_used_w),
            "s_used_va": fmt4(result.s_used_va),
            "delta_tan": fmt4(result.delta_tan),
            "q1_kvar": fmt4(result.q1_var / 1000.0),
            "q2_kvar": fmt4(result.q2_var / 1000.0),
            "q_delta_kvar": fmt4(result.q_delta_kvar),
            "capacitance_uf": fmt4(result.capacitance_uf),
            "inductance_mh": fmt4(result.inductance_mh),
        },
    }


def format_correction_summary(result: CalculationResult) -> str:
    p = result.params
    lines = [
        "Power-factor correction summary:",
        f"- Tab: {p.mode.value}",
        f"- System: {system_label_short(p.system)} @ {p.voltage_v:.1f} V, {p.frequency_hz} Hz",
        f"- FP1 -> FP2: {p.fp1:.3f} -> {p.fp2:.3f}",
        f"- P used: {fmt4(result.p_used_w)} W   S used: {fmt4(result.s_used_va)} VA",
        f"- Q1: {fmt4(result.q1_var / 1000.0)} kVAr   Q2: {fmt4(result.q2_var / 1000.0)} kVAr",
        f"- Δ(tanφ): {fmt4(result.delta_tan)}   ΔQ: {fmt4(result.q_delta_kvar)} kVAr",
    ]
    if result.capacitance_uf is not None:
        lines.append(f"- Capacitance: {fmt4(result.capacitance_uf)} µF")
    if result.inductance_mh is not None:
        lines.append(f"- Reactor: {fmt4(result.inductance_mh)} mH")
    lines.append(f"- Status: {result.classification.value}: {result.message}")
    return "\n".join(lines) + "\n"
