"""
Compensation sweep over target power factor.

Holding every other input fixed, evaluate the correction for a grid of FP2 values.
Useful to see how steeply the required bank grows as the target approaches unity.
"""

from __future__ import annotations

from dataclasses import replace
from typing import Dict, List, Optional, Sequence

import numpy as np

from pfc_engine.analysis.compensation import compute_correction
from pfc_engine.analysis.validation import ensure_valid
from pfc_engine.models.power_inputs import CorrectionMode, InputParameters


def default_fp2_grid(
    fp1: float,
    points: int = 10,
    mode: CorrectionMode = CorrectionMode.INDUCTIVE,
) -> List[float]:
    """
    Targets on the side of FP1 where the tab can size something.

    Inductive: just above FP1 up to unity (or 0.5..1.0 when FP1 is already ~1).
    Capacitive: from min(0.5, FP1/2) up to just below FP1 (or 0.5..1.0 when FP1 is ~0).
    """
    if points < 2:
        raise ValueError("points must be >= 2.")
    fp1 = float(fp1)
    if mode == CorrectionMode.CAPACITIVE:
        start, stop = min(0.5, fp1 / 2.0), fp1 - 0.01
    else:
        start, stop = min(fp1 + 0.01, 1.0), 1.0
    if start >= stop:
        return [float(x) for x in np.linspace(0.5, 1.0, points)]
    return [float(x) for x in np.linspace(start, stop, points)]


def sweep_target_pf(
    params: InputParameters,
    fp2_points: Optional[Sequence[float]] = None,
    points: int = 10,
) -> List[Dict[str, Optional[float]]]:
    """
    Returns rows:
      {"fp2", "delta_tan", "q_delta_kvar", "capacitance_uf", "inductance_mh", "classification"}
    """
    ensure_valid(params)
    grid = list(fp2_points) if fp2_points is not None else default_fp2_grid(params.fp1, points, params.mode)

    rows: List[Dict[str, Optional[float]]] = []
    for fp2 in grid:
        r = compute_correction(replace(params, fp2=float(fp2)))
        rows.append(
            {
                "fp2": float(fp2),
                "delta_tan": r.delta_tan,
                "q_delta_kvar": r.q_delta_kvar,
                "capacitance_uf": r.capacitance_uf,
                "inductance_mh": r.inductance_mh,
                "classification": r.classification.value,
            }
        )
    return rows
