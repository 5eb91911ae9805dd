"""
Demo: capacitive tab. FP1 above the target -> negative Δ(tanφ) -> shunt reactor.

Also shows the mode-mismatch outcome when the wrong tab is selected.
"""

from dataclasses import replace

from pfc_engine.analysis.compensation import compute_correction
from pfc_engine.models.power_inputs import CorrectionMode, InputParameters, PowerType, WiringSystem
from pfc_engine.report.summary import format_correction_summary


def main():
    params = InputParameters(
        power_type=PowerType.APPARENT,
        s_input_va=50000.0,
        voltage_v=400.0,
        frequency_hz=50,
        fp1=0.99,
        fp2=0.95,
        system=WiringSystem.DELTA_PER_PHASE,
        mode=CorrectionMode.CAPACITIVE,
    )
    print(format_correction_summary(compute_correction(params)))

    # Same load, wrong tab
    wrong = compute_correction(replace(params, mode=CorrectionMode.INDUCTIVE))
    print(f"Inductive tab -> {wrong.classification.value}: {wrong.message}")


if __name__ == "__main__":
    main()
