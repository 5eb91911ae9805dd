"""
Demo: size a capacitor bank for a lagging load, star vs delta and 50 vs 60 Hz.
"""

from dataclasses import replace

from pfc_engine.analysis.compensation import compute_correction
from pfc_engine.models.power_inputs import InputParameters, WiringSystem
from pfc_engine.report.summary import fmt4, format_correction_summary


def main():
    base = InputParameters(p_input_w=800.0, voltage_v=230.0, fp1=0.80, fp2=0.95)

    result = compute_correction(base)
    print(format_correction_summary(result))

    print("System  | f (Hz) | C (uF)")
    print("-" * 28)
    for system in (WiringSystem.SINGLE_PHASE_OR_STAR, WiringSystem.DELTA_PER_PHASE):
        for f in (50, 60):
            r = compute_correction(replace(base, system=system, frequency_hz=f))
            print(f"{system.value:7} | {f:6d} | {fmt4(r.capacitance_uf)}")


if __name__ == "__main__":
    main()
