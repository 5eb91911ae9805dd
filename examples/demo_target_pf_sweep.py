"""
Demo: how the required bank grows as the target FP approaches unity.
"""

import matplotlib.pyplot as plt

from pfc_engine.analysis.sweep import sweep_target_pf
from pfc_engine.models.power_inputs import InputParameters
from pfc_engine.report.summary import fmt4


def main():
    params = InputParameters(p_input_w=15000.0, voltage_v=400.0, fp1=0.72, fp2=0.95)
    rows = sweep_target_pf(params, points=12)

    print("  FP2  | Δ(tanφ) | ΔQ (kVAr) | C (uF)")
    print("-" * 40)
    for r in rows:
        print(f"{r['fp2']:6.3f} | {fmt4(r['delta_tan']):>7} | {fmt4(r['q_delta_kvar']):>9} | {fmt4(r['capacitance_uf'])}")

    plt.figure()
    plt.plot([r["fp2"] for r in rows], [r["capacitance_uf"] or 0.0 for r in rows], marker="o")
    plt.xlabel("Target power factor FP₂")
    plt.ylabel("C (µF)")
    plt.title("Capacitor bank vs target FP")
    plt.grid(True)
    plt.show()


if __name__ == "__main__":
    main()
