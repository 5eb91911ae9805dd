"""
Generate the HTML report + power triangle PNG into outputs/

Run:
  python -m examples.demo_generate_report
"""

import os

from pfc_engine.analysis.session import CalculationSession
from pfc_engine.analysis.sweep import sweep_target_pf
from pfc_engine.models.power_inputs import InputParameters, resolve_voltage
from pfc_engine.report.html_report import generate_html_report
from pfc_engine.report.summary import format_inputs_used, format_result_cards


def main():
    session = CalculationSession(
        params=InputParameters(p_input_w=800.0, voltage_v=resolve_voltage(230), fp1=0.8, fp2=0.95)
    )
    result = session.calculate()
    plan = session.drawing_plan(480, 280, device_pixel_ratio=2.0)

    out_dir = os.path.join(os.getcwd(), "outputs")
    path = generate_html_report(
        out_dir=out_dir,
        report_name="Power-Factor Correction Report",
        inputs_block=format_inputs_used(session.params, result),
        cards=format_result_cards(result, session.params.mode),
        result=result,
        plan=plan,
        sweep_rows=sweep_target_pf(session.params),
    )
    print(f"Wrote: {path}")


if __name__ == "__main__":
    main()
