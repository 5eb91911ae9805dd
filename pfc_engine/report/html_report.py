"""
HTML report generator for the power-factor correction calculator.

- Produces a standalone HTML file.
- Writes the power triangle and the target-FP sweep as PNGs into the same output directory.

Presentation-only: every number shown here is already computed.
"""

from __future__ import annotations

import os
import datetime as _dt
from typing import Dict, List, Optional

import matplotlib.pyplot as plt

from pfc_engine.analysis.compensation import CalculationResult
from pfc_engine.geometry.power_triangle import DrawingPlan
from pfc_engine.report.triangle_plot import write_triangle_png


def _ensure_dir(path: str) -> None:
    os.makedirs(path, exist_ok=True)


def _escape(s: str) -> str:
    return (
        str(s)
        .replace("&", "&amp;")
        .replace("<", "&lt;")
        .replace(">", "&gt;")
        .replace('"', "&quot;")
    )


def _status_badge(result: CalculationResult) -> str:
    cls = "status-warn" if result.is_mode_mismatch else "status-ok"
    return f'<span class="badge {cls}">{_escape(result.classification.value)}</span>'


def _kv_table(rows: Dict[str, str]) -> str:
    body = "".join(f"<tr><th>{_escape(k)}</th><td>{_escape(v)}</td></tr>" for k, v in rows.items())
    return f"<table><tbody>{body}</tbody></table>"


def _write_png_sweep(
    sweep_rows: List[dict],
    out_dir: str,
    filename: str = "compensation_sweep.png",
) -> Optional[str]:
    pts = [(r["fp2"], r["q_delta_kvar"]) for r in sweep_rows if r.get("q_delta_kvar") is not None]
    if not pts:
        return None
    _ensure_dir(out_dir)
    xs = [p[0] for p in pts]
    ys = [p[1] for p in pts]

    plt.figure()
    plt.plot(xs, ys, marker="o")
    plt.axhline(0.0, color="#94a3b8", linewidth=1)
    plt.xlabel("Target power factor FP₂")
    plt.ylabel("ΔQ (kVAr, signed)")
    plt.title("Required compensation vs target FP")
    plt.grid(True)
    path = os.path.join(out_dir, filename)
    plt.savefig(path, dpi=160, bbox_inches="tight")
    plt.close()
    return filename


def generate_html_report(
    *,
    out_dir: str,
    report_name: str,
    inputs_block: Dict[str, str],
    cards: Dict[str, str],
    result: CalculationResult,
    plan: DrawingPlan,
    sweep_rows: Optional[List[dict]] = None,
) -> str:
    _ensure_dir(out_dir)

    triangle_png = write_triangle_png(plan, out_dir)
    sweep_png = _write_png_sweep(sweep_rows, out_dir) if sweep_rows else None

    now = _dt.datetime.now().strftime("%Y-%m-%d %H:%M")

    cards_html = "".join(
        f'<div class="card result"><div class="muted small">{_escape(k)}</div>'
        f'<div class="value">{_escape(v)}</div></div>'
        for k, v in cards.items()
    )

    sweep_html = (
        f"<div class='imgwrap'><img src='{_escape(sweep_png)}' alt='Compensation sweep'/></div>"
        if sweep_png else "<p class='muted'>Sweep disabled.</p>"
    )

    html = f"""<!doctype html>
<html>
<head>
<meta charset="utf-8"/>
<meta name="viewport" content="width=device-width, initial-scale=1"/>
<title>{_escape(report_name)}</title>
<style>
  body {{
    font-family: -apple-system, BlinkMacSystemFont, "Segoe UI", Roboto, Arial, sans-serif;
    margin: 24px;
    color: #111;
  }}
  h1, h2, h3 {{ margin: 0.2em 0; }}
  .muted {{ color: #555; }}
  .small {{ font-size: 12px; text-transform: uppercase; }}
  .grid {{
    display: grid;
    grid-template-columns: 1fr 1fr;
    gap: 16px;
  }}
  .cards {{
    display: grid;
    grid-template-columns: repeat(4, 1fr);
    gap: 12px;
    margin-top: 14px;
  }}
  .card {{
    border: 1px solid #ddd;
    border-radius: 10px;
    padding: 14px 16px;
    box-shadow: 0 1px 2px rgba(0,0,0,0.04);
  }}
  .value {{ font-size: 22px; font-weight: 800; }}
  table {{
    width: 100%;
    border-collapse: collapse;
    margin-top: 10px;
    font-size: 14px;
  }}
  th, td {{
    border-bottom: 1px solid #eee;
    padding: 8px 10px;
    text-align: left;
    vertical-align: top;
  }}
  th {{
    background: #fafafa;
    font-weight: 600;
    width: 40%;
  }}
  .badge {{
    display: inline-block;
    padding: 2px 8px;
    border-radius: 999px;
    font-size: 12px;
    font-weight: 700;
    border: 1px solid #ddd;
  }}
  .status-ok {{ background: #ecfdf5; border-color: #a7f3d0; }}
  .status-warn {{ background: #fffbeb; border-color: #fde68a; }}
  .imgwrap {{ margin-top: 10px; }}
  img {{
    max-width: 100%;
    height: auto;
    border: 1px solid #eee;
    border-radius: 8px;
  }}
  .footer {{
    margin-top: 18px;
    font-size: 13px;
    color: #555;
  }}
  @media (max-width: 900px) {{
    .grid, .cards {{ grid-template-columns: 1fr; }}
  }}
</style>
</head>
<body>

<h1>{_escape(report_name)}</h1>
<div class="muted">Generated: {now}</div>

<div class="card" style="margin-top: 14px;">
  {_status_badge(result)} {_escape(result.message)}
</div>

<div class="cards">
  {cards_html}
</div>

<div class="grid" style="margin-top: 16px;">
  <div class="card">
    <h2>Data used</h2>
    {_kv_table(inputs_block)}
    <div class="footer">
      Only reactive power is corrected. In a capacitive condition no capacitors are installed; a reactor is sized instead.
    </div>
  </div>

  <div class="card">
    <h2>Power triangle</h2>
    <div class="imgwrap">
      <img src="{_escape(triangle_png)}" alt="Power triangle"/>
    </div>
    <p class="muted">Two triangles: <b>before</b> (Q₁) and <b>target</b> (Q₂). Dashed line = <b>ΔQ</b>.</p>
  </div>
</div>

<div class="card" style="margin-top: 16px;">
  <h2>Required compensation vs target FP</h2>
  {sweep_html}
</div>

<div class="footer">
  <b>Disclaimer:</b> Steady-state, fundamental-frequency phasor model. Harmonics, unbalance and transients are not considered.
  The 60 Hz factor (1/1.2) applies to capacitor sizing only.
</div>

</body>
</html>
"""

    report_path = os.path.join(out_dir, "report.html")
    with open(report_path, "w", encoding="utf-8") as f:
        f.write(html)

    return report_path
