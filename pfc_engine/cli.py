"""
CLI entrypoint for the power-factor correction calculator.

Engine modules stay pure: this module is config parsing + orchestration + JSON packaging only.

Usage:
  python -m pfc_engine.cli --config configs/sample.yaml --out outputs/

Outputs:
  - outputs/report.html (if enabled)
  - outputs/power_triangle.png, outputs/compensation_sweep.png (if report enabled)
  - outputs/results.json (canonical result packet for UI)
"""

from __future__ import annotations

import argparse
import json
import logging
import os
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

from pfc_engine.analysis.session import CalculationSession
from pfc_engine.analysis.sweep import sweep_target_pf
from pfc_engine.models.power_inputs import (
    CorrectionMode,
    InputParameters,
    PowerType,
    SUPPORTED_FREQUENCIES_HZ,
    WiringSystem,
    resolve_voltage,
)
from pfc_engine.report.html_report import generate_html_report
from pfc_engine.report.summary import (
    format_correction_summary,
    format_inputs_used,
    format_result_cards,
    result_to_dict,
)

SCHEMA_VERSION = "pfc.v1"

logger = logging.getLogger(__name__)


def _utc_now_iso() -> str:
    return datetime.now(timezone.utc).replace(microsecond=0).isoformat().replace("+00:00", "Z")


def _deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    out: Dict[str, Any] = dict(base)
    for k, v in override.items():
        if isinstance(v, dict) and isinstance(out.get(k), dict):
            out[k] = _deep_merge(out[k], v)
        else:
            out[k] = v
    return out


def _apply_defaults(cfg: Dict[str, Any]) -> Dict[str, Any]:
    defaults: Dict[str, Any] = {
        "load": {
            "power_type": "P",
            "p_w": 800.0,
            "s_va": 1000.0,
            "fp1": 0.8,
            "fp2": 0.95,
        },
        "site": {
            "voltage_preset": 230,
            "voltage_v": 230.0,
            "frequency_hz": 50,
            "system": "mono",
        },
        "correction": {"mode": "inductive"},
        "canvas": {"css_width": 480, "css_height": 280, "device_pixel_ratio": 1.0},
        "sweeps": {"target_pf": {"enabled": True, "points": 10}},
        "report": {"enabled": True, "report_name": "Power-Factor Correction Report"},
        "tool": {"name": "pfc-calculator", "version": "0.1.0"},
    }
    return _deep_merge(defaults, cfg)


def _validate_cfg(cfg: Dict[str, Any]) -> None:
    """Structural checks only; domain ranges are left to validate_inputs()."""

    def get(path: str) -> Any:
        cur: Any = cfg
        for key in path.split("."):
            if not isinstance(cur, dict) or key not in cur:
                raise ValueError(f"Missing required config key: {path}")
            cur = cur[key]
        return cur

    def section(path: str) -> Dict[str, Any]:
        v = get(path)
        if not isinstance(v, dict):
            raise ValueError(f"{path} must be a mapping, got {type(v).__name__}")
        return v

    def choice(path: str, allowed: List[str]) -> None:
        v = str(get(path))
        if v not in allowed:
            raise ValueError(f"{path} must be one of {allowed}, got {v!r}")

    for path in ("load", "site", "correction", "canvas", "sweeps", "sweeps.target_pf", "report", "tool"):
        section(path)

    choice("load.power_type", [t.value for t in PowerType])
    choice("site.system", [s.value for s in WiringSystem])
    choice("correction.mode", [m.value for m in CorrectionMode])

    for path in ("load.p_w", "load.s_va", "load.fp1", "load.fp2"):
        try:
            float(get(path))
        except (TypeError, ValueError):
            raise ValueError(f"{path} must be a number")

    try:
        freq = float(get("site.frequency_hz"))
    except (TypeError, ValueError):
        raise ValueError("site.frequency_hz must be 50 or 60")
    if freq not in SUPPORTED_FREQUENCIES_HZ:
        raise ValueError("site.frequency_hz must be 50 or 60")

    resolve_voltage(get("site.voltage_preset"), get("site.voltage_v"))

    canvas = section("canvas")
    for key in ("css_width", "css_height", "device_pixel_ratio"):
        if float(canvas.get(key, 0) or 0) < 0:
            raise ValueError(f"canvas.{key} must be >= 0")
    if float(canvas.get("device_pixel_ratio", 1.0)) <= 0:
        raise ValueError("canvas.device_pixel_ratio must be > 0")

    points = int(get("sweeps.target_pf.points"))
    if points < 2:
        raise ValueError("sweeps.target_pf.points must be >= 2")


def _build_params(cfg: Dict[str, Any]) -> InputParameters:
    load, site = cfg["load"], cfg["site"]
    return InputParameters(
        power_type=PowerType(str(load["power_type"])),
        p_input_w=float(load["p_w"]),
        s_input_va=float(load["s_va"]),
        voltage_v=resolve_voltage(site["voltage_preset"], site.get("voltage_v")),
        frequency_hz=int(float(site["frequency_hz"])),
        fp1=float(load["fp1"]),
        fp2=float(load["fp2"]),
        system=WiringSystem(str(site["system"])),
        mode=CorrectionMode(str(cfg["correction"]["mode"])),
    )


def _load_yaml(path: Path) -> Dict[str, Any]:
    with path.open("r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ValueError("Config YAML must be a mapping (top-level dict).")
    return data


def _write_json(path: Path, obj: Dict[str, Any]) -> None:
    path.write_text(json.dumps(obj, indent=2, sort_keys=False, ensure_ascii=False), encoding="utf-8")


def _build_result_packet(
    *,
    cfg: Dict[str, Any],
    session: CalculationSession,
    plan_dict: Dict[str, Any],
    sweep_rows: Optional[List[Dict[str, Any]]],
    out_dir: str,
    report_enabled: bool,
) -> Dict[str, Any]:
    result = session.result
    artifacts: Dict[str, Any] = {
        "report_html": str(Path(out_dir) / "report.html") if report_enabled else None,
        "plots": [],
        "raw": [{"name": "results_json", "path": str(Path(out_dir) / "results.json")}],
    }
    if report_enabled:
        artifacts["plots"].append({"name": "power_triangle", "path": str(Path(out_dir) / "power_triangle.png")})
        if sweep_rows:
            artifacts["plots"].append(
                {"name": "compensation_sweep", "path": str(Path(out_dir) / "compensation_sweep.png")}
            )

    series: Dict[str, Any] = {}
    if sweep_rows is not None:
        series["q_delta_vs_fp2"] = {
            "x_name": "Target power factor FP2",
            "y_name": "ΔQ (kVAr)",
            "points": [[r["fp2"], r["q_delta_kvar"]] for r in sweep_rows],
            "rows": sweep_rows,
        }

    return {
        "schema_version": SCHEMA_VERSION,
        "generated_utc": _utc_now_iso(),
        "tool": {
            "name": cfg["tool"].get("name", "pfc-calculator"),
            "version": cfg["tool"].get("version", "0.1.0"),
        },
        "report": {
            "title": cfg["report"].get("report_name", "Power-Factor Correction Report"),
            "generated_local": datetime.now().strftime("%Y-%m-%d %H:%M"),
        },
        "result": result_to_dict(result),
        "cards": format_result_cards(result, session.params.mode),
        "inputs_used": format_inputs_used(session.params, result),
        "drawing_plan": plan_dict,
        "series": series,
        "artifacts": artifacts,
        "disclaimer": (
            "Steady-state fundamental-frequency model. Harmonics, unbalance and transients are not considered."
        ),
    }


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(
        prog="pfc_engine.cli",
        description="Power-factor correction calculator: CLI + results.json (mirrors report.html)",
    )
    parser.add_argument("--config", required=True, help="Path to YAML config (e.g., configs/sample.yaml)")
    parser.add_argument("--out", required=True, help="Output directory (e.g., outputs/)")
    parser.add_argument("--no-report", action="store_true", help="Disable HTML report generation")
    parser.add_argument("--verbose", action="store_true", help="Log intermediate values")
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.INFO if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    cfg_path = Path(args.config)
    out_dir = str(Path(args.out))

    if not cfg_path.exists():
        print(f"Config not found: {cfg_path}")
        return 2

    try:
        cfg_raw = _load_yaml(cfg_path)
        cfg = _apply_defaults(cfg_raw)
        _validate_cfg(cfg)
        if args.no_report:
            cfg["report"]["enabled"] = False
        params = _build_params(cfg)
    except (ValueError, TypeError, yaml.YAMLError) as e:
        print(f"Config error: {e}")
        return 2

    session = CalculationSession(params=params)
    errors = session.errors()
    if errors:
        print("Input errors:")
        for err in errors:
            print(f"- {err.message}")
        return 2

    os.makedirs(out_dir, exist_ok=True)

    result = session.calculate()
    print(format_correction_summary(result))

    canvas = cfg["canvas"]
    plan = session.drawing_plan(
        float(canvas.get("css_width", 0) or 0),
        float(canvas.get("css_height", 0) or 0),
        float(canvas.get("device_pixel_ratio", 1.0)),
    )

    sweep_rows: Optional[List[Dict[str, Any]]] = None
    sweep_cfg = cfg["sweeps"]["target_pf"]
    if bool(sweep_cfg.get("enabled", True)):
        sweep_rows = sweep_target_pf(params, points=int(sweep_cfg.get("points", 10)))

    report_cfg = cfg["report"]
    report_enabled = bool(report_cfg.get("enabled", True))
    if report_enabled:
        generate_html_report(
            out_dir=out_dir,
            report_name=str(report_cfg.get("report_name", "Power-Factor Correction Report")),
            inputs_block=format_inputs_used(session.params, result),
            cards=format_result_cards(result, session.params.mode),
            result=result,
            plan=plan,
            sweep_rows=sweep_rows,
        )
        logger.info("report written to %s", out_dir)

    packet = _build_result_packet(
        cfg=cfg,
        session=session,
        plan_dict=plan.to_dict(),
        sweep_rows=sweep_rows,
        out_dir=out_dir,
        report_enabled=report_enabled,
    )

    _write_json(Path(out_dir) / "results.json", packet)

    print(f"Wrote: {Path(out_dir) / 'results.json'}")
    if report_enabled:
        print(f"Wrote: {Path(out_dir) / 'report.html'}")
        print(f"Open with: open {Path(out_dir) / 'report.html'}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
