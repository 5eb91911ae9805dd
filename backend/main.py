import json
import os
import shutil
import subprocess
import sys
import tempfile
import uuid
from pathlib import Path
from typing import List, Optional

from fastapi import FastAPI, File, UploadFile, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, FileResponse
from pydantic import BaseModel, Field

from pfc_engine.analysis.session import CalculationSession
from pfc_engine.analysis.validation import InputValidationError
from pfc_engine.models.power_inputs import (
    CorrectionMode,
    InputParameters,
    PowerType,
    VOLTAGE_PRESETS_V,
    WiringSystem,
)
from pfc_engine.report.summary import format_inputs_used, format_result_cards, result_to_dict


APP_NAME = "pfc-app-backend"
DEFAULT_ENGINE_MODULE = "pfc_engine.cli"
RESULTS_FILENAME = "results.json"

# Storage defaults to a folder in the backend directory (OK for local + MVP).
DEFAULT_STORAGE_DIR = Path(__file__).resolve().parent / "storage"


app = FastAPI(title=APP_NAME, version="0.1.0")

# CORS: set CORS_ORIGINS="https://your-frontend-domain.com,https://another.com"
cors_env = os.getenv("CORS_ORIGINS", "")
if cors_env.strip():
    origins = [o.strip() for o in cors_env.split(",") if o.strip()]
else:
    origins = ["http://localhost:5173", "http://127.0.0.1:5173"]

app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=False,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["*"],
)


class CalculateRequest(BaseModel):
    power_type: PowerType = PowerType.ACTIVE
    p_input_w: float = 800.0
    s_input_va: float = 1000.0
    voltage_v: float = 230.0
    frequency_hz: int = Field(50, description="50 or 60")
    fp1: float = 0.8
    fp2: float = 0.95
    system: WiringSystem = WiringSystem.SINGLE_PHASE_OR_STAR
    mode: CorrectionMode = CorrectionMode.INDUCTIVE
    css_width: float = 480
    css_height: float = 280
    device_pixel_ratio: float = 1.0

    def to_params(self) -> InputParameters:
        if self.frequency_hz not in (50, 60):
            raise HTTPException(status_code=422, detail=["frequency_hz must be 50 or 60."])
        return InputParameters(
            power_type=self.power_type,
            p_input_w=self.p_input_w,
            s_input_va=self.s_input_va,
            voltage_v=self.voltage_v,
            frequency_hz=self.frequency_hz,
            fp1=self.fp1,
            fp2=self.fp2,
            system=self.system,
            mode=self.mode,
        )


@app.get("/health")
def health():
    return {"ok": True, "service": APP_NAME}


@app.get("/api/voltage-presets")
def voltage_presets():
    return {"presets_v": list(VOLTAGE_PRESETS_V), "custom": True}


@app.post("/api/preview")
def preview(req: CalculateRequest):
    session = CalculationSession(params=req.to_params())
    pv = session.preview()
    return {
        "errors": [e.message for e in session.errors()],
        "preview": None if pv is None else {
            "delta_tan": pv.delta_tan,
            "p_used_w": pv.p_used_w,
            "q1_var": pv.q1_var,
            "q2_var": pv.q2_var,
        },
    }


@app.post("/api/calculate")
def calculate(req: CalculateRequest):
    """
    Explicit calculate action: returns the snapshot, formatted cards and the drawing plan.
    Invalid inputs -> 422 with the list of validation messages.
    """
    session = CalculationSession(params=req.to_params())
    try:
        result = session.calculate()
        plan = session.drawing_plan(req.css_width, req.css_height, req.device_pixel_ratio)
    except InputValidationError as e:
        raise HTTPException(status_code=422, detail=[err.message for err in e.errors])
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    return {
        "result": result_to_dict(result),
        "cards": format_result_cards(result, session.params.mode),
        "inputs_used": format_inputs_used(session.params, result),
        "drawing_plan": plan.to_dict(),
    }


def _safe_filename(name: str) -> str:
    name = name.replace("\\", "/").split("/")[-1]
    name = "".join(ch for ch in name if ch.isalnum() or ch in ("-", "_", ".", "+"))
    return name or "file"


def _storage_dir() -> Path:
    p = os.getenv("STORAGE_DIR", "").strip()
    return Path(p) if p else DEFAULT_STORAGE_DIR


def _run_dir(run_id: str) -> Path:
    return _storage_dir() / _safe_filename(run_id)


def _run_engine(config_path: Path, out_dir: Path) -> subprocess.CompletedProcess:
    """
    Runs the engine CLI via python -m <module> with this server's interpreter,
    so the same site-packages are visible.
    """
    engine_module = os.getenv("PFC_ENGINE_MODULE", DEFAULT_ENGINE_MODULE)
    python_bin = os.getenv("PYTHON_BIN", sys.executable)

    cmd: List[str] = [
        python_bin,
        "-m",
        engine_module,
        "--config",
        str(config_path),
        "--out",
        str(out_dir),
    ]

    timeout_s: Optional[float] = None
    t = os.getenv("ENGINE_TIMEOUT_SECONDS", "").strip()
    if t:
        try:
            timeout_s = float(t)
        except ValueError:
            timeout_s = None

    return subprocess.run(
        cmd,
        stdout=subprocess.PIPE,
        stderr=subprocess.PIPE,
        text=True,
        timeout=timeout_s,
    )


def _copy_outputs(src_out_dir: Path, dst_run_dir: Path) -> None:
    for item in src_out_dir.iterdir():
        target = dst_run_dir / item.name
        if item.is_dir():
            if target.exists():
                shutil.rmtree(target)
            shutil.copytree(item, target)
        else:
            shutil.copy2(item, target)


@app.get("/api/runs/{run_id}/results")
def get_results(run_id: str):
    rp = _run_dir(run_id) / RESULTS_FILENAME
    if not rp.exists():
        raise HTTPException(status_code=404, detail="Run results not found.")
    try:
        return JSONResponse(content=json.loads(rp.read_text(encoding="utf-8")))
    except ValueError as e:
        raise HTTPException(status_code=500, detail=f"Failed to parse stored results.json: {e}")


@app.get("/api/runs/{run_id}/files/{filename}")
def get_file(run_id: str, filename: str):
    filename = _safe_filename(filename)
    p = _run_dir(run_id) / filename
    if not p.exists():
        raise HTTPException(status_code=404, detail="File not found for this run.")
    return FileResponse(path=str(p), filename=filename)


@app.post("/api/analyze")
async def analyze(config: UploadFile = File(...)):
    """
    Input: multipart/form-data field 'config' (YAML)
    Runs the CLI and returns results.json verbatim.

    Artifacts (results.json, report.html, pngs) are kept under STORAGE_DIR/<run_id>/.
    Response header:
        X-Run-Id: <run_id>
    """
    if not config.filename:
        raise HTTPException(status_code=400, detail="Missing filename for uploaded config.")

    filename = _safe_filename(config.filename)
    lower = filename.lower()
    if not (lower.endswith(".yml") or lower.endswith(".yaml")):
        raise HTTPException(status_code=400, detail="Config must be a .yml or .yaml file.")

    content = await config.read()
    if not content:
        raise HTTPException(status_code=400, detail="Uploaded config file is empty.")

    run_id = str(uuid.uuid4())
    dst_run_dir = _run_dir(run_id)
    dst_run_dir.mkdir(parents=True, exist_ok=True)

    try:
        with tempfile.TemporaryDirectory(prefix="pfc_run_") as td:
            run_dir = Path(td)
            out_dir = run_dir / "outputs"
            out_dir.mkdir(parents=True, exist_ok=True)

            config_path = run_dir / filename
            config_path.write_bytes(content)

            try:
                proc = _run_engine(config_path=config_path, out_dir=out_dir)
            except subprocess.TimeoutExpired:
                raise HTTPException(
                    status_code=504,
                    detail="Engine run timed out. Increase ENGINE_TIMEOUT_SECONDS.",
                )

            # exit code 2 = config / input errors reported on stdout
            if proc.returncode == 2:
                raise HTTPException(
                    status_code=422,
                    detail={"message": "Invalid config.", "stdout_tail": (proc.stdout or "")[-8000:]},
                )
            if proc.returncode != 0:
                raise HTTPException(
                    status_code=500,
                    detail={
                        "message": "Engine execution failed.",
                        "returncode": proc.returncode,
                        "stdout_tail": (proc.stdout or "")[-8000:],
                        "stderr_tail": (proc.stderr or "")[-8000:],
                    },
                )

            results_path = out_dir / RESULTS_FILENAME
            if not results_path.exists():
                raise HTTPException(status_code=500, detail="Engine did not produce results.json.")

            _copy_outputs(out_dir, dst_run_dir)

            try:
                results_obj = json.loads(results_path.read_text(encoding="utf-8"))
            except ValueError as e:
                raise HTTPException(status_code=500, detail=f"Failed to parse results.json: {e}")

            resp = JSONResponse(content=results_obj)
            resp.headers["X-Run-Id"] = run_id
            return resp

    except Exception:
        # failed runs leave nothing behind
        if dst_run_dir.exists():
            shutil.rmtree(dst_run_dir, ignore_errors=True)
        raise
