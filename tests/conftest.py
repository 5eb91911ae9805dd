import os

# headless rendering for report / PNG tests
os.environ.setdefault("MPLBACKEND", "Agg")

import pytest

from pfc_engine.models.power_inputs import InputParameters


@pytest.fixture
def scenario_a() -> InputParameters:
    """800 W, 230 V, 50 Hz, FP 0.8 -> 0.95, single-phase, inductive tab."""
    return InputParameters(p_input_w=800.0, voltage_v=230.0, frequency_hz=50, fp1=0.8, fp2=0.95)
