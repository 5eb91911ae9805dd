import json
import math

from pfc_engine.analysis.compensation import compute_correction
from pfc_engine.models.power_inputs import CorrectionMode, InputParameters, WiringSystem
from pfc_engine.report.summary import (
    PLACEHOLDER,
    fmt4,
    format_correction_summary,
    format_inputs_used,
    format_result_cards,
    result_to_dict,
)


def test_fmt4():
    assert fmt4(1.23456) == "1.2346"
    assert fmt4(0) == "0.0000"
    assert fmt4(None) == PLACEHOLDER
    assert fmt4(math.inf) == PLACEHOLDER
    assert fmt4(math.nan) == PLACEHOLDER


def test_cards_without_snapshot_are_placeholders():
    for mode in CorrectionMode:
        cards = format_result_cards(None, mode)
        values = [v for k, v in cards.items() if k != "Reactor note"]
        assert values and all(v == PLACEHOLDER for v in values)


def test_inductive_cards(scenario_a):
    r = compute_correction(scenario_a)
    cards = format_result_cards(r, CorrectionMode.INDUCTIVE)
    assert list(cards) == ["Required capacitance", "kVAr to compensate", "P used", "S used"]
    assert cards["Required capacitance"] == f"{r.capacitance_uf:.4f} µF"
    assert cards["P used"] == "800.0000 W"


def test_capacitive_cards_show_absolute_kvar_and_delta_note():
    params = InputParameters(fp1=0.99, fp2=0.9, mode=CorrectionMode.CAPACITIVE, system=WiringSystem.DELTA_PER_PHASE)
    r = compute_correction(params)
    cards = format_result_cards(r, CorrectionMode.CAPACITIVE)
    assert cards["Reactor note"] == "Per-phase value (Δ)"
    assert cards["kVAr to absorb"] == f"{abs(r.q_delta_kvar):.4f} kVAr"
    assert not cards["kVAr to absorb"].startswith("-")
    assert cards["Reactor (inductor)"].endswith(" mH")


def test_mismatch_card_is_placeholder(scenario_a):
    r = compute_correction(InputParameters(fp1=0.95, fp2=0.8))
    assert format_result_cards(r, CorrectionMode.INDUCTIVE)["Required capacitance"] == PLACEHOLDER


def test_inputs_used_prefers_snapshot(scenario_a):
    r = compute_correction(scenario_a)
    scenario_a.fp1 = 0.5
    block = format_inputs_used(scenario_a, r)
    assert block["FP₁ (current)"] == "0.8"
    assert block["Δ(tanφ)"] == fmt4(r.delta_tan)
    assert block["Q₁ (before)"] == "0.6000 kVAr"

    live = format_inputs_used(scenario_a)
    assert live["FP₁ (current)"] == "0.5"
    assert "Δ(tanφ)" not in live


def test_result_to_dict_is_json_serializable(scenario_a):
    d = result_to_dict(compute_correction(scenario_a))
    assert json.loads(json.dumps(d))["inputs"]["system"] == "mono"
    assert d["formatted"]["inductance_mh"] == PLACEHOLDER
    assert d["classification"] == "Computed"


def test_summary_text(scenario_a):
    text = format_correction_summary(compute_correction(scenario_a))
    assert "Capacitance:" in text
    assert "Reactor:" not in text
    assert text.endswith("\n")
