import math
from dataclasses import replace

import pytest

from pfc_engine.analysis.compensation import (
    Classification,
    PF_CLAMP_MAX,
    clamp_pf,
    compute_correction,
    delta_tan,
    preview_correction,
    reactor_inductance_mh,
)
from pfc_engine.analysis.validation import InputValidationError
from pfc_engine.models.power_inputs import CorrectionMode, InputParameters, PowerType, WiringSystem

TAN_095 = math.sqrt(1 - 0.95 ** 2) / 0.95


def expected_c_uf(p, v, dtan, kf=1.0, ksys=1.0):
    return (1e4 / math.pi) * (p / v ** 2) * dtan * kf * ksys


def test_scenario_a_capacitor_single_phase(scenario_a):
    r = compute_correction(scenario_a)
    assert r.classification == Classification.COMPUTED
    assert r.delta_tan == pytest.approx(0.75 - TAN_095, abs=1e-5)
    assert r.capacitance_uf == pytest.approx(expected_c_uf(800, 230, 0.75 - TAN_095), rel=1e-5)
    assert r.capacitance_uf == pytest.approx(20.28, abs=0.01)
    assert r.inductance_mh is None
    assert r.kf == 1.0 and r.ksys == 1.0


def test_scenario_b_delta_is_one_third_of_star(scenario_a):
    star = compute_correction(scenario_a)
    delta = compute_correction(replace(scenario_a, system=WiringSystem.DELTA_PER_PHASE))
    assert delta.ksys == pytest.approx(1 / 3)
    assert delta.capacitance_uf == pytest.approx(star.capacitance_uf / 3, rel=1e-12)
    assert delta.capacitance_uf == pytest.approx(6.76, abs=0.01)


def test_sixty_hz_capacitance_is_one_over_1_2(scenario_a):
    c50 = compute_correction(scenario_a).capacitance_uf
    c60 = compute_correction(replace(scenario_a, frequency_hz=60)).capacitance_uf
    assert c60 == pytest.approx(c50 / 1.2, rel=1e-12)


def test_scenario_c_wrong_sign_is_mode_mismatch(scenario_a):
    r = compute_correction(replace(scenario_a, fp1=0.95, fp2=0.8))
    assert r.delta_tan < 0
    assert r.classification == Classification.MODE_MISMATCH
    assert r.is_mode_mismatch
    assert r.capacitance_uf is None and r.inductance_mh is None
    assert "Capacitive" in r.message


def test_equal_pf_is_mismatch_in_both_modes(scenario_a):
    for mode in CorrectionMode:
        r = compute_correction(replace(scenario_a, fp1=0.9, fp2=0.9, mode=mode))
        assert r.delta_tan == pytest.approx(0.0, abs=1e-12)
        assert r.classification == Classification.MODE_MISMATCH
        assert r.capacitance_uf is None and r.inductance_mh is None


def test_never_both_sizing_values():
    for fp1 in (0.3, 0.7, 0.9, 1.0):
        for fp2 in (0.3, 0.7, 0.9, 1.0):
            for mode in CorrectionMode:
                for system in WiringSystem:
                    r = compute_correction(InputParameters(fp1=fp1, fp2=fp2, mode=mode, system=system))
                    assert not (r.capacitance_uf is not None and r.inductance_mh is not None)
                    if r.classification == Classification.COMPUTED:
                        assert (r.capacitance_uf is None) != (r.inductance_mh is None)


def test_monotonic_in_target_pf(scenario_a):
    prev_dtan, prev_c = -math.inf, -math.inf
    for fp2 in (0.82, 0.86, 0.9, 0.94, 0.98, 1.0):
        r = compute_correction(replace(scenario_a, fp2=fp2))
        assert r.delta_tan > prev_dtan
        assert r.capacitance_uf > prev_c
        prev_dtan, prev_c = r.delta_tan, r.capacitance_uf


def test_deterministic(scenario_a):
    a = compute_correction(scenario_a)
    b = compute_correction(scenario_a)
    assert a == b


def test_pf_of_one_is_clamped_not_an_error(scenario_a):
    assert clamp_pf(1.0) == PF_CLAMP_MAX
    r = compute_correction(replace(scenario_a, fp2=1.0))
    assert math.isfinite(r.q2_var) and math.isfinite(r.s_used_va)
    assert 0 < r.q2_var < 2.0  # near-zero tangent term
    assert r.capacitance_uf > 0


def test_active_power_reconciles_s_through_target_pf(scenario_a):
    r = compute_correction(scenario_a)
    assert r.p_used_w == 800.0
    assert r.s_used_va == pytest.approx(800.0 / 0.95)
    assert r.q1_var == pytest.approx(600.0)
    assert r.q2_var == pytest.approx(800.0 * TAN_095)
    assert r.q_delta_kvar == pytest.approx(0.8 * r.delta_tan)


def test_apparent_power_reconciles_p_through_target_pf():
    params = InputParameters(power_type=PowerType.APPARENT, p_input_w=1.0, s_input_va=1000.0, fp1=0.8, fp2=0.95)
    r = compute_correction(params)
    assert r.s_used_va == 1000.0
    assert r.p_used_w == pytest.approx(950.0)


def test_reactor_single_phase_and_delta():
    params = InputParameters(
        power_type=PowerType.APPARENT,
        s_input_va=50000.0,
        voltage_v=400.0,
        frequency_hz=50,
        fp1=0.99,
        fp2=0.95,
        mode=CorrectionMode.CAPACITIVE,
    )
    mono = compute_correction(params)
    assert mono.classification == Classification.COMPUTED
    assert mono.capacitance_uf is None

    q_abs = abs(mono.q_delta_kvar) * 1000.0
    assert mono.inductance_mh == pytest.approx(400.0 ** 2 / (2 * math.pi * 50 * q_abs) * 1000.0, rel=1e-12)

    delta = compute_correction(replace(params, system=WiringSystem.DELTA_PER_PHASE))
    assert delta.inductance_mh == pytest.approx(3 * mono.inductance_mh, rel=1e-12)


def test_reactor_ignores_frequency_factor():
    params = InputParameters(fp1=0.99, fp2=0.9, mode=CorrectionMode.CAPACITIVE)
    l50 = compute_correction(params)
    l60 = compute_correction(replace(params, frequency_hz=60))
    assert l60.kf == pytest.approx(1 / 1.2)
    assert l60.inductance_mh == pytest.approx(l50.inductance_mh * 50 / 60, rel=1e-12)


def test_capacitive_tab_with_positive_delta_is_mismatch(scenario_a):
    r = compute_correction(replace(scenario_a, mode=CorrectionMode.CAPACITIVE))
    assert r.classification == Classification.MODE_MISMATCH
    assert r.inductance_mh is None
    assert "Inductive" in r.message


def test_capacitive_tab_with_zero_power_has_nothing_to_absorb():
    r = compute_correction(InputParameters(p_input_w=0.0, fp1=0.99, fp2=0.9, mode=CorrectionMode.CAPACITIVE))
    assert r.delta_tan < 0
    assert r.classification == Classification.MODE_MISMATCH
    assert r.inductance_mh is None


def test_inductive_tab_with_zero_power_gives_zero_capacitance():
    r = compute_correction(InputParameters(p_input_w=0.0))
    assert r.classification == Classification.COMPUTED
    assert r.capacitance_uf == 0.0


def test_reactor_inductance_rejects_zero_var():
    with pytest.raises(ValueError):
        reactor_inductance_mh(230.0, 50, 0.0, WiringSystem.SINGLE_PHASE_OR_STAR)


def test_invalid_inputs_do_not_compute():
    with pytest.raises(InputValidationError):
        compute_correction(InputParameters(voltage_v=0.0))


def test_snapshot_echo_is_a_copy(scenario_a):
    r = compute_correction(scenario_a)
    scenario_a.fp1 = 0.5
    assert r.params.fp1 == 0.8
    with pytest.raises(Exception):
        r.p_used_w = 1.0


def test_preview_matches_snapshot_and_is_none_when_invalid(scenario_a):
    pv = preview_correction(scenario_a)
    r = compute_correction(scenario_a)
    assert pv.delta_tan == r.delta_tan
    assert (pv.p_used_w, pv.q1_var, pv.q2_var) == (r.p_used_w, r.q1_var, r.q2_var)
    assert preview_correction(replace(scenario_a, fp1=0.0)) is None


def test_delta_tan_sign_convention():
    assert delta_tan(0.7, 0.95) > 0
    assert delta_tan(0.95, 0.7) < 0
