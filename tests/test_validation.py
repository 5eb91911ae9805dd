import math

import pytest

from pfc_engine.analysis.validation import (
    InputValidationError,
    ValidationErrorKind,
    ensure_valid,
    validate_inputs,
)
from pfc_engine.models.power_inputs import InputParameters


def kinds(params):
    return [e.kind for e in validate_inputs(params)]


def test_defaults_are_valid():
    assert validate_inputs(InputParameters()) == []


@pytest.mark.parametrize("v", [0.0, -230.0, math.nan])
def test_non_positive_voltage(v):
    assert kinds(InputParameters(voltage_v=v)) == [ValidationErrorKind.NON_POSITIVE_VOLTAGE]


def test_negative_power_checks_both_fields_even_if_not_selected():
    assert kinds(InputParameters(s_input_va=-1.0)) == [ValidationErrorKind.NEGATIVE_POWER]
    assert kinds(InputParameters(p_input_w=-1.0)) == [ValidationErrorKind.NEGATIVE_POWER]


def test_zero_power_is_allowed():
    assert validate_inputs(InputParameters(p_input_w=0.0, s_input_va=0.0)) == []


@pytest.mark.parametrize("pf", [0.0, -0.5, 1.0001, math.nan])
def test_pf_out_of_range_reports_field(pf):
    errs = validate_inputs(InputParameters(fp1=pf))
    assert [(e.kind, e.field) for e in errs] == [(ValidationErrorKind.POWER_FACTOR_OUT_OF_RANGE, "fp1")]
    errs = validate_inputs(InputParameters(fp2=pf))
    assert [(e.kind, e.field) for e in errs] == [(ValidationErrorKind.POWER_FACTOR_OUT_OF_RANGE, "fp2")]


def test_pf_of_exactly_one_is_valid():
    assert validate_inputs(InputParameters(fp1=1.0, fp2=1.0)) == []


def test_all_violations_are_reported():
    params = InputParameters(voltage_v=0.0, p_input_w=-5.0, fp1=0.0, fp2=2.0)
    errs = validate_inputs(params)
    assert len(errs) == 4
    assert [e.field for e in errs] == ["voltage_v", "p_input_w/s_input_va", "fp1", "fp2"]


def test_ensure_valid_raises_with_error_list():
    with pytest.raises(InputValidationError) as exc:
        ensure_valid(InputParameters(voltage_v=0.0, fp2=0.0))
    assert len(exc.value.errors) == 2
    assert isinstance(exc.value, ValueError)


@pytest.mark.parametrize(
    "params",
    [InputParameters(p_input_w=math.inf), InputParameters(s_input_va=math.inf)],
)
def test_infinite_power_is_rejected(params):
    errs = validate_inputs(params)
    assert [(e.kind, e.message) for e in errs] == [(ValidationErrorKind.NEGATIVE_POWER, "P and S must be finite.")]


def test_infinite_voltage_is_rejected():
    errs = validate_inputs(InputParameters(voltage_v=math.inf))
    assert [(e.kind, e.message) for e in errs] == [(ValidationErrorKind.NON_POSITIVE_VOLTAGE, "V must be finite.")]
