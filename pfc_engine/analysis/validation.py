"""
Domain validation for power-factor correction inputs.

Every check is independent: all violations are reported, not just the first.
Nothing downstream (calculation, preview, diagram) may run while the list is non-empty.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum
from typing import List, Sequence

from pfc_engine.models.power_inputs import InputParameters


class ValidationErrorKind(str, Enum):
    NON_POSITIVE_VOLTAGE = "NonPositiveVoltage"
    NEGATIVE_POWER = "NegativePower"
    POWER_FACTOR_OUT_OF_RANGE = "PowerFactorOutOfRange"


@dataclass(frozen=True)
class ValidationError:
    kind: ValidationErrorKind
    field: str
    message: str


class InputValidationError(ValueError):
    """Raised when a calculation is requested on inputs that failed validation."""

    def __init__(self, errors: Sequence[ValidationError]):
        self.errors: List[ValidationError] = list(errors)
        super().__init__("; ".join(e.message for e in self.errors) or "invalid inputs")


def _pf_in_range(pf: float) -> bool:
    # written as a positive test so NaN fails
    return 0.0 < pf <= 1.0


def validate_inputs(params: InputParameters) -> List[ValidationError]:
    """Return the list of domain violations (empty => valid). No side effects."""
    errors: List[ValidationError] = []

    if not (params.voltage_v > 0):
        errors.append(ValidationError(ValidationErrorKind.NON_POSITIVE_VOLTAGE, "voltage_v", "V must be > 0."))
    elif not (params.voltage_v < math.inf):
        errors.append(ValidationError(ValidationErrorKind.NON_POSITIVE_VOLTAGE, "voltage_v", "V must be finite."))

    if not (params.p_input_w >= 0 and params.s_input_va >= 0):
        errors.append(ValidationError(ValidationErrorKind.NEGATIVE_POWER, "p_input_w/s_input_va", "P and S must be >= 0."))
    elif not (params.p_input_w < math.inf and params.s_input_va < math.inf):
        errors.append(ValidationError(ValidationErrorKind.NEGATIVE_POWER, "p_input_w/s_input_va", "P and S must be finite."))

    if not _pf_in_range(params.fp1):
        errors.append(ValidationError(ValidationErrorKind.POWER_FACTOR_OUT_OF_RANGE, "fp1", "FP₁ must be in (0, 1]."))

    if not _pf_in_range(params.fp2):
        errors.append(ValidationError(ValidationErrorKind.POWER_FACTOR_OUT_OF_RANGE, "fp2", "FP₂ must be in (0, 1]."))

    return errors


def ensure_valid(params: InputParameters) -> None:
    errors = validate_inputs(params)
    if errors:
        raise InputValidationError(errors)
