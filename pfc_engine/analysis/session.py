"""
Calculation session: live inputs + the last calculated snapshot.

The UI edits `params` freely. A result exists only after an explicit calculate();
live edits never change the snapshot, and the diagram is always drawn from the snapshot.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List, Optional

from pfc_engine.analysis.compensation import (
    CalculationResult,
    LivePreview,
    compute_correction,
    preview_correction,
)
from pfc_engine.analysis.validation import ValidationError, validate_inputs
from pfc_engine.geometry.power_triangle import DrawingPlan, canvas_extent, map_power_triangles
from pfc_engine.models.power_inputs import InputParameters, system_label

logger = logging.getLogger(__name__)


@dataclass
class CalculationSession:
    params: InputParameters = field(default_factory=InputParameters)
    result: Optional[CalculationResult] = None

    def errors(self) -> List[ValidationError]:
        return validate_inputs(self.params)

    def preview(self) -> Optional[LivePreview]:
        return preview_correction(self.params)

    def calculate(self) -> CalculationResult:
        """
        Snapshot the current inputs and replace the previous result.

        On invalid inputs raises InputValidationError and keeps the previous snapshot.
        """
        snapshot = compute_correction(self.params)
        self.result = snapshot
        return snapshot

    def drawing_plan(
        self,
        css_width: float,
        css_height: float,
        device_pixel_ratio: float = 1.0,
    ) -> Optional[DrawingPlan]:
        """Plan for the current snapshot; None (cleared canvas) before the first calculate()."""
        if self.result is None:
            return None
        width, height = canvas_extent(css_width, css_height, device_pixel_ratio)
        r = self.result
        logger.debug("mapping snapshot onto %dx%d px canvas", width, height)
        return map_power_triangles(
            max(r.p_used_w, 0.0),
            max(r.q1_var, 0.0),
            max(r.q2_var, 0.0),
            width,
            height,
            system_label(r.params.system),
        )
