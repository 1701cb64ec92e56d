from __future__ import annotations
from typing import Optional

from .types import CalibrationFactors, MetricComparison, ValidationComparison


def _factor(group: Optional[MetricComparison]) -> float:
    # actual / predicted: >1 means predictions should go up
    if group is None or group.predicted == 0:
        return 1.0
    return round(group.actual / group.predicted, 2)


def recommend_calibration(comparison: ValidationComparison) -> CalibrationFactors:
    """Simulator calibration factors that would close the total-energy gap."""
    m = comparison.metrics
    return CalibrationFactors(
        consumption_factor=_factor(m.total_consumption),
        production_factor=_factor(m.total_production),
    )
