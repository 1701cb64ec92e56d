from __future__ import annotations
import sys
from typing import Iterable, Sequence

import numpy as np

from . import canon
from .types import ValidationComparison


def calculate_deviation(predicted: float, actual: float) -> float:
    """
    Absolute percentage deviation of predicted from actual.

    A zero actual gives 0 when the prediction is also zero and 100 otherwise,
    so the result is always finite for finite inputs.
    """
    if actual == 0:
        return 0.0 if predicted == 0 else 100.0
    return abs((predicted - actual) / actual) * 100.0


def iqr_bounds(
    values: Sequence[float], k: float = canon.IQR_MULTIPLIER
) -> tuple[float, float]:
    """Return (lower, upper) IQR fences using floor-index quartiles."""
    s = np.sort(np.asarray(values, dtype=float))
    n = len(s)
    q1 = s[int(np.floor(n * 0.25))]
    q3 = s[int(np.floor(n * 0.75))]
    iqr = q3 - q1
    return float(q1 - k * iqr), float(q3 + k * iqr)


def filter_outliers(
    values: Sequence[float], k: float = canon.IQR_MULTIPLIER
) -> list[float]:
    """
    Drop values outside [Q1 - k·IQR, Q3 + k·IQR], keeping input order.
    Fewer than 4 values are returned unfiltered.
    """
    data = [float(v) for v in values]
    if len(data) < 4:
        return data
    lower, upper = iqr_bounds(data, k)
    return [v for v in data if lower <= v <= upper]


def average_deviation(
    results: Iterable[ValidationComparison], metrics: Iterable[str]
) -> float:
    """
    Mean deviation across results for the requested metric names.

    Metric groups absent from a result do not contribute. Returns
    sys.float_info.max when nothing contributed.
    """
    wanted = set(metrics)
    total = 0.0
    count = 0
    for r in results:
        m = r.metrics
        if "consumption" in wanted:
            total += m.total_consumption.deviation
            count += 1
        if "production" in wanted and m.total_production is not None:
            total += m.total_production.deviation
            count += 1
        if "selfConsumption" in wanted and m.self_consumption is not None:
            total += m.self_consumption.deviation
            count += 1
    return total / count if count > 0 else sys.float_info.max


def overall_deviation(result: ValidationComparison) -> float:
    """Mean deviation over every metric group present in one result."""
    m = result.metrics
    devs = [
        g.deviation
        for g in (
            m.total_consumption,
            m.total_production,
            m.self_consumption,
            m.cost_savings,
        )
        if g is not None
    ]
    return float(np.mean(devs)) if devs else 0.0
