from __future__ import annotations

from dataclasses import fields
from typing import Any, Mapping, Optional

from pydantic.alias_generators import to_camel

from .types import (
    HourlyComparison,
    MetricComparison,
    OptimizationResult,
    ParameterSet,
    ValidationComparison,
)


def _metric(m: MetricComparison) -> dict[str, float]:
    return {"predicted": m.predicted, "actual": m.actual, "deviation": m.deviation}


def _hourly(h: HourlyComparison) -> dict[str, Any]:
    out: dict[str, Any] = {
        "timestamp": h.timestamp,
        "consumption": {"predicted": h.consumption.predicted, "actual": h.consumption.actual},
    }
    if h.production is not None:
        out["production"] = {
            "predicted": h.production.predicted,
            "actual": h.production.actual,
        }
    if h.weather is not None:
        out["weatherConditions"] = h.weather.model_dump(by_alias=True, exclude_none=True)
    return out


def comparison_to_dict(c: ValidationComparison) -> dict[str, Any]:
    """
    camelCase payload for the dashboard. Metric groups that were not
    computed are left out entirely, not zero-filled.
    """
    m = c.metrics
    metrics: dict[str, Any] = {"totalConsumption": _metric(m.total_consumption)}
    if m.total_production is not None:
        metrics["totalProduction"] = _metric(m.total_production)
    if m.self_consumption is not None:
        metrics["selfConsumption"] = _metric(m.self_consumption)
    if m.cost_savings is not None:
        metrics["costSavings"] = _metric(m.cost_savings)

    out: dict[str, Any] = {
        "installationId": c.installation_id,
        "period": {"start": c.period.start, "end": c.period.end},
        "metrics": metrics,
    }
    if c.hourly_comparison is not None:
        out["hourlyComparison"] = [_hourly(h) for h in c.hourly_comparison]
    return out


def parameters_to_dict(p: ParameterSet) -> dict[str, float]:
    return {to_camel(k): v for k, v in p.as_dict().items()}


def parameters_from_dict(
    data: Mapping[str, Any], base: Optional[ParameterSet] = None
) -> ParameterSet:
    """Build a ParameterSet from camelCase or snake_case keys; unknown keys are ignored."""
    base = base or ParameterSet()
    by_camel = {to_camel(f.name): f.name for f in fields(ParameterSet)}
    names = {f.name for f in fields(ParameterSet)}
    changes: dict[str, float] = {}
    for key, value in data.items():
        name = key if key in names else by_camel.get(key)
        if name is not None:
            changes[name] = float(value)
    return base.updated(**changes)


def optimization_to_dict(r: OptimizationResult) -> dict[str, Any]:
    return {
        "parameters": parameters_to_dict(r.parameters),
        "converged": r.converged,
        "iterations": r.iterations,
        "originalDeviation": r.initial_deviation,
        "optimizedDeviation": r.final_deviation,
        "bestDeviation": r.best_deviation,
        "improvementPercentage": r.improvement_pct,
        "history": [
            {"iteration": h.iteration, "deviation": h.deviation} for h in r.history
        ],
    }
