"""Tests for dashboard payload serialisation."""

import pytest

from predictionlogic import compare, formats, optimizer
from predictionlogic.config import OptimizationConstraints, OptimizationOptions
from predictionlogic.types import (
    DEFAULT_PARAMETERS,
    IterationRecord,
    OptimizationResult,
    PredictedSeries,
    ValidationSettings,
)


def test_comparison_to_dict_omits_missing_groups(winter_installation, winter_predicted, plain_settings):
    out = compare.compare_with_predictions(winter_installation, winter_predicted, plain_settings)
    d = formats.comparison_to_dict(out)
    assert set(d["metrics"]) == {"totalConsumption"}
    assert d["installationId"] == "inst-1"
    assert d["period"]["start"] == "2024-01-01T00:00:00Z"
    assert "production" not in d["hourlyComparison"][0]


def test_comparison_to_dict_full(pv_installation, pv_predicted, plain_settings):
    out = compare.compare_with_predictions(pv_installation, pv_predicted, plain_settings)
    d = formats.comparison_to_dict(out)
    assert set(d["metrics"]) == {
        "totalConsumption",
        "totalProduction",
        "selfConsumption",
        "costSavings",
    }
    assert d["metrics"]["totalConsumption"]["deviation"] == pytest.approx(10.0)


def test_hourly_weather_serialised_camel_case(make_installation, make_reading):
    ts = "2024-04-01T12:00:00Z"
    inst = make_installation([make_reading(ts, 1.0, production=2.0, temperature=20, cloud_cover=35)])
    predicted = PredictedSeries(consumption=[1.0], production=[2.0], timestamps=[ts])
    out = compare.compare_with_predictions(
        inst, predicted, ValidationSettings(normalize_weather=False, exclude_outliers=False)
    )
    entry = formats.comparison_to_dict(out)["hourlyComparison"][0]
    assert entry["weatherConditions"] == {"temperature": 20.0, "cloudCover": 35.0}
    assert entry["production"] == {"predicted": 2.0, "actual": 2.0}


def test_no_hourly_key_when_not_computed(pv_installation, plain_settings):
    predicted = PredictedSeries(consumption=[1.0], timestamps=["2024-04-01T00:00:00Z"])
    out = compare.compare_with_predictions(pv_installation, predicted, plain_settings)
    assert "hourlyComparison" not in formats.comparison_to_dict(out)


def test_parameters_dict_uses_camel_case():
    d = formats.parameters_to_dict(DEFAULT_PARAMETERS)
    assert d["winterConsumptionFactor"] == 1.3
    assert d["outlierThresholdFactor"] == 1.5
    assert len(d) == 10


def test_parameters_from_dict_mixed_keys():
    p = formats.parameters_from_dict(
        {"winterConsumptionFactor": 1.4, "cloud_cover_impact": 0.3, "unknown": 9}
    )
    assert p.winter_consumption_factor == 1.4
    assert p.cloud_cover_impact == 0.3
    assert p.summer_production_factor == DEFAULT_PARAMETERS.summer_production_factor


def test_parameters_dict_reloads_to_same_set():
    p = DEFAULT_PARAMETERS.updated(peak_hours_consumption_factor=1.7)
    assert formats.parameters_from_dict(formats.parameters_to_dict(p)) == p


def test_optimization_to_dict():
    result = OptimizationResult(
        parameters=DEFAULT_PARAMETERS,
        converged=True,
        iterations=2,
        initial_deviation=20.0,
        best_deviation=15.0,
        final_deviation=15.0,
        history=[
            IterationRecord(0, 20.0, DEFAULT_PARAMETERS),
            IterationRecord(1, 15.0, DEFAULT_PARAMETERS),
        ],
    )
    d = formats.optimization_to_dict(result)
    assert d["originalDeviation"] == 20.0
    assert d["optimizedDeviation"] == 15.0
    assert d["bestDeviation"] == 15.0
    assert d["improvementPercentage"] == pytest.approx(25.0)
    assert [h["deviation"] for h in d["history"]] == [20.0, 15.0]


def test_optimization_payload_reports_returned_set(winter_installation, winter_predicted):
    opts = OptimizationOptions(
        optimize_for=["consumption"],
        constraints=OptimizationConstraints(max_iterations=3, convergence_threshold=0.01),
        normalize_weather=False,
        exclude_outliers=False,
        return_best=False,
    )
    result = optimizer.run_optimization([winter_installation], [winter_predicted], opts)
    d = formats.optimization_to_dict(result)
    assert d["parameters"]["winterConsumptionFactor"] == result.parameters.winter_consumption_factor
    assert d["optimizedDeviation"] == result.final_deviation
    assert d["optimizedDeviation"] > d["bestDeviation"] == d["originalDeviation"]
    assert d["improvementPercentage"] == pytest.approx(
        (d["originalDeviation"] - d["optimizedDeviation"]) / d["originalDeviation"] * 100
    )
    assert d["improvementPercentage"] < 0
