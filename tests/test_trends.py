import numpy as np
import pandas as pd
import pytest

from predictionlogic import compare
from predictionlogic.trends import historical_trends, hourly_trends


def test_hourly_trends_consumption(winter_installation, winter_predicted, plain_settings):
    out = compare.compare_with_predictions(winter_installation, winter_predicted, plain_settings)
    df = hourly_trends(out)
    assert df.index.name == "timestamp"
    assert len(df) == 10
    assert list(df.columns) == [
        "consumption_predicted",
        "consumption_actual",
        "consumption_abs_deviation",
    ]
    assert np.allclose(df["consumption_abs_deviation"], 1.0)


def test_hourly_trends_all_flows(pv_installation, pv_predicted, plain_settings):
    out = compare.compare_with_predictions(pv_installation, pv_predicted, plain_settings)
    df = hourly_trends(out, "all")
    assert len(df) == 3
    assert np.allclose(df["production_abs_deviation"], 1.0)
    assert np.allclose(df["consumption_abs_deviation"], 1.0)


def test_historical_trends(
    winter_installation, winter_predicted, pv_installation, pv_predicted, plain_settings
):
    winter = compare.compare_with_predictions(winter_installation, winter_predicted, plain_settings)
    spring = compare.compare_with_predictions(pv_installation, pv_predicted, plain_settings)
    df = historical_trends([spring, winter], "all")
    assert df.index.name == "date"
    # Sorted by period midpoint
    assert df.index[0] == pd.Timestamp("2024-01-05T12:00:00Z")
    assert df["consumption_deviation"].iloc[0] == pytest.approx(10.0)
    assert np.isnan(df["production_deviation"].iloc[0])
    assert df["production_deviation"].iloc[1] == pytest.approx(25.0)
    assert df["self_consumption_deviation"].iloc[1] == pytest.approx(25.0)


def test_historical_trends_empty():
    df = historical_trends([])
    assert df.empty
    assert df.index.name == "date"
