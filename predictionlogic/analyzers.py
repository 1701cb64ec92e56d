"""Bucketed signed deviations (actual - predicted) over per-timestamp comparisons.

Each analyzer returns the mean signed deviation per bucket; a positive value
means the prediction was too low. Buckets without data report 0.0.
Each analyzer accepts a prebuilt hourly_frame so callers running all
three flatten the results once.
"""

from __future__ import annotations
from typing import Iterable, Optional

import numpy as np
import pandas as pd

from . import utils
from .config import AnalyzerConfig, SeasonClassifier
from .types import (
    SeasonDeviation,
    SeasonalDeviations,
    TimeOfDayDeviations,
    ValidationComparison,
    WeatherDeviations,
)

_COLUMNS = [
    "timestamp",
    "month",
    "hour",
    "consumption_predicted",
    "consumption_actual",
    "production_predicted",
    "production_actual",
    "temperature",
    "irradiance",
    "cloud_cover",
]


def hourly_frame(results: Iterable[ValidationComparison]) -> pd.DataFrame:
    """Flatten every result's per-timestamp entries into one frame."""
    rows: list[dict] = []
    for r in results:
        for h in r.hourly_comparison or []:
            w = h.weather
            rows.append(
                {
                    "timestamp": h.timestamp,
                    "consumption_predicted": h.consumption.predicted,
                    "consumption_actual": h.consumption.actual,
                    "production_predicted": (
                        h.production.predicted if h.production else np.nan
                    ),
                    "production_actual": h.production.actual if h.production else np.nan,
                    "temperature": _or_nan(w.temperature if w else None),
                    "irradiance": _or_nan(w.irradiance if w else None),
                    "cloud_cover": _or_nan(w.cloud_cover if w else None),
                }
            )
    if not rows:
        return pd.DataFrame(columns=_COLUMNS)
    df = pd.DataFrame(rows)
    months, hours = utils.wall_clock(df["timestamp"])
    df["month"] = months
    df["hour"] = hours
    return df[_COLUMNS]


def _or_nan(x: Optional[float]) -> float:
    return np.nan if x is None else float(x)


def _mean(s: pd.Series) -> float:
    s = s.dropna()
    return float(s.mean()) if len(s) else 0.0


def analyze_seasonal_deviations(
    results: Iterable[ValidationComparison],
    seasons: Optional[SeasonClassifier] = None,
    frame: Optional[pd.DataFrame] = None,
) -> SeasonalDeviations:
    df = hourly_frame(results) if frame is None else frame
    if df.empty:
        return SeasonalDeviations()
    season = utils.season_labels(df["month"].to_numpy(), seasons)
    cons_diff = df["consumption_actual"].astype(float) - df["consumption_predicted"].astype(float)
    prod_diff = df["production_actual"].astype(float) - df["production_predicted"].astype(float)

    def _bucket(name: str) -> SeasonDeviation:
        mask = season == name
        return SeasonDeviation(
            consumption=_mean(cons_diff[mask]), production=_mean(prod_diff[mask])
        )

    return SeasonalDeviations(winter=_bucket("winter"), summer=_bucket("summer"))


def analyze_time_of_day_deviations(
    results: Iterable[ValidationComparison],
    frame: Optional[pd.DataFrame] = None,
) -> TimeOfDayDeviations:
    df = hourly_frame(results) if frame is None else frame
    if df.empty:
        return TimeOfDayDeviations()
    hours = df["hour"].to_numpy(dtype=float)
    diff = df["consumption_actual"].astype(float) - df["consumption_predicted"].astype(float)
    return TimeOfDayDeviations(
        peak=_mean(diff[utils.peak_hour_mask(hours)]),
        night=_mean(diff[utils.night_hour_mask(hours)]),
    )


def analyze_weather_deviations(
    results: Iterable[ValidationComparison],
    config: Optional[AnalyzerConfig] = None,
    frame: Optional[pd.DataFrame] = None,
) -> WeatherDeviations:
    """
    Attribute production deviations to weather drivers.

    Each entry's signed production deviation is weighted by how far its
    weather value sits from the reference; only entries past the
    significance threshold are counted.
    """
    cfg = config or AnalyzerConfig()
    df = hourly_frame(results) if frame is None else frame
    if df.empty:
        return WeatherDeviations()
    df = df[df["production_actual"].notna() & df["production_predicted"].notna()]
    diff = df["production_actual"].astype(float) - df["production_predicted"].astype(float)

    temp_delta = (df["temperature"].astype(float) - cfg.temperature_reference).abs()
    temp_mask = temp_delta > cfg.temperature_min_delta
    temperature = _mean((diff * (temp_delta / cfg.temperature_scale))[temp_mask])

    irr_factor = (
        df["irradiance"].astype(float) - cfg.irradiance_reference
    ).abs() / cfg.irradiance_reference
    irr_mask = irr_factor > cfg.irradiance_min_factor
    irradiance = _mean((diff * irr_factor)[irr_mask])

    cloud_factor = df["cloud_cover"].astype(float) / 100.0
    cloud_mask = cloud_factor > cfg.cloud_cover_min_factor
    cloud_cover = _mean((diff * cloud_factor)[cloud_mask])

    return WeatherDeviations(
        temperature=temperature, irradiance=irradiance, cloud_cover=cloud_cover
    )
