from __future__ import annotations
import logging
from typing import Optional

import numpy as np
import pandas as pd

from . import canon, ingest, metrics, weather
from .types import (
    ComparisonMetrics,
    HourlyComparison,
    InstallationData,
    MetricComparison,
    PeriodBounds,
    PredictedSeries,
    Reading,
    ValidationComparison,
    ValidationSettings,
    ValuePair,
    WeatherConditions,
)

logger = logging.getLogger(__name__)


def filter_period(readings: list[Reading], period: str) -> list[Reading]:
    """Readings whose period matches (case-insensitive). Unknown periods match nothing."""
    p = period.lower()
    if p not in canon.COMPARISON_PERIODS:
        logger.warning("Unknown comparison period %r; no readings will match", period)
    return [r for r in readings if r.period.lower() == p]


def _metric(predicted: float, actual: float) -> MetricComparison:
    return MetricComparison(
        predicted=float(predicted),
        actual=float(actual),
        deviation=metrics.calculate_deviation(predicted, actual),
    )


def _pair_frame(
    frame: pd.DataFrame, predicted: PredictedSeries, align_by: str
) -> pd.DataFrame:
    """
    Attach predicted_consumption / predicted_production columns to the
    reading frame, by UTC timestamp join or by position.
    """
    pred = ingest.predicted_frame(predicted)
    if align_by == "position":
        out = frame.reset_index(drop=True).copy()
        out["predicted_consumption"] = pred["consumption"].to_numpy()
        out["predicted_production"] = pred["production"].to_numpy()
        return out

    pred = pred.dropna(subset=["key"]).drop_duplicates(subset="key", keep="last")
    pred = pred.rename(
        columns={
            "consumption": "predicted_consumption",
            "production": "predicted_production",
        }
    )[["key", "predicted_consumption", "predicted_production"]]
    out = frame.merge(pred, on="key", how="left", sort=False)
    unmatched = int(out["predicted_consumption"].isna().sum())
    if unmatched:
        logger.warning(
            "%d readings have no prediction with a matching timestamp; "
            "they are left out of the per-timestamp comparison",
            unmatched,
        )
        out = out[out["predicted_consumption"].notna()]
    return out


def _weather_at(
    temperature: float, irradiance: float, cloud_cover: float
) -> Optional[WeatherConditions]:
    vals = {
        "temperature": None if np.isnan(temperature) else float(temperature),
        "irradiance": None if np.isnan(irradiance) else float(irradiance),
        "cloud_cover": None if np.isnan(cloud_cover) else float(cloud_cover),
    }
    if all(v is None for v in vals.values()):
        return None
    return WeatherConditions(**vals)


def hourly_entries(
    readings: list[Reading],
    predicted: PredictedSeries,
    align_by: str = "timestamp",
    frame: Optional[pd.DataFrame] = None,
) -> Optional[list[HourlyComparison]]:
    """
    Per-timestamp predicted/actual pairs, carrying each reading's weather.

    Only built when the reading count equals the predicted timestamp count.
    Pass frame (readings_frame of the same readings) to skip rebuilding it.
    """
    if len(readings) != len(predicted.timestamps):
        return None
    if frame is None:
        frame = ingest.readings_frame(readings)
    if frame.empty:
        return []
    paired = _pair_frame(frame, predicted, align_by)

    cols = [
        paired[c].to_numpy(dtype=float)
        for c in (
            "consumption",
            "predicted_consumption",
            "production",
            "predicted_production",
            "temperature",
            "irradiance",
            "cloud_cover",
        )
    ]
    entries: list[HourlyComparison] = []
    for ts, cons, pcons, prod, pprod, temp, irr, cloud in zip(
        paired["timestamp"].astype(str), *cols
    ):
        production = None
        if not (np.isnan(prod) or np.isnan(pprod)):
            production = ValuePair(predicted=float(pprod), actual=float(prod))
        entries.append(
            HourlyComparison(
                timestamp=ts,
                consumption=ValuePair(predicted=float(pcons), actual=float(cons)),
                production=production,
                weather=_weather_at(temp, irr, cloud),
            )
        )
    return entries



def compare_with_predictions(
    installation: InstallationData,
    predicted: PredictedSeries,
    settings: ValidationSettings,
) -> ValidationComparison:
    """
    Compare an installation's readings against a predicted series.

    Steps: filter readings to the comparison period, optionally weather
    normalise, total actual and predicted values, optionally replace the
    actual totals with IQR-filtered sums (predicted totals are never
    filtered), then derive self-consumption and cost savings.

    Production, self-consumption and cost-savings groups are omitted
    (None) unless both actual and predicted production exist.
    """
    readings = filter_period(list(installation.readings), settings.comparison_period)
    if settings.normalize_weather:
        readings = weather.normalize_weather_conditions(
            readings,
            reference_temperature=settings.reference_temperature,
            reference_irradiance=settings.reference_irradiance,
        )

    frame = ingest.readings_frame(readings)
    consumption = frame["consumption"].astype(float)
    production = frame["production"].astype(float).dropna()

    actual_consumption = float(consumption.sum())
    actual_production: Optional[float] = (
        float(production.sum()) if len(production) else None
    )

    predicted_consumption = float(np.sum(predicted.consumption, dtype=float))
    predicted_production: Optional[float] = (
        float(np.sum(predicted.production, dtype=float))
        if predicted.production is not None
        else None
    )

    if settings.exclude_outliers:
        k = settings.outlier_threshold
        actual_consumption = float(sum(metrics.filter_outliers(consumption.tolist(), k)))
        if actual_production is not None:
            actual_production = float(
                sum(metrics.filter_outliers(production.tolist(), k))
            )

    total_production = self_consumption = cost_savings = None
    if actual_production is not None and predicted_production is not None:
        total_production = _metric(predicted_production, actual_production)

        # min() of totals is a proxy, not a per-interval minimum
        actual_self = min(actual_consumption, actual_production)
        predicted_self = min(predicted_consumption, predicted_production)
        self_consumption = _metric(predicted_self, actual_self)

        tariff = settings.tariff_per_kwh
        cost_savings = _metric(predicted_self * tariff, actual_self * tariff)

    result = ValidationComparison(
        installation_id=installation.installation_id,
        period=PeriodBounds(
            start=readings[0].timestamp if readings else "",
            end=readings[-1].timestamp if readings else "",
        ),
        metrics=ComparisonMetrics(
            total_consumption=_metric(predicted_consumption, actual_consumption),
            total_production=total_production,
            self_consumption=self_consumption,
            cost_savings=cost_savings,
        ),
        hourly_comparison=hourly_entries(
            readings, predicted, settings.align_by, frame
        ),
    )
    logger.debug(
        "Compared %s: %d readings, consumption deviation %.2f%%",
        installation.installation_id,
        len(readings),
        result.metrics.total_consumption.deviation,
    )
    return result
