from __future__ import annotations
from typing import Iterable, Literal

import pandas as pd

from . import analyzers, utils
from .types import ValidationComparison

TrendMetric = Literal["consumption", "production", "selfConsumption", "all"]


def hourly_trends(
    comparison: ValidationComparison, metric: TrendMetric = "consumption"
) -> pd.DataFrame:
    """
    Per-timestamp predicted/actual values with absolute deviation (kWh).

    Returns a DataFrame indexed by 'timestamp' with
    '<flow>_predicted', '<flow>_actual', '<flow>_abs_deviation' columns for
    consumption and/or production.
    """
    df = analyzers.hourly_frame([comparison])
    flows = []
    if metric in ("consumption", "all"):
        flows.append("consumption")
    if metric in ("production", "all"):
        flows.append("production")

    out = pd.DataFrame(index=pd.Index(df["timestamp"], name="timestamp"))
    for flow in flows:
        pred = df[f"{flow}_predicted"].astype(float).to_numpy()
        act = df[f"{flow}_actual"].astype(float).to_numpy()
        out[f"{flow}_predicted"] = pred
        out[f"{flow}_actual"] = act
        out[f"{flow}_abs_deviation"] = abs(pred - act)
    if "production" in flows:
        out = out.dropna(how="all")
    return out


def historical_trends(
    comparisons: Iterable[ValidationComparison], metric: TrendMetric = "consumption"
) -> pd.DataFrame:
    """
    One row per comparison, indexed by the midpoint of its period, with the
    deviation (%) of each requested metric group. Absent groups are NaN.
    """
    rows: list[dict] = []
    for c in comparisons:
        start = utils.utc_key(c.period.start)
        end = utils.utc_key(c.period.end)
        mid = start + (end - start) / 2 if not (pd.isna(start) or pd.isna(end)) else pd.NaT
        m = c.metrics
        row: dict = {"date": mid}
        if metric in ("consumption", "all"):
            row["consumption_deviation"] = m.total_consumption.deviation
        if metric in ("production", "all"):
            row["production_deviation"] = (
                m.total_production.deviation if m.total_production else float("nan")
            )
        if metric in ("selfConsumption", "all"):
            row["self_consumption_deviation"] = (
                m.self_consumption.deviation if m.self_consumption else float("nan")
            )
        rows.append(row)
    if not rows:
        return pd.DataFrame(index=pd.DatetimeIndex([], tz="UTC", name="date"))
    return pd.DataFrame(rows).set_index("date").sort_index()
