from __future__ import annotations
import json
import logging
from pathlib import Path
from typing import IO, Any, Mapping, Sequence

import numpy as np
import pandas as pd
from pydantic import ValidationError

from . import canon, utils
from .exceptions import IngestError
from .types import InstallationData, PredictedSeries, Reading

logger = logging.getLogger(__name__)


def _load_json(source: IO[str] | str | Path) -> Any:
    if isinstance(source, Path):
        text = source.read_text(encoding="utf-8")
    elif isinstance(source, str):
        # Existing file paths are read; anything else is taken as raw JSON
        text = source
        if not source.lstrip().startswith(("{", "[")):
            p = Path(source)
            try:
                is_file = p.is_file()
            except (OSError, ValueError):
                is_file = False
            if is_file:
                text = p.read_text(encoding="utf-8")
    else:
        text = source.read()
    try:
        return json.loads(text)
    except json.JSONDecodeError as e:
        raise IngestError(f"Invalid JSON: {e}") from e


def from_dict(data: Mapping[str, Any]) -> InstallationData:
    """
    Validate a dashboard-style payload (camelCase keys, as uploaded by users)
    into InstallationData. snake_case keys are accepted too.
    """
    try:
        inst = InstallationData.model_validate(data)
    except ValidationError as e:
        raise IngestError(f"Invalid installation data: {e}") from e
    logger.debug(
        "Loaded installation %s with %d readings",
        inst.installation_id,
        len(inst.readings),
    )
    return inst


def from_json(source: IO[str] | str | Path) -> InstallationData:
    data = _load_json(source)
    if not isinstance(data, Mapping):
        raise IngestError("Installation JSON must be an object.")
    return from_dict(data)


def predicted_from_dict(data: Mapping[str, Any]) -> PredictedSeries:
    try:
        return PredictedSeries.model_validate(data)
    except ValidationError as e:
        raise IngestError(f"Invalid predicted series: {e}") from e


def readings_frame(readings: Sequence[Reading]) -> pd.DataFrame:
    """
    Tabulate readings in their given order.

    Columns: timestamp (original string), key (UTC join key), month, hour
    (wall-clock of the timestamp), period, consumption, production and the
    weather fields. Missing optional values are NaN.
    """
    if not readings:
        return pd.DataFrame(columns=canon.FRAME_COLS)

    ts = [r.timestamp for r in readings]
    months, hours = utils.wall_clock(ts)

    def _weather(attr: str) -> np.ndarray:
        return np.array(
            [
                np.nan
                if r.weather_conditions is None
                or getattr(r.weather_conditions, attr) is None
                else float(getattr(r.weather_conditions, attr))
                for r in readings
            ],
            dtype=float,
        )

    df = pd.DataFrame(
        {
            "timestamp": ts,
            "key": utils.utc_keys(ts),
            "month": months,
            "hour": hours,
            "period": [r.period for r in readings],
            "consumption": np.array([r.consumption for r in readings], dtype=float),
            "production": np.array(
                [np.nan if r.production is None else r.production for r in readings],
                dtype=float,
            ),
            "temperature": _weather("temperature"),
            "irradiance": _weather("irradiance"),
            "cloud_cover": _weather("cloud_cover"),
        }
    )
    return df[canon.FRAME_COLS]


def predicted_frame(predicted: PredictedSeries) -> pd.DataFrame:
    """Predicted values keyed by timestamp; production NaN where absent."""
    n = len(predicted.timestamps)
    return pd.DataFrame(
        {
            "timestamp": list(predicted.timestamps),
            "key": utils.utc_keys(predicted.timestamps),
            "consumption": utils.aligned(predicted.consumption, n),
            "production": utils.aligned(predicted.production, n),
        }
    )
