from __future__ import annotations
from typing import Optional

import numpy as np

from . import canon, ingest, utils
from .config import SeasonClassifier
from .types import DEFAULT_PARAMETERS, InstallationData, ParameterSet, Reading


def parameter_multipliers(
    readings: list[Reading],
    params: ParameterSet,
    seasons: Optional[SeasonClassifier] = None,
) -> tuple[np.ndarray, np.ndarray]:
    """
    Return per-reading (consumption_mult, production_mult).

    Factors compose multiplicatively in order: seasonal, time-of-day
    (hourly readings only), then weather corrections on production.
    """
    df = ingest.readings_frame(readings)
    n = len(df)
    cons = np.ones(n, dtype=float)
    prod = np.ones(n, dtype=float)
    if n == 0:
        return cons, prod

    # Seasonal
    season = utils.season_labels(df["month"].to_numpy(), seasons)
    winter = season == "winter"
    summer = season == "summer"
    cons[winter] *= params.winter_consumption_factor
    prod[winter] *= params.winter_production_factor
    cons[summer] *= params.summer_consumption_factor
    prod[summer] *= params.summer_production_factor

    # Time of day
    hourly = df["period"].str.lower().eq("hourly").to_numpy()
    hours = df["hour"].to_numpy(dtype=float)
    cons[hourly & utils.peak_hour_mask(hours)] *= params.peak_hours_consumption_factor
    cons[hourly & utils.night_hour_mask(hours)] *= params.night_hours_consumption_factor

    # Weather, production only
    temp = df["temperature"].to_numpy(dtype=float)
    irr = df["irradiance"].to_numpy(dtype=float)
    cloud = df["cloud_cover"].to_numpy(dtype=float)
    has_prod = df["production"].notna().to_numpy()

    m = has_prod & ~np.isnan(temp)
    prod[m] *= 1 + params.temperature_coefficient * (
        temp[m] - canon.REFERENCE_TEMPERATURE_C
    )
    m = has_prod & ~np.isnan(irr)
    prod[m] *= (irr[m] / canon.REFERENCE_IRRADIANCE_W_M2) * params.irradiance_linear_factor
    m = has_prod & ~np.isnan(cloud)
    prod[m] *= 1 - (cloud[m] / 100.0) * params.cloud_cover_impact

    return cons, prod


def apply_parameters_to_data(
    installation: InstallationData,
    params: ParameterSet = DEFAULT_PARAMETERS,
    seasons: Optional[SeasonClassifier] = None,
) -> InstallationData:
    """
    Return a new InstallationData with every reading adjusted by params.
    The input installation and its readings are left untouched.
    """
    readings = list(installation.readings)
    cons, prod = parameter_multipliers(readings, params, seasons)

    adjusted: list[Reading] = []
    for r, cm, pm in zip(readings, cons, prod):
        update: dict[str, float] = {"consumption": r.consumption * float(cm)}
        if r.production is not None:
            update["production"] = r.production * float(pm)
        adjusted.append(r.model_copy(update=update))

    return installation.model_copy(update={"readings": adjusted}, deep=True)
