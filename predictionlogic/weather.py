from __future__ import annotations
from typing import Sequence

from . import canon
from .types import Reading


def normalize_weather_conditions(
    readings: Sequence[Reading],
    reference_temperature: float = canon.REFERENCE_TEMPERATURE_C,
    reference_irradiance: float = canon.REFERENCE_IRRADIANCE_W_M2,
) -> list[Reading]:
    """
    Scale production by temperature derating and irradiance ratio:

        production * (1 + coeff * (T - T_ref)) * (G / G_ref)

    Only readings carrying production, temperature and irradiance change;
    everything else passes through. Input readings are not modified.
    """
    out: list[Reading] = []
    for r in readings:
        w = r.weather_conditions
        if (
            r.production is None
            or w is None
            or w.temperature is None
            or w.irradiance is None
        ):
            out.append(r)
            continue
        temp_corr = 1 + canon.PV_TEMPERATURE_COEFFICIENT * (
            w.temperature - reference_temperature
        )
        irr_corr = w.irradiance / reference_irradiance
        out.append(r.model_copy(update={"production": r.production * temp_corr * irr_corr}))
    return out
