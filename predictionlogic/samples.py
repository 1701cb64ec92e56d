from __future__ import annotations
from datetime import datetime, timedelta, timezone
from typing import Optional

import numpy as np

from . import compare
from .types import (
    InstallationData,
    Location,
    PredictedSeries,
    Reading,
    ValidationSettings,
    WeatherConditions,
)


def generate_sample_installation(
    days: int = 30,
    end: Optional[datetime] = None,
    seed: Optional[int] = None,
) -> InstallationData:
    """
    Demo residential installation with one daily reading per day, newest first.

    Consumption 8–15 kWh/day; production 5–12 kWh/day derated by cloud cover
    and temperature, with matching weather conditions.
    """
    rng = np.random.default_rng(seed)
    end = end or datetime.now(timezone.utc)
    readings: list[Reading] = []
    for i in range(days):
        ts = end - timedelta(days=i)
        consumption = 8 + rng.random() * 7
        temperature = 15 + rng.random() * 15
        cloud_cover = rng.random() * 100
        irradiance = 200 + (1000 - 200) * (1 - cloud_cover / 100)
        production = (
            (5 + rng.random() * 7)
            * (1 - cloud_cover / 200)
            * (1 - (temperature - 25) * 0.004)
        )
        readings.append(
            Reading(
                timestamp=ts.isoformat(),
                period="daily",
                consumption=float(consumption),
                production=float(production),
                grid_import=float(max(0.0, consumption - production)),
                grid_export=float(max(0.0, production - consumption)),
                weather_conditions=WeatherConditions(
                    temperature=float(temperature),
                    irradiance=float(irradiance),
                    cloud_cover=float(cloud_cover),
                ),
            )
        )
    return InstallationData(
        installation_id="sample-installation-001",
        installation_name="Sample house",
        installation_type="residential",
        location=Location(city="Bogotá", region="Cundinamarca", country="Colombia"),
        installed_capacity=5.0,
        installation_date="2023-01-15",
        panel_type="Monocrystalline 400W",
        inverter_type="5 kW string inverter",
        battery_capacity=0.0,
        readings=readings,
    )


def mock_predictions(
    installation: InstallationData,
    settings: Optional[ValidationSettings] = None,
    spread: float = 0.2,
    seed: Optional[int] = None,
) -> PredictedSeries:
    """
    Stand-in predictions: each actual value scaled by a uniform factor in
    [1 - spread, 1 + spread]. Aligned with the readings matching the
    comparison period; production is omitted when no reading has it.
    """
    rng = np.random.default_rng(seed)
    period = (settings or ValidationSettings()).comparison_period
    readings = compare.filter_period(list(installation.readings), period)
    n = len(readings)

    cons = np.array([r.consumption for r in readings], dtype=float)
    cons_pred = cons * rng.uniform(1 - spread, 1 + spread, size=n)

    production = None
    if any(r.production is not None for r in readings):
        prod = np.array([r.production or 0.0 for r in readings], dtype=float)
        production = (prod * rng.uniform(1 - spread, 1 + spread, size=n)).tolist()

    return PredictedSeries(
        consumption=cons_pred.tolist(),
        production=production,
        timestamps=[r.timestamp for r in readings],
    )
