from __future__ import annotations
from typing import Final

# Reading frame layout
FRAME_COLS: Final[list[str]] = [
    "timestamp",
    "key",
    "month",
    "hour",
    "period",
    "consumption",
    "production",
    "temperature",
    "irradiance",
    "cloud_cover",
]

COMPARISON_PERIODS: Final[tuple[str, ...]] = (
    "hourly",
    "daily",
    "weekly",
    "monthly",
    "yearly",
)
METRICS: Final[tuple[str, ...]] = ("consumption", "production", "selfConsumption")

# Standard test conditions for PV output
REFERENCE_TEMPERATURE_C: Final[float] = 25.0
REFERENCE_IRRADIANCE_W_M2: Final[float] = 1000.0
PV_TEMPERATURE_COEFFICIENT: Final[float] = -0.004  # per °C, crystalline silicon

DEFAULT_TARIFF_PER_KWH: Final[float] = 0.15
IQR_MULTIPLIER: Final[float] = 1.5

# Inclusive hour ranges, local wall-clock of the timestamp
PEAK_HOURS: Final[tuple[tuple[int, int], ...]] = ((6, 9), (17, 21))
NIGHT_START_HOUR: Final[int] = 22
NIGHT_END_HOUR: Final[int] = 5

OUTLIER_FACTOR_MIN: Final[float] = 1.1
OUTLIER_FACTOR_MAX: Final[float] = 3.0
