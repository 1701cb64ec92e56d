from __future__ import annotations
from dataclasses import dataclass, field, fields, replace
from typing import List, Literal, Optional

import math

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from . import canon

MetricName = Literal["consumption", "production", "selfConsumption"]


## Input data model (camelCase on the wire)
class _Model(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, frozen=True
    )


class WeatherConditions(_Model):
    temperature: Optional[float] = None  # °C
    irradiance: Optional[float] = None  # W/m²
    cloud_cover: Optional[float] = Field(None, ge=0, le=100)  # %


class Reading(_Model):
    timestamp: str  # ISO 8601
    period: str  # "hourly" | "daily" | "monthly"
    consumption: float = Field(ge=0)  # kWh
    production: Optional[float] = Field(None, ge=0)  # kWh
    grid_import: Optional[float] = None
    grid_export: Optional[float] = None
    battery_charge: Optional[float] = None
    battery_discharge: Optional[float] = None
    weather_conditions: Optional[WeatherConditions] = None


class Location(_Model):
    city: str = ""
    region: str = ""
    country: str = ""


class InstallationData(_Model):
    installation_id: str
    installation_name: str = ""
    installation_type: str = "residential"  # residential | commercial | industrial
    location: Location = Field(default_factory=Location)
    installed_capacity: float = 0.0  # kW
    installation_date: str = ""
    panel_type: Optional[str] = None
    inverter_type: Optional[str] = None
    battery_capacity: Optional[float] = None  # kWh
    readings: List[Reading] = Field(default_factory=list)


class PredictedSeries(_Model):
    """Predicted values aligned with the filtered readings of one installation."""

    consumption: List[float]
    production: Optional[List[float]] = None
    timestamps: List[str]


class ValidationSettings(_Model):
    # Plain str so an unknown period filters to nothing instead of raising
    comparison_period: str = "daily"
    metrics: List[str] = Field(default_factory=lambda: list(canon.METRICS))
    normalize_weather: bool = True
    exclude_outliers: bool = True

    tariff_per_kwh: float = canon.DEFAULT_TARIFF_PER_KWH
    outlier_threshold: float = canon.IQR_MULTIPLIER
    align_by: Literal["timestamp", "position"] = "timestamp"
    reference_temperature: float = canon.REFERENCE_TEMPERATURE_C
    reference_irradiance: float = canon.REFERENCE_IRRADIANCE_W_M2


## Comparison output
@dataclass(frozen=True)
class MetricComparison:
    predicted: float
    actual: float
    deviation: float  # %


@dataclass(frozen=True)
class ValuePair:
    predicted: float
    actual: float


@dataclass(frozen=True)
class HourlyComparison:
    timestamp: str
    consumption: ValuePair
    production: Optional[ValuePair] = None
    weather: Optional[WeatherConditions] = None


@dataclass(frozen=True)
class PeriodBounds:
    start: str
    end: str


@dataclass(frozen=True)
class ComparisonMetrics:
    total_consumption: MetricComparison
    total_production: Optional[MetricComparison] = None
    self_consumption: Optional[MetricComparison] = None
    cost_savings: Optional[MetricComparison] = None


@dataclass(frozen=True)
class ValidationComparison:
    installation_id: str
    period: PeriodBounds
    metrics: ComparisonMetrics
    hourly_comparison: Optional[List[HourlyComparison]] = None


## Tunable parameters
@dataclass(frozen=True)
class ParameterSet:
    # Weather normalization
    temperature_coefficient: float = canon.PV_TEMPERATURE_COEFFICIENT
    irradiance_linear_factor: float = 1.0
    cloud_cover_impact: float = 0.5

    # Seasonal
    winter_consumption_factor: float = 1.3
    winter_production_factor: float = 0.7
    summer_consumption_factor: float = 0.8
    summer_production_factor: float = 1.2

    # Time of day
    peak_hours_consumption_factor: float = 1.5
    night_hours_consumption_factor: float = 0.4

    # Outlier detection (IQR multiplier)
    outlier_threshold_factor: float = canon.IQR_MULTIPLIER

    def as_dict(self) -> dict[str, float]:
        return {f.name: float(getattr(self, f.name)) for f in fields(self)}

    def updated(self, **changes: float) -> "ParameterSet":
        return replace(self, **changes)

    def non_finite(self) -> list[str]:
        return [k for k, v in self.as_dict().items() if not math.isfinite(v)]


DEFAULT_PARAMETERS = ParameterSet()


## Analyzer signals (mean signed deviation, actual - predicted)
@dataclass(frozen=True)
class SeasonDeviation:
    consumption: float = 0.0
    production: float = 0.0


@dataclass(frozen=True)
class SeasonalDeviations:
    winter: SeasonDeviation = field(default_factory=SeasonDeviation)
    summer: SeasonDeviation = field(default_factory=SeasonDeviation)


@dataclass(frozen=True)
class TimeOfDayDeviations:
    peak: float = 0.0
    night: float = 0.0


@dataclass(frozen=True)
class WeatherDeviations:
    temperature: float = 0.0
    irradiance: float = 0.0
    cloud_cover: float = 0.0


## Optimizer output
@dataclass(frozen=True)
class IterationRecord:
    iteration: int
    deviation: float
    parameters: ParameterSet


@dataclass
class OptimizationResult:
    parameters: ParameterSet
    converged: bool
    iterations: int
    initial_deviation: float
    best_deviation: float  # lowest deviation seen in history
    final_deviation: float  # deviation of the returned parameters
    history: List[IterationRecord] = field(default_factory=list)

    @property
    def improvement_pct(self) -> float:
        """Change from the first evaluation to the returned set; negative when worse."""
        if not self.history or self.initial_deviation <= 0:
            return 0.0
        if not (
            math.isfinite(self.initial_deviation)
            and math.isfinite(self.final_deviation)
        ):
            return 0.0
        return (
            (self.initial_deviation - self.final_deviation) / self.initial_deviation
        ) * 100.0


@dataclass(frozen=True)
class CalibrationFactors:
    consumption_factor: float
    production_factor: float
