from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, List, Optional, Tuple

from . import canon
from .types import ParameterSet, ValidationSettings

# month (1-12) -> "winter" | "summer" | None
SeasonClassifier = Callable[[int], Optional[str]]


@dataclass(frozen=True)
class SeasonConfig:
    winter_months: Tuple[int, ...] = (12, 1, 2)  # Dec–Feb
    summer_months: Tuple[int, ...] = (6, 7, 8)  # Jun–Aug

    @classmethod
    def northern(cls) -> "SeasonConfig":
        return cls()

    @classmethod
    def southern(cls) -> "SeasonConfig":
        return cls(winter_months=(6, 7, 8), summer_months=(12, 1, 2))

    def __call__(self, month: int) -> Optional[str]:
        if month in self.winter_months:
            return "winter"
        if month in self.summer_months:
            return "summer"
        return None


NORTHERN = SeasonConfig.northern()
SOUTHERN = SeasonConfig.southern()


@dataclass(frozen=True)
class AnalyzerConfig:
    # Temperature attribution
    temperature_reference: float = canon.REFERENCE_TEMPERATURE_C
    temperature_min_delta: float = 5.0  # °C from reference to count
    temperature_scale: float = 10.0  # weight = |Δ°C| / scale

    # Irradiance attribution
    irradiance_reference: float = 800.0  # W/m²
    irradiance_min_factor: float = 0.2  # |Δ| / reference

    # Cloud cover attribution
    cloud_cover_min_factor: float = 0.3  # cover / 100


@dataclass
class OptimizationConstraints:
    max_iterations: int = 10
    convergence_threshold: float = 0.5  # percentage points
    max_adjustment_per_iteration: float = 0.05  # fraction per step


@dataclass
class OptimizationOptions:
    optimize_for: List[str] = field(
        default_factory=lambda: ["consumption", "production"]
    )
    constraints: OptimizationConstraints = field(
        default_factory=OptimizationConstraints
    )
    initial_parameters: Optional[ParameterSet] = None

    # Comparison run on every iteration
    comparison_period: str = "daily"
    normalize_weather: bool = True
    exclude_outliers: bool = True
    tariff_per_kwh: float = canon.DEFAULT_TARIFF_PER_KWH
    align_by: str = "timestamp"

    seasons: SeasonClassifier = NORTHERN
    analyzer: AnalyzerConfig = field(default_factory=AnalyzerConfig)

    # Return the lowest-deviation set seen rather than the last one
    return_best: bool = True

    def settings_for(self, params: ParameterSet) -> ValidationSettings:
        return ValidationSettings(
            comparison_period=self.comparison_period,
            metrics=list(self.optimize_for),
            normalize_weather=self.normalize_weather,
            exclude_outliers=self.exclude_outliers,
            tariff_per_kwh=self.tariff_per_kwh,
            outlier_threshold=params.outlier_threshold_factor,
            align_by=self.align_by,  # type: ignore[arg-type]
        )


def default_options() -> OptimizationOptions:
    return OptimizationOptions()
