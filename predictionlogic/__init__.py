from . import (
    canon,
    exceptions,
    types,
    config,
    utils,
    ingest,
    metrics,
    weather,
    compare,
    parameters,
    analyzers,
    optimizer,
    calibration,
    trends,
    samples,
    formats,
)
from .compare import compare_with_predictions
from .metrics import calculate_deviation, filter_outliers
from .optimizer import optimize_parameters, run_optimization
from .parameters import apply_parameters_to_data
from .types import DEFAULT_PARAMETERS, ParameterSet
from .weather import normalize_weather_conditions

__all__ = [
    "canon",
    "exceptions",
    "types",
    "config",
    "utils",
    "ingest",
    "metrics",
    "weather",
    "compare",
    "parameters",
    "analyzers",
    "optimizer",
    "calibration",
    "trends",
    "samples",
    "formats",
    "DEFAULT_PARAMETERS",
    "ParameterSet",
    "apply_parameters_to_data",
    "calculate_deviation",
    "compare_with_predictions",
    "filter_outliers",
    "normalize_weather_conditions",
    "optimize_parameters",
    "run_optimization",
]
