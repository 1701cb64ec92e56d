from __future__ import annotations
import logging
import sys
from typing import Optional, Sequence

from . import analyzers, canon, compare, metrics, parameters
from .config import OptimizationOptions, default_options
from .exceptions import OptimizationError, require
from .types import (
    DEFAULT_PARAMETERS,
    InstallationData,
    IterationRecord,
    OptimizationResult,
    ParameterSet,
    PredictedSeries,
    ValidationComparison,
)

logger = logging.getLogger(__name__)


def nudge(value: float, signal: float, max_adjustment: float) -> float:
    """Scale value by (1 ± min(|signal|/100, max_adjustment)), sign following signal."""
    if signal > 0:
        return value * (1 + min(signal / 100.0, max_adjustment))
    if signal < 0:
        return value * (1 - min(abs(signal) / 100.0, max_adjustment))
    return value


def clamp_outlier_factor(params: ParameterSet) -> ParameterSet:
    factor = min(
        canon.OUTLIER_FACTOR_MAX,
        max(canon.OUTLIER_FACTOR_MIN, params.outlier_threshold_factor),
    )
    if factor == params.outlier_threshold_factor:
        return params
    return params.updated(outlier_threshold_factor=factor)


def adjust_parameters(
    current: ParameterSet,
    results: Sequence[ValidationComparison],
    options: OptimizationOptions,
) -> ParameterSet:
    """One update step driven by the seasonal, time-of-day and weather signals."""
    step = options.constraints.max_adjustment_per_iteration
    frame = analyzers.hourly_frame(results)
    seasonal = analyzers.analyze_seasonal_deviations(results, options.seasons, frame)
    tod = analyzers.analyze_time_of_day_deviations(results, frame)
    wx = analyzers.analyze_weather_deviations(results, options.analyzer, frame)

    updated = current.updated(
        winter_consumption_factor=nudge(
            current.winter_consumption_factor, seasonal.winter.consumption, step
        ),
        winter_production_factor=nudge(
            current.winter_production_factor, seasonal.winter.production, step
        ),
        summer_consumption_factor=nudge(
            current.summer_consumption_factor, seasonal.summer.consumption, step
        ),
        summer_production_factor=nudge(
            current.summer_production_factor, seasonal.summer.production, step
        ),
        peak_hours_consumption_factor=nudge(
            current.peak_hours_consumption_factor, tod.peak, step
        ),
        night_hours_consumption_factor=nudge(
            current.night_hours_consumption_factor, tod.night, step
        ),
        temperature_coefficient=nudge(
            current.temperature_coefficient, wx.temperature, step
        ),
        irradiance_linear_factor=nudge(
            current.irradiance_linear_factor, wx.irradiance, step
        ),
        cloud_cover_impact=nudge(current.cloud_cover_impact, wx.cloud_cover, step),
    )
    updated = clamp_outlier_factor(updated)

    bad = updated.non_finite()
    require(
        not bad,
        f"Parameter update produced non-finite values: {', '.join(bad)}",
        OptimizationError,
    )
    return updated


def evaluate(
    installations: Sequence[InstallationData],
    predictions: Sequence[PredictedSeries],
    params: ParameterSet,
    options: OptimizationOptions,
) -> list[ValidationComparison]:
    """Apply params to every installation and compare against its predictions."""
    settings = options.settings_for(params)
    return [
        compare.compare_with_predictions(
            parameters.apply_parameters_to_data(inst, params, options.seasons),
            pred,
            settings,
        )
        for inst, pred in zip(installations, predictions)
    ]


def run_optimization(
    installations: Sequence[InstallationData],
    predictions: Sequence[PredictedSeries],
    options: Optional[OptimizationOptions] = None,
) -> OptimizationResult:
    """
    Iteratively tune parameters to reduce the mean deviation of the
    optimize_for metrics.

    Stops when the deviation changes by less than the convergence threshold
    between iterations, or after max_iterations evaluations. Each iteration
    runs one comparison per installation. When the set being returned was
    produced by the last update and never evaluated, one more comparison
    pass scores it so final_deviation always belongs to the returned set.
    """
    opts = options or default_options()
    cons = opts.constraints
    require(
        len(installations) == len(predictions),
        f"Got {len(installations)} installations but {len(predictions)} predicted series.",
        OptimizationError,
    )
    require(cons.max_iterations >= 0, "max_iterations must be >= 0.", OptimizationError)
    require(
        cons.max_adjustment_per_iteration >= 0,
        "max_adjustment_per_iteration must be >= 0.",
        OptimizationError,
    )

    current = opts.initial_parameters or DEFAULT_PARAMETERS
    bad = current.non_finite()
    require(
        not bad,
        f"Initial parameters are not finite: {', '.join(bad)}",
        OptimizationError,
    )
    current = clamp_outlier_factor(current)

    current_deviation = sys.float_info.max
    best, best_deviation = current, float("inf")
    history: list[IterationRecord] = []
    converged = False
    iteration = 0

    while iteration < cons.max_iterations and not converged:
        results = evaluate(installations, predictions, current, opts)
        deviation = metrics.average_deviation(results, opts.optimize_for)
        history.append(IterationRecord(iteration, deviation, current))
        logger.debug("Iteration %d: mean deviation %.4f%%", iteration, deviation)

        if deviation < best_deviation:
            best, best_deviation = current, deviation

        if abs(current_deviation - deviation) < cons.convergence_threshold:
            converged = True
        else:
            current = adjust_parameters(current, results, opts)
            current_deviation = deviation
        iteration += 1

    if converged:
        logger.info("Converged after %d iterations (deviation %.4f%%)", iteration, best_deviation)
    else:
        logger.info("Stopped after %d iterations without converging", iteration)

    if not history:
        return OptimizationResult(
            parameters=current,
            converged=False,
            iterations=0,
            initial_deviation=sys.float_info.max,
            best_deviation=sys.float_info.max,
            final_deviation=sys.float_info.max,
            history=history,
        )

    if opts.return_best:
        chosen, final_deviation = best, best_deviation
        if best is not history[-1].parameters:
            logger.warning(
                "Returning parameters from an earlier iteration with lower deviation "
                "(%.4f%%)",
                best_deviation,
            )
    elif converged:
        chosen, final_deviation = current, history[-1].deviation
    else:
        chosen = current
        final_deviation = metrics.average_deviation(
            evaluate(installations, predictions, current, opts), opts.optimize_for
        )
        logger.debug("Returned parameters score %.4f%%", final_deviation)

    return OptimizationResult(
        parameters=chosen,
        converged=converged,
        iterations=iteration,
        initial_deviation=history[0].deviation,
        best_deviation=best_deviation,
        final_deviation=final_deviation,
        history=history,
    )


def optimize_parameters(
    installations: Sequence[InstallationData],
    predictions: Sequence[PredictedSeries],
    options: Optional[OptimizationOptions] = None,
) -> ParameterSet:
    return run_optimization(installations, predictions, options).parameters
