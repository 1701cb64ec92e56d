import pytest

from predictionlogic.types import (
    InstallationData,
    PredictedSeries,
    Reading,
    ValidationSettings,
    WeatherConditions,
)


def _reading(
    timestamp,
    consumption,
    production=None,
    period="daily",
    temperature=None,
    irradiance=None,
    cloud_cover=None,
):
    weather = None
    if temperature is not None or irradiance is not None or cloud_cover is not None:
        weather = WeatherConditions(
            temperature=temperature, irradiance=irradiance, cloud_cover=cloud_cover
        )
    return Reading(
        timestamp=timestamp,
        period=period,
        consumption=consumption,
        production=production,
        weather_conditions=weather,
    )


def _installation(readings, installation_id="inst-1"):
    return InstallationData(installation_id=installation_id, readings=readings)


@pytest.fixture
def make_reading():
    """Factory for Reading; weather fields are keyword arguments."""
    return _reading


@pytest.fixture
def make_installation():
    return _installation


@pytest.fixture
def plain_settings():
    """Daily comparison with no normalisation or outlier filtering."""
    return ValidationSettings(
        comparison_period="daily", normalize_weather=False, exclude_outliers=False
    )


@pytest.fixture
def january_days():
    return [f"2024-01-{d:02d}T00:00:00Z" for d in range(1, 11)]


@pytest.fixture
def winter_installation(january_days):
    """Ten January days, 10 kWh consumption each, no production."""
    return _installation([_reading(ts, 10.0) for ts in january_days])


@pytest.fixture
def winter_predicted(january_days):
    """Predictions 10% below actual consumption."""
    return PredictedSeries(consumption=[9.0] * len(january_days), timestamps=january_days)


@pytest.fixture
def pv_installation():
    """Three daily readings with production: 30 kWh used, 12 kWh produced."""
    days = [f"2024-04-{d:02d}T00:00:00Z" for d in (1, 2, 3)]
    return _installation([_reading(ts, 10.0, production=4.0) for ts in days])


@pytest.fixture
def pv_predicted():
    days = [f"2024-04-{d:02d}T00:00:00Z" for d in (1, 2, 3)]
    return PredictedSeries(consumption=[9.0] * 3, production=[5.0] * 3, timestamps=days)
