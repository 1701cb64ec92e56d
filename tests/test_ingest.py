"""Tests for loading installation data and tabulating readings."""

import json

import numpy as np
import pytest

from predictionlogic import ingest
from predictionlogic.exceptions import IngestError

PAYLOAD = {
    "installationId": "casa-001",
    "installationName": "Casa Ejemplo",
    "installationType": "residential",
    "location": {"city": "Medellín", "region": "Antioquia", "country": "Colombia"},
    "installedCapacity": 5,
    "installationDate": "2023-01-15",
    "readings": [
        {
            "timestamp": "2024-01-01T00:00:00Z",
            "period": "daily",
            "consumption": 12.5,
            "production": 8.0,
            "gridImport": 4.5,
            "weatherConditions": {"temperature": 24.0, "irradiance": 700, "cloudCover": 20},
        },
        {"timestamp": "2024-01-02T00:00:00Z", "period": "daily", "consumption": 11.0},
    ],
}


def test_from_dict_camel_case():
    inst = ingest.from_dict(PAYLOAD)
    assert inst.installation_id == "casa-001"
    assert inst.location.country == "Colombia"
    assert len(inst.readings) == 2
    first = inst.readings[0]
    assert first.grid_import == 4.5
    assert first.weather_conditions.cloud_cover == 20
    assert inst.readings[1].production is None


def test_from_json_string_and_file(tmp_path):
    text = json.dumps(PAYLOAD)
    assert ingest.from_json(text).installation_id == "casa-001"
    path = tmp_path / "installation.json"
    path.write_text(text, encoding="utf-8")
    assert ingest.from_json(path).installation_id == "casa-001"
    assert ingest.from_json(str(path)).installation_id == "casa-001"
    with open(path, encoding="utf-8") as fh:
        assert len(ingest.from_json(fh).readings) == 2


def test_invalid_json_raises():
    with pytest.raises(IngestError):
        ingest.from_json("{not json")


def test_long_non_json_string_raises_ingest_error():
    with pytest.raises(IngestError):
        ingest.from_json("x" * 5000)


def test_non_object_json_raises():
    with pytest.raises(IngestError):
        ingest.from_json("[1, 2]")


def test_negative_consumption_rejected():
    bad = dict(PAYLOAD, readings=[{"timestamp": "2024-01-01", "period": "daily", "consumption": -1}])
    with pytest.raises(IngestError):
        ingest.from_dict(bad)


def test_missing_installation_id_rejected():
    with pytest.raises(IngestError):
        ingest.from_dict({"readings": []})


def test_predicted_from_dict():
    pred = ingest.predicted_from_dict(
        {"consumption": [1, 2], "timestamps": ["2024-01-01", "2024-01-02"]}
    )
    assert pred.consumption == [1.0, 2.0]
    assert pred.production is None
    with pytest.raises(IngestError):
        ingest.predicted_from_dict({"consumption": [1]})


def test_readings_frame_columns_and_values(make_reading):
    readings = [
        make_reading("2024-07-01T18:00:00+02:00", 1.5, production=2.0, period="hourly", temperature=30),
        make_reading("2024-07-01T19:00:00+02:00", 2.5, period="hourly"),
    ]
    df = ingest.readings_frame(readings)
    assert list(df.columns) == [
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
    assert df["hour"].tolist() == [18.0, 19.0]
    assert df["month"].tolist() == [7.0, 7.0]
    assert str(df["key"].dt.tz) == "UTC"
    assert df["key"].iloc[0].hour == 16
    assert np.isnan(df["production"].iloc[1])
    assert df["temperature"].iloc[0] == 30.0
    assert np.isnan(df["irradiance"].iloc[0])


def test_readings_frame_empty():
    df = ingest.readings_frame([])
    assert df.empty
    assert "consumption" in df.columns
