from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from telemetry_sync.ingestion.normalizer import DataNormalizer, NormalizationError
from telemetry_sync.ingestion.schema import RawReading, SensorKind, Vendor

WIB = timezone(timedelta(hours=7))


def _aptech(**fields) -> RawReading:
    return RawReading(
        vendor=Vendor.APTECH,
        device_id=fields.pop("device_id", "sabagi"),
        reading_at=fields.pop("reading_at", "2024-01-01 00:00:00"),
        **fields,
    )


@pytest.fixture()
def normalizer() -> DataNormalizer:
    return DataNormalizer()


def test_timestamp_gets_fixed_seven_hour_offset(normalizer: DataNormalizer) -> None:
    reading = normalizer.normalize(_aptech(water_level="250"), SensorKind.WATER_LEVEL, "Sabagi")

    assert reading.observed_at == datetime(2024, 1, 1, 7, 0, tzinfo=WIB)
    assert reading.observed_at.utcoffset() == timedelta(hours=7)
    assert reading.observed_at.isoformat() == "2024-01-01T07:00:00+07:00"


def test_offset_crosses_midnight(normalizer: DataNormalizer) -> None:
    raw = _aptech(reading_at="2024-12-31 20:30:15", rainfall="0")
    reading = normalizer.normalize(raw, SensorKind.RAINFALL, "Toge")
    assert reading.observed_at.isoformat() == "2025-01-01T03:30:15+07:00"


def test_offset_aware_timestamp_is_read_as_utc(normalizer: DataNormalizer, higertech_raw) -> None:
    raw = higertech_raw("HGT412", reading_at="2024-01-01T00:00:00Z", water_level="1.2")
    reading = normalizer.normalize(raw, SensorKind.WATER_LEVEL, "Pabuaran")
    assert reading.observed_at.isoformat() == "2024-01-01T07:00:00+07:00"


def test_aptech_water_level_is_scaled_to_metres(normalizer: DataNormalizer) -> None:
    reading = normalizer.normalize(_aptech(water_level=250), SensorKind.WATER_LEVEL, "Sabagi")
    assert reading.value == 2.5


def test_aptech_rainfall_is_not_scaled(normalizer: DataNormalizer) -> None:
    reading = normalizer.normalize(_aptech(device_id="toge", rainfall="12.5"), SensorKind.RAINFALL, "Toge")
    assert reading.value == 12.5


def test_higertech_values_are_used_as_reported(normalizer: DataNormalizer, higertech_raw) -> None:
    awlr = normalizer.normalize(higertech_raw("HGT412", water_level="2.5"), SensorKind.WATER_LEVEL, "Pabuaran")
    arr = normalizer.normalize(higertech_raw("HGT665", rainfall="3"), SensorKind.RAINFALL, "Bojong Manik")

    assert awlr.value == 2.5
    assert arr.value == 3.0


def test_battery_is_carried_when_numeric(normalizer: DataNormalizer, higertech_raw) -> None:
    raw = higertech_raw("HGT412", water_level="2.5", battery="12.6")
    reading = normalizer.normalize(raw, SensorKind.WATER_LEVEL, "Pabuaran")

    assert reading.battery == 12.6
    assert reading.to_station_payload()["battery"] == 12.6


@pytest.mark.parametrize("battery", [None, "", "n/a", "nan"])
def test_battery_is_omitted_when_missing_or_unusable(normalizer: DataNormalizer, higertech_raw, battery) -> None:
    raw = higertech_raw("HGT412", water_level="2.5", battery=battery)
    reading = normalizer.normalize(raw, SensorKind.WATER_LEVEL, "Pabuaran")

    assert reading.battery is None
    assert "battery" not in reading.to_station_payload()


def test_station_payload_uses_kind_specific_field(normalizer: DataNormalizer) -> None:
    payload = normalizer.normalize(_aptech(device_id="toge", rainfall="4"), SensorKind.RAINFALL, "Toge").to_station_payload()
    assert payload == {
        "time": datetime(2024, 1, 1, 7, 0, tzinfo=WIB),
        "rainfall": 4.0,
        "post_name": "Toge",
    }


def test_normalize_is_deterministic(normalizer: DataNormalizer, higertech_raw) -> None:
    raw = higertech_raw("HGT412", water_level="2.5", battery="12")
    first = normalizer.normalize(raw, SensorKind.WATER_LEVEL, "Pabuaran")
    second = normalizer.normalize(raw, SensorKind.WATER_LEVEL, "Pabuaran")
    assert first == second


@pytest.mark.parametrize("reading_at", ["not a date", "", None, "10:30", "March", "5", "Monday"])
def test_bad_timestamp_raises(normalizer: DataNormalizer, reading_at) -> None:
    with pytest.raises(NormalizationError):
        normalizer.normalize(_aptech(reading_at=reading_at, water_level="100"), SensorKind.WATER_LEVEL, "Sabagi")


@pytest.mark.parametrize("value", ["abc", None, "inf", True])
def test_bad_measurement_raises(normalizer: DataNormalizer, value) -> None:
    with pytest.raises(NormalizationError):
        normalizer.normalize(_aptech(water_level=value), SensorKind.WATER_LEVEL, "Sabagi")


def test_empty_post_name_is_rejected(normalizer: DataNormalizer) -> None:
    with pytest.raises(NormalizationError):
        normalizer.normalize(_aptech(water_level="100"), SensorKind.WATER_LEVEL, "")


@pytest.mark.parametrize("reading_at", ["2024-01-01 00:00:00", "2024-01-01T00:00:00", "2024-01-01T00:00:00+00:00"])
def test_iso_timestamp_forms_are_accepted(normalizer: DataNormalizer, reading_at) -> None:
    reading = normalizer.normalize(_aptech(reading_at=reading_at, water_level="100"), SensorKind.WATER_LEVEL, "Sabagi")
    assert reading.observed_at.isoformat() == "2024-01-01T07:00:00+07:00"
