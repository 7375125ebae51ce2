import json

import pytest

from nearby_weather.snapshot_source import SnapshotFileFetcher, parse_record, parse_snapshot
from nearby_weather.weather_models import LoadStatus

BERLIN = {
    "id": 2950159,
    "name": "Berlin",
    "coord": {"lat": 52.5244, "lon": 13.4105},
    "main": {"temp": 290.0, "humidity": 60},
    "clouds": {"all": 20},
    "wind": {"speed": 3.0},
    "weather": [{"id": 800, "main": "Clear"}],
}


def test_parse_record():
    record = parse_record(BERLIN)
    assert record.identifier == 2950159
    assert record.coordinate.latitude == 52.5244
    assert record.temperature_kelvin == 290.0
    assert record.cloud_coverage == 20
    assert record.primary_condition_code == 800


def test_parse_record_without_optional_fields():
    document = {key: value for key, value in BERLIN.items() if key not in ("clouds", "wind", "weather")}
    record = parse_record(document)
    assert record.cloud_coverage == 0
    assert record.windspeed == 0.0
    assert record.primary_condition_code is None


def test_parse_record_missing_coordinate():
    with pytest.raises(KeyError):
        parse_record({key: value for key, value in BERLIN.items() if key != "coord"})


def test_null_entries_are_failed_loads():
    snapshot = parse_snapshot({"bookmarked": None, "nearby": None})
    assert snapshot.bookmarked.status == LoadStatus.FAILED
    assert snapshot.nearby.status == LoadStatus.FAILED


def test_empty_nearby_is_a_successful_load():
    snapshot = parse_snapshot({"bookmarked": BERLIN, "nearby": []})
    assert snapshot.bookmarked.is_loaded
    assert snapshot.nearby.status == LoadStatus.LOADED
    assert snapshot.nearby.data == []


@pytest.mark.asyncio
async def test_fetcher_reads_file(tmp_path):
    path = tmp_path / "snapshot.json"
    path.write_text(json.dumps({"bookmarked": BERLIN, "nearby": [BERLIN]}), encoding="utf-8")

    snapshot = await SnapshotFileFetcher(path)()

    assert snapshot.bookmarked.data.city_name == "Berlin"
    assert len(snapshot.nearby.data) == 1


@pytest.mark.asyncio
async def test_fetcher_rejects_non_object(tmp_path):
    path = tmp_path / "snapshot.json"
    path.write_text("[]", encoding="utf-8")
    with pytest.raises(ValueError):
        await SnapshotFileFetcher(path)()


@pytest.mark.asyncio
async def test_fetcher_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        await SnapshotFileFetcher(tmp_path / "missing.json")()
