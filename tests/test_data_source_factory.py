import asyncio
import tempfile
import unittest

from pws_hourly.data_sources.factory import build_data_source, DEFAULT_SOURCE_NAME
from pws_hourly.data_sources.base import CallableWeatherDataSource
from pws_hourly.data_sources import weather_api_client


class DummySettings:
    def __init__(self, **kwargs):
        for k, v in kwargs.items():
            setattr(self, k, v)
        # provide defaults if not passed
        self.record_source = getattr(self, "record_source", DEFAULT_SOURCE_NAME)
        self.fixtures_dir = getattr(self, "fixtures_dir", None)
        self.api_base_url = getattr(self, "api_base_url", "http://localhost:8080")
        self.reference_utc_offset_hours = getattr(self, "reference_utc_offset_hours", -5)


class TestDataSourceFactory(unittest.TestCase):
    def test_build_weather_api_default(self):
        ds = build_data_source(DummySettings())
        self.assertIsInstance(ds, CallableWeatherDataSource)
        self.assertIs(ds.hourly, weather_api_client.fetch_hourly_weather)
        self.assertIs(ds.stations, weather_api_client.fetch_stations)

    def test_unknown_source_raises(self):
        with self.assertRaises(ValueError):
            build_data_source(DummySettings(record_source="carrier-pigeon"))

    def test_fixtures_branch(self):
        with tempfile.TemporaryDirectory() as tmp:
            ds = build_data_source(DummySettings(record_source="fixtures", fixtures_dir=tmp))
            self.assertIsInstance(ds, CallableWeatherDataSource)
            self.assertEqual(asyncio.run(ds.fetch_stations()), [])
            self.assertEqual(asyncio.run(ds.fetch_hourly("ABC123", "2024-06-01", "2024-06-01")), [])

    def test_fixtures_missing_dir_raises(self):
        with self.assertRaises(ValueError):
            build_data_source(DummySettings(record_source="fixtures", fixtures_dir=""))


class TestCallableWeatherDataSource(unittest.IsolatedAsyncioTestCase):
    async def test_runs_blocking_callables(self):
        seen = []

        def hourly(station, start, end):
            seen.append((station, start, end))
            return []

        ds = CallableWeatherDataSource(hourly=hourly, stations=lambda: ["ABC123"])
        self.assertEqual(await ds.fetch_hourly("ABC123", "2024-06-01", "2024-06-01"), [])
        self.assertEqual(await ds.fetch_stations(), ["ABC123"])
        self.assertEqual(seen, [("ABC123", "2024-06-01", "2024-06-01")])


if __name__ == "__main__":
    unittest.main()
