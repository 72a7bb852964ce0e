import datetime as dt
import unittest

from pws_hourly.backfill import load_with_backfill
from pws_hourly.domain import HourlyRecord
from pws_hourly.errors import BackfillExhausted, FetchFailed


def _rec(date: str, hour: int = 0, station: str = "ABC123") -> HourlyRecord:
    d = dt.date.fromisoformat(date)
    return HourlyRecord(
        station_code=station,
        year=d.year,
        day=d.timetuple().tm_yday,
        represented_date=d,
        represented_hour=hour,
        record_count=12,
        temperature=70.0 + hour,
    )


class FakeSource:
    def __init__(self, days=None, failures=()):
        self.days = days or {}
        self.failures = set(failures)
        self.calls = []

    async def fetch_hourly(self, station, start=None, end=None):
        self.calls.append((station, start, end))
        if start in self.failures:
            raise FetchFailed(station, start, end, "upstream 502")
        return list(self.days.get(start, []))

    async def fetch_stations(self):
        return ["ABC123"]


class TestLoadWithBackfill(unittest.IsolatedAsyncioTestCase):
    async def test_returns_first_day_with_data(self):
        source = FakeSource({"2024-06-01": [_rec("2024-06-01", 1), _rec("2024-06-01", 0)]})
        result = await load_with_backfill(source, "ABC123", "2024-06-01")
        self.assertEqual(result.date, "2024-06-01")
        self.assertEqual([r.represented_hour for r in result.records], [1, 0])
        self.assertEqual(source.calls, [("ABC123", "2024-06-01", "2024-06-01")])

    async def test_steps_back_to_nearest_day_with_data(self):
        source = FakeSource({"2024-05-30": [_rec("2024-05-30")]})
        result = await load_with_backfill(source, "ABC123", "2024-06-01")
        self.assertEqual(result.date, "2024-05-30")
        self.assertEqual(result.attempted_dates, ["2024-06-01", "2024-05-31", "2024-05-30"])

    async def test_exhausts_after_bound_without_reaching_older_data(self):
        source = FakeSource({"2024-05-28": [_rec("2024-05-28")]})
        with self.assertRaises(BackfillExhausted) as ctx:
            await load_with_backfill(source, "ABC123", "2024-06-01", max_attempts=3)
        self.assertEqual(
            [call[1] for call in source.calls],
            ["2024-06-01", "2024-05-31", "2024-05-30", "2024-05-29"],
        )
        self.assertEqual(ctx.exception.attempted_dates[-1], "2024-05-29")
        self.assertEqual(ctx.exception.requested_date, "2024-06-01")

    async def test_fetch_count_never_exceeds_bound_plus_one(self):
        for bound in range(0, 6):
            source = FakeSource()
            with self.assertRaises(BackfillExhausted):
                await load_with_backfill(source, "ABC123", "2024-01-02", max_attempts=bound)
            self.assertEqual(len(source.calls), bound + 1)

    async def test_zero_bound_fetches_once(self):
        source = FakeSource({"2024-05-31": [_rec("2024-05-31")]})
        with self.assertRaises(BackfillExhausted):
            await load_with_backfill(source, "ABC123", "2024-06-01", max_attempts=0)
        self.assertEqual(len(source.calls), 1)

    async def test_fetch_failure_counts_as_a_miss(self):
        source = FakeSource({"2024-05-31": [_rec("2024-05-31")]}, failures={"2024-06-01"})
        result = await load_with_backfill(source, "ABC123", "2024-06-01")
        self.assertEqual(result.date, "2024-05-31")

    async def test_all_failures_chain_last_fetch_error(self):
        dates = {"2024-06-01", "2024-05-31"}
        source = FakeSource(failures=dates)
        with self.assertRaises(BackfillExhausted) as ctx:
            await load_with_backfill(source, "ABC123", "2024-06-01", max_attempts=1)
        self.assertIsInstance(ctx.exception.__cause__, FetchFailed)

    async def test_crosses_year_boundary(self):
        source = FakeSource({"2023-12-31": [_rec("2023-12-31")]})
        result = await load_with_backfill(source, "ABC123", "2024-01-01")
        self.assertEqual(result.date, "2023-12-31")

    async def test_negative_bound_rejected(self):
        with self.assertRaises(ValueError):
            await load_with_backfill(FakeSource(), "ABC123", "2024-06-01", max_attempts=-1)

    async def test_malformed_date_raises_before_fetching(self):
        source = FakeSource()
        with self.assertRaises(ValueError):
            await load_with_backfill(source, "ABC123", "not-a-date")
        self.assertEqual(source.calls, [])


if __name__ == "__main__":
    unittest.main()
