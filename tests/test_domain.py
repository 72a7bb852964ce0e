import datetime as dt
import unittest

from pydantic import ValidationError

from pws_hourly.domain import HourlyRecord, WindowSnapshot, WindowState, parse_hourly_payload


def _row(date="2024-06-01", hour=0, station="ABC123", **extra):
    d = dt.date.fromisoformat(date)
    row = {
        "station_code": station,
        "year": d.year,
        "day": d.timetuple().tm_yday,
        "represented_date": date,
        "represented_hour": hour,
        "record_count": 12,
    }
    row.update(extra)
    return row


class TestHourlyRecord(unittest.TestCase):
    def test_keeps_station_specific_measurements(self):
        record = HourlyRecord.model_validate(_row(temperature=71.3, humidity=55, wind_dir="NW"))
        self.assertEqual(record.represented_date, dt.date(2024, 6, 1))
        self.assertEqual(record.measurements, {"temperature": 71.3, "humidity": 55, "wind_dir": "NW"})

    def test_to_wire_round_trips_upstream_shape(self):
        row = _row(hour=7, temperature=60.0)
        self.assertEqual(HourlyRecord.model_validate(row).to_wire(), row)

    def test_rejects_out_of_range_hour(self):
        with self.assertRaises(ValidationError):
            HourlyRecord.model_validate(_row(hour=24))

    def test_requires_record_count(self):
        row = _row()
        del row["record_count"]
        with self.assertRaises(ValidationError):
            HourlyRecord.model_validate(row)


class TestParseHourlyPayload(unittest.TestCase):
    def test_preserves_received_order(self):
        payload = [_row(hour=5), _row(hour=2), _row(hour=9)]
        records = parse_hourly_payload(payload, "ABC123")
        self.assertEqual([r.represented_hour for r in records], [5, 2, 9])

    def test_rejects_non_list(self):
        with self.assertRaises(ValueError):
            parse_hourly_payload({"error": "nope"}, "ABC123")

    def test_rejects_mixed_stations(self):
        with self.assertRaises(ValueError):
            parse_hourly_payload([_row(), _row(hour=1, station="XYZ999")], "ABC123")

    def test_rejects_duplicate_hours(self):
        with self.assertRaises(ValueError):
            parse_hourly_payload([_row(hour=3), _row(hour=3)], "ABC123")


class TestWindowSnapshot(unittest.TestCase):
    def test_last_row_key_empty(self):
        self.assertIsNone(WindowSnapshot(state=WindowState.IDLE).last_row_key)


if __name__ == "__main__":
    unittest.main()
