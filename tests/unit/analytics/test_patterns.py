"""Tests for time-of-day, weekday and monthly patterns."""

from datetime import datetime, timezone
from decimal import Decimal

import pytest

from trade_journal.analytics import analyze_patterns, classify_zone
from trade_journal.core.enums import EmotionalZone


class TestClassifyZone:
    @pytest.mark.parametrize(
        "ratio,avg,zone",
        [
            ("0.7", "1", EmotionalZone.EUPHORIC),
            ("0.3", "-1", EmotionalZone.FEARFUL),
            ("0.55", "1", EmotionalZone.CONFIDENT),
            ("0.45", "-1", EmotionalZone.ANXIOUS),
            ("0.5", "1", EmotionalZone.NEUTRAL),
            ("0.7", "-1", EmotionalZone.NEUTRAL),
            ("0", "0", EmotionalZone.NEUTRAL),
        ],
    )
    def test_thresholds(self, ratio, avg, zone):
        assert classify_zone(Decimal(ratio), Decimal(avg)) == zone


class TestAnalyzePatterns:
    @pytest.fixture
    def trades(self, make_trade):
        # 2024-01-02 09:30 UTC is a Tuesday
        return [make_trade(10), make_trade(20), make_trade(-5)]

    def test_slot_order(self):
        slots = analyze_patterns([])["time_slots"]
        assert len(slots) == 24
        assert slots[0]["slot"] == "09:00-10:00"
        assert slots[14]["slot"] == "23:00-00:00"
        assert slots[-1]["slot"] == "08:00-09:00"
        assert all(s["emotional_zone"] == "neutral" for s in slots)

    def test_hour_bucket(self, trades):
        report = analyze_patterns(trades)
        (zone,) = report["emotional_zones"]
        assert zone == {
            "slot": "09:00-10:00",
            "total_trades": 3,
            "win_rate": 67.0,
            "avg_pnl": 8.33,
            "total_pnl": 25.0,
            "emotional_zone": "euphoric",
        }

    def test_timezone_shifts_slots(self, trades):
        report = analyze_patterns(trades, tz="Asia/Kolkata")
        assert [z["slot"] for z in report["emotional_zones"]] == ["15:00-16:00"]

    def test_day_of_week(self, trades):
        days = analyze_patterns(trades)["day_of_week"]
        assert [d["day"] for d in days][:3] == ["Sunday", "Monday", "Tuesday"]
        assert days[2]["total_trades"] == 3
        assert sum(d["total_trades"] for d in days) == 3

    def test_monthly(self, make_trade):
        report = analyze_patterns([
            make_trade(5, buy_at=datetime(2024, 3, 1, 10, tzinfo=timezone.utc)),
            make_trade(-5, buy_at=datetime(2024, 1, 5, 10, tzinfo=timezone.utc)),
            make_trade(7, buy_at=datetime(2024, 3, 9, 10, tzinfo=timezone.utc)),
        ])
        assert [(m["month"], m["total_trades"]) for m in report["monthly_patterns"]] == [
            ("2024-03", 2), ("2024-01", 1),
        ]
        assert report["monthly_patterns"][0]["win_rate"] == 100.0

    def test_losing_hour_is_fearful(self, make_trade):
        at = datetime(2024, 1, 2, 14, 5, tzinfo=timezone.utc)
        report = analyze_patterns([make_trade(-10, buy_at=at), make_trade(-3, buy_at=at)])
        (zone,) = report["emotional_zones"]
        assert zone["slot"] == "14:00-15:00"
        assert zone["emotional_zone"] == "fearful"
