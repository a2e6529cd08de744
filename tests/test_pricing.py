"""Tests for services/pricing.py: campaign rate tables and quotes."""
from datetime import date, datetime, timezone

import pytest

from omnipply.services.pricing import (
    DurationPreset,
    TargetType,
    calculate_price,
    calculate_program_price_until_deadline,
    earliest_future_deadline,
    inclusive_days,
    preset_to_days,
    quote_campaign,
    resolve_hide_after,
    time_remaining,
)


class TestCalculatePrice:
    @pytest.mark.parametrize(
        "preset, org, program",
        [
            (DurationPreset.SEVEN_DAYS, 10, 6),
            (DurationPreset.FOURTEEN_DAYS, 18, 11),
            (DurationPreset.THIRTY_DAYS, 35, 20),
        ],
    )
    def test_preset_flat_rates(self, preset, org, program):
        assert calculate_price(TargetType.ORG, preset, "2025-03-01", None) == org
        assert calculate_price(TargetType.PROGRAM, preset, "2025-03-01", None) == program

    def test_custom_is_daily_and_inclusive(self):
        # 1st..10th is ten days
        assert calculate_price(TargetType.ORG, DurationPreset.CUSTOM, "2025-03-01", "2025-03-10") == 20
        assert calculate_price(TargetType.PROGRAM, DurationPreset.CUSTOM, "2025-03-01", "2025-03-10") == 10

    def test_custom_missing_end_is_free(self):
        assert calculate_price(TargetType.ORG, DurationPreset.CUSTOM, "2025-03-01", None) == 0

    def test_reversed_range_clamps_to_zero(self):
        assert inclusive_days("2025-03-10", "2025-03-01") == 0

    def test_same_day_counts_once(self):
        assert inclusive_days("2025-03-01", "2025-03-01") == 1

    def test_preset_days(self):
        assert preset_to_days(DurationPreset.SEVEN_DAYS) == 7
        assert preset_to_days(DurationPreset.CUSTOM) is None
        assert preset_to_days("until_deadline") is None


class TestUntilDeadline:
    def test_program_priced_to_its_own_deadline(self):
        assert calculate_program_price_until_deadline("2025-03-01", "2025-03-05T23:59:00Z") == 5

    def test_minimum_one_day(self):
        assert calculate_program_price_until_deadline("2025-03-05", "2025-03-01") == 1

    def test_missing_deadline_is_free(self):
        assert calculate_program_price_until_deadline("2025-03-01", None) == 0

    def test_earliest_future_deadline_skips_past_and_missing(self):
        today = date(2025, 3, 10)
        deadlines = ["2025-03-01", None, "2025-04-01T00:00:00Z", "2025-03-20"]
        assert earliest_future_deadline(deadlines, today) == date(2025, 3, 20)

    def test_earliest_future_deadline_none_when_all_past(self):
        assert earliest_future_deadline(["2024-01-01"], date(2025, 1, 1)) is None


class TestResolveHideAfter:
    def test_preset_adds_days(self):
        assert resolve_hide_after(DurationPreset.SEVEN_DAYS, date(2025, 3, 1)) == date(2025, 3, 8)

    def test_custom_keeps_given_end(self):
        assert resolve_hide_after(DurationPreset.CUSTOM, date(2025, 3, 1), date(2025, 3, 4)) == date(2025, 3, 4)

    def test_until_deadline_uses_earliest_future(self):
        end = resolve_hide_after(
            DurationPreset.UNTIL_DEADLINE,
            date(2025, 3, 1),
            deadlines=["2025-05-01", "2025-04-01"],
            today=date(2025, 3, 1),
        )
        assert end == date(2025, 4, 1)

    def test_no_start_no_end(self):
        assert resolve_hide_after(DurationPreset.THIRTY_DAYS, None) is None


class TestQuoteCampaign:
    def test_org_and_programs_flat(self):
        quote = quote_campaign(
            DurationPreset.FOURTEEN_DAYS,
            "2025-03-01",
            "2025-03-15",
            include_org=True,
            programs=[{"id": "p1"}, {"id": "p2"}],
        )
        assert quote.org_price == 18
        assert quote.program_price == 22
        assert quote.total == 40
        assert [line.program_id for line in quote.lines] == ["p1", "p2"]

    def test_until_deadline_per_program(self):
        quote = quote_campaign(
            DurationPreset.UNTIL_DEADLINE,
            "2025-03-01",
            None,
            include_org=False,
            programs=[
                {"id": "p1", "close_at": "2025-03-03"},
                {"id": "p2", "close_at": None},
            ],
        )
        assert [line.price for line in quote.lines] == [3, 0]
        assert quote.total == 3


class TestTimeRemaining:
    NOW = datetime(2025, 3, 1, 12, 0, tzinfo=timezone.utc)

    @pytest.mark.parametrize(
        "end, label",
        [
            ("2025-02-28T00:00:00Z", "Ended"),
            ("2025-03-02T00:00:00Z", "1 day left"),
            ("2025-03-05T00:00:00Z", "4 days left"),
            ("2025-03-10T00:00:00Z", "1 week left"),
            ("2025-03-20T00:00:00Z", "2 weeks left"),
            ("2025-03-30T00:00:00Z", "1 month left"),
            ("2025-05-15T00:00:00Z", "2 months left"),
        ],
    )
    def test_labels(self, end, label):
        assert time_remaining(end, self.NOW) == label

    def test_missing_end(self):
        assert time_remaining(None, self.NOW) is None
