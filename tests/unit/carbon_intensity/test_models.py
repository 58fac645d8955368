from datetime import datetime, timedelta, timezone

import pandas as pd
import pytest
from pydantic import ValidationError

from services.carbon_intensity.src.models import (
    EndpointKind,
    Output,
    OutputShape,
    Plan,
    Season,
    SeverityIndex,
    TimeWindow,
    WideSource,
)


class TestTimeWindow:
    """Tests for TimeWindow."""

    def test_accepts_half_hour_aligned_window(self):
        window = TimeWindow(start="2024-01-01T00:00Z", end="2024-01-01T00:30Z")

        assert window.start == "2024-01-01T00:00Z"
        assert window.end_datetime == datetime(2024, 1, 1, 0, 30, tzinfo=timezone.utc)

    @pytest.mark.parametrize(
        "start,end",
        [
            ("2024-01-01T00:15Z", "2024-01-01T01:00Z"),  # not half-hour aligned
            ("2024-01-01 00:00", "2024-01-01T01:00Z"),  # wrong format
            ("2024-13-01T00:00Z", "2024-14-01T00:00Z"),  # no such month
            ("2024-01-02T00:00Z", "2024-01-01T00:00Z"),  # reversed
            ("2024-01-01T00:00Z", "2024-01-01T00:00Z"),  # empty
        ],
    )
    def test_rejects_invalid_windows(self, start, end):
        with pytest.raises(ValidationError):
            TimeWindow(start=start, end=end)

    def test_from_datetimes_converts_to_utc(self):
        """from_datetimes should format aware datetimes in UTC."""
        plus_one = timezone(timedelta(hours=1))
        window = TimeWindow.from_datetimes(
            datetime(2024, 6, 1, 1, 0, tzinfo=plus_one),
            datetime(2024, 6, 1, 2, 30, tzinfo=plus_one),
        )

        assert window.start == "2024-06-01T00:00Z"
        assert window.end == "2024-06-01T01:30Z"


class TestOrderedLevels:
    """Ordering follows declaration, not the alphabet."""

    def test_severity_index_orders_most_severe_first(self):
        assert SeverityIndex.VERY_HIGH < SeverityIndex.HIGH < SeverityIndex.MODERATE
        assert SeverityIndex.LOW < SeverityIndex.VERY_LOW
        assert max(SeverityIndex) == SeverityIndex.VERY_LOW

    def test_season_order(self):
        assert Season.SPRING < Season.SUMMER < Season.FALL < Season.WINTER
        assert sorted([Season.WINTER, Season.FALL, Season.SPRING]) == [
            Season.SPRING,
            Season.FALL,
            Season.WINTER,
        ]

    def test_levels_are_values(self):
        assert SeverityIndex.levels() == ["very high", "high", "moderate", "low", "very low"]
        assert Season("summer") == "summer"


class TestPlanAndOutput:
    def test_plan_shape(self):
        plan = Plan(
            fetch=(EndpointKind.REGIONAL,),
            build_regional_wide=False,
            wide_sources=(),
            produce_long=True,
        )

        assert not plan.produces_wide
        assert plan.shape == OutputShape.LONG

    def test_output_unpack_returns_present_datasets_wide_first(self):
        wide = pd.DataFrame({"from": ["a"]})
        long = pd.DataFrame({"from": ["b"]})

        assert Output(wide=wide, long=long).shape == OutputShape.BOTH
        unpacked = Output(wide=wide, long=long).unpack()
        assert unpacked[0] is wide and unpacked[1] is long
        long_only = Output(long=long).unpack()
        assert len(long_only) == 1 and long_only[0] is long

    def test_wide_source_order_is_join_precedence(self):
        assert list(WideSource) == [
            WideSource.INTENSITY,
            WideSource.GENERATION,
            WideSource.REGIONAL_WIDE,
        ]
