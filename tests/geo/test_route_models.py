import pytest
from pydantic import ValidationError

from shuttle_pricing.geo.models import (
    DirectionsResponse,
    RouteLeg,
    RouteQuery,
    RouteResult,
    format_duration,
)


@pytest.mark.unit
class TestRouteQuery:
    def test_cache_key_without_stops(self):
        query = RouteQuery(pickup="MIA Airport", dropoff="South Beach")
        assert query.cache_key == "route:MIA Airport:South Beach"

    def test_cache_key_with_stops(self):
        query = RouteQuery(pickup="A", dropoff="B", stops=("S1", "S2"))
        assert query.cache_key == "route:A:B:S1|S2"

    def test_blank_stops_do_not_change_identity(self):
        plain = RouteQuery(pickup="A", dropoff="B")
        padded = RouteQuery(pickup="A", dropoff="B", stops=("", "   "))
        assert padded.cache_key == plain.cache_key
        assert padded.valid_stops == ()

    def test_whitespace_is_normalized(self):
        query = RouteQuery(pickup="  123  Main St ", dropoff="Airport\t")
        assert query.pickup == "123 Main St"
        assert query.dropoff == "Airport"
        assert query == RouteQuery(pickup="123 Main St", dropoff="Airport")

    def test_stop_order_matters(self):
        first = RouteQuery(pickup="A", dropoff="B", stops=("S1", "S2"))
        second = RouteQuery(pickup="A", dropoff="B", stops=("S2", "S1"))
        assert first.cache_key != second.cache_key

    @pytest.mark.parametrize(
        "pickup,dropoff,expected",
        [("A", "B", True), ("", "B", False), ("A", "  ", False), ("", "", False)],
    )
    def test_is_complete(self, pickup, dropoff, expected):
        assert RouteQuery(pickup=pickup, dropoff=dropoff).is_complete is expected

    def test_frozen(self):
        query = RouteQuery(pickup="A", dropoff="B")
        with pytest.raises(ValidationError):
            query.pickup = "C"


@pytest.mark.unit
class TestRouteResult:
    def test_from_directions_converts_units(self):
        directions = DirectionsResponse(
            legs=[RouteLeg(distance_meters=16093.4, duration_seconds=1200)]
        )

        result = RouteResult.from_directions(directions, valid_stop_count=0)

        assert result.distance_miles == pytest.approx(10.0)
        assert result.distance_text == "10.0 mi"
        assert result.duration_minutes == 20
        assert result.duration_text == "20m"

    def test_dwell_time_added_per_stop(self):
        directions = DirectionsResponse(
            legs=[
                RouteLeg(distance_meters=8046.7, duration_seconds=1800),
                RouteLeg(distance_meters=8046.7, duration_seconds=1800),
            ]
        )

        result = RouteResult.from_directions(directions, valid_stop_count=1)

        assert result.distance_miles == pytest.approx(10.0)
        assert result.duration_minutes == 75
        assert result.duration_text == "1h 15m"
        assert result.valid_stop_count == 1

    @pytest.mark.parametrize(
        "minutes,expected", [(0, "0m"), (45, "45m"), (60, "1h 0m"), (135, "2h 15m")]
    )
    def test_format_duration(self, minutes, expected):
        assert format_duration(minutes) == expected
