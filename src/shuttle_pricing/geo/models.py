from pydantic import BaseModel, ConfigDict, Field, field_validator

METERS_PER_MILE = 1609.34
STOP_DWELL_MINUTES = 15


def normalize_address(value: str) -> str:
    """Strip and collapse whitespace so transient spacing does not change identity."""
    return " ".join(value.split())


class Coordinates(BaseModel):
    model_config = ConfigDict(frozen=True)

    lat: float = Field(ge=-90.0, le=90.0)
    lng: float = Field(ge=-180.0, le=180.0)


class RouteQuery(BaseModel):
    """Address-based trip description: pickup, dropoff and ordered intermediate stops."""

    model_config = ConfigDict(frozen=True)

    pickup: str = ""
    dropoff: str = ""
    stops: tuple[str, ...] = ()

    @field_validator("pickup", "dropoff")
    @classmethod
    def normalize_endpoint(cls, v: str) -> str:
        return normalize_address(v)

    @field_validator("stops")
    @classmethod
    def normalize_stops(cls, v: tuple[str, ...]) -> tuple[str, ...]:
        return tuple(normalize_address(stop) for stop in v)

    @property
    def valid_stops(self) -> tuple[str, ...]:
        return tuple(stop for stop in self.stops if stop)

    @property
    def is_complete(self) -> bool:
        return bool(self.pickup) and bool(self.dropoff)

    @property
    def cache_key(self) -> str:
        stops = self.valid_stops
        stops_key = f":{'|'.join(stops)}" if stops else ""
        return f"route:{self.pickup}:{self.dropoff}{stops_key}"


class RouteLeg(BaseModel):
    distance_meters: float = Field(ge=0)
    duration_seconds: float = Field(ge=0)


class DirectionsResponse(BaseModel):
    legs: list[RouteLeg]
    status: str = "OK"

    @property
    def total_distance_meters(self) -> float:
        return sum(leg.distance_meters for leg in self.legs)

    @property
    def total_duration_seconds(self) -> float:
        return sum(leg.duration_seconds for leg in self.legs)


def format_duration(total_minutes: int) -> str:
    hours, minutes = divmod(total_minutes, 60)
    return f"{hours}h {minutes}m" if hours > 0 else f"{minutes}m"


class RouteResult(BaseModel):
    """Resolved distance/duration for a RouteQuery. Immutable once produced."""

    model_config = ConfigDict(frozen=True)

    distance_text: str
    duration_text: str
    distance_miles: float = Field(ge=0)
    duration_minutes: int = Field(ge=0)
    valid_stop_count: int = Field(ge=0)
    pickup_coords: Coordinates | None = None
    dropoff_coords: Coordinates | None = None
    stop_coords: tuple[Coordinates, ...] | None = None

    @classmethod
    def from_directions(
        cls,
        directions: DirectionsResponse,
        valid_stop_count: int,
        pickup_coords: Coordinates | None = None,
        dropoff_coords: Coordinates | None = None,
        stop_coords: tuple[Coordinates, ...] | None = None,
    ) -> "RouteResult":
        """Build a result from raw legs, adding the fixed dwell time per stop."""
        dwell_seconds = valid_stop_count * STOP_DWELL_MINUTES * 60
        total_seconds = directions.total_duration_seconds + dwell_seconds
        distance_miles = directions.total_distance_meters / METERS_PER_MILE
        duration_minutes = int(total_seconds // 60)

        return cls(
            distance_text=f"{distance_miles:.1f} mi",
            duration_text=format_duration(duration_minutes),
            distance_miles=distance_miles,
            duration_minutes=duration_minutes,
            valid_stop_count=valid_stop_count,
            pickup_coords=pickup_coords,
            dropoff_coords=dropoff_coords,
            stop_coords=stop_coords,
        )
