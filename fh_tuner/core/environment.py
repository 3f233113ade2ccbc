"""Environmental conditions and partial condition updates."""

from __future__ import annotations

from dataclasses import dataclass, fields, replace
from enum import Enum


class Weather(str, Enum):
    CLEAR = "clear"
    CLOUDY = "cloudy"
    RAIN = "rain"
    STORM = "storm"
    SNOW = "snow"


class TrackCondition(str, Enum):
    """Surface water state, ordered from best to worst grip."""

    DRY = "dry"
    DAMP = "damp"
    WET = "wet"
    FLOODED = "flooded"


class TimeOfDay(str, Enum):
    DAWN = "dawn"
    DAY = "day"
    DUSK = "dusk"
    NIGHT = "night"


@dataclass(frozen=True)
class EnvironmentalConditions:
    """Ambient conditions a tune is evaluated under.

    Attributes:
        weather: Sky state.
        temperature: Air temperature in Celsius.
        humidity: Relative humidity in percent (0-100).
        pressure: Air pressure in hPa.
        wind_speed: Wind speed in km/h (>= 0).
        track_temperature: Surface temperature in Celsius.
        track_conditions: Surface water state.
        time_of_day: Session time.
        altitude: Elevation above sea level in feet.
    """

    weather: Weather = Weather.CLEAR
    temperature: float = 20.0
    humidity: float = 50.0
    pressure: float = 1013.0
    wind_speed: float = 5.0
    track_temperature: float = 25.0
    track_conditions: TrackCondition = TrackCondition.DRY
    time_of_day: TimeOfDay = TimeOfDay.DAY
    altitude: float = 0.0

    def __post_init__(self) -> None:
        if not 0.0 <= self.humidity <= 100.0:
            raise ValueError("humidity must be between 0 and 100.")
        if self.wind_speed < 0.0:
            raise ValueError("wind_speed must be >= 0.")
        if self.pressure <= 0.0:
            raise ValueError("pressure must be > 0.")


DEFAULT_ENVIRONMENT = EnvironmentalConditions()


@dataclass(frozen=True)
class EnvironmentPatch:
    """Partial environment update: ``None`` fields are left unchanged."""

    weather: Weather | None = None
    temperature: float | None = None
    humidity: float | None = None
    pressure: float | None = None
    wind_speed: float | None = None
    track_temperature: float | None = None
    track_conditions: TrackCondition | None = None
    time_of_day: TimeOfDay | None = None
    altitude: float | None = None


def merge_environment(
    env: EnvironmentalConditions, patch: EnvironmentPatch
) -> EnvironmentalConditions:
    """Return *env* with every field set in *patch* overridden.

    Raises:
        ValueError: If the merged conditions are invalid.
    """
    updates = {
        f.name: getattr(patch, f.name)
        for f in fields(patch)
        if getattr(patch, f.name) is not None
    }
    return replace(env, **updates)
