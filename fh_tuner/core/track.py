"""Track reference model for the tuning engine."""

from __future__ import annotations

from dataclasses import dataclass, field

_TRACK_TYPES: tuple[str, ...] = ("circuit", "sprint", "street", "drag", "offroad")
_SURFACES: tuple[str, ...] = ("asphalt", "mixed", "dirt", "gravel")


@dataclass(frozen=True)
class Track:
    """Static description of an in-game race route.

    Attributes:
        id: Stable slug used as the lookup key.
        name: Display name.
        type: Route type (circuit, sprint, street, drag, offroad).
        length: Route length in miles (> 0).
        avg_turn_radius: Typical corner radius in feet.
        max_elevation_gain: Elevation gain in feet.
        straightaway_length: Longest straight in miles.
        technicality: 1 (flat out) to 10 (constant cornering).
        speed_profile: ``high-speed``, ``balanced``, ``technical`` or ``mixed``.
        surface_type: Dominant surface.
        wheel_base_recommendation: Preferred wheelbase (long, medium, short).
        recommended_tune_types: Tune types that suit the route.
        alias: Alternative names players use.
        notes: Free-text driving notes.
    """

    id: str
    name: str
    type: str
    length: float
    avg_turn_radius: float
    max_elevation_gain: float
    straightaway_length: float
    technicality: int
    speed_profile: str
    surface_type: str
    wheel_base_recommendation: str
    recommended_tune_types: tuple[str, ...] = ()
    alias: tuple[str, ...] = ()
    notes: tuple[str, ...] = field(default=(), compare=False)

    def __post_init__(self) -> None:
        """Validate track parameters."""
        if not self.id:
            raise ValueError("Track id must not be empty.")
        if self.type not in _TRACK_TYPES:
            raise ValueError(f"Unknown track type '{self.type}'.")
        if self.surface_type not in _SURFACES:
            raise ValueError(f"Unknown surface type '{self.surface_type}'.")
        if self.length <= 0.0:
            raise ValueError("length must be > 0.")
        if not 1 <= self.technicality <= 10:
            raise ValueError("technicality must be between 1 and 10.")

    def matches(self, query: str) -> bool:
        """Case-insensitive match on id, name or any alias."""
        needle = query.strip().lower()
        if needle in (self.id.lower(), self.name.lower()):
            return True
        return any(needle == a.lower() for a in self.alias)
