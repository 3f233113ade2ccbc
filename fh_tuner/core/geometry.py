"""Suspension geometry analyzer: camber, toe and caster.

Negative camber trades straight-line tyre wear for cornering grip, front
toe-out sharpens turn-in at the cost of stability, and caster adds
high-speed stability and self-centering at the cost of steering weight.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from fh_tuner.core.tune import TunePatch, TuneSettings, clamp_field

# Camber grip gain per degree of negative camber, and its ceiling.
_CAMBER_GRIP_PER_DEG: float = 0.15
_MAX_CAMBER_GRIP: float = 1.52
# Grip penalty per degree of positive camber.
_POSITIVE_CAMBER_PENALTY: float = 0.25

_TURN_IN_POINTS: dict[str, float] = {"fast": 8.0, "medium": 5.0, "slow": 3.0}
_EXIT_STABILITY_FACTOR: dict[str, float] = {"loose": 1.1, "neutral": 1.0, "stable": 0.9}


@dataclass(frozen=True)
class GeometrySetup:
    """Alignment settings plus the chassis dimensions they act on."""

    camber_front: float
    camber_rear: float
    toe_front: float
    toe_rear: float
    caster: float
    wheelbase: float = 105.0
    track_width: float = 60.0

    @classmethod
    def from_tune(cls, tune: TuneSettings) -> GeometrySetup:
        return cls(
            camber_front=tune.camber_front,
            camber_rear=tune.camber_rear,
            toe_front=tune.toe_front,
            toe_rear=tune.toe_rear,
            caster=tune.caster,
        )


# ---------------------------------------------------------------------------
# Single-setting effects
# ---------------------------------------------------------------------------


def camber_effect(camber: float) -> dict[str, Any]:
    """Cornering grip and straight-line wear for one axle's camber.

    Returns:
        Dictionary containing:
            cornering_grip -- Grip multiplier (1.0 = neutral).
            straight_line_wear -- Inner-edge wear factor (0-1).
            description -- Band description.
    """
    grip: float = 1.0
    if camber <= -0.5:
        grip = min(_MAX_CAMBER_GRIP, 1.0 + abs(camber) * _CAMBER_GRIP_PER_DEG)
    elif camber > 0.0:
        grip = 1.0 - camber * _POSITIVE_CAMBER_PENALTY

    wear: float = max(0.0, min(1.0, (abs(camber) - 1.0) / 4.0))

    if camber >= 0.0:
        description = (
            f"Positive camber ({camber}°) - Reduces grip, for very high-speed stability only"
        )
    elif camber >= -1.0:
        description = f"Slight negative camber ({camber}°) - Light tire wear, good for street use"
    elif camber >= -2.5:
        description = f"Moderate negative camber ({camber}°) - Balanced grip and wear"
    elif camber >= -3.5:
        description = (
            f"Aggressive negative camber ({camber}°) - Maximum cornering grip, increased wear"
        )
    else:
        description = (
            f"Extreme negative camber ({camber}°) - Sacrifices straight-line for pure grip"
        )

    return {
        "cornering_grip": round(grip, 2),
        "straight_line_wear": round(wear, 2),
        "description": description,
    }


def toe_effect(toe: float, axle: str) -> dict[str, Any]:
    """Turn-in response, stability and wear for one axle's toe.

    Positive toe is toe-out.  On the front axle it speeds up turn-in; on
    the rear axle it loosens the car mid-corner.

    Args:
        toe: Toe angle in degrees.
        axle: ``"front"`` or ``"rear"``.
    """
    if toe > 1.5:
        response, stability, wear = "fast", "loose", 0.6
    elif toe > 0.5:
        response, stability, wear = "fast", "neutral", 0.4
    elif toe > -0.5:
        response, stability, wear = "medium", "neutral", 0.3
    elif toe <= -1.5:
        response, stability, wear = "slow", "stable", 0.5
    else:
        response, stability, wear = "slow", "stable", 0.4

    if axle == "front":
        description = f"Front toe {toe}° - {response} turn-in response"
    else:
        # Rear toe does not steer, it only moves the stability needle.
        response = "medium"
        if 0.5 < toe <= 1.5:
            stability = "loose"
        description = f"Rear toe {toe}° - {stability} mid-corner stability"

    return {
        "turn_in_response": response,
        "stability": stability,
        "tire_wear": round(wear, 2),
        "description": description,
    }


def caster_effect(caster: float) -> dict[str, Any]:
    """Straight-line stability, steering feel and self-centering."""
    stability: float = (caster - 4.0) * 2.0
    if caster < 4.5:
        feel, centering = "light", "weak"
        stability = max(0.0, stability)
    elif caster < 6.0:
        feel, centering = "medium", "moderate"
        stability = min(10.0, stability + 2.0)
    else:
        feel, centering = "heavy", "strong"
        stability = min(10.0, stability + 4.0)

    return {
        "straight_line_stability": round(stability, 1),
        "steering_feel": feel,
        "self_centering": centering,
        "description": f"Caster {caster}° - {feel} steering feel, {centering} self-centering",
    }


def _wear_band(value: float) -> str:
    if value > 0.5:
        return "heavy"
    if value > 0.3:
        return "normal"
    return "light"


# ---------------------------------------------------------------------------
# Full analysis
# ---------------------------------------------------------------------------


def analyze_geometry(setup: GeometrySetup) -> dict[str, Any]:
    """Analyze a complete alignment.

    Out-of-range angles are clamped to the game limits before analysis.

    Returns:
        Dictionary containing:
            turn_in_response -- ``"slow"``, ``"medium"`` or ``"fast"``.
            turn_in_sharpness -- 0-10 score.
            mid_corner_stability -- ``"loose"``, ``"neutral"`` or ``"stable"``.
            exit_traction -- 0-15 score from rear camber and toe.
            tire_wear_profile -- Per-edge wear bands.
            description -- One-line summary.
            recommendations -- Adjustment suggestions.
    """
    camber_front = camber_effect(clamp_field("camber_front", setup.camber_front))
    camber_rear = camber_effect(clamp_field("camber_rear", setup.camber_rear))
    toe_front = toe_effect(clamp_field("toe_front", setup.toe_front), "front")
    toe_rear = toe_effect(clamp_field("toe_rear", setup.toe_rear), "rear")
    caster = caster_effect(clamp_field("caster", setup.caster))

    sharpness: float = (
        _TURN_IN_POINTS[toe_front["turn_in_response"]]
        + caster["straight_line_stability"] / 2.0
    ) / 2.0
    stability: str = toe_rear["stability"]
    exit_traction: float = camber_rear["cornering_grip"] * 10.0 * _EXIT_STABILITY_FACTOR[stability]

    recommendations: list[str] = []
    if camber_front["cornering_grip"] < 1.2:
        recommendations.append("Increase front camber for better cornering grip")
    if toe_front["turn_in_response"] == "slow":
        recommendations.append("Add front toe-out for sharper turn-in")
    elif toe_front["turn_in_response"] == "fast" and toe_front["stability"] == "loose":
        recommendations.append("Reduce front toe-out if car feels too loose")
    if stability == "loose":
        recommendations.append("Add rear toe-in for mid-corner stability")
    if caster["steering_feel"] == "light" and camber_front["cornering_grip"] > 1.3:
        recommendations.append("Consider increasing caster for better high-speed stability")
    if not recommendations:
        recommendations.append("Geometry is well-balanced. No adjustments needed.")

    return {
        "turn_in_response": toe_front["turn_in_response"],
        "turn_in_sharpness": round(sharpness, 1),
        "mid_corner_stability": stability,
        "exit_traction": round(exit_traction),
        "tire_wear_profile": {
            "inner_front": _wear_band(camber_front["straight_line_wear"]),
            "outer_front": _wear_band(toe_front["tire_wear"]),
            "inner_rear": _wear_band(camber_rear["straight_line_wear"]),
            "outer_rear": _wear_band(toe_rear["tire_wear"]),
        },
        "description": (
            f"Turn-in: {toe_front['turn_in_response']} | Stability: {stability} "
            f"| Exit: {exit_traction:.1f}/10"
        ),
        "recommendations": recommendations,
    }


# ---------------------------------------------------------------------------
# Presets
# ---------------------------------------------------------------------------

# (camber_front, camber_rear, toe_front, toe_rear, caster)
_GEOMETRY_PRESETS: dict[str, tuple[float, float, float, float, float]] = {
    "street": (-1.0, -0.8, 0.0, -0.2, 5.5),
    "circuit": (-3.0, -2.5, 0.3, -0.5, 6.5),
    "drift": (-3.5, -3.0, 0.8, 0.2, 5.0),
    "drag": (-0.5, 0.0, -0.2, 0.0, 4.5),
    "offroad": (-1.5, -1.0, 0.0, 0.0, 5.0),
}
_DEFAULT_GEOMETRY: tuple[float, float, float, float, float] = (-2.0, -1.5, 0.1, -0.2, 5.5)


def optimize_geometry_for(condition: str) -> GeometrySetup:
    """Preset alignment for ``street``, ``circuit``, ``drift``, ``drag`` or ``offroad``.

    Unknown conditions get a general-purpose track alignment.
    """
    cf, cr, tf, tr, caster = _GEOMETRY_PRESETS.get(condition, _DEFAULT_GEOMETRY)
    return GeometrySetup(
        camber_front=cf, camber_rear=cr, toe_front=tf, toe_rear=tr, caster=caster
    )


def get_geometry_recommendations(setup: GeometrySetup, target_character: str) -> TunePatch:
    """Alignment changes that move *setup* toward a handling character.

    Args:
        setup: Current alignment.
        target_character: ``"responsive"``, ``"stable"`` or ``"balanced"``.

    Returns:
        A :class:`TunePatch` holding only the fields that should change.
    """
    changes: dict[str, float] = {}
    if target_character == "responsive":
        if setup.toe_front < 0.3:
            changes["toe_front"] = 0.3
        if setup.caster < 5.5:
            changes["caster"] = 5.5
        if setup.camber_front > -2.5:
            changes["camber_front"] = -2.5
    elif target_character == "stable":
        if setup.toe_front > 0.0:
            changes["toe_front"] = 0.0
        if setup.toe_rear < -0.5:
            changes["toe_rear"] = -0.5
        if setup.caster < 6.5:
            changes["caster"] = 6.5
        if setup.camber_front < -2.5:
            changes["camber_front"] = -2.5
    else:
        if not 0.1 <= setup.toe_front <= 0.2:
            changes["toe_front"] = 0.15
        if not 5.8 <= setup.caster <= 6.2:
            changes["caster"] = 6.0
        if not -2.8 <= setup.camber_front <= -2.2:
            changes["camber_front"] = -2.5
    return TunePatch(**changes)
