"""Aerodynamics analyzer: downforce distribution, balance, drag and top speed.

Per-category aero behaviour lives in :class:`AeroProfile` records loaded
from ``data/aero_profiles.yaml`` (see :func:`fh_tuner.config.get_aero_profile`).
Downforce figures are relative units at the reference speed of 100 mph.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from fh_tuner.core.performance import estimate_top_speed_drag
from fh_tuner.core.physics import downforce_at_speed, drag_force
from fh_tuner.core.tune import clamp_field

# Extra drag coefficient per degree of total wing angle.
_CD_PER_WING_DEGREE: float = 0.001
_AERO_FRONTAL_AREA: float = 22.0

_SPEED_PROFILES: tuple[str, ...] = ("low", "medium", "high")


@dataclass(frozen=True)
class AeroProfile:
    """Aerodynamic characteristics of one car category.

    Attributes:
        category: Category key, e.g. ``"supercar"``.
        name: Display name.
        base_cd: Drag coefficient.
        base_downforce: Body downforce at 100 mph.
        wing_mount_point: ``"rear"`` or ``"integrated"``.
        wing_angle_min: Smallest wing angle in degrees.
        wing_angle_max: Largest wing angle in degrees.
        default_wing_angle: Out-of-the-box wing angle.
        front_wing_effect: Downforce per degree of front wing.
        rear_wing_effect: Downforce per degree of rear wing.
        min_ride_height: Lowest ride height in inches.
        max_ride_height: Highest ride height in inches.
        ride_height_impact: Downforce per inch above minimum (negative =
            lower is better).
        has_front_splitter: Whether a splitter is fitted.
        splitter_downforce: Splitter contribution at 100 mph.
        has_diffuser: Whether a diffuser is fitted.
        diffuser_downforce: Diffuser contribution at 100 mph.
        critical_speed: Speed in mph above which aero matters.
        drag_penalty_high_speed: Cd increase per 10 mph above 150.
        aero_efficiency: Responsiveness to adjustments (0-1).
        notes: Free-text tuning notes.
    """

    category: str
    name: str
    base_cd: float
    base_downforce: float
    wing_mount_point: str
    wing_angle_min: float
    wing_angle_max: float
    default_wing_angle: float
    front_wing_effect: float
    rear_wing_effect: float
    min_ride_height: float
    max_ride_height: float
    ride_height_impact: float
    has_front_splitter: bool
    splitter_downforce: float
    has_diffuser: bool
    diffuser_downforce: float
    critical_speed: float
    drag_penalty_high_speed: float
    aero_efficiency: float
    notes: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        if self.base_cd <= 0.0:
            raise ValueError(f"Aero profile '{self.category}': base_cd must be > 0.")
        if self.wing_angle_min > self.wing_angle_max:
            raise ValueError(f"Aero profile '{self.category}': wing angle min > max.")
        if self.min_ride_height > self.max_ride_height:
            raise ValueError(f"Aero profile '{self.category}': ride height min > max.")

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> AeroProfile:
        """Build a profile from one entry of the YAML table."""
        wing_range = data["wing_angle_range"]
        return cls(
            category=str(data["category"]),
            name=str(data["name"]),
            base_cd=float(data["base_cd"]),
            base_downforce=float(data["base_downforce"]),
            wing_mount_point=str(data["wing_mount_point"]),
            wing_angle_min=float(wing_range["min"]),
            wing_angle_max=float(wing_range["max"]),
            default_wing_angle=float(data["default_wing_angle"]),
            front_wing_effect=float(data["front_wing_effect"]),
            rear_wing_effect=float(data["rear_wing_effect"]),
            min_ride_height=float(data["min_ride_height"]),
            max_ride_height=float(data["max_ride_height"]),
            ride_height_impact=float(data["ride_height_impact"]),
            has_front_splitter=bool(data["has_front_splitter"]),
            splitter_downforce=float(data["splitter_downforce"]),
            has_diffuser=bool(data["has_diffuser"]),
            diffuser_downforce=float(data["diffuser_downforce"]),
            critical_speed=float(data["critical_speed"]),
            drag_penalty_high_speed=float(data["drag_penalty_high_speed"]),
            aero_efficiency=float(data["aero_efficiency"]),
            notes=tuple(data.get("notes", ())),
        )

    def clamp_wing(self, angle: float) -> float:
        return max(self.wing_angle_min, min(self.wing_angle_max, angle))


@dataclass(frozen=True)
class AeroSetup:
    """Wing angles (degrees) and ride heights (inches) on a given profile."""

    profile: AeroProfile
    wing_angle_front: float
    wing_angle_rear: float
    ride_height_front: float
    ride_height_rear: float


# ---------------------------------------------------------------------------
# Forces
# ---------------------------------------------------------------------------


def calculate_downforce(
    profile: AeroProfile, speed: float, wing_angle: float, ride_height: float
) -> float:
    """Whole-car downforce at *speed* mph for one wing and ride height."""
    return downforce_at_speed(
        speed,
        wing_angle,
        ride_height,
        base_downforce=profile.base_downforce,
        wing_effect=profile.rear_wing_effect,
        min_ride_height=profile.min_ride_height,
        ride_height_impact=profile.ride_height_impact,
        splitter_downforce=profile.splitter_downforce if profile.has_front_splitter else 0.0,
        diffuser_downforce=profile.diffuser_downforce if profile.has_diffuser else 0.0,
    )


def calculate_drag(profile: AeroProfile, speed: float) -> float:
    """Relative drag at *speed* mph including the high-speed penalty."""
    return drag_force(profile.base_cd, speed, profile.drag_penalty_high_speed)


def calculate_downforce_distribution(setup: AeroSetup, speed: float = 100.0) -> dict[str, float]:
    """Front and rear downforce and the front share of the total.

    Front downforce comes from the splitter and front wing, rear from body
    downforce, rear wing and diffuser.  Running below the profile's minimum
    ride height adds downforce on that axle.  Every term scales with
    ``(speed / 100)^2``, so a stationary car has none.

    Returns:
        Dictionary containing:
            front -- Front downforce.
            rear -- Rear downforce.
            balance -- Front share in percent (50 when there is none).
            ratio -- Front divided by rear (1.0 when rear is zero).
    """
    profile = setup.profile
    speed_factor: float = (speed / 100.0) ** 2
    wing_front = profile.clamp_wing(setup.wing_angle_front)
    wing_rear = profile.clamp_wing(setup.wing_angle_rear)
    ride_front = clamp_field("ride_height_front", setup.ride_height_front)
    ride_rear = clamp_field("ride_height_rear", setup.ride_height_rear)

    front: float = 0.0
    if profile.has_front_splitter:
        front = profile.splitter_downforce * speed_factor
    front += wing_front * profile.front_wing_effect * speed_factor
    front += max(
        0.0, (profile.min_ride_height - ride_front) * -profile.ride_height_impact * speed_factor
    )

    rear: float = profile.base_downforce * speed_factor
    rear += wing_rear * profile.rear_wing_effect * speed_factor
    if profile.has_diffuser:
        rear += profile.diffuser_downforce * speed_factor
    rear += max(
        0.0, (profile.min_ride_height - ride_rear) * -profile.ride_height_impact * speed_factor
    )

    total: float = front + rear
    balance: float = front / total * 100.0 if total > 0.0 else 50.0
    ratio: float = front / rear if rear > 0.0 else 1.0
    return {
        "front": float(round(front)),
        "rear": float(round(rear)),
        "balance": round(balance, 1),
        "ratio": round(ratio, 2),
    }


# ---------------------------------------------------------------------------
# Analysis
# ---------------------------------------------------------------------------


def analyze_aero_balance(distribution: dict[str, float]) -> dict[str, Any]:
    """Classify a downforce distribution from :func:`calculate_downforce_distribution`.

    Returns:
        Dictionary containing:
            bias -- ``"front-heavy"``, ``"balanced"`` or ``"rear-heavy"``.
            severity -- Deviation from 50/50 in percent.
            understeer_bias -- True when more than half the load is at the front.
            description -- Summary string.
    """
    balance: float = distribution["balance"]
    deviation: float = balance - 50.0

    if balance < 45.0:
        bias = "rear-heavy"
        description = f"Rear-biased downforce ({round(balance)}% front). "
        if deviation < -15.0:
            description += "High oversteer tendency. "
    elif balance > 55.0:
        bias = "front-heavy"
        description = f"Front-biased downforce ({round(balance)}% front). "
        if deviation > 15.0:
            description += "High understeer tendency. "
    else:
        bias = "balanced"
        description = "Neutral downforce balance. Good for all conditions."

    return {
        "bias": bias,
        "severity": round(deviation, 1),
        "understeer_bias": balance > 50.0,
        "description": description,
    }


def _setup_top_speed(setup: AeroSetup, horsepower: float) -> float:
    cd: float = setup.profile.base_cd + (
        setup.wing_angle_front + setup.wing_angle_rear
    ) * _CD_PER_WING_DEGREE
    return estimate_top_speed_drag(horsepower, cd, _AERO_FRONTAL_AREA)


def analyze_aerodynamics(
    setup: AeroSetup, horsepower: float, weight: float, speed: float = 100.0
) -> dict[str, Any]:
    """Full aero verdict at *speed* mph.

    Top speed uses the drag-limited estimator with the profile's Cd plus
    0.001 per degree of wing.

    Returns:
        Dictionary containing:
            downforce_front, downforce_rear, downforce_total -- At *speed*.
            balance -- Front share in percent.
            drag_force -- Relative drag at *speed*.
            top_speed -- Estimated top speed in mph.
            downforce_to_weight -- Total downforce over car weight.
            stability -- ``"stable"``, ``"balanced"`` or ``"unstable"``.
            recommendations -- Adjustment suggestions.
    """
    if weight <= 0.0:
        raise ValueError("weight must be > 0.")
    distribution = calculate_downforce_distribution(setup, speed)
    balance = analyze_aero_balance(distribution)
    drag = calculate_drag(setup.profile, speed)
    top_speed = _setup_top_speed(setup, horsepower)
    total: float = distribution["front"] + distribution["rear"]
    downforce_to_weight: float = total / weight

    stability = "balanced"
    if abs(balance["severity"]) > 20.0:
        stability = "unstable"
    elif abs(balance["severity"]) < 5.0:
        stability = "stable"

    recommendations: list[str] = []
    if distribution["balance"] < 45.0:
        recommendations.append("Increase front wing angle for more front downforce")
        recommendations.append("Lower front ride height for better downforce")
    elif distribution["balance"] > 55.0:
        recommendations.append("Reduce front wing angle or increase rear")
        recommendations.append("Raise front ride height or lower rear")
    if downforce_to_weight < 0.3:
        recommendations.append("Increase wing angles for more stability at high speed")
    elif downforce_to_weight > 0.8:
        recommendations.append("Consider reducing downforce - high drag penalty")
    if top_speed < 150.0 and setup.profile.category != "offroad":
        recommendations.append("Reduce wing angles or increase ride height to decrease drag")
    if not recommendations:
        recommendations.append("Setup is well-balanced. No adjustments needed.")

    return {
        "downforce_front": distribution["front"],
        "downforce_rear": distribution["rear"],
        "downforce_total": total,
        "balance": distribution["balance"],
        "drag_force": float(round(drag)),
        "top_speed": top_speed,
        "downforce_to_weight": round(downforce_to_weight, 2),
        "stability": stability,
        "recommendations": recommendations,
    }


# ---------------------------------------------------------------------------
# Speed profiles
# ---------------------------------------------------------------------------


def optimal_wing_angle(profile: AeroProfile, speed_profile: str) -> float:
    """Rear wing angle for a ``low``, ``medium`` or ``high`` speed track.

    Slow tracks want more wing, fast tracks less.
    """
    if speed_profile == "low":
        return profile.clamp_wing(profile.default_wing_angle + 15.0)
    if speed_profile == "high":
        return profile.clamp_wing(profile.default_wing_angle - 10.0)
    return profile.default_wing_angle


def optimize_for_speed_profile(
    profile: AeroProfile, horsepower: float, speed_profile: str
) -> dict[str, Any]:
    """Wing and ride-height settings for a track's speed profile.

    Raises:
        ValueError: If *speed_profile* is not ``low``, ``medium`` or ``high``.
    """
    if speed_profile not in _SPEED_PROFILES:
        raise ValueError(
            f"Unknown speed profile '{speed_profile}'. Expected one of {_SPEED_PROFILES}."
        )

    if speed_profile == "low":
        front_wing = min(profile.default_wing_angle + 10.0, profile.wing_angle_max)
        rear_wing = min(profile.default_wing_angle + 15.0, profile.wing_angle_max)
        front_height = rear_height = profile.min_ride_height + 0.5
    elif speed_profile == "high":
        front_wing = max(profile.default_wing_angle - 15.0, profile.wing_angle_min)
        rear_wing = max(profile.default_wing_angle - 10.0, profile.wing_angle_min)
        front_height = rear_height = profile.max_ride_height - 0.5
    else:
        front_wing = profile.clamp_wing(profile.default_wing_angle - 10.0)
        rear_wing = profile.clamp_wing(profile.default_wing_angle + 5.0)
        front_height = rear_height = (profile.min_ride_height + profile.max_ride_height) / 2.0

    setup = AeroSetup(profile, front_wing, rear_wing, front_height, rear_height)
    distribution = calculate_downforce_distribution(setup)
    return {
        "front_wing": round(front_wing, 1),
        "rear_wing": round(rear_wing, 1),
        "front_ride_height": round(front_height, 1),
        "rear_ride_height": round(rear_height, 1),
        "expected_top_speed": _setup_top_speed(setup, horsepower),
        "expected_balance": f"{round(distribution['balance'])}% front bias",
    }
