"""Physics primitives for the tuning engine.

Every function here is a pure calculation on explicit numeric arguments.
The coefficients are empirical fits to in-game behaviour rather than
textbook vehicle dynamics, so units follow the game's tuning menu: lbs,
inches, lb/in, mph and degrees.
"""

from __future__ import annotations

import math
from typing import Any

# Standard gravity in ft/s^2.
GRAVITY: float = 32.2
MPH_TO_FPS: float = 1.46667
# Tyre revolutions per mile per inch of radius, folded into one constant.
MPH_TO_TIRE_RPM: float = 336.0
DEFAULT_TIRE_RADIUS: float = 12.5
DEFAULT_REDLINE_RPM: float = 7500.0

# Load sensitivity exponent per surface: grip ~ (load / static) ** k.
_LOAD_SENSITIVITY: dict[str, float] = {
    "asphalt": 0.45,
    "dirt": 0.55,
    "gravel": 0.52,
}


def _clamp(value: float, lo: float, hi: float) -> float:
    return max(lo, min(hi, value))


# ---------------------------------------------------------------------------
# Springs
# ---------------------------------------------------------------------------


def natural_frequency(spring_rate: float, weight: float) -> float:
    """Natural frequency of a spring supporting *weight*.

    ``f = (1 / 2*pi) * sqrt(k * g / m)`` with ``m = weight / g``.

    Args:
        spring_rate: Spring rate in lb/in.
        weight: Supported weight in lbs (> 0).

    Returns:
        Frequency in Hz, rounded to 2 decimals.

    Raises:
        ValueError: If *weight* is not positive.
    """
    if weight <= 0.0:
        raise ValueError("weight must be > 0.")
    mass: float = weight / GRAVITY
    frequency: float = (1.0 / (2.0 * math.pi)) * math.sqrt(
        max(0.0, spring_rate) * GRAVITY / mass
    )
    return round(frequency, 2)


def spring_rate_for_frequency(target_frequency: float, weight: float) -> float:
    """Spring rate (lb/in) giving *target_frequency* for *weight*.

    Inverse of :func:`natural_frequency`: ``k = (2*pi*f)^2 * m / g``.
    """
    mass: float = weight / GRAVITY
    omega: float = 2.0 * math.pi * target_frequency
    return float(round(omega * omega * mass / GRAVITY))


def arb_roll_multiplier(arb_stiffness: float) -> float:
    """Roll-resistance multiplier of an anti-roll bar setting (1-65)."""
    normalized: float = _clamp(arb_stiffness, 1.0, 65.0) / 65.0
    return round(0.5 + normalized * normalized * 3.5, 2)


def suspension_travel(load: float, spring_rate: float) -> float:
    """Compression in inches for *load* lbs on a *spring_rate* lb/in spring."""
    if spring_rate <= 0.0:
        raise ValueError("spring_rate must be > 0.")
    return round(abs(load) / spring_rate, 2)


# ---------------------------------------------------------------------------
# Load transfer
# ---------------------------------------------------------------------------


def longitudinal_load_transfer(
    acceleration: float,
    cg_height: float,
    wheelbase: float,
    grade: float = 0.0,
) -> float:
    """Fore/aft weight transfer in percent of total weight.

    The road grade adds its gravity component ``sin(grade) * g`` to the
    acceleration before the transfer is computed.

    Args:
        acceleration: Longitudinal acceleration in g (negative = braking).
        cg_height: Centre of gravity height in inches.
        wheelbase: Wheelbase in inches (> 0).
        grade: Road slope in degrees.

    Returns:
        Transfer in ``[-100, 100]``; positive values move load rearward.
    """
    grade_accel: float = math.sin(math.radians(grade)) * GRAVITY
    total_accel: float = acceleration * GRAVITY + grade_accel
    transfer: float = (total_accel / GRAVITY) * cg_height / wheelbase * 100.0
    return _clamp(transfer, -100.0, 100.0)


def lateral_load_transfer(
    cornering_g: float, cg_height: float, track_width: float
) -> float:
    """Side-to-side weight transfer in percent, clamped to ``[0, 100]``."""
    transfer: float = cornering_g * cg_height / track_width * 100.0
    return _clamp(transfer, 0.0, 100.0)


def axle_loads(
    weight_distribution: float,
    longitudinal_transfer: float,
    lateral_transfer: float = 0.0,
) -> dict[str, float]:
    """Front/rear and left/right load shares after transfer.

    Returns:
        Dictionary containing:
            front -- Front axle share in percent.
            rear -- Rear axle share in percent.
            left -- Left side share in percent.
            right -- Right side share in percent.
    """
    front: float = weight_distribution - longitudinal_transfer / 2.0
    left: float = 50.0 - lateral_transfer / 2.0
    return {
        "front": _clamp(front, 0.0, 100.0),
        "rear": _clamp(100.0 - front, 0.0, 100.0),
        "left": _clamp(left, 0.0, 100.0),
        "right": _clamp(100.0 - left, 0.0, 100.0),
    }


def wheel_loads(
    weight: float,
    weight_distribution: float,
    longitudinal_transfer: float,
    lateral_transfer: float,
) -> dict[str, Any]:
    """Per-corner load in lbs for combined acceleration and cornering."""
    shares = axle_loads(weight_distribution, longitudinal_transfer, lateral_transfer)
    front_weight: float = weight * shares["front"] / 100.0
    rear_weight: float = weight * shares["rear"] / 100.0

    front_left: float = front_weight * shares["left"] / 100.0
    front_right: float = front_weight * shares["right"] / 100.0

    description = "Load balanced"
    if abs(front_left - front_right) > weight * 0.15:
        description = "Heavy lateral load transfer"
    if abs(longitudinal_transfer) > 40.0:
        description = "Heavy longitudinal load transfer"

    return {
        "front_left": round(front_left),
        "front_right": round(front_right),
        "rear_left": round(rear_weight * shares["left"] / 100.0),
        "rear_right": round(rear_weight * shares["right"] / 100.0),
        "description": description,
    }


def load_transfer_grip_effect(transfer: float, base_grip: float = 1.0) -> float:
    """Total grip left after *transfer* percent unloads one side.

    Grip never drops below 70 % of *base_grip*.
    """
    return base_grip * max(0.7, 1.0 - abs(transfer) / 200.0)


def load_transfer_adjustments(
    longitudinal_transfer: float, lateral_transfer: float
) -> list[str]:
    """Suspension suggestions for the given transfer magnitudes."""
    recommendations: list[str] = []
    if longitudinal_transfer > 30.0:
        recommendations.append(
            "High load transfer to rear: Increase rear spring rate or ARB"
        )
    if longitudinal_transfer < -30.0:
        recommendations.append(
            "High load transfer to front: Increase front spring rate or ARB"
        )
    if lateral_transfer > 50.0:
        recommendations.append(
            "Extreme lateral load transfer: Reduce ride height or increase track width"
        )
    if lateral_transfer > 30.0:
        recommendations.append(
            "High lateral load transfer: Increase anti-roll bar stiffness"
        )
    if not recommendations:
        recommendations.append("Load transfer balanced - suspension well-tuned")
    return recommendations


# ---------------------------------------------------------------------------
# Tyres and aero
# ---------------------------------------------------------------------------


def tire_load_sensitivity(
    base_grip: float, load_percent: float, surface: str = "asphalt"
) -> float:
    """Grip at *load_percent* of static load (sub-linear in load).

    Unknown surfaces use the asphalt exponent.
    """
    exponent: float = _LOAD_SENSITIVITY.get(surface, _LOAD_SENSITIVITY["asphalt"])
    return base_grip * (max(0.0, load_percent) / 100.0) ** exponent


def downforce_at_speed(
    speed: float,
    wing_angle: float,
    ride_height: float,
    base_downforce: float,
    wing_effect: float,
    min_ride_height: float,
    ride_height_impact: float,
    splitter_downforce: float = 0.0,
    diffuser_downforce: float = 0.0,
) -> float:
    """Downforce at *speed* mph for one wing/ride-height combination.

    Every term scales with ``(speed / 100)^2``.  The splitter only works
    within 0.5 in of the minimum ride height and the diffuser within 1 in.
    The result is floored at zero.
    """
    speed_ratio: float = (speed / 100.0) ** 2
    downforce: float = base_downforce * speed_ratio
    downforce += wing_angle * wing_effect * speed_ratio
    downforce += (ride_height - min_ride_height) * ride_height_impact * speed_ratio
    if splitter_downforce > 0.0 and ride_height <= min_ride_height + 0.5:
        downforce += splitter_downforce / 100.0 * speed_ratio
    if diffuser_downforce > 0.0 and ride_height <= min_ride_height + 1.0:
        downforce += diffuser_downforce / 100.0 * speed_ratio
    return max(0.0, downforce)


def drag_force(
    drag_coefficient: float, speed: float, drag_penalty: float = 0.0
) -> float:
    """Relative drag at *speed* mph.

    Above 150 mph the coefficient grows by *drag_penalty* per 10 mph.
    """
    cd: float = drag_coefficient
    if speed > 150.0:
        cd += (speed - 150.0) / 10.0 * drag_penalty
    return cd * speed * speed / 200.0


# ---------------------------------------------------------------------------
# Drivetrain
# ---------------------------------------------------------------------------


def rpm_at_speed(
    speed: float,
    gear_ratio: float,
    final_drive: float,
    tire_radius: float = DEFAULT_TIRE_RADIUS,
) -> float:
    """Engine RPM (whole number) at *speed* mph in the given gear."""
    return float(
        round(speed * gear_ratio * final_drive * MPH_TO_TIRE_RPM / (2.0 * tire_radius))
    )


def speed_at_rpm(
    rpm: float,
    gear_ratio: float,
    final_drive: float,
    tire_radius: float = DEFAULT_TIRE_RADIUS,
) -> float:
    """Road speed in mph at *rpm* in the given gear, rounded to 0.1."""
    overall: float = gear_ratio * final_drive * MPH_TO_TIRE_RPM
    if overall <= 0.0:
        return 0.0
    return round(rpm * 2.0 * tire_radius / overall, 1)
