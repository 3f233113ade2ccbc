"""Standalone straight-line performance estimators.

There are two formula families for both 0-60 and top speed.  The
``*_grip`` / ``*_drag`` variants are the simplified physics used by the
performance predictor.  The ``*_geared`` variants fold final drive and
first gear into the estimate and are used by the gearing analyzer.  They
are kept as separate named functions so callers always say which model
they mean.
"""

from __future__ import annotations

import math
from typing import Any

from fh_tuner.core.physics import GRAVITY, MPH_TO_FPS

# Sea-level air density in slugs/ft^3.
AIR_DENSITY: float = 0.002377
HP_TO_FT_LBS: float = 550.0
ZERO_TO_HUNDRED_MULTIPLIER: float = 2.15

# Grip-family 0-60 calibration.
GRIP_LAUNCH_OFFSET: float = 0.8
GRIP_SECONDS_PER_LB_HP: float = 0.45
ZERO_TO_SIXTY_MIN: float = 2.0
ZERO_TO_SIXTY_MAX: float = 12.0

# Seconds from 60 mph to the quarter-mile line beyond the 0-60 share.
QUARTER_MILE_OFFSET: float = 5.0

TOP_SPEED_MIN: float = 80.0
TOP_SPEED_MAX: float = 250.0

# ---------------------------------------------------------------------------
# Acceleration
# ---------------------------------------------------------------------------


def estimate_zero_to_sixty_grip(
    horsepower: float, weight: float, tire_grip: float = 1.0
) -> float:
    """0-60 mph time from weight-to-power and tyre grip.

    ``t = (0.8 + 0.45 * lb_per_hp) / sqrt(min(grip, 1.4))`` clamped to
    2-12 s.  A 3200 lb car with 450 hp on sport tyres runs about 4.0 s.

    Args:
        horsepower: Engine output in hp (> 0).
        weight: Car weight in lbs (> 0).
        tire_grip: Compound grip multiplier; traction benefit caps at 1.4.

    Returns:
        Time in seconds, rounded to 2 decimals.

    Raises:
        ValueError: If horsepower, weight or grip is not positive.
    """
    if horsepower <= 0.0 or weight <= 0.0:
        raise ValueError("horsepower and weight must be > 0.")
    if tire_grip <= 0.0:
        raise ValueError("tire_grip must be > 0.")
    lb_per_hp: float = weight / horsepower
    traction: float = math.sqrt(min(tire_grip, 1.4))
    time: float = (GRIP_LAUNCH_OFFSET + GRIP_SECONDS_PER_LB_HP * lb_per_hp) / traction
    return round(max(ZERO_TO_SIXTY_MIN, min(ZERO_TO_SIXTY_MAX, time)), 2)


def estimate_zero_to_sixty_geared(
    horsepower: float,
    weight: float,
    first_gear: float,
    final_drive: float,
    wheel_slip: float = 0.1,
) -> float:
    """0-60 mph time accounting for launch gearing and wheel slip.

    Shorter overall first-gear ratios shave time off a power-to-weight
    baseline; slip adds time.  Clamped to 3.5-10 s.
    """
    if horsepower <= 0.0 or weight <= 0.0:
        raise ValueError("horsepower and weight must be > 0.")
    power_to_weight: float = horsepower / (weight / 1000.0)
    overall: float = max(first_gear * final_drive, 1e-6)
    gearing_effect: float = math.log(overall) / math.log(3.0)

    base_time: float = 60.0 / (power_to_weight * 3.0)
    time: float = base_time * (1.0 + wheel_slip) * (1.0 - gearing_effect * 0.05)
    return round(max(3.5, min(10.0, time)), 2)


def estimate_zero_to_hundred(zero_to_sixty: float) -> float:
    """0-100 mph time from a 0-60 time."""
    return round(zero_to_sixty * ZERO_TO_HUNDRED_MULTIPLIER, 2)


def estimate_quarter_mile(zero_to_sixty: float, top_speed: float) -> dict[str, float]:
    """Quarter-mile elapsed time and trap speed.

    Returns:
        Dictionary containing:
            time -- Elapsed time in seconds.
            speed -- Trap speed in mph.
    """
    capped_top: float = min(top_speed, 160.0)
    time: float = (
        zero_to_sixty * 1.35 + 400.0 / capped_top * 0.8 + QUARTER_MILE_OFFSET
    )
    return {"time": round(time, 2), "speed": float(round(capped_top * 0.95))}


# ---------------------------------------------------------------------------
# Top speed
# ---------------------------------------------------------------------------


def estimate_top_speed_drag(
    horsepower: float, drag_coefficient: float, frontal_area: float = 20.0
) -> float:
    """Drag-limited top speed in mph.

    Solves ``P = 0.5 * rho * Cd * A * v^3`` for ``v`` in closed form and
    clamps the result to 80-250 mph.

    Args:
        horsepower: Engine output in hp.
        drag_coefficient: Aerodynamic Cd (> 0).
        frontal_area: Frontal area in sq ft (> 0).

    Returns:
        Top speed in whole mph.
    """
    if drag_coefficient <= 0.0 or frontal_area <= 0.0:
        raise ValueError("drag_coefficient and frontal_area must be > 0.")
    power_ft_lbs: float = max(0.0, horsepower) * HP_TO_FT_LBS
    drag_factor: float = 0.5 * AIR_DENSITY * drag_coefficient * frontal_area
    speed_fps: float = (power_ft_lbs / drag_factor) ** (1.0 / 3.0)
    speed_mph: float = speed_fps / MPH_TO_FPS
    return float(round(max(TOP_SPEED_MIN, min(TOP_SPEED_MAX, speed_mph))))


def estimate_top_speed_geared(
    horsepower: float,
    weight: float,
    drag_coefficient: float,
    final_drive: float,
) -> float:
    """Top speed limited by both drag and a short final drive.

    Frontal area is approximated from weight (``weight / 100 * 0.5``); the
    drag-limited speed is then divided by ``final_drive ** 0.3``.
    """
    if final_drive <= 0.0:
        raise ValueError("final_drive must be > 0.")
    frontal_area: float = weight / 100.0 * 0.5
    power_ft_lbs: float = max(0.0, horsepower) * HP_TO_FT_LBS
    drag_factor: float = 0.5 * AIR_DENSITY * drag_coefficient * frontal_area
    speed_mph: float = (power_ft_lbs / drag_factor) ** (1.0 / 3.0) / MPH_TO_FPS
    speed_mph /= final_drive ** 0.3
    return float(round(max(TOP_SPEED_MIN, min(TOP_SPEED_MAX, speed_mph))))


# ---------------------------------------------------------------------------
# Misc
# ---------------------------------------------------------------------------


def altitude_power_factor(altitude_ft: float) -> float:
    """Fraction of sea-level power left at *altitude_ft* (3.5 % per 1000 ft, max 30 %)."""
    loss: float = max(0.0, altitude_ft) / 1000.0 * 0.035
    return 1.0 - min(loss, 0.3)


def available_power(peak_horsepower: float, speed: float, top_speed: float) -> float:
    """Wheel horsepower available at *speed*.

    Full power (less 8 % driveline loss) up to 60 % of top speed, then a
    quadratic falloff to zero at top speed.
    """
    if top_speed <= 0.0:
        return 0.0
    ratio: float = speed / top_speed
    if ratio < 0.6:
        return peak_horsepower * 0.92
    falloff: float = 1.0 - ((ratio - 0.6) / 0.4) ** 2
    return float(round(peak_horsepower * max(0.0, falloff) * 0.92))


def estimate_braking_distance(speed: float, deceleration_g: float) -> float:
    """Stopping distance in feet from *speed* mph at a constant deceleration."""
    if deceleration_g <= 0.0:
        raise ValueError("deceleration_g must be > 0.")
    speed_fps: float = speed * MPH_TO_FPS
    return float(round(speed_fps * speed_fps / (2.0 * deceleration_g * GRAVITY)))


def compare_performance(
    first: dict[str, float], second: dict[str, float]
) -> dict[str, Any]:
    """Compare two ``{"zero_to_sixty", "top_speed"}`` summaries.

    The overall score weights acceleration at 60 % and top speed at 40 %;
    a higher score wins.

    Returns:
        Dictionary containing:
            acceleration_delta -- e.g. ``"0.30s faster"`` for *first*.
            top_speed_delta -- e.g. ``"12 mph slower"`` for *first*.
            overall_delta -- Absolute score difference.
            winner -- ``"first"``, ``"second"`` or ``"tied"``.
    """
    accel_delta: float = first["zero_to_sixty"] - second["zero_to_sixty"]
    speed_delta: float = first["top_speed"] - second["top_speed"]

    def _score(s: dict[str, float]) -> float:
        return s["top_speed"] / 200.0 * 0.4 - s["zero_to_sixty"] * 0.6

    score_first, score_second = _score(first), _score(second)
    if score_first > score_second:
        winner = "first"
    elif score_second > score_first:
        winner = "second"
    else:
        winner = "tied"

    return {
        "acceleration_delta": (
            f"{abs(accel_delta):.2f}s {'faster' if accel_delta < 0 else 'slower'}"
        ),
        "top_speed_delta": (
            f"{abs(speed_delta):.0f} mph {'faster' if speed_delta > 0 else 'slower'}"
        ),
        "overall_delta": round(abs(score_first - score_second), 2),
        "winner": winner,
    }
