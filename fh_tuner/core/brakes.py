"""Brake analyzer: pressure, bias, pad compound and fade.

Bias is expressed as the front share of braking force in percent.  The
in-game slider reads the other way round (see
:attr:`TuneSettings.brake_slider`).
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from fh_tuner.core.physics import GRAVITY
from fh_tuner.core.tune import TuneSettings, clamp_field

_MIN_OPTIMAL_BIAS: float = 45.0
_MAX_OPTIMAL_BIAS: float = 58.0


@dataclass(frozen=True)
class BrakePad:
    """Pad compound characteristics."""

    grip_multiplier: float
    modulation: float
    fade_resistance: float
    cost: int
    description: str


BRAKE_PADS: dict[str, BrakePad] = {
    "sport": BrakePad(1.0, 8.0, 6.0, 100, "Balanced grip and modulation, good fade resistance"),
    "race": BrakePad(
        1.15, 7.0, 8.0, 150, "High grip, reduced modulation, excellent fade resistance"
    ),
    "slick": BrakePad(
        1.30, 5.0, 9.0, 200, "Maximum grip, difficult modulation, extreme fade resistance"
    ),
}


# Pad used when a setup names a compound outside BRAKE_PADS.
DEFAULT_PAD: str = "sport"


@dataclass(frozen=True)
class BrakeSetup:
    """Brake pressure (50-100), front bias in percent and pad choice.

    Unknown pad names fall back to :data:`DEFAULT_PAD`.
    """

    brake_pressure: float
    brake_bias: float
    front_pad: str = "sport"
    rear_pad: str = "sport"

    def __post_init__(self) -> None:
        for name in ("front_pad", "rear_pad"):
            if getattr(self, name) not in BRAKE_PADS:
                object.__setattr__(self, name, DEFAULT_PAD)

    @classmethod
    def from_tune(cls, tune: TuneSettings) -> BrakeSetup:
        return cls(brake_pressure=tune.brake_pressure, brake_bias=tune.brake_balance)


# ---------------------------------------------------------------------------
# Fade and lock-up
# ---------------------------------------------------------------------------


def calculate_brake_fade(
    brake_pressure: float, speed: float, duration: float, weight: float
) -> dict[str, float]:
    """Heat build-up and the pressure left after fade.

    Heat scales with pressure, duration and the square of speed; every
    100 heat units cost 10 % of pressure, up to 40 %.

    Args:
        brake_pressure: Brake pressure setting (50-100).
        speed: Speed at the start of the stop in mph.
        duration: Braking time in seconds.
        weight: Car weight in lbs (> 0).

    Returns:
        Dictionary containing:
            heat_generated -- Relative heat units.
            fade_percentage -- Pressure lost to fade (0-40).
            effective_pressure -- Pressure after fade.
            max_deceleration -- Effective pressure per 1000 lbs, in g.
            time_to_stop -- Seconds to stop at that deceleration.
    """
    if weight <= 0.0:
        raise ValueError("weight must be > 0.")
    heat: float = brake_pressure * (speed / 100.0) ** 2 * duration
    fade: float = min(40.0, heat / 100.0 * 10.0)
    effective: float = brake_pressure * (1.0 - fade / 100.0)
    max_decel: float = effective / (weight / 1000.0)
    time_to_stop: float = speed / (max_decel * GRAVITY * 3.6) if max_decel > 0.0 else 0.0
    return {
        "heat_generated": float(round(heat)),
        "fade_percentage": round(fade, 1),
        "effective_pressure": round(effective, 1),
        "max_deceleration": round(max_decel, 2),
        "time_to_stop": round(time_to_stop, 2),
    }


def calculate_lockup_risk(
    brake_bias: float,
    brake_pressure: float,
    speed: float,
    tire_grip: float,
    has_abs: bool = True,
) -> dict[str, Any]:
    """Front and rear lock-up probability in percent.

    Risk rises with bias toward that axle, pressure and speed, and falls
    with tyre grip.  ABS removes 70 % of front and 60 % of rear risk.
    """
    front: float = brake_bias / 100.0 * 0.8 * 100.0
    front += (brake_pressure - 50.0) * 0.5
    front -= tire_grip * 20.0
    front += speed / 200.0 * 30.0
    front = max(0.0, min(100.0, front))

    rear: float = (100.0 - brake_bias) / 100.0 * 0.6 * 100.0
    rear += (brake_pressure - 50.0) * 0.3
    rear -= tire_grip * 15.0
    rear += speed / 200.0 * 20.0
    rear = max(0.0, min(100.0, rear))

    final_front, final_rear = front, rear
    if has_abs:
        final_front *= 0.3
        final_rear *= 0.4

    recommendations: list[str] = []
    if final_front > 60.0:
        recommendations.append("Reduce front brake bias - high lockup risk")
    if final_rear > 50.0:
        recommendations.append("Increase rear brake bias for balance")
    if brake_pressure > 80.0 and final_front > 40.0:
        recommendations.append("Reduce brake pressure slightly")

    return {
        "front_risk": float(round(final_front)),
        "rear_risk": float(round(final_rear)),
        "abs_effective": has_abs and (front > 40.0 or rear > 40.0),
        "recommendations": recommendations,
    }


# ---------------------------------------------------------------------------
# Full analysis
# ---------------------------------------------------------------------------


def analyze_brake_setup(
    setup: BrakeSetup,
    speed: float,
    weight: float,
    tire_grip: float = 1.0,
    has_abs: bool = True,
    duration: float = 0.5,
) -> dict[str, Any]:
    """Braking power, lock-up risk, balance and fade for a brake setup.

    Pressure and bias outside the game limits are clamped.

    Returns:
        Dictionary containing:
            braking_power -- 0-13 score (pressure times pad grip).
            front_lockup_risk -- Percent.
            rear_lockup_risk -- Percent.
            braking_balance -- ``"front-heavy"``, ``"balanced"`` or ``"rear-heavy"``.
            fade_percentage -- Fade over *duration* seconds.
            description -- One-line summary.
            recommendations -- Adjustment suggestions.
    """
    pressure = clamp_field("brake_pressure", setup.brake_pressure)
    bias = clamp_field("brake_balance", setup.brake_bias)

    pad_grip: float = (
        BRAKE_PADS[setup.front_pad].grip_multiplier + BRAKE_PADS[setup.rear_pad].grip_multiplier
    ) / 2.0
    power: float = pressure / 100.0 * 10.0 * pad_grip

    lockup = calculate_lockup_risk(bias, pressure, speed, tire_grip, has_abs)
    fade = calculate_brake_fade(pressure, speed, duration, weight)

    balance = "balanced"
    if bias > 55.0:
        balance = "front-heavy"
    elif bias < 45.0:
        balance = "rear-heavy"

    recommendations: list[str] = []
    if lockup["front_risk"] > 60.0:
        recommendations.append(
            f"Reduce front brake bias from {bias:g}% to {max(40.0, bias - 5.0):g}%"
        )
    if lockup["rear_risk"] > 50.0:
        recommendations.append(f"Increase rear brake bias (reduce front from {bias:g}%)")
    if fade["fade_percentage"] > 20.0:
        recommendations.append("Use race or slick brake pads to reduce fade")
    if power < 5.0:
        recommendations.append("Increase brake pressure for more stopping power")
    if not recommendations:
        recommendations.append("Brake setup is well-balanced for current conditions")

    return {
        "braking_power": round(power, 1),
        "front_lockup_risk": lockup["front_risk"],
        "rear_lockup_risk": lockup["rear_risk"],
        "braking_balance": balance,
        "fade_percentage": fade["fade_percentage"],
        "description": (
            f"Power: {power:.1f}/10 | Balance: {balance} "
            f"| Front risk: {lockup['front_risk']:.0f}%"
        ),
        "recommendations": recommendations,
    }


# ---------------------------------------------------------------------------
# Presets
# ---------------------------------------------------------------------------

_BRAKE_PRESETS: dict[str, BrakeSetup] = {
    "street": BrakeSetup(65.0, 50.0, "sport", "sport"),
    "circuit": BrakeSetup(85.0, 52.0, "race", "sport"),
    "drag": BrakeSetup(75.0, 55.0, "race", "race"),
    "wet": BrakeSetup(70.0, 48.0, "sport", "sport"),
}
_DEFAULT_BRAKES = BrakeSetup(70.0, 50.0, "sport", "sport")


def optimize_brakes_for(condition: str) -> BrakeSetup:
    """Preset for ``street``, ``circuit``, ``drag`` or ``wet`` driving."""
    return _BRAKE_PRESETS.get(condition, _DEFAULT_BRAKES)


def find_optimal_brake_bias(
    weight_distribution: float, speed: float, tire_grip: float = 1.0, weight: float | None = None
) -> dict[str, Any]:
    """Front bias suited to the car's balance, braking speed and grip.

    Front-heavy cars get less front bias; speed and grip each add up to
    about 3 %.  The result stays within 45-58 %.

    Returns:
        Dictionary containing:
            optimal_bias -- Front bias in percent.
            bias_range -- ``(min, max)`` band worth testing.
            reasoning -- Input summary.
    """
    bias: float = (
        50.0
        - (weight_distribution - 50.0) * 0.2
        + speed / 200.0 * 3.0
        + (tire_grip - 1.0) * 3.0
    )
    bias = max(_MIN_OPTIMAL_BIAS, min(_MAX_OPTIMAL_BIAS, bias))

    reasoning = f"Optimal for: {weight_distribution:g}% front weight, {speed:g} mph, {tire_grip:.2f}x grip"
    if weight is not None:
        reasoning = f"Optimal for: {weight:g} lbs, " + reasoning[len("Optimal for: "):]

    return {
        "optimal_bias": round(bias, 1),
        "bias_range": (
            max(_MIN_OPTIMAL_BIAS, bias - 3.0),
            min(_MAX_OPTIMAL_BIAS, bias + 3.0),
        ),
        "reasoning": reasoning,
    }
