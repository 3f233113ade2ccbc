"""Differential lock analyzer.

The game exposes acceleration and deceleration lock per driven axle, plus
a braking lock on some builds.  More acceleration lock means more traction
off the corner and more understeer; more braking lock means a more stable
but less forgiving car under braking.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from fh_tuner.core.car import DriveType, TuneType
from fh_tuner.core.tune import TuneSettings, clamp_field

# Acceleration lock response per drivetrain: (traction gain, understeer gain)
# at 100 % lock.
_ACCEL_LOCK_RESPONSE: dict[DriveType, tuple[float, float]] = {
    DriveType.RWD: (5.0, 3.0),
    DriveType.FWD: (4.0, 5.0),
    DriveType.AWD: (3.5, 2.0),
}

_POWER_TRANSFER: dict[DriveType, str] = {
    DriveType.RWD: "Both rear wheels equally engaged",
    DriveType.FWD: "Both front wheels locked - may cause torque steer",
    DriveType.AWD: "Front and rear wheels engaged together",
}


@dataclass(frozen=True)
class DifferentialSetup:
    """Lock percentages (0-100) for one driven axle."""

    accel_lock: float
    braking_lock: float
    decel_lock: float

    @classmethod
    def from_tune(cls, tune: TuneSettings, drive_type: DriveType) -> DifferentialSetup:
        """Pick the axle that matters for *drive_type* out of a full tune.

        FWD cars read the front diff; everything else reads the rear.  The
        tune carries no separate braking lock, so the decel lock stands in.
        """
        if drive_type == DriveType.FWD and tune.diff_accel_front is not None:
            accel = tune.diff_accel_front
            decel = tune.diff_decel_front if tune.diff_decel_front is not None else 0.0
        else:
            accel, decel = tune.diff_accel_rear, tune.diff_decel_rear
        return cls(accel_lock=accel, braking_lock=decel, decel_lock=decel)


# ---------------------------------------------------------------------------
# Per-lock effects
# ---------------------------------------------------------------------------


def acceleration_effect(
    accel_lock: float, drive_type: DriveType, horsepower: float, weight: float
) -> dict[str, Any]:
    """Traction and understeer from the acceleration lock.

    Returns:
        Dictionary containing:
            traction -- 0-10 traction score.
            understeer -- 0-10 understeer added by the lock.
            power_transfer -- Which wheels are coupled.
            description -- Summary string.
    """
    traction_gain, understeer_gain = _ACCEL_LOCK_RESPONSE[drive_type]
    lock: float = accel_lock / 100.0
    traction: float = 5.0 + lock * traction_gain
    if horsepower / (weight / 1000.0) > 0.25:
        traction += 1.5

    traction = min(10.0, traction)
    understeer: float = min(10.0, lock * understeer_gain)
    return {
        "traction": round(traction, 1),
        "understeer": round(understeer, 1),
        "power_transfer": _POWER_TRANSFER[drive_type],
        "description": (
            f"Acceleration lock at {accel_lock:g}%: {traction:.1f}/10 traction, "
            f"{understeer:.1f}/10 understeer tendency"
        ),
    }


def braking_effect(
    braking_lock: float, tire_grip: float = 1.0, wheelbase: float = 105.0
) -> dict[str, Any]:
    """Stability, lock-up risk and control ease from the braking lock."""
    lock: float = braking_lock / 100.0
    stability: float = lock * 8.0
    risk: float = lock * 60.0
    risk -= (tire_grip - 1.0) * 20.0
    risk -= (wheelbase / 100.0 - 1.0) * 5.0
    risk = max(0.0, min(100.0, risk))
    control: float = 10.0 - lock * 5.0
    return {
        "stability": round(stability, 1),
        "lockup_risk": float(round(risk)),
        "control_ease": round(control, 1),
        "description": (
            f"Braking lock at {braking_lock:g}%: {stability:.1f}/10 stability, "
            f"{risk:.0f}% lockup risk"
        ),
    }


def deceleration_effect(decel_lock: float, drive_type: DriveType) -> dict[str, Any]:
    """Engine-braking effect, turn-in and trail-braking ease."""
    engine_braking: float = decel_lock / 100.0 * 8.0
    if drive_type == DriveType.RWD:
        engine_braking += 1.0

    if decel_lock < 30.0:
        turn_in = "slow"
    elif decel_lock < 70.0:
        turn_in = "medium"
    else:
        turn_in = "responsive"

    trail_braking: float = max(4.0, min(9.0, 5.0 + decel_lock / 100.0 * 3.0))
    return {
        "engine_braking_effect": round(engine_braking, 1),
        "turn_in_response": turn_in,
        "trail_braking_ease": round(trail_braking, 1),
        "description": (
            f"Deceleration lock at {decel_lock:g}%: {engine_braking:.1f}/10 "
            f"engine braking, {turn_in} turn-in"
        ),
    }


# ---------------------------------------------------------------------------
# Full analysis
# ---------------------------------------------------------------------------


def analyze_differential(
    setup: DifferentialSetup,
    drive_type: DriveType,
    horsepower: float,
    weight: float,
    wheelbase: float = 105.0,
    tire_grip: float = 1.0,
) -> dict[str, Any]:
    """Combine the three lock effects into one differential verdict.

    Lock values outside 0-100 are clamped.

    Returns:
        Dictionary containing:
            acceleration_traction -- 0-10.
            corner_exit_grip -- 0-10.
            braking_stability -- 0-10.
            understeer_tendency -- -5 to +5 (negative = oversteer).
            drivability_rating -- 0-10, best at moderate locks.
            description -- One-line summary.
            recommendations -- Adjustment suggestions.
    """
    accel_lock = clamp_field("diff_accel_rear", setup.accel_lock)
    braking_lock = clamp_field("diff_decel_rear", setup.braking_lock)
    decel_lock = clamp_field("diff_decel_rear", setup.decel_lock)

    accel = acceleration_effect(accel_lock, drive_type, horsepower, weight)
    braking = braking_effect(braking_lock, tire_grip, wheelbase)
    decel = deceleration_effect(decel_lock, drive_type)

    traction: float = accel["traction"]
    exit_grip: float = min(10.0, traction + decel["engine_braking_effect"] / 2.0)
    understeer: float = accel["understeer"] - 5.0

    drivability: float = 7.0
    if accel_lock > 80.0 or accel_lock < 20.0:
        drivability -= 2.0
    if braking["lockup_risk"] > 60.0:
        drivability -= 2.0
    if decel_lock > 80.0:
        drivability -= 1.0

    recommendations: list[str] = []
    if accel["understeer"] > 7.0:
        recommendations.append(
            f"Reduce acceleration lock ({accel_lock:g}%) - too much understeer"
        )
    elif accel_lock < 20.0 and horsepower > 400.0:
        recommendations.append("Increase acceleration lock - traction loss on exit")
    if braking["lockup_risk"] > 60.0:
        recommendations.append(
            f"Reduce braking lock ({braking_lock:g}%) - high lockup risk"
        )
    elif braking_lock < 20.0:
        recommendations.append("Consider increasing braking lock for stability")
    if decel["engine_braking_effect"] < 3.0 and drive_type == DriveType.RWD:
        recommendations.append("Increase deceleration lock for trail braking control")
    if not recommendations:
        recommendations.append("Differential settings are well-balanced")

    return {
        "acceleration_traction": traction,
        "corner_exit_grip": round(exit_grip, 1),
        "braking_stability": braking["stability"],
        "understeer_tendency": round(understeer, 1),
        "drivability_rating": drivability,
        "description": (
            f"Traction: {traction:.1f}/10 | Exit: {exit_grip:.1f}/10 "
            f"| Stability: {braking['stability']:.1f}/10"
        ),
        "recommendations": recommendations,
    }


# ---------------------------------------------------------------------------
# Presets
# ---------------------------------------------------------------------------

# (accel, braking, decel) per (tune type, drivetrain).
_DIFF_PRESETS: dict[tuple[TuneType, DriveType], tuple[float, float, float]] = {
    (TuneType.GRIP, DriveType.FWD): (75.0, 40.0, 50.0),
    (TuneType.DRIFT, DriveType.FWD): (95.0, 30.0, 70.0),
    (TuneType.DRAG, DriveType.FWD): (100.0, 45.0, 50.0),
    (TuneType.OFFROAD, DriveType.FWD): (80.0, 50.0, 60.0),
    (TuneType.RALLY, DriveType.FWD): (85.0, 45.0, 65.0),
    (TuneType.GRIP, DriveType.RWD): (60.0, 50.0, 70.0),
    (TuneType.DRIFT, DriveType.RWD): (30.0, 40.0, 80.0),
    (TuneType.DRAG, DriveType.RWD): (90.0, 60.0, 50.0),
    (TuneType.OFFROAD, DriveType.RWD): (75.0, 55.0, 65.0),
    (TuneType.RALLY, DriveType.RWD): (70.0, 50.0, 75.0),
    (TuneType.GRIP, DriveType.AWD): (50.0, 40.0, 60.0),
    (TuneType.DRIFT, DriveType.AWD): (40.0, 30.0, 65.0),
    (TuneType.DRAG, DriveType.AWD): (80.0, 50.0, 55.0),
    (TuneType.OFFROAD, DriveType.AWD): (70.0, 50.0, 70.0),
    (TuneType.RALLY, DriveType.AWD): (65.0, 45.0, 70.0),
}
_DEFAULT_DIFF: tuple[float, float, float] = (50.0, 40.0, 60.0)


def optimize_differential_for(tune_type: TuneType, drive_type: DriveType) -> DifferentialSetup:
    """Analyzer preset for a driving style and drivetrain.

    Street has no dedicated preset and gets the neutral fallback.
    """
    accel, braking, decel = _DIFF_PRESETS.get((tune_type, drive_type), _DEFAULT_DIFF)
    return DifferentialSetup(accel_lock=accel, braking_lock=braking, decel_lock=decel)


def get_differential_recommendations(
    weight: float, horsepower: float, drive_type: DriveType, target_use: str
) -> dict[str, float]:
    """Suggested lock values from power-to-weight and intended use.

    Args:
        weight: Car weight in lbs.
        horsepower: Engine output in hp.
        drive_type: Drivetrain.
        target_use: ``"street"``, ``"circuit"`` or ``"mixed"``.

    Returns:
        Partial mapping of ``accel_lock``, ``braking_lock`` and
        ``decel_lock``; braking and decel are omitted for mixed use.
    """
    power_to_weight: float = horsepower / (weight / 1000.0)
    fwd = drive_type == DriveType.FWD
    if power_to_weight > 0.3:
        accel = 80.0 if fwd else 65.0
    elif power_to_weight > 0.2:
        accel = 70.0 if fwd else 55.0
    else:
        accel = 60.0 if fwd else 45.0

    recommendation: dict[str, float] = {"accel_lock": accel}
    if target_use == "circuit":
        recommendation.update(braking_lock=50.0, decel_lock=70.0)
    elif target_use == "street":
        recommendation.update(braking_lock=35.0, decel_lock=55.0)
    return recommendation
