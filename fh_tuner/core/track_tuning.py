"""Track-specific adjustments layered on top of a generated tune.

A route's technicality, speed profile, straights, elevation and surface
are turned into multiplicative factors and offsets.  They are applied to
an existing :class:`TuneSettings` and the result is clamped back into the
game ranges, so the generator's per-style presets stay the starting point.
"""

from __future__ import annotations

from dataclasses import dataclass, replace

import structlog

from fh_tuner.core.calculator import calculate_tune
from fh_tuner.core.car import CarSpecs, TireCompound, TuneType
from fh_tuner.core.track import Track
from fh_tuner.core.tune import TuneSettings

logger = structlog.get_logger(__name__)

# Tune aero units moved per degree of wing angle.
AERO_UNITS_PER_WING_DEGREE: float = 2.0

# Power-to-weight (hp per 1000 lbs) above which technical routes get less
# acceleration lock.
HIGH_POWER_TO_WEIGHT: float = 200.0

_SELF_SPRUNG_TUNE_TYPES: tuple[TuneType, ...] = (TuneType.DRAG, TuneType.DRIFT)


@dataclass(frozen=True)
class TrackAdjustments:
    """Changes one route asks of a tune.

    Factors multiply the tune's value; offsets are added to it.

    Attributes:
        spring_factor: Applied to both spring rates.
        arb_front_factor: Front anti-roll bar multiplier.
        arb_rear_factor: Rear anti-roll bar multiplier.
        ride_height_front: Inches added at the front.
        ride_height_rear: Inches added at the rear.
        wing_front: Front wing change in degrees.
        wing_rear: Rear wing change in degrees.
        downforce_target: ``"low"``, ``"medium"`` or ``"high"``.
        tire_compound: Compound suited to the route.
        pressure_front: PSI added at the front.
        pressure_rear: PSI added at the rear.
        final_drive_factor: Above 1 shortens the gearing.
        ratio_spread_factor: Below 1 tightens the gear spacing.
        brake_pressure_factor: Brake pressure multiplier.
        brake_bias_shift: Percentage points of bias moved to the front.
        accel_lock_factor: Acceleration lock multiplier.
        decel_lock_factor: Deceleration lock multiplier.
        reasoning: Why each change was made.
    """

    spring_factor: float = 1.0
    arb_front_factor: float = 1.0
    arb_rear_factor: float = 1.0
    ride_height_front: float = 0.0
    ride_height_rear: float = 0.0
    wing_front: float = 0.0
    wing_rear: float = 0.0
    downforce_target: str = "medium"
    tire_compound: TireCompound = TireCompound.SPORT
    pressure_front: float = 0.0
    pressure_rear: float = 0.0
    final_drive_factor: float = 1.0
    ratio_spread_factor: float = 1.0
    brake_pressure_factor: float = 1.0
    brake_bias_shift: float = 0.0
    accel_lock_factor: float = 1.0
    decel_lock_factor: float = 1.0
    reasoning: tuple[str, ...] = ()


# ---------------------------------------------------------------------------
# Adjustments
# ---------------------------------------------------------------------------


def calculate_track_adjustments(
    track: Track, weight: float, horsepower: float, tune_type: TuneType
) -> TrackAdjustments:
    """Work out what *track* asks of a *tune_type* tune on a given car.

    Args:
        track: Route being driven.
        weight: Car weight in lbs (> 0).
        horsepower: Engine output in hp.
        tune_type: Driving style of the base tune.  Drag and drift tunes
            keep their own spring and ARB stiffness.

    Returns:
        A :class:`TrackAdjustments`.

    Raises:
        ValueError: If *weight* is not positive.
    """
    if weight <= 0.0:
        raise ValueError("weight must be > 0.")
    reasoning: list[str] = []
    profile = track.speed_profile

    # Suspension
    spring, arb_front, arb_rear = 1.0, 1.0, 1.0
    if tune_type in _SELF_SPRUNG_TUNE_TYPES:
        reasoning.append(
            f"{tune_type.value.capitalize()} tune - Keeping its own spring and ARB stiffness"
        )
    elif track.technicality > 6:
        spring, arb_front, arb_rear = 1.15, 1.1, 1.15
        reasoning.append(
            f"High technicality ({track.technicality}/10) - Stiffer suspension for precision"
        )
    elif track.technicality < 3:
        spring, arb_front, arb_rear = 0.9, 0.85, 0.85
        reasoning.append("Low technicality - Softer suspension for flow and speed")

    ride_front, ride_rear = 0.0, 0.0
    if profile == "high-speed":
        ride_front, ride_rear = -1.0, -0.8
        reasoning.append("High-speed track - Lower ride height for better aerodynamics")
    elif profile == "technical":
        ride_front, ride_rear = 0.5, 0.5
        reasoning.append("Technical track - Higher ride height for clearance")

    if track.max_elevation_gain > 1500.0 and tune_type not in _SELF_SPRUNG_TUNE_TYPES:
        spring *= 1.05
        reasoning.append("High elevation changes - Slightly stiffer springs for consistency")

    # Aero
    downforce_target = "medium"
    wing_front, wing_rear = 0.0, 0.0
    if profile == "high-speed":
        downforce_target, wing_front, wing_rear = "low", -15.0, -12.0
        reasoning.append("High-speed track - Reduce wing angles to maximize top speed")
    elif profile == "technical":
        downforce_target, wing_front, wing_rear = "high", 15.0, 20.0
        reasoning.append("Technical track - Increase downforce for cornering stability")
    if track.straightaway_length > 2.0:
        wing_front -= 5.0
        wing_rear -= 5.0
        reasoning.append("Long straights - Reduce downforce for acceleration")

    # Tyres
    compound = TireCompound.SPORT
    pressure = 0.0
    if track.surface_type in ("dirt", "gravel"):
        if track.type == "offroad":
            compound, pressure = TireCompound.OFFROAD, -3.0
        else:
            compound, pressure = TireCompound.RALLY, -1.5
        reasoning.append(
            f"{track.surface_type} surface - Using {compound.value} compound with lower pressures"
        )
    elif track.type == "drag":
        compound, pressure = TireCompound.DRAG, 5.0
        reasoning.append("Drag track - Maximum tire pressure for launch grip")
    elif profile == "high-speed":
        compound, pressure = TireCompound.SEMI_SLICK, 0.5
        reasoning.append("High-speed circuit - Semi-slick compound with elevated pressure")

    # Gearing
    final_drive, spread = 1.0, 1.0
    if profile == "high-speed":
        final_drive = 0.92
        reasoning.append("High-speed track - Longer final drive for top speed")
    elif profile == "technical":
        final_drive, spread = 1.08, 0.95
        reasoning.append("Technical track - Shorter gearing for corner exit acceleration")
    if track.max_elevation_gain > 2000.0:
        final_drive *= 1.02
        reasoning.append("High elevation - Slightly shorter gearing for climbs")

    # Brakes
    brake_pressure, bias_shift = 1.0, 0.0
    if track.technicality > 6:
        brake_pressure, bias_shift = 1.05, 2.0
        reasoning.append("Technical track with tight corners - Slight front brake bias")
    if track.straightaway_length > 3.0:
        bias_shift = 1.0
        reasoning.append("Long straights - Balanced brake setup")

    # Differential
    accel_lock, decel_lock = 1.0, 1.0
    if profile == "technical":
        accel_lock = 1.1
        reasoning.append("Technical track - Increased acceleration lock for traction")
        if horsepower / (weight / 1000.0) > HIGH_POWER_TO_WEIGHT:
            accel_lock = 1.05
            reasoning.append("High power-to-weight - Less acceleration lock to limit wheelspin")
    if track.surface_type in ("mixed", "dirt"):
        accel_lock, decel_lock = 1.15, 0.85
        reasoning.append("Mixed surface - Adjusted differential settings for traction")

    return TrackAdjustments(
        spring_factor=round(spring, 2),
        arb_front_factor=round(arb_front, 2),
        arb_rear_factor=round(arb_rear, 2),
        ride_height_front=ride_front,
        ride_height_rear=ride_rear,
        wing_front=wing_front,
        wing_rear=wing_rear,
        downforce_target=downforce_target,
        tire_compound=compound,
        pressure_front=pressure,
        pressure_rear=pressure,
        final_drive_factor=round(final_drive, 2),
        ratio_spread_factor=spread,
        brake_pressure_factor=brake_pressure,
        brake_bias_shift=bias_shift,
        accel_lock_factor=accel_lock,
        decel_lock_factor=decel_lock,
        reasoning=tuple(reasoning),
    )


def _scale(value: float | None, factor: float) -> float | None:
    return None if value is None else value * factor


def apply_track_adjustments(tune: TuneSettings, adjustments: TrackAdjustments) -> TuneSettings:
    """Return a copy of *tune* with *adjustments* applied and clamped.

    Aero is only moved on tunes that already run some downforce at that
    end.  Gear spacing is scaled around the top gear, which keeps its
    ratio.  The input tune is not modified.
    """
    adj = adjustments
    aero_front = tune.aero_front
    if aero_front > 0.0:
        aero_front += adj.wing_front * AERO_UNITS_PER_WING_DEGREE
    aero_rear = tune.aero_rear
    if aero_rear > 0.0:
        aero_rear += adj.wing_rear * AERO_UNITS_PER_WING_DEGREE

    gears = list(tune.gear_ratios)
    if gears and adj.ratio_spread_factor != 1.0:
        top = gears[-1]
        gears = [round(top * (g / top) ** adj.ratio_spread_factor, 2) for g in gears]

    adjusted = replace(
        tune.copy(),
        springs_front=float(round(tune.springs_front * adj.spring_factor)),
        springs_rear=float(round(tune.springs_rear * adj.spring_factor)),
        arb_front=round(tune.arb_front * adj.arb_front_factor, 1),
        arb_rear=round(tune.arb_rear * adj.arb_rear_factor, 1),
        ride_height_front=tune.ride_height_front + adj.ride_height_front,
        ride_height_rear=tune.ride_height_rear + adj.ride_height_rear,
        aero_front=aero_front,
        aero_rear=aero_rear,
        tire_pressure_front=tune.tire_pressure_front + adj.pressure_front,
        tire_pressure_rear=tune.tire_pressure_rear + adj.pressure_rear,
        final_drive=round(tune.final_drive * adj.final_drive_factor, 2),
        gear_ratios=gears,
        brake_pressure=round(tune.brake_pressure * adj.brake_pressure_factor, 1),
        brake_balance=tune.brake_balance + adj.brake_bias_shift,
        diff_accel_rear=tune.diff_accel_rear * adj.accel_lock_factor,
        diff_decel_rear=tune.diff_decel_rear * adj.decel_lock_factor,
        diff_accel_front=_scale(tune.diff_accel_front, adj.accel_lock_factor),
        diff_decel_front=_scale(tune.diff_decel_front, adj.decel_lock_factor),
    )
    return adjusted.clamped()


def calculate_track_tune(specs: CarSpecs, tune_type: TuneType, track: Track) -> TuneSettings:
    """Generate a *tune_type* tune for *specs* and fit it to *track*."""
    adjustments = calculate_track_adjustments(
        track, specs.weight, specs.effective_horsepower, tune_type
    )
    tune = apply_track_adjustments(calculate_tune(specs, tune_type), adjustments)
    logger.info(
        "track_tune_generated",
        track_id=track.id,
        tune_type=tune_type.value,
        changes=len(adjustments.reasoning),
    )
    return tune


def track_summary(track: Track) -> str:
    """One-line description: name, type, length, technicality, profile, tips."""
    parts = [
        f"{track.name} ({track.type})",
        f"Length: {track.length} miles",
        f"Technicality: {track.technicality}/10",
        f"Profile: {track.speed_profile}",
    ]
    if track.notes:
        parts.append(f"Tips: {', '.join(track.notes[:2])}")
    return " | ".join(parts)
