"""Physics-based suspension sizing: springs, dampers, roll balance.

Springs are sized from target ride frequencies, dampers from target
damping ratios, and the front/rear roll-stiffness split (LLTD) predicts
whether a spring/ARB combination leans toward understeer or oversteer.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any

from fh_tuner.core.car import CarSpecs, PIClass, TuneType
from fh_tuner.core.physics import natural_frequency
from fh_tuner.core.tune import TuneSettings

# Slug conversion used by the spring/damper sizing (ft/s^2).
_G_FT: float = 32.174

# ---------------------------------------------------------------------------
# Target tables
# ---------------------------------------------------------------------------

# Target ride frequency (Hz) per tune type, (front, rear).
FREQUENCY_TARGETS: dict[TuneType, tuple[float, float]] = {
    TuneType.STREET: (1.35, 1.25),
    TuneType.GRIP: (2.25, 2.05),
    TuneType.DRIFT: (2.05, 1.85),
    TuneType.RALLY: (1.65, 1.55),
    TuneType.OFFROAD: (1.35, 1.25),
    TuneType.DRAG: (2.55, 1.45),
}

# Target damping ratio per tune type, (rebound, bump).
DAMPING_RATIO_TARGETS: dict[TuneType, tuple[float, float]] = {
    TuneType.STREET: (0.62, 0.38),
    TuneType.GRIP: (0.68, 0.42),
    TuneType.DRIFT: (0.58, 0.32),
    TuneType.RALLY: (0.70, 0.44),
    TuneType.OFFROAD: (0.75, 0.48),
    TuneType.DRAG: (0.72, 0.52),
}

# Faster classes run stiffer: frequency scale per PI class.
_PI_FREQUENCY_SCALE: dict[PIClass, float] = {
    PIClass.D: 0.82,
    PIClass.C: 0.88,
    PIClass.B: 0.94,
    PIClass.A: 1.00,
    PIClass.S1: 1.08,
    PIClass.S2: 1.15,
    PIClass.X: 1.22,
}


@dataclass(frozen=True)
class SurfaceModifier:
    """Terrain adjustment applied on top of a generated tune."""

    spring: float
    damping: float
    pressure: float
    diff: float
    description: str


SURFACE_MODIFIERS: dict[str, SurfaceModifier] = {
    "tarmac": SurfaceModifier(1.00, 1.00, 0.0, 0.0, "Dry tarmac - baseline settings"),
    "gravel": SurfaceModifier(
        0.85, 1.10, -2.0, 10.0, "Gravel - softer springs, higher diff lock"
    ),
    "mud": SurfaceModifier(
        0.75, 1.25, -4.0, 20.0, "Mud - very soft, maximum traction control"
    ),
    "sand": SurfaceModifier(
        0.70, 1.15, -6.0, 25.0, "Sand - flotation priority, locked diff"
    ),
    "snow": SurfaceModifier(
        0.80, 1.05, -3.0, 15.0, "Snow/Ice - moderate compliance, careful throttle"
    ),
    "wet": SurfaceModifier(
        0.95, 1.02, 1.0, 5.0, "Wet tarmac - slight pressure increase for drainage"
    ),
}

# ---------------------------------------------------------------------------
# Springs and dampers
# ---------------------------------------------------------------------------


def calculate_spring_from_frequency(
    corner_weight: float, target_frequency: float
) -> dict[str, float]:
    """Spring rate for one corner from its target natural frequency.

    ``k = m * (2*pi*f)^2`` in lb/ft, converted to lb/in.

    Returns:
        Dictionary containing:
            spring_rate -- Spring rate in lb/in (whole number).
            frequency -- The target frequency echoed back.
            critical_damping -- ``2 * sqrt(k * m)`` in lb*s/ft.
    """
    mass: float = corner_weight / _G_FT
    omega: float = 2.0 * math.pi * target_frequency
    rate_lb_ft: float = mass * omega * omega
    return {
        "spring_rate": float(round(rate_lb_ft / 12.0)),
        "frequency": target_frequency,
        "critical_damping": round(2.0 * math.sqrt(rate_lb_ft * mass), 2),
    }


def damping_from_ratio(
    spring_rate: float, corner_weight: float, ratio: float
) -> float:
    """Damper setting (1-20) for a damping *ratio* on the given corner.

    A critical damping coefficient of 200 maps to a setting of 10.
    """
    mass: float = corner_weight / _G_FT
    critical: float = 2.0 * math.sqrt(max(0.0, spring_rate * 12.0 * mass))
    value: float = round(ratio * critical / 200.0 * 10.0)
    return float(max(1, min(20, value)))


def physics_based_springs(specs: CarSpecs, tune_type: TuneType) -> dict[str, float]:
    """Size front and rear springs from target frequencies.

    Corner weights come from the car's weight and distribution; the
    frequency targets are scaled up for faster PI classes.

    Returns:
        Dictionary containing:
            front -- Front spring rate in lb/in.
            rear -- Rear spring rate in lb/in.
            front_frequency -- Scaled front target in Hz.
            rear_frequency -- Scaled rear target in Hz.
    """
    front_weight: float = specs.weight * specs.weight_distribution / 100.0
    rear_weight: float = specs.weight - front_weight
    target_front, target_rear = FREQUENCY_TARGETS[tune_type]
    scale: float = _PI_FREQUENCY_SCALE.get(specs.pi_class, 1.0)

    front = calculate_spring_from_frequency(front_weight / 2.0, target_front * scale)
    rear = calculate_spring_from_frequency(rear_weight / 2.0, target_rear * scale)
    return {
        "front": front["spring_rate"],
        "rear": rear["spring_rate"],
        "front_frequency": round(target_front * scale, 2),
        "rear_frequency": round(target_rear * scale, 2),
    }


def physics_based_dampers(
    specs: CarSpecs, tune_type: TuneType, springs: dict[str, float]
) -> dict[str, float]:
    """Rebound and bump settings for springs from :func:`physics_based_springs`."""
    rebound_ratio, bump_ratio = DAMPING_RATIO_TARGETS[tune_type]
    front_corner: float = specs.weight * specs.weight_distribution / 200.0
    rear_corner: float = specs.weight * specs.rear_distribution / 200.0
    return {
        "rebound_front": damping_from_ratio(springs["front"], front_corner, rebound_ratio),
        "rebound_rear": damping_from_ratio(springs["rear"], rear_corner, rebound_ratio),
        "bump_front": damping_from_ratio(springs["front"], front_corner, bump_ratio),
        "bump_rear": damping_from_ratio(springs["rear"], rear_corner, bump_ratio),
    }


# ---------------------------------------------------------------------------
# Roll balance
# ---------------------------------------------------------------------------


def calculate_lltd(
    springs_front: float,
    springs_rear: float,
    arb_front: float,
    arb_rear: float,
    track_width: float = 60.0,
) -> dict[str, Any]:
    """Lateral load transfer distribution from springs and anti-roll bars.

    Spring roll stiffness scales with ``k * track_width^2``; each ARB step
    is worth 50 lb/in.  Above 52 % front the car tends to understeer,
    below 48 % to oversteer.

    Returns:
        Dictionary containing:
            lltd_percent -- Front share of roll stiffness.
            balance -- ``"understeer"``, ``"neutral"`` or ``"oversteer"``.
            description -- Human-readable summary.
            front_roll_stiffness -- Front roll stiffness (arbitrary units).
            rear_roll_stiffness -- Rear roll stiffness (arbitrary units).
    """
    width_sq: float = track_width * track_width
    front: float = springs_front * width_sq / 1000.0 + arb_front * 50.0
    rear: float = springs_rear * width_sq / 1000.0 + arb_rear * 50.0
    total: float = front + rear
    lltd: float = front / total * 100.0 if total > 0.0 else 50.0

    if lltd > 52.0:
        balance = "understeer"
        description = f"Front-heavy roll stiffness ({lltd:.1f}%) tends toward understeer"
    elif lltd < 48.0:
        balance = "oversteer"
        description = f"Rear-heavy roll stiffness ({lltd:.1f}%) tends toward oversteer"
    else:
        balance = "neutral"
        description = f"Balanced roll stiffness ({lltd:.1f}%) provides neutral handling"

    return {
        "lltd_percent": round(lltd, 1),
        "balance": balance,
        "description": description,
        "front_roll_stiffness": round(front),
        "rear_roll_stiffness": round(rear),
    }


def analyze_suspension_stiffness(
    springs_front: float, springs_rear: float, weight: float
) -> dict[str, Any]:
    """Ride frequencies and balance for a spring pair on a 60/40 car."""
    front_freq: float = natural_frequency(springs_front, weight * 0.6)
    rear_freq: float = natural_frequency(springs_rear, weight * 0.4)

    balance = "balanced"
    if front_freq > rear_freq + 0.15:
        balance = "front-stiff"
    if rear_freq > front_freq + 0.15:
        balance = "rear-stiff"

    recommendations: list[str] = []
    if front_freq < 0.8:
        recommendations.append("Front springs too soft - increase rate for better response")
    if front_freq > 1.3:
        recommendations.append("Front springs too stiff - may cause harshness")
    if rear_freq < 0.8:
        recommendations.append("Rear springs too soft - increase rate for stability")
    if rear_freq > 1.3:
        recommendations.append("Rear springs too stiff - may cause instability")
    if balance == "front-stiff":
        recommendations.append("Front-biased stiffness: May cause understeer on entry")
    elif balance == "rear-stiff":
        recommendations.append("Rear-biased stiffness: May cause oversteer on exit")
    if not recommendations:
        recommendations.append("Suspension stiffness well-balanced")

    return {
        "front_frequency": front_freq,
        "rear_frequency": rear_freq,
        "balance": balance,
        "description": f"Front: {front_freq}Hz, Rear: {rear_freq}Hz ({balance})",
        "recommendations": recommendations,
    }


# ---------------------------------------------------------------------------
# Surface adaptation
# ---------------------------------------------------------------------------


def apply_surface_modifiers(tune: TuneSettings, surface: str) -> TuneSettings:
    """Adapt springs, pressures and rear diff to a driving surface.

    Unknown surfaces are treated as tarmac.  The input is not modified.
    """
    mod = SURFACE_MODIFIERS.get(surface, SURFACE_MODIFIERS["tarmac"])
    adapted = tune.copy()
    adapted.springs_front = float(round(tune.springs_front * mod.spring))
    adapted.springs_rear = float(round(tune.springs_rear * mod.spring))
    adapted.tire_pressure_front = round(tune.tire_pressure_front + mod.pressure, 1)
    adapted.tire_pressure_rear = round(tune.tire_pressure_rear + mod.pressure, 1)
    adapted.diff_accel_rear = tune.diff_accel_rear + mod.diff
    adapted.diff_decel_rear = tune.diff_decel_rear + round(mod.diff * 0.5)
    return adapted.clamped()


# ---------------------------------------------------------------------------
# Confidence
# ---------------------------------------------------------------------------


def calculate_tune_confidence(
    has_verified_specs: bool,
    has_aero: bool,
    is_extreme_pi: bool,
    has_custom_horsepower: bool,
) -> dict[str, Any]:
    """Confidence (50-85 %) in a generated tune given input completeness.

    Returns:
        Dictionary containing:
            confidence -- Percentage confidence.
            uncertainty_factors -- Reasons confidence was reduced.
            test_range -- ``(min, max)`` percent band worth testing around
                the suggested values.
    """
    confidence: int = 85
    factors: list[str] = []

    if not has_verified_specs:
        confidence -= 15
        factors.append("Using estimated car specs (not verified)")
    if has_aero and not has_custom_horsepower:
        confidence -= 8
        factors.append("Aero package details unknown")
    if is_extreme_pi:
        confidence -= 10
        factors.append("Extreme PI class - wider variance expected")
    if not has_custom_horsepower:
        confidence -= 5
        factors.append("Horsepower not specified")

    variance: int = round((100 - confidence) / 2)
    return {
        "confidence": max(50, confidence),
        "uncertainty_factors": factors,
        "test_range": (100 - variance, 100 + variance),
    }
