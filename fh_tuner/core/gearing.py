"""Gearing analyzer: spacing, redline speeds, acceleration and top speed.

Uses the gear-aware estimator family from :mod:`fh_tuner.core.performance`
because here final drive and first gear are the inputs being judged.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import numpy as np

from fh_tuner.core.car import TuneType
from fh_tuner.core.performance import (
    estimate_top_speed_geared,
    estimate_zero_to_hundred,
    estimate_zero_to_sixty_geared,
)
from fh_tuner.core.physics import DEFAULT_REDLINE_RPM, DEFAULT_TIRE_RADIUS, speed_at_rpm
from fh_tuner.core.tune import TuneSettings, clamp_field

# Final drive range searched by find_optimal_final_drive.
_MIN_SEARCH_FINAL_DRIVE: float = 2.5
_MAX_SEARCH_FINAL_DRIVE: float = 5.5

_USES: tuple[str, ...] = ("acceleration", "topSpeed", "balanced", "technical", "drag")


@dataclass(frozen=True)
class GearSetup:
    """Final drive plus individual gear ratios, first gear first."""

    final_drive: float
    gears: tuple[float, ...]

    def __post_init__(self) -> None:
        if not self.gears:
            raise ValueError("GearSetup needs at least one gear ratio.")

    @property
    def gear_count(self) -> int:
        return len(self.gears)

    @classmethod
    def from_tune(cls, tune: TuneSettings) -> GearSetup:
        return cls(final_drive=tune.final_drive, gears=tuple(tune.gear_ratios))


# ---------------------------------------------------------------------------
# Ratio arithmetic
# ---------------------------------------------------------------------------


def redline_speeds(
    gear_ratios: list[float] | tuple[float, ...],
    final_drive: float,
    redline_rpm: float = DEFAULT_REDLINE_RPM,
    tire_radius: float = DEFAULT_TIRE_RADIUS,
) -> list[float]:
    """Speed in mph at redline in each gear."""
    return [speed_at_rpm(redline_rpm, ratio, final_drive, tire_radius) for ratio in gear_ratios]


def gear_spacing(gear_ratios: list[float] | tuple[float, ...]) -> dict[str, Any]:
    """Step ratios between consecutive gears and how even they are.

    A step of 1.15-1.35 gives smooth power delivery.

    Returns:
        Dictionary containing:
            spacings -- ``gear[i] / gear[i + 1]`` for each pair.
            avg_spacing -- Mean step, 3 decimals.
            uniformity -- 0-10, ``10 - 5 * stddev`` floored at 0.
    """
    if len(gear_ratios) < 2:
        return {"spacings": [], "avg_spacing": 1.0, "uniformity": 10.0}

    ratios = np.asarray(gear_ratios, dtype=float)
    spacings = ratios[:-1] / ratios[1:]
    uniformity: float = max(0.0, 10.0 - float(np.std(spacings)) * 5.0)
    return {
        "spacings": [float(s) for s in spacings],
        "avg_spacing": round(float(np.mean(spacings)), 3),
        "uniformity": round(uniformity, 1),
    }


def _gearing_character(final_drive: float) -> str:
    if final_drive > 4.5:
        return f"Very short gearing ({final_drive:.2f}) - Extreme acceleration focus"
    if final_drive > 4.0:
        return f"Short gearing ({final_drive:.2f}) - Acceleration optimized"
    if final_drive > 3.5:
        return f"Moderately short ({final_drive:.2f}) - Balanced"
    if final_drive > 3.0:
        return f"Moderately long ({final_drive:.2f}) - Speed oriented"
    return f"Long gearing ({final_drive:.2f}) - Maximum top speed"


# ---------------------------------------------------------------------------
# Analysis
# ---------------------------------------------------------------------------


def analyze_gearing(
    setup: GearSetup,
    horsepower: float,
    weight: float,
    drag_coefficient: float = 0.30,
) -> dict[str, Any]:
    """Acceleration, top speed and spacing verdict for a gear set.

    Final drive and gear ratios outside the game limits are clamped.

    Returns:
        Dictionary containing:
            zero_to_sixty -- Seconds, from first gear and final drive.
            zero_to_hundred -- Seconds.
            acceleration_rating -- 0-10, ``10 - zero_to_sixty``.
            top_speed -- Drag and final-drive limited, mph.
            spacing -- Output of :func:`gear_spacing`.
            power_delivery -- ``"smooth"``, ``"balanced"`` or ``"aggressive"``.
            gearing_character -- Final-drive description.
            track_suitability -- ``high_speed``, ``technical`` and ``balanced``
                scores (0-10).
            recommendations -- Adjustment suggestions.
    """
    final_drive = clamp_field("final_drive", setup.final_drive)
    gears = [clamp_field("gear_ratio", g) for g in setup.gears]

    zero_to_sixty = estimate_zero_to_sixty_geared(horsepower, weight, gears[0], final_drive)
    rating: float = max(0.0, min(10.0, 10.0 - zero_to_sixty))
    top_speed = estimate_top_speed_geared(horsepower, weight, drag_coefficient, final_drive)
    spacing = gear_spacing(gears)

    power_delivery = "balanced"
    if spacing["avg_spacing"] < 1.15:
        power_delivery = "smooth"
    elif spacing["avg_spacing"] > 1.25:
        power_delivery = "aggressive"

    recommendations: list[str] = []
    if zero_to_sixty > 5.5:
        recommendations.append("Shorter gearing recommended for better acceleration")
    elif zero_to_sixty < 3.5:
        recommendations.append("Could extend gearing for better top speed")
    if spacing["avg_spacing"] < 1.10:
        recommendations.append("Gears are too close together - less efficient power delivery")
    elif spacing["avg_spacing"] > 1.35:
        recommendations.append("Gears are too spread out - gaps in power band")
    if top_speed < 120.0 and final_drive > 4.0:
        recommendations.append("Current gearing may limit top speed too much")
    if not recommendations:
        recommendations.append("Gearing is well-optimized for current setup")

    return {
        "zero_to_sixty": zero_to_sixty,
        "zero_to_hundred": estimate_zero_to_hundred(zero_to_sixty),
        "acceleration_rating": round(rating, 1),
        "top_speed": top_speed,
        "spacing": spacing,
        "power_delivery": power_delivery,
        "gearing_character": _gearing_character(final_drive),
        "track_suitability": {
            "high_speed": round(max(0.0, min(10.0, 10.0 - zero_to_sixty * 0.5)), 1),
            "technical": round(rating, 1),
            "balanced": round(5.0 + spacing["uniformity"] / 2.0, 1),
        },
        "recommendations": recommendations,
    }


# ---------------------------------------------------------------------------
# Presets and search
# ---------------------------------------------------------------------------

# Six-speed reference ratios per use.
_GEAR_PRESETS: dict[str, tuple[float, ...]] = {
    "acceleration": (3.5, 2.5, 1.8, 1.3, 1.0, 0.75),
    "topSpeed": (3.0, 2.2, 1.6, 1.2, 0.95, 0.70),
    "balanced": (3.2, 2.3, 1.7, 1.25, 0.95, 0.72),
    "technical": (3.4, 2.4, 1.75, 1.28, 0.97, 0.73),
    "drag": (3.8, 2.7, 1.9, 1.4, 1.0, 0.75),
}


def _resample_ratios(ratios: tuple[float, ...], gear_count: int) -> tuple[float, ...]:
    """Stretch a six-speed preset to *gear_count* gears on a geometric ladder."""
    if gear_count == len(ratios):
        return ratios
    ladder = np.geomspace(ratios[0], ratios[-1], num=gear_count)
    return tuple(round(float(r), 2) for r in ladder)


def optimize_gearing_for(
    use: str, horsepower: float, weight: float, gear_count: int = 6
) -> GearSetup:
    """Preset gearing for ``acceleration``, ``topSpeed``, ``balanced``,
    ``technical`` or ``drag``.

    Unknown uses get the balanced preset.  Final drive for acceleration and
    drag shortens further on cars above 0.3 / 0.25 hp per lb x 1000.
    """
    power_to_weight: float = horsepower / (weight / 1000.0)
    if use == "acceleration":
        final_drive = 4.5 if power_to_weight > 0.3 else 4.2
    elif use == "topSpeed":
        final_drive = 3.2
    elif use == "technical":
        final_drive = 4.0
    elif use == "drag":
        final_drive = 5.0 if power_to_weight > 0.25 else 4.7
    else:
        final_drive = 3.7
    gears = _GEAR_PRESETS.get(use, _GEAR_PRESETS["balanced"])
    return GearSetup(final_drive=final_drive, gears=_resample_ratios(gears, gear_count))


def find_optimal_final_drive(
    target_top_speed: float,
    horsepower: float,
    weight: float,
    drag_coefficient: float = 0.30,
) -> float:
    """Final drive (2.5-5.5) whose geared top speed lands near the target.

    Starts at 3.5 and takes up to five 5 % steps, stopping once within
    2 mph.
    """
    final_drive: float = 3.5
    for _ in range(5):
        current = estimate_top_speed_geared(horsepower, weight, drag_coefficient, final_drive)
        if abs(current - target_top_speed) < 2.0:
            break
        final_drive *= 0.95 if current < target_top_speed else 1.05
        final_drive = max(_MIN_SEARCH_FINAL_DRIVE, min(_MAX_SEARCH_FINAL_DRIVE, final_drive))
    return round(final_drive, 2)


def get_gearing_recommendations(
    tune_type: TuneType, horsepower: float, weight: float, is_awd: bool = False
) -> dict[str, Any]:
    """Pick a gearing use for a tune type and explain the choice.

    Returns:
        Dictionary containing:
            condition -- The chosen use key.
            setup -- The :class:`GearSetup` for that use.
            redline_speeds -- Speed at redline in each gear.
            reasoning -- Explanation strings.
    """
    power_to_weight: float = horsepower / (weight / 1000.0)
    reasoning: list[str] = []

    if tune_type == TuneType.DRAG:
        condition = "drag"
        reasoning.append("Drag racing optimized for maximum launch acceleration")
    elif tune_type == TuneType.DRIFT:
        condition = "acceleration"
        reasoning.append("Drift setup benefits from aggressive acceleration for entry")
    elif tune_type in (TuneType.RALLY, TuneType.OFFROAD):
        condition = "technical"
        reasoning.append("Off-road requires excellent mid-range acceleration")
    elif tune_type == TuneType.STREET:
        condition = "balanced"
        reasoning.append("Street driving benefits from balanced gearing")
    else:
        condition = "balanced"
        reasoning.append("Circuit racing requires balanced acceleration and top speed")

    if power_to_weight > 0.3:
        reasoning.append(f"High power ({power_to_weight:.2f} hp/lb) - Using aggressive gearing")
    elif power_to_weight < 0.15:
        reasoning.append(f"Lower power ({power_to_weight:.2f} hp/lb) - Using longer gears for efficiency")
    if is_awd:
        reasoning.append("AWD drivetrain allows more aggressive gearing without wheelspin")

    setup = optimize_gearing_for(condition, horsepower, weight)
    return {
        "condition": condition,
        "setup": setup,
        "redline_speeds": redline_speeds(setup.gears, setup.final_drive),
        "reasoning": reasoning,
    }
