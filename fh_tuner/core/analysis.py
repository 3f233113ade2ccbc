"""Run every subsystem analyzer over one tune.

The per-subsystem modules each judge a slice of the setup (alignment,
differential, brakes, gearing, springs, load transfer).  This module reads
those slices out of a :class:`TuneSettings` and collects the verdicts in
one report, keyed by subsystem.
"""

from __future__ import annotations

from typing import Any

import structlog

from fh_tuner.core.brakes import BrakeSetup, analyze_brake_setup
from fh_tuner.core.car import CarSpecs
from fh_tuner.core.differential import DifferentialSetup, analyze_differential
from fh_tuner.core.gearing import GearSetup, analyze_gearing
from fh_tuner.core.geometry import GeometrySetup, analyze_geometry
from fh_tuner.core.load_transfer import (
    VehicleSetup,
    analyze_balance_bias,
    static_weight_split,
)
from fh_tuner.core.predictor import COMPOUND_GRIP
from fh_tuner.core.suspension import analyze_suspension_stiffness, calculate_lltd
from fh_tuner.core.tune import TuneSettings

logger = structlog.get_logger(__name__)

# Driving state the brake and load-transfer verdicts are taken at.
ANALYSIS_SPEED_MPH: float = 100.0
ANALYSIS_LATERAL_G: float = 1.0

SUBSYSTEMS: tuple[str, ...] = (
    "geometry",
    "differential",
    "brakes",
    "gearing",
    "suspension",
    "load_transfer",
)


def analyze_tune(
    specs: CarSpecs, tune: TuneSettings, speed: float = ANALYSIS_SPEED_MPH
) -> dict[str, dict[str, Any]]:
    """Analyze each subsystem of *tune* on the car described by *specs*.

    Args:
        specs: Car the tune is for.
        tune: Setup to judge.
        speed: Speed in mph the brakes are judged at.

    Returns:
        One entry per name in :data:`SUBSYSTEMS`.  ``suspension`` merges the
        spring stiffness verdict with the roll stiffness split under
        ``lltd``; ``load_transfer`` holds the ``cornering`` balance and the
        ``static`` axle weights.  A tune without gear ratios has no
        ``gearing`` entry.
    """
    horsepower = specs.effective_horsepower
    grip = COMPOUND_GRIP.get(specs.tire_compound, 1.0)

    report: dict[str, dict[str, Any]] = {
        "geometry": analyze_geometry(GeometrySetup.from_tune(tune)),
        "differential": analyze_differential(
            DifferentialSetup.from_tune(tune, specs.drive_type),
            specs.drive_type,
            horsepower,
            specs.weight,
            tire_grip=grip,
        ),
        "brakes": analyze_brake_setup(
            BrakeSetup.from_tune(tune), speed, specs.weight, tire_grip=grip
        ),
    }
    if tune.gear_ratios:
        report["gearing"] = analyze_gearing(GearSetup.from_tune(tune), horsepower, specs.weight)

    suspension = analyze_suspension_stiffness(tune.springs_front, tune.springs_rear, specs.weight)
    suspension["lltd"] = calculate_lltd(
        tune.springs_front, tune.springs_rear, tune.arb_front, tune.arb_rear
    )
    report["suspension"] = suspension

    vehicle = VehicleSetup(
        weight=specs.weight,
        weight_distribution=specs.weight_distribution,
        springs_front=tune.springs_front,
        springs_rear=tune.springs_rear,
        arb_front=tune.arb_front,
        arb_rear=tune.arb_rear,
    )
    report["load_transfer"] = {
        "cornering": analyze_balance_bias(vehicle, ANALYSIS_LATERAL_G),
        "static": static_weight_split(vehicle),
    }

    logger.debug("tune_analyzed", subsystems=sorted(report))
    return report


def collect_recommendations(report: dict[str, dict[str, Any]]) -> list[tuple[str, str]]:
    """Flatten the analyzers' suggestions into ``(subsystem, text)`` pairs."""
    pairs: list[tuple[str, str]] = []
    for name in SUBSYSTEMS:
        for text in report.get(name, {}).get("recommendations", []):
            pairs.append((name, text))
    return pairs
