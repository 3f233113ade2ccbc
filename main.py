"""CLI entrypoint for the Forza Horizon tuning calculator."""

from __future__ import annotations

import sys

from fh_tuner import __version__
from fh_tuner.config import car_to_specs, get_car, get_track, load_cars, load_tracks
from fh_tuner.core.analysis import analyze_tune, collect_recommendations
from fh_tuner.core.calculator import calculate_tune
from fh_tuner.core.car import PIClass, TireCompound, TuneType, pi_class_for_rating
from fh_tuner.core.environment import EnvironmentPatch, TrackCondition
from fh_tuner.core.optimizer import MultiVariableOptimizer, OptimizationTarget
from fh_tuner.core.predictor import PerformancePredictor
from fh_tuner.core.track_tuning import (
    calculate_track_adjustments,
    calculate_track_tune,
    track_summary,
)
from fh_tuner.logging import setup_logging

_DEMO_CAR_ID = "alfa-giulia-2017"
_DEMO_TRACK_ID = "goliath"
_DEMO_HORSEPOWER = 505.0
_DEMO_SEED = 42


def main() -> int:
    """Generate, predict and optimize a tune for one sample car."""
    setup_logging("development")

    print(f"Forza Horizon Tuning Calculator v{__version__}")
    print("=" * 56)

    # -- Reference data -------------------------------------------------------
    print(f"\nReference data: {len(load_cars())} cars, {len(load_tracks())} tracks")

    model = get_car(_DEMO_CAR_ID)
    specs = car_to_specs(
        _DEMO_CAR_ID,
        horsepower=_DEMO_HORSEPOWER,
        tire_compound=TireCompound.SPORT,
    )
    if model is None or specs is None:
        print(f"Car '{_DEMO_CAR_ID}' is missing from the car table.")
        return 1

    track = get_track(_DEMO_TRACK_ID)
    tune_type = TuneType.GRIP
    if track is not None and track.recommended_tune_types:
        tune_type = TuneType(track.recommended_tune_types[0])
    pi_class: PIClass = pi_class_for_rating(model.default_pi)

    print(f"\nCar   : {model.display_name} ({model.drive_type.value}, {pi_class.value} class)")
    print(f"Track : {track.name if track else 'n/a'}")
    print(f"Tune  : {tune_type.value}")
    print("-" * 56)

    # -- Generated tune -------------------------------------------------------
    tune = calculate_tune(specs, tune_type)
    print("\nGenerated tune:\n")
    rows = [
        ("Tyre pressure (psi)", tune.tire_pressure_front, tune.tire_pressure_rear),
        ("Camber (deg)", tune.camber_front, tune.camber_rear),
        ("Anti-roll bars", tune.arb_front, tune.arb_rear),
        ("Springs (lb/in)", tune.springs_front, tune.springs_rear),
        ("Ride height (in)", tune.ride_height_front, tune.ride_height_rear),
        ("Rebound", tune.rebound_front, tune.rebound_rear),
        ("Bump", tune.bump_front, tune.bump_rear),
        ("Aero", tune.aero_front, tune.aero_rear),
    ]
    print(f"  {'Setting':<20}  {'Front':>8}  {'Rear':>8}")
    print(f"  {'-------':<20}  {'-----':>8}  {'----':>8}")
    for label, front, rear in rows:
        print(f"  {label:<20}  {front:8.2f}  {rear:8.2f}")
    print(f"\n  Final drive  : {tune.final_drive:.2f}")
    print(f"  Gears        : {', '.join(f'{g:.2f}' for g in tune.gear_ratios)}")
    print(f"  Diff (rear)  : accel {tune.diff_accel_rear:.0f}%  decel {tune.diff_decel_rear:.0f}%")
    print(f"  Brakes       : {tune.brake_note}")

    # -- Subsystem analysis ---------------------------------------------------
    report = analyze_tune(specs, tune)
    print("\nSubsystem analysis:\n")
    print(f"  Geometry     : {report['geometry']['description']}")
    print(f"  Differential : {report['differential']['description']}")
    print(f"  Brakes       : {report['brakes']['description']}")
    if "gearing" in report:
        print(f"  Gearing      : {report['gearing']['gearing_character']}")
    print(f"  Springs      : {report['suspension']['description']}")
    print(f"  Roll balance : {report['suspension']['lltd']['description']}")
    print(f"  Cornering    : {report['load_transfer']['cornering']['description']}")
    for subsystem, text in collect_recommendations(report):
        print(f"    [{subsystem}] {text}")

    # -- Track fit ------------------------------------------------------------
    if track is not None:
        print(f"\n{track_summary(track)}")
        adjustments = calculate_track_adjustments(
            track, specs.weight, specs.effective_horsepower, tune_type
        )
        track_tune = calculate_track_tune(specs, tune_type, track)
        for line in adjustments.reasoning:
            print(f"  - {line}")
        print(
            f"  Track tune: springs {track_tune.springs_front:.0f}/{track_tune.springs_rear:.0f}  "
            f"final drive {track_tune.final_drive:.2f}  "
            f"brake balance {track_tune.brake_balance:.0f}%"
        )

    # -- Prediction -----------------------------------------------------------
    predictor = PerformancePredictor(specs, tune)
    prediction = predictor.predict_performance(lap_progress=0.5)
    base = prediction.baseline
    print("\nPredicted performance (fresh / half distance):\n")
    print(f"  0-60 mph     : {base.zero_to_sixty:6.2f} s / {prediction.with_degradation.zero_to_sixty:6.2f} s")
    print(f"  Top speed    : {base.top_speed:6.1f} mph")
    print(f"  Handling     : {base.handling_score:6.2f} / {prediction.with_degradation.handling_score:6.2f}")
    print(f"  Confidence   : {prediction.confidence:.0%}")
    for factor in prediction.limiting_factors:
        print(f"  Limiting     : {factor}")

    predictor.update_environmental_conditions(EnvironmentPatch(track_conditions=TrackCondition.WET))
    wet = predictor.predict_performance()
    print("\nWet conditions impact:")
    for metric, delta in sorted(wet.environmental_impact.items()):
        print(f"  {metric:<20} {delta:+8.3f}")

    # -- Optimization ---------------------------------------------------------
    optimizer = MultiVariableOptimizer(specs, tune, seed=_DEMO_SEED)
    result = optimizer.optimize_for_target(OptimizationTarget(objective="handling"), max_iterations=60)
    print(
        f"\nHandling search: score {result.score:.3f} after {result.iterations} iterations "
        f"({'converged' if result.converged else 'iteration cap'})"
    )
    print(
        f"  Springs {result.optimal_tune.springs_front:.0f}/{result.optimal_tune.springs_rear:.0f}  "
        f"ARB {result.optimal_tune.arb_front:.0f}/{result.optimal_tune.arb_rear:.0f}"
    )

    bias = optimizer.optimize_brake_bias((40.0, 120.0))
    print(f"  Brake bias {bias['optimal_bias']:.0f}% front (slider {bias['slider']:.0f}%)")

    print("\nDemo complete.")
    return 0


if __name__ == "__main__":
    sys.exit(main() or 0)
