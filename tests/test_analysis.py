"""Tests for the combined per-subsystem tune analysis."""

from fh_tuner.core.analysis import SUBSYSTEMS, analyze_tune, collect_recommendations
from fh_tuner.core.brakes import BrakeSetup, analyze_brake_setup
from fh_tuner.core.calculator import calculate_tune
from fh_tuner.core.car import CarSpecs, DriveType, TireCompound, TuneType
from fh_tuner.core.differential import DifferentialSetup, analyze_differential
from fh_tuner.core.suspension import calculate_lltd
from fh_tuner.core.tune import TuneSettings

# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


def _make_specs(**overrides) -> CarSpecs:
    base = dict(
        weight=3200.0,
        weight_distribution=52.0,
        drive_type=DriveType.RWD,
        horsepower=400.0,
    )
    base.update(overrides)
    return CarSpecs(**base)


# ---------------------------------------------------------------------------
# Tests
# ---------------------------------------------------------------------------


def test_generated_tune_covers_every_subsystem() -> None:
    """A generated tune has gears, so every analyzer reports."""
    specs = _make_specs()
    report = analyze_tune(specs, calculate_tune(specs, TuneType.GRIP))
    assert set(report) == set(SUBSYSTEMS)
    assert report["gearing"]["zero_to_sixty"] > 0.0
    assert report["suspension"]["balance"] in ("balanced", "front-stiff", "rear-stiff")
    assert report["load_transfer"]["static"] == {"front": 1664.0, "rear": 1536.0}
    assert report["load_transfer"]["cornering"]["bias"] in ("understeer", "neutral", "oversteer")


def test_sections_match_the_individual_analyzers() -> None:
    """Each section is the analyzer's own verdict on the tune's slice."""
    specs = _make_specs(tire_compound=TireCompound.SLICK)
    tune = calculate_tune(specs, TuneType.GRIP)
    report = analyze_tune(specs, tune, speed=120.0)

    assert report["brakes"] == analyze_brake_setup(
        BrakeSetup.from_tune(tune), 120.0, 3200.0, tire_grip=1.25
    )
    assert report["differential"] == analyze_differential(
        DifferentialSetup.from_tune(tune, DriveType.RWD),
        DriveType.RWD,
        400.0,
        3200.0,
        tire_grip=1.25,
    )
    assert report["suspension"]["lltd"] == calculate_lltd(
        tune.springs_front, tune.springs_rear, tune.arb_front, tune.arb_rear
    )


def test_tune_without_gears_skips_gearing() -> None:
    """Stock gearing leaves nothing for the gearing analyzer to judge."""
    report = analyze_tune(_make_specs(), TuneSettings())
    assert "gearing" not in report
    assert "geometry" in report


def test_collect_recommendations_in_subsystem_order() -> None:
    """Suggestions come out grouped by subsystem, in report order."""
    specs = _make_specs()
    report = analyze_tune(specs, calculate_tune(specs, TuneType.GRIP))
    pairs = collect_recommendations(report)
    assert pairs
    order = [SUBSYSTEMS.index(name) for name, _ in pairs]
    assert order == sorted(order)
    assert ("geometry", report["geometry"]["recommendations"][0]) in pairs
    assert all(name != "load_transfer" for name, _ in pairs)


def test_core_package_exports_resolve() -> None:
    """Every name the core package advertises is importable from it."""
    import fh_tuner.core as core

    missing = [name for name in core.__all__ if not hasattr(core, name)]
    assert missing == []
    assert len(set(core.__all__)) == len(core.__all__)
    assert core.analyze_gearing is not None and core.analyze_tune is analyze_tune
