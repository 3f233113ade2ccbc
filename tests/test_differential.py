"""Tests for the differential lock analyzer."""

from fh_tuner.core.car import DriveType, TuneType
from fh_tuner.core.differential import (
    DifferentialSetup,
    acceleration_effect,
    analyze_differential,
    braking_effect,
    deceleration_effect,
    get_differential_recommendations,
    optimize_differential_for,
)
from fh_tuner.core.tune import TuneSettings

# ---------------------------------------------------------------------------
# Setup
# ---------------------------------------------------------------------------


def test_from_tune_reads_driven_axle() -> None:
    """FWD cars read the front diff, others the rear."""
    tune = TuneSettings(diff_accel_front=70.0)
    fwd = DifferentialSetup.from_tune(tune, DriveType.FWD)
    assert (fwd.accel_lock, fwd.decel_lock) == (70.0, 0.0)

    rwd = DifferentialSetup.from_tune(tune, DriveType.RWD)
    assert rwd == DifferentialSetup(accel_lock=50.0, braking_lock=30.0, decel_lock=30.0)


# ---------------------------------------------------------------------------
# Per-lock effects
# ---------------------------------------------------------------------------


def test_acceleration_effect_caps_traction() -> None:
    """A fully locked RWD diff maxes out traction and adds some understeer."""
    result = acceleration_effect(100.0, DriveType.RWD, 400.0, 3000.0)
    assert result["traction"] == 10.0
    assert result["understeer"] == 3.0
    assert result["power_transfer"] == "Both rear wheels equally engaged"


def test_fwd_lock_understeers_most() -> None:
    """The same lock adds more understeer on FWD than AWD."""
    fwd = acceleration_effect(60.0, DriveType.FWD, 300.0, 3000.0)
    awd = acceleration_effect(60.0, DriveType.AWD, 300.0, 3000.0)
    assert fwd["understeer"] > awd["understeer"]


def test_braking_effect() -> None:
    """Full braking lock is stable but risks lock-up."""
    result = braking_effect(100.0)
    assert result["stability"] == 8.0
    assert result["lockup_risk"] == 60.0
    assert result["control_ease"] == 5.0
    assert braking_effect(100.0, tire_grip=1.5)["lockup_risk"] < result["lockup_risk"]


def test_deceleration_effect() -> None:
    """High decel lock gives strong engine braking and responsive turn-in."""
    result = deceleration_effect(80.0, DriveType.RWD)
    assert result["engine_braking_effect"] == 7.4
    assert result["turn_in_response"] == "responsive"
    assert result["trail_braking_ease"] == 7.4
    assert deceleration_effect(10.0, DriveType.AWD)["turn_in_response"] == "slow"


# ---------------------------------------------------------------------------
# Full analysis
# ---------------------------------------------------------------------------


def test_moderate_locks_are_most_drivable() -> None:
    """Mid-range locks keep the full drivability rating."""
    result = analyze_differential(DifferentialSetup(50.0, 50.0, 50.0), DriveType.RWD, 400.0, 3000.0)
    assert result["drivability_rating"] == 7.0
    assert result["recommendations"] == ["Differential settings are well-balanced"]


def test_extreme_accel_lock_is_clamped_and_penalised() -> None:
    """Locks above 100 count as 100 and cost drivability."""
    over = analyze_differential(DifferentialSetup(150.0, 50.0, 50.0), DriveType.RWD, 400.0, 3000.0)
    full = analyze_differential(DifferentialSetup(100.0, 50.0, 50.0), DriveType.RWD, 400.0, 3000.0)
    assert over == full
    assert full["drivability_rating"] == 5.0
    assert full["acceleration_traction"] == 10.0


def test_open_rear_diff_advice() -> None:
    """A nearly open braking lock on a RWD car asks for more lock."""
    result = analyze_differential(DifferentialSetup(50.0, 10.0, 10.0), DriveType.RWD, 300.0, 3000.0)
    assert "Consider increasing braking lock for stability" in result["recommendations"]
    assert "Increase deceleration lock for trail braking control" in result["recommendations"]


# ---------------------------------------------------------------------------
# Presets and recommendations
# ---------------------------------------------------------------------------


def test_presets() -> None:
    """Street has no preset and uses the neutral fallback."""
    assert optimize_differential_for(TuneType.STREET, DriveType.RWD) == DifferentialSetup(50.0, 40.0, 60.0)
    assert optimize_differential_for(TuneType.DRIFT, DriveType.RWD) == DifferentialSetup(30.0, 40.0, 80.0)


def test_recommendations_by_use() -> None:
    """Circuit use sets every lock; mixed use only the acceleration lock."""
    assert get_differential_recommendations(3000.0, 400.0, DriveType.FWD, "circuit") == {
        "accel_lock": 80.0,
        "braking_lock": 50.0,
        "decel_lock": 70.0,
    }
    assert get_differential_recommendations(3000.0, 400.0, DriveType.RWD, "mixed") == {
        "accel_lock": 65.0
    }
