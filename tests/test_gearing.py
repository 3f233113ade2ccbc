"""Tests for the gearing analyzer."""

import pytest

from fh_tuner.core.car import TuneType
from fh_tuner.core.gearing import (
    GearSetup,
    analyze_gearing,
    find_optimal_final_drive,
    gear_spacing,
    get_gearing_recommendations,
    optimize_gearing_for,
    redline_speeds,
)
from fh_tuner.core.tune import TuneSettings

_SIX_SPEED = (3.5, 2.5, 1.8, 1.3, 1.0, 0.75)

# ---------------------------------------------------------------------------
# Setup and ratio arithmetic
# ---------------------------------------------------------------------------


def test_gear_setup_needs_gears() -> None:
    """An empty gearbox is rejected."""
    with pytest.raises(ValueError, match="at least one gear"):
        GearSetup(final_drive=3.5, gears=())


def test_from_tune() -> None:
    """Gear ratios and final drive are read from the tune."""
    setup = GearSetup.from_tune(TuneSettings(final_drive=3.9, gear_ratios=[3.0, 2.0, 1.5, 1.0]))
    assert setup.final_drive == 3.9
    assert setup.gear_count == 4


def test_redline_speeds_rise_through_gears() -> None:
    """Each taller gear reaches a higher speed at redline."""
    speeds = redline_speeds(_SIX_SPEED, 3.5)
    assert len(speeds) == 6
    assert speeds == sorted(speeds)


def test_gear_spacing() -> None:
    """Evenly stepped ratios are perfectly uniform."""
    spacing = gear_spacing([4.0, 2.0, 1.0])
    assert spacing["spacings"] == [2.0, 2.0]
    assert spacing["avg_spacing"] == 2.0
    assert spacing["uniformity"] == 10.0
    assert gear_spacing([3.0]) == {"spacings": [], "avg_spacing": 1.0, "uniformity": 10.0}


# ---------------------------------------------------------------------------
# Analysis
# ---------------------------------------------------------------------------


def test_analyze_gearing_keys() -> None:
    """The analysis reports acceleration, top speed and suitability."""
    result = analyze_gearing(GearSetup(3.2, _SIX_SPEED), 400.0, 3000.0)
    assert result["gearing_character"].startswith("Moderately long (3.20)")
    assert result["power_delivery"] == "aggressive"
    assert "Gears are too spread out - gaps in power band" in result["recommendations"]
    assert set(result["track_suitability"]) == {"high_speed", "technical", "balanced"}
    assert 3.5 <= result["zero_to_sixty"] <= 10.0


def test_analyze_gearing_clamps_final_drive() -> None:
    """A final drive above the game limit is judged at 6.0."""
    result = analyze_gearing(GearSetup(10.0, _SIX_SPEED), 400.0, 3000.0)
    assert result["gearing_character"].startswith("Very short gearing (6.00)")
    assert result == analyze_gearing(GearSetup(6.0, _SIX_SPEED), 400.0, 3000.0)


def test_shorter_final_drive_trades_top_speed() -> None:
    """A shorter final drive lowers top speed."""
    long_gear = analyze_gearing(GearSetup(3.0, _SIX_SPEED), 400.0, 3000.0)
    short_gear = analyze_gearing(GearSetup(4.5, _SIX_SPEED), 400.0, 3000.0)
    assert short_gear["top_speed"] < long_gear["top_speed"]


# ---------------------------------------------------------------------------
# Presets and search
# ---------------------------------------------------------------------------


def test_presets_by_use() -> None:
    """Final drive follows the intended use; unknown uses are balanced."""
    assert optimize_gearing_for("acceleration", 400.0, 3000.0).final_drive == 4.5
    assert optimize_gearing_for("topSpeed", 400.0, 3000.0).final_drive == 3.2
    assert optimize_gearing_for("technical", 400.0, 3000.0).final_drive == 4.0
    mystery = optimize_gearing_for("mystery", 400.0, 3000.0)
    assert mystery.final_drive == 3.7
    assert mystery.gears == optimize_gearing_for("balanced", 400.0, 3000.0).gears


def test_presets_resample_to_gear_count() -> None:
    """Other gear counts keep the preset's first and last ratio."""
    setup = optimize_gearing_for("acceleration", 400.0, 3000.0, gear_count=8)
    assert setup.gear_count == 8
    assert setup.gears[0] == 3.5
    assert setup.gears[-1] == 0.75
    assert all(a > b for a, b in zip(setup.gears, setup.gears[1:]))


def test_find_optimal_final_drive_in_range() -> None:
    """The search never leaves 2.5-5.5."""
    for target in (90.0, 160.0, 260.0):
        assert 2.5 <= find_optimal_final_drive(target, 400.0, 3000.0) <= 5.5


def test_recommendations_by_tune_type() -> None:
    """Drag, off-road and circuit tunes map onto their gearing uses."""
    assert get_gearing_recommendations(TuneType.DRAG, 400.0, 3000.0)["condition"] == "drag"
    assert get_gearing_recommendations(TuneType.RALLY, 400.0, 3000.0)["condition"] == "technical"
    assert get_gearing_recommendations(TuneType.DRIFT, 400.0, 3000.0)["condition"] == "acceleration"
    grip = get_gearing_recommendations(TuneType.GRIP, 400.0, 3000.0, is_awd=True)
    assert grip["condition"] == "balanced"
    assert grip["reasoning"][-1] == "AWD drivetrain allows more aggressive gearing without wheelspin"
    assert len(grip["redline_speeds"]) == grip["setup"].gear_count
