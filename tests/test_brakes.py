"""Tests for the brake analyzer."""

import pytest

from fh_tuner.core.brakes import (
    BRAKE_PADS,
    DEFAULT_PAD,
    BrakeSetup,
    analyze_brake_setup,
    calculate_brake_fade,
    calculate_lockup_risk,
    find_optimal_brake_bias,
    optimize_brakes_for,
)
from fh_tuner.core.tune import TuneSettings

# ---------------------------------------------------------------------------
# Setup
# ---------------------------------------------------------------------------


def test_pad_grip_order() -> None:
    """Race pads grip more than sport pads, slicks most of all."""
    assert BRAKE_PADS["sport"].grip_multiplier < BRAKE_PADS["race"].grip_multiplier
    assert BRAKE_PADS["race"].grip_multiplier < BRAKE_PADS["slick"].grip_multiplier


def test_unknown_pad_falls_back_to_sport() -> None:
    """Unlisted pad compounds are analysed as sport pads."""
    setup = BrakeSetup(80.0, 50.0, front_pad="ceramic", rear_pad="race")
    assert setup.front_pad == DEFAULT_PAD == "sport"
    assert setup.rear_pad == "race"
    assert analyze_brake_setup(setup, 100.0, 3000.0) == analyze_brake_setup(
        BrakeSetup(80.0, 50.0, rear_pad="race"), 100.0, 3000.0
    )


def test_from_tune() -> None:
    """Pressure and front bias come from the tune."""
    setup = BrakeSetup.from_tune(TuneSettings(brake_pressure=90.0, brake_balance=54.0))
    assert (setup.brake_pressure, setup.brake_bias) == (90.0, 54.0)


# ---------------------------------------------------------------------------
# Fade and lock-up
# ---------------------------------------------------------------------------


def test_brake_fade_is_capped() -> None:
    """A long stop from speed fades by at most 40 %."""
    result = calculate_brake_fade(100.0, 100.0, 5.0, 3000.0)
    assert result["heat_generated"] == 500.0
    assert result["fade_percentage"] == 40.0
    assert result["effective_pressure"] == 60.0
    assert result["max_deceleration"] == 20.0


def test_brake_fade_rejects_bad_weight() -> None:
    """Weight must be positive."""
    with pytest.raises(ValueError, match="weight"):
        calculate_brake_fade(100.0, 100.0, 1.0, 0.0)


def test_lockup_risk_and_abs() -> None:
    """ABS cuts front risk by 70 % and rear risk by 60 %."""
    raw = calculate_lockup_risk(50.0, 50.0, 0.0, 1.0, has_abs=False)
    assert (raw["front_risk"], raw["rear_risk"]) == (20.0, 15.0)
    assert not raw["abs_effective"]

    with_abs = calculate_lockup_risk(50.0, 50.0, 0.0, 1.0)
    assert (with_abs["front_risk"], with_abs["rear_risk"]) == (6.0, 6.0)


def test_front_heavy_bias_without_abs_is_flagged() -> None:
    """Heavy front bias at full pressure and speed risks front lock-up."""
    result = calculate_lockup_risk(70.0, 100.0, 200.0, 1.0, has_abs=False)
    assert result["front_risk"] > 60.0
    assert "Reduce front brake bias - high lockup risk" in result["recommendations"]


# ---------------------------------------------------------------------------
# Full analysis
# ---------------------------------------------------------------------------


def test_balanced_setup() -> None:
    """Full pressure at 50 % bias on sport pads is balanced."""
    result = analyze_brake_setup(BrakeSetup(100.0, 50.0), 100.0, 3000.0)
    assert result["braking_power"] == 10.0
    assert result["braking_balance"] == "balanced"
    assert result["recommendations"] == ["Brake setup is well-balanced for current conditions"]


def test_slick_pads_add_power() -> None:
    """Slick pads at both ends multiply braking power by 1.3."""
    result = analyze_brake_setup(BrakeSetup(100.0, 50.0, "slick", "slick"), 100.0, 3000.0)
    assert result["braking_power"] == 13.0


def test_balance_labels() -> None:
    """Bias above 55 % is front-heavy, below 45 % rear-heavy."""
    assert analyze_brake_setup(BrakeSetup(80.0, 60.0), 60.0, 3000.0)["braking_balance"] == "front-heavy"
    assert analyze_brake_setup(BrakeSetup(80.0, 40.0), 60.0, 3000.0)["braking_balance"] == "rear-heavy"


def test_low_pressure_is_clamped() -> None:
    """Pressure below the game floor counts as 50, which still gives usable power."""
    result = analyze_brake_setup(BrakeSetup(10.0, 50.0), 60.0, 3000.0)
    assert result["braking_power"] == 5.0
    assert "Increase brake pressure for more stopping power" not in result["recommendations"]


# ---------------------------------------------------------------------------
# Presets and optimal bias
# ---------------------------------------------------------------------------


def test_presets() -> None:
    """Circuit runs race pads up front; unknown conditions get the default."""
    circuit = optimize_brakes_for("circuit")
    assert (circuit.front_pad, circuit.rear_pad) == ("race", "sport")
    assert optimize_brakes_for("hill-climb").brake_pressure == 70.0


def test_optimal_bias_for_balanced_car() -> None:
    """A 50/50 car braking from rest wants a 50 % bias."""
    result = find_optimal_brake_bias(50.0, 0.0)
    assert result["optimal_bias"] == 50.0
    assert result["bias_range"] == (47.0, 53.0)
    assert result["reasoning"] == "Optimal for: 50% front weight, 0 mph, 1.00x grip"


def test_optimal_bias_is_clamped() -> None:
    """Very front-heavy cars stop at the 45 % floor."""
    result = find_optimal_brake_bias(100.0, 0.0)
    assert result["optimal_bias"] == 45.0
    assert result["bias_range"] == (45.0, 48.0)


def test_optimal_bias_reasoning_mentions_weight() -> None:
    """Passing the car weight adds it to the reasoning."""
    result = find_optimal_brake_bias(50.0, 0.0, weight=3000.0)
    assert result["reasoning"].startswith("Optimal for: 3000 lbs, 50% front weight")
