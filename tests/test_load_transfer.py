"""Tests for the vehicle load transfer analysis."""

import pytest

from fh_tuner.core.load_transfer import (
    VehicleSetup,
    analyze_balance_bias,
    combined_load_transfer,
    recommend_suspension_adjustments,
    static_weight_split,
)

# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


def _make_setup(**overrides) -> VehicleSetup:
    base = dict(weight=3000.0, weight_distribution=50.0)
    base.update(overrides)
    return VehicleSetup(**base)


# ---------------------------------------------------------------------------
# Setup and static split
# ---------------------------------------------------------------------------


def test_setup_validation() -> None:
    """Weight and chassis dimensions must be positive."""
    with pytest.raises(ValueError, match="weight"):
        _make_setup(weight=0.0)
    with pytest.raises(ValueError, match="cg_height"):
        _make_setup(wheelbase=0.0)


def test_static_weight_split() -> None:
    """52 % of a 3000 lb car sits on the front axle."""
    assert static_weight_split(_make_setup(weight_distribution=52.0)) == {
        "front": 1560.0,
        "rear": 1440.0,
    }


# ---------------------------------------------------------------------------
# Transfer
# ---------------------------------------------------------------------------


def test_combined_load_transfer() -> None:
    """Half a g forward and one g sideways on a 20 in CG."""
    setup = _make_setup(cg_height=20.0, wheelbase=100.0, track_width=60.0)
    result = combined_load_transfer(setup, 0.5, 1.0)
    assert result["longitudinal"] == 10.0
    assert result["lateral"] == 33.3
    assert result["combined"] == 34.8
    assert result["front_axle_load"] == 60.0
    assert result["rear_axle_load"] == 40.0


def test_balance_bias() -> None:
    """Cornering load pushes a balanced car toward understeer."""
    setup = _make_setup(cg_height=20.0, track_width=60.0)
    loaded = analyze_balance_bias(setup, 1.0)
    assert loaded["bias"] == "understeer"
    assert loaded["severity"] == 33.3

    assert analyze_balance_bias(setup, 0.0)["bias"] == "neutral"
    rear_heavy = analyze_balance_bias(_make_setup(weight_distribution=40.0), 0.0)
    assert rear_heavy["bias"] == "oversteer"
    assert rear_heavy["severity"] == -20.0


# ---------------------------------------------------------------------------
# Recommendations
# ---------------------------------------------------------------------------


def test_acceleration_recommendation() -> None:
    """A tall car on a short wheelbase squats and wants firmer front springs."""
    tall = recommend_suspension_adjustments(_make_setup(cg_height=30.0, wheelbase=100.0), "acceleration")
    assert [r["adjustment"] for r in tall] == ["Increase front spring rate"]
    assert recommend_suspension_adjustments(_make_setup(), "acceleration") == []


def test_braking_recommendation() -> None:
    """Heavy forward transfer under braking asks for firmer rear springs."""
    dive = recommend_suspension_adjustments(_make_setup(cg_height=50.0, wheelbase=100.0), "braking")
    assert [r["adjustment"] for r in dive] == ["Increase rear spring rate"]
    assert recommend_suspension_adjustments(_make_setup(), "braking") == []


def test_cornering_recommendation() -> None:
    """An understeering car is told to soften the front bar first."""
    advice = recommend_suspension_adjustments(_make_setup(), "cornering")
    assert len(advice) == 2
    assert advice[0]["adjustment"] == "Reduce front ARB stiffness"
    assert set(advice[0]) == {"adjustment", "reason", "expected_effect"}


def test_unknown_condition_has_no_advice() -> None:
    """Conditions other than acceleration, braking and cornering yield nothing."""
    assert recommend_suspension_adjustments(_make_setup(), "jumping") == []
