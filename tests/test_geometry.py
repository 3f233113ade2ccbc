"""Tests for the camber, toe and caster analyzer."""

from fh_tuner.core.geometry import (
    GeometrySetup,
    analyze_geometry,
    camber_effect,
    caster_effect,
    get_geometry_recommendations,
    optimize_geometry_for,
    toe_effect,
)
from fh_tuner.core.tune import TunePatch, TuneSettings

# ---------------------------------------------------------------------------
# Single-setting effects
# ---------------------------------------------------------------------------


def test_camber_effect() -> None:
    """Negative camber adds grip up to a ceiling; positive camber costs grip."""
    moderate = camber_effect(-2.0)
    assert moderate["cornering_grip"] == 1.3
    assert moderate["straight_line_wear"] == 0.25
    assert moderate["description"].startswith("Moderate negative camber")

    extreme = camber_effect(-5.0)
    assert extreme["cornering_grip"] == 1.52
    assert extreme["straight_line_wear"] == 1.0

    assert camber_effect(1.0)["cornering_grip"] == 0.75
    assert camber_effect(0.0)["cornering_grip"] == 1.0


def test_toe_effect() -> None:
    """Front toe-out speeds turn-in; rear toe-out loosens the car."""
    front_out = toe_effect(2.0, "front")
    assert front_out["turn_in_response"] == "fast"
    assert front_out["stability"] == "loose"
    assert front_out["tire_wear"] == 0.6

    front_in = toe_effect(-1.0, "front")
    assert front_in["turn_in_response"] == "slow"
    assert front_in["stability"] == "stable"

    rear_out = toe_effect(1.0, "rear")
    assert rear_out["turn_in_response"] == "medium"
    assert rear_out["stability"] == "loose"


def test_caster_effect() -> None:
    """More caster means more stability and a heavier wheel."""
    light = caster_effect(3.0)
    assert light["straight_line_stability"] == 0.0
    assert light["steering_feel"] == "light"
    assert caster_effect(5.0)["straight_line_stability"] == 4.0
    heavy = caster_effect(7.0)
    assert heavy["straight_line_stability"] == 10.0
    assert heavy["self_centering"] == "strong"


# ---------------------------------------------------------------------------
# Full analysis
# ---------------------------------------------------------------------------


def test_circuit_preset_needs_no_changes() -> None:
    """The circuit alignment is stable and already balanced."""
    result = analyze_geometry(optimize_geometry_for("circuit"))
    assert result["mid_corner_stability"] == "stable"
    assert result["turn_in_response"] == "medium"
    assert result["recommendations"] == ["Geometry is well-balanced. No adjustments needed."]


def test_street_alignment_asks_for_camber() -> None:
    """Mild street camber leaves cornering grip on the table."""
    result = analyze_geometry(optimize_geometry_for("street"))
    assert "Increase front camber for better cornering grip" in result["recommendations"]
    assert set(result["tire_wear_profile"]) == {
        "inner_front",
        "outer_front",
        "inner_rear",
        "outer_rear",
    }


def test_out_of_range_angles_are_clamped() -> None:
    """Angles beyond the game limits analyze like the limits."""
    wild = GeometrySetup(-9.0, -9.0, 0.0, 0.0, 12.0)
    capped = GeometrySetup(-5.0, -5.0, 0.0, 0.0, 7.0)
    assert analyze_geometry(wild) == analyze_geometry(capped)


# ---------------------------------------------------------------------------
# Presets and recommendations
# ---------------------------------------------------------------------------


def test_presets_and_default() -> None:
    """Unknown conditions fall back to a general track alignment."""
    assert optimize_geometry_for("drift").camber_front == -3.5
    assert optimize_geometry_for("hovercraft") == GeometrySetup(-2.0, -1.5, 0.1, -0.2, 5.5)


def test_from_tune() -> None:
    """Alignment fields are read straight from the tune."""
    setup = GeometrySetup.from_tune(TuneSettings())
    assert (setup.camber_front, setup.camber_rear, setup.caster) == (-1.0, -0.5, 5.0)


def test_responsive_recommendations_patch_only_changes() -> None:
    """Only fields that need to move appear in the patch."""
    patch = get_geometry_recommendations(optimize_geometry_for("street"), "responsive")
    assert isinstance(patch, TunePatch)
    assert patch.present_fields() == {"toe_front": 0.3, "camber_front": -2.5}


def test_stable_recommendations() -> None:
    """Stable removes front toe-out and limits front camber."""
    patch = get_geometry_recommendations(optimize_geometry_for("circuit"), "stable")
    assert patch.present_fields() == {"toe_front": 0.0, "camber_front": -2.5}
