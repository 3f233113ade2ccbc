"""Tests for tyre compound data, pressure adjustment and compatibility scoring."""

from fh_tuner.core.car import CarSpecs, DriveType, PIClass, TireCompound
from fh_tuner.core.environment import Weather
from fh_tuner.core.tyres import (
    TireCompoundSpec,
    TrackProfile,
    adjust_tire_pressure,
    analyze_tire_compatibility,
    compare_tire_compounds,
    get_recommended_tire,
    get_tire_grip,
)

# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


def _make_compound(**overrides) -> TireCompoundSpec:
    base = dict(
        id="sport",
        name="Sport Tires",
        category="road",
        base_grip=1.0,
        dry_grip=1.0,
        wet_grip=0.8,
        dirt_grip=0.7,
        gravel_grip=0.65,
        cold_pressure_target=30,
        warm_pressure_target=35,
        optimal_temp_celsius=85,
        overheating_start_temp=120,
        wear_rate=120,
        recommended_pi={"min": 300, "max": 700},
        pressure_adjustments={
            "hot_climate": 0.3,
            "cold_climate": -0.3,
            "high_speed": 0.5,
            "technical": -0.2,
            "offroad": -3.0,
        },
    )
    base.update(overrides)
    return TireCompoundSpec.from_dict(base)


def _make_specs(**overrides) -> CarSpecs:
    base = dict(
        weight=3000.0,
        weight_distribution=50.0,
        drive_type=DriveType.RWD,
        pi_class=PIClass.S1,
        horsepower=700.0,
    )
    base.update(overrides)
    return CarSpecs(**base)


def _make_track(**overrides) -> TrackProfile:
    base = dict(type="circuit", length=2.0, temperature=105.0)
    base.update(overrides)
    return TrackProfile(**base)


# ---------------------------------------------------------------------------
# Compound data
# ---------------------------------------------------------------------------


def test_from_dict_reads_pi_window() -> None:
    """The recommended PI window is split into min and max."""
    compound = _make_compound()
    assert (compound.recommended_pi_min, compound.recommended_pi_max) == (300, 700)
    assert compound.aliases == ()


def test_adjust_tire_pressure() -> None:
    """Condition offsets stack on the cold target."""
    compound = _make_compound()
    assert adjust_tire_pressure(compound) == 30.0
    assert adjust_tire_pressure(compound, "hot", "high-speed", "gravel") == 27.8
    assert adjust_tire_pressure(compound, "cold", "technical", "asphalt") == 29.5


def test_adjust_tire_pressure_is_clamped() -> None:
    """The adjusted pressure never leaves the game range."""
    assert adjust_tire_pressure(_make_compound(cold_pressure_target=60)) == 55.0


def test_get_tire_grip() -> None:
    """Named surfaces use their grip figure; anything else is dry."""
    compound = _make_compound()
    assert get_tire_grip(compound, "wet") == 0.8
    assert get_tire_grip(compound, "gravel") == 0.65
    assert get_tire_grip(compound, "asphalt") == 1.0
    assert get_tire_grip(compound, "ice") == 1.0


# ---------------------------------------------------------------------------
# Compatibility
# ---------------------------------------------------------------------------


def test_slicks_on_powerful_rwd_car() -> None:
    """Slicks suit a powerful RWD car on a hot circuit but wear quickly."""
    result = analyze_tire_compatibility(TireCompound.SLICK, _make_specs(), _make_track())
    assert result["performance_score"] == 100.0
    assert result["compatibility_score"] == 85.0
    assert result["durability_score"] == 40.0
    assert result["temperature_match"] == 100.0
    assert result["overall_score"] == 84.0
    assert result["recommendation"] == "good"
    assert "Optimal conditions for these tires" in result["detailed_analysis"]["strengths"]


def test_street_tyres_on_heavy_street_car() -> None:
    """A heavy low-power car on a long street route is an excellent street-tyre match."""
    specs = _make_specs(weight=4200.0, horsepower=150.0, pi_class=PIClass.C)
    track = _make_track(type="street", length=4.0, temperature=75.0)
    result = analyze_tire_compatibility(TireCompound.STREET, specs, track)
    assert result["overall_score"] == 89.0
    assert result["recommendation"] == "excellent"
    assert "Suitable for heavier vehicles" in result["detailed_analysis"]["strengths"]


def test_slicks_in_rain_are_penalised() -> None:
    """Rain costs slicks 40 points of temperature match and adds a warning."""
    specs = _make_specs(horsepower=300.0)
    dry = analyze_tire_compatibility(TireCompound.SLICK, specs, _make_track())
    wet = analyze_tire_compatibility(TireCompound.SLICK, specs, _make_track(), Weather.RAIN)
    assert wet["temperature_match"] == dry["temperature_match"] - 40.0
    analysis = wet["detailed_analysis"]
    assert "CAUTION: Only use in dry conditions" in analysis["improvements"]
    assert "May overstress on moderate power cars" in analysis["weaknesses"]


def test_compare_tire_compounds_best_first() -> None:
    """Results are ordered by overall score, highest first."""
    compounds = [TireCompound.STREET, TireCompound.SPORT, TireCompound.SEMI_SLICK, TireCompound.SLICK]
    results = compare_tire_compounds(compounds, _make_specs(), _make_track())
    scores = [r["overall_score"] for r in results]
    assert scores == sorted(scores, reverse=True)
    assert {r["compound"] for r in results} == set(compounds)


# ---------------------------------------------------------------------------
# Scenario recommendations
# ---------------------------------------------------------------------------


def test_recommended_tire_by_scenario() -> None:
    """Dry sprints scale with class; wet and long races get street tyres."""
    assert get_recommended_tire("sprint-dry", PIClass.S1)["primary"] == TireCompound.SLICK
    assert get_recommended_tire("sprint-dry", PIClass.A)["primary"] == TireCompound.SEMI_SLICK
    assert get_recommended_tire("sprint-dry", PIClass.C)["primary"] == TireCompound.SPORT
    assert get_recommended_tire("sprint-wet", PIClass.S1)["primary"] == TireCompound.STREET
    assert get_recommended_tire("endurance", PIClass.A)["primary"] == TireCompound.STREET


def test_offroad_scenario_uses_offroad_tyres() -> None:
    """Loose surfaces get off-road tyres with rally as the first alternative."""
    result = get_recommended_tire("offroad", PIClass.B)
    assert result["primary"] == TireCompound.OFFROAD
    assert result["alternatives"][0] == TireCompound.RALLY


def test_unknown_scenario_falls_back_to_sport() -> None:
    """Unknown scenarios get sport tyres and no alternatives."""
    assert get_recommended_tire("moon-race", PIClass.A) == {
        "primary": TireCompound.SPORT,
        "alternatives": [],
        "rationale": "",
    }
