"""Tests for the performance predictor: baseline, degradation and environment."""

import pytest

from fh_tuner.core.calculator import calculate_tune
from fh_tuner.core.car import CarSpecs, DriveType, TireCompound, TuneType
from fh_tuner.core.environment import (
    EnvironmentalConditions,
    EnvironmentPatch,
    TrackCondition,
)
from fh_tuner.core.optimizer import estimate_lap_time
from fh_tuner.core.performance import altitude_power_factor
from fh_tuner.core.predictor import (
    MAX_CONFIDENCE,
    MIN_CONFIDENCE,
    PerformanceMetrics,
    PerformancePredictor,
)
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


def _make_predictor(
    environment: EnvironmentalConditions | None = None, **spec_overrides
) -> PerformancePredictor:
    specs = _make_specs(**spec_overrides)
    return PerformancePredictor(specs, calculate_tune(specs, TuneType.GRIP), environment)


def _make_metrics(**overrides) -> PerformanceMetrics:
    base = dict(
        zero_to_sixty=4.0,
        zero_to_hundred=8.6,
        quarter_mile_time=12.0,
        quarter_mile_speed=120.0,
        top_speed=200.0,
        top_speed_with_aero=200.0,
        handling_score=8.0,
        understeer_tendency=0.0,
        stability_score=8.0,
        fuel_efficiency=12.0,
        tire_wear_rate=0.5,
        cornering_grip=1.2,
        braking_power=8.0,
        traction_control=8.0,
    )
    base.update(overrides)
    return PerformanceMetrics(**base)


# ---------------------------------------------------------------------------
# Baseline
# ---------------------------------------------------------------------------


def test_baseline_is_deterministic() -> None:
    """The same car and tune always predict the same metrics."""
    assert _make_predictor().baseline_performance() == _make_predictor().baseline_performance()


def test_zero_to_hundred_tracks_zero_to_sixty() -> None:
    """0-100 is 2.15 times the 0-60 time."""
    metrics = _make_predictor().baseline_performance()
    assert metrics.zero_to_hundred == round(metrics.zero_to_sixty * 2.15, 2)


def test_grippier_compound_launches_faster() -> None:
    """Slicks give a quicker 0-60 than street tyres."""
    slick = _make_predictor(tire_compound=TireCompound.SLICK).baseline_performance()
    street = _make_predictor(tire_compound=TireCompound.STREET).baseline_performance()
    assert slick.zero_to_sixty < street.zero_to_sixty


def test_typical_car_has_realistic_straight_line_figures() -> None:
    """A 450 hp, 3200 lb sport-tyre car gets road-car acceleration and lap times."""
    predictor = _make_predictor(horsepower=450.0)
    prediction = predictor.predict_performance()
    baseline = prediction.baseline
    assert 3.0 < baseline.zero_to_sixty < 10.0
    assert baseline.zero_to_hundred < 20.0
    assert 10.0 < baseline.quarter_mile_time < 15.0
    assert 60.0 < estimate_lap_time(baseline) < 90.0
    assert not any("gear ratio" in rec for rec in prediction.recommendations)

def test_aero_changes_drag_and_top_speed() -> None:
    """Aero cars use the lower drag figures and lose 3 % top speed to wings."""
    predictor = _make_predictor(has_aero=True)
    assert predictor.drag_coefficient() == 0.32
    assert predictor.frontal_area() == 22.0
    metrics = predictor.baseline_performance()
    assert metrics.top_speed_with_aero == float(round(metrics.top_speed * 0.97))

    plain = _make_predictor()
    assert plain.drag_coefficient() == 0.35
    assert plain.frontal_area() == 24.0


def test_scores_stay_in_bounds() -> None:
    """Dimensionless scores stay within their documented ranges."""
    for drive in DriveType:
        for tune_type in TuneType:
            specs = _make_specs(drive_type=drive)
            metrics = PerformancePredictor(specs, calculate_tune(specs, tune_type)).baseline_performance()
            for name in ("handling_score", "stability_score", "braking_power", "traction_control"):
                assert 1.0 <= getattr(metrics, name) <= 10.0
            assert 0.5 <= metrics.cornering_grip <= 2.0
            assert -5.0 <= metrics.understeer_tendency <= 5.0
            assert 5.0 <= metrics.fuel_efficiency <= 25.0


# ---------------------------------------------------------------------------
# Degradation
# ---------------------------------------------------------------------------


def test_degradation_only_worsens_dynamic_metrics() -> None:
    """0-60 never improves and grip and stability never rise with race distance."""
    predictor = _make_predictor()
    previous = predictor.predict_performance(0.0).with_degradation
    for progress in (0.1, 0.25, 0.5, 0.75, 1.0):
        current = predictor.predict_performance(progress).with_degradation
        assert current.zero_to_sixty >= previous.zero_to_sixty
        assert current.cornering_grip <= previous.cornering_grip
        assert current.stability_score <= previous.stability_score
        assert current.braking_power <= previous.braking_power
        previous = current


def test_zero_progress_is_baseline() -> None:
    """With no race distance covered the degraded metrics equal the baseline."""
    prediction = _make_predictor().predict_performance(0.0)
    assert prediction.with_degradation == prediction.baseline


def test_progress_is_clamped() -> None:
    """Progress outside [0, 1] behaves like the nearest bound."""
    predictor = _make_predictor()
    assert predictor.predict_performance(-0.5).with_degradation == predictor.predict_performance(0.0).baseline
    assert (
        predictor.predict_performance(3.0).with_degradation
        == predictor.predict_performance(1.0).with_degradation
    )


def test_full_distance_degradation_values() -> None:
    """A full race costs 8 % grip and 5 % braking and raises wear by 30 %."""
    baseline = _make_metrics()
    worn = PerformancePredictor.apply_degradation(baseline, 1.0)
    assert worn.cornering_grip == pytest.approx(1.2 * 0.92)
    assert worn.braking_power == pytest.approx(8.0 * 0.95)
    assert worn.tire_wear_rate == pytest.approx(0.5 * 1.3)
    assert worn.top_speed > baseline.top_speed


# ---------------------------------------------------------------------------
# Environment
# ---------------------------------------------------------------------------


def test_default_environment_has_no_impact() -> None:
    """Mild default conditions leave every metric unchanged."""
    assert _make_predictor().predict_performance().environmental_impact == {}


def test_track_condition_ordering() -> None:
    """Flooded costs more grip than wet, which costs more than damp."""
    impacts = {}
    for condition in (TrackCondition.DAMP, TrackCondition.WET, TrackCondition.FLOODED):
        env = EnvironmentalConditions(track_conditions=condition)
        impacts[condition] = _make_predictor(env).predict_performance().environmental_impact
    damp = impacts[TrackCondition.DAMP]["cornering_grip"]
    wet = impacts[TrackCondition.WET]["cornering_grip"]
    flooded = impacts[TrackCondition.FLOODED]["cornering_grip"]
    assert flooded < wet < damp < 0.0


def test_environment_deltas_are_summed() -> None:
    """Cold and wet both cut grip; their deltas add up."""
    env = EnvironmentalConditions(temperature=10.0, track_conditions=TrackCondition.WET)
    predictor = _make_predictor(env)
    baseline = predictor.baseline_performance()
    impact = predictor.environmental_impact(baseline)
    assert impact["cornering_grip"] == pytest.approx(
        round(baseline.cornering_grip * -0.55, 4), abs=1e-4
    )
    assert impact["zero_to_sixty"] == pytest.approx(
        round(baseline.zero_to_sixty * 0.20, 4), abs=1e-4
    )


def test_altitude_costs_power() -> None:
    """Thin air slows the launch and lowers top speed."""
    env = EnvironmentalConditions(altitude=5000.0)
    predictor = _make_predictor(env)
    baseline = predictor.baseline_performance()
    impact = predictor.environmental_impact(baseline)
    loss = 1.0 - altitude_power_factor(5000.0)
    assert impact["zero_to_sixty"] == pytest.approx(baseline.zero_to_sixty * loss, abs=1e-4)
    assert impact["top_speed"] < 0.0


def test_update_environmental_conditions_merges_patch() -> None:
    """Only the patched fields change."""
    env = EnvironmentalConditions(temperature=25.0)
    predictor = _make_predictor(env)
    predictor.update_environmental_conditions(EnvironmentPatch(track_conditions=TrackCondition.WET))
    assert predictor.environment.track_conditions == TrackCondition.WET
    assert predictor.environment.temperature == 25.0
    assert "cornering_grip" in predictor.predict_performance().environmental_impact


# ---------------------------------------------------------------------------
# Confidence, advice and comparison
# ---------------------------------------------------------------------------


def test_confidence_bounds_and_missing_data() -> None:
    """Confidence is clamped and drops when horsepower is unknown."""
    known = _make_predictor().prediction_confidence()
    unknown = _make_predictor(horsepower=None).prediction_confidence()
    assert MIN_CONFIDENCE <= unknown < known <= MAX_CONFIDENCE


def test_limiting_factors_fallback() -> None:
    """A strong setup reports no limiting factor."""
    assert PerformancePredictor.limiting_factors(_make_metrics()) == ["Setup appears well-balanced"]
    weak = PerformancePredictor.limiting_factors(_make_metrics(handling_score=5.0, top_speed=150.0))
    assert "Suspension setup limiting cornering performance" in weak
    assert "Power-to-weight ratio limiting straight-line speed" in weak


def test_compare_identical_predictors_is_tie() -> None:
    """Comparing a tune against itself yields a tie with no improvements."""
    result = _make_predictor().compare_predictions(_make_predictor())
    assert result["winner"] == "tie"
    assert all(value == 0.0 for value in result["improvements"].values())
    assert result["tradeoffs"] == []


def test_compare_reports_better_tune() -> None:
    """A tune with balanced bars and optimal brake bias beats a sloppy one."""
    specs = _make_specs()
    good = TuneSettings(arb_front=30.0, arb_rear=30.0, brake_balance=53.0, diff_accel_rear=90.0)
    bad = TuneSettings(arb_front=65.0, arb_rear=1.0, brake_balance=30.0, diff_accel_rear=10.0)
    result = PerformancePredictor(specs, bad).compare_predictions(PerformancePredictor(specs, good))
    assert result["winner"] == "other"
    assert result["improvements"]["handling_score"] > 0.0
