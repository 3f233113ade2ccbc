"""Tests for the tune optimizer: targets, constraints, hill climb and Pareto search."""

import pytest

from fh_tuner.core.calculator import calculate_tune
from fh_tuner.core.car import CarSpecs, DriveType, TuneType
from fh_tuner.core.environment import EnvironmentalConditions, TrackCondition
from fh_tuner.core.optimizer import (
    MAX_PARETO_SOLUTIONS,
    MultiVariableOptimizer,
    OptimizationConstraint,
    OptimizationTarget,
    ParetoSolution,
    dominates,
    estimate_lap_time,
    objective_score,
    pareto_front,
    resolve_limits,
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
        horsepower=300.0,
    )
    base.update(overrides)
    return CarSpecs(**base)


def _make_optimizer(tune: TuneSettings | None = None, seed: int = 7, **spec_overrides):
    specs = _make_specs(**spec_overrides)
    seed_tune = tune if tune is not None else calculate_tune(specs, TuneType.GRIP)
    return MultiVariableOptimizer(specs, seed_tune, seed=seed)


def _solution(**scores: float) -> ParetoSolution:
    return ParetoSolution(tune=TuneSettings(), performance=None, scores=scores)


# ---------------------------------------------------------------------------
# Targets and constraints
# ---------------------------------------------------------------------------


def test_target_validation() -> None:
    """Unknown objectives and priorities and bad weights are rejected."""
    with pytest.raises(ValueError, match="Unknown objective"):
        OptimizationTarget("topSpeed")
    with pytest.raises(ValueError, match="Unknown priority"):
        OptimizationTarget("handling", priority="urgent")
    with pytest.raises(ValueError, match="weight"):
        OptimizationTarget("handling", weight=0.0)
    with pytest.raises(ValueError, match="target_value"):
        OptimizationTarget("lapTime", target_value=-1.0)


def test_priority_scales_weight() -> None:
    """High priority counts 1.5 times, low half."""
    assert OptimizationTarget("handling", 2.0, "high").effective_weight == 3.0
    assert OptimizationTarget("handling", 2.0, "low").effective_weight == 1.0


def test_constraint_validation() -> None:
    """Constraints must name a ranged field with an ordered box and positive step."""
    with pytest.raises(ValueError, match="not a constrainable"):
        OptimizationConstraint("gearing_note", 0.0, 1.0)
    with pytest.raises(ValueError, match="must be <="):
        OptimizationConstraint("springs_front", 700.0, 500.0)
    with pytest.raises(ValueError, match="step"):
        OptimizationConstraint("springs_front", 500.0, 700.0, step=0.0)


def test_resolve_limits_clamps_and_later_wins() -> None:
    """Boxes never exceed the game range and a repeated field uses the last box."""
    limits = resolve_limits(
        [
            OptimizationConstraint("springs_front", 50.0, 2000.0),
            OptimizationConstraint("arb_front", 10.0, 20.0),
            OptimizationConstraint("arb_front", 30.0, 40.0),
            OptimizationConstraint("camber_front"),
        ]
    )
    assert (limits["springs_front"].lo, limits["springs_front"].hi) == (100.0, 1000.0)
    assert (limits["arb_front"].lo, limits["arb_front"].hi) == (30.0, 40.0)
    assert (limits["camber_front"].lo, limits["camber_front"].hi) == (-5.0, 5.0)
    assert limits["springs_front"].step == 10.0


def test_objective_score_needs_targets() -> None:
    """Scoring against no targets is an error."""
    performance = _make_optimizer().evaluate(TuneSettings())
    with pytest.raises(ValueError, match="At least one"):
        objective_score(performance, [])


def test_lap_time_has_floor() -> None:
    """Estimated lap times never drop below 60 s."""
    performance = _make_optimizer().evaluate(TuneSettings())
    assert estimate_lap_time(performance) >= 60.0


# ---------------------------------------------------------------------------
# Pareto helpers
# ---------------------------------------------------------------------------


def test_dominates() -> None:
    """Domination needs no worse on every objective and better on one."""
    assert dominates({"a": 2.0, "b": 1.0}, {"a": 1.0, "b": 1.0})
    assert not dominates({"a": 1.0, "b": 1.0}, {"a": 1.0, "b": 1.0})
    assert not dominates({"a": 2.0, "b": 0.5}, {"a": 1.0, "b": 1.0})
    assert dominates({"a": 1.0, "b": 1.0}, {"a": 1.0})


def test_pareto_front_filters_and_dedupes() -> None:
    """Dominated and duplicate score vectors are dropped; best total first."""
    solutions = [
        _solution(a=1.0, b=3.0),
        _solution(a=3.0, b=1.0),
        _solution(a=3.0, b=1.0),
        _solution(a=1.0, b=1.0),
        _solution(a=2.5, b=2.5),
    ]
    front = pareto_front(solutions)
    scores = [s.scores for s in front]
    assert scores[0] == {"a": 2.5, "b": 2.5}
    assert {"a": 1.0, "b": 1.0} not in scores
    assert len(front) == 3


def test_pareto_front_limit() -> None:
    """The front is capped at the configured number of solutions."""
    solutions = [_solution(a=float(i), b=float(30 - i)) for i in range(30)]
    assert len(pareto_front(solutions)) == MAX_PARETO_SOLUTIONS
    assert len(pareto_front(solutions, limit=None)) == 30


# ---------------------------------------------------------------------------
# Hill climb
# ---------------------------------------------------------------------------


def test_hill_climb_never_regresses() -> None:
    """The returned score is at least the seed's score."""
    optimizer = _make_optimizer()
    target = OptimizationTarget("balanced")
    seed_score = objective_score(optimizer.evaluate(optimizer.tune), [target])
    result = optimizer.optimize_for_target(target, max_iterations=40)
    assert result.score >= seed_score
    assert 1 <= result.iterations <= 40


def test_hill_climb_is_reproducible() -> None:
    """The same seed gives the same optimal tune."""
    target = OptimizationTarget("handling")
    first = _make_optimizer(seed=11).optimize_for_target(target, max_iterations=30)
    second = _make_optimizer(seed=11).optimize_for_target(target, max_iterations=30)
    assert first.optimal_tune == second.optimal_tune
    assert first.score == second.score


def test_hill_climb_does_not_touch_seed() -> None:
    """The caller's tune is left unmodified."""
    tune = calculate_tune(_make_specs(), TuneType.GRIP)
    before = tune.copy()
    _make_optimizer(tune).optimize_for_target(OptimizationTarget("handling"), max_iterations=20)
    assert tune == before


def test_constrained_springs_stay_in_box() -> None:
    """A seed outside the springs box is projected into it and stays there."""
    seed = TuneSettings(springs_front=300.0)
    optimizer = _make_optimizer(seed)
    result = optimizer.optimize_for_target(
        OptimizationTarget("handling"),
        [OptimizationConstraint("springs_front", 500.0, 700.0)],
        max_iterations=50,
    )
    assert 500.0 <= result.optimal_tune.springs_front <= 700.0
    assert seed.springs_front == 300.0


def test_aero_is_not_searched_without_wings() -> None:
    """Cars without adjustable aero keep the seed aero values."""
    result = _make_optimizer().optimize_for_target(OptimizationTarget("balanced"), max_iterations=40)
    assert result.optimal_tune.aero_front == 0.0
    assert result.optimal_tune.aero_rear == 0.0
    assert "aero_front" not in result.parameter_sensitivity


def test_lap_time_search_respects_circuit_bounds() -> None:
    """Lap-time search keeps springs, bars, camber and pressures in circuit ranges."""
    result = _make_optimizer().optimize_for_lap_time()
    tune = result.optimal_tune
    for name in ("springs_front", "springs_rear"):
        assert 200.0 <= getattr(tune, name) <= 800.0
    for name in ("camber_front", "camber_rear"):
        assert -5.0 <= getattr(tune, name) <= 0.0
    for name in ("tire_pressure_front", "tire_pressure_rear"):
        assert 20.0 <= getattr(tune, name) <= 45.0
    assert result.iterations <= 50


# ---------------------------------------------------------------------------
# Multi objective
# ---------------------------------------------------------------------------


def test_multi_objective_front_is_non_dominated() -> None:
    """No solution on the returned front dominates another."""
    optimizer = _make_optimizer()
    front = optimizer.optimize_multi_objective(
        [OptimizationTarget("handling"), OptimizationTarget("efficiency")],
        population_size=12,
        generations=3,
    )
    assert front.objectives == ["handling", "efficiency"]
    assert 1 <= len(front.solutions) <= MAX_PARETO_SOLUTIONS
    for first in front.solutions:
        assert set(first.scores) == {"handling", "efficiency"}
        for second in front.solutions:
            assert not dominates(first.scores, second.scores)


def test_multi_objective_rejects_bad_requests() -> None:
    """Empty target lists, repeated objectives and tiny populations fail."""
    optimizer = _make_optimizer()
    with pytest.raises(ValueError, match="At least one"):
        optimizer.optimize_multi_objective([])
    with pytest.raises(ValueError, match="only once"):
        optimizer.optimize_multi_objective(
            [OptimizationTarget("handling"), OptimizationTarget("handling", weight=2.0)]
        )
    with pytest.raises(ValueError, match="population_size"):
        optimizer.optimize_multi_objective([OptimizationTarget("handling")], population_size=2)


# ---------------------------------------------------------------------------
# Targeted helpers
# ---------------------------------------------------------------------------


def test_brake_bias_sweep_picks_near_optimal_bias() -> None:
    """The sweep lands next to the 53 % peak and reports the inverted slider."""
    optimizer = _make_optimizer(TuneSettings())
    dry = optimizer.optimize_brake_bias((40.0, 120.0))
    assert dry["optimal_bias"] == 52.0
    assert dry["slider"] == 48.0
    assert dry["confidence"] == 0.85

    wet = optimizer.optimize_brake_bias((40.0, 120.0), TrackCondition.WET)
    assert wet["optimal_bias"] == 52.0
    assert wet["confidence"] == 0.75


def test_brake_bias_sweep_reflects_track_conditions() -> None:
    """Flooded tracks cut braking power and the sweep score."""
    optimizer = _make_optimizer(TuneSettings())
    dry = optimizer.optimize_brake_bias((40.0, 120.0))
    flooded = optimizer.optimize_brake_bias((40.0, 120.0), TrackCondition.FLOODED)
    assert dry["performance"] != flooded["performance"]
    assert flooded["performance"].braking_power < dry["performance"].braking_power
    assert flooded["performance"].cornering_grip < dry["performance"].cornering_grip
    assert flooded["score"] < dry["score"]
    assert 0.0 < dry["lockup_risk"] <= 100.0


def test_brake_bias_lockup_risk_rises_with_speed() -> None:
    """A faster braking zone carries more lock-up risk at the same bias."""
    optimizer = _make_optimizer(TuneSettings())
    slow = optimizer.optimize_brake_bias((20.0, 40.0))
    fast = optimizer.optimize_brake_bias((150.0, 200.0))
    assert fast["lockup_risk"] > slow["lockup_risk"]
    assert fast["score"] < slow["score"]


def test_evaluate_applies_optimizer_environment() -> None:
    """Candidates are scored under the optimizer's own conditions."""
    specs = _make_specs()
    tune = calculate_tune(specs, TuneType.GRIP)
    dry = MultiVariableOptimizer(specs, tune, seed=1).evaluate(tune)
    wet = MultiVariableOptimizer(
        specs, tune, EnvironmentalConditions(track_conditions=TrackCondition.WET), seed=1
    ).evaluate(tune)
    assert wet.cornering_grip == pytest.approx(dry.cornering_grip * 0.6)
    assert wet.braking_power == pytest.approx(dry.braking_power * 0.85)


def test_brake_bias_rejects_bad_speed_range() -> None:
    """Negative or inverted speed ranges are rejected."""
    optimizer = _make_optimizer()
    with pytest.raises(ValueError, match="speed_range"):
        optimizer.optimize_brake_bias((-10.0, 100.0))
    with pytest.raises(ValueError, match="speed_range"):
        optimizer.optimize_brake_bias((120.0, 40.0))


def test_firm_suspension_preset() -> None:
    """Firm stiffens springs by 30 % and understeer moves ARB forward."""
    seed = TuneSettings(springs_front=500.0, springs_rear=400.0, arb_front=30.0, arb_rear=30.0)
    result = _make_optimizer(seed).optimize_suspension("understeer", "firm")
    assert result.optimal_tune.springs_front == 650.0
    assert result.optimal_tune.springs_rear == 520.0
    assert result.optimal_tune.arb_front == 37.0
    assert result.optimal_tune.arb_rear == 25.0
    assert result.iterations == 1
    assert result.converged


def test_suspension_preset_names_are_checked() -> None:
    """Unknown balance or stiffness names are rejected."""
    optimizer = _make_optimizer()
    with pytest.raises(ValueError, match="balance"):
        optimizer.optimize_suspension("loose", "firm")
    with pytest.raises(ValueError, match="stiffness"):
        optimizer.optimize_suspension("neutral", "rock-hard")
