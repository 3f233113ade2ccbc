"""Multi-variable tune optimizer.

Two search strategies share one fitness function, the baseline metrics
from :class:`~fh_tuner.core.predictor.PerformancePredictor`, adjusted for
the optimizer's environment and folded into a weighted objective score:

* a hill climber that perturbs two or three fields at a time and only ever
  accepts a strictly better candidate, so it can never return a tune that
  scores below its (constraint-projected) seed; and
* an evolutionary search (elitism, tournament selection, per-field
  crossover and mutation) whose final population is reduced to a Pareto
  front.

All randomness comes from an injected :class:`numpy.random.Generator`, so
a fixed seed reproduces a run exactly.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field, replace
from typing import Any, Iterable, Mapping, Sequence

import numpy as np
import structlog

from fh_tuner.core.brakes import calculate_lockup_risk
from fh_tuner.core.car import CarSpecs
from fh_tuner.core.environment import (
    DEFAULT_ENVIRONMENT,
    EnvironmentalConditions,
    EnvironmentPatch,
    TrackCondition,
    merge_environment,
)
from fh_tuner.core.predictor import PerformanceMetrics, PerformancePredictor
from fh_tuner.core.tune import RANGED_TUNE_FIELDS, TUNE_FIELD_RANGES, TuneSettings

logger = structlog.get_logger(__name__)

OBJECTIVES: tuple[str, ...] = ("lapTime", "handling", "stability", "efficiency", "balanced")

PRIORITY_SCALE: dict[str, float] = {"high": 1.5, "medium": 1.0, "low": 0.5}

# Fields the search is allowed to move.
TUNABLE_FIELDS: tuple[str, ...] = (
    "springs_front",
    "springs_rear",
    "arb_front",
    "arb_rear",
    "camber_front",
    "camber_rear",
    "aero_front",
    "aero_rear",
    "tire_pressure_front",
    "tire_pressure_rear",
)
_AERO_FIELDS: tuple[str, ...] = ("aero_front", "aero_rear")

# Defaults for optimize_for_lap_time; caller constraints on the same field win.
_LAP_TIME_LIMITS: tuple[tuple[str, float, float], ...] = (
    ("springs_front", 200.0, 800.0),
    ("springs_rear", 200.0, 800.0),
    ("arb_front", 1.0, 65.0),
    ("arb_rear", 1.0, 65.0),
    ("camber_front", -5.0, 0.0),
    ("camber_rear", -5.0, 0.0),
    ("tire_pressure_front", 20.0, 45.0),
    ("tire_pressure_rear", 20.0, 45.0),
)
_LAP_TIME_ITERATIONS: int = 50

BRAKE_BIAS_CANDIDATES: tuple[float, ...] = (45.0, 48.0, 50.0, 52.0, 55.0, 58.0, 60.0)
# Sweep score lost at 100 % lock-up risk.
LOCKUP_PENALTY: float = 2.0

_STIFFNESS_SCALE: dict[str, float] = {"soft": 0.7, "medium": 1.0, "firm": 1.3}
# (ARB front/rear split, extra ARB toward the heavier-feeling end).
_BALANCE_OFFSETS: dict[str, tuple[float, float]] = {
    "neutral": (0.0, 0.0),
    "understeer": (5.0, 2.0),
    "oversteer": (-5.0, -2.0),
}

MAX_PARETO_SOLUTIONS: int = 10


# ---------------------------------------------------------------------------
# Targets and constraints
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class OptimizationTarget:
    """One objective to maximise.

    Attributes:
        objective: One of :data:`OBJECTIVES`.
        weight: Relative weight (> 0).
        priority: ``"high"``, ``"medium"`` or ``"low"``; scales the weight
            by 1.5, 1.0 or 0.5.
        target_value: For ``lapTime``, the lap time in seconds to aim at
            instead of simply minimising it.
    """

    objective: str
    weight: float = 1.0
    priority: str = "medium"
    target_value: float | None = None

    def __post_init__(self) -> None:
        if self.objective not in OBJECTIVES:
            raise ValueError(
                f"Unknown objective '{self.objective}'. Expected one of {list(OBJECTIVES)}."
            )
        if self.priority not in PRIORITY_SCALE:
            raise ValueError(
                f"Unknown priority '{self.priority}'. Expected one of {list(PRIORITY_SCALE)}."
            )
        if self.weight <= 0.0:
            raise ValueError("weight must be > 0.")
        if self.target_value is not None and self.target_value <= 0.0:
            raise ValueError("target_value must be > 0 when given.")

    @property
    def effective_weight(self) -> float:
        return self.weight * PRIORITY_SCALE[self.priority]


@dataclass(frozen=True)
class OptimizationConstraint:
    """Bounds on one tune field.

    Missing ``min``/``max``/``step`` fall back to the field's game range.
    """

    parameter: str
    min: float | None = None
    max: float | None = None
    step: float | None = None

    def __post_init__(self) -> None:
        if self.parameter not in RANGED_TUNE_FIELDS:
            raise ValueError(f"'{self.parameter}' is not a constrainable tune field.")
        if self.min is not None and self.max is not None and self.min > self.max:
            raise ValueError(f"{self.parameter}: min ({self.min}) must be <= max ({self.max}).")
        if self.step is not None and self.step <= 0.0:
            raise ValueError(f"{self.parameter}: step must be > 0.")


@dataclass(frozen=True)
class _Limit:
    lo: float
    hi: float
    step: float

    def clamp(self, value: float) -> float:
        return max(self.lo, min(self.hi, value))


def _schema_limit(name: str) -> _Limit:
    schema = TUNE_FIELD_RANGES[name]
    return _Limit(schema.min, schema.max, schema.step)


def resolve_limits(constraints: Iterable[OptimizationConstraint]) -> dict[str, _Limit]:
    """Search box per constrained field, never wider than the game range.

    When a field is constrained twice the later constraint wins.
    """
    limits: dict[str, _Limit] = {}
    for constraint in constraints:
        schema = TUNE_FIELD_RANGES[constraint.parameter]
        lo = schema.clamp(constraint.min) if constraint.min is not None else schema.min
        hi = schema.clamp(constraint.max) if constraint.max is not None else schema.max
        limits[constraint.parameter] = _Limit(lo, hi, constraint.step or schema.step)
    return limits


# ---------------------------------------------------------------------------
# Results
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class TradeOff:
    description: str
    parameters: tuple[str, ...]
    impact: float


@dataclass(frozen=True)
class OptimizationResult:
    """Outcome of a single-objective search.

    Attributes:
        optimal_tune: Best tune found (the projected seed if nothing beat it).
        performance: Baseline metrics of ``optimal_tune``.
        score: Objective score of ``optimal_tune``.
        iterations: Iterations actually run.
        converged: Whether the search stopped on stalled improvement.
        parameter_sensitivity: Score change per step for each tunable field.
        trade_offs: Compromises the tune makes.
    """

    optimal_tune: TuneSettings
    performance: PerformanceMetrics
    score: float
    iterations: int
    converged: bool
    parameter_sensitivity: dict[str, float]
    trade_offs: list[TradeOff]


@dataclass(frozen=True)
class ParetoSolution:
    tune: TuneSettings
    performance: PerformanceMetrics
    scores: dict[str, float]


@dataclass(frozen=True)
class ParetoFront:
    solutions: list[ParetoSolution]
    objectives: list[str] = field(default_factory=list)


# ---------------------------------------------------------------------------
# Pareto helpers
# ---------------------------------------------------------------------------


def dominates(first: Mapping[str, float], second: Mapping[str, float]) -> bool:
    """True if *first* is at least as good on every objective and strictly
    better on one.  Higher scores are better; a missing objective counts as
    ``-inf``.
    """
    better = False
    for key in set(first) | set(second):
        a = first.get(key, -math.inf)
        b = second.get(key, -math.inf)
        if a < b:
            return False
        if a > b:
            better = True
    return better


def pareto_front(
    solutions: Sequence[ParetoSolution], limit: int | None = MAX_PARETO_SOLUTIONS
) -> list[ParetoSolution]:
    """Non-dominated solutions, best total score first.

    Solutions with identical score vectors are kept once.
    """
    front: list[ParetoSolution] = []
    seen: set[tuple[tuple[str, float], ...]] = set()
    for candidate in solutions:
        if any(dominates(other.scores, candidate.scores) for other in solutions):
            continue
        key = tuple(sorted(candidate.scores.items()))
        if key in seen:
            continue
        seen.add(key)
        front.append(candidate)
    front.sort(key=lambda s: sum(s.scores.values()), reverse=True)
    return front if limit is None else front[:limit]


# ---------------------------------------------------------------------------
# Scoring
# ---------------------------------------------------------------------------


def estimate_lap_time(performance: PerformanceMetrics) -> float:
    """Rough lap time in seconds on a generic 90 s circuit (floor 60 s)."""
    accel_gain: float = (6.0 - performance.zero_to_sixty) / 6.0 * 5.0
    speed_gain: float = (performance.top_speed - 160.0) / 40.0 * 3.0
    handling_gain: float = (performance.handling_score - 5.0) / 5.0 * 2.0
    return max(60.0, 90.0 - accel_gain - speed_gain - handling_gain)


def _mean_lockup_risk(
    bias: float, pressure: float, speeds: Sequence[float], grip: float
) -> float:
    risks = [calculate_lockup_risk(bias, pressure, speed, grip) for speed in speeds]
    return sum(max(r["front_risk"], r["rear_risk"]) for r in risks) / len(risks)


def objective_value(performance: PerformanceMetrics, target: OptimizationTarget) -> float:
    """Unweighted score of *performance* for one target (higher is better)."""
    if target.objective == "lapTime":
        lap_time = estimate_lap_time(performance)
        if target.target_value is not None:
            return max(0.0, 1.0 - abs(lap_time - target.target_value) / target.target_value)
        return (120.0 - lap_time) / 120.0
    if target.objective == "handling":
        return performance.handling_score / 10.0
    if target.objective == "stability":
        return performance.stability_score / 10.0
    if target.objective == "efficiency":
        return performance.fuel_efficiency / 25.0
    return (
        performance.handling_score / 10.0 * 0.3
        + performance.stability_score / 10.0 * 0.3
        + performance.braking_power / 10.0 * 0.2
        + (11.0 - performance.zero_to_sixty) / 11.0 * 0.2
    )


def objective_score(
    performance: PerformanceMetrics, targets: Sequence[OptimizationTarget]
) -> float:
    """Priority-weighted mean of the target scores.

    Raises:
        ValueError: If *targets* is empty.
    """
    if not targets:
        raise ValueError("At least one optimization target is required.")
    total_weight: float = sum(t.effective_weight for t in targets)
    total: float = sum(objective_value(performance, t) * t.effective_weight for t in targets)
    return total / total_weight


def analyze_trade_offs(tune: TuneSettings) -> list[TradeOff]:
    """Compromises a tune makes; impact is the relative cost."""
    trade_offs: list[TradeOff] = []
    if tune.aero_front > 30.0:
        trade_offs.append(
            TradeOff(
                "High downforce improves cornering but reduces top speed",
                ("aero_front", "aero_rear"),
                -0.05,
            )
        )
    if (tune.springs_front + tune.springs_rear) / 2.0 > 600.0:
        trade_offs.append(
            TradeOff(
                "Stiff suspension improves handling but reduces stability over bumps",
                ("springs_front", "springs_rear"),
                -0.03,
            )
        )
    if abs(tune.camber_front) > 3.0:
        trade_offs.append(
            TradeOff(
                "Extreme camber improves grip but increases tire wear",
                ("camber_front", "camber_rear"),
                0.15,
            )
        )
    return trade_offs


_BALANCED = OptimizationTarget("balanced")


# ---------------------------------------------------------------------------
# Optimizer
# ---------------------------------------------------------------------------


class MultiVariableOptimizer:
    """Searches tune space around a seed tune for one car.

    Attributes:
        mutation_rate: Per-field mutation probability in the evolutionary
            search.
        crossover_rate: Probability a child field comes from the first
            parent.
        elite_fraction: Share of each generation copied unchanged.
        tournament_size: Contestants per tournament selection.
        convergence_threshold: Improvement below which an iteration counts
            as stalled.
        patience: Consecutive stalled iterations that end the hill climb.
    """

    mutation_rate: float = 0.1
    crossover_rate: float = 0.8
    elite_fraction: float = 0.2
    tournament_size: int = 3
    convergence_threshold: float = 0.001
    patience: int = 10

    def __init__(
        self,
        specs: CarSpecs,
        tune: TuneSettings,
        environment: EnvironmentalConditions | None = None,
        rng: np.random.Generator | None = None,
        seed: int | None = None,
    ):
        """Initialise the optimizer.

        Args:
            specs: Car being tuned.
            tune: Seed tune.  Never modified.
            environment: Conditions every candidate is evaluated under.
            rng: Random generator; takes precedence over *seed*.
            seed: Seed for a fresh ``numpy.random.default_rng`` when no
                generator is given.
        """
        self.specs = specs
        self.tune = tune.copy()
        self.environment = environment if environment is not None else DEFAULT_ENVIRONMENT
        self.rng = rng if rng is not None else np.random.default_rng(seed)

    # ------------------------------------------------------------------
    # Evaluation helpers
    # ------------------------------------------------------------------

    def evaluate(
        self, tune: TuneSettings, environment: EnvironmentalConditions | None = None
    ) -> PerformanceMetrics:
        predictor = PerformancePredictor(self.specs, tune, environment or self.environment)
        return predictor.adjusted_performance()

    def _tunable_fields(self) -> tuple[str, ...]:
        if self.specs.has_aero:
            return TUNABLE_FIELDS
        return tuple(f for f in TUNABLE_FIELDS if f not in _AERO_FIELDS)

    @staticmethod
    def _limit(name: str, limits: Mapping[str, _Limit]) -> _Limit:
        return limits.get(name) or _schema_limit(name)

    @staticmethod
    def _project(tune: TuneSettings, limits: Mapping[str, _Limit]) -> TuneSettings:
        """Clamp *tune* to the game ranges and then into the constraint box."""
        projected = tune.clamped()
        updates = {
            name: limit.clamp(getattr(projected, name))
            for name, limit in limits.items()
            if getattr(projected, name) is not None
        }
        return replace(projected, **updates)

    def _neighbor(self, tune: TuneSettings, limits: Mapping[str, _Limit]) -> TuneSettings:
        """Move two or three random fields by up to two steps."""
        candidates = self._tunable_fields()
        count = min(len(candidates), int(self.rng.integers(2, 4)))
        chosen = self.rng.choice(len(candidates), size=count, replace=False)

        updates: dict[str, float] = {}
        for idx in chosen:
            name = candidates[int(idx)]
            limit = self._limit(name, limits)
            adjustment = (self.rng.random() - 0.5) * limit.step * 4.0
            updates[name] = limit.clamp(round(getattr(tune, name) + adjustment, 2))
        return replace(tune.copy(), **updates)

    def calculate_parameter_sensitivity(
        self, tune: TuneSettings, target: OptimizationTarget | None = None
    ) -> dict[str, float]:
        """Absolute score change per unit for one step of each tunable field.

        Fields at the top of their range are stepped down instead.
        """
        target = target or _BALANCED
        base_score = objective_score(self.evaluate(tune), [target])
        sensitivity: dict[str, float] = {}
        for name in self._tunable_fields():
            schema = TUNE_FIELD_RANGES[name]
            value = getattr(tune, name)
            stepped = value + schema.step if value + schema.step <= schema.max else value - schema.step
            score = objective_score(self.evaluate(replace(tune.copy(), **{name: stepped})), [target])
            sensitivity[name] = round(abs(score - base_score) / schema.step, 6)
        return sensitivity

    # ------------------------------------------------------------------
    # Single objective
    # ------------------------------------------------------------------

    def optimize_for_target(
        self,
        target: OptimizationTarget,
        constraints: Sequence[OptimizationConstraint] | None = None,
        max_iterations: int = 100,
    ) -> OptimizationResult:
        """Hill-climb toward a single objective.

        Args:
            target: Objective to maximise.
            constraints: Per-field bounds; the seed is projected into them.
            max_iterations: Upper bound on neighbours evaluated.

        Returns:
            An :class:`OptimizationResult` whose score is never below the
            projected seed's.
        """
        return self._hill_climb([target], list(constraints or ()), max_iterations)

    def optimize_for_lap_time(
        self,
        target_lap_time: float | None = None,
        constraints: Sequence[OptimizationConstraint] | None = None,
    ) -> OptimizationResult:
        """Hill-climb for lap time inside sensible circuit bounds."""
        target = OptimizationTarget("lapTime", 1.0, "high", target_lap_time)
        merged = [OptimizationConstraint(name, lo, hi) for name, lo, hi in _LAP_TIME_LIMITS]
        merged.extend(constraints or ())
        return self._hill_climb([target], merged, _LAP_TIME_ITERATIONS)

    def _hill_climb(
        self,
        targets: Sequence[OptimizationTarget],
        constraints: Sequence[OptimizationConstraint],
        max_iterations: int,
    ) -> OptimizationResult:
        limits = resolve_limits(constraints)
        best_tune = self._project(self.tune, limits)
        best_performance = self.evaluate(best_tune)
        best_score = objective_score(best_performance, targets)
        seed_score = best_score

        stalled = 0
        converged = False
        iterations = 0
        for iteration in range(max_iterations):
            iterations = iteration + 1
            candidate = self._neighbor(best_tune, limits)
            try:
                performance = self.evaluate(candidate)
                score = objective_score(performance, targets)
            except (ValueError, ArithmeticError) as exc:
                logger.debug("candidate_skipped", iteration=iteration, error=str(exc))
                score = -math.inf
                performance = None

            improvement = score - best_score
            if performance is not None and score > best_score:
                best_tune, best_performance, best_score = candidate, performance, score

            stalled = stalled + 1 if improvement < self.convergence_threshold else 0
            if stalled >= self.patience:
                converged = True
                break

        logger.info(
            "hill_climb_finished",
            objectives=[t.objective for t in targets],
            iterations=iterations,
            converged=converged,
            seed_score=round(seed_score, 4),
            score=round(best_score, 4),
        )
        return OptimizationResult(
            optimal_tune=best_tune,
            performance=best_performance,
            score=best_score,
            iterations=iterations,
            converged=converged,
            parameter_sensitivity=self.calculate_parameter_sensitivity(best_tune, targets[0]),
            trade_offs=analyze_trade_offs(best_tune),
        )

    # ------------------------------------------------------------------
    # Multi objective
    # ------------------------------------------------------------------

    def optimize_multi_objective(
        self,
        targets: Sequence[OptimizationTarget],
        constraints: Sequence[OptimizationConstraint] | None = None,
        population_size: int = 50,
        generations: int = 10,
    ) -> ParetoFront:
        """Evolve a population and return its Pareto front.

        Raises:
            ValueError: If *targets* is empty, names an objective twice, or
                the population is smaller than the tournament.
        """
        if not targets:
            raise ValueError("At least one optimization target is required.")
        objectives = [t.objective for t in targets]
        if len(set(objectives)) != len(objectives):
            raise ValueError("Each objective may appear only once.")
        if population_size < self.tournament_size:
            raise ValueError(f"population_size must be >= {self.tournament_size}.")

        limits = resolve_limits(constraints or ())
        population = self._initial_population(population_size, limits, targets)
        for _ in range(generations):
            population = self._evolve(population, limits, targets)

        front = pareto_front(population)
        logger.info(
            "pareto_search_finished",
            objectives=objectives,
            population_size=population_size,
            generations=generations,
            front_size=len(front),
        )
        return ParetoFront(solutions=front, objectives=objectives)

    def _solution(
        self, tune: TuneSettings, targets: Sequence[OptimizationTarget]
    ) -> ParetoSolution:
        performance = self.evaluate(tune)
        scores = {t.objective: objective_value(performance, t) for t in targets}
        return ParetoSolution(tune=tune, performance=performance, scores=scores)

    def _weighted(self, solution: ParetoSolution, targets: Sequence[OptimizationTarget]) -> float:
        return sum(solution.scores[t.objective] * t.effective_weight for t in targets)

    def _initial_population(
        self,
        size: int,
        limits: Mapping[str, _Limit],
        targets: Sequence[OptimizationTarget],
    ) -> list[ParetoSolution]:
        seed = self._project(self.tune, limits)
        population = [self._solution(seed, targets)]
        while len(population) < size:
            updates: dict[str, float] = {}
            for name in self._tunable_fields():
                limit = self._limit(name, limits)
                if name in limits:
                    value = limit.lo + self.rng.random() * (limit.hi - limit.lo)
                else:
                    value = getattr(seed, name) + (self.rng.random() - 0.5) * limit.step * 10.0
                updates[name] = limit.clamp(round(value, 2))
            try:
                population.append(self._solution(replace(seed.copy(), **updates), targets))
            except (ValueError, ArithmeticError) as exc:
                logger.debug("candidate_skipped", error=str(exc))
                population.append(population[0])
        return population

    def _tournament(
        self, population: Sequence[ParetoSolution], targets: Sequence[OptimizationTarget]
    ) -> ParetoSolution:
        picks = self.rng.integers(0, len(population), size=self.tournament_size)
        contestants = [population[int(i)] for i in picks]
        return max(contestants, key=lambda s: self._weighted(s, targets))

    def _crossover(self, first: TuneSettings, second: TuneSettings) -> TuneSettings:
        updates = {
            name: getattr(first if self.rng.random() < self.crossover_rate else second, name)
            for name in self._tunable_fields()
        }
        return replace(first.copy(), **updates)

    def _mutate(self, tune: TuneSettings, limits: Mapping[str, _Limit]) -> TuneSettings:
        updates: dict[str, float] = {}
        for name in self._tunable_fields():
            if self.rng.random() < self.mutation_rate:
                limit = self._limit(name, limits)
                mutation = (self.rng.random() - 0.5) * limit.step * 2.0
                updates[name] = limit.clamp(round(getattr(tune, name) + mutation, 2))
        return replace(tune, **updates) if updates else tune

    def _evolve(
        self,
        population: list[ParetoSolution],
        limits: Mapping[str, _Limit],
        targets: Sequence[OptimizationTarget],
    ) -> list[ParetoSolution]:
        ranked = sorted(population, key=lambda s: self._weighted(s, targets), reverse=True)
        next_generation = ranked[: int(len(population) * self.elite_fraction)]

        while len(next_generation) < len(population):
            first = self._tournament(population, targets)
            second = self._tournament(population, targets)
            child = self._mutate(self._crossover(first.tune, second.tune), limits)
            try:
                next_generation.append(self._solution(child, targets))
            except (ValueError, ArithmeticError) as exc:
                logger.debug("candidate_skipped", error=str(exc))
                next_generation.append(first)
        return next_generation

    # ------------------------------------------------------------------
    # Targeted helpers
    # ------------------------------------------------------------------

    def optimize_brake_bias(
        self,
        speed_range: tuple[float, float],
        track_conditions: TrackCondition | str = TrackCondition.DRY,
    ) -> dict[str, Any]:
        """Sweep front brake bias over :data:`BRAKE_BIAS_CANDIDATES`.

        Each bias is evaluated with the track conditions merged into the
        optimizer's environment and scored as
        ``0.6 * braking_power + 0.4 * stability`` minus a lock-up penalty.
        The penalty averages the worse axle's lock-up risk at both ends of
        *speed_range*, using the condition-adjusted cornering grip.  Ties
        keep the lower bias.

        Args:
            speed_range: ``(min, max)`` braking speeds in mph.
            track_conditions: Surface water state to evaluate under.

        Returns:
            Dictionary containing:
                optimal_bias -- Best front bias in percent.
                slider -- In-game slider value for that bias.
                performance -- Condition-adjusted metrics at that bias.
                lockup_risk -- Mean worst-axle lock-up risk in percent.
                score -- Its sweep score.
                confidence -- Lower off a dry track.
                speed_range -- The range the sweep was run for.
        """
        low, high = speed_range
        if low < 0.0 or low > high:
            raise ValueError("speed_range must be (min, max) with 0 <= min <= max.")
        condition = TrackCondition(track_conditions)
        environment = merge_environment(
            self.environment, EnvironmentPatch(track_conditions=condition)
        )

        best_bias: float = BRAKE_BIAS_CANDIDATES[0]
        best_score: float = -math.inf
        best_risk: float = 0.0
        best_performance: PerformanceMetrics | None = None
        for bias in BRAKE_BIAS_CANDIDATES:
            candidate = replace(self.tune.copy(), brake_balance=bias)
            performance = self.evaluate(candidate, environment)
            risk = _mean_lockup_risk(
                bias, candidate.brake_pressure, (low, high), performance.cornering_grip
            )
            score = (
                performance.braking_power * 0.6
                + performance.stability_score * 0.4
                - risk / 100.0 * LOCKUP_PENALTY
            )
            if score > best_score:
                best_bias, best_score, best_performance = bias, score, performance
                best_risk = risk

        logger.debug(
            "brake_bias_swept",
            track_conditions=condition.value,
            optimal_bias=best_bias,
            lockup_risk=best_risk,
        )
        return {
            "optimal_bias": best_bias,
            "slider": 100.0 - best_bias,
            "performance": best_performance,
            "lockup_risk": round(best_risk, 2),
            "score": round(best_score, 4),
            "confidence": 0.85 if condition == TrackCondition.DRY else 0.75,
            "speed_range": (low, high),
        }

    def optimize_suspension(self, balance: str, stiffness: str) -> OptimizationResult:
        """Apply a stiffness multiplier and ARB balance offset to the seed.

        Args:
            balance: ``"neutral"``, ``"understeer"`` or ``"oversteer"``.
            stiffness: ``"soft"``, ``"medium"`` or ``"firm"``.

        Raises:
            ValueError: If either preset name is unknown.
        """
        if balance not in _BALANCE_OFFSETS:
            raise ValueError(f"Unknown balance '{balance}'. Expected one of {list(_BALANCE_OFFSETS)}.")
        if stiffness not in _STIFFNESS_SCALE:
            raise ValueError(
                f"Unknown stiffness '{stiffness}'. Expected one of {list(_STIFFNESS_SCALE)}."
            )
        scale = _STIFFNESS_SCALE[stiffness]
        arb_split, arb_extra = _BALANCE_OFFSETS[balance]

        arb_front = self.tune.arb_front + arb_split
        arb_rear = self.tune.arb_rear - arb_split
        if arb_extra > 0.0:
            arb_front += arb_extra
        elif arb_extra < 0.0:
            arb_rear -= arb_extra

        tune = replace(
            self.tune.copy(),
            springs_front=float(round(self.tune.springs_front * scale)),
            springs_rear=float(round(self.tune.springs_rear * scale)),
            arb_front=arb_front,
            arb_rear=arb_rear,
        ).clamped()
        performance = self.evaluate(tune)

        score: float = performance.handling_score
        tendency = performance.understeer_tendency
        if balance == "neutral" and abs(tendency) > 1.0:
            score *= 0.9
        elif balance == "understeer" and tendency < 1.0:
            score *= 0.95
        elif balance == "oversteer" and tendency > -1.0:
            score *= 0.95

        return OptimizationResult(
            optimal_tune=tune,
            performance=performance,
            score=score,
            iterations=1,
            converged=True,
            parameter_sensitivity=self.calculate_parameter_sensitivity(tune),
            trade_offs=analyze_trade_offs(tune),
        )
