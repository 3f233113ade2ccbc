"""Performance predictor.

Turns a (car, tune, environment) triple into a full set of performance
metrics, then layers on two independent effects:

* race-distance degradation driven by ``lap_progress`` in [0, 1], and
* per-metric environmental deltas that are summed across every active
  condition.

The predictor is the fitness function of the optimizer, so every method
except :meth:`PerformancePredictor.update_environmental_conditions` is
read-only and deterministic.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, fields, replace
from typing import Any

import structlog

from fh_tuner.core.car import CarSpecs, DriveType, TireCompound
from fh_tuner.core.environment import (
    DEFAULT_ENVIRONMENT,
    EnvironmentalConditions,
    EnvironmentPatch,
    TrackCondition,
    merge_environment,
)
from fh_tuner.core.performance import (
    altitude_power_factor,
    estimate_quarter_mile,
    estimate_top_speed_drag,
    estimate_zero_to_hundred,
    estimate_zero_to_sixty_grip,
)
from fh_tuner.core.tune import TuneSettings

logger = structlog.get_logger(__name__)

# Dry grip multiplier per compound.
COMPOUND_GRIP: dict[TireCompound, float] = {
    TireCompound.STREET: 0.85,
    TireCompound.SPORT: 1.0,
    TireCompound.SEMI_SLICK: 1.15,
    TireCompound.SLICK: 1.25,
    TireCompound.RALLY: 0.95,
    TireCompound.OFFROAD: 0.8,
    TireCompound.DRAG: 1.1,
}

MIN_CONFIDENCE: float = 0.6
MAX_CONFIDENCE: float = 0.95
_BASE_CONFIDENCE: float = 0.8
_DEFAULT_TEMPERATURE: float = 20.0

# Degradation caps over a full race distance.
MAX_TIRE_GRIP_LOSS: float = 0.15
MAX_BRAKE_FADE: float = 0.10

# Relative grip, braking and 0-60 deltas per surface water state.
_TRACK_CONDITION_EFFECTS: dict[TrackCondition, tuple[float, float, float]] = {
    TrackCondition.DAMP: (-0.2, -0.1, 0.0),
    TrackCondition.WET: (-0.4, -0.15, 0.15),
    TrackCondition.FLOODED: (-0.7, -0.3, 0.3),
}

# Metrics where a higher value is better when comparing predictions.
_HIGHER_IS_BETTER: tuple[str, ...] = (
    "handling_score",
    "stability_score",
    "cornering_grip",
    "braking_power",
    "traction_control",
    "fuel_efficiency",
)
_LOWER_IS_BETTER: tuple[str, ...] = ("zero_to_sixty", "tire_wear_rate")

_TIE_MARGIN: float = 0.05


# ---------------------------------------------------------------------------
# Result types
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class PerformanceMetrics:
    """Predicted performance of one tune.

    Attributes:
        zero_to_sixty: Seconds.
        zero_to_hundred: Seconds.
        quarter_mile_time: Seconds.
        quarter_mile_speed: Trap speed in mph.
        top_speed: mph.
        top_speed_with_aero: mph, after wing drag.
        handling_score: 0-10.
        understeer_tendency: -5 (oversteer) to +5 (understeer).
        stability_score: 0-10.
        fuel_efficiency: 5-25, relative.
        tire_wear_rate: Relative wear per lap.
        cornering_grip: 0.5-2.0 multiplier.
        braking_power: 0-10.
        traction_control: 0-10.
    """

    zero_to_sixty: float
    zero_to_hundred: float
    quarter_mile_time: float
    quarter_mile_speed: float
    top_speed: float
    top_speed_with_aero: float
    handling_score: float
    understeer_tendency: float
    stability_score: float
    fuel_efficiency: float
    tire_wear_rate: float
    cornering_grip: float
    braking_power: float
    traction_control: float

    def to_dict(self) -> dict[str, float]:
        return asdict(self)


METRIC_NAMES: tuple[str, ...] = tuple(f.name for f in fields(PerformanceMetrics))


@dataclass(frozen=True)
class PerformancePrediction:
    """Output of :meth:`PerformancePredictor.predict_performance`.

    Attributes:
        baseline: Metrics for fresh tyres and brakes.
        with_degradation: Metrics at the requested lap progress.
        environmental_impact: Absolute change per metric caused by the
            current conditions.  Only affected metrics are present.
        confidence: 0.6-0.95.
        limiting_factors: What holds the setup back.
        recommendations: Suggested changes.
    """

    baseline: PerformanceMetrics
    with_degradation: PerformanceMetrics
    environmental_impact: dict[str, float]
    confidence: float
    limiting_factors: list[str]
    recommendations: list[str]


def overall_score(metrics: PerformanceMetrics) -> float:
    """Weighted single-number summary used to pick a winner."""
    return (
        metrics.handling_score * 0.25
        + metrics.stability_score * 0.2
        + metrics.braking_power * 0.15
        + metrics.cornering_grip * 0.15
        + (11.0 - metrics.zero_to_sixty) * 0.15
        + (metrics.top_speed - 150.0) / 50.0 * 0.1
    ) / 10.0


# ---------------------------------------------------------------------------
# Predictor
# ---------------------------------------------------------------------------


class PerformancePredictor:
    """Predicts performance for a fixed car and tune.

    The environment is the only mutable part of the predictor; replace it
    with :meth:`update_environmental_conditions`.
    """

    def __init__(
        self,
        specs: CarSpecs,
        tune: TuneSettings,
        environment: EnvironmentalConditions | None = None,
    ):
        """Initialise the predictor.

        Args:
            specs: Car being evaluated.
            tune: Settings being evaluated.  Not modified.
            environment: Ambient conditions; defaults to
                :data:`DEFAULT_ENVIRONMENT`.
        """
        self.specs = specs
        self.tune = tune
        self.environment = environment if environment is not None else DEFAULT_ENVIRONMENT

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def predict_performance(self, lap_progress: float = 0.0) -> PerformancePrediction:
        """Predict baseline, degraded and environment-adjusted performance.

        Args:
            lap_progress: Fraction of race distance covered; clamped to
                [0, 1].

        Returns:
            A :class:`PerformancePrediction`.
        """
        baseline = self.baseline_performance()
        impact = self.environmental_impact(baseline)
        return PerformancePrediction(
            baseline=baseline,
            with_degradation=self.apply_degradation(baseline, lap_progress),
            environmental_impact=impact,
            confidence=self.prediction_confidence(),
            limiting_factors=self.limiting_factors(baseline),
            recommendations=self.recommendations(baseline, impact),
        )

    def update_environmental_conditions(self, patch: EnvironmentPatch) -> None:
        """Override the fields set in *patch*; later predictions see them."""
        self.environment = merge_environment(self.environment, patch)
        logger.debug(
            "environment_updated",
            track_conditions=self.environment.track_conditions.value,
            temperature=self.environment.temperature,
        )

    def compare_predictions(self, other: PerformancePredictor) -> dict[str, Any]:
        """Compare this predictor's tune with *other*'s.

        Returns:
            Dictionary containing:
                improvements -- Percent change per metric going from this
                    tune to *other*; positive means *other* is better.
                winner -- ``"current"``, ``"other"`` or ``"tie"``.
                tradeoffs -- What this tune gains and gives up against
                    *other*.
        """
        mine = self.baseline_performance()
        theirs = other.baseline_performance()

        improvements: dict[str, float] = {}
        for name in _HIGHER_IS_BETTER + _LOWER_IS_BETTER:
            before = getattr(mine, name)
            after = getattr(theirs, name)
            if before == 0.0:
                continue
            if name in _HIGHER_IS_BETTER:
                improvements[name] = round((after - before) / before * 100.0, 2)
            else:
                improvements[name] = round((before - after) / before * 100.0, 2)

        score_mine, score_theirs = overall_score(mine), overall_score(theirs)
        if abs(score_mine - score_theirs) < _TIE_MARGIN:
            winner = "tie"
        else:
            winner = "current" if score_mine > score_theirs else "other"

        return {
            "improvements": improvements,
            "winner": winner,
            "tradeoffs": _tradeoffs(mine, theirs),
        }

    # ------------------------------------------------------------------
    # Baseline
    # ------------------------------------------------------------------

    def tire_grip(self) -> float:
        return COMPOUND_GRIP.get(self.specs.tire_compound, 1.0)

    def drag_coefficient(self) -> float:
        return 0.32 if self.specs.has_aero else 0.35

    def frontal_area(self) -> float:
        return 22.0 if self.specs.has_aero else 24.0

    def baseline_performance(self) -> PerformanceMetrics:
        """Metrics for fresh tyres and brakes, ignoring the environment."""
        specs = self.specs
        horsepower = specs.effective_horsepower

        zero_to_sixty = estimate_zero_to_sixty_grip(horsepower, specs.weight, self.tire_grip())
        top_speed = estimate_top_speed_drag(
            horsepower, self.drag_coefficient(), self.frontal_area()
        )
        quarter = estimate_quarter_mile(zero_to_sixty, top_speed)

        return PerformanceMetrics(
            zero_to_sixty=zero_to_sixty,
            zero_to_hundred=estimate_zero_to_hundred(zero_to_sixty),
            quarter_mile_time=quarter["time"],
            quarter_mile_speed=quarter["speed"],
            top_speed=top_speed,
            top_speed_with_aero=(
                float(round(top_speed * 0.97)) if specs.has_aero else top_speed
            ),
            handling_score=self._handling_score(),
            understeer_tendency=self._understeer_tendency(),
            stability_score=self._stability_score(),
            fuel_efficiency=self._fuel_efficiency(),
            tire_wear_rate=self._tire_wear_rate(),
            cornering_grip=self._cornering_grip(),
            braking_power=self._braking_power(),
            traction_control=self._traction_control(),
        )

    def _handling_score(self) -> float:
        tune = self.tune
        score: float = 7.0 - abs(tune.arb_front - tune.arb_rear) * 0.1
        if tune.camber_front < -2.5:
            score += 0.5
        if tune.camber_rear < -2.0:
            score += 0.5
        if abs(tune.toe_front) > 0.2:
            score += 0.3
        return max(1.0, min(10.0, score))

    def _understeer_tendency(self) -> float:
        tune = self.tune
        weight_bias: float = (self.specs.weight_distribution - 50.0) * 0.1
        arb_bias: float = (tune.arb_front - tune.arb_rear) * 0.05
        aero_bias: float = (tune.aero_front - tune.aero_rear) * 0.02
        return max(-5.0, min(5.0, weight_bias + arb_bias + aero_bias))

    def _stability_score(self) -> float:
        tune = self.tune
        score: float = 7.0
        if tune.diff_accel_rear > 80.0:
            score += 0.5
        if tune.diff_decel_rear > 60.0:
            score += 0.3
        score += ((tune.arb_front + tune.arb_rear) / 2.0 - 50.0) * 0.02
        return max(1.0, min(10.0, score))

    def _cornering_grip(self) -> float:
        tune = self.tune
        camber_bonus: float = (abs(tune.camber_front) - 2.0) * 0.05
        pressure_bonus: float = (tune.tire_pressure_front - 30.0) * 0.01
        return max(0.5, min(2.0, self.tire_grip() + camber_bonus + pressure_bonus))

    def _braking_power(self) -> float:
        # Bias efficiency peaks at 53 % front.
        efficiency: float = 1.0 - abs(self.tune.brake_balance - 53.0) * 0.02
        return max(1.0, min(10.0, self.tune.brake_pressure / 10.0 * efficiency))

    def _traction_control(self) -> float:
        tune = self.tune
        if self.specs.drive_type == DriveType.FWD:
            lock, pressure = tune.diff_accel_front or 0.0, tune.tire_pressure_front
        else:
            lock, pressure = tune.diff_accel_rear, tune.tire_pressure_rear
        pressure_bonus: float = max(0.0, 1.0 - abs(pressure - 32.0) * 0.03)
        return max(1.0, min(10.0, 7.0 + lock / 100.0 + pressure_bonus))

    def _fuel_efficiency(self) -> float:
        specs = self.specs
        base: float = (
            specs.effective_horsepower / (specs.weight / 1000.0) / self.drag_coefficient() * 10.0
        )
        return max(5.0, min(25.0, base))

    def _tire_wear_rate(self) -> float:
        tune = self.tune
        camber_wear: float = abs(tune.camber_front) * 0.02
        pressure_wear: float = abs(tune.tire_pressure_front - 32.0) * 0.01
        load_wear: float = self.specs.weight / 3000.0 * 0.5
        return max(0.1, min(2.0, camber_wear + pressure_wear + load_wear))

    # ------------------------------------------------------------------
    # Degradation and environment
    # ------------------------------------------------------------------

    @staticmethod
    def apply_degradation(
        baseline: PerformanceMetrics, lap_progress: float
    ) -> PerformanceMetrics:
        """Wear tyres and brakes over *lap_progress* of the race distance.

        Tyre grip loss (capped at 15 %) and brake fade (capped at 10 %)
        only ever worsen the dynamic metrics.  Fuel burn gives a small top
        speed bonus; it trims the 0-60 time by less than tyre loss adds to
        it, so 0-60 never improves.  ``lap_progress == 0`` returns the
        baseline unchanged.
        """
        progress = max(0.0, min(1.0, lap_progress))
        if progress == 0.0:
            return baseline

        tire_loss: float = min(MAX_TIRE_GRIP_LOSS, progress * 0.08)
        brake_fade: float = min(MAX_BRAKE_FADE, progress * 0.05)
        fuel_burn: float = progress * 0.02
        wear: float = progress * 0.3

        zero_to_sixty: float = (
            baseline.zero_to_sixty * (1.0 + tire_loss * 0.5) * (1.0 - fuel_burn * 0.1)
        )
        return replace(
            baseline,
            zero_to_sixty=zero_to_sixty,
            zero_to_hundred=estimate_zero_to_hundred(zero_to_sixty),
            top_speed=baseline.top_speed * (1.0 + fuel_burn * 0.05),
            cornering_grip=baseline.cornering_grip * (1.0 - tire_loss),
            handling_score=baseline.handling_score * (1.0 - tire_loss * 0.5),
            braking_power=baseline.braking_power * (1.0 - brake_fade),
            stability_score=baseline.stability_score * (1.0 - wear * 0.1),
            tire_wear_rate=baseline.tire_wear_rate * (1.0 + wear),
        )

    def environmental_impact(self, baseline: PerformanceMetrics) -> dict[str, float]:
        """Absolute change per metric caused by the current conditions.

        Each active condition contributes its own delta and deltas for the
        same metric are summed.  Weather is informational; its effect comes
        through temperature, humidity and track conditions.
        """
        env = self.environment
        impact: dict[str, float] = {}

        def _add(metric: str, fraction: float) -> None:
            impact[metric] = impact.get(metric, 0.0) + getattr(baseline, metric) * fraction

        if env.temperature < 15.0:
            _add("cornering_grip", -0.15)
            _add("zero_to_sixty", 0.05)
        elif env.temperature > 30.0:
            _add("top_speed", -0.02)
            _add("fuel_efficiency", -0.08)

        if env.humidity > 80.0:
            _add("cornering_grip", -0.1)
            _add("braking_power", -0.05)

        effects = _TRACK_CONDITION_EFFECTS.get(env.track_conditions)
        if effects is not None:
            grip, braking, launch = effects
            _add("cornering_grip", grip)
            _add("braking_power", braking)
            if launch:
                _add("zero_to_sixty", launch)

        if env.wind_speed > 20.0:
            _add("top_speed", -0.05)
            _add("fuel_efficiency", -0.05)

        power_loss: float = 1.0 - altitude_power_factor(env.altitude)
        if power_loss > 0.0:
            _add("zero_to_sixty", power_loss)
            _add("top_speed", -power_loss / 3.0)

        return {name: round(delta, 4) for name, delta in impact.items()}

    def adjusted_performance(self) -> PerformanceMetrics:
        """Baseline metrics with the current environment's deltas applied."""
        baseline = self.baseline_performance()
        impact = self.environmental_impact(baseline)
        if not impact:
            return baseline
        updates = {name: getattr(baseline, name) + delta for name, delta in impact.items()}
        if "zero_to_sixty" in updates:
            updates["zero_to_hundred"] = estimate_zero_to_hundred(updates["zero_to_sixty"])
        return replace(baseline, **updates)

    # ------------------------------------------------------------------
    # Confidence and advice
    # ------------------------------------------------------------------

    def prediction_confidence(self) -> float:
        """0.6-0.95; lower with missing car data, higher with detailed tunes."""
        confidence: float = _BASE_CONFIDENCE
        if self.specs.horsepower is None:
            confidence *= 0.9
        if not self.specs.has_aero:
            confidence *= 0.95
        if self.environment.temperature == _DEFAULT_TEMPERATURE:
            confidence *= 0.98
        if self.tune.aero_front > 0.0:
            confidence *= 1.05
        if self.tune.tire_pressure_front != self.tune.tire_pressure_rear:
            confidence *= 1.02
        return round(max(MIN_CONFIDENCE, min(MAX_CONFIDENCE, confidence)), 4)

    @staticmethod
    def limiting_factors(performance: PerformanceMetrics) -> list[str]:
        factors: list[str] = []
        if performance.handling_score < 6.0:
            factors.append("Suspension setup limiting cornering performance")
        if performance.braking_power < 7.0:
            factors.append("Brake system not optimized for track use")
        if performance.tire_wear_rate > 0.8:
            factors.append("Tire compound may not last full race distance")
        if performance.fuel_efficiency < 8.0:
            factors.append("Aerodynamic drag significantly impacting efficiency")
        if abs(performance.understeer_tendency) > 2.0:
            factors.append("Balance heavily biased - may cause handling issues")
        if performance.top_speed < 180.0:
            factors.append("Power-to-weight ratio limiting straight-line speed")
        return factors or ["Setup appears well-balanced"]

    def recommendations(
        self, baseline: PerformanceMetrics, impact: dict[str, float]
    ) -> list[str]:
        recs: list[str] = []
        if baseline.handling_score < 7.0:
            recs.append("Consider stiffer front anti-roll bar to improve turn-in response")
        if baseline.braking_power < 8.0:
            recs.append("Increase brake pressure and bias for better stopping power")
        if baseline.tire_wear_rate > 0.7:
            recs.append("Switch to harder tire compound or increase pressures")
        if impact.get("cornering_grip", 0.0) < -0.2:
            recs.append("Weather conditions require softer tire pressures for better grip")
        if baseline.zero_to_sixty > 6.0:
            recs.append("Consider gear ratio optimization for better acceleration")
        if baseline.top_speed < 190.0 and self.tune.aero_front < 50.0:
            recs.append("Reduce rear wing angle to cut drag and raise top speed")
        return recs or ["Current setup is well-optimized"]


def _tradeoffs(first: PerformanceMetrics, second: PerformanceMetrics) -> list[str]:
    tradeoffs: list[str] = []
    if first.zero_to_sixty < second.zero_to_sixty and first.handling_score < second.handling_score:
        tradeoffs.append("Better acceleration but worse handling")
    if first.top_speed > second.top_speed and first.fuel_efficiency < second.fuel_efficiency:
        tradeoffs.append("Higher top speed but worse fuel efficiency")
    if first.braking_power > second.braking_power and first.stability_score < second.stability_score:
        tradeoffs.append("Better braking but reduced stability")
    return tradeoffs
