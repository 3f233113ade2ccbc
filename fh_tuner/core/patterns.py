"""Community pattern mining.

Community-submitted tunes live in a :class:`CommunityStore`, an
append-only log guarded by a lock.  Readers take an immutable snapshot, so
a :class:`PatternMiner` can serve recommendations while another thread
appends records.

For a (car, tune) query the miner:

1. scores every record by similarity (40 % car, 40 % tune, 20 % PI class)
   and keeps the 20 best above 0.3;
2. ranks those by community performance and mines the top and bottom
   quartiles for parameter ranges (pandas) and clusters of common values
   (1-D k-means with k = 3);
3. turns sample size, validation and ratings into a confidence and a risk
   level.

Small samples degrade to low confidence and high risk; nothing here
raises for lack of data.
"""

from __future__ import annotations

import math
import threading
from dataclasses import asdict, dataclass, field
from typing import Any, Iterable, Sequence

import numpy as np
import pandas as pd
import structlog

from fh_tuner.core.car import CarSpecs, DriveType
from fh_tuner.core.predictor import PerformanceMetrics, PerformancePredictor
from fh_tuner.core.tune import TuneSettings

logger = structlog.get_logger(__name__)

SIMILARITY_FLOOR: float = 0.3
MAX_SIMILAR: int = 20
RETURNED_SIMILAR: int = 5
MAX_CONFIDENCE: float = 0.95

EMPTY_CONFIDENCE: float = 0.3
EMPTY_REASON: str = "Limited community data available for this car/setup combination"

OBJECTIVES: tuple[str, ...] = ("performance", "handling", "balanced")

# Fields compared when measuring tune similarity.
SIMILARITY_FIELDS: tuple[str, ...] = (
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
# Fields summarised into quartile ranges.
RANGE_FIELDS: tuple[str, ...] = SIMILARITY_FIELDS[:8]
# Fields clustered for success and pitfall settings.
CLUSTER_FIELDS: tuple[str, ...] = SIMILARITY_FIELDS[:6]

CLUSTER_COUNT: int = 3
_KMEANS_MAX_ITER: int = 10
# A cluster is "common" when it holds at least this share of the values.
_COMMON_SHARE: float = 0.4

IMPROVEMENT_RANGE: tuple[float, float] = (-10.0, 25.0)


# ---------------------------------------------------------------------------
# Records and store
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class TuneDataPoint:
    """One community-submitted tune.  Never modified after insert.

    Attributes:
        id: Unique record id.
        car: Specs of the car the tune was built for.
        car_name: Make and model, e.g. ``"Honda Civic Type R"``.
        tune: Submitted settings.
        performance: Metrics recorded for the tune.
        track_id: Track the tune was built for, if any.
        user_rating: 1-5 stars, if rated.
        lap_time: Reported lap time in seconds, if any.
        tags: Free-form labels such as ``"drift"`` or ``"circuit"``.
        submitted_by: Author handle.
        timestamp: Submission time, seconds since the epoch.
        validated: Whether the tune was confirmed in-game.
    """

    id: str
    car: CarSpecs
    car_name: str
    tune: TuneSettings
    performance: PerformanceMetrics
    track_id: str | None = None
    user_rating: float | None = None
    lap_time: float | None = None
    tags: tuple[str, ...] = ()
    submitted_by: str = ""
    timestamp: float = 0.0
    validated: bool = False

    def __post_init__(self) -> None:
        if not self.id:
            raise ValueError("TuneDataPoint id must be non-empty.")
        if self.user_rating is not None and not 1.0 <= self.user_rating <= 5.0:
            raise ValueError("user_rating must be between 1 and 5.")
        if self.lap_time is not None and self.lap_time <= 0.0:
            raise ValueError("lap_time must be > 0 when given.")


class CommunityStore:
    """Append-only, thread-safe log of community tunes."""

    def __init__(self, records: Iterable[TuneDataPoint] = ()):
        self._lock = threading.Lock()
        self._records: list[TuneDataPoint] = list(records)

    def add(self, record: TuneDataPoint) -> None:
        with self._lock:
            self._records.append(record)

    def snapshot(self) -> tuple[TuneDataPoint, ...]:
        """Immutable view of every record stored so far."""
        with self._lock:
            return tuple(self._records)

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)


# ---------------------------------------------------------------------------
# Results
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ParameterRange:
    min: float
    max: float
    optimal: float


@dataclass(frozen=True)
class PatternAnalysis:
    """What the best and worst similar tunes have in common.

    Attributes:
        optimal_ranges: Inter-quartile range and median per field, from the
            top quartile.
        success_factors: Settings shared by the top quartile.
        common_pitfalls: Settings shared by the bottom quartile but not the
            top one.
    """

    optimal_ranges: dict[str, ParameterRange] = field(default_factory=dict)
    success_factors: list[str] = field(default_factory=list)
    common_pitfalls: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class CommonSetting:
    parameter: str
    value: float
    frequency: float


@dataclass(frozen=True)
class SmartRecommendation:
    """Advice distilled from similar community tunes.

    Attributes:
        confidence: 0-0.95.
        reasoning: Human-readable explanation lines.
        similar_tunes: Up to five most similar records, best first.
        predicted_improvement: Expected handling change in percent
            (-10 to 25).
        risk_level: ``"low"``, ``"medium"`` or ``"high"``.
        patterns: Mined patterns behind the advice.
    """

    confidence: float
    reasoning: list[str]
    similar_tunes: list[TuneDataPoint]
    predicted_improvement: float
    risk_level: str
    patterns: PatternAnalysis = field(default_factory=PatternAnalysis)


# ---------------------------------------------------------------------------
# Similarity and clustering
# ---------------------------------------------------------------------------


def car_similarity(first: CarSpecs, second: CarSpecs) -> float:
    """0-1 similarity of two cars by weight, balance, drivetrain, power and PI."""
    factors: list[float] = []

    weight_diff = abs(first.weight - second.weight) / max(first.weight, second.weight)
    factors.append(max(0.0, 1.0 - weight_diff * 2.5))

    balance_diff = abs(first.weight_distribution - second.weight_distribution)
    factors.append(max(0.0, 1.0 - balance_diff / 15.0))

    if first.drive_type == second.drive_type:
        factors.append(1.0)
    elif DriveType.AWD in (first.drive_type, second.drive_type) and DriveType.FWD not in (
        first.drive_type,
        second.drive_type,
    ):
        factors.append(0.5)
    else:
        factors.append(0.0)

    if first.horsepower is not None and second.horsepower is not None:
        power_diff = abs(first.horsepower - second.horsepower) / max(
            first.horsepower, second.horsepower
        )
        factors.append(max(0.0, 1.0 - power_diff * 1.25))

    class_gap = abs(first.pi_class.rank - second.pi_class.rank)
    factors.append(max(0.0, 1.0 - class_gap * 0.2))

    return sum(factors) / len(factors)


def tune_similarity(first: TuneSettings, second: TuneSettings) -> float:
    """0-1 similarity of two tunes; a 50 % difference in a field scores 0.

    Fields that are zero in *first* are skipped.
    """
    scores: list[float] = []
    for name in SIMILARITY_FIELDS:
        a, b = getattr(first, name), getattr(second, name)
        if a == 0.0:
            continue
        diff = abs(a - b) / max(abs(a), abs(b))
        scores.append(max(0.0, 1.0 - diff * 2.0))
    return sum(scores) / len(scores) if scores else 0.0


def record_similarity(car: CarSpecs, tune: TuneSettings, record: TuneDataPoint) -> float:
    class_match = 1.0 if car.pi_class == record.car.pi_class else 0.5
    return (
        car_similarity(car, record.car) * 0.4
        + tune_similarity(tune, record.tune) * 0.4
        + class_match * 0.2
    )


def cluster_values(values: Sequence[float], k: int = CLUSTER_COUNT) -> list[tuple[float, int]]:
    """1-D k-means.

    Centres start at evenly spaced order statistics.  With ``k`` or fewer
    values each value is its own cluster.

    Returns:
        ``(centre, count)`` per cluster, lowest centre first.
    """
    data = np.sort(np.asarray(values, dtype=float))
    if data.size <= k:
        return [(float(v), 1) for v in data]

    centres = data[[(i * data.size) // k for i in range(k)]].copy()
    labels = np.zeros(data.size, dtype=int)
    for _ in range(_KMEANS_MAX_ITER):
        labels = np.argmin(np.abs(data[:, None] - centres[None, :]), axis=1)
        updated = centres.copy()
        for idx in range(k):
            members = data[labels == idx]
            if members.size:
                updated[idx] = members.mean()
        if np.allclose(updated, centres):
            break
        centres = updated

    counts = np.bincount(labels, minlength=k)
    return [(float(c), int(n)) for c, n in zip(centres, counts)]


def common_settings(records: Sequence[TuneDataPoint]) -> list[CommonSetting]:
    """Values shared by at least 40 % of *records*, most frequent first."""
    found: list[CommonSetting] = []
    for name in CLUSTER_FIELDS:
        values = [getattr(r.tune, name) for r in records]
        if len(values) < 3:
            continue
        needed = math.ceil(len(values) * _COMMON_SHARE)
        for centre, count in cluster_values(values):
            if count >= needed:
                found.append(CommonSetting(name, centre, count / len(values)))
    found.sort(key=lambda s: s.frequency, reverse=True)
    return found


def community_score(record: TuneDataPoint) -> float:
    """Ranking score of a community tune; unrated tunes count as 3 stars."""
    perf = record.performance
    rating = record.user_rating if record.user_rating is not None else 3.0
    score: float = (
        perf.handling_score / 10.0 * 0.3
        + perf.stability_score / 10.0 * 0.25
        + perf.braking_power / 10.0 * 0.2
        + (11.0 - perf.zero_to_sixty) / 11.0 * 0.15
        + rating / 5.0 * 0.1
    )
    if record.validated:
        score *= 1.1
    return score


# ---------------------------------------------------------------------------
# Miner
# ---------------------------------------------------------------------------


class PatternMiner:
    """Similarity-based recommendations over a :class:`CommunityStore`."""

    def __init__(self, store: CommunityStore | None = None):
        self.store = store if store is not None else CommunityStore()
        self._cache_lock = threading.Lock()
        self._pattern_cache: dict[str, PatternAnalysis] = {}

    def add_tune_data(self, record: TuneDataPoint) -> None:
        """Append *record* to the store and drop cached patterns."""
        self.store.add(record)
        with self._cache_lock:
            self._pattern_cache.clear()
        logger.debug(
            "community_tune_added",
            record_id=record.id,
            submitted_by=record.submitted_by,
            total=len(self.store),
        )

    def find_similar_tunes(
        self, car: CarSpecs, tune: TuneSettings, limit: int = MAX_SIMILAR
    ) -> list[TuneDataPoint]:
        scored = [
            (record_similarity(car, tune, record), record) for record in self.store.snapshot()
        ]
        scored = [pair for pair in scored if pair[0] > SIMILARITY_FLOOR]
        scored.sort(key=lambda pair: pair[0], reverse=True)
        return [record for _, record in scored[:limit]]

    def analyze_patterns(self, similar: Sequence[TuneDataPoint]) -> PatternAnalysis:
        """Quartile ranges and common settings of *similar* tunes.

        Fewer than three tunes give an empty analysis.  Results are cached
        per similar set (record ids in order) until new data arrives.
        """
        cache_key = "|".join(record.id for record in similar) or "empty"
        with self._cache_lock:
            cached = self._pattern_cache.get(cache_key)
        if cached is not None:
            return cached

        if len(similar) < 3:
            analysis = PatternAnalysis()
        else:
            ranked = sorted(similar, key=community_score, reverse=True)
            quartile = math.ceil(len(ranked) * 0.25)
            top, bottom = ranked[:quartile], ranked[-quartile:]

            frame = pd.DataFrame([{name: getattr(r.tune, name) for name in RANGE_FIELDS} for r in top])
            quantiles = frame.quantile([0.25, 0.5, 0.75])
            ranges = {
                name: ParameterRange(
                    min=float(quantiles.at[0.25, name]),
                    max=float(quantiles.at[0.75, name]),
                    optimal=float(quantiles.at[0.5, name]),
                )
                for name in RANGE_FIELDS
            }

            successes = common_settings(top)
            success_names = {s.parameter for s in successes}
            pitfalls = [p for p in common_settings(bottom) if p.parameter not in success_names]
            analysis = PatternAnalysis(
                optimal_ranges=ranges,
                success_factors=[
                    f"{s.parameter} around {s.value:.1f} ({s.frequency * 100:.0f}% of top tunes)"
                    for s in successes
                ],
                common_pitfalls=[
                    f"Avoid {p.parameter} values around {p.value:.1f}" for p in pitfalls
                ],
            )

        with self._cache_lock:
            self._pattern_cache[cache_key] = analysis
        return analysis

    def get_smart_recommendations(
        self, car: CarSpecs, tune: TuneSettings, objective: str = "balanced"
    ) -> SmartRecommendation:
        """Advice for *tune* on *car* from similar community tunes.

        Args:
            car: Car being tuned.
            tune: Current settings.
            objective: ``"performance"``, ``"handling"`` or ``"balanced"``.

        Raises:
            ValueError: If *objective* is unknown.
        """
        if objective not in OBJECTIVES:
            raise ValueError(f"Unknown objective '{objective}'. Expected one of {list(OBJECTIVES)}.")

        similar = self.find_similar_tunes(car, tune)
        if not similar:
            logger.debug("no_similar_tunes", records=len(self.store))
            return SmartRecommendation(
                confidence=EMPTY_CONFIDENCE,
                reasoning=[EMPTY_REASON],
                similar_tunes=[],
                predicted_improvement=0.0,
                risk_level="high",
            )

        patterns = self.analyze_patterns(similar)
        confidence = _confidence(similar)
        current = PerformancePredictor(car, tune).baseline_performance()
        recommendation = SmartRecommendation(
            confidence=confidence,
            reasoning=_reasoning(similar, patterns, objective),
            similar_tunes=similar[:RETURNED_SIMILAR],
            predicted_improvement=_predicted_improvement(current, similar),
            risk_level=_risk_level(confidence, len(similar)),
            patterns=patterns,
        )
        logger.info(
            "smart_recommendations",
            similar=len(similar),
            confidence=confidence,
            risk_level=recommendation.risk_level,
        )
        return recommendation

    # ------------------------------------------------------------------
    # Reporting
    # ------------------------------------------------------------------

    def get_community_stats(self) -> dict[str, Any]:
        """Summary of the whole store.

        Returns:
            Dictionary containing:
                total_tunes -- Number of records.
                validated_tunes -- Records confirmed in-game.
                average_rating -- Mean rating, unrated counted as 3.
                top_tags -- Up to five ``{"tag", "count"}`` entries.
        """
        records = self.store.snapshot()
        if not records:
            return {"total_tunes": 0, "validated_tunes": 0, "average_rating": 0.0, "top_tags": []}

        frame = pd.DataFrame(
            {
                "validated": [r.validated for r in records],
                "rating": [r.user_rating for r in records],
            }
        )
        tags = pd.Series([tag for r in records for tag in r.tags], dtype=object)
        top_tags = [
            {"tag": str(tag), "count": int(count)}
            for tag, count in tags.value_counts().head(5).items()
        ]
        return {
            "total_tunes": len(records),
            "validated_tunes": int(frame["validated"].sum()),
            "average_rating": round(float(frame["rating"].fillna(3.0).mean()), 2),
            "top_tags": top_tags,
        }

    def export_learned_patterns(self) -> dict[str, Any]:
        """JSON-compatible dump of cached patterns and community stats."""
        with self._cache_lock:
            cache = {key: asdict(value) for key, value in self._pattern_cache.items()}
        return {
            "total_tunes": len(self.store),
            "pattern_cache": cache,
            "community_stats": self.get_community_stats(),
        }


# ---------------------------------------------------------------------------
# Scoring helpers
# ---------------------------------------------------------------------------


def _confidence(similar: Sequence[TuneDataPoint]) -> float:
    count = len(similar)
    if count >= 10:
        confidence = 0.4
    elif count >= 5:
        confidence = 0.3
    elif count >= 3:
        confidence = 0.2
    else:
        confidence = 0.1

    validated = sum(1 for r in similar if r.validated)
    high_rated = sum(1 for r in similar if (r.user_rating or 0.0) >= 4.0)
    confidence += validated / count * 0.3
    confidence += high_rated / count * 0.2
    if validated:
        confidence += 0.1
    return round(min(MAX_CONFIDENCE, confidence), 4)


def _reasoning(
    similar: Sequence[TuneDataPoint], patterns: PatternAnalysis, objective: str
) -> list[str]:
    reasoning = [f"Found {len(similar)} similar tunes in community data"]
    if patterns.success_factors:
        reasoning.append(f"Community data shows: {patterns.success_factors[0]}")
    if patterns.common_pitfalls:
        reasoning.append(f"Avoid: {patterns.common_pitfalls[0]}")

    validated = sum(1 for r in similar if r.validated)
    if validated:
        reasoning.append(f"{validated} similar tunes have been validated in-game")

    ratings = [r.user_rating if r.user_rating is not None else 3.0 for r in similar]
    average = sum(ratings) / len(ratings)
    if average >= 4.0:
        reasoning.append(f"Similar tunes have high community ratings ({average:.1f}/5 stars)")

    if objective != "balanced":
        reasoning.append(f"Ranked for {objective}")
    return reasoning


def _predicted_improvement(current: PerformanceMetrics, similar: Sequence[TuneDataPoint]) -> float:
    """Mean handling gain of the similar tunes over *current*, in percent."""
    gains = [
        (r.performance.handling_score - current.handling_score) / current.handling_score * 100.0
        for r in similar
    ]
    low, high = IMPROVEMENT_RANGE
    return round(max(low, min(high, sum(gains) / len(gains))), 2)


def _risk_level(confidence: float, sample_size: int) -> str:
    if confidence >= 0.7 and sample_size >= 5:
        return "low"
    if confidence >= 0.5 and sample_size >= 3:
        return "medium"
    return "high"
