"""Tests for community pattern mining and smart recommendations."""

import threading
from dataclasses import replace

import pytest

from fh_tuner.core.car import CarSpecs, DriveType, PIClass
from fh_tuner.core.patterns import (
    EMPTY_CONFIDENCE,
    EMPTY_REASON,
    MAX_CONFIDENCE,
    RETURNED_SIMILAR,
    CommunityStore,
    PatternMiner,
    TuneDataPoint,
    car_similarity,
    cluster_values,
    common_settings,
    community_score,
    tune_similarity,
)
from fh_tuner.core.predictor import PerformancePredictor
from fh_tuner.core.tune import TuneSettings

# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


def _make_specs(**overrides) -> CarSpecs:
    base = dict(
        weight=3000.0,
        weight_distribution=52.0,
        drive_type=DriveType.RWD,
        pi_class=PIClass.A,
        horsepower=300.0,
    )
    base.update(overrides)
    return CarSpecs(**base)


_BASELINE = PerformancePredictor(_make_specs(), TuneSettings()).baseline_performance()


def _make_record(idx: int, **overrides) -> TuneDataPoint:
    base = dict(
        id=f"tune-{idx}",
        car=_make_specs(),
        car_name="Honda Civic Type R",
        tune=TuneSettings(),
        performance=_BASELINE,
    )
    base.update(overrides)
    return TuneDataPoint(**base)


def _make_miner(records) -> PatternMiner:
    return PatternMiner(CommunityStore(records))


# ---------------------------------------------------------------------------
# Records and store
# ---------------------------------------------------------------------------


def test_record_validation() -> None:
    """Records need an id, a 1-5 rating and a positive lap time."""
    with pytest.raises(ValueError, match="id"):
        _make_record(0, id="")
    with pytest.raises(ValueError, match="user_rating"):
        _make_record(0, user_rating=6.0)
    with pytest.raises(ValueError, match="lap_time"):
        _make_record(0, lap_time=0.0)


def test_store_snapshot_is_stable() -> None:
    """A snapshot does not see records added after it was taken."""
    store = CommunityStore([_make_record(0)])
    snapshot = store.snapshot()
    store.add(_make_record(1))
    assert len(snapshot) == 1
    assert len(store) == 2


def test_store_concurrent_adds() -> None:
    """Appends from several threads are all kept."""
    store = CommunityStore()

    def _writer(offset: int) -> None:
        for i in range(50):
            store.add(_make_record(offset * 100 + i))

    threads = [threading.Thread(target=_writer, args=(n,)) for n in range(4)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()
    assert len(store) == 200
    assert len({r.id for r in store.snapshot()}) == 200


# ---------------------------------------------------------------------------
# Similarity and clustering
# ---------------------------------------------------------------------------


def test_car_similarity() -> None:
    """Identical cars score 1; AWD against RWD half-matches the drivetrain."""
    car = _make_specs()
    assert car_similarity(car, car) == 1.0
    assert abs(car_similarity(car, _make_specs(drive_type=DriveType.AWD)) - 0.9) < 1e-9
    assert abs(car_similarity(car, _make_specs(drive_type=DriveType.FWD)) - 0.8) < 1e-9


def test_tune_similarity() -> None:
    """Identical tunes score 1 and fields that are zero in the query are skipped."""
    tune = TuneSettings()
    assert tune_similarity(tune, tune) == 1.0
    far = TuneSettings(springs_front=100.0, springs_rear=100.0)
    assert tune_similarity(tune, far) < 1.0
    blank = TuneSettings(
        springs_front=0.0,
        springs_rear=0.0,
        arb_front=0.0,
        arb_rear=0.0,
        camber_front=0.0,
        camber_rear=0.0,
        tire_pressure_front=0.0,
        tire_pressure_rear=0.0,
    )
    assert tune_similarity(blank, tune) == 0.0


def test_cluster_values() -> None:
    """Three well separated groups give three clusters of two."""
    clusters = cluster_values([9.1, 1.0, 5.2, 1.1, 9.0, 5.0])
    assert [count for _, count in clusters] == [2, 2, 2]
    assert clusters[0][0] == pytest.approx(1.05)
    assert clusters[1][0] == pytest.approx(5.1)
    assert clusters[2][0] == pytest.approx(9.05)


def test_cluster_values_small_input() -> None:
    """With no more values than clusters each value stands alone."""
    assert cluster_values([3.0, 1.0]) == [(1.0, 1), (3.0, 1)]


def test_common_settings_needs_three_records() -> None:
    """Two records are too few to call anything common."""
    assert common_settings([_make_record(0), _make_record(1)]) == []


def test_community_score_rewards_validation() -> None:
    """Validated tunes score 10 % higher."""
    plain = _make_record(0)
    validated = _make_record(1, validated=True)
    assert community_score(validated) == pytest.approx(community_score(plain) * 1.1)


# ---------------------------------------------------------------------------
# Recommendations
# ---------------------------------------------------------------------------


def test_empty_store_gives_low_confidence() -> None:
    """No community data yields the fixed low-confidence answer."""
    rec = PatternMiner().get_smart_recommendations(_make_specs(), TuneSettings())
    assert rec.confidence == EMPTY_CONFIDENCE
    assert rec.reasoning == [EMPTY_REASON]
    assert rec.similar_tunes == []
    assert rec.predicted_improvement == 0.0
    assert rec.risk_level == "high"


def test_dissimilar_records_are_ignored() -> None:
    """A record for a very different car and tune is below the similarity floor."""
    other = _make_record(
        0,
        car=_make_specs(
            weight=6000.0,
            weight_distribution=30.0,
            drive_type=DriveType.FWD,
            pi_class=PIClass.D,
            horsepower=900.0,
        ),
        tune=TuneSettings(
            springs_front=100.0,
            springs_rear=100.0,
            arb_front=65.0,
            arb_rear=65.0,
            camber_front=-5.0,
            camber_rear=-5.0,
            tire_pressure_front=55.0,
            tire_pressure_rear=55.0,
        ),
    )
    miner = _make_miner([other])
    assert miner.find_similar_tunes(_make_specs(), TuneSettings()) == []
    assert miner.get_smart_recommendations(_make_specs(), TuneSettings()).confidence == EMPTY_CONFIDENCE


def test_well_validated_data_gives_low_risk() -> None:
    """Ten validated five-star tunes cap confidence and give low risk."""
    better = replace(_BASELINE, handling_score=_BASELINE.handling_score * 1.1)
    records = [
        _make_record(i, performance=better, user_rating=5.0, validated=True) for i in range(10)
    ]
    rec = _make_miner(records).get_smart_recommendations(_make_specs(), TuneSettings())
    assert rec.confidence == MAX_CONFIDENCE
    assert rec.risk_level == "low"
    assert len(rec.similar_tunes) == RETURNED_SIMILAR
    assert rec.predicted_improvement == pytest.approx(10.0)
    assert rec.reasoning[0] == "Found 10 similar tunes in community data"
    assert "10 similar tunes have been validated in-game" in rec.reasoning


def test_medium_risk_and_improvement_clamp() -> None:
    """Five unvalidated four-star tunes give medium risk; big gains are clamped."""
    much_better = replace(_BASELINE, handling_score=_BASELINE.handling_score * 2.0)
    records = [_make_record(i, performance=much_better, user_rating=4.0) for i in range(5)]
    rec = _make_miner(records).get_smart_recommendations(_make_specs(), TuneSettings())
    assert rec.confidence == 0.5
    assert rec.risk_level == "medium"
    assert rec.predicted_improvement == 25.0


def test_objective_is_checked_and_reported() -> None:
    """Unknown objectives fail; non-balanced ones are named in the reasoning."""
    miner = _make_miner([_make_record(i) for i in range(3)])
    with pytest.raises(ValueError, match="Unknown objective"):
        miner.get_smart_recommendations(_make_specs(), TuneSettings(), objective="drift")
    rec = miner.get_smart_recommendations(_make_specs(), TuneSettings(), objective="handling")
    assert rec.reasoning[-1] == "Ranked for handling"


def test_analyze_patterns_uses_top_quartile() -> None:
    """Ranges come from the best quarter of the similar tunes."""
    records = [
        _make_record(
            i,
            tune=TuneSettings(springs_front=400.0 + 10.0 * i),
            performance=replace(_BASELINE, handling_score=5.0 + 0.3 * i),
        )
        for i in range(16)
    ]
    miner = _make_miner(records)
    analysis = miner.analyze_patterns(records)

    springs = analysis.optimal_ranges["springs_front"]
    assert springs.min == pytest.approx(527.5)
    assert springs.optimal == pytest.approx(535.0)
    assert springs.max == pytest.approx(542.5)
    assert "arb_front around 30.0 (100% of top tunes)" in analysis.success_factors


def test_too_few_records_give_empty_patterns() -> None:
    """Under three similar tunes nothing is mined."""
    analysis = PatternMiner().analyze_patterns([_make_record(0), _make_record(1)])
    assert analysis.optimal_ranges == {}
    assert analysis.success_factors == []


def test_pattern_cache_is_keyed_on_the_similar_set() -> None:
    """A small set cached first does not hide a larger set with the same car name."""
    records = [_make_record(i, car_name="Civic") for i in range(12)]
    miner = _make_miner(records)
    assert miner.analyze_patterns(records[:2]).optimal_ranges == {}
    assert miner.analyze_patterns(records).optimal_ranges != {}
    assert miner.analyze_patterns(records) == PatternMiner().analyze_patterns(records)


def test_consecutive_queries_match_a_fresh_miner() -> None:
    """Querying another car first does not change the next car's patterns."""
    other_car = _make_specs(weight=4200.0, drive_type=DriveType.AWD, horsepower=700.0)
    other_tune = TuneSettings(springs_front=900.0, springs_rear=900.0, arb_front=60.0)
    records = [_make_record(i, car_name="Civic") for i in range(12)] + [
        _make_record(100 + i, car=other_car, car_name="Civic", tune=other_tune) for i in range(2)
    ]

    miner = _make_miner(records)
    miner.get_smart_recommendations(other_car, other_tune)
    second = miner.get_smart_recommendations(_make_specs(), TuneSettings())
    fresh = _make_miner(records).get_smart_recommendations(_make_specs(), TuneSettings())
    assert second.patterns == fresh.patterns
    assert second.patterns.optimal_ranges != {}


def test_adding_data_clears_pattern_cache() -> None:
    """New records invalidate the cached patterns."""
    miner = _make_miner([_make_record(i) for i in range(4)])
    miner.get_smart_recommendations(_make_specs(), TuneSettings())
    assert list(miner.export_learned_patterns()["pattern_cache"]) == ["tune-0|tune-1|tune-2|tune-3"]

    miner.add_tune_data(_make_record(99))
    exported = miner.export_learned_patterns()
    assert exported["pattern_cache"] == {}
    assert exported["total_tunes"] == 5


# ---------------------------------------------------------------------------
# Community stats
# ---------------------------------------------------------------------------


def test_community_stats() -> None:
    """Stats count validation, default missing ratings to 3 and rank tags."""
    miner = _make_miner(
        [
            _make_record(0, user_rating=5.0, validated=True, tags=("drift", "circuit")),
            _make_record(1, tags=("drift",)),
            _make_record(2, user_rating=4.0),
        ]
    )
    stats = miner.get_community_stats()
    assert stats["total_tunes"] == 3
    assert stats["validated_tunes"] == 1
    assert stats["average_rating"] == 4.0
    assert stats["top_tags"][0] == {"tag": "drift", "count": 2}


def test_community_stats_empty() -> None:
    """An empty store reports zeros."""
    assert PatternMiner().get_community_stats() == {
        "total_tunes": 0,
        "validated_tunes": 0,
        "average_rating": 0.0,
        "top_tags": [],
    }
