"""Tyre compound data, pressure adjustment and compatibility scoring.

Compound records are loaded from ``data/tire_compounds.yaml`` (see
:func:`fh_tuner.config.get_tire_compound`).  The compatibility scorer rates
a compound for a car, a track and the weather on four 0-100 sub-scores.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from fh_tuner.core.car import CarSpecs, DriveType, PIClass, TireCompound
from fh_tuner.core.environment import Weather
from fh_tuner.core.tune import clamp_field

# Optimal operating temperature per compound used for the temperature match.
_OPTIMAL_TEMPS: dict[TireCompound, float] = {
    TireCompound.STREET: 75.0,
    TireCompound.SPORT: 85.0,
    TireCompound.SEMI_SLICK: 95.0,
    TireCompound.SLICK: 105.0,
}
_DEFAULT_OPTIMAL_TEMP: float = 85.0

_HIGH_PI: tuple[PIClass, ...] = (PIClass.S1, PIClass.S2)
_WET_WEATHER: tuple[Weather, ...] = (Weather.RAIN, Weather.STORM)


@dataclass(frozen=True)
class PressureAdjustments:
    """PSI offsets applied on top of the cold pressure target."""

    hot_climate: float = 0.0
    cold_climate: float = 0.0
    high_speed: float = 0.0
    technical: float = 0.0
    offroad: float = 0.0


@dataclass(frozen=True)
class TireCompoundSpec:
    """Reference data for one tyre compound.

    Attributes:
        id: Compound key, e.g. ``"semi-slick"``.
        name: Display name.
        category: ``"road"``, ``"race"``, ``"offroad"`` or ``"drag"``.
        base_grip: Overall dry grip multiplier of the compound.
        dry_grip, wet_grip, dirt_grip, gravel_grip: Per-surface grip.
        cold_pressure_target: Starting pressure in PSI.
        warm_pressure_target: Pressure once up to temperature.
        optimal_temp_celsius: Start of the working window.
        overheating_start_temp: Temperature where grip starts to fall.
        wear_rate: Approximate life in laps.
        recommended_pi_min, recommended_pi_max: Suggested PI window.
        recommended_tune_types: Tune types this compound suits.
        pressure_adjustments: Condition offsets for
            :func:`adjust_tire_pressure`.
        aliases: Alternative keys accepted by the lookup.
    """

    id: str
    name: str
    category: str
    base_grip: float
    dry_grip: float
    wet_grip: float
    dirt_grip: float
    gravel_grip: float
    cold_pressure_target: float
    warm_pressure_target: float
    optimal_temp_celsius: float
    overheating_start_temp: float
    wear_rate: float
    recommended_pi_min: int
    recommended_pi_max: int
    recommended_tune_types: tuple[str, ...] = ()
    pressure_adjustments: PressureAdjustments = PressureAdjustments()
    aliases: tuple[str, ...] = ()
    notes: tuple[str, ...] = ()

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> TireCompoundSpec:
        """Build a compound from one entry of the YAML table."""
        pi_window = data["recommended_pi"]
        return cls(
            id=str(data["id"]),
            name=str(data["name"]),
            category=str(data["category"]),
            base_grip=float(data["base_grip"]),
            dry_grip=float(data["dry_grip"]),
            wet_grip=float(data["wet_grip"]),
            dirt_grip=float(data["dirt_grip"]),
            gravel_grip=float(data["gravel_grip"]),
            cold_pressure_target=float(data["cold_pressure_target"]),
            warm_pressure_target=float(data["warm_pressure_target"]),
            optimal_temp_celsius=float(data["optimal_temp_celsius"]),
            overheating_start_temp=float(data["overheating_start_temp"]),
            wear_rate=float(data["wear_rate"]),
            recommended_pi_min=int(pi_window["min"]),
            recommended_pi_max=int(pi_window["max"]),
            recommended_tune_types=tuple(data.get("recommended_tune_types", ())),
            pressure_adjustments=PressureAdjustments(**data.get("pressure_adjustments", {})),
            aliases=tuple(data.get("aliases", ())),
            notes=tuple(data.get("notes", ())),
        )


def adjust_tire_pressure(
    compound: TireCompoundSpec,
    climate: str | None = None,
    speed_profile: str | None = None,
    surface: str | None = None,
) -> float:
    """Cold pressure for a compound adjusted to the conditions.

    Args:
        compound: Compound reference data.
        climate: ``"hot"`` or ``"cold"``.
        speed_profile: ``"high-speed"``, ``"technical"`` or ``"balanced"``.
        surface: ``"asphalt"``, ``"dirt"`` or ``"gravel"``.

    Returns:
        Pressure in PSI, clamped to the game limits.
    """
    adjustments = compound.pressure_adjustments
    pressure: float = compound.cold_pressure_target
    if climate == "hot":
        pressure += adjustments.hot_climate
    elif climate == "cold":
        pressure += adjustments.cold_climate
    if speed_profile == "high-speed":
        pressure += adjustments.high_speed
    elif speed_profile == "technical":
        pressure += adjustments.technical
    if surface in ("dirt", "gravel"):
        pressure += adjustments.offroad
    return clamp_field("tire_pressure_front", round(pressure, 1))


def get_tire_grip(compound: TireCompoundSpec, surface: str) -> float:
    """Grip multiplier on ``asphalt``, ``dirt``, ``gravel`` or ``wet``; dry otherwise."""
    return {
        "dirt": compound.dirt_grip,
        "gravel": compound.gravel_grip,
        "wet": compound.wet_grip,
    }.get(surface, compound.dry_grip)


# ---------------------------------------------------------------------------
# Compatibility
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class TrackProfile:
    """What the tyre has to cope with on a given event.

    Attributes:
        type: ``"circuit"``, ``"street"``, ``"offroad"`` or ``"drag"``.
        length: Track length in miles.
        temperature: Ambient temperature in Celsius.
        surface_condition: ``"pristine"``, ``"good"``, ``"fair"`` or ``"poor"``.
    """

    type: str
    length: float
    temperature: float
    surface_condition: str = "good"


def _performance_score(
    compound: TireCompound, specs: CarSpecs, track: TrackProfile, weather: Weather
) -> float:
    score: float = 50.0
    if compound == TireCompound.STREET:
        score = 60.0
        if track.type == "circuit":
            score += 15.0
        if track.type == "street":
            score += 25.0
        if weather in _WET_WEATHER:
            score += 10.0
    elif compound == TireCompound.SPORT:
        score = 75.0
        if track.type == "circuit":
            score += 15.0
        if weather == Weather.CLEAR:
            score += 5.0
    elif compound == TireCompound.SEMI_SLICK:
        score = 85.0
        if track.type == "circuit":
            score += 10.0
        if specs.pi_class in _HIGH_PI:
            score += 10.0
    elif compound == TireCompound.SLICK:
        score = 90.0
        if track.type == "circuit":
            score += 5.0
        if weather == Weather.CLEAR:
            score += 5.0
    return score


def _durability_score(compound: TireCompound, specs: CarSpecs, track: TrackProfile) -> float:
    score: float = 70.0
    if compound == TireCompound.STREET:
        score = 85.0
        if track.length > 3.0:
            score += 10.0
    elif compound == TireCompound.SPORT:
        score = 75.0
    elif compound == TireCompound.SEMI_SLICK:
        score = 55.0
        if track.length > 5.0:
            score -= 15.0
    elif compound == TireCompound.SLICK:
        score = 40.0
        if specs.weight > 3500.0:
            score -= 10.0
    return score


def _compatibility_score(compound: TireCompound, specs: CarSpecs) -> float:
    score: float = 60.0
    horsepower = specs.effective_horsepower
    if specs.weight < 2500.0:
        if compound == TireCompound.SLICK:
            score += 10.0
        if compound == TireCompound.SEMI_SLICK:
            score += 5.0
    elif specs.weight > 4000.0:
        if compound == TireCompound.STREET:
            score += 10.0
        if compound == TireCompound.SPORT:
            score += 5.0

    if horsepower > 600.0:
        if compound == TireCompound.SLICK:
            score += 15.0
        if compound == TireCompound.SEMI_SLICK:
            score += 10.0
    elif horsepower < 200.0 and compound == TireCompound.STREET:
        score += 10.0

    if specs.drive_type == DriveType.RWD and compound in (
        TireCompound.SEMI_SLICK,
        TireCompound.SLICK,
    ):
        score += 10.0
    return score


def _temperature_match(compound: TireCompound, track: TrackProfile, weather: Weather) -> float:
    optimal: float = _OPTIMAL_TEMPS.get(compound, _DEFAULT_OPTIMAL_TEMP)
    match: float = max(20.0, 100.0 - abs(track.temperature - optimal) * 2.0)
    if weather in _WET_WEATHER:
        if compound == TireCompound.SLICK:
            match -= 40.0
        if compound == TireCompound.STREET:
            match += 10.0
    elif weather == Weather.SNOW:
        if compound == TireCompound.SLICK:
            match -= 50.0
        if compound == TireCompound.STREET:
            match += 5.0
    return match


def _rating(overall: float) -> str:
    if overall >= 85.0:
        return "excellent"
    if overall >= 70.0:
        return "good"
    if overall >= 50.0:
        return "fair"
    return "poor"


def _detailed_analysis(
    compound: TireCompound,
    specs: CarSpecs,
    track: TrackProfile,
    weather: Weather,
    durability: float,
) -> dict[str, list[str]]:
    strengths: list[str] = []
    weaknesses: list[str] = []
    best_use_cases: list[str] = []
    improvements: list[str] = []
    horsepower = specs.effective_horsepower

    if compound == TireCompound.STREET:
        strengths += ["Excellent durability for long races", "Good wet weather performance"]
        if specs.weight > 3500.0:
            strengths.append("Suitable for heavier vehicles")
        weaknesses.append("Lower peak grip than performance tires")
        if horsepower > 400.0:
            weaknesses.append("May struggle with high power")
        best_use_cases += [
            "Street circuits and long races",
            "Variable weather conditions",
            "Endurance events",
        ]
    elif compound == TireCompound.SPORT:
        strengths += [
            "Balanced performance and durability",
            "Good grip in various conditions",
            "Versatile across different track types",
        ]
        weaknesses.append("Not optimal for maximum performance")
        if weather == Weather.SNOW:
            weaknesses.append("Reduced traction in snow")
        best_use_cases += ["Balanced racing", "Mixed weather events", "A and B class racing"]
    elif compound == TireCompound.SEMI_SLICK:
        strengths += [
            "High grip potential",
            "Excellent circuit performance",
            "Good temperature responsiveness",
        ]
        if specs.pi_class in _HIGH_PI:
            strengths.append("Matched to high-performance vehicles")
        weaknesses.append("Limited tire life - requires pit stops")
        if track.length > 5.0:
            weaknesses.append("Not suitable for very long races")
        weaknesses.append("Requires warm-up period")
        best_use_cases += [
            "Sprint races",
            "High-performance circuit racing",
            "S1 and S2 class events",
        ]
        if durability < 50.0:
            improvements += [
                "Consider reducing track length or adding pit stops",
                "Monitor tire temperature closely",
            ]
    elif compound == TireCompound.SLICK:
        strengths += ["Maximum dry grip", "Best circuit performance"]
        if weather == Weather.CLEAR:
            strengths.append("Optimal conditions for these tires")
        weaknesses += [
            "Extremely short tire life",
            "Dangerous in wet conditions",
            "Requires precise setup",
        ]
        if horsepower < 400.0:
            weaknesses.append("May overstress on moderate power cars")
        best_use_cases += [
            "Dry sprint races",
            "High-powered circuit racing",
            "S2 class competitive events",
        ]
        if weather != Weather.CLEAR:
            improvements.append("CAUTION: Only use in dry conditions")
        if track.length > 3.0:
            improvements.append("Track too long for slick tires - plan multiple pit stops")

    return {
        "strengths": strengths,
        "weaknesses": weaknesses,
        "best_use_cases": best_use_cases,
        "improvements": improvements,
    }


def analyze_tire_compatibility(
    compound: TireCompound,
    specs: CarSpecs,
    track: TrackProfile,
    weather: Weather = Weather.CLEAR,
) -> dict[str, Any]:
    """Score how well *compound* suits a car, track and weather.

    Overall is ``0.35 * performance + 0.25 * compatibility
    + 0.20 * durability + 0.20 * temperature match``.

    Returns:
        Dictionary containing:
            compound -- The compound scored.
            performance_score, compatibility_score, durability_score,
            temperature_match -- Sub-scores, 0-100.
            overall_score -- Weighted total, 0-100.
            recommendation -- ``"excellent"``, ``"good"``, ``"fair"`` or ``"poor"``.
            detailed_analysis -- ``strengths``, ``weaknesses``,
                ``best_use_cases`` and ``improvements`` lists.
    """
    performance = _performance_score(compound, specs, track, weather)
    durability = _durability_score(compound, specs, track)
    compatibility = _compatibility_score(compound, specs)
    temperature = _temperature_match(compound, track, weather)

    overall = round(
        performance * 0.35 + compatibility * 0.25 + durability * 0.20 + temperature * 0.20
    )

    def _bounded(value: float) -> float:
        return float(min(100.0, max(0.0, value)))

    return {
        "compound": compound,
        "performance_score": _bounded(performance),
        "compatibility_score": _bounded(compatibility),
        "durability_score": _bounded(durability),
        "temperature_match": _bounded(temperature),
        "overall_score": _bounded(overall),
        "recommendation": _rating(overall),
        "detailed_analysis": _detailed_analysis(compound, specs, track, weather, durability),
    }


def compare_tire_compounds(
    compounds: list[TireCompound],
    specs: CarSpecs,
    track: TrackProfile,
    weather: Weather = Weather.CLEAR,
) -> list[dict[str, Any]]:
    """Score several compounds and return them best first."""
    results = [analyze_tire_compatibility(c, specs, track, weather) for c in compounds]
    return sorted(results, key=lambda r: r["overall_score"], reverse=True)


def get_recommended_tire(scenario: str, pi_class: PIClass) -> dict[str, Any]:
    """Primary compound and alternatives for a racing scenario.

    Args:
        scenario: ``"sprint-dry"``, ``"sprint-wet"``, ``"endurance"``,
            ``"street"`` or ``"offroad"``.
        pi_class: The car's performance class.

    Returns:
        Dictionary containing:
            primary -- Recommended :class:`TireCompound`.
            alternatives -- Other sensible compounds.
            rationale -- Explanation.
    """
    if scenario == "sprint-dry":
        if pi_class in _HIGH_PI:
            return {
                "primary": TireCompound.SLICK,
                "alternatives": [TireCompound.SEMI_SLICK, TireCompound.SPORT],
                "rationale": "Slicks provide maximum grip for high-performance sprint",
            }
        if pi_class == PIClass.A:
            return {
                "primary": TireCompound.SEMI_SLICK,
                "alternatives": [TireCompound.SPORT, TireCompound.SLICK],
                "rationale": "Race tires balance performance and safety",
            }
        return {
            "primary": TireCompound.SPORT,
            "alternatives": [TireCompound.SEMI_SLICK, TireCompound.STREET],
            "rationale": "Sport tires provide good dry grip",
        }
    if scenario == "sprint-wet":
        return {
            "primary": TireCompound.STREET,
            "alternatives": [TireCompound.SPORT, TireCompound.SEMI_SLICK],
            "rationale": "Street tires best for wet conditions",
        }
    if scenario == "endurance":
        return {
            "primary": TireCompound.STREET,
            "alternatives": [TireCompound.SPORT],
            "rationale": "Street tires provide durability for long races",
        }
    if scenario == "street":
        return {
            "primary": TireCompound.STREET,
            "alternatives": [TireCompound.SPORT],
            "rationale": "Street tires designed for street driving",
        }
    if scenario == "offroad":
        return {
            "primary": TireCompound.OFFROAD,
            "alternatives": [TireCompound.RALLY, TireCompound.SPORT],
            "rationale": "Off-road tires keep traction on loose surfaces",
        }
    return {"primary": TireCompound.SPORT, "alternatives": [], "rationale": ""}
