"""Reference data loaders for the tuning engine.

Cars, tracks, tyre compounds and aero profiles live as YAML tables under
``data/``.  Each table is parsed once per path and cached.  Lookups by key
never raise on an unknown key: aero and tyre lookups fall back to a
default entry, track and car lookups return ``None``.
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Any

import structlog
import yaml

from fh_tuner.core.aero import AeroProfile
from fh_tuner.core.car import CarModel, CarSpecs, DriveType, TireCompound, TuneType
from fh_tuner.core.track import Track
from fh_tuner.core.track_tuning import TrackAdjustments, calculate_track_adjustments
from fh_tuner.core.tyres import TireCompoundSpec

logger = structlog.get_logger(__name__)

DATA_DIR: Path = Path(__file__).resolve().parent.parent / "data"
TRACKS_PATH: Path = DATA_DIR / "tracks.yaml"
TIRE_COMPOUNDS_PATH: Path = DATA_DIR / "tire_compounds.yaml"
AERO_PROFILES_PATH: Path = DATA_DIR / "aero_profiles.yaml"
CARS_PATH: Path = DATA_DIR / "cars.yaml"

DEFAULT_AERO_PROFILE: str = "sports"
DEFAULT_TIRE_COMPOUND: str = "sport"

_TRACK_FIELDS: tuple[str, ...] = (
    "id",
    "name",
    "type",
    "length",
    "avg_turn_radius",
    "max_elevation_gain",
    "straightaway_length",
    "technicality",
    "speed_profile",
    "surface_type",
    "wheel_base_recommendation",
)

_TIRE_FIELDS: tuple[str, ...] = (
    "id",
    "name",
    "category",
    "base_grip",
    "dry_grip",
    "wet_grip",
    "dirt_grip",
    "gravel_grip",
    "cold_pressure_target",
    "warm_pressure_target",
    "optimal_temp_celsius",
    "overheating_start_temp",
    "wear_rate",
    "recommended_pi",
)

_AERO_FIELDS: tuple[str, ...] = (
    "category",
    "name",
    "base_cd",
    "base_downforce",
    "wing_mount_point",
    "wing_angle_range",
    "default_wing_angle",
    "front_wing_effect",
    "rear_wing_effect",
    "min_ride_height",
    "max_ride_height",
    "ride_height_impact",
    "has_front_splitter",
    "splitter_downforce",
    "has_diffuser",
    "diffuser_downforce",
    "critical_speed",
    "drag_penalty_high_speed",
    "aero_efficiency",
)

_CAR_FIELDS: tuple[str, ...] = (
    "id",
    "make",
    "model",
    "year",
    "weight",
    "weight_distribution",
    "drive_type",
    "default_pi",
    "category",
)


# ---------------------------------------------------------------------------
# Shared helpers
# ---------------------------------------------------------------------------


def _read_table(path: Path, key: str) -> list[dict[str, Any]]:
    """Read the list stored under *key* in the YAML file at *path*.

    Raises:
        FileNotFoundError: If the file does not exist.
        ValueError: If the file has no list under *key*.
    """
    if not path.exists():
        raise FileNotFoundError(f"Reference data file not found: {path}")

    with open(path, encoding="utf-8") as fh:
        data = yaml.safe_load(fh)

    entries = data.get(key) if isinstance(data, dict) else None
    if not isinstance(entries, list):
        raise ValueError(f"{path.name}: expected a list under '{key}'")
    return entries


def _require(entry: dict[str, Any], required: tuple[str, ...], label: str, idx: int) -> None:
    for name in required:
        if name not in entry:
            raise ValueError(
                f"{label} entry {idx} ({entry.get('id', entry.get('name', '<unknown>'))}) "
                f"is missing required field '{name}'"
            )


# ---------------------------------------------------------------------------
# Tracks
# ---------------------------------------------------------------------------


@lru_cache(maxsize=None)
def load_tracks(path: Path | None = None) -> tuple[Track, ...]:
    """Load the track table.

    Args:
        path: Optional override for the tracks file path.

    Returns:
        Tuple of :class:`Track` objects in file order.

    Raises:
        FileNotFoundError: If the tracks file does not exist.
        ValueError: If an entry is missing fields or holds invalid values.
    """
    tracks: list[Track] = []
    for idx, entry in enumerate(_read_table(path or TRACKS_PATH, "tracks")):
        _require(entry, _TRACK_FIELDS, "Track", idx)
        tracks.append(
            Track(
                id=str(entry["id"]),
                name=str(entry["name"]),
                type=str(entry["type"]),
                length=float(entry["length"]),
                avg_turn_radius=float(entry["avg_turn_radius"]),
                max_elevation_gain=float(entry["max_elevation_gain"]),
                straightaway_length=float(entry["straightaway_length"]),
                technicality=int(entry["technicality"]),
                speed_profile=str(entry["speed_profile"]),
                surface_type=str(entry["surface_type"]),
                wheel_base_recommendation=str(entry["wheel_base_recommendation"]),
                recommended_tune_types=tuple(entry.get("recommended_tune_types", ())),
                alias=tuple(entry.get("alias", ())),
                notes=tuple(entry.get("notes", ())),
            )
        )
    logger.debug("tracks_loaded", count=len(tracks))
    return tuple(tracks)


def get_track(query: str) -> Track | None:
    """Find a track by id, name or alias (case-insensitive)."""
    for track in load_tracks():
        if track.matches(query):
            return track
    return None


def get_track_adjustments(
    query: str, weight: float, horsepower: float, tune_type: TuneType
) -> TrackAdjustments | None:
    """Adjustments for the track matching *query*, or ``None`` if unknown."""
    track = get_track(query)
    if track is None:
        return None
    return calculate_track_adjustments(track, weight, horsepower, tune_type)


def get_tracks_by_type(track_type: str) -> list[Track]:
    return [t for t in load_tracks() if t.type == track_type]


def get_tracks_for_tune_type(tune_type: str) -> list[Track]:
    """Tracks that list *tune_type* among their recommended tune types."""
    wanted = tune_type.lower()
    return [t for t in load_tracks() if wanted in t.recommended_tune_types]


def get_tracks_by_speed_profile(speed_profile: str) -> list[Track]:
    return [t for t in load_tracks() if t.speed_profile == speed_profile]


def get_all_track_ids() -> list[str]:
    return [t.id for t in load_tracks()]


# ---------------------------------------------------------------------------
# Tyre compounds
# ---------------------------------------------------------------------------


@lru_cache(maxsize=None)
def load_tire_compounds(path: Path | None = None) -> dict[str, TireCompoundSpec]:
    """Load tyre compounds keyed by id.

    Raises:
        FileNotFoundError: If the compounds file does not exist.
        ValueError: If an entry is missing fields.
    """
    compounds: dict[str, TireCompoundSpec] = {}
    for idx, entry in enumerate(_read_table(path or TIRE_COMPOUNDS_PATH, "compounds")):
        _require(entry, _TIRE_FIELDS, "Tire compound", idx)
        spec = TireCompoundSpec.from_dict(entry)
        compounds[spec.id] = spec
    if DEFAULT_TIRE_COMPOUND not in compounds:
        raise ValueError(f"Tire compound table has no '{DEFAULT_TIRE_COMPOUND}' entry")
    return compounds


def get_tire_compound(compound: str | TireCompound) -> TireCompoundSpec:
    """Compound data by id or alias; unknown ids fall back to ``sport``."""
    key = compound.value if isinstance(compound, TireCompound) else compound.strip().lower()
    compounds = load_tire_compounds()
    if key in compounds:
        return compounds[key]
    for spec in compounds.values():
        if key in spec.aliases:
            return spec
    logger.debug("tire_compound_fallback", requested=key, fallback=DEFAULT_TIRE_COMPOUND)
    return compounds[DEFAULT_TIRE_COMPOUND]


# ---------------------------------------------------------------------------
# Aero profiles
# ---------------------------------------------------------------------------


@lru_cache(maxsize=None)
def load_aero_profiles(path: Path | None = None) -> dict[str, AeroProfile]:
    """Load aero profiles keyed by car category.

    Raises:
        FileNotFoundError: If the profiles file does not exist.
        ValueError: If an entry is missing fields or is inconsistent.
    """
    profiles: dict[str, AeroProfile] = {}
    for idx, entry in enumerate(_read_table(path or AERO_PROFILES_PATH, "profiles")):
        _require(entry, _AERO_FIELDS, "Aero profile", idx)
        profile = AeroProfile.from_dict(entry)
        profiles[profile.category] = profile
    if DEFAULT_AERO_PROFILE not in profiles:
        raise ValueError(f"Aero profile table has no '{DEFAULT_AERO_PROFILE}' entry")
    return profiles


def get_aero_profile(category: str) -> AeroProfile:
    """Aero profile for a car category; unknown categories get ``sports``."""
    profiles = load_aero_profiles()
    return profiles.get(category, profiles[DEFAULT_AERO_PROFILE])


# ---------------------------------------------------------------------------
# Cars
# ---------------------------------------------------------------------------


@lru_cache(maxsize=None)
def load_cars(path: Path | None = None) -> tuple[CarModel, ...]:
    """Load the car table.

    Raises:
        FileNotFoundError: If the cars file does not exist.
        ValueError: If an entry is missing fields or has an unknown drivetrain.
    """
    cars: list[CarModel] = []
    for idx, entry in enumerate(_read_table(path or CARS_PATH, "cars")):
        _require(entry, _CAR_FIELDS, "Car", idx)
        try:
            drive_type = DriveType(str(entry["drive_type"]).upper())
        except ValueError:
            raise ValueError(
                f"Car entry {idx} ({entry['id']}): unknown drive_type '{entry['drive_type']}'"
            ) from None
        cars.append(
            CarModel(
                id=str(entry["id"]),
                make=str(entry["make"]),
                model=str(entry["model"]),
                year=int(entry["year"]),
                weight=float(entry["weight"]),
                weight_distribution=float(entry["weight_distribution"]),
                drive_type=drive_type,
                default_pi=int(entry["default_pi"]),
                category=str(entry["category"]),
            )
        )
    return tuple(cars)


def get_car(car_id: str) -> CarModel | None:
    for car in load_cars():
        if car.id == car_id:
            return car
    return None


def search_cars(query: str) -> list[CarModel]:
    """Cars whose make, model or display name contains *query*."""
    needle = query.strip().lower()
    if not needle:
        return []
    return [
        car
        for car in load_cars()
        if needle in car.make.lower()
        or needle in car.model.lower()
        or needle in car.display_name.lower()
    ]


def get_cars_by_make(make: str) -> list[CarModel]:
    wanted = make.strip().lower()
    return [car for car in load_cars() if car.make.lower() == wanted]


def car_display_name(car_id: str) -> str | None:
    car = get_car(car_id)
    return car.display_name if car is not None else None


def car_to_specs(
    car_id: str,
    horsepower: float | None = None,
    tire_compound: TireCompound = TireCompound.SPORT,
    has_aero: bool = False,
) -> CarSpecs | None:
    """Stock :class:`CarSpecs` for a car in the table, or ``None``."""
    car = get_car(car_id)
    if car is None:
        return None
    return car.to_specs(horsepower=horsepower, tire_compound=tire_compound, has_aero=has_aero)
