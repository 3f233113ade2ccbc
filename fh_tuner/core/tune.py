"""Tune settings, the per-field game range schema, and partial tune patches.

Every numeric tune field has a hard range imposed by the game's tuning
menu.  :data:`TUNE_FIELD_RANGES` is the single source of those limits: the
tune generator clamps its output against it and the optimizer bounds its
search with it.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field, fields, replace
from typing import Any

# ---------------------------------------------------------------------------
# Field range schema
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class FieldRange:
    """Legal range and adjustment step for one tune field.

    Attributes:
        name: Tune field the range applies to.
        min: Lowest value the game accepts.
        max: Highest value the game accepts.
        step: Smallest increment of the in-game slider.
    """

    name: str
    min: float
    max: float
    step: float

    def __post_init__(self) -> None:
        if self.min > self.max:
            raise ValueError(f"{self.name}: min ({self.min}) must be <= max ({self.max}).")
        if self.step <= 0.0:
            raise ValueError(f"{self.name}: step must be > 0.")

    def clamp(self, value: float) -> float:
        """Clamp *value* into ``[min, max]``."""
        return max(self.min, min(self.max, value))

    def snap(self, value: float) -> float:
        """Round *value* to the nearest slider step, then clamp."""
        steps = round((value - self.min) / self.step)
        return self.clamp(round(self.min + steps * self.step, 4))


def _pair(prefix: str, lo: float, hi: float, step: float) -> dict[str, FieldRange]:
    return {
        f"{prefix}_{axle}": FieldRange(f"{prefix}_{axle}", lo, hi, step)
        for axle in ("front", "rear")
    }


TUNE_FIELD_RANGES: dict[str, FieldRange] = {
    **_pair("tire_pressure", 14.0, 55.0, 0.5),
    "final_drive": FieldRange("final_drive", 2.0, 6.0, 0.05),
    "gear_ratio": FieldRange("gear_ratio", 0.48, 6.0, 0.01),
    **_pair("camber", -5.0, 5.0, 0.1),
    **_pair("toe", -5.0, 5.0, 0.1),
    "caster": FieldRange("caster", 1.0, 7.0, 0.1),
    **_pair("arb", 1.0, 65.0, 1.0),
    **_pair("springs", 100.0, 1000.0, 10.0),
    **_pair("ride_height", 2.0, 12.0, 0.1),
    **_pair("rebound", 1.0, 20.0, 0.1),
    **_pair("bump", 1.0, 20.0, 0.1),
    **_pair("aero", 0.0, 400.0, 2.0),
    "diff_accel_rear": FieldRange("diff_accel_rear", 0.0, 100.0, 1.0),
    "diff_decel_rear": FieldRange("diff_decel_rear", 0.0, 100.0, 1.0),
    "diff_accel_front": FieldRange("diff_accel_front", 0.0, 100.0, 1.0),
    "diff_decel_front": FieldRange("diff_decel_front", 0.0, 100.0, 1.0),
    "diff_center": FieldRange("diff_center", 0.0, 100.0, 1.0),
    "brake_pressure": FieldRange("brake_pressure", 50.0, 100.0, 1.0),
    "brake_balance": FieldRange("brake_balance", 30.0, 70.0, 1.0),
}


def clamp_field(name: str, value: float) -> float:
    """Clamp *value* to the legal range of tune field *name*.

    Raises:
        KeyError: If *name* is not a ranged tune field.
    """
    return TUNE_FIELD_RANGES[name].clamp(value)


# ---------------------------------------------------------------------------
# Tune settings
# ---------------------------------------------------------------------------


@dataclass
class TuneSettings:
    """Complete setup for one car, as entered in the in-game tuning menu.

    Pressures are PSI, springs lb/in, ride heights inches, aero in the
    game's downforce units.  ``brake_balance`` is the percentage of braking
    force sent to the front axle; the in-game slider shows the rear share
    (see :attr:`brake_slider`).  The front and centre differential fields
    are ``None`` on drivetrains that do not have them.
    """

    tire_pressure_front: float = 30.0
    tire_pressure_rear: float = 30.0
    final_drive: float = 3.5
    gear_ratios: list[float] = field(default_factory=list)
    camber_front: float = -1.0
    camber_rear: float = -0.5
    toe_front: float = 0.0
    toe_rear: float = 0.0
    caster: float = 5.0
    arb_front: float = 30.0
    arb_rear: float = 30.0
    springs_front: float = 500.0
    springs_rear: float = 500.0
    ride_height_front: float = 5.0
    ride_height_rear: float = 5.0
    rebound_front: float = 10.0
    rebound_rear: float = 10.0
    bump_front: float = 6.0
    bump_rear: float = 6.0
    aero_front: float = 0.0
    aero_rear: float = 0.0
    diff_accel_rear: float = 50.0
    diff_decel_rear: float = 30.0
    diff_accel_front: float | None = None
    diff_decel_front: float | None = None
    diff_center: float | None = None
    brake_pressure: float = 100.0
    brake_balance: float = 50.0
    gearing_note: str = ""
    brake_note: str = ""

    @property
    def brake_slider(self) -> float:
        """Value to dial into the in-game brake balance slider."""
        return 100.0 - self.brake_balance

    def copy(self) -> TuneSettings:
        """Return an independent copy (the gear list is not shared)."""
        return replace(self, gear_ratios=list(self.gear_ratios))

    def clamped(self) -> TuneSettings:
        """Return a copy with every numeric field inside its game range."""
        updates: dict[str, Any] = {}
        for name in RANGED_TUNE_FIELDS:
            value = getattr(self, name)
            if value is not None:
                updates[name] = clamp_field(name, value)
        gear_range = TUNE_FIELD_RANGES["gear_ratio"]
        updates["gear_ratios"] = [gear_range.clamp(g) for g in self.gear_ratios]
        return replace(self, **updates)

    def to_dict(self) -> dict[str, Any]:
        """Serialise field-for-field to a JSON-compatible dictionary."""
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> TuneSettings:
        """Build settings from a dictionary; unknown keys are ignored."""
        known = {f.name for f in fields(cls)}
        kwargs = {k: v for k, v in data.items() if k in known}
        if "gear_ratios" in kwargs:
            kwargs["gear_ratios"] = [float(g) for g in kwargs["gear_ratios"]]
        return cls(**kwargs)


# Scalar tune fields that carry a game range (everything but gears and notes).
RANGED_TUNE_FIELDS: tuple[str, ...] = tuple(
    f.name for f in fields(TuneSettings) if f.name in TUNE_FIELD_RANGES
)


# ---------------------------------------------------------------------------
# Partial patches
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class TunePatch:
    """Partial tune update: only fields that are not ``None`` are applied."""

    tire_pressure_front: float | None = None
    tire_pressure_rear: float | None = None
    final_drive: float | None = None
    gear_ratios: tuple[float, ...] | None = None
    camber_front: float | None = None
    camber_rear: float | None = None
    toe_front: float | None = None
    toe_rear: float | None = None
    caster: float | None = None
    arb_front: float | None = None
    arb_rear: float | None = None
    springs_front: float | None = None
    springs_rear: float | None = None
    ride_height_front: float | None = None
    ride_height_rear: float | None = None
    rebound_front: float | None = None
    rebound_rear: float | None = None
    bump_front: float | None = None
    bump_rear: float | None = None
    aero_front: float | None = None
    aero_rear: float | None = None
    diff_accel_rear: float | None = None
    diff_decel_rear: float | None = None
    diff_accel_front: float | None = None
    diff_decel_front: float | None = None
    diff_center: float | None = None
    brake_pressure: float | None = None
    brake_balance: float | None = None

    def present_fields(self) -> dict[str, Any]:
        """Fields that this patch overrides, with their values."""
        return {
            f.name: getattr(self, f.name)
            for f in fields(self)
            if getattr(self, f.name) is not None
        }


def apply_tune_patch(tune: TuneSettings, patch: TunePatch) -> TuneSettings:
    """Merge *patch* over *tune*, overriding only the fields it sets.

    The input tune is not modified.  The merged result is clamped to the
    game ranges, so a patch can never push a field out of range.

    Args:
        tune: Settings to start from.
        patch: Partial update.

    Returns:
        New :class:`TuneSettings` instance.
    """
    updates = patch.present_fields()
    if "gear_ratios" in updates:
        updates["gear_ratios"] = list(updates["gear_ratios"])
    return replace(tune.copy(), **updates).clamped()
