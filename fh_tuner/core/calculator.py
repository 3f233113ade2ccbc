"""Tune generator: car specs plus a driving style in, complete settings out.

Every setting starts from a per-style preset and is then shifted by the
car's weight distribution, drivetrain, power and aero.  The slider rule
used for ARBs and springs places a value between a range's ends in
proportion to the axle's share of the weight::

    value = (max - min) * weight_pct / 100 + min

:func:`calculate_tune` is pure: identical inputs always yield identical
settings, and every numeric field of the result lies inside the game range
from :data:`fh_tuner.core.tune.TUNE_FIELD_RANGES`.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from types import MappingProxyType
from typing import Mapping

import structlog

from fh_tuner.core.car import CarSpecs, DriveType, TuneType
from fh_tuner.core.tune import TuneSettings

logger = structlog.get_logger(__name__)

# Grip tunes on cars at or above this power get softer springs and ARBs.
HIGH_POWER_HP: float = 400.0
HIGH_POWER_STIFFNESS_SCALE: float = 0.76

# Final drive is shortened on cars at or above this power.
VERY_HIGH_POWER_HP: float = 600.0
_VERY_HIGH_POWER_FINAL_DRIVE_OFFSET: float = 0.15

HEAVY_CAR_LBS: float = 3500.0

# Downforce assumed available when the car's maximum is unknown.
_DEFAULT_MAX_AERO: float = 400.0

_ARB_MIN: float = 1.0
_ARB_MAX: float = 65.0
_DAMPER_MIN: float = 1.0
_DAMPER_MAX: float = 20.0
_MIN_FRONT_BRAKE_BIAS: float = 45.0
_MAX_FRONT_BRAKE_BIAS: float = 70.0


def slider_math(low: float, high: float, weight_pct: float) -> float:
    """Place a value between *low* and *high* by an axle weight share."""
    return (high - low) * weight_pct / 100.0 + low


def _clamp(value: float, lo: float, hi: float) -> float:
    return max(lo, min(hi, value))


# ---------------------------------------------------------------------------
# Preset tables
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class AxlePair:
    """Front and rear value of a per-axle preset."""

    front: float
    rear: float


@dataclass(frozen=True)
class AlignmentPreset:
    camber_front: float
    camber_rear: float
    toe_front: float
    toe_rear: float
    caster: float


@dataclass(frozen=True)
class SpringRange:
    """Spring rate span in lb/in the slider rule works within."""

    min: float
    max: float


@dataclass(frozen=True)
class DiffPreset:
    """Differential locks for one tune type and drivetrain.

    ``None`` marks a differential the drivetrain does not have.
    """

    accel_rear: float
    decel_rear: float
    accel_front: float | None = None
    decel_front: float | None = None
    center: float | None = None


@dataclass(frozen=True)
class BrakePreset:
    pressure: float
    front_bias: float


@dataclass(frozen=True)
class GearingPreset:
    """First and top gear ratios plus final drive.

    Intermediate gears fall on a geometric ladder between the two ends.
    """

    first: float
    last: float
    final_drive: float
    note: str


TIRE_PRESSURE_PRESETS: Mapping[TuneType, AxlePair] = MappingProxyType(
    {
        TuneType.GRIP: AxlePair(27.5, 27.5),
        TuneType.STREET: AxlePair(28.0, 28.0),
        TuneType.DRIFT: AxlePair(14.5, 32.0),
        TuneType.OFFROAD: AxlePair(17.0, 17.0),
        TuneType.RALLY: AxlePair(19.0, 19.0),
        TuneType.DRAG: AxlePair(55.0, 15.0),
    }
)

ALIGNMENT_PRESETS: Mapping[TuneType, AlignmentPreset] = MappingProxyType(
    {
        TuneType.GRIP: AlignmentPreset(-1.2, -0.8, 0.0, 0.1, 5.5),
        TuneType.STREET: AlignmentPreset(-1.0, -0.5, 0.0, 0.1, 5.0),
        TuneType.DRIFT: AlignmentPreset(-5.0, -1.5, 2.0, 0.0, 7.0),
        TuneType.OFFROAD: AlignmentPreset(-0.5, -0.3, 0.0, 0.0, 5.0),
        TuneType.RALLY: AlignmentPreset(-0.8, -0.5, 0.0, 0.1, 5.5),
        TuneType.DRAG: AlignmentPreset(0.0, -0.5, 0.0, 0.0, 7.0),
    }
)

SPRING_RANGES: Mapping[TuneType, SpringRange] = MappingProxyType(
    {
        TuneType.GRIP: SpringRange(200.0, 800.0),
        TuneType.STREET: SpringRange(150.0, 600.0),
        TuneType.DRIFT: SpringRange(150.0, 500.0),
        TuneType.OFFROAD: SpringRange(100.0, 300.0),
        TuneType.RALLY: SpringRange(120.0, 400.0),
        TuneType.DRAG: SpringRange(300.0, 1000.0),
    }
)

RIDE_HEIGHT_PRESETS: Mapping[TuneType, AxlePair] = MappingProxyType(
    {
        TuneType.GRIP: AxlePair(4.5, 4.8),
        TuneType.STREET: AxlePair(5.5, 5.8),
        TuneType.DRIFT: AxlePair(5.5, 5.0),
        TuneType.OFFROAD: AxlePair(9.0, 9.5),
        TuneType.RALLY: AxlePair(7.5, 8.0),
        TuneType.DRAG: AxlePair(4.0, 4.5),
    }
)

# Ride height used instead of the preset when a grip or street car has wings.
_AERO_RIDE_HEIGHT = AxlePair(4.0, 4.2)

# Share of the available downforce to dial in at each end.
AERO_TARGETS: Mapping[TuneType, AxlePair] = MappingProxyType(
    {
        TuneType.GRIP: AxlePair(0.65, 0.75),
        TuneType.STREET: AxlePair(0.40, 0.50),
        TuneType.DRIFT: AxlePair(0.15, 0.30),
        TuneType.OFFROAD: AxlePair(0.25, 0.35),
        TuneType.RALLY: AxlePair(0.35, 0.45),
        TuneType.DRAG: AxlePair(0.0, 0.0),
    }
)

_AERO_DRIVE_OFFSETS: Mapping[DriveType, AxlePair] = MappingProxyType(
    {
        DriveType.FWD: AxlePair(-0.10, 0.15),
        DriveType.RWD: AxlePair(0.0, 0.10),
        DriveType.AWD: AxlePair(0.0, 0.0),
    }
)

# ARB multipliers for drivetrain balance, then for tune type.
_ARB_DRIVE_SCALE: Mapping[DriveType, AxlePair] = MappingProxyType(
    {
        DriveType.FWD: AxlePair(0.75, 1.15),
        DriveType.RWD: AxlePair(1.05, 0.95),
        DriveType.AWD: AxlePair(1.0, 1.0),
    }
)

_ARB_TUNE_SCALE: Mapping[TuneType, AxlePair] = MappingProxyType(
    {
        TuneType.DRIFT: AxlePair(0.5, 1.2),
        TuneType.OFFROAD: AxlePair(0.6, 0.6),
        TuneType.RALLY: AxlePair(0.6, 0.6),
    }
)

_REBOUND_TUNE_SCALE: Mapping[TuneType, AxlePair] = MappingProxyType(
    {
        TuneType.OFFROAD: AxlePair(1.1, 1.1),
        TuneType.RALLY: AxlePair(1.1, 1.1),
        TuneType.DRIFT: AxlePair(0.9, 1.05),
    }
)


def _diff_row(
    rwd: tuple[float, float], fwd_accel: float, awd: tuple[float, float, float, float]
) -> dict[DriveType, DiffPreset]:
    awd_front, awd_accel_rear, awd_decel_rear, awd_center = awd
    return {
        DriveType.RWD: DiffPreset(accel_rear=rwd[0], decel_rear=rwd[1]),
        DriveType.FWD: DiffPreset(
            accel_rear=0.0, decel_rear=0.0, accel_front=fwd_accel, decel_front=0.0
        ),
        DriveType.AWD: DiffPreset(
            accel_rear=awd_accel_rear,
            decel_rear=awd_decel_rear,
            accel_front=awd_front,
            decel_front=0.0,
            center=awd_center,
        ),
    }


# RWD (accel, decel); FWD accel; AWD (front accel, rear accel, rear decel, centre).
DIFF_PRESETS: Mapping[TuneType, Mapping[DriveType, DiffPreset]] = MappingProxyType(
    {
        tune_type: MappingProxyType(_diff_row(*row))
        for tune_type, row in {
            TuneType.GRIP: ((40.0, 20.0), 35.0, (25.0, 50.0, 20.0, 70.0)),
            TuneType.STREET: ((35.0, 15.0), 30.0, (22.0, 40.0, 15.0, 60.0)),
            TuneType.DRIFT: ((100.0, 100.0), 100.0, (20.0, 100.0, 100.0, 95.0)),
            TuneType.OFFROAD: ((35.0, 10.0), 28.0, (18.0, 40.0, 15.0, 50.0)),
            TuneType.RALLY: ((45.0, 20.0), 35.0, (26.0, 50.0, 20.0, 55.0)),
            TuneType.DRAG: ((100.0, 0.0), 100.0, (80.0, 100.0, 0.0, 70.0)),
        }.items()
    }
)

BRAKE_PRESETS: Mapping[TuneType, BrakePreset] = MappingProxyType(
    {
        TuneType.GRIP: BrakePreset(100.0, 60.0),
        TuneType.STREET: BrakePreset(95.0, 58.0),
        TuneType.DRIFT: BrakePreset(85.0, 50.0),
        TuneType.OFFROAD: BrakePreset(90.0, 55.0),
        TuneType.RALLY: BrakePreset(95.0, 55.0),
        TuneType.DRAG: BrakePreset(100.0, 55.0),
    }
)

GEARING_PRESETS: Mapping[TuneType, GearingPreset] = MappingProxyType(
    {
        TuneType.GRIP: GearingPreset(
            3.40, 0.72, 3.80, "Balanced gearing for acceleration and corner exit"
        ),
        TuneType.STREET: GearingPreset(
            3.30, 0.68, 3.50, "Stock-like balanced gearing for mixed driving"
        ),
        TuneType.DRIFT: GearingPreset(
            3.80, 0.85, 4.20, "Short gearing for precise low-speed angle control"
        ),
        TuneType.OFFROAD: GearingPreset(
            3.50, 0.78, 3.70, "Medium gearing for torque on rough terrain"
        ),
        TuneType.RALLY: GearingPreset(
            3.45, 0.75, 3.65, "Balanced for mixed surface acceleration"
        ),
        TuneType.DRAG: GearingPreset(
            2.90, 0.55, 2.90, "Long gearing (low ratios) for maximum top speed"
        ),
    }
)


@dataclass(frozen=True)
class TuneTypeDescription:
    title: str
    description: str
    tips: tuple[str, ...]


TUNE_TYPE_DESCRIPTIONS: Mapping[TuneType, TuneTypeDescription] = MappingProxyType(
    {
        TuneType.GRIP: TuneTypeDescription(
            "Circuit/Grip",
            "Maximum cornering grip for track racing",
            (
                "Target hot tire pressure: 32-34 PSI (2.2-2.3 Bar)",
                "Negative camber -1.2° to -1.5° for optimal contact patch",
                "Diff 40% accel / 10-30% decel for smooth power delivery",
                "AWD center balance: 65-75% rear bias for rotation",
            ),
        ),
        TuneType.STREET: TuneTypeDescription(
            "Street",
            "Balanced everyday driving",
            (
                "Balanced pressures for mixed conditions",
                "Moderate camber for tire longevity",
                "Comfortable ride height with good grip",
                "Stock-like differential for predictability",
            ),
        ),
        TuneType.DRIFT: TuneTypeDescription(
            "Drift",
            "Maximum angle and slide control",
            (
                "Low front pressure (14.5 PSI) maximizes steering friction",
                "High rear pressure (32 PSI) promotes controlled slip",
                "Extreme front camber (-5.0°) for wide angle stability",
                "Locked diff (100%/100%) for consistent power slides",
            ),
        ),
        TuneType.OFFROAD: TuneTypeDescription(
            "Off-Road/Cross Country",
            "Flotation physics for rough terrain",
            (
                "Low tire pressure (15-19 PSI / 1.0-1.3 Bar) for flotation",
                "Soft springs (1.0-1.5 Hz frequency) for terrain absorption",
                'High rebound damping to "stick" jump landings',
                "Soft ARBs for maximum wheel independence",
            ),
        ),
        TuneType.RALLY: TuneTypeDescription(
            "Rally",
            "Mixed surface performance",
            (
                "Medium-low pressure (19 PSI) for grip on loose surfaces",
                "Higher ride height for jumps and rough sections",
                "AWD center: +26% front bias for traction",
                "Moderate damping for predictable landings",
            ),
        ),
        TuneType.DRAG: TuneTypeDescription(
            "Drag",
            "Maximum straight-line acceleration",
            (
                "Max front pressure (55 PSI) for stability",
                "Low rear pressure (15 PSI) for squat and traction",
                "Soft rear springs allow weight transfer for launch",
                "100% accel diff lock for maximum power delivery",
            ),
        ),
    }
)


# ---------------------------------------------------------------------------
# Generator
# ---------------------------------------------------------------------------


def calculate_gear_ratios(first: float, last: float, gear_count: int) -> list[float]:
    """Geometric gear ladder from *first* to *last*, 2 decimals per ratio.

    ``ratio_n = first * (last / first) ** ((n - 1) / (gear_count - 1))``
    """
    if gear_count < 2:
        return [round(first, 2)]
    return [
        round(first * (last / first) ** ((n - 1) / (gear_count - 1)), 2)
        for n in range(1, gear_count + 1)
    ]


def _is_high_power(specs: CarSpecs, threshold: float) -> bool:
    # Unknown power never triggers a power-dependent branch.
    return specs.horsepower is not None and specs.horsepower >= threshold


def calculate_tune(specs: CarSpecs, tune_type: TuneType) -> TuneSettings:
    """Generate a complete tune for *specs* driven in the *tune_type* style.

    Args:
        specs: Car being tuned.
        tune_type: Driving style.

    Returns:
        Fresh :class:`TuneSettings` with every ranged field clamped to the
        game limits.
    """
    wd = specs.weight_distribution
    front_share: float = wd / 100.0
    rear_share: float = 1.0 - front_share
    weight_offset: float = wd - 50.0
    front_downforce: float = specs.front_downforce or 0.0
    rear_downforce: float = specs.rear_downforce or 0.0

    # Tyres: the heavier end runs slightly more pressure.
    pressures = TIRE_PRESSURE_PRESETS[tune_type]
    pressure_front, pressure_rear = pressures.front, pressures.rear
    if tune_type not in (TuneType.DRIFT, TuneType.DRAG):
        pressure_front += weight_offset * 0.03
        pressure_rear -= weight_offset * 0.03

    # Alignment
    alignment = ALIGNMENT_PRESETS[tune_type]
    camber_front, camber_rear = alignment.camber_front, alignment.camber_rear
    if specs.weight > HEAVY_CAR_LBS:
        camber_front -= 0.2
        camber_rear -= 0.1
    if wd > 55.0:
        camber_front -= 0.2
    elif wd < 45.0:
        camber_rear -= 0.2

    # Anti-roll bars
    arb_front = float(round(slider_math(_ARB_MIN, _ARB_MAX, wd)))
    arb_rear = float(round(slider_math(_ARB_MIN, _ARB_MAX, 100.0 - wd)))
    drive_scale = _ARB_DRIVE_SCALE[specs.drive_type]
    arb_front = float(round(arb_front * drive_scale.front))
    arb_rear = float(round(arb_rear * drive_scale.rear))
    tune_scale = _ARB_TUNE_SCALE.get(tune_type)
    if tune_scale is not None:
        arb_front = float(round(arb_front * tune_scale.front))
        arb_rear = float(round(arb_rear * tune_scale.rear))
    arb_front = _clamp(arb_front, _ARB_MIN, _ARB_MAX)
    arb_rear = _clamp(arb_rear, _ARB_MIN, _ARB_MAX)

    # Springs
    spring_range = SPRING_RANGES[tune_type]
    springs_front = float(round(slider_math(spring_range.min, spring_range.max, wd)))
    springs_rear = float(round(slider_math(spring_range.min, spring_range.max, 100.0 - wd)))
    if specs.has_aero and front_downforce > 100.0:
        springs_front += round(front_downforce * 0.1)
        springs_rear += round(rear_downforce * 0.1)
    springs_front = _clamp(springs_front, spring_range.min, spring_range.max)
    springs_rear = _clamp(springs_rear, spring_range.min, spring_range.max)

    high_power = tune_type == TuneType.GRIP and _is_high_power(specs, HIGH_POWER_HP)
    if high_power:
        springs_front = float(round(springs_front * HIGH_POWER_STIFFNESS_SCALE))
        springs_rear = float(round(springs_rear * HIGH_POWER_STIFFNESS_SCALE))
        arb_front = _clamp(
            float(round(arb_front * HIGH_POWER_STIFFNESS_SCALE)), _ARB_MIN, _ARB_MAX
        )
        arb_rear = _clamp(float(round(arb_rear * HIGH_POWER_STIFFNESS_SCALE)), _ARB_MIN, _ARB_MAX)

    # Ride height
    ride_height = RIDE_HEIGHT_PRESETS[tune_type]
    if specs.has_aero and tune_type in (TuneType.GRIP, TuneType.STREET):
        ride_height = _AERO_RIDE_HEIGHT

    # Dampers: rebound from axle weight share, bump as a fraction of rebound.
    rebound_front = float(round(19.0 * front_share + 1.0))
    rebound_rear = float(round(19.0 * rear_share + 1.0))
    rebound_scale = _REBOUND_TUNE_SCALE.get(tune_type)
    if rebound_scale is not None:
        rebound_front = float(round(rebound_front * rebound_scale.front))
        rebound_rear = float(round(rebound_rear * rebound_scale.rear))
    rebound_front = _clamp(rebound_front, _DAMPER_MIN, _DAMPER_MAX)
    rebound_rear = _clamp(rebound_rear, _DAMPER_MIN, _DAMPER_MAX)

    bump_ratio: float = 0.55 if tune_type == TuneType.OFFROAD else 0.60
    bump_front = _clamp(float(round(rebound_front * bump_ratio)), _DAMPER_MIN, _DAMPER_MAX)
    bump_rear = _clamp(float(round(rebound_rear * bump_ratio)), _DAMPER_MIN, _DAMPER_MAX)

    # Aero: a share of the available downforce, never an echo of the maximum.
    aero_front = aero_rear = 0.0
    if specs.has_aero:
        targets = AERO_TARGETS[tune_type]
        offsets = _AERO_DRIVE_OFFSETS[specs.drive_type]
        front_adjust, rear_adjust = offsets.front, offsets.rear
        if wd > 55.0:
            rear_adjust += 0.10
        elif wd < 45.0:
            front_adjust += 0.10
        max_front = front_downforce if front_downforce > 0.0 else _DEFAULT_MAX_AERO
        max_rear = rear_downforce if rear_downforce > 0.0 else _DEFAULT_MAX_AERO
        aero_front = float(round(max_front * _clamp(targets.front + front_adjust, 0.0, 1.0)))
        aero_rear = float(round(max_rear * _clamp(targets.rear + rear_adjust, 0.0, 1.0)))

    diff = DIFF_PRESETS[tune_type][specs.drive_type]

    # Brakes: bias follows the weight; the in-game slider reads inverted.
    brakes = BRAKE_PRESETS[tune_type]
    front_bias = _clamp(
        brakes.front_bias + round(weight_offset * 0.15),
        _MIN_FRONT_BRAKE_BIAS,
        _MAX_FRONT_BRAKE_BIAS,
    )
    slider = 100.0 - front_bias
    brake_note = (
        f"Set slider to {slider:g}% to achieve {front_bias:g}% front bias "
        "(the in-game slider is inverted)"
    )

    gearing = GEARING_PRESETS[tune_type]
    final_drive = gearing.final_drive
    if _is_high_power(specs, VERY_HIGH_POWER_HP):
        final_drive += _VERY_HIGH_POWER_FINAL_DRIVE_OFFSET

    tune = TuneSettings(
        tire_pressure_front=round(pressure_front, 1),
        tire_pressure_rear=round(pressure_rear, 1),
        final_drive=round(final_drive, 2),
        gear_ratios=calculate_gear_ratios(gearing.first, gearing.last, specs.gear_count),
        camber_front=round(camber_front, 1),
        camber_rear=round(camber_rear, 1),
        toe_front=round(alignment.toe_front, 1),
        toe_rear=round(alignment.toe_rear, 1),
        caster=round(alignment.caster, 1),
        arb_front=arb_front,
        arb_rear=arb_rear,
        springs_front=springs_front,
        springs_rear=springs_rear,
        ride_height_front=round(ride_height.front, 1),
        ride_height_rear=round(ride_height.rear, 1),
        rebound_front=rebound_front,
        rebound_rear=rebound_rear,
        bump_front=bump_front,
        bump_rear=bump_rear,
        aero_front=aero_front,
        aero_rear=aero_rear,
        diff_accel_rear=diff.accel_rear,
        diff_decel_rear=diff.decel_rear,
        diff_accel_front=diff.accel_front,
        diff_decel_front=diff.decel_front,
        diff_center=diff.center,
        brake_pressure=brakes.pressure,
        brake_balance=front_bias,
        gearing_note=gearing.note,
        brake_note=brake_note,
    ).clamped()

    logger.info(
        "tune_generated",
        tune_type=tune_type.value,
        drive_type=specs.drive_type.value,
        weight=specs.weight,
        weight_distribution=wd,
        high_power=high_power,
    )
    return tune


# ---------------------------------------------------------------------------
# Unit conversion
# ---------------------------------------------------------------------------


def lbs_to_kg(lbs: float) -> float:
    return float(round(lbs * 0.453592))


def kg_to_lbs(kg: float) -> float:
    return float(round(kg * 2.20462))


def psi_to_bar(psi: float) -> float:
    return round(psi * 0.0689476, 2)


def bar_to_psi(bar: float) -> float:
    return round(bar * 14.5038, 1)


def inches_to_cm(inches: float) -> float:
    return round(inches * 2.54, 1)


def cm_to_inches(cm: float) -> float:
    return round(cm / 2.54, 1)


def lb_in_to_kg_mm(lb_in: float) -> float:
    return round(lb_in * 0.017858, 2)


def kg_mm_to_lb_in(kg_mm: float) -> float:
    return float(round(kg_mm / 0.017858))


def lbs_to_newtons(lbs: float) -> float:
    return float(round(lbs * 4.44822))


def newtons_to_lbs(newtons: float) -> float:
    return float(round(newtons / 4.44822))


def hp_to_kw(hp: float) -> float:
    return float(round(hp * 0.7457))


def kw_to_hp(kw: float) -> float:
    return float(round(kw / 0.7457))


def convert_tune_to_units(tune: TuneSettings, metric: bool) -> TuneSettings:
    """Display copy of *tune* with pressures, springs, ride heights and aero
    in metric units.

    The result is for presentation only: metric values are not checked
    against the game ranges, which are defined in imperial units.  With
    ``metric=False`` an unchanged copy is returned.
    """
    if not metric:
        return tune.copy()
    return replace(
        tune.copy(),
        tire_pressure_front=psi_to_bar(tune.tire_pressure_front),
        tire_pressure_rear=psi_to_bar(tune.tire_pressure_rear),
        springs_front=lb_in_to_kg_mm(tune.springs_front),
        springs_rear=lb_in_to_kg_mm(tune.springs_rear),
        ride_height_front=inches_to_cm(tune.ride_height_front),
        ride_height_rear=inches_to_cm(tune.ride_height_rear),
        aero_front=lbs_to_newtons(tune.aero_front),
        aero_rear=lbs_to_newtons(tune.aero_rear),
    )


def unit_labels(metric: bool) -> dict[str, str]:
    """Unit suffix per quantity for the chosen unit system."""
    if metric:
        return {
            "pressure": "BAR",
            "springs": "KG/MM",
            "ride_height": "CM",
            "aero": "N",
            "weight": "kg",
            "power": "kW",
        }
    return {
        "pressure": "PSI",
        "springs": "LB/IN",
        "ride_height": "IN",
        "aero": "LB",
        "weight": "lbs",
        "power": "HP",
    }
