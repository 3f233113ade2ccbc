"""Car specification model for the tuning engine."""

from __future__ import annotations

from dataclasses import asdict, dataclass
from enum import Enum
from typing import Any

# Fallback used whenever a car is submitted without a horsepower figure.
DEFAULT_HORSEPOWER: float = 400.0


class DriveType(str, Enum):
    """Drivetrain layout."""

    FWD = "FWD"
    RWD = "RWD"
    AWD = "AWD"


class TuneType(str, Enum):
    """Driving style a tune is generated for."""

    GRIP = "grip"
    STREET = "street"
    DRIFT = "drift"
    OFFROAD = "offroad"
    RALLY = "rally"
    DRAG = "drag"


class TireCompound(str, Enum):
    """Tyre compounds available in the upgrade shop."""

    STREET = "street"
    SPORT = "sport"
    SEMI_SLICK = "semi-slick"
    SLICK = "slick"
    RALLY = "rally"
    OFFROAD = "offroad"
    DRAG = "drag"


class PIClass(str, Enum):
    """Performance Index tier, ordered from weakest to strongest."""

    D = "D"
    C = "C"
    B = "B"
    A = "A"
    S1 = "S1"
    S2 = "S2"
    X = "X"

    @property
    def rank(self) -> int:
        """Ordinal position of the class (D = 0, X = 6)."""
        return _PI_ORDER.index(self)


_PI_ORDER: list[PIClass] = list(PIClass)

# Upper PI rating bound (inclusive) for each class below X.
_PI_UPPER_BOUNDS: list[tuple[int, PIClass]] = [
    (500, PIClass.D),
    (600, PIClass.C),
    (700, PIClass.B),
    (800, PIClass.A),
    (900, PIClass.S1),
    (998, PIClass.S2),
]


def pi_class_for_rating(rating: int) -> PIClass:
    """Map a numeric PI rating (100-999) onto its class letter."""
    for upper, pi_class in _PI_UPPER_BOUNDS:
        if rating <= upper:
            return pi_class
    return PIClass.X


@dataclass(frozen=True)
class CarSpecs:
    """Immutable per-request description of the car being tuned.

    Attributes:
        weight: Curb weight in lbs (> 0).
        weight_distribution: Share of weight on the front axle in percent
            (0-100).
        drive_type: Drivetrain layout.
        pi_class: Performance Index tier.
        has_aero: Whether adjustable wings are fitted.
        front_downforce: Maximum front downforce setting, if known.
        rear_downforce: Maximum rear downforce setting, if known.
        tire_compound: Fitted tyre compound.
        horsepower: Engine output in hp.  ``None`` means unknown; the
            engine then falls back to :data:`DEFAULT_HORSEPOWER`.
        gear_count: Number of forward gears (4-10).
    """

    weight: float
    weight_distribution: float
    drive_type: DriveType = DriveType.RWD
    pi_class: PIClass = PIClass.A
    has_aero: bool = False
    front_downforce: float | None = None
    rear_downforce: float | None = None
    tire_compound: TireCompound = TireCompound.SPORT
    horsepower: float | None = None
    gear_count: int = 6

    def __post_init__(self) -> None:
        """Validate car parameters."""
        if self.weight <= 0.0:
            raise ValueError("weight must be > 0.")
        if not 0.0 <= self.weight_distribution <= 100.0:
            raise ValueError("weight_distribution must be between 0 and 100.")
        if self.horsepower is not None and self.horsepower <= 0.0:
            raise ValueError("horsepower must be > 0 when given.")
        if not 4 <= self.gear_count <= 10:
            raise ValueError("gear_count must be between 4 and 10.")
        for name in ("front_downforce", "rear_downforce"):
            value = getattr(self, name)
            if value is not None and value < 0.0:
                raise ValueError(f"{name} must be >= 0 when given.")

    @property
    def effective_horsepower(self) -> float:
        """Horsepower with the documented fallback applied."""
        return self.horsepower if self.horsepower is not None else DEFAULT_HORSEPOWER

    @property
    def rear_distribution(self) -> float:
        """Share of weight on the rear axle in percent."""
        return 100.0 - self.weight_distribution

    def to_dict(self) -> dict[str, Any]:
        """Serialise to a JSON-compatible dictionary (enums as values)."""
        data = asdict(self)
        data["drive_type"] = self.drive_type.value
        data["pi_class"] = self.pi_class.value
        data["tire_compound"] = self.tire_compound.value
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> CarSpecs:
        """Build specs from a dictionary produced by :meth:`to_dict`.

        Raises:
            ValueError: If an enum value is unknown or a field is invalid.
        """
        return cls(
            weight=float(data["weight"]),
            weight_distribution=float(data["weight_distribution"]),
            drive_type=DriveType(data.get("drive_type", DriveType.RWD.value)),
            pi_class=PIClass(data.get("pi_class", PIClass.A.value)),
            has_aero=bool(data.get("has_aero", False)),
            front_downforce=data.get("front_downforce"),
            rear_downforce=data.get("rear_downforce"),
            tire_compound=TireCompound(
                data.get("tire_compound", TireCompound.SPORT.value)
            ),
            horsepower=data.get("horsepower"),
            gear_count=int(data.get("gear_count", 6)),
        )


@dataclass(frozen=True)
class CarModel:
    """Entry of the static car reference table.

    Attributes:
        id: Stable slug used as the lookup key.
        make: Manufacturer.
        model: Model name.
        year: Model year.
        weight: Stock weight in lbs.
        weight_distribution: Stock front weight share in percent.
        drive_type: Stock drivetrain.
        default_pi: Stock PI rating (100-999).
        category: Era/segment label.
    """

    id: str
    make: str
    model: str
    year: int
    weight: float
    weight_distribution: float
    drive_type: DriveType
    default_pi: int
    category: str

    @property
    def display_name(self) -> str:
        return f"{self.year} {self.make} {self.model}"

    def to_specs(
        self,
        horsepower: float | None = None,
        tire_compound: TireCompound = TireCompound.SPORT,
        has_aero: bool = False,
    ) -> CarSpecs:
        """Build :class:`CarSpecs` from the stock figures."""
        return CarSpecs(
            weight=self.weight,
            weight_distribution=self.weight_distribution,
            drive_type=self.drive_type,
            pi_class=pi_class_for_rating(self.default_pi),
            has_aero=has_aero,
            tire_compound=tire_compound,
            horsepower=horsepower,
        )
