"""Load transfer analysis for a concrete vehicle setup.

Builds on the transfer primitives in :mod:`fh_tuner.core.physics` to
describe how a car's load moves under acceleration, braking and cornering
and which suspension changes counter it.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any

from fh_tuner.core.physics import lateral_load_transfer, longitudinal_load_transfer


@dataclass(frozen=True)
class VehicleSetup:
    """Chassis geometry and suspension used for load transfer analysis.

    Attributes:
        weight: Car weight in lbs (> 0).
        weight_distribution: Static front share in percent.
        cg_height: Centre of gravity height in inches (> 0).
        wheelbase: Wheelbase in inches (> 0).
        track_width: Track width in inches (> 0).
        springs_front: Front spring rate in lb/in.
        springs_rear: Rear spring rate in lb/in.
        arb_front: Front anti-roll bar (1-65).
        arb_rear: Rear anti-roll bar (1-65).
    """

    weight: float
    weight_distribution: float
    cg_height: float = 18.0
    wheelbase: float = 105.0
    track_width: float = 60.0
    springs_front: float = 500.0
    springs_rear: float = 500.0
    arb_front: float = 30.0
    arb_rear: float = 30.0

    def __post_init__(self) -> None:
        if self.weight <= 0.0:
            raise ValueError("weight must be > 0.")
        if min(self.cg_height, self.wheelbase, self.track_width) <= 0.0:
            raise ValueError("cg_height, wheelbase and track_width must be > 0.")


def static_weight_split(setup: VehicleSetup) -> dict[str, float]:
    """Static front/rear axle weight in lbs."""
    front: float = setup.weight * setup.weight_distribution / 100.0
    return {"front": float(round(front)), "rear": float(round(setup.weight - front))}


def combined_load_transfer(
    setup: VehicleSetup,
    acceleration: float,
    lateral_g: float,
    grade: float = 0.0,
) -> dict[str, float]:
    """Longitudinal, lateral and combined transfer for one driving state.

    Args:
        setup: Vehicle description.
        acceleration: Longitudinal g (negative = braking).
        lateral_g: Cornering g.
        grade: Road slope in degrees.

    Returns:
        Dictionary containing:
            longitudinal -- Fore/aft transfer in percent.
            lateral -- Side-to-side transfer in percent.
            combined -- Vector magnitude of both.
            front_axle_load -- Resulting front share in percent.
            rear_axle_load -- Resulting rear share in percent.
    """
    longitudinal = longitudinal_load_transfer(
        acceleration, setup.cg_height, setup.wheelbase, grade
    )
    lateral = lateral_load_transfer(lateral_g, setup.cg_height, setup.track_width)

    static_front: float = setup.weight * setup.weight_distribution / 100.0
    shifted: float = longitudinal * setup.weight / 100.0
    front_load: float = static_front + shifted
    rear_load: float = setup.weight - static_front - shifted

    return {
        "longitudinal": round(longitudinal, 1),
        "lateral": round(lateral, 1),
        "combined": round(math.hypot(longitudinal, lateral), 1),
        "front_axle_load": float(round(front_load / setup.weight * 100.0)),
        "rear_axle_load": float(round(rear_load / setup.weight * 100.0)),
    }


def analyze_balance_bias(setup: VehicleSetup, lateral_g: float) -> dict[str, Any]:
    """Which axle ends up carrying more load mid-corner.

    Returns:
        Dictionary containing:
            bias -- ``"understeer"``, ``"neutral"`` or ``"oversteer"``.
            severity -- Front minus rear load share in percent.
            description -- Advice string.
    """
    lateral = lateral_load_transfer(lateral_g, setup.cg_height, setup.track_width)
    front_share: float = setup.weight_distribution + lateral / 2.0
    rear_share: float = (100.0 - setup.weight_distribution) - lateral / 2.0
    bias: float = front_share - rear_share

    if bias > 5.0:
        label = "understeer"
        description = (
            f"Front heavily loaded (+{round(bias)}%). Car will push wide. "
            "Increase rear downforce or reduce front spring rate."
        )
    elif bias < -5.0:
        label = "oversteer"
        description = (
            f"Rear heavily loaded ({round(bias)}%). Car will slide rear. "
            "Increase front downforce or reduce rear spring rate."
        )
    else:
        label = "neutral"
        description = "Balance is neutral. Good for all driving styles."

    return {"bias": label, "severity": round(bias, 1), "description": description}


def recommend_suspension_adjustments(
    setup: VehicleSetup, driving_condition: str
) -> list[dict[str, str]]:
    """Adjustments for ``acceleration``, ``braking`` or ``cornering``.

    Each entry has ``adjustment``, ``reason`` and ``expected_effect`` keys.
    Unknown conditions yield an empty list.
    """
    recommendations: list[dict[str, str]] = []

    if driving_condition == "acceleration":
        longitudinal = longitudinal_load_transfer(0.8, setup.cg_height, setup.wheelbase)
        if longitudinal > 20.0:
            recommendations.append(
                {
                    "adjustment": "Increase front spring rate",
                    "reason": "Excessive rear weight transfer causing rear squat",
                    "expected_effect": "Better launch control and stability",
                }
            )
        if longitudinal < -20.0:
            recommendations.append(
                {
                    "adjustment": "Increase rear spring rate",
                    "reason": "Excessive front weight transfer causing nose dive",
                    "expected_effect": "More stable acceleration",
                }
            )

    elif driving_condition == "cornering":
        balance = analyze_balance_bias(setup, 1.5)
        if balance["bias"] == "understeer":
            recommendations.extend(
                [
                    {
                        "adjustment": "Reduce front ARB stiffness",
                        "reason": "Front tires are over-loaded",
                        "expected_effect": "Better turn-in response",
                    },
                    {
                        "adjustment": "Increase rear wing angle",
                        "reason": "More rear downforce for balance",
                        "expected_effect": "Improved mid-corner rotation",
                    },
                ]
            )
        elif balance["bias"] == "oversteer":
            recommendations.extend(
                [
                    {
                        "adjustment": "Increase front ARB stiffness",
                        "reason": "Rear tires are over-loaded",
                        "expected_effect": "More front grip and stability",
                    },
                    {
                        "adjustment": "Reduce rear wing angle",
                        "reason": "Less rear downforce for balance",
                        "expected_effect": "Improved rear stability",
                    },
                ]
            )

    elif driving_condition == "braking":
        # Braking is a negative acceleration, so a large forward shift shows
        # up as a large negative transfer.
        longitudinal = longitudinal_load_transfer(-0.8, setup.cg_height, setup.wheelbase)
        if abs(longitudinal) > 30.0:
            recommendations.append(
                {
                    "adjustment": "Increase rear spring rate",
                    "reason": "Excessive front weight transfer under braking",
                    "expected_effect": "Better brake balance and stability",
                }
            )

    return recommendations
