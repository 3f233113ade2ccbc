"""Forza Horizon Tuning Dashboard.

Interactive tuning dashboard built with Streamlit and Plotly.
Generates a tune for a car from the reference table (optionally fitted to
a track), shows predicted performance under chosen conditions, breaks the
setup down per subsystem, and plots the Pareto front of a two-objective
search.

Launch with::

    streamlit run dashboard/app.py
"""

from __future__ import annotations

import plotly.graph_objects as go
import streamlit as st

from fh_tuner import __version__
from fh_tuner.config import car_to_specs, load_cars, load_tracks
from fh_tuner.core.analysis import analyze_tune, collect_recommendations
from fh_tuner.core.calculator import calculate_tune, convert_tune_to_units, unit_labels
from fh_tuner.core.car import TireCompound, TuneType
from fh_tuner.core.environment import EnvironmentalConditions, TrackCondition, Weather
from fh_tuner.core.optimizer import MultiVariableOptimizer, OptimizationTarget
from fh_tuner.core.predictor import PerformancePredictor
from fh_tuner.core.track_tuning import (
    calculate_track_adjustments,
    calculate_track_tune,
    track_summary,
)
from fh_tuner.core.tune import TuneSettings
from fh_tuner.logging import setup_logging

_PARETO_SEED = 42

# Metrics drawn on the radar chart, with the factor that maps each onto 0-10.
_RADAR_METRICS: list[tuple[str, str, float]] = [
    ("handling_score", "Handling", 1.0),
    ("stability_score", "Stability", 1.0),
    ("braking_power", "Braking", 1.0),
    ("cornering_grip", "Cornering", 5.0),
    ("traction_control", "Traction", 1.0),
    ("fuel_efficiency", "Efficiency", 0.4),
]


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _tune_rows(tune: TuneSettings, labels: dict[str, str]) -> list[dict[str, str]]:
    """Front/rear table rows for the tune summary."""
    pairs = [
        (f"Tyre pressure ({labels['pressure']})", "tire_pressure"),
        ("Camber (deg)", "camber"),
        ("Toe (deg)", "toe"),
        ("Anti-roll bars", "arb"),
        (f"Springs ({labels['springs']})", "springs"),
        (f"Ride height ({labels['ride_height']})", "ride_height"),
        ("Rebound", "rebound"),
        ("Bump", "bump"),
        (f"Aero ({labels['aero']})", "aero"),
    ]
    return [
        {
            "Setting": label,
            "Front": f"{getattr(tune, f'{stem}_front'):.2f}",
            "Rear": f"{getattr(tune, f'{stem}_rear'):.2f}",
        }
        for label, stem in pairs
    ]


def _radar(values: dict[str, float], title: str) -> go.Figure:
    names = [label for _, label, _ in _RADAR_METRICS]
    points = [values[key] * scale for key, _, scale in _RADAR_METRICS]
    fig = go.Figure(
        go.Scatterpolar(
            r=points + points[:1],
            theta=names + names[:1],
            fill="toself",
            line_color="#d62728",
        )
    )
    fig.update_layout(
        title=title,
        polar=dict(radialaxis=dict(range=[0, 10])),
        height=380,
        showlegend=False,
    )
    return fig


# ---------------------------------------------------------------------------
# Streamlit app
# ---------------------------------------------------------------------------


def main() -> None:  # noqa: C901
    """Entry point for the Streamlit dashboard."""
    setup_logging("development")
    st.set_page_config(
        page_title="Forza Horizon Tuning",
        layout="wide",
    )

    st.title("Forza Horizon Tuning Dashboard")

    # ── Sidebar ──────────────────────────────────────────────────────────
    st.sidebar.header("Car")

    cars = load_cars()
    car_names = {car.display_name: car.id for car in cars}
    selected_name: str = st.sidebar.selectbox("Car", options=sorted(car_names), index=0)
    horsepower: float = st.sidebar.number_input(
        "Horsepower", min_value=50.0, max_value=2000.0, value=400.0, step=10.0
    )
    compound: str = st.sidebar.selectbox(
        "Tyre compound", options=[c.value for c in TireCompound], index=1
    )
    has_aero: bool = st.sidebar.toggle("Adjustable aero fitted", value=False)
    tune_type: str = st.sidebar.selectbox("Tune type", options=[t.value for t in TuneType])
    metric_units: bool = st.sidebar.toggle("Metric units", value=False)

    tracks = {track.name: track for track in load_tracks()}
    track_name: str = st.sidebar.selectbox(
        "Track", options=["(none)"] + sorted(tracks), index=0
    )
    track = tracks.get(track_name)

    st.sidebar.header("Conditions")
    weather: str = st.sidebar.selectbox("Weather", options=[w.value for w in Weather])
    condition: str = st.sidebar.selectbox(
        "Track condition", options=[c.value for c in TrackCondition]
    )
    temperature: float = st.sidebar.slider(
        "Air temperature (C)", min_value=-10.0, max_value=45.0, value=20.0, step=1.0
    )
    altitude: float = st.sidebar.slider(
        "Altitude (ft)", min_value=0.0, max_value=10000.0, value=0.0, step=250.0
    )
    lap_progress: float = st.sidebar.slider(
        "Race distance covered", min_value=0.0, max_value=1.0, value=0.0, step=0.05
    )

    specs = car_to_specs(
        car_names[selected_name],
        horsepower=horsepower,
        tire_compound=TireCompound(compound),
        has_aero=has_aero,
    )
    if specs is None:
        st.warning(f"Car '{selected_name}' not found in the car table.")
        return

    environment = EnvironmentalConditions(
        weather=Weather(weather),
        temperature=temperature,
        track_conditions=TrackCondition(condition),
        altitude=altitude,
    )

    # ── Section 1: Generated tune ────────────────────────────────────────
    st.header("1 -- Generated Tune")

    base_tune = calculate_tune(specs, TuneType(tune_type))
    tune = base_tune
    if track is not None:
        tune = calculate_track_tune(specs, TuneType(tune_type), track)
        st.caption(f"Fitted to {track_summary(track)}")
    shown = convert_tune_to_units(tune, metric_units)
    labels = unit_labels(metric_units)

    col_table, col_misc = st.columns([2, 1])
    with col_table:
        st.table(_tune_rows(shown, labels))
    with col_misc:
        st.metric("Final drive", f"{shown.final_drive:.2f}")
        st.write("Gears: " + ", ".join(f"{g:.2f}" for g in shown.gear_ratios))
        st.write(f"Caster: {shown.caster:.1f} deg")
        st.write(
            f"Differential (rear): accel {shown.diff_accel_rear:.0f}% / "
            f"decel {shown.diff_decel_rear:.0f}%"
        )
        if shown.diff_center is not None:
            st.write(f"Centre balance: {shown.diff_center:.0f}% rear")
        st.write(f"Brakes: {shown.brake_note}")
        if shown.gearing_note:
            st.caption(shown.gearing_note)

    # ── Section 2: Predicted performance ─────────────────────────────────
    st.header("2 -- Predicted Performance")

    predictor = PerformancePredictor(specs, tune, environment)
    prediction = predictor.predict_performance(lap_progress=lap_progress)
    base = prediction.baseline
    worn = prediction.with_degradation

    col_p1, col_p2, col_p3, col_p4 = st.columns(4)
    col_p1.metric(
        "0-60 mph (s)",
        f"{worn.zero_to_sixty:.2f}",
        f"{worn.zero_to_sixty - base.zero_to_sixty:+.2f}",
        delta_color="inverse",
    )
    col_p2.metric("Top speed (mph)", f"{worn.top_speed:.1f}")
    col_p3.metric(
        "Handling",
        f"{worn.handling_score:.2f}",
        f"{worn.handling_score - base.handling_score:+.2f}",
    )
    col_p4.metric("Confidence", f"{prediction.confidence:.0%}")

    col_radar, col_env = st.columns(2)
    with col_radar:
        st.plotly_chart(
            _radar(worn.to_dict(), "Setup character"),
            use_container_width=True,
        )
    with col_env:
        impact = prediction.environmental_impact
        if impact:
            fig_env = go.Figure(
                go.Bar(
                    x=list(impact.values()),
                    y=list(impact.keys()),
                    orientation="h",
                    marker_color=["#2ca02c" if v > 0 else "#1f77b4" for v in impact.values()],
                )
            )
            fig_env.update_layout(
                title="Environmental impact",
                xaxis_title="Change",
                height=380,
                margin=dict(l=160),
            )
            st.plotly_chart(fig_env, use_container_width=True)
        else:
            st.write("No environmental penalties for these conditions.")

    for factor in prediction.limiting_factors:
        st.write(f"- Limiting: {factor}")
    for tip in prediction.recommendations:
        st.write(f"- {tip}")

    # ── Section 3: Subsystem analysis ────────────────────────────────────
    st.header("3 -- Subsystem Analysis")

    report = analyze_tune(specs, tune)
    col_a1, col_a2, col_a3 = st.columns(3)
    col_a1.metric("Turn-in sharpness", f"{report['geometry']['turn_in_sharpness']:.1f}")
    col_a2.metric("Braking power", f"{report['brakes']['braking_power']:.1f}")
    col_a3.metric("Roll stiffness front", f"{report['suspension']['lltd']['lltd_percent']:.1f}%")
    st.write(f"Geometry: {report['geometry']['description']}")
    st.write(f"Differential: {report['differential']['description']}")
    st.write(f"Brakes: {report['brakes']['description']}")
    if "gearing" in report:
        st.write(f"Gearing: {report['gearing']['gearing_character']}")
    st.write(f"Springs: {report['suspension']['description']}")
    st.write(f"Cornering: {report['load_transfer']['cornering']['description']}")
    with st.expander("Suggested adjustments"):
        for subsystem, text in collect_recommendations(report):
            st.write(f"- **{subsystem}**: {text}")

    if track is not None:
        adjustments = calculate_track_adjustments(
            track, specs.weight, specs.effective_horsepower, TuneType(tune_type)
        )
        with st.expander(f"Changes for {track.name}"):
            st.write(
                f"Tyres: {adjustments.tire_compound.value} | "
                f"Downforce: {adjustments.downforce_target} | "
                f"Springs {base_tune.springs_front:.0f} -> {tune.springs_front:.0f}"
            )
            for line in adjustments.reasoning:
                st.write(f"- {line}")

    # ── Section 4: Pareto front ──────────────────────────────────────────
    st.header("4 -- Handling vs Efficiency Trade-off")

    population: int = st.slider("Population size", min_value=10, max_value=80, value=30, step=5)
    generations: int = st.slider("Generations", min_value=1, max_value=30, value=8, step=1)

    if st.button("Run Pareto search"):
        optimizer = MultiVariableOptimizer(specs, tune, environment, seed=_PARETO_SEED)
        with st.spinner("Searching..."):
            front = optimizer.optimize_multi_objective(
                [OptimizationTarget(objective="handling"), OptimizationTarget(objective="efficiency")],
                population_size=population,
                generations=generations,
            )
        st.session_state["pareto"] = front

    if "pareto" not in st.session_state:
        st.info('Press "Run Pareto search" to explore the trade-off.')
    else:
        front = st.session_state["pareto"]
        fig_front = go.Figure(
            go.Scatter(
                x=[s.scores["handling"] for s in front.solutions],
                y=[s.scores["efficiency"] for s in front.solutions],
                mode="markers",
                marker=dict(size=11, color="#d62728"),
                text=[
                    f"springs {s.tune.springs_front:.0f}/{s.tune.springs_rear:.0f}, "
                    f"ARB {s.tune.arb_front:.0f}/{s.tune.arb_rear:.0f}"
                    for s in front.solutions
                ],
            )
        )
        fig_front.update_layout(
            title=f"Pareto front ({len(front.solutions)} tunes)",
            xaxis_title="Handling score",
            yaxis_title="Efficiency score",
            height=420,
        )
        st.plotly_chart(fig_front, use_container_width=True)

    # ── Footer ───────────────────────────────────────────────────────────
    st.markdown("---")
    st.caption(f"fh-tuner v{__version__}. Tune values are estimates, not in-game telemetry.")


if __name__ == "__main__":
    main()
