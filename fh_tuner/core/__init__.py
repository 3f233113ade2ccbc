"""Core tuning modules: tune generation, analyzers, prediction and search."""

from fh_tuner.core.aero import AeroProfile, AeroSetup, analyze_aerodynamics
from fh_tuner.core.analysis import analyze_tune, collect_recommendations
from fh_tuner.core.brakes import (
    BrakeSetup,
    analyze_brake_setup,
    find_optimal_brake_bias,
    optimize_brakes_for,
)
from fh_tuner.core.calculator import (
    calculate_gear_ratios,
    calculate_tune,
    convert_tune_to_units,
    slider_math,
    unit_labels,
)
from fh_tuner.core.car import CarModel, CarSpecs, DriveType, PIClass, TireCompound, TuneType
from fh_tuner.core.differential import (
    DifferentialSetup,
    analyze_differential,
    get_differential_recommendations,
    optimize_differential_for,
)
from fh_tuner.core.environment import (
    DEFAULT_ENVIRONMENT,
    EnvironmentalConditions,
    EnvironmentPatch,
    TimeOfDay,
    TrackCondition,
    Weather,
    merge_environment,
)
from fh_tuner.core.gearing import (
    GearSetup,
    analyze_gearing,
    find_optimal_final_drive,
    get_gearing_recommendations,
    optimize_gearing_for,
)
from fh_tuner.core.geometry import (
    GeometrySetup,
    analyze_geometry,
    get_geometry_recommendations,
    optimize_geometry_for,
)
from fh_tuner.core.load_transfer import (
    VehicleSetup,
    analyze_balance_bias,
    combined_load_transfer,
    recommend_suspension_adjustments,
    static_weight_split,
)
from fh_tuner.core.optimizer import (
    MultiVariableOptimizer,
    OptimizationConstraint,
    OptimizationResult,
    OptimizationTarget,
    ParetoFront,
    dominates,
    pareto_front,
)
from fh_tuner.core.patterns import (
    CommunityStore,
    PatternMiner,
    SmartRecommendation,
    TuneDataPoint,
)
from fh_tuner.core.predictor import (
    PerformanceMetrics,
    PerformancePrediction,
    PerformancePredictor,
)
from fh_tuner.core.suspension import (
    analyze_suspension_stiffness,
    apply_surface_modifiers,
    calculate_lltd,
    physics_based_dampers,
    physics_based_springs,
)
from fh_tuner.core.track import Track
from fh_tuner.core.track_tuning import (
    TrackAdjustments,
    apply_track_adjustments,
    calculate_track_adjustments,
    calculate_track_tune,
    track_summary,
)
from fh_tuner.core.tune import TUNE_FIELD_RANGES, TunePatch, TuneSettings, apply_tune_patch
from fh_tuner.core.tyres import analyze_tire_compatibility, get_recommended_tire

__all__ = [
    "AeroProfile",
    "AeroSetup",
    "BrakeSetup",
    "CarModel",
    "CarSpecs",
    "CommunityStore",
    "DEFAULT_ENVIRONMENT",
    "DifferentialSetup",
    "DriveType",
    "EnvironmentPatch",
    "EnvironmentalConditions",
    "GearSetup",
    "GeometrySetup",
    "MultiVariableOptimizer",
    "OptimizationConstraint",
    "OptimizationResult",
    "OptimizationTarget",
    "PIClass",
    "ParetoFront",
    "PatternMiner",
    "PerformanceMetrics",
    "PerformancePrediction",
    "PerformancePredictor",
    "SmartRecommendation",
    "TUNE_FIELD_RANGES",
    "TimeOfDay",
    "TireCompound",
    "Track",
    "TrackAdjustments",
    "TrackCondition",
    "TuneDataPoint",
    "TunePatch",
    "TuneSettings",
    "TuneType",
    "VehicleSetup",
    "Weather",
    "analyze_aerodynamics",
    "analyze_balance_bias",
    "analyze_brake_setup",
    "analyze_differential",
    "analyze_gearing",
    "analyze_geometry",
    "analyze_suspension_stiffness",
    "analyze_tire_compatibility",
    "analyze_tune",
    "apply_surface_modifiers",
    "apply_track_adjustments",
    "apply_tune_patch",
    "calculate_gear_ratios",
    "calculate_lltd",
    "calculate_track_adjustments",
    "calculate_track_tune",
    "calculate_tune",
    "collect_recommendations",
    "combined_load_transfer",
    "convert_tune_to_units",
    "dominates",
    "find_optimal_brake_bias",
    "find_optimal_final_drive",
    "get_differential_recommendations",
    "get_gearing_recommendations",
    "get_geometry_recommendations",
    "get_recommended_tire",
    "merge_environment",
    "optimize_brakes_for",
    "optimize_differential_for",
    "optimize_gearing_for",
    "optimize_geometry_for",
    "pareto_front",
    "physics_based_dampers",
    "physics_based_springs",
    "recommend_suspension_adjustments",
    "slider_math",
    "static_weight_split",
    "track_summary",
    "unit_labels",
]
