"""Calculation engines for vineyard water use and canopy structure."""
from vinecalc.physics.evapotranspiration import (
    ETcResult,
    IrrigationRecommendation,
    compute_etc,
    reference_evapotranspiration,
)
from vinecalc.physics.canopy import (
    LAIResult,
    LAITarget,
    MonitoringPeriod,
    compute_lai,
    classify_canopy_density,
    light_interception,
    optimal_lai_targets,
    seasonal_monitoring_schedule,
)
from vinecalc.physics.crop_development import (
    CropCoefficient,
    get_crop_coefficient,
    determine_growth_stage,
    seasonal_water_requirements,
)
from vinecalc.physics.radiation import resolve_solar_input

__all__ = [
    # ETc engine
    "ETcResult",
    "IrrigationRecommendation",
    "compute_etc",
    "reference_evapotranspiration",
    "resolve_solar_input",
    # LAI engine
    "LAIResult",
    "LAITarget",
    "MonitoringPeriod",
    "compute_lai",
    "classify_canopy_density",
    "light_interception",
    "optimal_lai_targets",
    "seasonal_monitoring_schedule",
    # Phenology
    "CropCoefficient",
    "get_crop_coefficient",
    "determine_growth_stage",
    "seasonal_water_requirements",
]
