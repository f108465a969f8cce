"""
Physical constants and the static coefficient tables.

Tables are read-only mappings built once at import time.
"""
from types import MappingProxyType
from typing import Final, Mapping, Tuple

from vinecalc.core.types import (
    GrowthStage, IrrigationMethod, SoilType, LeafShape,
    TrellisSystem, Season, AreaUnit, ProductionGoal,
)

# Physical constants (FAO-56)
SOLAR_CONSTANT: Final[float] = 0.0820  # MJ/m²/min
STEFAN_BOLTZMANN: Final[float] = 4.903e-9  # MJ/K⁴/m²/day
SEA_LEVEL_PRESSURE_KPA: Final[float] = 101.3
PSYCHROMETRIC_FACTOR: Final[float] = 0.665e-3  # cp/(ε·λ), 1/°C
EARTH_ORBIT_ECCENTRICITY: Final[float] = 0.033
SOLAR_DECLINATION_AMPLITUDE: Final[float] = 0.409
SOLAR_DECLINATION_PHASE: Final[float] = 1.39
CLEAR_SKY_INTERCEPT: Final[float] = 0.75
CLEAR_SKY_ELEVATION_SLOPE: Final[float] = 2e-5

# Unit conversions
W_M2_TO_MJ_M2_DAY: Final[float] = 0.0864
CM2_TO_M2: Final[float] = 1e-4
SQM_PER_HECTARE: Final[float] = 10000.0
LITERS_PER_MM_SQM: Final[float] = 1.0

AREA_TO_SQM: Final[Mapping[AreaUnit, float]] = MappingProxyType({
    AreaUnit.SQUARE_METERS: 1.0,
    AreaUnit.HECTARES: SQM_PER_HECTARE,
    AreaUnit.ACRES: 0.404686 * SQM_PER_HECTARE,
})

# Grape crop coefficients (Kc) by growth stage: (Kc, description)
GRAPE_KC: Final[Mapping[GrowthStage, Tuple[float, str]]] = MappingProxyType({
    GrowthStage.DORMANT: (0.15, "Dormant season - minimal water needs"),
    GrowthStage.BUDBREAK: (0.30, "Early season - buds swelling and breaking"),
    GrowthStage.LEAF_DEVELOPMENT: (0.50, "Shoot elongation - leaf area expanding"),
    GrowthStage.FLOWERING: (0.70, "Flowering stage - moderate water needs"),
    GrowthStage.FRUIT_SET: (0.95, "Fruit development - peak water needs"),
    GrowthStage.VERAISON: (0.85, "Ripening stage - reducing water stress"),
    GrowthStage.HARVEST: (0.45, "Harvest time - controlled irrigation"),
    GrowthStage.POST_HARVEST: (0.60, "Post-harvest recovery and storage"),
})

# Typical stage lengths (days) over one annual cycle
STAGE_DURATION_DAYS: Final[Mapping[GrowthStage, int]] = MappingProxyType({
    GrowthStage.DORMANT: 90,
    GrowthStage.BUDBREAK: 15,
    GrowthStage.LEAF_DEVELOPMENT: 15,
    GrowthStage.FLOWERING: 30,
    GrowthStage.FRUIT_SET: 60,
    GrowthStage.VERAISON: 60,
    GrowthStage.HARVEST: 30,
    GrowthStage.POST_HARVEST: 60,
})

# Soil retention: sandy soils drain faster, clay retains
SOIL_RETENTION_FACTORS: Final[Mapping[SoilType, float]] = MappingProxyType({
    SoilType.SANDY: 1.2,
    SoilType.LOAMY: 1.0,
    SoilType.CLAY: 0.8,
})

# Application efficiency of the irrigation method
IRRIGATION_EFFICIENCY: Final[Mapping[IrrigationMethod, float]] = MappingProxyType({
    IrrigationMethod.DRIP: 0.90,
    IrrigationMethod.SPRINKLER: 0.75,
    IrrigationMethod.SURFACE: 0.60,
})

# Run time per mm applied (hours/mm)
APPLICATION_HOURS_PER_MM: Final[Mapping[IrrigationMethod, float]] = MappingProxyType({
    IrrigationMethod.DRIP: 0.5,
    IrrigationMethod.SPRINKLER: 0.7,
    IrrigationMethod.SURFACE: 1.2,
})

# Leaf area = length × width × shape factor
LEAF_SHAPE_FACTORS: Final[Mapping[LeafShape, float]] = MappingProxyType({
    LeafShape.HEART: 0.68,
    LeafShape.ROUND: 0.79,
    LeafShape.LOBED: 0.63,
})

SEASONAL_FACTORS: Final[Mapping[Season, float]] = MappingProxyType({
    Season.SPRING: 0.6,  # New growth, smaller leaves
    Season.SUMMER: 1.0,  # Full leaf development
    Season.AUTUMN: 0.8,  # Some leaf drop, yellowing
})

TRELLIS_EFFICIENCY: Final[Mapping[TrellisSystem, float]] = MappingProxyType({
    TrellisSystem.VSP: 1.0,
    TrellisSystem.GENEVA: 1.15,
    TrellisSystem.SCOTT_HENRY: 1.25,
    TrellisSystem.LYRE: 1.30,
    TrellisSystem.PERGOLA: 0.90,
})

# Canopy density class upper bounds (inclusive) on LAI
LAI_SPARSE_BELOW: Final[float] = 1.0
LAI_OPTIMAL_MAX: Final[float] = 2.5
LAI_DENSE_MAX: Final[float] = 4.0

# Healthy light interception band (%)
LIGHT_INTERCEPTION_MIN: Final[float] = 60.0
LIGHT_INTERCEPTION_MAX: Final[float] = 85.0
LIGHT_INTERCEPTION_CEILING: Final[float] = 99.9

# Target LAI by production goal: (min, max, optimal range, reasoning)
OPTIMAL_LAI_TARGETS: Final[Mapping[ProductionGoal, Tuple[float, float, str, str]]] = MappingProxyType({
    ProductionGoal.TABLE: (
        1.8, 2.8, "2.0 - 2.5",
        "Table grapes need excellent fruit exposure for color and size while "
        "maintaining adequate leaf area for photosynthesis",
    ),
    ProductionGoal.WINE: (
        2.2, 3.5, "2.5 - 3.0",
        "Wine grapes benefit from moderate shading for flavor development while "
        "ensuring sufficient photosynthetic capacity",
    ),
    ProductionGoal.RAISIN: (
        2.0, 3.2, "2.3 - 2.8",
        "Raisin grapes require balanced canopy for sugar accumulation and "
        "efficient drying conditions",
    ),
})

# Physical input ranges
TEMPERATURE_RANGE_C: Final[Tuple[float, float]] = (-50.0, 60.0)
MAX_RAINFALL_MM: Final[float] = 500.0
MAX_SOLAR_RADIATION_MJ: Final[float] = 50.0
MAX_SUNSHINE_HOURS: Final[float] = 24.0
MAX_ILLUMINANCE_LUX: Final[float] = 200000.0
MAX_WIND_SPEED_M_S: Final[float] = 60.0
ELEVATION_RANGE_M: Final[Tuple[float, float]] = (-500.0, 9000.0)

# Irrigation decision thresholds (mm)
IRRIGATION_THRESHOLD_MM: Final[float] = 2.0
CRITICAL_STAGE_THRESHOLD_MM: Final[float] = 1.5
VERAISON_THRESHOLD_MM: Final[float] = 3.0
HEAVY_RAINFALL_MM: Final[float] = 10.0
HIGH_HUMIDITY_PERCENT: Final[float] = 80.0
WINDY_SPEED_M_S: Final[float] = 5.0
