"""
Type definitions for the vinecalc engines.
Shared enumerations and measurement records consumed by both calculators.
"""
from datetime import date
from typing import Optional, Tuple, Union
from enum import Enum
from dataclasses import dataclass
from typing_extensions import TypeAlias


# Type aliases for clarity
TemperatureC: TypeAlias = float
HumidityPercent: TypeAlias = float
RainfallMm: TypeAlias = float
ET0Mm: TypeAlias = float
RadiationMJ: TypeAlias = float  # MJ/m²/day


class GrowthStage(str, Enum):
    """Grapevine phenological stages"""
    BUDBREAK = "budbreak"
    LEAF_DEVELOPMENT = "leaf_development"
    FLOWERING = "flowering"
    FRUIT_SET = "fruit_set"
    VERAISON = "veraison"
    HARVEST = "harvest"
    POST_HARVEST = "post_harvest"
    DORMANT = "dormant"


class IrrigationMethod(str, Enum):
    """Irrigation methods"""
    DRIP = "drip"
    SPRINKLER = "sprinkler"
    SURFACE = "surface"


class SoilType(str, Enum):
    """Soil texture groups used for retention adjustment"""
    SANDY = "sandy"
    LOAMY = "loamy"
    CLAY = "clay"


class LeafShape(str, Enum):
    HEART = "heart"
    ROUND = "round"
    LOBED = "lobed"


class TrellisSystem(str, Enum):
    """Vine training architectures"""
    VSP = "vsp"  # Vertical Shoot Positioning
    GENEVA = "geneva"  # Geneva Double Curtain
    SCOTT_HENRY = "scott-henry"
    LYRE = "lyre"
    PERGOLA = "pergola"

    @property
    def is_divided(self) -> bool:
        """Divided canopies split the shoots into two or more curtains"""
        return self in (TrellisSystem.GENEVA, TrellisSystem.SCOTT_HENRY, TrellisSystem.LYRE)


class Season(str, Enum):
    SPRING = "spring"
    SUMMER = "summer"
    AUTUMN = "autumn"


class AreaUnit(str, Enum):
    SQUARE_METERS = "square_meters"
    HECTARES = "hectares"
    ACRES = "acres"


class ProductionGoal(str, Enum):
    """End use of the grapes, drives the target LAI window"""
    TABLE = "table"
    WINE = "wine"
    RAISIN = "raisin"


class CanopyDensity(str, Enum):
    SPARSE = "sparse"
    OPTIMAL = "optimal"
    DENSE = "dense"
    OVERCROWDED = "overcrowded"


class Confidence(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class SolarSource(str, Enum):
    """Form in which the day's solar energy input was supplied"""
    RADIATION = "radiation"
    SUNSHINE_HOURS = "sunshine_hours"
    ILLUMINANCE = "illuminance"


@dataclass(frozen=True)
class WeatherObservation:
    """
    One day of weather measurements.

    At least one of ``solar_radiation_mj_m2``, ``sunshine_hours`` or
    ``illuminance_lux`` must be supplied. When both ``humidity_max_percent``
    and ``humidity_min_percent`` are given, actual vapour pressure is
    derived from the daily extremes instead of the mean humidity.
    """
    observed_on: date
    temperature_max_c: TemperatureC
    temperature_min_c: TemperatureC
    humidity_percent: HumidityPercent
    wind_speed_m_s: float
    rainfall_mm: Optional[RainfallMm] = None
    solar_radiation_mj_m2: Optional[RadiationMJ] = None
    sunshine_hours: Optional[float] = None
    illuminance_lux: Optional[float] = None
    humidity_max_percent: Optional[HumidityPercent] = None
    humidity_min_percent: Optional[HumidityPercent] = None

    @property
    def temperature_mean_c(self) -> TemperatureC:
        return (self.temperature_max_c + self.temperature_min_c) / 2.0


@dataclass(frozen=True)
class Location:
    """Immutable site location"""
    latitude: float
    longitude: float
    elevation_m: Optional[float] = None


@dataclass(frozen=True)
class FarmArea:
    """Irrigated area of a block"""
    value: float
    unit: AreaUnit = AreaUnit.HECTARES


@dataclass(frozen=True)
class VineGeometryInput:
    """Vine spacing, canopy dimensions and leaf morphology for one block"""
    vine_spacing_m: float
    row_spacing_m: float
    shoots_per_vine: float
    leaves_per_shoot: float
    leaf_length_cm: float
    leaf_width_cm: float
    canopy_height_m: float
    canopy_width_m: float
    leaf_shape: LeafShape = LeafShape.HEART
    trellis_system: TrellisSystem = TrellisSystem.VSP
    season: Season = Season.SUMMER


# Solar input variants. Exactly one is selected per calculation.
@dataclass(frozen=True)
class SolarRadiation:
    mj_m2_day: RadiationMJ
    source = SolarSource.RADIATION


@dataclass(frozen=True)
class SunshineDuration:
    hours: float
    source = SolarSource.SUNSHINE_HOURS


@dataclass(frozen=True)
class Illuminance:
    lux: float
    source = SolarSource.ILLUMINANCE


SolarInput: TypeAlias = Union[SolarRadiation, SunshineDuration, Illuminance]


@dataclass(frozen=True)
class DerivationAmbiguity:
    """
    Annotation attached to a result computed from lower-fidelity inputs.
    The calculation still completes; callers decide how to present it.
    """
    source: str
    message: str


Annotations: TypeAlias = Tuple[DerivationAmbiguity, ...]
