"""
FAO-56 Penman-Monteith crop evapotranspiration for vineyards.

This module turns one day of weather into an irrigation requirement:
1. Reference evapotranspiration (ET0) for the short grass surface
2. Crop evapotranspiration ETc = ET0 × Kc for the vine growth stage
3. Net requirement after same-day rainfall
4. Application depth after soil retention and method efficiency
5. Volume over the irrigated area, confidence and an irrigation advice

References:
- Allen, R.G., Pereira, L.S., Raes, D. and Smith, M. (1998).
  Crop evapotranspiration - Guidelines for computing crop water requirements.
  FAO Irrigation and drainage paper 56. FAO, Rome. Equation 6.
"""

from dataclasses import dataclass, field
from datetime import date
from typing import Any, Dict, List, Optional, Tuple, Union
import logging

from vinecalc.core import constants
from vinecalc.core.config import EngineConfig, get_config
from vinecalc.core.types import (
    WeatherObservation, Location, FarmArea, GrowthStage, IrrigationMethod,
    SoilType, SolarSource, Confidence, DerivationAmbiguity, Annotations,
)
from vinecalc.data.contracts import (
    ETcRequest, LocationContract, WeatherContract, as_payload, validate_model,
)
from vinecalc.physics import radiation
from vinecalc.physics.constraints import numeric_guard, ensure_finite
from vinecalc.physics.crop_development import get_crop_coefficient

logger = logging.getLogger(__name__)

COMPONENT = "evapotranspiration"


# =============================================================================
# RESULTS
# =============================================================================

@dataclass(frozen=True)
class IrrigationRecommendation:
    """Practical irrigation advice derived from the daily requirement"""
    should_irrigate: bool
    duration_hours: float
    frequency: str
    notes: Tuple[str, ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        return {
            'should_irrigate': self.should_irrigate,
            'duration_hours': self.duration_hours,
            'frequency': self.frequency,
            'notes': list(self.notes),
        }


@dataclass(frozen=True)
class ETcResult:
    """
    Daily crop water requirement.

    All depths are mm/day. ``volume_liters`` is None when no farm area
    was supplied.
    """
    observed_on: date
    growth_stage: GrowthStage
    reference_et_mm: float  # ET0
    crop_coefficient: float  # Kc
    crop_et_mm: float  # ETc
    rainfall_mm: float
    net_requirement_mm: float
    soil_factor: float
    irrigation_efficiency: float
    recommended_depth_mm: float
    volume_liters: Optional[float]
    net_radiation_mj_m2: float
    solar_source: SolarSource
    elevation_m: float
    confidence: Confidence
    recommendation: IrrigationRecommendation
    annotations: Annotations = field(default_factory=tuple)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to a JSON-friendly dictionary"""
        return {
            'observed_on': self.observed_on.isoformat(),
            'growth_stage': self.growth_stage.value,
            'reference_et_mm': self.reference_et_mm,
            'crop_coefficient': self.crop_coefficient,
            'crop_et_mm': self.crop_et_mm,
            'rainfall_mm': self.rainfall_mm,
            'net_requirement_mm': self.net_requirement_mm,
            'soil_factor': self.soil_factor,
            'irrigation_efficiency': self.irrigation_efficiency,
            'recommended_depth_mm': self.recommended_depth_mm,
            'volume_liters': self.volume_liters,
            'net_radiation_mj_m2': self.net_radiation_mj_m2,
            'solar_source': self.solar_source.value,
            'elevation_m': self.elevation_m,
            'confidence': self.confidence.value,
            'recommendation': self.recommendation.to_dict(),
            'annotations': [
                {'source': note.source, 'message': note.message}
                for note in self.annotations
            ],
        }


# =============================================================================
# REFERENCE EVAPOTRANSPIRATION
# =============================================================================

def penman_monteith(
    delta: float,
    net_radiation: float,
    gamma: float,
    temperature_mean_c: float,
    wind_speed_m_s: float,
    vapor_pressure_deficit: float,
    soil_heat_flux: float = 0.0
) -> float:
    """
    FAO-56 Penman-Monteith reference evapotranspiration (Eq. 6).

        ET0 = [0.408 Δ (Rn - G) + γ 900/(T+273) u2 (es - ea)]
              / [Δ + γ (1 + 0.34 u2)]

    Args:
        delta: Slope of the vapour pressure curve (kPa/°C)
        net_radiation: Rn (MJ/m²/day)
        gamma: Psychrometric constant (kPa/°C)
        temperature_mean_c: Mean daily air temperature (°C)
        wind_speed_m_s: Wind speed at 2 m (m/s)
        vapor_pressure_deficit: es - ea (kPa)
        soil_heat_flux: G (MJ/m²/day), negligible for daily steps

    Returns:
        ET0 (mm/day), not clamped
    """
    radiation_term = 0.408 * delta * (net_radiation - soil_heat_flux)
    aerodynamic_term = (
        gamma * 900.0 / (temperature_mean_c + 273.0) * wind_speed_m_s * vapor_pressure_deficit
    )
    return (radiation_term + aerodynamic_term) / (delta + gamma * (1.0 + 0.34 * wind_speed_m_s))


@dataclass(frozen=True)
class _ReferenceET:
    et0_mm: float
    elevation_m: float
    balance: radiation.RadiationBalance
    annotations: Annotations


def _reference_et(
    weather: WeatherObservation,
    location: Location,
    config: EngineConfig
) -> _ReferenceET:
    annotations: List[DerivationAmbiguity] = []

    if location.elevation_m is None:
        elevation_m = config.radiation.default_elevation_m
        annotations.append(DerivationAmbiguity(
            source="elevation",
            message=f"Elevation unknown, assuming {elevation_m:g} m for atmospheric pressure",
        ))
    else:
        elevation_m = location.elevation_m

    pressure = radiation.atmospheric_pressure(elevation_m)
    gamma = radiation.psychrometric_constant(pressure)

    es, ea = radiation.vapor_pressures(weather)
    vpd = max(es - ea, 0.0)
    delta = radiation.slope_vapor_pressure_curve(weather.temperature_mean_c)

    solar = radiation.resolve_solar_input(weather)
    balance = radiation.radiation_balance(
        weather, solar, location.latitude, elevation_m, ea, config.radiation)
    if balance.annotation is not None:
        annotations.append(balance.annotation)

    et0 = penman_monteith(
        delta=delta,
        net_radiation=balance.Rn,
        gamma=gamma,
        temperature_mean_c=weather.temperature_mean_c,
        wind_speed_m_s=weather.wind_speed_m_s,
        vapor_pressure_deficit=vpd,
    )

    logger.debug(
        f"ET0 P={pressure:.2f} γ={gamma:.5f} es={es:.3f} ea={ea:.3f} "
        f"Δ={delta:.4f} Rn={balance.Rn:.2f} -> {et0:.3f} mm"
    )

    return _ReferenceET(
        et0_mm=round(max(float(et0), 0.0), 2),
        elevation_m=float(elevation_m),
        balance=balance,
        annotations=tuple(annotations),
    )


def reference_evapotranspiration(
    weather: Union[WeatherObservation, Dict[str, Any]],
    location: Union[Location, Dict[str, Any]],
    config: Optional[EngineConfig] = None
) -> float:
    """
    Reference evapotranspiration for one day.

    Args:
        weather: Daily weather observation
        location: Site location
        config: Engine configuration (process-wide default when omitted)

    Returns:
        ET0 (mm/day), non-negative, rounded to 2 decimals

    Raises:
        ValidationError: For out-of-range inputs or a failed calculation
    """
    config = config or get_config()
    weather = validate_model(
        WeatherContract, as_payload(weather), "reference_evapotranspiration").to_domain()
    location = validate_model(
        LocationContract, as_payload(location), "reference_evapotranspiration").to_domain()

    with numeric_guard(COMPONENT, "reference_evapotranspiration"):
        reference = _reference_et(weather, location, config)

    return ensure_finite(
        {'reference_et_mm': reference.et0_mm}, COMPONENT, "reference_evapotranspiration"
    )['reference_et_mm']


# =============================================================================
# IRRIGATION ADVICE
# =============================================================================

def calculate_confidence(
    weather: WeatherObservation,
    location: Location,
    solar_source: SolarSource
) -> Confidence:
    """
    Rate how complete the inputs were.

    Score: measured radiation 2 (sunshine hours 1, illuminance 0), rainfall
    reported 1, humidity above zero 1, wind reported 1, elevation known 1,
    latitude off the equator 1. Six or more is high, four or more medium.
    """
    score = {
        SolarSource.RADIATION: 2,
        SolarSource.SUNSHINE_HOURS: 1,
        SolarSource.ILLUMINANCE: 0,
    }[solar_source]

    if weather.rainfall_mm is not None:
        score += 1
    if weather.humidity_percent > 0:
        score += 1
    if weather.wind_speed_m_s is not None:
        score += 1
    if location.elevation_m is not None:
        score += 1
    if location.latitude != 0:
        score += 1

    if score >= 6:
        return Confidence.HIGH
    if score >= 4:
        return Confidence.MEDIUM
    return Confidence.LOW


def recommend_irrigation(
    net_requirement_mm: float,
    depth_mm: float,
    growth_stage: GrowthStage,
    irrigation_method: IrrigationMethod,
    soil_type: SoilType,
    weather: WeatherObservation
) -> IrrigationRecommendation:
    """
    Turn the daily requirement into an irrigate / wait decision.

    The base threshold is 2 mm of net requirement. Flowering and fruit set
    are irrigated from 1.5 mm, veraison is held to 3 mm for controlled
    stress, and dormant vines are never irrigated. Heavy rain on the day
    cancels irrigation.
    """
    notes: List[str] = []
    should_irrigate = net_requirement_mm > constants.IRRIGATION_THRESHOLD_MM
    frequency = "as needed"

    if growth_stage in (GrowthStage.FLOWERING, GrowthStage.FRUIT_SET):
        should_irrigate = net_requirement_mm > constants.CRITICAL_STAGE_THRESHOLD_MM
        notes.append("Critical growth stage - maintain consistent moisture")
    elif growth_stage == GrowthStage.VERAISON:
        should_irrigate = net_requirement_mm > constants.VERAISON_THRESHOLD_MM
        notes.append("Veraison stage - controlled water stress improves fruit quality")
    elif growth_stage == GrowthStage.DORMANT:
        should_irrigate = False
        notes.append("Dormant season - irrigation not recommended")

    if should_irrigate:
        if irrigation_method == IrrigationMethod.DRIP:
            frequency = "daily" if depth_mm > 4 else "every 2 days"
        elif irrigation_method == IrrigationMethod.SPRINKLER:
            frequency = "every 2-3 days"
        elif irrigation_method == IrrigationMethod.SURFACE:
            frequency = "weekly"

        if soil_type == SoilType.SANDY:
            frequency = "more frequent, shorter durations"
            notes.append("Sandy soil - increase frequency, reduce duration")
        elif soil_type == SoilType.CLAY:
            frequency = "less frequent, longer durations"
            notes.append("Clay soil - longer intervals, deeper watering")

    if weather.humidity_percent > constants.HIGH_HUMIDITY_PERCENT:
        notes.append("High humidity - monitor for disease risk")

    if weather.wind_speed_m_s > constants.WINDY_SPEED_M_S:
        notes.append("Windy conditions - may increase water loss")

    if (weather.rainfall_mm or 0.0) > constants.HEAVY_RAINFALL_MM:
        should_irrigate = False
        frequency = "as needed"
        notes.append("Recent rainfall - irrigation not needed")

    duration = 0.0
    if should_irrigate:
        duration = depth_mm * constants.APPLICATION_HOURS_PER_MM[irrigation_method]

    return IrrigationRecommendation(
        should_irrigate=should_irrigate,
        duration_hours=round(duration, 2),
        frequency=frequency,
        notes=tuple(notes),
    )


# =============================================================================
# CROP EVAPOTRANSPIRATION
# =============================================================================

def area_in_square_meters(area: FarmArea) -> float:
    """Convert a farm area to m²"""
    return area.value * constants.AREA_TO_SQM[area.unit]


def compute_etc(
    weather: Union[WeatherObservation, Dict[str, Any]],
    growth_stage: Union[GrowthStage, str],
    location: Union[Location, Dict[str, Any]],
    irrigation_method: Union[IrrigationMethod, str],
    soil_type: Union[SoilType, str],
    planting_date: Optional[date] = None,
    farm_area: Optional[Union[FarmArea, Dict[str, Any]]] = None,
    config: Optional[EngineConfig] = None
) -> ETcResult:
    """
    Daily vineyard water requirement from one day of weather.

    Steps:
        ET0 = Penman-Monteith (rounded to 2 dp)
        ETc = ET0 × Kc(stage)
        net = ETc - min(rainfall, ETc)
        depth = net × soil factor / method efficiency
        volume = depth × area (1 mm over 1 m² is 1 L)

    Args:
        weather: Daily weather observation (record or mapping)
        growth_stage: Vine growth stage
        location: Site location; missing elevation is taken as sea level
        irrigation_method: drip, sprinkler or surface
        soil_type: sandy, loamy or clay
        planting_date: Optional planting date, must not follow the observation
        farm_area: Optional irrigated area for the volume
        config: Engine configuration (process-wide default when omitted)

    Returns:
        ETcResult

    Raises:
        ValidationError: For invalid inputs or a non-finite intermediate
    """
    config = config or get_config()

    request = validate_model(ETcRequest, {
        'weather': as_payload(weather),
        'growth_stage': growth_stage,
        'location': as_payload(location),
        'irrigation_method': irrigation_method,
        'soil_type': soil_type,
        'planting_date': planting_date,
        'farm_area': as_payload(farm_area),
    }, "compute_etc")
    inputs = request.to_domain()
    weather = inputs.weather
    location = inputs.location

    coefficient = get_crop_coefficient(inputs.growth_stage)
    soil_factor = constants.SOIL_RETENTION_FACTORS[inputs.soil_type]
    efficiency = constants.IRRIGATION_EFFICIENCY[inputs.irrigation_method]
    rainfall = weather.rainfall_mm if weather.rainfall_mm is not None else 0.0

    with numeric_guard(COMPONENT, "compute_etc"):
        reference = _reference_et(weather, location, config)

        crop_et = round(reference.et0_mm * coefficient.kc, 2)
        net_requirement = round(max(crop_et - min(rainfall, crop_et), 0.0), 2)
        depth = round(net_requirement * soil_factor / efficiency, 2)

        volume = None
        if inputs.farm_area is not None:
            volume = round(
                depth * area_in_square_meters(inputs.farm_area) * constants.LITERS_PER_MM_SQM, 2)

    checked = ensure_finite({
        'reference_et_mm': reference.et0_mm,
        'crop_et_mm': crop_et,
        'net_requirement_mm': net_requirement,
        'recommended_depth_mm': depth,
        'volume_liters': volume,
        'net_radiation_mj_m2': reference.balance.Rn,
    }, COMPONENT, "compute_etc")

    for note in reference.annotations:
        logger.warning(f"{weather.observed_on}: {note.message}")

    recommendation = recommend_irrigation(
        net_requirement_mm=checked['net_requirement_mm'],
        depth_mm=checked['recommended_depth_mm'],
        growth_stage=inputs.growth_stage,
        irrigation_method=inputs.irrigation_method,
        soil_type=inputs.soil_type,
        weather=weather,
    )

    result = ETcResult(
        observed_on=weather.observed_on,
        growth_stage=inputs.growth_stage,
        reference_et_mm=checked['reference_et_mm'],
        crop_coefficient=coefficient.kc,
        crop_et_mm=checked['crop_et_mm'],
        rainfall_mm=float(rainfall),
        net_requirement_mm=checked['net_requirement_mm'],
        soil_factor=soil_factor,
        irrigation_efficiency=efficiency,
        recommended_depth_mm=checked['recommended_depth_mm'],
        volume_liters=checked['volume_liters'],
        net_radiation_mj_m2=round(checked['net_radiation_mj_m2'], 2),
        solar_source=reference.balance.solar_source,
        elevation_m=reference.elevation_m,
        confidence=calculate_confidence(weather, location, reference.balance.solar_source),
        recommendation=recommendation,
        annotations=reference.annotations,
    )

    logger.debug(
        f"ETc {result.observed_on} {result.growth_stage.value}: ET0={result.reference_et_mm} "
        f"Kc={result.crop_coefficient} ETc={result.crop_et_mm} "
        f"depth={result.recommended_depth_mm} mm"
    )
    return result
