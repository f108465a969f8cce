"""
Atmospheric and radiation terms of the FAO-56 Penman-Monteith equation.

Implements:
1. Atmospheric pressure and psychrometric constant from elevation
2. Saturation / actual vapour pressure and the slope of the vapour curve
3. Extraterrestrial radiation and daylight hours from latitude and day of year
4. Shortwave radiation from one of three solar input forms
5. Net shortwave, net longwave and net radiation

References:
- Allen, R.G., Pereira, L.S., Raes, D. and Smith, M. (1998).
  Crop evapotranspiration - Guidelines for computing crop water requirements.
  FAO Irrigation and drainage paper 56. FAO, Rome. Chapter 3.
"""

import numpy as np
from dataclasses import dataclass
from datetime import date
from typing import Optional, Tuple
import logging

from vinecalc.core import constants
from vinecalc.core.config import RadiationConfig
from vinecalc.core.exceptions import ValidationError, ErrorContext
from vinecalc.core.types import (
    WeatherObservation, SolarInput, SolarRadiation, SunshineDuration,
    Illuminance, SolarSource, DerivationAmbiguity,
)

logger = logging.getLogger(__name__)


# =============================================================================
# ATMOSPHERIC PARAMETERS
# =============================================================================

def atmospheric_pressure(elevation_m: float) -> float:
    """
    Atmospheric pressure from elevation (FAO-56 Eq. 7).

        P = 101.3 × ((293 - 0.0065 z) / 293)^5.26

    Args:
        elevation_m: Elevation above sea level (m)

    Returns:
        Pressure (kPa)
    """
    return constants.SEA_LEVEL_PRESSURE_KPA * ((293.0 - 0.0065 * elevation_m) / 293.0) ** 5.26


def psychrometric_constant(pressure_kpa: float) -> float:
    """Psychrometric constant γ = 0.665×10⁻³ × P (FAO-56 Eq. 8), kPa/°C"""
    return constants.PSYCHROMETRIC_FACTOR * pressure_kpa


def saturation_vapor_pressure(temperature_c: float) -> float:
    """Saturation vapour pressure e°(T) (FAO-56 Eq. 11), kPa"""
    return 0.6108 * np.exp(17.27 * temperature_c / (temperature_c + 237.3))


def slope_vapor_pressure_curve(temperature_c: float) -> float:
    """
    Slope Δ of the saturation vapour pressure curve (FAO-56 Eq. 13).

        Δ = 4098 × e°(T) / (T + 237.3)²
    """
    return 4098.0 * saturation_vapor_pressure(temperature_c) / (temperature_c + 237.3) ** 2


def vapor_pressures(weather: WeatherObservation) -> Tuple[float, float]:
    """
    Mean saturation and actual vapour pressure for the day.

    es is the mean of e°(Tmax) and e°(Tmin) (FAO-56 Eq. 12). Actual vapour
    pressure uses the daily humidity extremes when both are present
    (FAO-56 Eq. 17), otherwise the mean relative humidity.

    Returns:
        Tuple of (es, ea) in kPa
    """
    e_tmax = saturation_vapor_pressure(weather.temperature_max_c)
    e_tmin = saturation_vapor_pressure(weather.temperature_min_c)
    es = (e_tmax + e_tmin) / 2.0

    if weather.humidity_max_percent is not None and weather.humidity_min_percent is not None:
        ea = (
            e_tmin * weather.humidity_max_percent / 100.0
            + e_tmax * weather.humidity_min_percent / 100.0
        ) / 2.0
    else:
        ea = es * weather.humidity_percent / 100.0

    return es, ea


# =============================================================================
# SOLAR GEOMETRY
# =============================================================================

def solar_declination(day_of_year: int) -> float:
    """Solar declination δ (FAO-56 Eq. 24), radians"""
    return constants.SOLAR_DECLINATION_AMPLITUDE * np.sin(
        2.0 * np.pi * day_of_year / 365.0 - constants.SOLAR_DECLINATION_PHASE
    )


def extraterrestrial_radiation(latitude: float, day_of_year: int) -> Tuple[float, float]:
    """
    Extraterrestrial radiation and maximum daylight hours.

    FAO-56 Equations 21, 23, 25 and 34:
        Ra = (24×60/π) Gsc dr [ωs sinφ sinδ + cosφ cosδ sinωs]
        N  = 24 ωs / π

    The sunset hour angle argument is clipped to [-1, 1] so that polar day
    and polar night resolve to ωs = π and ωs = 0.

    Args:
        latitude: Latitude (degrees, south negative)
        day_of_year: Day number (1-366)

    Returns:
        Tuple of (Ra in MJ/m²/day, N in hours)
    """
    phi = np.radians(latitude)
    delta = solar_declination(day_of_year)

    # Inverse relative Earth-Sun distance
    dr = 1.0 + constants.EARTH_ORBIT_ECCENTRICITY * np.cos(2.0 * np.pi * day_of_year / 365.0)

    omega_s = np.arccos(np.clip(-np.tan(phi) * np.tan(delta), -1.0, 1.0))

    ra = (24.0 * 60.0 / np.pi) * constants.SOLAR_CONSTANT * dr * (
        omega_s * np.sin(phi) * np.sin(delta)
        + np.cos(phi) * np.cos(delta) * np.sin(omega_s)
    )
    daylight_hours = 24.0 * omega_s / np.pi

    return max(float(ra), 0.0), float(daylight_hours)


def clear_sky_radiation(ra: float, elevation_m: float) -> float:
    """Clear-sky shortwave radiation Rso = (0.75 + 2×10⁻⁵ z) Ra (FAO-56 Eq. 37)"""
    return (constants.CLEAR_SKY_INTERCEPT + constants.CLEAR_SKY_ELEVATION_SLOPE * elevation_m) * ra


# =============================================================================
# SOLAR INPUT
# =============================================================================

def resolve_solar_input(weather: WeatherObservation) -> SolarInput:
    """
    Select the single solar input used for the day.

    Priority is measured radiation, then sunshine hours, then illuminance.
    Sunshine duration goes through the Ångström-Prescott relation and keeps
    more physical information than a lux reading converted with a fixed
    luminous efficacy.

    Raises:
        ValidationError: If no solar form is present.
    """
    if weather.solar_radiation_mj_m2 is not None:
        return SolarRadiation(mj_m2_day=weather.solar_radiation_mj_m2)
    if weather.sunshine_hours is not None:
        return SunshineDuration(hours=weather.sunshine_hours)
    if weather.illuminance_lux is not None:
        return Illuminance(lux=weather.illuminance_lux)

    raise ValidationError(
        "Solar radiation data is required: supply radiation, sunshine hours or illuminance",
        ErrorContext(component="radiation", operation="resolve_solar_input",
                     field="solar_radiation_mj_m2"),
    )


def illuminance_to_radiation(lux: float, lux_per_w_m2: float) -> float:
    """
    Convert a 24-hour mean illuminance to daily shortwave radiation.

        W/m² = lux / efficacy;  MJ/m²/day = W/m² × 0.0864
    """
    return lux / lux_per_w_m2 * constants.W_M2_TO_MJ_M2_DAY


def angstrom_radiation(
    sunshine_hours: float,
    ra: float,
    daylight_hours: float,
    a: float = 0.25,
    b: float = 0.50
) -> float:
    """
    Shortwave radiation from sunshine duration (FAO-56 Eq. 35).

        Rs = (a + b × n/N) × Ra

    n is capped at N; a day cannot have more sunshine than daylight.
    """
    if daylight_hours <= 0:
        relative_sunshine = 0.0
    else:
        relative_sunshine = min(sunshine_hours, daylight_hours) / daylight_hours
    return (a + b * relative_sunshine) * ra


@dataclass(frozen=True)
class RadiationBalance:
    """Radiation terms for one day (MJ/m²/day)"""
    solar_source: SolarSource
    Ra: float  # Extraterrestrial
    Rs: float  # Incoming shortwave
    Rso: float  # Clear-sky shortwave
    Rns: float  # Net shortwave
    Rnl: float  # Net outgoing longwave
    Rn: float  # Net radiation
    annotation: Optional[DerivationAmbiguity] = None


def shortwave_radiation(
    solar: SolarInput,
    ra: float,
    daylight_hours: float,
    config: RadiationConfig
) -> Tuple[float, Optional[DerivationAmbiguity]]:
    """
    Derive Rs from the selected solar input.

    Returns:
        Tuple of (Rs in MJ/m²/day, annotation for lower-fidelity derivations)
    """
    if isinstance(solar, SolarRadiation):
        return solar.mj_m2_day, None

    if isinstance(solar, SunshineDuration):
        rs = angstrom_radiation(
            solar.hours, ra, daylight_hours, config.angstrom_a, config.angstrom_b)
        note = DerivationAmbiguity(
            source=SolarSource.SUNSHINE_HOURS.value,
            message=(
                f"Solar radiation estimated from {solar.hours:g} sunshine hours "
                f"with the Angstrom-Prescott relation"
            ),
        )
        return rs, note

    if isinstance(solar, Illuminance):
        rs = illuminance_to_radiation(solar.lux, config.lux_per_w_m2)
        note = DerivationAmbiguity(
            source=SolarSource.ILLUMINANCE.value,
            message=(
                f"Solar radiation converted from {solar.lux:g} lux assuming a "
                f"luminous efficacy of {config.lux_per_w_m2:g} lux per W/m²"
            ),
        )
        return rs, note

    raise ValidationError(
        f"Unsupported solar input {type(solar).__name__}",
        ErrorContext(component="radiation", operation="shortwave_radiation"),
    )


def net_longwave_radiation(
    temperature_max_c: float,
    temperature_min_c: float,
    ea: float,
    rs: float,
    rso: float
) -> float:
    """
    Net outgoing longwave radiation (FAO-56 Eq. 39).

        Rnl = σ [(Tmax,K⁴ + Tmin,K⁴)/2] (0.34 - 0.14√ea) (1.35 Rs/Rso - 0.35)

    Rs/Rso is limited to 1.0. With no clear-sky radiation (polar night) the
    ratio is taken as 1.0.
    """
    tmax_k4 = (temperature_max_c + 273.16) ** 4
    tmin_k4 = (temperature_min_c + 273.16) ** 4

    rs_rso = min(rs / rso, 1.0) if rso > 0 else 1.0

    return (
        constants.STEFAN_BOLTZMANN * (tmax_k4 + tmin_k4) / 2.0
        * (0.34 - 0.14 * np.sqrt(ea))
        * (1.35 * rs_rso - 0.35)
    )


def radiation_balance(
    weather: WeatherObservation,
    solar: SolarInput,
    latitude: float,
    elevation_m: float,
    ea: float,
    config: RadiationConfig
) -> RadiationBalance:
    """
    Compute the full daily radiation balance.

    Args:
        weather: Daily observation (temperatures and date are used)
        solar: Solar input selected by :func:`resolve_solar_input`
        latitude: Latitude (degrees)
        elevation_m: Elevation (m)
        ea: Actual vapour pressure (kPa)
        config: Radiation parameters

    Returns:
        RadiationBalance with every term
    """
    day_of_year = day_number(weather.observed_on)
    ra, daylight_hours = extraterrestrial_radiation(latitude, day_of_year)

    rs, annotation = shortwave_radiation(solar, ra, daylight_hours, config)
    rso = clear_sky_radiation(ra, elevation_m)

    rns = (1.0 - config.albedo) * rs
    rnl = net_longwave_radiation(
        weather.temperature_max_c, weather.temperature_min_c, ea, rs, rso)
    rn = rns - rnl

    logger.debug(
        f"Radiation day={day_of_year} Ra={ra:.2f} N={daylight_hours:.2f} "
        f"Rs={rs:.2f} Rso={rso:.2f} Rn={rn:.2f} ({solar.source.value})"
    )

    return RadiationBalance(
        solar_source=solar.source,
        Ra=ra,
        Rs=float(rs),
        Rso=float(rso),
        Rns=float(rns),
        Rnl=float(rnl),
        Rn=float(rn),
        annotation=annotation,
    )


def day_number(on: date) -> int:
    """Day of the year (1-366)"""
    return on.timetuple().tm_yday
