"""
Data contracts and schemas for the calculation engines.
Ensures inputs respect their physical ranges before any arithmetic runs.

The engines validate every call through these models, whether the caller
passed domain records or plain dictionaries from a request body.
"""
from dataclasses import asdict, is_dataclass
from datetime import date
from typing import Any, Dict, Mapping, NamedTuple, Optional, Type, TypeVar

from pydantic import (
    BaseModel, ConfigDict, Field, ValidationError as PydanticValidationError,
    model_validator,
)

from vinecalc.core import constants
from vinecalc.core.exceptions import ValidationError, ErrorContext
from vinecalc.core.types import (
    WeatherObservation, Location, FarmArea, VineGeometryInput,
    GrowthStage, IrrigationMethod, SoilType, LeafShape, TrellisSystem,
    Season, AreaUnit,
)

T_MIN, T_MAX = constants.TEMPERATURE_RANGE_C
Z_MIN, Z_MAX = constants.ELEVATION_RANGE_M

ModelT = TypeVar("ModelT", bound=BaseModel)


class _Contract(BaseModel):
    model_config = ConfigDict(extra="forbid", allow_inf_nan=False, frozen=True)


class WeatherContract(_Contract):
    """Daily weather observation"""
    observed_on: date

    temperature_max_c: float = Field(ge=T_MIN, le=T_MAX)
    temperature_min_c: float = Field(ge=T_MIN, le=T_MAX)
    humidity_percent: float = Field(ge=0, le=100)
    wind_speed_m_s: float = Field(ge=0, le=constants.MAX_WIND_SPEED_M_S)
    rainfall_mm: Optional[float] = Field(default=None, ge=0, le=constants.MAX_RAINFALL_MM)

    # Solar input, at least one form required
    solar_radiation_mj_m2: Optional[float] = Field(
        default=None, ge=0, le=constants.MAX_SOLAR_RADIATION_MJ)
    sunshine_hours: Optional[float] = Field(
        default=None, ge=0, le=constants.MAX_SUNSHINE_HOURS)
    illuminance_lux: Optional[float] = Field(
        default=None, ge=0, le=constants.MAX_ILLUMINANCE_LUX)

    humidity_max_percent: Optional[float] = Field(default=None, ge=0, le=100)
    humidity_min_percent: Optional[float] = Field(default=None, ge=0, le=100)

    @model_validator(mode="after")
    def validate_temperature_range(self):
        """Ensure temperature max >= min"""
        if self.temperature_max_c < self.temperature_min_c:
            raise ValueError("temperature_max_c must be >= temperature_min_c")
        return self

    @model_validator(mode="after")
    def validate_solar_input(self):
        if (self.solar_radiation_mj_m2 is None
                and self.sunshine_hours is None
                and self.illuminance_lux is None):
            raise ValueError(
                "Solar radiation data is required: supply solar_radiation_mj_m2, "
                "sunshine_hours or illuminance_lux"
            )
        return self

    @model_validator(mode="after")
    def validate_humidity_extremes(self):
        if self.humidity_max_percent is not None and self.humidity_min_percent is not None:
            if self.humidity_max_percent < self.humidity_min_percent:
                raise ValueError("humidity_max_percent must be >= humidity_min_percent")
        return self

    def to_domain(self) -> WeatherObservation:
        return WeatherObservation(**self.model_dump())


class LocationContract(_Contract):
    latitude: float = Field(ge=-90, le=90)
    longitude: float = Field(ge=-180, le=180)
    elevation_m: Optional[float] = Field(default=None, ge=Z_MIN, le=Z_MAX)

    def to_domain(self) -> Location:
        return Location(**self.model_dump())


class FarmAreaContract(_Contract):
    value: float = Field(gt=0)
    unit: AreaUnit = AreaUnit.HECTARES

    def to_domain(self) -> FarmArea:
        return FarmArea(value=self.value, unit=self.unit)


class ETcInputs(NamedTuple):
    """Validated keyword arguments of the ETc engine"""
    weather: WeatherObservation
    growth_stage: GrowthStage
    location: Location
    irrigation_method: IrrigationMethod
    soil_type: SoilType
    planting_date: Optional[date]
    farm_area: Optional[FarmArea]


class ETcRequest(_Contract):
    """Complete input of one ETc calculation"""
    weather: WeatherContract
    growth_stage: GrowthStage
    location: LocationContract
    irrigation_method: IrrigationMethod
    soil_type: SoilType
    planting_date: Optional[date] = None
    farm_area: Optional[FarmAreaContract] = None

    @model_validator(mode="after")
    def validate_planting_date(self):
        """Vines cannot be observed before they are planted"""
        if self.planting_date is not None and self.planting_date > self.weather.observed_on:
            raise ValueError("planting_date must not be after weather.observed_on")
        return self

    def to_domain(self) -> ETcInputs:
        return ETcInputs(
            weather=self.weather.to_domain(),
            growth_stage=self.growth_stage,
            location=self.location.to_domain(),
            irrigation_method=self.irrigation_method,
            soil_type=self.soil_type,
            planting_date=self.planting_date,
            farm_area=self.farm_area.to_domain() if self.farm_area else None,
        )


class LAIRequest(_Contract):
    """Vine geometry for one LAI calculation"""
    vine_spacing_m: float = Field(gt=0)
    row_spacing_m: float = Field(gt=0)
    shoots_per_vine: float = Field(gt=0)
    leaves_per_shoot: float = Field(gt=0)
    leaf_length_cm: float = Field(gt=0)
    leaf_width_cm: float = Field(gt=0)
    canopy_height_m: float = Field(gt=0)
    canopy_width_m: float = Field(gt=0)
    leaf_shape: LeafShape = LeafShape.HEART
    trellis_system: TrellisSystem = TrellisSystem.VSP
    season: Season = Season.SUMMER

    def to_domain(self) -> VineGeometryInput:
        return VineGeometryInput(**self.model_dump())


def as_payload(value: Any) -> Any:
    """Turn a domain record into plain data for contract validation"""
    if value is None:
        return None
    if is_dataclass(value) and not isinstance(value, type):
        return asdict(value)
    if isinstance(value, Mapping):
        return dict(value)
    return value


def validate_model(model_cls: Type[ModelT], payload: Any, operation: str) -> ModelT:
    """
    Validate ``payload`` against ``model_cls``.

    Raises:
        ValidationError: with the offending field paths in ``context.details``.
    """
    if not isinstance(payload, Mapping):
        raise ValidationError(
            f"{model_cls.__name__} expects a mapping or record, got {type(payload).__name__}",
            ErrorContext(component="contracts", operation=operation),
        )

    try:
        return model_cls.model_validate(dict(payload))
    except PydanticValidationError as exc:
        errors = exc.errors(include_url=False)
        fields = [".".join(str(part) for part in err["loc"]) for err in errors]
        first = errors[0]
        location = fields[0] or model_cls.__name__
        raise ValidationError(
            f"{location}: {first['msg']}",
            ErrorContext(
                component="contracts",
                operation=operation,
                field=fields[0] or None,
                details={"fields": fields, "error_count": len(errors)},
            ),
        ) from exc


def parse_etc_request(payload: Dict[str, Any]) -> ETcInputs:
    """Validate a plain dictionary request body for the ETc engine"""
    return validate_model(ETcRequest, payload, "parse_etc_request").to_domain()


def parse_lai_request(payload: Dict[str, Any]) -> VineGeometryInput:
    """Validate a plain dictionary request body for the LAI engine"""
    return validate_model(LAIRequest, payload, "parse_lai_request").to_domain()
