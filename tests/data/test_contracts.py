"""
Tests for the input contracts.
"""
from datetime import date
import pytest

from vinecalc.core.exceptions import ValidationError
from vinecalc.core.types import (
    WeatherObservation, GrowthStage, IrrigationMethod, SoilType, AreaUnit,
    TrellisSystem, LeafShape,
)
from vinecalc.data.contracts import (
    WeatherContract, LocationContract, ETcRequest, as_payload, validate_model,
    parse_etc_request, parse_lai_request,
)


@pytest.fixture
def weather_payload():
    return {
        "observed_on": "2025-01-15",
        "temperature_max_c": 30.0,
        "temperature_min_c": 15.0,
        "humidity_percent": 60.0,
        "wind_speed_m_s": 2.5,
        "rainfall_mm": 0.0,
        "solar_radiation_mj_m2": 20.0,
    }


@pytest.fixture
def etc_payload(weather_payload):
    return {
        "weather": weather_payload,
        "growth_stage": "flowering",
        "location": {"latitude": 19.9975, "longitude": 73.7898, "elevation_m": 500},
        "irrigation_method": "drip",
        "soil_type": "loamy",
        "farm_area": {"value": 2.0, "unit": "hectares"},
    }


class TestWeatherContract:

    def test_to_domain(self, weather_payload):
        weather = WeatherContract(**weather_payload).to_domain()
        assert isinstance(weather, WeatherObservation)
        assert weather.observed_on == date(2025, 1, 15)
        assert weather.temperature_mean_c == pytest.approx(22.5)

    @pytest.mark.parametrize("field,value", [
        ("temperature_max_c", 100.0),
        ("temperature_min_c", -80.0),
        ("rainfall_mm", 1000.0),
        ("solar_radiation_mj_m2", 100.0),
        ("sunshine_hours", 25.0),
        ("illuminance_lux", 500000.0),
        ("wind_speed_m_s", 80.0),
    ])
    def test_physical_ranges(self, weather_payload, field, value):
        weather_payload[field] = value
        with pytest.raises(ValidationError) as exc_info:
            validate_model(WeatherContract, weather_payload, "test")
        assert field in exc_info.value.context.details["fields"]

    def test_humidity_extremes_ordered(self, weather_payload):
        weather_payload.update(humidity_max_percent=40.0, humidity_min_percent=70.0)
        with pytest.raises(ValidationError, match="humidity_max_percent"):
            validate_model(WeatherContract, weather_payload, "test")

    def test_unknown_field_rejected(self, weather_payload):
        weather_payload["dew_point_c"] = 10.0
        with pytest.raises(ValidationError):
            validate_model(WeatherContract, weather_payload, "test")

    def test_error_count(self, weather_payload):
        weather_payload.update(humidity_percent=150.0, wind_speed_m_s=-1.0)
        with pytest.raises(ValidationError) as exc_info:
            validate_model(WeatherContract, weather_payload, "test")
        assert exc_info.value.context.details["error_count"] == 2


class TestLocationContract:

    def test_optional_elevation(self):
        location = LocationContract(latitude=-33.9, longitude=18.9).to_domain()
        assert location.elevation_m is None

    def test_below_sea_level(self):
        assert LocationContract(latitude=31.5, longitude=35.5, elevation_m=-100).elevation_m == -100


class TestRequests:

    def test_parse_etc_request(self, etc_payload):
        inputs = parse_etc_request(etc_payload)
        assert inputs.growth_stage == GrowthStage.FLOWERING
        assert inputs.irrigation_method == IrrigationMethod.DRIP
        assert inputs.soil_type == SoilType.LOAMY
        assert inputs.farm_area.unit == AreaUnit.HECTARES
        assert inputs.planting_date is None

    def test_planting_date_order(self, etc_payload):
        etc_payload["planting_date"] = "2026-01-01"
        with pytest.raises(ValidationError, match="planting_date"):
            parse_etc_request(etc_payload)

    def test_unknown_enum(self, etc_payload):
        etc_payload["soil_type"] = "silty"
        with pytest.raises(ValidationError) as exc_info:
            parse_etc_request(etc_payload)
        assert exc_info.value.context.field == "soil_type"

    def test_nested_field_path(self, etc_payload):
        etc_payload["location"]["latitude"] = 95.0
        with pytest.raises(ValidationError) as exc_info:
            validate_model(ETcRequest, etc_payload, "test")
        assert exc_info.value.context.field == "location.latitude"

    def test_parse_lai_request_defaults(self):
        geometry = parse_lai_request({
            "vine_spacing_m": 2.0, "row_spacing_m": 3.0,
            "shoots_per_vine": 20, "leaves_per_shoot": 15,
            "leaf_length_cm": 12, "leaf_width_cm": 8,
            "canopy_height_m": 1.5, "canopy_width_m": 0.8,
        })
        assert geometry.leaf_shape == LeafShape.HEART
        assert geometry.trellis_system == TrellisSystem.VSP

    def test_non_mapping_payload(self):
        with pytest.raises(ValidationError, match="expects a mapping"):
            validate_model(WeatherContract, [1, 2, 3], "test")

    def test_as_payload(self, weather_payload):
        weather = WeatherContract(**weather_payload).to_domain()
        assert as_payload(weather)["temperature_max_c"] == 30.0
        assert as_payload(None) is None
        assert as_payload({"a": 1}) == {"a": 1}
