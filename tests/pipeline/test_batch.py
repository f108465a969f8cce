"""
Tests for the DataFrame batch runner.
"""
import pandas as pd
import pytest

from vinecalc.core.config import EngineConfig
from vinecalc.pipeline.batch import BatchCalculator, compute_etc_frame, compute_lai_frame
from vinecalc.physics.evapotranspiration import compute_etc


@pytest.fixture
def config():
    return EngineConfig()


@pytest.fixture
def farms():
    base = {
        "observed_on": "2025-01-15",
        "temperature_max_c": 30.0,
        "temperature_min_c": 15.0,
        "humidity_percent": 60.0,
        "wind_speed_m_s": 2.5,
        "rainfall_mm": 0.0,
        "solar_radiation_mj_m2": 20.0,
        "latitude": 19.9975,
        "longitude": 73.7898,
        "elevation_m": 500.0,
        "growth_stage": "flowering",
        "irrigation_method": "drip",
        "soil_type": "loamy",
        "farm_area_value": 2.0,
        "farm_area_unit": "hectares",
    }
    rows = [
        dict(base, farm="north"),
        dict(base, farm="broken", temperature_max_c=100.0),
        dict(base, farm="sandy", soil_type="sandy", rainfall_mm=1.0),
        dict(base, farm="no-elevation", elevation_m=None, farm_area_value=None),
    ]
    return pd.DataFrame(rows)


@pytest.fixture
def blocks():
    base = {
        "vine_spacing_m": 2.0, "row_spacing_m": 3.0,
        "shoots_per_vine": 20, "leaves_per_shoot": 15,
        "leaf_length_cm": 12.0, "leaf_width_cm": 8.0,
        "canopy_height_m": 1.5, "canopy_width_m": 0.8,
        "leaf_shape": "heart", "trellis_system": "vsp", "season": "summer",
    }
    return pd.DataFrame([
        dict(base, block="a"),
        dict(base, block="b", vine_spacing_m=1.0, trellis_system="lyre"),
        dict(base, block="c", row_spacing_m=0.0),
    ])


class TestEtcFrame:

    def test_rows_keep_order_and_errors(self, farms, config):
        result = compute_etc_frame(farms, config=config, max_workers=3)

        assert list(result["farm"]) == ["north", "broken", "sandy", "no-elevation"]
        assert result["error"].isna().tolist() == [True, False, True, True]
        assert "temperature_max_c" in result.loc[1, "error"]
        assert pd.isna(result.loc[1, "reference_et_mm"])

    @pytest.mark.parametrize("column", ["observed_on", "planting_date"])
    def test_unparseable_date_fails_only_its_row(self, farms, config, column):
        good = farms.iloc[0].to_dict()
        frame = pd.DataFrame([good, dict(good, farm="bad-date", **{column: "not-a-date"})])

        result = compute_etc_frame(frame, config=config, max_workers=2)

        assert list(result["farm"]) == ["north", "bad-date"]
        assert pd.isna(result.loc[0, "error"])
        assert result.loc[0, "reference_et_mm"] > 0
        assert column in result.loc[1, "error"]
        assert pd.isna(result.loc[1, "reference_et_mm"])

    def test_matches_single_calculation(self, farms, config):
        result = compute_etc_frame(farms, config=config)
        single = compute_etc(
            weather={
                "observed_on": "2025-01-15", "temperature_max_c": 30.0,
                "temperature_min_c": 15.0, "humidity_percent": 60.0,
                "wind_speed_m_s": 2.5, "rainfall_mm": 0.0, "solar_radiation_mj_m2": 20.0,
            },
            growth_stage="flowering",
            location={"latitude": 19.9975, "longitude": 73.7898, "elevation_m": 500.0},
            irrigation_method="drip",
            soil_type="loamy",
            farm_area={"value": 2.0, "unit": "hectares"},
            config=config,
        )
        row = result.iloc[0]
        assert row["reference_et_mm"] == pytest.approx(single.reference_et_mm)
        assert row["recommended_depth_mm"] == pytest.approx(single.recommended_depth_mm)
        assert row["volume_liters"] == pytest.approx(single.volume_liters)
        assert row["confidence"] == "high"
        assert bool(row["should_irrigate"]) is True

    def test_missing_values_read_as_absent(self, farms, config):
        result = compute_etc_frame(farms, config=config)
        row = result.iloc[3]
        assert pd.isna(row["volume_liters"])
        assert row["reference_et_mm"] > 0

    def test_input_frame_untouched(self, farms, config):
        columns = list(farms.columns)
        compute_etc_frame(farms, config=config)
        assert list(farms.columns) == columns

    def test_empty_frame(self, config):
        result = BatchCalculator(config).compute_etc_frame(pd.DataFrame())
        assert len(result) == 0
        assert "error" in result.columns


class TestLaiFrame:

    def test_blocks(self, blocks, config):
        result = compute_lai_frame(blocks, config=config, max_workers=2)

        assert list(result["block"]) == ["a", "b", "c"]
        assert result.loc[0, "lai"] == pytest.approx(0.33)
        assert result.loc[0, "canopy_density"] == "sparse"
        assert result.loc[1, "lai"] > result.loc[0, "lai"]
        assert pd.isna(result.loc[0, "error"])
        assert "row_spacing_m" in result.loc[2, "error"]
