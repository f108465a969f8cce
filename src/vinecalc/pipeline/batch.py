"""
Batch runner for the vinecalc engines.
Applies the ETc or LAI engine to every row of a DataFrame in parallel.

Each row is one independent calculation. Rows that fail validation keep
their place in the output with the message in the ``error`` column.
"""
import numpy as np
import pandas as pd
from datetime import date, datetime
from typing import Any, Callable, Dict, List, Optional
import logging
from concurrent.futures import ThreadPoolExecutor

from vinecalc.core.config import EngineConfig, get_config
from vinecalc.core.exceptions import VineCalcError, ErrorContext, handle_exception
from vinecalc.physics.canopy import compute_lai
from vinecalc.physics.evapotranspiration import compute_etc

WEATHER_COLUMNS = [
    "temperature_max_c", "temperature_min_c", "humidity_percent", "wind_speed_m_s",
    "rainfall_mm", "solar_radiation_mj_m2", "sunshine_hours", "illuminance_lux",
    "humidity_max_percent", "humidity_min_percent",
]

GEOMETRY_COLUMNS = [
    "vine_spacing_m", "row_spacing_m", "shoots_per_vine", "leaves_per_shoot",
    "leaf_length_cm", "leaf_width_cm", "canopy_height_m", "canopy_width_m",
    "leaf_shape", "trellis_system", "season",
]

ETC_OUTPUT_COLUMNS = [
    "reference_et_mm", "crop_coefficient", "crop_et_mm", "net_requirement_mm",
    "recommended_depth_mm", "volume_liters", "solar_source", "confidence",
    "should_irrigate", "duration_hours",
]

LAI_OUTPUT_COLUMNS = [
    "lai", "leaf_area_per_vine_m2", "plant_density_per_ha",
    "light_interception_percent", "canopy_density", "fruit_exposure",
    "airflow", "disease_risk",
]


def _value(row: pd.Series, column: str) -> Any:
    """Cell value with missing columns and NaN read as None"""
    if column not in row.index:
        return None
    value = row[column]
    if value is None or (not isinstance(value, str) and pd.isna(value)):
        return None
    if isinstance(value, np.generic):
        value = value.item()
    return value


def _as_date(value: Any, column: str) -> Optional[date]:
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return pd.Timestamp(value).date()
    except (ValueError, TypeError) as e:
        raise handle_exception(
            ValueError(f"{column}: cannot parse '{value}' as a date ({e})"),
            ErrorContext(component="batch", operation="_as_date", field=column),
        ) from e


class BatchCalculator:
    """
    Runs the engines over DataFrames of independent inputs.
    Results come back in input row order.
    """

    def __init__(self, config: Optional[EngineConfig] = None, max_workers: int = 4):
        self.config = config or get_config()
        self.max_workers = max_workers
        self.logger = logging.getLogger("vinecalc.pipeline.batch")

    def compute_etc_frame(self, frame: pd.DataFrame) -> pd.DataFrame:
        """
        Crop water requirement for every row.

        Expected columns: ``observed_on``, the weather fields of
        :class:`WeatherObservation`, ``latitude``, ``longitude``,
        ``elevation_m``, ``growth_stage``, ``irrigation_method``,
        ``soil_type`` and optionally ``planting_date``,
        ``farm_area_value`` and ``farm_area_unit``.

        Returns:
            Copy of ``frame`` with the result columns and ``error`` appended
        """
        return self._run(frame, self._etc_row, ETC_OUTPUT_COLUMNS, "ETc")

    def compute_lai_frame(self, frame: pd.DataFrame) -> pd.DataFrame:
        """
        Canopy assessment for every row.

        Expected columns are the fields of :class:`VineGeometryInput`; the
        categorical ones fall back to their defaults when absent.
        """
        return self._run(frame, self._lai_row, LAI_OUTPUT_COLUMNS, "LAI")

    def _etc_row(self, row: pd.Series) -> Dict[str, Any]:
        weather = {"observed_on": _as_date(_value(row, "observed_on"), "observed_on")}
        weather.update({column: _value(row, column) for column in WEATHER_COLUMNS})

        farm_area = None
        if _value(row, "farm_area_value") is not None:
            farm_area = {"value": _value(row, "farm_area_value")}
            if _value(row, "farm_area_unit") is not None:
                farm_area["unit"] = _value(row, "farm_area_unit")

        result = compute_etc(
            weather=weather,
            growth_stage=_value(row, "growth_stage"),
            location={
                "latitude": _value(row, "latitude"),
                "longitude": _value(row, "longitude"),
                "elevation_m": _value(row, "elevation_m"),
            },
            irrigation_method=_value(row, "irrigation_method"),
            soil_type=_value(row, "soil_type"),
            planting_date=_as_date(_value(row, "planting_date"), "planting_date"),
            farm_area=farm_area,
            config=self.config,
        )

        return {
            "reference_et_mm": result.reference_et_mm,
            "crop_coefficient": result.crop_coefficient,
            "crop_et_mm": result.crop_et_mm,
            "net_requirement_mm": result.net_requirement_mm,
            "recommended_depth_mm": result.recommended_depth_mm,
            "volume_liters": result.volume_liters,
            "solar_source": result.solar_source.value,
            "confidence": result.confidence.value,
            "should_irrigate": result.recommendation.should_irrigate,
            "duration_hours": result.recommendation.duration_hours,
        }

    def _lai_row(self, row: pd.Series) -> Dict[str, Any]:
        geometry = {}
        for column in GEOMETRY_COLUMNS:
            value = _value(row, column)
            if value is not None:
                geometry[column] = value

        result = compute_lai(geometry, config=self.config)

        return {
            "lai": result.lai,
            "leaf_area_per_vine_m2": result.leaf_area_per_vine_m2,
            "plant_density_per_ha": result.plant_density_per_ha,
            "light_interception_percent": result.light_interception_percent,
            "canopy_density": result.canopy_density.value,
            "fruit_exposure": result.quality.fruit_exposure,
            "airflow": result.quality.airflow,
            "disease_risk": result.quality.disease_risk,
        }

    def _run(
        self,
        frame: pd.DataFrame,
        compute_row: Callable[[pd.Series], Dict[str, Any]],
        output_columns: List[str],
        label: str
    ) -> pd.DataFrame:
        rows = [row for _, row in frame.iterrows()]
        self.logger.info(f"Computing {label} for {len(rows)} rows with {self.max_workers} workers")

        def run_one(row: pd.Series) -> Dict[str, Any]:
            try:
                outputs = compute_row(row)
                outputs["error"] = None
            except VineCalcError as e:
                self.logger.warning(f"{label} row {row.name} failed: {e.message}")
                outputs = {column: None for column in output_columns}
                outputs["error"] = e.message
            return outputs

        # map() yields in submission order
        with ThreadPoolExecutor(max_workers=self.max_workers) as executor:
            results = list(executor.map(run_one, rows))

        output = frame.copy()
        result_frame = pd.DataFrame(
            results, index=frame.index, columns=output_columns + ["error"])
        for column in result_frame.columns:
            output[column] = result_frame[column]

        failed = int(result_frame["error"].notna().sum())
        if failed:
            self.logger.warning(f"{label}: {failed} of {len(rows)} rows failed validation")
        return output


def compute_etc_frame(
    frame: pd.DataFrame,
    config: Optional[EngineConfig] = None,
    max_workers: int = 4
) -> pd.DataFrame:
    """Run :func:`compute_etc` over every row of ``frame``"""
    return BatchCalculator(config, max_workers).compute_etc_frame(frame)


def compute_lai_frame(
    frame: pd.DataFrame,
    config: Optional[EngineConfig] = None,
    max_workers: int = 4
) -> pd.DataFrame:
    """Run :func:`compute_lai` over every row of ``frame``"""
    return BatchCalculator(config, max_workers).compute_lai_frame(frame)
