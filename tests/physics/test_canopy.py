"""
Tests for the canopy LAI engine.
Tests the leaf area chain, density classes, light interception,
recommendations, quality ratings and planning tables.
"""
from dataclasses import replace
import pytest

from vinecalc.core.config import EngineConfig, CanopyConfig
from vinecalc.core.exceptions import ValidationError
from vinecalc.core.types import (
    VineGeometryInput, LeafShape, TrellisSystem, Season, CanopyDensity, ProductionGoal,
)
from vinecalc.physics.canopy import (
    compute_lai, classify_canopy_density, light_interception, assess_quality,
    canopy_recommendations, optimal_lai_targets, seasonal_monitoring_schedule,
)


@pytest.fixture
def config():
    return EngineConfig()


@pytest.fixture
def table_grape_block():
    """2 m × 3 m spacing, 20 shoots of 15 heart-shaped 12 × 8 cm leaves"""
    return VineGeometryInput(
        vine_spacing_m=2.0,
        row_spacing_m=3.0,
        shoots_per_vine=20,
        leaves_per_shoot=15,
        leaf_length_cm=12.0,
        leaf_width_cm=8.0,
        canopy_height_m=1.5,
        canopy_width_m=0.8,
        leaf_shape=LeafShape.HEART,
        trellis_system=TrellisSystem.VSP,
        season=Season.SUMMER,
    )


class TestComputeLai:

    def test_worked_example(self, table_grape_block, config):
        result = compute_lai(table_grape_block, config)

        assert result.single_leaf_area_m2 == pytest.approx(0.006528)
        assert result.leaf_area_per_vine_m2 == pytest.approx(1.96)
        assert result.plant_density_per_ha == 1667
        assert result.leaf_area_per_hectare_m2 == pytest.approx(3264.0)
        assert result.lai == pytest.approx(0.33)
        assert result.light_interception_percent == pytest.approx(18.0)
        assert result.canopy_density == CanopyDensity.SPARSE
        assert result.shape_factor == 0.68
        assert result.seasonal_factor == 1.0
        assert result.trellis_factor == 1.0

    def test_worked_example_advice(self, table_grape_block, config):
        result = compute_lai(table_grape_block, config)

        assert result.recommendations.canopy_management == (
            "Encourage lateral shoot growth",
            "Consider reducing pruning severity",
            "Monitor for adequate fruit shading",
            "Insufficient light interception - allow more leaf growth",
        )
        assert result.recommendations.pruning == (
            "Leave more buds during winter pruning",
            "Reduce shoot thinning intensity",
        )
        assert result.recommendations.trellis_adjustments == (
            "Current trellis system is appropriate",
        )
        assert result.quality.fruit_exposure == "poor"
        assert result.quality.airflow == "excellent"
        assert result.quality.disease_risk == "low"

    def test_rounded_lai_sits_on_boundary(self, config):
        """LAI landing on 1.0 after rounding is classed optimal"""
        geometry = VineGeometryInput(
            vine_spacing_m=1.02, row_spacing_m=2.0,
            shoots_per_vine=20, leaves_per_shoot=15,
            leaf_length_cm=10.0, leaf_width_cm=10.0,
            canopy_height_m=1.5, canopy_width_m=0.8,
        )
        result = compute_lai(geometry, config)
        assert result.lai == 1.0
        assert result.canopy_density == CanopyDensity.OPTIMAL
        assert result.light_interception_percent == pytest.approx(45.1)

    def test_dense_block(self, config):
        geometry = VineGeometryInput(
            vine_spacing_m=1.0, row_spacing_m=2.0,
            shoots_per_vine=24, leaves_per_shoot=15,
            leaf_length_cm=15.0, leaf_width_cm=12.0,
            canopy_height_m=1.8, canopy_width_m=1.0,
            leaf_shape=LeafShape.ROUND,
        )
        result = compute_lai(geometry, config)
        assert result.lai == pytest.approx(2.56)
        assert result.canopy_density == CanopyDensity.DENSE
        assert result.light_interception_percent == pytest.approx(78.5)
        assert result.quality.fruit_exposure == "excellent"
        assert result.quality.airflow == "good"
        assert result.recommendations.canopy_management == (
            "Increase leaf removal in fruit zone",
            "Improve shoot positioning",
            "Consider selective shoot removal",
        )

    def test_overcrowded_vsp(self, config):
        geometry = VineGeometryInput(
            vine_spacing_m=1.0, row_spacing_m=2.0,
            shoots_per_vine=30, leaves_per_shoot=20,
            leaf_length_cm=15.0, leaf_width_cm=12.0,
            canopy_height_m=1.8, canopy_width_m=1.0,
            leaf_shape=LeafShape.ROUND,
        )
        result = compute_lai(geometry, config)
        assert result.lai == pytest.approx(4.27)
        assert result.canopy_density == CanopyDensity.OVERCROWDED
        assert "Excessive shading - reduce leaf density" in result.recommendations.canopy_management
        assert result.recommendations.trellis_adjustments == (
            "Consider upgrading to divided canopy system",
            "VSP may be limiting for this canopy density",
        )
        assert result.quality.fruit_exposure == "adequate"
        assert result.quality.airflow == "poor"
        assert result.quality.disease_risk == "high"

    @pytest.mark.parametrize("season,factor", [
        (Season.SPRING, 0.6), (Season.SUMMER, 1.0), (Season.AUTUMN, 0.8),
    ])
    def test_seasonal_factor(self, table_grape_block, config, season, factor):
        result = compute_lai(replace(table_grape_block, season=season), config)
        assert result.seasonal_factor == factor
        assert result.leaf_area_per_vine_m2 == pytest.approx(round(1.9584 * factor, 2))

    def test_divided_trellis_increases_leaf_area(self, table_grape_block, config):
        vsp = compute_lai(table_grape_block, config)
        lyre = compute_lai(replace(table_grape_block, trellis_system=TrellisSystem.LYRE), config)
        assert lyre.trellis_factor == 1.30
        assert lyre.lai > vsp.lai

    def test_closer_spacing_increases_lai(self, table_grape_block, config):
        wide = compute_lai(table_grape_block, config)
        close = compute_lai(replace(table_grape_block, vine_spacing_m=1.0), config)
        assert close.plant_density_per_ha > wide.plant_density_per_ha
        assert close.lai > wide.lai

    def test_accepts_mapping_with_defaults(self, config):
        result = compute_lai({
            "vine_spacing_m": 2.0, "row_spacing_m": 3.0,
            "shoots_per_vine": 20, "leaves_per_shoot": 15,
            "leaf_length_cm": 12, "leaf_width_cm": 8,
            "canopy_height_m": 1.5, "canopy_width_m": 0.8,
            "trellis_system": "scott-henry",
        }, config)
        assert result.trellis_factor == 1.25

    def test_extinction_coefficient_from_config(self, table_grape_block):
        steep = EngineConfig(canopy=CanopyConfig(extinction_coefficient=0.9))
        result = compute_lai(table_grape_block, steep)
        assert result.light_interception_percent == pytest.approx(25.7)

    def test_idempotent(self, table_grape_block, config):
        assert compute_lai(table_grape_block, config) == compute_lai(table_grape_block, config)

    def test_to_dict(self, table_grape_block, config):
        data = compute_lai(table_grape_block, config).to_dict()
        assert data["canopy_density"] == "sparse"
        assert data["quality"]["fruit_exposure"] == "poor"
        assert isinstance(data["recommendations"]["pruning"], list)

    @pytest.mark.parametrize("field", [
        "vine_spacing_m", "row_spacing_m", "shoots_per_vine", "leaves_per_shoot",
        "leaf_length_cm", "leaf_width_cm", "canopy_height_m", "canopy_width_m",
    ])
    def test_non_positive_dimensions_rejected(self, table_grape_block, config, field):
        with pytest.raises(ValidationError):
            compute_lai(replace(table_grape_block, **{field: 0.0}), config)

    def test_unknown_category_rejected(self, table_grape_block, config):
        with pytest.raises(ValidationError):
            compute_lai(replace(table_grape_block, trellis_system="trellis-x"), config)
        with pytest.raises(ValidationError):
            compute_lai(replace(table_grape_block, leaf_shape="oval"), config)

    def test_non_finite_rejected(self, table_grape_block, config):
        with pytest.raises(ValidationError):
            compute_lai(replace(table_grape_block, row_spacing_m=float("inf")), config)


class TestCanopyClasses:

    @pytest.mark.parametrize("lai,expected", [
        (0.0, CanopyDensity.SPARSE),
        (0.99, CanopyDensity.SPARSE),
        (1.0, CanopyDensity.OPTIMAL),
        (2.5, CanopyDensity.OPTIMAL),
        (2.51, CanopyDensity.DENSE),
        (4.0, CanopyDensity.DENSE),
        (4.01, CanopyDensity.OVERCROWDED),
    ])
    def test_boundaries(self, lai, expected):
        assert classify_canopy_density(lai) == expected

    def test_light_interception_beer_lambert(self):
        assert light_interception(0.0) == 0.0
        assert light_interception(2.0) == pytest.approx(69.88, abs=0.01)

    def test_light_interception_below_100(self):
        assert light_interception(50.0) == pytest.approx(99.9)
        assert light_interception(5000.0) < 100.0

    def test_light_interception_rejects_negative_lai(self):
        with pytest.raises(ValidationError):
            light_interception(-0.5)


class TestRecommendations:

    def test_optimal(self):
        advice = canopy_recommendations(2.0, CanopyDensity.OPTIMAL, TrellisSystem.GENEVA, 70.0)
        assert advice.canopy_management == (
            "Maintain current canopy management",
            "Continue regular shoot positioning",
            "Monitor for seasonal changes",
        )
        assert advice.pruning == ("Current pruning level is appropriate",)
        assert advice.trellis_adjustments == ("Current trellis system is appropriate",)

    def test_vsp_warning_only_above_three(self):
        at_three = canopy_recommendations(3.0, CanopyDensity.DENSE, TrellisSystem.VSP, 83.5)
        above = canopy_recommendations(3.2, CanopyDensity.DENSE, TrellisSystem.VSP, 85.3)
        assert at_three.trellis_adjustments == ("Current trellis system is appropriate",)
        assert "VSP may be limiting for this canopy density" in above.trellis_adjustments
        assert "Excessive shading - reduce leaf density" in above.canopy_management

    def test_overcrowded_divided_trellis(self):
        advice = canopy_recommendations(4.5, CanopyDensity.OVERCROWDED, TrellisSystem.LYRE, 93.3)
        assert advice.trellis_adjustments == ("Consider upgrading to divided canopy system",)


class TestQuality:

    @pytest.mark.parametrize("lai,light,exposure", [
        (0.8, 70.0, "poor"),
        (2.0, 45.0, "poor"),
        (2.0, 70.0, "excellent"),
        (3.5, 70.0, "good"),
        (1.2, 55.0, "good"),
        (4.5, 93.0, "adequate"),
    ])
    def test_fruit_exposure(self, lai, light, exposure):
        assert assess_quality(lai, light).fruit_exposure == exposure

    @pytest.mark.parametrize("lai,airflow,risk", [
        (4.5, "poor", "high"),
        (2.0, "good", "low"),
        (3.0, "good", "low"),
        (3.5, "adequate", "moderate"),
        (1.5, "excellent", "low"),
    ])
    def test_airflow_and_disease(self, lai, airflow, risk):
        quality = assess_quality(lai, 70.0)
        assert quality.airflow == airflow
        assert quality.disease_risk == risk


class TestPlanning:

    @pytest.mark.parametrize("goal,low,high,window", [
        (ProductionGoal.TABLE, 1.8, 2.8, "2.0 - 2.5"),
        ("wine", 2.2, 3.5, "2.5 - 3.0"),
        ("raisin", 2.0, 3.2, "2.3 - 2.8"),
    ])
    def test_targets(self, goal, low, high, window):
        target = optimal_lai_targets(goal)
        assert target.min_lai == low
        assert target.max_lai == high
        assert target.optimal_range == window
        assert target.reasoning
        assert target.contains((low + high) / 2)

    def test_unknown_goal(self):
        with pytest.raises(ValidationError):
            optimal_lai_targets("juice")

    def test_monitoring_schedule(self):
        schedule = seasonal_monitoring_schedule()
        assert [p.season for p in schedule] == [
            "Spring", "Early Summer", "Late Summer", "Autumn"]
        assert schedule[0].timing == "Bud break to bloom"
        assert schedule[3].timing == "Post-harvest"
        assert all(len(p.focus) == 3 and len(p.actions) == 3 for p in schedule)
