"""
Grapevine canopy leaf area and light interception.

Implements:
1. Leaf area index (LAI) from vine spacing and leaf morphology
2. Beer-Lambert light interception: I = 1 - exp(-k × LAI)
3. Canopy density classes with management recommendations
4. Fruit exposure, airflow and disease risk ratings
5. Target LAI windows per production goal and a seasonal monitoring plan

References:
- Smart, R. and Robinson, M. (1991). Sunlight into Wine. Winetitles, Adelaide.
- Monsi, M. and Saeki, T. (1953). Über den Lichtfaktor in den
  Pflanzengesellschaften. Japanese Journal of Botany, 14:22-52.
"""

import numpy as np
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple, Union
import logging

from vinecalc.core import constants
from vinecalc.core.config import EngineConfig, get_config
from vinecalc.core.exceptions import ValidationError, ErrorContext
from vinecalc.core.types import (
    VineGeometryInput, CanopyDensity, ProductionGoal, TrellisSystem,
)
from vinecalc.data.contracts import LAIRequest, as_payload, validate_model
from vinecalc.physics.constraints import numeric_guard, ensure_finite

logger = logging.getLogger(__name__)

COMPONENT = "canopy"


# =============================================================================
# RESULTS
# =============================================================================

@dataclass(frozen=True)
class CanopyRecommendations:
    canopy_management: Tuple[str, ...]
    pruning: Tuple[str, ...]
    trellis_adjustments: Tuple[str, ...]

    def to_dict(self) -> Dict[str, List[str]]:
        return {
            'canopy_management': list(self.canopy_management),
            'pruning': list(self.pruning),
            'trellis_adjustments': list(self.trellis_adjustments),
        }


@dataclass(frozen=True)
class QualityMetrics:
    """Qualitative ratings of the canopy microclimate"""
    fruit_exposure: str  # poor | adequate | good | excellent
    airflow: str  # poor | adequate | good | excellent
    disease_risk: str  # low | moderate | high

    def to_dict(self) -> Dict[str, str]:
        return {
            'fruit_exposure': self.fruit_exposure,
            'airflow': self.airflow,
            'disease_risk': self.disease_risk,
        }


@dataclass(frozen=True)
class LAIResult:
    """
    Canopy assessment for one vineyard block.

    Leaf areas are m², ``leaf_area_per_hectare_m2`` is leaf area on one
    hectare of ground and LAI is dimensionless (m² leaf / m² ground).
    """
    lai: float
    single_leaf_area_m2: float
    leaf_area_per_vine_m2: float  # After season and trellis adjustment
    leaf_area_per_hectare_m2: float
    plant_density_per_ha: int
    light_interception_percent: float
    canopy_density: CanopyDensity
    recommendations: CanopyRecommendations
    quality: QualityMetrics
    shape_factor: float
    seasonal_factor: float
    trellis_factor: float

    def to_dict(self) -> Dict[str, Any]:
        """Convert to a JSON-friendly dictionary"""
        return {
            'lai': self.lai,
            'single_leaf_area_m2': self.single_leaf_area_m2,
            'leaf_area_per_vine_m2': self.leaf_area_per_vine_m2,
            'leaf_area_per_hectare_m2': self.leaf_area_per_hectare_m2,
            'plant_density_per_ha': self.plant_density_per_ha,
            'light_interception_percent': self.light_interception_percent,
            'canopy_density': self.canopy_density.value,
            'recommendations': self.recommendations.to_dict(),
            'quality': self.quality.to_dict(),
            'shape_factor': self.shape_factor,
            'seasonal_factor': self.seasonal_factor,
            'trellis_factor': self.trellis_factor,
        }


# =============================================================================
# CANOPY PHYSICS
# =============================================================================

def light_interception(lai: float, extinction_coefficient: float = 0.6) -> float:
    """
    Fraction of incoming light intercepted by the canopy (Beer-Lambert).

        I = (1 - exp(-k × LAI)) × 100

    k lies between 0.5 and 0.7 for grapevine canopies.

    Args:
        lai: Leaf area index (m²/m²)
        extinction_coefficient: Canopy extinction coefficient k

    Returns:
        Intercepted light (%), below 100
    """
    if lai < 0:
        raise ValidationError(
            f"LAI must be non-negative, got {lai}",
            ErrorContext(component=COMPONENT, operation="light_interception", field="lai"),
        )
    percent = (1.0 - np.exp(-extinction_coefficient * lai)) * 100.0
    return float(min(percent, constants.LIGHT_INTERCEPTION_CEILING))


def classify_canopy_density(lai: float) -> CanopyDensity:
    """
    Classify canopy density from LAI.

    < 1.0 sparse, ≤ 2.5 optimal, ≤ 4.0 dense, otherwise overcrowded.
    """
    if lai < constants.LAI_SPARSE_BELOW:
        return CanopyDensity.SPARSE
    if lai <= constants.LAI_OPTIMAL_MAX:
        return CanopyDensity.OPTIMAL
    if lai <= constants.LAI_DENSE_MAX:
        return CanopyDensity.DENSE
    return CanopyDensity.OVERCROWDED


_DENSITY_ADVICE = {
    CanopyDensity.SPARSE: (
        ("Encourage lateral shoot growth",
         "Consider reducing pruning severity",
         "Monitor for adequate fruit shading"),
        ("Leave more buds during winter pruning",
         "Reduce shoot thinning intensity"),
        (),
    ),
    CanopyDensity.OPTIMAL: (
        ("Maintain current canopy management",
         "Continue regular shoot positioning",
         "Monitor for seasonal changes"),
        ("Current pruning level is appropriate",),
        (),
    ),
    CanopyDensity.DENSE: (
        ("Increase leaf removal in fruit zone",
         "Improve shoot positioning",
         "Consider selective shoot removal"),
        ("Increase winter pruning severity",
         "Remove excess shoots early in season"),
        (),
    ),
    CanopyDensity.OVERCROWDED: (
        ("Urgent canopy thinning required",
         "Remove basal leaves around fruit",
         "Improve air circulation"),
        ("Severe pruning recommended",
         "Consider canopy division systems"),
        ("Consider upgrading to divided canopy system",),
    ),
}

DIVIDED_CANOPY_ADVICE = "Consider upgrading to divided canopy system"


def canopy_recommendations(
    lai: float,
    density: CanopyDensity,
    trellis_system: TrellisSystem,
    light_percent: float
) -> CanopyRecommendations:
    """
    Management advice for the canopy density class.

    Light interception outside 60-85 % adds a leaf growth note, and a VSP
    trellis carrying more than LAI 3.0 is flagged as limiting.
    """
    management, pruning, trellis = (list(items) for items in _DENSITY_ADVICE[density])

    if light_percent < constants.LIGHT_INTERCEPTION_MIN:
        management.append("Insufficient light interception - allow more leaf growth")
    elif light_percent > constants.LIGHT_INTERCEPTION_MAX:
        management.append("Excessive shading - reduce leaf density")

    if trellis_system == TrellisSystem.VSP and lai > 3.0:
        if DIVIDED_CANOPY_ADVICE not in trellis:
            trellis.append(DIVIDED_CANOPY_ADVICE)
        trellis.append("VSP may be limiting for this canopy density")

    if not trellis:
        trellis.append("Current trellis system is appropriate")

    return CanopyRecommendations(
        canopy_management=tuple(management),
        pruning=tuple(pruning),
        trellis_adjustments=tuple(trellis),
    )


def assess_quality(lai: float, light_percent: float) -> QualityMetrics:
    """Rate fruit exposure, airflow and disease risk"""
    if light_percent < 50 or lai < 1.0:
        fruit_exposure = "poor"
    elif 65 <= light_percent <= 80 and 1.5 <= lai <= 3.0:
        fruit_exposure = "excellent"
    elif 55 <= light_percent <= 85:
        fruit_exposure = "good"
    else:
        fruit_exposure = "adequate"

    if lai > 4.0:
        airflow, disease_risk = "poor", "high"
    elif 2.0 <= lai <= 3.0:
        airflow, disease_risk = "good", "low"
    elif lai > 3.0:
        airflow, disease_risk = "adequate", "moderate"
    else:
        airflow, disease_risk = "excellent", "low"

    return QualityMetrics(
        fruit_exposure=fruit_exposure,
        airflow=airflow,
        disease_risk=disease_risk,
    )


# =============================================================================
# LEAF AREA INDEX
# =============================================================================

def compute_lai(
    geometry: Union[VineGeometryInput, Dict[str, Any]],
    config: Optional[EngineConfig] = None
) -> LAIResult:
    """
    Leaf area index of a vineyard block.

    Steps:
        leaf = length × width × shape factor / 10 000         (m²)
        vine = leaf × leaves/shoot × shoots/vine × season × trellis
        density = 10 000 / (vine spacing × row spacing)       (vines/ha)
        LAI = vine × density / 10 000

    Density class, light interception and quality ratings are judged on
    the LAI as reported (2 decimals).

    Args:
        geometry: Vine geometry (record or mapping)
        config: Engine configuration (process-wide default when omitted)

    Returns:
        LAIResult

    Raises:
        ValidationError: For non-positive dimensions, unknown categories or
            a non-finite intermediate
    """
    config = config or get_config()
    geometry = validate_model(LAIRequest, as_payload(geometry), "compute_lai").to_domain()

    shape_factor = constants.LEAF_SHAPE_FACTORS[geometry.leaf_shape]
    seasonal_factor = constants.SEASONAL_FACTORS[geometry.season]
    trellis_factor = constants.TRELLIS_EFFICIENCY[geometry.trellis_system]

    with numeric_guard(COMPONENT, "compute_lai"):
        single_leaf = (
            geometry.leaf_length_cm * geometry.leaf_width_cm * shape_factor * constants.CM2_TO_M2
        )
        per_vine = (
            single_leaf * geometry.leaves_per_shoot * geometry.shoots_per_vine
            * seasonal_factor * trellis_factor
        )
        plant_density = constants.SQM_PER_HECTARE / (
            geometry.vine_spacing_m * geometry.row_spacing_m)
        per_hectare = per_vine * plant_density
        lai = per_hectare / constants.SQM_PER_HECTARE

    checked = ensure_finite({
        'single_leaf_area_m2': single_leaf,
        'leaf_area_per_vine_m2': per_vine,
        'plant_density_per_ha': plant_density,
        'leaf_area_per_hectare_m2': per_hectare,
        'lai': lai,
    }, COMPONENT, "compute_lai")

    lai = round(checked['lai'], 2)
    light = round(light_interception(lai, config.canopy.extinction_coefficient), 1)
    density = classify_canopy_density(lai)

    result = LAIResult(
        lai=lai,
        single_leaf_area_m2=round(checked['single_leaf_area_m2'], 6),
        leaf_area_per_vine_m2=round(checked['leaf_area_per_vine_m2'], 2),
        leaf_area_per_hectare_m2=float(round(checked['leaf_area_per_hectare_m2'])),
        plant_density_per_ha=int(round(checked['plant_density_per_ha'])),
        light_interception_percent=light,
        canopy_density=density,
        recommendations=canopy_recommendations(lai, density, geometry.trellis_system, light),
        quality=assess_quality(lai, light),
        shape_factor=shape_factor,
        seasonal_factor=seasonal_factor,
        trellis_factor=trellis_factor,
    )

    logger.debug(
        f"LAI={result.lai} ({result.canopy_density.value}) "
        f"vine={result.leaf_area_per_vine_m2} m² density={result.plant_density_per_ha}/ha "
        f"light={result.light_interception_percent}%"
    )
    return result


# =============================================================================
# PLANNING AIDS
# =============================================================================

@dataclass(frozen=True)
class LAITarget:
    """Target LAI window for a production goal"""
    goal: ProductionGoal
    min_lai: float
    max_lai: float
    optimal_range: str
    reasoning: str

    def contains(self, lai: float) -> bool:
        return self.min_lai <= lai <= self.max_lai


def optimal_lai_targets(goal: Union[ProductionGoal, str]) -> LAITarget:
    """
    Target LAI for table, wine or raisin grapes.

    Raises:
        ValidationError: For an unknown production goal
    """
    try:
        goal = ProductionGoal(goal)
    except ValueError:
        valid = ", ".join(g.value for g in ProductionGoal)
        raise ValidationError(
            f"Unsupported production goal '{goal}'. Expected one of: {valid}",
            ErrorContext(component=COMPONENT, operation="optimal_lai_targets", field="goal"),
        ) from None

    min_lai, max_lai, optimal_range, reasoning = constants.OPTIMAL_LAI_TARGETS[goal]
    return LAITarget(
        goal=goal,
        min_lai=min_lai,
        max_lai=max_lai,
        optimal_range=optimal_range,
        reasoning=reasoning,
    )


@dataclass(frozen=True)
class MonitoringPeriod:
    season: str
    timing: str
    focus: Tuple[str, ...]
    actions: Tuple[str, ...]


_MONITORING_SCHEDULE = (
    MonitoringPeriod(
        season="Spring",
        timing="Bud break to bloom",
        focus=("Shoot emergence", "Initial leaf development", "Canopy architecture"),
        actions=("Shoot thinning", "Early positioning", "Sucker removal"),
    ),
    MonitoringPeriod(
        season="Early Summer",
        timing="Post-bloom to véraison",
        focus=("Peak leaf area development", "Fruit zone management", "Light penetration"),
        actions=("Leaf removal", "Shoot positioning", "Hedging if needed"),
    ),
    MonitoringPeriod(
        season="Late Summer",
        timing="Véraison to harvest",
        focus=("Fruit exposure", "Sugar accumulation", "Disease prevention"),
        actions=("Selective defoliation", "Cluster thinning", "Canopy opening"),
    ),
    MonitoringPeriod(
        season="Autumn",
        timing="Post-harvest",
        focus=("Leaf retention", "Carbohydrate storage", "Winter preparation"),
        actions=("Minimal intervention", "Disease control", "Planning for dormant pruning"),
    ),
)


def seasonal_monitoring_schedule() -> List[MonitoringPeriod]:
    """When to measure the canopy and what to act on through the year"""
    return list(_MONITORING_SCHEDULE)
