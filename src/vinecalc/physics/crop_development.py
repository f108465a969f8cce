"""
Grapevine phenology and crop coefficients.

1. Stage-specific crop coefficients (Kc) for table/wine grapes
2. Calendar-based growth stage estimate for a date and hemisphere
3. Seasonal water requirement per stage for planning

References:
- FAO-56: Allen et al. (1998) Crop evapotranspiration, Table 12 (grapes)
- Williams & Ayars (2005) Grapevine water use and the crop coefficient
  are linear functions of the shaded area measured beneath the canopy
"""

import math
from dataclasses import dataclass
from datetime import date
from typing import List, Optional, Union
import logging

from vinecalc.core import constants
from vinecalc.core.exceptions import ValidationError, ErrorContext
from vinecalc.core.types import GrowthStage

logger = logging.getLogger(__name__)


# =============================================================================
# CROP COEFFICIENTS
# =============================================================================

@dataclass(frozen=True)
class CropCoefficient:
    """Kc applied for one growth stage"""
    stage: GrowthStage
    kc: float
    description: str


def parse_growth_stage(stage: Union[GrowthStage, str]) -> GrowthStage:
    """
    Coerce a stage name to :class:`GrowthStage`.

    Raises:
        ValidationError: For unknown stage names. There is no default stage.
    """
    if isinstance(stage, GrowthStage):
        return stage
    try:
        return GrowthStage(stage)
    except ValueError:
        valid = ", ".join(s.value for s in GrowthStage)
        raise ValidationError(
            f"Unsupported growth stage '{stage}'. Expected one of: {valid}",
            ErrorContext(component="crop_development", operation="parse_growth_stage",
                         field="growth_stage"),
        ) from None


def get_crop_coefficient(stage: Union[GrowthStage, str]) -> CropCoefficient:
    """
    Get the grape crop coefficient for a growth stage.

    Args:
        stage: Growth stage (enum or its string value)

    Returns:
        CropCoefficient with Kc and a short description
    """
    stage = parse_growth_stage(stage)
    kc, description = constants.GRAPE_KC[stage]
    return CropCoefficient(stage=stage, kc=kc, description=description)


# =============================================================================
# PHENOLOGICAL CALENDAR
# =============================================================================

def determine_growth_stage(on: date, latitude: Optional[float] = None) -> GrowthStage:
    """
    Estimate the growth stage from the calendar.

    Northern hemisphere calendar:
        Dec-Feb dormant, Mar 1-15 budbreak, Mar 16-31 leaf development,
        Apr flowering, May-Jun fruit set, Jul-Aug veraison,
        Sep-Oct harvest, Nov post-harvest.

    South of the equator the calendar is shifted by six months.

    Args:
        on: Date of interest
        latitude: Site latitude (degrees); None is treated as northern

    Returns:
        Estimated GrowthStage
    """
    month = on.month
    if latitude is not None and latitude < 0:
        month = (month + 5) % 12 + 1

    if month in (12, 1, 2):
        return GrowthStage.DORMANT
    if month == 3:
        return GrowthStage.BUDBREAK if on.day <= 15 else GrowthStage.LEAF_DEVELOPMENT
    if month == 4:
        return GrowthStage.FLOWERING
    if month in (5, 6):
        return GrowthStage.FRUIT_SET
    if month in (7, 8):
        return GrowthStage.VERAISON
    if month in (9, 10):
        return GrowthStage.HARVEST
    return GrowthStage.POST_HARVEST


# =============================================================================
# SEASONAL PLANNING
# =============================================================================

@dataclass(frozen=True)
class StageRequirement:
    """Water requirement of one stage over its typical duration"""
    stage: GrowthStage
    days: int
    kc: float
    total_etc_mm: float
    description: str


def seasonal_water_requirements(average_et0_mm: float = 4.0) -> List[StageRequirement]:
    """
    Crop water use per stage over one annual cycle.

        total ETc = ET0 × Kc × stage days

    Args:
        average_et0_mm: Representative reference ET for the season (mm/day)

    Returns:
        One StageRequirement per growth stage, in calendar order from dormancy
    """
    if not math.isfinite(average_et0_mm) or average_et0_mm <= 0:
        raise ValidationError(
            f"average_et0_mm must be a positive finite number, got {average_et0_mm}",
            ErrorContext(component="crop_development",
                         operation="seasonal_water_requirements",
                         field="average_et0_mm"),
        )

    requirements = []
    for stage, days in constants.STAGE_DURATION_DAYS.items():
        coefficient = get_crop_coefficient(stage)
        requirements.append(StageRequirement(
            stage=stage,
            days=days,
            kc=coefficient.kc,
            total_etc_mm=round(average_et0_mm * coefficient.kc * days, 1),
            description=coefficient.description,
        ))

    logger.debug(
        f"Seasonal requirement at ET0={average_et0_mm} mm/day: "
        f"{sum(r.total_etc_mm for r in requirements):.1f} mm"
    )
    return requirements
