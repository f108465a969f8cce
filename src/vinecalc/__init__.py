"""
vinecalc - vineyard irrigation and canopy calculations.

Two independent engines:
- compute_etc: FAO-56 Penman-Monteith crop water requirement for one day
- compute_lai: leaf area index and canopy assessment for a vine block
"""

__version__ = "0.1.0"

from vinecalc.physics import compute_etc, compute_lai

__all__ = [
    "compute_etc",
    "compute_lai",
    "__version__",
]
