"""
vinecalc pipeline module.

Runs the calculation engines over tables of farms or vineyard blocks.
"""

from vinecalc.pipeline.batch import (
    BatchCalculator,
    compute_etc_frame,
    compute_lai_frame,
)

__all__ = [
    "BatchCalculator",
    "compute_etc_frame",
    "compute_lai_frame",
]
