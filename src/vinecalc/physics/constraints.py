"""
Numerical guards shared by the calculation engines.
A NaN or infinite output is never returned to the caller.
"""
import numpy as np
from contextlib import contextmanager
from typing import Dict, Iterator, Mapping, Optional

from vinecalc.core.exceptions import ValidationError, ErrorContext, handle_exception


@contextmanager
def numeric_guard(component: str, operation: str) -> Iterator[None]:
    """
    Run engine arithmetic with floating point errors raised as exceptions.

    Division by zero, overflow and invalid operations surface as
    :class:`ValidationError` instead of propagating NaN or inf.
    """
    context = ErrorContext(component=component, operation=operation)
    with np.errstate(divide="raise", over="raise", invalid="raise", under="ignore"):
        try:
            yield
        except (FloatingPointError, ZeroDivisionError, OverflowError) as exc:
            raise handle_exception(exc, context) from exc


def ensure_finite(
    values: Mapping[str, Optional[float]],
    component: str,
    operation: str
) -> Dict[str, Optional[float]]:
    """
    Check that every numeric output is finite.

    ``None`` entries are passed through (optional outputs).

    Returns:
        The values converted to built-in floats

    Raises:
        ValidationError: Naming the first non-finite output.
    """
    checked: Dict[str, Optional[float]] = {}
    for name, value in values.items():
        if value is None:
            checked[name] = None
            continue
        if not np.isfinite(value):
            raise ValidationError(
                f"Calculation produced a non-finite {name} ({value})",
                ErrorContext(component=component, operation=operation, field=name),
            )
        checked[name] = float(value)
    return checked
