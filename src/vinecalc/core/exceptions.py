"""
Exception hierarchy for the vinecalc engines.
Provides clear error categories and rich error information.
"""
from typing import Optional, Any, Dict
from dataclasses import dataclass


@dataclass
class ErrorContext:
    """Context information for errors"""
    component: Optional[str] = None
    operation: Optional[str] = None
    field: Optional[str] = None
    details: Optional[Dict[str, Any]] = None


class VineCalcError(Exception):
    """Base exception for all vinecalc errors"""

    def __init__(self, message: str, context: Optional[ErrorContext] = None):
        super().__init__(message)
        self.message = message
        self.context = context or ErrorContext()

    def __str__(self) -> str:
        context_str = ""
        if self.context.component:
            context_str += f" [Component: {self.context.component}]"
        if self.context.operation:
            context_str += f" [Operation: {self.context.operation}]"
        if self.context.field:
            context_str += f" [Field: {self.context.field}]"

        return f"{self.__class__.__name__}: {self.message}{context_str}"


class ValidationError(VineCalcError):
    """Input is missing, malformed or outside its physical range"""
    pass


class ConfigurationError(VineCalcError):
    """Configuration error"""
    pass


def handle_exception(exc: Exception, context: Optional[ErrorContext] = None) -> VineCalcError:
    """
    Wrap generic exceptions in the VineCalcError hierarchy.
    Arithmetic failures inside an engine are reported as invalid input.
    """
    if isinstance(exc, VineCalcError):
        return exc

    error_map = {
        ZeroDivisionError: ValidationError,
        FloatingPointError: ValidationError,
        OverflowError: ValidationError,
        ValueError: ValidationError,
        KeyError: ValidationError,
    }

    for exc_type, vinecalc_exc_type in error_map.items():
        if isinstance(exc, exc_type):
            return vinecalc_exc_type(str(exc) or exc_type.__name__, context)

    return VineCalcError(str(exc), context)
