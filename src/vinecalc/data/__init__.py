"""
vinecalc data package.

Input contracts that validate request payloads before the engines run.
"""

from vinecalc.data.contracts import (
    WeatherContract,
    LocationContract,
    FarmAreaContract,
    ETcRequest,
    LAIRequest,
    parse_etc_request,
    parse_lai_request,
)

__all__ = [
    "WeatherContract",
    "LocationContract",
    "FarmAreaContract",
    "ETcRequest",
    "LAIRequest",
    "parse_etc_request",
    "parse_lai_request",
]
