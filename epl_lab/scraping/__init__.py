"""Data collection modules for EPL Lab."""

from .openfootball import OpenFootballClient

__all__ = ["OpenFootballClient"]
