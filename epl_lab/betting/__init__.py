"""Betting utilities for EPL Lab."""

from .value import ValueCalculator
from .combos import ComboSelector

__all__ = ["ValueCalculator", "ComboSelector"]
