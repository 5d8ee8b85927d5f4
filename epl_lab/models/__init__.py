"""Prediction models for EPL Lab."""

from .elo import EloRatingModel
from .goal_strength import GoalStrengthModel
from .outcome import OutcomeEngine

__all__ = ["EloRatingModel", "GoalStrengthModel", "OutcomeEngine"]
