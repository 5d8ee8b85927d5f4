"""
Elo rating model for EPL Lab.

Replays played matches in date order and keeps one rating per team.
"""

import logging
from functools import reduce
from typing import Dict, Iterable

import pandas as pd

from ..data.records import Match, normalize_team

logger = logging.getLogger(__name__)


def expected_score(rating_home: float, rating_away: float, home_advantage: float = 0.0) -> float:
    """
    Logistic expectation of the home side's result.

    Args:
        rating_home: Home team rating
        rating_away: Away team rating
        home_advantage: Rating points added to the home side

    Returns:
        Expected score for the home team, in (0, 1)
    """
    diff = (rating_home + home_advantage) - rating_away
    return 1 / (1 + 10 ** (-diff / 400))


def actual_score(home_goals: float, away_goals: float) -> float:
    """1 for a home win, 0 for an away win, 0.5 for a draw."""
    if home_goals > away_goals:
        return 1.0
    if home_goals < away_goals:
        return 0.0
    return 0.5


class EloRatingModel:
    """
    Sequential Elo ratings with a fixed home advantage.

    Ratings are unbounded and rebuilt from scratch on every fit.
    """

    def __init__(
        self,
        k_factor: float = 20,
        home_advantage: float = 60,
        base_rating: float = 1500
    ):
        """
        Initialize the Elo model.

        Args:
            k_factor: Update step size
            home_advantage: Rating points credited to the home side
            base_rating: Rating of a team with no history
        """
        self.k_factor = k_factor
        self.home_advantage = home_advantage
        self.base_rating = base_rating

        self.ratings: Dict[str, float] = {}
        self.n_matches = 0

    def update(self, rating_home: float, rating_away: float, result: float):
        """
        Apply a single result.

        Args:
            rating_home: Home rating before the match
            rating_away: Away rating before the match
            result: Actual home score (1, 0.5 or 0)

        Returns:
            Tuple of (new home rating, new away rating)
        """
        expected = expected_score(rating_home, rating_away, self.home_advantage)
        new_home = rating_home + self.k_factor * (result - expected)
        new_away = rating_away + self.k_factor * ((1 - result) - (1 - expected))
        return new_home, new_away

    def _apply_match(self, ratings: Dict[str, float], match: Match) -> Dict[str, float]:
        home = normalize_team(match.home)
        away = normalize_team(match.away)
        new_home, new_away = self.update(
            ratings.get(home, self.base_rating),
            ratings.get(away, self.base_rating),
            actual_score(match.home_goals, match.away_goals),
        )
        return {**ratings, home: new_home, away: new_away}

    def fit(self, matches: Iterable[Match]) -> "EloRatingModel":
        """
        Replay played matches in ascending date order.

        Args:
            matches: Match records in any order

        Returns:
            Fitted model (self)
        """
        played = [m for m in matches if m.is_played]
        # sorted() is stable, so same-day matches keep their input order
        played = sorted(played, key=lambda m: m.date or "")

        self.ratings = reduce(self._apply_match, played, {})
        self.n_matches = len(played)

        logger.info(f"Elo replayed {self.n_matches} matches for {len(self.ratings)} teams")

        return self

    def rating(self, team: str) -> float:
        return self.ratings.get(normalize_team(team), self.base_rating)

    def predict(self, home_team: str, away_team: str) -> dict:
        """
        Home win expectation for a fixture.

        Returns:
            Dictionary with p_home_win and the home-advantage adjusted diff
        """
        rating_home = self.rating(home_team)
        rating_away = self.rating(away_team)
        diff = (rating_home + self.home_advantage) - rating_away

        return {
            "p_home_win": expected_score(rating_home, rating_away, self.home_advantage),
            "diff": diff,
        }

    def get_team_ratings(self) -> pd.DataFrame:
        """
        Get team ratings DataFrame.

        Returns:
            DataFrame with one rating per team, strongest first
        """
        data = [{"team": team, "rating": rating} for team, rating in self.ratings.items()]
        if not data:
            return pd.DataFrame(columns=["team", "rating"])

        return pd.DataFrame(data).sort_values("rating", ascending=False).reset_index(drop=True)

    def params(self) -> dict:
        """Model constants in output form."""
        return {"k": self.k_factor, "homeAdv": self.home_advantage, "base": self.base_rating}
