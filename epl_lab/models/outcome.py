"""
Outcome probabilities for upcoming fixtures.

Turns Elo ratings and Poisson goal strengths into 1X2 distributions.
The two sources are reported side by side and never blended.
"""

import logging
from typing import Iterable, List, Optional

import numpy as np

from ..data.records import Match, OutcomeDistribution, ScoreLine, normalize_team
from .elo import EloRatingModel
from .goal_strength import GoalStrengthModel

logger = logging.getLogger(__name__)

# Elo has no notion of a draw; this heuristic gives ~0.28 for evenly
# matched sides, falling to ~0.10 at a 1200 point gap.
DRAW_BASE = 0.28
DRAW_SLOPE = 0.18
DRAW_GAP_SCALE = 1200


def poisson_pmf(lam: float, max_goals: int) -> np.ndarray:
    """
    Poisson probabilities P(0..max_goals) for rate `lam`.

    Built up as P(k) = P(k-1) * lam / k starting from exp(-lam).
    """
    steps = np.empty(max_goals + 1)
    steps[0] = np.exp(-lam)
    steps[1:] = lam / np.arange(1, max_goals + 1)
    return np.cumprod(steps)


def score_matrix(lambda_home: float, lambda_away: float, max_goals: int = 6) -> np.ndarray:
    """
    Joint scoreline probabilities assuming independent goal counts.

    Returns:
        Array (max_goals+1, max_goals+1), rows are home goals
    """
    return np.outer(poisson_pmf(lambda_home, max_goals), poisson_pmf(lambda_away, max_goals))


def elo_draw_probability(diff: float) -> float:
    return float(np.clip(DRAW_BASE - (abs(diff) / DRAW_GAP_SCALE) * DRAW_SLOPE, 0.0, 1.0))


class OutcomeEngine:
    """
    Produces Elo and Poisson distributions for fixtures.

    Both underlying models must already be fitted.
    """

    def __init__(
        self,
        elo_model: EloRatingModel,
        goal_model: GoalStrengthModel,
        max_goals: int = 6
    ):
        self.elo_model = elo_model
        self.goal_model = goal_model
        self.max_goals = max_goals

    def predict_lambda(self, home_team: str, away_team: str):
        """
        Expected goals for a fixture.

        Returns:
            Tuple of (lambda_home, lambda_away), or None if either team
            has no goal history or the league rates cannot support a rate
        """
        home = self.goal_model.get(home_team)
        away = self.goal_model.get(away_team)
        if home is None or away is None:
            return None

        avg_home = self.goal_model.league_avg_home
        avg_away = self.goal_model.league_avg_away
        # A goalless side of the league leaves zero rates and infinite multipliers
        if avg_home <= 0 or avg_away <= 0:
            return None

        lambda_home = avg_home * home.attack_home * away.defense_away
        lambda_away = avg_away * away.attack_away * home.defense_home
        if not (np.isfinite(lambda_home) and np.isfinite(lambda_away)):
            return None
        return lambda_home, lambda_away

    def predict_poisson(self, home_team: str, away_team: str) -> Optional[OutcomeDistribution]:
        """
        Poisson 1X2 probabilities over a truncated goal grid.

        Args:
            home_team: Home team name
            away_team: Away team name

        Returns:
            OutcomeDistribution with expected goals and most likely score,
            or None when either team is unknown to the goal model
        """
        lambdas = self.predict_lambda(home_team, away_team)
        if lambdas is None:
            return None
        lambda_home, lambda_away = lambdas

        probs = score_matrix(lambda_home, lambda_away, self.max_goals)

        prob_home = float(np.tril(probs, -1).sum())
        prob_draw = float(np.trace(probs))
        prob_away = float(np.triu(probs, 1).sum())

        # argmax returns the first maximum in row-major order
        best_home, best_away = np.unravel_index(np.argmax(probs), probs.shape)
        best = ScoreLine(int(best_home), int(best_away), float(probs[best_home, best_away]))

        # Mass beyond max_goals is dropped; renormalize what is left
        total = prob_home + prob_draw + prob_away
        if total > 0:
            prob_home /= total
            prob_draw /= total
            prob_away /= total

        return OutcomeDistribution(
            p_home=prob_home,
            p_draw=prob_draw,
            p_away=prob_away,
            lambda_home=float(lambda_home),
            lambda_away=float(lambda_away),
            most_likely_score=best,
        )

    def predict_elo(self, home_team: str, away_team: str) -> OutcomeDistribution:
        """
        Elo 1X2 probabilities with a heuristic draw share.

        Unseen teams fall back to the base rating, so this always returns
        a distribution.
        """
        prediction = self.elo_model.predict(home_team, away_team)
        p_home_win = prediction["p_home_win"]
        diff = prediction["diff"]

        p_draw = elo_draw_probability(diff)

        return OutcomeDistribution(
            p_home=p_home_win * (1 - p_draw),
            p_draw=p_draw,
            p_away=(1 - p_home_win) * (1 - p_draw),
            diff=diff,
            rating_home=self.elo_model.rating(home_team),
            rating_away=self.elo_model.rating(away_team),
        )

    def predict_fixture(self, match: Match) -> dict:
        """
        Elo and Poisson predictions for one fixture.

        A Poisson failure is logged and reported as a missing distribution;
        the Elo prediction is still returned.
        """
        home = normalize_team(match.home)
        away = normalize_team(match.away)

        try:
            poisson = self.predict_poisson(home, away)
        except (ArithmeticError, TypeError, ValueError) as e:
            logger.warning(f"No Poisson prediction for {home} vs {away} on {match.date}: {e}")
            poisson = None

        return {
            "date": match.date,
            "round": match.round,
            "home": home,
            "away": away,
            "elo": self.predict_elo(home, away),
            "poisson": poisson,
        }

    def predict_upcoming(self, matches: Iterable[Match]) -> List[dict]:
        """
        Predict every unplayed fixture that has a date.

        A fixture that fails to predict is logged and skipped; the rest
        are still returned.

        Returns:
            List of prediction dicts ordered by date
        """
        upcoming = sorted(
            (m for m in matches if m.date and not m.is_played),
            key=lambda m: m.date,
        )

        predictions = []
        for match in upcoming:
            try:
                predictions.append(self.predict_fixture(match))
            except (ArithmeticError, TypeError, ValueError) as e:
                logger.warning(f"Skipping {match.home} vs {match.away} on {match.date}: {e}")

        logger.info(f"Predicted {len(predictions)} of {len(upcoming)} upcoming fixtures")

        return predictions


def prediction_to_dict(prediction: dict) -> dict:
    """Wire form of a prediction from `OutcomeEngine.predict_fixture`."""
    poisson = prediction["poisson"]
    return {
        "date": prediction["date"],
        "round": prediction["round"],
        "home": prediction["home"],
        "away": prediction["away"],
        "elo": prediction["elo"].to_dict(),
        "poisson": poisson.to_dict() if poisson is not None else None,
    }
