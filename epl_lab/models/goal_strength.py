"""
Goal-scoring strength model for EPL Lab.

Estimates home and away attack/defense multipliers per team from
historical goals, shrunk towards the league average with an additive
prior so that short histories still give sensible numbers.
"""

import logging
from typing import Dict, Iterable, Optional

import pandas as pd

from ..data.records import Match, TeamStrength, normalize_team

logger = logging.getLogger(__name__)

SIDE_COLUMNS = ["gf", "ga", "games"]


class GoalStrengthModel:
    """
    Smoothed attack/defense ratios relative to league scoring rates.

    A team with no played matches is absent from `strengths`; callers
    treat that as "no prediction available".
    """

    def __init__(
        self,
        prior_games: int = 6,
        prior_goals: float = 8,
        default_avg_home: float = 1.4,
        default_avg_away: float = 1.2
    ):
        """
        Initialize the goal strength model.

        Args:
            prior_games: Pseudo-games added to each team's home and away record
            prior_goals: Pseudo-goals added to each for/against total
            default_avg_home: League home scoring rate when nothing has been played
            default_avg_away: League away scoring rate when nothing has been played
        """
        self.prior_games = prior_games
        self.prior_goals = prior_goals
        self.default_avg_home = default_avg_home
        self.default_avg_away = default_avg_away

        self.strengths: Dict[str, TeamStrength] = {}
        self.league_avg_home = default_avg_home
        self.league_avg_away = default_avg_away

    def _played_frame(self, matches: Iterable[Match]) -> pd.DataFrame:
        rows = [
            {
                "home": normalize_team(m.home),
                "away": normalize_team(m.away),
                "home_goals": float(m.home_goals),
                "away_goals": float(m.away_goals),
            }
            for m in matches
            if m.is_played
        ]
        return pd.DataFrame(rows, columns=["home", "away", "home_goals", "away_goals"])

    def _side_totals(self, df: pd.DataFrame, team_col: str, for_col: str, against_col: str) -> pd.DataFrame:
        grouped = df.groupby(team_col, sort=False)
        totals = pd.DataFrame({
            "gf": grouped[for_col].sum(),
            "ga": grouped[against_col].sum(),
            "games": grouped.size(),
        })
        return totals[SIDE_COLUMNS]

    def fit(self, matches: Iterable[Match]) -> "GoalStrengthModel":
        """
        Fit strengths from played matches.

        Args:
            matches: Match records; unplayed fixtures are ignored

        Returns:
            Fitted model (self)
        """
        df = self._played_frame(matches)

        if len(df) > 0:
            self.league_avg_home = df["home_goals"].sum() / len(df)
            self.league_avg_away = df["away_goals"].sum() / len(df)
        else:
            self.league_avg_home = self.default_avg_home
            self.league_avg_away = self.default_avg_away

        home = self._side_totals(df, "home", "home_goals", "away_goals")
        away = self._side_totals(df, "away", "away_goals", "home_goals")

        teams = pd.unique(pd.concat([df["home"], df["away"]], ignore_index=True))
        home = home.reindex(teams, fill_value=0)
        away = away.reindex(teams, fill_value=0)

        home_games = home["games"] + self.prior_games
        away_games = away["games"] + self.prior_games

        table = pd.DataFrame({
            "attack_home": (home["gf"] + self.prior_goals) / home_games / self.league_avg_home,
            "defense_home": (home["ga"] + self.prior_goals) / home_games / self.league_avg_away,
            "attack_away": (away["gf"] + self.prior_goals) / away_games / self.league_avg_away,
            "defense_away": (away["ga"] + self.prior_goals) / away_games / self.league_avg_home,
        }, index=teams)

        self.strengths = {
            team: TeamStrength(
                attack_home=float(row.attack_home),
                defense_home=float(row.defense_home),
                attack_away=float(row.attack_away),
                defense_away=float(row.defense_away),
            )
            for team, row in table.iterrows()
        }

        logger.info(
            f"Goal strengths fitted for {len(self.strengths)} teams from {len(df)} matches "
            f"(league avg home={self.league_avg_home:.3f}, away={self.league_avg_away:.3f})"
        )

        return self

    def get(self, team: str) -> Optional[TeamStrength]:
        return self.strengths.get(normalize_team(team))

    def get_team_strengths(self) -> pd.DataFrame:
        """
        Get team strengths DataFrame.

        Returns:
            DataFrame with the four multipliers per team
        """
        columns = ["team", "attack_home", "defense_home", "attack_away", "defense_away"]
        data = [
            {
                "team": team,
                "attack_home": s.attack_home,
                "defense_home": s.defense_home,
                "attack_away": s.attack_away,
                "defense_away": s.defense_away,
            }
            for team, s in self.strengths.items()
        ]
        return pd.DataFrame(data, columns=columns)

    def params(self) -> dict:
        """League averages and prior in output form."""
        return {
            "leagueAvgHome": self.league_avg_home,
            "leagueAvgAway": self.league_avg_away,
            "priorGames": self.prior_games,
            "priorGoals": self.prior_goals,
        }
