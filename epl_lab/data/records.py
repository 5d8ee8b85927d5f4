"""
Plain records exchanged between the EPL Lab models.

Matches and odds quotes arrive as camelCase JSON dictionaries; the
dataclasses here give them a typed, immutable shape inside the package.
"""

import math
from dataclasses import dataclass
from typing import Optional, Tuple

OUTCOMES = ("H", "D", "A")


def normalize_team(name) -> str:
    """Trim surrounding whitespace from a team name."""
    return str(name or "").strip()


def is_finite_number(value) -> bool:
    """True for real, finite numbers; bools and numeric strings do not count."""
    if value is None or isinstance(value, bool):
        return False
    try:
        return math.isfinite(value)
    except TypeError:
        return False


@dataclass(frozen=True)
class Match:
    """A fixture, played or upcoming."""

    date: str
    home: str
    away: str
    home_goals: Optional[float] = None
    away_goals: Optional[float] = None
    round: Optional[object] = None

    @property
    def is_played(self) -> bool:
        return is_finite_number(self.home_goals) and is_finite_number(self.away_goals)

    @property
    def key(self) -> Tuple[str, str, str]:
        return fixture_key(self.date, self.home, self.away)

    @classmethod
    def from_dict(cls, record: dict) -> "Match":
        return cls(
            date=record.get("date"),
            home=normalize_team(record.get("home")),
            away=normalize_team(record.get("away")),
            home_goals=record.get("homeGoals"),
            away_goals=record.get("awayGoals"),
            round=record.get("round"),
        )

    def to_dict(self) -> dict:
        return {
            "date": self.date,
            "home": self.home,
            "away": self.away,
            "homeGoals": self.home_goals,
            "awayGoals": self.away_goals,
            "round": self.round,
        }


def fixture_key(date, home, away) -> Tuple[str, str, str]:
    """Identity of a fixture: date plus normalized team names."""
    return (date, normalize_team(home), normalize_team(away))


@dataclass(frozen=True)
class OddsQuote:
    """Decimal 1X2 odds for a single fixture."""

    date: str
    home: str
    away: str
    H: float
    D: float
    A: float
    book: Optional[str] = None
    market: str = "1x2"

    @property
    def key(self) -> Tuple[str, str, str]:
        return fixture_key(self.date, self.home, self.away)

    def price(self, outcome: str) -> float:
        return getattr(self, outcome)

    def validate(self) -> "OddsQuote":
        """
        Check that every price is a usable decimal price.

        Raises:
            ValueError: If any of H, D, A is not a finite number above 1.0
        """
        for outcome in OUTCOMES:
            odds = self.price(outcome)
            if not is_finite_number(odds) or odds <= 1.0:
                raise ValueError(
                    f"Decimal odds must be > 1.0, got {outcome}={odds!r} "
                    f"for {self.home} vs {self.away} on {self.date}"
                )
        return self

    @classmethod
    def from_dict(cls, record: dict) -> "OddsQuote":
        return cls(
            date=record.get("date"),
            home=normalize_team(record.get("home")),
            away=normalize_team(record.get("away")),
            H=record.get("H"),
            D=record.get("D"),
            A=record.get("A"),
            book=record.get("book"),
            market=record.get("market", "1x2"),
        )


@dataclass(frozen=True)
class TeamStrength:
    """Home/away attack and defense multipliers, around 1.0 for an average side."""

    attack_home: float
    defense_home: float
    attack_away: float
    defense_away: float


@dataclass(frozen=True)
class ScoreLine:
    """A scoreline with its probability."""

    home: int
    away: int
    p: float

    def to_dict(self) -> dict:
        return {"home": self.home, "away": self.away, "p": self.p}

    def __str__(self) -> str:
        return f"{self.home}-{self.away}"


@dataclass(frozen=True)
class OutcomeDistribution:
    """
    Probability of a home win, draw and away win for one fixture.

    Poisson distributions carry the expected goals and the most likely
    scoreline; Elo distributions carry the rating gap and both ratings.
    """

    p_home: float
    p_draw: float
    p_away: float
    lambda_home: Optional[float] = None
    lambda_away: Optional[float] = None
    most_likely_score: Optional[ScoreLine] = None
    diff: Optional[float] = None
    rating_home: Optional[float] = None
    rating_away: Optional[float] = None

    def probability(self, outcome: str) -> float:
        return {"H": self.p_home, "D": self.p_draw, "A": self.p_away}[outcome]

    @property
    def total(self) -> float:
        return self.p_home + self.p_draw + self.p_away

    def top_outcome(self) -> Tuple[str, float]:
        """Most probable side; ties resolve in H, D, A order."""
        return max(
            ((outcome, self.probability(outcome)) for outcome in OUTCOMES),
            key=lambda item: item[1],
        )

    def to_dict(self) -> dict:
        if self.lambda_home is not None:
            return {
                "lambdaHome": self.lambda_home,
                "lambdaAway": self.lambda_away,
                "pHome": self.p_home,
                "pDraw": self.p_draw,
                "pAway": self.p_away,
                "mostLikelyScore": (
                    self.most_likely_score.to_dict() if self.most_likely_score else None
                ),
            }
        return {
            "pHome": self.p_home,
            "pDraw": self.p_draw,
            "pAway": self.p_away,
            "diff": self.diff,
            "Rh": self.rating_home,
            "Ra": self.rating_away,
        }
