"""
Expected value of 1X2 bets for EPL Lab.

Pairs model probabilities with bookmaker decimal odds to get implied
probabilities, the bookmaker margin and per-outcome expected value.
"""

import logging
from typing import Dict, Iterable, List, Optional, Tuple

from ..data.records import OUTCOMES, OddsQuote, OutcomeDistribution, fixture_key

logger = logging.getLogger(__name__)


def implied_probabilities(quote: OddsQuote) -> Dict[str, float]:
    """
    Margin-free implied probabilities from decimal odds.

    Args:
        quote: Odds quote with H, D and A prices

    Returns:
        Dictionary with normalized H, D, A probabilities and the overround
        (sum of the raw reciprocals)
    """
    raw = {outcome: 1 / quote.price(outcome) for outcome in OUTCOMES}
    overround = raw["H"] + raw["D"] + raw["A"]

    implied = {outcome: raw[outcome] / overround for outcome in OUTCOMES}
    implied["overround"] = overround

    return implied


def calculate_expected_value(model_prob: float, odds: float) -> float:
    """
    Expected profit per unit staked.

    Args:
        model_prob: Probability of winning
        odds: Decimal odds

    Returns:
        Expected value (positive = profitable)
    """
    return model_prob * odds - 1


class ValueCalculator:
    """
    Builds ranked EV rows from predictions and odds quotes.

    Fixtures without a model distribution or without a matching quote are
    left out of the output; that is filtering, not an error.
    """

    def __init__(
        self,
        market: str = "1x2",
        source: str = "poisson",
        max_rows: Optional[int] = 50
    ):
        """
        Initialize the value calculator.

        Args:
            market: Odds market to use; quotes for other markets are ignored
            source: Which prediction distribution to price ("poisson" or "elo")
            max_rows: Keep only this many rows after sorting (None keeps all)
        """
        self.market = market
        self.source = source
        self.max_rows = max_rows

    def index_quotes(self, quotes: Iterable[OddsQuote]) -> Dict[Tuple[str, str, str], OddsQuote]:
        """Map fixture key to quote; a later quote for the same fixture wins."""
        index = {}
        for quote in quotes:
            if quote.market != self.market:
                continue
            index[quote.key] = quote
        return index

    def evaluate(self, fixture: dict, distribution: OutcomeDistribution, quote: OddsQuote) -> dict:
        """
        Price one fixture.

        Args:
            fixture: Prediction dict with date, round, home and away
            distribution: Model probabilities for the fixture
            quote: Matching 1X2 odds

        Returns:
            EV row with model, odds and picks sections
        """
        implied = implied_probabilities(quote)

        candidates = [
            {
                "pick": outcome,
                "ev": calculate_expected_value(distribution.probability(outcome), quote.price(outcome)),
                "p": distribution.probability(outcome),
                "odds": quote.price(outcome),
                "imp": implied[outcome],
            }
            for outcome in OUTCOMES
        ]
        # max() keeps the first of equal values, so ties go H, D, A
        best_ev = max(candidates, key=lambda c: c["ev"])
        model_top, _ = distribution.top_outcome()

        score = distribution.most_likely_score
        return {
            "date": fixture["date"],
            "round": fixture.get("round"),
            "home": fixture["home"],
            "away": fixture["away"],
            "model": {
                "pH": distribution.p_home,
                "pD": distribution.p_draw,
                "pA": distribution.p_away,
                "xg": [distribution.lambda_home, distribution.lambda_away],
                "ml": score.to_dict() if score is not None else None,
            },
            "odds": {
                "book": quote.book,
                "H": quote.H,
                "D": quote.D,
                "A": quote.A,
                "implied": {outcome: implied[outcome] for outcome in OUTCOMES},
                "overround": implied["overround"],
            },
            "picks": {
                "modelTop": model_top,
                "bestEV": best_ev,
            },
        }

    def build_rows(self, predictions: Iterable[dict], quotes: Iterable[OddsQuote]) -> List[dict]:
        """
        EV rows for every priced fixture, best EV first.

        Args:
            predictions: Prediction dicts from OutcomeEngine
            quotes: Odds quotes, any market

        Returns:
            List of EV rows sorted descending by bestEV.ev
        """
        index = self.index_quotes(quotes)

        rows = []
        for fixture in predictions:
            distribution = fixture.get(self.source)
            if distribution is None:
                continue

            quote = index.get(fixture_key(fixture["date"], fixture["home"], fixture["away"]))
            if quote is None:
                continue

            rows.append(self.evaluate(fixture, distribution, quote))

        rows.sort(key=lambda row: row["picks"]["bestEV"]["ev"], reverse=True)

        n_value = sum(1 for row in rows if row["picks"]["bestEV"]["ev"] > 0)
        logger.info(f"Priced {len(rows)} fixtures, {n_value} with positive EV")

        if self.max_rows is not None:
            rows = rows[:self.max_rows]

        return rows
