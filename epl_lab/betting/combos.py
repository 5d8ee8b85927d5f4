"""
Combination ("combo") selection for EPL Lab.

Picks the single most likely side of each fixture and searches for the
set of k fixtures with the highest joint probability. Joint probability
is a plain product, i.e. fixtures are treated as independent.
"""

import logging
from datetime import date, timedelta
from itertools import combinations
from typing import Dict, Iterable, List, Optional, Sequence

import numpy as np

logger = logging.getLogger(__name__)

DEFAULT_SIZES = (2, 3, 4, 5, 6, 7, 8, 9, 10)


def _in_window(fixture_date: str, start: Optional[date], end: Optional[date]) -> bool:
    if start is None:
        return True
    try:
        day = date.fromisoformat(str(fixture_date)[:10])
    except ValueError:
        logger.warning(f"Unreadable fixture date {fixture_date!r}, leaving it out of the window")
        return False
    return start <= day and (end is None or day < end)


class ComboSelector:
    """
    Finds the k-subset of picks with the largest product of probabilities.

    Searches exhaustively up to `exhaustive_max` legs. Above that it takes
    the top-k picks by individual probability, which is a greedy shortcut
    and not guaranteed optimal in general.
    """

    def __init__(self, pool_size: int = 12, exhaustive_max: int = 6):
        """
        Initialize the selector.

        Args:
            pool_size: Only the best `pool_size` picks are considered
            exhaustive_max: Largest k searched exhaustively
        """
        self.pool_size = pool_size
        self.exhaustive_max = exhaustive_max

    def top_picks(
        self,
        predictions: Iterable[dict],
        base_date: Optional[str] = None,
        window_days: Optional[int] = None
    ) -> List[dict]:
        """
        One pick per fixture, most likely first.

        Args:
            predictions: Prediction dicts from OutcomeEngine
            base_date: ISO date opening the window (None disables the window)
            window_days: Window length in days

        Returns:
            Pick dicts sorted by probability, descending
        """
        start = date.fromisoformat(base_date) if base_date else None
        end = start + timedelta(days=window_days) if start and window_days is not None else None

        picks = []
        for fixture in predictions:
            dist = fixture.get("poisson")
            if dist is None or not _in_window(fixture["date"], start, end):
                continue

            side, prob = dist.top_outcome()
            picks.append({
                "date": fixture["date"],
                "round": fixture.get("round"),
                "home": fixture["home"],
                "away": fixture["away"],
                "match": f"{fixture['home']} vs {fixture['away']}",
                "pick": side,
                "prob": prob,
                "xg": [dist.lambda_home, dist.lambda_away],
                "ml": str(dist.most_likely_score) if dist.most_likely_score else "-",
            })

        picks.sort(key=lambda p: p["prob"], reverse=True)
        return picks

    def best_combo(self, picks: Sequence[dict], k: int) -> Optional[dict]:
        """
        Best k-leg combination from the head of `picks`.

        Args:
            picks: Pick dicts sorted by probability, descending
            k: Number of legs

        Returns:
            Dictionary with jointProb and games, or None when the pool
            holds fewer than k picks
        """
        pool = list(picks[:self.pool_size])
        if k < 1 or len(pool) < k:
            return None

        probs = np.array([p["prob"] for p in pool], dtype=float)

        if k > self.exhaustive_max:
            chosen = tuple(range(k))
            best_prob = float(np.prod(probs[:k]))
        else:
            chosen = None
            best_prob = None
            # combinations() yields index tuples in lexicographic order
            for indices in combinations(range(len(pool)), k):
                joint = float(np.prod(probs[list(indices)]))
                if best_prob is None or joint > best_prob:
                    chosen, best_prob = indices, joint

        return {"jointProb": best_prob, "games": [pool[i] for i in chosen]}

    def recommend(self, picks: Sequence[dict], sizes: Iterable[int] = DEFAULT_SIZES) -> Dict[str, dict]:
        """Best combo for each size that the pool can fill."""
        combos = {}
        for k in sizes:
            combo = self.best_combo(picks, k)
            if combo is not None:
                combos[str(k)] = combo

        logger.info(f"Built combos for sizes {list(combos)} from {len(picks)} picks")

        return combos
