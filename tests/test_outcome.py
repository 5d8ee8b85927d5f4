"""
Unit tests for the outcome probability engine.
"""

import math

import numpy as np
import pytest
from scipy.stats import poisson

from epl_lab.data.records import Match, TeamStrength
from epl_lab.models.elo import EloRatingModel
from epl_lab.models.goal_strength import GoalStrengthModel
from epl_lab.models.outcome import (
    OutcomeEngine,
    elo_draw_probability,
    poisson_pmf,
    prediction_to_dict,
    score_matrix,
)

AVERAGE = TeamStrength(1.0, 1.0, 1.0, 1.0)


def make_engine(strengths=None, avg_home=1.5, avg_away=1.2, elo=None, max_goals=6):
    goals = GoalStrengthModel()
    goals.strengths = strengths if strengths is not None else {"Arsenal": AVERAGE, "Chelsea": AVERAGE}
    goals.league_avg_home = avg_home
    goals.league_avg_away = avg_away
    return OutcomeEngine(elo or EloRatingModel().fit([]), goals, max_goals=max_goals)


class TestPoissonHelpers:
    """Tests for the Poisson mass function and score grid."""

    def test_pmf_literal_values(self):
        probs = poisson_pmf(1.5, 6)

        assert probs[0] == pytest.approx(math.exp(-1.5))
        assert probs[0] == pytest.approx(0.2231, abs=1e-4)
        assert probs[1] == pytest.approx(0.3347, abs=1e-4)

    def test_pmf_matches_scipy(self):
        probs = poisson_pmf(2.3, 10)
        np.testing.assert_allclose(probs, poisson.pmf(np.arange(11), 2.3), rtol=1e-12)

    def test_pmf_zero_rate(self):
        probs = poisson_pmf(0.0, 3)
        np.testing.assert_array_equal(probs, [1.0, 0.0, 0.0, 0.0])

    def test_score_matrix_shape_and_rows(self):
        grid = score_matrix(1.5, 1.2, max_goals=6)

        assert grid.shape == (7, 7)
        assert grid[2, 1] == pytest.approx(poisson.pmf(2, 1.5) * poisson.pmf(1, 1.2))


class TestPredictPoisson:
    """Tests for Poisson 1X2 probabilities."""

    def test_expected_goals(self):
        dist = make_engine().predict_poisson("Arsenal", "Chelsea")

        assert dist.lambda_home == pytest.approx(1.5)
        assert dist.lambda_away == pytest.approx(1.2)

    def test_lambdas_use_attack_and_defense(self):
        strengths = {
            "Arsenal": TeamStrength(attack_home=1.2, defense_home=0.8, attack_away=1.0, defense_away=1.0),
            "Chelsea": TeamStrength(attack_home=1.0, defense_home=1.0, attack_away=0.9, defense_away=1.1),
        }
        dist = make_engine(strengths).predict_poisson("Arsenal", "Chelsea")

        assert dist.lambda_home == pytest.approx(1.5 * 1.2 * 1.1)
        assert dist.lambda_away == pytest.approx(1.2 * 0.9 * 0.8)

    def test_probabilities_sum_to_one(self, season_matches):
        engine = OutcomeEngine(
            EloRatingModel().fit(season_matches),
            GoalStrengthModel().fit(season_matches)
        )
        for home in ["Arsenal", "Brentford", "Chelsea", "Everton"]:
            for away in ["Arsenal", "Brentford", "Chelsea", "Everton"]:
                if home == away:
                    continue
                dist = engine.predict_poisson(home, away)
                assert abs(dist.total - 1) < 1e-9
                for p in (dist.p_home, dist.p_draw, dist.p_away):
                    assert 0 <= p <= 1

    def test_renormalizes_truncated_grid(self):
        """Truncated mass is spread back over the three outcomes."""
        engine = make_engine(max_goals=6)
        dist = engine.predict_poisson("Arsenal", "Chelsea")

        grid = score_matrix(1.5, 1.2, 6)
        raw_home = np.tril(grid, -1).sum()
        assert grid.sum() < 1
        assert dist.p_home == pytest.approx(raw_home / grid.sum())
        assert dist.p_home > dist.p_away

    def test_most_likely_score(self):
        dist = make_engine().predict_poisson("Arsenal", "Chelsea")
        grid = score_matrix(1.5, 1.2, 6)

        assert (dist.most_likely_score.home, dist.most_likely_score.away) == (1, 1)
        assert dist.most_likely_score.p == pytest.approx(grid.max())

    def test_zero_max_goals_is_all_draw(self):
        dist = make_engine(max_goals=0).predict_poisson("Arsenal", "Chelsea")

        assert dist.p_draw == pytest.approx(1.0)
        assert dist.p_home == 0
        assert str(dist.most_likely_score) == "0-0"

    def test_unknown_team_returns_none(self):
        engine = make_engine()

        assert engine.predict_poisson("Arsenal", "Fulham") is None
        assert engine.predict_poisson("Fulham", "Arsenal") is None

    def test_goalless_away_side_returns_none(self):
        matches = [Match("2025-08-16", "Arsenal", "Chelsea", 1, 0)]
        engine = OutcomeEngine(EloRatingModel().fit(matches), GoalStrengthModel().fit(matches))

        assert engine.goal_model.league_avg_away == 0
        assert engine.predict_lambda("Chelsea", "Arsenal") is None
        assert engine.predict_poisson("Chelsea", "Arsenal") is None
        assert engine.predict_poisson("Arsenal", "Chelsea") is None

    def test_goalless_league_keeps_elo(self):
        matches = [Match("2025-08-16", "Arsenal", "Chelsea", 1, 0)]
        engine = OutcomeEngine(EloRatingModel().fit(matches), GoalStrengthModel().fit(matches))
        prediction = engine.predict_fixture(Match("2025-08-23", "Chelsea", "Arsenal"))
        wire = prediction_to_dict(prediction)

        assert wire["poisson"] is None
        assert all(math.isfinite(wire["elo"][key]) for key in ("pHome", "pDraw", "pAway"))


class TestPredictElo:
    """Tests for Elo 1X2 probabilities."""

    def test_draw_heuristic(self):
        assert elo_draw_probability(0) == pytest.approx(0.28)
        assert elo_draw_probability(-600) == pytest.approx(0.19)
        assert elo_draw_probability(1200) == pytest.approx(0.10)
        assert elo_draw_probability(10000) == 0.0

    def test_even_teams_without_home_advantage(self):
        engine = make_engine(elo=EloRatingModel(home_advantage=0).fit([]))
        dist = engine.predict_elo("Arsenal", "Chelsea")

        assert dist.p_draw == pytest.approx(0.28)
        assert dist.p_home == pytest.approx(0.36)
        assert dist.p_away == pytest.approx(0.36)

    def test_unseen_teams_always_predicted(self):
        dist = make_engine().predict_elo("Fulham", "Wolves")

        assert dist.diff == 60
        assert dist.rating_home == 1500
        assert dist.rating_away == 1500
        assert dist.p_draw == pytest.approx(0.28 - (60 / 1200) * 0.18)
        assert abs(dist.total - 1) < 1e-9
        assert dist.p_home > dist.p_away


class TestPredictUpcoming:
    """Tests for batch prediction of fixtures."""

    def test_upcoming_sorted_and_separate_sources(self, season_matches):
        engine = OutcomeEngine(
            EloRatingModel().fit(season_matches),
            GoalStrengthModel().fit(season_matches)
        )
        predictions = engine.predict_upcoming(season_matches)

        assert len(predictions) == 5
        dates = [p["date"] for p in predictions]
        assert dates == sorted(dates)
        assert predictions[0]["home"] == "Arsenal"
        for p in predictions[:4]:
            assert p["poisson"] is not None
            assert p["elo"].p_home != p["poisson"].p_home

    def test_unknown_team_keeps_elo(self, season_matches):
        engine = OutcomeEngine(
            EloRatingModel().fit(season_matches),
            GoalStrengthModel().fit(season_matches)
        )
        fulham = engine.predict_upcoming(season_matches)[-1]

        assert fulham["away"] == "Fulham"
        assert fulham["poisson"] is None
        assert fulham["elo"].rating_away == 1500

    def test_failing_fixture_is_skipped(self, monkeypatch, season_matches):
        engine = OutcomeEngine(
            EloRatingModel().fit(season_matches),
            GoalStrengthModel().fit(season_matches)
        )
        original = engine.predict_fixture

        def flaky(match):
            if match.away == "Fulham":
                raise ValueError("bad fixture")
            return original(match)

        monkeypatch.setattr(engine, "predict_fixture", flaky)
        predictions = engine.predict_upcoming(season_matches)

        assert len(predictions) == 4
        assert all(p["away"] != "Fulham" for p in predictions)

    def test_poisson_failure_keeps_elo(self, monkeypatch, season_matches):
        engine = OutcomeEngine(
            EloRatingModel().fit(season_matches),
            GoalStrengthModel().fit(season_matches)
        )
        original = engine.predict_poisson

        def flaky(home, away):
            if home == "Everton" and away == "Chelsea":
                raise ValueError("bad strengths")
            return original(home, away)

        monkeypatch.setattr(engine, "predict_poisson", flaky)
        predictions = engine.predict_upcoming(season_matches)

        assert len(predictions) == 5
        failed = [p for p in predictions if p["home"] == "Everton" and p["away"] == "Chelsea"]
        assert len(failed) == 1
        assert failed[0]["poisson"] is None
        assert failed[0]["elo"] is not None
        assert abs(failed[0]["elo"].total - 1) < 1e-9

    def test_undated_fixture_ignored(self):
        engine = make_engine()
        predictions = engine.predict_upcoming([Match(None, "Arsenal", "Chelsea")])

        assert predictions == []

    def test_prediction_to_dict(self):
        engine = make_engine()
        prediction = engine.predict_fixture(Match("2025-09-13", "Arsenal", "Fulham", round=4))
        wire = prediction_to_dict(prediction)

        assert wire["poisson"] is None
        assert set(wire["elo"]) == {"pHome", "pDraw", "pAway", "diff", "Rh", "Ra"}
        assert wire["round"] == 4

        prediction = engine.predict_fixture(Match("2025-09-13", "Arsenal", "Chelsea"))
        wire = prediction_to_dict(prediction)
        assert set(wire["poisson"]) == {
            "lambdaHome", "lambdaAway", "pHome", "pDraw", "pAway", "mostLikelyScore"
        }
        assert set(wire["poisson"]["mostLikelyScore"]) == {"home", "away", "p"}
