#!/usr/bin/env python3
"""
EPL Lab Prediction Pipeline

Fits Elo and Poisson goal models on the season's results, predicts the
upcoming fixtures, prices them against 1X2 odds and builds combo
recommendations. Informational only, not betting advice.
"""

import argparse
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import List, Optional

import yaml

from epl_lab.betting.combos import ComboSelector
from epl_lab.betting.value import ValueCalculator
from epl_lab.data.records import Match, OddsQuote
from epl_lab.data.store import copy_site_data, load_matches, load_odds, write_json
from epl_lab.models.elo import EloRatingModel
from epl_lab.models.goal_strength import GoalStrengthModel
from epl_lab.models.outcome import OutcomeEngine, prediction_to_dict
from epl_lab.scraping.openfootball import OpenFootballClient

logger = logging.getLogger(__name__)


def load_config(config_path: str = "config/config.yaml") -> dict:
    """Load configuration from YAML file."""
    with open(config_path) as f:
        return yaml.safe_load(f)


def fetch_fixtures(config: dict, generated_at: str) -> Path:
    """Download the season from OpenFootball and write the matches file."""
    source = config["source"]
    client = OpenFootballClient(
        url=source["url"],
        timeout=source["timeout"],
        retry_attempts=source["retry_attempts"]
    )
    season = client.fetch_season(updated_at=generated_at)
    return write_json(Path(config["data"]["matches"]), season)


def fit_models(matches: List[Match], config: dict) -> OutcomeEngine:
    """Fit both models on played matches and wrap them in an engine."""
    elo_config = config["elo"]
    poisson_config = config["poisson"]

    elo = EloRatingModel(
        k_factor=elo_config["k_factor"],
        home_advantage=elo_config["home_advantage"],
        base_rating=elo_config["base_rating"]
    ).fit(matches)

    goals = GoalStrengthModel(
        prior_games=poisson_config["prior_games"],
        prior_goals=poisson_config["prior_goals"],
        default_avg_home=poisson_config["default_avg_home"],
        default_avg_away=poisson_config["default_avg_away"]
    ).fit(matches)

    top = elo.get_team_ratings().head(5)
    for _, row in top.iterrows():
        logger.info(f"  {row['team']:25} {row['rating']:.1f}")

    return OutcomeEngine(elo, goals, max_goals=poisson_config["max_goals"])


def build_predictions(engine: OutcomeEngine, predictions: List[dict], season_meta: dict, generated_at: str) -> dict:
    return {
        "season": season_meta.get("season"),
        "updatedAt": generated_at,
        "source": season_meta.get("source"),
        "model": {
            "elo": engine.elo_model.params(),
            "poisson": {
                "leagueAvgHome": engine.goal_model.league_avg_home,
                "leagueAvgAway": engine.goal_model.league_avg_away,
                "maxGoals": engine.max_goals,
            },
        },
        "upcoming": [prediction_to_dict(p) for p in predictions],
    }


def build_ev(
    predictions: List[dict],
    quotes: List[OddsQuote],
    odds_meta: dict,
    config: dict,
    generated_at: str
) -> dict:
    value_config = config["value"]
    calculator = ValueCalculator(
        market=str(value_config["market"]),
        source=value_config["source"],
        max_rows=value_config.get("max_rows")
    )
    rows = calculator.build_rows(predictions, quotes)

    return {
        "meta": {
            "generatedAt": generated_at,
            "oddsSource": odds_meta.get("source", "unknown"),
            "oddsUpdatedAt": odds_meta.get("updatedAt"),
            "note": "Informational only. EV computed from model probabilities and decimal odds.",
        },
        "rows": rows,
    }


def build_toto(
    predictions: List[dict],
    config: dict,
    generated_at: str,
    base_date: Optional[str] = None,
    window_days: Optional[int] = None
) -> dict:
    combo_config = config["combos"]
    window_days = window_days if window_days is not None else combo_config["window_days"]

    if base_date is None and predictions:
        base_date = predictions[0]["date"][:10]

    selector = ComboSelector(
        pool_size=combo_config["pool_size"],
        exhaustive_max=combo_config["exhaustive_max"]
    )
    picks = selector.top_picks(predictions, base_date=base_date, window_days=window_days)

    return {
        "meta": {
            "baseDate": base_date,
            "windowDays": window_days,
            "generatedAt": generated_at,
            "note": "Informational only. Joint prob is a naive product (independence assumption).",
        },
        "topPicks": picks[:combo_config["top_picks"]],
        "combos": selector.recommend(picks, combo_config["sizes"]),
    }


def run_pipeline(
    config: dict,
    generated_at: Optional[str] = None,
    fetch: bool = False,
    base_date: Optional[str] = None,
    window_days: Optional[int] = None,
    copy_site: bool = True
) -> dict:
    """
    Run every stage and write the output files.

    Args:
        config: Loaded configuration
        generated_at: Timestamp written into outputs (default: now, UTC)
        fetch: Download fresh fixtures before modelling
        base_date: First day of the combo window
        window_days: Combo window length, overrides the config
        copy_site: Copy outputs into the site data directory

    Returns:
        Dictionary of the three output payloads
    """
    generated_at = generated_at or datetime.now(timezone.utc).isoformat()
    paths = config["data"]

    if fetch:
        logger.info("Fetching fixtures...")
        fetch_fixtures(config, generated_at)

    season_meta, matches = load_matches(Path(paths["matches"]))
    odds_meta, quotes = load_odds(Path(paths["odds"]))

    logger.info("Fitting models...")
    engine = fit_models(matches, config)
    predictions = engine.predict_upcoming(matches)

    outputs = {
        "predictions": build_predictions(engine, predictions, season_meta, generated_at),
        "ev": build_ev(predictions, quotes, odds_meta, config, generated_at),
        "toto": build_toto(predictions, config, generated_at, base_date, window_days),
    }

    for name, payload in outputs.items():
        path = write_json(Path(paths[name]), payload)
        logger.info(f"Wrote {path}")

    if copy_site:
        copy_site_data(Path(paths["dir"]), Path(paths["site_dir"]))

    return outputs


def main(argv=None):
    """Main pipeline execution."""
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )

    parser = argparse.ArgumentParser(description="Build EPL Lab predictions, EV rows and combos")
    parser.add_argument(
        "--config",
        type=str,
        default="config/config.yaml",
        help="Path to configuration file (default: config/config.yaml)"
    )
    parser.add_argument(
        "--days",
        type=int,
        help="Combo window length in days (default: from config)"
    )
    parser.add_argument(
        "--base-date",
        type=str,
        help="First day of the combo window, YYYY-MM-DD (default: first upcoming fixture)"
    )
    parser.add_argument(
        "--fetch",
        action="store_true",
        help="Download fresh fixtures from OpenFootball first"
    )
    parser.add_argument(
        "--no-site",
        action="store_true",
        help="Do not copy outputs into the site directory"
    )

    args = parser.parse_args(argv)

    config = load_config(args.config)

    outputs = run_pipeline(
        config,
        fetch=args.fetch,
        base_date=args.base_date,
        window_days=args.days,
        copy_site=not args.no_site
    )

    logger.info(
        f"Pipeline complete: {len(outputs['predictions']['upcoming'])} predictions, "
        f"{len(outputs['ev']['rows'])} EV rows, {len(outputs['toto']['combos'])} combos"
    )

    return outputs


if __name__ == "__main__":
    main()
