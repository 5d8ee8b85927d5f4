"""Shared fixtures for the EPL Lab tests."""

import pytest

from epl_lab.data.records import Match


@pytest.fixture
def season_records():
    """A tiny four-team season: six results and five upcoming fixtures."""
    return [
        {"date": "2025-08-16", "home": "Arsenal", "away": "Brentford", "homeGoals": 2, "awayGoals": 0, "round": 1},
        {"date": "2025-08-16", "home": "Chelsea", "away": "Everton", "homeGoals": 1, "awayGoals": 1, "round": 1},
        {"date": "2025-08-23", "home": "Brentford", "away": "Chelsea", "homeGoals": 1, "awayGoals": 3, "round": 2},
        {"date": "2025-08-23", "home": "Everton", "away": "Arsenal", "homeGoals": 0, "awayGoals": 2, "round": 2},
        {"date": "2025-08-30", "home": "Arsenal", "away": "Chelsea", "homeGoals": 1, "awayGoals": 1, "round": 3},
        {"date": "2025-08-30", "home": "Brentford", "away": "Everton", "homeGoals": 2, "awayGoals": 1, "round": 3},
        {"date": "2025-09-13", "home": "Arsenal", "away": "Everton", "homeGoals": None, "awayGoals": None, "round": 4},
        {"date": "2025-09-13", "home": "Chelsea", "away": "Brentford", "homeGoals": None, "awayGoals": None, "round": 4},
        {"date": "2025-09-20", "home": "Everton", "away": "Chelsea", "homeGoals": None, "awayGoals": None, "round": 5},
        {"date": "2025-09-20", "home": "Brentford", "away": "Arsenal", "homeGoals": None, "awayGoals": None, "round": 5},
        {"date": "2025-09-27", "home": "Arsenal", "away": "Fulham", "homeGoals": None, "awayGoals": None, "round": 6},
    ]


@pytest.fixture
def season_matches(season_records):
    return [Match.from_dict(r) for r in season_records]
