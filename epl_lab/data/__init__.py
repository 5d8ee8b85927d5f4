"""Records and file I/O for EPL Lab."""

from .records import Match, OddsQuote, OutcomeDistribution, TeamStrength
from .store import load_matches, load_odds, write_json, copy_site_data

__all__ = [
    "Match", "OddsQuote", "OutcomeDistribution", "TeamStrength",
    "load_matches", "load_odds", "write_json", "copy_site_data",
]
