"""
Fixture and result client for OpenFootball.

Downloads a season file from the public football.json dataset and
converts it into EPL Lab match records.
"""

import logging
import re
from datetime import datetime, timezone
from typing import List, Optional

import requests

from ..data.records import is_finite_number

logger = logging.getLogger(__name__)

DEFAULT_URL = "https://raw.githubusercontent.com/openfootball/football.json/master/2025-26/en.1.json"

# OpenFootball uses e.g. "Liverpool FC", "AFC Bournemouth"
TEAM_AFFIXES = [
    re.compile(r"^AFC\s+", re.IGNORECASE),
    re.compile(r"^FC\s+", re.IGNORECASE),
    re.compile(r"\s+FC$", re.IGNORECASE),
    re.compile(r"\s+AFC$", re.IGNORECASE),
    re.compile(r"\s+CF$", re.IGNORECASE),
    re.compile(r"\s+SC$", re.IGNORECASE),
]


def normalize_team_name(name: str) -> str:
    """Strip common club prefixes and suffixes."""
    name = str(name or "").strip()
    for pattern in TEAM_AFFIXES:
        name = pattern.sub("", name)
    return name.strip()


def to_match_record(match: dict) -> dict:
    """
    Convert an OpenFootball match into a match record.

    Goals are kept only when a full-time score with two numbers exists.
    """
    full_time = (match.get("score") or {}).get("ft")
    has_score = (
        isinstance(full_time, list)
        and len(full_time) == 2
        and all(is_finite_number(goals) for goals in full_time)
    )

    return {
        "date": match.get("date"),
        "home": normalize_team_name(match.get("team1")),
        "away": normalize_team_name(match.get("team2")),
        "homeGoals": full_time[0] if has_score else None,
        "awayGoals": full_time[1] if has_score else None,
        "round": match.get("round"),
    }


class OpenFootballClient:
    """Client for one OpenFootball season file."""

    USER_AGENT = "epl-lab"

    def __init__(
        self,
        url: str = DEFAULT_URL,
        timeout: float = 30,
        retry_attempts: int = 3
    ):
        """
        Initialize the client.

        Args:
            url: Season JSON URL
            timeout: Request timeout in seconds
            retry_attempts: Attempts before giving up
        """
        self.url = url
        self.timeout = timeout
        self.retry_attempts = retry_attempts

    def _fetch_json(self) -> Optional[dict]:
        for attempt in range(self.retry_attempts):
            try:
                response = requests.get(
                    self.url,
                    timeout=self.timeout,
                    headers={"User-Agent": self.USER_AGENT}
                )
                response.raise_for_status()
                return response.json()

            except requests.RequestException as e:
                logger.warning(f"Attempt {attempt + 1} failed for {self.url}: {e}")
                continue

        logger.error(f"Failed to fetch {self.url} after {self.retry_attempts} attempts")
        return None

    def fetch_season(self, updated_at: Optional[str] = None) -> dict:
        """
        Download the season and convert it.

        Args:
            updated_at: Timestamp to stamp on the output (default: now, UTC)

        Returns:
            Dictionary with season, updatedAt, source and matches

        Raises:
            RuntimeError: If the file could not be fetched
        """
        source = self._fetch_json()
        if source is None:
            raise RuntimeError(f"Could not fetch fixtures from {self.url}")

        matches: List[dict] = [to_match_record(m) for m in source.get("matches") or []]

        logger.info(f"Fetched {len(matches)} matches from {self.url}")

        return {
            "season": source.get("name") or "EPL",
            "updatedAt": updated_at or datetime.now(timezone.utc).isoformat(),
            "source": self.url,
            "matches": matches,
        }
