"""
JSON file I/O for EPL Lab.

Reads the fixture and odds files, writes generated outputs and copies
them into the static site directory.
"""

import json
import logging
import shutil
from pathlib import Path
from typing import List, Tuple

from .records import Match, OddsQuote

logger = logging.getLogger(__name__)

SITE_FILES_REQUIRED = ["epl.json", "predictions.json"]
SITE_FILES_OPTIONAL = ["toto.json", "odds.json", "ev.json"]


def read_json(path: Path) -> dict:
    with open(path, encoding="utf-8") as f:
        return json.load(f)


def write_json(path: Path, payload: dict) -> Path:
    """
    Write a JSON document, creating the parent directory if needed.

    Args:
        path: Output file
        payload: JSON-serializable data

    Returns:
        Path written
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    with open(path, "w", encoding="utf-8") as f:
        json.dump(payload, f, indent=2)

    return path


def load_matches(path: Path) -> Tuple[dict, List[Match]]:
    """
    Load historical and upcoming matches.

    Args:
        path: JSON file with a top-level "matches" list

    Returns:
        Tuple of (file metadata without the matches, list of Match).
        A missing file gives an empty dataset.
    """
    path = Path(path)
    if not path.exists():
        logger.warning(f"Matches file not found: {path}")
        return {}, []

    data = read_json(path)
    matches = [Match.from_dict(m) for m in data.get("matches") or []]
    meta = {k: v for k, v in data.items() if k != "matches"}

    logger.info(f"Loaded {len(matches)} matches from {path}")
    return meta, matches


def load_odds(path: Path) -> Tuple[dict, List[OddsQuote]]:
    """
    Load odds quotes.

    Quotes with unusable prices are logged and skipped.

    Args:
        path: JSON file with "meta" and "odds" keys

    Returns:
        Tuple of (meta dict, list of OddsQuote). A missing file gives an
        empty dataset.
    """
    path = Path(path)
    if not path.exists():
        logger.warning(f"Odds file not found: {path}")
        return {"source": "missing"}, []

    data = read_json(path)

    quotes = []
    for record in data.get("odds") or []:
        try:
            quotes.append(OddsQuote.from_dict(record).validate())
        except ValueError as e:
            logger.warning(f"Skipping odds quote: {e}")

    logger.info(f"Loaded {len(quotes)} odds quotes from {path}")
    return data.get("meta") or {}, quotes


def copy_site_data(data_dir: Path, site_dir: Path) -> List[str]:
    """
    Copy generated files into the site data directory.

    Args:
        data_dir: Directory holding the generated JSON files
        site_dir: Destination directory, created if missing

    Returns:
        Names of the files copied

    Raises:
        FileNotFoundError: If a required file is missing
    """
    data_dir = Path(data_dir)
    site_dir = Path(site_dir)
    site_dir.mkdir(parents=True, exist_ok=True)

    copied = []
    for name in SITE_FILES_REQUIRED + SITE_FILES_OPTIONAL:
        src = data_dir / name
        if not src.exists():
            if name in SITE_FILES_REQUIRED:
                raise FileNotFoundError(f"Required data file missing: {src}")
            continue
        shutil.copyfile(src, site_dir / name)
        copied.append(name)

    logger.info(f"Copied {copied} to {site_dir}")
    return copied
