"""
Writing game data to disk and caching game options for replays.
"""

import json
from datetime import datetime
from pathlib import Path

from arenaplay.constants import CACHED_GAME_OPTIONS_FILE
from arenaplay.game import MatchResult


def date_stamp(now: datetime = None) -> str:
    """Prefix shared by every game file of one run."""
    now = now or datetime.now()
    return now.strftime("%Y-%m-%d-%H%M%S")


def write_game_data(outdir: Path, stamp: str, index: int, result: MatchResult) -> Path:
    """Write the raw result body to <outdir>/<stamp>-<index>.json."""
    outdir.mkdir(parents=True, exist_ok=True)
    path = outdir / f"{stamp}-{index}.json"
    path.write_text(json.dumps(result.raw))
    return path


def write_cached_game_options(outdir: Path, result: MatchResult) -> Path:
    """Remember the last game's conditions so --replay can play them again."""
    outdir.mkdir(parents=True, exist_ok=True)
    path = outdir / CACHED_GAME_OPTIONS_FILE
    path.write_text(result.referee_input)
    return path


def load_cached_game_options(outdir: Path) -> str:
    """Read back the cached game options. Raises OSError if no game was cached yet."""
    return (outdir / CACHED_GAME_OPTIONS_FILE).read_text().strip()
