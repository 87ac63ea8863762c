"""Read-only access to classified season files in GAME_DATA_DIR."""

from __future__ import annotations

import json
import logging
import re
from pathlib import Path

from pydantic import ValidationError

from jeopardy_stats.ingestion.classifier import season_key
from jeopardy_stats.ingestion.schema import Game
from jeopardy_stats.settings import get_settings

logger = logging.getLogger(__name__)

_SEASON_FILE = re.compile(r"^season-(\d+)$")


class SeasonStore:
    """Lazily loads season files and caches them for the process lifetime.

    Cached tuples are never invalidated; edits to the files on disk are only
    picked up by a new store.
    """

    def __init__(self, data_dir: str | Path) -> None:
        self.data_dir = Path(data_dir)
        self._cache: dict[int, tuple[Game, ...]] = {}

    def load_season(self, season: int) -> tuple[Game, ...]:
        cached = self._cache.get(season)
        if cached is not None:
            return cached

        path = self.data_dir / season_key(season)
        if not path.exists():
            return ()

        try:
            raw = json.loads(path.read_text(encoding="utf-8"))
            if not isinstance(raw, list):
                raise ValueError("season file must hold a JSON array")
            games = tuple(Game.model_validate(item) for item in raw)
        except (OSError, ValueError, ValidationError) as exc:
            logger.error("Error loading %s: %s", path.name, exc)
            return ()

        self._cache[season] = games
        logger.info("Loaded %s games from %s", len(games), path.name)
        return games

    def load_range(self, start_season: int, end_season: int) -> list[Game]:
        available = set(self.available_seasons())
        games: list[Game] = []
        for season in range(start_season, end_season + 1):
            if season in available:
                games.extend(self.load_season(season))
        return games

    def available_seasons(self) -> list[int]:
        try:
            names = [path.name for path in self.data_dir.iterdir()]
        except OSError as exc:
            logger.error("Error reading game data directory %s: %s", self.data_dir, exc)
            return []
        seasons = []
        for name in names:
            match = _SEASON_FILE.match(name)
            if match:
                seasons.append(int(match.group(1)))
        return sorted(seasons)


_STORE: SeasonStore | None = None


def get_season_store() -> SeasonStore:
    global _STORE
    if _STORE is None:
        _STORE = SeasonStore(get_settings().game_data_dir)
    return _STORE
