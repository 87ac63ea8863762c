"""CLI entrypoint: normalize raw scraped games and write per-season files."""

from __future__ import annotations

import argparse
import json
import logging
from dataclasses import dataclass
from pathlib import Path

from jeopardy_stats.ingestion.classifier import partition_games
from jeopardy_stats.ingestion.normalizer import normalize_game
from jeopardy_stats.ingestion.schema import Game
from jeopardy_stats.settings import get_settings

logger = logging.getLogger(__name__)


@dataclass
class RunResult:
    total_files: int = 0
    normalized: int = 0
    errors: int = 0
    buckets: int = 0


def _parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Normalize raw game JSON files and write classified season files.",
    )
    parser.add_argument(
        "--input",
        type=str,
        required=True,
        help="Directory containing raw scraped game *.json files.",
    )
    parser.add_argument(
        "--output",
        type=str,
        default=None,
        help="Directory for season files (default: GAME_DATA_DIR).",
    )
    parser.add_argument(
        "--start-season",
        type=int,
        default=1,
        help="Season assigned to regular games before the first season marker.",
    )
    return parser.parse_args()


def load_raw_games(input_dir: Path, result: RunResult) -> list[Game]:
    games: list[Game] = []
    for path in sorted(input_dir.glob("*.json")):
        result.total_files += 1
        try:
            raw = json.loads(path.read_text(encoding="utf-8"))
            if not isinstance(raw, dict):
                raise ValueError("top-level JSON value is not an object")
            games.append(normalize_game(raw))
            result.normalized += 1
        except (OSError, ValueError) as exc:
            result.errors += 1
            logger.error("Failed normalizing %s: %s", path.name, exc)
        except Exception:
            result.errors += 1
            logger.exception("Unexpected error normalizing %s", path.name)
    # Season markers only make sense in air-date order.
    games.sort(key=lambda game: game.date or "")
    return games


def write_buckets(buckets: dict[str, list[Game]], output_dir: Path) -> None:
    output_dir.mkdir(parents=True, exist_ok=True)
    for key in sorted(buckets):
        games = buckets[key]
        payload = [game.model_dump(mode="json", by_alias=True) for game in games]
        (output_dir / key).write_text(
            json.dumps(payload, ensure_ascii=False, separators=(",", ":")),
            encoding="utf-8",
        )
        logger.info("%s: %s games", key, len(games))


def run(input_dir: Path, output_dir: Path, start_season: int = 1) -> RunResult:
    result = RunResult()
    games = load_raw_games(input_dir, result)
    buckets = partition_games(games, start_season=start_season)
    write_buckets(buckets, output_dir)
    result.buckets = len(buckets)
    return result


def main() -> None:
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )

    args = _parse_args()
    input_dir = Path(args.input)
    if not input_dir.is_dir():
        raise SystemExit(f"Input directory not found: {input_dir}")
    output_dir = Path(args.output or get_settings().game_data_dir)

    logging.info("Starting normalization input=%s output=%s", input_dir, output_dir)
    result = run(input_dir, output_dir, args.start_season)
    logging.info(
        "Done: files=%s normalized=%s errors=%s buckets=%s",
        result.total_files,
        result.normalized,
        result.errors,
        result.buckets,
    )


if __name__ == "__main__":
    main()
