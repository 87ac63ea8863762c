"""Run a canned analysis over local season files and print it as a table."""

from __future__ import annotations

import argparse
import logging

from jeopardy_stats.analysis.registry import ANALYZERS, run_query
from jeopardy_stats.analysis.schema import AnalysisResult
from jeopardy_stats.seasons import SeasonStore
from jeopardy_stats.settings import get_settings


def _parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Run a Jeopardy! analysis over a season range.",
    )
    parser.add_argument(
        "query",
        nargs="?",
        help="Query id (omit to list available analyses).",
    )
    parser.add_argument("start_season", nargs="?", type=int, default=1)
    parser.add_argument("end_season", nargs="?", type=int, default=99)
    parser.add_argument(
        "--data-dir",
        type=str,
        default=None,
        help="Directory holding season-NN files (default: GAME_DATA_DIR).",
    )
    return parser.parse_args()


def format_table(result: AnalysisResult) -> str:
    lines = [result.description, f"Games analyzed: {result.total_games}", ""]
    if not result.results:
        return "\n".join(lines + ["(no rows)"])

    columns = list(result.results[0].keys())
    widths = {
        column: max(len(column), *(len(str(row.get(column, ""))) for row in result.results))
        for column in columns
    }
    lines.append(" | ".join(column.ljust(widths[column]) for column in columns))
    lines.append("-+-".join("-" * widths[column] for column in columns))
    for row in result.results:
        lines.append(" | ".join(str(row.get(column, "")).ljust(widths[column]) for column in columns))
    return "\n".join(lines)


def main() -> None:
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )
    args = _parse_args()

    if not args.query:
        print("Available analyses:\n")
        for query_id, analyzer in ANALYZERS.items():
            print(f"  {query_id.ljust(26)} - {analyzer.description}")
        return

    if args.query not in ANALYZERS:
        supported = ", ".join(sorted(ANALYZERS))
        raise SystemExit(f"Unknown analysis: {args.query}. Supported: {supported}")

    store = SeasonStore(args.data_dir or get_settings().game_data_dir)
    games = store.load_range(args.start_season, args.end_season)
    if not games:
        raise SystemExit(
            f"No games found for seasons {args.start_season}-{args.end_season} in {store.data_dir}"
        )
    logging.info(
        "Loaded %s games for seasons %s-%s",
        len(games),
        args.start_season,
        args.end_season,
    )

    result = run_query(args.query, games)
    print(format_table(result))


if __name__ == "__main__":
    main()
