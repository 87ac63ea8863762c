"""Daily Double wagers as a share of the player's score going into the clue."""

from __future__ import annotations

import math
import statistics
from typing import Iterable

from jeopardy_stats.analysis.schema import AnalysisResult, pct
from jeopardy_stats.ingestion.schema import Clue, Game

WAGER_BANDS = (
    (0, 25, "0-25%"),
    (25, 50, "25-50%"),
    (50, 75, "50-75%"),
    (75, 100, "75-100%"),
    (100, math.inf, "100%+ (True DD)"),
)


def daily_double_wager_pct(clue: Clue) -> float | None:
    """Wager / pre-clue score * 100, or None when it cannot be recovered.

    The pre-clue score is backed out of the running score snapshot: the
    wager (stored as the clue value) was added on a correct response and
    subtracted on a miss.
    """

    if not clue.is_daily_double:
        return None
    if clue.correct_contestants:
        player, was_correct = clue.correct_contestants[0], True
    elif clue.incorrect_contestants:
        player, was_correct = clue.incorrect_contestants[0], False
    else:
        return None

    running = next((ps.score for ps in clue.running_scores if ps.player == player), None)
    if running is None:
        return None
    before = running - clue.value if was_correct else running + clue.value
    if before <= 0:
        return None
    return clue.value / before * 100


def _segment(label: str, values: list[float], total: int) -> dict:
    return {
        "segment": label,
        "count": len(values),
        "percentage": pct(len(values), total),
        "avgBetPct": f"{statistics.mean(values):.1f}" if values else "0.0",
    }


def analyze_daily_double_wagers(games: Iterable[Game]) -> AnalysisResult:
    jeopardy: list[float] = []
    double_jeopardy: list[float] = []
    total_games = 0

    for game in games:
        found = False
        for round_, bucket in (
            (game.rounds.jeopardy, jeopardy),
            (game.rounds.double_jeopardy, double_jeopardy),
        ):
            if round_ is None:
                continue
            for clue in round_.clues:
                share = daily_double_wager_pct(clue)
                if share is not None:
                    bucket.append(share)
                    found = True
        if found:
            total_games += 1

    overall = jeopardy + double_jeopardy
    rows = [
        _segment("Overall", overall, len(overall)),
        _segment("Jeopardy round", jeopardy, len(overall)),
        _segment("Double Jeopardy round", double_jeopardy, len(overall)),
    ]
    for low, high, label in WAGER_BANDS:
        rows.append(_segment(label, [v for v in overall if low <= v < high], len(overall)))

    return AnalysisResult(
        query="dd-wagers",
        description="Daily Double wager as % of the player's score before the clue",
        total_games=total_games,
        results=rows,
    )
