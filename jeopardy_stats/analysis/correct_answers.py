from __future__ import annotations

from typing import Iterable

from jeopardy_stats.analysis.helpers import count_correct_answers, main_round_clues, sort_scores
from jeopardy_stats.analysis.schema import AnalysisResult, avg
from jeopardy_stats.ingestion.schema import Game

PLACEMENT_LABELS = ("1st Place (Winner)", "2nd Place", "3rd Place")


def analyze_correct_answers_by_placement(games: Iterable[Game]) -> AnalysisResult:
    """Average correct responses (J + DJ) for each final placement.

    Each placement is averaged over the games where that slot exists, so the
    2nd/3rd place denominators can be smaller than the winner's.
    """

    totals = [0, 0, 0]
    counts = [0, 0, 0]

    for game in games:
        clues = main_round_clues(game)
        if not clues or len(game.final_scores) < 2:
            continue

        ranked = sort_scores(game.final_scores)
        if not ranked[0].player:
            continue

        for place, player_score in enumerate(ranked[:3]):
            totals[place] += count_correct_answers(clues, player_score.player)
            counts[place] += 1

    return AnalysisResult(
        query="correct-answers",
        description="Average correct answers by final placement (Jeopardy + Double Jeopardy)",
        total_games=counts[0],
        results=[
            {
                "position": label,
                "avgCorrect": avg(totals[place], counts[place]),
                "totalCorrect": totals[place],
                "gamesAnalyzed": counts[place],
            }
            for place, label in enumerate(PLACEMENT_LABELS)
        ],
    )
