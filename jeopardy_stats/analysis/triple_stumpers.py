from __future__ import annotations

from collections import Counter
from typing import Iterable

from jeopardy_stats.analysis.helpers import main_round_clues
from jeopardy_stats.analysis.schema import AnalysisResult, pct
from jeopardy_stats.ingestion.schema import Game


def analyze_triple_stumpers(games: Iterable[Game]) -> AnalysisResult:
    """Share of J/DJ clues nobody answered, per clue value."""

    clues_by_value: Counter[int] = Counter()
    stumpers_by_value: Counter[int] = Counter()
    total_games = 0

    for game in games:
        clues = main_round_clues(game)
        if not clues:
            continue
        total_games += 1
        for clue in clues:
            clues_by_value[clue.value] += 1
            if clue.was_triple_stumper:
                stumpers_by_value[clue.value] += 1

    total_clues = sum(clues_by_value.values())
    total_stumpers = sum(stumpers_by_value.values())
    rows = [
        {
            "value": "All",
            "clues": total_clues,
            "tripleStumpers": total_stumpers,
            "percentage": pct(total_stumpers, total_clues),
        }
    ]
    for value in sorted(clues_by_value):
        rows.append(
            {
                "value": f"${value:,}",
                "clues": clues_by_value[value],
                "tripleStumpers": stumpers_by_value[value],
                "percentage": pct(stumpers_by_value[value], clues_by_value[value]),
            }
        )

    return AnalysisResult(
        query="triple-stumpers",
        description="Clues no one answered correctly (Triple Stumpers), by clue value",
        total_games=total_games,
        results=rows,
    )
