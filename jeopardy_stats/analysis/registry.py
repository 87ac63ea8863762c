"""Canned analyses, keyed by the query id clients send."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Iterable

from jeopardy_stats.analysis.betting import (
    analyze_final_wagers_by_position,
    analyze_first_place_bets_cover,
    analyze_second_place_bet_bands,
    analyze_second_place_bets_just_enough,
)
from jeopardy_stats.analysis.correct_answers import analyze_correct_answers_by_placement
from jeopardy_stats.analysis.daily_doubles import analyze_daily_double_wagers
from jeopardy_stats.analysis.position_win_rate import (
    analyze_position_win_rate_after_dj,
    analyze_position_win_rate_after_j,
)
from jeopardy_stats.analysis.schema import AnalysisResult
from jeopardy_stats.analysis.triple_stumpers import analyze_triple_stumpers
from jeopardy_stats.ingestion.schema import Game


@dataclass(frozen=True)
class Analyzer:
    name: str
    description: str
    fn: Callable[[Iterable[Game]], AnalysisResult]


ANALYZERS: dict[str, Analyzer] = {
    "position-win-rate-dj": Analyzer(
        "Position Win Rate (After Double Jeopardy)",
        "How often does 1st/2nd/3rd place after Double Jeopardy win the game?",
        analyze_position_win_rate_after_dj,
    ),
    "position-win-rate-j": Analyzer(
        "Position Win Rate (After Jeopardy)",
        "How often does 1st/2nd/3rd place after the Jeopardy round win the game?",
        analyze_position_win_rate_after_j,
    ),
    "first-place-cover": Analyzer(
        "First Place Covers",
        "How often does 1st place bet enough to beat both opponents if they bet everything?",
        analyze_first_place_bets_cover,
    ),
    "second-place-90pct": Analyzer(
        "Second Place Bets 90%+",
        "How often does 2nd place bet at least 90% of their total?",
        analyze_second_place_bet_bands,
    ),
    "second-place-just-enough": Analyzer(
        "Second Place Bets Just Enough",
        "How often does 2nd place bet just enough to beat 1st (101-110% of difference)?",
        analyze_second_place_bets_just_enough,
    ),
    "correct-answers": Analyzer(
        "Correct Answers by Placement",
        "Average number of correct answers for winner vs 2nd vs 3rd place",
        analyze_correct_answers_by_placement,
    ),
    "dd-wagers": Analyzer(
        "Daily Double Wagers",
        "How much of their score do players risk on Daily Doubles?",
        analyze_daily_double_wagers,
    ),
    "fj-betting": Analyzer(
        "Final Jeopardy Betting by Position",
        "Average and median Final Jeopardy wager as % of score, by position",
        analyze_final_wagers_by_position,
    ),
    "triple-stumpers": Analyzer(
        "Triple Stumpers",
        "How often does nobody answer correctly, by clue value?",
        analyze_triple_stumpers,
    ),
}


def available_queries() -> list[dict[str, str]]:
    return [
        {"id": query_id, "name": analyzer.name, "description": analyzer.description}
        for query_id, analyzer in ANALYZERS.items()
    ]


def run_query(query_id: str, games: Iterable[Game]) -> AnalysisResult | None:
    """Run a canned analysis. Returns None when the query id is unknown."""

    analyzer = ANALYZERS.get(query_id)
    if analyzer is None:
        return None
    return analyzer.fn(games)
