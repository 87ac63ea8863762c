"""How often the leader after a round goes on to win the game."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Iterable

from jeopardy_stats.analysis.helpers import (
    get_double_jeopardy_end_scores,
    get_jeopardy_end_scores,
    get_winner,
    rank_by_end_of_round,
)
from jeopardy_stats.analysis.schema import AnalysisResult, pct
from jeopardy_stats.ingestion.schema import Game, PlayerScore


@dataclass
class PositionWins:
    total_games: int = 0
    first: int = 0
    second: int = 0
    third: int = 0


def _count_position_wins(
    games: Iterable[Game],
    end_scores: Callable[[Game], list[PlayerScore] | None],
) -> PositionWins:
    stats = PositionWins()
    for game in games:
        scores = end_scores(game)
        if not scores or len(scores) < 2:
            continue

        ranked = rank_by_end_of_round(scores)
        winner = get_winner(game)
        if not winner or not ranked.first:
            continue

        stats.total_games += 1
        if winner == ranked.first:
            stats.first += 1
        elif winner == ranked.second:
            stats.second += 1
        elif winner == ranked.third:
            stats.third += 1
    return stats


def _result(query: str, description: str, stats: PositionWins) -> AnalysisResult:
    rows = [
        ("1st Place", stats.first),
        ("2nd Place", stats.second),
        ("3rd Place", stats.third),
    ]
    return AnalysisResult(
        query=query,
        description=description,
        total_games=stats.total_games,
        results=[
            {"position": position, "wins": wins, "percentage": pct(wins, stats.total_games)}
            for position, wins in rows
        ],
    )


def analyze_position_win_rate_after_dj(games: Iterable[Game]) -> AnalysisResult:
    return _result(
        "position-win-rate-dj",
        "Win rate by position after Double Jeopardy",
        _count_position_wins(games, get_double_jeopardy_end_scores),
    )


def analyze_position_win_rate_after_j(games: Iterable[Game]) -> AnalysisResult:
    return _result(
        "position-win-rate-j",
        "Win rate by position after Jeopardy round",
        _count_position_wins(games, get_jeopardy_end_scores),
    )
