"""Final Jeopardy wagering patterns by position after Double Jeopardy."""

from __future__ import annotations

import statistics
from dataclasses import dataclass, field
from typing import Iterable

from jeopardy_stats.analysis.helpers import (
    get_double_jeopardy_end_scores,
    get_fj_response,
    rank_by_end_of_round,
)
from jeopardy_stats.analysis.schema import AnalysisResult, pct
from jeopardy_stats.ingestion.schema import Game


def _nth_score(scores, index: int) -> int:
    return scores[index].score if len(scores) > index else 0


def analyze_first_place_bets_cover(games: Iterable[Game]) -> AnalysisResult:
    """Does the leader wager enough to beat both opponents doubling up?"""

    total_games = 0
    covered = 0

    for game in games:
        dj_scores = get_double_jeopardy_end_scores(game)
        if not dj_scores or len(dj_scores) < 2:
            continue

        ranked = rank_by_end_of_round(dj_scores)
        first_score = _nth_score(ranked.scores, 0)
        second_score = _nth_score(ranked.scores, 1)
        third_score = _nth_score(ranked.scores, 2)
        if first_score <= 0:
            continue

        second_max = second_score * 2 if second_score > 0 else 0
        third_max = third_score * 2 if third_score > 0 else 0

        response = get_fj_response(game, ranked.first)
        if response is None or response.value is None:
            continue

        needed_to_cover = max(second_max, third_max) - first_score + 1
        total_games += 1
        if needed_to_cover <= 0 or response.value >= needed_to_cover:
            covered += 1

    covered_pct = pct(covered, total_games)
    return AnalysisResult(
        query="first-place-cover",
        description="First place bets enough to cover max possible opponent scores",
        total_games=total_games,
        results=[
            {"metric": "Bet enough to cover", "count": covered, "percentage": covered_pct},
            {
                "metric": "Did not bet enough",
                "count": total_games - covered,
                "percentage": f"{100 - float(covered_pct):.1f}",
            },
        ],
    )


def analyze_second_place_bet_bands(games: Iterable[Game]) -> AnalysisResult:
    total_games = 0
    # [90, inf), [75, 90), [50, 75), [0, 50)
    bands = {"Bet 90%+": 0, "Bet 75-90%": 0, "Bet 50-75%": 0, "Bet under 50%": 0}

    for game in games:
        dj_scores = get_double_jeopardy_end_scores(game)
        if not dj_scores or len(dj_scores) < 2:
            continue

        ranked = rank_by_end_of_round(dj_scores)
        second_score = _nth_score(ranked.scores, 1)
        if second_score <= 0 or not ranked.second:
            continue

        response = get_fj_response(game, ranked.second)
        if response is None or response.value is None:
            continue

        bet_pct = response.value / second_score * 100
        total_games += 1
        if bet_pct >= 90:
            bands["Bet 90%+"] += 1
        elif bet_pct >= 75:
            bands["Bet 75-90%"] += 1
        elif bet_pct >= 50:
            bands["Bet 50-75%"] += 1
        else:
            bands["Bet under 50%"] += 1

    return AnalysisResult(
        query="second-place-90pct",
        description="Second place betting patterns (% of their score wagered)",
        total_games=total_games,
        results=[
            {"metric": metric, "count": count, "percentage": pct(count, total_games)}
            for metric, count in bands.items()
        ],
    )


def analyze_second_place_bets_just_enough(games: Iterable[Game]) -> AnalysisResult:
    total_games = 0
    just_enough = 0
    more_than_enough = 0
    less_than_needed = 0

    for game in games:
        dj_scores = get_double_jeopardy_end_scores(game)
        if not dj_scores or len(dj_scores) < 2:
            continue

        ranked = rank_by_end_of_round(dj_scores)
        first_score = _nth_score(ranked.scores, 0)
        second_score = _nth_score(ranked.scores, 1)
        if second_score <= 0 or first_score <= second_score or not ranked.second:
            continue

        response = get_fj_response(game, ranked.second)
        if response is None or response.value is None:
            continue

        wager = response.value
        difference = first_score - second_score
        min_target = difference + 1
        max_target = difference * 1.1

        total_games += 1
        if min_target <= wager <= max_target:
            just_enough += 1
        elif wager > max_target:
            more_than_enough += 1
        else:
            less_than_needed += 1

    return AnalysisResult(
        query="second-place-just-enough",
        description="Second place bets 'just enough' to beat first (difference + 1 to 110%)",
        total_games=total_games,
        results=[
            {
                "metric": "Bet just enough (diff+1 to 110%)",
                "count": just_enough,
                "percentage": pct(just_enough, total_games),
            },
            {
                "metric": "Bet more than enough (>110%)",
                "count": more_than_enough,
                "percentage": pct(more_than_enough, total_games),
            },
            {
                "metric": "Bet less than needed",
                "count": less_than_needed,
                "percentage": pct(less_than_needed, total_games),
            },
        ],
    )


@dataclass
class _WagerShares:
    games: int = 0
    by_position: tuple[list[float], list[float], list[float]] = field(
        default_factory=lambda: ([], [], [])
    )


def analyze_final_wagers_by_position(games: Iterable[Game]) -> AnalysisResult:
    """Final Jeopardy wager as a share of each player's Double Jeopardy total."""

    shares = _WagerShares()
    for game in games:
        dj_scores = get_double_jeopardy_end_scores(game)
        final_round = game.rounds.final_jeopardy
        if not dj_scores or len(dj_scores) < 2 or final_round is None:
            continue

        ranked = rank_by_end_of_round(dj_scores)
        positions = {ps.player: index for index, ps in enumerate(ranked.scores)}
        dj_totals = {ps.player: ps.score for ps in dj_scores}

        counted = False
        for response in final_round.responses:
            dj_total = dj_totals.get(response.contestant)
            position = positions.get(response.contestant)
            if not dj_total or dj_total <= 0 or response.value is None:
                continue
            if position is None or position > 2:
                continue
            shares.by_position[position].append(response.value / dj_total * 100)
            counted = True
        if counted:
            shares.games += 1

    rows = []
    for label, values in zip(("1st", "2nd", "3rd"), shares.by_position):
        rows.append(
            {
                "position": label,
                "avgBetPct": f"{statistics.mean(values):.1f}" if values else "0.0",
                "medianBetPct": f"{statistics.median(values):.1f}" if values else "0.0",
                "count": len(values),
            }
        )
    return AnalysisResult(
        query="fj-betting",
        description="Final Jeopardy wager as % of pre-Final score, by position after Double Jeopardy",
        total_games=shares.games,
        results=rows,
    )
