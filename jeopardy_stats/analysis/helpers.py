"""Helpers shared by the canned analyzers and exposed to generated code."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any, Iterable, Optional

from jeopardy_stats.ingestion.schema import Clue, FinalResponse, Game, PlayerScore

_SCORE_JUNK = re.compile(r"[$,]")
_LEADING_INT = re.compile(r"\s*[+-]?\d+")


@dataclass(frozen=True)
class RankedScores:
    first: Optional[str] = None
    second: Optional[str] = None
    third: Optional[str] = None
    scores: list[PlayerScore] = field(default_factory=list)


def parse_score(score: Any) -> int | float:
    """Parse "$20,200" (or 20200) into a number; anything else is 0."""

    if isinstance(score, bool):
        return 0
    if isinstance(score, (int, float)):
        return score
    if not score:
        return 0
    match = _LEADING_INT.match(_SCORE_JUNK.sub("", str(score)))
    if match is None:
        return 0
    try:
        return int(match.group(0))
    except ValueError:
        return 0


def _player_score(entry: Any) -> Any:
    if isinstance(entry, dict):
        if not entry.get("player"):
            return None
        return PlayerScore(player=str(entry["player"]), score=int(parse_score(entry.get("score"))))
    # PlayerScore, or the read-only view generated code receives.
    if hasattr(entry, "player") and hasattr(entry, "score"):
        return entry
    return None


def sort_scores(scores: Iterable[Any] | None) -> list[PlayerScore]:
    parsed = [ps for ps in (_player_score(entry) for entry in scores or []) if ps is not None]
    # Stable: ties keep their scrape order.
    return sorted(parsed, key=lambda ps: ps.score, reverse=True)


def get_winner(game: Game) -> str | None:
    ranked = sort_scores(game.final_scores)
    if not ranked:
        return None
    return ranked[0].player


def rank_by_end_of_round(scores: Iterable[Any] | None) -> RankedScores:
    ranked = sort_scores(scores)
    names = [ps.player or None for ps in ranked[:3]]
    names += [None] * (3 - len(names))
    return RankedScores(first=names[0], second=names[1], third=names[2], scores=ranked)


def count_correct_answers(clues: Iterable[Clue] | None, player: str | None) -> int:
    if not clues or not player:
        return 0
    return sum(1 for clue in clues if player in clue.correct_contestants)


def get_fj_response(game: Game, player: str | None) -> FinalResponse | None:
    final_round = game.rounds.final_jeopardy
    if final_round is None:
        return None
    for response in final_round.responses:
        if response.contestant == player:
            return response
    return None


def is_valid_game(game: Game) -> bool:
    rounds = game.rounds
    return (
        rounds.jeopardy is not None
        and rounds.double_jeopardy is not None
        and rounds.final_jeopardy is not None
        and len(game.final_scores) >= 2
    )


def get_jeopardy_end_scores(game: Game) -> list[PlayerScore] | None:
    if game.rounds.jeopardy is None:
        return None
    return game.rounds.jeopardy.end_of_round_scores or None


def get_double_jeopardy_end_scores(game: Game) -> list[PlayerScore] | None:
    if game.rounds.double_jeopardy is None:
        return None
    return game.rounds.double_jeopardy.end_of_round_scores or None


def main_round_clues(game: Game) -> list[Clue]:
    """Jeopardy clues followed by Double Jeopardy clues."""

    clues: list[Clue] = []
    for round_ in (game.rounds.jeopardy, game.rounds.double_jeopardy):
        if round_ is not None:
            clues.extend(round_.clues)
    return clues


HELPERS = {
    "parse_score": parse_score,
    "get_winner": get_winner,
    "rank_by_end_of_round": rank_by_end_of_round,
    "count_correct_answers": count_correct_answers,
    "get_fj_response": get_fj_response,
    "is_valid_game": is_valid_game,
    "get_jeopardy_end_scores": get_jeopardy_end_scores,
    "get_double_jeopardy_end_scores": get_double_jeopardy_end_scores,
}

# Same helpers under the camelCase names generated code may also use.
HELPERS.update(
    {
        "parseScore": parse_score,
        "getWinner": get_winner,
        "rankByEndOfRound": rank_by_end_of_round,
        "countCorrectAnswers": count_correct_answers,
        "getFJResponse": get_fj_response,
        "isValidGame": is_valid_game,
        "getJeopardyEndScores": get_jeopardy_end_scores,
        "getDoubleJeopardyEndScores": get_double_jeopardy_end_scores,
    }
)
