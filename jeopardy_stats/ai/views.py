"""Plain read-only copies of the game models handed to generated code.

The views carry the same attribute names as ``ingestion.schema`` so the
shared helpers work on either, but they are frozen dataclasses holding
tuples: no model classmethods, no parsing entry points.
"""

from __future__ import annotations

from dataclasses import dataclass, fields
from typing import Optional

from jeopardy_stats.ingestion.schema import Clue, FinalResponse, FinalRound, Game, PlayerScore, Round


@dataclass(frozen=True)
class PlayerScoreView:
    player: str
    score: int


@dataclass(frozen=True)
class ClueView:
    category: str
    value: int
    clue: str
    answer: str
    is_daily_double: bool
    order_number: Optional[int]
    correct_contestants: tuple[str, ...]
    incorrect_contestants: tuple[str, ...]
    was_triple_stumper: bool
    running_scores: tuple[PlayerScoreView, ...]


@dataclass(frozen=True)
class RoundView:
    categories: tuple[str, ...]
    clues: tuple[ClueView, ...]
    first_break_scores: Optional[tuple[PlayerScoreView, ...]]
    end_of_round_scores: Optional[tuple[PlayerScoreView, ...]]


@dataclass(frozen=True)
class FinalResponseView:
    contestant: str
    response: str
    is_correct: bool
    is_incorrect: bool
    value: Optional[int]
    final_score: Optional[int]


@dataclass(frozen=True)
class FinalRoundView:
    category: str
    clue: str
    answer: str
    responses: tuple[FinalResponseView, ...]


@dataclass(frozen=True)
class RoundsView:
    jeopardy: Optional[RoundView]
    double_jeopardy: Optional[RoundView]
    final_jeopardy: Optional[FinalRoundView]


@dataclass(frozen=True)
class GameView:
    game_id: Optional[int]
    show_number: Optional[str]
    title: str
    date: Optional[str]
    comments: str
    contestants: tuple[str, ...]
    rounds: RoundsView
    final_scores: tuple[PlayerScoreView, ...]
    coryat_scores: tuple[PlayerScoreView, ...]
    classification: Optional[str]


VIEW_TYPES = (
    PlayerScoreView,
    ClueView,
    RoundView,
    FinalResponseView,
    FinalRoundView,
    RoundsView,
    GameView,
)


def view_field_names() -> frozenset[str]:
    return frozenset(f.name for view_type in VIEW_TYPES for f in fields(view_type))


def _scores(scores: Optional[list[PlayerScore]]) -> Optional[tuple[PlayerScoreView, ...]]:
    if scores is None:
        return None
    return tuple(PlayerScoreView(player=ps.player, score=ps.score) for ps in scores)


def _clue(clue: Clue) -> ClueView:
    return ClueView(
        category=clue.category,
        value=clue.value,
        clue=clue.clue,
        answer=clue.answer,
        is_daily_double=clue.is_daily_double,
        order_number=clue.order_number,
        correct_contestants=tuple(clue.correct_contestants),
        incorrect_contestants=tuple(clue.incorrect_contestants),
        was_triple_stumper=clue.was_triple_stumper,
        running_scores=_scores(clue.running_scores) or (),
    )


def _round(round_: Optional[Round]) -> Optional[RoundView]:
    if round_ is None:
        return None
    return RoundView(
        categories=tuple(round_.categories),
        clues=tuple(_clue(clue) for clue in round_.clues),
        first_break_scores=_scores(round_.first_break_scores),
        end_of_round_scores=_scores(round_.end_of_round_scores),
    )


def _response(response: FinalResponse) -> FinalResponseView:
    return FinalResponseView(
        contestant=response.contestant,
        response=response.response,
        is_correct=response.is_correct,
        is_incorrect=response.is_incorrect,
        value=response.value,
        final_score=response.final_score,
    )


def _final_round(final_round: Optional[FinalRound]) -> Optional[FinalRoundView]:
    if final_round is None:
        return None
    return FinalRoundView(
        category=final_round.category,
        clue=final_round.clue,
        answer=final_round.answer,
        responses=tuple(_response(r) for r in final_round.responses),
    )


def to_view(game: Game) -> GameView:
    return GameView(
        game_id=game.game_id,
        show_number=game.show_number,
        title=game.title,
        date=game.date,
        comments=game.comments,
        contestants=tuple(game.contestants),
        rounds=RoundsView(
            jeopardy=_round(game.rounds.jeopardy),
            double_jeopardy=_round(game.rounds.double_jeopardy),
            final_jeopardy=_final_round(game.rounds.final_jeopardy),
        ),
        final_scores=_scores(game.final_scores) or (),
        coryat_scores=_scores(game.coryat_scores) or (),
        classification=game.classification,
    )
