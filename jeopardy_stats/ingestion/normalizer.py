"""Turn one raw scraped game dict into a canonical Game."""

from __future__ import annotations

import logging
from typing import Any, Mapping

from jeopardy_stats.ingestion.coercion import coerce_value
from jeopardy_stats.ingestion.final_responses import pair_final_responses
from jeopardy_stats.ingestion.schema import FinalRound, Game, PlayerScore, Round, Rounds
from jeopardy_stats.ingestion.scores import reconstruct_round

logger = logging.getLogger(__name__)

MAX_CONTESTANTS = 3


def _safe_int(value: Any) -> int | None:
    if isinstance(value, bool):
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def _optional_str(value: Any) -> str | None:
    if value is None:
        return None
    return str(value)


def _parse_scores(value: Any) -> list[PlayerScore] | None:
    if not isinstance(value, list):
        return None
    scores: list[PlayerScore] = []
    for entry in value:
        if not isinstance(entry, Mapping):
            continue
        player = entry.get("player")
        if not isinstance(player, str) or not player:
            continue
        scores.append(PlayerScore(player=player, score=coerce_value(entry.get("score"))))
    return scores


def _normalize_round(
    raw_round: Any,
    totals: dict[str, int],
) -> tuple[Round | None, dict[str, int]]:
    if not isinstance(raw_round, Mapping):
        return None, totals

    raw_clues = raw_round.get("clues")
    clues, terminal = reconstruct_round(raw_clues if isinstance(raw_clues, list) else [], totals)
    categories = raw_round.get("categories")
    return (
        Round(
            categories=[str(c) for c in categories] if isinstance(categories, list) else [],
            clues=clues,
            first_break_scores=_parse_scores(raw_round.get("firstBreakScores")),
            end_of_round_scores=_parse_scores(raw_round.get("endOfRoundScores")),
        ),
        terminal,
    )


def _normalize_final_round(raw_round: Any, totals: Mapping[str, int]) -> FinalRound | None:
    if not isinstance(raw_round, Mapping):
        return None
    raw_responses = raw_round.get("responses")
    return FinalRound(
        category=str(raw_round.get("category") or ""),
        clue=str(raw_round.get("clue") or ""),
        answer=str(raw_round.get("answer") or ""),
        responses=pair_final_responses(
            raw_responses if isinstance(raw_responses, list) else [],
            totals,
        ),
    )


def normalize_game(raw_game: Mapping[str, Any]) -> Game:
    """Normalize a raw scrape. Missing pieces are skipped, never fatal.

    Running totals start at zero for every player in ``finalScores``, carry
    from the Jeopardy round into Double Jeopardy, and the Double Jeopardy
    terminal totals price the Final Jeopardy wagers.
    """

    final_scores = _parse_scores(raw_game.get("finalScores")) or []
    raw_contestants = raw_game.get("contestants")
    contestants = (
        [str(name) for name in raw_contestants if name]
        if isinstance(raw_contestants, list)
        else []
    )

    seed_names = [score.player for score in final_scores] or contestants
    totals: dict[str, int] = {name: 0 for name in seed_names}

    raw_rounds = raw_game.get("rounds")
    if not isinstance(raw_rounds, Mapping):
        raw_rounds = {}

    jeopardy, totals = _normalize_round(raw_rounds.get("jeopardy"), totals)
    double_jeopardy, totals = _normalize_round(raw_rounds.get("doubleJeopardy"), totals)
    final_jeopardy = _normalize_final_round(raw_rounds.get("finalJeopardy"), totals)

    if len(final_scores) > MAX_CONTESTANTS:
        logger.debug(
            "Truncating %s final score rows for gameId=%s",
            len(final_scores),
            raw_game.get("gameId"),
        )
        final_scores = final_scores[:MAX_CONTESTANTS]
    if final_scores:
        contestants = [score.player for score in final_scores]

    return Game(
        game_id=_safe_int(raw_game.get("gameId")),
        show_number=_optional_str(raw_game.get("showNumber")),
        title=str(raw_game.get("title") or ""),
        date=_optional_str(raw_game.get("date")),
        comments=str(raw_game.get("comments") or ""),
        contestants=contestants,
        rounds=Rounds(
            jeopardy=jeopardy,
            double_jeopardy=double_jeopardy,
            final_jeopardy=final_jeopardy,
        ),
        final_scores=final_scores,
        coryat_scores=_parse_scores(raw_game.get("coryatScores")) or [],
        classification=_optional_str(raw_game.get("classification")),
    )
