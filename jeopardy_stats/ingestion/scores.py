"""Replay a round's clues in selection order to rebuild running scores."""

from __future__ import annotations

from typing import Any, Iterable, Mapping

from jeopardy_stats.ingestion.coercion import coerce_clue_value
from jeopardy_stats.ingestion.schema import TRIPLE_STUMPER, Clue, PlayerScore


def _safe_int(value: Any) -> int | None:
    if isinstance(value, bool):
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def _names(value: Any) -> list[str]:
    if not isinstance(value, list):
        return []
    return [str(name) for name in value if isinstance(name, str) and name]


def _order_key(indexed: tuple[int, Mapping[str, Any]]) -> tuple[int, int, int]:
    position, clue = indexed
    order_number = _safe_int(clue.get("orderNumber"))
    # Unnumbered clues (missing, null or 0) go last, in scrape order.
    if not order_number:
        return (1, 0, position)
    return (0, order_number, position)


def sort_clues(raw_clues: Iterable[Any]) -> list[Mapping[str, Any]]:
    clues = [clue for clue in raw_clues if isinstance(clue, Mapping)]
    return [clue for _, clue in sorted(enumerate(clues), key=_order_key)]


def reconstruct_round(
    raw_clues: Iterable[Any],
    seed: Mapping[str, int],
) -> tuple[list[Clue], dict[str, int]]:
    """Return normalized clues plus the contestants' totals after the last clue.

    ``seed`` fixes both the tracked contestants and the snapshot order; names
    outside it are ignored. The seed mapping itself is left untouched.
    """

    totals = dict(seed)
    clues: list[Clue] = []

    for raw in sort_clues(raw_clues):
        value = coerce_clue_value(raw.get("value"))
        correct = _names(raw.get("correctContestants"))
        raw_incorrect = _names(raw.get("incorrectContestants"))
        incorrect = [name for name in raw_incorrect if name != TRIPLE_STUMPER]

        for name in correct:
            if name in totals:
                totals[name] += value
        for name in incorrect:
            if name in totals:
                totals[name] -= value

        clues.append(
            Clue(
                category=str(raw.get("category") or ""),
                value=value,
                clue=str(raw.get("clue") or ""),
                answer=str(raw.get("answer") or ""),
                is_daily_double=bool(raw.get("isDailyDouble")),
                order_number=_safe_int(raw.get("orderNumber")),
                correct_contestants=correct,
                incorrect_contestants=incorrect,
                was_triple_stumper=bool(raw.get("wasTripleStumper"))
                or TRIPLE_STUMPER in raw_incorrect,
                running_scores=[
                    PlayerScore(player=player, score=score) for player, score in totals.items()
                ],
            )
        )

    return clues, totals
