"""Merge the interleaved Final Jeopardy response/wager rows of a scrape."""

from __future__ import annotations

from typing import Any, Mapping, Sequence

from jeopardy_stats.ingestion.coercion import coerce_value
from jeopardy_stats.ingestion.schema import FinalResponse


def _as_response(raw: Any) -> FinalResponse:
    if isinstance(raw, FinalResponse):
        return raw
    if not isinstance(raw, Mapping):
        return FinalResponse()
    value = raw.get("value")
    final_score = raw.get("finalScore")
    return FinalResponse(
        contestant=str(raw.get("contestant") or ""),
        response=str(raw.get("response") or ""),
        is_correct=bool(raw.get("isCorrect")),
        is_incorrect=bool(raw.get("isIncorrect")),
        value=coerce_value(value) if value is not None else None,
        final_score=coerce_value(final_score) if final_score is not None else None,
    )


def pair_final_responses(
    raw_responses: Sequence[Any],
    prior_scores: Mapping[str, int],
) -> list[FinalResponse]:
    """Pair (response, wager) rows into one FinalResponse per contestant.

    ``prior_scores`` are the totals after Double Jeopardy. A trailing row
    without a wager partner is kept as-is, so its ``value`` stays unset.
    """

    if len(raw_responses) < 2:
        return [_as_response(raw) for raw in raw_responses]

    paired: list[FinalResponse] = []
    for index in range(0, len(raw_responses), 2):
        first = _as_response(raw_responses[index])
        if index + 1 >= len(raw_responses):
            paired.append(first)
            continue

        wager_row = raw_responses[index + 1]
        wager_token = wager_row.get("response") if isinstance(wager_row, Mapping) else wager_row
        wager = coerce_value(wager_token)

        prior = prior_scores.get(first.contestant, 0)
        if first.is_correct:
            final_score = prior + wager
        elif first.is_incorrect:
            final_score = prior - wager
        else:
            final_score = prior

        paired.append(first.model_copy(update={"value": wager, "final_score": final_score}))

    return paired
