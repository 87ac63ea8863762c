"""Canonical game record shared across normalize -> classify -> analyze."""

from typing import Optional

from pydantic import BaseModel, Field

TRIPLE_STUMPER = "Triple Stumper"


class _Record(BaseModel):
    class Config:
        frozen = True
        populate_by_name = True


class PlayerScore(_Record):
    player: str
    score: int = 0


class Clue(_Record):
    category: str = ""
    value: int = 0
    clue: str = ""
    answer: str = ""
    is_daily_double: bool = Field(False, alias="isDailyDouble")
    order_number: Optional[int] = Field(None, alias="orderNumber")
    correct_contestants: list[str] = Field(default_factory=list, alias="correctContestants")
    incorrect_contestants: list[str] = Field(default_factory=list, alias="incorrectContestants")
    was_triple_stumper: bool = Field(False, alias="wasTripleStumper")
    # Score of every tracked contestant immediately after this clue resolved.
    running_scores: list[PlayerScore] = Field(default_factory=list, alias="runningScores")


class Round(_Record):
    categories: list[str] = Field(default_factory=list)
    clues: list[Clue] = Field(default_factory=list)
    first_break_scores: Optional[list[PlayerScore]] = Field(None, alias="firstBreakScores")
    end_of_round_scores: Optional[list[PlayerScore]] = Field(None, alias="endOfRoundScores")


class FinalResponse(_Record):
    contestant: str = ""
    response: str = ""
    is_correct: bool = Field(False, alias="isCorrect")
    is_incorrect: bool = Field(False, alias="isIncorrect")
    # None when the wager row was missing from the scrape.
    value: Optional[int] = None
    final_score: Optional[int] = Field(None, alias="finalScore")


class FinalRound(_Record):
    category: str = ""
    clue: str = ""
    answer: str = ""
    responses: list[FinalResponse] = Field(default_factory=list)


class Rounds(_Record):
    jeopardy: Optional[Round] = None
    double_jeopardy: Optional[Round] = Field(None, alias="doubleJeopardy")
    final_jeopardy: Optional[FinalRound] = Field(None, alias="finalJeopardy")


class Game(_Record):
    """
    A normalized game. Built once by the normalizer and read-only afterwards;
    classification is attached with ``model_copy``.
    """

    game_id: Optional[int] = Field(None, alias="gameId")
    show_number: Optional[str] = Field(None, alias="showNumber")
    title: str = ""
    date: Optional[str] = None
    comments: str = ""
    contestants: list[str] = Field(default_factory=list)
    rounds: Rounds = Field(default_factory=Rounds)
    final_scores: list[PlayerScore] = Field(default_factory=list, alias="finalScores")
    coryat_scores: list[PlayerScore] = Field(default_factory=list, alias="coryatScores")
    classification: Optional[str] = None
