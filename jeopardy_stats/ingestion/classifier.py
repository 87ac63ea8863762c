"""Tag games by event type and bucket regular games into seasons."""

from __future__ import annotations

import logging
import re
from typing import Iterable

from jeopardy_stats.ingestion.schema import Game

logger = logging.getLogger(__name__)

REGULAR_GAME = "regularGame"

# First match wins, so order matters where one label contains another.
CLASSIFICATION_PATTERNS: tuple[tuple[re.Pattern[str], str], ...] = (
    (re.compile(r"Tournament of Champions"), "tournamentOfChampions"),
    (re.compile(r"All-Star Games"), "allStarGames"),
    (re.compile(r"Back to School Week"), "backToSchoolWeek"),
    (re.compile(r"Battle of the Decades"), "battleOfTheDecades"),
    (re.compile(r"Celebrity Jeopardy"), "celebrityJeopardy"),
    (re.compile(r"Champions Wildcard"), "championsWildcard"),
    (re.compile(r"College Championship"), "collegeChampionship"),
    (re.compile(r"High School Reunion Tournament"), "highSchoolReunionTournament"),
    (re.compile(r"Jeopardy!: The Greatest of All Time"), "jeopardyGOAT"),
    (re.compile(r"Jeopardy! Invitational Tournament"), "jeopardyInvitationalTournament"),
    (re.compile(r"Jeopardy! Masters"), "jeopardyMasters"),
    (re.compile(r"Kids Week"), "kidsWeek"),
    (re.compile(r"Power Players Week"), "powerPlayersWeek"),
    (re.compile(r"Professors Tournament"), "professorsTournament"),
    (re.compile(r"Second Chance competition"), "secondChanceCompetition"),
    (re.compile(r"Seniors? Tournament"), "seniorsTournament"),
    (re.compile(r"Teachers Tournament"), "teachersTournament"),
    (re.compile(r"Teen Tournament"), "teenTournament"),
)

_SEASON_START = re.compile(r"First game of Season (\d+)")


def classify_comments(comments: str) -> str:
    for pattern, classification in CLASSIFICATION_PATTERNS:
        if pattern.search(comments):
            return classification
    return REGULAR_GAME


def season_started(comments: str) -> int | None:
    """Return N when the comments mark the first game of Season N."""

    match = _SEASON_START.search(comments)
    if match is None:
        if "First game of Season" in comments:
            logger.warning("Season marker without a number: %s", comments)
        return None
    return int(match.group(1))


def classify_game(game: Game) -> Game:
    return game.model_copy(update={"classification": classify_comments(game.comments)})


def season_key(season: int) -> str:
    return f"season-{season:02d}"


def partition_games(games: Iterable[Game], start_season: int = 1) -> dict[str, list[Game]]:
    """Classify games (in air-date order) into season or event buckets.

    Regular games land in the current ``season-NN`` bucket; the season only
    advances when a "First game of Season N" comment is seen.
    """

    current_season = start_season
    buckets: dict[str, list[Game]] = {}
    for game in games:
        started = season_started(game.comments)
        if started is not None:
            current_season = started

        classified = classify_game(game)
        if classified.classification == REGULAR_GAME:
            key = season_key(current_season)
        else:
            key = classified.classification
        buckets.setdefault(key, []).append(classified)
    return buckets
