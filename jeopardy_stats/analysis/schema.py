from typing import Optional, Union

from pydantic import BaseModel, Field, StrictBool, StrictFloat, StrictInt, StrictStr

Scalar = Union[StrictStr, StrictInt, StrictFloat, StrictBool, None]


class AnalysisResult(BaseModel):
    """Tabular output of every analysis, canned or generated."""

    query: Optional[str] = None
    description: StrictStr = Field(min_length=1)
    total_games: StrictInt = Field(alias="totalGames")
    results: list[dict[str, Scalar]]

    class Config:
        populate_by_name = True


def pct(count: int | float, total: int | float) -> str:
    if total <= 0:
        return "0.0"
    return f"{count / total * 100:.1f}"


def avg(total: int | float, count: int) -> str:
    if count <= 0:
        return "0.0"
    return f"{total / count:.1f}"
