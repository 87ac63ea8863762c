from __future__ import annotations

import asyncio
import logging
from typing import Any

import uvicorn
from fastapi import Depends, FastAPI, HTTPException
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from jeopardy_stats.ai.anthropic_client import CodeSynthesisError, generate_analysis_code
from jeopardy_stats.ai.sandbox import AnalysisExecutionError, safe_execute
from jeopardy_stats.analysis.registry import available_queries, run_query
from jeopardy_stats.db import Base, engine, get_db
from jeopardy_stats.questions import delete_question, list_questions, save_question, serialize_question
from jeopardy_stats.schemas import QueriesResponse, QueryOut, SeasonsResponse
from jeopardy_stats.seasons import SeasonStore, get_season_store
from jeopardy_stats.settings import Settings, get_settings

DEFAULT_START_SEASON = 1
DEFAULT_END_SEASON = 99

app = FastAPI(title="Jeopardy! Stats")
logger = logging.getLogger(__name__)


@app.on_event("startup")
def create_tables() -> None:
    Base.metadata.create_all(bind=engine)
    logger.info("App starting up, data_dir=%s", get_settings().game_data_dir)


def parse_season(value: Any, default: int) -> int:
    try:
        season = int(value)
    except (TypeError, ValueError):
        return default
    return season or default


def _season_range(payload: dict) -> tuple[int, int]:
    return (
        parse_season(payload.get("startSeason"), DEFAULT_START_SEASON),
        parse_season(payload.get("endSeason"), DEFAULT_END_SEASON),
    )


@app.get("/api/seasons", response_model=SeasonsResponse)
def api_seasons(store: SeasonStore = Depends(get_season_store)):
    seasons = store.available_seasons()
    return SeasonsResponse(
        seasons=seasons,
        min=seasons[0] if seasons else None,
        max=seasons[-1] if seasons else None,
    )


@app.get("/api/queries", response_model=QueriesResponse)
def api_queries():
    return QueriesResponse(queries=[QueryOut(**query) for query in available_queries()])


@app.post("/api/analyze")
def api_analyze(payload: dict, store: SeasonStore = Depends(get_season_store)):
    query = payload.get("query")
    if not query:
        raise HTTPException(status_code=400, detail="Missing query parameter")

    start, end = _season_range(payload)
    games = store.load_range(start, end)
    logger.info("Loaded %s games for seasons %s-%s", len(games), start, end)
    if not games:
        return {
            "success": True,
            "warning": "No games found for the specified season range",
            "result": None,
        }

    result = run_query(str(query), games)
    if result is None:
        raise HTTPException(status_code=400, detail=f"Unknown query type: {query}")

    return {
        "success": True,
        "seasonRange": {"start": start, "end": end},
        "gamesLoaded": len(games),
        "result": result.model_dump(by_alias=True),
    }


@app.get("/api/questions")
def api_list_questions(db: Session = Depends(get_db)):
    questions = [serialize_question(q).model_dump(mode="json") for q in list_questions(db)]
    return {"success": True, "questions": questions}


@app.post("/api/questions")
def api_save_question(payload: dict, db: Session = Depends(get_db)):
    text = str(payload.get("text") or "").strip()
    if not text:
        raise HTTPException(status_code=400, detail="Question text is required")

    tags = payload.get("tags")
    question, existed = save_question(
        db,
        text,
        summary=str(payload.get("summary") or ""),
        tags=tags if isinstance(tags, list) else [],
    )
    return {
        "success": True,
        "question": serialize_question(question).model_dump(mode="json"),
        "existed": existed,
    }


@app.delete("/api/questions/{question_id}")
def api_delete_question(question_id: int, db: Session = Depends(get_db)):
    if not delete_question(db, question_id):
        raise HTTPException(status_code=404, detail="Question not found")
    logger.info("Question #%s deleted", question_id)
    return {"success": True}


@app.post("/api/ask")
async def api_ask(
    payload: dict,
    db: Session = Depends(get_db),
    store: SeasonStore = Depends(get_season_store),
    settings: Settings = Depends(get_settings),
):
    question_text = str(payload.get("questionText") or "").strip()
    if not question_text:
        raise HTTPException(status_code=400, detail="Question text is required")

    start, end = _season_range(payload)
    logger.info("Ask: %r seasons=%s-%s", question_text, start, end)

    try:
        code, usage = await asyncio.to_thread(generate_analysis_code, question_text, settings)
    except CodeSynthesisError as exc:
        logger.error("Code generation failed: %s", exc)
        return JSONResponse(
            status_code=500,
            content={
                "success": False,
                "errorKind": "code_generation",
                "error": f"Failed to generate analysis code: {exc}",
            },
        )
    logger.debug("Generated code:\n%s", code)

    games = store.load_range(start, end)
    if not games:
        return {
            "success": True,
            "warning": "No games found for the specified season range",
            "result": None,
            "code": code,
        }

    try:
        result = await asyncio.to_thread(
            safe_execute,
            code,
            games,
            settings.analysis_timeout_seconds,
        )
    except AnalysisExecutionError as exc:
        logger.error("Analysis execution failed kind=%s: %s", exc.kind, exc)
        return JSONResponse(
            status_code=500,
            content={
                "success": False,
                "errorKind": exc.kind,
                "error": f"Analysis execution failed: {exc}",
                "code": exc.code,
            },
        )
    logger.info("Analysis complete, totalGames=%s", result.total_games)

    saved_question = None
    if payload.get("saveQuestion"):
        question, _existed = save_question(
            db,
            question_text,
            summary=str(payload.get("summary") or ""),
        )
        saved_question = serialize_question(question).model_dump(mode="json")

    return {
        "success": True,
        "seasonRange": {"start": start, "end": end},
        "gamesLoaded": len(games),
        "result": result.model_dump(by_alias=True),
        "code": code,
        "usage": usage,
        "savedQuestion": saved_question,
    }


def serve() -> None:
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )
    uvicorn.run(app, host="0.0.0.0", port=get_settings().port)


if __name__ == "__main__":
    serve()
