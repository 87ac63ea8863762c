from __future__ import annotations

import json
import tempfile
import unittest
from pathlib import Path
from types import SimpleNamespace
from unittest.mock import patch

from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from jeopardy_stats.ai.anthropic_client import CodeSynthesisError
from jeopardy_stats.ai.sandbox import AnalysisTimeoutError
from jeopardy_stats.analysis.schema import AnalysisResult
from jeopardy_stats.db import Base, get_db
from jeopardy_stats.ingestion.schema import Game
from jeopardy_stats.main import app, parse_season
from jeopardy_stats.questions import list_questions, save_question
from jeopardy_stats.seasons import SeasonStore, get_season_store
from jeopardy_stats.settings import get_settings


def _season_game(game_id: int) -> dict:
    game = Game.model_validate(
        {
            "gameId": game_id,
            "finalScores": [{"player": "A", "score": 25000}, {"player": "B", "score": 12000}],
            "rounds": {
                "doubleJeopardy": {
                    "endOfRoundScores": [
                        {"player": "A", "score": 18000},
                        {"player": "B", "score": 9000},
                    ]
                }
            },
        }
    )
    return game.model_dump(mode="json", by_alias=True)


class _ApiTestCase(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        data_dir = Path(self._tmp.name)
        (data_dir / "season-01").write_text(
            json.dumps([_season_game(1), _season_game(2)]), encoding="utf-8"
        )
        (data_dir / "season-02").write_text(json.dumps([_season_game(3)]), encoding="utf-8")
        store = SeasonStore(data_dir)

        engine = create_engine(
            "sqlite://",
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
        Base.metadata.create_all(bind=engine)
        self.SessionLocal = sessionmaker(bind=engine, autocommit=False, autoflush=False)

        def _get_db():
            db = self.SessionLocal()
            try:
                yield db
            finally:
                db.close()

        self.settings = SimpleNamespace(
            anthropic_api_key="key",
            anthropic_model="claude-sonnet-4-20250514",
            anthropic_max_tokens=2048,
            analysis_timeout_seconds=5.0,
        )
        app.dependency_overrides[get_db] = _get_db
        app.dependency_overrides[get_season_store] = lambda: store
        app.dependency_overrides[get_settings] = lambda: self.settings
        self.client = TestClient(app)

    def tearDown(self) -> None:
        app.dependency_overrides.clear()
        self._tmp.cleanup()


class ParseSeasonTests(unittest.TestCase):
    def test_parse_season_falls_back_to_default(self) -> None:
        self.assertEqual(5, parse_season("5", 1))
        self.assertEqual(1, parse_season(None, 1))
        self.assertEqual(99, parse_season("abc", 99))
        self.assertEqual(99, parse_season(0, 99))


class SeasonAndQueryRouteTests(_ApiTestCase):
    def test_seasons_lists_available_range(self) -> None:
        body = self.client.get("/api/seasons").json()

        self.assertEqual({"success": True, "seasons": [1, 2], "min": 1, "max": 2}, body)

    def test_queries_lists_canned_analyses(self) -> None:
        body = self.client.get("/api/queries").json()

        ids = [query["id"] for query in body["queries"]]
        self.assertTrue(body["success"])
        self.assertIn("first-place-cover", ids)
        self.assertTrue(all(query["name"] for query in body["queries"]))

    def test_analyze_runs_canned_query_over_season_range(self) -> None:
        response = self.client.post(
            "/api/analyze",
            json={"query": "position-win-rate-dj", "startSeason": 1, "endSeason": 1},
        )

        self.assertEqual(200, response.status_code)
        body = response.json()
        self.assertEqual({"start": 1, "end": 1}, body["seasonRange"])
        self.assertEqual(2, body["gamesLoaded"])
        self.assertEqual(2, body["result"]["totalGames"])
        self.assertEqual("100.0", body["result"]["results"][0]["percentage"])

    def test_analyze_defaults_to_all_seasons(self) -> None:
        body = self.client.post("/api/analyze", json={"query": "position-win-rate-dj"}).json()

        self.assertEqual({"start": 1, "end": 99}, body["seasonRange"])
        self.assertEqual(3, body["gamesLoaded"])

    def test_analyze_rejects_missing_and_unknown_queries(self) -> None:
        missing = self.client.post("/api/analyze", json={"startSeason": 1})
        unknown = self.client.post("/api/analyze", json={"query": "bogus"})

        self.assertEqual(400, missing.status_code)
        self.assertEqual(400, unknown.status_code)
        self.assertIn("Unknown query type: bogus", unknown.json()["detail"])

    def test_analyze_warns_when_range_is_empty(self) -> None:
        body = self.client.post(
            "/api/analyze",
            json={"query": "position-win-rate-dj", "startSeason": 40, "endSeason": 41},
        ).json()

        self.assertTrue(body["success"])
        self.assertIsNone(body["result"])
        self.assertIn("No games found", body["warning"])


class QuestionRouteTests(_ApiTestCase):
    def test_save_question_reuses_normalized_duplicates(self) -> None:
        first = self.client.post(
            "/api/questions",
            json={"text": "How often does the leader win?", "tags": ["wins"]},
        ).json()
        second = self.client.post(
            "/api/questions",
            json={"text": "  how often does the LEADER win?  "},
        ).json()

        self.assertFalse(first["existed"])
        self.assertTrue(second["existed"])
        self.assertEqual(first["question"]["id"], second["question"]["id"])
        self.assertEqual(["wins"], second["question"]["tags"])

        listed = self.client.get("/api/questions").json()["questions"]
        self.assertEqual(1, len(listed))

    def test_delete_question_removes_it(self) -> None:
        saved = self.client.post("/api/questions", json={"text": "Who wins most?"}).json()
        question_id = saved["question"]["id"]

        deleted = self.client.delete(f"/api/questions/{question_id}")
        missing = self.client.delete(f"/api/questions/{question_id}")

        self.assertEqual({"success": True}, deleted.json())
        self.assertEqual(404, missing.status_code)
        self.assertEqual([], self.client.get("/api/questions").json()["questions"])

    def test_save_question_requires_text(self) -> None:
        self.assertEqual(400, self.client.post("/api/questions", json={"text": "  "}).status_code)

    def test_list_questions_orders_by_last_use(self) -> None:
        db = self.SessionLocal()
        try:
            older, _ = save_question(db, "First question")
            save_question(db, "Second question")
            save_question(db, "first question")

            ordered_ids = [q.id for q in list_questions(db)]
            older_id = older.id
        finally:
            db.close()

        self.assertEqual(2, len(ordered_ids))
        self.assertEqual(older_id, ordered_ids[0])


class AskRouteTests(_ApiTestCase):
    def test_ask_generates_executes_and_saves(self) -> None:
        result = AnalysisResult(description="Games per season", total_games=3, results=[{"games": 3}])

        with patch(
            "jeopardy_stats.main.generate_analysis_code",
            return_value=("len(games)", {"totalCost": 0.01}),
        ) as mock_generate, patch(
            "jeopardy_stats.main.safe_execute",
            return_value=result,
        ) as mock_execute:
            response = self.client.post(
                "/api/ask",
                json={"questionText": "How many games?", "saveQuestion": True},
            )

        self.assertEqual(200, response.status_code)
        body = response.json()
        self.assertEqual(3, body["result"]["totalGames"])
        self.assertEqual("len(games)", body["code"])
        self.assertEqual(0.01, body["usage"]["totalCost"])
        self.assertEqual("How many games?", body["savedQuestion"]["text"])
        mock_generate.assert_called_once_with("How many games?", self.settings)
        code, games, timeout = mock_execute.call_args.args
        self.assertEqual("len(games)", code)
        self.assertEqual(3, len(games))
        self.assertEqual(5.0, timeout)

    def test_ask_requires_question_text(self) -> None:
        self.assertEqual(400, self.client.post("/api/ask", json={"questionText": "   "}).status_code)

    def test_ask_reports_generation_failure(self) -> None:
        with patch(
            "jeopardy_stats.main.generate_analysis_code",
            side_effect=CodeSynthesisError("Missing Anthropic API key"),
        ):
            response = self.client.post("/api/ask", json={"questionText": "Anything?"})

        self.assertEqual(500, response.status_code)
        self.assertEqual("code_generation", response.json()["errorKind"])

    def test_ask_reports_execution_failure_with_code(self) -> None:
        with patch(
            "jeopardy_stats.main.generate_analysis_code",
            return_value=("while True:\n    pass", {}),
        ), patch(
            "jeopardy_stats.main.safe_execute",
            side_effect=AnalysisTimeoutError("timed out", "while True:\n    pass"),
        ):
            response = self.client.post("/api/ask", json={"questionText": "Loop forever?"})

        self.assertEqual(500, response.status_code)
        body = response.json()
        self.assertFalse(body["success"])
        self.assertEqual("timeout", body["errorKind"])
        self.assertEqual("while True:\n    pass", body["code"])


if __name__ == "__main__":
    unittest.main()
