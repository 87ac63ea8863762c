from __future__ import annotations

import unittest

from jeopardy_stats.ai.sandbox import (
    AnalysisRuntimeError,
    AnalysisSyntaxError,
    AnalysisTimeoutError,
    InvalidResultError,
    UnsafeCodeError,
    safe_execute,
    validate_code,
)
from jeopardy_stats.ingestion.schema import Game


def _games() -> list[Game]:
    return [
        Game.model_validate(
            {"gameId": 1, "finalScores": [{"player": "A", "score": 20000}, {"player": "B", "score": 100}]}
        ),
        Game.model_validate(
            {"gameId": 2, "finalScores": [{"player": "A", "score": 0}, {"player": "B", "score": 9000}]}
        ),
    ]


class ValidateCodeTests(unittest.TestCase):
    def test_rejects_imports(self) -> None:
        with self.assertRaises(UnsafeCodeError):
            validate_code("import os\nos.listdir('.')")
        with self.assertRaises(UnsafeCodeError):
            validate_code("from pathlib import Path")

    def test_rejects_forbidden_names_and_dunder_attributes(self) -> None:
        for code in (
            "open('secrets.txt')",
            "eval('1 + 1')",
            "getattr(games, 'x')",
            "games.__class__",
            "().__class__.__bases__",
            "'{0.x}'.format(games)",
        ):
            with self.subTest(code=code):
                with self.assertRaises(UnsafeCodeError):
                    validate_code(code)

    def test_rejects_model_parsing_entry_points(self) -> None:
        for code in (
            "games[0].parse_raw(b'x', proto='pickle', allow_pickle=True)",
            "games[0].parse_file('game.pkl', allow_pickle=True)",
            "games[0].model_validate({})",
            "games[0].model_construct()",
            "games[0].copy()",
        ):
            with self.subTest(code=code):
                with self.assertRaises(UnsafeCodeError):
                    validate_code(code)

    def test_rejects_class_patterns_on_unlisted_attributes(self) -> None:
        code = "match games[0]:\n    case tuple(parse_raw=p):\n        pass"

        with self.assertRaises(UnsafeCodeError):
            validate_code(code)

    def test_rejects_class_definitions(self) -> None:
        with self.assertRaises(UnsafeCodeError):
            validate_code("class Foo:\n    pass")

    def test_syntax_error_is_reported_with_kind(self) -> None:
        with self.assertRaises(AnalysisSyntaxError) as ctx:
            validate_code("def broken(:\n    pass")

        self.assertEqual("syntax_error", ctx.exception.kind)
        self.assertIn("def broken", ctx.exception.code)

    def test_plain_analysis_code_passes(self) -> None:
        validate_code(
            "wins = sum(1 for g in games if helpers.get_winner(g) == 'A')\n"
            "{'description': 'A wins', 'totalGames': len(games), 'results': [{'wins': wins}]}"
        )


class SafeExecuteTests(unittest.TestCase):
    def test_unsafe_code_is_rejected_before_running(self) -> None:
        code = "import subprocess"

        with self.assertRaises(UnsafeCodeError) as ctx:
            safe_execute(code, _games())

        self.assertEqual("unsafe_code", ctx.exception.kind)
        self.assertEqual(code, ctx.exception.code)

    def test_last_expression_is_the_result(self) -> None:
        code = (
            "winners = Counter(helpers.get_winner(g) for g in games)\n"
            "rows = [{'player': p, 'wins': n} for p, n in sorted(winners.items())]\n"
            "{'description': 'Wins per player', 'totalGames': len(games), 'results': rows}"
        )

        result = safe_execute(code, _games())

        self.assertEqual(2, result.total_games)
        self.assertEqual("Wins per player", result.description)
        self.assertEqual([{"player": "A", "wins": 1}, {"player": "B", "wins": 1}], result.results)
        self.assertIsNone(result.query)

    def test_games_arrive_as_read_only_views(self) -> None:
        code = (
            "first = games[0]\n"
            "{'description': 'Game surface', 'totalGames': len(games), 'results': [{\n"
            "    'hasParseRaw': hasattr(first, 'parse_raw'),\n"
            "    'hasModelValidate': hasattr(first, 'model_validate'),\n"
            "    'scoresAreTuple': isinstance(first.final_scores, tuple),\n"
            "    'winner': helpers.getWinner(first),\n"
            "}]}"
        )

        result = safe_execute(code, _games())

        self.assertEqual(
            [{"hasParseRaw": False, "hasModelValidate": False, "scoresAreTuple": True, "winner": "A"}],
            result.results,
        )

    def test_runtime_error_is_wrapped(self) -> None:
        with self.assertRaises(AnalysisRuntimeError) as ctx:
            safe_execute("total = 1 / 0\ntotal", _games())

        self.assertIn("ZeroDivisionError", str(ctx.exception))

    def test_non_dict_result_is_invalid(self) -> None:
        with self.assertRaises(InvalidResultError):
            safe_execute("[g.game_id for g in games]", _games())

    def test_missing_result_is_invalid(self) -> None:
        with self.assertRaises(InvalidResultError):
            safe_execute("x = 1", _games())

    def test_result_with_wrong_field_types_is_invalid(self) -> None:
        code = "{'description': 'x', 'totalGames': '2', 'results': []}"

        with self.assertRaises(InvalidResultError) as ctx:
            safe_execute(code, _games())

        self.assertEqual("invalid_result", ctx.exception.kind)

    def test_nested_values_in_rows_are_invalid(self) -> None:
        code = "{'description': 'x', 'totalGames': 2, 'results': [{'ids': [1, 2]}]}"

        with self.assertRaises(InvalidResultError):
            safe_execute(code, _games())

    def test_runaway_code_times_out(self) -> None:
        with self.assertRaises(AnalysisTimeoutError) as ctx:
            safe_execute("while True:\n    pass", _games(), timeout=1)

        self.assertEqual("timeout", ctx.exception.kind)


if __name__ == "__main__":
    unittest.main()
