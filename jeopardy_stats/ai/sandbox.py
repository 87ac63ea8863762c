"""Run generated analysis code against the games with a restricted surface.

Generated code sees only ``games`` (as read-only views, never the pydantic
models), ``helpers`` and a short list of pure builtins. It is rejected up
front when it imports, names a dangerous builtin or touches an attribute
outside a fixed allowlist, then executed in a separate process that the
host kills once the deadline passes.
"""

from __future__ import annotations

import ast
import builtins
import logging
import math
import multiprocessing
import statistics
from collections import Counter, defaultdict
from dataclasses import fields
from types import SimpleNamespace
from typing import Any, Iterable

from pydantic import ValidationError

from jeopardy_stats.ai.views import GameView, to_view, view_field_names
from jeopardy_stats.analysis.helpers import HELPERS, RankedScores
from jeopardy_stats.analysis.schema import AnalysisResult
from jeopardy_stats.ingestion.schema import Game

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_SECONDS = 30
_RESULT_NAME = "_analysis_result"
_JOIN_GRACE_SECONDS = 5

FORBIDDEN_NAMES = frozenset(
    {
        "__import__", "breakpoint", "builtins", "compile", "ctypes", "delattr",
        "dir", "eval", "exec", "exit", "getattr", "globals", "help", "importlib",
        "input", "io", "locals", "marshal", "memoryview", "multiprocessing",
        "object", "open", "os", "pathlib", "pickle", "quit", "setattr", "shutil",
        "signal", "socket", "subprocess", "super", "sys", "threading", "type", "vars",
    }
)

_STATISTICS = {
    "mean": statistics.mean,
    "median": statistics.median,
    "mode": statistics.mode,
    "pstdev": statistics.pstdev,
    "stdev": statistics.stdev,
}

# Pure container and string methods. str.format is left out: its
# replacement fields walk attributes the AST check never sees.
SAFE_METHODS = frozenset(
    {
        "add", "append", "capitalize", "count", "difference", "discard", "elements",
        "endswith", "extend", "find", "get", "index", "insert", "intersection",
        "is_integer", "isalpha", "isdigit", "items", "join", "keys", "ljust", "lower",
        "lstrip", "most_common", "pop", "remove", "replace", "reverse", "rjust",
        "rsplit", "rstrip", "setdefault", "sort", "split", "splitlines", "startswith",
        "strip", "title", "total", "union", "update", "upper", "values", "zfill",
    }
)

# Anything else (model classmethods, frames, code objects) is rejected.
ALLOWED_ATTRIBUTES = (
    view_field_names()
    | frozenset(f.name for f in fields(RankedScores))
    | frozenset(HELPERS)
    | frozenset(_STATISTICS)
    | frozenset(name for name in dir(math) if not name.startswith("_"))
    | SAFE_METHODS
)

SAFE_BUILTINS: dict[str, Any] = {
    name: getattr(builtins, name)
    for name in (
        "abs", "all", "any", "bool", "dict", "divmod", "enumerate", "filter",
        "float", "frozenset", "hasattr", "int", "isinstance", "len", "list", "map",
        "max", "min", "next", "pow", "range", "reversed", "round", "set", "sorted",
        "str", "sum", "tuple", "zip", "Exception", "IndexError", "KeyError",
        "TypeError", "ValueError", "ZeroDivisionError",
    )
}


class AnalysisExecutionError(RuntimeError):
    kind = "execution_error"

    def __init__(self, message: str, code: str = "") -> None:
        super().__init__(message)
        self.code = code


class UnsafeCodeError(AnalysisExecutionError):
    kind = "unsafe_code"


class AnalysisSyntaxError(AnalysisExecutionError):
    kind = "syntax_error"


class AnalysisRuntimeError(AnalysisExecutionError):
    kind = "runtime_error"


class AnalysisTimeoutError(AnalysisExecutionError):
    kind = "timeout"


class InvalidResultError(AnalysisExecutionError):
    kind = "invalid_result"


def _reject(code: str, node: ast.AST, reason: str) -> None:
    line = getattr(node, "lineno", "?")
    raise UnsafeCodeError(f"Potentially dangerous code at line {line}: {reason}", code)


def validate_code(code: str) -> ast.Module:
    """Parse the fragment and reject disallowed constructs before running it."""

    try:
        tree = ast.parse(code, filename="<analysis>", mode="exec")
    except SyntaxError as exc:
        raise AnalysisSyntaxError(f"Analysis code does not parse: {exc}", code) from exc

    for node in ast.walk(tree):
        if isinstance(node, (ast.Import, ast.ImportFrom)):
            _reject(code, node, "import statements are not allowed")
        elif isinstance(node, ast.ClassDef):
            _reject(code, node, "class definitions are not allowed")
        elif isinstance(node, ast.Name):
            if node.id in FORBIDDEN_NAMES or node.id.startswith("__"):
                _reject(code, node, f"name '{node.id}' is not allowed")
        elif isinstance(node, ast.Attribute):
            if node.attr not in ALLOWED_ATTRIBUTES:
                _reject(code, node, f"attribute '{node.attr}' is not allowed")
        elif isinstance(node, ast.MatchClass):
            for attr in node.kwd_attrs:
                if attr not in ALLOWED_ATTRIBUTES:
                    _reject(code, node, f"attribute '{attr}' is not allowed")
        elif isinstance(node, (ast.FunctionDef, ast.AsyncFunctionDef, ast.arg)):
            name = node.name if not isinstance(node, ast.arg) else node.arg
            if name.startswith("__"):
                _reject(code, node, f"name '{name}' is not allowed")
    return tree


def _capture_last_expression(tree: ast.Module) -> ast.Module:
    if tree.body and isinstance(tree.body[-1], ast.Expr):
        last = tree.body[-1]
        tree.body[-1] = ast.copy_location(
            ast.Assign(targets=[ast.Name(id=_RESULT_NAME, ctx=ast.Store())], value=last.value),
            last,
        )
        ast.fix_missing_locations(tree)
    return tree


def _sandbox_namespace(games: list[GameView]) -> dict[str, Any]:
    allowed = dict(SAFE_BUILTINS)
    allowed["print"] = lambda *args, **kwargs: None
    return {
        "__builtins__": allowed,
        "games": games,
        "helpers": SimpleNamespace(**HELPERS),
        "math": math,
        "statistics": SimpleNamespace(**_STATISTICS),
        "Counter": Counter,
        "defaultdict": defaultdict,
    }


def _execute_in_child(conn, code: str, games: list[GameView]) -> None:
    try:
        tree = _capture_last_expression(validate_code(code))
        namespace = _sandbox_namespace(games)
        exec(compile(tree, "<analysis>", "exec"), namespace)
        if _RESULT_NAME in namespace:
            value = namespace[_RESULT_NAME]
        else:
            value = namespace.get("result")
        conn.send(("ok", value))
    except Exception as exc:
        conn.send(("error", f"{type(exc).__name__}: {exc}"))
    finally:
        conn.close()


def _validate_result(value: Any, code: str) -> AnalysisResult:
    if not isinstance(value, dict):
        raise InvalidResultError(
            f"Analysis code must return a dict, got {type(value).__name__}",
            code,
        )
    try:
        return AnalysisResult.model_validate(value)
    except ValidationError as exc:
        problems = "; ".join(
            f"{'.'.join(str(part) for part in error['loc'])}: {error['msg']}"
            for error in exc.errors()[:5]
        )
        raise InvalidResultError(f"Result has the wrong shape: {problems}", code) from exc


def execute_analysis(
    code: str,
    games: Iterable[Game],
    timeout: float = DEFAULT_TIMEOUT_SECONDS,
) -> AnalysisResult:
    context = multiprocessing.get_context("spawn")
    receiver, sender = context.Pipe(duplex=False)
    process = context.Process(
        target=_execute_in_child,
        args=(sender, code, [to_view(game) for game in games]),
        daemon=True,
    )
    process.start()
    sender.close()

    try:
        if not receiver.poll(timeout):
            logger.warning("Analysis code timed out after %ss; terminating pid=%s", timeout, process.pid)
            raise AnalysisTimeoutError(
                f"Analysis code timed out (exceeded {timeout:g} seconds)",
                code,
            )
        try:
            status, payload = receiver.recv()
        except EOFError as exc:
            raise AnalysisRuntimeError(
                f"Analysis process exited without a result (exitcode={process.exitcode})",
                code,
            ) from exc
    finally:
        if process.is_alive():
            process.terminate()
        process.join(_JOIN_GRACE_SECONDS)
        receiver.close()

    if status != "ok":
        raise AnalysisRuntimeError(f"Code execution failed: {payload}", code)
    return _validate_result(payload, code)


def safe_execute(
    code: str,
    games: Iterable[Game],
    timeout: float = DEFAULT_TIMEOUT_SECONDS,
) -> AnalysisResult:
    """Validate, then run generated code with a hard wall-clock deadline."""

    validate_code(code)
    return execute_analysis(code, games, timeout=timeout)
