"""Helpers for the JSON envelope every API response uses.

    {"success": bool, "data": ..., "error": {"code", "message", "details"} | null}
"""

from __future__ import annotations

from typing import Any

from flask import Response, jsonify

ResponseTuple = tuple[Response, int]


def _envelope(success: bool, data: Any, error: dict[str, Any] | None, status_code: int) -> ResponseTuple:
    return jsonify({"success": success, "data": data, "error": error}), status_code


def ok(data: Any, status_code: int = 200) -> ResponseTuple:
    """Success response."""

    return _envelope(True, data, None, status_code)


def fail(code: str, message: str, status_code: int, details: Any | None = None) -> ResponseTuple:
    """Error response."""

    return _envelope(False, None, {"code": code, "message": message, "details": details}, status_code)
