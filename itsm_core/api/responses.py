"""
Response helpers for the HTTP boundary.

Bodies are plain dicts keyed by domain object name (``ticket``, ``tickets``)
with camelCase fields. Errors are ``{"error": "<short message>"}``.
"""

from typing import Any, Dict, Iterable, List

from fastapi.responses import JSONResponse
from pydantic import BaseModel

GENERIC_ERROR_MESSAGE = "internal server error"


def dump(model: BaseModel) -> Dict[str, Any]:
    return model.model_dump(by_alias=True, mode="json")


def dump_all(models: Iterable[BaseModel]) -> List[Dict[str, Any]]:
    return [dump(m) for m in models]


def error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})
