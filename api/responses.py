"""
JSON envelope shared by every endpoint:

    {"success": bool, "message": str, "data"?: ..., "errors"?: [...]}
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from pydantic import BaseModel


def api_response(
    success: bool,
    message: str,
    data: Any = None,
    errors: Optional[List[Dict[str, str]]] = None,
    status_code: int = 200,
) -> JSONResponse:
    body: Dict[str, Any] = {"success": success, "message": message}
    if data is not None:
        if isinstance(data, BaseModel):
            data = data.model_dump(mode="json", by_alias=True)
        body["data"] = jsonable_encoder(data)
    if errors is not None:
        body["errors"] = errors
    return JSONResponse(body, status_code=status_code)
