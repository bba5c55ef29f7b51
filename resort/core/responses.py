from typing import Any

from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse


def success(message: str, data: Any = None, status_code: int = 200) -> JSONResponse:
    body: dict[str, Any] = {"ok": True, "message": message}
    if data is not None:
        body["data"] = data
    return JSONResponse(status_code=status_code, content=jsonable_encoder(body))


def failure(message: str, status_code: int = 400, errors: Any = None) -> JSONResponse:
    body: dict[str, Any] = {"ok": False, "message": message}
    if errors is not None:
        body["errors"] = errors
    return JSONResponse(status_code=status_code, content=jsonable_encoder(body))


def availability(available: bool, message: str) -> JSONResponse:
    # Availability keeps its own flat shape; "unavailable" is a normal 200 outcome
    return JSONResponse(status_code=200, content={"ok": True, "available": available, "message": message})
