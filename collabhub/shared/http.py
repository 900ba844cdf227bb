from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from typing import Any, Optional

from collabhub.shared.errors import AppError

def ok(data: Any = None, **extra):
    return {"ok": True, "data": data, **extra}

def err_body(message: str, code: str = "bad_request", details: Optional[Any] = None) -> dict:
    return {"ok": False, "error": {"code": code, "message": message, "details": details}}

async def app_error_handler(request: Request, exc: AppError):
    return JSONResponse(status_code=exc.status, content=err_body(exc.message, exc.code, exc.details))

async def request_validation_handler(request: Request, exc: RequestValidationError):
    problems = [{"item": ".".join(map(str, e["loc"])), "reason": e["msg"]} for e in exc.errors()]
    return JSONResponse(status_code=422, content=err_body("Invalid request", "validation_error", problems))
