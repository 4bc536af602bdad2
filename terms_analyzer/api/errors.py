from __future__ import annotations

from typing import Optional

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import BaseModel

ERROR_URN = "urn:terms-analyzer:error"


class ProblemDetail(BaseModel):
    """RFC 7807 Problem Details response."""

    type: str = "about:blank"
    title: str
    status: int
    detail: str
    instance: Optional[str] = None
    errors: Optional[list[dict]] = None


def problem_response(
    request: Request,
    status: int,
    title: str,
    detail: str,
    kind: str,
    errors: Optional[list[dict]] = None,
) -> JSONResponse:
    problem = ProblemDetail(
        type=f"{ERROR_URN}:{kind}",
        title=title,
        status=status,
        detail=detail,
        instance=str(request.url),
        errors=errors,
    )
    return JSONResponse(status_code=status, content=problem.model_dump(exclude_none=True))


def _field_errors(exc: RequestValidationError) -> list[dict]:
    fields = []
    for err in exc.errors():
        field = ".".join(str(part) for part in err["loc"] if part not in ("body", "query"))
        fields.append({"field": field, "message": err["msg"], "type": err["type"]})
    return fields


async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    fields = _field_errors(exc)
    return problem_response(
        request,
        status=422,
        title="Invalid Request",
        detail="; ".join(f"{f['field']}: {f['message']}" for f in fields),
        kind="validation",
        errors=fields,
    )
