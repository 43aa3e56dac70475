"""Response formatting: error envelope, pagination and request body parsing."""

import json
import logging
from dataclasses import dataclass
from typing import Annotated, Any, TypeVar

from fastapi import Depends, FastAPI, Query, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from fieldsmart.auth.middleware import SettingsDep
from fieldsmart.errors import AppError, ConflictError, PersistenceError, ValidationError
from fieldsmart.schemas.common import Page

logger = logging.getLogger(__name__)

S = TypeVar("S", bound=BaseModel)


def error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    level = logging.ERROR if exc.status_code >= 500 else logging.WARNING
    logger.log(level, "%s %s failed with %d: %s", request.method, request.url.path, exc.status_code, exc.message)
    return error_response(exc.status_code, exc.message)


async def integrity_error_handler(request: Request, exc: IntegrityError) -> JSONResponse:
    logger.warning("%s %s violated a constraint: %s", request.method, request.url.path, exc.orig)
    error = ConflictError("Record conflicts with existing data")
    return error_response(error.status_code, error.message)


async def database_error_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    logger.error("%s %s database error", request.method, request.url.path, exc_info=exc)
    # Driver messages stay in the log
    error = PersistenceError()
    return error_response(error.status_code, error.message)


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    problems = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error.get("loc", ()) if part not in ("query", "path", "body"))
        problems.append(f"{location}: {error.get('msg')}" if location else str(error.get("msg")))
    message = "Invalid fields: " + "; ".join(problems)
    logger.warning("%s %s rejected: %s", request.method, request.url.path, message)
    return error_response(400, message)


async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return error_response(exc.status_code, str(exc.detail))


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error("%s %s unhandled error", request.method, request.url.path, exc_info=exc)
    return error_response(500, "Internal server error")


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(AppError, app_error_handler)
    app.add_exception_handler(IntegrityError, integrity_error_handler)
    app.add_exception_handler(SQLAlchemyError, database_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(StarletteHTTPException, http_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)


@dataclass(frozen=True)
class PageParams:
    limit: int
    offset: int


def get_page_params(
    settings: SettingsDep,
    limit: Annotated[int | None, Query(ge=1)] = None,
    offset: Annotated[int, Query(ge=0)] = 0,
) -> PageParams:
    """limit defaults to the configured page size and is capped at the maximum."""
    return PageParams(limit=min(limit or settings.default_page_size, settings.max_page_size), offset=offset)


PageDep = Annotated[PageParams, Depends(get_page_params)]


def to_page(schema: type[S], records: list[Any], total: int, page: PageParams) -> Page[S]:
    return Page[schema](
        items=[schema.model_validate(record) for record in records],
        total=total,
        limit=page.limit,
        offset=page.offset,
    )


async def get_json_body(request: Request) -> Any:
    """
    Raw JSON body; validation against the operation schema happens in the route.

    Declared after the tenant dependency so a missing tenant is reported first.
    """
    raw = await request.body()
    if not raw.strip():
        return {}
    try:
        return json.loads(raw)
    except ValueError:
        raise ValidationError("Request body must be valid JSON") from None


JsonBody = Annotated[Any, Depends(get_json_body)]
