"""Translate domain errors into HTTP errors."""

from fastapi import HTTPException

from app.services.errors import (
    IncompleteData,
    IndeterminateOutcome,
    InvalidBestOf,
    InvalidCursor,
    LeagueError,
    MatchNotFound,
    SeasonNotFound,
    StageNotFound,
    WrongStageKind,
)
from app.utils.error_messages import get_error_message

STATUS_CODES: list[tuple[type[LeagueError], int]] = [
    (StageNotFound, 404),
    (MatchNotFound, 404),
    (SeasonNotFound, 404),
    (WrongStageKind, 409),
    (InvalidCursor, 400),
    (IndeterminateOutcome, 422),
    (IncompleteData, 422),
    (InvalidBestOf, 422),
]


def http_error(exc: LeagueError) -> HTTPException:
    for error_class, status_code in STATUS_CODES:
        if isinstance(exc, error_class):
            break
    else:
        status_code = 500

    return HTTPException(
        status_code=status_code,
        detail={"code": exc.code, "message": get_error_message(exc.code), "detail": exc.message},
    )
