"""Session authentication — cookie handling and the request guard."""

import logging
from datetime import datetime, timedelta, timezone

from fastapi import Depends, Request, Response
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from api.auth.services import token_service
from api.users.dto.user import CurrentUser
from api.users.repositories import users_repository
from config import Settings, get_app_settings
from database import get_db
from errors import InvalidTokenError, PersistenceError, UnauthorizedError

logger = logging.getLogger(__name__)

COOKIE_NAME = "Authorization"


def set_session_cookie(response: Response, token: str, settings: Settings) -> None:
    max_age = int(timedelta(days=settings.cookie_max_age_days).total_seconds())
    response.set_cookie(
        key=COOKIE_NAME,
        value=token,
        max_age=max_age,
        expires=datetime.now(timezone.utc) + timedelta(seconds=max_age),
        httponly=True,
        secure=settings.cookie_secure,
        samesite="strict",
    )


def clear_session_cookie(response: Response, settings: Settings) -> None:
    response.set_cookie(
        key=COOKIE_NAME,
        value="",
        max_age=0,
        expires=datetime.now(timezone.utc) - timedelta(hours=1),
        httponly=True,
        secure=settings.cookie_secure,
        samesite="strict",
    )


def require_user(
    request: Request,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_app_settings),
) -> CurrentUser:
    """Resolve the caller from the session cookie or stop the request with 401."""
    token = request.cookies.get(COOKIE_NAME)
    if not token:
        raise UnauthorizedError("Login required")

    try:
        claims = token_service.verify_token(token, settings.secret)
    except InvalidTokenError as e:
        logger.warning("Rejected session token: %s", e.message)
        raise

    try:
        user = users_repository.get_by_id(db, claims.id)
    except SQLAlchemyError as e:
        logger.error("Failed to look up user %d for session", claims.id, exc_info=True)
        raise PersistenceError("Failed to look up user") from e
    if user is None:
        logger.warning("Session token for unknown user %d", claims.id)
        raise UnauthorizedError("User not found")

    return CurrentUser.model_validate(user)
