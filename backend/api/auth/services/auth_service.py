"""Auth service — signup and login."""

import logging
from datetime import timedelta

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from werkzeug.security import check_password_hash, generate_password_hash

from api.auth.dto.auth import LoginRequest, SignupRequest
from api.auth.services import token_service
from api.users.orm.user_model import UserModel
from api.users.repositories import users_repository
from config import Settings
from errors import AuthError, ConflictError, PersistenceError, ValidationError

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS = "Invalid email or password"


def signup(session: Session, data: SignupRequest, settings: Settings) -> UserModel:
    """Create a user after checking the email is free. No token is issued here."""
    email = data.email.strip()
    if not email or not data.password:
        raise ValidationError("Invalid request body")

    # Plain lookup before insert; two concurrent signups can both get past it.
    try:
        taken = users_repository.email_exists(session, email)
    except SQLAlchemyError as e:
        logger.error("Failed to look up email for signup", exc_info=True)
        raise PersistenceError("Failed to create user") from e
    if taken:
        raise ConflictError("Email already exists")

    password_hash = generate_password_hash(data.password, method=settings.password_hash_method)
    username = (data.username or "").strip() or email.split("@", 1)[0]

    try:
        user = users_repository.create(session, username=username, email=email, password_hash=password_hash)
    except SQLAlchemyError as e:
        session.rollback()
        logger.error("Failed to create user", exc_info=True)
        raise PersistenceError("Failed to create user") from e

    logger.info("User %d signed up", user.id)
    return user


def authenticate(session: Session, data: LoginRequest) -> UserModel:
    try:
        user = users_repository.get_by_email(session, data.email.strip())
    except SQLAlchemyError as e:
        logger.error("Failed to look up user for login", exc_info=True)
        raise PersistenceError("Failed to look up user") from e
    if user is None or not check_password_hash(user.password, data.password):
        logger.warning("Failed login attempt")
        raise AuthError(INVALID_CREDENTIALS)
    return user


def login(session: Session, data: LoginRequest, settings: Settings) -> str:
    """Check credentials and return a freshly signed session token."""
    user = authenticate(session, data)
    token = token_service.issue_token(
        user,
        settings.secret,
        ttl=timedelta(days=settings.token_ttl_days),
    )
    logger.info("User %d logged in", user.id)
    return token
