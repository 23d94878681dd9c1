"""Auth controller — signup, login, logout and session validation."""

from fastapi import APIRouter, Depends, Response
from sqlalchemy.orm import Session

from auth import clear_session_cookie, require_user, set_session_cookie
from api.auth.dto.auth import LoginRequest, MessageResponse, SignupRequest, ValidateResponse
from api.auth.services import auth_service
from api.users.dto.user import CurrentUser
from config import Settings, get_app_settings
from database import get_db

router = APIRouter(tags=["Auth"])


@router.post("/signup", response_model=MessageResponse)
def signup(
    data: SignupRequest,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_app_settings),
):
    auth_service.signup(db, data, settings)
    return MessageResponse(message="User created successfully")


@router.post("/login", response_model=MessageResponse)
def login(
    data: LoginRequest,
    response: Response,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_app_settings),
):
    token = auth_service.login(db, data, settings)
    set_session_cookie(response, token, settings)
    return MessageResponse(message="User logged in successfully")


@router.post("/logout", response_model=MessageResponse)
async def logout(response: Response, settings: Settings = Depends(get_app_settings)):
    clear_session_cookie(response, settings)
    return MessageResponse(message="User logged out successfully")


@router.get("/validate", response_model=ValidateResponse)
async def validate(user: CurrentUser = Depends(require_user)):
    return ValidateResponse(message="You are logged in", user=user)
