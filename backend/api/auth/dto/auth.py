"""Auth Data Transfer Objects."""

from pydantic import BaseModel

from api.users.dto.user import UserResponse


class SignupRequest(BaseModel):
    email: str
    password: str
    username: str | None = None


class LoginRequest(BaseModel):
    email: str
    password: str


class MessageResponse(BaseModel):
    message: str


class ValidateResponse(BaseModel):
    message: str
    user: UserResponse


class TokenClaims(BaseModel):
    id: int
    username: str = ""
    email: str = ""
    exp: int
