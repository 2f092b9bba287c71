"""Auth request/response schemas."""

from pydantic import BaseModel


class RegisterRequest(BaseModel):
    name: str
    email: str
    password: str


class LoginRequest(BaseModel):
    email: str
    password: str


class UserResponse(BaseModel):
    id: int
    psid: str
    name: str
    email: str


class AuthResponse(BaseModel):
    user: UserResponse
