from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class LoginRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    supabase_token: str | None = Field(default=None, alias="supabaseToken")


class SignupRequest(BaseModel):
    email: str | None = Field(default=None, max_length=255)
    password: str | None = Field(default=None, max_length=256)
    name: str | None = Field(default=None, max_length=120)


class RefreshRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    refresh_token: str | None = Field(default=None, alias="refreshToken")


class AuthUserResponse(BaseModel):
    id: str
    email: str
    name: str | None


class AuthTokenResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    user: AuthUserResponse
    access_token: str = Field(alias="accessToken")
    refresh_token: str | None = Field(default=None, alias="refreshToken")
    expires_in: int = Field(alias="expiresIn")


class SignupResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    user: AuthUserResponse
    access_token: str | None = Field(default=None, alias="accessToken")
    refresh_token: str | None = Field(default=None, alias="refreshToken")
    expires_in: int | None = Field(default=None, alias="expiresIn")
    email_sent: bool | None = Field(default=None, alias="emailSent")
    message: str | None = None


class RefreshResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    access_token: str = Field(alias="accessToken")
    refresh_token: str = Field(alias="refreshToken")
    expires_in: int = Field(alias="expiresIn")


class LogoutResponse(BaseModel):
    message: str


class MeResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str
    email: str
    name: str | None
    created_at: datetime = Field(alias="createdAt")
