"""Request and response bodies for the HTTP API."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class CredentialsRequest(BaseModel):
    """Body for POST /register and POST /login."""

    model_config = ConfigDict(extra="ignore")

    username: str = Field(min_length=1)
    password: str = Field(min_length=1)


class CreateTaskRequest(BaseModel):
    """Body for POST /tasks."""

    model_config = ConfigDict(extra="ignore")

    text: str = Field(min_length=1)


class MessageResponse(BaseModel):
    message: str


class TokenResponse(BaseModel):
    token: str


class ErrorResponse(BaseModel):
    error: str
