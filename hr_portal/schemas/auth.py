from __future__ import annotations

from pydantic import AliasChoices, BaseModel, ConfigDict, Field


class UserProfile(BaseModel):
    """Cached copy of the signed-in user, owned by the backend."""

    model_config = ConfigDict(extra="ignore", coerce_numbers_to_str=True)

    id: str
    email: str
    name: str = ""
    role: str = ""


class LoginRequest(BaseModel):
    email: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)


class LoginResponse(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    token: str = Field(..., min_length=1, validation_alias=AliasChoices("token", "accessToken", "access_token"))
    user: UserProfile
