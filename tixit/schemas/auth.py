import re

from pydantic import BaseModel, Field, field_validator

EMAIL_RE = re.compile(r"^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$")


def _check_email(v: str) -> str:
    clean = v.strip().lower()
    if not EMAIL_RE.match(clean):
        raise ValueError("Invalid email format")
    return clean


class SignupRequest(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    email: str = Field(max_length=320)  # plain str; format checked below
    password: str = Field(min_length=6, max_length=128)

    @field_validator("name")
    @classmethod
    def name_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Name is required")
        return v

    @field_validator("email")
    @classmethod
    def valid_email(cls, v: str) -> str:
        return _check_email(v)


class LoginRequest(BaseModel):
    email: str = Field(min_length=1, max_length=320)
    password: str = Field(min_length=1, max_length=128)

    @field_validator("email")
    @classmethod
    def lower_email(cls, v: str) -> str:
        return v.strip().lower()


class ChangePasswordRequest(BaseModel):
    currentPassword: str = Field(default="", max_length=128)
    newPassword: str = Field(default="", max_length=128)


class UserSummary(BaseModel):
    id: str
    name: str
    email: str


class AuthResponse(BaseModel):
    token: str
    user: UserSummary


class PasswordChanged(BaseModel):
    message: str
    token: str
