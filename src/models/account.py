"""Account, principal and auth form models."""
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

EMAIL_PATTERN = r"^[^@\s]+@[^@\s]+\.[^@\s]+$"
# bcrypt only hashes the first 72 bytes and refuses anything longer
MAX_PASSWORD_BYTES = 72


def check_password_length(password: str) -> str:
    if len(password.encode("utf-8")) > MAX_PASSWORD_BYTES:
        raise ValueError(f"Password must be at most {MAX_PASSWORD_BYTES} bytes")
    return password


class Account(BaseModel):
    id: str
    username: str
    password_hash: str
    email: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    avatar: Optional[str] = None
    is_admin: bool = False
    reset_token: Optional[str] = None
    reset_expires_at: Optional[datetime] = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class AccountPublic(BaseModel):
    """What other users may see of an account."""
    id: str
    username: str
    email: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    avatar: Optional[str] = None
    is_admin: bool = False

    @classmethod
    def from_account(cls, account: Account) -> "AccountPublic":
        return cls(
            id=account.id,
            username=account.username,
            email=account.email,
            first_name=account.first_name,
            last_name=account.last_name,
            avatar=account.avatar,
            is_admin=account.is_admin,
        )


class Principal(BaseModel):
    """The authenticated actor of one request."""
    id: str
    username: str
    is_admin: bool = False

    model_config = ConfigDict(frozen=True)

    @classmethod
    def from_account(cls, account: Account) -> "Principal":
        return cls(id=account.id, username=account.username, is_admin=account.is_admin)


class RegisterForm(BaseModel):
    username: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)
    email: str = Field(..., pattern=EMAIL_PATTERN)
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    avatar: Optional[str] = None
    admin_code: Optional[str] = None

    @field_validator("password")
    @classmethod
    def password_fits_bcrypt(cls, value: str) -> str:
        return check_password_length(value)


class LoginForm(BaseModel):
    username: str
    password: str


class ForgotForm(BaseModel):
    email: str = Field(..., pattern=EMAIL_PATTERN)


class ResetForm(BaseModel):
    password: str = Field(..., min_length=1)
    confirm: str

    @field_validator("password")
    @classmethod
    def password_fits_bcrypt(cls, value: str) -> str:
        return check_password_length(value)
