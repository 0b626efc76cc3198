import re
from pydantic import EmailStr, Field, field_validator
from typing import Optional
from datetime import datetime

from models.base import ApiModel

MOBILE_PATTERN = re.compile(r"^[0-9]{10}$")


def _check_mobile(value: Optional[str]) -> Optional[str]:
    if value is not None and not MOBILE_PATTERN.match(value):
        raise ValueError("Invalid mobile number. Must be 10 digits")
    return value


class UserProfileBase(ApiModel):
    full_name: str
    email: str
    mobile_number: Optional[str] = None


class UserProfile(UserProfileBase):
    id: str
    role: str = "user"
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class UserProfileDraft(UserProfileBase):
    role: str = "user"
    password_hash: str


class UserSignup(ApiModel):
    full_name: str = Field(min_length=1)
    mobile_number: str
    email: EmailStr
    password: str

    @field_validator("mobile_number")
    @classmethod
    def mobile_is_ten_digits(cls, v):
        return _check_mobile(v)

    @field_validator("password")
    @classmethod
    def password_long_enough(cls, v):
        if len(v) < 6:
            raise ValueError("Password must be at least 6 characters long")
        return v


class UserLogin(ApiModel):
    email: EmailStr
    password: str


class UserProfileUpdate(ApiModel):
    full_name: Optional[str] = Field(default=None, min_length=1)
    mobile_number: Optional[str] = None

    @field_validator("mobile_number")
    @classmethod
    def mobile_is_ten_digits(cls, v):
        return _check_mobile(v)


class AuthResult(ApiModel):
    user: UserProfile
    token: str
