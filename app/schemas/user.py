from datetime import datetime
from pydantic import BaseModel, EmailStr, Field
from typing import Optional


class RegisterUser(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    username: str = Field(..., min_length=3, max_length=20, pattern=r"^[a-zA-Z0-9_]+$")
    email: EmailStr
    phone: str = Field(..., min_length=10, max_length=20, pattern=r"^[0-9+\-\s()]+$")
    password: str = Field(..., min_length=8, max_length=300)
    confirm_password: str

class UserLogin(BaseModel):
    email: EmailStr
    password: str

class TwoFactorLogin(UserLogin):
    code: str = Field(..., min_length=6, max_length=6)

class VerifyOtp(BaseModel):
    email: EmailStr
    code: str = Field(..., min_length=6, max_length=6)

class ResendOtp(BaseModel):
    email: EmailStr

class ChangePassword(BaseModel):
    current_password: str
    password: str = Field(..., min_length=8, max_length=300)
    confirm_password: str

class PasswordResetRequest(BaseModel):
    email: EmailStr

class UpdatePassword(BaseModel):
    token: str
    password: str = Field(..., min_length=8, max_length=300)
    confirm_password: str

class Activate2FA(BaseModel):
    code: str = Field(..., min_length=6, max_length=6)

class UpdateProfile(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    username: str = Field(..., min_length=3, max_length=20, pattern=r"^[a-zA-Z0-9_]+$")
    email: EmailStr
    phone: str = Field(..., min_length=10, max_length=20, pattern=r"^[0-9+\-\s()]+$")

class UserOut(BaseModel):
    id: int
    name: str
    username: str
    email: EmailStr
    phone: str
    is_verified: bool
    two_factor_enabled: bool
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = {
        "from_attributes": True
    }

class UserSummary(BaseModel):
    id: int
    name: str
    username: str
    phone: str

    model_config = {
        "from_attributes": True
    }
