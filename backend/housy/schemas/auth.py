from pydantic import BaseModel, EmailStr, Field


class RegisterRequest(BaseModel):
    email: EmailStr
    password: str = Field(min_length=6, max_length=128)
    full_name: str | None = Field(default=None, max_length=120)


class LoginRequest(BaseModel):
    email: EmailStr
    password: str = Field(min_length=1, max_length=128)


class UserResponse(BaseModel):
    id: str
    email: EmailStr
    full_name: str | None = None
    household_id: str | None = None
    household_name: str | None = None
    role: str | None = None


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"


class AuthResponse(BaseModel):
    token: TokenResponse
    user: UserResponse


class ProfileUpdateRequest(BaseModel):
    full_name: str | None = Field(default=None, max_length=120)


class PasswordChangeRequest(BaseModel):
    # Length is checked by the service so the error reaches the user verbatim.
    new_password: str = Field(max_length=128)
