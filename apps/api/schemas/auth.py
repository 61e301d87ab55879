from pydantic import BaseModel, Field


class RegisterRequest(BaseModel):
    email: str
    name: str = Field(min_length=1)
    password: str = Field(min_length=6)
    profilePhoto: str | None = None
    address: str | None = None


class CreateAdminRequest(BaseModel):
    email: str
    name: str = Field(min_length=1)
    password: str = Field(min_length=6)
    profilePhoto: str | None = None
    contactNumber: str | None = None


class LoginRequest(BaseModel):
    email: str
    password: str


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
