from pydantic import BaseModel, Field


class UserCreate(BaseModel):
    username: str = Field(min_length=1, max_length=31)
    password: str = Field(min_length=1)


class UserLogin(BaseModel):
    username: str
    password: str


class Token(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user_id: int
    username: str


class TokenData(BaseModel):
    user_id: int | None = None


class UserResponse(BaseModel):
    user_id: int
    username: str


class AuthConfig(BaseModel):
    allow_registration: bool
