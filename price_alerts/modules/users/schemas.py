from pydantic import BaseModel, EmailStr, field_validator


class UserRequestLogin(BaseModel):
    email: EmailStr
    password: str


class UserRequestAdd(BaseModel):
    email: EmailStr
    password: str

    @field_validator("password")
    def password_length(cls, v):
        if len(v) < 8:
            raise ValueError("Password must be at least 8 characters long")
        if len(v) > 64:
            raise ValueError("Password must be at most 64 characters long")
        return v


class UserAdd(BaseModel):
    email: EmailStr
    hashed_password: str


class User(BaseModel):
    id: int
    email: EmailStr


class UserWithHashedPassword(User):
    hashed_password: str
