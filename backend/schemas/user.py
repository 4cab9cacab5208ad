from pydantic import BaseModel, ConfigDict, EmailStr, Field
from typing import Literal

# Shared properties for user models
class UserBase(BaseModel):
    email: EmailStr

# Schema for user authentication credentials
class UserLogin(UserBase):
    password: str = Field(min_length=1)

# Schema for user registration requests
class UserCreate(UserBase):
    password: str = Field(min_length=6)
    role: Literal["admin", "customer"]

# Output schema for user profile details, never exposes the password hash
class UserResponse(UserBase):
    model_config = ConfigDict(from_attributes=True)

    id: int
    role: str

class SignupResponse(BaseModel):
    message: str
    user: UserResponse

# Schema for JWT authentication token response
class Token(BaseModel):
    access_token: str
    token_type: str = "bearer"

# Schema for JWT payload contents
class TokenData(BaseModel):
    user_id: int
    role: str

# Payload of the role-restricted dashboards
class DashboardResponse(BaseModel):
    message: str
    user: TokenData
