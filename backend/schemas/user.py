from datetime import datetime
from pydantic import BaseModel, ConfigDict, EmailStr, Field, model_validator
from typing import Optional

# Shared properties for user models
class UserBase(BaseModel):
    email: EmailStr

# Schema for user authentication credentials
class UserLogin(BaseModel):
    # Plain string: a malformed address fails like any unknown one
    email: str
    password: str

# Schema for registration requests; the confirmation must repeat the password
class UserCreate(UserBase):
    password: str = Field(..., min_length=6)
    confirm_password: str

    @model_validator(mode="after")
    def _passwords_match(self):
        if self.password != self.confirm_password:
            raise ValueError("Passwords do not match")
        return self

# Output schema for user profile details
class UserResponse(UserBase):
    id: int
    name: Optional[str] = None
    registration_date: datetime

    model_config = ConfigDict(from_attributes=True)

class MessageResponse(BaseModel):
    message: str

# Schema for JWT authentication token response
class Token(BaseModel):
    token: str
    token_type: str = "bearer"
