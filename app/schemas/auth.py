from pydantic import BaseModel, ConfigDict, field_validator
from typing import Optional

class AdminLogin(BaseModel):
    username: str
    password: str

    @field_validator('username', 'password')
    @classmethod
    def not_blank(cls, v):
        if not v.strip():
            raise ValueError('Username and password are required')
        return v.strip()

class AdminResponse(BaseModel):
    id: int
    username: str
    email: str
    role: Optional[str] = "admin"

    model_config = ConfigDict(from_attributes=True)

class Token(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user: AdminResponse
