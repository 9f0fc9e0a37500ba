"""Authentication-related request and response schemas."""

from pydantic import BaseModel, ConfigDict


class LoginRequest(BaseModel):
    """Operator login from a paired terminal."""

    username: str
    password: str
    device_id: str


class TokenResponse(BaseModel):
    """JWT response payload."""

    access_token: str
    token_type: str = "bearer"


class OperatorResponse(BaseModel):
    id: int
    name: str
    username: str
    role: str

    model_config = ConfigDict(from_attributes=True)
