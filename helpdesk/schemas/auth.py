from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class LoginPayload(BaseModel):
    email: str = ""
    password: str = ""


class SignupPayload(BaseModel):
    model_config = ConfigDict(extra="ignore")

    email: Optional[str] = None
    password: Optional[str] = None
    password_confirmation: Optional[str] = None


class UserRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    tenant_id: int
    email: str
    role: str = Field(default="user")
