# webinar_manager/schemas/auth.py
from pydantic import BaseModel, Field


class LoginRequest(BaseModel):
    password: str = Field("", description="Shared admin password.")
