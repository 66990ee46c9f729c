from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field
from pydantic.alias_generators import to_camel

from task_service.models import Role


class CamelModel(BaseModel):
    """Serializes with camelCase keys, accepts either case on input."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# -------------------------
# Users
# -------------------------
class RegisterRequest(BaseModel):
    email: EmailStr
    password: str = Field(min_length=1)
    role: Role = Role.standard_user


class LoginRequest(BaseModel):
    email: str
    password: str


class UserProfile(BaseModel):
    id: str
    email: str
    role: Role


class AuthResponse(UserProfile):
    token: str


# -------------------------
# Tasks
# -------------------------
class TaskCreate(BaseModel):
    title: Optional[str] = None
    description: Optional[str] = None
    status: Optional[str] = None


class TaskUpdate(BaseModel):
    title: Optional[str] = None
    description: Optional[str] = None
    status: Optional[str] = None


class Task(CamelModel):
    id: str
    owner_id: str
    title: str
    description: Optional[str] = None
    status: str
    created_at: datetime
    updated_at: datetime


class PageEnvelope(CamelModel):
    items: List[Task]
    page: int
    page_count: int
    total_count: int
    page_size: int


class MessageResponse(BaseModel):
    message: str
