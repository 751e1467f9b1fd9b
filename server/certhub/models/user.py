from datetime import datetime
from typing import List
from pydantic import BaseModel, Field
import enum


class UserRole(str, enum.Enum):
    STUDENT = "student"
    TEACHER = "teacher"
    ADMIN = "admin"


class User(BaseModel):
    principal: str
    username: str
    role: UserRole = UserRole.STUDENT
    certificates: List[int] = Field(default_factory=list)  # ordered, oldest first
    created_at: datetime
    last_login: datetime

    def __repr__(self):
        return f"<User {self.username} ({self.role.value})>"
