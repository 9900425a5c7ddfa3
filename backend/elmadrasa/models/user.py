"""User-related Pydantic models"""

from pydantic import BaseModel, Field, ConfigDict
from typing import Optional
from datetime import datetime, timezone


class User(BaseModel):
    model_config = ConfigDict(extra="ignore")
    user_id: str
    email: str = ""
    name: str = "Unknown"
    role: str = "student"  # student, teacher or admin
    class_name: Optional[str] = None  # students only, e.g. "Prep 1A"
    grade: Optional[int] = None  # overall school year 1-12, see core.grade_levels
    is_approved: bool = True
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
