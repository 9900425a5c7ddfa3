"""
FastAPI dependencies - get_current_user, get_teacher_user, etc.

Authentication happens in front of this service; the gateway forwards the
authenticated user's id in the X-User-Id header.
"""

from fastapi import Header, HTTPException, Depends
from typing import Optional

from .database import db
from .models.user import User


async def get_current_user(x_user_id: Optional[str] = Header(default=None)) -> User:
    """Load the calling user"""
    if not x_user_id:
        raise HTTPException(status_code=401, detail="Not authenticated")

    user = await db.users.find_one({"user_id": x_user_id}, {"_id": 0})
    if not user:
        raise HTTPException(status_code=401, detail="User not found")

    if not user.get("is_approved", True):
        raise HTTPException(status_code=403, detail="Account awaiting approval")

    return User(**user)


async def get_teacher_user(user: User = Depends(get_current_user)) -> User:
    if user.role not in ("teacher", "admin"):
        raise HTTPException(status_code=403, detail="Teacher access required")
    return user


async def get_student_user(user: User = Depends(get_current_user)) -> User:
    if user.role != "student":
        raise HTTPException(status_code=403, detail="Only students can do this")
    return user
