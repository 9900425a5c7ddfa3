"""Notification inbox routes."""

from fastapi import APIRouter, Depends, HTTPException
from datetime import datetime, timezone

from elmadrasa.database import db
from elmadrasa.deps import get_current_user
from elmadrasa.models.user import User

router = APIRouter(tags=["notifications"])

MAX_PAGE_SIZE = 50


def _read_stamp() -> dict:
    return {"is_read": True, "read_at": datetime.now(timezone.utc).isoformat()}


@router.get("/notifications")
async def list_notifications(limit: int = MAX_PAGE_SIZE, unread_only: bool = False,
                             user: User = Depends(get_current_user)):
    """Newest first, plus the unread badge count"""
    limit = max(1, min(limit, MAX_PAGE_SIZE))
    query = {"user_id": user.user_id}
    if unread_only:
        query["is_read"] = False

    items = await db.notifications.find(query, {"_id": 0}).sort("created_at", -1).limit(limit).to_list(limit)
    unread = await db.notifications.count_documents({"user_id": user.user_id, "is_read": False})
    return {"notifications": items, "unread_count": unread}


@router.put("/notifications/mark-all-read")
async def mark_all_read(user: User = Depends(get_current_user)):
    result = await db.notifications.update_many(
        {"user_id": user.user_id, "is_read": False},
        {"$set": _read_stamp()}
    )
    return {"message": "All notifications marked as read", "count": result.modified_count}


@router.put("/notifications/{notification_id}/read")
async def mark_read(notification_id: str, user: User = Depends(get_current_user)):
    owned = {"notification_id": notification_id, "user_id": user.user_id}
    if not await db.notifications.count_documents(owned):
        raise HTTPException(status_code=404, detail="Notification not found")

    # Already-read notifications keep their original read_at
    await db.notifications.update_one({**owned, "is_read": False}, {"$set": _read_stamp()})
    return {"message": "Notification marked as read"}


@router.delete("/notifications/{notification_id}")
async def delete_notification(notification_id: str, user: User = Depends(get_current_user)):
    result = await db.notifications.delete_one({"notification_id": notification_id, "user_id": user.user_id})
    if not result.deleted_count:
        raise HTTPException(status_code=404, detail="Notification not found")
    return {"message": "Notification deleted"}
