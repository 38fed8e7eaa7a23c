from fastapi import APIRouter, Depends, Query
from courtbook.database.supabase_client import get_service_supabase
from courtbook.modules.notifications.schemas import (
    NotificationResponse, UnreadCountResponse, MarkAllReadResponse
)
from courtbook.modules.notifications.service import NotificationService
from courtbook.core.dependencies import get_current_user
from supabase import Client
from typing import List, Dict

router = APIRouter(prefix="/notifications", tags=["notifications"])


def get_notification_service(supabase: Client = Depends(get_service_supabase)) -> NotificationService:
    return NotificationService(supabase)


@router.get("", response_model=List[NotificationResponse])
async def list_notifications(
    unread_only: bool = False,
    limit: int = Query(50, ge=1, le=200),
    offset: int = Query(0, ge=0),
    user_data: Dict = Depends(get_current_user),
    service: NotificationService = Depends(get_notification_service)
):
    """Current user's notifications, newest first"""
    return service.list_notifications(user_data["id"], unread_only, limit, offset)


@router.get("/unread-count", response_model=UnreadCountResponse)
async def unread_count(
    user_data: Dict = Depends(get_current_user),
    service: NotificationService = Depends(get_notification_service)
):
    return UnreadCountResponse(unread=service.count_unread(user_data["id"]))


@router.post("/read-all", response_model=MarkAllReadResponse)
async def mark_all_read(
    user_data: Dict = Depends(get_current_user),
    service: NotificationService = Depends(get_notification_service)
):
    return MarkAllReadResponse(updated=service.mark_all_read(user_data["id"]))


@router.post("/{notification_id}/read", response_model=NotificationResponse)
async def mark_read(
    notification_id: str,
    user_data: Dict = Depends(get_current_user),
    service: NotificationService = Depends(get_notification_service)
):
    return service.mark_read(notification_id, user_data["id"])


@router.delete("/{notification_id}", status_code=204)
async def delete_notification(
    notification_id: str,
    user_data: Dict = Depends(get_current_user),
    service: NotificationService = Depends(get_notification_service)
):
    service.delete_notification(notification_id, user_data["id"])
    return None
