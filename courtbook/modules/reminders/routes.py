from fastapi import APIRouter, Depends, HTTPException, Security, status
from fastapi.responses import JSONResponse
from fastapi.security import HTTPAuthorizationCredentials
from courtbook.config import settings
from courtbook.core.dependencies import security
from courtbook.database.supabase_client import get_service_supabase
from courtbook.modules.reminders.schemas import ReminderDispatchResponse
from courtbook.modules.reminders.service import ReminderService
from supabase import Client
from typing import Optional
import secrets
import logging

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/reminders", tags=["reminders"])


def get_reminder_service(supabase: Client = Depends(get_service_supabase)) -> ReminderService:
    return ReminderService(supabase)


def verify_cron_secret(
    credentials: Optional[HTTPAuthorizationCredentials] = Security(security)
) -> None:
    """When CRON_SECRET is configured the caller must present it as a bearer token."""
    if not settings.cron_secret:
        return
    presented = credentials.credentials if credentials else ""
    if not secrets.compare_digest(presented, settings.cron_secret):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid scheduler secret")


@router.post("/dispatch", response_model=ReminderDispatchResponse)
async def dispatch_reminders(
    _: None = Depends(verify_cron_secret),
    service: ReminderService = Depends(get_reminder_service)
):
    """Send due session reminders. Meant to be called by an external scheduler."""
    try:
        return service.dispatch()
    except Exception as e:
        logger.error(f"Reminder dispatch failed: {e}")
        return JSONResponse(status_code=500, content={"error": str(e)})
