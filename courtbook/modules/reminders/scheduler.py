import asyncio
import logging
from courtbook.config import settings
from courtbook.database.supabase_client import get_service_supabase
from courtbook.modules.reminders.service import ReminderService

logger = logging.getLogger(__name__)


async def dispatch_due_reminders():
    """Run one reminder pass with the service-role client."""
    try:
        service = ReminderService(get_service_supabase())
        result = service.dispatch()
        if result.reminders_sent:
            logger.info(f"Reminder scheduler sent {result.reminders_sent} reminder(s)")
    except Exception as e:
        logger.error(f"Error in reminder scheduler: {str(e)}")


async def reminder_scheduler_loop():
    """Background task that periodically dispatches session reminders"""
    while True:
        try:
            await dispatch_due_reminders()
        except Exception as e:
            logger.error(f"Error in reminder scheduler loop: {str(e)}")

        await asyncio.sleep(settings.reminder_interval_seconds)
