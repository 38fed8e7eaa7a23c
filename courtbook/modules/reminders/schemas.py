from pydantic import BaseModel


class ReminderDispatchResponse(BaseModel):
    reminders_sent: int
    sessions_checked: int
