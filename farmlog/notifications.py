# farmlog/notifications.py

from datetime import datetime
from typing import Optional, Protocol

from pydantic import BaseModel

from .catalog import event_type_info
from .models import AppSettings, FarmEvent, local_naive


class ReminderRequest(BaseModel):
    """What the platform notification service needs to show one reminder."""
    identifier: str
    title: str
    body: str
    trigger_at: datetime


class NotificationScheduler(Protocol):
    def request_permission(self) -> bool: ...

    def schedule(self, request: ReminderRequest) -> None:
        """Schedules the request. A request with an identifier already pending replaces it."""
        ...


class ConsoleNotificationScheduler:
    """Prints reminders instead of handing them to an OS notification centre."""

    def request_permission(self) -> bool:
        return True

    def schedule(self, request: ReminderRequest) -> None:
        print(f"---REMINDERS: '{request.title}' at {request.trigger_at:%Y-%m-%d %H:%M}---")


def build_event_reminder(event: FarmEvent, now: Optional[datetime] = None) -> Optional[ReminderRequest]:
    """
    The reminder for an incomplete event, or None when it has no reminder
    date or the reminder time has already passed.
    """
    if event.reminder_date is None or event.is_completed:
        return None
    if event.reminder_date <= local_naive(now or datetime.now()):
        return None
    label = event_type_info(event.event_type).label
    body = event.description or f"{label} scheduled for {event.date:%b %d, %H:%M}"
    return ReminderRequest(
        identifier=str(event.id),
        title=event.title,
        body=body,
        trigger_at=event.reminder_date,
    )


def dispatch_event_reminder(
    scheduler: NotificationScheduler,
    event: FarmEvent,
    settings: AppSettings,
    now: Optional[datetime] = None,
) -> bool:
    """
    Hands the event's reminder to the scheduler. Fire and forget: the store
    already holds the event, so delivery problems are only logged.
    Returns whether the scheduler accepted the request.
    """
    if not settings.enable_notifications:
        return False
    request = build_event_reminder(event, now)
    if request is None:
        return False
    try:
        if not scheduler.request_permission():
            print("---REMINDERS: Notification permission denied---")
            return False
        scheduler.schedule(request)
    except Exception as e:
        print(f"---REMINDERS: Could not schedule '{event.title}': {type(e).__name__} - {e}---")
        return False
    return True
