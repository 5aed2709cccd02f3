"""Message body rendering per notification kind and channel.

The request context is opaque to the engine; templates read only the keys
they know about and fall back to neutral wording when a key is missing:

    context = {
        "chore": {"title": str, "points": int, "due_date": datetime | str},
        "family": {"name": str},
        "completed_by": str,
        "digest": {"completed": int, "overdue": int, "pending_approvals": int},
        "message": str,   # free text for the "update" kind
    }

SMS bodies are short and emoji-free. WhatsApp bodies use WhatsApp markup
and emoji. Email bodies are plain text with a link back to the app.
"""

from datetime import date, datetime
from typing import Any, Callable, Dict

from infrastructure.notifications.models import (
    ChannelName,
    NotificationKind,
    NotificationRequest,
)

DEFAULT_APP_NAME = "ChoreMinder"


class _Fields:
    """Context values with fallbacks, resolved once per render."""

    def __init__(self, request: NotificationRequest, app_name: str):
        context = request.context or {}
        chore = context.get("chore") or {}
        family = context.get("family") or {}
        self.app = app_name
        self.name = request.recipient.name or "there"
        self.title = chore.get("title") or "your chore"
        self.points = chore.get("points", 0)
        self.due = _format_due(chore.get("due_date"))
        self.family = family.get("name") or "your family"
        self.completed_by = context.get("completed_by") or request.recipient.name
        self.reason = request.options.reason
        self.digest = context.get("digest") or {}
        self.message = context.get("message") or ""


def _format_due(value: Any) -> str:
    if isinstance(value, (datetime, date)):
        return value.strftime("%b %d")
    return str(value) if value else "No deadline"


def _sms(kind: NotificationKind, f: _Fields) -> str:
    if kind == NotificationKind.ASSIGNED:
        return (
            f'{f.app}: New chore "{f.title}" assigned. {f.points} points. '
            f"Due: {f.due}. Check app for details."
        )
    if kind == NotificationKind.REMINDER:
        return (
            f'{f.app}: Reminder - "{f.title}" is pending. '
            f"{f.points} points available. Complete in app."
        )
    if kind == NotificationKind.COMPLETED:
        return (
            f'{f.app}: {f.completed_by} completed "{f.title}" '
            f"({f.points} points). Review in app to approve."
        )
    if kind == NotificationKind.APPROVED:
        return f'{f.app}: Great job! "{f.title}" approved. You earned {f.points} points!'
    if kind == NotificationKind.REJECTED:
        reason = f"Reason: {f.reason}. " if f.reason else ""
        return f'{f.app}: "{f.title}" needs attention. {reason}Please redo and resubmit.'
    if kind == NotificationKind.DIGEST:
        return (
            f"{f.app}: Today in {f.family} - {f.digest.get('completed', 0)} done, "
            f"{f.digest.get('overdue', 0)} overdue, "
            f"{f.digest.get('pending_approvals', 0)} awaiting approval."
        )
    if f.message:
        return f"{f.app}: {f.message}"
    return f"{f.app} notification - check app for details."


def _whatsapp(kind: NotificationKind, f: _Fields) -> str:
    if kind == NotificationKind.ASSIGNED:
        return (
            f"🏠 *{f.app} - New Chore Assigned*\n\n"
            f"Hi {f.name}! 👋\n\n"
            f"📋 *{f.title}*\n🏆 Points: {f.points}\n📅 Due: {f.due}\n\n"
            "Reply with *DONE* when completed or *HELP* for assistance."
        )
    if kind == NotificationKind.REMINDER:
        return (
            f"⏰ *Chore Reminder*\n\nHi {f.name}, *{f.title}* is still pending.\n"
            f"🏆 {f.points} points are waiting for you!"
        )
    if kind == NotificationKind.COMPLETED:
        return (
            f"✅ *Chore Completed*\n\n{f.completed_by} finished *{f.title}* "
            f"({f.points} points).\nOpen {f.app} to review and approve."
        )
    if kind == NotificationKind.APPROVED:
        return (
            f"🎉 *Great job, {f.name}!*\n\n*{f.title}* was approved.\n"
            f"🏆 You earned {f.points} points!"
        )
    if kind == NotificationKind.REJECTED:
        reason = f"\n📝 Reason: {f.reason}" if f.reason else ""
        return (
            f"🔄 *{f.title}* needs another try.{reason}\n\n"
            "Please redo it and resubmit in the app."
        )
    return _sms(kind, f)


def _email(kind: NotificationKind, f: _Fields, app_url: str) -> str:
    body = _sms(kind, f).split(": ", 1)[-1]
    return f"Hi {f.name},\n\n{body}\n\nOpen {f.app}: {app_url}\n"


_SUBJECTS: Dict[NotificationKind, Callable[[_Fields], str]] = {
    NotificationKind.ASSIGNED: lambda f: f"New Chore Assigned: {f.title}",
    NotificationKind.REMINDER: lambda f: f"Reminder: {f.title}",
    NotificationKind.COMPLETED: lambda f: f"{f.completed_by} completed: {f.title}",
    NotificationKind.APPROVED: lambda f: f"Chore Approved: {f.title}",
    NotificationKind.REJECTED: lambda f: f"Chore Needs Retaking: {f.title}",
    NotificationKind.DIGEST: lambda f: f"Daily Family Summary - {f.family}",
    NotificationKind.UPDATE: lambda f: f"{f.app} update",
}


def render_body(
    request: NotificationRequest,
    channel: ChannelName,
    app_name: str = DEFAULT_APP_NAME,
    app_url: str = "",
) -> str:
    """Render the message body for one channel.

    Args:
        request: Notification request holding kind, recipient and context
        channel: Channel the body is rendered for
        app_name: Product name used in bodies
        app_url: Link appended to email bodies

    Returns:
        Message body text
    """
    fields = _Fields(request, app_name)
    if channel == ChannelName.WHATSAPP:
        return _whatsapp(request.kind, fields)
    if channel == ChannelName.EMAIL:
        return _email(request.kind, fields, app_url)
    return _sms(request.kind, fields)


def render_subject(
    request: NotificationRequest, app_name: str = DEFAULT_APP_NAME
) -> str:
    """Render the subject line used by the email channel."""
    return _SUBJECTS[request.kind](_Fields(request, app_name))
