"""Notification delivery: SES in production, logging locally."""

from __future__ import annotations

from persona.core.config import NotificationConfig
from persona.notifications.outbox import NotificationOutbox
from persona.notifications.ses_notifier import LoggingNotifier, SesNotifier


def create_notifier(config: NotificationConfig | None = None):
    """Return an SES notifier when enabled, otherwise a logging one."""
    if config is None:
        config = NotificationConfig()
    if not config.enabled:
        return LoggingNotifier()
    return SesNotifier(
        sender=config.sender,
        sender_name=config.sender_name,
        region=config.region,
        endpoint_url=config.endpoint_url,
    )


__all__ = ["LoggingNotifier", "NotificationOutbox", "SesNotifier", "create_notifier"]
