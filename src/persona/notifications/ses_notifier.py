"""SES email notifier implementing INotifier."""

from __future__ import annotations

import logging
from typing import Any

import boto3
from botocore.exceptions import ClientError

from persona.core.exceptions import NotificationError
from persona.models.notification import NotificationKind
from persona.notifications.templates import render

logger = logging.getLogger(__name__)


class SesNotifier:
    """Production INotifier that emails approval outcomes through Amazon SES."""

    def __init__(self, sender: str, sender_name: str = "Persona System",
                 region: str = "us-east-1", endpoint_url: str | None = None) -> None:
        self._sender = sender
        self._sender_name = sender_name
        kwargs: dict = {"region_name": region}
        if endpoint_url:
            kwargs["endpoint_url"] = endpoint_url
        self._client = boto3.client("ses", **kwargs)

    def notify(self, kind: NotificationKind, recipient: str, details: dict[str, Any]) -> None:
        content = render(kind, details, product=self._sender_name)
        try:
            self._client.send_email(
                Source=f'"{self._sender_name}" <{self._sender}>',
                Destination={"ToAddresses": [recipient]},
                Message={
                    "Subject": {"Data": content.subject, "Charset": "UTF-8"},
                    "Body": {
                        "Text": {"Data": content.text, "Charset": "UTF-8"},
                        "Html": {"Data": content.html, "Charset": "UTF-8"},
                    },
                },
            )
        except ClientError as exc:
            raise NotificationError(f"SES send of {kind} email to {recipient!r} failed: {exc}") from exc
        logger.info("%s email sent to %s", kind.capitalize(), recipient)


class LoggingNotifier:
    """INotifier for local development: logs instead of sending."""

    def notify(self, kind: NotificationKind, recipient: str, details: dict[str, Any]) -> None:
        content = render(kind, details)
        logger.info("Notification (not sent) kind=%s to=%s subject=%r", kind, recipient, content.subject)
