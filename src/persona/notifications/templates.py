"""Approval and rejection email bodies."""

from __future__ import annotations

from dataclasses import dataclass
from html import escape
from typing import Any

from persona.models.notification import NotificationKind


@dataclass(frozen=True)
class EmailContent:
    subject: str
    text: str
    html: str


def _approved(name: str, notes: str | None, product: str) -> EmailContent:
    text = [
        f"Dear {name},",
        "",
        "We are pleased to inform you that your entity application has been approved.",
    ]
    html_notes = ""
    if notes:
        text += ["", "Approval notes:", notes]
        html_notes = f"<h3>Approval Notes:</h3><p>{escape(notes)}</p>"
    text += ["", "You can now proceed with the next steps in your application process.",
             "", f"Thank you for choosing {product}"]
    html = (
        "<div style=\"font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto;\">"
        "<h2>Your Application Has Been Approved</h2>"
        f"<p>Dear <strong>{escape(name)}</strong>,</p>"
        "<p>We are pleased to inform you that your entity application has been "
        "<strong>approved</strong>.</p>"
        f"{html_notes}"
        "<p>You can now proceed with the next steps in your application process.</p>"
        f"<p style=\"color: #666;\">Thank you for choosing {escape(product)}</p>"
        "</div>"
    )
    return EmailContent("Entity Application Approved", "\n".join(text), html)


def _rejected(name: str, reason: str, product: str) -> EmailContent:
    text = "\n".join([
        f"Dear {name},",
        "",
        "We regret to inform you that your entity application has been rejected.",
        "",
        "Reason for rejection:",
        reason,
        "",
        "If you believe this decision was made in error or have additional information "
        "to provide, please contact our support team.",
        "",
        f"Thank you for your interest in {product}",
    ])
    html = (
        "<div style=\"font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto;\">"
        "<h2>Application Status</h2>"
        f"<p>Dear <strong>{escape(name)}</strong>,</p>"
        "<p>We regret to inform you that your entity application has been "
        "<strong>rejected</strong>.</p>"
        f"<h3>Reason for Rejection:</h3><p>{escape(reason)}</p>"
        "<p>If you believe this decision was made in error or have additional information "
        "to provide, please contact our support team.</p>"
        f"<p style=\"color: #666;\">Thank you for your interest in {escape(product)}</p>"
        "</div>"
    )
    return EmailContent("Entity Application Status Update", text, html)


def render(kind: NotificationKind, details: dict[str, Any], product: str = "Persona System") -> EmailContent:
    name = details.get("entityName", "")
    if kind is NotificationKind.APPROVED:
        return _approved(name, details.get("approvalNotes"), product)
    return _rejected(name, details.get("rejectionReason", ""), product)
