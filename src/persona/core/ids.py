"""Identifier and timestamp helpers."""

from __future__ import annotations

import secrets
import string
import time
import uuid
from datetime import datetime, timezone

_TOKEN_ALPHABET = string.ascii_lowercase + string.digits


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def now_millis() -> int:
    return time.time_ns() // 1_000_000


def random_token(length: int = 9) -> str:
    """Lower-case base36 token, e.g. ``k3j9x0a1q``."""
    return "".join(secrets.choice(_TOKEN_ALPHABET) for _ in range(length))


def new_entity_id() -> str:
    return uuid.uuid4().hex


def new_temp_entity_id() -> str:
    """``temp_entity_<epoch millis>_<9-char token>``."""
    return f"temp_entity_{now_millis()}_{random_token()}"


def new_inquiry_id() -> str:
    """``INQ-<epoch millis>-<9-char token>``."""
    return f"INQ-{now_millis()}-{random_token()}"
