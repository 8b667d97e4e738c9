"""
Opaque keyset cursors.

A cursor is URL-safe base64 (unpadded) of a JSON object holding the
timestamp and id of the last row returned, e.g.
``{"createdAt": "2024-05-01T10:00:00+00:00", "id": "..."}``.
"""

import base64
import binascii
import json
import uuid
from datetime import datetime, timezone as dt_timezone
from typing import NamedTuple, Optional

from django.utils import timezone
from django.utils.dateparse import parse_datetime

CREATED_AT = 'createdAt'
PURCHASED_AT = 'purchasedAt'


class CursorPosition(NamedTuple):
    at: datetime
    id: uuid.UUID


def encode_cursor(key: str, at: datetime, row_id) -> str:
    payload = json.dumps({key: at.isoformat(), 'id': str(row_id)}, separators=(',', ':'))
    return base64.urlsafe_b64encode(payload.encode('utf-8')).rstrip(b'=').decode('ascii')


def decode_cursor(cursor: Optional[str], key: str) -> Optional[CursorPosition]:
    """Position encoded in ``cursor``, or None when it is absent or malformed."""
    if not cursor:
        return None
    try:
        raw = base64.urlsafe_b64decode(cursor + '=' * (-len(cursor) % 4))
        payload = json.loads(raw.decode('utf-8'))
        at = parse_datetime(payload[key])
        row_id = uuid.UUID(str(payload['id']))
    except (binascii.Error, UnicodeDecodeError, ValueError, KeyError, TypeError):
        return None

    if at is None:
        return None
    if timezone.is_naive(at):
        at = timezone.make_aware(at, dt_timezone.utc)
    return CursorPosition(at=at, id=row_id)
