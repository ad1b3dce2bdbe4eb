"""
Field helpers

Parsing helpers shared by the from_dict constructors.
"""
from datetime import datetime
from typing import Optional
from uuid import UUID


def parse_uuid(value) -> Optional[UUID]:
    """Accept UUID, str or None"""
    if value is None or isinstance(value, UUID):
        return value
    return UUID(str(value))


def parse_datetime(value) -> Optional[datetime]:
    """Accept datetime, ISO string or None"""
    if value is None or isinstance(value, datetime):
        return value
    return datetime.fromisoformat(value)


def iso(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None
