from typing import Any, Dict, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from mietlink.models import Event


def emit(db: AsyncSession, event_type: str, property_id=None, payload: Optional[Dict[str, Any]] = None) -> Event:
    """Queue an audit event on the session; it is written with the caller's commit."""
    event = Event(property_id=property_id, type=event_type, payload_json=payload or {})
    db.add(event)
    return event
