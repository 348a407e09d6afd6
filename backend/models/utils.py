"""Column defaults shared by the ORM models."""

import uuid
from datetime import datetime, timezone


def generate_uuid() -> str:
    """Generate a UUID string."""
    return str(uuid.uuid4())


def utcnow() -> datetime:
    """Timezone-aware current time for created_at/updated_at columns."""
    return datetime.now(timezone.utc)
