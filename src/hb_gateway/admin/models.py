"""Admin allowlist domain model."""

from dataclasses import dataclass
from datetime import datetime


@dataclass
class AdminEntry:
    user_id: str
    email: str
    role: str                       # AdminRole value
    added_at: datetime | None = None
    added_by: str | None = None     # user_id of the admin who granted access
