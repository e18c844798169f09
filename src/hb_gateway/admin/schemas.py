"""Pydantic schemas for admin allowlist management."""

from pydantic import BaseModel

from src.hb_common.enums import AdminRole
from src.hb_gateway.admin.models import AdminEntry


class AddAdminRequest(BaseModel):
    user_id: str
    role: AdminRole = AdminRole.SECONDARY


class AdminItem(BaseModel):
    user_id: str
    email: str
    role: str
    added_at: str | None
    added_by: str | None

    @classmethod
    def from_domain(cls, a: AdminEntry) -> "AdminItem":
        return cls(
            user_id=a.user_id,
            email=a.email,
            role=a.role,
            added_at=a.added_at.isoformat() if a.added_at else None,
            added_by=a.added_by,
        )


class AdminListResponse(BaseModel):
    admins: list[AdminItem]
    max_admins: int
