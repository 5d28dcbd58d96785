from dataclasses import dataclass
from typing import Optional
from fastapi import Header, HTTPException, status
import uuid


@dataclass(frozen=True)
class TenantContext:
    """
    Active organisation for a request.

    Every listing query is scoped by organisation_id taken from here, never
    from request bodies.
    """
    organisation_id: str
    user_id: Optional[str] = None
    
    def __post_init__(self):
        if not self.organisation_id:
            raise ValueError("organisation_id is required")


def _parse_uuid(value: str, header: str) -> str:
    try:
        return str(uuid.UUID(value))
    except (ValueError, AttributeError):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Invalid {header} header"
        )


def get_tenant_context(
    x_organisation_id: str = Header(..., description="Active organisation id"),
    x_user_id: Optional[str] = Header(None, description="Acting user id"),
) -> TenantContext:
    """Dependency resolving the tenant from request headers"""
    organisation_id = _parse_uuid(x_organisation_id, "X-Organisation-Id")
    user_id = _parse_uuid(x_user_id, "X-User-Id") if x_user_id else None
    return TenantContext(organisation_id=organisation_id, user_id=user_id)
